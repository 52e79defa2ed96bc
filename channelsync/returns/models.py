from decimal import Decimal

from django.conf import settings
from django.db import models

from ..order.models import Order
from ..shipping.models import InventoryUnit
from ..warehouse.models import Warehouse
from . import ReturnAuthorizationStatus, ReturnItemReceptionStatus

"""
A ReturnAuthorization (RMA) is the approval to take back some shipped units of an
order. Each ReturnItem links the RMA to exactly one InventoryUnit.

When goods come back physically a CustomerReturn groups the ReturnItems that were
received together. ReturnItems received with no refund are flagged for manual
intervention: the unit may be damaged or the return may really be free, and we
leave that call to a person.
"""


class ReturnReason(models.Model):
    name = models.CharField(max_length=255)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ("pk",)

    def __str__(self):
        return self.name


class ReturnAuthorization(models.Model):
    number = models.CharField(max_length=255, unique=True)
    order = models.ForeignKey(
        Order, related_name="return_authorizations", on_delete=models.CASCADE
    )
    # stock location the units are expected back at
    warehouse = models.ForeignKey(
        Warehouse, related_name="return_authorizations", on_delete=models.PROTECT
    )
    reason = models.ForeignKey(
        ReturnReason,
        related_name="return_authorizations",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
    )
    status = models.CharField(
        max_length=32,
        choices=ReturnAuthorizationStatus.CHOICES,
        default=ReturnAuthorizationStatus.AUTHORIZED,
    )
    memo = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("pk",)

    def __str__(self):
        return self.number

    @property
    def is_fully_received(self):
        """All return items arrived back; an RMA without items is not received."""
        statuses = [item.reception_status for item in self.return_items.all()]
        return bool(statuses) and all(
            status == ReturnItemReceptionStatus.RECEIVED for status in statuses
        )


class CustomerReturn(models.Model):
    """Physical receipt of one or more return items, one per channel return."""

    number = models.CharField(max_length=255, unique=True)
    order = models.ForeignKey(
        Order, related_name="customer_returns", on_delete=models.CASCADE
    )
    warehouse = models.ForeignKey(
        Warehouse, related_name="customer_returns", on_delete=models.PROTECT
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("pk",)

    def __str__(self):
        return self.number


class ReturnItem(models.Model):
    return_authorization = models.ForeignKey(
        ReturnAuthorization, related_name="return_items", on_delete=models.CASCADE
    )
    inventory_unit = models.ForeignKey(
        InventoryUnit, related_name="return_items", on_delete=models.RESTRICT
    )
    customer_return = models.ForeignKey(
        CustomerReturn,
        related_name="return_items",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
    )
    pre_tax_amount = models.DecimalField(
        max_digits=settings.DEFAULT_MAX_DIGITS,
        decimal_places=settings.DEFAULT_DECIMAL_PLACES,
        default=Decimal(0),
    )
    reception_status = models.CharField(
        max_length=16,
        choices=ReturnItemReceptionStatus.CHOICES,
        default=ReturnItemReceptionStatus.AWAITING,
    )
    requires_manual_intervention = models.BooleanField(
        default=False,
        help_text=(
            "Received with a zero refund: either not resellable or a genuinely "
            "free return. Needs a person to decide."
        ),
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("pk",)

    def __str__(self):
        return f"ReturnItem #{self.pk} for unit {self.inventory_unit_id}"

    @property
    def is_received(self):
        return self.reception_status == ReturnItemReceptionStatus.RECEIVED
