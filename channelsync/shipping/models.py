from decimal import Decimal

from django.conf import settings
from django.db import models
from prices import Money

from ..order.models import Order, OrderLine
from ..product.models import ProductVariant
from ..warehouse.models import Warehouse
from . import InventoryUnitState, ShipmentStatus


class ShippingMethod(models.Model):
    """Flat-rate shipping service a shipment can be sent with."""

    name = models.CharField(max_length=100)
    price_amount = models.DecimalField(
        max_digits=settings.DEFAULT_MAX_DIGITS,
        decimal_places=settings.DEFAULT_DECIMAL_PLACES,
        default=Decimal(0),
    )
    currency = models.CharField(
        max_length=settings.DEFAULT_CURRENCY_CODE_LENGTH,
        default=settings.DEFAULT_CURRENCY,
    )
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ("pk",)

    def __str__(self):
        return self.name

    @property
    def price(self):
        return Money(self.price_amount, self.currency)


class ShipmentQueryset(models.QuerySet["Shipment"]):
    def open(self):
        """Shipments that can still receive additional quantity."""
        return self.filter(status__in=ShipmentStatus.OPEN_STATUSES)

    def not_canceled(self):
        return self.exclude(status=ShipmentStatus.CANCELED)


ShipmentManager = models.Manager.from_queryset(ShipmentQueryset)


class Shipment(models.Model):
    """A fulfillment unit carrying order line quantities from one warehouse."""

    order = models.ForeignKey(Order, related_name="shipments", on_delete=models.CASCADE)
    warehouse = models.ForeignKey(
        Warehouse, related_name="shipments", on_delete=models.PROTECT
    )
    status = models.CharField(
        max_length=32, choices=ShipmentStatus.CHOICES, default=ShipmentStatus.PENDING
    )
    shipping_method = models.ForeignKey(
        ShippingMethod,
        related_name="shipments",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
    )
    cost_amount = models.DecimalField(
        max_digits=settings.DEFAULT_MAX_DIGITS,
        decimal_places=settings.DEFAULT_DECIMAL_PLACES,
        default=Decimal(0),
    )
    tracking_number = models.CharField(max_length=255, blank=True)
    shipped_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = ShipmentManager()

    class Meta:
        ordering = ("pk",)

    def __str__(self):
        return f"Shipment #{self.pk} ({self.status}) for order {self.order_id}"

    @property
    def is_open(self):
        return self.status in ShipmentStatus.OPEN_STATUSES

    def include(self, variant: ProductVariant) -> bool:
        return self.inventory_units.filter(variant=variant).exists()


class InventoryUnit(models.Model):
    """One physical unit of an order line, packed in one shipment."""

    order = models.ForeignKey(
        Order, related_name="inventory_units", on_delete=models.CASCADE
    )
    order_line = models.ForeignKey(
        OrderLine, related_name="inventory_units", on_delete=models.CASCADE
    )
    shipment = models.ForeignKey(
        Shipment, related_name="inventory_units", on_delete=models.CASCADE
    )
    variant = models.ForeignKey(
        ProductVariant, related_name="inventory_units", on_delete=models.PROTECT
    )
    state = models.CharField(
        max_length=16,
        choices=InventoryUnitState.CHOICES,
        default=InventoryUnitState.ON_HAND,
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("pk",)
        indexes = [
            models.Index(
                fields=["order_line", "state"], name="inventory_unit_line_state_idx"
            ),
        ]

    def __str__(self):
        return f"InventoryUnit #{self.pk}: {self.variant.sku} ({self.state})"
