import json
from datetime import datetime
from decimal import Decimal
from typing import Any

import attrs
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils.timezone import now
from prices import Money

from ..core.prices import round_to_four_places
from ..core.utils.json_serializer import CustomJsonEncoder
from ..product.models import ProductVariant
from . import (
    AdjustmentState,
    AdjustmentType,
    OrderEvents,
    OrderExportStatus,
    OrderStatus,
)


class OrderQueryset(models.QuerySet["Order"]):
    def completed(self):
        """Return orders that were placed by the customer."""
        return self.filter(completed_at__isnull=False).exclude(
            status=OrderStatus.DRAFT
        )

    def ready_to_export(self):
        return self.completed().filter(export_status=OrderExportStatus.YES)


OrderManager = models.Manager.from_queryset(OrderQueryset)


class Order(models.Model):
    """Aggregate root the channel reconciles against.

    Totals are denormalized and only trusted after `recalculate_order` ran
    following a mutation of lines, shipments or adjustments.
    """

    # external reference number the channel addresses the order by
    number = models.CharField(max_length=255, unique=True)
    status = models.CharField(
        max_length=32, default=OrderStatus.UNFULFILLED, choices=OrderStatus.CHOICES
    )
    export_status = models.CharField(
        max_length=8,
        default=OrderExportStatus.NO,
        choices=OrderExportStatus.CHOICES,
        db_index=True,
    )
    currency = models.CharField(
        max_length=settings.DEFAULT_CURRENCY_CODE_LENGTH,
        default=settings.DEFAULT_CURRENCY,
    )

    item_total_amount = models.DecimalField(
        max_digits=settings.DEFAULT_MAX_DIGITS,
        decimal_places=settings.DEFAULT_DECIMAL_PLACES,
        default=Decimal(0),
    )
    shipping_total_amount = models.DecimalField(
        max_digits=settings.DEFAULT_MAX_DIGITS,
        decimal_places=settings.DEFAULT_DECIMAL_PLACES,
        default=Decimal(0),
    )
    tax_total_amount = models.DecimalField(
        max_digits=settings.DEFAULT_MAX_DIGITS,
        decimal_places=settings.DEFAULT_DECIMAL_PLACES,
        default=Decimal(0),
    )
    # negative for discounts
    promotion_total_amount = models.DecimalField(
        max_digits=settings.DEFAULT_MAX_DIGITS,
        decimal_places=settings.DEFAULT_DECIMAL_PLACES,
        default=Decimal(0),
    )
    total_amount = models.DecimalField(
        max_digits=settings.DEFAULT_MAX_DIGITS,
        decimal_places=settings.DEFAULT_DECIMAL_PLACES,
        default=Decimal(0),
    )

    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=now, editable=False)
    updated_at = models.DateTimeField(auto_now=True, editable=False, db_index=True)

    objects = OrderManager()

    class Meta:
        ordering = ("-pk",)

    def __repr__(self):
        return f"<Order #{self.number!r}>"

    def __str__(self):
        return f"#{self.number}"

    def find_line_by_variant(self, variant: ProductVariant) -> "OrderLine | None":
        return self.lines.filter(variant=variant).first()

    def order_adjustments(self):
        """Adjustments attached to the order itself rather than to a line."""
        return self.all_adjustments.filter(order_line__isnull=True)

    def shipped_shipments(self):
        from ..shipping import ShipmentStatus

        return self.shipments.filter(status=ShipmentStatus.SHIPPED).order_by("pk")


@attrs.frozen
class LineCapabilities:
    """Optional behaviours a line implementation supports during writeback."""

    ship_date_tracking: bool = False
    extension_writeback: bool = False


class OrderLine(models.Model):
    capabilities = LineCapabilities(ship_date_tracking=True, extension_writeback=True)

    # amounts the channel sends with four decimal places
    EXTENSION_AMOUNT_FIELDS = {
        "direct_ship_amt": "direct_ship_amount",
        "apportioned_ship_amt": "apportioned_ship_amount",
    }

    created_at = models.DateTimeField(auto_now_add=True)
    order = models.ForeignKey(
        Order,
        related_name="lines",
        editable=False,
        on_delete=models.CASCADE,
    )
    variant = models.ForeignKey(
        ProductVariant,
        related_name="order_lines",
        on_delete=models.PROTECT,
    )
    quantity = models.IntegerField(validators=[MinValueValidator(1)])

    currency = models.CharField(
        max_length=settings.DEFAULT_CURRENCY_CODE_LENGTH,
    )
    # unit price charged to the customer
    price_amount = models.DecimalField(
        max_digits=settings.DEFAULT_MAX_DIGITS,
        decimal_places=settings.DEFAULT_DECIMAL_PLACES,
    )
    # unit cost reported by the channel
    cost_price_amount = models.DecimalField(
        max_digits=settings.DEFAULT_MAX_DIGITS,
        decimal_places=settings.DEFAULT_DECIMAL_PLACES,
        null=True,
        blank=True,
    )

    estimated_ship_date = models.DateTimeField(null=True, blank=True)

    direct_ship_amount = models.DecimalField(
        max_digits=settings.DEFAULT_MAX_DIGITS,
        decimal_places=4,
        null=True,
        blank=True,
        help_text="Shipping charged directly on this line by the carrier",
    )
    apportioned_ship_amount = models.DecimalField(
        max_digits=settings.DEFAULT_MAX_DIGITS,
        decimal_places=4,
        null=True,
        blank=True,
        help_text="Share of the order shipping charge apportioned to this line",
    )
    private_metadata = models.JSONField(
        blank=True, default=dict, encoder=CustomJsonEncoder
    )

    class Meta:
        ordering = ("created_at", "id")
        constraints = [
            models.UniqueConstraint(
                fields=["order", "variant"], name="order_line_unique_variant"
            )
        ]

    def __str__(self):
        return f"{self.variant.sku} x{self.quantity}"

    @property
    def price(self):
        return Money(self.price_amount, self.currency)

    @property
    def total_price_amount(self) -> Decimal:
        return self.price_amount * self.quantity

    def set_estimated_ship_date(self, value: datetime) -> bool:
        if self.estimated_ship_date == value:
            return False
        self.estimated_ship_date = value
        self.save(update_fields=["estimated_ship_date"])
        return True

    def extension_writeback(self, extra: dict[str, Any]) -> bool:
        """Store channel extension fields, returning whether anything changed.

        Well-known carrier amounts land in their own columns, everything else
        is kept in private metadata.
        """
        update_fields = []
        extra = dict(extra)
        for key, field_name in self.EXTENSION_AMOUNT_FIELDS.items():
            if key not in extra:
                continue
            value = extra.pop(key)
            if value is not None:
                value = round_to_four_places(Decimal(str(value)))
            if getattr(self, field_name) != value:
                setattr(self, field_name, value)
                update_fields.append(field_name)

        if extra:
            # compare in stored form, decimals and dates are kept as strings
            extra = json.loads(json.dumps(extra, cls=CustomJsonEncoder))
            stored = self.private_metadata.get("retailops", {})
            merged = {**stored, **extra}
            if merged != stored:
                self.private_metadata = {**self.private_metadata, "retailops": merged}
                update_fields.append("private_metadata")

        if update_fields:
            self.save(update_fields=update_fields)
        return bool(update_fields)


class AdjustmentQueryset(models.QuerySet["Adjustment"]):
    def tax(self):
        return self.filter(type=AdjustmentType.TAX)

    def promotion(self):
        return self.filter(type=AdjustmentType.PROMOTION)

    def open(self):
        return self.filter(state=AdjustmentState.OPEN)

    def closed(self):
        return self.filter(state=AdjustmentState.CLOSED)


AdjustmentManager = models.Manager.from_queryset(AdjustmentQueryset)


class Adjustment(models.Model):
    """A tax or promotion charge on the order or on one of its lines.

    Closed adjustments are finalized: recomputing the order keeps their amount.
    """

    order = models.ForeignKey(
        Order, related_name="all_adjustments", on_delete=models.CASCADE
    )
    order_line = models.ForeignKey(
        OrderLine,
        related_name="adjustments",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
    )
    type = models.CharField(max_length=16, choices=AdjustmentType.CHOICES)
    label = models.CharField(max_length=255, blank=True)
    amount = models.DecimalField(
        max_digits=settings.DEFAULT_MAX_DIGITS,
        decimal_places=settings.DEFAULT_DECIMAL_PLACES,
        default=Decimal(0),
    )
    # fraction of the adjustable amount, e.g. 0.2 for 20% tax; fixed amount if unset
    rate = models.DecimalField(max_digits=7, decimal_places=6, null=True, blank=True)
    state = models.CharField(
        max_length=8, choices=AdjustmentState.CHOICES, default=AdjustmentState.OPEN
    )
    created_at = models.DateTimeField(auto_now_add=True)

    objects = AdjustmentManager()

    class Meta:
        ordering = ("pk",)

    def __str__(self):
        return f"{self.get_type_display()} {self.label}: {self.amount} ({self.state})"

    @property
    def is_open(self):
        return self.state == AdjustmentState.OPEN

    @property
    def is_closed(self):
        return self.state == AdjustmentState.CLOSED

    def open(self):
        self.state = AdjustmentState.OPEN
        self.save(update_fields=["state"])

    def close(self):
        self.state = AdjustmentState.CLOSED
        self.save(update_fields=["state"])


class OrderEvent(models.Model):
    """Audit trail for channel synchronization of an order."""

    date = models.DateTimeField(default=now, editable=False, db_index=True)
    type = models.CharField(max_length=255, choices=OrderEvents.CHOICES)
    order = models.ForeignKey(Order, related_name="events", on_delete=models.CASCADE)
    parameters = models.JSONField(blank=True, default=dict, encoder=CustomJsonEncoder)

    class Meta:
        ordering = ("date",)
        indexes = [
            models.Index(fields=["order", "date"], name="order_event_order_date_idx"),
            models.Index(fields=["type"], name="order_event_type_idx"),
        ]

    def __repr__(self):
        return f"{self.__class__.__name__}(type={self.type!r}, order={self.order_id!r})"
