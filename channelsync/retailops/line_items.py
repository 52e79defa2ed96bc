import logging
from decimal import Decimal
from typing import Protocol

from django.db import transaction

from ..core.prices import round_to_amount_precision
from ..order.actions import add_variant_to_order, remove_variant_from_order
from ..order.models import Order, OrderLine
from .payload import LineItemRecord
from .shipments import get_shipment_for_variant
from .variants import resolve_variant

logger = logging.getLogger(__name__)


class LineItemUpdater(Protocol):
    """Applies the channel's line items to an order.

    Hosts can plug in their own implementation through
    `settings.RETAILOPS_LINE_ITEM_UPDATER`.
    """

    def __init__(self, order: Order, line_items: list[LineItemRecord]):
        ...

    def call(self) -> tuple[bool, list[dict]]:
        ...


class LineItemReconciler:
    """Diff the channel's authoritative line items against the order and apply it.

    `call()` returns `(changed, results)`; each result echoes the channel's
    correlation token with the local line id and its final quantity. Removed
    lines are not reported back.
    """

    def __init__(self, order: Order, line_items: list[LineItemRecord]):
        self.order = order
        self.line_items = line_items
        self.changed = False
        self.results: list[dict] = []

    def mark_changed(self):
        self.changed = True

    @transaction.atomic
    def call(self) -> tuple[bool, list[dict]]:
        seen_variant_ids = set()

        for record in self.line_items:
            variant = resolve_variant(record.sku)
            if variant is None:
                logger.info(
                    "Skipping unknown SKU %r on order %s", record.sku, self.order.number
                )
                continue
            if record.quantity <= 0 and not record.removed:
                continue
            if variant.pk in seen_variant_ids:
                logger.warning(
                    "Ignoring repeated SKU %r on order %s",
                    record.sku,
                    self.order.number,
                )
                continue
            seen_variant_ids.add(variant.pk)

            line = self.order.find_line_by_variant(variant)
            old_quantity = line.quantity if line else 0

            if record.removed:
                if line:
                    remaining = remove_variant_from_order(
                        self.order, variant, line.quantity
                    )
                    if remaining is None or remaining.quantity != old_quantity:
                        self.mark_changed()
                continue

            if line is None and record.quantity == old_quantity:
                continue

            if record.quantity > old_quantity:
                shipment = get_shipment_for_variant(self.order, variant)
                line = add_variant_to_order(
                    self.order, variant, record.quantity - old_quantity, shipment
                )
                self.mark_changed()
            elif record.quantity < old_quantity:
                line = remove_variant_from_order(
                    self.order, variant, old_quantity - record.quantity
                )
                if line.quantity != old_quantity:
                    self.mark_changed()

            self.update_line(line, record)
            self.results.append(
                {"corr": record.corr, "refnum": line.pk, "quantity": line.quantity}
            )

        return self.changed, self.results

    def update_line(self, line: OrderLine, record: LineItemRecord):
        update_fields = []
        cost = record.estimated_unit_cost
        if cost is not None:
            cost = round_to_amount_precision(cost)
        if cost is not None and cost > 0 and line.cost_price_amount != cost:
            line.cost_price_amount = cost
            update_fields.append("cost_price_amount")

        price = record.unit_price
        if price is not None:
            price = round_to_amount_precision(price)
        if price is not None and line.price_amount != price:
            line.price_amount = price
            update_fields.append("price_amount")

        if update_fields:
            line.save(update_fields=update_fields)
            self.mark_changed()

        capabilities = type(line).capabilities
        if capabilities.ship_date_tracking and record.estimated_ship_date:
            if line.set_estimated_ship_date(record.estimated_ship_date):
                self.mark_changed()

        if capabilities.extension_writeback:
            extra = dict(record.ext)
            # well-known carrier amounts the channel sends outside `ext`
            for key in ("direct_ship_amt", "apportioned_ship_amt"):
                value: Decimal | None = getattr(record, key)
                if value is not None:
                    extra[key] = value
            if extra and line.extension_writeback(extra):
                self.mark_changed()
