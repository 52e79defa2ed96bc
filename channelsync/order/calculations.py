from decimal import Decimal

from django.db import transaction

from ..core.prices import quantize_price
from . import AdjustmentType
from .models import Order


@transaction.atomic
def recalculate_order(order: Order) -> Order:
    """Recompute open adjustments and every denormalized total of the order.

    Closed adjustments keep their amount; open ones with a rate are recalculated
    against their line (or the item total for order-level adjustments).
    """
    currency = order.currency
    lines = list(order.lines.all())
    line_totals = {line.pk: line.total_price_amount for line in lines}
    item_total = sum(line_totals.values(), Decimal(0))

    tax_total = Decimal(0)
    promotion_total = Decimal(0)
    for adjustment in order.all_adjustments.all():
        if adjustment.is_open and adjustment.rate is not None:
            if adjustment.order_line_id:
                base = line_totals.get(adjustment.order_line_id, Decimal(0))
            else:
                base = item_total
            amount = quantize_price(base * adjustment.rate, currency)
            if adjustment.type == AdjustmentType.PROMOTION:
                amount = -abs(amount)
            if amount != adjustment.amount:
                adjustment.amount = amount
                adjustment.save(update_fields=["amount"])

        if adjustment.type == AdjustmentType.TAX:
            tax_total += adjustment.amount
        else:
            promotion_total += adjustment.amount

    shipping_total = sum(
        (shipment.cost_amount for shipment in order.shipments.not_canceled()),
        Decimal(0),
    )
    shipping_total += sum(
        (line.direct_ship_amount or Decimal(0) for line in lines), Decimal(0)
    )

    order.item_total_amount = quantize_price(item_total, currency)
    order.shipping_total_amount = quantize_price(shipping_total, currency)
    order.tax_total_amount = quantize_price(tax_total, currency)
    order.promotion_total_amount = quantize_price(promotion_total, currency)
    order.total_amount = quantize_price(
        item_total + shipping_total + tax_total + promotion_total, currency
    )
    order.save(
        update_fields=[
            "item_total_amount",
            "shipping_total_amount",
            "tax_total_amount",
            "promotion_total_amount",
            "total_amount",
            "updated_at",
        ]
    )
    return order
