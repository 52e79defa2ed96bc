"""Change the quantity of a variant on an order, keeping inventory units in step."""

import logging

from django.db import transaction

from ..product.models import ProductVariant
from ..shipping import InventoryUnitState, ShipmentStatus
from ..shipping.models import InventoryUnit, Shipment
from .models import Order, OrderLine

logger = logging.getLogger(__name__)


@transaction.atomic
def add_variant_to_order(
    order: Order, variant: ProductVariant, quantity: int, shipment: Shipment
) -> OrderLine:
    """Add `quantity` units of a variant, packing the new units into `shipment`.

    A new line takes its unit price and cost from the variant.
    """
    if quantity <= 0:
        raise ValueError(f"Cannot add {quantity} units of {variant.sku}")
    if shipment.order_id != order.pk:
        raise ValueError(f"Shipment {shipment.pk} does not belong to order {order}")

    line = order.find_line_by_variant(variant)
    if line is None:
        line = OrderLine.objects.create(
            order=order,
            variant=variant,
            quantity=quantity,
            currency=order.currency,
            price_amount=variant.price_amount,
            cost_price_amount=variant.cost_price_amount,
        )
    else:
        line.quantity += quantity
        line.save(update_fields=["quantity"])

    InventoryUnit.objects.bulk_create(
        [
            InventoryUnit(
                order=order, order_line=line, shipment=shipment, variant=variant
            )
            for _ in range(quantity)
        ]
    )
    logger.debug(
        "Added %s x %s to order %s in shipment %s",
        quantity,
        variant.sku,
        order.number,
        shipment.pk,
    )
    return line


@transaction.atomic
def remove_variant_from_order(
    order: Order, variant: ProductVariant, quantity: int
) -> OrderLine | None:
    """Remove `quantity` units of a variant from the order.

    Only units still sitting in open shipments can be dropped, newest first.
    Shipped and returned units stay with the line, so the removed quantity is
    capped at what is still removable. The line is deleted when its quantity
    reaches zero, and open shipments left without units are deleted with it.
    Returns the remaining line, or None if it was deleted.
    """
    line = order.find_line_by_variant(variant)
    if line is None:
        raise ValueError(f"Order {order} has no line for {variant.sku}")

    requested = min(quantity, line.quantity)
    unit_ids = list(
        line.inventory_units.filter(
            state=InventoryUnitState.ON_HAND,
            shipment__status__in=ShipmentStatus.OPEN_STATUSES,
        )
        .order_by("-pk")
        .values_list("pk", flat=True)[:requested]
    )
    if len(unit_ids) < requested:
        logger.warning(
            "Only %s of %s x %s can be removed from order %s, the rest has shipped",
            len(unit_ids),
            requested,
            variant.sku,
            order.number,
        )
    quantity = len(unit_ids)
    InventoryUnit.objects.filter(pk__in=unit_ids).delete()

    line.quantity -= quantity
    if line.quantity <= 0:
        line.delete()
        line = None
    else:
        line.save(update_fields=["quantity"])

    order.shipments.open().filter(inventory_units__isnull=True).delete()
    logger.debug("Removed %s x %s from order %s", quantity, variant.sku, order.number)
    return line
