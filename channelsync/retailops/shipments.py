import logging

from ..order.models import Order
from ..product.models import ProductVariant
from ..shipping import ShipmentStatus
from ..shipping.models import Shipment
from .exceptions import NoStockLocationForVariant

logger = logging.getLogger(__name__)


def get_shipment_for_variant(order: Order, variant: ProductVariant) -> Shipment:
    """Pick the shipment that should carry additional quantity of a variant.

    Preference goes to an open shipment already carrying the variant, then to an
    open shipment leaving from a warehouse that stocks it. Otherwise a new ready
    shipment is created at the first warehouse stocking the variant.
    """
    open_shipments = order.shipments.open().order_by("pk")

    shipment = open_shipments.filter(inventory_units__variant=variant).first()
    if shipment:
        return shipment

    location_ids = variant.get_stock_location_ids()
    shipment = open_shipments.filter(warehouse_id__in=location_ids).first()
    if shipment:
        return shipment

    if not location_ids:
        raise NoStockLocationForVariant(variant)

    shipment = Shipment.objects.create(
        order=order, warehouse_id=location_ids[0], status=ShipmentStatus.READY
    )
    logger.info(
        "Created shipment %s at warehouse %s for %s on order %s",
        shipment.pk,
        location_ids[0],
        variant.sku,
        order.number,
    )
    return shipment
