from decimal import Decimal

from .. import ShipmentStatus
from ..models import Shipment


def test_open_shipments(order, warehouse, open_shipment, shipped_shipment):
    # given
    ready = Shipment.objects.create(
        order=order, warehouse=warehouse, status=ShipmentStatus.READY
    )
    canceled = Shipment.objects.create(
        order=order, warehouse=warehouse, status=ShipmentStatus.CANCELED
    )

    # then
    assert list(order.shipments.open()) == [open_shipment, ready]
    assert canceled not in order.shipments.not_canceled()
    assert open_shipment.is_open
    assert not shipped_shipment.is_open


def test_shipment_include(order_line, open_shipment, variant, other_variant):
    assert open_shipment.include(variant)
    assert not open_shipment.include(other_variant)


def test_shipping_method_price(shipping_method):
    assert shipping_method.price.amount == Decimal("7.50")
    assert shipping_method.price.currency == "USD"
