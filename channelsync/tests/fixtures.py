from decimal import Decimal

import pytest
from django.utils import timezone

from ..order import AdjustmentType, OrderExportStatus
from ..order.actions import add_variant_to_order
from ..order.models import Adjustment, Order
from ..product.models import ProductVariant
from ..returns.models import ReturnReason
from ..shipping import InventoryUnitState, ShipmentStatus
from ..shipping.models import Shipment, ShippingMethod
from ..warehouse.models import Stock, Warehouse


@pytest.fixture
def warehouse():
    return Warehouse.objects.create(name="Main warehouse", slug="main")


@pytest.fixture
def second_warehouse():
    return Warehouse.objects.create(name="Overflow warehouse", slug="overflow")


@pytest.fixture
def variant(warehouse):
    variant = ProductVariant.objects.create(
        sku="136270",
        name="Canvas tote",
        price_amount=Decimal("10.00"),
        cost_price_amount=Decimal("4.00"),
    )
    Stock.objects.create(warehouse=warehouse, product_variant=variant, quantity=10)
    return variant


@pytest.fixture
def other_variant(warehouse):
    variant = ProductVariant.objects.create(
        sku="101575",
        name="Leather wallet",
        price_amount=Decimal("114.98"),
        cost_price_amount=Decimal("50.00"),
    )
    Stock.objects.create(warehouse=warehouse, product_variant=variant, quantity=5)
    return variant


@pytest.fixture
def unstocked_variant():
    return ProductVariant.objects.create(sku="999999", price_amount=Decimal(5))


@pytest.fixture
def shipping_method():
    return ShippingMethod.objects.create(name="Ground", price_amount=Decimal("7.50"))


@pytest.fixture
def order():
    return Order.objects.create(number="R280725117", completed_at=timezone.now())


@pytest.fixture
def open_shipment(order, warehouse):
    return Shipment.objects.create(
        order=order, warehouse=warehouse, status=ShipmentStatus.PENDING
    )


@pytest.fixture
def order_line(order, variant, open_shipment):
    return add_variant_to_order(order, variant, 1, open_shipment)


@pytest.fixture
def shipped_shipment(order, warehouse):
    return Shipment.objects.create(
        order=order,
        warehouse=warehouse,
        status=ShipmentStatus.SHIPPED,
        shipped_at=timezone.now(),
    )


@pytest.fixture
def shipped_line(order, other_variant, shipped_shipment):
    line = add_variant_to_order(order, other_variant, 2, shipped_shipment)
    line.inventory_units.update(state=InventoryUnitState.SHIPPED)
    return line


@pytest.fixture
def tax_adjustment(order_line):
    return Adjustment.objects.create(
        order=order_line.order,
        order_line=order_line,
        type=AdjustmentType.TAX,
        label="Sales tax",
        rate=Decimal("0.1"),
    )


@pytest.fixture
def order_promotion(order):
    return Adjustment.objects.create(
        order=order,
        type=AdjustmentType.PROMOTION,
        label="Spring sale",
        rate=Decimal("0.05"),
    )


@pytest.fixture
def return_reason():
    return ReturnReason.objects.create(name="Returned via RetailOps")


@pytest.fixture
def exportable_order():
    return Order.objects.create(
        number="R100000001",
        completed_at=timezone.now(),
        export_status=OrderExportStatus.YES,
    )
