from decimal import Decimal
from unittest.mock import Mock

from ...order import AdjustmentState, AdjustmentType
from ...order.models import Adjustment
from ...shipping.models import Shipment
from ..adjustments import AdjustmentRecalculator, DefaultShippingPriceCalculator
from ..payload import parse_synchronization_request


def close(*adjustments):
    for adjustment in adjustments:
        adjustment.close()


def test_close_open_tax_adjustments(order_line, tax_adjustment, order_promotion):
    # given
    recalculator = AdjustmentRecalculator(
        order_line.order, DefaultShippingPriceCalculator()
    )

    # when
    recalculator.close_open_tax_adjustments()

    # then
    tax_adjustment.refresh_from_db()
    order_promotion.refresh_from_db()
    assert tax_adjustment.is_closed
    assert order_promotion.is_open


def test_recompute_reopens_and_recloses_when_items_changed(
    order_line, tax_adjustment, order_promotion
):
    # given
    close(tax_adjustment, order_promotion)
    recalculator = AdjustmentRecalculator(
        order_line.order, DefaultShippingPriceCalculator()
    )

    # when
    recalculator.recompute(items_changed=True)

    # then
    tax_adjustment.refresh_from_db()
    order_promotion.refresh_from_db()
    assert tax_adjustment.amount == Decimal("1.00")
    assert order_promotion.amount == Decimal("-0.50")
    assert tax_adjustment.state == AdjustmentState.CLOSED
    assert order_promotion.state == AdjustmentState.CLOSED
    assert order_line.order.total_amount == Decimal("10.50")


def test_recompute_keeps_closed_amounts_without_item_changes(
    order_line, tax_adjustment, order_promotion
):
    # given
    close(tax_adjustment, order_promotion)
    recalculator = AdjustmentRecalculator(
        order_line.order, DefaultShippingPriceCalculator()
    )

    # when
    recalculator.recompute(items_changed=False)

    # then
    tax_adjustment.refresh_from_db()
    order_promotion.refresh_from_db()
    assert tax_adjustment.amount == Decimal(0)
    assert order_promotion.amount == Decimal(0)
    assert tax_adjustment.is_closed
    assert order_promotion.is_closed


def test_recompute_leaves_line_promotions_alone(order_line):
    # given
    line_promotion = Adjustment.objects.create(
        order=order_line.order,
        order_line=order_line,
        type=AdjustmentType.PROMOTION,
        rate=Decimal("0.2"),
        state=AdjustmentState.CLOSED,
    )
    recalculator = AdjustmentRecalculator(
        order_line.order, DefaultShippingPriceCalculator()
    )

    # when
    recalculator.recompute(items_changed=True)

    # then
    line_promotion.refresh_from_db()
    assert line_promotion.is_closed
    assert line_promotion.amount == Decimal(0)


def test_authoritative_shipping_applies_channel_amount(order_line):
    # given
    request = parse_synchronization_request(
        {
            "order_refnum": order_line.order.number,
            "line_items": [
                {"sku": "136270", "quantity": 1, "direct_ship_amt": "2.00"},
                {"sku": "101575", "quantity": 1},
            ],
            "order_amts": {"shipping_amt": "12.00"},
            "options": {"ro_authoritative_ship": True},
        }
    )
    calculator = Mock(spec=DefaultShippingPriceCalculator)
    calculator.apply_shipment_price.return_value = True
    recalculator = AdjustmentRecalculator(order_line.order, calculator)

    # when
    changed = recalculator.apply_shipping(request, items_changed=False)

    # then
    assert changed is True
    calculator.apply_shipment_price.assert_called_once_with(
        order_line.order, Decimal("12.00"), Decimal("10.00")
    )
    calculator.calculate_ship_price.assert_not_called()


def test_authoritative_shipping_without_amount_does_nothing(order):
    # given
    request = parse_synchronization_request(
        {"order_refnum": order.number, "options": {"ro_authoritative_ship": True}}
    )
    calculator = Mock(spec=DefaultShippingPriceCalculator)
    recalculator = AdjustmentRecalculator(order, calculator)

    # when
    changed = recalculator.apply_shipping(request, items_changed=True)

    # then
    assert changed is False
    calculator.apply_shipment_price.assert_not_called()
    calculator.calculate_ship_price.assert_not_called()


def test_computed_shipping_is_applied_but_not_a_change(order):
    # given
    request = parse_synchronization_request({"order_refnum": order.number})
    calculator = Mock(spec=DefaultShippingPriceCalculator)
    calculator.calculate_ship_price.return_value = Decimal("7.50")
    calculator.apply_shipment_price.return_value = True
    recalculator = AdjustmentRecalculator(order, calculator)

    # when
    changed = recalculator.apply_shipping(request, items_changed=True)

    # then
    assert changed is False
    calculator.apply_shipment_price.assert_called_once_with(order, Decimal("7.50"))


def test_computed_shipping_absent_is_not_applied(order):
    # given
    request = parse_synchronization_request({"order_refnum": order.number})
    calculator = Mock(spec=DefaultShippingPriceCalculator)
    calculator.calculate_ship_price.return_value = None
    recalculator = AdjustmentRecalculator(order, calculator)

    # when
    recalculator.apply_shipping(request, items_changed=True)

    # then
    calculator.apply_shipment_price.assert_not_called()


def test_shipping_untouched_when_items_unchanged(order):
    # given
    request = parse_synchronization_request({"order_refnum": order.number})
    calculator = Mock(spec=DefaultShippingPriceCalculator)
    recalculator = AdjustmentRecalculator(order, calculator)

    # when
    recalculator.apply_shipping(request, items_changed=False)

    # then
    calculator.calculate_ship_price.assert_not_called()
    calculator.apply_shipment_price.assert_not_called()


def test_default_calculator_sums_shipping_methods(
    order, open_shipment, warehouse, shipping_method
):
    # given
    calculator = DefaultShippingPriceCalculator()
    assert calculator.calculate_ship_price(order) is None
    open_shipment.shipping_method = shipping_method
    open_shipment.save()
    Shipment.objects.create(
        order=order, warehouse=warehouse, shipping_method=shipping_method
    )

    # when
    price = calculator.calculate_ship_price(order)

    # then
    assert price == Decimal("15.00")


def test_default_calculator_puts_charge_on_first_shipment(
    order, open_shipment, warehouse
):
    # given
    second = Shipment.objects.create(
        order=order, warehouse=warehouse, cost_amount=Decimal("3.00")
    )
    calculator = DefaultShippingPriceCalculator()

    # when
    changed = calculator.apply_shipment_price(
        order, Decimal("12.00"), Decimal("9.995")
    )
    changed_again = calculator.apply_shipment_price(
        order, Decimal("12.00"), Decimal("9.995")
    )

    # then
    open_shipment.refresh_from_db()
    second.refresh_from_db()
    assert changed is True
    assert changed_again is False
    assert open_shipment.cost_amount == Decimal("10.00")
    assert second.cost_amount == Decimal(0)
