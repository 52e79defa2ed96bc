import logging
from decimal import Decimal
from typing import Protocol

from ..core.prices import quantize_price
from ..order.calculations import recalculate_order
from ..order.models import Order
from .payload import SynchronizationRequest

logger = logging.getLogger(__name__)


class ShippingPriceCalculator(Protocol):
    def calculate_ship_price(self, order: Order) -> Decimal | None:
        """Return the shipping price for the order's current items, if known."""
        ...

    def apply_shipment_price(
        self, order: Order, total: Decimal, remainder: Decimal | None = None
    ) -> bool:
        """Write a shipping charge onto the order; return whether it changed."""
        ...


class DefaultShippingPriceCalculator:
    """Flat-rate pricing from the shipping methods assigned to shipments."""

    def calculate_ship_price(self, order: Order) -> Decimal | None:
        shipments = list(
            order.shipments.not_canceled().select_related("shipping_method")
        )
        priced = [s for s in shipments if s.shipping_method_id is not None]
        if not priced:
            return None
        return sum(
            (shipment.shipping_method.price_amount for shipment in priced), Decimal(0)
        )

    def apply_shipment_price(
        self, order: Order, total: Decimal, remainder: Decimal | None = None
    ) -> bool:
        # line-level direct shipping is already counted on the lines; the
        # shipments carry what is left of the order charge
        amount = quantize_price(
            remainder if remainder is not None else total, order.currency
        )
        changed = False
        for index, shipment in enumerate(order.shipments.not_canceled().order_by("pk")):
            cost = amount if index == 0 else Decimal(0)
            if shipment.cost_amount != cost:
                shipment.cost_amount = cost
                shipment.save(update_fields=["cost_amount"])
                changed = True
        return changed


class AdjustmentRecalculator:
    """Keeps tax and promotion adjustments consistent around a synchronization.

    Recomputing the order only updates open adjustments, so when items changed
    the closed ones are reopened, the order recomputed, and all of them closed
    again before anyone else sees the order.
    """

    def __init__(self, order: Order, shipping_calculator: ShippingPriceCalculator):
        self.order = order
        self.shipping_calculator = shipping_calculator

    def close_open_tax_adjustments(self):
        for adjustment in self.order.all_adjustments.tax().open():
            adjustment.close()

    def apply_shipping(self, request: SynchronizationRequest, items_changed: bool):
        """Apply the channel's or our own shipping charge.

        Only an authoritative channel amount counts as a change.
        """
        if request.authoritative_shipping:
            total = request.order_amts.shipping_amt
            if total is None:
                return False
            remainder = total - request.item_level_shipping
            return self.shipping_calculator.apply_shipment_price(
                self.order, total, remainder
            )

        if items_changed:
            price = self.shipping_calculator.calculate_ship_price(self.order)
            if price is not None:
                self.shipping_calculator.apply_shipment_price(self.order, price)
            else:
                logger.debug(
                    "No shipping price available for order %s", self.order.number
                )
        return False

    def recompute(self, items_changed: bool):
        if items_changed:
            for adjustment in self.order.all_adjustments.tax().closed():
                adjustment.open()
            for adjustment in self.order.order_adjustments().promotion().closed():
                adjustment.open()

        recalculate_order(self.order)

        for adjustment in self.order.all_adjustments.tax().open():
            adjustment.close()
        for adjustment in self.order.order_adjustments().promotion().open():
            adjustment.close()
