import logging
from collections.abc import Callable
from typing import Any

import attrs
from django.conf import settings
from django.db import transaction
from django.utils.module_loading import import_string

from ..order import events
from ..order.calculations import recalculate_order
from ..order.models import Order
from .adjustments import AdjustmentRecalculator, ShippingPriceCalculator
from .exceptions import OrderNotFound
from .line_items import LineItemUpdater
from .payload import parse_synchronization_request
from .returns import ReturnSynchronizer
from .snapshot import dump_order

logger = logging.getLogger(__name__)

AfterWriteback = Callable[[Order, dict[str, Any]], None]


@attrs.frozen
class SynchronizationResult:
    changed: bool
    result: list[dict]
    dump: dict[str, Any]

    def as_dict(self) -> dict[str, Any]:
        return {"changed": self.changed, "dump": self.dump, "result": self.result}


def get_line_item_updater_class() -> type[LineItemUpdater]:
    return import_string(settings.RETAILOPS_LINE_ITEM_UPDATER)


def get_shipping_price_calculator() -> ShippingPriceCalculator:
    return import_string(settings.RETAILOPS_SHIPPING_PRICE_CALCULATOR)()


def get_after_writeback_hook() -> AfterWriteback | None:
    if not settings.RETAILOPS_AFTER_WRITEBACK:
        return None
    return import_string(settings.RETAILOPS_AFTER_WRITEBACK)


def synchronize_order(
    payload: dict[str, Any],
    *,
    line_item_updater_class: type[LineItemUpdater] | None = None,
    shipping_calculator: ShippingPriceCalculator | None = None,
    after_writeback: AfterWriteback | None = None,
) -> SynchronizationResult:
    """Reconcile an order with the snapshot the channel pushed.

    Everything happens in one transaction holding a lock on the order row;
    any error rolls the whole pass back. Raises ValidationError for a malformed
    request and SynchronizationError subclasses for unknown orders or variants
    without a stock location.
    """
    request = parse_synchronization_request(payload)
    if line_item_updater_class is None:
        line_item_updater_class = get_line_item_updater_class()
    if shipping_calculator is None:
        shipping_calculator = get_shipping_price_calculator()
    if after_writeback is None:
        after_writeback = get_after_writeback_hook()

    with transaction.atomic():
        order = (
            Order.objects.select_for_update()
            .filter(number=request.order_refnum)
            .first()
        )
        if order is None:
            raise OrderNotFound(request.order_refnum)

        changed, results = line_item_updater_class(
            order, list(request.line_items)
        ).call()
        items_changed = changed

        recalculator = AdjustmentRecalculator(order, shipping_calculator)
        # tax is recalculated from scratch below if anything changed
        recalculator.close_open_tax_adjustments()

        # omitted RMAs mean no action
        if ReturnSynchronizer(order).call(list(request.rmas)):
            changed = True

        if recalculator.apply_shipping(request, items_changed):
            changed = True

        if changed:
            recalculator.recompute(items_changed)

        if after_writeback is not None:
            after_writeback(order, request.raw)

        if changed:
            recalculate_order(order)
            events.order_synchronized_event(
                order=order, line_results=results, items_changed=items_changed
            )

        dump = dump_order(order)

    logger.info(
        "Synchronized order %s: changed=%s, %s line(s) reported",
        order.number,
        changed,
        len(results),
    )
    return SynchronizationResult(changed=changed, result=results, dump=dump)
