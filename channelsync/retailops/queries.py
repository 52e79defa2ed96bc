import logging

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction

from ..order import OrderExportStatus, events
from ..order.models import Order
from .error_codes import OrderExportErrorCode
from .exceptions import OrdersNotExportable
from .snapshot import dump_order

logger = logging.getLogger(__name__)


def get_orders_for_export(limit: int | None = None):
    """Completed orders waiting for the channel to pick them up, oldest first."""
    if limit is None:
        limit = settings.RETAILOPS_EXPORT_LIMIT
    return Order.objects.ready_to_export().order_by("completed_at", "pk")[:limit]


def dump_orders_for_export(limit: int | None = None) -> list[dict]:
    """Snapshot every exportable order.

    An order that fails to dump is reported in place instead of failing the
    whole listing.
    """
    dumps = []
    for order in get_orders_for_export(limit):
        try:
            dumps.append(dump_order(order))
        except Exception as e:
            logger.exception("Could not dump order %s for export", order.number)
            dumps.append({"id": order.pk, "number": order.number, "error": str(e)})
    return dumps


def validate_order_ids(ids) -> list[int]:
    if not isinstance(ids, list | tuple) or not all(
        isinstance(order_id, int) and not isinstance(order_id, bool)
        for order_id in ids
    ):
        raise ValidationError(
            {
                "ids": ValidationError(
                    "ids must be a list of integers",
                    code=OrderExportErrorCode.INVALID.value,
                )
            }
        )
    return list(ids)


@transaction.atomic
def mark_orders_exported(ids) -> list[Order]:
    """Acknowledge that the channel imported the given orders."""
    order_ids = validate_order_ids(ids)
    orders = list(
        Order.objects.select_for_update().filter(
            pk__in=order_ids, export_status__in=OrderExportStatus.EXPORTABLE
        )
    )
    found = {order.pk for order in orders}
    missing = [order_id for order_id in order_ids if order_id not in found]
    if missing:
        raise OrdersNotExportable(missing)

    for order in orders:
        if order.export_status == OrderExportStatus.YES:
            events.order_exported_event(order=order)
    Order.objects.filter(pk__in=found, export_status=OrderExportStatus.YES).update(
        export_status=OrderExportStatus.DONE
    )
    logger.info("Marked %s order(s) exported", len(orders))
    return orders
