"""Event logging for channel synchronization of orders."""

from . import OrderEvents
from .models import Order, OrderEvent


def order_synchronized_event(
    *, order: Order, line_results: list[dict], items_changed: bool
) -> OrderEvent:
    """Log a synchronization pass that changed the order."""
    return OrderEvent.objects.create(
        type=OrderEvents.SYNCHRONIZED,
        order=order,
        parameters={
            "items_changed": items_changed,
            "lines": [
                {"line_id": item["refnum"], "quantity": item["quantity"]}
                for item in line_results
            ],
            "total": str(order.total_amount),
        },
    )


def order_exported_event(*, order: Order) -> OrderEvent:
    return OrderEvent.objects.create(type=OrderEvents.EXPORTED, order=order)


def return_authorized_event(
    *, order: Order, number: str, channel_rma_id: str, item_count: int
) -> OrderEvent:
    """Log creation of a return authorization requested by the channel."""
    return OrderEvent.objects.create(
        type=OrderEvents.RETURN_AUTHORIZED,
        order=order,
        parameters={
            "number": number,
            "channel_rma_id": channel_rma_id,
            "item_count": item_count,
        },
    )


def return_received_event(
    *, order: Order, number: str, item_count: int, manual_intervention: bool
) -> OrderEvent:
    """Log receipt of returned units.

    `manual_intervention` is set when the channel reported no refund for the batch.
    """
    return OrderEvent.objects.create(
        type=OrderEvents.RETURN_RECEIVED,
        order=order,
        parameters={
            "number": number,
            "item_count": item_count,
            "manual_intervention": manual_intervention,
        },
    )
