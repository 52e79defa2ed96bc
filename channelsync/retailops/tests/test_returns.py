from decimal import Decimal

import pytest

from ...order import OrderEvents
from ...returns import ReturnItemReceptionStatus
from ...returns.models import CustomerReturn, ReturnAuthorization, ReturnReason
from ...shipping import InventoryUnitState
from ..payload import ReturnBatchRecord, ReturnItemRecord, RmaRecord
from ..returns import ReturnSynchronizer, get_return_reason


@pytest.fixture
def return_item_record(shipped_line):
    def build(quantity=1, channel_refnum=None):
        return ReturnItemRecord(
            channel_refnum=channel_refnum or str(shipped_line.pk),
            sku="101575",
            quantity=quantity,
        )

    return build


def rma_record(items, returns=(), refund_amt=Decimal("114.98"), rma_id="10067"):
    return RmaRecord(
        id=rma_id, items=tuple(items), refund_amt=refund_amt, returns=tuple(returns)
    )


def test_creates_rma_for_shipped_order(
    order, shipped_line, shipped_shipment, return_reason, return_item_record
):
    # when
    changed = ReturnSynchronizer(order).call([rma_record([return_item_record()])])

    # then
    assert changed is True
    rma = ReturnAuthorization.objects.get()
    assert rma.number == "RMA-ROP-10067"
    assert rma.order == order
    assert rma.warehouse == shipped_shipment.warehouse
    assert rma.reason == return_reason
    (return_item,) = rma.return_items.all()
    assert return_item.inventory_unit.order_line == shipped_line
    assert return_item.pre_tax_amount == Decimal("114.98")
    assert return_item.reception_status == ReturnItemReceptionStatus.AWAITING
    assert order.events.filter(type=OrderEvents.RETURN_AUTHORIZED).exists()


def test_replayed_rma_is_not_created_twice(order, shipped_line, return_item_record):
    # given
    records = [rma_record([return_item_record()])]
    ReturnSynchronizer(order).call(records)

    # when
    changed = ReturnSynchronizer(order).call(records)

    # then
    assert changed is False
    assert ReturnAuthorization.objects.count() == 1
    assert ReturnAuthorization.objects.get().return_items.count() == 1


def test_rma_is_ignored_before_anything_shipped(order, order_line):
    # when
    changed = ReturnSynchronizer(order).call(
        [rma_record([ReturnItemRecord(str(order_line.pk), "136270", 1)])]
    )

    # then
    assert changed is False
    assert not ReturnAuthorization.objects.exists()


def test_unmatched_item_is_skipped(order, shipped_line, return_item_record):
    # when
    changed = ReturnSynchronizer(order).call(
        [
            rma_record(
                [
                    return_item_record(channel_refnum="999999"),
                    return_item_record(channel_refnum="not-a-line"),
                    return_item_record(),
                ]
            )
        ]
    )

    # then
    assert changed is True
    assert ReturnAuthorization.objects.get().return_items.count() == 1


def test_existing_rma_links_additional_items(order, shipped_line, return_item_record):
    # given
    ReturnSynchronizer(order).call([rma_record([return_item_record(quantity=1)])])

    # when
    changed = ReturnSynchronizer(order).call(
        [rma_record([return_item_record(quantity=5)])]
    )

    # then
    assert changed is False
    rma = ReturnAuthorization.objects.get()
    assert rma.return_items.count() == shipped_line.quantity


def test_return_batch_receives_items(order, shipped_line, return_item_record):
    # given
    ReturnSynchronizer(order).call([rma_record([return_item_record()])])
    batch = ReturnBatchRecord(
        id="6128", items=(return_item_record(),), refund_amt=Decimal("114.98")
    )

    # when
    changed = ReturnSynchronizer(order).call(
        [rma_record([return_item_record()], returns=[batch])]
    )

    # then
    assert changed is False
    customer_return = CustomerReturn.objects.get()
    assert customer_return.number == "CR-ROP-6128"
    (return_item,) = customer_return.return_items.all()
    assert return_item.is_received
    assert return_item.requires_manual_intervention is False
    assert return_item.inventory_unit.state == InventoryUnitState.RETURNED
    assert ReturnAuthorization.objects.get().is_fully_received
    assert order.events.filter(type=OrderEvents.RETURN_RECEIVED).exists()


def test_zero_refund_batch_flags_manual_intervention(
    order, shipped_line, return_item_record
):
    # given
    ReturnSynchronizer(order).call([rma_record([return_item_record(quantity=2)])])
    batch = ReturnBatchRecord(
        id="6128", items=(return_item_record(quantity=2),), refund_amt=Decimal(0)
    )

    # when
    ReturnSynchronizer(order).call(
        [rma_record([return_item_record(quantity=2)], returns=[batch])]
    )

    # then
    return_items = CustomerReturn.objects.get().return_items.all()
    assert len(return_items) == 2
    assert all(item.requires_manual_intervention for item in return_items)


def test_batch_receives_at_most_requested_quantity(
    order, shipped_line, return_item_record
):
    # given
    ReturnSynchronizer(order).call([rma_record([return_item_record(quantity=2)])])
    batch = ReturnBatchRecord(
        id="6128", items=(return_item_record(quantity=1),), refund_amt=None
    )

    # when
    ReturnSynchronizer(order).call(
        [rma_record([return_item_record(quantity=2)], returns=[batch])]
    )

    # then
    rma = ReturnAuthorization.objects.get()
    assert CustomerReturn.objects.get().return_items.count() == 1
    assert not rma.is_fully_received
    assert rma.return_items.filter(requires_manual_intervention=True).count() == 0


def test_batch_links_items_before_receiving(order, shipped_line, return_item_record):
    # given
    ReturnSynchronizer(order).call([rma_record([])])
    batch = ReturnBatchRecord(
        id="6128", items=(return_item_record(),), refund_amt=Decimal("114.98")
    )

    # when
    ReturnSynchronizer(order).call([rma_record([], returns=[batch])])

    # then
    rma = ReturnAuthorization.objects.get()
    assert rma.return_items.count() == 1
    assert rma.is_fully_received


def test_replayed_batch_is_skipped(order, shipped_line, return_item_record):
    # given
    ReturnSynchronizer(order).call([rma_record([return_item_record(quantity=2)])])
    batch = ReturnBatchRecord(
        id="6128", items=(return_item_record(),), refund_amt=Decimal("114.98")
    )
    records = [rma_record([return_item_record(quantity=2)], returns=[batch])]
    ReturnSynchronizer(order).call(records)

    # when
    ReturnSynchronizer(order).call(records)

    # then
    assert CustomerReturn.objects.count() == 1
    assert ReturnAuthorization.objects.get().return_items.filter(
        reception_status=ReturnItemReceptionStatus.RECEIVED
    ).count() == 1


def test_fully_received_rma_is_left_alone(order, shipped_line, return_item_record):
    # given
    batch = ReturnBatchRecord(
        id="6128", items=(return_item_record(),), refund_amt=Decimal("114.98")
    )
    ReturnSynchronizer(order).call([rma_record([return_item_record()])])
    ReturnSynchronizer(order).call([rma_record([], returns=[batch])])

    # when
    ReturnSynchronizer(order).call([rma_record([return_item_record(quantity=2)])])

    # then
    assert ReturnAuthorization.objects.get().return_items.count() == 1


def test_return_reason_prefers_channel_reason():
    # given
    ReturnReason.objects.create(name="Damaged")
    ReturnReason.objects.create(name="Inactive RetailOps", is_active=False)
    channel_reason = ReturnReason.objects.create(name="RetailOps return")

    # then
    assert get_return_reason() == channel_reason


def test_return_reason_falls_back_to_any_active_reason():
    # given
    ReturnReason.objects.create(name="Retired", is_active=False)
    damaged = ReturnReason.objects.create(name="Damaged")

    # then
    assert get_return_reason() == damaged


def test_return_reason_may_be_missing():
    assert get_return_reason() is None
