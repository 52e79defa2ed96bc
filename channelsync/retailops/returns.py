"""Mirror the channel's return authorizations (RMAs) on the order.

RMAs created in the channel get a local twin numbered after the channel id.
Every return the channel receives against the RMA becomes a CustomerReturn
grouping the return items that physically came back.
"""

import logging

from django.conf import settings
from django.db import transaction

from ..order import events
from ..order.models import Order, OrderLine
from ..returns import ReturnItemReceptionStatus
from ..returns.models import (
    CustomerReturn,
    ReturnAuthorization,
    ReturnItem,
    ReturnReason,
)
from ..shipping import InventoryUnitState, ShipmentStatus
from ..shipping.models import InventoryUnit
from ..warehouse.models import Warehouse
from .payload import ReturnBatchRecord, ReturnItemRecord, RmaRecord

logger = logging.getLogger(__name__)


def get_rma_number(channel_rma_id: str) -> str:
    return f"{settings.RETAILOPS_RMA_NUMBER_PREFIX}{channel_rma_id}"


def get_customer_return_number(channel_return_id: str) -> str:
    return f"{settings.RETAILOPS_CUSTOMER_RETURN_NUMBER_PREFIX}{channel_return_id}"


def get_return_reason() -> ReturnReason | None:
    """Prefer a reason set up for channel returns, else any active reason."""
    reasons = ReturnReason.objects.filter(is_active=True).order_by("pk")
    return (
        reasons.filter(name__icontains=settings.RETAILOPS_RETURN_REASON_KEYWORD).first()
        or reasons.first()
    )


def get_returnable_units(line: OrderLine):
    """Shipped units of the line not yet claimed by any return item."""
    return (
        line.inventory_units.filter(shipment__status=ShipmentStatus.SHIPPED)
        .exclude(state=InventoryUnitState.RETURNED)
        .filter(return_items__isnull=True)
        .order_by("pk")
    )


class ReturnSynchronizer:
    def __init__(self, order: Order):
        self.order = order

    def call(self, rmas: list[RmaRecord]) -> bool:
        """Apply every RMA; only creating a new local RMA counts as a change."""
        changed = False
        for rma in rmas:
            if self.sync_rma(rma):
                changed = True
        return changed

    @transaction.atomic
    def sync_rma(self, record: RmaRecord) -> bool:
        shipment = self.order.shipped_shipments().select_related("warehouse").first()
        if shipment is None:
            logger.info(
                "Ignoring RMA %s for order %s: nothing shipped yet",
                record.id,
                self.order.number,
            )
            return False

        rma = self.order.return_authorizations.filter(
            number=get_rma_number(record.id)
        ).first()
        if rma is None:
            self.create_return_authorization(record, shipment.warehouse)
            return True

        if rma.is_fully_received:
            return False

        self.link_items(rma, record.items)
        for batch in record.returns:
            if batch.items:
                self.receive_batch(rma, batch)
        return False

    def create_return_authorization(
        self, record: RmaRecord, warehouse: Warehouse
    ) -> ReturnAuthorization:
        rma = ReturnAuthorization.objects.create(
            number=get_rma_number(record.id),
            order=self.order,
            warehouse=warehouse,
            reason=get_return_reason(),
            memo=f"Created from channel RMA {record.id}",
        )
        linked = self.link_items(rma, record.items)
        events.return_authorized_event(
            order=self.order,
            number=rma.number,
            channel_rma_id=record.id,
            item_count=len(linked),
        )
        logger.info(
            "Created %s with %s item(s) for order %s",
            rma.number,
            len(linked),
            self.order.number,
        )
        return rma

    def find_line(self, item: ReturnItemRecord) -> OrderLine | None:
        if not item.channel_refnum.isdigit():
            return None
        return self.order.lines.filter(pk=int(item.channel_refnum)).first()

    def link_items(
        self, rma: ReturnAuthorization, items: tuple[ReturnItemRecord, ...]
    ) -> list[ReturnItem]:
        """Claim shipped units for each item, up to the quantity the channel asked.

        Units already on this RMA count towards the quantity, so replaying the
        same items links nothing new.
        """
        linked = []
        for item in items:
            line = self.find_line(item)
            if line is None:
                logger.warning(
                    "No order line %r (SKU %r) on order %s for %s",
                    item.channel_refnum,
                    item.sku,
                    self.order.number,
                    rma.number,
                )
                continue

            already_linked = rma.return_items.filter(
                inventory_unit__order_line=line
            ).count()
            missing = item.quantity - already_linked
            if missing <= 0:
                continue

            units = list(get_returnable_units(line)[:missing])
            if not units:
                logger.warning(
                    "No returnable unit of line %s left for %s",
                    line.pk,
                    rma.number,
                )
                continue
            linked.extend(
                ReturnItem.objects.create(
                    return_authorization=rma,
                    inventory_unit=unit,
                    pre_tax_amount=line.price_amount,
                )
                for unit in units
            )
        return linked

    def receive_batch(
        self, rma: ReturnAuthorization, batch: ReturnBatchRecord
    ) -> CustomerReturn | None:
        number = get_customer_return_number(batch.id)
        if CustomerReturn.objects.filter(number=number).exists():
            return None

        self.link_items(rma, batch.items)

        selected: dict[int, ReturnItem] = {}
        for item in batch.items:
            line = self.find_line(item)
            if line is None:
                continue
            awaiting = rma.return_items.filter(
                inventory_unit__order_line=line,
                reception_status=ReturnItemReceptionStatus.AWAITING,
                customer_return__isnull=True,
            ).exclude(pk__in=list(selected))
            for return_item in awaiting.order_by("pk")[: item.quantity]:
                selected[return_item.pk] = return_item

        if not selected:
            logger.warning(
                "Return %s on %s matched no awaiting item", batch.id, rma.number
            )
            return None

        # a zero refund is ambiguous: the unit may be damaged or the return free
        manual_intervention = batch.refund_amt is not None and batch.refund_amt == 0
        customer_return = CustomerReturn.objects.create(
            number=number, order=self.order, warehouse=rma.warehouse
        )
        for return_item in selected.values():
            return_item.customer_return = customer_return
            return_item.reception_status = ReturnItemReceptionStatus.RECEIVED
            update_fields = ["customer_return", "reception_status"]
            if manual_intervention:
                return_item.requires_manual_intervention = True
                update_fields.append("requires_manual_intervention")
            return_item.save(update_fields=update_fields)

        InventoryUnit.objects.filter(
            return_items__in=list(selected)
        ).update(state=InventoryUnitState.RETURNED)

        events.return_received_event(
            order=self.order,
            number=number,
            item_count=len(selected),
            manual_intervention=manual_intervention,
        )
        if manual_intervention:
            logger.warning(
                "%s received with no refund, %s item(s) need review",
                number,
                len(selected),
            )
        return customer_return
