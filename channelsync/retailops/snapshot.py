"""Full order snapshot returned to the channel after a synchronization.

What gets dumped for each model is fixed configuration built at import time:
every concrete column, plus the listed associations and computed fields.
"""

from types import MappingProxyType
from typing import Any

import attrs
from django.db import models

from ..order.models import Adjustment, Order, OrderLine
from ..shipping.models import Shipment


@attrs.frozen
class SnapshotConfig:
    # name in the dump -> callable returning the related objects
    associations: MappingProxyType = attrs.field(
        factory=dict, converter=MappingProxyType
    )
    # name in the dump -> callable computing a value from the instance
    computed: MappingProxyType = attrs.field(factory=dict, converter=MappingProxyType)


def _line_sku(line: OrderLine) -> str:
    return line.variant.sku


def _line_advisory(line: OrderLine) -> bool:
    variant = line.variant
    return variant.is_advisory or variant.is_gift_card


def _line_expected_ship_date(line: OrderLine):
    return line.estimated_ship_date


def _shipping_method_name(shipment: Shipment) -> str | None:
    method = shipment.shipping_method
    return method.name if method else None


def _stock_location_name(shipment: Shipment) -> str:
    return shipment.warehouse.name


SNAPSHOT_CONFIG: MappingProxyType[type[models.Model], SnapshotConfig] = (
    MappingProxyType(
        {
            Order: SnapshotConfig(
                associations={
                    "lines": lambda order: order.lines.all(),
                    "adjustments": lambda order: order.order_adjustments(),
                    "shipments": lambda order: order.shipments.all(),
                },
            ),
            OrderLine: SnapshotConfig(
                associations={"adjustments": lambda line: line.adjustments.all()},
                computed={
                    "sku": _line_sku,
                    "advisory": _line_advisory,
                    "expected_ship_date": _line_expected_ship_date,
                },
            ),
            Shipment: SnapshotConfig(
                computed={
                    "shipping_method_name": _shipping_method_name,
                    "stock_location_name": _stock_location_name,
                },
            ),
            Adjustment: SnapshotConfig(),
        }
    )
)


def dump_instance(instance: models.Model) -> dict[str, Any]:
    config = SNAPSHOT_CONFIG.get(type(instance), SnapshotConfig())
    data = {
        field.attname: getattr(instance, field.attname)
        for field in instance._meta.concrete_fields
    }
    for name, compute in config.computed.items():
        data[name] = compute(instance)
    for name, related in config.associations.items():
        data[name] = [dump_instance(obj) for obj in related(instance)]
    return data


def dump_order(order: Order) -> dict[str, Any]:
    """Dump the order with its lines, order adjustments and shipments."""
    order.refresh_from_db()
    return dump_instance(order)
