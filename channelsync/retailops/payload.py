"""Parsing and validation of channel synchronization requests.

Each parser returns (value, errors) so every problem in a request is reported
at once. Nothing touches the database until the whole request parsed cleanly.
"""

import math
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

import attrs
from django.core.exceptions import ValidationError

from . import SynchronizeOption
from .error_codes import SynchronizeErrorCode

TRUE_STRINGS = frozenset({"1", "true", "yes", "y", "t"})
FALSE_STRINGS = frozenset({"", "0", "false", "no", "n", "f"})


@attrs.frozen
class LineItemRecord:
    corr: str
    sku: str
    quantity: int
    removed: bool = False
    estimated_ship_date: datetime | None = None
    estimated_unit_cost: Decimal | None = None
    unit_price: Decimal | None = None
    direct_ship_amt: Decimal | None = None
    apportioned_ship_amt: Decimal | None = None
    ext: dict[str, Any] = attrs.field(factory=dict)


@attrs.frozen
class ReturnItemRecord:
    # the local order line id we sent back to the channel as `refnum`
    channel_refnum: str
    sku: str
    quantity: int


@attrs.frozen
class ReturnBatchRecord:
    id: str
    items: tuple[ReturnItemRecord, ...]
    refund_amt: Decimal | None


@attrs.frozen
class RmaRecord:
    id: str
    items: tuple[ReturnItemRecord, ...]
    refund_amt: Decimal | None
    returns: tuple[ReturnBatchRecord, ...]


@attrs.frozen
class OrderAmounts:
    shipping_amt: Decimal | None = None


@attrs.frozen
class SynchronizationRequest:
    order_refnum: str
    line_items: tuple[LineItemRecord, ...]
    rmas: tuple[RmaRecord, ...]
    order_amts: OrderAmounts
    options: dict[str, Any]
    # the request as received, handed to the post-writeback hook
    raw: dict[str, Any]

    @property
    def authoritative_shipping(self) -> bool:
        return bool(self.options.get(SynchronizeOption.AUTHORITATIVE_SHIPPING))

    @property
    def item_level_shipping(self) -> Decimal:
        """Shipping the channel charged directly on lines."""
        return sum(
            (item.direct_ship_amt or Decimal(0) for item in self.line_items),
            Decimal(0),
        )


class _Errors:
    """Collects ValidationErrors keyed by field path."""

    def __init__(self):
        self.by_field: dict[str, list[ValidationError]] = {}

    def add(self, path: str, messages: list[str], code=SynchronizeErrorCode.INVALID):
        for message in messages:
            self.by_field.setdefault(path, []).append(
                ValidationError(message, code=code.value)
            )

    def raise_if_any(self):
        if self.by_field:
            raise ValidationError(self.by_field)


# ---------------------------------------------------------------------------
# Field parsers, each returning (value, errors).
# ---------------------------------------------------------------------------


def parse_str(val) -> str:
    return "" if val is None else str(val).strip()


def parse_int(val, field_name: str, default: int = 0) -> tuple[int, list[str]]:
    if val is None or (isinstance(val, str) and not val.strip()):
        return default, []
    if isinstance(val, bool):
        return default, [f"{field_name}: cannot parse {val!r} as an integer"]
    if isinstance(val, int):
        return val, []
    try:
        dec = Decimal(str(val).strip())
    except InvalidOperation:
        return default, [f"{field_name}: cannot parse {val!r} as an integer"]
    if not dec.is_finite() or dec != dec.to_integral_value():
        return default, [f"{field_name}: cannot parse {val!r} as an integer"]
    return int(dec), []


def parse_decimal(val, field_name: str) -> tuple[Decimal | None, list[str]]:
    if val is None or (isinstance(val, str) and not val.strip()):
        return None, []
    if isinstance(val, bool) or (isinstance(val, float) and math.isnan(val)):
        return None, [f"{field_name}: cannot parse {val!r} as a number"]
    try:
        dec = Decimal(str(val).strip())
    except InvalidOperation:
        return None, [f"{field_name}: cannot parse {val!r} as a number"]
    if not dec.is_finite():
        return None, [f"{field_name}: cannot parse {val!r} as a number"]
    return dec, []


def parse_epoch(val, field_name: str) -> tuple[datetime | None, list[str]]:
    seconds, errors = parse_decimal(val, field_name)
    if seconds is None:
        return None, errors
    try:
        return datetime.fromtimestamp(int(seconds), tz=UTC), []
    except (OverflowError, OSError, ValueError):
        return None, [f"{field_name}: {val!r} is not a valid timestamp"]


def parse_bool(val, field_name: str) -> tuple[bool, list[str]]:
    if val is None:
        return False, []
    if isinstance(val, bool):
        return val, []
    if isinstance(val, int):
        return val != 0, []
    if isinstance(val, str):
        s = val.strip().lower()
        if s in TRUE_STRINGS:
            return True, []
        if s in FALSE_STRINGS:
            return False, []
    return False, [f"{field_name}: cannot parse {val!r} as a boolean"]


def parse_list(val, field_name: str) -> tuple[list, list[str]]:
    """Omitted lists mean 'no action'."""
    if val is None:
        return [], []
    if not isinstance(val, list | tuple):
        return [], [f"{field_name}: must be a list"]
    return list(val), []


def parse_mapping(val, field_name: str) -> tuple[dict, list[str]]:
    if val is None:
        return {}, []
    if not isinstance(val, dict):
        return {}, [f"{field_name}: must be a mapping"]
    return dict(val), []


# ---------------------------------------------------------------------------
# Record parsers
# ---------------------------------------------------------------------------


def parse_line_item(data: dict, path: str, errors: _Errors) -> LineItemRecord | None:
    if not isinstance(data, dict):
        errors.add(path, [f"{path}: must be a mapping"])
        return None

    quantity, errs = parse_int(data.get("quantity"), "quantity")
    errors.add(f"{path}.quantity", errs)
    removed, errs = parse_bool(data.get("removed"), "removed")
    errors.add(f"{path}.removed", errs)
    ship_date, errs = parse_epoch(
        data.get("estimated_ship_date"), "estimated_ship_date"
    )
    errors.add(f"{path}.estimated_ship_date", errs)
    ext, errs = parse_mapping(data.get("ext"), "ext")
    errors.add(f"{path}.ext", errs)

    amounts = {}
    for field_name in (
        "estimated_unit_cost",
        "unit_price",
        "direct_ship_amt",
        "apportioned_ship_amt",
    ):
        amounts[field_name], errs = parse_decimal(data.get(field_name), field_name)
        errors.add(f"{path}.{field_name}", errs)

    return LineItemRecord(
        corr=parse_str(data.get("corr")),
        sku=parse_str(data.get("sku")),
        quantity=quantity,
        removed=removed,
        estimated_ship_date=ship_date,
        ext=ext,
        **amounts,
    )


def parse_return_items(
    val, path: str, errors: _Errors
) -> tuple[ReturnItemRecord, ...]:
    raw_items, errs = parse_list(val, "items")
    errors.add(path, errs)
    items = []
    for index, data in enumerate(raw_items):
        item_path = f"{path}[{index}]"
        if not isinstance(data, dict):
            errors.add(item_path, [f"{item_path}: must be a mapping"])
            continue
        # a return item without a quantity stands for a single unit
        quantity, errs = parse_int(data.get("quantity"), "quantity", default=1)
        errors.add(f"{item_path}.quantity", errs)
        items.append(
            ReturnItemRecord(
                channel_refnum=parse_str(data.get("channel_refnum")),
                sku=parse_str(data.get("sku")),
                quantity=quantity,
            )
        )
    return tuple(items)


def parse_return_batch(
    data: dict, path: str, errors: _Errors
) -> ReturnBatchRecord | None:
    if not isinstance(data, dict):
        errors.add(path, [f"{path}: must be a mapping"])
        return None
    batch_id = parse_str(data.get("id"))
    if not batch_id:
        errors.add(f"{path}.id", ["id: required"], SynchronizeErrorCode.REQUIRED)
    refund_amt, errs = parse_decimal(data.get("refund_amt"), "refund_amt")
    errors.add(f"{path}.refund_amt", errs)
    return ReturnBatchRecord(
        id=batch_id,
        items=parse_return_items(data.get("items"), f"{path}.items", errors),
        refund_amt=refund_amt,
    )


def parse_rma(data: dict, path: str, errors: _Errors) -> RmaRecord | None:
    if not isinstance(data, dict):
        errors.add(path, [f"{path}: must be a mapping"])
        return None
    rma_id = parse_str(data.get("id"))
    if not rma_id:
        errors.add(f"{path}.id", ["id: required"], SynchronizeErrorCode.REQUIRED)
    refund_amt, errs = parse_decimal(data.get("refund_amt"), "refund_amt")
    errors.add(f"{path}.refund_amt", errs)

    raw_batches, errs = parse_list(data.get("returns"), "returns")
    errors.add(f"{path}.returns", errs)
    batches = [
        parse_return_batch(batch, f"{path}.returns[{index}]", errors)
        for index, batch in enumerate(raw_batches)
    ]
    return RmaRecord(
        id=rma_id,
        items=parse_return_items(data.get("items"), f"{path}.items", errors),
        refund_amt=refund_amt,
        returns=tuple(batch for batch in batches if batch is not None),
    )


def parse_synchronization_request(payload: Any) -> SynchronizationRequest:
    """Validate a raw channel request and turn it into frozen records.

    Raises ValidationError listing every problem found.
    """
    if not isinstance(payload, dict):
        raise ValidationError(
            "Synchronization request must be a mapping",
            code=SynchronizeErrorCode.INVALID.value,
        )
    errors = _Errors()

    order_refnum = parse_str(payload.get("order_refnum"))
    if not order_refnum:
        errors.add(
            "order_refnum", ["order_refnum: required"], SynchronizeErrorCode.REQUIRED
        )

    raw_lines, errs = parse_list(payload.get("line_items"), "line_items")
    errors.add("line_items", errs)
    line_items = [
        parse_line_item(data, f"line_items[{index}]", errors)
        for index, data in enumerate(raw_lines)
    ]

    raw_rmas, errs = parse_list(payload.get("rmas"), "rmas")
    errors.add("rmas", errs)
    rmas = [
        parse_rma(data, f"rmas[{index}]", errors) for index, data in enumerate(raw_rmas)
    ]

    raw_amounts, errs = parse_mapping(payload.get("order_amts"), "order_amts")
    errors.add("order_amts", errs)
    shipping_amt, errs = parse_decimal(raw_amounts.get("shipping_amt"), "shipping_amt")
    errors.add("order_amts.shipping_amt", errs)

    options, errs = parse_mapping(payload.get("options"), "options")
    errors.add("options", errs)

    errors.raise_if_any()

    return SynchronizationRequest(
        order_refnum=order_refnum,
        line_items=tuple(item for item in line_items if item is not None),
        rmas=tuple(rma for rma in rmas if rma is not None),
        order_amts=OrderAmounts(shipping_amt=shipping_amt),
        options=options,
        raw=payload,
    )
