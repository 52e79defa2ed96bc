from datetime import UTC, datetime
from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError

from ..error_codes import SynchronizeErrorCode
from ..payload import (
    parse_bool,
    parse_decimal,
    parse_int,
    parse_synchronization_request,
)


def test_parse_request_coerces_channel_values():
    # given
    payload = {
        "order_refnum": "R280725117",
        "line_items": [
            {
                "corr": 17,
                "sku": 136270,
                "quantity": "2",
                "estimated_ship_date": 1458221964,
                "estimated_unit_cost": "27.50",
                "unit_price": 30,
                "direct_ship_amt": "1.5",
                "removed": "false",
                "ext": {"carrier": "ups"},
            }
        ],
        "rmas": [
            {
                "id": 10067,
                "items": [{"channel_refnum": "223845", "sku": "101575"}],
                "refund_amt": 114.98,
                "returns": [{"id": "6128", "items": [], "refund_amt": "0"}],
            }
        ],
        "order_amts": {"shipping_amt": "12.00"},
        "options": {"ro_authoritative_ship": True},
    }

    # when
    request = parse_synchronization_request(payload)

    # then
    (item,) = request.line_items
    assert item.corr == "17"
    assert item.sku == "136270"
    assert item.quantity == 2
    assert item.removed is False
    assert item.estimated_ship_date == datetime(2016, 3, 17, 13, 39, 24, tzinfo=UTC)
    assert item.estimated_unit_cost == Decimal("27.50")
    assert item.unit_price == Decimal(30)
    assert item.direct_ship_amt == Decimal("1.5")
    assert item.apportioned_ship_amt is None
    assert item.ext == {"carrier": "ups"}

    (rma,) = request.rmas
    assert rma.id == "10067"
    assert rma.items[0].quantity == 1
    assert rma.refund_amt == Decimal("114.98")
    assert rma.returns[0].refund_amt == Decimal(0)

    assert request.order_amts.shipping_amt == Decimal("12.00")
    assert request.authoritative_shipping is True
    assert request.item_level_shipping == Decimal("1.5")
    assert request.raw is payload


def test_parse_request_omitted_lists_mean_no_action():
    # when
    request = parse_synchronization_request({"order_refnum": "R1"})

    # then
    assert request.line_items == ()
    assert request.rmas == ()
    assert request.order_amts.shipping_amt is None
    assert request.authoritative_shipping is False


def test_parse_request_collects_all_errors():
    # given
    payload = {
        "line_items": [
            {"sku": "136270", "quantity": "two", "unit_price": "free"},
            "not-a-record",
        ],
        "rmas": [{"items": []}],
        "options": [],
    }

    # when
    with pytest.raises(ValidationError) as exc_info:
        parse_synchronization_request(payload)

    # then
    errors = exc_info.value.error_dict
    assert set(errors) == {
        "order_refnum",
        "line_items[0].quantity",
        "line_items[0].unit_price",
        "line_items[1]",
        "rmas[0].id",
        "options",
    }
    assert errors["order_refnum"][0].code == SynchronizeErrorCode.REQUIRED.value
    assert errors["line_items[0].quantity"][0].code == (
        SynchronizeErrorCode.INVALID.value
    )


def test_parse_request_rejects_non_mapping():
    with pytest.raises(ValidationError):
        parse_synchronization_request(["R280725117"])


@pytest.mark.parametrize(
    ("value", "expected", "has_errors"),
    [
        (None, 0, False),
        ("", 0, False),
        (3, 3, False),
        ("3", 3, False),
        ("3.0", 3, False),
        ("3.5", 0, True),
        ("abc", 0, True),
        (True, 0, True),
    ],
)
def test_parse_int(value, expected, has_errors):
    result, errors = parse_int(value, "quantity")

    assert result == expected
    assert bool(errors) is has_errors


@pytest.mark.parametrize(
    ("value", "expected", "has_errors"),
    [
        (None, None, False),
        ("1.10", Decimal("1.10"), False),
        (Decimal("2"), Decimal("2"), False),
        ("NaN", None, True),
        ("Infinity", None, True),
        ("1,5", None, True),
    ],
)
def test_parse_decimal(value, expected, has_errors):
    result, errors = parse_decimal(value, "unit_price")

    assert result == expected
    assert bool(errors) is has_errors


@pytest.mark.parametrize(
    ("value", "expected", "has_errors"),
    [
        (None, False, False),
        (True, True, False),
        (1, True, False),
        ("YES", True, False),
        ("0", False, False),
        ("maybe", False, True),
    ],
)
def test_parse_bool(value, expected, has_errors):
    result, errors = parse_bool(value, "removed")

    assert result is expected
    assert bool(errors) is has_errors
