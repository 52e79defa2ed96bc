from decimal import ROUND_HALF_UP, Decimal
from typing import TypeVar

from babel.numbers import get_currency_precision
from django.conf import settings
from prices import Money

T = TypeVar("T", Decimal, Money)

FOUR_PLACES = Decimal("0.0001")


def quantize_price(price: T, currency: str) -> T:
    precision = get_currency_precision(currency)
    number_places = Decimal(10) ** -precision
    return price.quantize(number_places, rounding=ROUND_HALF_UP)


def round_to_four_places(value: Decimal) -> Decimal:
    """Round carrier-level amounts kept with four decimal places."""
    return value.quantize(FOUR_PLACES, rounding=ROUND_HALF_UP)


def round_to_amount_precision(value: Decimal) -> Decimal:
    """Round to the precision of the `*_amount` columns."""
    number_places = Decimal(10) ** -settings.DEFAULT_DECIMAL_PLACES
    return value.quantize(number_places, rounding=ROUND_HALF_UP)
