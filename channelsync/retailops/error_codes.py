from enum import Enum


class SynchronizeErrorCode(str, Enum):
    """Error codes for order synchronization requests."""

    INVALID = "invalid"
    NOT_FOUND = "not_found"
    REQUIRED = "required"
    NO_STOCK_LOCATION = "no_stock_location"


class OrderExportErrorCode(str, Enum):
    INVALID = "invalid"
    NOT_FOUND = "not_found"
