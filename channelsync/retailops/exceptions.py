"""Custom exceptions for channel order synchronization."""

from typing import TYPE_CHECKING

from .error_codes import OrderExportErrorCode, SynchronizeErrorCode

if TYPE_CHECKING:
    from ..product.models import ProductVariant


class SynchronizationError(Exception):
    """Base for failures that abort a whole synchronization request."""

    code = SynchronizeErrorCode.INVALID


class OrderNotFound(SynchronizationError):
    """Raised when the channel references an order number we do not have."""

    code = SynchronizeErrorCode.NOT_FOUND

    def __init__(self, order_number: str):
        self.order_number = order_number
        super().__init__(f"Order {order_number!r} does not exist")


class NoStockLocationForVariant(SynchronizationError):
    """Raised when a new shipment is needed but the variant is stocked nowhere.

    The transaction is rolled back; the channel retries on its next push once
    the variant is stocked in an active warehouse.
    """

    code = SynchronizeErrorCode.NO_STOCK_LOCATION

    def __init__(self, variant: "ProductVariant"):
        self.variant = variant
        super().__init__(
            f"Cannot create a shipment for variant {variant.sku}: "
            f"it is not stocked in any active warehouse"
        )


class OrdersNotExportable(Exception):
    """Raised when acknowledging an export for orders that were never exportable."""

    code = OrderExportErrorCode.NOT_FOUND

    def __init__(self, order_ids: list[int]):
        self.order_ids = order_ids
        super().__init__(
            "Order IDs could not be matched or marked nonimportable: "
            + ", ".join(str(order_id) for order_id in order_ids)
        )
