class OrderStatus:
    """Status of an order as seen by the storefront."""

    DRAFT = "draft"  # Being assembled, not placed yet
    UNFULFILLED = "unfulfilled"  # Placed, nothing shipped
    PARTIALLY_FULFILLED = "partially_fulfilled"  # Some shipments have left
    FULFILLED = "fulfilled"  # Every shipment has left
    RETURNED = "returned"
    CANCELED = "canceled"

    CHOICES = [
        (DRAFT, "Draft"),
        (UNFULFILLED, "Unfulfilled"),
        (PARTIALLY_FULFILLED, "Partially fulfilled"),
        (FULFILLED, "Fulfilled"),
        (RETURNED, "Returned"),
        (CANCELED, "Canceled"),
    ]


class OrderExportStatus:
    """Whether the channel should pick the order up on its next listing."""

    NO = "no"  # Never exported
    YES = "yes"  # Waiting for the channel to fetch it
    DONE = "done"  # Channel acknowledged the export

    CHOICES = [
        (NO, "Not exportable"),
        (YES, "Ready for export"),
        (DONE, "Exported"),
    ]

    EXPORTABLE = [YES, DONE]


class AdjustmentType:
    TAX = "tax"
    PROMOTION = "promotion"

    CHOICES = [
        (TAX, "Tax"),
        (PROMOTION, "Promotion"),
    ]


class AdjustmentState:
    """Only open adjustments are updated by an order recompute."""

    OPEN = "open"
    CLOSED = "closed"

    CHOICES = [
        (OPEN, "Open"),
        (CLOSED, "Closed"),
    ]


class OrderEvents:
    """Events recorded while the channel synchronizes an order."""

    SYNCHRONIZED = "synchronized"
    EXPORTED = "exported"
    RETURN_AUTHORIZED = "return_authorized"
    RETURN_RECEIVED = "return_received"

    CHOICES = [
        (SYNCHRONIZED, "Order synchronized from the channel"),
        (EXPORTED, "Order export acknowledged by the channel"),
        (RETURN_AUTHORIZED, "Return authorization created from the channel"),
        (RETURN_RECEIVED, "Returned items received"),
    ]
