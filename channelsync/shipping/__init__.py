class ShipmentStatus:
    """Status of an outbound shipment carrying order lines."""

    PENDING = "pending"  # Waiting on payment or stock
    READY = "ready"  # Can be picked and packed
    SHIPPED = "shipped"  # Left the warehouse
    CANCELED = "canceled"

    CHOICES = [
        (PENDING, "Pending"),
        (READY, "Ready"),
        (SHIPPED, "Shipped"),
        (CANCELED, "Canceled"),
    ]

    # Statuses that can still receive additional quantity
    OPEN_STATUSES = [PENDING, READY]


class InventoryUnitState:
    ON_HAND = "on_hand"
    SHIPPED = "shipped"
    RETURNED = "returned"

    CHOICES = [
        (ON_HAND, "On hand"),
        (SHIPPED, "Shipped"),
        (RETURNED, "Returned"),
    ]
