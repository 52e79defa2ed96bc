class ReturnAuthorizationStatus:
    AUTHORIZED = "authorized"
    CANCELED = "canceled"

    CHOICES = [
        (AUTHORIZED, "Authorized"),
        (CANCELED, "Canceled"),
    ]


class ReturnItemReceptionStatus:
    """Whether a returned unit physically arrived back at the warehouse."""

    AWAITING = "awaiting"
    RECEIVED = "received"

    CHOICES = [
        (AWAITING, "Awaiting"),
        (RECEIVED, "Received"),
    ]
