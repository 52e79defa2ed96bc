class SynchronizeOption:
    """Options the channel may send with a synchronization request."""

    # channel's shipping amount is final; do not compute our own
    AUTHORITATIVE_SHIPPING = "ro_authoritative_ship"
