class CarrierError(Exception):
    """Raised inside an adapter when a carrier call cannot produce a usable result."""

    def __init__(self, carrier, message, status_code=None):
        self.carrier = carrier
        self.message = message
        self.status_code = status_code
        super().__init__("{}: {}".format(carrier, message))


class CarrierAuthError(CarrierError):
    pass


class LedgerError(Exception):
    pass
