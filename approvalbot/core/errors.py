# ---------------------------------
# TYPED EXCEPTIONS
# ---------------------------------


class InvalidRequest(ValueError):
    """Raised when caller input is missing or malformed."""
    pass

class TransportUnavailable(RuntimeError):
    """Raised when the messaging transport is not connected."""
    pass

class TransportError(RuntimeError):
    """Raised when the messaging transport fails to deliver a message."""
    pass

class PersistenceFailure(RuntimeError):
    """Raised when the order store cannot be written to or read from durable storage."""
    pass
