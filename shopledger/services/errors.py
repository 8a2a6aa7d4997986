class ShopledgerError(Exception):
    """Base class for errors raised by the catalog, ledger and report services."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ShopledgerError):
    """Raised when input is missing, malformed or out of range."""
    pass


class NotFoundError(ShopledgerError):
    """Raised when a referenced product or order doesn't exist."""
    pass


class ConflictError(ShopledgerError):
    """Raised when a write would break a relationship between rows."""
    pass


class StorageError(ShopledgerError):
    """Raised when the underlying database fails."""
    pass
