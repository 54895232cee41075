from typing import Optional


class ParkSyncError(Exception):
    """Base class for all ParkSync errors."""
    pass


class ConfigValidationError(ParkSyncError):
    """Raised when configuration validation fails"""
    pass


class StorageError(ParkSyncError):
    """Raised when the durable store cannot complete a read or write."""
    pass


class QueueCorruptedError(StorageError):
    """Raised when a storage slot holds data that cannot be decoded."""
    pass


class DeliveryError(ParkSyncError):
    """Raised when a handler reports a failed delivery."""
    pass


class HandlerTimeoutError(DeliveryError):
    """Raised when a handler does not finish within its timeout."""
    pass


class ApiError(ParkSyncError):
    """Raised by the parking API client on transport or HTTP errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
