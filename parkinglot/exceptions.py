"""Shared exceptions for the parking service."""


class ParkingError(Exception):
    """Base class for every expected, caller-facing failure."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ValidationError(ParkingError):
    """Raised when a plate number (or other input) is malformed."""


class NotFoundError(ParkingError):
    """Raised when no active record exists for a lookup or exit request."""


class ConflictError(ParkingError):
    """Raised when a request clashes with the current state of a plate's records."""


class EntryDeniedError(ConflictError):
    """Exception raised when an entry check returns a non-allowed decision."""
    def __init__(self, decision, message: str = None):
        self.decision = decision
        super().__init__(message or decision.reason or decision.status.value)


class RecordAlreadyClosedError(ConflictError):
    """Exception raised when attempting to close a record that already has an exit."""
    def __init__(self, record_id: int, message: str = None):
        self.record_id = record_id
        super().__init__(message or f"Parking record {record_id} is already closed")
