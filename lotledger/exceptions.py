"""Custom exceptions for lotledger."""


class LedgerError(Exception):
    """Base exception for ledger errors."""


class LotNotFoundError(LedgerError):
    """Raised when a lot id does not exist in the store."""

    def __init__(self, lot_id: str):
        self.lot_id = lot_id
        super().__init__(f"Lot not found: {lot_id}")


class EventNotFoundError(LedgerError):
    """Raised when a trade or movement id does not exist in the history."""

    def __init__(self, kind: str, event_id: str):
        self.kind = kind
        self.event_id = event_id
        super().__init__(f"{kind.capitalize()} not found: {event_id}")


class DataValidationError(LedgerError):
    """Raised when input data fails validation."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Validation error on '{field}': {message}")


class HistoryImportError(LedgerError):
    """Raised when a history file cannot be imported."""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"Import error from {source}: {message}")


class PersistenceError(LedgerError):
    """Raised when the ledger cannot be written to storage."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"Could not persist {operation}: {message}")
