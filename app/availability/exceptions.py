"""Errors raised while parsing, evaluating and storing availability data."""


class AvailabilityError(Exception):
    """Base class for availability and completion errors."""


class MalformedTreeError(AvailabilityError):
    """Raised when a stored condition tree cannot be parsed."""


class UnknownConditionKindError(AvailabilityError):
    """Raised when a leaf condition type has no registered factory."""

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"Unknown availability condition type '{kind}'")


class StoreWriteConflict(AvailabilityError):
    """Raised when a completion record already exists for (user, criteria)."""

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Completion record '{record_id}' already exists")
