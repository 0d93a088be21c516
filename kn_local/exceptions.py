"""Exceptions related to kn-local."""

__all__ = [
    "KnException",
    "InputException",
    "NotFoundError",
    "UnsupportedOperationError",
    "ConflictError",
]

GITOPS_MODE = "gitops"


class KnException(Exception):
    """Generic base exception used for this library."""


class InputException(KnException):
    """Raised when the input files or values are not formatted as expected."""


class NotFoundError(KnException):
    """Raised when a requested resource does not exist."""

    def __init__(self, kind: str, name: str) -> None:
        super().__init__(f'{kind.lower()} "{name}" not found')
        self.kind = kind
        self.name = name


class UnsupportedOperationError(KnException):
    """Raised for operations that have no meaning for the selected backend."""

    def __init__(self, operation: str, mode: str = GITOPS_MODE) -> None:
        super().__init__(f"this operation is not supported in {mode} mode")
        self.operation = operation
        self.mode = mode


class ConflictError(KnException):
    """Raised when an update lost a race with another writer and may be retried."""
