"""
Error variants raised by the store and validation layers.

Route handlers match on these classes; nothing else is inspected.
"""

from typing import Iterable


class IntakeError(Exception):
    status_code = 500

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class ValidationFailed(IntakeError):
    """A submission is missing or has malformed required fields."""

    status_code = 400

    def __init__(self, reasons: Iterable[str], reason: str = "Missing or invalid required fields"):
        super().__init__(reason)
        self.reasons = list(reasons)


def format_size(size: int) -> str:
    """Render a byte count as whole MB or KB when it divides evenly."""
    if size and size % (1024 * 1024) == 0:
        return f"{size // (1024 * 1024)}MB"
    if size and size % 1024 == 0:
        return f"{size // 1024}KB"
    return f"{size} bytes"


class UploadTooLarge(IntakeError):
    status_code = 400

    def __init__(self, limit: int):
        super().__init__(f"File too large. Max {format_size(limit)} allowed.")
        self.limit = limit


class RecordNotFound(IntakeError):
    status_code = 404


class PersistenceError(IntakeError):
    """The store is unreachable, unconfigured, or rejected the operation."""

    status_code = 500
