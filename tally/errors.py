from typing import Any, Optional


class TallyError(Exception):
    """Base class for every error raised by tally."""


class InvalidTransaction(TallyError, ValueError):
    """A transaction record failed boundary validation."""

    def __init__(self, field: str, value: Any, message: str, transaction_id: Optional[str] = None):
        self.field = field
        self.value = value
        self.transaction_id = transaction_id
        prefix = f"transaction {transaction_id}: " if transaction_id else ""
        super().__init__(f"{prefix}{message}")

    def to_dict(self) -> dict:
        return {
            "error": "invalid_transaction",
            "field": self.field,
            "transaction_id": self.transaction_id,
            "message": str(self),
        }


class InvalidMonth(TallyError, ValueError):
    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"expected a YYYY-MM month, got {value!r}")


class TransactionFetchError(TallyError):
    """The transaction backend could not be reached or returned garbage."""
