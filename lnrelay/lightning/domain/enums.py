"""Domain enums for the Lightning integration."""

from enum import Enum


class InvoiceState(str, Enum):
    """Invoice state as reported by LND.

    Lifecycle:
        OPEN → SETTLED (payment received)
        OPEN → CANCELED (expired or cancelled)
        OPEN → ACCEPTED → SETTLED (hold invoices)
    """

    OPEN = "OPEN"
    SETTLED = "SETTLED"
    CANCELED = "CANCELED"
    ACCEPTED = "ACCEPTED"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: str | int | None) -> "InvoiceState | None":
        """Parse the JSON form of the state (name or enum number)."""
        if value is None:
            return None
        if isinstance(value, int) or (isinstance(value, str) and value.isdigit()):
            members = list(cls)
            index = int(value)
            return members[index] if 0 <= index < len(members) else None
        try:
            return cls(str(value).upper())
        except ValueError:
            return None
