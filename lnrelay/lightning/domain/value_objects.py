"""Domain value objects for the Lightning integration.

Value Objects in DDD:
- Immutable (frozen dataclasses)
- No identity (equality based on attributes)
"""

import re
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class AuthContext:
    """Credential presented to the node when opening a stream.

    The macaroon is opaque to the relay: it is forwarded as-is and never
    printed.
    """

    macaroon: str = field(repr=False)

    def __post_init__(self) -> None:
        if not self.macaroon:
            raise ValueError("macaroon must not be empty")

    def headers(self) -> dict[str, str]:
        """HTTP headers authenticating a request against the LND REST gateway."""
        return {"Grpc-Metadata-macaroon": self.macaroon}


@dataclass(frozen=True)
class PaymentRequest:
    """A newly created BOLT-11 payment request."""

    payment_hash: str
    payment_request: str
    amount_sat: int
    memo: str
    add_index: int | None = None

    def __post_init__(self) -> None:
        if not re.match(r"^[0-9a-f]{64}$", self.payment_hash):
            raise ValueError(f"Invalid payment_hash format: {self.payment_hash}")

        if self.amount_sat <= 0:
            raise ValueError(f"Amount must be positive, got {self.amount_sat}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "payment_hash": self.payment_hash,
            "payment_request": self.payment_request,
            "amount_sat": self.amount_sat,
            "memo": self.memo,
            "add_index": self.add_index,
        }
