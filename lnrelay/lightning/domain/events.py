"""Domain events for the Lightning integration.

Events are immutable (frozen dataclasses) and include standard metadata
from :class:`~lnrelay.core.events.base.BaseEvent`.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from ...core.events.base import BaseEvent

# Topic every settlement is published to
INVOICE_PAID_TOPIC = "invoicePaid"


@dataclass(frozen=True)
class InvoicePaid(BaseEvent):
    """Event fired when an invoice is settled on the node.

    ``metadata`` carries the node's remaining invoice fields (memo,
    timestamps, payment request, indices) untouched and read-only.
    """

    payment_hash: str
    amount_sat: int
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @property
    def memo(self) -> str | None:
        """Memo the payment request was created with."""
        return self.metadata.get("memo")

    @property
    def context_data(self) -> dict:
        """Additional context for logging/monitoring."""
        return {
            "payment_hash": self.payment_hash,
            "amount_sat": self.amount_sat,
            "settle_index": self.metadata.get("settle_index"),
        }
