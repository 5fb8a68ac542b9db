"""Application services for the Lightning integration."""

from .payment_request_service import InvoiceBackend, PaymentRequestService
from .subscriber import RECONNECT_DELAY_SECONDS, InvoiceSubscriber, SettlementSource

__all__ = [
    # Settlement relay
    "InvoiceSubscriber",
    "SettlementSource",
    "RECONNECT_DELAY_SECONDS",
    # Payment requests
    "PaymentRequestService",
    "InvoiceBackend",
]
