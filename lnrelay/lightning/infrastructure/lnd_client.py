"""Lightning Network Daemon (LND) REST client.

Talks to LND's REST gateway with httpx. The gateway exposes the same
services as the gRPC interface; server streams arrive as newline-delimited
JSON objects of the form ``{"result": {...}}`` or ``{"error": {...}}``.
Bytes fields (``r_hash``) are base64 encoded and int64 fields are strings.
"""

import base64
import binascii
import json
from collections.abc import AsyncIterator
from typing import Any

import httpx

from ...exceptions import LNDConnectionError, LNDInvoiceError, LNDStreamError
from ...utils.logging import get_logger
from ..domain.enums import InvoiceState
from ..domain.events import InvoicePaid
from ..domain.value_objects import AuthContext, PaymentRequest

logger = get_logger(__name__)

SUBSCRIBE_INVOICES_PATH = "/v1/invoices/subscribe"
ADD_INVOICE_PATH = "/v1/invoices"

# Streams stay open indefinitely; only the connect phase is bounded.
STREAM_TIMEOUT = httpx.Timeout(None, connect=10.0)


def decode_hash(value: str) -> str:
    """Convert a bytes field from the gateway to lowercase hex.

    The gateway emits standard base64; already-hex and url-safe base64
    values are accepted as well.
    """
    if len(value) == 64:
        try:
            bytes.fromhex(value)
            return value.lower()
        except ValueError:
            pass
    try:
        return base64.b64decode(value, validate=True).hex()
    except binascii.Error:
        return base64.urlsafe_b64decode(value).hex()


def is_settled(invoice: dict[str, Any]) -> bool:
    """Whether an invoice update from the stream represents a settlement."""
    state = InvoiceState.parse(invoice.get("state"))
    if state is not None:
        return state is InvoiceState.SETTLED
    return bool(invoice.get("settled"))


def invoice_to_event(invoice: dict[str, Any]) -> InvoicePaid:
    """Build an :class:`InvoicePaid` from a settled invoice message."""
    r_hash = invoice.get("r_hash")
    if not r_hash:
        raise ValueError("Settled invoice carries no r_hash")

    amount = invoice.get("amt_paid_sat") or invoice.get("value") or 0
    return InvoicePaid(
        payment_hash=decode_hash(r_hash),
        amount_sat=int(amount),
        metadata=invoice,
    )


class LNDClient:
    """LND REST gateway client.

    Provides the invoice settlement stream consumed by the subscriber and
    invoice creation for new payment requests. Authentication is the
    macaroon carried by :class:`AuthContext`; TLS verification is delegated
    to httpx.
    """

    def __init__(
        self,
        base_url: str = "https://localhost:8080",
        *,
        verify: bool | str = True,
        timeout_seconds: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            verify=verify,
            timeout=httpx.Timeout(timeout_seconds, connect=10.0),
            headers={"User-Agent": "lnrelay/1.0"},
        )

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    async def open_stream(self, auth: AuthContext) -> AsyncIterator[InvoicePaid]:
        """Subscribe to invoice updates and yield every settlement.

        Ends normally when the node closes the stream.

        Raises:
            LNDConnectionError: Transport failure or HTTP error status
            LNDStreamError: The node reported an error inside the stream
        """
        url = self._url(SUBSCRIBE_INVOICES_PATH)
        try:
            async with self._client.stream(
                "GET", url, headers=auth.headers(), timeout=STREAM_TIMEOUT
            ) as response:
                if response.status_code >= 400:
                    body = (await response.aread()).decode("utf-8", errors="replace")
                    raise LNDConnectionError(
                        "LND rejected invoice subscription",
                        status_code=response.status_code,
                        url=url,
                        context={"body": body[:200]},
                    )

                logger.info("invoice_stream_opened", url=url)
                async for line in response.aiter_lines():
                    if not line.strip():
                        continue
                    event = self._parse_stream_line(line)
                    if event is not None:
                        yield event
        except httpx.HTTPError as e:
            raise LNDConnectionError(
                f"Invoice stream failed: {e}", url=url, original_error=e
            ) from e

    def _parse_stream_line(self, line: str) -> InvoicePaid | None:
        try:
            message = json.loads(line)
        except json.JSONDecodeError as e:
            raise LNDStreamError(
                "Malformed message on invoice stream",
                context={"line": line[:100]},
                original_error=e,
            ) from e

        if "error" in message:
            error = message["error"] or {}
            raise LNDStreamError(
                error.get("message", "Invoice stream error"),
                context={"code": error.get("code"), "http_code": error.get("http_code")},
            )

        invoice = message.get("result", message)
        if not is_settled(invoice):
            logger.debug("invoice_update_skipped", state=invoice.get("state"))
            return None

        try:
            return invoice_to_event(invoice)
        except ValueError as e:
            raise LNDStreamError(
                "Settled invoice could not be decoded",
                context={"r_hash": str(invoice.get("r_hash"))[:64]},
                original_error=e,
            ) from e

    async def add_invoice(
        self,
        auth: AuthContext,
        amount_sat: int,
        memo: str,
        expiry_seconds: int = 3600,
    ) -> PaymentRequest:
        """Create a new invoice on the node.

        Raises:
            LNDConnectionError: Node unreachable
            LNDInvoiceError: Node refused the invoice or replied unexpectedly
        """
        url = self._url(ADD_INVOICE_PATH)
        body = {"value": str(amount_sat), "memo": memo, "expiry": str(expiry_seconds)}

        try:
            response = await self._client.post(url, json=body, headers=auth.headers())
        except httpx.HTTPError as e:
            raise LNDConnectionError(
                f"Failed to reach LND: {e}", url=url, original_error=e
            ) from e

        if response.status_code >= 400:
            raise LNDInvoiceError(
                "LND refused invoice creation",
                context={"status_code": response.status_code, "body": response.text[:200]},
            )

        try:
            data = response.json()
            return PaymentRequest(
                payment_hash=decode_hash(data["r_hash"]),
                payment_request=data["payment_request"],
                amount_sat=amount_sat,
                memo=memo,
                add_index=int(data["add_index"]) if data.get("add_index") else None,
            )
        except (KeyError, ValueError, binascii.Error) as e:
            raise LNDInvoiceError(
                "Unexpected AddInvoice response", original_error=e
            ) from e

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()
