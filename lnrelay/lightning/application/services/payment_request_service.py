"""Payment request creation with templated memos."""

from typing import Protocol

from lnrelay.exceptions import ValidationError
from lnrelay.lightning.domain.memo import MemoFormatter
from lnrelay.lightning.domain.value_objects import AuthContext, PaymentRequest
from lnrelay.utils.logging import get_logger

logger = get_logger(__name__)


class InvoiceBackend(Protocol):
    """Node operation used to register a new invoice."""

    async def add_invoice(
        self,
        auth: AuthContext,
        amount_sat: int,
        memo: str,
        expiry_seconds: int = 3600,
    ) -> PaymentRequest: ...


class PaymentRequestService:
    """Creates payment requests whose memo is rendered from a fixed template."""

    def __init__(
        self,
        backend: InvoiceBackend,
        memo_formatter: MemoFormatter,
        auth: AuthContext,
        expiry_seconds: int = 3600,
    ):
        """Initialize the service.

        Args:
            backend: Node client able to add invoices (e.g. LNDClient)
            memo_formatter: Template used for every memo
            auth: Credential presented to the node
            expiry_seconds: Expiry of created payment requests
        """
        self.backend = backend
        self.memo_formatter = memo_formatter
        self.auth = auth
        self.expiry_seconds = expiry_seconds

    async def create(self, amount_sat: int) -> PaymentRequest:
        """Create a payment request for ``amount_sat`` satoshis.

        Raises:
            ValidationError: If the amount is not a positive integer
            LNDClientError: If the node rejects the invoice
        """
        if isinstance(amount_sat, bool) or not isinstance(amount_sat, int) or amount_sat <= 0:
            raise ValidationError(
                "Amount must be a positive number of satoshis",
                field="amount_sat",
                value=amount_sat,
                constraint="> 0",
            )

        memo = self.memo_formatter.render(amount_sat)
        request = await self.backend.add_invoice(
            self.auth, amount_sat, memo, expiry_seconds=self.expiry_seconds
        )

        logger.info(
            "payment_request_created",
            payment_hash=request.payment_hash,
            amount_sat=amount_sat,
            memo=memo,
        )
        return request
