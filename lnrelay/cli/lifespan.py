"""
Lifespan management for the relay process.

The relay application is the composition root: it wires the LND client,
the broadcaster, the subscriber and the payment request service from
settings, starts the subscriber exactly once and tears everything down on
shutdown.
"""

import asyncio
import signal
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from lnrelay.core.events.broadcaster import EventBroadcaster
from lnrelay.exceptions import ConfigurationError
from lnrelay.lightning.application.services.payment_request_service import (
    PaymentRequestService,
)
from lnrelay.lightning.application.services.subscriber import (
    InvoiceSubscriber,
    SettlementSource,
)
from lnrelay.lightning.domain.memo import MemoFormatter
from lnrelay.lightning.domain.value_objects import AuthContext
from lnrelay.lightning.infrastructure.lnd_client import LNDClient
from lnrelay.utils.config import Settings
from lnrelay.utils.logging import get_logger

logger = get_logger(__name__)


def auth_from_settings(settings: Settings) -> AuthContext:
    """Build the node credential, failing fast when it is missing."""
    if not settings.lnd_macaroon:
        raise ConfigurationError(
            "An LND macaroon is required",
            setting="LNRELAY_LND_MACAROON",
            expected="hex encoded macaroon",
        )
    return AuthContext(macaroon=settings.lnd_macaroon)


class RelayApplication:
    """Owns every long-lived component of the relay."""

    def __init__(
        self,
        settings: Settings,
        *,
        lnd_client: LNDClient | None = None,
        source: SettlementSource | None = None,
    ) -> None:
        """Wire the application.

        Args:
            settings: Resolved settings
            lnd_client: Client override (built from settings if None)
            source: Settlement source override (defaults to the LND client)
        """
        self.settings = settings
        self.auth = auth_from_settings(settings)
        self.lnd_client = lnd_client or LNDClient(
            settings.lnd_rest_url,
            verify=settings.tls_verify,
            timeout_seconds=settings.lnd_timeout_seconds,
        )
        self.broadcaster = EventBroadcaster(max_queue_size=settings.listener_queue_size)
        self.memo_formatter = MemoFormatter(settings.memo_template)
        self.subscriber = InvoiceSubscriber(
            source or self.lnd_client,
            self.broadcaster,
            self.auth,
        )
        self.payment_requests = PaymentRequestService(
            self.lnd_client,
            self.memo_formatter,
            self.auth,
            expiry_seconds=settings.invoice_expiry_seconds,
        )
        self.shutdown_event = asyncio.Event()

        if not self.memo_formatter.has_placeholder:
            logger.warning("memo_template_without_placeholder", template=settings.memo_template)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator["RelayApplication", None]:
        """Start the subscriber on entry and shut down on exit."""
        logger.info("relay_starting", lnd_rest_url=self.settings.lnd_rest_url)
        await self.subscriber.start()

        try:
            yield self
        finally:
            logger.info("relay_shutting_down", **self.subscriber.stats())
            await self._graceful_shutdown()

    async def _graceful_shutdown(self) -> None:
        await self.subscriber.stop()
        await self.lnd_client.close()
        logger.info("graceful_shutdown_completed")

    def signal_handler(self, signum: int) -> None:
        """Handle shutdown signals (SIGTERM, SIGINT)."""
        signal_name = signal.Signals(signum).name
        logger.info("shutdown_signal_received", signal=signal_name)
        self.shutdown_event.set()

    def install_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for signum in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(signum, self.signal_handler, signum)

    async def run_until_shutdown(self) -> None:
        """Relay events until SIGINT/SIGTERM."""
        self.install_signal_handlers()
        async with self.lifespan():
            await self.shutdown_event.wait()

    def get_status(self) -> dict[str, Any]:
        return {
            "subscriber": self.subscriber.stats(),
            "broadcaster": self.broadcaster.get_stats(),
        }
