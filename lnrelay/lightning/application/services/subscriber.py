"""Reconnecting invoice settlement subscriber."""

import asyncio
from collections.abc import AsyncIterator
from typing import Any, Protocol

from lnrelay.core.events.base import EventPublisher
from lnrelay.lightning.domain.events import INVOICE_PAID_TOPIC, InvoicePaid
from lnrelay.lightning.domain.value_objects import AuthContext
from lnrelay.utils.logging import get_logger, set_correlation_id

logger = get_logger(__name__)

# Flat retry interval; no backoff and no attempt cap.
RECONNECT_DELAY_SECONDS = 5.0


class SettlementSource(Protocol):
    """Streaming source of settled invoices."""

    def open_stream(self, auth: AuthContext) -> AsyncIterator[InvoicePaid]:
        """Open a stream yielding one event per settled invoice."""
        ...


class InvoiceSubscriber:
    """Keeps exactly one settlement stream open for the life of the process.

    Every event received is published to the ``invoicePaid`` topic in
    arrival order. When the stream fails or the node ends it, the cause is
    logged and a new stream is opened after a fixed delay, forever.
    Credential errors are not told apart from network blips: they are
    retried at the same interval.
    """

    def __init__(
        self,
        source: SettlementSource,
        publisher: EventPublisher,
        auth: AuthContext,
        topic: str = INVOICE_PAID_TOPIC,
        reconnect_delay: float = RECONNECT_DELAY_SECONDS,
    ):
        """Initialize the subscriber.

        Args:
            source: Settlement stream provider (e.g. LNDClient)
            publisher: Broadcaster the events are published to
            auth: Credential presented when opening each stream
            topic: Topic the events are published under
            reconnect_delay: Seconds to wait before reopening a stream
        """
        self.source = source
        self.publisher = publisher
        self.auth = auth
        self.topic = topic
        self.reconnect_delay = reconnect_delay

        # Bounded bookkeeping only: counters and the most recent error
        self.attempts = 0
        self.events_relayed = 0
        self.last_error: str | None = None

        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> asyncio.Task:
        """Start the subscribe loop as a background task.

        Returns immediately. Calling it while already running returns the
        existing task.
        """
        if self.is_running:
            return self._task

        self._task = asyncio.create_task(self._run(), name="invoice-subscriber")
        logger.info(
            "invoice_subscriber_started",
            topic=self.topic,
            reconnect_delay=self.reconnect_delay,
        )
        return self._task

    async def stop(self) -> None:
        """Cancel the loop. Only used at process shutdown."""
        if self._task is None:
            return

        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        finally:
            self._task = None

        logger.info("invoice_subscriber_stopped", attempts=self.attempts)

    async def _run(self) -> None:
        while True:
            try:
                await self._consume_stream()
            except Exception as e:
                self.last_error = f"{type(e).__name__}: {e}"
                logger.exception(
                    "subscriber_iteration_failed",
                    attempt=self.attempts,
                    error_type=type(e).__name__,
                    retry_in=self.reconnect_delay,
                )

            await asyncio.sleep(self.reconnect_delay)

    async def _consume_stream(self) -> None:
        """Relay one stream lifecycle; returns once the stream has terminated."""
        self.attempts += 1
        # Log lines of one stream lifecycle share a correlation id
        set_correlation_id()
        relayed = 0
        stream = None

        try:
            stream = self.source.open_stream(self.auth)
            async for event in stream:
                self.publisher.publish(self.topic, event)
                relayed += 1
                self.events_relayed += 1
                logger.info("invoice_paid_relayed", **event.context_data)

            logger.warning(
                "stream_ended",
                attempt=self.attempts,
                events=relayed,
                retry_in=self.reconnect_delay,
            )
        except Exception as e:
            self.last_error = f"{type(e).__name__}: {e}"
            logger.error(
                "stream_failed",
                attempt=self.attempts,
                events=relayed,
                error=str(e),
                error_type=type(e).__name__,
                retry_in=self.reconnect_delay,
            )
        finally:
            await self._close_stream(stream)

    async def _close_stream(self, stream: Any) -> None:
        aclose = getattr(stream, "aclose", None)
        if aclose is None:
            return
        try:
            await aclose()
        except Exception as e:
            logger.warning(
                "stream_close_failed",
                attempt=self.attempts,
                error=str(e),
                error_type=type(e).__name__,
            )

    def stats(self) -> dict[str, Any]:
        """Get subscriber statistics."""
        return {
            "running": self.is_running,
            "attempts": self.attempts,
            "events_relayed": self.events_relayed,
            "last_error": self.last_error,
            "reconnect_delay": self.reconnect_delay,
        }
