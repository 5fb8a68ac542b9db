"""Tests for the relay composition root."""

import asyncio
import json
import signal

import httpx
import pytest

from lnrelay.cli.lifespan import RelayApplication, auth_from_settings
from lnrelay.exceptions import ConfigurationError
from lnrelay.lightning.domain.events import INVOICE_PAID_TOPIC
from lnrelay.lightning.infrastructure.lnd_client import LNDClient
from lnrelay.utils.config import Settings

PAID_HASH = "11" * 32


class HangingSource:
    def __init__(self, *events):
        self.events = events
        self.opened = 0

    async def open_stream(self, auth):
        self.opened += 1
        for event in self.events:
            yield event
        await asyncio.Event().wait()


@pytest.fixture
def settings(test_macaroon):
    return Settings(lnd_macaroon=test_macaroon, listener_queue_size=16)


def test_missing_macaroon_fails_fast():
    with pytest.raises(ConfigurationError) as exc_info:
        auth_from_settings(Settings())

    assert exc_info.value.context["setting"] == "LNRELAY_LND_MACAROON"


def test_wiring_from_settings(settings, test_macaroon):
    application = RelayApplication(settings, source=HangingSource())

    assert application.auth.macaroon == test_macaroon
    assert application.broadcaster.max_queue_size == 16
    assert application.memo_formatter.render(5) == "Candy for 5 sat"
    assert application.subscriber.topic == INVOICE_PAID_TOPIC
    assert application.subscriber.source is not application.lnd_client


@pytest.mark.asyncio
async def test_lifespan_relays_until_shutdown(settings, make_event):
    source = HangingSource(make_event(1), make_event(2))
    application = RelayApplication(settings, source=source)
    listener = application.broadcaster.subscribe(INVOICE_PAID_TOPIC)

    async with application.lifespan():
        assert application.subscriber.is_running
        first = await asyncio.wait_for(anext(listener), timeout=2)
        second = await asyncio.wait_for(anext(listener), timeout=2)

    assert [first.amount_sat, second.amount_sat] == [1, 2]
    assert source.opened == 1
    assert not application.subscriber.is_running
    assert application.get_status()["subscriber"]["events_relayed"] == 2


@pytest.mark.asyncio
async def test_signal_handler_requests_shutdown(settings):
    application = RelayApplication(settings, source=HangingSource())

    runner = asyncio.create_task(application.run_until_shutdown())
    await asyncio.sleep(0.01)
    application.signal_handler(signal.SIGTERM)

    await asyncio.wait_for(runner, timeout=2)
    assert not application.subscriber.is_running

    loop = asyncio.get_running_loop()
    for signum in (signal.SIGTERM, signal.SIGINT):
        loop.remove_signal_handler(signum)


@pytest.mark.asyncio
async def test_end_to_end_with_lnd_stream(settings):
    """Settlements from the REST stream reach a listener; open invoices do not."""
    paid = {"r_hash": PAID_HASH, "amt_paid_sat": "100", "state": "SETTLED", "memo": "Candy"}
    pending = {"r_hash": "22" * 32, "value": "50", "state": "OPEN"}
    body = "\n".join(json.dumps({"result": invoice}) for invoice in (pending, paid)) + "\n"

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=body.encode())

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    lnd_client = LNDClient("https://lnd.test:8080", http_client=http_client)
    application = RelayApplication(settings, lnd_client=lnd_client)

    try:
        async with application.broadcaster.listen(INVOICE_PAID_TOPIC) as listener:
            async with application.lifespan():
                event = await asyncio.wait_for(anext(listener), timeout=2)
    finally:
        await http_client.aclose()

    assert event.payment_hash == PAID_HASH
    assert event.amount_sat == 100
    assert event.memo == "Candy"
