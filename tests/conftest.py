"""
Pytest configuration and global fixtures.

This module provides shared fixtures used across all tests.
"""

import asyncio
import os
import time
from collections.abc import Callable

import pytest

from lnrelay.lightning.domain.events import InvoicePaid
from lnrelay.lightning.domain.value_objects import AuthContext
from lnrelay.utils import config

# Test constants
TEST_MACAROON = "0201036c6e6402f801030a10"


def _make_event(seq: int, **metadata) -> InvoicePaid:
    return InvoicePaid(
        payment_hash=f"{seq:064x}",
        amount_sat=seq,
        metadata={"memo": f"Candy for {seq} sat", **metadata},
    )


async def _wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.005)


@pytest.fixture
def make_event() -> Callable[..., InvoicePaid]:
    """Factory for settlements whose amount doubles as a sequence number."""
    return _make_event


@pytest.fixture
def wait_until():
    """Poll a predicate from async tests until it holds."""
    return _wait_until


@pytest.fixture
def test_macaroon() -> str:
    return TEST_MACAROON


@pytest.fixture
def auth() -> AuthContext:
    return AuthContext(macaroon=TEST_MACAROON)


@pytest.fixture(autouse=True)
def reset_settings(monkeypatch):
    """Isolate tests from the host environment and the settings singleton."""
    for key in list(os.environ):
        if key.startswith("LNRELAY_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(config, "_settings", None)
