"""Tests for Lightning domain events, enums and value objects."""

from dataclasses import FrozenInstanceError

import pytest

from lnrelay.lightning.domain.enums import InvoiceState
from lnrelay.lightning.domain.events import INVOICE_PAID_TOPIC, InvoicePaid
from lnrelay.lightning.domain.value_objects import AuthContext, PaymentRequest

PAYMENT_HASH = "ab" * 32


class TestInvoicePaid:
    def test_topic_name(self):
        assert INVOICE_PAID_TOPIC == "invoicePaid"

    def test_event_fields(self):
        event = InvoicePaid(
            payment_hash=PAYMENT_HASH,
            amount_sat=100,
            metadata={"memo": "Candy for 100 sat", "settle_index": "4"},
        )

        assert event.memo == "Candy for 100 sat"
        assert event.event_id
        assert event.occurred_at.tzinfo is not None
        assert event.context_data == {
            "payment_hash": PAYMENT_HASH,
            "amount_sat": 100,
            "settle_index": "4",
        }

    def test_event_is_immutable(self):
        source = {"memo": "hi"}
        event = InvoicePaid(payment_hash=PAYMENT_HASH, amount_sat=1, metadata=source)

        with pytest.raises(FrozenInstanceError):
            event.amount_sat = 2
        with pytest.raises(TypeError):
            event.metadata["memo"] = "changed"

        source["memo"] = "changed at source"
        assert event.metadata["memo"] == "hi"

    def test_memo_is_optional(self):
        assert InvoicePaid(payment_hash=PAYMENT_HASH, amount_sat=1).memo is None

    def test_events_have_distinct_ids(self):
        first = InvoicePaid(payment_hash=PAYMENT_HASH, amount_sat=1)
        second = InvoicePaid(payment_hash=PAYMENT_HASH, amount_sat=1)

        assert first.event_id != second.event_id


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("SETTLED", InvoiceState.SETTLED),
        ("settled", InvoiceState.SETTLED),
        (1, InvoiceState.SETTLED),
        ("1", InvoiceState.SETTLED),
        (0, InvoiceState.OPEN),
        ("CANCELED", InvoiceState.CANCELED),
        (3, InvoiceState.ACCEPTED),
        (9, None),
        ("BOGUS", None),
        (None, None),
    ],
)
def test_invoice_state_parse(value, expected):
    assert InvoiceState.parse(value) is expected


class TestAuthContext:
    def test_headers(self):
        auth = AuthContext(macaroon="0201")

        assert auth.headers() == {"Grpc-Metadata-macaroon": "0201"}

    def test_macaroon_hidden_from_repr(self):
        assert "0201" not in repr(AuthContext(macaroon="0201"))

    def test_empty_macaroon_rejected(self):
        with pytest.raises(ValueError):
            AuthContext(macaroon="")


class TestPaymentRequest:
    def test_to_dict(self):
        request = PaymentRequest(
            payment_hash=PAYMENT_HASH,
            payment_request="lnbc1u1p",
            amount_sat=100,
            memo="Candy for 100 sat",
        )

        assert request.to_dict() == {
            "payment_hash": PAYMENT_HASH,
            "payment_request": "lnbc1u1p",
            "amount_sat": 100,
            "memo": "Candy for 100 sat",
            "add_index": None,
        }

    @pytest.mark.parametrize(
        ("payment_hash", "amount"),
        [("xyz", 100), (PAYMENT_HASH.upper(), 100), (PAYMENT_HASH, 0)],
    )
    def test_invalid_values(self, payment_hash, amount):
        with pytest.raises(ValueError):
            PaymentRequest(
                payment_hash=payment_hash, payment_request="lnbc", amount_sat=amount, memo=""
            )
