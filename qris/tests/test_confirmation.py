from urllib.parse import parse_qs, urlsplit

import pytest

from qris.app.confirmation import (
    build_confirmation_message,
    build_confirmation_url,
    normalize_msisdn,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("085776568948", "6285776568948"),
        ("0857-7656-8948", "6285776568948"),
        ("+6285776568948", "6285776568948"),
        ("6285776568948", "6285776568948"),
    ],
)
def test_normalizes_local_numbers(raw, expected):
    assert normalize_msisdn(raw) == expected


def test_rejects_number_without_digits():
    with pytest.raises(ValueError):
        normalize_msisdn("n/a")


def test_message_quotes_order_and_total():
    message = build_confirmation_message(150000, "KOGRAPH", order_id="ORD-42")

    assert message == (
        "Halo Admin KOGRAPH, saya ingin konfirmasi pembayaran untuk "
        "Order ID: ORD-42. Total: Rp\u00a0150.000"
    )


def test_message_without_order_id():
    message = build_confirmation_message(1000, "KOGRAPH")

    assert "Order ID" not in message
    assert message.endswith("Total: Rp\u00a01.000")


def test_url_targets_merchant_and_round_trips_message():
    url = build_confirmation_url(
        amount=150000,
        contact_number="085776568948",
        merchant_label="KOGRAPH",
        order_id="ORD-42",
    )

    parts = urlsplit(url)
    assert parts.scheme == "https"
    assert parts.netloc == "wa.me"
    assert parts.path == "/6285776568948"
    assert parse_qs(parts.query)["text"] == [
        build_confirmation_message(150000, "KOGRAPH", order_id="ORD-42")
    ]
    assert " " not in url
