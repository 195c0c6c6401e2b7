"""
Manual payment confirmation.

Payments are not reconciled against the payment network. After scanning,
the customer confirms by messaging the merchant; this module builds the
pre-filled chat link shown next to the payment code.
"""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import quote

from qris.app.formatting import format_currency

CHAT_BASE_URL = "https://wa.me"
COUNTRY_DIAL_CODE = "62"

_NON_DIGITS = re.compile(r"[^0-9]")


def normalize_msisdn(contact_number: str) -> str:
    """
    Convert a local Indonesian number to international form.

    ``0857...`` becomes ``62857...``; separators are dropped.
    """
    digits = _NON_DIGITS.sub("", contact_number)
    if not digits:
        raise ValueError(f"Contact number has no digits: {contact_number!r}")
    if digits.startswith("0"):
        return COUNTRY_DIAL_CODE + digits[1:]
    return digits


def build_confirmation_message(
    amount: int,
    merchant_label: str,
    order_id: Optional[str] = None,
) -> str:
    if order_id:
        return (
            f"Halo Admin {merchant_label}, saya ingin konfirmasi pembayaran "
            f"untuk Order ID: {order_id}. Total: {format_currency(amount)}"
        )
    return (
        f"Halo Admin {merchant_label}, saya ingin konfirmasi pembayaran. "
        f"Total: {format_currency(amount)}"
    )


def build_confirmation_url(
    amount: int,
    contact_number: str,
    merchant_label: str,
    order_id: Optional[str] = None,
) -> str:
    """Return a chat link pre-filled with the confirmation message."""
    message = build_confirmation_message(amount, merchant_label, order_id)
    msisdn = normalize_msisdn(contact_number)
    return f"{CHAT_BASE_URL}/{msisdn}?text={quote(message, safe='')}"
