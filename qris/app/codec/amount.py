"""
Amount-injection codec.

Turns a static merchant template into a dynamic payment string:
the transaction amount (tag 54) is inserted immediately before the
country code (tag 58) and the checksum (tag 63) is recomputed.

Contract:
- Pure and stateless. Safe to call concurrently.
- Never raises on template content. A template that cannot be tokenized
  is handled by literal ``5802`` insertion, matching the behavior of the
  payment flow this service replaces. Correctness of the output is then
  not guaranteed.
- Raises ``InvalidAmountError`` for amounts outside the representable
  domain (negative, non-integral, or longer than 99 digits).
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, Field

from qris.app.codec.crc import crc16_ccitt_false
from qris.app.codec.tlv import (
    CRC_VALUE_LENGTH,
    MAX_VALUE_LENGTH,
    TAG_COUNTRY_CODE,
    TAG_CRC,
    TAG_TRANSACTION_AMOUNT,
    TLVDecodeError,
    TLVField,
    parse_tlv,
    serialize_tlv,
)

logger = logging.getLogger(__name__)

CRC_PREFIX = f"{TAG_CRC}{CRC_VALUE_LENGTH:02d}"
COUNTRY_CODE_PREFIX = f"{TAG_COUNTRY_CODE}02"


class InvalidAmountError(ValueError):
    """Raised when an amount cannot be encoded as a tag-54 value."""


class PaymentCode(BaseModel):
    """A generated payment string. Immutable value."""

    payload: str = Field(..., description="Complete payment string")
    amount: int = Field(..., ge=0)
    checksum: str = Field(..., min_length=4, max_length=4)

    model_config = ConfigDict(frozen=True)


# ------------------------------------------------------------------
# Amount encoding
# ------------------------------------------------------------------


def canonical_amount(amount: int) -> str:
    """
    Serialize an amount in whole currency units.

    No leading zeros, no separators, ``"0"`` for zero.
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmountError(
            f"Amount must be an integer, got {type(amount).__name__}"
        )
    if amount < 0:
        raise InvalidAmountError(f"Amount must not be negative, got {amount}")
    # The length subfield is two digits wide.
    if amount >= 10 ** MAX_VALUE_LENGTH:
        raise InvalidAmountError(
            f"Amount exceeds {MAX_VALUE_LENGTH} decimal digits"
        )
    return str(amount)


def build_amount_field(amount: int) -> str:
    """
    Encode the tag-54 field.

        >>> build_amount_field(150000)
        '5406150000'
    """
    return TLVField(
        tag=TAG_TRANSACTION_AMOUNT,
        value=canonical_amount(amount),
    ).encode()


# ------------------------------------------------------------------
# Template manipulation
# ------------------------------------------------------------------


def strip_checksum(template: str) -> str:
    """
    Remove the trailing checksum from a template.

    A well-formed template ends with ``6304XXXX`` and the whole field is
    removed. Otherwise only the last four characters are dropped.
    """
    if len(template) >= 8 and template[-8:-4] == CRC_PREFIX:
        return template[:-8]
    return template[:-4]


def _insert_by_tag(body: str, amount_field: TLVField) -> str:
    fields = [
        f for f in parse_tlv(body) if f.tag != TAG_TRANSACTION_AMOUNT
    ]

    for index, f in enumerate(fields):
        if f.tag == TAG_COUNTRY_CODE:
            logger.debug("Inserting amount before field #%d (tag 58)", index)
            fields.insert(index, amount_field)
            break
    else:
        logger.debug("No country code field; appending amount")
        fields.append(amount_field)

    return serialize_tlv(fields)


def _insert_by_literal(body: str, amount_field: str) -> str:
    index = body.find(COUNTRY_CODE_PREFIX)
    if index == -1:
        return body + amount_field
    return body[:index] + amount_field + body[index:]


def inject_amount(template: str, amount: int) -> str:
    """
    Return a new payment string carrying ``amount`` with a fresh checksum.

    Args:
        template:
            Static merchant payment string, including its trailing
            checksum field. Treated as trusted input.
        amount:
            Non-negative integer amount in whole currency units.

    Returns:
        ``body_with_amount + "6304" + CRC16(body_with_amount + "6304")``
    """
    amount_field = TLVField(
        tag=TAG_TRANSACTION_AMOUNT,
        value=canonical_amount(amount),
    )
    body = strip_checksum(template)

    try:
        new_body = _insert_by_tag(body, amount_field)
    except TLVDecodeError as exc:
        logger.warning(
            "Template is not well-formed TLV (%s); using literal insertion",
            exc,
        )
        new_body = _insert_by_literal(body, amount_field.encode())

    payload = new_body + CRC_PREFIX
    return payload + crc16_ccitt_false(payload)


def generate_payment_code(template: str, amount: int) -> PaymentCode:
    payload = inject_amount(template, amount)
    return PaymentCode(
        payload=payload,
        amount=amount,
        checksum=payload[-CRC_VALUE_LENGTH:],
    )
