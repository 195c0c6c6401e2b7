"""
Tag-length-value tokenizer for EMV merchant-presented payloads.

Every field is encoded as ``TT LL V...``:
- ``TT``  two-digit tag identifier
- ``LL``  two-digit, zero-padded decimal length of the value
- ``V``   the value, which is itself a TLV block for composite tags

The tokenizer is strict: a payload either decodes into fields that cover
it exactly, or ``TLVDecodeError`` is raised. Callers that must stay total
on malformed input catch the error and degrade explicitly.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


TAG_PAYLOAD_FORMAT = "00"
TAG_POINT_OF_INITIATION = "01"
TAG_TRANSACTION_AMOUNT = "54"
TAG_COUNTRY_CODE = "58"
TAG_CRC = "63"

CRC_VALUE_LENGTH = 4
MAX_VALUE_LENGTH = 99

# Merchant account information (26-51), additional data (62) and the
# language template (64) carry nested TLV blocks.
COMPOSITE_TAGS = frozenset(
    [f"{n:02d}" for n in range(26, 52)] + ["62", "64"]
)

TAG_NAMES = {
    "00": "Payload Format Indicator",
    "01": "Point of Initiation Method",
    "26": "Merchant Account Information",
    "51": "Merchant Account Information (QRIS)",
    "52": "Merchant Category Code",
    "53": "Transaction Currency",
    "54": "Transaction Amount",
    "55": "Tip or Convenience Indicator",
    "56": "Value of Convenience Fee Fixed",
    "57": "Value of Convenience Fee Percentage",
    "58": "Country Code",
    "59": "Merchant Name",
    "60": "Merchant City",
    "61": "Postal Code",
    "62": "Additional Data Field Template",
    "63": "CRC",
    "64": "Merchant Information Language Template",
}

_TWO_DIGITS = re.compile(r"^[0-9]{2}$")


class TLVDecodeError(ValueError):
    """Raised when a payload is not a well-formed TLV sequence."""

    def __init__(self, message: str, *, offset: int) -> None:
        super().__init__(f"{message} (offset {offset})")
        self.offset = offset


class TLVField(BaseModel):
    """A single decoded field. Immutable."""

    tag: str = Field(..., description="Two-digit tag identifier")
    value: str = Field(..., max_length=MAX_VALUE_LENGTH)

    model_config = ConfigDict(frozen=True)

    @field_validator("tag")
    @classmethod
    def validate_tag(cls, v: str) -> str:
        if not _TWO_DIGITS.match(v):
            raise ValueError(f"TLV tag must be two digits, got {v!r}")
        return v

    @property
    def length(self) -> int:
        return len(self.value)

    @property
    def name(self) -> str:
        return TAG_NAMES.get(self.tag, f"Tag {self.tag}")

    @property
    def is_composite(self) -> bool:
        return self.tag in COMPOSITE_TAGS

    def encode(self) -> str:
        return f"{self.tag}{self.length:02d}{self.value}"


def parse_tlv(payload: str) -> List[TLVField]:
    """
    Decode a flat TLV sequence.

    Raises:
        TLVDecodeError: on a truncated header, a non-numeric tag or
            length, or a value running past the end of the payload.
    """
    fields: List[TLVField] = []
    pos = 0
    end = len(payload)

    while pos < end:
        if pos + 4 > end:
            raise TLVDecodeError("Truncated field header", offset=pos)

        tag = payload[pos:pos + 2]
        length_raw = payload[pos + 2:pos + 4]

        if not _TWO_DIGITS.match(tag):
            raise TLVDecodeError(f"Non-numeric tag {tag!r}", offset=pos)
        if not _TWO_DIGITS.match(length_raw):
            raise TLVDecodeError(
                f"Non-numeric length {length_raw!r} for tag {tag}",
                offset=pos + 2,
            )

        value_start = pos + 4
        value_end = value_start + int(length_raw)
        if value_end > end:
            raise TLVDecodeError(
                f"Value of tag {tag} runs past end of payload",
                offset=value_start,
            )

        fields.append(TLVField(tag=tag, value=payload[value_start:value_end]))
        pos = value_end

    return fields


def parse_nested(field: TLVField) -> List[TLVField]:
    """Decode the sub-fields of a composite field."""
    if not field.is_composite:
        raise ValueError(f"Tag {field.tag} is not a composite template")
    return parse_tlv(field.value)


def serialize_tlv(fields: Iterable[TLVField]) -> str:
    return "".join(f.encode() for f in fields)


def find_field(fields: Iterable[TLVField], tag: str) -> Optional[TLVField]:
    for f in fields:
        if f.tag == tag:
            return f
    return None
