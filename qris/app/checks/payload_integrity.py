"""
Deterministic integrity checks for merchant-presented payment strings.

These checks verify that a payload is a well-formed ASCII TLV sequence
terminated by a matching CRC-16/CCITT-FALSE checksum, and flag the
structural deviations that cause wallets to reject a scanned code.

Verification is deterministic and non-probabilistic. Encoding and
tokenization failures are hard stops: no further checks are meaningful.
"""

from __future__ import annotations

import re
from typing import List, Optional

from qris.app.codec.crc import crc16_ccitt_false
from qris.app.codec.tlv import (
    CRC_VALUE_LENGTH,
    TAG_COUNTRY_CODE,
    TAG_CRC,
    TAG_PAYLOAD_FORMAT,
    TAG_POINT_OF_INITIATION,
    TAG_TRANSACTION_AMOUNT,
    TLVDecodeError,
    TLVField,
    find_field,
    parse_tlv,
)
from qris.app.schemas.findings import (
    FindingCategory,
    FindingObject as Finding,
    FindingSource,
    Severity,
)
from qris.app.schemas.payment import DecodedField, PayloadVerification

_CANONICAL_AMOUNT = re.compile(r"^(0|[1-9][0-9]*)$")

STATIC_INITIATION = "11"


# ------------------------------------------------------------------
# Public checks
# ------------------------------------------------------------------


def run_payload_integrity_checks(payload: str) -> List[Finding]:
    """Run all payload checks and return their findings."""
    findings: List[Finding] = []

    # --------------------------------------------------------------
    # Encoding
    # --------------------------------------------------------------
    if not payload.isascii():
        offset = next(i for i, ch in enumerate(payload) if not ch.isascii())
        findings.append(
            Finding(
                finding_id="QRIS-CRIT-001",
                source=FindingSource.PAYLOAD_INTEGRITY,
                category=FindingCategory.ENCODING,
                severity=Severity.CRITICAL,
                title="Payload contains non-ASCII characters",
                description=(
                    "The payload contains characters outside the ASCII "
                    "range. The checksum is defined over single-byte "
                    "characters only."
                ),
                why_it_matters=(
                    "Wallets compute the checksum over the scanned bytes. "
                    "A non-ASCII character yields a checksum that no "
                    "compliant reader will reproduce."
                ),
                offset=offset,
            )
        )
        return findings

    # --------------------------------------------------------------
    # Tokenization
    # --------------------------------------------------------------
    try:
        fields = parse_tlv(payload)
    except TLVDecodeError as exc:
        findings.append(
            Finding(
                finding_id="QRIS-CRIT-002",
                source=FindingSource.PAYLOAD_INTEGRITY,
                category=FindingCategory.STRUCTURE,
                severity=Severity.CRITICAL,
                title="Payload is not a well-formed TLV sequence",
                description=str(exc),
                why_it_matters=(
                    "Readers decode the payload field by field. A broken "
                    "tag or length makes every following field unreadable."
                ),
                offset=exc.offset,
            )
        )
        return findings

    findings.extend(_check_checksum(payload, fields))
    findings.extend(_check_structure(fields))

    return findings


def verify_payload(payload: str) -> PayloadVerification:
    findings = run_payload_integrity_checks(payload)

    try:
        fields = parse_tlv(payload) if payload.isascii() else []
    except TLVDecodeError:
        fields = []

    return PayloadVerification(
        passed=not any(f.is_blocking for f in findings),
        fields=[
            DecodedField(tag=f.tag, name=f.name, length=f.length, value=f.value)
            for f in fields
        ],
        findings=findings,
    )


# ------------------------------------------------------------------
# Individual checks
# ------------------------------------------------------------------


def _check_checksum(payload: str, fields: List[TLVField]) -> List[Finding]:
    last: Optional[TLVField] = fields[-1] if fields else None

    if (
        last is None
        or last.tag != TAG_CRC
        or last.length != CRC_VALUE_LENGTH
    ):
        return [
            Finding(
                finding_id="QRIS-CRIT-003",
                source=FindingSource.PAYLOAD_INTEGRITY,
                category=FindingCategory.CHECKSUM,
                severity=Severity.CRITICAL,
                title="Checksum field missing",
                description=(
                    "The payload does not end with a tag 63 field of "
                    "length 04."
                ),
                why_it_matters=(
                    "Without a trailing checksum the payload cannot be "
                    "validated and is rejected by wallets."
                ),
                tag=TAG_CRC,
            )
        ]

    computed = crc16_ccitt_false(payload[:-CRC_VALUE_LENGTH])
    if last.value.upper() != computed:
        return [
            Finding(
                finding_id="QRIS-CRIT-004",
                source=FindingSource.PAYLOAD_INTEGRITY,
                category=FindingCategory.CHECKSUM,
                severity=Severity.CRITICAL,
                title="Checksum mismatch",
                description=(
                    f"The declared checksum {last.value} does not match "
                    f"the computed checksum {computed}."
                ),
                why_it_matters=(
                    "A checksum mismatch means the payload was altered "
                    "after encoding. The code will not be accepted."
                ),
                tag=TAG_CRC,
                offset=len(payload) - CRC_VALUE_LENGTH,
                metadata={"declared": last.value, "computed": computed},
            )
        ]

    return []


def _check_structure(fields: List[TLVField]) -> List[Finding]:
    findings: List[Finding] = []

    first = fields[0] if fields else None
    if first is None or first.tag != TAG_PAYLOAD_FORMAT or first.value != "01":
        findings.append(
            Finding(
                finding_id="QRIS-MAJ-005",
                source=FindingSource.PAYLOAD_INTEGRITY,
                category=FindingCategory.COMPLIANCE,
                severity=Severity.MAJOR,
                title="Payload format indicator missing or invalid",
                description=(
                    "The first field must be tag 00 with value '01'."
                ),
                why_it_matters=(
                    "Readers use the format indicator to recognize a "
                    "merchant-presented payment code."
                ),
                tag=TAG_PAYLOAD_FORMAT,
            )
        )

    if find_field(fields, TAG_COUNTRY_CODE) is None:
        findings.append(
            Finding(
                finding_id="QRIS-MAJ-006",
                source=FindingSource.PAYLOAD_INTEGRITY,
                category=FindingCategory.COMPLIANCE,
                severity=Severity.MAJOR,
                title="Country code missing",
                description="The payload has no tag 58 field.",
                why_it_matters=(
                    "The country code is mandatory. The amount field is "
                    "positioned relative to it."
                ),
                tag=TAG_COUNTRY_CODE,
            )
        )

    amount = find_field(fields, TAG_TRANSACTION_AMOUNT)
    if amount is not None and not _CANONICAL_AMOUNT.match(amount.value):
        findings.append(
            Finding(
                finding_id="QRIS-MAJ-007",
                source=FindingSource.PAYLOAD_INTEGRITY,
                category=FindingCategory.STRUCTURE,
                severity=Severity.MAJOR,
                title="Transaction amount is not canonical",
                description=(
                    f"Tag 54 value {amount.value!r} is not a whole decimal "
                    "number without leading zeros."
                ),
                why_it_matters=(
                    "Wallets may reject or misread the amount, charging "
                    "the customer a different total."
                ),
                tag=TAG_TRANSACTION_AMOUNT,
            )
        )

    initiation = find_field(fields, TAG_POINT_OF_INITIATION)
    if (
        amount is not None
        and initiation is not None
        and initiation.value == STATIC_INITIATION
    ):
        findings.append(
            Finding(
                finding_id="QRIS-INFO-008",
                source=FindingSource.PAYLOAD_INTEGRITY,
                category=FindingCategory.COMPLIANCE,
                severity=Severity.INFO,
                title="Amount embedded in a static code",
                description=(
                    "The point of initiation declares a static code (11) "
                    "while a transaction amount is present."
                ),
                why_it_matters=(
                    "Most wallets honour the embedded amount regardless; "
                    "some display it as editable."
                ),
                tag=TAG_POINT_OF_INITIATION,
            )
        )

    return findings
