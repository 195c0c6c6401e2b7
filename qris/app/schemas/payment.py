"""
HTTP contracts for payment code generation and verification.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from qris.app.schemas.findings import FindingObject as Finding


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


class PaymentCodeRequest(BaseModel):
    amount: int = Field(
        ...,
        ge=0,
        description="Order total in whole Rupiah",
    )
    order_id: Optional[str] = Field(
        None,
        max_length=128,
        description="Order reference quoted in the confirmation message",
    )

    model_config = ConfigDict(extra="forbid", strict=True)


class PaymentCodeResponse(BaseModel):
    payload: str = Field(
        ...,
        description="Payment string to be rendered as a QR code",
    )
    amount: int
    amount_display: str = Field(
        ...,
        description="Localized amount (presentation only)",
    )
    checksum: str
    confirmation_url: str = Field(
        ...,
        description="Pre-filled chat link for manual payment confirmation",
    )

    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Verification
# ---------------------------------------------------------------------------


class VerificationRequest(BaseModel):
    payload: str = Field(..., min_length=1, max_length=512)

    model_config = ConfigDict(extra="forbid")


class DecodedField(BaseModel):
    """Presentation view of a top-level TLV field."""

    tag: str
    name: str
    length: int
    value: str

    model_config = ConfigDict(frozen=True)


class PayloadVerification(BaseModel):
    """
    Result of deterministic payload verification.

    ``passed`` is False when any critical or major finding is present.
    ``fields`` is empty when the payload could not be tokenized.
    """

    passed: bool
    fields: List[DecodedField] = Field(default_factory=list)
    findings: List[Finding] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)
