"""
Runtime configuration for the payment code service.

This module centralizes environment-driven configuration: the static
merchant template the codec derives every payment string from, safety
limits, and the contact details used for manual payment confirmation.

Configuration is read once at startup and is immutable afterwards. The
codec itself never reads configuration; the template is passed in
explicitly on every call.
"""

from __future__ import annotations

import os
import re

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from qris.app.checks.payload_integrity import run_payload_integrity_checks

# Static merchant template of the original deployment (point of
# initiation 11, no amount, checksum DE60).
DEFAULT_BASE_TEMPLATE = (
    "00020101021126670016COM.NOBUBANK.WWW01189360050300000879140214"
    "353153527368570303UMI51440014ID.CO.QRIS.WWW0215ID20232679645180303"
    "UMI5204481253033605802ID5920MEFZ STORE OK11724136006BEKASI61051711"
    "162070703A016304DE60"
)

_CONTACT_NUMBER = re.compile(r"^\+?[0-9]{8,15}$")


class QrisConfig(BaseModel):
    """
    Runtime configuration.

    Environment-driven, read-only at runtime.
    """

    # ------------------------------------------------------------------
    # Merchant template
    # ------------------------------------------------------------------

    VALIDATE_TEMPLATE: bool = Field(
        True,
        description=(
            "Reject a base template that fails payload integrity checks "
            "at startup"
        ),
    )

    BASE_TEMPLATE: str = Field(
        DEFAULT_BASE_TEMPLATE,
        min_length=8,
        description="Static merchant payment string, including its checksum",
    )

    # ------------------------------------------------------------------
    # Safety limits
    # ------------------------------------------------------------------

    MAX_AMOUNT: int = Field(
        10_000_000_000,
        gt=0,
        description="Largest accepted order total in whole Rupiah",
    )

    # ------------------------------------------------------------------
    # Manual confirmation
    # ------------------------------------------------------------------

    CONFIRMATION_CONTACT: str = Field(
        "085776568948",
        description="Merchant chat number for payment confirmation",
    )

    MERCHANT_LABEL: str = Field(
        "KOGRAPH",
        min_length=1,
        description="Merchant name quoted in the confirmation message",
    )

    # ------------------------------------------------------------------
    # Validators (Pydantic v2)
    # ------------------------------------------------------------------

    @field_validator("BASE_TEMPLATE")
    @classmethod
    def template_must_be_valid(cls, v: str, info: ValidationInfo) -> str:
        if not v.isascii():
            raise ValueError("BASE_TEMPLATE must contain ASCII characters only.")

        if info.data.get("VALIDATE_TEMPLATE", True):
            blocking = [
                f for f in run_payload_integrity_checks(v) if f.is_blocking
            ]
            if blocking:
                raise ValueError(
                    "BASE_TEMPLATE failed integrity checks: "
                    + ", ".join(
                        f"{f.finding_id} ({f.title})" for f in blocking
                    )
                )
        return v

    @field_validator("CONFIRMATION_CONTACT")
    @classmethod
    def contact_must_be_phone_number(cls, v: str) -> str:
        if not _CONTACT_NUMBER.match(v):
            raise ValueError(
                f"CONFIRMATION_CONTACT is not a phone number: {v!r}"
            )
        return v

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls) -> "QrisConfig":
        """
        Load configuration from environment variables.

        All values are parsed once at startup and must remain immutable.
        """

        def env_bool(name: str, default: bool) -> bool:
            raw = os.getenv(name)
            if raw is None:
                return default
            return raw.lower() in {"1", "true", "yes", "on"}

        return cls(
            VALIDATE_TEMPLATE=env_bool("QRIS_VALIDATE_TEMPLATE", True),
            BASE_TEMPLATE=os.getenv(
                "QRIS_BASE_TEMPLATE", DEFAULT_BASE_TEMPLATE
            ).strip(),
            MAX_AMOUNT=int(
                os.getenv("QRIS_MAX_AMOUNT", "10000000000")
            ),
            CONFIRMATION_CONTACT=os.getenv(
                "QRIS_CONFIRMATION_CONTACT", "085776568948"
            ),
            MERCHANT_LABEL=os.getenv(
                "QRIS_MERCHANT_LABEL", "KOGRAPH"
            ),
        )

    model_config = {
        "frozen": True,
    }
