"""
Standardized finding schema.

Defines the canonical structure used to report issues identified by the
deterministic payload integrity checks.

This schema is:
- immutable
- severity-graded
- check-traceable (stable finding identifiers)

All findings returned by the verification endpoint MUST conform to it.
"""

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations (FROZEN CONTRACTS)
# ---------------------------------------------------------------------------


class Severity(str, Enum):
    """
    Severity level of a finding.

    Ordering is intentional and MUST remain stable.
    """

    CRITICAL = "critical"
    MAJOR = "major"
    MINOR = "minor"
    INFO = "info"


class FindingSource(str, Enum):
    """Originating subsystem of the finding."""

    PAYLOAD_INTEGRITY = "payload_integrity"
    TEMPLATE_CONFIGURATION = "template_configuration"


class FindingCategory(str, Enum):
    ENCODING = "encoding"
    STRUCTURE = "structure"
    CHECKSUM = "checksum"
    COMPLIANCE = "compliance"
    OTHER = "other"


# ---------------------------------------------------------------------------
# Canonical Finding Object (PUBLIC, FROZEN)
# ---------------------------------------------------------------------------


class FindingObject(BaseModel):
    """
    Canonical payload finding.

    Represents a single immutable observation. Findings are descriptive,
    not prescriptive.
    """

    finding_id: str = Field(
        ...,
        description="Stable identifier for the finding (e.g., 'QRIS-CRIT-004').",
    )

    source: FindingSource = Field(
        ...,
        description="Originating subsystem",
    )

    category: FindingCategory = Field(
        ...,
        description="High-level classification of the issue",
    )

    severity: Severity = Field(
        ...,
        description="Severity level of the finding",
    )

    title: str = Field(
        ...,
        description="Short human-readable summary of the finding",
    )

    description: str = Field(
        ...,
        description="Clear explanation of what the issue is",
    )

    why_it_matters: str = Field(
        ...,
        description="Explanation of impact on scanning or payment",
    )

    tag: Optional[str] = Field(
        None,
        description="TLV tag the finding refers to, if any",
    )

    offset: Optional[int] = Field(
        None,
        description="Character offset within the payload, if known",
    )

    metadata: Optional[Dict] = Field(
        None,
        description="Optional structured metadata for tooling or reviewers",
    )

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    @property
    def is_blocking(self) -> bool:
        return self.severity in {Severity.CRITICAL, Severity.MAJOR}
