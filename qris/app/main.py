"""
FastAPI entrypoint for the payment code service.

This module defines the public HTTP interface consumed by the checkout
flow: it derives an amount-bearing payment string from the configured
merchant template and verifies payment strings supplied by callers.

The application is stateless. The only process-wide value is the
immutable configuration loaded at startup. QR image rendering happens
downstream; this service returns the encoded payload only.
"""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from starlette.responses import Response

from qris.app.checks.payload_integrity import verify_payload
from qris.app.codec.amount import InvalidAmountError, generate_payment_code
from qris.app.config import QrisConfig
from qris.app.confirmation import build_confirmation_url
from qris.app.formatting import format_currency
from qris.app.schemas.payment import (
    PaymentCodeRequest,
    PaymentCodeResponse,
    PayloadVerification,
    VerificationRequest,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Presentation helpers (presentation-only)
# ---------------------------------------------------------------------------

def pretty_json(data: Any) -> str:
    """
    Pretty-print JSON for human-readable output.

    PRESENTATION ONLY: payment payloads are never derived from it.
    """
    return json.dumps(
        data,
        ensure_ascii=False,
        allow_nan=False,
        indent=2,
        separators=(", ", ": "),
    )


class PrettyJSONResponse(Response):
    """Pretty-printed JSON response for human-readable console output."""

    media_type = "application/json"

    def render(self, content: Any) -> bytes:
        return pretty_json(content).encode("utf-8")


# ---------------------------------------------------------------------------
# Startup
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application startup hook.

    Configuration is loaded once and treated as immutable for the lifetime
    of the process. An invalid merchant template fails startup.
    """
    config = getattr(app.state, "config", None)
    if config is None:
        config = QrisConfig.from_env()
        app.state.config = config

    logger.info(
        "QRIS service configured (template length=%d, max amount=%d)",
        len(config.BASE_TEMPLATE),
        config.MAX_AMOUNT,
    )
    yield


# ---------------------------------------------------------------------------
# Application setup
# ---------------------------------------------------------------------------

app = FastAPI(
    title="QRIS Payment Code Service",
    description="Dynamic amount injection for merchant-presented QRIS codes",
    version="0.1.0",
    lifespan=lifespan,
)


# ---------------------------------------------------------------------------
# API Routes
# ---------------------------------------------------------------------------

@app.post(
    "/payment-codes",
    response_model=PaymentCodeResponse,
    summary="Generate a payment code for an order total",
)
def create_payment_code(request: PaymentCodeRequest) -> PaymentCodeResponse:
    """
    Embed the order total into the merchant template.

    The returned payload is meant to be rendered as a QR code by the
    caller. Payment confirmation is manual via the confirmation link.
    """
    config: QrisConfig = app.state.config

    if request.amount > config.MAX_AMOUNT:
        raise HTTPException(
            status_code=422,
            detail=(
                f"Amount exceeds maximum allowed total of "
                f"{format_currency(config.MAX_AMOUNT)}"
            ),
        )

    try:
        code = generate_payment_code(config.BASE_TEMPLATE, request.amount)
    except InvalidAmountError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    logger.info(
        "Generated payment code order_id=%s amount=%d checksum=%s",
        request.order_id,
        code.amount,
        code.checksum,
    )

    return PaymentCodeResponse(
        payload=code.payload,
        amount=code.amount,
        amount_display=format_currency(code.amount),
        checksum=code.checksum,
        confirmation_url=build_confirmation_url(
            amount=code.amount,
            contact_number=config.CONFIRMATION_CONTACT,
            merchant_label=config.MERCHANT_LABEL,
            order_id=request.order_id,
        ),
    )


@app.post(
    "/payment-codes/verify",
    response_model=PayloadVerification,
    response_class=PrettyJSONResponse,
    summary="Verify a payment string",
)
def verify_payment_code(request: VerificationRequest) -> PayloadVerification:
    """Decode a payment string and run deterministic integrity checks."""
    result = verify_payload(request.payload)

    if not result.passed:
        logger.warning(
            "Payment string failed verification: %s",
            ", ".join(f.finding_id for f in result.findings),
        )

    return result


# ---------------------------------------------------------------------------
# Health Check
# ---------------------------------------------------------------------------

@app.get(
    "/health",
    summary="Service health check",
)
def health_check() -> JSONResponse:
    """Simple health check endpoint."""
    return JSONResponse(
        content={
            "status": "ok",
            "service": "qris",
        }
    )
