"""Licenses API endpoint.

POST /api/licenses/payment-intent/{license_id} - Issue a payment code
"""

from __future__ import annotations

import logging
from datetime import timedelta

from fastapi import APIRouter, Depends

from nexius.api.deps import get_db_session, get_settings
from nexius.api.errors import MSG_LICENSE_NOT_FOUND, InternalServerError, NotFoundError
from nexius.core.config import Settings
from nexius.db.repo import DbSession
from nexius.licensing.payment_intent import create_payment_intent_for_license
from nexius.models.types import ErrorResponse, PaymentIntentResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["licenses"], responses={500: {"model": ErrorResponse}})


@router.post(
    "/licenses/payment-intent/{license_id}",
    response_model=PaymentIntentResponse,
    responses={404: {"model": ErrorResponse}},
)
def create_payment_intent(
    license_id: str,
    session: DbSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> PaymentIntentResponse:
    """Issue or reuse the payment code for a license.

    Args:
        license_id: License to pay.
        session: Database session (injected).
        settings: Service settings (injected).

    Returns:
        PaymentIntentResponse with the code and its expiry.

    Raises:
        NotFoundError: 404 if the license does not exist.
        InternalServerError: 500 carrying the failure message.
    """
    try:
        license_ = create_payment_intent_for_license(
            session,
            license_id,
            ttl=timedelta(minutes=settings.payment_code_ttl_minutes),
            code_length=settings.payment_code_length,
        )
    except Exception as exc:
        logger.error("Error creating payment intent for license %s: %s", license_id, exc, exc_info=True)
        # Dashboard shows this message to the operator
        raise InternalServerError(str(exc)) from exc

    if license_ is None:
        raise NotFoundError(MSG_LICENSE_NOT_FOUND)

    return PaymentIntentResponse(
        license_id=license_.id,
        code=license_.current_payment_code,
        expires_at=license_.current_payment_code_expires_at,
    )
