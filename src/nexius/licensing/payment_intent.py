"""Payment intents for license renewals.

A payment intent is a short code the customer includes when paying by
mobile wallet, so the incoming notification can be matched back to the
license. Database operations go through repo.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from nexius.core.identity import generate_payment_code
from nexius.core.timestamps import format_timestamp, parse_timestamp, utcnow
from nexius.db import repo
from nexius.models.domain import LicenseEntity

DEFAULT_CODE_TTL = timedelta(minutes=30)


def has_active_code(license_: LicenseEntity, now: datetime) -> bool:
    """Check whether the license holds a code that has not expired yet."""
    if not license_.current_payment_code:
        return False
    expires_at = parse_timestamp(license_.current_payment_code_expires_at or "")
    return expires_at is not None and expires_at > now


def create_payment_intent_for_license(
    session: Session,
    license_id: str,
    *,
    ttl: timedelta = DEFAULT_CODE_TTL,
    code_length: int = 6,
    now: datetime | None = None,
) -> LicenseEntity | None:
    """Issue (or reuse) a payment code for a license.

    An unexpired code is returned unchanged so that repeated requests from
    the payment page do not invalidate a code the customer already copied.

    Args:
        session: Database session.
        license_id: License to issue the code for.
        ttl: Code lifetime.
        code_length: Number of characters in a new code.
        now: Current time (defaults to utcnow).

    Returns:
        The license with current_payment_code set, or None if not found.
    """
    if now is None:
        now = utcnow()

    license_ = repo.get_license(session, license_id)
    if license_ is None:
        return None

    if has_active_code(license_, now):
        return license_

    code = generate_payment_code(code_length)
    expires_at = format_timestamp(now + ttl)

    repo.set_license_payment_code(session, license_id, code, expires_at)
    repo.commit(session)

    license_.current_payment_code = code
    license_.current_payment_code_expires_at = expires_at
    license_.payment_verification_state = "awaiting"
    return license_
