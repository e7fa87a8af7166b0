"""Promotion helpers: validity window and countdown."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from nexius.models.domain import PromotionEntity
from nexius.models.types import TimeRemaining


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; they are stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_promotion_valid(promotion: PromotionEntity, now: datetime | None = None) -> bool:
    """Active, within its date range, and still in stock."""
    if now is None:
        now = datetime.now(timezone.utc)
    return (
        promotion.status == "active"
        and _as_utc(promotion.start_date) <= now <= _as_utc(promotion.end_date)
        and promotion.stock > 0
    )


def get_time_remaining(end_date: datetime, now: datetime | None = None) -> TimeRemaining:
    """Break the time until end_date into days/hours/minutes/seconds.

    All fields are zero once end_date has passed.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    total = (_as_utc(end_date) - now) // timedelta(milliseconds=1)
    if total <= 0:
        return TimeRemaining(days=0, hours=0, minutes=0, seconds=0, total=0)

    days, rest = divmod(total, 24 * 60 * 60 * 1000)
    hours, rest = divmod(rest, 60 * 60 * 1000)
    minutes, rest = divmod(rest, 60 * 1000)
    seconds = rest // 1000

    return TimeRemaining(days=days, hours=hours, minutes=minutes, seconds=seconds, total=total)
