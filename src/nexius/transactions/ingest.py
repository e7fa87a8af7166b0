"""Transaction ingestion and payment matching.

Events arrive from the mobile notification listener one at a time or in
small batches. Re-sent events carry their original _id and are upserted,
so retries from the device are idempotent.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from nexius.core.identity import is_object_id, new_object_id, normalize_person_name
from nexius.core.timestamps import epoch_ms, format_timestamp, utcnow
from nexius.db import repo
from nexius.models.domain import TransactionEntity
from nexius.models.types import TransactionRecord

logger = logging.getLogger(__name__)

MAX_BATCH = 50
DEFAULT_CURRENCY = "PEN"
DEFAULT_SEARCH_HOURS = 48
MAX_SEARCH_HOURS = 24 * 365 * 10
MAX_SEARCH_RESULTS = 20


class DuplicateTransactionError(Exception):
    """Raised when a transaction ID is already stored."""

    def __init__(self, transaction_id: str):
        self.transaction_id = transaction_id
        super().__init__(f"Duplicate transaction: {transaction_id}")


@dataclass
class BatchResult:
    """Outcome of a batch ingestion."""

    inserted_ids: list[str] = field(default_factory=list)
    skipped_ids: list[str] = field(default_factory=list)

    @property
    def inserted_count(self) -> int:
        return len(self.inserted_ids)


def validate_transaction(raw: Any) -> str | None:
    """Check the minimal shape of an incoming event.

    Returns:
        None when acceptable, otherwise a short reason.
    """
    if raw is None or not isinstance(raw, dict):
        return "empty"
    if "amount" not in raw:
        return "amount required"
    if "timestamp" not in raw:
        return "timestamp required"
    tx_id = raw.get("_id")
    if tx_id and not (isinstance(tx_id, str) and is_object_id(tx_id)):
        return "invalid _id"
    return None


def coerce_amount(value: Any) -> float:
    """Best-effort numeric amount; anything unusable becomes 0."""
    if isinstance(value, bool):
        return float(value)
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    return amount if math.isfinite(amount) else 0.0


def parse_record(raw: dict) -> TransactionRecord:
    """Validate a raw event into a TransactionRecord.

    Raises:
        pydantic.ValidationError: If a field has the wrong type.
    """
    return TransactionRecord.model_validate({**raw, "amount": coerce_amount(raw.get("amount"))})


def build_entity(record: TransactionRecord, now: datetime) -> TransactionEntity:
    """Apply storage defaults and payer enrichment to a record."""
    stamp = format_timestamp(now)

    payer_name = record.payer_normalized_name
    if not payer_name and record.contact_name:
        payer_name = normalize_person_name(record.contact_name) or None

    products = None
    if record.products is not None:
        products = [p.model_dump(by_alias=True, exclude_none=True) for p in record.products]

    return TransactionEntity(
        id=record.id or new_object_id(),
        timestamp=record.timestamp,
        amount=record.amount,
        currency=record.currency or DEFAULT_CURRENCY,
        transaction_type=record.transaction_type or "",
        created_at=stamp,
        updated_at=stamp,
        date=record.date,
        contact_name=record.contact_name,
        contact_phone=record.contact_phone,
        contact_email=record.contact_email,
        contact_document=record.contact_document,
        product_name=record.product_name,
        products=products,
        yape_code=record.yape_code.strip().upper() if record.yape_code else None,
        payer_normalized_name=payer_name,
        license_id=record.license_id,
        license_key=record.license_key,
        message=record.message,
        notification_title=record.notification_title,
        notification_text=record.notification_text,
        notification_big_text=record.notification_big_text,
        package_name=record.package_name,
        device_id=record.device_id,
        app_version=record.app_version,
    )


def ingest_transaction(
    session: Session, record: TransactionRecord, now: datetime | None = None
) -> TransactionEntity:
    """Store one event: upsert when it carries an _id, insert otherwise.

    Raises:
        DuplicateTransactionError: If the insert collides with a stored ID.
    """
    if now is None:
        now = utcnow()

    entity = build_entity(record, now)
    try:
        if record.id:
            stored = repo.upsert_transaction(session, entity, entity.updated_at)
        else:
            stored = repo.insert_transaction(session, entity)
        repo.commit(session)
    except IntegrityError as e:
        repo.rollback(session)
        raise DuplicateTransactionError(entity.id) from e

    return stored


def ingest_batch(
    session: Session, records: list[TransactionRecord], now: datetime | None = None
) -> BatchResult:
    """Store a batch of events, skipping duplicates.

    Each event commits on its own so one duplicate does not undo the rest.
    """
    result = BatchResult()
    for record in records:
        try:
            stored = ingest_transaction(session, record, now)
        except DuplicateTransactionError as e:
            logger.info("Skipping duplicate transaction %s", e.transaction_id)
            result.skipped_ids.append(e.transaction_id)
            continue
        result.inserted_ids.append(stored.id)
    return result


def search_recent_transactions(
    session: Session,
    *,
    code: str | None = None,
    amount: float | None = None,
    name: str | None = None,
    license_id: str | None = None,
    since_hours: int = DEFAULT_SEARCH_HOURS,
    now: datetime | None = None,
) -> list[TransactionEntity]:
    """Find recent events that could settle a pending payment.

    Args:
        code: Payment code as typed by the payer (case-insensitive).
        amount: Exact amount; None or 0 does not filter.
        name: Payer name, matched after accent/case normalization.
        license_id: License the event was already linked to.
        since_hours: Look-back window, capped at MAX_SEARCH_HOURS.
        now: Current time (defaults to utcnow).

    Returns:
        Up to MAX_SEARCH_RESULTS transactions, newest first.
    """
    if now is None:
        now = utcnow()

    since_ms = epoch_ms(now - timedelta(hours=min(since_hours, MAX_SEARCH_HOURS)))
    normalized = normalize_person_name(name) if name else None

    return repo.search_transactions(
        session,
        since_ms=since_ms,
        code=code.strip().upper() if code else None,
        amount=amount,
        license_id=license_id,
        normalized_name=normalized or None,
        limit=MAX_SEARCH_RESULTS,
    )
