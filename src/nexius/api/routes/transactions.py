"""Transactions API endpoints (API-key protected).

POST /api/transactions - Ingest one event or a batch
GET /api/transactions - Most recent events
GET /api/transactions/search - Find events matching a pending payment
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Body, Depends, Query, Response, status
from pydantic import ValidationError

from nexius.api.auth import verify_api_key
from nexius.api.deps import get_db_session
from nexius.api.errors import (
    MSG_INVALID_PAYLOAD,
    BadRequestError,
    ConflictError,
    InternalServerError,
    PayloadTooLargeError,
)
from nexius.db import repo
from nexius.db.repo import DbSession
from nexius.models.domain import TransactionEntity
from nexius.models.types import (
    ErrorResponse,
    TransactionBatchResponse,
    TransactionIngestResponse,
    TransactionRecord,
    TransactionSearchResponse,
)
from nexius.transactions.ingest import (
    DEFAULT_SEARCH_HOURS,
    MAX_BATCH,
    MAX_SEARCH_HOURS,
    DuplicateTransactionError,
    ingest_batch,
    ingest_transaction,
    parse_record,
    search_recent_transactions,
    validate_transaction,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["transactions"],
    dependencies=[Depends(verify_api_key)],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)


def _to_record(entity: TransactionEntity) -> TransactionRecord:
    """Convert TransactionEntity to its wire model."""
    return TransactionRecord.model_validate(asdict(entity))


def _parse_or_reject(raw: Any) -> TransactionRecord:
    """Validate one raw event, raising a 400 with the reason."""
    reason = validate_transaction(raw)
    if reason is not None:
        raise BadRequestError(MSG_INVALID_PAYLOAD, details=reason)
    try:
        return parse_record(raw)
    except ValidationError as e:
        raise BadRequestError(MSG_INVALID_PAYLOAD, details=e.errors(include_url=False)) from e


@router.post(
    "/transactions",
    response_model=TransactionIngestResponse | TransactionBatchResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}, 413: {"model": ErrorResponse}},
)
def ingest_transactions(
    response: Response,
    payload: Any = Body(...),
    session: DbSession = Depends(get_db_session),
) -> TransactionIngestResponse | TransactionBatchResponse:
    """Ingest a single event (201) or a batch of events (200).

    Args:
        response: Outgoing response (status overridden for batches).
        payload: One event object or a list of at most MAX_BATCH events.
        session: Database session (injected).

    Raises:
        BadRequestError: 400 for an empty batch or an invalid event.
        PayloadTooLargeError: 413 for batches over MAX_BATCH.
        ConflictError: 409 if a single event duplicates a stored ID.
    """
    if isinstance(payload, list):
        if not payload:
            raise BadRequestError("Empty array")
        if len(payload) > MAX_BATCH:
            raise PayloadTooLargeError("Batch too large")

        # Reject the whole batch before writing anything
        records = [_parse_or_reject(raw) for raw in payload]

        try:
            result = ingest_batch(session, records)
        except Exception as exc:
            logger.error("Error ingesting transaction batch: %s", exc, exc_info=True)
            raise InternalServerError() from exc

        logger.info(
            "Ingested transaction batch: inserted=%s, skipped=%s",
            result.inserted_count,
            len(result.skipped_ids),
        )
        response.status_code = status.HTTP_200_OK
        return TransactionBatchResponse(
            inserted_count=result.inserted_count,
            inserted_ids=result.inserted_ids,
        )

    record = _parse_or_reject(payload)

    try:
        stored = ingest_transaction(session, record)
    except DuplicateTransactionError as exc:
        raise ConflictError("Duplicate", details={"existingId": exc.transaction_id}) from exc
    except Exception as exc:
        logger.error("Error ingesting transaction: %s", exc, exc_info=True)
        raise InternalServerError() from exc

    return TransactionIngestResponse(inserted_id=stored.id)


@router.get("/transactions", response_model=list[TransactionRecord])
def list_transactions(
    limit: int = Query(100, ge=1, le=1000),
    session: DbSession = Depends(get_db_session),
) -> list[TransactionRecord]:
    """List the most recent transactions, newest first."""
    try:
        return [_to_record(t) for t in repo.find_transactions(session, limit)]
    except Exception as exc:
        logger.error("Error fetching transactions: %s", exc, exc_info=True)
        raise InternalServerError() from exc


@router.get("/transactions/search", response_model=TransactionSearchResponse)
def search_transactions(
    code: str | None = None,
    amount: float | None = None,
    name: str | None = None,
    license_id: str | None = Query(None, alias="licenseId"),
    since_hours: int = Query(DEFAULT_SEARCH_HOURS, alias="sinceHours", ge=1, le=MAX_SEARCH_HOURS),
    session: DbSession = Depends(get_db_session),
) -> TransactionSearchResponse:
    """Find recent transactions by payment code, amount, payer name or license.

    Example: /api/transactions/search?code=ABC123&amount=100&name=Carlos&sinceHours=24
    """
    try:
        matches = search_recent_transactions(
            session,
            code=code.strip() if code else None,
            amount=amount,
            name=name.strip() if name else None,
            license_id=license_id.strip() if license_id else None,
            since_hours=since_hours,
        )
    except Exception as exc:
        logger.error("Error searching transactions: %s", exc, exc_info=True)
        raise InternalServerError() from exc

    records = [_to_record(t) for t in matches]
    return TransactionSearchResponse(matches=records, count=len(records))
