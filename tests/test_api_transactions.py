"""Tests for transactions API endpoints."""

from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from nexius.api.routes import transactions as transactions_routes
from nexius.db.schema import Transaction
from nexius.transactions.ingest import MAX_SEARCH_HOURS, DuplicateTransactionError


def _now_ms(delta: timedelta = timedelta(0)) -> int:
    return int((datetime.now(timezone.utc) + delta).timestamp() * 1000)


def _event(**overrides) -> dict:
    event = {"timestamp": _now_ms(), "amount": 49.9}
    event.update(overrides)
    return event


def setup_test_data(engine) -> None:
    """Create recent and stale transactions for search tests."""
    stamp = "2026-01-05T10:00:00.000Z"
    rows = [
        Transaction(
            id="a" * 24,
            timestamp=_now_ms(-timedelta(hours=1)),
            amount=49.9,
            yape_code="ABC123",
            payer_normalized_name="JOSE PEREZ",
            license_id="lic-1",
            notification_text="Jose Perez te envió un pago por S/ 49.90",
            created_at=stamp,
            updated_at=stamp,
        ),
        Transaction(
            id="b" * 24,
            timestamp=_now_ms(-timedelta(hours=2)),
            amount=100.0,
            yape_code="ZZZ999",
            message="Pago de MARIA LOPEZ",
            created_at=stamp,
            updated_at=stamp,
        ),
        Transaction(
            id="c" * 24,
            timestamp=_now_ms(-timedelta(hours=72)),
            amount=49.9,
            yape_code="ABC123",
            created_at=stamp,
            updated_at=stamp,
        ),
    ]
    with Session(engine) as db_session:
        db_session.add_all(rows)
        db_session.commit()


class TestTransactionsAuth:
    """Test API-key protection of /api/transactions."""

    def test_post_without_key_is_401(self, client):
        """Missing key is rejected before ingestion."""
        response = client.post("/api/transactions", json=_event())
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    def test_search_without_key_is_401(self, client):
        """Search is protected too."""
        response = client.get("/api/transactions/search?code=ABC123")
        assert response.status_code == 401


class TestIngestSingle:
    """Test POST /api/transactions with one event."""

    def test_insert_returns_201(self, client, auth_headers, engine):
        """A new event is stored with a generated ID."""
        response = client.post("/api/transactions", json=_event(), headers=auth_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "ok"
        assert len(data["insertedId"]) == 24

        with Session(engine) as db_session:
            stored = db_session.get(Transaction, data["insertedId"])
            assert stored is not None
            assert stored.currency == "PEN"
            assert stored.transaction_type == ""

    def test_enrichment_is_applied(self, client, auth_headers, engine):
        """Payment code is upper-cased and payer name derived."""
        response = client.post(
            "/api/transactions",
            json=_event(yapeCode="abc123", contactName="  José   Pérez "),
            headers=auth_headers,
        )

        inserted_id = response.json()["insertedId"]
        with Session(engine) as db_session:
            stored = db_session.get(Transaction, inserted_id)
            assert stored.yape_code == "ABC123"
            assert stored.payer_normalized_name == "JOSE PEREZ"

    def test_non_numeric_amount_becomes_zero(self, client, auth_headers, engine):
        """Unusable amounts are stored as 0."""
        response = client.post(
            "/api/transactions", json=_event(amount="n/a"), headers=auth_headers
        )

        assert response.status_code == 201
        with Session(engine) as db_session:
            assert db_session.get(Transaction, response.json()["insertedId"]).amount == 0.0

    def test_resent_event_is_not_overwritten(self, client, auth_headers, engine):
        """Upserting an existing _id keeps the stored document."""
        tx_id = "d" * 24
        client.post("/api/transactions", json=_event(_id=tx_id, amount=10), headers=auth_headers)
        response = client.post(
            "/api/transactions", json=_event(_id=tx_id, amount=99), headers=auth_headers
        )

        assert response.status_code == 201
        assert response.json()["insertedId"] == tx_id
        with Session(engine) as db_session:
            assert db_session.get(Transaction, tx_id).amount == 10.0

    def test_missing_amount_is_400(self, client, auth_headers):
        """amount is required."""
        response = client.post(
            "/api/transactions", json={"timestamp": _now_ms()}, headers=auth_headers
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid payload", "details": "amount required"}

    def test_missing_timestamp_is_400(self, client, auth_headers):
        """timestamp is required."""
        response = client.post("/api/transactions", json={"amount": 1}, headers=auth_headers)
        assert response.json()["details"] == "timestamp required"

    def test_invalid_id_is_400(self, client, auth_headers):
        """_id must be a 24-char hex string."""
        response = client.post(
            "/api/transactions", json=_event(_id="not-an-id"), headers=auth_headers
        )
        assert response.status_code == 400
        assert response.json()["details"] == "invalid _id"

    def test_null_body_is_400(self, client, auth_headers):
        """A JSON null is an empty event."""
        response = client.post(
            "/api/transactions",
            content="null",
            headers={**auth_headers, "content-type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid payload"

    def test_malformed_json_is_400(self, client, auth_headers):
        """Unparseable JSON yields Invalid payload."""
        response = client.post(
            "/api/transactions",
            content="{not json",
            headers={**auth_headers, "content-type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid payload"

    def test_duplicate_is_409(self, client, auth_headers, monkeypatch):
        """A duplicate-key failure maps to 409 with the existing ID."""

        def duplicate(session, record):
            raise DuplicateTransactionError("e" * 24)

        monkeypatch.setattr(transactions_routes, "ingest_transaction", duplicate)

        response = client.post("/api/transactions", json=_event(), headers=auth_headers)

        assert response.status_code == 409
        assert response.json() == {"error": "Duplicate", "details": {"existingId": "e" * 24}}

    def test_storage_failure_is_generic_500(self, client, auth_headers, monkeypatch):
        """Unexpected failures do not leak details."""

        def boom(session, record):
            raise RuntimeError("disk full")

        monkeypatch.setattr(transactions_routes, "ingest_transaction", boom)

        response = client.post("/api/transactions", json=_event(), headers=auth_headers)

        assert response.status_code == 500
        assert response.json() == {"error": "Error interno del servidor"}


class TestIngestBatch:
    """Test POST /api/transactions with a list."""

    def test_batch_returns_200_with_ids(self, client, auth_headers):
        """Every event of a valid batch is inserted."""
        response = client.post(
            "/api/transactions", json=[_event(), _event(amount=5)], headers=auth_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["insertedCount"] == 2
        assert len(data["insertedIds"]) == 2

    def test_empty_batch_is_400(self, client, auth_headers):
        """An empty list is rejected."""
        response = client.post("/api/transactions", json=[], headers=auth_headers)
        assert response.status_code == 400
        assert response.json() == {"error": "Empty array"}

    def test_oversized_batch_is_413(self, client, auth_headers):
        """More than 50 events are rejected."""
        response = client.post(
            "/api/transactions", json=[_event() for _ in range(51)], headers=auth_headers
        )
        assert response.status_code == 413
        assert response.json() == {"error": "Batch too large"}

    def test_one_invalid_event_rejects_batch(self, client, auth_headers, engine):
        """Nothing is written when any event is invalid."""
        response = client.post(
            "/api/transactions",
            json=[_event(), {"timestamp": _now_ms()}],
            headers=auth_headers,
        )

        assert response.status_code == 400
        with Session(engine) as db_session:
            assert db_session.query(Transaction).count() == 0


class TestListTransactions:
    """Test GET /api/transactions."""

    def test_newest_first(self, client, auth_headers, engine):
        """Transactions are ordered by timestamp descending."""
        setup_test_data(engine)

        response = client.get("/api/transactions", headers=auth_headers)

        assert response.status_code == 200
        ids = [t["_id"] for t in response.json()]
        assert ids == ["a" * 24, "b" * 24, "c" * 24]

    def test_limit(self, client, auth_headers, engine):
        """limit caps the number of results."""
        setup_test_data(engine)

        response = client.get("/api/transactions?limit=1", headers=auth_headers)

        assert len(response.json()) == 1

    def test_limit_out_of_range_is_400(self, client, auth_headers):
        """limit must be between 1 and 1000."""
        response = client.get("/api/transactions?limit=0", headers=auth_headers)
        assert response.status_code == 400


class TestSearchTransactions:
    """Test GET /api/transactions/search."""

    def test_search_by_code_is_case_insensitive(self, client, auth_headers, engine):
        """Lower-case code matches the stored upper-case code."""
        setup_test_data(engine)

        response = client.get("/api/transactions/search?code=abc123", headers=auth_headers)

        data = response.json()
        assert data["count"] == 1
        assert data["matches"][0]["_id"] == "a" * 24

    def test_search_respects_window(self, client, auth_headers, engine):
        """A wider window includes older events."""
        setup_test_data(engine)

        response = client.get(
            "/api/transactions/search?code=ABC123&sinceHours=96", headers=auth_headers
        )

        assert response.json()["count"] == 2

    def test_search_by_amount_and_license(self, client, auth_headers, engine):
        """All criteria must hold."""
        setup_test_data(engine)

        response = client.get(
            "/api/transactions/search?amount=49.9&licenseId=lic-1", headers=auth_headers
        )
        assert response.json()["count"] == 1

        response = client.get(
            "/api/transactions/search?amount=100&licenseId=lic-1", headers=auth_headers
        )
        assert response.json()["count"] == 0

    def test_zero_amount_is_ignored(self, client, auth_headers, engine):
        """amount=0 does not narrow the results."""
        setup_test_data(engine)

        response = client.get("/api/transactions/search?amount=0", headers=auth_headers)

        assert response.json()["count"] == 2

    def test_huge_window_is_400(self, client, auth_headers):
        """sinceHours above the limit is rejected."""
        response = client.get(
            "/api/transactions/search?sinceHours=100000000", headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid payload"

    def test_window_at_limit_is_accepted(self, client, auth_headers, engine):
        """The largest allowed window includes every stored event."""
        setup_test_data(engine)

        response = client.get(
            f"/api/transactions/search?sinceHours={MAX_SEARCH_HOURS}", headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["count"] == 3

    def test_search_by_name_matches_payer(self, client, auth_headers, engine):
        """Accented input matches the normalized payer name."""
        setup_test_data(engine)

        response = client.get("/api/transactions/search?name=José%20Pérez", headers=auth_headers)

        assert [m["_id"] for m in response.json()["matches"]] == ["a" * 24]

    def test_search_by_name_matches_message_text(self, client, auth_headers, engine):
        """Names are also found inside the notification texts."""
        setup_test_data(engine)

        response = client.get("/api/transactions/search?name=maria%20lopez", headers=auth_headers)

        assert [m["_id"] for m in response.json()["matches"]] == ["b" * 24]

    def test_search_results_are_camel_case(self, client, auth_headers, engine):
        """Matches use the wire field names."""
        setup_test_data(engine)

        match = client.get(
            "/api/transactions/search?code=ABC123", headers=auth_headers
        ).json()["matches"][0]

        assert match["yapeCode"] == "ABC123"
        assert match["payerNormalizedName"] == "JOSE PEREZ"
