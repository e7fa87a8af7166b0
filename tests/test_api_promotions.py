"""Tests for promotions API endpoint."""

import json
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from nexius.db import repo
from nexius.db.schema import Promotion


def setup_test_data(engine, *, stock: int = 5, ends_in: timedelta = timedelta(days=3)) -> str:
    """Create one promotion. Returns its slug."""
    now = datetime.now(timezone.utc)
    with Session(engine) as db_session:
        db_session.add(
            Promotion(
                id="p" * 24,
                title="Landing -30%",
                slug="landing-30",
                description="Descuento en landing pages",
                start_date=now - timedelta(days=1),
                end_date=now + ends_in,
                promotion_id="PROMO-30",
                stock=stock,
                status="active",
                featured=True,
                discount_percentage=30,
                original_price=1000,
                discounted_price=700,
                cover_image="/img/promo.jpg",
                author_json=json.dumps({"id": "a1", "name": "Ana"}),
                created_at=now,
                updated_at=now,
            )
        )
        db_session.commit()
    return "landing-30"


class TestGetPromotionBySlug:
    """Test GET /api/promotions/slug/{slug}."""

    def test_returns_promotion(self, client, engine):
        """Existing slug returns the promotion in camelCase."""
        slug = setup_test_data(engine)

        response = client.get(f"/api/promotions/slug/{slug}")

        assert response.status_code == 200
        data = response.json()
        assert data["slug"] == slug
        assert data["promotionId"] == "PROMO-30"
        assert data["discountPercentage"] == 30
        assert data["author"]["name"] == "Ana"

    def test_running_promotion_is_valid(self, client, engine):
        """In-range, in-stock promotion is flagged valid with a countdown."""
        slug = setup_test_data(engine)

        data = client.get(f"/api/promotions/slug/{slug}").json()

        assert data["isValid"] is True
        assert data["timeRemaining"]["days"] in (2, 3)
        assert data["timeRemaining"]["total"] > 0

    def test_sold_out_promotion_is_not_valid(self, client, engine):
        """Zero stock makes the promotion invalid."""
        slug = setup_test_data(engine, stock=0)

        data = client.get(f"/api/promotions/slug/{slug}").json()

        assert data["isValid"] is False

    def test_expired_promotion_has_zero_countdown(self, client, engine):
        """Past end date yields an all-zero countdown."""
        slug = setup_test_data(engine, ends_in=-timedelta(hours=1))

        data = client.get(f"/api/promotions/slug/{slug}").json()

        assert data["isValid"] is False
        assert data["timeRemaining"] == {
            "days": 0,
            "hours": 0,
            "minutes": 0,
            "seconds": 0,
            "total": 0,
        }

    def test_missing_promotion_returns_404(self, client):
        """Unknown slug yields the localized 404 body."""
        response = client.get("/api/promotions/slug/nope")

        assert response.status_code == 404
        assert response.json() == {"error": "Promoción no encontrada"}

    def test_data_access_failure_returns_500(self, client, monkeypatch):
        """A failing lookup yields the generic 500 body."""

        def boom(session, slug):
            raise RuntimeError("database unavailable")

        monkeypatch.setattr(repo, "get_promotion_by_slug", boom)

        response = client.get("/api/promotions/slug/landing-30")

        assert response.status_code == 500
        assert response.json() == {"error": "Error interno del servidor"}
