#!/usr/bin/env python3
"""Seed a demo database for the dashboard frontend.

Usage:
    python scripts/seed_demo.py

This script:
1. Initializes the demo database
2. Seeds blog posts, a promotion, a license and team members
3. Ingests a few sample payment notifications
"""

from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add src to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from nexius.core.identity import new_object_id  # noqa: E402
from nexius.core.timestamps import epoch_ms  # noqa: E402
from nexius.db import repo  # noqa: E402
from nexius.db.session import init_db, session_scope  # noqa: E402
from nexius.models.domain import (  # noqa: E402
    AuthorEntity,
    BlogPostEntity,
    LicenseEntity,
    PromotionEntity,
    TeamMemberEntity,
    TechnologyEntity,
)
from nexius.models.types import TransactionRecord  # noqa: E402
from nexius.transactions.ingest import ingest_batch  # noqa: E402

# Constants
DEMO_DB_PATH = PROJECT_ROOT / "demo.db"

DEMO_LICENSE_ID = "demo-license"
DEMO_AUTHOR = AuthorEntity(id="author-1", name="Equipo Nexius")


def seed_content(now: datetime) -> bool:
    """Seed blog posts, promotion, license and team.

    Returns:
        False if the demo data was already there.
    """
    with session_scope(DEMO_DB_PATH) as session:
        if repo.get_license(session, DEMO_LICENSE_ID) is not None:
            print(f"Demo data already exists: {DEMO_DB_PATH}")
            return False

        print("Creating blog posts...")
        posts = [
            ("bienvenidos", "Bienvenidos a Nexius", "Noticias", ["nexius", "anuncios"]),
            ("automatiza-tu-negocio", "Automatiza tu negocio", "Tecnología", ["automatización"]),
        ]
        for slug, title, category, tags in posts:
            repo.create_blog_post(
                session,
                BlogPostEntity(
                    id=new_object_id(),
                    title=title,
                    slug=slug,
                    content=f"# {title}\n\nContenido de ejemplo.",
                    excerpt="Contenido de ejemplo.",
                    cover_image="/images/blog/default.jpg",
                    author=DEMO_AUTHOR,
                    tags=tags,
                    category=category,
                    featured=slug == "bienvenidos",
                    status="published",
                    read_time=1,
                    created_at=now,
                    updated_at=now,
                    published_at=now,
                ),
            )

        print("Creating promotion...")
        repo.create_promotion(
            session,
            PromotionEntity(
                id=new_object_id(),
                title="Landing page -30%",
                slug="landing-page-30",
                description="Tu landing page con 30% de descuento.",
                start_date=now - timedelta(days=1),
                end_date=now + timedelta(days=14),
                promotion_id="PROMO-LANDING-30",
                stock=10,
                status="active",
                featured=True,
                cover_image="/images/promos/landing.jpg",
                author=DEMO_AUTHOR,
                created_at=now,
                updated_at=now,
                discount_percentage=30,
                original_price=1000,
                discounted_price=700,
            ),
        )

        print("Creating license...")
        repo.create_license(
            session,
            LicenseEntity(
                id=DEMO_LICENSE_ID,
                license_key="NX-DEMO-0001",
                company_name="Bodega Demo SAC",
                amount=49.9,
                currency="PEN",
                frequency="monthly",
                status="pending",
                payment_verification_state="idle",
                domain="demo.example.com",
            ),
        )

        print("Creating team members...")
        repo.create_team_member(
            session,
            TeamMemberEntity(
                id=new_object_id(),
                public_id="ana-torres",
                name="Ana Torres",
                position="Full-stack developer",
                bio="Construye el dashboard.",
                image="/images/team/ana.jpg",
                active=True,
                links={"github": "https://github.com/ana", "website": "https://ana.dev"},
                technologies=[TechnologyEntity(name="Python", icon="python")],
                profile_options={"showTechnologies": True},
            ),
        )

    print("Content seeded successfully!")
    return True


def seed_transactions(now: datetime) -> None:
    """Ingest sample payment notifications."""
    records = [
        TransactionRecord(
            timestamp=epoch_ms(now - timedelta(hours=i)),
            amount=49.9,
            transaction_type="yape",
            contact_name=name,
            yape_code=code,
            notification_text=f"{name} te envió un pago por S/ 49.90",
        )
        for i, (name, code) in enumerate([("José Pérez", "ab12cd"), ("María López", None)])
    ]
    with session_scope(DEMO_DB_PATH) as session:
        result = ingest_batch(session, records, now)
    print(f"  Ingested {result.inserted_count} transactions")


def main() -> int:
    """Main entry point."""
    print("=" * 60)
    print("Nexius Demo Seeding Script")
    print("=" * 60)

    now = datetime.now(timezone.utc)

    print("\n[1/3] Initializing database...")
    init_db(DEMO_DB_PATH)

    print("\n[2/3] Seeding content...")
    created = seed_content(now)

    print("\n[3/3] Ingesting transactions...")
    if created:
        seed_transactions(now)

    print("\n" + "=" * 60)
    print("Demo seeding complete!")
    print(f"Database: {DEMO_DB_PATH}")
    print("Run with: NEXIUS_DB_PATH=demo.db NEXIUS_API_KEY=... nexius-api")
    print("=" * 60)

    return 0


if __name__ == "__main__":
    sys.exit(main())
