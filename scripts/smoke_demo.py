#!/usr/bin/env python3
"""Smoke test for the demo database.

Validates that the demo data was seeded correctly and that the public
and API-key protected endpoints answer against it.

Usage:
    python scripts/smoke_demo.py

Exit codes:
    0: All checks passed
    1: Some checks failed
"""

from __future__ import annotations

import sys
from pathlib import Path

# Add src to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from fastapi.testclient import TestClient  # noqa: E402

from nexius.api.app import create_app  # noqa: E402
from nexius.core.config import Settings  # noqa: E402

# Constants
DEMO_DB_PATH = PROJECT_ROOT / "demo.db"
DEMO_LICENSE_ID = "demo-license"
SMOKE_API_KEY = "smoke-api-key"


def check_database_exists() -> bool:
    """Check that demo database exists."""
    if not DEMO_DB_PATH.exists():
        print(f"FAIL: Demo database not found: {DEMO_DB_PATH}")
        return False
    print(f"OK: Database exists: {DEMO_DB_PATH}")
    return True


def check_blog(client: TestClient) -> bool:
    """Check blog categories, tags and a post."""
    categories = client.get("/api/blog/categories")
    tags = client.get("/api/blog/tags")
    post = client.get("/api/blog/slug/bienvenidos")

    if categories.status_code != 200 or not categories.json():
        print(f"FAIL: Categories: {categories.status_code} {categories.text}")
        return False
    if tags.status_code != 200 or not tags.json():
        print(f"FAIL: Tags: {tags.status_code} {tags.text}")
        return False
    if post.status_code != 200:
        print(f"FAIL: Post bienvenidos: {post.status_code} {post.text}")
        return False

    print(f"OK: {len(categories.json())} categories, {len(tags.json())} tags")
    print(f"OK: Post found: {post.json()['title']}")
    return True


def check_promotion(client: TestClient) -> bool:
    """Check that the demo promotion is running."""
    response = client.get("/api/promotions/slug/landing-page-30")

    if response.status_code != 200:
        print(f"FAIL: Promotion: {response.status_code} {response.text}")
        return False

    data = response.json()
    if not data["isValid"]:
        print("FAIL: Demo promotion is not valid (re-seed to refresh its dates)")
        return False

    print(f"OK: Promotion valid, {data['timeRemaining']['days']} days left")
    return True


def check_payment_intent(client: TestClient) -> bool:
    """Check that the demo license gets a stable payment code."""
    first = client.post(f"/api/licenses/payment-intent/{DEMO_LICENSE_ID}")
    second = client.post(f"/api/licenses/payment-intent/{DEMO_LICENSE_ID}")

    if first.status_code != 200 or second.status_code != 200:
        print(f"FAIL: Payment intent: {first.status_code} {first.text}")
        return False

    if first.json()["code"] != second.json()["code"]:
        print("FAIL: Payment code changed between requests")
        return False

    print(f"OK: Payment code {first.json()['code']} expires {first.json()['expiresAt']}")
    return True


def check_team(client: TestClient) -> bool:
    """Check the public team listing."""
    response = client.get("/api/team")

    if response.status_code != 200 or not response.json():
        print(f"FAIL: Team: {response.status_code} {response.text}")
        return False

    for member in response.json():
        print(f"    OK: {member['publicId']} - {member['position']}")
    return True


def check_transactions(client: TestClient) -> bool:
    """Check protected transaction listing and auth rejection."""
    rejected = client.get("/api/transactions")
    if rejected.status_code != 401:
        print(f"FAIL: Unauthenticated listing answered {rejected.status_code}")
        return False
    print("OK: Unauthenticated listing rejected")

    response = client.get("/api/transactions", headers={"x-api-key": SMOKE_API_KEY})
    if response.status_code != 200:
        print(f"FAIL: Transactions: {response.status_code} {response.text}")
        return False

    print(f"OK: {len(response.json())} transactions stored")
    return True


def main() -> int:
    """Main entry point."""
    print("=" * 60)
    print("Nexius Demo Smoke Test")
    print("=" * 60)

    checks_passed = 0
    checks_failed = 0

    print("\n[1/6] Checking database...")
    if not check_database_exists():
        checks_failed += 1
        print("\n" + "=" * 60)
        print(f"RESULT: {checks_passed} passed, {checks_failed} failed")
        print("Run 'python scripts/seed_demo.py' first!")
        print("=" * 60)
        return 1

    checks_passed += 1

    app = create_app(Settings(api_key=SMOKE_API_KEY, db_path=DEMO_DB_PATH))
    checks = [
        ("[2/6] Checking blog...", check_blog),
        ("[3/6] Checking promotion...", check_promotion),
        ("[4/6] Checking payment intent...", check_payment_intent),
        ("[5/6] Checking team...", check_team),
        ("[6/6] Checking transactions...", check_transactions),
    ]

    with TestClient(app) as client:
        for title, check in checks:
            print(f"\n{title}")
            if check(client):
                checks_passed += 1
            else:
                checks_failed += 1

    # Summary
    print("\n" + "=" * 60)
    if checks_failed == 0:
        print(f"RESULT: ALL PASSED ({checks_passed} checks)")
        print("=" * 60)
        return 0
    else:
        print(f"RESULT: {checks_passed} passed, {checks_failed} failed")
        print("=" * 60)
        return 1


if __name__ == "__main__":
    sys.exit(main())
