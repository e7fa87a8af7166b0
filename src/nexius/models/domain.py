"""Domain models for Nexius.

Pure Python dataclasses returned by the repository. They are independent
of SQLAlchemy so handlers and helpers never touch ORM objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal


@dataclass
class AuthorEntity:
    """Author shown on blog posts and promotions."""

    id: str
    name: str
    image: str | None = None


# ============================================================================
# Blog Domain
# ============================================================================

BlogStatus = Literal["draft", "published"]


@dataclass
class BlogPostEntity:
    """Domain model for a blog post."""

    id: str
    title: str
    slug: str
    content: str
    excerpt: str
    cover_image: str
    author: AuthorEntity
    tags: list[str]
    category: str
    featured: bool
    status: BlogStatus
    read_time: int
    created_at: datetime
    updated_at: datetime
    published_at: datetime | None = None
    seo_title: str | None = None
    seo_description: str | None = None


# ============================================================================
# Promotion Domain
# ============================================================================

PromotionStatus = Literal["active", "inactive"]


@dataclass
class PromotionEntity:
    """Domain model for a promotion."""

    id: str
    title: str
    slug: str
    description: str
    start_date: datetime
    end_date: datetime
    promotion_id: str
    stock: int
    status: PromotionStatus
    featured: bool
    cover_image: str
    author: AuthorEntity
    created_at: datetime
    updated_at: datetime
    terms_and_conditions: str | None = None
    discount_percentage: float | None = None
    original_price: float | None = None
    discounted_price: float | None = None
    seo_title: str | None = None
    seo_description: str | None = None


# ============================================================================
# License Domain
# ============================================================================

PaymentVerificationState = Literal["idle", "awaiting", "verifying", "verified"]


@dataclass
class LicenseEntity:
    """Domain model for a license (payment-intent relevant fields)."""

    id: str
    license_key: str
    company_name: str
    amount: float
    currency: str
    frequency: str
    status: str
    payment_verification_state: PaymentVerificationState
    domain: str | None = None
    next_payment_due: str | None = None
    current_payment_code: str | None = None
    current_payment_code_expires_at: str | None = None


# ============================================================================
# Team Domain
# ============================================================================


@dataclass
class TechnologyEntity:
    name: str
    icon: str


@dataclass
class TeamMemberEntity:
    """Domain model for a team member.

    links and profile_options are kept as plain dicts; their shape is
    enforced by the API models when they are written or served.
    """

    id: str
    public_id: str
    name: str
    position: str
    bio: str
    image: str
    active: bool
    links: dict[str, str | None] = field(default_factory=dict)
    technologies: list[TechnologyEntity] = field(default_factory=list)
    profile_options: dict = field(default_factory=dict)
    long_bio: str | None = None
    email: str | None = None


# ============================================================================
# Transaction Domain
# ============================================================================


@dataclass
class TransactionEntity:
    """Domain model for an ingested payment/notification event.

    products holds the raw product dicts as received.
    """

    id: str
    timestamp: int
    amount: float
    currency: str
    transaction_type: str
    created_at: str
    updated_at: str
    date: str | None = None
    contact_name: str | None = None
    contact_phone: str | None = None
    contact_email: str | None = None
    contact_document: str | None = None
    product_name: str | None = None
    products: list[dict] | None = None
    yape_code: str | None = None
    payer_normalized_name: str | None = None
    license_id: str | None = None
    license_key: str | None = None
    message: str | None = None
    notification_title: str | None = None
    notification_text: str | None = None
    notification_big_text: str | None = None
    package_name: str | None = None
    device_id: str | None = None
    app_version: str | None = None
