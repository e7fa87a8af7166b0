"""Database schema for Nexius.

Document-style records stored relationally. Nested values that are only
ever read back whole (author, links, products) live in *_json columns.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class BlogPost(Base):
    """Blog article."""

    __tablename__ = "blog_posts"

    id: Mapped[str] = mapped_column(String(24), primary_key=True)
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    slug: Mapped[str] = mapped_column(String(256), nullable=False, unique=True)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    excerpt: Mapped[str] = mapped_column(Text, nullable=False, default="")
    cover_image: Mapped[str] = mapped_column(String(512), nullable=False, default="")
    author_json: Mapped[str] = mapped_column(Text, nullable=False, default="{}")
    category: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    published_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="draft")
    read_time: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    seo_title: Mapped[str | None] = mapped_column(String(256), nullable=True)
    seo_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)

    tags: Mapped[list["BlogPostTag"]] = relationship(
        back_populates="post", cascade="all, delete-orphan", order_by="BlogPostTag.position"
    )


class BlogPostTag(Base):
    """Tag attached to a blog post.

    Invariant: UNIQUE(post_id, tag)
    """

    __tablename__ = "blog_post_tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[str] = mapped_column(
        String(24), ForeignKey("blog_posts.id"), nullable=False
    )
    tag: Mapped[str] = mapped_column(String(64), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    post: Mapped[BlogPost] = relationship(back_populates="tags")

    __table_args__ = (UniqueConstraint("post_id", "tag", name="uq_blog_post_tag"),)


class Promotion(Base):
    """Time-boxed promotion shown on the public site."""

    __tablename__ = "promotions"

    id: Mapped[str] = mapped_column(String(24), primary_key=True)
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    slug: Mapped[str] = mapped_column(String(256), nullable=False, unique=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    promotion_id: Mapped[str] = mapped_column(String(64), nullable=False)
    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="active")
    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    terms_and_conditions: Mapped[str | None] = mapped_column(Text, nullable=True)
    discount_percentage: Mapped[float | None] = mapped_column(Float, nullable=True)
    original_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    discounted_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    cover_image: Mapped[str] = mapped_column(String(512), nullable=False, default="")
    author_json: Mapped[str] = mapped_column(Text, nullable=False, default="{}")
    seo_title: Mapped[str | None] = mapped_column(String(256), nullable=True)
    seo_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)


class License(Base):
    """Software/service license billed to a customer."""

    __tablename__ = "licenses"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    license_key: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    company_name: Mapped[str] = mapped_column(String(256), nullable=False)
    ruc_or_dni: Mapped[str | None] = mapped_column(String(32), nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    email: Mapped[str | None] = mapped_column(String(256), nullable=True)
    amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    currency: Mapped[str] = mapped_column(String(8), nullable=False, default="PEN")
    frequency: Mapped[str] = mapped_column(String(16), nullable=False, default="monthly")
    domain: Mapped[str | None] = mapped_column(String(256), nullable=True, index=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")
    next_payment_due: Mapped[str | None] = mapped_column(String(32), nullable=True)
    current_payment_code: Mapped[str | None] = mapped_column(String(16), nullable=True)
    current_payment_code_expires_at: Mapped[str | None] = mapped_column(
        String(32), nullable=True
    )
    payment_verification_state: Mapped[str] = mapped_column(
        String(16), nullable=False, default="idle"
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)


class TeamMember(Base):
    """Team member profile.

    Invariant: UNIQUE(public_id)
    """

    __tablename__ = "team_members"

    id: Mapped[str] = mapped_column(String(24), primary_key=True)
    public_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    position: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    bio: Mapped[str] = mapped_column(Text, nullable=False, default="")
    long_bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    email: Mapped[str | None] = mapped_column(String(256), nullable=True)
    image: Mapped[str] = mapped_column(String(512), nullable=False, default="")
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    links_json: Mapped[str] = mapped_column(Text, nullable=False, default="{}")
    technologies_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    profile_options_json: Mapped[str] = mapped_column(Text, nullable=False, default="{}")
    deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class Transaction(Base):
    """Payment/notification event ingested from the mobile app."""

    __tablename__ = "transactions"

    id: Mapped[str] = mapped_column(String(24), primary_key=True)
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    date: Mapped[str | None] = mapped_column(String(32), nullable=True)
    transaction_type: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    currency: Mapped[str] = mapped_column(String(8), nullable=False, default="PEN")
    contact_name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    contact_phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    contact_email: Mapped[str | None] = mapped_column(String(256), nullable=True)
    contact_document: Mapped[str | None] = mapped_column(String(32), nullable=True)
    product_name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    products_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    yape_code: Mapped[str | None] = mapped_column(String(32), nullable=True, index=True)
    payer_normalized_name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    license_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    license_key: Mapped[str | None] = mapped_column(String(128), nullable=True)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    notification_title: Mapped[str | None] = mapped_column(Text, nullable=True)
    notification_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    notification_big_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    package_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    device_id: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    app_version: Mapped[str | None] = mapped_column(String(32), nullable=True)
    created_at: Mapped[str] = mapped_column(String(32), nullable=False)
    updated_at: Mapped[str] = mapped_column(String(32), nullable=False)
