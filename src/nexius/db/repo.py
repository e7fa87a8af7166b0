"""Repository pattern for database operations.

Encapsulates all SQLAlchemy queries, keeping handlers and domain helpers
free of ORM objects. Returns domain models (not SQLAlchemy entities).
"""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import TYPE_CHECKING

from sqlalchemy import or_
from sqlalchemy.orm import Session

from nexius.core.timestamps import utcnow
from nexius.db.schema import (
    BlogPost,
    BlogPostTag,
    License,
    Promotion,
    TeamMember,
    Transaction,
)
from nexius.models.domain import (
    AuthorEntity,
    BlogPostEntity,
    LicenseEntity,
    PromotionEntity,
    TeamMemberEntity,
    TechnologyEntity,
    TransactionEntity,
)
from nexius.models.types import ProfileOptions, TeamMemberLinks

if TYPE_CHECKING:
    from sqlalchemy.orm import Session as DbSession
else:
    DbSession = Session

# Re-export for external use
__all__ = ["DbSession"]


# ============================================================================
# Converters: SQLAlchemy -> Domain
# ============================================================================


def _author_from_json(raw: str | None) -> AuthorEntity:
    data = json.loads(raw) if raw else {}
    return AuthorEntity(
        id=str(data.get("id", "")),
        name=str(data.get("name", "")),
        image=data.get("image"),
    )


def _author_to_json(author: AuthorEntity) -> str:
    return json.dumps(asdict(author))


def _blog_post_to_entity(post: BlogPost) -> BlogPostEntity:
    """Convert SQLAlchemy BlogPost to domain entity."""
    return BlogPostEntity(
        id=post.id,
        title=post.title,
        slug=post.slug,
        content=post.content,
        excerpt=post.excerpt,
        cover_image=post.cover_image,
        author=_author_from_json(post.author_json),
        tags=[t.tag for t in post.tags],
        category=post.category,
        featured=post.featured,
        status=post.status,
        read_time=post.read_time,
        created_at=post.created_at,
        updated_at=post.updated_at,
        published_at=post.published_at,
        seo_title=post.seo_title,
        seo_description=post.seo_description,
    )


def _promotion_to_entity(promo: Promotion) -> PromotionEntity:
    """Convert SQLAlchemy Promotion to domain entity."""
    return PromotionEntity(
        id=promo.id,
        title=promo.title,
        slug=promo.slug,
        description=promo.description,
        start_date=promo.start_date,
        end_date=promo.end_date,
        promotion_id=promo.promotion_id,
        stock=promo.stock,
        status=promo.status,
        featured=promo.featured,
        cover_image=promo.cover_image,
        author=_author_from_json(promo.author_json),
        created_at=promo.created_at,
        updated_at=promo.updated_at,
        terms_and_conditions=promo.terms_and_conditions,
        discount_percentage=promo.discount_percentage,
        original_price=promo.original_price,
        discounted_price=promo.discounted_price,
        seo_title=promo.seo_title,
        seo_description=promo.seo_description,
    )


def _license_to_entity(lic: License) -> LicenseEntity:
    """Convert SQLAlchemy License to domain entity."""
    return LicenseEntity(
        id=lic.id,
        license_key=lic.license_key,
        company_name=lic.company_name,
        amount=lic.amount,
        currency=lic.currency,
        frequency=lic.frequency,
        status=lic.status,
        payment_verification_state=lic.payment_verification_state,
        domain=lic.domain,
        next_payment_due=lic.next_payment_due,
        current_payment_code=lic.current_payment_code,
        current_payment_code_expires_at=lic.current_payment_code_expires_at,
    )


def _team_member_to_entity(member: TeamMember) -> TeamMemberEntity:
    """Convert SQLAlchemy TeamMember to domain entity."""
    # Entries without a name are skipped
    technologies = [
        TechnologyEntity(name=str(t["name"]), icon=str(t.get("icon") or ""))
        for t in json.loads(member.technologies_json or "[]")
        if isinstance(t, dict) and t.get("name")
    ]
    return TeamMemberEntity(
        id=member.id,
        public_id=member.public_id,
        name=member.name,
        position=member.position,
        bio=member.bio,
        image=member.image,
        active=member.active,
        links=json.loads(member.links_json or "{}"),
        technologies=technologies,
        profile_options=json.loads(member.profile_options_json or "{}"),
        long_bio=member.long_bio,
        email=member.email,
    )


def _transaction_to_entity(tx: Transaction) -> TransactionEntity:
    """Convert SQLAlchemy Transaction to domain entity."""
    return TransactionEntity(
        id=tx.id,
        timestamp=tx.timestamp,
        amount=tx.amount,
        currency=tx.currency,
        transaction_type=tx.transaction_type,
        created_at=tx.created_at,
        updated_at=tx.updated_at,
        date=tx.date,
        contact_name=tx.contact_name,
        contact_phone=tx.contact_phone,
        contact_email=tx.contact_email,
        contact_document=tx.contact_document,
        product_name=tx.product_name,
        products=json.loads(tx.products_json) if tx.products_json else None,
        yape_code=tx.yape_code,
        payer_normalized_name=tx.payer_normalized_name,
        license_id=tx.license_id,
        license_key=tx.license_key,
        message=tx.message,
        notification_title=tx.notification_title,
        notification_text=tx.notification_text,
        notification_big_text=tx.notification_big_text,
        package_name=tx.package_name,
        device_id=tx.device_id,
        app_version=tx.app_version,
    )


def _entity_to_transaction(entity: TransactionEntity) -> Transaction:
    """Convert domain TransactionEntity to a new SQLAlchemy row."""
    return Transaction(
        id=entity.id,
        timestamp=entity.timestamp,
        amount=entity.amount,
        currency=entity.currency,
        transaction_type=entity.transaction_type,
        created_at=entity.created_at,
        updated_at=entity.updated_at,
        date=entity.date,
        contact_name=entity.contact_name,
        contact_phone=entity.contact_phone,
        contact_email=entity.contact_email,
        contact_document=entity.contact_document,
        product_name=entity.product_name,
        products_json=json.dumps(entity.products) if entity.products is not None else None,
        yape_code=entity.yape_code,
        payer_normalized_name=entity.payer_normalized_name,
        license_id=entity.license_id,
        license_key=entity.license_key,
        message=entity.message,
        notification_title=entity.notification_title,
        notification_text=entity.notification_text,
        notification_big_text=entity.notification_big_text,
        package_name=entity.package_name,
        device_id=entity.device_id,
        app_version=entity.app_version,
    )


# ============================================================================
# Blog Repository
# ============================================================================


def _published_posts_filter():
    return (BlogPost.deleted.is_(False), BlogPost.status == "published")


def get_blog_categories(session: DbSession) -> list[str]:
    """Get distinct categories of published posts, sorted."""
    rows = (
        session.query(BlogPost.category)
        .filter(*_published_posts_filter(), BlogPost.category != "")
        .distinct()
        .order_by(BlogPost.category)
        .all()
    )
    return [r[0] for r in rows]


def get_blog_tags(session: DbSession) -> list[str]:
    """Get distinct tags of published posts, sorted."""
    rows = (
        session.query(BlogPostTag.tag)
        .join(BlogPostTag.post)
        .filter(*_published_posts_filter(), BlogPostTag.tag != "")
        .distinct()
        .order_by(BlogPostTag.tag)
        .all()
    )
    return [r[0] for r in rows]


def get_blog_post_by_slug(session: DbSession, slug: str) -> BlogPostEntity | None:
    """Get non-deleted blog post by slug."""
    post = (
        session.query(BlogPost)
        .filter(BlogPost.slug == slug, BlogPost.deleted.is_(False))
        .first()
    )
    return _blog_post_to_entity(post) if post else None


def create_blog_post(session: DbSession, entity: BlogPostEntity) -> BlogPostEntity:
    """Create a new blog post with its tags."""
    post = BlogPost(
        id=entity.id,
        title=entity.title,
        slug=entity.slug,
        content=entity.content,
        excerpt=entity.excerpt,
        cover_image=entity.cover_image,
        author_json=_author_to_json(entity.author),
        category=entity.category,
        published_at=entity.published_at,
        featured=entity.featured,
        status=entity.status,
        read_time=entity.read_time,
        seo_title=entity.seo_title,
        seo_description=entity.seo_description,
        created_at=entity.created_at,
        updated_at=entity.updated_at,
    )
    # Duplicate tags would violate uq_blog_post_tag
    for position, tag in enumerate(dict.fromkeys(entity.tags)):
        post.tags.append(BlogPostTag(tag=tag, position=position))
    session.add(post)
    return entity


# ============================================================================
# Promotion Repository
# ============================================================================


def get_promotion_by_slug(session: DbSession, slug: str) -> PromotionEntity | None:
    """Get non-deleted promotion by slug."""
    promo = (
        session.query(Promotion)
        .filter(Promotion.slug == slug, Promotion.deleted.is_(False))
        .first()
    )
    return _promotion_to_entity(promo) if promo else None


def create_promotion(session: DbSession, entity: PromotionEntity) -> PromotionEntity:
    """Create a new promotion."""
    promo = Promotion(
        id=entity.id,
        title=entity.title,
        slug=entity.slug,
        description=entity.description,
        start_date=entity.start_date,
        end_date=entity.end_date,
        promotion_id=entity.promotion_id,
        stock=entity.stock,
        status=entity.status,
        featured=entity.featured,
        terms_and_conditions=entity.terms_and_conditions,
        discount_percentage=entity.discount_percentage,
        original_price=entity.original_price,
        discounted_price=entity.discounted_price,
        cover_image=entity.cover_image,
        author_json=_author_to_json(entity.author),
        seo_title=entity.seo_title,
        seo_description=entity.seo_description,
        created_at=entity.created_at,
        updated_at=entity.updated_at,
    )
    session.add(promo)
    return entity


# ============================================================================
# License Repository
# ============================================================================


def get_license(session: DbSession, license_id: str) -> LicenseEntity | None:
    """Get license by ID."""
    lic = session.get(License, license_id)
    return _license_to_entity(lic) if lic else None


def create_license(session: DbSession, entity: LicenseEntity) -> LicenseEntity:
    """Create a new license."""
    lic = License(
        id=entity.id,
        license_key=entity.license_key,
        company_name=entity.company_name,
        amount=entity.amount,
        currency=entity.currency,
        frequency=entity.frequency,
        status=entity.status,
        payment_verification_state=entity.payment_verification_state,
        domain=entity.domain,
        next_payment_due=entity.next_payment_due,
        current_payment_code=entity.current_payment_code,
        current_payment_code_expires_at=entity.current_payment_code_expires_at,
    )
    session.add(lic)
    return entity


def set_license_payment_code(
    session: DbSession,
    license_id: str,
    code: str,
    expires_at: str,
    *,
    verification_state: str = "awaiting",
) -> None:
    """Store a new payment code on a license."""
    lic = session.get(License, license_id)
    if lic:
        lic.current_payment_code = code
        lic.current_payment_code_expires_at = expires_at
        lic.payment_verification_state = verification_state
        lic.updated_at = utcnow()


# ============================================================================
# Team Repository
# ============================================================================


def get_team_members(session: DbSession, *, active_only: bool = True) -> list[TeamMemberEntity]:
    """Get non-deleted team members, ordered by name."""
    query = session.query(TeamMember).filter(TeamMember.deleted.is_(False))
    if active_only:
        query = query.filter(TeamMember.active.is_(True))
    return [_team_member_to_entity(m) for m in query.order_by(TeamMember.name).all()]


def get_team_member_by_public_id(session: DbSession, public_id: str) -> TeamMemberEntity | None:
    """Get non-deleted team member by public ID."""
    member = (
        session.query(TeamMember)
        .filter(TeamMember.public_id == public_id, TeamMember.deleted.is_(False))
        .first()
    )
    return _team_member_to_entity(member) if member else None


def create_team_member(session: DbSession, entity: TeamMemberEntity) -> TeamMemberEntity:
    """Create a new team member.

    Raises:
        pydantic.ValidationError: If the links or profile options are invalid.
    """
    TeamMemberLinks.model_validate(entity.links)
    ProfileOptions.model_validate(entity.profile_options)
    member = TeamMember(
        id=entity.id,
        public_id=entity.public_id,
        name=entity.name,
        position=entity.position,
        bio=entity.bio,
        long_bio=entity.long_bio,
        email=entity.email,
        image=entity.image,
        active=entity.active,
        links_json=json.dumps(entity.links),
        technologies_json=json.dumps([asdict(t) for t in entity.technologies]),
        profile_options_json=json.dumps(entity.profile_options),
    )
    session.add(member)
    return entity


# ============================================================================
# Transaction Repository
# ============================================================================


def get_transaction(session: DbSession, transaction_id: str) -> TransactionEntity | None:
    """Get transaction by ID."""
    tx = session.get(Transaction, transaction_id)
    return _transaction_to_entity(tx) if tx else None


def insert_transaction(session: DbSession, entity: TransactionEntity) -> TransactionEntity:
    """Insert a new transaction.

    Flushes immediately so a duplicate ID raises IntegrityError here.
    """
    session.add(_entity_to_transaction(entity))
    session.flush()
    return entity


def upsert_transaction(
    session: DbSession, entity: TransactionEntity, updated_at: str
) -> TransactionEntity:
    """Insert a transaction, or only touch updated_at if the ID exists.

    Existing documents are never overwritten by a re-sent event.
    """
    existing = session.get(Transaction, entity.id)
    if existing is not None:
        existing.updated_at = updated_at
        session.flush()
        return _transaction_to_entity(existing)
    return insert_transaction(session, entity)


def find_transactions(session: DbSession, limit: int = 100) -> list[TransactionEntity]:
    """Get the most recent transactions, newest first."""
    rows = (
        session.query(Transaction)
        .order_by(Transaction.timestamp.desc())
        .limit(limit)
        .all()
    )
    return [_transaction_to_entity(r) for r in rows]


def search_transactions(
    session: DbSession,
    *,
    since_ms: int,
    code: str | None = None,
    amount: float | None = None,
    license_id: str | None = None,
    normalized_name: str | None = None,
    limit: int = 20,
) -> list[TransactionEntity]:
    """Search recent transactions for payment matching.

    All given criteria must hold. normalized_name matches the payer name
    exactly or appears (case-insensitive) in the notification texts.
    """
    query = session.query(Transaction).filter(Transaction.timestamp >= since_ms)

    if code:
        query = query.filter(Transaction.yape_code == code)
    # A zero amount is treated as "any amount"
    if amount:
        query = query.filter(Transaction.amount == amount)
    if license_id:
        query = query.filter(Transaction.license_id == license_id)
    if normalized_name:
        query = query.filter(
            or_(
                Transaction.payer_normalized_name == normalized_name,
                Transaction.notification_text.icontains(normalized_name, autoescape=True),
                Transaction.notification_big_text.icontains(normalized_name, autoescape=True),
                Transaction.message.icontains(normalized_name, autoescape=True),
            )
        )

    rows = query.order_by(Transaction.timestamp.desc()).limit(limit).all()
    return [_transaction_to_entity(r) for r in rows]


# ============================================================================
# Session helpers
# ============================================================================


def commit(session: DbSession) -> None:
    """Commit the current transaction."""
    session.commit()


def rollback(session: DbSession) -> None:
    """Roll back the current transaction."""
    session.rollback()
