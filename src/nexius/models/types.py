"""Pydantic models for the Nexius API.

Field names are snake_case in Python and camelCase on the wire, which is
what the dashboard frontend consumes.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

MAX_EXTRA_LINKS = 10
KNOWN_LINKS = frozenset({"portfolio", "linkedin", "twitter", "instagram", "github"})
EXTRA_LINK_KEY = re.compile(r"^[a-z][a-z0-9_-]{0,31}$")


class ApiModel(BaseModel):
    """Base for wire models: camelCase aliases, snake_case accepted too."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(BaseModel):
    """Error body returned by every failing endpoint."""

    error: str
    details: Any | None = None


# ============================================================================
# Blog / Promotions
# ============================================================================


class Author(ApiModel):
    id: str
    name: str
    image: str | None = None


class BlogPostDetail(ApiModel):
    """Blog post as served to the public site."""

    id: str
    title: str
    slug: str
    content: str
    excerpt: str
    cover_image: str
    author: Author
    tags: list[str]
    category: str
    published_at: datetime | None
    featured: bool
    status: Literal["draft", "published"]
    read_time: int
    seo_title: str | None = None
    seo_description: str | None = None
    created_at: datetime
    updated_at: datetime


class TimeRemaining(ApiModel):
    """Countdown until a promotion ends. total is in milliseconds."""

    days: int
    hours: int
    minutes: int
    seconds: int
    total: int


class PromotionDetail(ApiModel):
    """Promotion as served to the public site."""

    id: str
    title: str
    slug: str
    description: str
    start_date: datetime
    end_date: datetime
    promotion_id: str
    stock: int
    status: Literal["active", "inactive"]
    featured: bool
    terms_and_conditions: str | None = None
    discount_percentage: float | None = None
    original_price: float | None = None
    discounted_price: float | None = None
    cover_image: str
    author: Author
    seo_title: str | None = None
    seo_description: str | None = None
    created_at: datetime
    updated_at: datetime
    is_valid: bool
    time_remaining: TimeRemaining


# ============================================================================
# Licenses
# ============================================================================


class PaymentIntentResponse(ApiModel):
    """Code the payer must include in the mobile payment."""

    license_id: str
    code: str | None
    expires_at: str | None


# ============================================================================
# Team
# ============================================================================


class Technology(ApiModel):
    name: str
    icon: str


class TeamMemberLinks(ApiModel):
    """Contact/social links.

    Known networks are fields; anything else goes to extra, which is
    capped at MAX_EXTRA_LINKS entries with slug-like keys.
    """

    portfolio: str | None = None
    linkedin: str | None = None
    twitter: str | None = None
    instagram: str | None = None
    github: str | None = None
    extra: dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _collect_extra_links(cls, data: Any) -> Any:
        # Older records store links as one open map
        if not isinstance(data, dict):
            return data
        fixed: dict[str, Any] = {}
        extra = dict(data.get("extra") or {})
        for key, value in data.items():
            if key == "extra":
                continue
            if key in KNOWN_LINKS:
                fixed[key] = value
            elif value is not None:
                extra[key] = value
        fixed["extra"] = extra
        return fixed

    @field_validator("extra")
    @classmethod
    def _bound_extra(cls, value: dict[str, str]) -> dict[str, str]:
        if len(value) > MAX_EXTRA_LINKS:
            raise ValueError(f"at most {MAX_EXTRA_LINKS} extra links allowed")
        for key in value:
            if not EXTRA_LINK_KEY.match(key):
                raise ValueError(f"invalid link key: {key!r}")
        return value

    @classmethod
    def from_stored(cls, data: Any) -> "TeamMemberLinks":
        """Read a stored links map without rejecting legacy entries.

        Non-string values are dropped. Extra keys are lower-cased and kept
        only if they are then valid, up to MAX_EXTRA_LINKS.
        """
        if not isinstance(data, dict):
            return cls()
        items = [(k, v) for k, v in data.items() if k != "extra"]
        if isinstance(data.get("extra"), dict):
            items.extend(data["extra"].items())

        fixed: dict[str, str] = {}
        extra: dict[str, str] = {}
        for key, value in items:
            if not isinstance(key, str) or not isinstance(value, str):
                continue
            if key in KNOWN_LINKS:
                fixed[key] = value
                continue
            key = key.strip().lower()
            if EXTRA_LINK_KEY.match(key) and key not in extra and len(extra) < MAX_EXTRA_LINKS:
                extra[key] = value
        return cls(**fixed, extra=extra)


class ProfileOptions(ApiModel):
    """Flags for optional profile sections."""

    show_spotify: bool = False
    spotify_user_id: str | None = None
    show_technologies: bool = False
    show_gallery: bool = False
    gallery_images: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _spotify_needs_user(self) -> "ProfileOptions":
        if self.show_spotify and not self.spotify_user_id:
            raise ValueError("spotifyUserId is required when showSpotify is enabled")
        return self

    @classmethod
    def from_stored(cls, data: Any) -> "ProfileOptions":
        """Read stored options; showSpotify without a user ID is served as off."""
        if not isinstance(data, dict):
            return cls()
        data = dict(data)
        show_spotify = data.pop("showSpotify", None)
        if show_spotify is None:
            show_spotify = data.pop("show_spotify", False)
        else:
            data.pop("show_spotify", None)
        user_id = data.get("spotifyUserId") or data.get("spotify_user_id")
        data["showSpotify"] = bool(show_spotify and user_id)
        return cls.model_validate(data)


class TeamMemberDetail(ApiModel):
    """Public team member profile. The contact email is not served."""

    id: str
    public_id: str
    name: str
    position: str
    bio: str
    long_bio: str | None = None
    image: str
    active: bool
    links: TeamMemberLinks = Field(default_factory=TeamMemberLinks)
    technologies: list[Technology] = Field(default_factory=list)
    profile_options: ProfileOptions = Field(default_factory=ProfileOptions)


# ============================================================================
# Transactions
# ============================================================================


class TransactionProduct(ApiModel):
    name: str
    quantity: float | None = None
    unit_price: float | None = None
    code: str | None = None
    description: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _accept_snake_unit_price(cls, data: Any) -> Any:
        # The Android app sends unit_price, the web dashboard unitPrice
        if isinstance(data, dict) and "unitPrice" not in data and "unit_price" in data:
            data = {**data, "unitPrice": data["unit_price"]}
            data.pop("unit_price")
        return data


class TransactionRecord(ApiModel):
    """Payment/notification event.

    Only timestamp (epoch ms) and amount are required; the mobile ingestion
    source fills the rest unevenly.
    """

    id: str | None = Field(None, alias="_id")
    timestamp: int
    amount: float
    date: str | None = None
    transaction_type: str | None = None
    currency: str | None = None
    contact_name: str | None = None
    contact_phone: str | None = None
    contact_email: str | None = None
    contact_document: str | None = None
    product_name: str | None = None
    products: list[TransactionProduct] | None = None
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
    created_at: str | None = None
    updated_at: str | None = None


class TransactionIngestResponse(ApiModel):
    status: Literal["ok"] = "ok"
    inserted_id: str


class TransactionBatchResponse(ApiModel):
    status: Literal["ok"] = "ok"
    inserted_count: int
    inserted_ids: list[str]


class TransactionSearchResponse(ApiModel):
    matches: list[TransactionRecord]
    count: int
