"""Tests for API models."""

import pytest
from pydantic import ValidationError

from nexius.models.types import (
    MAX_EXTRA_LINKS,
    PaymentIntentResponse,
    ProfileOptions,
    TeamMemberLinks,
    TransactionRecord,
)


class TestTeamMemberLinks:
    """Tests for TeamMemberLinks."""

    def test_known_networks_are_fields(self):
        """Known keys populate the fixed fields."""
        links = TeamMemberLinks.model_validate({"github": "https://github.com/x"})
        assert links.github == "https://github.com/x"
        assert links.extra == {}

    def test_unknown_keys_go_to_extra(self):
        """Open-map records are split into fields and extra."""
        links = TeamMemberLinks.model_validate(
            {"linkedin": "https://linkedin.com/in/x", "dribbble": "https://dribbble.com/x"}
        )
        assert links.linkedin == "https://linkedin.com/in/x"
        assert links.extra == {"dribbble": "https://dribbble.com/x"}

    def test_explicit_extra_is_merged(self):
        """extra and loose keys end up together."""
        links = TeamMemberLinks.model_validate({"extra": {"blog": "b"}, "behance": "c"})
        assert links.extra == {"blog": "b", "behance": "c"}

    def test_too_many_extra_links(self):
        """extra is capped."""
        data = {f"site{i}": "u" for i in range(MAX_EXTRA_LINKS + 1)}
        with pytest.raises(ValidationError, match="extra links"):
            TeamMemberLinks.model_validate(data)

    @pytest.mark.parametrize("key", ["Blog", "1site", "my site", "x" * 40])
    def test_invalid_extra_key(self, key):
        """Extra keys must be short lowercase slugs."""
        with pytest.raises(ValidationError, match="invalid link key"):
            TeamMemberLinks.model_validate({"extra": {key: "u"}})

    def test_from_stored_normalizes_legacy_keys(self):
        """Stored maps are read without raising."""
        links = TeamMemberLinks.from_stored(
            {"github": "g", "Behance": "b", "my site": "m", "blog": None, "extra": {"Blog": "x"}}
        )
        assert links.github == "g"
        assert links.extra == {"behance": "b", "blog": "x"}

    def test_from_stored_caps_extra(self):
        """Stored extras beyond the cap are dropped."""
        data = {f"site{i}": "u" for i in range(MAX_EXTRA_LINKS + 5)}
        assert len(TeamMemberLinks.from_stored(data).extra) == MAX_EXTRA_LINKS

    def test_from_stored_non_mapping(self):
        """A stored value that is not a map reads as no links."""
        assert TeamMemberLinks.from_stored(["g"]) == TeamMemberLinks()


class TestProfileOptions:
    """Tests for ProfileOptions."""

    def test_defaults(self):
        """All sections are off by default."""
        options = ProfileOptions()
        assert options.show_spotify is False
        assert options.gallery_images == []

    def test_spotify_requires_user(self):
        """showSpotify without spotifyUserId is rejected."""
        with pytest.raises(ValidationError, match="spotifyUserId"):
            ProfileOptions.model_validate({"showSpotify": True})

    def test_spotify_with_user(self):
        """showSpotify with a user ID is accepted."""
        options = ProfileOptions.model_validate({"showSpotify": True, "spotifyUserId": "u1"})
        assert options.spotify_user_id == "u1"

    def test_from_stored_turns_off_spotify_without_user(self):
        """Stored showSpotify without a user ID reads as off."""
        options = ProfileOptions.from_stored({"showSpotify": True, "showGallery": True})
        assert options.show_spotify is False
        assert options.show_gallery is True

    def test_from_stored_keeps_spotify_with_user(self):
        """Valid stored Spotify settings are kept."""
        options = ProfileOptions.from_stored({"show_spotify": True, "spotifyUserId": "u1"})
        assert options.show_spotify is True


class TestTransactionRecord:
    """Tests for TransactionRecord."""

    def test_id_uses_underscore_alias(self):
        """_id on the wire maps to id."""
        record = TransactionRecord.model_validate({"_id": "a" * 24, "timestamp": 1, "amount": 2})
        assert record.id == "a" * 24
        assert record.model_dump(by_alias=True)["_id"] == "a" * 24

    def test_requires_timestamp_and_amount(self):
        """timestamp and amount are mandatory."""
        with pytest.raises(ValidationError):
            TransactionRecord.model_validate({"amount": 1})
        with pytest.raises(ValidationError):
            TransactionRecord.model_validate({"timestamp": 1})

    def test_camel_case_fields(self):
        """Fields are read from camelCase keys."""
        record = TransactionRecord.model_validate(
            {"timestamp": 1, "amount": 2, "yapeCode": "X1", "notificationBigText": "t"}
        )
        assert record.yape_code == "X1"
        assert record.notification_big_text == "t"


class TestPaymentIntentResponse:
    """Tests for PaymentIntentResponse."""

    def test_serializes_camel_case(self):
        """Wire keys are licenseId, code, expiresAt."""
        body = PaymentIntentResponse(
            license_id="abc", code="1234", expires_at="2026-01-01T00:00:00.000Z"
        ).model_dump(by_alias=True)
        assert body == {
            "licenseId": "abc",
            "code": "1234",
            "expiresAt": "2026-01-01T00:00:00.000Z",
        }
