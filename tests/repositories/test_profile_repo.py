"""Tests for ProfileRepo."""

from uuid import UUID, uuid4

import pytest

from yolcu.exceptions import ConflictError
from yolcu.models import Profile
from yolcu.models.profile import DEFAULT_DISPLAY_NAME
from yolcu.repositories.profile_repo import ProfileRepo


class TestEnsureProfile:
    """First-sight provisioning."""

    def test_creates_profile_with_defaults(self, profile_repo: ProfileRepo, count_rows):
        user_id = uuid4()

        profile = profile_repo.ensure_profile(user_id)

        assert profile.id == user_id
        assert profile.display_name == DEFAULT_DISPLAY_NAME
        assert profile.username == f"user_{str(user_id)[:8]}"
        assert count_rows(Profile, id=user_id) == 1

    def test_is_idempotent(self, profile_repo: ProfileRepo, count_rows):
        user_id = uuid4()

        first = profile_repo.ensure_profile(user_id)
        second = profile_repo.ensure_profile(user_id)

        assert first.id == second.id
        assert second.username == first.username
        assert count_rows(Profile) == 1

    def test_returns_existing_profile_unchanged(
        self, profile_repo: ProfileRepo, sample_profiles
    ):
        alice = sample_profiles[0]

        profile = profile_repo.ensure_profile(alice.id)

        assert profile.username == "alice"
        assert profile.display_name == "Alice"

    def test_short_username_collision_falls_back_to_full_id(
        self, profile_repo: ProfileRepo, test_session
    ):
        user_id = UUID("12345678-0000-4000-8000-000000000001")
        test_session.add(
            Profile(id=uuid4(), display_name="Squatter", username="user_12345678")
        )
        test_session.commit()

        profile = profile_repo.ensure_profile(user_id)

        assert profile.username == f"user_{user_id.hex}"


class TestUpdateProfile:
    def test_update_fields(self, profile_repo: ProfileRepo, sample_profiles):
        alice = sample_profiles[0]

        updated = profile_repo.update_profile(
            alice.id, {"display_name": "Alice A.", "avatar_url": "https://cdn/a.png"}
        )

        assert updated.display_name == "Alice A."
        stored = profile_repo.get_profile_by_id(alice.id)
        assert stored.avatar_url == "https://cdn/a.png"

    def test_username_taken_is_conflict(
        self, profile_repo: ProfileRepo, sample_profiles
    ):
        alice = sample_profiles[0]

        with pytest.raises(ConflictError, match="already taken"):
            profile_repo.update_profile(alice.id, {"username": "bob"})

        assert profile_repo.get_profile_by_id(alice.id).username == "alice"

    def test_unknown_field_rejected(self, profile_repo: ProfileRepo, sample_profiles):
        with pytest.raises(ValueError):
            profile_repo.update_profile(sample_profiles[0].id, {"id": uuid4()})

    def test_missing_profile(self, profile_repo: ProfileRepo):
        assert profile_repo.update_profile(uuid4(), {"display_name": "Ghost"}) is None
