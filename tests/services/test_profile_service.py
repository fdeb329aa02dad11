"""Tests for ProfileService and PushTokenService."""

from uuid import uuid4

import pytest

from yolcu.core.authorization import Actor
from yolcu.core.enums import DeviceType
from yolcu.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from yolcu.models import PushToken
from yolcu.services.profile_service import ProfileService
from yolcu.services.push_token_service import MAX_PUSH_TOKEN_LENGTH, PushTokenService


@pytest.fixture
def profile_service(profile_repo):
    return ProfileService(profile_repo)


@pytest.fixture
def push_token_service(push_token_repo):
    return PushTokenService(push_token_repo)


class TestProfileService:
    def test_get_my_profile_provisions_on_first_sight(
        self, profile_service: ProfileService
    ):
        user_id = uuid4()
        profile = profile_service.get_my_profile(Actor(user_id=user_id))

        assert profile.id == user_id
        assert profile.username.startswith("user_")

    def test_get_profile(
        self, profile_service: ProfileService, sample_profiles, actor_for
    ):
        alice, bob, _ = sample_profiles
        assert profile_service.get_profile(bob.id, actor_for(alice)).username == "bob"

        with pytest.raises(NotFoundError):
            profile_service.get_profile(uuid4(), actor_for(alice))

    def test_update_own_profile(
        self, profile_service: ProfileService, sample_profiles, actor_for
    ):
        alice = sample_profiles[0]

        profile = profile_service.update_profile(
            alice.id, actor_for(alice), display_name=" Alice W ", username="alice_w"
        )

        assert profile.display_name == "Alice W"
        assert profile.username == "alice_w"

    def test_cannot_update_someone_else(
        self, profile_service: ProfileService, sample_profiles, actor_for
    ):
        alice, bob, _ = sample_profiles
        with pytest.raises(ForbiddenError):
            profile_service.update_profile(
                bob.id, actor_for(alice), display_name="Hacked"
            )

    @pytest.mark.parametrize(
        "changes",
        [
            {"display_name": "   "},
            {"display_name": "d" * 101},
            {"username": "ab"},
            {"username": "Has Caps"},
        ],
    )
    def test_invalid_updates(
        self, profile_service: ProfileService, sample_profiles, actor_for, changes
    ):
        alice = sample_profiles[0]
        with pytest.raises(ValidationError):
            profile_service.update_profile(alice.id, actor_for(alice), **changes)

    def test_username_taken(
        self, profile_service: ProfileService, sample_profiles, actor_for
    ):
        alice = sample_profiles[0]
        with pytest.raises(ConflictError):
            profile_service.update_profile(alice.id, actor_for(alice), username="bob")

    def test_empty_update_returns_current(
        self, profile_service: ProfileService, sample_profiles, actor_for
    ):
        alice = sample_profiles[0]
        unchanged = profile_service.update_profile(alice.id, actor_for(alice))
        assert unchanged.username == "alice"


class TestPushTokenService:
    def test_register_and_remove(
        self,
        push_token_service: PushTokenService,
        sample_profiles,
        actor_for,
        count_rows,
    ):
        alice = sample_profiles[0]

        token = push_token_service.register_push_token(
            actor_for(alice), " ExponentPushToken[a] ", DeviceType.IOS
        )
        assert token.token == "ExponentPushToken[a]"

        push_token_service.remove_push_token(actor_for(alice), "ExponentPushToken[a]")
        assert count_rows(PushToken) == 0

    def test_remove_unknown_token(
        self, push_token_service: PushTokenService, sample_profiles, actor_for
    ):
        with pytest.raises(NotFoundError):
            push_token_service.remove_push_token(
                actor_for(sample_profiles[0]), "ExponentPushToken[x]"
            )

    def test_cannot_remove_another_users_token(
        self,
        push_token_service: PushTokenService,
        sample_profiles,
        actor_for,
        count_rows,
    ):
        alice, bob, _ = sample_profiles
        push_token_service.register_push_token(actor_for(alice), "ExponentPushToken[a]")

        with pytest.raises(NotFoundError):
            push_token_service.remove_push_token(actor_for(bob), "ExponentPushToken[a]")
        assert count_rows(PushToken) == 1

    @pytest.mark.parametrize("token", ["", "   ", "t" * (MAX_PUSH_TOKEN_LENGTH + 1)])
    def test_invalid_token(
        self, push_token_service: PushTokenService, sample_profiles, actor_for, token
    ):
        with pytest.raises(ValidationError):
            push_token_service.register_push_token(actor_for(sample_profiles[0]), token)
