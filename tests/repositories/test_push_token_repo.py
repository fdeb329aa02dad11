"""Tests for PushTokenRepo."""

from yolcu.core.enums import DeviceType
from yolcu.models import PushToken
from yolcu.repositories.push_token_repo import PushTokenRepo


class TestPushTokenRepo:
    def test_upsert_creates_token(
        self, push_token_repo: PushTokenRepo, sample_profiles, count_rows
    ):
        alice = sample_profiles[0]

        token = push_token_repo.upsert_token(
            alice.id, "ExponentPushToken[a]", DeviceType.IOS
        )

        assert token.user_id == alice.id
        assert token.device_type == DeviceType.IOS
        assert count_rows(PushToken, user_id=alice.id) == 1

    def test_upsert_refreshes_existing_token(
        self, push_token_repo: PushTokenRepo, sample_profiles, count_rows
    ):
        alice = sample_profiles[0]
        first = push_token_repo.upsert_token(
            alice.id, "ExponentPushToken[a]", DeviceType.IOS
        )

        second = push_token_repo.upsert_token(
            alice.id, "ExponentPushToken[a]", DeviceType.ANDROID
        )

        assert second.id == first.id
        assert second.device_type == DeviceType.ANDROID
        assert count_rows(PushToken) == 1

    def test_token_moves_to_new_account(
        self, push_token_repo: PushTokenRepo, sample_profiles, count_rows
    ):
        alice, bob, _ = sample_profiles
        first = push_token_repo.upsert_token(alice.id, "ExponentPushToken[device]")

        moved = push_token_repo.upsert_token(
            bob.id, "ExponentPushToken[device]", DeviceType.ANDROID
        )

        assert moved.id == first.id
        assert moved.user_id == bob.id
        assert count_rows(PushToken) == 1
        assert push_token_repo.get_tokens_for_users([alice.id]) == []
        assert not push_token_repo.delete_token(alice.id, "ExponentPushToken[device]")

    def test_delete_token(self, push_token_repo: PushTokenRepo, sample_profiles):
        alice, bob, _ = sample_profiles
        push_token_repo.upsert_token(alice.id, "ExponentPushToken[a]")

        assert push_token_repo.delete_token(bob.id, "ExponentPushToken[a]") is False
        assert push_token_repo.delete_token(alice.id, "ExponentPushToken[a]") is True
        assert push_token_repo.delete_token(alice.id, "ExponentPushToken[a]") is False

    def test_get_tokens_for_users(
        self, push_token_repo: PushTokenRepo, sample_profiles
    ):
        alice, bob, charlie = sample_profiles
        push_token_repo.upsert_token(alice.id, "ExponentPushToken[a]")
        push_token_repo.upsert_token(bob.id, "ExponentPushToken[b1]")
        push_token_repo.upsert_token(bob.id, "ExponentPushToken[b2]")
        push_token_repo.upsert_token(charlie.id, "ExponentPushToken[c]")

        tokens = push_token_repo.get_tokens_for_users([alice.id, bob.id])

        assert sorted(t.token for t in tokens) == [
            "ExponentPushToken[a]",
            "ExponentPushToken[b1]",
            "ExponentPushToken[b2]",
        ]
        assert push_token_repo.get_tokens_for_users([]) == []

    def test_delete_tokens_bulk(
        self, push_token_repo: PushTokenRepo, sample_profiles, count_rows
    ):
        alice, bob, _ = sample_profiles
        push_token_repo.upsert_token(alice.id, "ExponentPushToken[a]")
        push_token_repo.upsert_token(bob.id, "ExponentPushToken[b]")

        deleted = push_token_repo.delete_tokens(
            ["ExponentPushToken[a]", "ExponentPushToken[gone]"]
        )

        assert deleted == 1
        assert count_rows(PushToken) == 1
        assert push_token_repo.delete_tokens([]) == 0
