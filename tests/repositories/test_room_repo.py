"""Tests for RoomRepo."""

from datetime import timedelta
from unittest.mock import patch
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from yolcu.exceptions import ConflictError, NotFoundError
from yolcu.models import Message, Room, RoomMember
from yolcu.repositories.room_repo import RoomRepo

from tests.helpers.data import BASE_TIME


class TestRoomRepoCreate:
    """Room creation and invite code allocation."""

    def test_create_room_with_generated_code(
        self, room_repo: RoomRepo, sample_profiles
    ):
        alice = sample_profiles[0]

        room = room_repo.create_room(
            name="Book Club", created_by=alice.id, code_factory=lambda: "abcd1234"
        )

        assert room.id is not None
        assert room.invite_code == "abcd1234"
        assert room.created_by == alice.id
        assert room.is_live is False

    def test_create_room_with_custom_code(self, room_repo: RoomRepo, sample_profiles):
        room = room_repo.create_room(
            name="Book Club", created_by=sample_profiles[0].id, invite_code="books"
        )
        assert room.invite_code == "books"

    def test_generated_code_collision_is_retried(
        self, room_repo: RoomRepo, sample_room, sample_profiles, count_rows
    ):
        codes = iter(["hike2024", "hike2024", "fresh001"])

        room = room_repo.create_room(
            name="Another",
            created_by=sample_profiles[1].id,
            code_factory=lambda: next(codes),
            max_attempts=5,
        )

        assert room.invite_code == "fresh001"
        assert count_rows(Room) == 2

    def test_generated_code_collision_exhausts_attempts(
        self, room_repo: RoomRepo, sample_room, sample_profiles, count_rows
    ):
        with pytest.raises(ConflictError, match="after 3 attempts"):
            room_repo.create_room(
                name="Another",
                created_by=sample_profiles[1].id,
                code_factory=lambda: "hike2024",
                max_attempts=3,
            )

        assert count_rows(Room) == 1

    def test_custom_code_collision_is_conflict(
        self, room_repo: RoomRepo, sample_room, sample_profiles
    ):
        with pytest.raises(ConflictError, match="already in use"):
            room_repo.create_room(
                name="Copycat", created_by=sample_profiles[1].id, invite_code="hike2024"
            )

    def test_unknown_creator_is_not_retried(self, room_repo: RoomRepo):
        attempts = []

        def factory():
            attempts.append(1)
            return f"code{len(attempts):04d}"

        with pytest.raises(IntegrityError):
            room_repo.create_room(
                name="Orphan", created_by=uuid4(), code_factory=factory
            )

        assert len(attempts) == 1

    def test_requires_code_or_factory(self, room_repo: RoomRepo, sample_profiles):
        with pytest.raises(ValueError):
            room_repo.create_room(name="Nope", created_by=sample_profiles[0].id)


class TestRoomRepoMembership:
    """Membership rows."""

    def test_add_member_inserts_once(
        self, room_repo: RoomRepo, sample_room, sample_profiles, count_rows
    ):
        charlie = sample_profiles[2]

        membership, created = room_repo.add_member(sample_room.id, charlie.id)
        again, created_again = room_repo.add_member(sample_room.id, charlie.id)

        assert created is True
        assert created_again is False
        assert membership.user_id == again.user_id == charlie.id
        assert count_rows(RoomMember, room_id=sample_room.id, user_id=charlie.id) == 1

    def test_add_member_recovers_from_concurrent_insert(
        self, room_repo: RoomRepo, sample_room, sample_profiles, test_session_factory
    ):
        bob = sample_profiles[1]
        session = test_session_factory()
        try:
            # Simulate a racing request: the pre-check misses the row that exists
            with patch.object(session, "get", return_value=None):
                membership, created = room_repo.add_member(
                    sample_room.id, bob.id, session=session
                )
            session.commit()
        finally:
            session.close()

        assert created is False
        assert membership.user_id == bob.id

    def test_add_member_to_missing_room(
        self, room_repo: RoomRepo, sample_profiles, count_rows
    ):
        with pytest.raises(NotFoundError):
            room_repo.add_member(uuid4(), sample_profiles[2].id)

        assert count_rows(RoomMember) == 0

    def test_is_member(self, room_repo: RoomRepo, sample_room, sample_profiles):
        alice, bob, charlie = sample_profiles
        assert room_repo.is_member(sample_room.id, alice.id) is True
        assert room_repo.is_member(sample_room.id, bob.id) is True
        assert room_repo.is_member(sample_room.id, charlie.id) is False

    def test_remove_member(self, room_repo: RoomRepo, sample_room, sample_profiles):
        bob = sample_profiles[1]

        assert room_repo.remove_member(sample_room.id, bob.id) is True
        assert room_repo.remove_member(sample_room.id, bob.id) is False
        assert room_repo.is_member(sample_room.id, bob.id) is False

    def test_get_room_members_in_join_order_with_profiles(
        self, room_repo: RoomRepo, sample_room, sample_profiles
    ):
        members = room_repo.get_room_members(sample_room.id)

        assert [m.user_id for m in members] == [p.id for p in sample_profiles[:2]]
        assert members[0].profile.display_name == "Alice"

    def test_get_member_ids_excluding_sender(
        self, room_repo: RoomRepo, sample_room, sample_profiles
    ):
        alice, bob, _ = sample_profiles
        others = room_repo.get_member_ids(sample_room.id, exclude_user_id=alice.id)
        assert others == [bob.id]
        assert set(room_repo.get_member_ids(sample_room.id)) == {alice.id, bob.id}

    def test_get_user_rooms_newest_join_first(
        self, room_repo: RoomRepo, sample_room, sample_profiles, test_session
    ):
        alice = sample_profiles[0]
        newer = Room(name="Climbing", created_by=alice.id, invite_code="climb001")
        test_session.add(newer)
        test_session.flush()
        test_session.add(
            RoomMember(
                room_id=newer.id, user_id=alice.id, joined_at=BASE_TIME + timedelta(
                    days=1
                )
            )
        )
        test_session.commit()

        rooms = room_repo.get_user_rooms(alice.id)

        assert [r.name for r in rooms] == ["Climbing", "Hiking"]
        assert room_repo.get_user_rooms(sample_profiles[2].id) == []


class TestRoomRepoLookupAndDelete:
    def test_get_room_by_invite_code(self, room_repo: RoomRepo, sample_room):
        assert room_repo.get_room_by_invite_code("hike2024").id == sample_room.id
        assert room_repo.get_room_by_invite_code("nope") is None

    def test_get_room_by_id_missing(self, room_repo: RoomRepo):
        assert room_repo.get_room_by_id(uuid4()) is None

    def test_delete_room_cascades(
        self, room_repo: RoomRepo, sample_room, sample_messages, count_rows
    ):
        assert room_repo.delete_room(sample_room.id) is True

        assert count_rows(Room) == 0
        assert count_rows(RoomMember) == 0
        assert count_rows(Message) == 0

    def test_delete_missing_room(self, room_repo: RoomRepo):
        assert room_repo.delete_room(uuid4()) is False

    def test_set_live(self, room_repo: RoomRepo, sample_room):
        room = room_repo.set_live(sample_room.id, True)
        assert room.is_live is True
        assert room_repo.get_room_by_id(sample_room.id).is_live is True
        assert room_repo.set_live(uuid4(), True) is None
