"""End-to-end room lifecycle through the HTTP API."""

from uuid import uuid4

from fastapi.testclient import TestClient

from yolcu.models import Message, Room, RoomMember


class TestHikingRoomLifecycle:
    """Create, invite, re-join, kick and delete a room."""

    def test_full_lifecycle(
        self, client: TestClient, auth_headers_for_user, count_rows
    ):
        creator, guest = uuid4(), uuid4()
        creator_headers = auth_headers_for_user(creator)
        guest_headers = auth_headers_for_user(guest)

        # Creator creates the room and receives an invite code
        created = client.post(
            "/api/v1/rooms",
            json={"name": "Hiking", "invite_code": "ab12cd34"},
            headers=creator_headers,
        )
        assert created.status_code == 201
        room_id = created.json()["id"]
        assert created.json()["invite_code"] == "ab12cd34"

        # Guest joins with the code
        joined = client.post(
            "/api/v1/rooms/join", json={"code": "ab12cd34"}, headers=guest_headers
        )
        assert joined.json()["status"] == "joined"
        members = client.get(f"/api/v1/rooms/{room_id}/members", headers=guest_headers)
        assert members.json()["total"] == 2

        # Joining again is a no-op
        again = client.post(
            "/api/v1/rooms/join", json={"code": "ab12cd34"}, headers=guest_headers
        )
        assert again.status_code == 200
        assert again.json()["already_member"] is True
        members = client.get(
            f"/api/v1/rooms/{room_id}/members", headers=creator_headers
        )
        assert members.json()["total"] == 2

        # Both can talk
        sent = client.post(
            f"/api/v1/rooms/{room_id}/messages",
            json={"content": "Meet at 7?"},
            headers=guest_headers,
        )
        assert sent.status_code == 201

        # Creator removes the guest, who loses access to the history
        kicked = client.delete(
            f"/api/v1/rooms/{room_id}/members/{guest}", headers=creator_headers
        )
        assert kicked.status_code == 204
        members = client.get(
            f"/api/v1/rooms/{room_id}/members", headers=creator_headers
        )
        assert members.json()["total"] == 1
        history = client.get(f"/api/v1/rooms/{room_id}/messages", headers=guest_headers)
        assert history.status_code == 403

        # Creator deletes the room; everything about it is gone
        deleted = client.delete(f"/api/v1/rooms/{room_id}", headers=creator_headers)
        assert deleted.status_code == 204
        assert client.get(f"/api/v1/rooms/{room_id}", headers=creator_headers).status_code == 404
        assert client.get(f"/api/v1/rooms/{room_id}/messages", headers=creator_headers).status_code == 404
        assert client.get(f"/api/v1/rooms/{room_id}/members", headers=creator_headers).status_code == 404
        assert count_rows(Room) == 0
        assert count_rows(RoomMember) == 0
        assert count_rows(Message) == 0

    def test_generated_invite_code_round_trip(
        self, client: TestClient, auth_headers_for_user
    ):
        creator_headers = auth_headers_for_user(uuid4())
        guest_headers = auth_headers_for_user(uuid4())

        created = client.post(
            "/api/v1/rooms", json={"name": "Climbing"}, headers=creator_headers
        )
        code = created.json()["invite_code"]
        joined = client.post(
            "/api/v1/rooms/join", json={"code": f"  {code} "}, headers=guest_headers
        )

        assert joined.status_code == 200
        rooms = client.get("/api/v1/rooms", headers=guest_headers).json()
        assert [r["name"] for r in rooms["rooms"]] == ["Climbing"]
