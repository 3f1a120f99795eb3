"""Event endpoints: validation, pagination, filters and permissions"""

from datetime import datetime, timedelta

from raid_ledger.shared.timeutils import utc_now

from .conftest import auth_headers, make_event, make_game, make_signup


def event_body(**overrides):
    body = {
        "title": "Raid Night",
        "description": "Bring flasks",
        "startTime": "2026-03-01T19:00:00.000Z",
        "endTime": "2026-03-01T22:00:00.000Z",
    }
    body.update(overrides)
    return body


class TestCreateEvent:
    def test_create(self, client, alice, wow):
        response = client.post("/events", json=event_body(gameId=wow.id), headers=auth_headers(alice))

        assert response.status_code == 201
        body = response.json()
        assert body["title"] == "Raid Night"
        assert body["startTime"] == "2026-03-01T19:00:00.000Z"
        assert body["endTime"] == "2026-03-01T22:00:00.000Z"
        assert body["creator"]["username"] == "alice"
        assert body["game"]["slug"] == "world-of-warcraft"
        assert body["signupCount"] == 0

    def test_offset_times_are_normalized_to_utc(self, client, alice):
        response = client.post(
            "/events",
            json=event_body(startTime="2026-03-01T14:00:00-05:00", endTime="2026-03-01T16:00:00-05:00"),
            headers=auth_headers(alice),
        )
        assert response.json()["startTime"] == "2026-03-01T19:00:00.000Z"

    def test_start_must_precede_end(self, client, alice):
        response = client.post(
            "/events",
            json=event_body(startTime="2026-03-01T22:00:00Z", endTime="2026-03-01T19:00:00Z"),
            headers=auth_headers(alice),
        )
        assert response.status_code == 400

    def test_unknown_game(self, client, alice):
        response = client.post("/events", json=event_body(gameId=404), headers=auth_headers(alice))
        assert response.status_code == 404

    def test_requires_authentication(self, client):
        assert client.post("/events", json=event_body()).status_code == 401


class TestListEvents:
    def test_ordered_by_start_with_counts(self, client, db_session, alice, bob):
        late = make_event(db_session, alice, datetime(2026, 3, 5, 20), title="Late")
        early = make_event(db_session, alice, datetime(2026, 3, 1, 20), title="Early")
        make_signup(db_session, late, alice)
        make_signup(db_session, late, bob)

        body = client.get("/events").json()

        assert [e["title"] for e in body["data"]] == ["Early", "Late"]
        assert [e["signupCount"] for e in body["data"]] == [0, 2]
        assert body["meta"] == {"total": 2, "page": 1, "limit": 20, "totalPages": 1}
        assert early.id != late.id

    def test_pagination(self, client, db_session, alice):
        for day in range(1, 6):
            make_event(db_session, alice, datetime(2026, 3, day, 20), title=f"Day {day}")

        body = client.get("/events", params={"page": 2, "limit": 2}).json()

        assert [e["title"] for e in body["data"]] == ["Day 3", "Day 4"]
        assert body["meta"] == {"total": 5, "page": 2, "limit": 2, "totalPages": 3}

    def test_limit_is_capped(self, client):
        body = client.get("/events", params={"limit": 500}).json()
        assert body["meta"]["limit"] == 100

    def test_upcoming_filter(self, client, db_session, alice):
        make_event(db_session, alice, utc_now() - timedelta(days=2), title="Past")
        make_event(db_session, alice, utc_now() + timedelta(days=2), title="Future")

        body = client.get("/events", params={"upcoming": "true"}).json()

        assert [e["title"] for e in body["data"]] == ["Future"]

    def test_date_range_filters(self, client, db_session, alice):
        make_event(db_session, alice, datetime(2026, 3, 1, 20), title="A")
        make_event(db_session, alice, datetime(2026, 3, 10, 20), title="B")
        make_event(db_session, alice, datetime(2026, 3, 20, 20), title="C")

        body = client.get(
            "/events",
            params={"startAfter": "2026-03-05T00:00:00Z", "endBefore": "2026-03-15T00:00:00Z"},
        ).json()

        assert [e["title"] for e in body["data"]] == ["B"]

    def test_game_filter(self, client, db_session, alice, wow):
        other = make_game(db_session, name="Destiny 2", slug="destiny-2", genres=[5])
        make_event(db_session, alice, datetime(2026, 3, 1, 20), game=wow, title="Raid")
        make_event(db_session, alice, datetime(2026, 3, 2, 20), game=other, title="Strike")

        body = client.get("/events", params={"gameId": other.id}).json()

        assert [e["title"] for e in body["data"]] == ["Strike"]


class TestSingleEvent:
    def test_get(self, client, db_session, alice):
        event = make_event(db_session, alice, datetime(2026, 3, 1, 20))
        assert client.get(f"/events/{event.id}").json()["id"] == event.id

    def test_get_unknown(self, client):
        assert client.get("/events/999").status_code == 404

    def test_creator_can_update(self, client, db_session, alice):
        event = make_event(db_session, alice, datetime(2026, 3, 1, 20))
        response = client.patch(
            f"/events/{event.id}", json={"title": "Mythic Night"}, headers=auth_headers(alice)
        )

        assert response.status_code == 200
        assert response.json()["title"] == "Mythic Night"

    def test_other_member_cannot_update(self, client, db_session, alice, bob):
        event = make_event(db_session, alice, datetime(2026, 3, 1, 20))
        response = client.patch(f"/events/{event.id}", json={"title": "Mine"}, headers=auth_headers(bob))
        assert response.status_code == 403

    def test_admin_can_update(self, client, db_session, alice, admin):
        event = make_event(db_session, alice, datetime(2026, 3, 1, 20))
        response = client.patch(f"/events/{event.id}", json={"title": "Fixed"}, headers=auth_headers(admin))
        assert response.status_code == 200

    def test_update_validates_merged_times(self, client, db_session, alice):
        event = make_event(db_session, alice, datetime(2026, 3, 1, 20), hours=2)
        response = client.patch(
            f"/events/{event.id}",
            json={"startTime": "2026-03-01T23:00:00Z"},
            headers=auth_headers(alice),
        )
        assert response.status_code == 400

    def test_delete(self, client, db_session, alice, bob):
        event = make_event(db_session, alice, datetime(2026, 3, 1, 20))
        make_signup(db_session, event, bob)

        assert client.delete(f"/events/{event.id}", headers=auth_headers(bob)).status_code == 403
        assert client.delete(f"/events/{event.id}", headers=auth_headers(alice)).status_code == 204
        assert client.get(f"/events/{event.id}").status_code == 404
