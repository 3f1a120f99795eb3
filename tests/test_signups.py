"""Signup endpoints: idempotent signup, confirmation, status and roster assignments"""

from datetime import datetime

from raid_ledger.models import RosterAssignment

from .conftest import auth_headers, make_character, make_event, make_game, make_signup, make_user


class TestSignup:
    def test_signup_is_pending(self, client, db_session, alice, bob):
        event = make_event(db_session, alice, datetime(2026, 3, 1, 20))
        response = client.post(f"/events/{event.id}/signup", headers=auth_headers(bob))

        assert response.status_code == 201
        body = response.json()
        assert body["eventId"] == event.id
        assert body["user"]["username"] == "bob"
        assert body["confirmationStatus"] == "pending"
        assert body["status"] == "signed_up"
        assert body["signedUpAt"].endswith("Z")

    def test_signup_is_idempotent(self, client, db_session, alice, bob):
        event = make_event(db_session, alice, datetime(2026, 3, 1, 20))
        first = client.post(f"/events/{event.id}/signup", json={"note": "first"}, headers=auth_headers(bob))
        second = client.post(f"/events/{event.id}/signup", json={"note": "second"}, headers=auth_headers(bob))

        assert second.json()["id"] == first.json()["id"]
        assert second.json()["note"] == "first"
        assert client.get(f"/events/{event.id}/roster").json()["count"] == 1

    def test_signup_with_character_confirms(self, client, db_session, alice, bob, wow):
        event = make_event(db_session, alice, datetime(2026, 3, 1, 20), game=wow)
        character = make_character(db_session, bob, wow, "Thrall", class_name="Shaman")

        body = client.post(
            f"/events/{event.id}/signup", json={"characterId": character.id}, headers=auth_headers(bob)
        ).json()

        assert body["confirmationStatus"] == "confirmed"
        assert body["character"]["name"] == "Thrall"
        assert body["character"]["className"] == "Shaman"

    def test_signup_with_foreign_character_is_rejected(self, client, db_session, alice, bob, wow):
        event = make_event(db_session, alice, datetime(2026, 3, 1, 20), game=wow)
        character = make_character(db_session, alice, wow)

        response = client.post(
            f"/events/{event.id}/signup", json={"characterId": character.id}, headers=auth_headers(bob)
        )
        assert response.status_code == 400

    def test_signup_with_slot_creates_assignment(self, client, db_session, alice, bob, wow):
        event = make_event(db_session, alice, datetime(2026, 3, 1, 20), game=wow)
        client.post(
            f"/events/{event.id}/signup",
            json={"slotRole": "healer", "slotPosition": 2},
            headers=auth_headers(bob),
        )

        roster = client.get(f"/events/{event.id}/roster/assignments").json()

        assert roster["pool"] == []
        assert [(a["username"], a["slot"], a["position"]) for a in roster["assignments"]] == [
            ("bob", "healer", 2)
        ]

    def test_unknown_event(self, client, bob):
        assert client.post("/events/999/signup", headers=auth_headers(bob)).status_code == 404


class TestConfirmSignup:
    def test_first_confirm_then_change(self, client, db_session, alice, bob, wow):
        event = make_event(db_session, alice, datetime(2026, 3, 1, 20), game=wow)
        signup = make_signup(db_session, event, bob)
        main = make_character(db_session, bob, wow, "Thrall", is_main=True)
        alt = make_character(db_session, bob, wow, "Jaina")
        url = f"/events/{event.id}/signups/{signup.id}/confirm"

        first = client.patch(url, json={"characterId": main.id}, headers=auth_headers(bob))
        second = client.patch(url, json={"characterId": alt.id}, headers=auth_headers(bob))

        assert first.json()["confirmationStatus"] == "confirmed"
        assert second.json()["confirmationStatus"] == "changed"
        assert second.json()["characterId"] == alt.id

    def test_cannot_confirm_someone_elses_signup(self, client, db_session, alice, bob, wow):
        event = make_event(db_session, alice, datetime(2026, 3, 1, 20), game=wow)
        signup = make_signup(db_session, event, bob)
        character = make_character(db_session, alice, wow)

        response = client.patch(
            f"/events/{event.id}/signups/{signup.id}/confirm",
            json={"characterId": character.id},
            headers=auth_headers(alice),
        )
        assert response.status_code == 403

    def test_unknown_signup(self, client, db_session, alice, bob, wow):
        event = make_event(db_session, alice, datetime(2026, 3, 1, 20), game=wow)
        character = make_character(db_session, bob, wow)
        response = client.patch(
            f"/events/{event.id}/signups/999/confirm",
            json={"characterId": character.id},
            headers=auth_headers(bob),
        )
        assert response.status_code == 404


class TestStatusAndCancel:
    def test_update_status(self, client, db_session, alice, bob):
        event = make_event(db_session, alice, datetime(2026, 3, 1, 20))
        make_signup(db_session, event, bob)

        response = client.patch(
            f"/events/{event.id}/signup/status", json={"status": "tentative"}, headers=auth_headers(bob)
        )

        assert response.status_code == 200
        assert response.json()["status"] == "tentative"

    def test_invalid_status(self, client, db_session, alice, bob):
        event = make_event(db_session, alice, datetime(2026, 3, 1, 20))
        make_signup(db_session, event, bob)
        response = client.patch(
            f"/events/{event.id}/signup/status", json={"status": "maybe"}, headers=auth_headers(bob)
        )
        assert response.status_code == 422

    def test_cancel(self, client, db_session, alice, bob):
        event = make_event(db_session, alice, datetime(2026, 3, 1, 20))
        make_signup(db_session, event, bob)

        assert client.delete(f"/events/{event.id}/signup", headers=auth_headers(bob)).status_code == 204
        assert client.delete(f"/events/{event.id}/signup", headers=auth_headers(bob)).status_code == 404
        assert client.get(f"/events/{event.id}/roster").json()["count"] == 0


class TestRoster:
    def test_roster_in_signup_order(self, client, db_session, alice, bob):
        event = make_event(db_session, alice, datetime(2026, 3, 1, 20))
        make_signup(db_session, event, bob)
        make_signup(db_session, event, alice)

        body = client.get(f"/events/{event.id}/roster").json()

        assert body["eventId"] == event.id
        assert body["count"] == 2
        assert [s["user"]["username"] for s in body["signups"]] == ["bob", "alice"]

    def test_roster_unknown_event(self, client):
        assert client.get("/events/999/roster").status_code == 404

    def test_mmo_games_get_role_slots(self, client, db_session, alice, wow):
        event = make_event(db_session, alice, datetime(2026, 3, 1, 20), game=wow)
        slots = client.get(f"/events/{event.id}/roster/assignments").json()["slots"]
        assert slots == {"tank": 2, "healer": 4, "dps": 14, "flex": 5}

    def test_other_games_get_player_slots(self, client, db_session, alice):
        game = make_game(db_session, name="Valorant", slug="valorant", genres=[5])
        event = make_event(db_session, alice, datetime(2026, 3, 1, 20), game=game)
        slots = client.get(f"/events/{event.id}/roster/assignments").json()["slots"]
        assert slots == {"player": 10, "bench": 5}

    def test_update_roster_replaces_assignments(self, client, db_session, alice, bob):
        carol = make_user(db_session, "carol")
        event = make_event(db_session, alice, datetime(2026, 3, 1, 20))
        make_signup(db_session, event, bob)
        make_signup(db_session, event, carol)
        url = f"/events/{event.id}/roster"

        client.patch(
            url,
            json={"assignments": [{"userId": bob.id, "slot": "player", "position": 1}]},
            headers=auth_headers(alice),
        )
        response = client.patch(
            url,
            json={"assignments": [{"userId": carol.id, "slot": "bench", "position": 1, "isOverride": True}]},
            headers=auth_headers(alice),
        )

        body = response.json()
        assert response.status_code == 200
        assert [(a["username"], a["slot"], a["isOverride"]) for a in body["assignments"]] == [
            ("carol", "bench", True)
        ]
        assert [p["username"] for p in body["pool"]] == ["bob"]
        db_session.expire_all()
        assert db_session.query(RosterAssignment).count() == 1

    def test_update_roster_requires_signed_up_users(self, client, db_session, alice, bob):
        event = make_event(db_session, alice, datetime(2026, 3, 1, 20))
        response = client.patch(
            f"/events/{event.id}/roster",
            json={"assignments": [{"userId": bob.id, "slot": "player", "position": 1}]},
            headers=auth_headers(alice),
        )
        assert response.status_code == 400

    def test_update_roster_rejects_duplicate_users(self, client, db_session, alice, bob):
        event = make_event(db_session, alice, datetime(2026, 3, 1, 20))
        signup = make_signup(db_session, event, bob)
        db_session.add(RosterAssignment(event_id=event.id, signup_id=signup.id, role="player", position=1))
        db_session.commit()

        response = client.patch(
            f"/events/{event.id}/roster",
            json={
                "assignments": [
                    {"userId": bob.id, "slot": "player", "position": 1},
                    {"userId": bob.id, "slot": "bench", "position": 1},
                ]
            },
            headers=auth_headers(alice),
        )

        assert response.status_code == 400
        assert str(bob.id) in response.json()["detail"]
        db_session.expire_all()
        assert [a.role for a in db_session.query(RosterAssignment).all()] == ["player"]

    def test_update_roster_requires_organizer(self, client, db_session, alice, bob, admin):
        event = make_event(db_session, alice, datetime(2026, 3, 1, 20))
        body = {"assignments": []}

        assert client.patch(f"/events/{event.id}/roster", json=body, headers=auth_headers(bob)).status_code == 403
        assert client.patch(f"/events/{event.id}/roster", json=body, headers=auth_headers(admin)).status_code == 200
