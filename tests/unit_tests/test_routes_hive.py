"""Tests for the hive endpoints."""

from datetime import datetime
from datetime import timedelta

import pytest

from tests.consts import HIVES_URL
from tests.consts import SITE_URL


def iso(value: datetime) -> str:
    return value.isoformat().replace("+00:00", "Z")


def parse_json_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def create_hive(client, clock, mode="live", closes_in=timedelta(hours=1), reveal_in=None, **overrides):
    payload = {
        "title": "Farewell Ada",
        "recipient_name": "Ada",
        "mode": mode,
        "closes_at": iso(clock.now + closes_in),
    }
    if reveal_in is not None:
        payload["reveal_at"] = iso(clock.now + reveal_in)
    payload.update(overrides)
    return client.post(HIVES_URL, json=payload)


def submit(client, hive_id, name="Grace", message="Good luck!"):
    return client.post(f"{HIVES_URL}/{hive_id}/messages", json={"contributor_name": name, "message": message})


class TestCreateHive:
    """Tests for POST /hives."""

    def test_create_live_hive_issues_distinct_tokens(self, client, clock, memory_store):
        response = create_hive(client, clock)

        assert response.status_code == 201
        data = response.json()
        hive_id = data["HiveId"]
        assert len(data["ModeratorToken"]) >= 32
        assert len(data["RecipientToken"]) >= 32
        assert data["ModeratorToken"] != data["RecipientToken"]
        assert data["ContributorLink"] == f"{SITE_URL}/hive/{hive_id}"
        assert data["ModeratorLink"] == f"{SITE_URL}/hive/{hive_id}?token={data['ModeratorToken']}"
        assert data["RecipientLink"] == f"{SITE_URL}/hive/{hive_id}?token={data['RecipientToken']}"
        assert len(memory_store.hives) == 1

    def test_reveal_without_reveal_at_persists_nothing(self, client, clock, memory_store):
        response = create_hive(client, clock, mode="reveal")

        assert response.status_code == 400
        assert response.json() == {"detail": "Reveal mode requires revealAt.", "error_type": "HiveValidationError"}
        assert memory_store.hives == {}
        assert memory_store.secrets == {}

    @pytest.mark.parametrize(
        "overrides,detail",
        [
            ({"title": "  "}, "Missing title or recipient name."),
            ({"recipient_name": None}, "Missing title or recipient name."),
            ({"mode": "weekly"}, "Mode must be 'live' or 'reveal'."),
            ({"closes_at": None}, "Missing closesAt."),
            ({"closes_at": "tomorrow"}, "closesAt is not a valid timestamp."),
            ({"closes_at": "9999-12-31T23:30:00-01:00"}, "closesAt is not a valid timestamp."),
        ],
        ids=["blank_title", "no_recipient", "bad_mode", "no_closes_at", "bad_closes_at", "closes_at_past_max_year"],
    )
    def test_invalid_input(self, client, clock, memory_store, overrides, detail):
        response = create_hive(client, clock, **overrides)

        assert response.status_code == 400
        assert response.json()["detail"] == detail
        assert memory_store.hives == {}


class TestGetHive:
    """Tests for GET /hives/{hive_id}."""

    def test_public_view_has_no_tokens_or_messages(self, client, clock):
        created = create_hive(client, clock, mode="reveal", reveal_in=timedelta(hours=2)).json()
        submit(client, created["HiveId"])

        response = client.get(f"{HIVES_URL}/{created['HiveId']}")

        assert response.status_code == 200
        data = response.json()
        assert data["Title"] == "Farewell Ada"
        assert data["Mode"] == "reveal"
        assert data["State"] == "open"
        assert data["IsClosed"] is False
        assert data["IsRevealed"] is False
        assert data["Harvested"] is False
        assert data["MessageCount"] == 1
        assert parse_json_timestamp(data["RevealAt"]) == clock.now + timedelta(hours=2)
        assert created["ModeratorToken"] not in response.text
        assert "Good luck!" not in response.text

    def test_state_follows_the_clock(self, client, clock):
        created = create_hive(client, clock).json()
        clock.advance(hours=1)

        data = client.get(f"{HIVES_URL}/{created['HiveId']}").json()

        assert data["State"] == "closed_unharvested"
        assert data["IsClosed"] is True

    @pytest.mark.parametrize("hive_id", ["6f1c2e0e-8d3b-4a57-9a43-5b0c3c1f2d11", "not-a-uuid", "%7Bhive_id%7D"])
    def test_not_found(self, client, hive_id):
        response = client.get(f"{HIVES_URL}/{hive_id}")

        assert response.status_code == 404
        assert response.json()["error_type"] == "HiveNotFoundError"


class TestVerifyAccess:
    """Tests for POST /hives/{hive_id}/access."""

    def test_roles(self, client, clock):
        created = create_hive(client, clock).json()
        url = f"{HIVES_URL}/{created['HiveId']}/access"

        moderator = client.post(url, json={"token": created["ModeratorToken"]}).json()
        recipient = client.post(url, headers={"X-Hive-Token": created["RecipientToken"]}).json()
        nobody = client.post(url, json={"token": ""}).json()

        assert moderator == {"Authorized": True, "Role": "moderator"}
        assert recipient == {"Authorized": True, "Role": "recipient"}
        assert nobody == {"Authorized": False, "Role": "unauthorized"}

    def test_query_token(self, client, clock):
        created = create_hive(client, clock).json()

        response = client.post(
            f"{HIVES_URL}/{created['HiveId']}/access",
            params={"token": created["ModeratorToken"]},
        )

        assert response.json()["Role"] == "moderator"

    def test_unknown_hive_is_not_an_error(self, client):
        response = client.post(f"{HIVES_URL}/6f1c2e0e-8d3b-4a57-9a43-5b0c3c1f2d11/access", json={"token": "x" * 64})

        assert response.status_code == 200
        assert response.json()["Authorized"] is False

    def test_lone_surrogate_token_is_not_an_error(self, client, clock):
        created = create_hive(client, clock).json()

        response = client.post(
            f"{HIVES_URL}/{created['HiveId']}/access",
            content='{"token": "\\ud800abc"}',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 200
        assert response.json() == {"Authorized": False, "Role": "unauthorized"}


class TestMessages:
    """Tests for GET and POST /hives/{hive_id}/messages."""

    def test_reveal_hive_gates_reading_until_reveal_at(self, client, clock):
        created = create_hive(client, clock, mode="reveal", reveal_in=timedelta(hours=1), closes_in=timedelta(hours=2))
        hive_id = created.json()["HiveId"]
        token = created.json()["ModeratorToken"]
        first = submit(client, hive_id, "Grace", "first").json()["MessageId"]
        clock.advance(minutes=5)
        second = submit(client, hive_id, "Alan", "second").json()["MessageId"]

        before = client.get(f"{HIVES_URL}/{hive_id}/messages", params={"token": token})
        assert before.status_code == 200
        assert before.json() == {"Revealed": False, "Count": 0, "Messages": []}

        clock.advance(minutes=85)
        after = client.get(f"{HIVES_URL}/{hive_id}/messages", headers={"X-Hive-Token": token}).json()

        assert after["Revealed"] is True
        assert after["Count"] == 2
        assert [m["MessageId"] for m in after["Messages"]] == [second, first]
        assert after["Messages"][0]["ContributorName"] == "Alan"

    def test_listing_requires_a_token(self, client, clock):
        hive_id = create_hive(client, clock).json()["HiveId"]

        response = client.get(f"{HIVES_URL}/{hive_id}/messages")

        assert response.status_code == 401
        assert response.json()["error_type"] == "UnauthorizedError"

    def test_submit_needs_no_token(self, client, clock):
        hive_id = create_hive(client, clock).json()["HiveId"]

        response = submit(client, hive_id)

        assert response.status_code == 201
        assert response.json()["MessageId"]

    def test_submit_to_closed_hive(self, client, clock):
        hive_id = create_hive(client, clock, closes_in=timedelta(minutes=-1)).json()["HiveId"]

        response = submit(client, hive_id)

        assert response.status_code == 409
        assert response.json() == {
            "detail": "This Hive is closed. No new honey can be added.",
            "error_type": "HiveClosedError",
        }

    def test_submit_requires_name_and_message(self, client, clock):
        hive_id = create_hive(client, clock).json()["HiveId"]

        response = submit(client, hive_id, name=" ", message="hi")

        assert response.status_code == 400

    def test_submit_to_unknown_hive(self, client):
        response = submit(client, "6f1c2e0e-8d3b-4a57-9a43-5b0c3c1f2d11")

        assert response.status_code == 404


class TestSubscribe:
    """Tests for POST /hives/{hive_id}/subscribers."""

    def test_subscribe(self, client, clock, memory_store):
        hive_id = create_hive(client, clock).json()["HiveId"]

        response = client.post(f"{HIVES_URL}/{hive_id}/subscribers", json={"email": "grace@example.com"})

        assert response.status_code == 201
        assert list(memory_store.subscribers.values()) == [["grace@example.com"]]

    def test_invalid_email(self, client, clock):
        hive_id = create_hive(client, clock).json()["HiveId"]

        response = client.post(f"{HIVES_URL}/{hive_id}/subscribers", json={"email": "grace"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Please enter a valid email address."


class TestHarvest:
    """Tests for POST /hives/{hive_id}/harvest."""

    def test_harvest_closed_hive_then_repeat(self, client, clock, notifier):
        created = create_hive(client, clock, closes_in=timedelta(minutes=10)).json()
        hive_id = created["HiveId"]
        for email in ("grace@example.com", "Grace@Example.com", "alan@example.com"):
            client.post(f"{HIVES_URL}/{hive_id}/subscribers", json={"email": email})
        clock.advance(minutes=11)

        assert submit(client, hive_id).status_code == 409

        url = f"{HIVES_URL}/{hive_id}/harvest"
        first = client.post(url, params={"token": created["RecipientToken"]}, json={"thank_you_message": "Thanks!"})

        assert first.status_code == 200
        assert first.json()["SentCount"] == 2
        assert first.json()["AttemptedCount"] == 2
        assert sorted(notifier.recipients) == ["alan@example.com", "grace@example.com"]
        subject, body = notifier.sent[0][1], notifier.sent[0][2]
        assert subject == "A thank-you from Ada"
        assert "Thanks!" in body
        assert f"{SITE_URL}/hive/{hive_id}" in body

        again = client.post(url, params={"token": created["RecipientToken"]}, json={"thank_you_message": "Thanks!"})

        assert again.status_code == 409
        assert again.json()["error_type"] == "AlreadyHarvestedError"
        assert len(notifier.sent) == 2

        public = client.get(f"{HIVES_URL}/{hive_id}").json()
        assert public["State"] == "harvested"
        assert public["ThankYouMessage"] == "Thanks!"

        late = client.post(f"{HIVES_URL}/{hive_id}/subscribers", json={"email": "late@example.com"})
        assert late.status_code == 409

    @pytest.mark.parametrize("token", [None, "wrong"], ids=["missing", "wrong"])
    def test_harvest_before_close(self, client, clock, token):
        created = create_hive(client, clock).json()
        params = {"token": token} if token else {}

        response = client.post(
            f"{HIVES_URL}/{created['HiveId']}/harvest",
            params=params,
            json={"thank_you_message": "Thanks!"},
        )

        assert response.status_code == 409
        assert response.json()["error_type"] == "NotClosedError"

    def test_harvest_with_wrong_token(self, client, clock):
        created = create_hive(client, clock, closes_in=timedelta(minutes=-1)).json()

        response = client.post(
            f"{HIVES_URL}/{created['HiveId']}/harvest",
            headers={"X-Hive-Token": "f" * 64},
            json={"thank_you_message": "Thanks!"},
        )

        assert response.status_code == 401

    def test_harvest_needs_a_thank_you(self, client, clock):
        created = create_hive(client, clock, closes_in=timedelta(minutes=-1)).json()

        response = client.post(
            f"{HIVES_URL}/{created['HiveId']}/harvest",
            headers={"X-Hive-Token": created["ModeratorToken"]},
            json={"thank_you_message": "   "},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Please write a thank-you message first."


class TestStoreUnavailable:
    """Hive routes without a configured database."""

    def test_store_errors_surface_as_503(self, unconfigured_client):
        response = unconfigured_client.post(
            HIVES_URL,
            json={
                "title": "Farewell Ada",
                "recipient_name": "Ada",
                "mode": "live",
                "closes_at": "2030-01-01T00:00:00Z",
            },
        )

        assert response.status_code == 503
        assert response.json()["error_type"] == "StoreError"

    def test_validation_still_runs_first(self, unconfigured_client):
        response = unconfigured_client.post(HIVES_URL, json={"title": "", "mode": "live"})

        assert response.status_code == 400
