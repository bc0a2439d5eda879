"""Tests for the emotion catalog and daily tracking."""

from datetime import date

import pytest
from conftest import auth

from spotjott.models import Emotion, EmotionTracker
from spotjott.services.emotions import DEFAULT_EMOTIONS, parse_day, seed_default_emotions


def create_emotion(client, token, slug="joyful", name="Joyful"):
    response = client.post("/api/emotions", json={"emotionSlug": slug, "emotionName": name}, headers=auth(token))
    assert response.status_code == 201, response.text
    return response.json()["data"]


def track(client, token, emotion_id, day=None):
    body = {"emotionId": emotion_id}
    if day:
        body["date"] = day
    return client.post("/api/emotions/track", json=body, headers=auth(token))


class TestParseDay:
    """Test tracking date parsing."""

    @pytest.mark.parametrize("value,expected", [
        ("2024-03-05", date(2024, 3, 5)),
        ("2024-03-05T22:10:00", date(2024, 3, 5)),
        ("2024-03-05T22:10:00Z", date(2024, 3, 5)),
        (date(2024, 3, 5), date(2024, 3, 5)),
    ])
    def test_valid(self, value, expected):
        assert parse_day(value) == expected

    @pytest.mark.parametrize("value", ["yesterday", "2024-13-01", ""])
    def test_invalid(self, value):
        assert parse_day(value) is None


class TestCatalog:
    """Test the shared emotion catalog."""

    def test_seed_defaults_is_idempotent(self, db):
        assert seed_default_emotions(db) == len(DEFAULT_EMOTIONS)
        assert seed_default_emotions(db) == 0
        assert db.query(Emotion).count() == len(DEFAULT_EMOTIONS)

    def test_list_sorted_by_name(self, client, alice):
        create_emotion(client, alice[1], "zen", "Zen")
        create_emotion(client, alice[1], "awe", "Awe")
        emotions = client.get("/api/emotions", headers=auth(alice[1])).json()["data"]["emotions"]
        assert [e["emotionName"] for e in emotions] == ["Awe", "Zen"]

    def test_create_normalizes_slug(self, client, alice):
        emotion = create_emotion(client, alice[1], "  Proud ", "Proud")
        assert emotion["emotionSlug"] == "proud"

    def test_create_requires_fields(self, client, alice):
        response = client.post("/api/emotions", json={"emotionName": "x"}, headers=auth(alice[1]))
        assert response.status_code == 400
        assert response.json()["error"] == "Emotion slug is required"

        response = client.post("/api/emotions", json={"emotionSlug": "x"}, headers=auth(alice[1]))
        assert response.status_code == 400
        assert response.json()["error"] == "Emotion name is required"

    def test_duplicate_slug(self, client, alice):
        create_emotion(client, alice[1])
        response = client.post(
            "/api/emotions", json={"emotionSlug": "joyful", "emotionName": "Again"}, headers=auth(alice[1])
        )
        assert response.status_code == 409
        assert response.json()["error"] == "Emotion with this slug already exists"

    def test_update(self, client, alice):
        emotion = create_emotion(client, alice[1])
        other = create_emotion(client, alice[1], "glad", "Glad")

        response = client.put(
            f"/api/emotions/{emotion['id']}", json={"emotionName": "Very joyful"}, headers=auth(alice[1])
        )
        assert response.status_code == 200
        assert response.json()["data"]["emotionName"] == "Very joyful"
        assert response.json()["data"]["emotionSlug"] == "joyful"

        conflict = client.put(
            f"/api/emotions/{emotion['id']}", json={"emotionSlug": other["emotionSlug"]}, headers=auth(alice[1])
        )
        assert conflict.status_code == 409

    def test_delete_unused(self, client, db, alice):
        emotion = create_emotion(client, alice[1])
        response = client.delete(f"/api/emotions/{emotion['id']}", headers=auth(alice[1]))
        assert response.status_code == 200
        assert db.query(Emotion).count() == 0

    def test_delete_in_use_is_refused(self, client, db, alice):
        emotion = create_emotion(client, alice[1])
        track(client, alice[1], emotion["id"], "2024-01-01")

        response = client.delete(f"/api/emotions/{emotion['id']}", headers=auth(alice[1]))
        assert response.status_code == 409
        assert response.json()["error"] == "Cannot delete emotion. It is being used in 1 tracking record(s)"
        assert db.query(Emotion).count() == 1


class TestTracking:
    """Test POST /api/emotions/track and the history."""

    def test_track_defaults_to_today(self, client, alice):
        emotion = create_emotion(client, alice[1])
        response = track(client, alice[1], emotion["id"])
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["emotionId"] == emotion["id"]
        assert data["date"]

    def test_same_day_replaces_emotion(self, client, db, alice):
        first = create_emotion(client, alice[1])
        second = create_emotion(client, alice[1], "weary", "Weary")

        one = track(client, alice[1], first["id"], "2024-05-01T08:00:00Z").json()["data"]
        two = track(client, alice[1], str(second["id"]), "2024-05-01").json()["data"]

        assert one["id"] == two["id"]
        assert two["emotionId"] == second["id"]
        assert db.query(EmotionTracker).count() == 1

    def test_days_are_per_user(self, client, db, alice, bob):
        emotion = create_emotion(client, alice[1])
        track(client, alice[1], emotion["id"], "2024-05-01")
        track(client, bob[1], emotion["id"], "2024-05-01")
        assert db.query(EmotionTracker).count() == 2

    @pytest.mark.parametrize("emotion_id,day,status,message", [
        (None, None, 400, "Emotion ID is required"),
        ("abc", None, 400, "Invalid emotion ID"),
        (999, None, 404, "Emotion not found"),
    ])
    def test_track_rejects_bad_emotion(self, client, alice, emotion_id, day, status, message):
        response = client.post(
            "/api/emotions/track", json={"emotionId": emotion_id, "date": day}, headers=auth(alice[1])
        )
        assert response.status_code == status
        assert response.json()["error"] == message

    def test_track_rejects_bad_date(self, client, alice):
        emotion = create_emotion(client, alice[1])
        response = track(client, alice[1], emotion["id"], "not-a-date")
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid date format"

    def test_history_range_newest_first(self, client, alice, bob):
        emotion = create_emotion(client, alice[1])
        for day in ("2024-05-01", "2024-05-03", "2024-05-05"):
            track(client, alice[1], emotion["id"], day)
        track(client, bob[1], emotion["id"], "2024-05-03")

        history = client.get(
            "/api/emotions/history",
            params={"startDate": "2024-05-02", "endDate": "2024-05-05"},
            headers=auth(alice[1]),
        ).json()["data"]["history"]
        assert [h["date"] for h in history] == ["2024-05-05", "2024-05-03"]
        assert history[0]["emotion"]["emotionSlug"] == "joyful"

    def test_history_ignores_unparsable_bounds(self, client, alice):
        emotion = create_emotion(client, alice[1])
        track(client, alice[1], emotion["id"], "2024-05-01")
        history = client.get(
            "/api/emotions/history", params={"startDate": "whenever"}, headers=auth(alice[1])
        ).json()["data"]["history"]
        assert len(history) == 1
