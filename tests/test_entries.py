"""Tests for diary entries and their tags."""

import pytest
from conftest import PNG_BYTES, auth

from spotjott.errors import MaxTagsError
from spotjott.models import DiaryEntry, DiaryEntryTag, Tag
from spotjott.services.tags import parse_tag_names


def create_diary(client, token, is_public=False):
    response = client.post("/api/diaries", json={"name": "Journal", "isPublic": is_public}, headers=auth(token))
    return response.json()["data"]["id"]


def create_entry(client, token, diary_id, title="Day one", content="It rained.", **fields):
    form = {"title": title, "content": content, "diaryId": str(diary_id), **fields}
    return client.post("/api/diary-entries", data=form, headers=auth(token))


class TestParseTagNames:
    """Test tag input normalization."""

    def test_trims_lowercases_and_dedupes(self):
        assert parse_tag_names(" Travel, food ,travel,,FOOD ") == ["travel", "food"]

    def test_accepts_lists(self):
        assert parse_tag_names(["a", "b"]) == ["a", "b"]

    def test_cap_applies_after_dedupe(self):
        assert len(parse_tag_names("a,b,c,d,e,a,b")) == 5
        with pytest.raises(MaxTagsError) as exc:
            parse_tag_names("a,b,c,d,e,f")
        assert exc.value.message == "Maximum 5 tags allowed per entry"


class TestCreateEntry:
    """Test POST /api/diary-entries."""

    def test_create_with_tags(self, client, alice):
        diary_id = create_diary(client, alice[1])
        response = create_entry(client, alice[1], diary_id, tags="Travel, food, travel")
        assert response.status_code == 201
        entry = response.json()["data"]
        assert entry["diaryId"] == diary_id
        assert entry["favorite"] is False
        assert [t["name"] for t in entry["tags"]] == ["travel", "food"]

    def test_tags_are_shared_per_user(self, client, db, alice):
        diary_id = create_diary(client, alice[1])
        create_entry(client, alice[1], diary_id, tags="travel")
        create_entry(client, alice[1], diary_id, title="Day two", tags="travel")
        assert db.query(Tag).count() == 1
        assert db.query(DiaryEntryTag).count() == 2

    def test_too_many_tags_writes_nothing(self, client, db, alice, media):
        diary_id = create_diary(client, alice[1])
        response = create_entry(client, alice[1], diary_id, tags="a,b,c,d,e,f")
        assert response.status_code == 400
        assert response.json()["error"] == "Maximum 5 tags allowed per entry"
        assert db.query(DiaryEntry).count() == 0
        assert db.query(Tag).count() == 0
        assert media.uploads == []

    def test_repeated_tag_fields(self, client, alice):
        diary_id = create_diary(client, alice[1])
        response = create_entry(client, alice[1], diary_id, tags=["Travel", "food,sea"])
        assert response.status_code == 201
        assert [t["name"] for t in response.json()["data"]["tags"]] == ["travel", "food", "sea"]

    def test_too_many_repeated_tag_fields_writes_nothing(self, client, db, alice):
        diary_id = create_diary(client, alice[1])
        response = create_entry(client, alice[1], diary_id, tags=[f"t{i}" for i in range(6)])
        assert response.status_code == 400
        assert response.json()["error"] == "Maximum 5 tags allowed per entry"
        assert db.query(DiaryEntry).count() == 0
        assert db.query(Tag).count() == 0
        assert db.query(DiaryEntryTag).count() == 0

    def test_create_from_json_body(self, client, alice):
        diary_id = create_diary(client, alice[1])
        response = client.post(
            "/api/diary-entries",
            json={"title": "Day one", "content": "It rained.", "diaryId": diary_id, "tags": ["Travel", "food"]},
            headers=auth(alice[1]),
        )
        assert response.status_code == 201, response.text
        entry = response.json()["data"]
        assert entry["diaryId"] == diary_id
        assert [t["name"] for t in entry["tags"]] == ["travel", "food"]

    def test_json_body_tag_cap(self, client, db, alice):
        diary_id = create_diary(client, alice[1])
        response = client.post(
            "/api/diary-entries",
            json={"title": "t", "content": "c", "diaryId": diary_id, "tags": "a,b,c,d,e,f"},
            headers=auth(alice[1]),
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Maximum 5 tags allowed per entry"
        assert db.query(DiaryEntry).count() == 0

    @pytest.mark.parametrize("form,message", [
        ({"title": " ", "content": "c"}, "Entry title is required"),
        ({"title": "t", "content": ""}, "Entry content is required"),
    ])
    def test_required_fields(self, client, alice, form, message):
        diary_id = create_diary(client, alice[1])
        response = create_entry(client, alice[1], diary_id, **form)
        assert response.status_code == 400
        assert response.json()["error"] == message

    def test_diary_id_checks(self, client, alice):
        missing = client.post("/api/diary-entries", data={"title": "t", "content": "c"}, headers=auth(alice[1]))
        assert missing.json()["error"] == "Diary ID is required"

        invalid = create_entry(client, alice[1], "abc")
        assert invalid.status_code == 400
        assert invalid.json()["error"] == "Invalid diary ID"

        unknown = create_entry(client, alice[1], 999)
        assert unknown.status_code == 404
        assert unknown.json()["error"] == "Diary not found"

    def test_cannot_write_into_someone_elses_diary(self, client, alice, bob):
        diary_id = create_diary(client, alice[1], is_public=True)
        response = create_entry(client, bob[1], diary_id)
        assert response.status_code == 403
        assert response.json()["error"] == "You don't have permission to add entries to this diary"

    def test_cover_image_upload(self, client, alice, media):
        diary_id = create_diary(client, alice[1])
        response = client.post(
            "/api/diary-entries",
            data={"title": "t", "content": "c", "diaryId": str(diary_id)},
            files={"coverImage": ("cover.png", PNG_BYTES, "image/png")},
            headers=auth(alice[1]),
        )
        assert response.status_code == 201
        public_id = media.uploads[0][0]
        assert public_id.startswith("diary-entries/")
        assert response.json()["data"]["coverImage"] == f"https://media.test/{public_id}"

    def test_cover_upload_failure_aborts(self, client, db, alice, media):
        diary_id = create_diary(client, alice[1])
        media.fail_uploads = True
        response = client.post(
            "/api/diary-entries",
            data={"title": "t", "content": "c", "diaryId": str(diary_id), "tags": "x"},
            files={"coverImage": ("cover.png", PNG_BYTES, "image/png")},
            headers=auth(alice[1]),
        )
        assert response.status_code == 400
        assert db.query(DiaryEntry).count() == 0
        assert db.query(Tag).count() == 0


class TestListEntries:
    """Test GET /api/diary-entries/diary/{id}."""

    def test_owner_lists_private_entries_newest_first(self, client, alice):
        diary_id = create_diary(client, alice[1])
        first = create_entry(client, alice[1], diary_id, title="first").json()["data"]
        second = create_entry(client, alice[1], diary_id, title="second").json()["data"]

        data = client.get(
            f"/api/diary-entries/diary/{diary_id}", params={"limit": 1}, headers=auth(alice[1])
        ).json()["data"]
        assert [e["id"] for e in data["entries"]] == [second["id"]]
        assert data["total"] == 2
        assert data["hasMore"] is True

        data = client.get(
            f"/api/diary-entries/diary/{diary_id}", params={"limit": 1, "page": 2}, headers=auth(alice[1])
        ).json()["data"]
        assert [e["id"] for e in data["entries"]] == [first["id"]]
        assert data["hasMore"] is False

    def test_private_entries_hidden_from_others(self, client, alice, bob):
        diary_id = create_diary(client, alice[1])
        create_entry(client, alice[1], diary_id)
        response = client.get(f"/api/diary-entries/diary/{diary_id}", headers=auth(bob[1]))
        assert response.status_code == 403
        assert response.json()["error"] == "You don't have permission to view these entries"

    def test_public_entries_visible_to_others(self, client, alice, bob):
        diary_id = create_diary(client, alice[1], is_public=True)
        create_entry(client, alice[1], diary_id)
        response = client.get(f"/api/diary-entries/diary/{diary_id}", headers=auth(bob[1]))
        assert response.status_code == 200
        assert len(response.json()["data"]["entries"]) == 1


class TestUpdateDeleteEntry:
    """Test PUT and DELETE /api/diary-entries/{id}."""

    def test_update_replaces_tags_and_sets_favorite(self, client, db, alice):
        diary_id = create_diary(client, alice[1])
        entry = create_entry(client, alice[1], diary_id, tags="a,b").json()["data"]

        response = client.put(
            f"/api/diary-entries/{entry['id']}",
            json={"favorite": True, "tags": ["b", "c"]},
            headers=auth(alice[1]),
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["favorite"] is True
        assert data["title"] == "Day one"
        assert [t["name"] for t in data["tags"]] == ["b", "c"]
        assert db.query(DiaryEntryTag).count() == 2

    def test_update_with_too_many_tags_keeps_old_tags(self, client, db, alice):
        diary_id = create_diary(client, alice[1])
        entry = create_entry(client, alice[1], diary_id, tags="a").json()["data"]

        response = client.put(
            f"/api/diary-entries/{entry['id']}", json={"tags": "a,b,c,d,e,f"}, headers=auth(alice[1])
        )
        assert response.status_code == 400
        links = db.query(DiaryEntryTag).all()
        assert [link.tag.name for link in links] == ["a"]

    def test_update_empty_title(self, client, alice):
        diary_id = create_diary(client, alice[1])
        entry = create_entry(client, alice[1], diary_id).json()["data"]
        response = client.put(f"/api/diary-entries/{entry['id']}", json={"title": ""}, headers=auth(alice[1]))
        assert response.status_code == 400
        assert response.json()["error"] == "Entry title cannot be empty"

    def test_only_owner_updates(self, client, alice, bob):
        diary_id = create_diary(client, alice[1], is_public=True)
        entry = create_entry(client, alice[1], diary_id).json()["data"]
        response = client.put(f"/api/diary-entries/{entry['id']}", json={"title": "x"}, headers=auth(bob[1]))
        assert response.status_code == 403

    def test_delete(self, client, db, alice, bob):
        diary_id = create_diary(client, alice[1])
        entry = create_entry(client, alice[1], diary_id, tags="a").json()["data"]

        assert client.delete(f"/api/diary-entries/{entry['id']}", headers=auth(bob[1])).status_code == 403
        assert client.delete(f"/api/diary-entries/{entry['id']}", headers=auth(alice[1])).status_code == 200
        assert db.query(DiaryEntry).count() == 0
        assert db.query(DiaryEntryTag).count() == 0
        assert db.query(Tag).count() == 1
