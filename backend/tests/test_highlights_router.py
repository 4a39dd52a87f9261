"""
Tests for the highlights API.

Tests cover:
- Listing by scope, including empty results and missing parameters
- Creating with 201 echo, validation failures and duplicate ids
- Deleting with 204/404 and method mismatches
- Storage failures mapped to 500
"""

import os
import tempfile
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from versemark.api import create_app
from versemark.services.errors import StorageError


@pytest.fixture
def temp_db_path():
    with tempfile.NamedTemporaryFile(mode="w", delete=False, suffix=".db") as f:
        db_path = f.name

    yield db_path

    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def app(temp_db_path):
    return create_app(db_path=temp_db_path)


@pytest.fixture
def client(app):
    return TestClient(app)


def highlight_body(annotation_id="h-1", **overrides):
    body = {
        "id": annotation_id,
        "kind": "highlight",
        "anchorId": "verse-43-1-1",
        "start": 3,
        "end": 6,
        "translation": "KJV",
        "bookId": 43,
        "chapter": 1,
    }
    body.update(overrides)
    return body


SCOPE = {"translation": "KJV", "bookId": 43, "chapter": 1}


class TestListHighlights:
    def test_empty_scope_returns_empty_array(self, client):
        response = client.get("/api/highlights", params=SCOPE)

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.parametrize("missing", ["translation", "bookId", "chapter"])
    def test_missing_parameter_is_400(self, client, missing):
        params = {k: v for k, v in SCOPE.items() if k != missing}

        response = client.get("/api/highlights", params=params)

        assert response.status_code == 400

    def test_non_numeric_chapter_is_400(self, client):
        response = client.get("/api/highlights", params={**SCOPE, "chapter": "one"})

        assert response.status_code == 400

    def test_lists_in_creation_order(self, client):
        for annotation_id in ("h-b", "h-a", "h-c"):
            client.post("/api/highlights", json=highlight_body(annotation_id))
        client.post(
            "/api/highlights",
            json=highlight_body("h-other", anchorId="verse-43-2-1", chapter=2),
        )

        response = client.get("/api/highlights", params=SCOPE)

        assert [a["id"] for a in response.json()] == ["h-b", "h-a", "h-c"]


class TestCreateHighlight:
    def test_create_returns_201_and_echo(self, client):
        response = client.post("/api/highlights", json=highlight_body())

        assert response.status_code == 201
        assert response.json() == highlight_body()

    def test_create_note(self, client):
        body = highlight_body("n-1", kind="note", note="Word of life")

        response = client.post("/api/highlights", json=body)

        assert response.status_code == 201
        assert response.json()["note"] == "Word of life"

    def test_duplicate_id_is_409(self, client):
        client.post("/api/highlights", json=highlight_body())

        response = client.post("/api/highlights", json=highlight_body(start=0, end=2))

        assert response.status_code == 409
        stored = client.get("/api/highlights", params=SCOPE).json()
        assert [(a["start"], a["end"]) for a in stored] == [(3, 6)]

    @pytest.mark.parametrize(
        "overrides",
        [
            {"start": 6, "end": 6},
            {"start": 6, "end": 3},
            {"start": -1},
            {"kind": "underline"},
            {"kind": "note"},
            {"kind": "note", "note": "   "},
            {"anchorId": "john-1-1"},
            {"anchorId": "verse-1-1-1"},
            {"bookId": "forty-three"},
        ],
    )
    def test_invalid_body_is_400(self, client, overrides):
        response = client.post("/api/highlights", json=highlight_body(**overrides))

        assert response.status_code == 400
        assert client.get("/api/highlights", params=SCOPE).json() == []

    @pytest.mark.parametrize("annotation_id", ["h/1", "h 1", "h?1", "h.1", ""])
    def test_id_that_is_not_a_path_segment_is_400(self, client, annotation_id):
        response = client.post("/api/highlights", json=highlight_body(annotation_id))

        assert response.status_code == 400
        assert client.get("/api/highlights", params=SCOPE).json() == []

    def test_missing_field_is_400(self, client):
        body = highlight_body()
        del body["translation"]

        response = client.post("/api/highlights", json=body)

        assert response.status_code == 400

    def test_malformed_json_is_400(self, client):
        response = client.post(
            "/api/highlights",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400


class TestDeleteHighlight:
    def test_delete_existing_is_204(self, client):
        client.post("/api/highlights", json=highlight_body())

        response = client.delete("/api/highlights/delete/h-1")

        assert response.status_code == 204
        assert client.get("/api/highlights", params=SCOPE).json() == []

    def test_every_stored_id_can_be_deleted(self, client):
        for annotation_id in ("h-1", "h_2", "H3"):
            assert client.post(
                "/api/highlights", json=highlight_body(annotation_id)
            ).status_code == 201

        for annotation_id in ("h-1", "h_2", "H3"):
            response = client.delete(f"/api/highlights/delete/{annotation_id}")
            assert response.status_code == 204

        assert client.get("/api/highlights", params=SCOPE).json() == []

    def test_delete_unknown_is_404(self, client):
        response = client.delete("/api/highlights/delete/h-12345")

        assert response.status_code == 404

    def test_wrong_method_is_405(self, client):
        response = client.get("/api/highlights/delete/h-1")

        assert response.status_code == 405


class TestStorageFailures:
    def test_storage_errors_are_500(self, app, client):
        failing = Mock()
        failing.list_annotations.side_effect = StorageError("disk I/O error")
        failing.insert_annotation.side_effect = StorageError("disk I/O error")
        failing.delete_annotation.side_effect = StorageError("disk I/O error")
        app.state.annotations_service = failing

        assert client.get("/api/highlights", params=SCOPE).status_code == 500
        assert client.post("/api/highlights", json=highlight_body()).status_code == 500
        assert client.delete("/api/highlights/delete/h-1").status_code == 500


class TestStatusEndpoints:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}
