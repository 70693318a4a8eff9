"""Integration tests for notes, uploads and the served upload files."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from notive.api.dependencies import get_app_settings
from notive.config import Settings


def _headers(client: TestClient, email: str) -> dict[str, str]:
    response = client.post(
        "/register", json={"name": email.split("@")[0], "email": email, "password": "secret1"}
    )
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def alice(client: TestClient) -> dict[str, str]:
    return _headers(client, "alice@example.com")


@pytest.fixture
def bob(client: TestClient) -> dict[str, str]:
    return _headers(client, "bob@example.com")


def _note(client: TestClient, headers: dict[str, str], **body: object) -> dict[str, object]:
    payload = {"name": "Todo", "type": "note", **body}
    response = client.post("/files", json=payload, headers=headers)
    assert response.status_code == 201
    return response.json()["file"]


def test_create_note_uses_camel_case(client: TestClient, alice: dict[str, str]) -> None:
    note = _note(client, alice, content="buy milk")

    assert note["type"] == "note"
    assert note["content"] == [{"type": "text", "value": "buy milk"}]
    assert note["folderId"] is None
    assert note["filePath"] is None
    assert {"id", "userId", "createdAt", "updatedAt"} <= set(note)


@pytest.mark.parametrize(
    ("body", "code"),
    [
        ({"type": "note"}, "MISSING_FIELDS"),
        ({"name": "Todo"}, "MISSING_FIELDS"),
        ({"name": "Photo", "type": "image"}, "INVALID_FILE_TYPE"),
    ],
)
def test_create_note_validation(
    client: TestClient, alice: dict[str, str], body: dict[str, str], code: str
) -> None:
    response = client.post("/files", json=body, headers=alice)

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert response.json()["code"] == code


def test_list_filter_get_update_delete(client: TestClient, alice: dict[str, str]) -> None:
    work = client.post("/folders", json={"name": "Work"}, headers=alice).json()["folder"]
    loose = _note(client, alice, name="Loose")
    filed = _note(client, alice, name="Filed", folderId=work["id"])

    everything = client.get("/files", headers=alice).json()["files"]
    in_work = client.get("/files", params={"folderId": work["id"]}, headers=alice).json()["files"]
    assert [f["name"] for f in everything] == ["Loose", "Filed"]
    assert [f["id"] for f in in_work] == [filed["id"]]

    fetched = client.get(f"/files/{loose['id']}", headers=alice)
    assert fetched.json()["file"]["name"] == "Loose"

    updated = client.put(
        f"/files/{loose['id']}",
        json={"content": [{"type": "todo", "done": True}], "folderId": work["id"]},
        headers=alice,
    ).json()["file"]
    assert updated["name"] == "Loose"
    assert updated["content"] == [{"type": "todo", "done": True}]
    assert updated["folderId"] == work["id"]

    assert client.delete(f"/files/{loose['id']}", headers=alice).json() == {"success": True}
    assert client.get(f"/files/{loose['id']}", headers=alice).status_code == 404


def test_foreign_file_is_not_found(
    client: TestClient, alice: dict[str, str], bob: dict[str, str]
) -> None:
    note = _note(client, alice)

    assert client.get(f"/files/{note['id']}", headers=bob).status_code == 404
    update = client.put(f"/files/{note['id']}", json={"name": "Mine"}, headers=bob)
    assert update.status_code == 404
    assert update.json()["code"] == "NOT_FOUND"
    assert client.delete(f"/files/{note['id']}", headers=bob).status_code == 404
    assert client.get("/files", headers=bob).json()["files"] == []


def test_note_in_foreign_folder_is_refused(
    client: TestClient, alice: dict[str, str], bob: dict[str, str]
) -> None:
    private = client.post("/folders", json={"name": "Private"}, headers=alice).json()["folder"]

    response = client.post(
        "/files", json={"name": "Sneaky", "type": "note", "folderId": private["id"]}, headers=bob
    )

    assert response.status_code == 404


def test_upload_is_stored_and_served(client: TestClient, alice: dict[str, str]) -> None:
    response = client.post(
        "/upload",
        files={"file": ("beach photo.jpg", b"\xff\xd8jpeg-bytes", "image/jpeg")},
        data={"type": "image"},
        headers=alice,
    )

    assert response.status_code == 201
    stored = response.json()["file"]
    assert stored["type"] == "image"
    assert stored["name"] == "beach photo.jpg"
    assert stored["mimeType"] == "image/jpeg"
    assert stored["size"] == 12
    assert stored["filePath"].startswith("/uploads/")
    assert stored["filePath"].endswith("-beach_photo.jpg")

    served = client.get(stored["filePath"])
    assert served.status_code == 200
    assert served.content == b"\xff\xd8jpeg-bytes"


def test_upload_into_folder_with_name(client: TestClient, alice: dict[str, str]) -> None:
    work = client.post("/folders", json={"name": "Work"}, headers=alice).json()["folder"]

    response = client.post(
        "/upload",
        files={"file": ("q3.pdf", b"%PDF-1.7", "application/pdf")},
        data={"folderId": str(work["id"]), "name": "Q3 report", "type": "spreadsheet"},
        headers=alice,
    )

    stored = response.json()["file"]
    assert stored["name"] == "Q3 report"
    assert stored["type"] == "document"
    assert stored["folderId"] == work["id"]


def test_delete_upload_removes_served_file(client: TestClient, alice: dict[str, str]) -> None:
    stored = client.post(
        "/upload", files={"file": ("a.txt", b"hello", "text/plain")}, headers=alice
    ).json()["file"]

    client.delete(f"/files/{stored['id']}", headers=alice)

    assert client.get(stored["filePath"]).status_code == 404


def test_upload_without_file(client: TestClient, alice: dict[str, str]) -> None:
    response = client.post("/upload", data={"type": "image"}, headers=alice)

    assert response.status_code == 400
    assert response.json()["code"] == "NO_FILE"


def test_upload_bad_folder_id(client: TestClient, alice: dict[str, str]) -> None:
    response = client.post(
        "/upload",
        files={"file": ("a.txt", b"hello", "text/plain")},
        data={"folderId": "inbox"},
        headers=alice,
    )

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_REQUEST"


def test_upload_too_large(
    app: FastAPI, client: TestClient, alice: dict[str, str], settings: Settings
) -> None:
    storage = settings.storage.model_copy(update={"max_upload_bytes": 4})
    small = settings.model_copy(update={"storage": storage})
    app.dependency_overrides[get_app_settings] = lambda: small

    response = client.post(
        "/upload", files={"file": ("a.txt", b"hello", "text/plain")}, headers=alice
    )

    assert response.status_code == 400
    assert response.json()["code"] == "FILE_TOO_LARGE"
    assert list(settings.storage.upload_dir.iterdir()) == []


def test_files_require_token(client: TestClient) -> None:
    assert client.get("/files").status_code == 401
    assert client.post("/upload", files={"file": ("a.txt", b"x", "text/plain")}).status_code == 401
