"""API tests using FastAPI's TestClient over in-memory stores."""

from __future__ import annotations

from urllib.parse import quote

import pytest
from fastapi.testclient import TestClient

from rollcall.api.app import create_app
from rollcall.core.config import AppSettings
from rollcall.core.exceptions import RosterStoreError
from rollcall.importer.template import TEMPLATE_FILE_NAME
from rollcall.models.participant import Participant
from tests.fakes import MemoryFileStore, MemoryRosterStore


@pytest.fixture
def roster_store():
    return MemoryRosterStore()


@pytest.fixture
def file_store():
    return MemoryFileStore()


@pytest.fixture
def client(roster_store, file_store):
    app = create_app(settings=AppSettings(), roster_store=roster_store, file_store=file_store)
    with TestClient(app) as c:
        yield c


class TestHealth:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_ready_reports_roster_size(self, client):
        body = client.get("/ready").json()
        assert body["status"] == "healthy"
        assert body["participants"] == 0


class TestAddParticipant:
    def test_created(self, client):
        resp = client.post("/participants", json={"employee_id": "001", "name": "Bob"})
        assert resp.status_code == 201
        assert resp.json()["name"] == "Bob"
        assert len(client.get("/participants").json()) == 1

    def test_identifier_conflict_names_holder(self, client):
        client.post("/participants", json={"employee_id": "001", "name": "Bob"})
        resp = client.post("/participants", json={"employee_id": "001", "name": "Alice"})
        assert resp.status_code == 409
        detail = resp.json()["detail"]
        assert detail["reason"] == "identifier_collision"
        assert detail["holder"]["name"] == "Bob"

    def test_blank_name(self, client):
        resp = client.post("/participants", json={"employee_id": "001", "name": " "})
        assert resp.status_code == 422
        assert resp.json()["detail"]["reason"] == "blank_name"


class TestRange:
    def test_created(self, client):
        resp = client.post("/participants/range", json={"start": 1, "end": 3})
        assert resp.status_code == 201
        assert resp.json()["created"] == 3

    def test_conflict(self, client):
        client.post("/participants", json={"employee_id": "003", "name": "Dana"})
        resp = client.post("/participants/range", json={"start": 1, "end": 5})
        assert resp.status_code == 409
        assert resp.json()["detail"]["value"] == "003"
        assert len(client.get("/participants").json()) == 1

    def test_invalid(self, client):
        resp = client.post("/participants/range", json={"start": 5, "end": 1})
        assert resp.status_code == 422


class TestImport:
    def test_upload(self, client):
        data = "姓名,部门\n张三,技术部\n,销售部\n张三,人事部".encode("utf-8")
        resp = client.post("/participants/import", files={"file": ("s.csv", data, "text/csv")})
        assert resp.status_code == 200
        body = resp.json()
        assert body["summary"]["outcome"] == "partial"
        assert body["summary"]["invalid"]["sample_rows"] == [3]
        assert body["report"]["duplicates"][0]["row_number"] == 4

    def test_upload_fatal(self, client):
        resp = client.post("/participants/import", files={"file": ("r.xlsx", b"x", "application/octet-stream")})
        assert resp.status_code == 422
        assert resp.json()["summary"]["error"]["code"] == "unsupported_extension"

    def test_stored_file(self, client, file_store):
        file_store.write("uploads/r.csv", "姓名\n李四\n".encode("gbk"))
        resp = client.post("/participants/import/stored", json={"key": "uploads/r.csv"})
        assert resp.status_code == 200
        assert resp.json()["report"]["encoding"] == "gbk"

    def test_stored_file_missing(self, client):
        resp = client.post("/participants/import/stored", json={"key": "uploads/missing.csv"})
        assert resp.status_code == 404


class TestTemplate:
    def test_download_then_import(self, client):
        resp = client.get("/participants/template")
        assert resp.status_code == 200
        assert quote(TEMPLATE_FILE_NAME) in resp.headers["content-disposition"]
        assert resp.content.startswith(b"\xef\xbb\xbf")
        imported = client.post(
            "/participants/import", files={"file": (TEMPLATE_FILE_NAME, resp.content, "text/csv")},
        )
        assert imported.json()["summary"]["accepted"] == 3


class TestRemove:
    def test_remove_one(self, client):
        created = client.post("/participants", json={"name": "Bob"}).json()
        assert client.delete(f"/participants/{created['id']}").status_code == 204
        assert client.delete(f"/participants/{created['id']}").status_code == 404

    def test_clear(self, client):
        client.post("/participants/range", json={"start": 1, "end": 4})
        assert client.delete("/participants").json() == {"removed": 4}
        assert client.get("/participants").json() == []


def test_list_returns_participants_in_order():
    store = MemoryRosterStore([Participant(employee_id="2", name="B"), Participant(employee_id="1", name="A")])
    app = create_app(settings=AppSettings(), roster_store=store, file_store=MemoryFileStore())
    with TestClient(app) as c:
        assert [p["name"] for p in c.get("/participants").json()] == ["B", "A"]


class TestUploads:
    def test_store_then_import(self, client, file_store):
        data = "姓名\n张三\n".encode("gbk")
        stored = client.post("/participants/uploads", files={"file": ("名单.csv", data, "text/csv")})
        assert stored.status_code == 201
        key = stored.json()["key"]
        assert key.startswith("uploads/") and key.endswith("/名单.csv")
        assert file_store.read(key) == data

        imported = client.post("/participants/import/stored", json={"key": key})
        assert imported.json()["summary"]["accepted"] == 1
        assert imported.json()["report"]["file_name"] == "名单.csv"

    def test_rejects_unsupported_extension(self, client, file_store):
        resp = client.post("/participants/uploads", files={"file": ("r.xlsx", b"x", "application/octet-stream")})
        assert resp.status_code == 422
        assert resp.json()["detail"]["code"] == "unsupported_extension"
        assert file_store._files == {}


class UnavailableRosterStore(MemoryRosterStore):
    def write_lock(self):
        raise RosterStoreError("Timed out after 60s waiting for roster lock")

    def list_participants(self):
        raise RosterStoreError("connection refused")


class TestStoreUnavailable:
    @pytest.fixture
    def down_client(self):
        app = create_app(settings=AppSettings(), roster_store=UnavailableRosterStore(), file_store=MemoryFileStore())
        with TestClient(app) as c:
            yield c

    def test_import_returns_fatal_report(self, down_client):
        resp = down_client.post("/participants/import", files={"file": ("r.csv", "姓名\nA\n".encode("utf-8"), "text/csv")})
        assert resp.status_code == 422
        assert resp.json()["summary"]["error"]["code"] == "store_unavailable"

    def test_add_returns_503(self, down_client):
        resp = down_client.post("/participants", json={"name": "Bob"})
        assert resp.status_code == 503

    def test_range_returns_503(self, down_client):
        assert down_client.post("/participants/range", json={"start": 1, "end": 2}).status_code == 503

    def test_list_returns_503(self, down_client):
        assert down_client.get("/participants").status_code == 503

    def test_health_still_answers(self, down_client):
        assert down_client.get("/health").status_code == 200
