"""
Unit tests for api/tm_router.py: memory endpoints.
"""
import pytest
from fastapi.testclient import TestClient

from api.main import app
from core.editor.models import Source
from core.storage.models import memories_key
from core.storage.repository import SourceRepository
from core.tm.service import MemoryService, get_memory_service


@pytest.fixture
def repo(tmp_path):
    repo = SourceRepository(database_url=f"sqlite:///{tmp_path / 'tm_api.db'}", quota_bytes=0)
    repo.save_source(Source(id="doc", filename="Novel", content="The cat sat.\nA big house."))
    glossary = Source(id="g1", filename="Glossary")
    repo.save_source(glossary)
    repo.put(glossary, memories_key("g1"), {"house": "maison"})
    return repo


@pytest.fixture
def client(repo):
    app.dependency_overrides[get_memory_service] = lambda: MemoryService(repository=repo)
    yield TestClient(app)
    app.dependency_overrides.clear()


BASE = "/api/sources/doc/memories"


class TestMemories:
    def test_add_and_list(self, client):
        resp = client.post(f"{BASE}/", json={"source_text": "cat", "target": "chat"})
        assert resp.status_code == 201
        data = client.get(f"{BASE}/").json()
        assert data == {"memories": {"cat": "chat"}, "total": 1}

    def test_alternative(self, client):
        client.post(f"{BASE}/", json={"source_text": "big", "target": "grand"})
        resp = client.post(f"{BASE}/alternatives", json={"source_text": "large", "primary": "big"})
        assert resp.status_code == 201
        assert resp.json()["memories"]["large"] == "@big"

    def test_alternative_without_primary_is_400(self, client):
        resp = client.post(f"{BASE}/alternatives", json={"source_text": "large", "primary": "big"})
        assert resp.status_code == 400

    def test_delete(self, client):
        client.post(f"{BASE}/", json={"source_text": "cat", "target": "chat"})
        resp = client.request("DELETE", f"{BASE}/", json={"source_text": "cat"})
        assert resp.status_code == 200
        resp = client.request("DELETE", f"{BASE}/", json={"source_text": "cat"})
        assert resp.status_code == 404

    def test_unknown_source_is_404(self, client):
        assert client.get("/api/sources/nope/memories/").status_code == 404


class TestResolution:
    def test_resolved_with_import(self, client):
        client.post(f"{BASE}/", json={"source_text": "cat", "target": "chat"})
        client.post(f"{BASE}/", json={"source_text": "dog", "target": "chien"})
        resp = client.put(f"{BASE}/imports", json={"source_ids": ["g1"]})
        assert resp.json()["imports"] == [{"id": "g1", "filename": "Glossary"}]

        data = client.get(f"{BASE}/resolved").json()
        by_key = {m["source_text"]: m for m in data["memories"]}
        assert set(by_key) == {"cat", "house"}
        assert by_key["cat"]["usage"] == [0]
        assert by_key["house"]["origin_filename"] == "Glossary"
        assert data["missing_imports"] == []

    def test_self_import_is_400(self, client):
        assert client.put(f"{BASE}/imports", json={"source_ids": ["doc"]}).status_code == 400

    def test_lookup(self, client):
        client.post(f"{BASE}/", json={"source_text": "big", "target": "grand"})
        client.put(f"{BASE}/imports", json={"source_ids": ["g1"]})
        data = client.post(f"{BASE}/lookup", json={"segment": "A big house."}).json()
        assert [(h["number"], h["target"]) for h in data["hits"]] == [(1, "grand"), (2, "maison")]
