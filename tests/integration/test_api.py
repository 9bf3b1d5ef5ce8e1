"""
Integration tests for the HTTP API

Routes run against a real SQLite database (isolated_db) with the notebook
client replaced by a FakeNotebook through dependency_overrides.
"""

from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from lsearch.api.app import app
from lsearch.api.deps import get_catalog_service
from lsearch.catalog.service import CatalogService
from lsearch.catalog.tables import ExampleCatalog, load_fallback_catalog, load_seed_commands
from lsearch.config import API_ERROR_SAMPLE
from lsearch.notebook.errors import NotebookTimeoutError
from lsearch.storage import CommandRepository
from lsearch.storage.base import StoreResult
from lsearch.utils.error_sanitizer import GENERIC_MESSAGES

NOTEBOOK_ANSWER = (
    "Here are the tools:\n"
    "* **nmap**: Escaneo de puertos\n"
    "  - Ejemplo: `nmap -sV target` - detecta versión\n"
    "* **hydra**: Password brute force tool\n"
)

LOCKED = "database is locked at /srv/lsearch/data/lsearch.db"


@pytest.fixture
def service(isolated_db, fake_notebook, small_fallback):
    return CatalogService(
        store=CommandRepository(),
        notebook=fake_notebook,
        fallback_catalog=small_fallback,
        curated_examples=ExampleCatalog.from_mapping(
            {"nmap": [{"code": "nmap -p- host", "description": "all ports"}]}
        ),
        seed_commands=load_seed_commands(),
        notebook_id="nb-test",
    )


@pytest.fixture
def client(service):
    app.dependency_overrides[get_catalog_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_db_health(self, client):
        data = client.get("/health/db").json()
        assert data["status"] in ("healthy", "degraded")
        assert "pool_size" in data["pool"]

    def test_debug_stats(self, client):
        client.post("/api/seed")

        data = client.get("/debug/stats").json()

        assert data["commands"]["total"] == 35
        assert data["commands"]["by_category"]["security"] == 12
        assert "notebook_call_ms" in data["sync"]

    def test_root(self, client):
        assert client.get("/").json()["service"] == "lsearch API"


class TestCommands:
    def test_empty_catalog(self, client):
        data = client.get("/api/commands").json()
        assert data == {"commands": [], "count": 0, "source": "sqlite"}

    def test_seed_then_search(self, client):
        seeded = client.post("/api/seed").json()
        assert seeded["success"] is True
        assert seeded["message"] == "Seeded 35 commands"
        assert seeded["stats"] == {"inserted": 35, "total": 35, "errors": 0}

        data = client.get("/api/commands", params={"category": "security"}).json()
        assert data["count"] == 12
        commands = [c["command"] for c in data["commands"]]
        assert commands == sorted(commands)

        data = client.get("/api/commands", params={"q": "nmap"}).json()
        assert [c["command"] for c in data["commands"]] == ["nmap"]

    def test_seed_info(self, client):
        assert client.get("/api/seed").json() == {
            "message": "Use POST to seed the database",
            "commandCount": 35,
        }

    def test_create(self, client):
        response = client.post(
            "/api/commands",
            json={
                "command": "Tmux",
                "description": "Terminal multiplexer",
                "category": "system",
                "examples": [{"code": "tmux new -s work", "description": "new session"}],
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["command"]["command"] == "tmux"
        assert body["command"]["examples"] == [{"code": "tmux new -s work", "description": "new session"}]

    def test_create_missing_fields(self, client):
        response = client.post("/api/commands", json={"command": "tmux"})

        assert response.status_code == 400
        assert response.json() == {"error": "Missing required fields: command, description, category"}

    def test_create_unknown_category(self, client):
        response = client.post(
            "/api/commands",
            json={"command": "tmux", "description": "Terminal multiplexer", "category": "gadgets"},
        )
        assert response.status_code == 400

    def test_create_wrong_types_sanitized(self, client):
        response = client.post("/api/commands", json={"command": "tmux", "tags": "not-a-list"})

        assert response.status_code == 422
        body = response.json()
        assert body["invalid_fields"] == ["tags"]
        assert "list" not in body["detail"]

    def test_repopulate_examples(self, client):
        client.post("/api/seed")

        data = client.patch("/api/commands").json()

        assert data["success"] is True
        assert data["updated_commands"] == ["nmap"]
        assert data["errors_count"] == 0
        nmap = client.get("/api/commands", params={"q": "nmap"}).json()["commands"][0]
        assert nmap["examples"] == [{"code": "nmap -p- host", "description": "all ports"}]


class TestUpload:
    def test_text_content(self, client):
        response = client.post(
            "/api/upload",
            data={"content": "htop - Visor interactivo de procesos\ndf - Espacio en disco", "format": "text"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Processed 2 of 2 commands"
        assert body["stats"] == {"inserted": 2, "updated": 0, "errors": 0}

        htop = client.get("/api/commands", params={"q": "htop"}).json()["commands"][0]
        assert htop["category"] == "process"
        assert htop["examples"] == []

    def test_json_file(self, client):
        payload = json.dumps([{"comando": "sqlmap", "descripcion": "Inyección SQL automatizada"}])

        response = client.post(
            "/api/upload",
            files={"file": ("tools.json", payload.encode("utf-8"), "application/json")},
        )

        assert response.status_code == 200
        assert response.json()["stats"]["inserted"] == 1

    def test_no_content(self, client):
        response = client.post("/api/upload", data={"content": "   "})

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "No content"}

    def test_nothing_parsed(self, client):
        response = client.post("/api/upload", data={"content": "just some prose here"})

        assert response.status_code == 400
        assert response.json()["error"].startswith("No commands found")


class TestNotebook:
    def test_info(self, client):
        assert client.get("/api/notebooklm").json() == {"success": True, "notebookId": "nb-test"}

    def test_sync(self, client, fake_notebook):
        fake_notebook.answer = NOTEBOOK_ANSWER

        body = client.post("/api/notebooklm", json={"action": "sync"}).json()

        assert body["success"] is True
        assert body["message"] == "Synced: 2 new, 0 updated"
        assert body["stats"] == {"inserted": 2, "updated": 0, "total": 2, "errors": []}

        nmap = client.get("/api/commands", params={"q": "nmap"}).json()["commands"][0]
        assert nmap["category"] == "security"
        assert nmap["source_notebook_id"] == "nb-test"
        assert nmap["examples"] == [{"code": "nmap -sV target", "description": "detecta versión"}]

    def test_sync_fallback_warning(self, client, fake_notebook):
        fake_notebook.answer = ""

        body = client.post("/api/notebooklm", json={"action": "sync"}).json()

        assert body["stats"]["total"] == 3
        assert body["stats"]["errors"][0].startswith("Warning: Used local backup commands")

    def test_sync_notebook_failure(self, client, fake_notebook):
        fake_notebook.error = NotebookTimeoutError(90)

        body = client.post("/api/notebooklm", json={"action": "sync"}).json()

        assert body["success"] is False
        assert body["stats"]["errors"] == ["Timeout 90s"]

    def test_query(self, client, fake_notebook):
        fake_notebook.answer = "free answer"

        body = client.post("/api/notebooklm", json={"action": "query", "query": "What is nmap?"}).json()

        assert body == {"success": True, "result": {"structuredContent": {"answer": "free answer"}}}
        assert fake_notebook.questions == [("nb-test", "What is nmap?")]

    def test_query_failure(self, client, fake_notebook):
        fake_notebook.error = NotebookTimeoutError(90)

        response = client.post("/api/notebooklm", json={"action": "query"})

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Timeout 90s"}

    def test_test_action_does_not_persist(self, client, fake_notebook):
        fake_notebook.answer = NOTEBOOK_ANSWER

        body = client.post("/api/notebooklm", json={"action": "test"}).json()

        assert body["count"] == 2
        assert [c["command"] for c in body["parsed"]] == ["nmap", "hydra"]
        assert client.get("/api/commands").json()["count"] == 0

    def test_unknown_action(self, client):
        response = client.post("/api/notebooklm", json={"action": "delete"})

        assert response.status_code == 400
        assert response.json() == {"error": "Use action: sync, query, or test"}


class TestStoreFailures:
    """Every upsert fails; responses carry a capped, sanitized error sample"""

    @pytest.fixture
    def client(self, isolated_db, fake_store, fake_notebook):
        fake_store.upsert = lambda payload, on_conflict="command": StoreResult(error=LOCKED)
        service = CatalogService(
            store=fake_store,
            notebook=fake_notebook,
            fallback_catalog=load_fallback_catalog(),
            curated_examples=ExampleCatalog({}),
            seed_commands=load_seed_commands(),
            notebook_id="nb-test",
        )
        app.dependency_overrides[get_catalog_service] = lambda: service
        with TestClient(app) as test_client:
            yield test_client
        app.dependency_overrides.clear()

    def test_sync_errors_capped_and_sanitized(self, client, fake_notebook):
        fake_notebook.answer = ""

        body = client.post("/api/notebooklm", json={"action": "sync"}).json()

        errors = body["stats"]["errors"]
        assert body["success"] is False
        assert len(errors) == 1 + API_ERROR_SAMPLE
        assert errors[0].startswith("Warning: Used local backup commands")
        assert all(e.endswith(GENERIC_MESSAGES[500]) for e in errors[1:])
        assert not any("/srv" in e or "locked" in e for e in errors)

    def test_sync_record_errors_keep_command_prefix(self, client, fake_notebook):
        fake_notebook.answer = NOTEBOOK_ANSWER + "* **sqlmap**: Automatic SQL injection tool\n"

        errors = client.post("/api/notebooklm", json={"action": "sync"}).json()["stats"]["errors"]

        assert errors == [f"{command}: {GENERIC_MESSAGES[500]}" for command in ("nmap", "hydra", "sqlmap")]

    def test_upload_errors_sanitized(self, client):
        lines = "\n".join(f"tool{i} - Herramienta numero {i}" for i in range(8))

        body = client.post("/api/upload", data={"content": lines, "format": "text"}).json()

        assert body["stats"]["errors"] == 8
        assert len(body["errors"]) == API_ERROR_SAMPLE
        assert body["errors"][0] == f"tool0: {GENERIC_MESSAGES[500]}"

    def test_seed_errors_sanitized(self, client):
        body = client.post("/api/seed").json()

        assert body["stats"]["errors"] == 35
        assert len(body["errors"]) == API_ERROR_SAMPLE
        assert not any("/srv" in e for e in body["errors"])
