"""
Tests for the sync orchestrator

The notebook client and store are in-memory fakes; the fallback table is
the three-entry fixture from conftest.
"""

from __future__ import annotations

from lsearch.catalog.sync import FALLBACK_FAILED, FALLBACK_WARNING, SyncOrchestrator
from lsearch.catalog.tables import ExampleCatalog
from lsearch.notebook.errors import NotebookTimeoutError
from lsearch.observability.telemetry import get_counter, get_latency_stats

GOOD_ANSWER = (
    "* **nmap**: Network exploration and security auditing\n"
    "  - Example: `nmap -sV host` - detect versions\n"
    "* **hydra**: Parallelized login cracker for many protocols\n"
)


def _orchestrator(store, notebook, fallback):
    return SyncOrchestrator(store=store, notebook=notebook, fallback_catalog=fallback, notebook_id="nb-test")


class TestFallback:
    def test_empty_answer_uses_whole_fallback(self, fake_store, make_notebook, small_fallback):
        stats = _orchestrator(fake_store, make_notebook(""), small_fallback).sync()

        assert stats.total == 3
        assert stats.inserted == 3
        assert stats.warning == FALLBACK_WARNING
        assert stats.errors == [FALLBACK_WARNING]
        assert set(fake_store.rows) == {"ls", "nmap", "top"}
        assert get_counter("sync.fallback_used") == 1

    def test_short_answer_keeps_parsed_records(self, fake_store, make_notebook, small_fallback):
        answer = "* **nmap**: Escaneo de puertos"
        assert len(answer) < 50

        stats = _orchestrator(fake_store, make_notebook(answer), small_fallback).sync()

        assert stats.total == 3
        assert stats.warning == FALLBACK_WARNING
        # parsed nmap wins over the fallback entry
        assert fake_store.rows["nmap"]["description"] == "Escaneo de puertos"
        assert fake_store.rows["nmap"]["examples"] == []

    def test_empty_fallback_reports_failure(self, fake_store, make_notebook):
        stats = _orchestrator(fake_store, make_notebook(""), ExampleCatalog({})).sync()

        assert stats.errors == [FALLBACK_FAILED]
        assert stats.total == 0
        assert fake_store.rows == {}


class TestNotebookAnswer:
    def test_parsed_records_persisted(self, fake_store, make_notebook, small_fallback):
        stats = _orchestrator(fake_store, make_notebook(GOOD_ANSWER), small_fallback).sync()

        assert (stats.inserted, stats.updated, stats.total) == (2, 0, 2)
        assert stats.errors == []
        assert stats.warning is None
        assert "warning" not in stats.to_dict()
        assert fake_store.rows["nmap"]["source_notebook_id"] == "nb-test"
        assert fake_store.rows["nmap"]["examples"] == [{"code": "nmap -sV host", "description": "detect versions"}]
        assert get_latency_stats("sync.persist")["count"] == 1

    def test_second_sync_counts_updates(self, fake_store, make_notebook, small_fallback):
        notebook = make_notebook(GOOD_ANSWER)
        _orchestrator(fake_store, notebook, small_fallback).sync()

        stats = _orchestrator(fake_store, notebook, small_fallback).sync()

        assert (stats.inserted, stats.updated) == (0, 2)

    def test_sends_configured_notebook_and_question(self, fake_store, make_notebook, small_fallback):
        notebook = make_notebook(GOOD_ANSWER)
        SyncOrchestrator(
            store=fake_store,
            notebook=notebook,
            fallback_catalog=small_fallback,
            notebook_id="nb-42",
            question="Which tools?",
        ).sync()

        assert notebook.questions == [("nb-42", "Which tools?")]

    def test_record_errors_reported(self, fake_store, make_notebook, small_fallback):
        fake_store.upsert_errors["hydra"] = "disk full"

        stats = _orchestrator(fake_store, make_notebook(GOOD_ANSWER), small_fallback).sync()

        assert stats.inserted == 1
        assert stats.errors == ["hydra: disk full"]


class TestNotebookFailure:
    def test_timeout_is_single_error(self, fake_store, make_notebook, small_fallback):
        notebook = make_notebook(error=NotebookTimeoutError(90))

        stats = _orchestrator(fake_store, notebook, small_fallback).sync()

        assert stats.errors == ["Timeout 90s"]
        assert (stats.inserted, stats.updated, stats.total) == (0, 0, 0)
        assert fake_store.rows == {}
        assert get_counter("sync.notebook_failures") == 1
        assert get_counter("sync.fallback_used") == 0
