"""Tests for grilette.server — MCP tools over the note repository.

The tool functions are plain callables, so they are exercised directly
against a repository backed by an in-memory store.
"""

from __future__ import annotations

import base64
import json

import anyio
import pytest
from helpers import FakeClock

from grilette import server
from grilette.preferences import AppPreferences
from grilette.repository import NoteRepository
from grilette.storage import MemoryStore, PersistenceAdapter


@pytest.fixture(autouse=True)
def fresh_state(monkeypatch: pytest.MonkeyPatch) -> NoteRepository:
    """Point the server at an empty in-memory store for every test."""
    persistence = PersistenceAdapter(MemoryStore())
    repository = NoteRepository(persistence, clock=FakeClock())
    repository.load()
    monkeypatch.setattr(server, "persistence", persistence)
    monkeypatch.setattr(server, "repository", repository)
    monkeypatch.setattr(server, "preferences", AppPreferences.load(persistence))
    return repository


def _create(title: str, content: str = "body", **kwargs) -> str:
    result = server.create_note(title, content, **kwargs)
    assert "note_id" in result, result
    return result["note_id"]


class TestCreateNote:
    def test_create(self) -> None:
        result = server.create_note("Groceries", "milk")
        assert "saved successfully" in result["message"]
        assert server.list_notes()["count"] == 1

    def test_create_with_image(self) -> None:
        image = b"\x89PNG\r\n\x1a\n"
        note_id = _create("Photo", image_base64=base64.b64encode(image).decode())
        (note,) = server.list_notes()["notes"]
        assert note["id"] == note_id
        assert note["imageData"] is not None

    @pytest.mark.parametrize(("title", "content"), [("", "body"), ("title", "")])
    def test_create_incomplete(self, title: str, content: str) -> None:
        result = server.create_note(title, content)
        assert "error" in result
        assert server.list_notes()["count"] == 0

    def test_create_bad_image(self) -> None:
        result = server.create_note("T", "C", image_base64="***")
        assert "error" in result
        assert server.list_notes()["count"] == 0


class TestUpdateNote:
    def test_update_fields(self) -> None:
        note_id = _create("Draft")
        result = server.update_note(note_id, title="Final")
        assert result["note"]["title"] == "Final"
        assert result["note"]["content"] == "body"
        assert result["note"]["lastModified"] > result["note"]["createdAt"]

    def test_update_keeps_pin(self) -> None:
        note_id = _create("Draft")
        server.pin_note(note_id)
        result = server.update_note(note_id, content="new body")
        assert result["note"]["isPinned"] is True

    def test_update_remove_image(self) -> None:
        note_id = _create("Photo", image_base64=base64.b64encode(b"img").decode())
        result = server.update_note(note_id, remove_image=True)
        assert result["note"]["imageData"] is None

    def test_update_to_empty_is_rejected(self) -> None:
        note_id = _create("Keep")
        assert "error" in server.update_note(note_id, title="")
        assert server.search_notes("Keep")["count"] == 1

    def test_update_unknown(self) -> None:
        assert "error" in server.update_note("not-a-uuid", title="x")


class TestPinAndDelete:
    def test_pin_toggles_and_reorders(self) -> None:
        a = _create("A")
        _create("B")
        assert server.pin_note(a) == {"note_id": a, "is_pinned": True}
        titles = [n["title"] for n in server.list_notes()["notes"]]
        assert titles == ["A", "B"]
        assert server.pin_note(a)["is_pinned"] is False

    def test_pin_unknown(self) -> None:
        assert "error" in server.pin_note("00000000-0000-0000-0000-000000000000")

    def test_delete(self) -> None:
        note_id = _create("Gone")
        assert server.delete_note(note_id)["deleted"] is True
        assert server.delete_note(note_id)["deleted"] is False
        assert server.list_notes()["count"] == 0


class TestSearchAndExport:
    def test_search(self) -> None:
        _create("Meeting notes", "Discuss roadmap")
        _create("Shopping list", "Buy milk")
        assert server.search_notes("MILK")["count"] == 1
        assert server.search_notes("")["count"] == 2
        assert server.search_notes("zzzznotfound") == {"count": 0, "notes": []}

    def test_export_import(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _create("A")
        _create("B")
        exported = server.export_notes()
        assert exported["count"] == 2
        assert len(json.loads(exported["payload"])) == 2

        persistence = PersistenceAdapter(MemoryStore())
        monkeypatch.setattr(server, "repository", NoteRepository(persistence))
        assert server.import_notes(exported["payload"]) == {
            "imported": 2,
            "total_notes": 2,
        }


class TestPreferencesAndHealth:
    def test_dark_mode(self) -> None:
        assert server.get_dark_mode() == {"is_dark_mode": False}
        assert server.set_dark_mode(True) == {"is_dark_mode": True}
        assert server.persistence.read_dark_mode() is True

    def test_health_check(self) -> None:
        _create("A")
        data = server.health_check()
        assert data["status"] == "healthy"
        assert data["server"] == "grilette"
        assert data["total_notes"] == 1
        assert "timestamp" in data


# ---------------------------------------------------------------------------
# Through the FastMCP server object
# ---------------------------------------------------------------------------

EXPECTED_TOOLS = {
    "create_note",
    "update_note",
    "pin_note",
    "delete_note",
    "search_notes",
    "list_notes",
    "export_notes",
    "import_notes",
    "get_dark_mode",
    "set_dark_mode",
    "health_check",
}


def _parse_tool_response(result) -> dict:
    """Extract the JSON dict from a FastMCP call_tool result."""
    if isinstance(result, tuple):
        result = result[0]
    return json.loads(result[0].text)


class TestMCPRegistration:
    def test_all_tools_registered(self) -> None:
        tools = anyio.run(server.mcp.list_tools)
        assert {t.name for t in tools} == EXPECTED_TOOLS

    def test_tool_schemas_expose_arguments(self) -> None:
        tools = {t.name: t for t in anyio.run(server.mcp.list_tools)}
        create = tools["create_note"].inputSchema
        assert set(create["required"]) == {"title", "content"}
        assert "image_base64" in create["properties"]

    def test_call_tool_roundtrip(self) -> None:
        async def _run() -> tuple[dict, dict]:
            created = await server.mcp.call_tool(
                "create_note", {"title": "Groceries", "content": "milk"}
            )
            found = await server.mcp.call_tool("search_notes", {"query": "GROCER"})
            return _parse_tool_response(created), _parse_tool_response(found)

        created, found = anyio.run(_run)
        assert "saved successfully" in created["message"]
        assert found["count"] == 1
        assert found["notes"][0]["id"] == created["note_id"]

    def test_call_tool_reports_empty_title(self) -> None:
        async def _run() -> dict:
            result = await server.mcp.call_tool(
                "create_note", {"title": "", "content": "body"}
            )
            return _parse_tool_response(result)

        assert "error" in anyio.run(_run)
        assert server.list_notes()["count"] == 0
