"""
Grilette MCP Server

Exposes the note repository and the dark-mode preference as tools via the
Model Context Protocol.  Runs with SSE transport on the configured port.
"""

import base64
import binascii
import logging
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from mcp.server.fastmcp import FastMCP

from grilette.config import build_store, settings
from grilette.models import Note
from grilette.preferences import AppPreferences
from grilette.repository import NoteRepository
from grilette.storage import PersistenceAdapter

logger = logging.getLogger("grilette.server")

# ---------------------------------------------------------------------------
# MCP server + repository
# ---------------------------------------------------------------------------
mcp = FastMCP("grilette", host=settings.server_host, port=settings.server_port)
persistence = PersistenceAdapter(build_store(settings))
repository = NoteRepository(
    persistence, refresh_last_modified=settings.refresh_last_modified
)
repository.load()
preferences = AppPreferences.load(persistence)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _note_payload(note: Note) -> dict[str, Any]:
    return note.model_dump(mode="json", by_alias=True)


def _parse_id(note_id: str) -> UUID | None:
    try:
        return UUID(note_id)
    except (ValueError, AttributeError):
        return None


def _find(note_id: str) -> Note | None:
    uid = _parse_id(note_id)
    return None if uid is None else repository.get(uid)


def _decode_image(image_base64: str | None) -> bytes | None:
    """Decode base64 image data. Raises ``ValueError`` on malformed input."""
    if image_base64 is None:
        return None
    try:
        return base64.b64decode(image_base64, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 image data: {e}") from e


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


@mcp.tool()
def create_note(title: str, content: str, image_base64: str | None = None) -> dict:
    """Create a note with a title, content, and an optional image.

    Use this tool when the user wants to write down something new.

    Args:
        title: Short descriptive title for the note.
        content: The full body / text of the note.
        image_base64: Optional image attachment, base64 encoded.

    Returns:
        Dictionary with the generated note_id and a confirmation message,
        or an error message when title or content is empty.
    """
    try:
        image = _decode_image(image_base64)
    except ValueError as e:
        return {"error": str(e)}
    note = repository.new_note(title, content, image_data=image)
    if not repository.add_or_update(note):
        return {"error": "Title and content are required."}
    logger.info("Tool create_note invoked — id=%s", note.id)
    return {
        "note_id": str(note.id),
        "message": f"Note '{note.title}' saved successfully.",
    }


@mcp.tool()
def update_note(
    note_id: str,
    title: str | None = None,
    content: str | None = None,
    image_base64: str | None = None,
    remove_image: bool = False,
) -> dict:
    """Edit an existing note.

    Fields left out keep their current value. The creation date and the
    pinned flag are preserved.

    Args:
        note_id: Id of the note to edit.
        title: New title.
        content: New content.
        image_base64: New image attachment, base64 encoded.
        remove_image: Drop the current image attachment.

    Returns:
        Dictionary with the updated note, or an error message.
    """
    existing = _find(note_id)
    if existing is None:
        return {"error": f"Note {note_id} not found."}

    changes: dict[str, Any] = {}
    if title is not None:
        changes["title"] = title
    if content is not None:
        changes["content"] = content
    if remove_image:
        changes["image_data"] = None
    elif image_base64 is not None:
        try:
            changes["image_data"] = _decode_image(image_base64)
        except ValueError as e:
            return {"error": str(e)}

    if not repository.add_or_update(existing.model_copy(update=changes)):
        return {"error": "Title and content are required."}
    logger.info("Tool update_note invoked — id=%s", note_id)
    return {"note": _note_payload(repository.get(existing.id))}


@mcp.tool()
def pin_note(note_id: str) -> dict:
    """Pin a note to the top of the list, or unpin it if already pinned.

    Args:
        note_id: Id of the note to toggle.

    Returns:
        Dictionary with the note id and its new pinned state.
    """
    note = _find(note_id)
    if note is None:
        return {"error": f"Note {note_id} not found."}
    repository.pin(note)
    pinned = repository.get(note.id).is_pinned
    logger.info("Tool pin_note invoked — id=%s, pinned=%s", note_id, pinned)
    return {"note_id": note_id, "is_pinned": pinned}


@mcp.tool()
def delete_note(note_id: str) -> dict:
    """Permanently delete a note.

    Args:
        note_id: Id of the note to delete.

    Returns:
        Dictionary with the note id and whether anything was deleted.
    """
    note = _find(note_id)
    deleted = note is not None and repository.delete(note)
    logger.info("Tool delete_note invoked — id=%s, deleted=%s", note_id, deleted)
    return {"note_id": note_id, "deleted": deleted}


@mcp.tool()
def search_notes(query: str) -> dict:
    """Search notes by keyword (case-insensitive match on title and content).

    Args:
        query: The text to look for. An empty query matches every note.

    Returns:
        Dictionary with matching notes, pinned first, and their count.
    """
    results = repository.search(query)
    logger.info("Tool search_notes invoked — query='%s', found=%d", query, len(results))
    return {
        "count": len(results),
        "notes": [_note_payload(n) for n in results],
    }


@mcp.tool()
def list_notes() -> dict:
    """List every note, pinned notes first, newest first within each group.

    Returns:
        Dictionary with all notes and their count.
    """
    notes = repository.notes
    logger.info("Tool list_notes invoked — found=%d", len(notes))
    return {
        "count": len(notes),
        "notes": [_note_payload(n) for n in notes],
    }


@mcp.tool()
def export_notes() -> dict:
    """Export every note as a JSON array.

    Returns:
        Dictionary with the note count and the JSON payload.
    """
    logger.info("Tool export_notes invoked")
    return {"count": repository.count, "payload": repository.export_json()}


@mcp.tool()
def import_notes(payload: str) -> dict:
    """Import notes from a JSON array previously produced by export_notes.

    Notes with an id that already exists replace the stored note.

    Args:
        payload: JSON array of notes.

    Returns:
        Dictionary with the number of notes imported.
    """
    imported = repository.import_json(payload)
    logger.info("Tool import_notes invoked — imported=%d", imported)
    return {"imported": imported, "total_notes": repository.count}


@mcp.tool()
def get_dark_mode() -> dict:
    """Return whether dark mode is enabled."""
    return {"is_dark_mode": preferences.is_dark_mode}


@mcp.tool()
def set_dark_mode(enabled: bool) -> dict:
    """Enable or disable dark mode.

    Args:
        enabled: True for dark mode, False for light mode.
    """
    preferences.set_dark_mode(enabled, persistence)
    return {"is_dark_mode": preferences.is_dark_mode}


@mcp.tool()
def health_check() -> dict:
    """Check whether the Grilette server is healthy.

    Returns:
        Dictionary with server status, note count, and timestamp.
    """
    logger.info("Tool health_check invoked")
    return {
        "status": "healthy",
        "server": "grilette",
        "total_notes": repository.count,
        "timestamp": datetime.now(UTC).isoformat(),
    }


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    )
    logger.info("Starting Grilette MCP server on port %d ...", settings.server_port)
    mcp.run(transport="sse")
