"""In-memory note repository with write-through persistence."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from uuid import UUID, uuid4

from pydantic import ValidationError

from grilette.metrics import NOTE_OPERATIONS
from grilette.models import Note, dump_notes, parse_notes, utc_now
from grilette.storage import PersistenceAdapter

logger = logging.getLogger("grilette.repository")

Clock = Callable[[], datetime]
IdFactory = Callable[[], UUID]
Listener = Callable[[list[Note]], None]


def _sort_key(note: Note) -> tuple[bool, datetime]:
    return note.is_pinned, note.created_at


class NoteRepository:
    """Owns the working set of notes.

    The working set is kept sorted with pinned notes first and, within each
    group, the most recently created note first. Every successful mutation
    is written through to the persistence adapter before the call returns,
    then change listeners are called with a snapshot of the new working set.

    Stored notes are never mutated in place, so lists handed out by
    ``notes`` and ``search`` remain stable snapshots.
    """

    def __init__(
        self,
        persistence: PersistenceAdapter,
        *,
        clock: Clock = utc_now,
        id_factory: IdFactory = uuid4,
        refresh_last_modified: bool = True,
    ) -> None:
        self._persistence = persistence
        self._clock = clock
        self._id_factory = id_factory
        self._refresh_last_modified = refresh_last_modified
        self._notes: list[Note] = []
        self._listeners: list[Listener] = []

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def notes(self) -> list[Note]:
        """Snapshot of the working set in display order."""
        return list(self._notes)

    @property
    def count(self) -> int:
        """Number of notes in the working set."""
        return len(self._notes)

    def get(self, note_id: UUID) -> Note | None:
        """Return the note with ``note_id``, if any."""
        index = self._index_of(note_id)
        return None if index is None else self._notes[index]

    def search(self, query: str) -> list[Note]:
        """Return notes whose title or content contains ``query``.

        Matching is case-insensitive using Unicode case folding. An empty
        query returns every note. Order follows the working set.
        """
        if not query:
            return list(self._notes)
        needle = query.casefold()
        return [
            n
            for n in self._notes
            if needle in n.title.casefold() or needle in n.content.casefold()
        ]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def load(self) -> list[Note]:
        """Replace the working set with the persisted collection."""
        # Last copy wins when the stored collection repeats an id.
        unique = {note.id: note for note in self._persistence.read_notes()}
        self._notes = sorted(unique.values(), key=_sort_key, reverse=True)
        logger.info("Loaded %d notes", len(self._notes))
        self._notify()
        return list(self._notes)

    def new_note(
        self, title: str, content: str, image_data: bytes | None = None
    ) -> Note:
        """Build a note with a fresh id and timestamps. Does not store it."""
        now = self._clock()
        return Note(
            id=self._id_factory(),
            title=title,
            content=content,
            created_at=now,
            last_modified=now,
            image_data=image_data,
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_or_update(self, note: Note) -> bool:
        """Insert ``note`` or replace the stored note with the same id.

        Notes missing a title or content are ignored and ``False`` is
        returned; the working set is left untouched.
        """
        if not self._upsert(note):
            NOTE_OPERATIONS.labels(operation="add_or_update", outcome="ignored").inc()
            return False
        NOTE_OPERATIONS.labels(operation="add_or_update", outcome="applied").inc()
        self._commit(resort=True)
        return True

    def pin(self, note: Note) -> bool:
        """Toggle the pinned flag of the stored note matching ``note.id``."""
        index = self._index_of(note.id)
        if index is None:
            NOTE_OPERATIONS.labels(operation="pin", outcome="ignored").inc()
            return False
        current = self._notes[index]
        self._notes[index] = current.model_copy(
            update={"is_pinned": not current.is_pinned}
        )
        logger.debug("Note %s pinned=%s", note.id, not current.is_pinned)
        NOTE_OPERATIONS.labels(operation="pin", outcome="applied").inc()
        self._commit(resort=True)
        return True

    def delete(self, note: Note) -> bool:
        """Remove every stored note whose id matches ``note.id``."""
        remaining = [n for n in self._notes if n.id != note.id]
        if len(remaining) == len(self._notes):
            NOTE_OPERATIONS.labels(operation="delete", outcome="ignored").inc()
            return False
        self._notes = remaining
        logger.info("Deleted note %s", note.id)
        NOTE_OPERATIONS.labels(operation="delete", outcome="applied").inc()
        self._commit(resort=False)
        return True

    # ------------------------------------------------------------------
    # Export / import
    # ------------------------------------------------------------------

    def export_json(self) -> str:
        """Serialize the working set in the stored JSON format."""
        return dump_notes(self._notes, indent=2).decode("utf-8")

    def import_json(self, payload: str | bytes) -> int:
        """Add or update every note in a JSON array.

        Returns the number of notes accepted. A payload that does not parse
        imports nothing.
        """
        try:
            incoming = parse_notes(payload)
        except ValidationError as e:
            logger.warning("Rejected note import: %s", e)
            return 0
        accepted = sum(1 for note in incoming if self._upsert(note))
        if accepted:
            NOTE_OPERATIONS.labels(operation="import", outcome="applied").inc()
            self._commit(resort=True)
        logger.info("Imported %d of %d notes", accepted, len(incoming))
        return accepted

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> None:
        """Call ``listener`` with the working set after every change."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _index_of(self, note_id: UUID) -> int | None:
        for index, stored in enumerate(self._notes):
            if stored.id == note_id:
                return index
        return None

    def _upsert(self, note: Note) -> bool:
        if not note.is_complete:
            logger.debug("Ignoring note %s without title or content", note.id)
            return False
        stored = note.model_copy(deep=True)
        index = self._index_of(note.id)
        if index is None:
            self._notes.append(stored)
            logger.info("Saved note %s — '%s'", stored.id, stored.title)
        else:
            stored.created_at = self._notes[index].created_at
            if self._refresh_last_modified:
                stored.last_modified = self._clock()
            self._notes[index] = stored
            logger.info("Updated note %s — '%s'", stored.id, stored.title)
        return True

    def _commit(self, resort: bool) -> None:
        if resort:
            # Stable under reverse=True, so ties keep their current order.
            self._notes.sort(key=_sort_key, reverse=True)
        self._persistence.write_notes(self._notes)
        self._notify()

    def _notify(self) -> None:
        snapshot = list(self._notes)
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.warning("Note listener %r failed: %s", listener, e)
