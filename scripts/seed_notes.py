"""Seed a Grilette store with demo notes.

Writes a handful of notes through the repository so the stored JSON looks
exactly like what the app produces. The last note in the list is pinned.

Usage:
    python scripts/seed_notes.py [--backend file] [--data-dir ~/.grilette]
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Allow running as a plain script from the project root.
_project_root = str(Path(__file__).resolve().parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from grilette.config import Settings, build_store  # noqa: E402
from grilette.repository import NoteRepository  # noqa: E402
from grilette.storage import PersistenceAdapter  # noqa: E402

# Each entry: (title, content)
NOTES: list[tuple[str, str]] = [
    ("Groceries", "Eggs, milk, bread, two lemons."),
    ("Meeting Notes", "Moved the release to Friday. Ask Deniz about the icons."),
    ("Reading List", "Designing Data-Intensive Applications; The Pragmatic Programmer."),
    ("Trip", "Book the ferry before the end of the month."),
]


def main() -> None:
    """Seed the configured store."""
    defaults = Settings()
    parser = argparse.ArgumentParser(description="Seed Grilette with demo notes")
    parser.add_argument(
        "--backend",
        choices=["file", "redis"],
        default="redis" if defaults.storage_backend == "redis" else "file",
        help="Storage backend to seed",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=defaults.data_dir,
        help=f"Directory for the file backend (default: {defaults.data_dir})",
    )
    parser.add_argument(
        "--redis-url",
        default=defaults.redis_url,
        help=f"Redis URL for the redis backend (default: {defaults.redis_url})",
    )
    args = parser.parse_args()

    config = defaults.model_copy(
        update={
            "storage_backend": args.backend,
            "data_dir": args.data_dir,
            "redis_url": args.redis_url,
        }
    )
    repository = NoteRepository(PersistenceAdapter(build_store(config)))
    repository.load()

    print(f"\n  Seeding {len(NOTES)} notes into the {args.backend} store")
    for i, (title, content) in enumerate(NOTES, 1):
        note = repository.new_note(title, content)
        repository.add_or_update(note)
        print(f"  [{i}/{len(NOTES)}] {title}")

    repository.pin(note)
    print(f"\n  Pinned '{note.title}'. Store now holds {repository.count} notes.\n")


if __name__ == "__main__":
    main()
