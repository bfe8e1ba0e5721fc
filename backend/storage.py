"""Filesystem-backed storage for a vault of markdown notes."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Optional, Tuple

from models import NoteNodePayload, NoteRecord, NotesResponsePayload


NOTE_SUFFIX = ".md"


class NoteStorage:
    """Markdown files under a vault directory, addressed by relative path."""

    def __init__(self, root: Optional[Path] = None):
        base_dir = Path(root) if root else Path(__file__).resolve().parent / "storage" / "vault"
        base_dir.mkdir(parents=True, exist_ok=True)
        self.root = base_dir.resolve()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def get_tree(self) -> NotesResponsePayload:
        records = self.list_records()
        nodes = [NoteNodePayload(id=record.id, title=record.title) for record in records.values()]
        nodes.sort(key=lambda n: n.id.lower())
        return NotesResponsePayload(notes=nodes)

    def list_records(self) -> Dict[str, NoteRecord]:
        """All notes in the vault, without their content."""
        records: Dict[str, NoteRecord] = {}
        for path in sorted(self.root.rglob(f"*{NOTE_SUFFIX}")):
            if not path.is_file():
                continue
            note_id = path.relative_to(self.root).as_posix()
            records[note_id] = self._record_for(path, note_id)
        return records

    def read_content(self, note_id: str) -> str:
        path = self._path_for(note_id)
        if not path.is_file():
            raise FileNotFoundError(f"Note not found: {note_id}")
        return self._read(path)

    def get_note(self, note_id: str) -> NoteRecord:
        normalized = self._normalize_id(note_id)
        path = self._path_for(normalized)
        if not path.is_file():
            raise FileNotFoundError(f"Note not found: {note_id}")
        record = self._record_for(path, normalized)
        record.content = self._read(path)
        return record

    def create_note(self, note_id: str, content: str) -> NoteRecord:
        normalized = self._normalize_id(note_id)
        path = self._path_for(normalized)
        if path.exists():
            raise FileExistsError(f"Note already exists: {normalized}")
        self._write(path, content)
        record = self._record_for(path, normalized)
        record.content = content
        return record

    def save_note_content(self, note_id: str, content: str) -> Tuple[NoteRecord, bool]:
        normalized = self._normalize_id(note_id)
        path = self._path_for(normalized)
        is_new = not path.exists()
        self._write(path, content)
        record = self._record_for(path, normalized)
        record.content = content
        return record, is_new

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _normalize_id(self, raw_id: str) -> str:
        normalized = (raw_id or "").strip().replace("\\", "/").strip("/")
        if not normalized:
            raise ValueError("Note id is empty.")
        if not normalized.endswith(NOTE_SUFFIX):
            normalized += NOTE_SUFFIX
        return normalized

    def _path_for(self, note_id: str) -> Path:
        path = (self.root / self._normalize_id(note_id)).resolve()
        if path != self.root and self.root not in path.parents:
            raise ValueError(f"Note id escapes the vault: {note_id}")
        return path

    def _title_from_id(self, note_id: str) -> str:
        # Display name as the host shows it: file name without folder or extension.
        return Path(note_id).stem

    def _record_for(self, path: Path, note_id: str) -> NoteRecord:
        stat = path.stat()
        return NoteRecord(
            id=note_id,
            title=self._title_from_id(note_id),
            created_at=stat.st_ctime,
            updated_at=stat.st_mtime,
        )

    def _write(self, path: Path, content: str):
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(path.name + ".tmp")
        with open(tmp_path, "w", encoding="utf-8", newline="") as handle:
            handle.write(content)
        os.replace(tmp_path, path)

    def _read(self, path: Path) -> str:
        # Line endings are kept as written so copies match the original note.
        with open(path, "r", encoding="utf-8", newline="") as handle:
            return handle.read()
