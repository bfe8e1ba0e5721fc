"""Service layer for coordinating storage, settings and the definitions engine."""

from __future__ import annotations

import os
from typing import Iterable, List, Optional

from definitions import DefinitionEngine, parse_marked_term
from marking import copy_path, mark_terms
from models import (
    AnnotatedSpan,
    CreateNoteRequest,
    NoteContentPayload,
    NoteRecord,
    NotesResponsePayload,
    ScanResult,
    UpdateNoteRequest,
)
from settings import DefinitionSettings, SettingsStore
from storage import NoteStorage


DEFAULT_NOT_FOUND_TEXT = "No definition found :/"


class DefinitionService:
    """Scans the vault for definitions and answers tooltip lookups."""

    def __init__(
        self,
        storage: NoteStorage | None = None,
        engine: DefinitionEngine | None = None,
        settings_store: SettingsStore | None = None,
        not_found_text: str | None = None,
    ):
        self.storage = storage if storage is not None else NoteStorage()
        self.engine = engine if engine is not None else DefinitionEngine()
        self.settings_store = settings_store if settings_store is not None else SettingsStore()
        self.not_found_text = not_found_text or os.environ.get(
            "DEFINITIONS_NOT_FOUND_TEXT", DEFAULT_NOT_FOUND_TEXT
        )
        self._settings = self.settings_store.load()

    def settings(self) -> DefinitionSettings:
        return self._settings

    def update_settings(self, **changes) -> DefinitionSettings:
        self._settings = self.settings_store.update(**changes)
        return self._settings

    def rescan(self) -> ScanResult:
        records = self.storage.list_records().values()
        result = self.engine.scan(
            records,
            self._settings.filename,
            reader=lambda record: self.storage.read_content(record.id),
        )
        print(result.message)
        return result

    def lookup(self, term: str) -> Optional[str]:
        return self.engine.resolve(term)

    def tooltip(self, term: str) -> str:
        definition = self.lookup(term)
        return definition if definition else self.not_found_text

    def annotate(self, spans: Iterable[str]) -> List[AnnotatedSpan]:
        """Post-process rendered inline code spans.

        Marked spans carry their term, tooltip text and display color; any
        other span is returned unchanged.
        """
        annotated: List[AnnotatedSpan] = []
        for text in spans:
            term = parse_marked_term(text)
            if term is None:
                annotated.append(AnnotatedSpan(text=text))
                continue
            annotated.append(
                AnnotatedSpan(
                    text=term,
                    term=term,
                    definition=self.tooltip(term),
                    color=self._settings.definition_color,
                )
            )
        return annotated

    def mark_note(self, note_id: str) -> NoteRecord:
        """Write a copy of a note with every known term marked."""
        record = self.storage.get_note(note_id)
        marked = mark_terms(record.content, self.engine.terms())
        return self.storage.create_note(copy_path(record.id), marked)


class NoteService:
    """Thin note access used by the host surface."""

    def __init__(self, storage: NoteStorage | None = None):
        self.storage = storage if storage is not None else NoteStorage()

    def tree(self) -> NotesResponsePayload:
        return self.storage.get_tree()

    def get_note(self, note_id: str) -> NoteContentPayload:
        record = self.storage.get_note(note_id)
        return NoteContentPayload(note_id=record.id, title=record.title, content=record.content)

    def save_note(self, request: UpdateNoteRequest) -> NoteRecord:
        record, _ = self.storage.save_note_content(request.note_id, request.content)
        return record

    def create_note(self, request: CreateNoteRequest) -> NoteRecord:
        return self.storage.create_note(request.note_id, request.content)
