"""
Tests for the definition service layer.
"""

import os
import shutil
import sys
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../backend"))

from definitions import DefinitionEngine
from services import DEFAULT_NOT_FOUND_TEXT, DefinitionService, NoteService
from models import CreateNoteRequest, UpdateNoteRequest
from settings import SettingsStore
from storage import NoteStorage


class TestDefinitionService:
    """Test suite for the DefinitionService class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.storage = NoteStorage(root=Path(self.temp_dir) / "vault")
        self.storage.save_note_content(
            "Definitions.md",
            "cat, cats: a small domesticated feline\nnot a def line\ndog: a domesticated canine",
        )
        self.storage.save_note_content("Journal.md", "The cat met a dog.\nhorse: not scanned")
        self.service = DefinitionService(
            storage=self.storage,
            engine=DefinitionEngine(),
            settings_store=SettingsStore(Path(self.temp_dir) / "data.json"),
            not_found_text=DEFAULT_NOT_FOUND_TEXT,
        )

    def teardown_method(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_rescan_counts_definitions(self, capsys):
        result = self.service.rescan()

        assert result.count == 2
        assert result.documents == ["Definitions.md"]
        assert "Found 2 definitions." in capsys.readouterr().out

    def test_tooltip(self):
        self.service.rescan()

        assert self.service.tooltip("Cats") == " a small domesticated feline"
        assert self.service.tooltip("horse") == DEFAULT_NOT_FOUND_TEXT
        assert self.service.lookup("horse") is None

    def test_rescan_uses_configured_filename(self):
        self.storage.save_note_content("Glossary.md", "owl: a bird")
        self.service.update_settings(filename="Glossary")

        result = self.service.rescan()

        assert result.count == 1
        assert self.service.lookup("owl") == " a bird"
        assert self.service.lookup("cat") is None

    def test_rescan_reports_read_failures(self):
        self.storage.save_note_content("zoo/Definitions.md", "owl: a bird")
        original = self.storage.read_content

        def failing_read(note_id):
            if note_id.startswith("zoo/"):
                raise OSError("disk error")
            return original(note_id)

        with patch.object(self.storage, "read_content", side_effect=failing_read):
            result = self.service.rescan()

        assert result.count == 2
        assert "zoo/Definitions.md" in result.errors
        assert self.service.lookup("dog") == " a domesticated canine"

    def test_annotate_marked_and_plain_spans(self):
        self.service.rescan()

        spans = self.service.annotate(["%Cats%", "print(x)", "%unicorn%"])

        assert spans[0].marked
        assert spans[0].text == "Cats"
        assert spans[0].definition == " a small domesticated feline"
        assert spans[0].color == "#0000FF"
        assert not spans[1].marked
        assert spans[1].text == "print(x)"
        assert spans[1].definition is None
        assert spans[2].definition == DEFAULT_NOT_FOUND_TEXT

    def test_mark_note_writes_copy(self):
        self.service.rescan()

        record = self.service.mark_note("Journal.md")

        assert record.id == "Journal_copy.md"
        assert self.storage.read_content("Journal_copy.md") == (
            "The `%cat%` met a `%dog%`.\nhorse: not scanned"
        )
        assert self.storage.read_content("Journal.md") == "The cat met a dog.\nhorse: not scanned"

    def test_mark_note_existing_copy(self):
        self.service.rescan()
        self.service.mark_note("Journal.md")

        with pytest.raises(FileExistsError):
            self.service.mark_note("Journal.md")

    def test_mark_note_keeps_crlf_line_endings(self):
        self.storage.save_note_content("Windows.md", "A cat\r\nA dog\r\n")
        self.service.rescan()

        self.service.mark_note("Windows.md")

        assert self.storage.read_content("Windows_copy.md") == "A `%cat%`\r\nA `%dog%`\r\n"

    def test_uses_the_engine_it_was_given(self):
        engine = DefinitionEngine()
        service = DefinitionService(
            storage=self.storage,
            engine=engine,
            settings_store=SettingsStore(Path(self.temp_dir) / "data.json"),
        )

        service.rescan()

        assert service.engine is engine
        assert engine.resolve("dog") == " a domesticated canine"

    def test_mark_missing_note(self):
        with pytest.raises(FileNotFoundError):
            self.service.mark_note("Missing.md")


class TestNoteService:
    """Test suite for the NoteService class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.service = NoteService(storage=NoteStorage(root=Path(self.temp_dir)))

    def teardown_method(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_create_and_get(self):
        self.service.create_note(CreateNoteRequest(note_id="Definitions", content="a: b"))

        payload = self.service.get_note("Definitions.md")

        assert payload.title == "Definitions"
        assert payload.content == "a: b"

    def test_save_and_tree(self):
        self.service.save_note(UpdateNoteRequest(note_id="x/Note.md", content="text"))

        tree = self.service.tree()

        assert [node.id for node in tree.notes] == ["x/Note.md"]
