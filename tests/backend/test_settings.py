"""
Unit tests for persisted settings.
"""

import json
import os
import shutil
import sys
import tempfile
from pathlib import Path

import pytest
from pydantic import ValidationError

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../backend"))

from settings import DefinitionSettings, SettingsStore


class TestSettingsStore:
    """Test suite for the SettingsStore class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.path = Path(self.temp_dir) / "data.json"
        self.store = SettingsStore(self.path)

    def teardown_method(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_defaults_without_file(self):
        settings = self.store.load()

        assert settings.filename == "Definitions"
        assert settings.definition_color == "#0000FF"

    def test_stored_values_merge_over_defaults(self):
        self.path.write_text(json.dumps({"filename": "Glossary"}), encoding="utf-8")

        settings = self.store.load()

        assert settings.filename == "Glossary"
        assert settings.definition_color == "#0000FF"

    def test_accepts_legacy_color_key(self):
        self.path.write_text(json.dumps({"def_color": "#FF0000", "unknown": 1}), encoding="utf-8")
        assert self.store.load().definition_color == "#FF0000"

    def test_unreadable_file_falls_back_to_defaults(self):
        self.path.write_text("{not json", encoding="utf-8")
        assert self.store.load() == DefinitionSettings()

    def test_update_persists(self):
        updated = self.store.update(filename="Glossary", definition_color=None)

        assert updated.filename == "Glossary"
        assert json.loads(self.path.read_text(encoding="utf-8")) == {
            "filename": "Glossary",
            "definition_color": "#0000FF",
        }
        assert SettingsStore(self.path).load().filename == "Glossary"

    def test_update_rejects_blank_filename(self):
        with pytest.raises(ValidationError):
            self.store.update(filename="   ")
        assert not self.path.exists()
