"""Persisted settings for the definitions backend."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


DEFAULT_FILENAME = "Definitions"
DEFAULT_DEFINITION_COLOR = "#0000FF"


class DefinitionSettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    # Display name of the note(s) scanned for definitions.
    filename: str = DEFAULT_FILENAME
    # Only used when rendering marked terms.
    definition_color: str = Field(
        default=DEFAULT_DEFINITION_COLOR,
        validation_alias=AliasChoices("definition_color", "definitionColor", "def_color"),
    )

    @field_validator("filename", "definition_color")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must not be empty")
        return value


class SettingsStore:
    """Loads and saves ``DefinitionSettings`` as a JSON file."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else Path(__file__).resolve().parent / "storage" / "data.json"

    def load(self) -> DefinitionSettings:
        stored = self._read_state()
        if not stored:
            return DefinitionSettings()
        try:
            return DefinitionSettings.model_validate(stored)
        except ValueError as exc:
            print(f"Settings in {self.path} are invalid, using defaults: {exc}")
            return DefinitionSettings()

    def save(self, settings: DefinitionSettings) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(settings.model_dump(), f, indent=2)

    def update(self, **changes) -> DefinitionSettings:
        current = self.load().model_dump()
        current.update({key: value for key, value in changes.items() if value is not None})
        settings = DefinitionSettings.model_validate(current)
        self.save(settings)
        return settings

    def _read_state(self) -> Optional[Dict]:
        try:
            if self.path.exists():
                with open(self.path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                return data if isinstance(data, dict) else None
        except (OSError, json.JSONDecodeError) as exc:
            print(f"Settings file {self.path} unreadable, using defaults: {exc}")
            return None
        return None
