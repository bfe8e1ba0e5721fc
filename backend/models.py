"""Shared backend models for the definitions backend."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


DefinitionMapping = Dict[str, str]


def _timestamp() -> float:
    return time.time()


@dataclass
class NoteRecord:
    """Represents a markdown note in the vault."""

    id: str
    title: str
    content: str = ""
    created_at: float = field(default_factory=_timestamp)
    updated_at: float = field(default_factory=_timestamp)


@dataclass
class ScanResult:
    """Outcome of scanning the vault for definitions."""

    mapping: DefinitionMapping = field(default_factory=dict)
    count: int = 0
    documents: List[str] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def message(self) -> str:
        return f"Found {self.count} definitions."


@dataclass
class AnnotatedSpan:
    """A rendered inline code span after definition post-processing."""

    text: str
    term: Optional[str] = None
    definition: Optional[str] = None
    color: Optional[str] = None

    @property
    def marked(self) -> bool:
        return self.term is not None


# API payloads

class NoteNodePayload(BaseModel):
    id: str
    title: str


class NotesResponsePayload(BaseModel):
    notes: List[NoteNodePayload] = Field(default_factory=list)


class NoteContentPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    note_id: str = Field(alias="note_id")
    title: Optional[str] = None
    content: str


class ScanResponsePayload(BaseModel):
    count: int
    message: str
    documents: List[str] = Field(default_factory=list)
    errors: Dict[str, str] = Field(default_factory=dict)


class DefinitionPayload(BaseModel):
    term: str
    definition: str


class DefinitionsResponsePayload(BaseModel):
    definitions: List[DefinitionPayload] = Field(default_factory=list)


class ResolveResponsePayload(BaseModel):
    term: str
    definition: str
    found: bool


class AnnotatedSpanPayload(BaseModel):
    text: str
    marked: bool = False
    term: Optional[str] = None
    definition: Optional[str] = None
    color: Optional[str] = None


class AnnotateResponsePayload(BaseModel):
    spans: List[AnnotatedSpanPayload] = Field(default_factory=list)


class SettingsPayload(BaseModel):
    filename: str
    definition_color: str


# Request payloads

class UpdateNoteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    note_id: str = Field(alias="note_id")
    content: str


class CreateNoteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    note_id: str = Field(alias="note_id")
    content: str = ""


class ResolveRequest(BaseModel):
    term: str


class AnnotateRequest(BaseModel):
    spans: List[str] = Field(default_factory=list)


class MarkNoteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    note_id: str = Field(alias="note_id")


class UpdateSettingsRequest(BaseModel):
    filename: Optional[str] = None
    definition_color: Optional[str] = None
