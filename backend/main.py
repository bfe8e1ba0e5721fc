"""FastAPI entrypoint for the definitions backend."""

from __future__ import annotations

import asyncio
import traceback
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from app_state import DefinitionsAppState
from models import (
    AnnotatedSpanPayload,
    AnnotateRequest,
    AnnotateResponsePayload,
    CreateNoteRequest,
    DefinitionPayload,
    DefinitionsResponsePayload,
    MarkNoteRequest,
    NoteContentPayload,
    NotesResponsePayload,
    ResolveRequest,
    ResolveResponsePayload,
    ScanResponsePayload,
    SettingsPayload,
    UpdateNoteRequest,
    UpdateSettingsRequest,
)

state = DefinitionsAppState()


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Initial scan, as on plugin load.
    try:
        await asyncio.to_thread(state.current().definitions.rescan)
    except Exception:
        traceback.print_exc()
    yield


app = FastAPI(
    title="Definitions Backend",
    description="Glossary definitions and term tooltips for a markdown vault",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _settings_payload() -> SettingsPayload:
    settings = state.current().definitions.settings()
    return SettingsPayload(filename=settings.filename, definition_color=settings.definition_color)


@app.get("/", tags=["health"])
async def root():
    return {"status": "ok", "message": "Definitions backend is running"}


@app.get("/health", tags=["health"])
async def health():
    return {"status": "ok", "message": "Definitions backend is running"}


@app.get("/notes", response_model=NotesResponsePayload, tags=["notes"])
async def notes():
    try:
        return state.current().notes.tree()
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@app.get("/note/{note_id:path}", response_model=NoteContentPayload, tags=["notes"])
async def get_note(note_id: str):
    try:
        return state.current().notes.get_note(note_id)
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail="Note not found")
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@app.post("/update-note", tags=["notes"])
async def update_note(request: UpdateNoteRequest):
    try:
        record = state.current().notes.save_note(request)
        return {"success": True, "note_id": record.id}
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@app.post("/create-note", tags=["notes"])
async def create_note(request: CreateNoteRequest):
    try:
        record = state.current().notes.create_note(request)
        return {"success": True, "note_id": record.id, "note": {"id": record.id, "title": record.title}}
    except FileExistsError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@app.post("/definitions/rescan", response_model=ScanResponsePayload, tags=["definitions"])
async def rescan():
    try:
        result = await asyncio.to_thread(state.current().definitions.rescan)
        return ScanResponsePayload(
            count=result.count,
            message=result.message,
            documents=result.documents,
            errors=result.errors,
        )
    except Exception as exc:
        traceback.print_exc()
        raise HTTPException(status_code=500, detail=str(exc))


@app.get("/definitions", response_model=DefinitionsResponsePayload, tags=["definitions"])
async def definitions():
    mapping = state.current().engine.mapping()
    return DefinitionsResponsePayload(
        definitions=[
            DefinitionPayload(term=term, definition=definition)
            for term, definition in sorted(mapping.items())
        ]
    )


@app.post("/definitions/resolve", response_model=ResolveResponsePayload, tags=["definitions"])
async def resolve(request: ResolveRequest):
    service = state.current().definitions
    definition = service.lookup(request.term)
    return ResolveResponsePayload(
        term=request.term,
        definition=service.tooltip(request.term),
        found=definition is not None,
    )


@app.post("/definitions/annotate", response_model=AnnotateResponsePayload, tags=["definitions"])
async def annotate(request: AnnotateRequest):
    spans = state.current().definitions.annotate(request.spans)
    return AnnotateResponsePayload(
        spans=[
            AnnotatedSpanPayload(
                text=span.text,
                marked=span.marked,
                term=span.term,
                definition=span.definition,
                color=span.color,
            )
            for span in spans
        ]
    )


@app.post("/definitions/mark", tags=["definitions"])
async def mark_note(request: MarkNoteRequest):
    try:
        record = await asyncio.to_thread(state.current().definitions.mark_note, request.note_id)
        return {"success": True, "note_id": record.id}
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail="Note not found")
    except FileExistsError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception as exc:
        traceback.print_exc()
        raise HTTPException(status_code=500, detail=str(exc))


@app.get("/settings", response_model=SettingsPayload, tags=["settings"])
async def get_settings():
    return _settings_payload()


@app.put("/settings", response_model=SettingsPayload, tags=["settings"])
async def update_settings(request: UpdateSettingsRequest):
    try:
        state.current().definitions.update_settings(
            filename=request.filename,
            definition_color=request.definition_color,
        )
        return _settings_payload()
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


if __name__ == "__main__":
    uvicorn.run(app, host="127.0.0.1", port=8000)
