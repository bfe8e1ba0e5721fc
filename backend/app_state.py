"""Backend application state for the vault-scoped services."""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from definitions import DefinitionEngine
from services import DefinitionService, NoteService
from settings import SettingsStore
from storage import NoteStorage


@dataclass
class VaultServices:
    storage: NoteStorage
    engine: DefinitionEngine
    definitions: DefinitionService
    notes: NoteService


class DefinitionsAppState:
    """Holds the open vault and all services built on it."""

    def __init__(self, vault_dir: Optional[Path] = None, data_path: Optional[Path] = None):
        self._lock = threading.RLock()
        storage_dir = Path(__file__).resolve().parent / "storage"
        self.vault_dir = Path(
            vault_dir or os.environ.get("DEFINITIONS_VAULT_DIR") or storage_dir / "vault"
        ).expanduser()
        self.data_path = Path(
            data_path or os.environ.get("DEFINITIONS_DATA_PATH") or storage_dir / "data.json"
        ).expanduser()
        self._services: Optional[VaultServices] = None
        self._load()

    def current(self) -> VaultServices:
        with self._lock:
            assert self._services is not None
            return self._services

    def _load(self) -> None:
        storage = NoteStorage(root=self.vault_dir)
        engine = DefinitionEngine()
        definitions = DefinitionService(
            storage=storage,
            engine=engine,
            settings_store=SettingsStore(self.data_path),
        )
        with self._lock:
            self._services = VaultServices(
                storage=storage,
                engine=engine,
                definitions=definitions,
                notes=NoteService(storage=storage),
            )
