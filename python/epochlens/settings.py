"""
Persistence of the converter state.

The state lives under a single key in a string-keyed store, the way a
browser keeps it in localStorage. Reading never fails: anything unreadable
falls back to the default state. Writing never raises either; a failed save
is logged and skipped.
"""

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional, Union

import structlog
from pydantic import ValidationError

from epochlens.errors import PersistenceFailure
from epochlens.models import AppState

logger = structlog.get_logger(__name__)

STATE_KEY = "timestamp-converter-state"
SAVE_DELAY_SECONDS = 1.0


class JsonFileStore:
    """String-keyed store backed by a single JSON object file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                content = f.read().strip()
            data = json.loads(content) if content else {}
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceFailure(f"Cannot read store {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise PersistenceFailure(f"Store {self.path} does not contain a JSON object")
        return data

    def _write_all(self, data: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise PersistenceFailure(f"Cannot write store {self.path}: {e}") from e

    def get_item(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove_item(self, key: str) -> None:
        data = self._read_all()
        if data.pop(key, None) is not None:
            self._write_all(data)


def load_state(store: JsonFileStore, key: str = STATE_KEY) -> AppState:
    try:
        raw = store.get_item(key)
        if raw is None:
            return AppState()
        return AppState.model_validate_json(raw)
    except (PersistenceFailure, ValidationError) as e:
        logger.warning("Failed to load saved state, using defaults", key=key, error=str(e))
        return AppState()


def save_state(store: JsonFileStore, state: AppState, key: str = STATE_KEY) -> bool:
    try:
        store.set_item(key, state.model_dump_json(by_alias=True))
        return True
    except PersistenceFailure as e:
        logger.warning("Failed to save state", key=key, error=str(e))
        return False


class DebouncedStateSaver:
    """
    Coalesces bursts of state changes into one write after `delay` seconds
    of inactivity. Only the most recent state is written.
    """

    def __init__(self, store: JsonFileStore, delay: float = SAVE_DELAY_SECONDS, key: str = STATE_KEY):
        self.store = store
        self.delay = delay
        self.key = key
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._pending: Optional[AppState] = None

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    def schedule(self, state: AppState) -> None:
        with self._lock:
            self._pending = state
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.delay, self.flush)
            self._timer.daemon = True
            self._timer.start()

    def __call__(self, state: AppState) -> None:
        self.schedule(state)

    def flush(self) -> bool:
        """Writes the pending state now. Returns False when there was nothing to write or the save failed."""
        with self._lock:
            state = self._pending
            self._pending = None
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        if state is None:
            return False
        return save_state(self.store, state, self.key)

    def cancel(self) -> None:
        with self._lock:
            self._pending = None
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
