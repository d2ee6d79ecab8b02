"""Persistence of UI preferences and search history between sessions.

Two independent keys are kept, mirroring browser local storage: one for
``{"darkMode": bool}`` and one for the search history list. Values are
stored as JSON strings.
"""
import json
import logging
import os
from pathlib import Path
from typing import Callable, Dict, Optional

from catalog.core.config import settings
from catalog.core.constants import PREFERENCES_KEY, SEARCH_HISTORY_KEY
from catalog.core.store import (
    AppState,
    Store,
    add_search_history,
    toggle_dark_mode,
)

logger = logging.getLogger(__name__)


class PreferenceStorage:
    """String key/value storage. The base class keeps values in memory."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FilePreferenceStorage(PreferenceStorage):
    """Key/value storage persisted as one JSON document on disk."""

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path or settings.PREFERENCES_PATH)
        super().__init__(self._read())

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable preferences file %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring preferences file %s: not a JSON object", self.path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(self._items, indent=2), encoding="utf-8")
        os.replace(tmp_path, self.path)

    def set_item(self, key: str, value: str) -> None:
        super().set_item(key, value)
        self._write()

    def remove_item(self, key: str) -> None:
        super().remove_item(key)
        self._write()


def _load_json(storage: PreferenceStorage, key: str):
    raw = storage.get_item(key)
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning("Ignoring corrupt stored value for %s", key)
        return None


def restore_preferences(store: Store, storage: PreferenceStorage) -> None:
    """Apply stored dark mode and search history to the store."""
    prefs = _load_json(storage, PREFERENCES_KEY)
    if isinstance(prefs, dict) and prefs.get("darkMode") and not store.state.dark_mode:
        store.dispatch(toggle_dark_mode())

    history = _load_json(storage, SEARCH_HISTORY_KEY)
    if history is None:
        return
    if not isinstance(history, list):
        logger.warning("Ignoring stored search history: expected a list")
        return
    # Stored most-recent-first; replay oldest first so order is preserved
    entries = [h for h in history if isinstance(h, str) and h.strip()]
    for entry in reversed(entries[:settings.SEARCH_HISTORY_LIMIT]):
        store.dispatch(add_search_history(entry))


def save_preferences(state: AppState, storage: PreferenceStorage) -> None:
    storage.set_item(PREFERENCES_KEY, json.dumps({"darkMode": state.dark_mode}))
    storage.set_item(SEARCH_HISTORY_KEY, json.dumps(state.search_history))


def bind_preferences(store: Store, storage: PreferenceStorage) -> Callable[[], None]:
    """Write each key whenever its slice of state changes. Returns unsubscribe."""

    def on_change(new_state: AppState, old_state: AppState) -> None:
        if new_state.dark_mode != old_state.dark_mode:
            storage.set_item(PREFERENCES_KEY, json.dumps({"darkMode": new_state.dark_mode}))
        if new_state.search_history != old_state.search_history:
            storage.set_item(SEARCH_HISTORY_KEY, json.dumps(new_state.search_history))

    return store.subscribe(on_change)
