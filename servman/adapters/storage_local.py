from __future__ import annotations

import json
import os
import threading
from typing import Any, Dict, Optional

from servman.domain.ports import UserNameStoragePort


class StorageLocal(UserNameStoragePort):
    """Local filesystem storage for user settings and the user name (JSON)."""

    SETTINGS_FILE = "user_settings.json"
    PREFS_FILE = "user_prefs.json"

    def __init__(self, root_dir: str = ".") -> None:
        self.root = root_dir
        self._lock = threading.Lock()

    # ---- User settings (JSON) ----
    def save_user_settings(self, payload: Dict[str, Any]) -> None:
        self._write_json(self.SETTINGS_FILE, payload)

    def load_user_settings(self) -> Optional[Dict[str, Any]]:
        return self._read_json(self.SETTINGS_FILE)

    # ---- User prefs (JSON) ----
    def save_user_name(self, name: str) -> None:
        with self._lock:
            prefs = self._read_json(self.PREFS_FILE) or {}
            prefs["user_name"] = name
            self._write_json(self.PREFS_FILE, prefs)

    def load_user_name(self) -> Optional[str]:
        prefs = self._read_json(self.PREFS_FILE) or {}
        value = prefs.get("user_name")
        return value if isinstance(value, str) else None

    def _path(self, name: str) -> str:
        return os.path.join(self.root, name)

    def _write_json(self, name: str, payload: Dict[str, Any]) -> None:
        path = self._path(name)
        os.makedirs(self.root, exist_ok=True)
        tmp_path = f"{path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, path)

    def _read_json(self, name: str) -> Optional[Dict[str, Any]]:
        path = self._path(name)
        if not os.path.exists(path):
            return None
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{path} must contain a JSON object")
        return data


class MemoryUserNameStore(UserNameStoragePort):
    """In-process user-name storage for tests and headless runs."""

    def __init__(self, initial: Optional[str] = None) -> None:
        self._value = initial
        self.saved: list[str] = []

    def load_user_name(self) -> Optional[str]:
        return self._value

    def save_user_name(self, name: str) -> None:
        self._value = name
        self.saved.append(name)
