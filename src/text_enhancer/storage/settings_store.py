"""SQLite key-value store for API settings and the signup flag."""

from __future__ import annotations

import json
import logging
import os
import sqlite3
import time
from pathlib import Path

from pydantic import ValidationError

from text_enhancer.config import LLMConfig
from text_enhancer.models.settings import ApiConfig

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path.home() / ".text-enhancer" / "settings.db"
API_CONFIG_KEY = "api_config"
API_KEY_ENV = "OPENROUTER_API_KEY"
BASE_URL_ENV = "OPENROUTER_BASE_URL"


class SettingsStore:
    """Small persistent key-value store; values are JSON documents."""

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS settings (
                    key TEXT PRIMARY KEY,
                    value_json TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
            """)

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(str(self.db_path))

    def get(self, key: str) -> dict | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value_json FROM settings WHERE key = ?", (key,)
            ).fetchone()
        if row is None:
            return None
        try:
            return json.loads(row[0])
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable setting %r", key)
            self.delete(key)
            return None

    def put(self, key: str, value: dict) -> None:
        with self._connect() as conn:
            conn.execute(
                """INSERT OR REPLACE INTO settings (key, value_json, updated_at)
                   VALUES (?, ?, ?)""",
                (key, json.dumps(value), time.time()),
            )

    def delete(self, key: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM settings WHERE key = ?", (key,))

    def clear(self) -> int:
        """Delete every key. Returns count of deleted rows."""
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM settings")
            return cursor.rowcount

    # --- API settings -----------------------------------------------------

    def save(self, config: ApiConfig) -> None:
        self.put(API_CONFIG_KEY, config.model_dump())

    def load_raw(self) -> dict:
        """Stored API settings as saved, possibly partial."""
        return self.get(API_CONFIG_KEY) or {}

    def load(self, defaults: LLMConfig | None = None) -> ApiConfig | None:
        """Snapshot of the API settings, or None when no API key is available.

        Stored values win; the API key and base URL fall back to the
        environment, and the model and URL fall back to ``defaults``.
        """
        defaults = defaults or LLMConfig()
        stored = self.load_raw()
        api_key = stored.get("api_key") or os.environ.get(API_KEY_ENV, "")
        if not api_key.strip():
            return None
        try:
            return ApiConfig(
                api_key=api_key.strip(),
                default_model=stored.get("default_model") or defaults.default_model,
                base_url=stored.get("base_url") or os.environ.get(BASE_URL_ENV) or defaults.base_url,
            )
        except ValidationError:
            logger.warning("Stored API settings are invalid; ignoring them", exc_info=True)
            return None

    def clear_api_config(self) -> None:
        self.delete(API_CONFIG_KEY)
