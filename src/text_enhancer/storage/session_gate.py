"""Email-signup gate: a persisted flag set once the signup form is submitted.

There is no real authentication here. The gate only remembers that a visitor
completed the external signup form, and with which email address.
"""

from __future__ import annotations

import logging
import re
import time
from typing import Any

from text_enhancer.storage.settings_store import SettingsStore

logger = logging.getLogger(__name__)

AUTH_KEY = "signup"
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MAX_EMAIL_LENGTH = 254


def is_valid_email(value: str | None) -> bool:
    if not value:
        return False
    value = value.strip()
    return len(value) <= MAX_EMAIL_LENGTH and bool(EMAIL_RE.match(value))


def extract_email(fields: list[dict[str, Any]] | None) -> str | None:
    """Find the email answer in a signup form submission's field list.

    A field qualifies when its type is ``email`` or its key or label
    mentions "email"; the first one with a valid address wins.
    """
    for f in fields or []:
        ftype = str(f.get("type", "")).lower()
        key = str(f.get("key", "")).lower()
        label = str(f.get("label", "")).lower()
        if ftype in ("email", "input_email") or "email" in key or "email" in label:
            value = f.get("value")
            if isinstance(value, str) and is_valid_email(value):
                return value.strip()
    return None


class SessionGate:
    def __init__(self, store: SettingsStore, ttl_days: int = 30):
        self.store = store
        self.ttl_seconds = ttl_days * 86400

    def login(self, email: str) -> None:
        if not is_valid_email(email):
            raise ValueError(f"Not a valid email address: {email!r}")
        self.store.put(AUTH_KEY, {"email": email.strip(), "timestamp": time.time()})
        logger.info("Signup recorded")

    def logout(self) -> None:
        self.store.delete(AUTH_KEY)

    def _record(self) -> dict | None:
        record = self.store.get(AUTH_KEY)
        if not record or not record.get("email") or not record.get("timestamp"):
            return None
        if time.time() - float(record["timestamp"]) > self.ttl_seconds:
            self.logout()
            return None
        return record

    def is_authenticated(self) -> bool:
        return self._record() is not None

    def current_email(self) -> str | None:
        record = self._record()
        return record["email"] if record else None
