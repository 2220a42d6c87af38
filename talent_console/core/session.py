"""
Talent Console - Session Persistence
Single-slot stores recording which account is signed in.

The services take a store explicitly, so several independent sessions can
coexist in one process. ``get_session_store()`` offers a lazily created
process-wide default for callers that want one.
"""

import json
import logging
import threading
from functools import lru_cache
from pathlib import Path
from typing import Optional, Dict, Any, Protocol, Union, runtime_checkable

from pydantic import ValidationError

from .config import Settings, get_settings
from .schemas.auth import SessionSnapshot
from .security.auth import AuthenticationError, SessionTokenCodec

logger = logging.getLogger(__name__)


@runtime_checkable
class SessionStore(Protocol):
    """A single named slot holding a serialized account snapshot or nothing."""

    def set(self, snapshot: SessionSnapshot) -> None:
        ...

    def get(self) -> Optional[SessionSnapshot]:
        ...

    def clear(self) -> None:
        ...


class InMemorySessionStore:
    """Session slot held in process memory; one slot per instance."""

    def __init__(self, snapshot: Optional[SessionSnapshot] = None):
        self._snapshot = snapshot

    def set(self, snapshot: SessionSnapshot) -> None:
        self._snapshot = snapshot.model_copy()

    def get(self) -> Optional[SessionSnapshot]:
        if self._snapshot is None:
            return None
        return self._snapshot.model_copy()

    def clear(self) -> None:
        self._snapshot = None


class FileSessionStore:
    """
    Session slot persisted in a JSON file of named slots.

    With a :class:`SessionTokenCodec` the slot holds a signed token instead
    of the raw snapshot; tampered or expired tokens read as no session.
    Unreadable slots are cleared and read as no session.
    """

    def __init__(
        self,
        path: Union[str, Path],
        slot_name: str = "admin_user",
        codec: Optional[SessionTokenCodec] = None,
    ):
        self.path = Path(path)
        self.slot_name = slot_name
        self.codec = codec
        self._lock = threading.Lock()

    def set(self, snapshot: SessionSnapshot) -> None:
        """
        Write the snapshot into the slot, replacing any previous value.

        Args:
            snapshot: Account snapshot of the signed-in operator
        """
        if self.codec is not None:
            value = self.codec.encode(snapshot)
        else:
            value = snapshot.model_dump_json()
        with self._lock:
            slots = self._read_slots()
            slots[self.slot_name] = value
            self._write_slots(slots)

    def get(self) -> Optional[SessionSnapshot]:
        """
        Read the slot.

        Returns:
            The stored snapshot, or None when empty or unreadable
        """
        with self._lock:
            value = self._read_slots().get(self.slot_name)
        if value is None:
            return None

        try:
            if self.codec is not None:
                return self.codec.decode(value)
            return SessionSnapshot.model_validate_json(value)
        except (AuthenticationError, ValidationError, TypeError, ValueError) as e:
            logger.warning(f"Discarding unreadable session in slot '{self.slot_name}': {e}")
            self.clear()
            return None

    def clear(self) -> None:
        with self._lock:
            slots = self._read_slots()
            if slots.pop(self.slot_name, None) is not None:
                self._write_slots(slots)

    def _read_slots(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error reading session file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write_slots(self, slots: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(slots), encoding="utf-8")
        tmp_path.replace(self.path)


def build_session_store(settings: Optional[Settings] = None) -> SessionStore:
    """
    Build a session store from settings.

    Args:
        settings: Settings providing SESSION_* keys

    Returns:
        A file-backed store when SESSION_FILE_PATH is set, else an in-memory one
    """
    settings = settings or get_settings()
    if settings.SESSION_FILE_PATH:
        return FileSessionStore(
            settings.SESSION_FILE_PATH,
            slot_name=settings.SESSION_SLOT_NAME,
            codec=SessionTokenCodec.from_settings(settings),
        )
    return InMemorySessionStore()


@lru_cache()
def get_session_store() -> SessionStore:
    """Get the process-wide session store, created on first use."""
    return build_session_store()
