from __future__ import annotations

import threading
import time
from typing import Callable, Dict, Optional, Tuple

from ..config import SETTINGS, EditorSettings
from ..processing.editor import EditorSession


SessionEntry = Tuple[float, EditorSession]


class SessionStore:
    def __init__(
        self,
        settings: EditorSettings = SETTINGS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._settings = settings
        self._clock = clock
        self._entries: Dict[str, SessionEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Optional[EditorSession]:
        with self._lock:
            return self._lookup(key)

    def get_or_create(self, key: str) -> EditorSession:
        with self._lock:
            session = self._lookup(key)
            if session is not None:
                return session
            while len(self._entries) >= max(1, self._settings.max_sessions):
                oldest = min(self._entries.items(), key=lambda item: item[1][0])[0]
                self._entries.pop(oldest, None)
            session = EditorSession(self._settings)
            self._entries[key] = (self._clock(), session)
            return session

    def discard(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def _lookup(self, key: str) -> Optional[EditorSession]:
        # Caller holds self._lock.
        entry = self._entries.get(key)
        if not entry:
            return None
        timestamp, session = entry
        now = self._clock()
        if now - timestamp > self._settings.session_ttl:
            self._entries.pop(key, None)
            return None
        self._entries[key] = (now, session)
        return session
