from __future__ import annotations

from threading import RLock
from typing import Dict, List, Optional

from .languages import Language
from .state import OrderSession


class SessionStore:
    """In-memory store of order sessions keyed by session id.

    ``get_session`` creates on first use; ``peek`` never does.
    """

    def __init__(self, default_language: Language = Language.KO) -> None:
        self._sessions: Dict[str, OrderSession] = {}
        self._lock = RLock()
        self.default_language = default_language

    @staticmethod
    def _key(session_id: str) -> str:
        return session_id or "default"

    def get_session(self, session_id: str, language: Optional[Language] = None) -> OrderSession:
        session_key = self._key(session_id)
        with self._lock:
            if session_key not in self._sessions:
                self._sessions[session_key] = OrderSession(
                    session_id=session_key,
                    language=language or self.default_language,
                )
            session = self._sessions[session_key]
            if language is not None:
                session.language = language
            return session

    def peek(self, session_id: str) -> Optional[OrderSession]:
        with self._lock:
            return self._sessions.get(self._key(session_id))

    def has_session(self, session_id: str) -> bool:
        with self._lock:
            return self._key(session_id) in self._sessions

    def clear(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(self._key(session_id), None)

    def all_sessions(self) -> List[OrderSession]:
        with self._lock:
            return list(self._sessions.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


__all__ = ["SessionStore"]
