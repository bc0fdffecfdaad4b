"""
In-memory registry of live lesson sessions.

One registry per application instance (held on app.state), handed to routes
through a dependency. Sessions nobody has touched for `max_idle` are closed
and dropped the next time a session is registered.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from cryptotutor.engines.progression.state_machine import LessonSession
from cryptotutor.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_IDLE = timedelta(hours=2)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionRegistry:
    """Maps session id -> LessonSession, with last-activity tracking."""

    def __init__(self, max_idle: timedelta = DEFAULT_MAX_IDLE) -> None:
        self.max_idle = max_idle
        self._sessions: Dict[str, LessonSession] = {}
        self._last_seen: Dict[str, datetime] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def add(self, session: LessonSession) -> LessonSession:
        self.cleanup_expired()
        self._sessions[session.id] = session
        self._last_seen[session.id] = _utcnow()
        logger.info(
            "Lesson session registered",
            extra={"lesson_id": session.lesson.id, "user_id": session.user_id},
        )
        return session

    def get(self, session_id: str) -> Optional[LessonSession]:
        """Look up a session and mark it as active."""
        session = self._sessions.get(session_id)
        if session is not None:
            self._last_seen[session_id] = _utcnow()
        return session

    def for_user(self, user_id: int) -> List[LessonSession]:
        return [s for s in self._sessions.values() if s.user_id == user_id]

    def last_seen(self, session_id: str) -> Optional[datetime]:
        return self._last_seen.get(session_id)

    def remove(self, session_id: str) -> bool:
        """Close and forget a session. Returns False if it was not registered."""
        session = self._sessions.pop(session_id, None)
        self._last_seen.pop(session_id, None)
        if session is None:
            return False
        session.close()
        return True

    def cleanup_expired(
        self,
        max_idle: Optional[timedelta] = None,
        now: Optional[datetime] = None,
    ) -> int:
        """Close sessions idle for longer than max_idle. Returns how many went."""
        cutoff = (now or _utcnow()) - (max_idle if max_idle is not None else self.max_idle)
        stale = [sid for sid, seen in self._last_seen.items() if seen < cutoff]
        for session_id in stale:
            self.remove(session_id)
        if stale:
            logger.info("Evicted %d idle lesson sessions", len(stale))
        return len(stale)

    def close_all(self) -> None:
        for session in self._sessions.values():
            session.close()
        self._sessions.clear()
        self._last_seen.clear()
