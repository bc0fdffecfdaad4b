"""Unit tests for SessionRegistry."""

from datetime import timedelta

from cryptotutor.engines.progression.registry import SessionRegistry
from cryptotutor.engines.progression.state_machine import LessonSession

from conftest import FakeContentProvider, FakeTutor, RecordingSink, make_lesson


def _session(user_id: int = 1) -> LessonSession:
    lesson = make_lesson((1,))
    return LessonSession(lesson, user_id, FakeContentProvider(lesson), RecordingSink(), FakeTutor())


class TestSessionRegistry:
    def test_add_and_get(self):
        registry = SessionRegistry()
        session = registry.add(_session())
        assert registry.get(session.id) is session
        assert session.id in registry
        assert len(registry) == 1
        assert registry.get("unknown") is None

    def test_remove_closes_session(self):
        registry = SessionRegistry()
        session = registry.add(_session())
        assert registry.remove(session.id) is True
        assert session.closed is True
        assert registry.remove(session.id) is False
        assert len(registry) == 0
        assert registry.last_seen(session.id) is None

    def test_for_user(self):
        registry = SessionRegistry()
        mine = registry.add(_session(user_id=1))
        registry.add(_session(user_id=2))
        assert registry.for_user(1) == [mine]

    def test_close_all(self):
        registry = SessionRegistry()
        sessions = [registry.add(_session()) for _ in range(3)]
        registry.close_all()
        assert len(registry) == 0
        assert all(s.closed for s in sessions)


class TestIdleEviction:
    """Sessions abandoned without a DELETE are closed after max_idle."""

    def test_cleanup_closes_idle_sessions(self):
        registry = SessionRegistry(max_idle=timedelta(minutes=30))
        sessions = [registry.add(_session()) for _ in range(5)]
        later = registry.last_seen(sessions[-1].id) + timedelta(minutes=31)

        assert registry.cleanup_expired(now=later) == 5
        assert len(registry) == 0
        assert all(s.closed for s in sessions)

    def test_recent_sessions_survive(self):
        registry = SessionRegistry(max_idle=timedelta(minutes=30))
        session = registry.add(_session())
        soon = registry.last_seen(session.id) + timedelta(minutes=10)

        assert registry.cleanup_expired(now=soon) == 0
        assert registry.get(session.id) is session
        assert session.closed is False

    def test_get_refreshes_activity(self):
        registry = SessionRegistry()
        session = registry.add(_session())
        registry._last_seen[session.id] -= timedelta(hours=1)
        before = registry.last_seen(session.id)

        registry.get(session.id)
        assert registry.last_seen(session.id) > before

    def test_add_evicts_stale_sessions(self):
        registry = SessionRegistry(max_idle=timedelta(minutes=30))
        abandoned = registry.add(_session(user_id=1))
        registry._last_seen[abandoned.id] -= timedelta(hours=1)

        fresh = registry.add(_session(user_id=2))

        assert abandoned.id not in registry
        assert abandoned.closed is True
        assert fresh.id in registry
        assert len(registry) == 1

    def test_explicit_max_idle_overrides_default(self):
        registry = SessionRegistry(max_idle=timedelta(hours=2))
        session = registry.add(_session())
        registry._last_seen[session.id] -= timedelta(minutes=20)

        assert registry.cleanup_expired(max_idle=timedelta(minutes=10)) == 1
        assert session.closed is True
