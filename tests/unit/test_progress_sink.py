"""Unit tests for BackgroundProgressSink failure handling."""

import pytest

from cryptotutor.engines.content.sinks import BackgroundProgressSink
from cryptotutor.engines.progression.contracts import ProgressWrite, QuizResultWrite


class _BrokenSessionMaker:
    """Session factory whose sessions fail on entry."""

    def __init__(self):
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self

    async def __aenter__(self):
        raise ConnectionError("database unavailable")

    async def __aexit__(self, *exc):
        return False


class TestBackgroundProgressSink:
    @pytest.mark.asyncio
    async def test_failed_write_is_logged_not_raised(self, caplog):
        maker = _BrokenSessionMaker()
        sink = BackgroundProgressSink(maker)

        with caplog.at_level("WARNING"):
            sink.record_progress(ProgressWrite(user_id=1, subtopic_id=2, completed=True))
            sink.record_quiz_result(
                QuizResultWrite(user_id=1, subtopic_id=2, score=80, quiz_type="ai", completed=True)
            )
            assert sink.pending == 2
            await sink.drain()

        assert sink.pending == 0
        assert maker.calls == 2
        assert "Background progress write failed" in caplog.text
        assert "Background quiz_result write failed" in caplog.text

    def test_write_without_event_loop_is_dropped(self, caplog):
        maker = _BrokenSessionMaker()
        sink = BackgroundProgressSink(maker)

        with caplog.at_level("WARNING"):
            sink.record_progress(ProgressWrite(user_id=1, subtopic_id=2, completed=True))

        assert sink.pending == 0
        assert maker.calls == 0
        assert "dropping progress write" in caplog.text

    @pytest.mark.asyncio
    async def test_drain_with_nothing_pending(self):
        sink = BackgroundProgressSink(_BrokenSessionMaker())
        await sink.drain()
        assert sink.pending == 0
