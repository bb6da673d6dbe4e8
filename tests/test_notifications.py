"""Tests for notifications module."""

from __future__ import annotations

from unittest.mock import MagicMock

from taskflow.notifications import NotificationLevel, Notifier


class TestNotifier:
    def test_sinks_receive_notifications(self):
        sink = MagicMock()
        notifier = Notifier()
        notifier.add_sink(sink)
        sent = notifier.success("List created successfully")
        sink.assert_called_once_with(sent)
        assert sent.level == NotificationLevel.SUCCESS

    def test_disabled_notifier_keeps_history_only(self):
        sink = MagicMock()
        notifier = Notifier(enabled=False)
        notifier.add_sink(sink)
        notifier.error("Failed to move task")
        sink.assert_not_called()
        assert [n.message for n in notifier.errors()] == ["Failed to move task"]

    def test_history_is_bounded(self):
        notifier = Notifier(max_history=3)
        for idx in range(5):
            notifier.info(f"n{idx}")
        assert [n.message for n in notifier.history] == ["n2", "n3", "n4"]

    def test_errors_filters_by_level(self):
        notifier = Notifier()
        notifier.success("ok")
        notifier.error("bad")
        assert [n.message for n in notifier.errors()] == ["bad"]
        notifier.clear()
        assert notifier.history == []
