"""Shared fixtures for loader tests."""

from __future__ import annotations

import pytest


class RecordingLogger:
    """Minimal logger double that keeps formatted messages per level."""

    def __init__(self):
        self.records: list[tuple[str, str]] = []

    def _log(self, level, message, *args):
        self.records.append((level, message % args if args else message))

    def debug(self, message, *args):
        self._log("debug", message, *args)

    def info(self, message, *args):
        self._log("info", message, *args)

    def warning(self, message, *args):
        self._log("warning", message, *args)

    def error(self, message, *args):
        self._log("error", message, *args)

    def messages(self, level: str) -> list[str]:
        return [text for record_level, text in self.records if record_level == level]


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()
