from pathlib import Path
from datetime import datetime, timezone
import itertools
import os
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from src.audio.graph import AudioContext


class FakeSignal:
    def __init__(self):
        self._callbacks = []

    def connect(self, callback):
        self._callbacks.append(callback)

    def emit(self, *args):
        for callback in list(self._callbacks):
            callback(*args)


class FakeSink:
    def __init__(self):
        self.chunks = []

    def write(self, data):
        self.chunks.append(bytes(data))
        return len(data)


class FakeAudioOutput:
    def __init__(self, fmt, parent=None):
        self.format = fmt
        self.parent = parent
        self.sink = FakeSink()
        self.start_calls = 0
        self.suspended = False
        self.stopped = False
        self.free_bytes = 4096

    def start(self):
        self.start_calls += 1
        return self.sink

    def bytesFree(self):
        return self.free_bytes

    def suspend(self):
        self.suspended = True

    def resume(self):
        self.suspended = False

    def stop(self):
        self.stopped = True


class FakeTimer:
    def __init__(self):
        self.timeout = FakeSignal()
        self.interval = None
        self.active = False

    def start(self, interval=None):
        self.interval = interval
        self.active = True

    def stop(self):
        self.active = False


def make_context(sample_rate=8000):
    return AudioContext(
        sample_rate,
        audio_output_factory=FakeAudioOutput,
        timer_factory=FakeTimer,
        validate_format=False,
    )


class FakeStore:
    """In-memory stand-in for :class:`StoreClient` with the same methods."""

    def __init__(self):
        self.tables = {}
        self._ids = itertools.count(1)
        self._tick = itertools.count()

    def select(self, table, filters=None, *, order=None, descending=False, limit=None):
        rows = [
            dict(row)
            for row in self.tables.get(table, [])
            if all(str(row.get(k)) == str(v) for k, v in (filters or {}).items())
        ]
        if order:
            rows.sort(key=lambda row: row[order], reverse=descending)
        if limit is not None:
            rows = rows[:limit]
        return rows

    def insert(self, table, row):
        stored = dict(row)
        stored.setdefault("id", f"{table}-{next(self._ids)}")
        stored.setdefault("created_at", f"2026-01-01T00:00:{next(self._tick):02d}+00:00")
        self.tables.setdefault(table, []).append(stored)
        return dict(stored)

    def update(self, table, values, filters):
        updated = []
        for row in self.tables.get(table, []):
            if all(str(row.get(k)) == str(v) for k, v in filters.items()):
                row.update(values)
                updated.append(dict(row))
        return updated


FIXED_NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def context():
    return make_context()


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture(scope="session")
def qapp():
    QApplication = pytest.importorskip("PyQt5.QtWidgets").QApplication
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    return app
