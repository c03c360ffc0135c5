"""
Test configuration: puts the repo root on sys.path and provides isolated
storage plus a fake text-generation transport.
"""

import sys
from datetime import date
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from core.errors import TransportError  # noqa: E402
from lifeflow_main.main_agents.kv_store import KeyValueStore  # noqa: E402
from lifeflow_main.main_agents.schedule_store import ScheduleStore  # noqa: E402
from lifeflow_main.models.models_schedule import Task, UserPreferences  # noqa: E402

DAY = date(2024, 1, 15)

SCHEDULE_TEXT = (
    "Here's a gentle plan for today:\n"
    "⏰ 08:00 - 09:00 | Wake up, breakfast\n"
    "📚 09:00 - 09:45 | Write report\n"
    "☕ 09:45 - 10:00 | Break\n"
    "Does this feel okay?"
)


class FakeChat:
    """Stands in for llm_client.chat; records every call."""

    def __init__(self, replies=None, error=None):
        self.replies = list(replies or [SCHEDULE_TEXT])
        self.error = error
        self.calls = []

    async def __call__(self, api_key, turns, system_prompt=None):
        self.calls.append({"api_key": api_key, "turns": list(turns), "system_prompt": system_prompt})
        if self.error is not None:
            raise self.error
        if len(self.replies) > 1:
            return self.replies.pop(0)
        return self.replies[0]

    @property
    def call_count(self):
        return len(self.calls)


@pytest.fixture
def kv(tmp_path):
    store = KeyValueStore(
        database_url=f"sqlite:///{tmp_path / 'lifeflow.db'}",
        mirror_path=tmp_path / "mirror.json",
    )
    yield store
    store.close()


@pytest.fixture
def schedule_store(kv):
    return ScheduleStore(kv)


@pytest.fixture
def prefs():
    return UserPreferences(wake_time="08:00", bed_time="23:00", max_focus_minutes=45,
                           break_minutes=15, personal_notes="", api_key="sk-test")


@pytest.fixture
def make_task():
    def _make(title="Task", minutes=30, priority="medium", **kw):
        return Task(title=title, estimated_minutes=minutes, priority=priority, **kw)
    return _make


@pytest.fixture
def fake_chat():
    return FakeChat()


@pytest.fixture
def failing_chat():
    return FakeChat(error=TransportError("connection reset"))
