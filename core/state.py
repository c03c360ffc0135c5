# Process-wide owner of tasks and preferences.
#
# init() loads from the key-value store, flush() writes back. The scheduling
# core only ever sees snapshot(): read-only copies taken at call time.

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, NamedTuple, Optional, Tuple

from lifeflow_main.main_agents.kv_store import KeyValueStore
from lifeflow_main.models.models_schedule import Task, UserPreferences

logger = logging.getLogger(__name__)

TASKS_KEY = "tasks"
SETTINGS_KEY = "settings"


class Snapshot(NamedTuple):
    pending: Tuple[Task, ...]
    preferences: UserPreferences


class AppState:
    def __init__(self, kv: KeyValueStore):
        self.kv = kv
        self.tasks: List[Task] = []
        self.preferences = UserPreferences()

    def init(self) -> "AppState":
        self.tasks = [Task.model_validate(t) for t in self.kv.get(TASKS_KEY, [])]
        raw = self.kv.get(SETTINGS_KEY)
        self.preferences = UserPreferences.model_validate(raw) if raw else UserPreferences()
        logger.debug("state loaded: %d task(s)", len(self.tasks))
        return self

    def flush(self) -> None:
        self.kv.set(TASKS_KEY, [t.model_dump(mode="json") for t in self.tasks])
        self.kv.set(SETTINGS_KEY, self.preferences.model_dump(mode="json"))

    def snapshot(self) -> Snapshot:
        pending = tuple(t.model_copy(deep=True) for t in self.tasks if not t.completed)
        return Snapshot(pending=pending, preferences=self.preferences.model_copy())

    # -------------------------
    # Narrow write interface
    # -------------------------
    def find_task(self, task_id: str) -> Optional[Task]:
        return next((t for t in self.tasks if t.id == task_id), None)

    def add_task(self, title: str, estimated_minutes: int, priority: str = "medium",
                 deadline=None, description: Optional[str] = None) -> Task:
        task = Task(title=title, estimated_minutes=estimated_minutes, priority=priority,
                    deadline=deadline, description=description)
        self.tasks.append(task)
        self.flush()
        return task

    def update_task(self, task_id: str, **fields) -> Optional[Task]:
        """Update editable fields (title, estimated_minutes, priority, deadline, description)."""
        task = self.find_task(task_id)
        if task is None:
            return None
        data = task.model_dump()
        data.update({k: v for k, v in fields.items() if v is not None})
        updated = Task.model_validate(data)
        self.tasks = [updated if t.id == task_id else t for t in self.tasks]
        self.flush()
        return updated

    def delete_task(self, task_id: str) -> bool:
        kept = [t for t in self.tasks if t.id != task_id]
        changed = len(kept) != len(self.tasks)
        if changed:
            self.tasks = kept
            self.flush()
        return changed

    def toggle_complete(self, task_id: str) -> Optional[Task]:
        task = self.find_task(task_id)
        if task is None:
            return None
        done = not task.completed
        updated = task.model_copy(update={"completed": done,
                                          "completed_at": datetime.now() if done else None})
        self.tasks = [updated if t.id == task_id else t for t in self.tasks]
        self.flush()
        return updated

    def update_preferences(self, **fields) -> UserPreferences:
        data = self.preferences.model_dump()
        data.update({k: v for k, v in fields.items() if v is not None})
        self.preferences = UserPreferences.model_validate(data)
        self.flush()
        return self.preferences
