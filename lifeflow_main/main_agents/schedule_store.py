# Load/save/delete of the day's schedule record, keyed by calendar date
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import date
from typing import Optional

from lifeflow_main.main_agents.kv_store import KeyValueStore
from lifeflow_main.models.models_schedule import DaySchedule


def schedule_key(day: date) -> str:
    return f"schedule_{day.isoformat()}"


@dataclass
class TwoPhaseRead:
    """A provisional snapshot now, and a task that resolves to the authoritative value."""
    provisional: Optional[DaySchedule]
    settled: "asyncio.Task[Optional[DaySchedule]]"


class ScheduleStore:
    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    @staticmethod
    def _decode(raw) -> Optional[DaySchedule]:
        return DaySchedule.model_validate(raw) if raw is not None else None

    def load(self, day: date) -> Optional[DaySchedule]:
        return self._decode(self.kv.get(schedule_key(day)))

    def save(self, day: date, schedule: DaySchedule) -> bool:
        if schedule.date != day:
            schedule = schedule.model_copy(update={"date": day})
        return self.kv.set(schedule_key(day), schedule.model_dump(mode="json"))

    def delete(self, day: date) -> bool:
        return self.kv.remove(schedule_key(day))

    def load_provisional(self, day: date) -> Optional[DaySchedule]:
        return self._decode(self.kv.get_cached(schedule_key(day)))

    async def load_settled(self, day: date) -> Optional[DaySchedule]:
        return self._decode(await self.kv.get_settled(schedule_key(day)))

    def read_two_phase(self, day: date) -> TwoPhaseRead:
        """Must be called from a running event loop."""
        settled = asyncio.get_running_loop().create_task(self.load_settled(day))
        return TwoPhaseRead(provisional=self.load_provisional(day), settled=settled)
