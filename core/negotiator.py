# Schedule negotiation: generate a plan through the text-generation service,
# refine it turn by turn, and manage the day's confirm/clear lifecycle.
#
# Per-date states:
#   Empty --generate | adopt_local--> Generated --confirm--> Confirmed
#   Generated --revise (schedule reply)--> Generated
#   Confirmed --revise (schedule reply)--> Generated   (confirmed reset to False)
#   Generated | Confirmed --clear--> Empty
#
# `busy` is True while a call is in flight. Callers keep input disabled while
# busy; this class does not reject overlapping turns itself.

from __future__ import annotations

import logging
from datetime import date
from typing import Awaitable, Callable, List, Optional

from core.errors import ConfigurationError, NoWorkError, NotFoundError, TransportError
from core.prompts import build_generation_prompt, build_revision_system_prompt
from lifeflow_main.main_agents.schedule_store import ScheduleStore
from lifeflow_main.models import llm_client
from lifeflow_main.models.models_schedule import DaySchedule, Revision, ScheduleBlock, Task, Turn, UserPreferences
from planning.narrative import render_blocks
from utils.config import CONFIG

logger = logging.getLogger(__name__)

ChatFn = Callable[..., Awaitable[str]]

SCHEDULE_MARKERS = ("⏰", ":00", ":30")


def is_schedule_reply(text: str) -> bool:
    """
    Decide whether an assistant reply carries a (new) schedule.
    Rule: the text contains the ⏰ block marker, or a ":00" / ":30" clock fragment.
    """
    return any(marker in (text or "") for marker in SCHEDULE_MARKERS)


def _plan_text(schedule: Optional[DaySchedule]) -> str:
    if schedule is None:
        return ""
    if schedule.content:
        return schedule.content
    return render_blocks(schedule.items)


class ScheduleNegotiator:
    def __init__(self,
                 store: ScheduleStore,
                 api_key: Optional[str] = None,
                 chat: ChatFn = llm_client.chat,
                 day: Optional[date] = None,
                 history_turns: Optional[int] = None):
        self.store = store
        self.api_key = api_key
        self.chat = chat
        self.day = day or date.today()
        self.history_turns = history_turns or CONFIG["negotiation"]["history_turns"]
        self.busy = False
        self._transcript: List[Turn] = []

    @property
    def transcript(self) -> List[Turn]:
        return list(self._transcript)

    def _credential(self, prefs: UserPreferences) -> str:
        key = (prefs.api_key or self.api_key or "").strip()
        if not key:
            raise ConfigurationError("No API key configured; add one in settings first.")
        return key

    def resume(self) -> Optional[DaySchedule]:
        """Rebuild the transcript from the stored plan (e.g. after a restart)."""
        schedule = self.store.load(self.day)
        self._transcript = []
        text = _plan_text(schedule)
        if text:
            self._transcript.append(Turn(role="assistant", text=text))
        return schedule

    def adopt_local(self, blocks: List[ScheduleBlock]) -> DaySchedule:
        """Store a locally built plan as the day's schedule and restart the conversation from it."""
        schedule = DaySchedule(date=self.day, items=list(blocks), confirmed=False)
        self.store.save(self.day, schedule)
        self._transcript = [Turn(role="assistant", text=render_blocks(schedule.items))]
        logger.info("local plan adopted for %s (%d block(s))", self.day, len(schedule.items))
        return schedule

    async def generate(self, tasks: List[Task], prefs: UserPreferences) -> DaySchedule:
        key = self._credential(prefs)
        pending = [t for t in tasks if not t.completed]
        if not pending:
            raise NoWorkError("No pending tasks; add some tasks before planning the day.")

        prompt = build_generation_prompt(pending, prefs, self.day)
        logger.info("generating schedule for %s from %d task(s)", self.day, len(pending))

        self.busy = True
        try:
            reply = await self.chat(key, [Turn(role="user", text=prompt)])
        finally:
            self.busy = False

        schedule = DaySchedule(date=self.day, content=reply, confirmed=False)
        self.store.save(self.day, schedule)
        self._transcript = [Turn(role="assistant", text=reply)]
        return schedule

    async def revise(self, message: str, prefs: UserPreferences) -> Revision:
        key = self._credential(prefs)
        self._transcript.append(Turn(role="user", text=message))
        window = self._transcript[-self.history_turns:]

        self.busy = True
        try:
            reply = await self.chat(key, window, build_revision_system_prompt(prefs))
        except TransportError as e:
            logger.warning("revision turn failed: %s", e)
            apology = f"{CONFIG['negotiation']['apology_prefix']}: {e}"
            self._transcript.append(Turn(role="assistant", text=apology))
            return Revision(reply=apology, schedule_updated=False)
        finally:
            self.busy = False

        self._transcript.append(Turn(role="assistant", text=reply))
        if not is_schedule_reply(reply):
            return Revision(reply=reply, schedule_updated=False)

        schedule = self.store.load(self.day) or DaySchedule(date=self.day)
        schedule = schedule.model_copy(update={"content": reply, "items": [], "confirmed": False})
        self.store.save(self.day, schedule)
        logger.info("schedule for %s replaced by revision", self.day)
        return Revision(reply=reply, schedule_updated=True)

    def confirm(self) -> DaySchedule:
        schedule = self.store.load(self.day)
        if schedule is None:
            raise NotFoundError(f"No schedule for {self.day.isoformat()}")
        schedule = schedule.model_copy(update={"confirmed": True})
        self.store.save(self.day, schedule)
        return schedule

    def clear(self) -> None:
        self._transcript = []
        if not self.store.delete(self.day):
            raise NotFoundError(f"No schedule for {self.day.isoformat()}")
