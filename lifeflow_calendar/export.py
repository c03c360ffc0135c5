# Calendar export: schedule blocks -> iCalendar (.ics) text
from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import List

from icalendar import Calendar, Event, vText

from lifeflow_main.models.models_schedule import DaySchedule, ScheduleBlock
from planning.narrative import parse_blocks
from utils.config import CONFIG
from utils.timemath import parse_hhmm


def export_filename(day: date) -> str:
    return f"schedule-{day.isoformat()}.ics"


def event_uid(day: date, index: int) -> str:
    return f"{CONFIG['export']['uid_prefix']}-{day.isoformat()}-{index}"


def blocks_for_schedule(schedule: DaySchedule) -> List[ScheduleBlock]:
    """Structured items if the plan was built locally, otherwise whatever the narrative yields."""
    if schedule.items:
        return list(schedule.items)
    return parse_blocks(schedule.content or "")


def build_calendar(blocks: List[ScheduleBlock], day: date) -> Calendar:
    cal = Calendar()
    cal.add("prodid", CONFIG["export"]["prodid"])
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")

    # Fixed stamp keeps the output identical for identical input
    stamp = datetime.combine(day, time(0, 0), tzinfo=timezone.utc)

    for index, block in enumerate(blocks):
        h, m = parse_hhmm(block.start)
        start = datetime.combine(day, time(0, 0)) + timedelta(hours=h, minutes=m)
        end = start + timedelta(minutes=block.duration_min)

        ev = Event()
        ev.add("uid", event_uid(day, index))
        ev.add("dtstamp", stamp)
        ev.add("dtstart", start)
        ev.add("dtend", end)
        ev.add("summary", vText(block.title))
        if block.kind != "task":
            ev.add("categories", [block.kind.upper()])
        cal.add_component(ev)
    return cal


def export_ics(blocks: List[ScheduleBlock], day: date) -> str:
    return build_calendar(blocks, day).to_ical().decode("utf-8")
