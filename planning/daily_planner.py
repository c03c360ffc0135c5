# Local daily planner: lays out meals, tasks and breaks with no external service.
#
# Inputs:
#   tasks: list of Task (only incomplete ones are planned)
#   prefs: UserPreferences (wake_time, max_focus_minutes, break_minutes)
#
# Behavior:
#   - Sorts pending tasks high > medium > low (stable within a priority)
#   - Keeps at most MAX_TASKS_PER_DAY tasks
#   - Starts with a 60 min wake & breakfast block at the wake time
#   - Each task gets one block capped at max_focus_minutes, followed by a break.
#     Whatever is left of a longer task is not planned today.
#   - Once the cursor lands in the noon hour, a single lunch block is pinned at
#     12:00 and the cursor jumps to 13:00 (time between cursor and noon is dropped)
#
# Output:
#   [ScheduleBlock(start, duration_min, title, kind, task_id?), ...]

from typing import Dict, List

from lifeflow_main.models.models_schedule import ScheduleBlock, Task, UserPreferences
from utils.timemath import carry, fmt_hhmm, minutes_between, parse_hhmm


MAX_TASKS_PER_DAY = 5
BREAKFAST_MIN = 60
LUNCH_HOUR = 12
LUNCH_MIN = 60

BREAKFAST_TITLE = "Wake up & breakfast"
LUNCH_TITLE = "Lunch & rest"
BREAK_TITLE = "Take a break ☕"


def _priority_weight(p: str) -> int:
    order = {"high": 0, "medium": 1, "low": 2}
    return order.get((p or "medium").lower(), 1)


def select_tasks(tasks: List[Task], limit: int = MAX_TASKS_PER_DAY) -> List[Task]:
    pending = [t for t in tasks if not t.completed]
    pending.sort(key=lambda t: _priority_weight(t.priority))
    return pending[:limit]


def plan_day(tasks: List[Task], prefs: UserPreferences) -> List[ScheduleBlock]:
    hour, minute = parse_hhmm(prefs.wake_time)

    blocks: List[ScheduleBlock] = [
        ScheduleBlock(start=fmt_hhmm(hour, minute), duration_min=BREAKFAST_MIN,
                      title=BREAKFAST_TITLE, kind="meal")
    ]
    hour, minute = carry(hour, minute + BREAKFAST_MIN)
    had_lunch = False

    for task in select_tasks(tasks):
        duration = min(task.estimated_minutes, prefs.max_focus_minutes)
        blocks.append(ScheduleBlock(start=fmt_hhmm(hour, minute), duration_min=duration,
                                    title=task.title, kind="task", task_id=task.id))
        hour, minute = carry(hour, minute + duration)

        blocks.append(ScheduleBlock(start=fmt_hhmm(hour, minute), duration_min=prefs.break_minutes,
                                    title=BREAK_TITLE, kind="break"))
        hour, minute = carry(hour, minute + prefs.break_minutes)

        if hour == LUNCH_HOUR and not had_lunch:
            blocks.append(ScheduleBlock(start=fmt_hhmm(LUNCH_HOUR, 0), duration_min=LUNCH_MIN,
                                        title=LUNCH_TITLE, kind="meal"))
            hour, minute = LUNCH_HOUR + 1, 0
            had_lunch = True

    return blocks


def summarize_plan(blocks: List[ScheduleBlock]) -> Dict:
    """Minutes per block kind plus the overall span of the day."""
    minutes = {"task": 0, "break": 0, "meal": 0, "rest": 0, "custom": 0}
    for b in blocks:
        minutes[b.kind] += b.duration_min
    if not blocks:
        return {"minutes": minutes, "start": None, "end": None, "span_minutes": 0}
    start, end = blocks[0].start, blocks[-1].end
    return {
        "minutes": minutes,
        "start": start,
        "end": end,
        "span_minutes": minutes_between(start, end),
    }
