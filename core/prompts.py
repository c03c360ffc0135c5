# Prompt text for schedule generation and revision turns

from __future__ import annotations
from datetime import date
from typing import List

from lifeflow_main.models.models_schedule import Task, UserPreferences

LINE_FORMAT = "⏰ HH:MM - HH:MM | label"


def _task_line(t: Task) -> str:
    line = f"- {t.title} (about {t.estimated_minutes} min, priority: {t.priority}"
    if t.deadline:
        line += f", due: {t.deadline.isoformat()}"
    return line + ")"


def build_generation_prompt(tasks: List[Task], prefs: UserPreferences, today: date) -> str:
    notes = f"\n- Personal notes: {prefs.personal_notes}" if prefs.personal_notes.strip() else ""
    task_lines = "\n".join(_task_line(t) for t in tasks)

    return f"""You are a gentle, understanding life assistant. Today is {today.strftime('%A, %B %d')} ({today.isoformat()}).

The user's routine:
- Usually wakes up at: {prefs.wake_time}
- Usually goes to bed at: {prefs.bed_time}
- Longest single focus session: {prefs.max_focus_minutes} minutes
- Break length: {prefs.break_minutes} minutes{notes}

Pending tasks:
{task_lines}

Planning rules:
1. Never make a task block longer than {prefs.max_focus_minutes} minutes; split long tasks and don't stack them back to back.
2. Put a break between tasks.
3. Respect the user's wellbeing and don't overfill the day.
4. Keep the tone gentle and encouraging.
5. Write the plan one block per line in this format:
{LINE_FORMAT}

For example:
⏰ 08:00 - 08:30 | Wake up, breakfast
📚 09:00 - 09:45 | Task name
☕ 09:45 - 10:00 | Break

After the plan, gently ask whether it works for them and what they'd like to change."""


def build_revision_system_prompt(prefs: UserPreferences) -> str:
    return f"""You are a gentle, understanding life assistant helping the user adjust today's plan.
If the user asks for a change, reply with the complete revised plan (not just the changed lines), one block per line as:
{LINE_FORMAT}
Stay gentle and encouraging.
Never plan a focus block longer than {prefs.max_focus_minutes} minutes."""
