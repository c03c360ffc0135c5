# Pull timed blocks out of a negotiated (free-text) schedule.
#
# Recognized line shape, anywhere in the line:
#   ⏰ 08:00 - 08:30 | Wake up, breakfast
#   📚 9:00–9:45 | Write report
# Lines that don't match are conversation and are skipped.

import re
from typing import List

from lifeflow_main.models.models_schedule import ScheduleBlock
from utils.timemath import fmt_hhmm, minutes_between

LINE_RE = re.compile(
    r"(?P<sh>\d{1,2}):(?P<sm>\d{2})\s*[-–—~]\s*(?P<eh>\d{1,2}):(?P<em>\d{2})\s*[|｜]\s*(?P<label>.+)"
)

_KIND_HINTS = (
    ("meal", ("🍽", "🍳", "🥗", "breakfast", "lunch", "dinner", "meal", "snack")),
    ("break", ("☕", "break", "rest a bit", "stretch", "walk")),
    ("rest", ("🌙", "😴", "sleep", "nap", "wind down", "bed")),
)


def guess_kind(label: str) -> str:
    low = label.lower()
    for kind, hints in _KIND_HINTS:
        if any(h in low for h in hints):
            return kind
    return "task"


def parse_blocks(text: str) -> List[ScheduleBlock]:
    blocks: List[ScheduleBlock] = []
    for line in (text or "").splitlines():
        m = LINE_RE.search(line)
        if not m:
            continue
        start = fmt_hhmm(int(m["sh"]), int(m["sm"]))
        end = fmt_hhmm(int(m["eh"]), int(m["em"]))
        label = m["label"].strip()
        blocks.append(ScheduleBlock(
            start=start,
            duration_min=minutes_between(start, end),
            title=label,
            kind=guess_kind(label),
        ))
    return blocks


def render_blocks(blocks: List[ScheduleBlock]) -> str:
    """Inverse of parse_blocks for structured plans: one ⏰ line per block."""
    return "\n".join(f"⏰ {b.start} - {b.end} | {b.title}" for b in blocks)
