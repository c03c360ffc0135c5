# Clock-time helpers: "HH:MM" strings <-> minute offsets, with day rollover.
#
# Callers decide whether rollover matters: normalize() reports the day offset,
# carry() keeps an unbounded hour, fmt_hhmm() wraps at midnight.

from __future__ import annotations

from datetime import datetime
from typing import Tuple

MINUTES_PER_DAY = 24 * 60


def parse_hhmm(hhmm: str) -> Tuple[int, int]:
    h, m = hhmm.split(":")
    return int(h), int(m)


def hhmm_to_minutes(hhmm: str) -> int:
    h, m = parse_hhmm(hhmm)
    return h * 60 + m


def normalize(hour: int, minute: int) -> Tuple[int, int, int]:
    """Carry minutes into hours and hours into days. Returns (days, hour, minute)."""
    total = hour * 60 + minute
    days, rest = divmod(total, MINUTES_PER_DAY)
    return days, rest // 60, rest % 60


def carry(hour: int, minute: int) -> Tuple[int, int]:
    """Carry minute overflow into the hour without wrapping the day."""
    return hour + minute // 60, minute % 60


def fmt_hhmm(hour: int, minute: int) -> str:
    _, h, m = normalize(hour, minute)
    return f"{h:02d}:{m:02d}"


def minutes_to_hhmm(minutes: int) -> str:
    return fmt_hhmm(0, minutes)


def add_minutes(hhmm: str, minutes: int) -> str:
    h, m = parse_hhmm(hhmm)
    return fmt_hhmm(h, m + minutes)


def minutes_between(start_hhmm: str, end_hhmm: str) -> int:
    """Minutes from start to end; an end earlier than start is read as the next day."""
    diff = hhmm_to_minutes(end_hhmm) - hhmm_to_minutes(start_hhmm)
    if diff < 0:
        diff += MINUTES_PER_DAY
    return diff


def elapsed_minutes(bed_iso: str, wake_iso: str) -> int:
    """
    Sleep duration between a bedtime and a wake time (ISO instants).
    Wake is always after bed: a negative raw difference means the span crossed midnight.
    """
    bed = datetime.fromisoformat(bed_iso)
    wake = datetime.fromisoformat(wake_iso)
    diff = int((wake - bed).total_seconds() // 60)
    if diff < 0:
        diff += MINUTES_PER_DAY
    return diff
