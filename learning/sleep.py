# Weekly sleep summary from sleep records (bed/wake instants + optional quality).

from __future__ import annotations
from datetime import date, timedelta
from typing import Dict, List, Optional

from lifeflow_main.models.models_schedule import SleepRecord
from utils.timemath import elapsed_minutes


def week_sleep_summary(records: List[SleepRecord], today: Optional[date] = None) -> Dict:
    """
    Aggregate the last 7 days of records.

    Output:
    {
      "avg_sleep_minutes": 452,   # over records with both bed and wake time
      "avg_quality": 3.5,         # over all records in the window
      "record_count": 6
    }
    """
    today = today or date.today()
    week_ago = today - timedelta(days=7)
    recent = [r for r in records if r.date >= week_ago]

    durations = [elapsed_minutes(r.bed_time, r.wake_time)
                 for r in recent if r.bed_time and r.wake_time]
    qualities = [r.quality for r in recent if r.quality]

    return {
        "avg_sleep_minutes": round(sum(durations) / len(durations)) if durations else 0,
        "avg_quality": round(sum(qualities) / len(recent), 1) if recent else 0,
        "record_count": len(recent),
    }
