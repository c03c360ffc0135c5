import datetime
import uuid
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, PositiveInt, model_validator

from utils.config import CONFIG
from utils.timemath import add_minutes

Priority = Literal["low", "medium", "high"]
BlockKind = Literal["task", "break", "meal", "rest", "custom"]
Role = Literal["user", "assistant"]

HHMM_PATTERN = r"^\d{2}:\d{2}$"


def _now() -> datetime.datetime:
    return datetime.datetime.now()


# -----------------------
# TASKS / PREFERENCES (owned by collaborators, read by the core)
# -----------------------
class Task(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    title: str
    description: Optional[str] = None
    estimated_minutes: PositiveInt
    deadline: Optional[datetime.date] = None
    priority: Priority = "medium"
    completed: bool = False
    created_at: datetime.datetime = Field(default_factory=_now)
    completed_at: Optional[datetime.datetime] = None

    @model_validator(mode="after")
    def _completion_stamp(self):
        if self.completed != (self.completed_at is not None):
            raise ValueError("completed_at must be set exactly when completed is true")
        return self


class UserPreferences(BaseModel):
    wake_time: str = Field(CONFIG["default_preferences"]["wake_time"], pattern=HHMM_PATTERN)
    bed_time: str = Field(CONFIG["default_preferences"]["bed_time"], pattern=HHMM_PATTERN)
    max_focus_minutes: PositiveInt = CONFIG["default_preferences"]["max_focus_minutes"]
    break_minutes: int = Field(CONFIG["default_preferences"]["break_minutes"], ge=0)
    personal_notes: str = CONFIG["default_preferences"]["personal_notes"]
    api_key: Optional[str] = None


# -----------------------
# SCHEDULE
# -----------------------
class ScheduleBlock(BaseModel):
    start: str = Field(..., pattern=HHMM_PATTERN)
    duration_min: int = Field(..., ge=0)
    title: str
    kind: BlockKind = "task"
    task_id: Optional[str] = None  # weak reference, the task may be gone

    @property
    def end(self) -> str:
        return add_minutes(self.start, self.duration_min)


class DaySchedule(BaseModel):
    date: datetime.date
    content: Optional[str] = None
    items: List[ScheduleBlock] = Field(default_factory=list)
    confirmed: bool = False
    notes: Optional[str] = None


class Turn(BaseModel):
    role: Role
    text: str
    timestamp: datetime.datetime = Field(default_factory=_now)


class Revision(BaseModel):
    reply: str
    schedule_updated: bool


class SleepRecord(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    date: datetime.date
    bed_time: Optional[str] = None   # ISO datetime
    wake_time: Optional[str] = None  # ISO datetime
    quality: Optional[int] = Field(default=None, ge=1, le=5)
    notes: Optional[str] = None
