# goaltracker/schemas/goal.py
from typing import Optional, Literal, List, Dict
from pydantic import BaseModel, Field
from datetime import date, datetime

Priority = Literal["low", "medium", "high"]
GoalType = Literal["custom", "daily", "weekly", "monthly"]
RecurringType = Literal["daily", "weekly", "monthly"]
GoalFilter = Literal["all", "active", "completed", "high-priority"]


class GoalCreate(BaseModel):
    # Title, description and priority are checked by validate_goal_data so the
    # caller gets per-field messages instead of a schema error
    title: str
    description: str = ""
    priority: str = "medium"
    goal_type: GoalType = "custom"
    due_date: Optional[datetime] = None
    is_recurring: bool = False
    recurring_type: Optional[RecurringType] = None


class GoalUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    completed: Optional[bool] = None
    goal_type: Optional[GoalType] = None
    due_date: Optional[datetime] = None
    is_recurring: Optional[bool] = None
    recurring_type: Optional[RecurringType] = None


class GoalRead(BaseModel):
    id: str
    user_id: str
    title: str
    description: str = ""
    priority: str = "medium"
    completed: bool = False
    goal_type: GoalType = "custom"
    due_date: Optional[datetime] = None
    is_recurring: bool = False
    recurring_type: Optional[RecurringType] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class GoalStats(BaseModel):
    total: int
    completed: int
    in_progress: int
    completion_rate: int
    high_priority: int
    medium_priority: int
    low_priority: int


class DayBucket(BaseModel):
    day: date
    day_name: str
    is_today: bool
    goals: List[GoalRead]
    completed: int
    total: int


class WeeklyStats(BaseModel):
    total: int
    completed: int
    completion_percentage: int
    daily: int
    weekly: int
    custom: int


class WeekView(BaseModel):
    days: List[DayBucket]
    stats: WeeklyStats


class MonthCalendar(BaseModel):
    year: int
    month: int
    days: Dict[str, List[GoalRead]] = Field(default_factory=dict)


class GoalsStatus(BaseModel):
    state: str
    loading: bool
    error: Optional[str] = None
    goal_count: int
