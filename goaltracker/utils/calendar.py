# goaltracker/utils/calendar.py
import calendar
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence

from goaltracker.schemas.goal import (
    DayBucket,
    GoalRead,
    MonthCalendar,
    WeeklyStats,
    WeekView,
)

DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

# Goal types that show up on every day of the week
EVERY_DAY_TYPES = ("daily", "weekly")


def _due_day(goal: GoalRead) -> Optional[date]:
    return goal.due_date.date() if goal.due_date else None


def get_current_week(today: Optional[date] = None) -> List[date]:
    """Sunday..Saturday of the week containing ``today``."""
    today = today or date.today()
    # date.weekday() counts from Monday
    start = today - timedelta(days=(today.weekday() + 1) % 7)
    return [start + timedelta(days=i) for i in range(7)]


def get_weekly_goals(goals: Sequence[GoalRead], week: List[date]) -> List[GoalRead]:
    week_start, week_end = week[0], week[-1]
    weekly = []
    for goal in goals:
        if goal.goal_type in EVERY_DAY_TYPES:
            weekly.append(goal)
            continue
        due = _due_day(goal)
        if due is not None and week_start <= due <= week_end:
            weekly.append(goal)
    return weekly


def get_goals_for_day(goals: Sequence[GoalRead], day: date) -> List[GoalRead]:
    return [
        g for g in goals
        if g.goal_type in EVERY_DAY_TYPES or _due_day(g) == day
    ]


def get_weekly_stats(goals: Sequence[GoalRead], week: List[date]) -> WeeklyStats:
    weekly = get_weekly_goals(goals, week)
    total = len(weekly)
    completed = sum(1 for g in weekly if g.completed)
    return WeeklyStats(
        total=total,
        completed=completed,
        completion_percentage=round(completed / total * 100) if total > 0 else 0,
        daily=sum(1 for g in weekly if g.goal_type == "daily"),
        weekly=sum(1 for g in weekly if g.goal_type == "weekly"),
        custom=sum(1 for g in weekly if g.goal_type == "custom" and g.due_date),
    )


def build_week_view(goals: Sequence[GoalRead], today: Optional[date] = None) -> WeekView:
    today = today or date.today()
    week = get_current_week(today)
    weekly = get_weekly_goals(goals, week)

    days = []
    for index, day in enumerate(week):
        day_goals = get_goals_for_day(weekly, day)
        days.append(DayBucket(
            day=day,
            day_name=DAY_NAMES[index],
            is_today=day == today,
            goals=day_goals,
            completed=sum(1 for g in day_goals if g.completed),
            total=len(day_goals),
        ))

    return WeekView(days=days, stats=get_weekly_stats(goals, week))


def get_month_calendar(goals: Sequence[GoalRead], year: int, month: int) -> MonthCalendar:
    """Goals with a due date in the given month, keyed by ISO day."""
    _, last_day = calendar.monthrange(year, month)
    first, last = date(year, month, 1), date(year, month, last_day)

    by_day: Dict[str, List[GoalRead]] = defaultdict(list)
    for goal in goals:
        due = _due_day(goal)
        if due is not None and first <= due <= last:
            by_day[due.isoformat()].append(goal)

    return MonthCalendar(year=year, month=month, days=dict(sorted(by_day.items())))
