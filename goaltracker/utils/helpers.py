# goaltracker/utils/helpers.py
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from goaltracker.schemas.goal import GoalRead, GoalStats

PRIORITY_ORDER = {"high": 3, "medium": 2, "low": 1}
VALID_PRIORITIES = ("high", "medium", "low")

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500

DateLike = Union[datetime, date, str, None]


# ────────────────────────────────────────────────────────────────────────────────
# DATE FORMATTING
# ────────────────────────────────────────────────────────────────────────────────
def _coerce_datetime(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    # Accept the trailing "Z" that JavaScript ISO strings carry
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def format_date(value: DateLike) -> str:
    """Format as ``Jan 5, 2026``."""
    if not value:
        return "Unknown"
    try:
        dt = _coerce_datetime(value)
    except (TypeError, ValueError):
        return "Invalid date"
    return f"{dt:%b} {dt.day}, {dt.year}"


def format_datetime(value: DateLike) -> str:
    """Format as ``Jan 5, 2026, 09:05 AM``."""
    if not value:
        return "Unknown"
    try:
        dt = _coerce_datetime(value)
    except (TypeError, ValueError):
        return "Invalid date"
    return f"{dt:%b} {dt.day}, {dt.year}, {dt:%I:%M %p}"


# ────────────────────────────────────────────────────────────────────────────────
# SORTING / FILTERING / STATS
# ────────────────────────────────────────────────────────────────────────────────
def sort_goals_by_priority(goals: Sequence[GoalRead]) -> List[GoalRead]:
    """
    Incomplete goals first, then high > medium > low, then newest first.
    Goals that tie on all three keep their input order.
    """
    # Python's sort is stable, so sort by the least significant key first
    newest_first = sorted(
        goals,
        key=lambda g: g.created_at or datetime.min,
        reverse=True,
    )
    return sorted(
        newest_first,
        key=lambda g: (g.completed, -PRIORITY_ORDER.get(g.priority, 0)),
    )


def filter_goals(goals: List[GoalRead], goal_filter: Optional[str]) -> List[GoalRead]:
    if goal_filter == "completed":
        return [g for g in goals if g.completed]
    if goal_filter == "active":
        return [g for g in goals if not g.completed]
    if goal_filter == "high-priority":
        return [g for g in goals if g.priority == "high" and not g.completed]
    return goals


def get_goal_stats(goals: Sequence[GoalRead]) -> GoalStats:
    total = len(goals)
    completed = sum(1 for g in goals if g.completed)
    completion_rate = round(completed / total * 100) if total > 0 else 0

    priority_counts: Dict[str, int] = {}
    for goal in goals:
        priority_counts[goal.priority] = priority_counts.get(goal.priority, 0) + 1

    return GoalStats(
        total=total,
        completed=completed,
        in_progress=total - completed,
        completion_rate=completion_rate,
        high_priority=priority_counts.get("high", 0),
        medium_priority=priority_counts.get("medium", 0),
        low_priority=priority_counts.get("low", 0),
    )


# ────────────────────────────────────────────────────────────────────────────────
# VALIDATION
# ────────────────────────────────────────────────────────────────────────────────
@dataclass
class ValidationResult:
    is_valid: bool
    errors: Dict[str, str] = field(default_factory=dict)


def _title_error(title: Optional[str]) -> Optional[str]:
    if not title or not title.strip():
        return "Goal title is required"
    if len(title) > TITLE_MAX_LENGTH:
        return f"Goal title must be less than {TITLE_MAX_LENGTH} characters"
    return None


def _description_error(description: Optional[str]) -> Optional[str]:
    if description and len(description) > DESCRIPTION_MAX_LENGTH:
        return f"Description must be less than {DESCRIPTION_MAX_LENGTH} characters"
    return None


def _priority_error(priority: Optional[str]) -> Optional[str]:
    if priority not in VALID_PRIORITIES:
        return "Priority must be high, medium, or low"
    return None


FIELD_CHECKS = {
    "title": _title_error,
    "description": _description_error,
    "priority": _priority_error,
}


def validate_goal_data(goal_data: Mapping[str, Any]) -> ValidationResult:
    errors: Dict[str, str] = {}
    for name, check in FIELD_CHECKS.items():
        message = check(goal_data.get(name))
        if message:
            errors[name] = message
    return ValidationResult(is_valid=not errors, errors=errors)


# Columns that may be changed but never cleared
NOT_NULL_FIELDS = {
    "completed": "Completed must be true or false",
    "description": "Description cannot be null",
    "goal_type": "Goal type cannot be null",
    "is_recurring": "Recurring must be true or false",
}


def validate_goal_update(fields: Mapping[str, Any]) -> ValidationResult:
    """Like validate_goal_data, but only for the fields being changed."""
    errors: Dict[str, str] = {}
    for name, message in NOT_NULL_FIELDS.items():
        if name in fields and fields[name] is None:
            errors[name] = message
    for name, check in FIELD_CHECKS.items():
        if name not in fields:
            continue
        message = check(fields[name])
        if message:
            errors[name] = message
    return ValidationResult(is_valid=not errors, errors=errors)


# ────────────────────────────────────────────────────────────────────────────────
# PROFILE DISPLAY
# ────────────────────────────────────────────────────────────────────────────────
def get_display_name(display_name: Optional[str], email: Optional[str]) -> str:
    if display_name:
        return display_name
    if email:
        return email.split("@")[0]
    return "User"


def get_initials(display_name: Optional[str], email: Optional[str]) -> str:
    name = get_display_name(display_name, email)
    return "".join(word[0] for word in name.split()).upper()[:2]
