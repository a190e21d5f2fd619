"""Tests for goal validation, sorting, filtering, stats and display helpers."""

from __future__ import annotations

from datetime import date, datetime

from goaltracker.utils.helpers import (
    filter_goals,
    format_date,
    format_datetime,
    get_display_name,
    get_goal_stats,
    get_initials,
    sort_goals_by_priority,
    validate_goal_data,
    validate_goal_update,
)
from tests.conftest import make_goal


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

class TestValidateGoalData:
    def test_valid_goal(self):
        result = validate_goal_data({"title": "Run 5k", "description": "", "priority": "medium"})
        assert result.is_valid
        assert result.errors == {}

    def test_whitespace_title_is_required(self):
        result = validate_goal_data({"title": "   ", "priority": "low"})
        assert not result.is_valid
        assert result.errors == {"title": "Goal title is required"}

    def test_missing_title(self):
        result = validate_goal_data({"priority": "low"})
        assert result.errors["title"] == "Goal title is required"

    def test_title_at_limit_is_valid(self):
        assert validate_goal_data({"title": "x" * 100, "priority": "high"}).is_valid

    def test_title_over_limit(self):
        result = validate_goal_data({"title": "x" * 101, "priority": "high"})
        assert result.errors == {"title": "Goal title must be less than 100 characters"}

    def test_description_over_limit(self):
        result = validate_goal_data({"title": "ok", "description": "d" * 501, "priority": "high"})
        assert result.errors == {"description": "Description must be less than 500 characters"}

    def test_description_at_limit_is_valid(self):
        assert validate_goal_data({"title": "ok", "description": "d" * 500, "priority": "low"}).is_valid

    def test_invalid_priority(self):
        result = validate_goal_data({"title": "ok", "priority": "urgent"})
        assert result.errors == {"priority": "Priority must be high, medium, or low"}

    def test_missing_priority_is_invalid(self):
        result = validate_goal_data({"title": "ok"})
        assert "priority" in result.errors

    def test_collects_every_error(self):
        result = validate_goal_data({"title": "", "description": "d" * 600, "priority": None})
        assert set(result.errors) == {"title", "description", "priority"}


class TestValidateGoalUpdate:
    def test_only_present_fields_are_checked(self):
        assert validate_goal_update({"completed": True}).is_valid

    def test_bad_title_in_update(self):
        result = validate_goal_update({"title": " "})
        assert result.errors == {"title": "Goal title is required"}

    def test_bad_priority_in_update(self):
        result = validate_goal_update({"priority": "asap"})
        assert set(result.errors) == {"priority"}

    def test_null_for_required_columns(self):
        result = validate_goal_update({
            "completed": None,
            "description": None,
            "goal_type": None,
            "is_recurring": None,
        })
        assert set(result.errors) == {"completed", "description", "goal_type", "is_recurring"}

    def test_null_title_and_priority(self):
        result = validate_goal_update({"title": None, "priority": None})
        assert set(result.errors) == {"title", "priority"}

    def test_nullable_fields_may_be_cleared(self):
        assert validate_goal_update({"due_date": None, "recurring_type": None}).is_valid


# ---------------------------------------------------------------------------
# Sorting and filtering
# ---------------------------------------------------------------------------

class TestSortGoalsByPriority:
    def test_incomplete_before_completed(self):
        done = make_goal("done", priority="high", completed=True)
        todo = make_goal("todo", priority="low")
        assert [g.title for g in sort_goals_by_priority([done, todo])] == ["todo", "done"]

    def test_priority_order_within_completion_group(self):
        goals = [make_goal("low", "low"), make_goal("high", "high"), make_goal("medium", "medium")]
        assert [g.title for g in sort_goals_by_priority(goals)] == ["high", "medium", "low"]

    def test_newest_first_within_priority(self):
        older = make_goal("older", "high", created_at=datetime(2026, 1, 1))
        newer = make_goal("newer", "high", created_at=datetime(2026, 3, 1))
        assert [g.title for g in sort_goals_by_priority([older, newer])] == ["newer", "older"]

    def test_full_ties_keep_input_order(self):
        stamp = datetime(2026, 2, 1)
        goals = [make_goal(f"g{i}", "medium", created_at=stamp) for i in range(5)]
        assert [g.title for g in sort_goals_by_priority(goals)] == ["g0", "g1", "g2", "g3", "g4"]

    def test_does_not_mutate_input(self):
        goals = [make_goal("low", "low"), make_goal("high", "high")]
        sort_goals_by_priority(goals)
        assert [g.title for g in goals] == ["low", "high"]


class TestFilterGoals:
    def setup_method(self):
        self.goals = [
            make_goal("a", "high"),
            make_goal("b", "high", completed=True),
            make_goal("c", "low"),
            make_goal("d", "medium", completed=True),
        ]

    def test_active(self):
        assert [g.title for g in filter_goals(self.goals, "active")] == ["a", "c"]

    def test_completed(self):
        assert [g.title for g in filter_goals(self.goals, "completed")] == ["b", "d"]

    def test_high_priority_excludes_completed(self):
        assert [g.title for g in filter_goals(self.goals, "high-priority")] == ["a"]

    def test_all_returns_same_list(self):
        assert filter_goals(self.goals, "all") is self.goals

    def test_unknown_filter_returns_everything(self):
        assert filter_goals(self.goals, "someday") is self.goals


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------

class TestGoalStats:
    def test_empty(self):
        stats = get_goal_stats([])
        assert stats.total == 0
        assert stats.completion_rate == 0

    def test_counts_and_rate(self):
        goals = [
            make_goal(priority="high", completed=True),
            make_goal(priority="high"),
            make_goal(priority="low"),
        ]
        stats = get_goal_stats(goals)
        assert stats.total == 3
        assert stats.completed == 1
        assert stats.in_progress == 2
        assert stats.completion_rate == 33
        assert (stats.high_priority, stats.medium_priority, stats.low_priority) == (2, 0, 1)

    def test_rate_is_rounded(self):
        goals = [make_goal(completed=True), make_goal(completed=True), make_goal()]
        assert get_goal_stats(goals).completion_rate == 67


# ---------------------------------------------------------------------------
# Formatting and display
# ---------------------------------------------------------------------------

class TestFormatting:
    def test_format_date(self):
        assert format_date(datetime(2026, 1, 5, 9, 5)) == "Jan 5, 2026"

    def test_format_date_from_date(self):
        assert format_date(date(2026, 12, 25)) == "Dec 25, 2026"

    def test_format_date_from_iso_string(self):
        assert format_date("2026-03-14T10:00:00Z") == "Mar 14, 2026"

    def test_format_date_missing(self):
        assert format_date(None) == "Unknown"

    def test_format_date_garbage(self):
        assert format_date("not a date") == "Invalid date"

    def test_format_datetime(self):
        assert format_datetime(datetime(2026, 1, 5, 9, 5)) == "Jan 5, 2026, 09:05 AM"

    def test_format_datetime_afternoon(self):
        assert format_datetime(datetime(2026, 7, 4, 15, 30)) == "Jul 4, 2026, 03:30 PM"


class TestDisplayName:
    def test_prefers_display_name(self):
        assert get_display_name("Ada Lovelace", "ada@example.com") == "Ada Lovelace"

    def test_falls_back_to_email_local_part(self):
        assert get_display_name("", "ada@example.com") == "ada"

    def test_default(self):
        assert get_display_name(None, None) == "User"

    def test_initials(self):
        assert get_initials("Ada Byron Lovelace", None) == "AB"

    def test_initials_from_email(self):
        assert get_initials(None, "grace@example.com") == "G"
