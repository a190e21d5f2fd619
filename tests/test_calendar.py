"""Tests for the weekly and monthly calendar views."""

from __future__ import annotations

from datetime import date, datetime

from goaltracker.utils.calendar import (
    build_week_view,
    get_current_week,
    get_goals_for_day,
    get_month_calendar,
    get_weekly_goals,
    get_weekly_stats,
)
from tests.conftest import make_goal

# 2026-02-18 is a Wednesday; its week runs Sun 15th .. Sat 21st
WEDNESDAY = date(2026, 2, 18)
WEEK = [date(2026, 2, d) for d in range(15, 22)]


class TestCurrentWeek:
    def test_week_starts_on_sunday(self):
        assert get_current_week(WEDNESDAY) == WEEK

    def test_sunday_starts_its_own_week(self):
        assert get_current_week(date(2026, 2, 15))[0] == date(2026, 2, 15)

    def test_saturday_ends_the_week(self):
        assert get_current_week(date(2026, 2, 21)) == WEEK

    def test_week_crossing_month_boundary(self):
        week = get_current_week(date(2026, 3, 2))
        assert week[0] == date(2026, 3, 1)
        assert len(week) == 7


class TestWeeklyGoals:
    def test_daily_and_weekly_goals_always_included(self):
        daily = make_goal("daily", goal_type="daily")
        weekly = make_goal("weekly", goal_type="weekly")
        assert get_weekly_goals([daily, weekly], WEEK) == [daily, weekly]

    def test_custom_goal_needs_due_date_in_week(self):
        inside = make_goal("inside", due_date=datetime(2026, 2, 20, 18, 0))
        outside = make_goal("outside", due_date=datetime(2026, 2, 22, 9, 0))
        undated = make_goal("undated")
        assert get_weekly_goals([inside, outside, undated], WEEK) == [inside]

    def test_goals_for_day(self):
        daily = make_goal("daily", goal_type="daily")
        due = make_goal("due", due_date=datetime(2026, 2, 17, 8, 0))
        assert get_goals_for_day([daily, due], date(2026, 2, 17)) == [daily, due]
        assert get_goals_for_day([daily, due], date(2026, 2, 18)) == [daily]


class TestWeeklyStats:
    def test_counts(self):
        goals = [
            make_goal(goal_type="daily", completed=True),
            make_goal(goal_type="weekly"),
            make_goal(due_date=datetime(2026, 2, 16)),
            make_goal(due_date=datetime(2026, 3, 16)),
        ]
        stats = get_weekly_stats(goals, WEEK)
        assert stats.total == 3
        assert stats.completed == 1
        assert stats.completion_percentage == 33
        assert (stats.daily, stats.weekly, stats.custom) == (1, 1, 1)

    def test_empty_week(self):
        assert get_weekly_stats([], WEEK).completion_percentage == 0


class TestWeekView:
    def test_seven_named_days_with_today_marked(self):
        view = build_week_view([], WEDNESDAY)
        assert [d.day_name for d in view.days] == ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
        assert [d.is_today for d in view.days].index(True) == 3

    def test_daily_goal_appears_every_day(self):
        view = build_week_view([make_goal("stretch", goal_type="daily", completed=True)], WEDNESDAY)
        assert all(d.total == 1 and d.completed == 1 for d in view.days)

    def test_custom_goal_on_its_due_day_only(self):
        goal = make_goal("dentist", due_date=datetime(2026, 2, 19, 14, 0))
        view = build_week_view([goal], WEDNESDAY)
        assert [d.total for d in view.days] == [0, 0, 0, 0, 1, 0, 0]


class TestMonthCalendar:
    def test_groups_goals_by_due_day(self):
        a = make_goal("a", due_date=datetime(2026, 2, 3, 9, 0))
        b = make_goal("b", due_date=datetime(2026, 2, 3, 17, 0))
        c = make_goal("c", due_date=datetime(2026, 2, 28))
        outside = make_goal("outside", due_date=datetime(2026, 3, 1))
        undated = make_goal("undated")

        cal = get_month_calendar([a, b, c, outside, undated], 2026, 2)
        assert list(cal.days) == ["2026-02-03", "2026-02-28"]
        assert [g.title for g in cal.days["2026-02-03"]] == ["a", "b"]

    def test_empty_month(self):
        cal = get_month_calendar([], 2026, 4)
        assert cal.days == {}
        assert (cal.year, cal.month) == (2026, 4)
