"""
Routine date generation and task expansion
"""
from datetime import date

import pytest

from organizese.models.task import RoutineCycle, TaskStatus
from organizese.services.routine import (
    MAX_OCCURRENCES, expand_routine_task, generate_routine_dates, validate_routine_config,
)
from organizese.utils.dates import parse_iso_date


def _template(**overrides):
    template = {
        "title": "Weekly report",
        "description": None,
        "observations": None,
        "type": "own-task",
        "priority": "none",
        "time_investment": "low",
        "category": "business",
        "scheduled_date": "2024-01-01",
        "sub_items": [{"id": "s1", "text": "Collect numbers", "completed": False, "order": 1}],
        "order": 0,
        "is_routine": True,
        "routine_cycle": "weekly",
        "routine_start_date": "2024-01-01",
        "routine_end_date": "2024-01-22",
        "include_weekends": True,
    }
    template.update(overrides)
    return template


# ===================== DATE GENERATOR =====================


class TestGenerateRoutineDates:

    def test_weekly_inclusive_of_both_ends(self):
        dates = generate_routine_dates("2024-01-01", "2024-01-22", "weekly")
        assert dates == ["2024-01-01", "2024-01-08", "2024-01-15", "2024-01-22"]

    def test_accepts_enum_and_date_objects(self):
        dates = generate_routine_dates(date(2024, 1, 1), date(2024, 1, 3), RoutineCycle.DAILY)
        assert dates == ["2024-01-01", "2024-01-02", "2024-01-03"]

    def test_daily_without_weekends_drops_saturday_and_sunday(self):
        # 2024-01-06 is a Saturday
        dates = generate_routine_dates("2024-01-05", "2024-01-08", "daily", include_weekends=False)
        assert dates == ["2024-01-05", "2024-01-08"]

    def test_weekend_start_is_dropped_not_shifted(self):
        dates = generate_routine_dates("2024-01-06", "2024-01-20", "weekly", include_weekends=False)
        assert dates == []

    def test_no_weekend_dates_over_a_long_range(self):
        dates = generate_routine_dates("2024-01-01", "2024-12-31", "daily", include_weekends=False)
        assert all(parse_iso_date(d).weekday() < 5 for d in dates)

    def test_capped_at_max_occurrences(self):
        dates = generate_routine_dates("2024-01-01", "2030-01-01", "daily")
        assert len(dates) == MAX_OCCURRENCES
        assert dates[-1] == "2024-04-09"

    def test_cap_counts_iterations_not_dates(self):
        # Weekends still consume iterations
        dates = generate_routine_dates("2024-01-01", "2030-01-01", "daily", include_weekends=False)
        assert len(dates) < MAX_OCCURRENCES

    def test_custom_cap(self):
        assert len(generate_routine_dates("2024-01-01", None, "daily", max_occurrences=5)) == 5

    def test_missing_end_defaults_to_one_year(self):
        dates = generate_routine_dates("2024-01-15", None, "monthly")
        assert dates[0] == "2024-01-15"
        assert dates[-1] == "2025-01-15"
        assert len(dates) == 13

    def test_strictly_increasing_and_starts_at_start(self):
        for cycle in RoutineCycle:
            dates = generate_routine_dates("2024-03-10", "2026-03-10", cycle)
            assert dates[0] == "2024-03-10"
            assert dates == sorted(set(dates))

    def test_month_steps_clamp_to_month_end(self):
        dates = generate_routine_dates("2024-01-31", "2024-04-30", "monthly")
        assert dates == ["2024-01-31", "2024-02-29", "2024-03-29", "2024-04-29"]

    def test_quarterly_biannual_annual(self):
        assert generate_routine_dates("2024-01-01", "2024-12-31", "quarterly") == [
            "2024-01-01", "2024-04-01", "2024-07-01", "2024-10-01",
        ]
        assert generate_routine_dates("2024-01-01", "2025-01-01", "biannual") == [
            "2024-01-01", "2024-07-01", "2025-01-01",
        ]
        assert generate_routine_dates("2024-02-29", "2026-03-01", "annual") == [
            "2024-02-29", "2025-02-28", "2026-02-28",
        ]

    def test_unknown_cycle_returns_start_only(self):
        assert generate_routine_dates("2024-01-01", "2024-12-31", "fortnightly") == ["2024-01-01"]

    def test_end_before_start_is_empty(self):
        assert generate_routine_dates("2024-02-01", "2024-01-01", "daily") == []


# ===================== VALIDATION =====================


class TestValidateRoutineConfig:

    def test_non_routine_is_always_valid(self):
        assert validate_routine_config({"is_routine": False}) is None

    def test_cycle_required(self):
        assert validate_routine_config(_template(routine_cycle=None)) == "Routine cycle is required"

    def test_start_required(self):
        assert validate_routine_config(_template(routine_start_date=None)) == "Routine start date is required"

    def test_end_must_follow_start(self):
        error = validate_routine_config(_template(routine_end_date="2024-01-01"))
        assert error == "End date must be after start date"

    def test_open_ended_routine_is_valid(self):
        assert validate_routine_config(_template(routine_end_date=None)) is None


# ===================== EXPANSION =====================


class TestExpandRoutineTask:

    def test_one_payload_per_date_with_numbered_titles(self):
        payloads = expand_routine_task(_template())
        assert [p["title"] for p in payloads] == [
            "Weekly report", "Weekly report (#2)", "Weekly report (#3)", "Weekly report (#4)",
        ]
        assert [p["scheduled_date"] for p in payloads] == [
            date(2024, 1, 1), date(2024, 1, 8), date(2024, 1, 15), date(2024, 1, 22),
        ]

    def test_payloads_start_pending_with_empty_history(self):
        for payload in expand_routine_task(_template()):
            assert payload["status"] == TaskStatus.PENDING
            assert payload["completion_history"] == []
            assert payload["forward_history"] == []
            assert payload["forward_count"] == 0
            assert payload["is_forwarded"] is False
            assert payload["description"] == ""
            assert payload["observations"] == ""

    def test_order_is_base_plus_index(self):
        payloads = expand_routine_task(_template(order=3))
        assert [p["order"] for p in payloads] == [3, 4, 5, 6]

    def test_checklists_are_independent_copies(self):
        payloads = expand_routine_task(_template())
        payloads[0]["sub_items"].append({"id": "extra"})
        assert len(payloads[1]["sub_items"]) == 1

    def test_ticking_one_checklist_item_leaves_others_alone(self):
        template = _template()
        payloads = expand_routine_task(template)
        payloads[0]["sub_items"][0]["completed"] = True

        assert payloads[1]["sub_items"][0]["completed"] is False
        assert template["sub_items"][0]["completed"] is False

    def test_single_date_keeps_plain_title(self):
        payloads = expand_routine_task(_template(routine_end_date="2024-01-05"))
        assert len(payloads) == 1
        assert payloads[0]["title"] == "Weekly report"

    def test_non_routine_uses_scheduled_date(self):
        payloads = expand_routine_task(_template(is_routine=False, scheduled_date="2024-05-02", order=7))
        assert len(payloads) == 1
        assert payloads[0]["scheduled_date"] == date(2024, 5, 2)
        assert payloads[0]["title"] == "Weekly report"
        assert payloads[0]["order"] == 7

    def test_routine_missing_cycle_falls_back_to_single_task(self):
        payloads = expand_routine_task(_template(routine_cycle=None))
        assert len(payloads) == 1

    @pytest.mark.parametrize("cap", [1, 2, 3])
    def test_respects_max_occurrences(self, cap):
        assert len(expand_routine_task(_template(routine_end_date=None), max_occurrences=cap)) == cap
