"""
Routine (recurring) task expansion.

A routine template is expanded into one concrete task per date produced by the
cycle generator. Everything here is pure: no session, no clock.
"""
import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Mapping, Optional

from organizese.models.task import RoutineCycle, TaskStatus
from organizese.utils.dates import DateLike, add_months, add_years, is_weekend, parse_iso_date, to_iso

logger = logging.getLogger(__name__)

MAX_OCCURRENCES = 100


def _step(current: date, cycle: str) -> Optional[date]:
    """Advance one cycle unit; None for an unknown cycle"""
    if cycle == RoutineCycle.DAILY.value:
        return current + timedelta(days=1)
    if cycle == RoutineCycle.WEEKLY.value:
        return current + timedelta(weeks=1)
    if cycle == RoutineCycle.MONTHLY.value:
        return add_months(current, 1)
    if cycle == RoutineCycle.QUARTERLY.value:
        return add_months(current, 3)
    if cycle == RoutineCycle.BIANNUAL.value:
        return add_months(current, 6)
    if cycle == RoutineCycle.ANNUAL.value:
        return add_years(current, 1)
    return None


def generate_routine_dates(
    start_date: DateLike,
    end_date: Optional[DateLike],
    cycle: str,
    include_weekends: bool = True,
    max_occurrences: int = MAX_OCCURRENCES,
) -> List[str]:
    """
    Dates (yyyy-MM-dd) for a routine, starting at start_date.

    Without an end date the routine runs for one year. Weekend dates are
    dropped (not shifted) when include_weekends is False. At most
    max_occurrences iterations are made, so the result never exceeds that.
    An unknown cycle stops generation and returns what was collected so far.
    """
    cycle = getattr(cycle, "value", cycle)
    start = parse_iso_date(start_date)
    end = parse_iso_date(end_date) if end_date else add_years(start, 1)

    dates: List[str] = []
    current = start
    count = 0

    while current <= end and count < max_occurrences:
        if include_weekends or not is_weekend(current):
            dates.append(to_iso(current))

        following = _step(current, cycle)
        if following is None:
            return dates
        current = following
        count += 1

    return dates


def validate_routine_config(template: Mapping[str, Any]) -> Optional[str]:
    """Return a description of what is wrong with a routine template, or None"""
    if not template.get("is_routine"):
        return None

    if not template.get("routine_cycle"):
        return "Routine cycle is required"

    if not template.get("routine_start_date"):
        return "Routine start date is required"

    start = parse_iso_date(template["routine_start_date"])
    end_raw = template.get("routine_end_date")
    if end_raw and parse_iso_date(end_raw) <= start:
        return "End date must be after start date"

    return None


def _base_payload(template: Mapping[str, Any]) -> Dict[str, Any]:
    payload = dict(template)
    payload.update(
        description=template.get("description") or "",
        observations=template.get("observations") or "",
        sub_items=[dict(item) for item in template.get("sub_items") or []],
        status=TaskStatus.PENDING,
        forward_history=[],
        forward_count=0,
        completion_history=[],
        is_forwarded=False,
        is_concluded=False,
    )
    return payload


def expand_routine_task(
    template: Mapping[str, Any],
    max_occurrences: int = MAX_OCCURRENCES,
) -> List[Dict[str, Any]]:
    """
    Turn a task template into creation payloads.

    Non-routine templates (or routines missing cycle/start) yield a single
    payload on the template's own scheduled_date. Routines yield one payload
    per generated date with order = base order + index; every date after
    the first gets a "(#k)" title suffix, starting at (#2).
    """
    base_order = template.get("order") or 0

    if not template.get("is_routine") or not template.get("routine_cycle") or not template.get("routine_start_date"):
        payload = _base_payload(template)
        payload["scheduled_date"] = parse_iso_date(template["scheduled_date"])
        payload["order"] = base_order
        return [payload]

    routine_dates = generate_routine_dates(
        template["routine_start_date"],
        template.get("routine_end_date"),
        template["routine_cycle"],
        template.get("include_weekends", True),
        max_occurrences=max_occurrences,
    )

    payloads = []
    for index, iso_date in enumerate(routine_dates):
        payload = _base_payload(template)
        payload["scheduled_date"] = parse_iso_date(iso_date)
        payload["title"] = f"{template['title']} (#{index + 1})" if index else template["title"]
        payload["order"] = base_order + index
        payloads.append(payload)

    logger.debug(f"Expanded routine '{template.get('title')}' into {len(payloads)} tasks")
    return payloads
