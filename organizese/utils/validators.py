"""
Input validation utilities
"""
from typing import Iterable, Optional

from organizese.models.task import TimeInvestment


def validate_custom_time(time_investment, custom_time_minutes: Optional[int]) -> Optional[int]:
    """Custom time investment needs a positive number of minutes"""
    if TimeInvestment(time_investment) == TimeInvestment.CUSTOM and not custom_time_minutes:
        raise ValueError("Custom time is required when the custom time investment is selected")
    if custom_time_minutes is not None and custom_time_minutes < 1:
        raise ValueError("Custom time must be greater than 0")
    return custom_time_minutes


def unknown_ids(requested: Iterable[str], known: Iterable[str]) -> list[str]:
    """Ids from requested that are not present in known, in request order"""
    known_set = set(known)
    return [i for i in requested if i not in known_set]
