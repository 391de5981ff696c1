from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Union

# SIP debits are never scheduled on the 29th-31st.
LAST_SIP_DAY = 28


def _as_date(value: Union[date, datetime]) -> date:
    return value.date() if isinstance(value, datetime) else value


def horizon_years(target: Union[int, date, datetime], today: Optional[date] = None) -> int:
    """Whole calendar years between today and the target year. May be zero or negative."""
    today = _as_date(today or date.today())
    target_year = target if isinstance(target, int) else _as_date(target).year
    return int(target_year) - today.year


def sip_start_date(today: Optional[date] = None) -> date:
    today = _as_date(today or date.today())
    if today.day <= LAST_SIP_DAY:
        return today
    if today.month == 12:
        return date(today.year + 1, 1, 1)
    return date(today.year, today.month + 1, 1)
