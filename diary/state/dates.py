# date helpers for the editor and the entry list
# entry dates are stored as short locale dates (M/D/YYYY), the editor works in iso dates

from datetime import date, datetime
from typing import Optional, Union


def parse_date(value: str) -> Optional[date]:
    """accepts iso dates, iso datetimes and M/D/YYYY, returns None otherwise"""
    value = value.strip()
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    try:
        return datetime.strptime(value, "%m/%d/%Y").date()
    except ValueError:
        return None


def short_locale_date(d: date) -> str:
    """6/3/2025"""
    return f"{d.month}/{d.day}/{d.year}"


def entry_date(value: str, today: Optional[date] = None) -> str:
    """the date stored on a saved entry: the editor's date, or today.
    text that is not a recognizable date is kept as written."""
    if not value.strip():
        return short_locale_date(today or date.today())
    parsed = parse_date(value)
    if parsed is None:
        return value
    return short_locale_date(parsed)


def editor_date(value: str, today: Optional[date] = None) -> str:
    """iso date for the editor's date picker"""
    if value:
        if "-" in value:
            return value
        parsed = parse_date(value)
        if parsed is not None:
            return parsed.isoformat()
    return (today or date.today()).isoformat()


def list_date(value: Union[str, datetime, None]) -> str:
    """short month + day for the sidebar, e.g. 'Jun 3'"""
    if not value:
        return "Unknown date"
    if isinstance(value, datetime):
        d = value.date()
    else:
        d = parse_date(value)
        if d is None:
            return "Unknown date"
    return f"{d:%b} {d.day}"
