import calendar
from datetime import date, datetime


def get_date_suffix_for_filename(day: date | None = None) -> str:
    """Returns the date as a YYYY-MM-DD string for filenames (today by default)."""
    return (day or datetime.now().date()).strftime("%Y-%m-%d")


def build_export_filename(prefix: str, extension: str, day: date | None = None) -> str:
    return f"{prefix}_{get_date_suffix_for_filename(day)}.{extension}"


def first_day_of_month(day: date | None = None) -> date:
    day = day or date.today()
    return day.replace(day=1)


def last_day_of_month(day: date | None = None) -> date:
    day = day or date.today()
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])
