import calendar
import datetime


def utc_today():
    """
    Returns the current calendar day in UTC.
    Expiry of Iqamaah windows is always judged against this day.
    """
    return datetime.datetime.now(datetime.timezone.utc).date()

def add_days(day, days):
    """Shifts a datetime.date by a (possibly negative) number of days."""
    return day + datetime.timedelta(days=days)

def format_iso_date(day):
    """Formats a datetime.date as YYYY-MM-DD."""
    return day.isoformat()

def month_bounds(year, month):
    """
    Returns the first and last calendar day of a month.

    Args:
        year (int): The Gregorian year.
        month (int): The month number, 1-12.

    Returns:
        tuple: (first_day, last_day) as datetime.date objects.
    """
    last_day = calendar.monthrange(year, month)[1]
    return datetime.date(year, month, 1), datetime.date(year, month, last_day)

def iter_days(start, end):
    """Yields every day from start to end, both inclusive."""
    day = start
    while day <= end:
        yield day
        day = add_days(day, 1)
