"""
Calendar helpers. Every day boundary in the service goes through these so
that the scheduler and the aggregator share one calendar convention.
"""

from datetime import date, datetime, time, tzinfo


def localize(value: datetime, zone: tzinfo) -> datetime:
    """Express a datetime in the given zone; naive values are taken as local."""
    if value.tzinfo is None:
        return value.replace(tzinfo=zone)
    return value.astimezone(zone)


def local_day(value: datetime, zone: tzinfo) -> date:
    return localize(value, zone).date()


def start_of_day(day: date, zone: tzinfo) -> datetime:
    return datetime.combine(day, time.min).replace(tzinfo=zone)


def at_time_of_day(day: date, hour: int, minute: int, zone: tzinfo) -> datetime:
    """Combine a calendar day with an hour and minute in the given zone."""
    return datetime.combine(day, time(hour=hour, minute=minute)).replace(tzinfo=zone)
