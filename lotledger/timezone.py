"""Civil clock for the ledger's fixed-offset calendar.

Events are stamped with a local date (``YYYY-MM-DD``) and time (``HH:MM``)
at a fixed UTC offset. The offset never shifts for daylight saving.
"""

from datetime import date, datetime, time, timedelta, timezone

from lotledger.config import UTC_OFFSET_HOURS


def civil_timezone(offset_hours: int = UTC_OFFSET_HOURS) -> timezone:
    return timezone(timedelta(hours=offset_hours))


def civil_now(offset_hours: int = UTC_OFFSET_HOURS) -> datetime:
    """Current wall-clock time in the ledger calendar."""
    return datetime.now(civil_timezone(offset_hours))


def civil_stamp(
    now: datetime | None = None, offset_hours: int = UTC_OFFSET_HOURS
) -> tuple[date, time]:
    """Date and minute-precision time to stamp a new event with.

    An aware ``now`` is converted to the ledger calendar; a naive one is
    taken as already local.
    """
    if now is None:
        now = civil_now(offset_hours)
    elif now.tzinfo is not None:
        now = now.astimezone(civil_timezone(offset_hours))
    return now.date(), time(now.hour, now.minute)


def format_date(value: date) -> str:
    return value.isoformat()


def format_time(value: time) -> str:
    return value.strftime("%H:%M")
