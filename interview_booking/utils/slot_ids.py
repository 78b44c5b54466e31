import logging
from datetime import date, datetime, time, timedelta
from typing import Iterator, List, Tuple

logger = logging.getLogger("slot_ids")

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"
SLOT_ID_FORMAT = f"{DATE_FORMAT}-{TIME_FORMAT}"


# === Slot Id Codec ===

def make_slot_id(slot_date: date, slot_time: time) -> str:
    """Build the canonical ``YYYY-MM-DD-HH:mm`` slot id."""
    return f"{slot_date.strftime(DATE_FORMAT)}-{slot_time.strftime(TIME_FORMAT)}"


def parse_slot_id(slot_id: str) -> datetime:
    """Parse a canonical slot id back into a naive datetime."""
    try:
        parsed = datetime.strptime(slot_id, SLOT_ID_FORMAT)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid slot id: {slot_id!r}. Expected YYYY-MM-DD-HH:mm")
    # strptime accepts unpadded fields, the id contract does not
    if make_slot_id(parsed.date(), parsed.time()) != slot_id:
        raise ValueError(f"Invalid slot id: {slot_id!r}. Expected YYYY-MM-DD-HH:mm")
    return parsed


def is_valid_slot_id(slot_id: str) -> bool:
    try:
        parse_slot_id(slot_id)
    except ValueError:
        return False
    return True


def describe_slot(slot_id: str) -> Tuple[str, str, str]:
    """Return the ``(date, time, day)`` display fields derived from a slot id."""
    moment = parse_slot_id(slot_id)
    return moment.strftime(DATE_FORMAT), moment.strftime(TIME_FORMAT), moment.strftime("%A")


# === Seed Grid ===

def parse_clock(value: str) -> time:
    try:
        return datetime.strptime(value, TIME_FORMAT).time()
    except ValueError:
        raise ValueError(f"Invalid time format: {value}. Expected HH:MM")


def is_business_day(day: date) -> bool:
    return day.weekday() < 5


def date_range(start_date: date, end_date: date) -> Iterator[date]:
    """Generate date range from start to end (inclusive)."""
    current = start_date
    while current <= end_date:
        yield current
        current += timedelta(days=1)


def generate_slot_ids(
    start_date: date,
    end_date: date,
    day_start: time,
    day_end: time,
    interval_minutes: int = 30,
    business_days_only: bool = True,
) -> List[str]:
    """Generate slot ids for every interval that fits between day_start and day_end."""
    if start_date > end_date:
        raise ValueError("Start date must be before end date")
    if day_start >= day_end:
        raise ValueError("Start of day must be before end of day")
    if interval_minutes <= 0:
        raise ValueError("Interval must be positive")

    step = timedelta(minutes=interval_minutes)
    slot_ids = []
    for current_date in date_range(start_date, end_date):
        if business_days_only and not is_business_day(current_date):
            continue
        current = datetime.combine(current_date, day_start)
        end_of_day = datetime.combine(current_date, day_end)
        while current + step <= end_of_day:
            slot_ids.append(make_slot_id(current_date, current.time()))
            current += step

    logger.debug(f"[SlotIds] Generated {len(slot_ids)} slot ids from {start_date} to {end_date}")
    return slot_ids
