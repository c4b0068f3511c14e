"""Operating-hours evaluation: is the store open now, and when does it open next"""

from datetime import date, datetime, timedelta
from typing import Any, Iterable, List, Mapping, Optional, Set, Union
from pizzeria_gateway.domain.models import OperatingHour, SpecialClosure, StoreStatus
from pizzeria_gateway.utils.date_utils import parse_time, seconds_since_midnight, weekday_sunday_first

DAY_NAMES = ["Domingo", "Segunda", "Terça", "Quarta", "Quinta", "Sexta", "Sábado"]

CLOSED_MESSAGE = "Estamos fechados no momento. Confira nossos horários de funcionamento."
MANUALLY_CLOSED_MESSAGE = "Estamos temporariamente fechados."

ScheduleEntry = Union[OperatingHour, Mapping[str, Any]]


def _coerce_entry(entry: ScheduleEntry) -> Optional[OperatingHour]:
    if isinstance(entry, OperatingHour):
        return entry
    if isinstance(entry, Mapping):
        return OperatingHour.from_mapping(entry)
    return None


def _closure_dates(closures: Iterable[Union[SpecialClosure, date]]) -> Set[date]:
    return {c.closure_date if isinstance(c, SpecialClosure) else c for c in closures}


def _enabled_window(schedule: Iterable[ScheduleEntry], day: int) -> Optional[tuple[int, int, str]]:
    """
    (open_seconds, close_seconds, open_label) for the enabled entry of a weekday.

    The first enabled entry for the weekday is used; an unparseable
    open/close time on it means closed.
    """
    for raw in schedule:
        entry = _coerce_entry(raw)
        if entry is None or entry.day != day or not entry.enabled:
            continue

        open_seconds = parse_time(entry.open)
        close_seconds = parse_time(entry.close)
        if open_seconds is None or close_seconds is None:
            return None
        return open_seconds, close_seconds, _format_label(open_seconds)
    return None


def _format_label(seconds: int) -> str:
    return f"{seconds // 3600:02d}:{seconds % 3600 // 60:02d}"


def is_open(
    schedule: Iterable[ScheduleEntry],
    now: datetime,
    closures: Iterable[Union[SpecialClosure, date]] = (),
) -> bool:
    """
    Whether now falls inside today's opening window.

    Both ends are inclusive at second resolution: with close "23:00",
    23:00:00 is open and 23:00:01 is closed. Windows whose close precedes
    their open (crossing midnight) are never open.
    """
    if now.date() in _closure_dates(closures):
        return False

    window = _enabled_window(list(schedule), weekday_sunday_first(now))
    if window is None:
        return False

    open_seconds, close_seconds, _ = window
    return open_seconds <= seconds_since_midnight(now) <= close_seconds


def next_opening_message(
    schedule: Iterable[ScheduleEntry],
    now: datetime,
    closures: Iterable[Union[SpecialClosure, date]] = (),
) -> str:
    """
    Human-readable hint for the next opening.

    Today's window counts only while now is before its opening time.
    Otherwise the following 7 days are scanned in order, skipping special
    closures. Falls back to a generic "check our hours" message.
    """
    entries: List[ScheduleEntry] = list(schedule)
    closed_dates = _closure_dates(closures)
    today = weekday_sunday_first(now)

    window = _enabled_window(entries, today)
    if window is not None and now.date() not in closed_dates:
        open_seconds, _, label = window
        if seconds_since_midnight(now) < open_seconds:
            return f"Abrimos hoje às {label}."

    for offset in range(1, 8):
        candidate = now.date() + timedelta(days=offset)
        if candidate in closed_dates:
            continue

        day = (today + offset) % 7
        window = _enabled_window(entries, day)
        if window is None:
            continue

        when = "amanhã" if offset == 1 else DAY_NAMES[day]
        return f"Abrimos {when} às {window[2]}."

    return CLOSED_MESSAGE


def evaluate_store_status(
    schedule: Iterable[ScheduleEntry],
    now: datetime,
    closures: Iterable[Union[SpecialClosure, date]] = (),
    manual_open: bool = True,
) -> StoreStatus:
    """Orders are accepted only when the manual switch is on and the schedule says open"""
    entries = list(schedule)
    closure_list = list(closures)
    open_by_schedule = is_open(entries, now, closure_list)
    accepting = manual_open and open_by_schedule

    if accepting:
        message = None
    elif not open_by_schedule:
        message = next_opening_message(entries, now, closure_list)
    else:
        message = MANUALLY_CLOSED_MESSAGE

    return StoreStatus(
        accepting_orders=accepting,
        open_by_schedule=open_by_schedule,
        manual_open=manual_open,
        message=message,
    )
