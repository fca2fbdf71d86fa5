"""Daily hearing slots: capacity, past-time and conflict rules.

Mediation, conciliation and arbitration sessions share one menu of ten
hourly slots per day. Slot values are canonical 24h "HH:MM" strings; the
scheduling modal shows them as "8:00 AM", "1:00 PM", and so on.
"""

from collections import namedtuple
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from lupon.shared.clock import app_now

TimeSlot = namedtuple("TimeSlot", ["value", "display"])

TIME_SLOTS = (
    TimeSlot("08:00", "8:00 AM"),
    TimeSlot("09:00", "9:00 AM"),
    TimeSlot("10:00", "10:00 AM"),
    TimeSlot("11:00", "11:00 AM"),
    TimeSlot("13:00", "1:00 PM"),
    TimeSlot("14:00", "2:00 PM"),
    TimeSlot("15:00", "3:00 PM"),
    TimeSlot("16:00", "4:00 PM"),
    TimeSlot("17:00", "5:00 PM"),
    TimeSlot("18:00", "6:00 PM"),
)

MAX_SLOTS_PER_DAY = 4

# Minimum gap between two sessions of different complaints on the same day
MIN_INTERVAL_MINUTES = 60

MISSING_FIELDS = "missing_fields"
PAST_TIME = "past_time"
ALREADY_BOOKED = "already_booked"
DATE_FULL = "date_full"
NOT_A_SLOT = "not_a_slot"

BOOKING_MESSAGES = {
    MISSING_FIELDS: "Please select both date and time.",
    PAST_TIME: "Cannot schedule sessions in the past. Please select a future time.",
    ALREADY_BOOKED: "This time slot is already booked. Please choose a different time.",
    DATE_FULL: "All time slots for this date are full. Please select another date.",
    NOT_A_SLOT: "Please choose one of the listed time slots.",
}


class BookingError(ValueError):
    """A candidate booking the modal must not submit."""

    def __init__(self, reason):
        self.reason = reason
        self.message = BOOKING_MESSAGES[reason]
        super().__init__(self.message)


class ScheduleConflict(Exception):
    def __init__(self, message):
        self.message = message
        super().__init__(message)


def to_24_hour(text):
    """Parse "1:00 PM" / "13:00" / "13:00:00" into (hour, minute)."""
    parts = str(text).strip().split()
    if len(parts) not in (1, 2):
        raise ValueError(f"Invalid time: {text!r}")

    pieces = parts[0].split(":")
    if len(pieces) not in (2, 3):
        raise ValueError(f"Invalid time: {text!r}")
    hour, minute = int(pieces[0]), int(pieces[1])

    if len(parts) == 2:
        period = parts[1].upper()
        if period not in ("AM", "PM") or not 1 <= hour <= 12:
            raise ValueError(f"Invalid time: {text!r}")
        if period == "PM" and hour != 12:
            hour += 12
        elif period == "AM" and hour == 12:
            hour = 0

    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(f"Invalid time: {text!r}")
    return hour, minute


def canonical_time(text):
    hour, minute = to_24_hour(text)
    return f"{hour:02d}:{minute:02d}"


def format_time_12h(text):
    hour, minute = to_24_hour(text)
    period = "PM" if hour >= 12 else "AM"
    display_hour = hour - 12 if hour > 12 else hour
    if display_hour == 0:
        display_hour = 12
    return f"{display_hour}:{minute:02d} {period}"


def time_to_minutes(text):
    hour, minute = to_24_hour(text)
    return hour * 60 + minute


def parse_date(value):
    """date for a date object or "YYYY-MM-DD" string, None otherwise"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def _normalise_times(times):
    seen = []
    for value in times or []:
        try:
            value = canonical_time(value)
        except ValueError:
            value = str(value)
        if value not in seen:
            seen.append(value)
    return seen


@dataclass
class SlotInfo:
    used_slots: int
    max_slots_per_day: int
    is_full: bool
    scheduled_times: list = field(default_factory=list)
    booked_times: list = field(default_factory=list)

    @classmethod
    def from_booked_times(cls, times, max_slots_per_day=MAX_SLOTS_PER_DAY):
        booked = _normalise_times(times)
        return cls(
            used_slots=len(booked),
            max_slots_per_day=max_slots_per_day,
            is_full=len(booked) >= max_slots_per_day,
            scheduled_times=[format_time_12h(t) for t in booked],
            booked_times=booked,
        )

    @classmethod
    def from_payload(cls, data):
        """Build from the ``data`` object of the available-slots response."""
        booked = _normalise_times(data.get("bookedTimes"))
        max_slots = int(data.get("maxSlotsPerDay", MAX_SLOTS_PER_DAY))
        used = int(data.get("usedSlots", len(booked)))
        return cls(
            used_slots=used,
            max_slots_per_day=max_slots,
            is_full=bool(data.get("isFull", used >= max_slots)),
            scheduled_times=list(data.get("scheduledTimes") or []),
            booked_times=booked,
        )

    @property
    def available_slots(self):
        return len([s for s in TIME_SLOTS if s.value not in self.booked_times])

    def to_dict(self):
        return {
            "availableSlots": self.available_slots,
            "usedSlots": self.used_slots,
            "maxSlotsPerDay": self.max_slots_per_day,
            "scheduledTimes": list(self.scheduled_times),
            "bookedTimes": list(self.booked_times),
            "isFull": self.is_full,
        }


def is_time_slot_in_past(time_text, selected_date, now=None):
    """True when ``selected_date`` is today and the slot time is at or before now."""
    if now is None:
        now = app_now()
    day = parse_date(selected_date)
    if day is None or day != now.date():
        return False
    try:
        hour, minute = to_24_hour(time_text)
    except ValueError:
        return False
    return now.replace(hour=hour, minute=minute, second=0, microsecond=0) <= now


def _is_booked(time_text, slot_info):
    if slot_info is None:
        return False
    try:
        time_text = canonical_time(time_text)
    except ValueError:
        pass
    return time_text in slot_info.booked_times


@dataclass
class SlotState:
    slot: TimeSlot
    is_selected: bool
    is_booked: bool
    is_past: bool
    is_capacity_blocked: bool

    @property
    def disabled(self):
        return self.is_booked or self.is_past or self.is_capacity_blocked

    @property
    def reason(self):
        if self.is_booked:
            return "This time slot is already booked"
        if self.is_past:
            return "This time has already passed"
        if self.disabled:
            return "No slots available"
        return ""


def slot_states(selected_date, slot_info=None, selected_time=None, now=None, slots=TIME_SLOTS):
    """Enabled/disabled state of every slot for the selected date.

    Without slot data (not loaded yet, or the fetch failed) no slot counts
    as booked or full.
    """
    if now is None:
        now = app_now()
    is_full = bool(slot_info and slot_info.is_full)

    states = []
    for slot in slots:
        selected = selected_time is not None and _same_time(slot.value, selected_time)
        states.append(SlotState(
            slot=slot,
            is_selected=selected,
            is_booked=_is_booked(slot.value, slot_info),
            is_past=is_time_slot_in_past(slot.display, selected_date, now),
            is_capacity_blocked=is_full and not selected,
        ))
    return states


def _same_time(left, right):
    try:
        return canonical_time(left) == canonical_time(right)
    except ValueError:
        return left == right


def validate_booking(selected_date, time_text, slot_info=None, now=None, slots=TIME_SLOTS):
    """Check a (date, time) pick before it is submitted.

    Returns the (date, "HH:MM") pair on success, raises BookingError with the
    first failing reason in order: missing fields, not on the slot menu, past
    time, already booked, date full.
    """
    if not selected_date or not time_text:
        raise BookingError(MISSING_FIELDS)
    try:
        time_text = canonical_time(time_text)
    except ValueError:
        raise BookingError(NOT_A_SLOT)
    if time_text not in {slot.value for slot in slots}:
        raise BookingError(NOT_A_SLOT)
    if is_time_slot_in_past(time_text, selected_date, now):
        raise BookingError(PAST_TIME)
    if _is_booked(time_text, slot_info):
        raise BookingError(ALREADY_BOOKED)
    if slot_info is not None and slot_info.is_full:
        raise BookingError(DATE_FULL)

    return parse_date(selected_date) or selected_date, time_text


def check_schedule_conflicts(existing, time_text, max_slots=MAX_SLOTS_PER_DAY,
                             ignore=(), label="mediation"):
    """Server-side rules for a new session on a day with ``existing`` sessions.

    ``existing`` holds objects with a ``time`` attribute; sessions listed in
    ``ignore`` (the same complaint being rescheduled) still count towards the
    daily maximum but never conflict on time.
    """
    existing = list(existing)
    if len(existing) >= max_slots:
        raise ScheduleConflict(
            f"Maximum {max_slots} {label} sessions allowed per day. Please choose a different date."
        )

    selected = time_to_minutes(time_text)
    for session in existing:
        if any(session is own for own in ignore):
            continue
        try:
            difference = abs(selected - time_to_minutes(session.time))
        except ValueError:
            continue
        if difference == 0:
            raise ScheduleConflict(BOOKING_MESSAGES[ALREADY_BOOKED])
        if difference < MIN_INTERVAL_MINUTES:
            raise ScheduleConflict(
                "Minimum 1-hour interval required between sessions. Please choose a different time."
            )


@dataclass
class CalendarDay:
    date: date
    is_current_month: bool
    is_today: bool
    is_past: bool
    is_weekend: bool
    is_selected: bool

    @property
    def day(self):
        return self.date.day

    @property
    def date_string(self):
        return self.date.isoformat()

    @property
    def is_available(self):
        return self.is_current_month and not self.is_past and not self.is_weekend


def calendar_days(year, month, today, selected=None):
    """The 6-week grid shown by the date picker, starting on a Sunday."""
    first = date(year, month, 1)
    start = first - timedelta(days=(first.weekday() + 1) % 7)
    selected = parse_date(selected)

    days = []
    for offset in range(42):
        current = start + timedelta(days=offset)
        days.append(CalendarDay(
            date=current,
            is_current_month=current.month == month,
            is_today=current == today,
            is_past=current < today,
            is_weekend=current.weekday() >= 5,
            is_selected=current == selected,
        ))
    return days
