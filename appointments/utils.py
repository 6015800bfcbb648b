# appointments/utils.py
import re
from datetime import datetime, time, timedelta, date
from typing import Iterable, List, Optional

from .models import Appointment
from .status import ACTIVE_STATUSES

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

# Consultation hours shown to patients
MORNING_START = time(hour=9, minute=0)
MORNING_END = time(hour=12, minute=0)
AFTERNOON_START = time(hour=14, minute=0)
AFTERNOON_END = time(hour=18, minute=0)
SLOT_DURATION_MINUTES = 30

WHATSAPP_BASE_URL = "https://wa.me/"


class DayError(ValueError):
    """Raised for a name that is not a weekday."""
    pass


def canonical_day(day: str) -> str:
    """
    Normalize a weekday name ("monday", " Monday ") to its display form

    Raises:
        DayError: If the name is not a weekday
    """
    cleaned = (day or "").strip().capitalize()
    if cleaned not in WEEKDAYS:
        raise DayError(f"Invalid weekday: {day}")
    return cleaned


def unique_days(days: Iterable[str]) -> List[str]:
    """Drop duplicate weekdays, keeping first-seen order."""
    result = []
    for day in days:
        day = canonical_day(day)
        if day not in result:
            result.append(day)
    return result


def toggle_day(days: Iterable[str], day: str) -> List[str]:
    """
    Add the weekday if absent, remove it if present

    Args:
        days: Current available days
        day: Weekday to toggle

    Returns:
        List[str]: New available days, without duplicates
    """
    day = canonical_day(day)
    current = unique_days(days)
    if day in current:
        return [d for d in current if d != day]
    return current + [day]


def ordered_days(days: Iterable[str]) -> List[str]:
    """Weekdays in Monday..Sunday order, for display only."""
    present = set()
    for day in days or []:
        try:
            present.add(canonical_day(day))
        except DayError:
            continue
    return [d for d in WEEKDAYS if d in present]


def generate_daily_slots(check_date: Optional[date] = None) -> List[str]:
    """
    Generate half-hour consultation slots, morning and afternoon sessions

    Args:
        check_date: Date to generate slots for (defaults to today)

    Returns:
        List[str]: List of time slots in "HH:MM" format
    """
    if check_date is None:
        check_date = date.today()

    slots = []
    for start, end in ((MORNING_START, MORNING_END), (AFTERNOON_START, AFTERNOON_END)):
        current = datetime.combine(check_date, start)
        end_dt = datetime.combine(check_date, end)
        while current < end_dt:
            slots.append(current.strftime("%H:%M"))
            current += timedelta(minutes=SLOT_DURATION_MINUTES)
    return slots


def get_booked_slots(doctor, check_date: date) -> List[str]:
    """
    Get slots already held by pending or approved appointments

    Args:
        doctor: Doctor instance
        check_date: Date to check

    Returns:
        List[str]: List of booked time slots in "HH:MM" format
    """
    appointments = Appointment.objects.filter(
        doctor=doctor,
        appointment_date=check_date,
        status__in=list(ACTIVE_STATUSES),
    )
    return [a.appointment_time.strftime("%H:%M") for a in appointments]


def get_available_slots(doctor, check_date: date) -> List[str]:
    """
    Suggested free slots for a doctor on a date

    Advisory only: booking accepts any time.
    """
    booked = set(get_booked_slots(doctor, check_date))
    return [slot for slot in generate_daily_slots(check_date) if slot not in booked]


def format_appointment_datetime(appointment_date: date, slot_time) -> str:
    """
    Format appointment date and time for display

    Args:
        appointment_date: Appointment date
        slot_time: time object or "HH:MM" string

    Returns:
        str: e.g. "Saturday, June 1, 2024 at 10:00 AM"
    """
    try:
        if isinstance(slot_time, str):
            slot_time = datetime.strptime(slot_time, "%H:%M").time()
        date_str = f"{appointment_date.strftime('%A, %B')} {appointment_date.day}, {appointment_date.year}"
        return f"{date_str} at {slot_time.strftime('%I:%M %p')}"
    except (ValueError, AttributeError):
        return f"{appointment_date} at {slot_time}"


def whatsapp_link(phone: Optional[str]) -> Optional[str]:
    """Deep link to a WhatsApp chat; None when the phone has no digits."""
    if not phone:
        return None
    digits = re.sub(r"\D", "", phone)
    if not digits:
        return None
    return f"{WHATSAPP_BASE_URL}{digits}"
