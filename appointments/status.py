# appointments/status.py
from django.db import models


class AppointmentStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    COMPLETED = "completed", "Completed"
    REJECTED = "rejected", "Rejected"
    CANCELLED = "cancelled", "Cancelled"


class UnknownStatus(ValueError):
    """Raised when a status string has no canonical counterpart."""
    pass


# Older rows and clients use several names for the same state.
STATUS_ALIASES = {
    "pending": AppointmentStatus.PENDING,
    "booked": AppointmentStatus.PENDING,
    "scheduled": AppointmentStatus.PENDING,
    "approved": AppointmentStatus.APPROVED,
    "accepted": AppointmentStatus.APPROVED,
    "completed": AppointmentStatus.COMPLETED,
    "rejected": AppointmentStatus.REJECTED,
    "declined": AppointmentStatus.REJECTED,
    "cancelled": AppointmentStatus.CANCELLED,
    "canceled": AppointmentStatus.CANCELLED,
}

TERMINAL_STATUSES = frozenset({
    AppointmentStatus.COMPLETED,
    AppointmentStatus.REJECTED,
    AppointmentStatus.CANCELLED,
})

# Statuses that still hold a slot on the doctor's calendar
ACTIVE_STATUSES = frozenset({
    AppointmentStatus.PENDING,
    AppointmentStatus.APPROVED,
})

BADGE_TONES = {
    AppointmentStatus.PENDING: "yellow",
    AppointmentStatus.APPROVED: "blue",
    AppointmentStatus.COMPLETED: "green",
    AppointmentStatus.REJECTED: "red",
    AppointmentStatus.CANCELLED: "red",
}


def normalize_status(value) -> AppointmentStatus:
    """
    Map any known status spelling onto the canonical enumeration

    Args:
        value: Raw status string (or an AppointmentStatus member)

    Returns:
        AppointmentStatus: Canonical status

    Raises:
        UnknownStatus: If the value is not a known status name
    """
    if value is None:
        raise UnknownStatus("Status is required.")
    key = str(value).strip().lower()
    try:
        return STATUS_ALIASES[key]
    except KeyError:
        raise UnknownStatus(f"Unknown appointment status: {value!r}")


def is_terminal(status) -> bool:
    return normalize_status(status) in TERMINAL_STATUSES


def badge_for(status) -> dict:
    """Label and colour tone used by status pills."""
    canonical = normalize_status(status)
    return {"label": canonical.label, "tone": BADGE_TONES[canonical]}
