# appointments/lifecycle.py
import logging
from typing import List, Optional

from .repository import AppointmentRepository
from .status import AppointmentStatus, normalize_status

logger = logging.getLogger(__name__)

# Legal status moves. Anything missing here is refused.
TRANSITIONS = {
    AppointmentStatus.PENDING: frozenset({
        AppointmentStatus.APPROVED,
        AppointmentStatus.REJECTED,
        AppointmentStatus.CANCELLED,
    }),
    AppointmentStatus.APPROVED: frozenset({
        AppointmentStatus.COMPLETED,
    }),
}

# Doctor metadata (link, notes) can be edited in these states
ANNOTATABLE_STATUSES = frozenset({
    AppointmentStatus.APPROVED,
    AppointmentStatus.COMPLETED,
})


class InvalidTransition(Exception):
    def __init__(self, current, target, message=None):
        self.current = current
        self.target = target
        super().__init__(message or f"Cannot move appointment from '{current}' to '{target}'")


def can_transition(current, target) -> bool:
    return normalize_status(target) in TRANSITIONS.get(normalize_status(current), frozenset())


def available_actions(status, role: str = "doctor") -> List[str]:
    """
    Actions a client may offer for an appointment in the given status

    Args:
        status: Current appointment status (any known spelling)
        role: "doctor" or "patient"

    Returns:
        List[str]: Action names, empty for rejected/cancelled appointments
    """
    current = normalize_status(status)
    if role == "patient":
        return ["cancel"] if current == AppointmentStatus.PENDING else []

    if current == AppointmentStatus.PENDING:
        return ["approve", "reject"]
    if current == AppointmentStatus.APPROVED:
        return ["manage", "complete"]
    if current == AppointmentStatus.COMPLETED:
        return ["manage"]
    return []


def _blank_to_none(value):
    if value is None:
        return None
    value = value.strip()
    return value or None


class AppointmentLifecycle:
    """
    Applies status transitions on behalf of a doctor or a patient.

    The owner scope (doctor_id or patient_id) restricts which appointments
    can be touched; an appointment outside it is reported as not found.
    """

    def __init__(self, repository: AppointmentRepository, doctor_id=None, patient_id=None):
        self.repository = repository
        self.doctor_id = doctor_id
        self.patient_id = patient_id

    def approve(self, appointment_id):
        return self._transition(appointment_id, AppointmentStatus.APPROVED)

    def reject(self, appointment_id):
        return self._transition(appointment_id, AppointmentStatus.REJECTED)

    def cancel(self, appointment_id):
        return self._transition(appointment_id, AppointmentStatus.CANCELLED)

    def complete(self, appointment_id, meet_link: Optional[str] = None, notes: Optional[str] = None):
        extra = {}
        if meet_link is not None:
            extra["meet_link"] = _blank_to_none(meet_link)
        if notes is not None:
            extra["notes"] = _blank_to_none(notes)
        return self._transition(appointment_id, AppointmentStatus.COMPLETED, **extra)

    def annotate(self, appointment_id, meet_link: Optional[str] = None, notes: Optional[str] = None,
                 prescription: Optional[str] = None):
        appointment = self._load(appointment_id)
        current = normalize_status(appointment.status)
        if current not in ANNOTATABLE_STATUSES:
            raise InvalidTransition(current, current, f"Appointments that are '{current}' cannot be edited")

        fields = {}
        if meet_link is not None:
            fields["meet_link"] = _blank_to_none(meet_link)
        if notes is not None:
            fields["notes"] = _blank_to_none(notes)
        if prescription is not None:
            fields["prescription"] = _blank_to_none(prescription)
        if not fields:
            return appointment

        logger.info("Appointment %s annotated (%s)", appointment.pk, ", ".join(sorted(fields)))
        return self.repository.update(appointment.pk, **fields)

    def _load(self, appointment_id):
        return self.repository.get(appointment_id, doctor_id=self.doctor_id, patient_id=self.patient_id)

    def _transition(self, appointment_id, target, **extra):
        appointment = self._load(appointment_id)
        current = normalize_status(appointment.status)
        if not can_transition(current, target):
            logger.warning("Refused transition of appointment %s: %s -> %s", appointment.pk, current, target)
            raise InvalidTransition(current, target)

        logger.info("Appointment %s: %s -> %s", appointment.pk, current, target)
        return self.repository.update(appointment.pk, status=target, **extra)
