# appointments/repository.py
import logging
from typing import Callable, List, Optional

from django.db import DatabaseError, transaction
from django.utils import timezone

from .models import Appointment, Doctor, Profile
from .status import AppointmentStatus

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("status", "meet_link", "notes", "prescription")

DOCTOR_PROFILE_FIELDS = (
    "specialization",
    "qualifications",
    "experience_years",
    "consultation_fee",
    "bio",
    "available_days",
    "image_url",
)


class RepositoryError(Exception):
    """A read or write against the database failed."""
    pass


class AppointmentNotFound(RepositoryError):
    pass


class PatientUnresolved(RepositoryError):
    pass


class AppointmentRepository:
    """
    Reads and writes appointment records.

    Every successful mutation calls ``on_change`` exactly once with the
    affected appointment, so the caller can reload whichever list it is
    showing. Failed mutations never call it. A failure inside the callback
    is logged and does not undo or fail the mutation.
    """

    def __init__(self, on_change: Optional[Callable[[Appointment], None]] = None):
        self.on_change = on_change

    # ---------------------------
    # READS
    # ---------------------------

    def list_for_doctor(self, doctor_id) -> List[Appointment]:
        try:
            return list(
                Appointment.objects
                .filter(doctor_id=doctor_id)
                .select_related("patient__profile")
                .order_by("appointment_date", "appointment_time", "id")
            )
        except DatabaseError as e:
            logger.exception("Listing appointments for doctor %s failed", doctor_id)
            raise RepositoryError(str(e)) from e

    def list_for_patient(self, patient_id) -> List[Appointment]:
        try:
            return list(
                Appointment.objects
                .filter(patient_id=patient_id)
                .select_related("doctor__profile")
                .order_by("-appointment_date", "-appointment_time", "-id")
            )
        except DatabaseError as e:
            logger.exception("Listing appointments for patient %s failed", patient_id)
            raise RepositoryError(str(e)) from e

    def get(self, appointment_id, doctor_id=None, patient_id=None) -> Appointment:
        filters = {"pk": appointment_id}
        if doctor_id is not None:
            filters["doctor_id"] = doctor_id
        if patient_id is not None:
            filters["patient_id"] = patient_id
        try:
            return (
                Appointment.objects
                .select_related("doctor__profile", "patient__profile")
                .get(**filters)
            )
        except Appointment.DoesNotExist:
            raise AppointmentNotFound(f"Appointment {appointment_id} not found")
        except DatabaseError as e:
            logger.exception("Loading appointment %s failed", appointment_id)
            raise RepositoryError(str(e)) from e

    # ---------------------------
    # WRITES
    # ---------------------------

    def insert(self, doctor_id, patient_id, appointment_date, appointment_time, symptoms) -> Appointment:
        if not patient_id:
            raise PatientUnresolved("Cannot book without a resolved patient record")
        try:
            appointment = Appointment.objects.create(
                doctor_id=doctor_id,
                patient_id=patient_id,
                appointment_date=appointment_date,
                appointment_time=appointment_time,
                symptoms=symptoms,
                status=AppointmentStatus.PENDING,
            )
        except DatabaseError as e:
            logger.exception("Booking for patient %s with doctor %s failed", patient_id, doctor_id)
            raise RepositoryError(str(e)) from e

        self._changed(appointment)
        return appointment

    def update(self, appointment_id, **fields) -> Appointment:
        """
        Apply a partial update and stamp updated_at

        No version check is made: concurrent writers overwrite each other.

        Args:
            appointment_id: Appointment primary key
            **fields: Any of status, meet_link, notes, prescription

        Returns:
            Appointment: The row as stored after the update

        Raises:
            ValueError: If a field outside UPDATABLE_FIELDS is given
            AppointmentNotFound: If no row matched
            RepositoryError: If the database call failed
        """
        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update appointment fields: {', '.join(sorted(unknown))}")

        fields["updated_at"] = timezone.now()
        try:
            updated = Appointment.objects.filter(pk=appointment_id).update(**fields)
        except DatabaseError as e:
            logger.exception("Updating appointment %s failed", appointment_id)
            raise RepositoryError(str(e)) from e
        if not updated:
            raise AppointmentNotFound(f"Appointment {appointment_id} not found")

        appointment = self.get(appointment_id)
        self._changed(appointment)
        return appointment

    def _changed(self, appointment):
        if self.on_change is None:
            return
        try:
            self.on_change(appointment)
        except RepositoryError:
            # The write is already committed; only the reloaded list is lost
            logger.exception("Reloading after change to appointment %s failed", appointment.pk)


# ---------------------------
# DOCTOR DIRECTORY
# ---------------------------

def list_doctors(specialization: Optional[str] = None) -> List[Doctor]:
    queryset = Doctor.objects.select_related("profile").order_by("profile__full_name", "id")
    if specialization:
        queryset = queryset.filter(specialization__icontains=specialization)
    try:
        return list(queryset)
    except DatabaseError as e:
        logger.exception("Listing doctors failed")
        raise RepositoryError(str(e)) from e


def save_doctor_profile(doctor: Doctor, fields: dict, phone=None) -> Doctor:
    """Update the doctor row and, when given, the profile phone in one transaction."""
    unknown = set(fields) - set(DOCTOR_PROFILE_FIELDS)
    if unknown:
        raise ValueError(f"Cannot update doctor fields: {', '.join(sorted(unknown))}")

    now = timezone.now()
    try:
        with transaction.atomic():
            Doctor.objects.filter(pk=doctor.pk).update(updated_at=now, **fields)
            if phone is not None:
                Profile.objects.filter(pk=doctor.profile_id).update(phone=phone or None, updated_at=now)
    except DatabaseError as e:
        logger.exception("Saving profile for doctor %s failed", doctor.pk)
        raise RepositoryError(str(e)) from e

    doctor.refresh_from_db()
    doctor.profile.refresh_from_db()
    return doctor
