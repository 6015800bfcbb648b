# appointments/booking.py
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from .identity import resolve_patient
from .models import Appointment, Patient
from .repository import AppointmentRepository
from .serializers import BookingSerializer
from .state import PatientDashboardState

logger = logging.getLogger(__name__)


@dataclass
class BookingResult:
    appointment: Appointment
    appointments: Optional[List[Appointment]]
    state: PatientDashboardState


class BookingController:
    """
    Submits a patient's booking form.

    Validation happens before anything touches the database; the patient
    record is resolved before the insert, and the patient's appointment
    list is reloaded once after a successful insert. If that reload
    fails the booking still stands and ``appointments`` is left as None.
    """

    def __init__(self, user, state: Optional[PatientDashboardState] = None,
                 resolver: Callable = resolve_patient):
        self.user = user
        self.state = state or PatientDashboardState()
        self.resolver = resolver
        self.patient: Optional[Patient] = None
        self.appointments: Optional[List[Appointment]] = None
        self.repository = AppointmentRepository(on_change=self._reload)

    def _reload(self, appointment):
        self.appointments = self.repository.list_for_patient(appointment.patient_id)

    def validate(self, data) -> dict:
        """Raises rest_framework ValidationError for empty or malformed fields."""
        form = BookingSerializer(data=data)
        form.is_valid(raise_exception=True)
        return form.validated_data

    def submit(self, data) -> BookingResult:
        cleaned = self.validate(data)
        self.state.select_doctor(cleaned["doctor"].pk)

        self.patient = self.resolver(self.user)
        appointment = self.repository.insert(
            doctor_id=cleaned["doctor"].pk,
            patient_id=self.patient.pk,
            appointment_date=cleaned["appointment_date"],
            appointment_time=cleaned["appointment_time"],
            symptoms=cleaned["symptoms"],
        )
        logger.info(
            "Patient %s booked appointment %s with doctor %s on %s %s",
            self.patient.pk, appointment.pk, appointment.doctor_id,
            appointment.appointment_date, appointment.appointment_time,
        )

        self.state.booking_succeeded()
        return BookingResult(appointment=appointment, appointments=self.appointments, state=self.state)
