# appointments/state.py
from dataclasses import asdict, dataclass, field
from typing import Optional

from .status import normalize_status

PATIENT_VIEWS = ("doctors", "appointments")
DOCTOR_FILTERS = ("all", "pending", "approved", "completed")

DEFAULT_APPOINTMENT_TIME = "10:00"


@dataclass
class BookingDraft:
    symptoms: str = ""
    appointment_date: str = ""
    appointment_time: str = DEFAULT_APPOINTMENT_TIME

    def clear(self):
        self.symptoms = ""
        self.appointment_date = ""
        self.appointment_time = DEFAULT_APPOINTMENT_TIME


@dataclass
class PatientDashboardState:
    """View state of the patient dashboard, owned by the request handling it."""
    view: str = "doctors"
    selected_doctor_id: Optional[int] = None
    draft: BookingDraft = field(default_factory=BookingDraft)

    @classmethod
    def from_params(cls, params):
        view = params.get("view", "doctors")
        return cls(view=view if view in PATIENT_VIEWS else "doctors")

    def select_doctor(self, doctor_id):
        self.selected_doctor_id = doctor_id

    def show(self, view):
        if view not in PATIENT_VIEWS:
            raise ValueError(f"Unknown patient view: {view}")
        self.view = view

    def booking_succeeded(self):
        self.selected_doctor_id = None
        self.draft.clear()
        self.show("appointments")

    def as_dict(self):
        return asdict(self)


@dataclass
class DoctorDashboardState:
    filter: str = "all"
    selected_appointment_id: Optional[int] = None
    editing_profile: bool = False

    @classmethod
    def from_params(cls, params):
        status_filter = params.get("filter", "all")
        return cls(filter=status_filter if status_filter in DOCTOR_FILTERS else "all")

    def matches(self, appointment) -> bool:
        return self.filter == "all" or normalize_status(appointment.status) == self.filter

    def as_dict(self):
        return asdict(self)
