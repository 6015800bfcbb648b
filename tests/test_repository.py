from datetime import date, datetime, time, timezone as dt_timezone
from unittest.mock import Mock, patch

import pytest
from django.db import DatabaseError

from appointments.models import Appointment
from appointments.repository import (
    AppointmentNotFound,
    AppointmentRepository,
    PatientUnresolved,
    RepositoryError,
    list_doctors,
    save_doctor_profile,
)


@pytest.mark.django_db
class TestListing:

    def test_doctor_listing_is_scoped_and_ascending(self, doctor, other_doctor, patient, make_appointment):
        late = make_appointment(doctor, patient, on=date(2024, 6, 3))
        early = make_appointment(doctor, patient, on=date(2024, 6, 1))
        make_appointment(other_doctor, patient, on=date(2024, 6, 2))

        listed = AppointmentRepository().list_for_doctor(doctor.pk)

        assert [a.pk for a in listed] == [early.pk, late.pk]
        assert all(a.doctor_id == doctor.pk for a in listed)

    def test_patient_listing_is_scoped_and_descending(self, doctor, patient, other_patient, make_appointment):
        morning = make_appointment(doctor, patient, on=date(2024, 6, 1), at=time(9, 0))
        afternoon = make_appointment(doctor, patient, on=date(2024, 6, 1), at=time(15, 0))
        later_day = make_appointment(doctor, patient, on=date(2024, 6, 5))
        make_appointment(doctor, other_patient, on=date(2024, 6, 9))

        listed = AppointmentRepository().list_for_patient(patient.pk)

        assert [a.pk for a in listed] == [later_day.pk, afternoon.pk, morning.pk]

    def test_listing_failure_raises_repository_error(self, doctor):
        with patch.object(Appointment.objects, "filter", side_effect=DatabaseError("timeout")):
            with pytest.raises(RepositoryError):
                AppointmentRepository().list_for_doctor(doctor.pk)

    def test_get_scoped_to_other_owner_is_not_found(self, doctor, other_doctor, patient, make_appointment):
        appt = make_appointment(doctor, patient)
        with pytest.raises(AppointmentNotFound):
            AppointmentRepository().get(appt.pk, doctor_id=other_doctor.pk)


@pytest.mark.django_db
class TestInsert:

    def test_creates_pending_appointment(self, doctor, patient):
        on_change = Mock()
        repo = AppointmentRepository(on_change=on_change)

        appt = repo.insert(doctor.pk, patient.pk, date(2024, 6, 1), time(10, 0), "fever")

        assert appt.status == "pending"
        assert appt.patient_id == patient.pk
        on_change.assert_called_once_with(appt)

    def test_rejects_unresolved_patient(self, doctor):
        on_change = Mock()
        with pytest.raises(PatientUnresolved):
            AppointmentRepository(on_change=on_change).insert(doctor.pk, None, date(2024, 6, 1), time(10, 0), "x")
        on_change.assert_not_called()
        assert not Appointment.objects.exists()


@pytest.mark.django_db
class TestUpdate:

    def test_partial_update_stamps_updated_at(self, doctor, patient, make_appointment):
        appt = make_appointment(doctor, patient)
        stamp = datetime(2030, 1, 1, 12, 0, tzinfo=dt_timezone.utc)

        with patch("appointments.repository.timezone.now", return_value=stamp):
            updated = AppointmentRepository().update(appt.pk, notes="rest and fluids")

        assert updated.notes == "rest and fluids"
        assert updated.status == "pending"
        assert updated.updated_at == stamp

    def test_reload_runs_once_per_mutation(self, doctor, patient, make_appointment):
        appt = make_appointment(doctor, patient)
        on_change = Mock()

        AppointmentRepository(on_change=on_change).update(appt.pk, meet_link="https://meet.example/abc")

        assert on_change.call_count == 1

    def test_reload_failure_does_not_fail_the_write(self, doctor, patient, make_appointment):
        appt = make_appointment(doctor, patient)
        on_change = Mock(side_effect=RepositoryError("timeout"))

        updated = AppointmentRepository(on_change=on_change).update(appt.pk, status="approved")

        assert updated.status == "approved"
        on_change.assert_called_once_with(updated)
        appt.refresh_from_db()
        assert appt.status == "approved"

    def test_unknown_field_is_refused(self, doctor, patient, make_appointment):
        appt = make_appointment(doctor, patient)
        with pytest.raises(ValueError):
            AppointmentRepository().update(appt.pk, doctor_id=99)

    def test_missing_row_does_not_reload(self, db):
        on_change = Mock()
        with pytest.raises(AppointmentNotFound):
            AppointmentRepository(on_change=on_change).update(424242, notes="x")
        on_change.assert_not_called()

    def test_last_write_wins(self, doctor, patient, make_appointment):
        appt = make_appointment(doctor, patient, status="approved")
        first = AppointmentRepository()
        second = AppointmentRepository()

        first.update(appt.pk, notes="from tab one")
        second.update(appt.pk, notes="from tab two")

        appt.refresh_from_db()
        assert appt.notes == "from tab two"


@pytest.mark.django_db
class TestDoctorDirectory:

    def test_filter_by_specialization(self, doctor, other_doctor):
        assert [d.pk for d in list_doctors("onco")] == [other_doctor.pk]
        assert len(list_doctors()) == 2

    def test_save_profile_updates_doctor_and_phone(self, doctor):
        saved = save_doctor_profile(doctor, {"bio": "Hates lupus", "experience_years": 21}, phone="+1 555 000")

        assert saved.bio == "Hates lupus"
        assert saved.experience_years == 21
        assert saved.profile.phone == "+1 555 000"

    def test_save_profile_refuses_unknown_fields(self, doctor):
        with pytest.raises(ValueError):
            save_doctor_profile(doctor, {"profile_id": 3})
