from unittest.mock import Mock

import pytest

from appointments.lifecycle import (
    AppointmentLifecycle,
    InvalidTransition,
    available_actions,
    can_transition,
)
from appointments.repository import AppointmentNotFound, AppointmentRepository


@pytest.fixture
def reload():
    return Mock()


@pytest.fixture
def lifecycle(doctor, reload):
    return AppointmentLifecycle(AppointmentRepository(on_change=reload), doctor_id=doctor.pk)


class TestTransitionTable:

    @pytest.mark.parametrize("current, target", [
        ("pending", "approved"),
        ("pending", "rejected"),
        ("pending", "cancelled"),
        ("approved", "completed"),
        ("accepted", "completed"),
    ])
    def test_allowed(self, current, target):
        assert can_transition(current, target)

    @pytest.mark.parametrize("current", ["completed", "rejected", "cancelled"])
    @pytest.mark.parametrize("target", ["pending", "approved", "completed", "rejected", "cancelled"])
    def test_terminal_states_never_move(self, current, target):
        assert not can_transition(current, target)

    @pytest.mark.parametrize("current, target", [
        ("pending", "completed"),
        ("approved", "pending"),
        ("approved", "rejected"),
    ])
    def test_refused(self, current, target):
        assert not can_transition(current, target)


class TestAvailableActions:

    def test_doctor_actions_follow_status(self):
        assert available_actions("pending") == ["approve", "reject"]
        assert available_actions("approved") == ["manage", "complete"]
        assert available_actions("completed") == ["manage"]
        assert available_actions("rejected") == []
        assert available_actions("cancelled") == []

    def test_patient_can_only_cancel_pending(self):
        assert available_actions("pending", role="patient") == ["cancel"]
        assert available_actions("approved", role="patient") == []


@pytest.mark.django_db
class TestLifecycleController:

    def test_approve_pending(self, lifecycle, reload, doctor, patient, make_appointment):
        appt = make_appointment(doctor, patient)

        result = lifecycle.approve(appt.pk)

        assert result.status == "approved"
        reload.assert_called_once()

    def test_reject_pending(self, lifecycle, doctor, patient, make_appointment):
        appt = make_appointment(doctor, patient)
        assert lifecycle.reject(appt.pk).status == "rejected"

    def test_complete_attaches_link_and_notes(self, lifecycle, reload, doctor, patient, make_appointment):
        appt = make_appointment(doctor, patient, status="approved")

        result = lifecycle.complete(appt.pk, meet_link="https://meet.example/abc", notes="Recovering well")

        assert result.status == "completed"
        assert result.meet_link == "https://meet.example/abc"
        assert result.notes == "Recovering well"
        assert reload.call_count == 1

    def test_complete_stores_blank_fields_as_null(self, lifecycle, doctor, patient, make_appointment):
        appt = make_appointment(doctor, patient, status="approved", notes="old")

        result = lifecycle.complete(appt.pk, meet_link="", notes="   ")

        assert result.meet_link is None
        assert result.notes is None

    def test_cannot_complete_pending(self, lifecycle, reload, doctor, patient, make_appointment):
        appt = make_appointment(doctor, patient)

        with pytest.raises(InvalidTransition):
            lifecycle.complete(appt.pk)

        appt.refresh_from_db()
        assert appt.status == "pending"
        reload.assert_not_called()

    @pytest.mark.parametrize("status", ["completed", "rejected", "cancelled"])
    def test_terminal_appointment_is_untouched(self, lifecycle, reload, doctor, patient, make_appointment, status):
        appt = make_appointment(doctor, patient, status=status)

        for action in (lifecycle.approve, lifecycle.reject, lifecycle.cancel):
            with pytest.raises(InvalidTransition):
                action(appt.pk)

        appt.refresh_from_db()
        assert appt.status == status
        reload.assert_not_called()

    def test_legacy_accepted_row_can_complete(self, lifecycle, doctor, patient, make_appointment):
        appt = make_appointment(doctor, patient, status="accepted")
        assert lifecycle.complete(appt.pk).status == "completed"

    def test_other_doctors_appointment_is_not_found(self, lifecycle, other_doctor, patient, make_appointment):
        appt = make_appointment(other_doctor, patient)
        with pytest.raises(AppointmentNotFound):
            lifecycle.approve(appt.pk)

    def test_annotate_completed_appointment(self, lifecycle, reload, doctor, patient, make_appointment):
        appt = make_appointment(doctor, patient, status="completed")

        result = lifecycle.annotate(appt.pk, prescription="Paracetamol")

        assert result.status == "completed"
        assert result.prescription == "Paracetamol"
        reload.assert_called_once()

    def test_annotate_pending_is_refused(self, lifecycle, doctor, patient, make_appointment):
        appt = make_appointment(doctor, patient)
        with pytest.raises(InvalidTransition):
            lifecycle.annotate(appt.pk, notes="too early")

    def test_annotate_without_fields_does_not_write(self, lifecycle, reload, doctor, patient, make_appointment):
        appt = make_appointment(doctor, patient, status="approved")

        lifecycle.annotate(appt.pk)

        reload.assert_not_called()

    def test_patient_cancels_own_pending(self, patient, doctor, make_appointment):
        appt = make_appointment(doctor, patient)
        lifecycle = AppointmentLifecycle(AppointmentRepository(), patient_id=patient.pk)

        assert lifecycle.cancel(appt.pk).status == "cancelled"
