"""
Shared fixtures: users for both roles, their role records, and an API
client authenticated with DRF tokens.
"""

from datetime import date, time

import pytest
from django.contrib.auth.models import User
from rest_framework.authtoken.models import Token
from rest_framework.test import APIClient

from appointments.models import Appointment, Doctor, Patient, Profile


@pytest.fixture
def make_user(db):
    def _make_user(email, role, full_name=None, phone=None):
        user = User.objects.create_user(username=email, email=email, password="secret123")
        Profile.objects.create(user=user, role=role, full_name=full_name or email.split("@")[0], phone=phone)
        return user
    return _make_user


@pytest.fixture
def doctor_user(make_user):
    user = make_user("house@clinic.test", "doctor", full_name="Gregory House", phone="+1 (555) 010-2030")
    Doctor.objects.create(
        profile=user.profile,
        specialization="Diagnostics",
        experience_years=20,
        consultation_fee=150,
        available_days=["Monday", "Wednesday"],
    )
    return user


@pytest.fixture
def doctor(doctor_user):
    return doctor_user.profile.doctor


@pytest.fixture
def other_doctor(make_user):
    user = make_user("wilson@clinic.test", "doctor", full_name="James Wilson")
    return Doctor.objects.create(profile=user.profile, specialization="Oncology")


@pytest.fixture
def patient_user(make_user):
    return make_user("jane@mail.test", "patient", full_name="Jane Roe", phone="+44 7700 900123")


@pytest.fixture
def patient(patient_user):
    return Patient.objects.create(profile=patient_user.profile, age=34, gender="female")


@pytest.fixture
def other_patient(make_user):
    user = make_user("john@mail.test", "patient", full_name="John Doe")
    return Patient.objects.create(profile=user.profile)


@pytest.fixture
def make_appointment(db):
    def _make_appointment(doctor, patient, on=date(2024, 6, 1), at=time(10, 0), status="pending", **extra):
        return Appointment.objects.create(
            doctor=doctor,
            patient=patient,
            appointment_date=on,
            appointment_time=at,
            symptoms=extra.pop("symptoms", "fever"),
            status=status,
            **extra,
        )
    return _make_appointment


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for(api_client):
    def _client_for(user):
        token, _ = Token.objects.get_or_create(user=user)
        api_client.credentials(HTTP_AUTHORIZATION=f"Token {token.key}")
        return api_client
    return _client_for
