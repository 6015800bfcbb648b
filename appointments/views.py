import logging
from collections import Counter

from django.contrib.auth import authenticate
from django.contrib.auth.models import User
from django.db import IntegrityError, transaction
from rest_framework import permissions
from rest_framework.authtoken.models import Token
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from datetime import datetime

from .booking import BookingController
from .identity import (
    DoctorNotProvisioned, IdentityResolutionFailed, ProfileNotFound,
    RoleMismatch, resolve_doctor, resolve_patient,
)
from .lifecycle import AppointmentLifecycle, InvalidTransition
from .models import Doctor, Profile
from .repository import (
    AppointmentNotFound, AppointmentRepository, RepositoryError,
    list_doctors, save_doctor_profile,
)
from .serializers import (
    AnnotateAppointmentSerializer, CompleteAppointmentSerializer, DoctorAppointmentSerializer,
    DoctorProfileSerializer, DoctorSerializer, LoginSerializer, PatientAppointmentSerializer,
    PatientDetailsSerializer, ProfileSerializer, SignupSerializer,
)
from .state import DoctorDashboardState, PatientDashboardState
from .status import AppointmentStatus, normalize_status
from .utils import DayError, get_available_slots, toggle_day

logger = logging.getLogger(__name__)


# -----------------------------
# Permissions
# -----------------------------

class IsDoctor(permissions.BasePermission):
    message = "Only doctors can access this"

    def has_permission(self, request, view):
        profile = getattr(request.user, "profile", None)
        return request.user.is_authenticated and profile is not None and profile.role == "doctor"


class IsPatient(permissions.BasePermission):
    message = "Only patients can access this"

    def has_permission(self, request, view):
        profile = getattr(request.user, "profile", None)
        return request.user.is_authenticated and profile is not None and profile.role == "patient"


def error_response(exc):
    """Map a domain failure onto the inline error shown next to the form."""
    if isinstance(exc, InvalidTransition):
        return Response({"error": str(exc), "status": exc.current}, status=409)
    if isinstance(exc, (AppointmentNotFound, DoctorNotProvisioned, ProfileNotFound)):
        return Response({"error": str(exc)}, status=404)
    if isinstance(exc, RoleMismatch):
        return Response({"error": str(exc)}, status=403)
    if isinstance(exc, (RepositoryError, IdentityResolutionFailed)):
        return Response({"error": "The request could not be completed. Please try again."}, status=503)
    raise exc


def reloaded_cards(serializer_class, appointments):
    """Serialized reload of the list, or None when the reload failed."""
    if appointments is None:
        return None
    return serializer_class(appointments, many=True).data


# ---------------------------
# AUTHENTICATION
# ---------------------------

class SignupView(APIView):
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = SignupSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            with transaction.atomic():
                user = User.objects.create_user(
                    username=data["email"],
                    email=data["email"],
                    password=data["password"],
                )
                profile = Profile.objects.create(
                    user=user,
                    full_name=data["full_name"].strip(),
                    role=data["role"],
                )
                # Doctors are provisioned here; patient rows are created on first use
                if profile.role == "doctor":
                    Doctor.objects.create(profile=profile)
                token, _ = Token.objects.get_or_create(user=user)
        except IntegrityError:
            return Response({"error": "Email already exists."}, status=400)

        logger.info("Registered %s account for user %s", profile.role, user.pk)
        return Response({
            "message": "User registered successfully",
            "token": token.key,
            "role": profile.role,
            "full_name": profile.full_name,
        }, status=201)


class LoginView(APIView):
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = authenticate(
            username=serializer.validated_data["email"].strip().lower(),
            password=serializer.validated_data["password"],
        )
        if user is None or not hasattr(user, "profile"):
            return Response({"error": "Invalid credentials"}, status=400)

        token, _ = Token.objects.get_or_create(user=user)
        return Response({
            "token": token.key,
            "role": user.profile.role,
            "full_name": user.profile.full_name,
        })


class ProfileView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        try:
            profile = Profile.objects.select_related("user").get(user=request.user)
        except Profile.DoesNotExist:
            return Response({"error": "Profile not found"}, status=404)
        return Response(ProfileSerializer(profile).data)

    def patch(self, request):
        try:
            profile = Profile.objects.select_related("user").get(user=request.user)
        except Profile.DoesNotExist:
            return Response({"error": "Profile not found"}, status=404)
        serializer = ProfileSerializer(profile, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)


# ---------------------------
# DOCTOR DIRECTORY
# ---------------------------

class DoctorListView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        try:
            doctors = list_doctors(request.query_params.get("specialization"))
        except RepositoryError as e:
            return error_response(e)
        return Response(DoctorSerializer(doctors, many=True).data)


class AvailableSlotsView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, doctor_id):
        date_str = request.query_params.get("date")
        if not date_str:
            return Response({"error": "date required"}, status=400)
        try:
            check_date = datetime.strptime(date_str, "%Y-%m-%d").date()
        except ValueError:
            return Response({"error": "Invalid date"}, status=400)
        try:
            doctor = Doctor.objects.get(pk=doctor_id)
        except Doctor.DoesNotExist:
            return Response({"error": "Doctor not found"}, status=404)

        return Response({
            "doctor": doctor.pk,
            "date": date_str,
            "available_slots": get_available_slots(doctor, check_date),
        })


# ---------------------------
# PATIENT DASHBOARD
# ---------------------------

class PatientDashboardView(APIView):
    permission_classes = [IsAuthenticated, IsPatient]

    def get(self, request):
        state = PatientDashboardState.from_params(request.query_params)
        try:
            patient = resolve_patient(request.user)
            doctors = list_doctors()
            appointments = AppointmentRepository().list_for_patient(patient.pk)
        except (RepositoryError, IdentityResolutionFailed, RoleMismatch, ProfileNotFound) as e:
            return error_response(e)

        per_doctor = Counter(appt.doctor_id for appt in appointments)
        return Response({
            "patient_id": patient.pk,
            "full_name": patient.profile.full_name,
            "state": state.as_dict(),
            "doctors": DoctorSerializer(doctors, many=True, context={"appointment_counts": per_doctor}).data,
            "appointments": PatientAppointmentSerializer(appointments, many=True).data,
        })


class PatientDetailsView(APIView):
    permission_classes = [IsAuthenticated, IsPatient]

    def get(self, request):
        try:
            patient = resolve_patient(request.user)
        except (IdentityResolutionFailed, RoleMismatch, ProfileNotFound) as e:
            return error_response(e)
        return Response(PatientDetailsSerializer(patient).data)

    def patch(self, request):
        try:
            patient = resolve_patient(request.user)
        except (IdentityResolutionFailed, RoleMismatch, ProfileNotFound) as e:
            return error_response(e)
        serializer = PatientDetailsSerializer(patient, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)


class PatientAppointmentListCreateView(APIView):
    permission_classes = [IsAuthenticated, IsPatient]

    def get(self, request):
        try:
            patient = resolve_patient(request.user)
            appointments = AppointmentRepository().list_for_patient(patient.pk)
        except (RepositoryError, IdentityResolutionFailed, RoleMismatch, ProfileNotFound) as e:
            return error_response(e)
        return Response(PatientAppointmentSerializer(appointments, many=True).data)

    def post(self, request):
        controller = BookingController(request.user, PatientDashboardState(view="doctors"))
        try:
            result = controller.submit(request.data)
        except (RepositoryError, IdentityResolutionFailed, RoleMismatch, ProfileNotFound) as e:
            return error_response(e)

        return Response({
            "appointment": PatientAppointmentSerializer(result.appointment).data,
            "appointments": reloaded_cards(PatientAppointmentSerializer, result.appointments),
            "state": result.state.as_dict(),
        }, status=201)


class PatientCancelAppointmentView(APIView):
    permission_classes = [IsAuthenticated, IsPatient]

    def post(self, request, appointment_id):
        try:
            patient = resolve_patient(request.user)
            reloaded = {}
            repository = AppointmentRepository(
                on_change=lambda appt: reloaded.update(items=repository.list_for_patient(patient.pk)))
            lifecycle = AppointmentLifecycle(repository, patient_id=patient.pk)
            appointment = lifecycle.cancel(appointment_id)
        except (InvalidTransition, RepositoryError, IdentityResolutionFailed,
                RoleMismatch, ProfileNotFound) as e:
            return error_response(e)

        return Response({
            "appointment": PatientAppointmentSerializer(appointment).data,
            "appointments": reloaded_cards(PatientAppointmentSerializer, reloaded.get("items")),
        })


# ---------------------------
# DOCTOR DASHBOARD
# ---------------------------

class DoctorDashboardView(APIView):
    permission_classes = [IsAuthenticated, IsDoctor]

    def get(self, request):
        state = DoctorDashboardState.from_params(request.query_params)
        try:
            doctor = resolve_doctor(request.user)
            appointments = AppointmentRepository().list_for_doctor(doctor.pk)
        except (RepositoryError, IdentityResolutionFailed, DoctorNotProvisioned,
                RoleMismatch, ProfileNotFound) as e:
            return error_response(e)

        counts = {value: 0 for value in AppointmentStatus.values}
        for appt in appointments:
            counts[normalize_status(appt.status).value] += 1

        visible = [appt for appt in appointments if state.matches(appt)]
        return Response({
            "doctor_id": doctor.pk,
            "doctor_name": doctor.profile.full_name,
            "specialization": doctor.specialization,
            "state": state.as_dict(),
            "counts": counts,
            "appointments": DoctorAppointmentSerializer(visible, many=True).data,
        })


class DoctorAppointmentActionView(APIView):
    """approve / reject / complete on one of the doctor's appointments."""
    permission_classes = [IsAuthenticated, IsDoctor]
    transition = None

    def post(self, request, appointment_id):
        payload = {}
        if self.transition == "complete":
            form = CompleteAppointmentSerializer(data=request.data)
            form.is_valid(raise_exception=True)
            payload = form.validated_data

        try:
            doctor = resolve_doctor(request.user)
            reloaded = {}
            repository = AppointmentRepository(
                on_change=lambda appt: reloaded.update(items=repository.list_for_doctor(doctor.pk)))
            lifecycle = AppointmentLifecycle(repository, doctor_id=doctor.pk)
            appointment = getattr(lifecycle, self.transition)(appointment_id, **payload)
        except (InvalidTransition, AppointmentNotFound, RepositoryError, IdentityResolutionFailed,
                DoctorNotProvisioned, RoleMismatch, ProfileNotFound) as e:
            return error_response(e)

        return Response({
            "appointment": DoctorAppointmentSerializer(appointment).data,
            "appointments": reloaded_cards(DoctorAppointmentSerializer, reloaded.get("items")),
        })


class DoctorAppointmentDetailView(APIView):
    permission_classes = [IsAuthenticated, IsDoctor]

    def get(self, request, appointment_id):
        try:
            doctor = resolve_doctor(request.user)
            appointment = AppointmentRepository().get(appointment_id, doctor_id=doctor.pk)
        except (AppointmentNotFound, RepositoryError, IdentityResolutionFailed,
                DoctorNotProvisioned, RoleMismatch, ProfileNotFound) as e:
            return error_response(e)
        return Response(DoctorAppointmentSerializer(appointment).data)

    def patch(self, request, appointment_id):
        form = AnnotateAppointmentSerializer(data=request.data)
        form.is_valid(raise_exception=True)

        try:
            doctor = resolve_doctor(request.user)
            reloaded = {}
            repository = AppointmentRepository(
                on_change=lambda appt: reloaded.update(items=repository.list_for_doctor(doctor.pk)))
            lifecycle = AppointmentLifecycle(repository, doctor_id=doctor.pk)
            appointment = lifecycle.annotate(appointment_id, **form.validated_data)
        except (InvalidTransition, AppointmentNotFound, RepositoryError, IdentityResolutionFailed,
                DoctorNotProvisioned, RoleMismatch, ProfileNotFound) as e:
            return error_response(e)

        return Response({
            "appointment": DoctorAppointmentSerializer(appointment).data,
            "appointments": reloaded_cards(DoctorAppointmentSerializer, reloaded.get("items")),
        })


# ---------------------------
# DOCTOR PROFILE
# ---------------------------

class DoctorProfileView(APIView):
    permission_classes = [IsAuthenticated, IsDoctor]

    def get(self, request):
        try:
            doctor = resolve_doctor(request.user)
        except (IdentityResolutionFailed, DoctorNotProvisioned, RoleMismatch, ProfileNotFound) as e:
            return error_response(e)
        return Response(DoctorProfileSerializer.to_form(doctor))

    def put(self, request):
        return self._save(request, partial=False)

    def patch(self, request):
        return self._save(request, partial=True)

    def _save(self, request, partial):
        form = DoctorProfileSerializer(data=request.data, partial=partial)
        form.is_valid(raise_exception=True)
        fields = dict(form.validated_data)
        phone = fields.pop("phone", None)

        try:
            doctor = resolve_doctor(request.user)
            doctor = save_doctor_profile(doctor, fields, phone=phone)
        except (RepositoryError, IdentityResolutionFailed, DoctorNotProvisioned,
                RoleMismatch, ProfileNotFound) as e:
            return error_response(e)

        logger.info("Doctor %s updated profile (%s)", doctor.pk, ", ".join(sorted(request.data.keys())))
        return Response({"message": "Profile updated successfully!", "profile": DoctorProfileSerializer.to_form(doctor)})


class DoctorToggleDayView(APIView):
    permission_classes = [IsAuthenticated, IsDoctor]

    def post(self, request, day):
        try:
            doctor = resolve_doctor(request.user)
            days = toggle_day(doctor.available_days, day)
            doctor = save_doctor_profile(doctor, {"available_days": days})
        except DayError as e:
            return Response({"error": str(e)}, status=400)
        except (RepositoryError, IdentityResolutionFailed, DoctorNotProvisioned,
                RoleMismatch, ProfileNotFound) as e:
            return error_response(e)

        return Response({"available_days": DoctorProfileSerializer.to_form(doctor)["available_days"]})
