# appointments/serializers.py
from rest_framework import serializers
from django.contrib.auth.models import User

from .lifecycle import available_actions
from .models import Profile, Doctor, Patient, Appointment
from .status import badge_for
from .utils import WEEKDAYS, DayError, format_appointment_datetime, ordered_days, unique_days, whatsapp_link

TIME_INPUT_FORMATS = ["%H:%M", "%H:%M:%S", "%I:%M %p"]


# -------------------------
# AUTH SERIALIZERS
# -------------------------
class SignupSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(min_length=6, write_only=True, trim_whitespace=False)
    full_name = serializers.CharField(max_length=150)
    role = serializers.ChoiceField(choices=Profile.ROLE_CHOICES)

    def validate_email(self, value):
        value = value.strip().lower()
        if User.objects.filter(username__iexact=value).exists():
            raise serializers.ValidationError("Email already exists.")
        return value


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(trim_whitespace=False)


# -------------------------
# PROFILE SERIALIZERS
# -------------------------
class ProfileSerializer(serializers.ModelSerializer):
    email = serializers.EmailField(source='user.email', read_only=True)

    class Meta:
        model = Profile
        fields = ['id', 'email', 'full_name', 'role', 'phone', 'created_at', 'updated_at']
        read_only_fields = ['id', 'email', 'role', 'created_at', 'updated_at']


# -------------------------
# DOCTOR SERIALIZERS
# -------------------------
class DoctorSerializer(serializers.ModelSerializer):
    """Doctor card shown in the patient's doctor list."""
    name = serializers.CharField(source='profile.full_name', read_only=True)
    phone = serializers.CharField(source='profile.phone', read_only=True)
    available_days = serializers.SerializerMethodField()
    appointment_count = serializers.SerializerMethodField()

    class Meta:
        model = Doctor
        fields = [
            'id', 'name', 'phone', 'specialization', 'qualifications',
            'experience_years', 'consultation_fee', 'bio', 'available_days', 'image_url',
            'appointment_count',
        ]

    def get_available_days(self, obj):
        return ordered_days(obj.available_days)

    def get_appointment_count(self, obj):
        # Only the patient dashboard supplies counts
        counts = self.context.get("appointment_counts")
        if counts is None:
            return None
        return counts.get(obj.pk, 0)


class DoctorProfileSerializer(serializers.Serializer):
    specialization = serializers.CharField(max_length=120)
    qualifications = serializers.CharField(max_length=255, required=False, allow_blank=True)
    experience_years = serializers.IntegerField(min_value=0, required=False)
    consultation_fee = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    bio = serializers.CharField(required=False, allow_blank=True)
    available_days = serializers.ListField(child=serializers.CharField(), required=False)
    image_url = serializers.URLField(max_length=500, required=False, allow_null=True, allow_blank=True)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True)

    def validate_available_days(self, value):
        try:
            return unique_days(value)
        except DayError:
            raise serializers.ValidationError(f"Days must be among: {', '.join(WEEKDAYS)}")

    def validate_image_url(self, value):
        return value or None

    @staticmethod
    def to_form(doctor):
        return {
            'specialization': doctor.specialization,
            'qualifications': doctor.qualifications,
            'experience_years': doctor.experience_years,
            'consultation_fee': str(doctor.consultation_fee),
            'bio': doctor.bio,
            'available_days': ordered_days(doctor.available_days),
            'image_url': doctor.image_url,
            'phone': doctor.profile.phone or '',
        }


# -------------------------
# APPOINTMENT SERIALIZERS
# -------------------------
class AppointmentSerializer(serializers.ModelSerializer):
    status_badge = serializers.SerializerMethodField()
    display_datetime = serializers.SerializerMethodField()

    class Meta:
        model = Appointment
        fields = [
            'id', 'doctor', 'patient', 'appointment_date', 'appointment_time',
            'symptoms', 'status', 'status_badge', 'display_datetime',
            'meet_link', 'notes', 'prescription', 'created_at', 'updated_at',
        ]
        read_only_fields = [
            'id', 'doctor', 'patient', 'appointment_date', 'appointment_time', 'symptoms',
            'status', 'meet_link', 'notes', 'prescription', 'created_at', 'updated_at',
        ]

    def get_status_badge(self, obj):
        return badge_for(obj.status)

    def get_display_datetime(self, obj):
        return format_appointment_datetime(obj.appointment_date, obj.appointment_time)


class PatientAppointmentSerializer(AppointmentSerializer):
    """Appointment card on the patient dashboard, joined with the doctor."""
    doctor_name = serializers.CharField(source='doctor.profile.full_name', read_only=True)
    specialization = serializers.CharField(source='doctor.specialization', read_only=True)
    doctor_phone = serializers.CharField(source='doctor.profile.phone', read_only=True)
    whatsapp_link = serializers.SerializerMethodField()
    actions = serializers.SerializerMethodField()

    class Meta(AppointmentSerializer.Meta):
        fields = AppointmentSerializer.Meta.fields + [
            'doctor_name', 'specialization', 'doctor_phone', 'whatsapp_link', 'actions',
        ]

    def get_whatsapp_link(self, obj):
        return whatsapp_link(obj.doctor.profile.phone)

    def get_actions(self, obj):
        return available_actions(obj.status, role="patient")


class DoctorAppointmentSerializer(AppointmentSerializer):
    """Appointment card on the doctor dashboard, joined with the patient."""
    patient_name = serializers.CharField(source='patient.profile.full_name', read_only=True)
    patient_phone = serializers.CharField(source='patient.profile.phone', read_only=True)
    patient_age = serializers.IntegerField(source='patient.age', read_only=True)
    patient_gender = serializers.CharField(source='patient.gender', read_only=True)
    whatsapp_link = serializers.SerializerMethodField()
    actions = serializers.SerializerMethodField()

    class Meta(AppointmentSerializer.Meta):
        fields = AppointmentSerializer.Meta.fields + [
            'patient_name', 'patient_phone', 'patient_age', 'patient_gender',
            'whatsapp_link', 'actions',
        ]

    def get_whatsapp_link(self, obj):
        return whatsapp_link(obj.patient.profile.phone)

    def get_actions(self, obj):
        return available_actions(obj.status, role="doctor")


class BookingSerializer(serializers.Serializer):
    doctor = serializers.PrimaryKeyRelatedField(queryset=Doctor.objects.all())
    appointment_date = serializers.DateField()
    appointment_time = serializers.TimeField(input_formats=TIME_INPUT_FORMATS)
    symptoms = serializers.CharField()


class CompleteAppointmentSerializer(serializers.Serializer):
    meet_link = serializers.CharField(required=False, allow_blank=True, max_length=500)
    notes = serializers.CharField(required=False, allow_blank=True)


class AnnotateAppointmentSerializer(CompleteAppointmentSerializer):
    prescription = serializers.CharField(required=False, allow_blank=True)


class PatientDetailsSerializer(serializers.ModelSerializer):
    class Meta:
        model = Patient
        fields = ['id', 'age', 'gender', 'blood_group', 'address']
        read_only_fields = ['id']
