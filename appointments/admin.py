# appointments/admin.py
from django.contrib import admin
from .models import Profile, Doctor, Patient, Appointment


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ('full_name', 'role', 'phone', 'get_email', 'created_at')
    list_filter = ('role',)
    search_fields = ('full_name', 'user__email', 'phone')
    ordering = ('full_name',)

    def get_email(self, obj):
        return obj.user.email
    get_email.short_description = 'Email'


@admin.register(Doctor)
class DoctorAdmin(admin.ModelAdmin):
    list_display = ('get_name', 'specialization', 'experience_years', 'consultation_fee')
    list_filter = ('specialization',)
    search_fields = ('profile__full_name', 'specialization', 'qualifications')
    ordering = ('profile__full_name',)

    def get_name(self, obj):
        return obj.profile.full_name
    get_name.short_description = 'Name'


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('get_name', 'age', 'gender', 'get_phone')
    list_filter = ('gender',)
    search_fields = ('profile__full_name', 'profile__user__email')
    ordering = ('profile__full_name',)

    def get_name(self, obj):
        return obj.profile.full_name
    get_name.short_description = 'Name'

    def get_phone(self, obj):
        return obj.profile.phone
    get_phone.short_description = 'Phone'


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('get_patient_name', 'get_doctor_name', 'appointment_date', 'appointment_time',
                    'status', 'updated_at')
    list_filter = ('status', 'appointment_date', 'doctor__specialization')
    search_fields = ('patient__profile__full_name', 'doctor__profile__full_name', 'symptoms')
    ordering = ('-appointment_date', '-appointment_time')
    date_hierarchy = 'appointment_date'
    # Status only moves through the lifecycle controller
    readonly_fields = ('status', 'created_at', 'updated_at')

    def get_patient_name(self, obj):
        return obj.patient.profile.full_name
    get_patient_name.short_description = 'Patient'

    def get_doctor_name(self, obj):
        return obj.doctor.profile.full_name
    get_doctor_name.short_description = 'Doctor'
