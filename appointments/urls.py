# appointments/urls.py
from django.urls import path
from . import views

urlpatterns = [
    # =======================
    # Authentication & Profile
    # =======================
    path("auth/signup/", views.SignupView.as_view(), name="signup"),
    path("auth/login/", views.LoginView.as_view(), name="login"),
    path("profile/", views.ProfileView.as_view(), name="profile"),

    # =======================
    # Doctor Directory
    # =======================
    path("doctors/", views.DoctorListView.as_view(), name="doctor-list"),
    path("doctors/<int:doctor_id>/slots/", views.AvailableSlotsView.as_view(), name="available-slots"),

    # =======================
    # Patient Dashboard
    # =======================
    path("patient/dashboard/", views.PatientDashboardView.as_view(), name="patient-dashboard"),
    path("patient/details/", views.PatientDetailsView.as_view(), name="patient-details"),
    path("patient/appointments/", views.PatientAppointmentListCreateView.as_view(), name="patient-appointments"),
    path("patient/appointments/<int:appointment_id>/cancel/", views.PatientCancelAppointmentView.as_view(),
         name="patient-appointment-cancel"),

    # =======================
    # Doctor Dashboard
    # =======================
    path("doctor/dashboard/", views.DoctorDashboardView.as_view(), name="doctor-dashboard"),
    path("doctor/appointments/<int:appointment_id>/", views.DoctorAppointmentDetailView.as_view(),
         name="doctor-appointment-detail"),
    path("doctor/appointments/<int:appointment_id>/approve/",
         views.DoctorAppointmentActionView.as_view(transition="approve"), name="doctor-appointment-approve"),
    path("doctor/appointments/<int:appointment_id>/reject/",
         views.DoctorAppointmentActionView.as_view(transition="reject"), name="doctor-appointment-reject"),
    path("doctor/appointments/<int:appointment_id>/complete/",
         views.DoctorAppointmentActionView.as_view(transition="complete"), name="doctor-appointment-complete"),

    # =======================
    # Doctor Profile
    # =======================
    path("doctor/profile/", views.DoctorProfileView.as_view(), name="doctor-profile"),
    path("doctor/profile/days/<str:day>/toggle/", views.DoctorToggleDayView.as_view(), name="doctor-toggle-day"),
]
