from django.contrib.auth.models import User
from django.core.management.base import BaseCommand
from django.db import transaction

from appointments.models import Doctor, Profile

DEMO_USERS = [
    {
        "email": "doctor@test.com",
        "password": "doctor123",
        "role": "doctor",
        "full_name": "Test Doctor",
        "doctor": {
            "specialization": "General Physician",
            "qualifications": "MBBS",
            "experience_years": 5,
            "consultation_fee": 500,
            "available_days": ["Monday", "Wednesday", "Friday"],
        },
    },
    {
        "email": "patient@test.com",
        "password": "patient123",
        "role": "patient",
        "full_name": "Test Patient",
    },
]


class Command(BaseCommand):
    help = "Create a demo doctor and a demo patient account if they do not exist"

    def handle(self, *args, **options):
        for spec in DEMO_USERS:
            with transaction.atomic():
                user, created = User.objects.get_or_create(
                    username=spec["email"], defaults={"email": spec["email"]})
                if created:
                    user.set_password(spec["password"])
                    user.save()

                profile, _ = Profile.objects.get_or_create(
                    user=user, defaults={"role": spec["role"], "full_name": spec["full_name"]})
                if profile.role == "doctor":
                    Doctor.objects.get_or_create(profile=profile, defaults=spec.get("doctor", {}))

            label = "Created" if created else "Exists"
            self.stdout.write(f"{label}: {spec['email']} ({spec['role']})")
