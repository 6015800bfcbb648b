# appointments/signals.py
from django.db.models.signals import post_save
from django.dispatch import receiver
from .models import Appointment, Profile
import logging

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Profile)
def profile_created(sender, instance, created, **kwargs):
    if created:
        logger.info("Profile created for user %s (%s)", instance.user_id, instance.role)


@receiver(post_save, sender=Appointment)
def appointment_booked(sender, instance, created, **kwargs):
    """
    Log new bookings; status changes go through queryset updates and are
    logged by the lifecycle controller instead
    """
    if created:
        logger.info(
            "Appointment %s booked: patient %s with doctor %s on %s at %s",
            instance.pk, instance.patient_id, instance.doctor_id,
            instance.appointment_date, instance.appointment_time,
        )
