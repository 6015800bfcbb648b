# appointments/identity.py
import logging

from django.db import DatabaseError, IntegrityError, transaction

from .models import Doctor, Patient, Profile

logger = logging.getLogger(__name__)


class IdentityError(Exception):
    """Base class for failures mapping a user onto their role record."""
    pass


class ProfileNotFound(IdentityError):
    pass


class RoleMismatch(IdentityError):
    pass


class DoctorNotProvisioned(IdentityError):
    pass


class IdentityResolutionFailed(IdentityError):
    """The lookup or insert itself failed; callers must not proceed."""
    pass


def get_profile(user) -> Profile:
    try:
        return Profile.objects.get(user=user)
    except Profile.DoesNotExist:
        raise ProfileNotFound(f"No profile for user {user.pk}")
    except DatabaseError as e:
        logger.exception("Profile lookup failed for user %s", user.pk)
        raise IdentityResolutionFailed(str(e)) from e


def resolve_patient(user) -> Patient:
    """
    Return the patient row owned by the user, creating an empty one if absent

    Safe to call any number of times: the one-to-one constraint on
    Patient.profile guarantees a single row, and a lost insert race
    falls back to reading the winner's row.

    Args:
        user: Authenticated auth user

    Returns:
        Patient: The user's patient record

    Raises:
        ProfileNotFound: If the user has no profile
        RoleMismatch: If the profile belongs to a doctor
        IdentityResolutionFailed: If the database call fails
    """
    profile = get_profile(user)
    if profile.role != "patient":
        raise RoleMismatch(f"User {user.pk} is registered as {profile.role}")

    try:
        with transaction.atomic():
            patient, created = Patient.objects.get_or_create(profile=profile)
    except IntegrityError:
        # Another request inserted the row first
        try:
            patient, created = Patient.objects.get(profile=profile), False
        except (Patient.DoesNotExist, DatabaseError) as e:
            logger.exception("Patient lookup after insert race failed for user %s", user.pk)
            raise IdentityResolutionFailed(str(e)) from e
    except DatabaseError as e:
        logger.exception("Patient resolution failed for user %s", user.pk)
        raise IdentityResolutionFailed(str(e)) from e

    if created:
        logger.info("Patient record %s created for user %s", patient.pk, user.pk)
    return patient


def resolve_doctor(user) -> Doctor:
    """Doctor rows are provisioned at sign-up; this never creates one."""
    profile = get_profile(user)
    if profile.role != "doctor":
        raise RoleMismatch(f"User {user.pk} is registered as {profile.role}")
    try:
        return Doctor.objects.select_related("profile").get(profile=profile)
    except Doctor.DoesNotExist:
        raise DoctorNotProvisioned(f"No doctor record for user {user.pk}")
    except DatabaseError as e:
        logger.exception("Doctor lookup failed for user %s", user.pk)
        raise IdentityResolutionFailed(str(e)) from e
