# exam_api/invigilators.py
"""
Invigilator records and their optional login accounts.

An invigilator created with an email and password gets a ``User`` with the
INVIGILATOR role; that user is how mark entry and room lists are limited to
the rooms the invigilator has duties in. Soft-deleted invigilators keep their
duty history and can be restored.
"""
import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from account.models import Role

from .exceptions import Conflict, InvalidInput, NotFound
from .models import ExamInvigilator, InvigilatorDuty
from .serializers import ExamInvigilatorSerializer

logger = logging.getLogger(__name__)


def _get_invigilator(invigilator_id, deleted=False):
    try:
        return ExamInvigilator.objects.select_related("user").get(pk=invigilator_id, is_deleted=deleted)
    except ExamInvigilator.DoesNotExist:
        raise NotFound("Deleted invigilator not found" if deleted else "Invigilator not found")


def _validated(data, instance=None):
    serializer = ExamInvigilatorSerializer(instance, data=data, partial=instance is not None)
    if not serializer.is_valid():
        raise InvalidInput(serializer.errors)
    return dict(serializer.validated_data)


def list_invigilators():
    return ExamInvigilator.objects.filter(is_deleted=False).select_related("user").order_by("short_name")


@transaction.atomic
def create_invigilator(data):
    fields = _validated(data)
    email = fields.pop("email", None)
    password = fields.pop("password", None)

    invigilator = ExamInvigilator(**fields)
    if email:
        User = get_user_model()
        if User.objects.filter(email__iexact=email).exists():
            raise Conflict("A user with this email already exists")
        invigilator.user = User.objects.create_user(
            email=email, name=invigilator.name, password=password, role=Role.INVIGILATOR
        )
    invigilator.save()

    logger.info("Created invigilator %s (login: %s)", invigilator.short_name, email or "none")
    return invigilator


@transaction.atomic
def update_invigilator(invigilator_id, data):
    """Update only the fields present in ``data``; login details are fixed at creation."""
    invigilator = _get_invigilator(invigilator_id)
    fields = _validated(data, instance=invigilator)
    fields.pop("email", None)
    fields.pop("password", None)

    for name, value in fields.items():
        setattr(invigilator, name, value)
    invigilator.save()

    if invigilator.user and "is_active" in fields:
        invigilator.user.is_active = invigilator.is_active
        invigilator.user.save(update_fields=["is_active", "updated_at"])

    logger.info("Updated invigilator %s: %s", invigilator.short_name, ", ".join(sorted(fields)) or "-")
    return invigilator


@transaction.atomic
def toggle_invigilator_status(invigilator_id):
    invigilator = _get_invigilator(invigilator_id)
    invigilator.is_active = not invigilator.is_active
    invigilator.save(update_fields=["is_active"])
    if invigilator.user:
        invigilator.user.is_active = invigilator.is_active
        invigilator.user.save(update_fields=["is_active", "updated_at"])

    logger.info("Invigilator %s is now %s", invigilator.short_name, "active" if invigilator.is_active else "inactive")
    return invigilator


@transaction.atomic
def soft_delete_invigilator(invigilator_id, actor=None, today=None):
    invigilator = _get_invigilator(invigilator_id)
    today = today or timezone.localdate()

    if InvigilatorDuty.objects.filter(invigilator=invigilator, exam_date__gte=today).exists():
        raise Conflict("Cannot delete invigilator with upcoming duties. Please remove duties first.")

    invigilator.is_deleted = True
    invigilator.is_active = False
    invigilator.deleted_at = timezone.now()
    invigilator.deleted_by = actor
    invigilator.save()

    if invigilator.user:
        invigilator.user.is_active = False
        invigilator.user.save(update_fields=["is_active", "updated_at"])

    logger.info("Soft deleted invigilator %s", invigilator.short_name)
    return invigilator


@transaction.atomic
def restore_invigilator(invigilator_id):
    invigilator = _get_invigilator(invigilator_id, deleted=True)

    invigilator.is_deleted = False
    invigilator.is_active = True
    invigilator.deleted_at = None
    invigilator.deleted_by = None
    invigilator.save()

    if invigilator.user:
        invigilator.user.is_active = True
        invigilator.user.save(update_fields=["is_active", "updated_at"])

    logger.info("Restored invigilator %s", invigilator.short_name)
    return invigilator


def get_deleted_invigilators():
    return ExamInvigilator.objects.filter(is_deleted=True).select_related("deleted_by").order_by("-deleted_at")
