# exam_api/duties.py
"""
Invigilator duty scheduling.

A room gets at most one invigilator per exam date and an invigilator at most
one room per exam date. Duties created by one bulk request share a batch id
so the batch can be withdrawn together until attendance is recorded.

Bulk assignment reports per-item results: a rejected item never rolls back
the items that were accepted.
"""
import logging
import uuid

from django.db import IntegrityError, transaction
from django.db.models import Count
from django.utils import timezone

from account.models import Role

from .exceptions import Conflict, ExamServiceError, Forbidden, InvalidInput, NotFound
from .models import ROOM_CAPACITY, ExamInvigilator, InvigilatorDuty, Student
from .serializers import BulkDutySerializer

logger = logging.getLogger(__name__)


def _create_duty(exam_date, item, batch_id, actor):
    invigilator = ExamInvigilator.objects.filter(
        pk=item["invigilator_id"], is_active=True, is_deleted=False
    ).first()
    if invigilator is None:
        raise NotFound("Invigilator not found or inactive")

    room_no = item["room_no"]
    if InvigilatorDuty.objects.filter(exam_date=exam_date, room_no=room_no).exists():
        raise Conflict(f"Room {room_no} is already assigned to another invigilator")

    if InvigilatorDuty.objects.filter(exam_date=exam_date, invigilator=invigilator).exists():
        raise Conflict("Invigilator already has a duty on this date")

    try:
        with transaction.atomic():
            return InvigilatorDuty.objects.create(
                invigilator=invigilator,
                exam_date=exam_date,
                duty_from=item["duty_from"],
                duty_to=item["duty_to"],
                room_no=room_no,
                batch_id=batch_id,
                created_by=actor,
            )
    except IntegrityError:
        raise Conflict(f"Room {room_no} or invigilator {invigilator.short_name} was assigned concurrently")


def bulk_assign_duties(exam_date, duties, actor=None):
    serializer = BulkDutySerializer(data={"exam_date": exam_date, "duties": duties})
    if not serializer.is_valid():
        raise InvalidInput(serializer.errors)

    exam_date = serializer.validated_data["exam_date"]
    batch_id = uuid.uuid4().hex
    results = {"batch_id": batch_id, "successful": [], "failed": []}

    seen_rooms = set()
    for item in serializer.validated_data["duties"]:
        room_no = item["room_no"]
        if room_no in seen_rooms:
            results["failed"].append({
                **item,
                "error": f"Duplicate room assignment: Room {room_no} is assigned multiple times in this request",
            })
            continue
        seen_rooms.add(room_no)

        try:
            duty = _create_duty(exam_date, item, batch_id, actor)
        except ExamServiceError as exc:
            results["failed"].append({**item, "error": str(exc.detail)})
            continue
        results["successful"].append(duty)

    logger.info(
        "Duty batch %s for %s: %s assigned, %s failed",
        batch_id,
        exam_date,
        len(results["successful"]),
        len(results["failed"]),
    )
    return results


def duties_for_date(exam_date):
    return InvigilatorDuty.objects.filter(exam_date=exam_date).select_related("invigilator")


def delete_batch(batch_id):
    duties = InvigilatorDuty.objects.filter(batch_id=batch_id)
    if not duties.exists():
        raise NotFound("Duty batch not found")

    if duties.exclude(status=InvigilatorDuty.ASSIGNED).exists():
        raise Conflict("Cannot delete batch because some duties have attendance marked")

    deleted, _ = duties.delete()
    logger.info("Deleted duty batch %s (%s duties)", batch_id, deleted)
    return deleted


def _get_duty(duty_id):
    try:
        return InvigilatorDuty.objects.select_related("invigilator").get(pk=duty_id)
    except InvigilatorDuty.DoesNotExist:
        raise NotFound("Duty not found")


def delete_duty(duty_id):
    duty = _get_duty(duty_id)
    if duty.status != InvigilatorDuty.ASSIGNED:
        raise Conflict("Cannot delete duty after attendance is marked")
    duty.delete()


def mark_attendance(duty_id, status, signature=None):
    if status not in (InvigilatorDuty.PRESENT, InvigilatorDuty.ABSENT):
        raise InvalidInput("Please provide valid status (Present/Absent)")

    duty = _get_duty(duty_id)
    duty.status = status
    if signature:
        duty.signature = signature
        duty.signature_time = timezone.now()
    duty.save()
    return duty


def rooms_for_duty(exam_date):
    """Occupied rooms split into those still needing an invigilator on
    ``exam_date`` and those already covered."""
    rows = (
        Student.objects.find_active(room_no__isnull=False)
        .values("room_no", "gender")
        .annotate(count=Count("id"))
        .order_by("room_no", "gender")
    )

    rooms = {}
    for row in rows:
        room = rooms.setdefault(row["room_no"], {
            "room_no": row["room_no"],
            "student_count": 0,
            "capacity": ROOM_CAPACITY,
            "gender_counts": {},
        })
        room["student_count"] += row["count"]
        room["gender_counts"][row["gender"]] = row["count"]

    assigned = list(duties_for_date(exam_date))
    assigned_rooms = {duty.room_no for duty in assigned}

    available = []
    for room in rooms.values():
        room["available_seats"] = ROOM_CAPACITY - room["student_count"]
        if room["room_no"] not in assigned_rooms:
            available.append(room)

    return {
        "available": available,
        "assigned": [
            {
                "room_no": duty.room_no,
                "invigilator": {
                    "id": duty.invigilator.id,
                    "short_name": duty.invigilator.short_name,
                    "name": duty.invigilator.name,
                },
                "duty_from": duty.duty_from,
                "duty_to": duty.duty_to,
                "status": duty.status,
            }
            for duty in assigned
        ],
    }


def ensure_room_access(user, room_no):
    """Admins reach every room; an invigilator only the rooms they have a duty in."""
    if user.role_name == Role.ADMIN:
        return
    has_duty = InvigilatorDuty.objects.filter(
        invigilator__user=user,
        invigilator__is_deleted=False,
        invigilator__is_active=True,
        room_no=room_no,
    ).exists()
    if not has_duty:
        raise Forbidden("You are not assigned to this room")
