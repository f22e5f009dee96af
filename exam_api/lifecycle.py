# exam_api/lifecycle.py
"""
Student lifecycle: registration, soft delete, restore, permanent removal and
mark entry.

Active students hold unique registration codes, application numbers and
room/seat slots. A soft delete rewrites the codes to ``DEL<code>-<epoch_ms>``
so the originals can be reissued, then closes the gap left in the room. A
restore takes the original codes back when nobody else holds them and always
gets a freshly allocated seat.
"""
import logging

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from . import allocation, sequences
from .exceptions import Conflict, ExamServiceError, Internal, InvalidInput, NotFound
from .models import Student
from .serializers import StudentRegistrationSerializer
from .services import send_registration_sms

logger = logging.getLogger(__name__)

MAX_REGISTRATION_ATTEMPTS = 3
DELETED_PREFIX = "DEL"
PASS_MARK = 40


def get_active_student(student_id, for_update=False):
    queryset = Student.objects.find_active()
    if for_update:
        queryset = queryset.select_for_update()
    try:
        return queryset.get(pk=student_id)
    except Student.DoesNotExist:
        raise NotFound("Student not found")


def _get_deleted_student(student_id):
    try:
        return Student.objects.find_any(is_deleted=True).select_for_update().get(pk=student_id)
    except Student.DoesNotExist:
        raise NotFound("Deleted student not found")


def _deleted_code(code, stamp):
    return f"{DELETED_PREFIX}{code}-{stamp}"


def _strip_deleted_marker(code):
    """``DELPPM1000-1718000000000`` -> ``PPM1000``."""
    if not code or not code.startswith(DELETED_PREFIX):
        return code
    code = code[len(DELETED_PREFIX):]
    head, sep, tail = code.rpartition("-")
    if sep and tail.isdigit():
        return head
    return code


def _validate_marks(marks):
    if isinstance(marks, bool) or not isinstance(marks, int) or not 0 <= marks <= 100:
        raise InvalidInput("Please enter valid marks between 0 and 100")


def result_status_for(marks):
    return Student.PASSED if marks >= PASS_MARK else Student.FAILED


# registration ---------------------------------------------------------------

def register(data, actor=None, now=None):
    """Validate ``data`` and create a student with codes and a seat.

    A lost race on a code or seat shows up as an ``IntegrityError`` from the
    partial unique indexes; the whole attempt is rolled back and retried with
    a fresh scan.
    """
    serializer = StudentRegistrationSerializer(data=data)
    if not serializer.is_valid():
        raise InvalidInput(serializer.errors)
    fields = serializer.to_model_fields()

    student = None
    for attempt in range(1, MAX_REGISTRATION_ATTEMPTS + 1):
        if Student.objects.find_active(aadhaar_no=fields["aadhaar_no"]).exists():
            raise Conflict("Aadhaar number already registered")

        try:
            with transaction.atomic():
                student = Student(created_by=actor, **fields)
                student.registration_code, student.application_no = sequences.issue_codes(now)
                slot = allocation.find_available_slot()
                student.room_no = slot["room_no"]
                student.seat_no = slot["seat_no"]
                student.save()
            break
        except IntegrityError:
            student = None
            logger.warning(
                "Registration attempt %s/%s hit a duplicate code or seat",
                attempt,
                MAX_REGISTRATION_ATTEMPTS,
            )
        except DatabaseError as exc:
            logger.exception("Registration failed")
            raise Internal() from exc

    if student is None:
        raise Conflict("Could not reserve a unique code and seat, please retry")

    logger.info(
        "Registered %s (%s) in room %s seat %s",
        student.registration_code,
        student.application_no,
        student.room_no,
        student.seat_no,
    )
    send_registration_sms(student)
    return student


def registrations_from_phone(phone_no):
    return Student.objects.find_active(phone_no=phone_no).count()


def get_by_code(code):
    """Active student holding ``code`` as registration code or application number."""
    student = Student.objects.find_active().filter(
        Q(registration_code__iexact=code) | Q(application_no__iexact=code)
    ).first()
    if student is None:
        raise NotFound("Student not found")
    return student


def search_students(search=None, studying_class=None, room_no=None):
    students = Student.objects.find_active()
    if search:
        students = students.filter(
            Q(name__icontains=search)
            | Q(registration_code__icontains=search)
            | Q(application_no__icontains=search)
            | Q(phone_no__icontains=search)
            | Q(village__icontains=search)
            | Q(father_name__icontains=search)
        )
    if studying_class:
        students = students.filter(studying_class=studying_class)
    if room_no:
        students = students.filter(room_no=room_no)
    return students.order_by("room_no", "seat_no", "-created_at")


# soft delete / restore / hard delete -----------------------------------------

@transaction.atomic
def soft_delete(student_id, actor=None, reason=""):
    student = get_active_student(student_id, for_update=True)

    if not student.original_registration_code:
        student.original_registration_code = student.registration_code
    if not student.original_application_no:
        student.original_application_no = student.application_no

    now = timezone.now()
    stamp = int(now.timestamp() * 1000)
    if student.registration_code:
        student.registration_code = _deleted_code(student.registration_code, stamp)
    if student.application_no:
        student.application_no = _deleted_code(student.application_no, stamp)

    student.is_deleted = True
    student.deleted_at = now
    student.deleted_by = actor
    student.delete_reason = reason or ""
    student.save()

    # room_no/seat_no stay on the deleted row for audit only
    allocation.reassign_seats(student.room_no)

    logger.info(
        "Soft deleted student %s (%s), reason: %s",
        student.pk,
        student.original_registration_code,
        student.delete_reason or "-",
    )
    return student


@transaction.atomic
def restore(student_id):
    student = _get_deleted_student(student_id)

    registration_code = student.original_registration_code or _strip_deleted_marker(student.registration_code)
    application_no = student.original_application_no or _strip_deleted_marker(student.application_no)

    active = Student.objects.find_active()
    if registration_code and active.filter(registration_code=registration_code).exists():
        raise Conflict(f"Registration code {registration_code} is already in use")
    if application_no and active.filter(application_no=application_no).exists():
        raise Conflict(f"Application number {application_no} is already in use")
    if active.filter(aadhaar_no=student.aadhaar_no).exists():
        raise Conflict("Aadhaar number already registered to another student")

    slot = allocation.find_available_slot()

    student.registration_code = registration_code
    student.application_no = application_no
    student.room_no = slot["room_no"]
    student.seat_no = slot["seat_no"]
    student.is_deleted = False
    student.deleted_at = None
    student.deleted_by = None
    student.delete_reason = ""

    try:
        with transaction.atomic():
            student.save()
    except IntegrityError:
        raise Conflict("Seat was taken concurrently, please retry")

    logger.info(
        "Restored student %s as %s in room %s seat %s",
        student.pk,
        student.registration_code,
        student.room_no,
        student.seat_no,
    )
    return student


@transaction.atomic
def hard_delete(student_id):
    student = _get_deleted_student(student_id)
    room_no = student.room_no
    code = student.original_registration_code or student.registration_code

    student.delete()
    if room_no:
        allocation.reassign_seats(room_no)

    logger.info("Permanently deleted student %s (%s)", student_id, code)
    return {"id": student_id, "registration_code": code}


def get_deleted_students():
    return Student.objects.find_any(is_deleted=True).select_related("deleted_by").order_by("-deleted_at")


# mark entry -----------------------------------------------------------------

def _apply_marks(student, marks):
    student.exam_marks = marks
    student.status = Student.EXAM_COMPLETED
    student.result_status = result_status_for(marks)
    student.save(update_fields=["exam_marks", "status", "result_status", "updated_at"])
    return student


def enter_marks(student_id, marks):
    _validate_marks(marks)
    student = get_active_student(student_id)
    _apply_marks(student, marks)
    logger.info("Marks %s entered for %s", marks, student.registration_code)
    return student


def bulk_enter_marks(room_no, entries):
    """Enter marks for several students of one room; failures are reported
    per entry and never abort the rest."""
    results = {"successful": [], "failed": []}

    for entry in entries:
        code = entry.get("registration_code")
        marks = entry.get("marks")
        try:
            _validate_marks(marks)
            student = Student.objects.find_active(registration_code=code, room_no=room_no).first()
            if student is None:
                raise NotFound(f"Student {code} not found in room {room_no}")
            _apply_marks(student, marks)
        except ExamServiceError as exc:
            results["failed"].append({
                "registration_code": code,
                "marks": marks,
                "error": str(exc.detail),
            })
            continue

        results["successful"].append({
            "registration_code": student.registration_code,
            "name": student.name,
            "seat_no": student.seat_no,
            "exam_marks": student.exam_marks,
            "result_status": student.result_status,
        })

    logger.info(
        "Bulk marks for room %s: %s saved, %s failed",
        room_no,
        len(results["successful"]),
        len(results["failed"]),
    )
    return results
