# exam_api/ranking.py
import logging

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from .exceptions import InvalidInput, NotFound
from .lifecycle import PASS_MARK, result_status_for
from .models import ExamResult, Student

logger = logging.getLogger(__name__)

SCHOLARSHIP_BY_RANK = {1: "Gold", 2: "Silver", 3: "Bronze"}
COACHING_RANK_LIMIT = 100


def _ranked_queryset():
    return Student.objects.find_active(exam_marks__gt=0)


def recompute_ranks():
    """
    Rank every active student with marks, highest marks first.

    Equal marks share the rank of the first student of the tie and the
    position counter still advances once per student, so marks
    90, 80, 80, 80, 50 rank as 1, 2, 2, 2, 5. Earlier registrations come
    first within a tie.

    Students whose marks went back to 0 lose any rank, scholarship and
    coaching flag left over from an earlier run.

    Returns the number of students ranked.
    """
    now = timezone.now()
    with transaction.atomic():
        Student.objects.find_active(exam_marks=0, rank__gt=0).update(
            rank=0, scholarship="", ias_coaching=False, updated_at=now
        )

        students = list(
            _ranked_queryset()
            .select_for_update()
            .order_by("-exam_marks", "created_at", "id")
        )

        previous_marks = None
        previous_rank = 0
        for position, student in enumerate(students, start=1):
            if student.exam_marks == previous_marks:
                rank = previous_rank
            else:
                rank = position
                previous_rank = rank
                previous_marks = student.exam_marks

            student.rank = rank
            student.scholarship = SCHOLARSHIP_BY_RANK.get(rank, "")
            student.ias_coaching = rank <= COACHING_RANK_LIMIT
            student.result_status = result_status_for(student.exam_marks)
            student.status = Student.RESULT_PUBLISHED
            student.updated_at = now

        Student.objects.bulk_update(
            students,
            ["rank", "scholarship", "ias_coaching", "result_status", "status", "updated_at"],
        )

    logger.info("Ranks and scholarships updated for %s student(s)", len(students))
    return len(students)


def get_top_performers(limit=10):
    # marks entered after the last recompute still carry rank 0
    return _ranked_queryset().order_by("-exam_marks", "created_at", "id")[:limit]


def generate_rank_list():
    """Recompute ranks and publish a result snapshot for every ranked student."""
    total_ranked = recompute_ranks()
    published_at = timezone.now()

    ranked = list(_ranked_queryset().order_by("rank", "created_at"))
    with transaction.atomic():
        ExamResult.objects.filter(student__is_deleted=False, student__exam_marks=0).delete()
        for student in ranked:
            ExamResult.objects.update_or_create(
                registration_code=student.registration_code,
                defaults={
                    "student": student,
                    "exam_marks": student.exam_marks,
                    "total_marks": student.total_marks,
                    "rank": student.rank,
                    "is_qualified": student.result_status == Student.PASSED,
                    "scholarship_type": student.scholarship,
                    "ias_coaching": student.ias_coaching,
                    "published_at": published_at,
                },
            )

    return {
        "total_ranked": total_ranked,
        "top_performers": ranked[:10],
        "scholarship_winners": [s for s in ranked if s.scholarship][:3],
        "ias_eligible": sum(1 for s in ranked if s.ias_coaching),
    }


def _student_summary(student):
    return {
        "name": student.name,
        "father_name": student.father_name,
        "studying_class": student.studying_class,
        "school_name": student.school_name,
        "room_no": student.room_no,
        "seat_no": student.seat_no,
        "phone_no": student.phone_no,
    }


def result_for_code(code):
    """Look up a result by registration code or application number."""
    published = (
        ExamResult.objects.select_related("student")
        .filter(registration_code=code, student__is_deleted=False)
        .first()
    )
    if published:
        return {
            "result": {
                "registration_code": published.registration_code,
                "exam_marks": published.exam_marks,
                "total_marks": published.total_marks,
                "rank": published.rank,
                "is_qualified": published.is_qualified,
                "scholarship_type": published.scholarship_type,
                "ias_coaching": published.ias_coaching,
                "published_at": published.published_at,
            },
            "student": _student_summary(published.student),
            "source": "published",
        }

    student = Student.objects.find_active().filter(
        Q(registration_code=code) | Q(application_no=code)
    ).first()
    if student is None:
        raise NotFound("Student not found")

    return {
        "result": {
            "registration_code": student.registration_code,
            "exam_marks": student.exam_marks,
            "total_marks": student.total_marks,
            "percentage": student.percentage,
            "rank": student.rank,
            "is_qualified": student.exam_marks >= PASS_MARK,
            "scholarship_type": student.scholarship,
            "ias_coaching": student.ias_coaching,
        },
        "student": _student_summary(student),
        "source": "student",
    }


def _result_row(student):
    return {
        "name": student.name,
        "registration_code": student.registration_code,
        "application_no": student.application_no,
        "studying_class": student.studying_class,
        "room_no": student.room_no,
        "seat_no": student.seat_no,
        "exam_marks": student.exam_marks,
        "total_marks": student.total_marks,
        "percentage": student.percentage,
        "rank": student.rank,
        "result_status": student.result_status,
        "scholarship": student.scholarship,
        "ias_coaching": student.ias_coaching,
        "is_qualified": student.exam_marks >= PASS_MARK,
    }


def results_for_phone(phone_no):
    """Results of every active student registered from ``phone_no``."""
    if not (phone_no.isdigit() and len(phone_no) == 10):
        raise InvalidInput("Please enter a valid 10-digit phone number")

    students = Student.objects.find_active(phone_no=phone_no).order_by("-created_at")
    if not students:
        raise NotFound("No students found for this phone number")
    return [_result_row(student) for student in students]


def results_for_room(room_no):
    """Seat-ordered results of one room with a pass/fail summary."""
    students = list(Student.objects.find_active(room_no=room_no).order_by("seat_no"))
    if not students:
        raise NotFound(f"No students found in room {room_no}")

    with_marks = [s for s in students if s.exam_marks > 0]
    top = max(with_marks, key=lambda s: s.exam_marks, default=None)
    return {
        "room_no": room_no,
        "students": [_result_row(student) for student in students],
        "stats": {
            "total_students": len(students),
            "marks_entered": len(with_marks),
            "passed": sum(1 for s in with_marks if s.exam_marks >= PASS_MARK),
            "failed": sum(1 for s in with_marks if s.exam_marks < PASS_MARK),
            "top_student": _result_row(top) if top else None,
        },
    }
