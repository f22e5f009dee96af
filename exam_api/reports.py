# exam_api/reports.py
from datetime import timedelta

from django.db.models import Count
from django.utils import timezone

from .models import ExamInvigilator, Student

RECENT_STUDENTS = 10
TREND_DAYS = 7


def _breakdown(queryset, field):
    rows = queryset.values(field).annotate(count=Count("id")).order_by(field)
    return {row[field]: row["count"] for row in rows}


def dashboard_stats(today=None):
    """Counts and breakdowns for the admin dashboard, over active students only."""
    today = today or timezone.localdate()
    students = Student.objects.find_active()

    recent = students.order_by("-created_at", "-id")[:RECENT_STUDENTS]
    recent_data = [
        {
            "id": student.id,
            "name": student.name,
            "registration_code": student.registration_code,
            "studying_class": student.studying_class,
            "room_no": student.room_no,
            "seat_no": student.seat_no,
            "date": timezone.localtime(student.created_at).date(),
        }
        for student in recent
    ]

    trend_start = today - timedelta(days=TREND_DAYS - 1)
    trend = {trend_start + timedelta(days=offset): 0 for offset in range(TREND_DAYS)}
    for created_at in students.filter(created_at__date__gte=trend_start).values_list("created_at", flat=True):
        day = timezone.localtime(created_at).date()
        if day in trend:
            trend[day] += 1

    return {
        "counts": {
            "total_students": students.count(),
            "todays_registrations": trend[today],
            "total_invigilators": ExamInvigilator.objects.filter(is_deleted=False, is_active=True).count(),
            "rooms_occupied": students.filter(room_no__isnull=False).values("room_no").distinct().count(),
            "deleted_students": Student.objects.find_any(is_deleted=True).count(),
        },
        "gender": _breakdown(students, "gender"),
        "studying_class": _breakdown(students, "studying_class"),
        "medium": _breakdown(students, "medium"),
        "result_status": _breakdown(students, "result_status"),
        "registration_trend": [{"date": day, "count": count} for day, count in trend.items()],
        "recent_students": recent_data,
    }
