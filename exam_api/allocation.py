# exam_api/allocation.py
import logging
from itertools import groupby

from django.db import transaction
from django.db.models import Count, F, Max

from .models import ROOM_CAPACITY, Student

logger = logging.getLogger(__name__)


# room/seat helpers ----------------------------------------------------------

def find_available_slot():
    """Return ``{"room_no", "seat_no"}`` for the next registration.

    Freed seats in the lowest numbered room that is not full are used before
    a new room is opened. Seats stay dense after :func:`reassign_seats`, so the
    first gap found is normally ``occupied + 1``.
    """

    open_room = (
        Student.objects.find_active(room_no__isnull=False)
        .values("room_no")
        .annotate(occupied=Count("id"))
        .filter(occupied__lt=ROOM_CAPACITY)
        .order_by("room_no")
        .first()
    )

    if open_room:
        room_no = open_room["room_no"]
        taken = set(
            Student.objects.find_active(room_no=room_no).values_list("seat_no", flat=True)
        )
        for seat_no in range(1, ROOM_CAPACITY + 1):
            if seat_no not in taken:
                return {"room_no": room_no, "seat_no": seat_no}

    last_room = Student.objects.find_active().aggregate(last=Max("room_no"))["last"] or 0
    return {"room_no": last_room + 1, "seat_no": 1}


def reassign_seats(room_no):
    """Renumber the active students of ``room_no`` to seats ``1..k``.

    The room's rows are locked for the duration, so two reclamations of the
    same room run one after the other. Returns how many students moved.
    """

    if room_no is None:
        return 0

    moved = 0
    with transaction.atomic():
        students = list(
            Student.objects.find_active(room_no=room_no)
            .select_for_update()
            .order_by(F("seat_no").asc(nulls_last=True), "id")
        )
        # ascending order: every target seat is already vacated
        for position, student in enumerate(students, start=1):
            if student.seat_no != position:
                student.seat_no = position
                student.save(update_fields=["seat_no", "updated_at"])
                moved += 1

    if moved:
        logger.info("Reclaimed seats in room %s: %s student(s) moved", room_no, moved)
    return moved


def students_in_room(room_no):
    return Student.objects.find_active(room_no=room_no).order_by("seat_no")


def room_distribution():
    rows = (
        Student.objects.find_active(room_no__isnull=False)
        .order_by("room_no", "seat_no")
        .values("room_no", "seat_no", "name", "registration_code", "application_no")
    )

    distribution = []
    for room_no, members in groupby(rows, key=lambda row: row["room_no"]):
        students = [
            {
                "name": m["name"],
                "registration_code": m["registration_code"],
                "application_no": m["application_no"],
                "seat_no": m["seat_no"],
            }
            for m in members
        ]
        distribution.append({
            "room_no": room_no,
            "count": len(students),
            "capacity": ROOM_CAPACITY,
            "available_seats": ROOM_CAPACITY - len(students),
            "students": students,
        })

    return {
        "distribution": distribution,
        "total_students": Student.objects.find_active().count(),
        "rooms_occupied": len(distribution),
        "students_per_room": ROOM_CAPACITY,
    }
