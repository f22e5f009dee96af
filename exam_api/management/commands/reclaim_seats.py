from django.core.management.base import BaseCommand
from django.db.models import Count, Max, Min

from exam_api.allocation import reassign_seats
from exam_api.models import Student


class Command(BaseCommand):
    help = "Close seat gaps so every room's active students sit in seats 1..k."

    def add_arguments(self, parser):
        parser.add_argument(
            "--room",
            type=int,
            help="Only reclaim seats in this room."
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show which rooms have gaps but do not modify any data."
        )

    def handle(self, *args, **options):
        dry_run = options.get("dry_run")
        room = options.get("room")

        rooms = (
            Student.objects.find_active(room_no__isnull=False)
            .values("room_no")
            .annotate(count=Count("id"), first_seat=Min("seat_no"), last_seat=Max("seat_no"))
            .order_by("room_no")
        )
        if room is not None:
            rooms = rooms.filter(room_no=room)

        gaps = [r for r in rooms if r["first_seat"] != 1 or r["last_seat"] != r["count"]]
        if not gaps:
            self.stdout.write(self.style.SUCCESS("No seat gaps found."))
            return

        moved = 0
        for r in gaps:
            if dry_run:
                self.stdout.write(
                    f"Room {r['room_no']}: {r['count']} student(s) spread over seats "
                    f"{r['first_seat']}..{r['last_seat']}"
                )
                continue
            count = reassign_seats(r["room_no"])
            moved += count
            self.stdout.write(f"Room {r['room_no']}: {count} student(s) moved")

        self.stdout.write(
            self.style.SUCCESS(
                f"Finished. {len(gaps)} room(s) {'would be ' if dry_run else ''}compacted"
                + ("." if dry_run else f", {moved} student(s) moved.")
            )
        )
