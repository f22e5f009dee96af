from django.core.management.base import BaseCommand

from exam_api.ranking import generate_rank_list, recompute_ranks


class Command(BaseCommand):
    help = "Recompute ranks, scholarships and coaching eligibility for all students with marks."

    def add_arguments(self, parser):
        parser.add_argument(
            "--publish",
            action="store_true",
            help="Also publish a result snapshot for every ranked student."
        )

    def handle(self, *args, **options):
        if options.get("publish"):
            summary = generate_rank_list()
            self.stdout.write(
                self.style.SUCCESS(
                    f"Published results for {summary['total_ranked']} student(s), "
                    f"{summary['ias_eligible']} eligible for coaching."
                )
            )
            return

        updated = recompute_ranks()
        self.stdout.write(self.style.SUCCESS(f"Ranks updated for {updated} student(s)."))
