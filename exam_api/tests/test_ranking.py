from django.test import TestCase

from exam_api import ranking
from exam_api.exceptions import NotFound
from exam_api.models import ExamResult, Student
from exam_api.tests.factories import make_student


class RecomputeRanksTest(TestCase):
    def _students_with_marks(self, marks):
        return [
            make_student(registration_code=f"PPM{1000 + i}", exam_marks=m)
            for i, m in enumerate(marks)
        ]

    def test_ties_share_rank_and_counter_advances(self):
        students = self._students_with_marks([90, 80, 80, 80, 50])

        updated = ranking.recompute_ranks()

        self.assertEqual(updated, 5)
        for s in students:
            s.refresh_from_db()
        self.assertEqual([s.rank for s in students], [1, 2, 2, 2, 5])
        self.assertEqual(
            [s.scholarship for s in students],
            ["Gold", "Silver", "Silver", "Silver", ""],
        )
        self.assertTrue(all(s.ias_coaching for s in students))
        self.assertTrue(all(s.status == Student.RESULT_PUBLISHED for s in students))

    def test_registration_order_is_irrelevant_for_rank(self):
        low, high = self._students_with_marks([45, 95])

        ranking.recompute_ranks()

        low.refresh_from_db()
        high.refresh_from_db()
        self.assertEqual((high.rank, low.rank), (1, 2))

    def test_pass_boundary(self):
        passed, failed = self._students_with_marks([40, 39])

        ranking.recompute_ranks()

        passed.refresh_from_db()
        failed.refresh_from_db()
        self.assertEqual(passed.result_status, Student.PASSED)
        self.assertEqual(failed.result_status, Student.FAILED)

    def test_unmarked_and_deleted_students_are_not_ranked(self):
        ranked = make_student(exam_marks=70)
        unmarked = make_student(exam_marks=0)
        deleted = make_student(exam_marks=99, is_deleted=True)

        self.assertEqual(ranking.recompute_ranks(), 1)

        ranked.refresh_from_db()
        unmarked.refresh_from_db()
        deleted.refresh_from_db()
        self.assertEqual(ranked.rank, 1)
        self.assertEqual(unmarked.rank, 0)
        self.assertEqual(deleted.rank, 0)

    def test_coaching_limited_to_top_hundred(self):
        students = self._students_with_marks([100 - i // 2 for i in range(102)])

        ranking.recompute_ranks()

        last = Student.objects.get(pk=students[-1].pk)
        self.assertEqual(last.rank, 101)
        self.assertFalse(last.ias_coaching)
        self.assertTrue(Student.objects.get(pk=students[99].pk).ias_coaching)

    def test_top_performers(self):
        self._students_with_marks([60, 90, 75])
        ranking.recompute_ranks()

        top = list(ranking.get_top_performers(limit=2))

        self.assertEqual([s.exam_marks for s in top], [90, 75])

    def test_top_performers_include_marks_entered_after_ranking(self):
        self._students_with_marks([60, 90])
        ranking.recompute_ranks()
        late = make_student(registration_code="PPM2000", exam_marks=5)

        top = list(ranking.get_top_performers(limit=3))

        self.assertEqual([s.exam_marks for s in top], [90, 60, 5])
        self.assertEqual(top[-1], late)
        self.assertEqual(late.rank, 0)

    def test_marks_reset_to_zero_clear_previous_rank(self):
        first, second = self._students_with_marks([95, 80])
        ranking.recompute_ranks()
        Student.objects.filter(pk=first.pk).update(exam_marks=0)

        self.assertEqual(ranking.recompute_ranks(), 1)

        first.refresh_from_db()
        second.refresh_from_db()
        self.assertEqual((first.rank, first.scholarship, first.ias_coaching), (0, "", False))
        self.assertEqual((second.rank, second.scholarship), (1, "Gold"))


class RankListTest(TestCase):
    def setUp(self):
        self.gold = make_student(registration_code="PPM1000", exam_marks=88)
        self.silver = make_student(registration_code="PPM1001", exam_marks=72)
        self.failed = make_student(registration_code="PPM1002", exam_marks=20)

    def test_generate_rank_list_publishes_results(self):
        summary = ranking.generate_rank_list()

        self.assertEqual(summary["total_ranked"], 3)
        self.assertEqual(summary["ias_eligible"], 3)
        self.assertEqual(
            [s.registration_code for s in summary["scholarship_winners"]],
            ["PPM1000", "PPM1001", "PPM1002"],
        )
        result = ExamResult.objects.get(registration_code="PPM1002")
        self.assertEqual(result.rank, 3)
        self.assertFalse(result.is_qualified)
        self.assertEqual(result.scholarship_type, "Bronze")

    def test_generate_twice_updates_snapshot(self):
        ranking.generate_rank_list()
        Student.objects.filter(pk=self.failed.pk).update(exam_marks=95)

        ranking.generate_rank_list()

        self.assertEqual(ExamResult.objects.count(), 3)
        self.assertEqual(ExamResult.objects.get(registration_code="PPM1002").rank, 1)

    def test_reset_marks_withdraw_published_result(self):
        ranking.generate_rank_list()
        Student.objects.filter(pk=self.gold.pk).update(exam_marks=0)

        summary = ranking.generate_rank_list()

        self.assertEqual(summary["total_ranked"], 2)
        self.assertFalse(ExamResult.objects.filter(registration_code="PPM1000").exists())
        self.assertEqual(ExamResult.objects.get(registration_code="PPM1001").scholarship_type, "Gold")
        self.gold.refresh_from_db()
        self.assertEqual((self.gold.rank, self.gold.scholarship), (0, ""))

    def test_result_for_published_code(self):
        ranking.generate_rank_list()

        found = ranking.result_for_code("PPM1000")

        self.assertEqual(found["source"], "published")
        self.assertEqual(found["result"]["rank"], 1)
        self.assertEqual(found["student"]["name"], self.gold.name)

    def test_result_before_publishing(self):
        found = ranking.result_for_code(self.silver.application_no)

        self.assertEqual(found["source"], "student")
        self.assertEqual(found["result"]["registration_code"], "PPM1001")
        self.assertTrue(found["result"]["is_qualified"])
        self.assertEqual(found["result"]["percentage"], 72)

    def test_unknown_code(self):
        with self.assertRaises(NotFound):
            ranking.result_for_code("PPM4040")
