from datetime import date

from django.db import transaction
from django.test import TestCase

from exam_api.models import SequenceCounter
from exam_api.sequences import issue_codes, next_application_no, next_registration_code
from exam_api.tests.factories import make_student


class RegistrationCodeTest(TestCase):
    def test_first_code_starts_at_1000(self):
        self.assertEqual(next_registration_code(), "PPM1000")

    def test_code_follows_greatest_active_code(self):
        make_student(registration_code="PPM1000")
        make_student(registration_code="PPM1001")
        self.assertEqual(next_registration_code(), "PPM1002")

    def test_numeric_order_across_digit_lengths(self):
        """PPM10000 is greater than PPM9999 even though it sorts lower as text"""
        make_student(registration_code="PPM9999")
        make_student(registration_code="PPM10000")
        self.assertEqual(next_registration_code(), "PPM10001")

    def test_codes_below_start_are_ignored(self):
        make_student(registration_code="PPM999")
        self.assertEqual(next_registration_code(), "PPM1000")

    def test_unparsable_code_restarts_at_1000(self):
        make_student(registration_code="PPMX12")
        self.assertEqual(next_registration_code(), "PPM1000")

    def test_deleted_students_do_not_count(self):
        make_student(registration_code="PPM1000")
        make_student(registration_code="PPM1001", is_deleted=True)
        self.assertEqual(next_registration_code(), "PPM1001")


class ApplicationNumberTest(TestCase):
    def test_first_number_of_month(self):
        self.assertEqual(next_application_no(date(2024, 3, 15)), "APP24030001")

    def test_sequence_continues_within_month(self):
        make_student(application_no="APP24030007")
        self.assertEqual(next_application_no(date(2024, 3, 20)), "APP24030008")

    def test_sequence_restarts_each_month(self):
        make_student(application_no="APP24030007")
        self.assertEqual(next_application_no(date(2024, 4, 1)), "APP24040001")

    def test_year_is_part_of_prefix(self):
        make_student(application_no="APP24030007")
        self.assertEqual(next_application_no(date(2025, 3, 1)), "APP25030001")

    def test_month_past_9999_keeps_counting(self):
        make_student(application_no="APP24039999")
        self.assertEqual(next_application_no(date(2024, 3, 31)), "APP240310000")

    def test_five_digit_suffix_is_the_greatest(self):
        """APP240310000 is greater than APP24039999 even though it sorts lower as text"""
        make_student(application_no="APP24039999")
        make_student(application_no="APP240310000")
        self.assertEqual(next_application_no(date(2024, 3, 31)), "APP240310001")


class IssueCodesTest(TestCase):
    def test_counters_record_issued_values(self):
        make_student(registration_code="PPM1004", application_no="APP24050002")

        with transaction.atomic():
            codes = issue_codes(date(2024, 5, 9))

        self.assertEqual(codes, ("PPM1005", "APP24050003"))
        self.assertEqual(SequenceCounter.objects.get(name=SequenceCounter.REGISTRATION).value, 1005)
        self.assertEqual(
            SequenceCounter.objects.get(name=SequenceCounter.application_namespace("2405")).value,
            3,
        )

    def test_counter_follows_five_digit_suffix(self):
        make_student(application_no="APP24039999")

        with transaction.atomic():
            _, application_no = issue_codes(date(2024, 3, 31))

        self.assertEqual(application_no, "APP240310000")
        self.assertEqual(
            SequenceCounter.objects.get(name=SequenceCounter.application_namespace("2403")).value,
            10000,
        )
