from datetime import date
from unittest import mock

from django.test import TestCase

from account.models import User
from exam_api import allocation, lifecycle
from exam_api.exceptions import Conflict, InvalidInput, NotFound
from exam_api.models import Student
from exam_api.tests.factories import fill_room, make_student, student_payload


@mock.patch("exam_api.lifecycle.send_registration_sms")
class RegisterTest(TestCase):
    def test_register_assigns_codes_and_seat(self, send_sms):
        student = lifecycle.register(student_payload(), now=date(2024, 6, 10))

        self.assertEqual(student.registration_code, "PPM1000")
        self.assertEqual(student.application_no, "APP24060001")
        self.assertEqual((student.room_no, student.seat_no), (1, 1))
        self.assertEqual(student.status, Student.REGISTERED)
        self.assertEqual(student.result_status, Student.PENDING)
        self.assertEqual(student.village, "Kakkanad")
        send_sms.assert_called_once_with(student)

    def test_consecutive_registrations(self, send_sms):
        first = lifecycle.register(student_payload(), now=date(2024, 6, 10))
        second = lifecycle.register(student_payload(), now=date(2024, 6, 11))

        self.assertEqual(second.registration_code, "PPM1001")
        self.assertEqual(second.application_no, "APP24060002")
        self.assertEqual((second.room_no, second.seat_no), (first.room_no, 2))

    def test_twenty_first_student_opens_room_two(self, send_sms):
        fill_room(1, range(1, 21))
        student = lifecycle.register(student_payload())
        self.assertEqual((student.room_no, student.seat_no), (2, 1))

    def test_invalid_payload(self, send_sms):
        with self.assertRaises(InvalidInput) as ctx:
            lifecycle.register(student_payload(aadhaar_no="1234"))

        self.assertIn("aadhaar_no", ctx.exception.detail)
        self.assertFalse(Student.objects.exists())
        send_sms.assert_not_called()

    def test_invalid_address(self, send_sms):
        payload = student_payload()
        payload["address"]["pin_code"] = "6820"
        with self.assertRaises(InvalidInput):
            lifecycle.register(payload)

    def test_duplicate_aadhaar(self, send_sms):
        lifecycle.register(student_payload(aadhaar_no="111122223333"))
        with self.assertRaises(Conflict):
            lifecycle.register(student_payload(aadhaar_no="111122223333"))

    def test_aadhaar_of_deleted_student_can_register_again(self, send_sms):
        make_student(aadhaar_no="111122223333", is_deleted=True)
        student = lifecycle.register(student_payload(aadhaar_no="111122223333"))
        self.assertFalse(student.is_deleted)

    def test_registrations_from_phone(self, send_sms):
        lifecycle.register(student_payload(phone_no="9000000001"))
        lifecycle.register(student_payload(phone_no="9000000001"))
        lifecycle.register(student_payload(phone_no="9000000002"))
        self.assertEqual(lifecycle.registrations_from_phone("9000000001"), 2)


@mock.patch("exam_api.lifecycle.send_registration_sms")
class SoftDeleteRestoreTest(TestCase):
    def setUp(self):
        self.admin = User.objects.create_user(email="admin@example.com", name="Admin", password="pass12345")

    def test_soft_delete_rewrites_codes_and_compacts_room(self, send_sms):
        first = lifecycle.register(student_payload())
        second = lifecycle.register(student_payload())
        third = lifecycle.register(student_payload())

        deleted = lifecycle.soft_delete(first.id, actor=self.admin, reason="Duplicate entry")

        self.assertTrue(deleted.is_deleted)
        self.assertRegex(deleted.registration_code, r"^DELPPM1000-\d+$")
        self.assertTrue(deleted.application_no.startswith(f"DEL{first.application_no}-"))
        self.assertEqual(deleted.original_registration_code, "PPM1000")
        self.assertEqual(deleted.deleted_by, self.admin)
        self.assertEqual(deleted.delete_reason, "Duplicate entry")

        second.refresh_from_db()
        third.refresh_from_db()
        self.assertEqual((second.seat_no, third.seat_no), (1, 2))

    def test_soft_delete_missing_or_deleted(self, send_sms):
        student = lifecycle.register(student_payload())
        lifecycle.soft_delete(student.id)

        with self.assertRaises(NotFound):
            lifecycle.soft_delete(student.id)
        with self.assertRaises(NotFound):
            lifecycle.soft_delete(999999)

    def test_soft_delete_then_restore(self, send_sms):
        student = lifecycle.register(student_payload())
        codes = (student.registration_code, student.application_no)

        lifecycle.soft_delete(student.id, reason="Test")
        restored = lifecycle.restore(student.id)

        self.assertFalse(restored.is_deleted)
        self.assertEqual((restored.registration_code, restored.application_no), codes)
        self.assertIsNone(restored.deleted_at)
        self.assertIsNone(restored.deleted_by)
        self.assertEqual(restored.delete_reason, "")
        self.assertEqual((restored.room_no, restored.seat_no), (1, 1))

    def test_restore_gets_fresh_seat(self, send_sms):
        first = lifecycle.register(student_payload())
        lifecycle.register(student_payload())
        lifecycle.register(student_payload())

        lifecycle.soft_delete(first.id)
        restored = lifecycle.restore(first.id)

        self.assertEqual((restored.room_no, restored.seat_no), (1, 3))

    def test_restore_conflicts_when_code_was_reissued(self, send_sms):
        lifecycle.register(student_payload())
        second = lifecycle.register(student_payload())

        lifecycle.soft_delete(second.id)
        reissued = lifecycle.register(student_payload())
        self.assertEqual(reissued.registration_code, "PPM1001")

        with self.assertRaises(Conflict):
            lifecycle.restore(second.id)
        second.refresh_from_db()
        self.assertTrue(second.is_deleted)

    def test_restore_conflicts_on_aadhaar(self, send_sms):
        student = make_student(aadhaar_no="555566667777", room_no=1, seat_no=1)
        lifecycle.soft_delete(student.id)
        make_student(aadhaar_no="555566667777", room_no=1, seat_no=1)

        with self.assertRaises(Conflict):
            lifecycle.restore(student.id)

    def test_restore_active_student(self, send_sms):
        student = lifecycle.register(student_payload())
        with self.assertRaises(NotFound):
            lifecycle.restore(student.id)

    def test_restore_without_captured_originals(self, send_sms):
        student = make_student(
            registration_code="DELPPM1003-1718000000000",
            application_no="DELAPP24060004-1718000000000",
            is_deleted=True,
        )

        restored = lifecycle.restore(student.id)

        self.assertEqual(restored.registration_code, "PPM1003")
        self.assertEqual(restored.application_no, "APP24060004")

    def test_get_deleted_students(self, send_sms):
        kept = lifecycle.register(student_payload())
        removed = lifecycle.register(student_payload())
        lifecycle.soft_delete(removed.id)

        deleted = list(lifecycle.get_deleted_students())

        self.assertEqual(deleted, [Student.objects.find_any().get(pk=removed.id)])
        self.assertNotIn(kept, deleted)


@mock.patch("exam_api.lifecycle.send_registration_sms")
class HardDeleteTest(TestCase):
    def test_hard_delete_requires_soft_delete_first(self, send_sms):
        student = lifecycle.register(student_payload())
        with self.assertRaises(NotFound):
            lifecycle.hard_delete(student.id)
        self.assertTrue(Student.objects.find_active(pk=student.id).exists())

    def test_hard_delete_removes_row(self, send_sms):
        student = lifecycle.register(student_payload())
        lifecycle.soft_delete(student.id)

        removed = lifecycle.hard_delete(student.id)

        self.assertEqual(removed, {"id": student.id, "registration_code": "PPM1000"})
        self.assertFalse(Student.objects.find_any(pk=student.id).exists())

    def test_hard_delete_missing(self, send_sms):
        with self.assertRaises(NotFound):
            lifecycle.hard_delete(424242)

    def test_hard_delete_compacts_remaining_occupants(self, send_sms):
        first = make_student(room_no=1, seat_no=1)
        third = make_student(room_no=1, seat_no=3)
        stale = make_student(room_no=1, seat_no=2, is_deleted=True)

        lifecycle.hard_delete(stale.id)

        first.refresh_from_db()
        third.refresh_from_db()
        self.assertEqual((first.seat_no, third.seat_no), (1, 2))
        self.assertEqual(Student.objects.find_any(room_no=1).count(), 2)


@mock.patch("exam_api.lifecycle.send_registration_sms")
class RegisterRetryTest(TestCase):
    def setUp(self):
        self.occupant = make_student(room_no=1, seat_no=1)

    def test_taken_seat_is_retried_with_a_fresh_scan(self, send_sms):
        real_find = allocation.find_available_slot
        calls = []

        def stale_then_real():
            calls.append(1)
            if len(calls) == 1:
                return {"room_no": 1, "seat_no": 1}
            return real_find()

        with mock.patch("exam_api.allocation.find_available_slot", side_effect=stale_then_real):
            student = lifecycle.register(student_payload())

        self.assertEqual(len(calls), 2)
        self.assertEqual((student.room_no, student.seat_no), (1, 2))
        self.assertEqual(student.registration_code, "PPM1000")
        send_sms.assert_called_once_with(student)

    def test_conflict_after_every_attempt_collides(self, send_sms):
        with mock.patch(
            "exam_api.allocation.find_available_slot",
            return_value={"room_no": 1, "seat_no": 1},
        ) as find_slot:
            with self.assertRaises(Conflict):
                lifecycle.register(student_payload())

        self.assertEqual(find_slot.call_count, lifecycle.MAX_REGISTRATION_ATTEMPTS)
        self.assertEqual(Student.objects.find_any().count(), 1)
        send_sms.assert_not_called()


@mock.patch("exam_api.lifecycle.send_registration_sms")
class SeatDensityTest(TestCase):
    def assertRoomsDense(self):
        rooms = {}
        for room_no, seat_no in Student.objects.find_active().values_list("room_no", "seat_no"):
            rooms.setdefault(room_no, []).append(seat_no)
        for room_no, seats in rooms.items():
            self.assertEqual(sorted(seats), list(range(1, len(seats) + 1)), f"room {room_no}")

    def test_mixed_lifecycle_keeps_seats_dense(self, send_sms):
        filled = fill_room(1, range(1, 20))
        last_in_room_one = lifecycle.register(student_payload())
        moved_out = lifecycle.register(student_payload())
        lifecycle.register(student_payload())
        self.assertEqual((moved_out.room_no, moved_out.seat_no), (2, 1))
        self.assertRoomsDense()

        lifecycle.soft_delete(filled[4].id)
        self.assertRoomsDense()

        lifecycle.soft_delete(moved_out.id)
        self.assertRoomsDense()

        restored = lifecycle.restore(moved_out.id)
        self.assertEqual((restored.room_no, restored.seat_no), (1, 20))
        self.assertRoomsDense()

        late = lifecycle.register(student_payload())
        self.assertEqual((late.room_no, late.seat_no), (2, 2))
        self.assertRoomsDense()

        lifecycle.hard_delete(filled[4].id)
        lifecycle.soft_delete(last_in_room_one.id)
        lifecycle.hard_delete(last_in_room_one.id)
        self.assertRoomsDense()
        self.assertEqual(Student.objects.find_active(room_no=1).count(), 19)
        self.assertEqual(Student.objects.find_active(room_no=2).count(), 2)


class MarksTest(TestCase):
    def setUp(self):
        self.student = make_student(registration_code="PPM1000", room_no=1, seat_no=1)

    def test_pass_mark_boundary(self):
        lifecycle.enter_marks(self.student.id, 40)
        self.student.refresh_from_db()
        self.assertEqual(self.student.result_status, Student.PASSED)
        self.assertEqual(self.student.status, Student.EXAM_COMPLETED)

        lifecycle.enter_marks(self.student.id, 39)
        self.student.refresh_from_db()
        self.assertEqual(self.student.result_status, Student.FAILED)
        self.assertEqual(self.student.exam_marks, 39)

    def test_marks_out_of_range(self):
        for marks in (-1, 101, "50", None):
            with self.assertRaises(InvalidInput):
                lifecycle.enter_marks(self.student.id, marks)

    def test_marks_for_deleted_student(self):
        deleted = make_student(is_deleted=True)
        with self.assertRaises(NotFound):
            lifecycle.enter_marks(deleted.id, 50)

    def test_bulk_marks_reports_each_entry(self):
        make_student(registration_code="PPM1001", room_no=1, seat_no=2)
        make_student(registration_code="PPM1002", room_no=2, seat_no=1)

        results = lifecycle.bulk_enter_marks(1, [
            {"registration_code": "PPM1000", "marks": 75},
            {"registration_code": "PPM1001", "marks": 120},
            {"registration_code": "PPM1002", "marks": 60},
            {"registration_code": "PPM9999", "marks": 50},
        ])

        self.assertEqual([r["registration_code"] for r in results["successful"]], ["PPM1000"])
        self.assertEqual(
            [r["registration_code"] for r in results["failed"]],
            ["PPM1001", "PPM1002", "PPM9999"],
        )
        self.student.refresh_from_db()
        self.assertEqual(self.student.exam_marks, 75)


class DeletedMarkerTest(TestCase):
    def test_strip_deleted_marker(self):
        self.assertEqual(lifecycle._strip_deleted_marker("DELPPM1000-1718000000000"), "PPM1000")
        self.assertEqual(lifecycle._strip_deleted_marker("DELPPM1000"), "PPM1000")
        self.assertEqual(lifecycle._strip_deleted_marker("PPM1000"), "PPM1000")
        self.assertIsNone(lifecycle._strip_deleted_marker(None))
