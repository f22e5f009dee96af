# exam_api/views.py
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from django.utils.dateparse import parse_date
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from account.permissions import IsAdmin, IsAdminOrInvigilator

from . import allocation, duties, invigilators, lifecycle, ranking, reports, sequences
from .exceptions import InvalidInput
from .models import Student
from .pagination import StandardResultsSetPagination
from .serializers import (
    AttendanceSerializer,
    BulkMarksSerializer,
    DeletedInvigilatorSerializer,
    DeletedStudentSerializer,
    ExamInvigilatorSerializer,
    InvigilatorDutySerializer,
    MarksEntrySerializer,
    SoftDeleteSerializer,
    StudentSerializer,
    TopPerformerSerializer,
)
from .util import generate_qr_image, hall_ticket_verify_url


def _validated(serializer_class, data):
    serializer = serializer_class(data=data)
    if not serializer.is_valid():
        raise InvalidInput(serializer.errors)
    return serializer.validated_data


def _exam_date(value):
    try:
        exam_date = parse_date(value)
    except ValueError:
        exam_date = None
    if exam_date is None:
        raise InvalidInput("Please provide exam date as YYYY-MM-DD")
    return exam_date


# Registration ---------------------------------------------------------------

class RegisterStudentView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        student = lifecycle.register(request.data)
        return Response(
            {
                "message": "Registration successful",
                "student": StudentSerializer(student).data,
                "registrations_from_phone": lifecycle.registrations_from_phone(student.phone_no),
            },
            status=status.HTTP_201_CREATED,
        )


class NextCodesView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        return Response({
            "registration_code": sequences.next_registration_code(),
            "application_no": sequences.next_application_no(),
        })


class NextSlotView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        return Response(allocation.find_available_slot())


class StudentsByPhoneView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request, phone_no):
        students = Student.objects.find_active(phone_no=phone_no).order_by("-created_at")
        return Response({
            "count": students.count(),
            "students": StudentSerializer(students, many=True).data,
        })


class HallTicketQRView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request, code):
        student = get_object_or_404(Student.objects.find_active(), registration_code=code)
        response = HttpResponse(generate_qr_image(hall_ticket_verify_url(student)), content_type="image/png")
        response["Cache-Control"] = "no-store"
        return response


# Student lifecycle ----------------------------------------------------------

class SoftDeleteStudentView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def post(self, request, student_id):
        data = _validated(SoftDeleteSerializer, request.data)
        student = lifecycle.soft_delete(student_id, actor=request.user, reason=data["reason"])
        return Response(
            {
                "message": "Student deleted successfully",
                "student": DeletedStudentSerializer(student).data,
            },
            status=status.HTTP_200_OK,
        )


class RestoreStudentView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def post(self, request, student_id):
        student = lifecycle.restore(student_id)
        return Response(
            {
                "message": "Student restored successfully",
                "student": StudentSerializer(student).data,
            },
            status=status.HTTP_200_OK,
        )


class HardDeleteStudentView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def delete(self, request, student_id):
        removed = lifecycle.hard_delete(student_id)
        return Response({"message": "Student permanently deleted", **removed})


class DeletedStudentListView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def get(self, request):
        students = lifecycle.get_deleted_students()
        return Response({
            "count": students.count(),
            "students": DeletedStudentSerializer(students, many=True).data,
        })


class StudentListView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]
    pagination_class = StandardResultsSetPagination

    def get(self, request):
        room_no = request.query_params.get("room")
        if room_no and not room_no.isdigit():
            raise InvalidInput("room must be a number")

        students = lifecycle.search_students(
            search=request.query_params.get("search", "").strip(),
            studying_class=request.query_params.get("class"),
            room_no=int(room_no) if room_no else None,
        )

        paginator = self.pagination_class()
        page = paginator.paginate_queryset(students, request)
        return paginator.get_paginated_response(
            {
                "total_count": paginator.page.paginator.count,
                "students": StudentSerializer(page, many=True).data,
            }
        )


class StudentByCodeView(APIView):
    permission_classes = [IsAuthenticated, IsAdminOrInvigilator]

    def get(self, request, code):
        return Response(StudentSerializer(lifecycle.get_by_code(code)).data)


# Rooms ----------------------------------------------------------------------

class RoomDistributionView(APIView):
    permission_classes = [IsAuthenticated, IsAdminOrInvigilator]

    def get(self, request):
        return Response(allocation.room_distribution())


class StudentsByRoomView(APIView):
    permission_classes = [IsAuthenticated, IsAdminOrInvigilator]

    def get(self, request, room_no):
        duties.ensure_room_access(request.user, room_no)
        students = allocation.students_in_room(room_no)
        return Response({
            "room_no": room_no,
            "count": students.count(),
            "students": StudentSerializer(students, many=True).data,
        })


# Marks ----------------------------------------------------------------------

class EnterMarksView(APIView):
    permission_classes = [IsAuthenticated, IsAdminOrInvigilator]

    def post(self, request, student_id):
        data = _validated(MarksEntrySerializer, request.data)
        duties.ensure_room_access(request.user, lifecycle.get_active_student(student_id).room_no)
        student = lifecycle.enter_marks(student_id, data["marks"])
        return Response({
            "message": "Marks entered successfully",
            "student": {
                "id": student.id,
                "name": student.name,
                "registration_code": student.registration_code,
                "exam_marks": student.exam_marks,
                "result_status": student.result_status,
            },
        })


class BulkMarksView(APIView):
    permission_classes = [IsAuthenticated, IsAdminOrInvigilator]

    def post(self, request, room_no):
        duties.ensure_room_access(request.user, room_no)
        data = _validated(BulkMarksSerializer, request.data)
        results = lifecycle.bulk_enter_marks(room_no, data["marks_data"])
        return Response({
            "message": f"Marks saved for {len(results['successful'])} student(s)",
            **results,
        })


# Results --------------------------------------------------------------------

class RecomputeRanksView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def post(self, request):
        updated = ranking.recompute_ranks()
        return Response({"message": "Ranks updated", "updated": updated})


class GenerateRankListView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def post(self, request):
        summary = ranking.generate_rank_list()
        return Response({
            "message": "Rank list generated successfully",
            "total_ranked": summary["total_ranked"],
            "top_performers": TopPerformerSerializer(summary["top_performers"], many=True).data,
            "scholarship_winners": TopPerformerSerializer(summary["scholarship_winners"], many=True).data,
            "ias_eligible": summary["ias_eligible"],
        })


class TopPerformersView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        try:
            limit = int(request.query_params.get("limit", 10))
        except ValueError:
            raise InvalidInput("limit must be a number")
        performers = ranking.get_top_performers(max(1, min(limit, 100)))
        return Response(TopPerformerSerializer(performers, many=True).data)


class ResultByCodeView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request, code):
        return Response(ranking.result_for_code(code))


class ResultsByPhoneView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request, phone_no):
        results = ranking.results_for_phone(phone_no)
        return Response({"count": len(results), "results": results})


class ResultsByRoomView(APIView):
    permission_classes = [IsAuthenticated, IsAdminOrInvigilator]

    def get(self, request, room_no):
        duties.ensure_room_access(request.user, room_no)
        return Response(ranking.results_for_room(room_no))


# Invigilators and duties ----------------------------------------------------

class InvigilatorListCreateView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def get(self, request):
        return Response(ExamInvigilatorSerializer(invigilators.list_invigilators(), many=True).data)

    def post(self, request):
        invigilator = invigilators.create_invigilator(request.data)
        return Response(
            ExamInvigilatorSerializer(invigilator).data,
            status=status.HTTP_201_CREATED,
        )


class InvigilatorDetailView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def put(self, request, invigilator_id):
        invigilator = invigilators.update_invigilator(invigilator_id, request.data)
        return Response({
            "message": "Invigilator updated successfully",
            "invigilator": ExamInvigilatorSerializer(invigilator).data,
        })

    def delete(self, request, invigilator_id):
        invigilator = invigilators.soft_delete_invigilator(invigilator_id, actor=request.user)
        return Response({
            "message": "Invigilator deleted successfully",
            "invigilator": DeletedInvigilatorSerializer(invigilator).data,
        })


class ToggleInvigilatorStatusView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def patch(self, request, invigilator_id):
        invigilator = invigilators.toggle_invigilator_status(invigilator_id)
        state = "activated" if invigilator.is_active else "deactivated"
        return Response({
            "message": f"Invigilator {state} successfully",
            "invigilator": ExamInvigilatorSerializer(invigilator).data,
        })


class RestoreInvigilatorView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def post(self, request, invigilator_id):
        invigilator = invigilators.restore_invigilator(invigilator_id)
        return Response({
            "message": "Invigilator restored successfully",
            "invigilator": ExamInvigilatorSerializer(invigilator).data,
        })


class DeletedInvigilatorListView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def get(self, request):
        deleted = invigilators.get_deleted_invigilators()
        return Response({
            "count": deleted.count(),
            "invigilators": DeletedInvigilatorSerializer(deleted, many=True).data,
        })


class BulkAssignDutiesView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def post(self, request):
        results = duties.bulk_assign_duties(
            request.data.get("exam_date"),
            request.data.get("duties"),
            actor=request.user,
        )
        assigned = len(results["successful"])
        return Response(
            {
                "message": f"Assigned {assigned} duties successfully",
                "batch_id": results["batch_id"],
                "successful": InvigilatorDutySerializer(results["successful"], many=True).data,
                "failed": results["failed"],
            },
            status=status.HTTP_201_CREATED if assigned else status.HTTP_200_OK,
        )


class DutiesByDateView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def get(self, request, exam_date):
        return Response(InvigilatorDutySerializer(duties.duties_for_date(_exam_date(exam_date)), many=True).data)


class DeleteDutyBatchView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def delete(self, request, batch_id):
        deleted = duties.delete_batch(batch_id)
        return Response({"message": f"Deleted {deleted} duties", "deleted": deleted})


class DeleteDutyView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def delete(self, request, duty_id):
        duties.delete_duty(duty_id)
        return Response({"message": "Duty deleted successfully"})


class DutyAttendanceView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def put(self, request, duty_id):
        data = _validated(AttendanceSerializer, request.data)
        duty = duties.mark_attendance(duty_id, data["status"], data.get("signature"))
        return Response({
            "message": "Attendance marked successfully",
            "duty": InvigilatorDutySerializer(duty).data,
        })


class RoomsForDutyView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def get(self, request, exam_date):
        return Response(duties.rooms_for_duty(_exam_date(exam_date)))


# Dashboard ------------------------------------------------------------------

class DashboardStatsView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def get(self, request):
        return Response(reports.dashboard_stats())
