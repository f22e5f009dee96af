from django.urls import path
from exam_api.views import (
    BulkAssignDutiesView,
    BulkMarksView,
    DashboardStatsView,
    DeleteDutyBatchView,
    DeleteDutyView,
    DeletedInvigilatorListView,
    DeletedStudentListView,
    DutiesByDateView,
    DutyAttendanceView,
    EnterMarksView,
    GenerateRankListView,
    HallTicketQRView,
    HardDeleteStudentView,
    InvigilatorDetailView,
    InvigilatorListCreateView,
    NextCodesView,
    NextSlotView,
    RecomputeRanksView,
    RegisterStudentView,
    RestoreInvigilatorView,
    RestoreStudentView,
    ResultByCodeView,
    ResultsByPhoneView,
    ResultsByRoomView,
    RoomDistributionView,
    RoomsForDutyView,
    SoftDeleteStudentView,
    StudentByCodeView,
    StudentListView,
    StudentsByPhoneView,
    StudentsByRoomView,
    ToggleInvigilatorStatusView,
    TopPerformersView,
)

urlpatterns = [

    # Dashboard URLs
    path("dashboard/stats", DashboardStatsView.as_view(), name="dashboard-stats"),

    # Public registration URLs
    path("students/register", RegisterStudentView.as_view(), name="register-student"),
    path("students/next-codes", NextCodesView.as_view(), name="next-codes"), # preview of the next registration code and application number
    path("students/next-slot", NextSlotView.as_view(), name="next-slot"), # room and seat the next registration would get
    path("students/phone/<str:phone_no>", StudentsByPhoneView.as_view(), name="students-by-phone"),
    path("students/<str:code>/hallticket/qr", HallTicketQRView.as_view(), name="hall-ticket-qr"),

    # Student lifecycle URLs
    path("students", StudentListView.as_view(), name="student-list"), # search, class and room filters, paginated
    path("students/code/<str:code>", StudentByCodeView.as_view(), name="student-by-code"),
    path("students/deleted", DeletedStudentListView.as_view(), name="deleted-students"),
    path("students/<int:student_id>/delete", SoftDeleteStudentView.as_view(), name="soft-delete-student"),
    path("students/<int:student_id>/restore", RestoreStudentView.as_view(), name="restore-student"),
    path("students/<int:student_id>/permanent", HardDeleteStudentView.as_view(), name="hard-delete-student"),
    path("students/<int:student_id>/marks", EnterMarksView.as_view(), name="enter-marks"),

    # Room URLs
    path("rooms/distribution", RoomDistributionView.as_view(), name="room-distribution"),
    path("rooms/<int:room_no>/students", StudentsByRoomView.as_view(), name="students-by-room"),
    path("rooms/<int:room_no>/bulk-marks", BulkMarksView.as_view(), name="bulk-marks"),
    path("rooms/<int:room_no>/results", ResultsByRoomView.as_view(), name="results-by-room"),

    # Result URLs
    path("results/recompute", RecomputeRanksView.as_view(), name="recompute-ranks"),
    path("results/generate-ranks", GenerateRankListView.as_view(), name="generate-ranks"),
    path("results/top", TopPerformersView.as_view(), name="top-performers"),
    path("results/code/<str:code>", ResultByCodeView.as_view(), name="result-by-code"),
    path("results/phone/<str:phone_no>", ResultsByPhoneView.as_view(), name="results-by-phone"),

    # Invigilator and duty URLs
    path("invigilators", InvigilatorListCreateView.as_view(), name="invigilators"),
    path("invigilators/deleted", DeletedInvigilatorListView.as_view(), name="deleted-invigilators"),
    path("invigilators/<int:invigilator_id>", InvigilatorDetailView.as_view(), name="invigilator-detail"), # PUT update, DELETE soft delete
    path("invigilators/<int:invigilator_id>/toggle-status", ToggleInvigilatorStatusView.as_view(), name="toggle-invigilator-status"),
    path("invigilators/<int:invigilator_id>/restore", RestoreInvigilatorView.as_view(), name="restore-invigilator"),
    path("duties/bulk", BulkAssignDutiesView.as_view(), name="bulk-assign-duties"),
    path("duties/by-date/<str:exam_date>", DutiesByDateView.as_view(), name="duties-by-date"),
    path("duties/batch/<str:batch_id>", DeleteDutyBatchView.as_view(), name="delete-duty-batch"),
    path("duties/<int:duty_id>", DeleteDutyView.as_view(), name="delete-duty"),
    path("duties/<int:duty_id>/attendance", DutyAttendanceView.as_view(), name="duty-attendance"),
    path("duties/rooms/<str:exam_date>", RoomsForDutyView.as_view(), name="rooms-for-duty"),
]
