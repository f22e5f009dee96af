from django.contrib import admin

from .models import ExamInvigilator, ExamResult, InvigilatorDuty, Student


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = ("registration_code", "name", "room_no", "seat_no", "exam_marks", "rank", "is_deleted")
    list_filter = ("is_deleted", "status", "result_status", "studying_class")
    search_fields = ("registration_code", "application_no", "name", "phone_no")


@admin.register(ExamInvigilator)
class ExamInvigilatorAdmin(admin.ModelAdmin):
    list_display = ("short_name", "name", "mobile_no", "user", "is_active", "is_deleted")


@admin.register(InvigilatorDuty)
class InvigilatorDutyAdmin(admin.ModelAdmin):
    list_display = ("exam_date", "room_no", "invigilator", "status", "batch_id")
    list_filter = ("exam_date", "status")


admin.site.register(ExamResult)
