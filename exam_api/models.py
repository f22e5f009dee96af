# exam_api/models.py
from django.conf import settings
from django.db import models
from django.db.models import Q

ROOM_CAPACITY = 20


class StudentManager(models.Manager):
    """Every core query goes through one of these two entry points so that
    soft-deleted rows never leak into counts, aggregates or allocation."""

    def find_active(self, **filters):
        return self.get_queryset().filter(is_deleted=False, **filters)

    def find_any(self, **filters):
        return self.get_queryset().filter(**filters)


class Student(models.Model):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"
    GENDER_CHOICES = [
        (MALE, "Male"),
        (FEMALE, "Female"),
        (OTHER, "Other"),
    ]

    CLASS_CHOICES = [(c, c) for c in ("7", "8", "9", "10", "11", "12")]

    MEDIUM_CHOICES = [
        ("English", "English"),
        ("Malayalam", "Malayalam"),
        ("Hindi", "Hindi"),
        ("Other", "Other"),
    ]

    LOCAL_BODY_CHOICES = [
        ("Municipality", "Municipality"),
        ("Corporation", "Corporation"),
        ("Panchayat", "Panchayat"),
    ]

    REGISTERED = "Registered"
    EXAM_COMPLETED = "Exam Completed"
    RESULT_PUBLISHED = "Result Published"
    STATUS_CHOICES = [
        (REGISTERED, "Registered"),
        (EXAM_COMPLETED, "Exam Completed"),
        (RESULT_PUBLISHED, "Result Published"),
    ]

    PENDING = "Pending"
    PASSED = "Passed"
    FAILED = "Failed"
    RESULT_CHOICES = [
        (PENDING, "Pending"),
        (PASSED, "Passed"),
        (FAILED, "Failed"),
    ]

    SCHOLARSHIP_CHOICES = [
        ("", "None"),
        ("Gold", "Gold"),
        ("Silver", "Silver"),
        ("Bronze", "Bronze"),
    ]

    registration_code = models.CharField(max_length=50, null=True, blank=True)
    application_no = models.CharField(max_length=50, null=True, blank=True)

    name = models.CharField(max_length=200)
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES)
    father_name = models.CharField(max_length=200)
    aadhaar_no = models.CharField(max_length=12)
    school_name = models.CharField(max_length=255)
    studying_class = models.CharField(max_length=2, choices=CLASS_CHOICES)
    medium = models.CharField(max_length=20, choices=MEDIUM_CHOICES)
    phone_no = models.CharField(max_length=10, db_index=True)

    house_name = models.CharField(max_length=200)
    place = models.CharField(max_length=200)
    post_office = models.CharField(max_length=200)
    pin_code = models.CharField(max_length=6)
    local_body_type = models.CharField(max_length=20, choices=LOCAL_BODY_CHOICES)
    local_body_name = models.CharField(max_length=200)
    village = models.CharField(max_length=200)

    room_no = models.PositiveIntegerField(null=True, blank=True)
    seat_no = models.PositiveSmallIntegerField(null=True, blank=True)

    exam_marks = models.PositiveSmallIntegerField(default=0)
    total_marks = models.PositiveSmallIntegerField(default=100)
    result_status = models.CharField(max_length=10, choices=RESULT_CHOICES, default=PENDING)
    rank = models.PositiveIntegerField(default=0)
    scholarship = models.CharField(max_length=10, choices=SCHOLARSHIP_CHOICES, default="", blank=True)
    ias_coaching = models.BooleanField(default=False)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=REGISTERED)

    is_deleted = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(null=True, blank=True)
    deleted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="students_deleted",
    )
    delete_reason = models.CharField(max_length=255, blank=True, default="")
    original_registration_code = models.CharField(max_length=50, null=True, blank=True)
    original_application_no = models.CharField(max_length=50, null=True, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="students_created",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = StudentManager()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["registration_code"],
                condition=Q(is_deleted=False),
                name="uniq_active_registration_code",
            ),
            models.UniqueConstraint(
                fields=["application_no"],
                condition=Q(is_deleted=False),
                name="uniq_active_application_no",
            ),
            models.UniqueConstraint(
                fields=["aadhaar_no"],
                condition=Q(is_deleted=False),
                name="uniq_active_aadhaar_no",
            ),
            models.UniqueConstraint(
                fields=["room_no", "seat_no"],
                condition=Q(is_deleted=False),
                name="uniq_active_room_seat",
            ),
            models.CheckConstraint(
                condition=Q(seat_no__isnull=True) | Q(seat_no__gte=1, seat_no__lte=ROOM_CAPACITY),
                name="seat_no_within_room_capacity",
            ),
        ]
        indexes = [
            models.Index(fields=["room_no", "is_deleted"], name="student_room_active_idx"),
            models.Index(fields=["is_deleted", "created_at"], name="student_active_created_idx"),
        ]

    def __str__(self):
        return f"{self.name} - {self.registration_code}"

    @property
    def percentage(self):
        if not self.total_marks:
            return 0
        return round(self.exam_marks / self.total_marks * 100, 2)


class SequenceCounter(models.Model):
    """Last value issued per code namespace; the row doubles as the lock
    that serializes code generation."""

    REGISTRATION = "registration"

    name = models.CharField(max_length=30, unique=True)
    value = models.PositiveIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name}={self.value}"

    @staticmethod
    def application_namespace(year_month):
        return f"application:{year_month}"


class ExamInvigilator(models.Model):
    short_name = models.CharField(max_length=10, unique=True)
    name = models.CharField(max_length=200)
    mobile_no = models.CharField(max_length=10)
    is_active = models.BooleanField(default=True)
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="exam_invigilator",
    )

    is_deleted = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(null=True, blank=True)
    deleted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    def save(self, *args, **kwargs):
        self.short_name = self.short_name.strip().upper()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.short_name} - {self.name}"


class InvigilatorDuty(models.Model):
    ASSIGNED = "Assigned"
    PRESENT = "Present"
    ABSENT = "Absent"
    STATUS_CHOICES = [
        (ASSIGNED, "Assigned"),
        (PRESENT, "Present"),
        (ABSENT, "Absent"),
    ]

    invigilator = models.ForeignKey(ExamInvigilator, on_delete=models.CASCADE, related_name="duties")
    exam_date = models.DateField()
    duty_from = models.CharField(max_length=5)
    duty_to = models.CharField(max_length=5)
    room_no = models.PositiveIntegerField()
    signature = models.TextField(null=True, blank=True)
    signature_time = models.DateTimeField(null=True, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=ASSIGNED)
    batch_id = models.CharField(max_length=32, db_index=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="duties_created",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["exam_date", "room_no"], name="uniq_duty_room_per_date"),
            models.UniqueConstraint(fields=["exam_date", "invigilator"], name="uniq_duty_invigilator_per_date"),
        ]
        indexes = [
            models.Index(fields=["exam_date", "status"], name="duty_date_status_idx"),
        ]
        ordering = ["exam_date", "room_no"]

    def __str__(self):
        return f"{self.invigilator} - Room {self.room_no} on {self.exam_date}"

    @property
    def duty_timing(self):
        return f"{self.duty_from} - {self.duty_to}"


class ExamResult(models.Model):
    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name="results")
    registration_code = models.CharField(max_length=50, unique=True)
    exam_marks = models.PositiveSmallIntegerField()
    total_marks = models.PositiveSmallIntegerField(default=100)
    rank = models.PositiveIntegerField(default=0)
    is_qualified = models.BooleanField(default=False)
    scholarship_type = models.CharField(max_length=10, blank=True, default="")
    ias_coaching = models.BooleanField(default=False)
    published_at = models.DateTimeField()

    class Meta:
        ordering = ["rank"]

    def __str__(self):
        return f"{self.registration_code} - rank {self.rank}"
