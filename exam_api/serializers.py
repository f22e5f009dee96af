# exam_api/serializers.py
from rest_framework import serializers

from .models import ExamInvigilator, ExamResult, InvigilatorDuty, Student

TIME_REGEX = r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$"


class AddressSerializer(serializers.Serializer):
    house_name = serializers.CharField(max_length=200)
    place = serializers.CharField(max_length=200)
    post_office = serializers.CharField(max_length=200)
    pin_code = serializers.RegexField(
        r"^\d{6}$", error_messages={"invalid": "Please enter a valid 6-digit PIN code"}
    )
    local_body_type = serializers.ChoiceField(choices=Student.LOCAL_BODY_CHOICES)
    local_body_name = serializers.CharField(max_length=200)
    village = serializers.CharField(max_length=200)


class StudentRegistrationSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=3, max_length=200)
    gender = serializers.ChoiceField(choices=Student.GENDER_CHOICES)
    father_name = serializers.CharField(min_length=3, max_length=200)
    aadhaar_no = serializers.RegexField(
        r"^\d{12}$", error_messages={"invalid": "Please enter a valid 12-digit Aadhaar number"}
    )
    school_name = serializers.CharField(max_length=255)
    studying_class = serializers.ChoiceField(choices=Student.CLASS_CHOICES)
    medium = serializers.ChoiceField(choices=Student.MEDIUM_CHOICES)
    phone_no = serializers.RegexField(
        r"^\d{10}$", error_messages={"invalid": "Please enter a valid 10-digit phone number"}
    )
    address = AddressSerializer()

    def to_model_fields(self):
        """Flatten validated data into Student column values."""
        data = dict(self.validated_data)
        data.update(data.pop("address"))
        return data


class StudentSerializer(serializers.ModelSerializer):
    address = serializers.SerializerMethodField()

    class Meta:
        model = Student
        fields = [
            "id",
            "registration_code",
            "application_no",
            "name",
            "gender",
            "father_name",
            "aadhaar_no",
            "school_name",
            "studying_class",
            "medium",
            "phone_no",
            "address",
            "room_no",
            "seat_no",
            "exam_marks",
            "total_marks",
            "result_status",
            "rank",
            "scholarship",
            "ias_coaching",
            "status",
            "created_at",
        ]

    def get_address(self, obj):
        return {
            "house_name": obj.house_name,
            "place": obj.place,
            "post_office": obj.post_office,
            "pin_code": obj.pin_code,
            "local_body_type": obj.local_body_type,
            "local_body_name": obj.local_body_name,
            "village": obj.village,
        }


class DeletedStudentSerializer(serializers.ModelSerializer):
    deleted_by = serializers.CharField(source="deleted_by.name", read_only=True, allow_null=True)

    class Meta:
        model = Student
        fields = [
            "id",
            "name",
            "registration_code",
            "application_no",
            "original_registration_code",
            "original_application_no",
            "room_no",
            "seat_no",
            "deleted_at",
            "deleted_by",
            "delete_reason",
        ]


class TopPerformerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Student
        fields = [
            "id",
            "name",
            "registration_code",
            "studying_class",
            "school_name",
            "exam_marks",
            "rank",
            "scholarship",
            "ias_coaching",
        ]


class SoftDeleteSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class MarksEntrySerializer(serializers.Serializer):
    marks = serializers.IntegerField(min_value=0, max_value=100)


class BulkMarksItemSerializer(serializers.Serializer):
    registration_code = serializers.CharField()
    marks = serializers.IntegerField()


class BulkMarksSerializer(serializers.Serializer):
    marks_data = BulkMarksItemSerializer(many=True, allow_empty=False)


class ExamResultSerializer(serializers.ModelSerializer):
    class Meta:
        model = ExamResult
        fields = [
            "registration_code",
            "exam_marks",
            "total_marks",
            "rank",
            "is_qualified",
            "scholarship_type",
            "ias_coaching",
            "published_at",
        ]


class ExamInvigilatorSerializer(serializers.ModelSerializer):
    mobile_no = serializers.RegexField(
        r"^\d{10}$", error_messages={"invalid": "Please enter a valid 10-digit mobile number"}
    )
    email = serializers.EmailField(write_only=True, required=False)
    password = serializers.CharField(write_only=True, required=False, min_length=8, style={'input_type': 'password'})
    login_email = serializers.CharField(source="user.email", read_only=True, allow_null=True)

    class Meta:
        model = ExamInvigilator
        fields = ["id", "short_name", "name", "mobile_no", "is_active", "email", "password", "login_email"]

    def validate_short_name(self, value):
        value = value.strip().upper()
        existing = ExamInvigilator.objects.filter(short_name=value)
        if self.instance is not None:
            existing = existing.exclude(pk=self.instance.pk)
        if existing.exists():
            raise serializers.ValidationError("Invigilator with this short name already exists")
        return value

    def validate(self, attrs):
        if bool(attrs.get("email")) != bool(attrs.get("password")):
            raise serializers.ValidationError("Provide both email and password to create a login")
        return attrs


class DeletedInvigilatorSerializer(serializers.ModelSerializer):
    deleted_by = serializers.CharField(source="deleted_by.name", read_only=True, allow_null=True)

    class Meta:
        model = ExamInvigilator
        fields = ["id", "short_name", "name", "mobile_no", "deleted_at", "deleted_by"]


class DutyItemSerializer(serializers.Serializer):
    invigilator_id = serializers.IntegerField()
    room_no = serializers.IntegerField(min_value=1, max_value=100)
    duty_from = serializers.RegexField(TIME_REGEX, error_messages={"invalid": "Please enter valid time in HH:MM format"})
    duty_to = serializers.RegexField(TIME_REGEX, error_messages={"invalid": "Please enter valid time in HH:MM format"})


class BulkDutySerializer(serializers.Serializer):
    exam_date = serializers.DateField()
    duties = DutyItemSerializer(many=True, allow_empty=False)


class InvigilatorDutySerializer(serializers.ModelSerializer):
    invigilator = ExamInvigilatorSerializer(read_only=True)
    duty_timing = serializers.CharField(read_only=True)

    class Meta:
        model = InvigilatorDuty
        fields = [
            "id",
            "invigilator",
            "exam_date",
            "duty_from",
            "duty_to",
            "duty_timing",
            "room_no",
            "status",
            "signature_time",
            "batch_id",
        ]


class AttendanceSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[InvigilatorDuty.PRESENT, InvigilatorDuty.ABSENT])
    signature = serializers.CharField(required=False, allow_blank=True, allow_null=True)
