# exam_api/exceptions.py
from rest_framework import status
from rest_framework.exceptions import APIException


class ExamServiceError(APIException):
    """Base error for the exam services; also used for unexpected failures so
    no storage detail reaches the client."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error."
    default_code = "internal"


Internal = ExamServiceError


class NotFound(ExamServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"


class Conflict(ExamServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflicting record exists."
    default_code = "conflict"


class InvalidInput(ExamServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input."
    default_code = "invalid_input"


class Forbidden(ExamServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You do not have access to this resource."
    default_code = "forbidden"
