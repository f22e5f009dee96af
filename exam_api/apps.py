from django.apps import AppConfig


class ExamApiConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'exam_api'
