# exam_api/util.py
from io import BytesIO

import qrcode
from django.conf import settings


def hall_ticket_verify_url(student):
    return f"{settings.FRONTEND_URL.rstrip('/')}/results/{student.registration_code}"


def generate_qr_image(data):
    qr = qrcode.make(data)
    buffer = BytesIO()
    qr.save(buffer, format="PNG")
    return buffer.getvalue()
