import logging

import requests
from django.conf import settings

logger = logging.getLogger(__name__)


def build_registration_message(student):
    return (
        f"Registration successful ✅\n\n"
        f"Name: {student.name}\n"
        f"Application No: {student.application_no}\n"
        f"Registration Code: {student.registration_code}\n"
        f"Room No: {student.room_no}\n"
        f"Seat No: {student.seat_no}\n\n"
        f"Keep your registration code for the hall ticket and results."
    )


def send_sms(mobile, message):
    """
    Send an SMS through the configured gateway.

    Returns the gateway request id, or ``None`` when no API key is configured
    (the message is only logged).
    """
    api_key = settings.SMS_GATEWAY_API_KEY
    if not api_key:
        logger.info("SMS gateway disabled; message for %s:\n%s", mobile, message)
        return None

    payload = {
        "sender_id": settings.SMS_SENDER_ID,
        "message": message,
        "language": "english",
        "route": "q",
        "numbers": mobile,
    }

    headers = {
        "authorization": api_key,
        "Content-Type": "application/json",
    }

    response = requests.post(
        settings.SMS_GATEWAY_URL,
        json=payload,
        headers=headers,
        timeout=settings.SMS_TIMEOUT_SECONDS,
    )
    response.raise_for_status()
    result = response.json()
    logger.info("SMS sent to %s: %s", mobile, result)
    return result.get("request_id", "success")


def send_registration_sms(student):
    """Fire-and-forget registration notice; never raises."""
    try:
        return send_sms(student.phone_no, build_registration_message(student))
    except requests.exceptions.RequestException as exc:
        logger.warning(
            "Failed to send registration SMS for %s: %s", student.registration_code, exc
        )
        return None
