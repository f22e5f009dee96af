# exam_api/sequences.py
"""
Registration code and application number generation.

Registration codes are ``PPM<n>`` with ``n`` starting at 1000. Application
numbers are ``APP<YY><MM><seq4>`` where the four digit sequence restarts every
calendar month. Both are derived from the greatest code currently held by a
non-deleted student, so a code freed by a soft delete at the top of the range
is handed out again.
"""
import logging
import re

from django.db import DatabaseError
from django.db.models.functions import Length
from django.utils import timezone

from .exceptions import Internal
from .models import SequenceCounter, Student

logger = logging.getLogger(__name__)

REGISTRATION_PREFIX = "PPM"
REGISTRATION_START = 1000
APPLICATION_PREFIX = "APP"

_REGISTRATION_RE = re.compile(rf"{REGISTRATION_PREFIX}(\d+)")


def _year_month(now=None):
    if now is None:
        now = timezone.localdate()
    return now.strftime("%y%m")


def _latest_registration_code():
    # numeric order for a fixed prefix: longer codes first, then by text
    return (
        Student.objects.find_active(registration_code__startswith=REGISTRATION_PREFIX)
        .annotate(code_length=Length("registration_code"))
        .order_by("-code_length", "-registration_code")
        .values_list("registration_code", flat=True)
        .first()
    )


def next_registration_code():
    """Return the registration code the next registration would receive."""
    try:
        last_code = _latest_registration_code()
    except DatabaseError as exc:
        logger.exception("Failed to read latest registration code")
        raise Internal() from exc

    next_number = REGISTRATION_START
    if last_code:
        match = _REGISTRATION_RE.fullmatch(last_code)
        if match:
            last_number = int(match.group(1))
            if last_number >= REGISTRATION_START:
                next_number = last_number + 1

    return f"{REGISTRATION_PREFIX}{next_number}"


def next_application_no(now=None):
    """Return the next application number for the month of ``now``."""
    prefix = f"{APPLICATION_PREFIX}{_year_month(now)}"
    try:
        last_no = (
            Student.objects.find_active(application_no__startswith=prefix)
            .annotate(code_length=Length("application_no"))
            .order_by("-code_length", "-application_no")
            .values_list("application_no", flat=True)
            .first()
        )
    except DatabaseError as exc:
        logger.exception("Failed to read latest application number")
        raise Internal() from exc

    # the suffix is read whole so a month past 9999 continues at 10000
    sequence = 0
    if last_no:
        try:
            sequence = int(last_no[len(prefix):])
        except ValueError:
            sequence = 0

    return f"{prefix}{sequence + 1:04d}"


def issue_codes(now=None):
    """Compute both codes for a registration that is about to be written.

    Must run inside ``transaction.atomic()``: the counter rows stay locked
    until the caller's transaction commits, so concurrent registrations
    compute their codes one after another.
    """
    year_month = _year_month(now)
    counters = SequenceCounter.objects.select_for_update()
    registration_counter, _ = counters.get_or_create(name=SequenceCounter.REGISTRATION)
    application_counter, _ = counters.get_or_create(
        name=SequenceCounter.application_namespace(year_month)
    )

    registration_code = next_registration_code()
    application_no = next_application_no(now)

    registration_counter.value = int(registration_code[len(REGISTRATION_PREFIX):])
    registration_counter.save(update_fields=["value", "updated_at"])
    application_counter.value = int(application_no[len(APPLICATION_PREFIX) + 4:])
    application_counter.save(update_fields=["value", "updated_at"])

    logger.debug("Issued %s / %s", registration_code, application_no)
    return registration_code, application_no
