"""Business validation of registration requests (runs before any persistence)."""

from __future__ import annotations

import re
from datetime import date

from surveyadmin.services.registration.dto import RegistrationRequest

NAME_MAX_LENGTH = 50
EMAIL_MAX_LENGTH = 255
XID_MAX_LENGTH = 255
PHONE_PATTERN = re.compile(r"^\d{3}-\d{3}-\d{4}$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def validate_request(request: RegistrationRequest, *, today: date | None = None) -> list[str]:
    """
    Return every rule ``request`` breaks; an empty list means valid.

    :param request: Incoming registration.
    :param today: Reference date for the date-of-birth check.
    """
    errors: list[str] = []
    today = today or date.today()

    for label, value in (("First name", request.first_name), ("Last name", request.last_name)):
        text = (value or "").strip()
        if not text:
            errors.append(f"{label} is required")
        elif len(text) > NAME_MAX_LENGTH:
            errors.append(f"{label} must be at most {NAME_MAX_LENGTH} characters")

    if request.middle_name and len(request.middle_name.strip()) > NAME_MAX_LENGTH:
        errors.append(f"Middle name must be at most {NAME_MAX_LENGTH} characters")

    if not request.has_contact:
        errors.append("Must have a valid email, phone or both")

    email = (request.email or "").strip()
    if len(email) > EMAIL_MAX_LENGTH:
        errors.append(f"Email must be at most {EMAIL_MAX_LENGTH} characters")
    elif email and not EMAIL_PATTERN.match(email):
        errors.append("Invalid email address")

    phone = (request.phone or "").strip()
    if phone and not PHONE_PATTERN.match(phone):
        errors.append("Phone must match ###-###-####")

    if len(request.normalized_xid or "") > XID_MAX_LENGTH:
        errors.append(f"XID must be at most {XID_MAX_LENGTH} characters")

    if request.dob is not None and request.dob >= today:
        errors.append("Date of birth must be in the past")

    return errors
