"""
Line-level CSV parsing for subject imports.

Columns: ``departmentId,firstName,lastName,middleName,dob,email,phone,xid``.

``split_csv_line`` is a deliberately small splitter, not RFC 4180: a ``"``
toggles the quoted state and is dropped, so ``""`` inside a quoted field is
two toggles rather than a literal quote.
"""

from __future__ import annotations

import re
from datetime import date, datetime

from surveyadmin.services.registration.dto import RegistrationRequest

MIN_FIELDS = 6
DATE_FORMATS = (
    (re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}"), "%Y-%m-%d"),
    (re.compile(r"[0-9]{2}/[0-9]{2}/[0-9]{4}"), "%m/%d/%Y"),
)
INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")
COLUMNS = "departmentId,firstName,lastName,middleName,dob,email,phone,xid"


class RowError(ValueError):
    """A data row that cannot become a registration request."""


def split_csv_line(line: str) -> list[str]:
    """
    Split one line on commas outside double quotes.

    >>> split_csv_line('John,Doe,"123 Main, Apt 5",30')
    ['John', 'Doe', '123 Main, Apt 5', '30']
    >>> split_csv_line('Smith,"Jane ""JJ"" Middle",x')
    ['Smith', 'Jane JJ Middle', 'x']
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    for ch in line:
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(ch)
    fields.append("".join(current))
    return fields


def parse_date(value: str) -> date:
    """
    Parse ``YYYY-MM-DD`` first, then ``MM/DD/YYYY``.

    Day and month must be zero-padded; ``1990-5-15`` is rejected.

    :raises RowError: When neither format matches.
    """
    text = value.strip()
    for shape, fmt in DATE_FORMATS:
        if not shape.fullmatch(text):
            continue
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise RowError("Invalid date format. Use yyyy-MM-dd or MM/dd/yyyy")


def _optional(fields: list[str], index: int) -> str | None:
    if index >= len(fields):
        return None
    return fields[index].strip() or None


def parse_row(line: str, *, survey_id: int) -> RegistrationRequest:
    """
    Turn one data line into a :class:`RegistrationRequest`.

    :param line: Raw CSV line (not blank, not a comment).
    :param survey_id: Survey every row of the upload registers into.
    :raises RowError: With a message suitable for ``"Line {n}: ..."``.
    """
    fields = split_csv_line(line)
    if len(fields) < MIN_FIELDS:
        raise RowError(f"Invalid CSV format. Expected at least {MIN_FIELDS} fields: {COLUMNS}")

    raw_department = fields[0].strip()
    if not INTEGER_PATTERN.fullmatch(raw_department):
        raise RowError("Invalid department ID format")
    department_id = int(raw_department)

    first_name = fields[1].strip()
    last_name = fields[2].strip()
    email = fields[5].strip()
    if not first_name:
        raise RowError("First name is required")
    if not last_name:
        raise RowError("Last name is required")
    if not email:
        raise RowError("Email is required")

    raw_dob = fields[4].strip()
    dob = parse_date(raw_dob) if raw_dob else None

    return RegistrationRequest(
        survey_id=survey_id,
        department_id=department_id,
        first_name=first_name,
        last_name=last_name,
        middle_name=_optional(fields, 3),
        dob=dob,
        email=email,
        phone=_optional(fields, 6),
        xid=_optional(fields, 7),
    )
