"""Convenience exports for application schemas."""

from __future__ import annotations

from .common import PaginationQuerySchema, build_meta
from .subject import (
    ImportQuerySchema,
    RegisteredSubjectSchema,
    RegistrationRequestSchema,
    SubjectFilterSchema,
    SubjectSchema,
)

__all__ = [
    "PaginationQuerySchema",
    "build_meta",
    "ImportQuerySchema",
    "RegisteredSubjectSchema",
    "RegistrationRequestSchema",
    "SubjectFilterSchema",
    "SubjectSchema",
]
