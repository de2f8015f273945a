"""Request body validation.

Each ``validate_*`` function returns a list of ``{"field", "msg"}`` dicts;
an empty list means the payload is acceptable.
"""
from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Dict, List

from .constants import (
    ACADEMIC_YEARS,
    CLUB_CATEGORIES,
    DEPARTMENTS,
    EVENT_CATEGORIES,
    INTERESTS,
    ROLES,
)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

_MISSING = object()


def parse_iso_date(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value.strip():
        # "2026-02-01" or "2026-02-01T10:00:00Z"
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        if parsed.tzinfo is not None:
            # stored as naive UTC
            parsed = parsed.astimezone(timezone.utc)
        return parsed.replace(tzinfo=None)
    raise ValueError("Invalid date format")


def _lookup(data: Dict[str, Any], field: str):
    value: Any = data
    for part in field.split("."):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


class Validator:
    def __init__(self, data: Dict[str, Any], partial: bool = False):
        self.data = data if isinstance(data, dict) else {}
        self.partial = partial
        self.errors: List[Dict[str, str]] = []

    def _value(self, field: str):
        value = _lookup(self.data, field)
        if value is _MISSING and self.partial:
            return _MISSING
        return None if value is _MISSING else value

    def fail(self, field: str, msg: str) -> None:
        self.errors.append({"field": field, "msg": msg})

    def min_length(self, field: str, size: int, msg: str) -> "Validator":
        value = self._value(field)
        if value is _MISSING:
            return self
        if not isinstance(value, str) or len(value.strip()) < size:
            self.fail(field, msg)
        return self

    def not_empty(self, field: str, msg: str) -> "Validator":
        return self.min_length(field, 1, msg)

    def email(self, field: str, msg: str) -> "Validator":
        value = self._value(field)
        if value is _MISSING:
            return self
        if not isinstance(value, str) or not EMAIL_RE.match(value.strip()):
            self.fail(field, msg)
        return self

    def one_of(self, field: str, choices, msg: str) -> "Validator":
        value = self._value(field)
        if value is _MISSING:
            return self
        if value not in choices:
            self.fail(field, msg)
        return self

    def int_min(self, field: str, minimum: int, msg: str) -> "Validator":
        value = self._value(field)
        if value is _MISSING:
            return self
        try:
            if isinstance(value, bool) or int(value) < minimum:
                raise ValueError(value)
        except (TypeError, ValueError):
            self.fail(field, msg)
        return self

    def iso_date(self, field: str, msg: str) -> "Validator":
        value = self._value(field)
        if value is _MISSING:
            return self
        try:
            parse_iso_date(value)
        except (TypeError, ValueError):
            self.fail(field, msg)
        return self

    def time_of_day(self, field: str, msg: str) -> "Validator":
        value = self._value(field)
        if value is _MISSING:
            return self
        if not isinstance(value, str) or not TIME_RE.match(value.strip()):
            self.fail(field, msg)
        return self

    def list_of(self, field: str, choices, minimum: int, msg: str) -> "Validator":
        value = self._value(field)
        if value is _MISSING:
            return self
        if not isinstance(value, list) or len(value) < minimum:
            self.fail(field, msg)
        elif choices is not None and any(item not in choices for item in value):
            self.fail(field, f"Invalid value in {field}")
        return self

    def string(self, field: str, msg: str) -> "Validator":
        value = self._value(field)
        if value is _MISSING or value is None:
            return self
        if not isinstance(value, str):
            self.fail(field, msg)
        return self

    def string_list(self, field: str, msg: str) -> "Validator":
        value = self._value(field)
        if value is _MISSING or value is None:
            return self
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            self.fail(field, msg)
        return self


def validate_registration(data) -> List[Dict[str, str]]:
    v = Validator(data)
    v.email("email", "Invalid Email")
    v.min_length("fullname.firstname", 3, "First name must be at least 3 characters long")
    v.min_length("fullname.lastname", 3, "Last name must be at least 3 characters long")
    v.min_length("password", 6, "Password must be at least 6 characters long")
    v.not_empty("department", "Department is required")
    v.one_of("department", DEPARTMENTS, "Invalid department")
    v.not_empty("academicYear", "Academic Year is required")
    v.one_of("academicYear", ACADEMIC_YEARS, "Invalid academic year")
    v.string("studentID", "Student ID must be a string")
    v.list_of("interests", INTERESTS, 1, "At least one interest is required")
    return v.errors


def validate_login(data) -> List[Dict[str, str]]:
    v = Validator(data)
    v.email("email", "Invalid Email")
    v.min_length("password", 6, "Password must be at least 6 characters long")
    return v.errors


def validate_profile_update(data) -> List[Dict[str, str]]:
    v = Validator(data, partial=True)
    v.min_length("firstname", 3, "First name must be at least 3 characters long")
    v.min_length("lastname", 3, "Last name must be at least 3 characters long")
    v.one_of("department", DEPARTMENTS, "Invalid department")
    v.one_of("academicYear", ACADEMIC_YEARS, "Invalid academic year")
    v.list_of("interests", INTERESTS, 1, "At least one interest is required")
    v.string("bio", "Bio must be a string")
    v.string("contactInfo", "Contact info must be a string")
    v.string("studentID", "Student ID must be a string")
    return v.errors


def validate_event(data, partial: bool = False) -> List[Dict[str, str]]:
    v = Validator(data, partial=partial)
    v.min_length("title", 3, "Event title must be at least 3 characters long")
    v.min_length("description", 10, "Event description must be at least 10 characters long")
    v.iso_date("date", "Valid date (YYYY-MM-DD) is required")
    v.not_empty("time", "Event time is required")
    v.time_of_day("time", "Event time must be in HH:MM format")
    v.not_empty("location", "Event location is required")
    v.one_of("category", EVENT_CATEGORIES, "Invalid event category")
    v.int_min("maxAttendees", 1, "Maximum attendees must be at least 1")
    v.string_list("requirements", "Requirements must be a list of strings")
    v.string("image", "Image must be a URL string")
    v.string("contactInfo", "Contact info must be a string")
    return v.errors


def validate_club(data, partial: bool = False) -> List[Dict[str, str]]:
    v = Validator(data, partial=partial)
    v.min_length("name", 3, "Club name must be at least 3 characters long")
    v.min_length("description", 10, "Description must be at least 10 characters long")
    v.one_of("category", CLUB_CATEGORIES, "Invalid club category")
    v.string("imageUrl", "Image URL must be a string")
    return v.errors


def validate_rejection(data) -> List[Dict[str, str]]:
    return Validator(data).min_length(
        "reason", 10, "Rejection reason must be at least 10 characters long."
    ).errors


def validate_role(data) -> List[Dict[str, str]]:
    return Validator(data).one_of("role", ROLES, "Role must be user or admin").errors
