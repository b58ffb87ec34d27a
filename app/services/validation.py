"""Structural and semantic checks for a registration submission. Pure; no I/O."""

from __future__ import annotations

import re

from app.core.config import settings
from app.schemas.registration import RegistrationForm, ScreenshotUpload

EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
PHONE_RE = re.compile(r"\+91[6-9]\d{9}")
EMAIL_MAX_LENGTH = 320  # width of the email column

YEARS = ("1", "2", "3", "4")
GENDERS = ("male", "female", "other")
ACCOMMODATION = ("yes", "no")
FOOD_PREFERENCES = ("veg", "non-veg")
IEEE_STATUSES = ("member", "non-member")
TICKET_TYPES = ("ieee", "non-ieee")

ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/jpg", "image/webp")
INVALID_FILE_TYPE = "Invalid file type. Only JPEG, PNG, and WebP images are allowed."


def _text(value) -> str:
    return value.strip() if isinstance(value, str) else ""


def _min_len(value, n: int) -> bool:
    return len(_text(value)) >= n


def agreed_to_terms(value) -> bool:
    return value is True or value == "true"


def file_too_large_message(limit: int) -> str:
    return f"File too large. Maximum size is {limit // (1024 * 1024)}MB."


def validate_screenshot(screenshot: ScreenshotUpload | None, max_bytes: int | None = None) -> list[str]:
    if screenshot is None:
        return ["Transaction screenshot is required"]
    limit = settings.MAX_UPLOAD_BYTES if max_bytes is None else max_bytes
    errors = []
    if (screenshot.content_type or "").lower() not in ALLOWED_IMAGE_TYPES:
        errors.append(INVALID_FILE_TYPE)
    if screenshot.size > limit:
        errors.append(file_too_large_message(limit))
    return errors


def validate_registration(form: RegistrationForm, screenshot: ScreenshotUpload | None) -> list[str]:
    """Return every violation in rule order; an empty list means the submission is valid."""
    errors: list[str] = []

    if not _min_len(form.fullName, 2):
        errors.append("Full name must be at least 2 characters long")

    if not form.email or len(form.email) > EMAIL_MAX_LENGTH or not EMAIL_RE.fullmatch(form.email):
        errors.append("Valid email address is required")

    if not form.phone or not PHONE_RE.fullmatch(form.phone):
        errors.append("Phone number must be in format: +91XXXXXXXXXX")

    if not _min_len(form.college, 2):
        errors.append("College name is required")

    if not _min_len(form.branch, 2):
        errors.append("Branch is required")

    if form.year not in YEARS:
        errors.append("Year must be 1, 2, 3, or 4")

    if not form.gender or form.gender.lower() not in GENDERS:
        errors.append('Gender must be "male", "female", or "other"')

    if form.accommodation not in ACCOMMODATION:
        errors.append('Accommodation must be "yes" or "no"')

    if form.foodPreference not in FOOD_PREFERENCES:
        errors.append('Food preference must be "veg" or "non-veg"')

    if form.ieeeStatus not in IEEE_STATUSES:
        errors.append('IEEE status must be "member" or "non-member"')

    if form.ieeeStatus == "member" and not _min_len(form.ieeeMembershipId, 5):
        errors.append("IEEE Membership ID is required for IEEE members")

    if form.ticketType not in TICKET_TYPES:
        errors.append('Ticket type must be "ieee" or "non-ieee"')

    if not agreed_to_terms(form.agreeToTerms):
        errors.append("You must agree to the terms and conditions")

    errors.extend(validate_screenshot(screenshot))
    return errors
