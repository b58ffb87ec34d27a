"""Registration intake: validate, reject duplicates, upload the proof, persist, mirror.

Steps run strictly in order for one submission. Nothing is written to the
database unless the screenshot upload succeeded; an uploaded image whose
registration later fails to persist is left at the host. The email pre-check
only gives fast feedback; the unique indexes decide.
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone

from app.core.config import settings
from app.core.errors import DuplicateEmailError, DuplicateKeyError, ValidationError
from app.models.registration import Registration
from app.schemas.registration import RegistrationForm, ScreenshotUpload
from app.services.registration_store import RegistrationStore, normalize_email
from app.services.sheet_mirror import SheetMirror
from app.services.ticket_ids import generate_ticket_ids
from app.services.validation import agreed_to_terms, validate_registration

logger = logging.getLogger(__name__)

# A collision on either of these is an id-generation accident, not a duplicate registrant.
_RETRYABLE_FIELDS = ("ticket_id", "short_ticket_id")


@dataclass(frozen=True)
class RegistrationResult:
    ticket_id: str
    short_ticket_id: str
    email: str


def build_registration(form: RegistrationForm, *, ticket_id: str, short_ticket_id: str,
                       screenshot_url: str, screenshot_delete_url: str) -> Registration:
    now = datetime.now(timezone.utc)
    member = form.ieeeStatus == "member"
    return Registration(
        ticket_id=ticket_id,
        short_ticket_id=short_ticket_id,
        full_name=form.fullName.strip(),
        email=normalize_email(form.email),
        phone=form.phone.strip(),
        college=form.college.strip(),
        branch=form.branch.strip(),
        year=form.year,
        gender=form.gender.strip().lower(),
        accommodation=form.accommodation,
        food_preference=form.foodPreference,
        ieee_status=form.ieeeStatus,
        ieee_membership_id=form.ieeeMembershipId.strip() if member else None,
        ticket_type=form.ticketType,
        agree_to_terms=agreed_to_terms(form.agreeToTerms),
        transaction_screenshot_url=screenshot_url,
        transaction_screenshot_delete_url=screenshot_delete_url,
        status="pending",
        created_at=now,
        updated_at=now,
    )


class IntakePipeline:
    def __init__(self, store: RegistrationStore, image_store, mirror: SheetMirror,
                 id_factory=generate_ticket_ids, max_id_attempts: int | None = None):
        self.store = store
        self.image_store = image_store
        self.mirror = mirror
        self.id_factory = id_factory
        self.max_id_attempts = max_id_attempts or settings.TICKET_ID_MAX_ATTEMPTS

    def register(self, form: RegistrationForm, screenshot: ScreenshotUpload | None) -> RegistrationResult:
        started = time.monotonic()

        errors = validate_registration(form, screenshot)
        if errors:
            raise ValidationError(errors)

        email = normalize_email(form.email)
        logger.info("New registration attempt: %s", email)

        if self.store.find_by_email(email) is not None:
            logger.warning("Duplicate email attempt: %s", email)
            raise DuplicateEmailError()

        ticket_id, short_ticket_id = self.id_factory()
        logger.info("Generated ticket ids %s / %s", ticket_id, short_ticket_id)

        uploaded = self.image_store.upload(
            screenshot.content, f"transaction_{short_ticket_id}_{int(time.time() * 1000)}"
        )
        logger.info("Screenshot uploaded for %s: %s", short_ticket_id, uploaded.url)

        registration = self._persist(form, ticket_id, short_ticket_id, uploaded)

        logger.info(
            "Registration successful for %s (%s, %dms)",
            email, registration.short_ticket_id, int((time.monotonic() - started) * 1000),
        )
        self.mirror.mirror(registration)
        return RegistrationResult(registration.ticket_id, registration.short_ticket_id, registration.email)

    def _persist(self, form: RegistrationForm, ticket_id: str, short_ticket_id: str, uploaded) -> Registration:
        """Insert, regenerating ids when only a ticket id collided. An email collision is final."""
        attempt = 1
        while True:
            registration = build_registration(
                form,
                ticket_id=ticket_id,
                short_ticket_id=short_ticket_id,
                screenshot_url=uploaded.url,
                screenshot_delete_url=uploaded.delete_url,
            )
            try:
                return self.store.insert(registration)
            except DuplicateKeyError as e:
                if e.field not in _RETRYABLE_FIELDS or attempt >= self.max_id_attempts:
                    raise
                logger.warning("Ticket id collision on %s (attempt %d); regenerating", e.field, attempt)
                attempt += 1
                ticket_id, short_ticket_id = self.id_factory()

    def lookup(self, identifier: str) -> Registration | None:
        return self.store.find_by_either_id(identifier)
