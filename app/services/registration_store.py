import logging
import re

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import DuplicateKeyError, StorageError
from app.models.registration import Registration

logger = logging.getLogger(__name__)

# Checked in order: "ticket_id" is a substring of "short_ticket_id".
_UNIQUE_FIELDS = ("short_ticket_id", "ticket_id", "email")
# postgres: DETAIL:  Key (email)=(jane@x.com) already exists.
_KEY_DETAIL_RE = re.compile(r"key \((\w+)\)=")


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def duplicate_field(exc: IntegrityError) -> str:
    """Name the unique column a driver error refers to (sqlite: tickets.email, postgres: ix_tickets_email)."""
    text = str(exc.orig if exc.orig is not None else exc).lower()
    detail = _KEY_DETAIL_RE.search(text)
    if detail and detail.group(1) in _UNIQUE_FIELDS:
        return detail.group(1)
    for field in _UNIQUE_FIELDS:
        if field in text:
            return field
    return "unknown"


class RegistrationStore:
    def __init__(self, db: Session):
        self.db = db

    def find_by_email(self, email: str) -> Registration | None:
        try:
            return self.db.query(Registration).filter(Registration.email == normalize_email(email)).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError(f"Registration lookup failed: {e.__class__.__name__}") from e

    def find_by_either_id(self, identifier: str) -> Registration | None:
        try:
            return (
                self.db.query(Registration)
                .filter(or_(Registration.ticket_id == identifier, Registration.short_ticket_id == identifier))
                .first()
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError(f"Registration lookup failed: {e.__class__.__name__}") from e

    def insert(self, registration: Registration) -> Registration:
        """Persist; the database unique indexes are the authoritative duplicate check."""
        self.db.add(registration)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            field = duplicate_field(e)
            logger.warning("Unique index rejected %s for %s", field, registration.short_ticket_id)
            raise DuplicateKeyError(field) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError(f"Failed to save registration: {e.__class__.__name__}") from e
        self.db.refresh(registration)
        return registration
