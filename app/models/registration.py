from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from app.db.session import Base


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Registration(Base):
    """One registrant's ticket. Uniqueness of email and both ticket ids is enforced by the indexes."""

    __tablename__ = "tickets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ticket_id: Mapped[str] = mapped_column(String(36), unique=True, index=True)
    short_ticket_id: Mapped[str] = mapped_column(String(16), unique=True, index=True)

    full_name: Mapped[str] = mapped_column(Text)
    email: Mapped[str] = mapped_column(String(320), unique=True, index=True)  # lower-cased
    phone: Mapped[str] = mapped_column(String(20))
    college: Mapped[str] = mapped_column(Text)
    branch: Mapped[str] = mapped_column(Text)
    year: Mapped[str] = mapped_column(String(1))                 # 1|2|3|4
    gender: Mapped[str] = mapped_column(String(10))              # male|female|other
    accommodation: Mapped[str] = mapped_column(String(3))        # yes|no
    food_preference: Mapped[str] = mapped_column(String(10))     # veg|non-veg
    ieee_status: Mapped[str] = mapped_column(String(12))         # member|non-member
    ieee_membership_id: Mapped[str] = mapped_column(Text, nullable=True)
    ticket_type: Mapped[str] = mapped_column(String(10))         # ieee|non-ieee
    agree_to_terms: Mapped[bool] = mapped_column(Boolean, default=True)

    transaction_screenshot_url: Mapped[str] = mapped_column(Text)
    # Deletion capability from the image host; never returned by read endpoints.
    transaction_screenshot_delete_url: Mapped[str] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(String(12), default="pending")  # pending, approved, rejected

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, onupdate=_now)
