from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel


class RegistrationForm(BaseModel):
    """Raw multipart fields. Everything is optional here; the validator reports what is missing."""

    fullName: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    college: Optional[str] = None
    branch: Optional[str] = None
    year: Optional[str] = None
    gender: Optional[str] = None
    accommodation: Optional[str] = None
    foodPreference: Optional[str] = None
    ieeeStatus: Optional[str] = None
    ieeeMembershipId: Optional[str] = None
    ticketType: Optional[str] = None
    agreeToTerms: Optional[Union[bool, str]] = None


@dataclass(frozen=True)
class ScreenshotUpload:
    content: bytes
    content_type: str
    filename: str = ""

    @property
    def size(self) -> int:
        return len(self.content)


class RegistrationCreated(BaseModel):
    ticketId: str
    shortTicketId: str
    email: str


class RegistrationOut(BaseModel):
    ticketId: str
    shortTicketId: str
    fullName: str
    email: str
    phone: str
    college: str
    branch: str
    year: str
    gender: str
    accommodation: str
    foodPreference: str
    ieeeStatus: str
    ieeeMembershipId: Optional[str] = None
    ticketType: str
    agreeToTerms: bool
    transactionScreenshotUrl: str
    status: str
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


def registration_out(r) -> RegistrationOut:
    # transaction_screenshot_delete_url is never exposed by reads
    return RegistrationOut(
        ticketId=r.ticket_id,
        shortTicketId=r.short_ticket_id,
        fullName=r.full_name,
        email=r.email,
        phone=r.phone,
        college=r.college,
        branch=r.branch,
        year=r.year,
        gender=r.gender,
        accommodation=r.accommodation,
        foodPreference=r.food_preference,
        ieeeStatus=r.ieee_status,
        ieeeMembershipId=r.ieee_membership_id,
        ticketType=r.ticket_type,
        agreeToTerms=bool(r.agree_to_terms),
        transactionScreenshotUrl=r.transaction_screenshot_url,
        status=r.status,
        createdAt=r.created_at,
        updatedAt=r.updated_at,
    )
