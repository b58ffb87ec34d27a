"""Fakes and form builders shared by the test modules."""

from __future__ import annotations

from app.core.errors import UploadError
from app.schemas.registration import RegistrationForm, ScreenshotUpload
from app.services.imgbb_client import UploadedImage

JPEG_2MB = b"\xff\xd8\xff\xe0" + b"\x00" * (2 * 1024 * 1024 - 4)


class FakeImageStore:
    """Records uploads; set `fail_with` to make uploads raise UploadError."""

    def __init__(self):
        self.uploads: list[tuple[int, str]] = []
        self.fail_with: str | None = None

    def upload(self, image_bytes: bytes, name: str) -> UploadedImage:
        self.uploads.append((len(image_bytes), name))
        if self.fail_with:
            raise UploadError(self.fail_with)
        n = len(self.uploads)
        return UploadedImage(url=f"https://i.ibb.co/fake/{n}.jpg", delete_url=f"https://ibb.co/fake/{n}/delete")

    def close(self) -> None:
        pass


class FakeMirror:
    def __init__(self):
        self.mirrored: list[str] = []

    def mirror(self, registration) -> None:
        self.mirrored.append(registration.short_ticket_id)

    def close(self) -> None:
        pass


def valid_fields(**overrides) -> dict:
    fields = {
        "fullName": "Jane Doe",
        "email": "jane@x.com",
        "phone": "+919876543210",
        "college": "ABC",
        "branch": "CS",
        "year": "2",
        "gender": "female",
        "accommodation": "no",
        "foodPreference": "veg",
        "ieeeStatus": "non-member",
        "ticketType": "non-ieee",
        "agreeToTerms": "true",
    }
    fields.update(overrides)
    return fields


def valid_form(**overrides) -> RegistrationForm:
    return RegistrationForm(**valid_fields(**overrides))


def jpeg_screenshot(content: bytes = JPEG_2MB, content_type: str = "image/jpeg") -> ScreenshotUpload:
    return ScreenshotUpload(content=content, content_type=content_type, filename="proof.jpg")
