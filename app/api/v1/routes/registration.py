from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse

from app.api.deps import enforce_registration_rate_limit, get_pipeline
from app.core.config import settings
from app.core.errors import FileConstraintError, StorageError
from app.schemas.registration import RegistrationCreated, RegistrationForm, ScreenshotUpload, registration_out
from app.services.intake_service import IntakePipeline
from app.services.validation import ALLOWED_IMAGE_TYPES, INVALID_FILE_TYPE, file_too_large_message

router = APIRouter(tags=["registration"])


def read_screenshot(upload: Optional[UploadFile]) -> Optional[ScreenshotUpload]:
    """Apply the upload boundary: type and size are rejected before any pipeline step runs."""
    if upload is None or not upload.filename:
        return None
    content_type = (upload.content_type or "").lower()
    if content_type not in ALLOWED_IMAGE_TYPES:
        raise FileConstraintError(INVALID_FILE_TYPE)
    limit = settings.MAX_UPLOAD_BYTES
    content = upload.file.read(limit + 1)
    if len(content) > limit:
        raise FileConstraintError(file_too_large_message(limit))
    return ScreenshotUpload(content=content, content_type=content_type, filename=upload.filename)


@router.post("/register", status_code=201, dependencies=[Depends(enforce_registration_rate_limit)])
def register(
    fullName: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    college: Optional[str] = Form(None),
    branch: Optional[str] = Form(None),
    year: Optional[str] = Form(None),
    gender: Optional[str] = Form(None),
    accommodation: Optional[str] = Form(None),
    foodPreference: Optional[str] = Form(None),
    ieeeStatus: Optional[str] = Form(None),
    ieeeMembershipId: Optional[str] = Form(None),
    ticketType: Optional[str] = Form(None),
    agreeToTerms: Optional[str] = Form(None),
    transactionScreenshot: Optional[UploadFile] = File(None),
    pipeline: IntakePipeline = Depends(get_pipeline),
):
    screenshot = read_screenshot(transactionScreenshot)
    form = RegistrationForm(
        fullName=fullName,
        email=email,
        phone=phone,
        college=college,
        branch=branch,
        year=year,
        gender=gender,
        accommodation=accommodation,
        foodPreference=foodPreference,
        ieeeStatus=ieeeStatus,
        ieeeMembershipId=ieeeMembershipId,
        ticketType=ticketType,
        agreeToTerms=agreeToTerms,
    )
    result = pipeline.register(form, screenshot)
    return {
        "success": True,
        "message": "Registration successful",
        "data": RegistrationCreated(
            ticketId=result.ticket_id,
            shortTicketId=result.short_ticket_id,
            email=result.email,
        ).model_dump(),
    }


@router.get("/registration/{ticket_id}")
def get_registration(ticket_id: str, pipeline: IntakePipeline = Depends(get_pipeline)):
    try:
        registration = pipeline.lookup(ticket_id)
    except StorageError as e:
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Failed to fetch registration", "error": e.error},
        )
    if registration is None:
        return JSONResponse(status_code=404, content={"success": False, "message": "Registration not found"})
    return {"success": True, "data": registration_out(registration).model_dump(mode="json")}
