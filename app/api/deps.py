import logging

from fastapi import Depends, Request, Response
from sqlalchemy.orm import Session

from app.core.errors import RateLimitExceeded
from app.db.session import get_db
from app.services.intake_service import IntakePipeline
from app.services.registration_store import RegistrationStore

logger = logging.getLogger(__name__)


def get_image_store(request: Request):
    return request.app.state.image_store


def get_sheet_mirror(request: Request):
    return request.app.state.sheet_mirror


def get_admission_policy(request: Request):
    return getattr(request.app.state, "admission_policy", None)


def get_pipeline(
    db: Session = Depends(get_db),
    image_store=Depends(get_image_store),
    mirror=Depends(get_sheet_mirror),
) -> IntakePipeline:
    return IntakePipeline(RegistrationStore(db), image_store, mirror)


def client_address(request: Request) -> str:
    # uvicorn --proxy-headers rewrites client.host from X-Forwarded-For
    return request.client.host if request.client else "unknown"


def enforce_registration_rate_limit(request: Request, response: Response, policy=Depends(get_admission_policy)) -> None:
    if policy is None:
        return
    key = client_address(request)
    decision = policy.hit(key)
    if not decision.allowed:
        logger.warning("Rate limit exceeded for %s", key)
        raise RateLimitExceeded(decision.retry_after)
    response.headers["RateLimit-Limit"] = str(decision.limit)
    response.headers["RateLimit-Remaining"] = str(decision.remaining)
