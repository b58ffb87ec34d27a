import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.errors import register_exception_handlers
from app.core.logging import configure_logging
from app.core.rate_limit import build_admission_policy
from app.db.session import engine
from app.api.v1.api import api_router
from app.services.imgbb_client import ImgbbClient
from app.services.sheet_mirror import build_sheet_mirror

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.image_store = ImgbbClient.from_settings()
    app.state.sheet_mirror = build_sheet_mirror(settings.SHEET_SYNC_BACKEND, settings.SHEET_SYNC_WORKERS)
    app.state.admission_policy = build_admission_policy()
    logger.info("%s started (env=%s)", settings.APP_NAME, settings.ENV)
    try:
        yield
    finally:
        app.state.sheet_mirror.close()
        app.state.image_store.close()
        if app.state.admission_policy is not None:
            app.state.admission_policy.close()
        engine.dispose()


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# CORS: the registration form is public; restrict with CORS_ORIGINS in production if needed
_origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()] if settings.CORS_ORIGINS else ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials=_origins != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)
app.include_router(api_router)
