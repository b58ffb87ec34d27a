from fastapi import APIRouter
from app.api.v1.routes.health import router as health_router
from app.api.v1.routes.registration import router as registration_router

api_router = APIRouter(prefix="/api")
api_router.include_router(health_router)
api_router.include_router(registration_router)
