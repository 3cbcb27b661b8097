from fastapi import APIRouter
from pydantic import BaseModel

from src.config.settings import settings

router = APIRouter()

API_VERSION = "0.1.0"


class HealthCheckResponse(BaseModel):
    status: str
    version: str = API_VERSION
    environment: str


@router.get("/", response_model=HealthCheckResponse)
async def health_check() -> HealthCheckResponse:
    """
    Liveness probe for the events API.
    Does not touch the database or the identity provider.
    """
    return HealthCheckResponse(status="healthy", environment=settings.ENVIRONMENT)
