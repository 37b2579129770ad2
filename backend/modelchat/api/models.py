# modelchat/api/models.py
import logging

from fastapi import Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from . import Endpoint, build_router
from ..core.config import Settings
from ..db.session import get_db
from ..dependencies import get_settings
from ..schemas.model import HealthStatus, ModelInfo

logger = logging.getLogger(__name__)


async def list_models(settings: Settings = Depends(get_settings)):
    return [ModelInfo(**model) for model in settings.AVAILABLE_MODELS]


async def health(
        db: AsyncSession = Depends(get_db),
        settings: Settings = Depends(get_settings)
):
    try:
        await db.execute(text("SELECT 1"))
        database = True
    except SQLAlchemyError as e:
        logger.error(f"Health check failed: {e}")
        database = False
    return HealthStatus(status="ok" if database else "degraded", database=database, version=settings.VERSION)


ENDPOINTS = (
    Endpoint("GET", "/models", list_models, response_model=list[ModelInfo]),
    Endpoint("GET", "/health", health, response_model=HealthStatus),
)

router = build_router(ENDPOINTS, tags=["meta"])
