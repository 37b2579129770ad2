# modelchat/db/init_db.py
import asyncio
import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine
from tenacity import retry, stop_after_attempt, wait_exponential

from . import models  # noqa: F401  registers the tables on Base.metadata
from .session import Base, build_engine
from ..core.config import Settings

logger = logging.getLogger(__name__)


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    reraise=True
)
async def verify_db_connection(engine: AsyncEngine) -> bool:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error(f"Database connection failed: {e}")
        raise


async def init_db(engine: AsyncEngine) -> None:
    """Create missing tables. Existing data is left alone."""
    await verify_db_connection(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database tables created successfully")


async def _main() -> None:
    engine = build_engine(Settings())
    try:
        await init_db(engine)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(_main())
