"""Create (or with --reset, recreate) every table the status cascade touches.

Meant for local development and throwaway databases; use alembic for
anything that holds real data.
"""

import argparse
import asyncio

import structlog

from app.database import engine
from app.middleware.logging import configure_logging
from app.models import combined_metadata

logger = structlog.get_logger(__name__)


async def init_db(reset: bool = False) -> None:
    """Create all tables, dropping existing ones first when ``reset`` is set."""
    metadata = combined_metadata()

    async with engine.begin() as conn:
        if reset:
            await conn.run_sync(metadata.drop_all)
            logger.warning("tables_dropped", tables=sorted(metadata.tables))

        await conn.run_sync(metadata.create_all)

    await engine.dispose()
    logger.info("database_initialized", tables=len(metadata.tables))


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--reset", action="store_true", help="drop existing tables first")
    args = parser.parse_args()

    configure_logging()
    asyncio.run(init_db(reset=args.reset))
