"""
Database bootstrap job.

Creates all tables and the system collection. Can be run as a standalone
script before first deploy, and runs on application startup.
"""

import argparse
import asyncio
import logging

from cardex.db.database import drop_db, init_db, session_scope
from cardex.services.collection_ledger import SYSTEM_OWNER, ensure_collection

logger = logging.getLogger(__name__)


async def ensure_system_collection() -> None:
    """Create the system collection if it does not exist yet."""
    async with session_scope() as session:
        await ensure_collection(session, SYSTEM_OWNER)
    logger.info("System collection %r ready", SYSTEM_OWNER)


async def run_init(reset: bool = False) -> None:
    """
    Create tables and the system collection.

    Args:
        reset: Drop every table first. Destroys all data.
    """
    if reset:
        logger.warning("Dropping all tables")
        await drop_db()

    await init_db()
    logger.info("Tables created")
    await ensure_system_collection()


def main() -> None:
    """CLI entry point for database bootstrap."""
    parser = argparse.ArgumentParser(description="Create Cardex database tables.")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop all tables before creating them (destroys data)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_init(reset=args.reset))


if __name__ == "__main__":
    main()
