"""
Startup script.

Handles:
    1. Database initialisation (creates tables)
    2. Optional incubator seeding from a CSV file
    3. Starts the FastAPI app (uvicorn) in the foreground

Usage:
    python run.py                          # create tables + serve
    python run.py --seed incubators.csv    # also seed incubators first
    python run.py --no-serve --seed f.csv  # seed only
"""

import argparse
import asyncio
import logging
import os
import sys

from incubridge import config
from incubridge.database import init_db

logger = logging.getLogger("incubridge.run")


async def prepare(seed_csv: str = ""):
    await init_db()
    logger.info("Database schema ready")
    if seed_csv:
        from incubridge.seed_csv import seed

        await seed(seed_csv)


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--seed", default=os.environ.get("SEED_CSV", ""), help="Incubators CSV to load")
    parser.add_argument("--no-serve", action="store_true", help="Prepare the database and exit")
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    asyncio.run(prepare(args.seed))
    if args.no_serve:
        return

    port = os.environ.get("PORT", "8000")
    logger.info("Starting API on port %s", port)
    os.execvp(
        sys.executable,
        [sys.executable, "-m", "uvicorn", "incubridge.app:app",
         "--host", "0.0.0.0", "--port", port,
         "--log-level", config.LOG_LEVEL.lower()],
    )


if __name__ == "__main__":
    main()
