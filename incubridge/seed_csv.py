"""
Seed script: incubators.csv -> admins table (user_type = incubator).

Expected columns: email, password, name, specialization, and optionally
incubator_name, contact_number, location, website.

Usage:
    python -m incubridge.seed_csv --csv incubators.csv
"""

from __future__ import annotations

import argparse
import asyncio
import logging

import pandas as pd
from sqlalchemy import select

from incubridge.database import async_session, init_db
from incubridge.models import AccountType, Admin, Domain
from incubridge.security import hash_password

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("email", "password", "name", "specialization")
OPTIONAL_COLUMNS = ("incubator_name", "contact_number", "location", "website")

_DOMAINS = {d.value for d in Domain}


def read_incubators(csv_path: str) -> pd.DataFrame:
    """Read and normalise the CSV; rows with a bad email or domain are dropped."""
    raw = pd.read_csv(csv_path, encoding="utf-8", dtype=str).fillna("")
    raw.columns = [c.strip().lower() for c in raw.columns]

    missing = [c for c in REQUIRED_COLUMNS if c not in raw.columns]
    if missing:
        raise ValueError(f"CSV is missing columns: {', '.join(missing)}")
    for col in OPTIONAL_COLUMNS:
        if col not in raw.columns:
            raw[col] = ""

    for col in raw.columns:
        raw[col] = raw[col].str.strip()
    raw["email"] = raw["email"].str.lower()

    bad_domain = ~raw["specialization"].isin(_DOMAINS)
    for _, row in raw[bad_domain].iterrows():
        logger.warning("Skipping %s: unknown specialization %r", row["email"], row["specialization"])
    no_email = raw["email"] == ""
    if no_email.any():
        logger.warning("Skipping %d rows without an email", int(no_email.sum()))

    rows = raw[~bad_domain & ~no_email]
    return rows.drop_duplicates(subset="email", keep="first").reset_index(drop=True)


async def seed(csv_path: str, session_factory=async_session) -> dict:
    """Insert incubators from *csv_path*; existing emails are left untouched."""
    rows = read_incubators(csv_path)

    created = skipped = 0
    async with session_factory() as session:
        existing = set(
            (await session.execute(select(Admin.email).where(Admin.email.in_(list(rows["email"])))))
            .scalars()
            .all()
        )
        for _, row in rows.iterrows():
            if row["email"] in existing:
                skipped += 1
                continue
            session.add(
                Admin(
                    email=row["email"],
                    password_hash=hash_password(row["password"]),
                    name=row["name"],
                    user_type=AccountType.INCUBATOR.value,
                    specialization=row["specialization"],
                    incubator_name=row["incubator_name"] or row["name"],
                    contact_number=row["contact_number"] or None,
                    location=row["location"] or None,
                    website=row["website"] or None,
                )
            )
            created += 1
        await session.commit()

    logger.info("Seeded incubators from %s: %d created, %d skipped", csv_path, created, skipped)
    return {"created": created, "skipped": skipped}


async def _main(csv_path: str):
    await init_db()
    await seed(csv_path)


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    parser = argparse.ArgumentParser(description="Seed incubator accounts from a CSV file")
    parser.add_argument("--csv", default="incubators.csv")
    args = parser.parse_args()
    asyncio.run(_main(args.csv))


if __name__ == "__main__":
    main()
