"""Seed database from CSV files.

Usage:
    python -m app.tools.seed_db
    python -m app.tools.seed_db --data-dir data
    python -m app.tools.seed_db --drop  # drop existing data first
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.adapters.csv_loader.loader import load_companies, load_users
from app.adapters.persistence.database import async_session_factory
from app.adapters.persistence.models import CompanyModel, TicketModel, UserModel

logging.basicConfig(level=logging.INFO, format="%(levelname)s | %(message)s")
logger = logging.getLogger(__name__)


async def _drop_data(session: AsyncSession) -> None:
    """Delete all data in correct order (respecting FK constraints)."""
    for model in [TicketModel, UserModel, CompanyModel]:
        await session.execute(delete(model))
    await session.commit()
    logger.info("Dropped all existing data")


async def seed(data_dir: Path, drop: bool = False) -> dict[str, int]:
    """Main seed function. Returns counts of seeded records."""
    counts = {"companies": 0, "users": 0}

    company_csv = _find_csv(data_dir, ["companies", "company"])
    user_csv = _find_csv(data_dir, ["users", "officers", "staff"])

    if not company_csv:
        raise FileNotFoundError(
            f"No companies CSV found in {data_dir}. Expected something like companies.csv"
        )

    async with async_session_factory() as session:
        if drop:
            await _drop_data(session)

        # 1. Seed companies
        company_name_to_id: dict[str, int] = {}
        for cd in load_companies(company_csv):
            existing = await session.execute(
                select(CompanyModel).where(CompanyModel.name == cd["name"])
            )
            if existing.scalars().first():
                logger.debug("Company '%s' already exists, skipping", cd["name"])
                continue
            session.add(CompanyModel(name=cd["name"]))
            counts["companies"] += 1
        await session.commit()

        result = await session.execute(select(CompanyModel))
        for c in result.scalars():
            company_name_to_id[c.name] = c.id

        # 2. Seed users (if CSV exists), in file order so created_at follows it
        if user_csv:
            for ud in load_users(user_csv):
                company_id = company_name_to_id.get(ud["company_name"])
                if company_id is None:
                    logger.warning(
                        "User '%s': company '%s' not found, skipping",
                        ud["name"], ud["company_name"],
                    )
                    continue

                existing = await session.execute(
                    select(UserModel).where(
                        UserModel.name == ud["name"],
                        UserModel.role == ud["role"],
                        UserModel.company_id == company_id,
                    )
                )
                if existing.scalars().first():
                    logger.debug("User '%s' already exists, skipping", ud["name"])
                    continue

                user = UserModel(name=ud["name"], role=ud["role"], company_id=company_id)
                if ud["created_at"] is not None:
                    user.created_at = ud["created_at"]
                session.add(user)
                # flush per row: distinct, ordered created_at defaults
                await session.flush()
                counts["users"] += 1
            await session.commit()
        else:
            logger.info("No users CSV found — skipping user import")

    logger.info(
        "Seed complete: %d companies, %d users",
        counts["companies"], counts["users"],
    )
    return counts


def _find_csv(data_dir: Path, name_hints: list[str]) -> Path | None:
    """Find a CSV file matching any of the name hints."""
    for f in sorted(data_dir.glob("*.csv")):
        fname_lower = f.stem.lower()
        for hint in name_hints:
            if hint in fname_lower:
                logger.info("Found CSV: %s (matched hint '%s')", f.name, hint)
                return f
    return None


async def _verify_data() -> None:
    """Print sanity checks after seeding."""
    async with async_session_factory() as session:
        companies = (await session.execute(select(CompanyModel))).scalars().all()
        users = (await session.execute(select(UserModel))).scalars().all()
        tickets = (await session.execute(select(TicketModel))).scalars().all()

        print(f"\n{'='*50}")
        print("SEED VERIFICATION")
        print(f"{'='*50}")
        print(f"Companies: {len(companies)}")
        print(f"Users:     {len(users)}")
        print(f"Tickets:   {len(tickets)}")

        roles: dict[str, int] = {}
        for u in users:
            roles[u.role] = roles.get(u.role, 0) + 1
        print(f"Role distribution: {roles}")

        # Companies where address-change / strike-off routing would be ambiguous
        per_company: dict[tuple[int, str], int] = {}
        for u in users:
            per_company[(u.company_id, u.role)] = per_company.get((u.company_id, u.role), 0) + 1
        ambiguous = sorted(
            {cid for (cid, role), n in per_company.items() if role != "accountant" and n > 1}
        )
        print(f"Companies with >1 secretary or director: {ambiguous}")
        print(f"{'='*50}\n")


def main():
    parser = argparse.ArgumentParser(description="Seed companies and users from CSV files")
    parser.add_argument(
        "--data-dir", type=str, default="data",
        help="Directory containing CSV files (default: data)",
    )
    parser.add_argument(
        "--drop", action="store_true",
        help="Drop existing data before seeding",
    )
    parser.add_argument(
        "--verify-only", action="store_true",
        help="Only run verification, don't seed",
    )
    args = parser.parse_args()

    data_dir = Path(args.data_dir)
    if not args.verify_only and not data_dir.exists():
        logger.error("Data directory not found: %s", data_dir)
        sys.exit(1)

    if args.verify_only:
        asyncio.run(_verify_data())
    else:
        async def run_all():
            await seed(data_dir, drop=args.drop)
            await _verify_data()
        asyncio.run(run_all())


if __name__ == "__main__":
    main()
