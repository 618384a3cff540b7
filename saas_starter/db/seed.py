#!/usr/bin/env python3
"""
Seed the D1 database with a default user, team and Stripe products.

The user, team and membership are only inserted when missing, so the script
can be re-run. The Stripe products are created on every run.

Usage:
    uv run python scripts/seed_database.py
    saas-starter-seed

Environment Variables:
    CLOUDFLARE_ACCOUNT_ID, CLOUDFLARE_D1_DATABASE_ID, CLOUDFLARE_D1_API_TOKEN
    STRIPE_SECRET_KEY
"""

import argparse
import asyncio
import sys
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import stripe
from sqlalchemy import and_, insert, select
from sqlalchemy.dialects import sqlite

from saas_starter.core.config import Settings, settings
from saas_starter.core.exceptions import SeedError, StarterError
from saas_starter.core.logging import configure_logging, get_logger
from saas_starter.core.security import hash_password
from saas_starter.db.d1_client import D1HttpClient
from saas_starter.db.schema import BOOTSTRAP_STATEMENTS, team_members, teams, users

logger = get_logger(__name__)

SEED_USER_ROLE = "owner"
SEED_MEMBER_ROLE = "owner"

BILLING_PLANS = (
    {"name": "Base", "description": "Base subscription plan", "unit_amount": 800},
    {"name": "Plus", "description": "Plus subscription plan", "unit_amount": 1200},
)
BILLING_CURRENCY = "usd"
BILLING_INTERVAL = "month"
TRIAL_PERIOD_DAYS = 7


@dataclass
class SeedReport:
    """What a seed run inserted or created."""
    users_created: int = 0
    teams_created: int = 0
    memberships_created: int = 0
    products_created: int = 0
    user_id: Optional[int] = None
    team_id: Optional[int] = None


class SeedRepository:
    """SQLAlchemy Core statements compiled for SQLite and sent over the D1 HTTP API."""

    def __init__(self, client: D1HttpClient):
        self.client = client
        self._dialect = sqlite.dialect()

    def _compile(self, statement) -> tuple:
        compiled = statement.compile(dialect=self._dialect)
        positions = compiled.positiontup or []
        return str(compiled), [compiled.params[name] for name in positions]

    async def execute(self, statement, method: str = "all") -> List[Dict[str, Any]]:
        sql, params = self._compile(statement)
        return await self.client.query(sql, params, method)

    async def first(self, statement) -> Optional[Dict[str, Any]]:
        rows = await self.execute(statement.limit(1))
        return rows[0] if rows else None

    async def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return await self.first(select(users).where(users.c.email == email))

    async def get_team_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        return await self.first(select(teams).where(teams.c.name == name))

    async def get_membership(self, user_id: int, team_id: int) -> Optional[Dict[str, Any]]:
        return await self.first(
            select(team_members).where(
                and_(team_members.c.team_id == team_id, team_members.c.user_id == user_id)
            )
        )


async def apply_bootstrap_statements(client: D1HttpClient) -> None:
    """Run every bootstrap statement, in order, one at a time."""
    for statement in BOOTSTRAP_STATEMENTS:
        await client.query(statement, [], "run")


def create_stripe_products(stripe_client: Any = stripe) -> int:
    """Create the Base and Plus products with a monthly price each.

    Not idempotent: every call creates new products.
    """
    print("Creating Stripe products and prices...")

    for plan in BILLING_PLANS:
        product = stripe_client.Product.create(
            name=plan["name"],
            description=plan["description"],
        )
        stripe_client.Price.create(
            product=product.id,
            unit_amount=plan["unit_amount"],
            currency=BILLING_CURRENCY,
            recurring={
                "interval": BILLING_INTERVAL,
                "trial_period_days": TRIAL_PERIOD_DAYS,
            },
        )
        logger.info("Created Stripe product", product=plan["name"], product_id=product.id)

    print("Stripe products and prices created successfully.")
    return len(BILLING_PLANS)


async def seed(
    client: D1HttpClient,
    config: Optional[Settings] = None,
    hash_func: Callable[[str], str] = hash_password,
    stripe_client: Any = stripe,
) -> SeedReport:
    """Bootstrap the schema, insert the default records, create Stripe products."""
    config = config or settings
    report = SeedReport()
    repo = SeedRepository(client)

    email = config.SEED_USER_EMAIL
    team_name = config.SEED_TEAM_NAME

    await apply_bootstrap_statements(client)

    user = await repo.get_user_by_email(email)
    if not user:
        await repo.execute(
            insert(users).values(
                email=email,
                password_hash=hash_func(config.SEED_USER_PASSWORD),
                role=SEED_USER_ROLE,
            ),
            "run",
        )
        report.users_created += 1
        user = await repo.get_user_by_email(email)

    if not user:
        raise SeedError("Failed to retrieve the seeded user.", details={"email": email})

    report.user_id = user["id"]
    print("Initial user created.")

    team = await repo.get_team_by_name(team_name)
    if not team:
        await repo.execute(insert(teams).values(name=team_name), "run")
        report.teams_created += 1
        team = await repo.get_team_by_name(team_name)

    if not team:
        raise SeedError("Failed to retrieve the seeded team.", details={"team": team_name})

    report.team_id = team["id"]

    membership = await repo.get_membership(user["id"], team["id"])
    if not membership:
        await repo.execute(
            insert(team_members).values(
                team_id=team["id"],
                user_id=user["id"],
                role=SEED_MEMBER_ROLE,
            ),
            "run",
        )
        report.memberships_created += 1

    report.products_created = create_stripe_products(stripe_client)

    logger.info(
        "Seed complete",
        users_created=report.users_created,
        teams_created=report.teams_created,
        memberships_created=report.memberships_created,
        products_created=report.products_created,
    )
    return report


async def run_seed(config: Settings) -> SeedReport:
    stripe.api_key = config.require("STRIPE_SECRET_KEY")
    async with D1HttpClient.from_settings(config) as client:
        return await seed(client, config)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Seed the D1 database with a default user, team and Stripe products"
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level for diagnostics (default: LOG_LEVEL setting)",
    )
    args = parser.parse_args()

    configure_logging(args.log_level)

    try:
        asyncio.run(run_seed(settings))
    except StarterError as e:
        logger.error("Seed process failed", error_code=e.error_code, error=e.message)
        print(f"Seed process failed: {e.message}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        logger.exception("Seed process failed")
        print(f"Seed process failed: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        print("Seed process finished. Exiting...")

    sys.exit(0)


if __name__ == "__main__":
    main()
