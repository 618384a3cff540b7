#!/usr/bin/env python3
"""
Initialize the Cloudflare D1 database tables over the HTTP API.

Applies the same bootstrap statements the app runs at startup, so a fresh
database can be prepared before the first deploy.

Usage:
    # Create tables
    uv run python scripts/init_database.py

    # Show tables and row counts
    uv run python scripts/init_database.py status

    # With environment file
    ENV_FILE=.env.production python scripts/init_database.py

Environment Variables:
    CLOUDFLARE_ACCOUNT_ID - Cloudflare account that owns the database
    CLOUDFLARE_D1_DATABASE_ID - D1 database UUID
    CLOUDFLARE_D1_API_TOKEN - API token with Account.D1:Edit
"""

import asyncio
import logging
import os
import sys
from pathlib import Path

# Configure logging for CLI output
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Load environment variables
from dotenv import load_dotenv

env_file = os.environ.get("ENV_FILE", ".env")
env_path = project_root / env_file
if env_path.exists():
    load_dotenv(env_path)
    logger.info(f"Loaded environment from: {env_path}")
else:
    logger.warning(f"No environment file found at: {env_path}")
    logger.info("Using system environment variables")


def _build_client():
    from saas_starter.core.config import Settings
    from saas_starter.core.exceptions import ConfigurationError
    from saas_starter.db.d1_client import D1HttpClient

    try:
        return D1HttpClient.from_settings(Settings())
    except ConfigurationError as e:
        logger.error(e.message)
        logger.error("Run scripts/setup_project.py first, or set the Cloudflare variables.")
        sys.exit(1)


async def init_tables():
    """Apply the bootstrap statements."""
    from saas_starter.core.exceptions import StarterError
    from saas_starter.db.bootstrap import ensure_d1_schema
    from saas_starter.db.d1_client import D1HttpDatabase
    from saas_starter.db.schema import BOOTSTRAP_STATEMENTS

    logger.info("=== D1 Database Initialization ===")

    async with _build_client() as client:
        logger.info(f"Applying {len(BOOTSTRAP_STATEMENTS)} statements...")
        try:
            await ensure_d1_schema(D1HttpDatabase(client))
        except StarterError as e:
            logger.error(f"Failed to create tables: {e.message}")
            sys.exit(1)

        logger.info("Tables created successfully!")
        await list_tables(client)

    logger.info("=== Initialization Complete ===")


async def list_tables(client, with_counts: bool = False):
    """Log the user tables in the database."""
    from saas_starter.core.exceptions import D1QueryError

    rows = await client.query(
        "SELECT name FROM sqlite_master "
        "WHERE type = 'table' AND name NOT LIKE 'sqlite_%' AND name NOT LIKE '_cf_%' "
        "ORDER BY name"
    )
    if not rows:
        logger.warning("No tables found. Run 'init' to create tables.")
        return

    logger.info("Tables in database:")
    for row in rows:
        table_name = row["name"]
        if not with_counts:
            logger.info(f"  - {table_name}")
            continue
        try:
            count_rows = await client.query(f'SELECT COUNT(*) AS count FROM "{table_name}"')
            row_count = count_rows[0]["count"] if count_rows else 0
            logger.info(f"  - {table_name}: {row_count} rows")
        except D1QueryError:
            logger.info(f"  - {table_name}")


async def show_status():
    """Show database tables and row counts."""
    from saas_starter.core.exceptions import StarterError

    logger.info("=== Database Status ===")

    async with _build_client() as client:
        logger.info(f"Database: {client.database_url}")
        try:
            await list_tables(client, with_counts=True)
        except StarterError as e:
            logger.error(f"Could not query database: {e.message}")
            sys.exit(1)


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Initialize the Cloudflare D1 database for the SaaS starter"
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="init",
        choices=["init", "status"],
        help="Command to run (default: init)"
    )

    args = parser.parse_args()

    if args.command == "init":
        asyncio.run(init_tables())
    elif args.command == "status":
        asyncio.run(show_status())


if __name__ == "__main__":
    main()
