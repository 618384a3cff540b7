#!/usr/bin/env python3
"""
Seed the D1 database through the Cloudflare HTTP API.

Usage:
    uv run python scripts/seed_database.py

Environment Variables (read from .env):
    CLOUDFLARE_ACCOUNT_ID - Cloudflare account that owns the database
    CLOUDFLARE_D1_DATABASE_ID - D1 database UUID
    CLOUDFLARE_D1_API_TOKEN - API token with Account.D1:Edit
    STRIPE_SECRET_KEY - Stripe secret key for product creation
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from saas_starter.db.seed import main


if __name__ == "__main__":
    main()
