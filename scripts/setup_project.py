#!/usr/bin/env python3
"""
Interactive project setup.

Checks the Stripe and Wrangler CLIs, creates or records a Cloudflare D1
database, patches wrangler.jsonc and writes .env.

Usage:
    uv run python scripts/setup_project.py
    uv run python scripts/setup_project.py --env-file .env.local --command-timeout 120
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from saas_starter.setup.wizard import main


if __name__ == "__main__":
    main()
