"""
Pytest configuration and fixtures for the test suite.

This module provides shared fixtures for the setup wizard and database tests.
"""

import os
from pathlib import Path
from unittest.mock import MagicMock, Mock

import pytest

# Set test environment before importing package modules
os.environ.setdefault("LOG_LEVEL", "WARNING")

from saas_starter.core.config import Settings
from saas_starter.db.bootstrap import reset_bootstrap_state
from tests.fakes import FakeD1Client, FakeRunner


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "setup: Setup wizard tests")
    config.addinivalue_line("markers", "db: Database tests")


@pytest.fixture(autouse=True)
def reset_schema_bootstrap():
    """The bootstrap future is process-wide; every test starts clean."""
    reset_bootstrap_state()
    yield
    reset_bootstrap_state()


# =============================================================================
# Setup Wizard Fixtures
# =============================================================================

@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def wrangler_config_path(tmp_path: Path) -> Path:
    path = tmp_path / "wrangler.jsonc"
    path.write_text(
        "{\n"
        '  "name": "saas-starter",\n'
        '  "d1_databases": [\n'
        "    {\n"
        '      "binding": "BINDING_NAME",\n'
        '      "database_name": "YOUR_DB_NAME",\n'
        '      "database_id": "YOUR_DB_ID"\n'
        "    }\n"
        "  ]\n"
        "}\n"
    )
    return path


@pytest.fixture
def test_settings(tmp_path: Path, wrangler_config_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        WRANGLER_CONFIG_PATH=str(wrangler_config_path),
        ENV_FILE_PATH=str(tmp_path / ".env"),
        STRIPE_CLI="stripe",
        WRANGLER_CLI="pnpm wrangler",
        BASE_URL="http://localhost:3000",
        COMMAND_TIMEOUT_SECONDS=None,
    )


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture
def fake_d1_client():
    client = FakeD1Client()
    yield client
    client.close()


@pytest.fixture
def mock_stripe() -> MagicMock:
    """Stripe module stand-in recording product and price creation."""
    stripe_client = MagicMock()
    created = []

    def create_product(**kwargs):
        product = Mock(id=f"prod_{len(created) + 1}")
        created.append(kwargs["name"])
        return product

    stripe_client.Product.create.side_effect = create_product
    stripe_client.Price.create.return_value = Mock(id="price_1")
    return stripe_client


@pytest.fixture
def seed_settings() -> Settings:
    return Settings(
        _env_file=None,
        SEED_USER_EMAIL="test@test.com",
        SEED_USER_PASSWORD="admin123",
        SEED_TEAM_NAME="Test Team",
    )
