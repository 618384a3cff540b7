"""
Unit tests for .env generation.
"""

from unittest.mock import MagicMock

import pytest

from saas_starter.setup import env_file
from saas_starter.setup.env_file import build_env_vars, format_env_file, write_env_file

EXPECTED_KEYS = [
    "CLOUDFLARE_ACCOUNT_ID",
    "CLOUDFLARE_D1_DATABASE_ID",
    "CLOUDFLARE_D1_DATABASE_NAME",
    "CLOUDFLARE_D1_BINDING",
    "CLOUDFLARE_D1_API_TOKEN",
    "STRIPE_SECRET_KEY",
    "STRIPE_WEBHOOK_SECRET",
    "BASE_URL",
    "AUTH_SECRET",
]


def sample_env_vars(**overrides):
    values = dict(
        account_id="acc",
        database_id="db-id",
        database_name="db-name",
        binding_name="DB",
        api_token="",
        stripe_secret_key="sk_test_1",
        stripe_webhook_secret="whsec_1",
        base_url="http://localhost:3000",
        auth_secret="secret",
    )
    values.update(overrides)
    return build_env_vars(**values)


class TestEnvFile:

    @pytest.mark.unit
    def test_key_order(self):
        assert list(sample_env_vars()) == EXPECTED_KEYS

    @pytest.mark.unit
    def test_format(self):
        content = format_env_file({"A": "1", "B": "", "C": None})
        assert content == "A=1\nB=\nC=\n"

    @pytest.mark.unit
    def test_write_overwrites(self, tmp_path):
        """Test that an existing file is replaced, not merged."""
        path = tmp_path / ".env"
        path.write_text("OLD_VALUE=1\n")

        write_env_file(sample_env_vars(), path)

        lines = path.read_text().splitlines()
        assert [line.split("=", 1)[0] for line in lines] == EXPECTED_KEYS
        assert "CLOUDFLARE_D1_API_TOKEN=" in lines
        assert "OLD_VALUE=1" not in lines

    @pytest.mark.unit
    def test_write_logs_at_debug(self, tmp_path, monkeypatch):
        logger = MagicMock()
        monkeypatch.setattr(env_file, "logger", logger)

        write_env_file(sample_env_vars(), tmp_path / ".env")

        logger.info.assert_not_called()
        logger.debug.assert_called_once()
