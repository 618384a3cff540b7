"""
Unit tests for locating the D1 binding in a Workers environment.
"""

import pytest

from saas_starter.core.config import Settings
from saas_starter.core.exceptions import DatabaseBindingError
from saas_starter.db import connection
from saas_starter.db.connection import get_db, resolve_d1_database
from saas_starter.db.schema import BOOTSTRAP_STATEMENTS
from tests.fakes import RecordingBinding


@pytest.fixture
def binding_setting(monkeypatch):
    """Replace the global settings with one whose binding name can be chosen."""
    def apply(name=None):
        monkeypatch.setattr(
            connection, "settings", Settings(_env_file=None, CLOUDFLARE_D1_BINDING=name)
        )
    apply()
    return apply


class TestResolveD1Database:

    @pytest.mark.unit
    def test_default_binding(self, binding_setting):
        db = object()
        assert resolve_d1_database({"DB": db}) is db

    @pytest.mark.unit
    def test_configured_argument_wins(self, binding_setting):
        binding_setting("FROM_SETTINGS")
        primary, other = object(), object()

        bindings = {"PRIMARY": primary, "FROM_SETTINGS": other}
        assert resolve_d1_database(bindings, configured="PRIMARY") is primary

    @pytest.mark.unit
    def test_setting_then_env_var(self, binding_setting):
        from_setting, from_env = object(), object()
        bindings = {
            "CLOUDFLARE_D1_BINDING": "ENV_DB",
            "ENV_DB": from_env,
            "SETTING_DB": from_setting,
        }

        assert resolve_d1_database(bindings) is from_env

        binding_setting("SETTING_DB")
        assert resolve_d1_database(bindings) is from_setting

    @pytest.mark.unit
    def test_legacy_names(self, binding_setting):
        legacy = object()
        assert resolve_d1_database({"MY_D1": legacy}, configured="MISSING") is legacy

    @pytest.mark.unit
    def test_missing_lists_available(self, binding_setting):
        with pytest.raises(DatabaseBindingError) as exc_info:
            resolve_d1_database({"KV": object(), "ASSETS": object()}, configured="APP_DB")

        assert exc_info.value.message == (
            'Missing Cloudflare D1 binding "APP_DB". Available bindings: ASSETS, KV.'
        )

    @pytest.mark.unit
    def test_missing_with_no_bindings(self, binding_setting):
        with pytest.raises(DatabaseBindingError) as exc_info:
            resolve_d1_database({})

        assert exc_info.value.message.endswith("Available bindings: none.")

    @pytest.mark.unit
    def test_not_a_mapping(self, binding_setting):
        with pytest.raises(DatabaseBindingError):
            resolve_d1_database(None)


class TestGetDb:

    @pytest.mark.db
    @pytest.mark.asyncio
    async def test_bootstraps_before_returning(self, binding_setting):
        binding = RecordingBinding()

        db = await get_db({"DB": binding})

        assert db is binding
        assert binding.executed == list(BOOTSTRAP_STATEMENTS)
