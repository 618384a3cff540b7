"""
Unit tests for the Wrangler output parsers.

Covers account discovery from ``wrangler whoami`` and database recovery from
``wrangler d1 create``.
"""

import json

import pytest

from saas_starter.setup.parsers import (
    AccountInfo,
    D1CreateResult,
    extract_accounts,
    format_account,
    is_account_id,
    is_uuid,
    parse_d1_create_result,
)
from tests.fakes import ACCOUNT_ID, DATABASE_ID, OTHER_ACCOUNT_ID

WHOAMI_TABLE = f"""
 ⛅️ wrangler 3.78.0
-------------------
Getting User settings...
👋 You are logged in with an OAuth Token, associated with the email dev@example.com.
┌──────────────────────────────┬──────────────────────────────────┐
│ Account Name                 │ Account ID                       │
├──────────────────────────────┼──────────────────────────────────┤
│ Dev's Account                │ {ACCOUNT_ID} │
├──────────────────────────────┼──────────────────────────────────┤
│ Acme Corp                    │ {OTHER_ACCOUNT_ID} │
└──────────────────────────────┴──────────────────────────────────┘
"""


class TestIdentifiers:

    @pytest.mark.unit
    def test_account_id_length(self):
        """Test that only 32 hex characters form an account id."""
        assert is_account_id(ACCOUNT_ID)
        assert is_account_id(ACCOUNT_ID.upper())
        assert not is_account_id(ACCOUNT_ID[:31])
        assert not is_account_id(ACCOUNT_ID + "0")
        assert not is_account_id("g" * 32)
        assert not is_account_id("")

    @pytest.mark.unit
    def test_uuid(self):
        assert is_uuid(DATABASE_ID)
        assert not is_uuid(DATABASE_ID.replace("-", ""))
        assert not is_uuid("not-a-uuid")

    @pytest.mark.unit
    def test_format_account(self):
        assert format_account(AccountInfo(id=ACCOUNT_ID, name="Acme")) == f"Acme ({ACCOUNT_ID})"
        assert format_account(AccountInfo(id=ACCOUNT_ID)) == ACCOUNT_ID


class TestExtractAccounts:
    """Tests for extract_accounts."""

    @pytest.mark.unit
    @pytest.mark.parametrize("raw", [
        json.dumps({"accounts": [{"id": ACCOUNT_ID, "name": "Acme"}]}),
        f"│ Acme │ {ACCOUNT_ID} │",
        f"Acme (id: {ACCOUNT_ID})",
    ])
    def test_each_format_finds_account(self, raw):
        """Test that JSON, table and inline formats agree."""
        assert extract_accounts(raw) == [AccountInfo(id=ACCOUNT_ID, name="Acme")]

    @pytest.mark.unit
    def test_account_id_label(self):
        accounts = extract_accounts(f"Account ID: {ACCOUNT_ID}")
        assert accounts == [AccountInfo(id=ACCOUNT_ID, name=None)]

    @pytest.mark.unit
    def test_table_skips_header_and_keeps_order(self):
        accounts = extract_accounts(WHOAMI_TABLE)

        assert [a.id for a in accounts] == [ACCOUNT_ID, OTHER_ACCOUNT_ID]
        assert accounts[0].name == "Devs Account"
        assert accounts[1].name == "Acme Corp"

    @pytest.mark.unit
    def test_ascii_table(self):
        raw = f"| Acme | {ACCOUNT_ID} |"
        assert extract_accounts(raw) == [AccountInfo(id=ACCOUNT_ID, name="Acme")]

    @pytest.mark.unit
    def test_ansi_is_ignored(self):
        raw = f"\x1b[1mAcme\x1b[0m (id: \x1b[36m{ACCOUNT_ID}\x1b[0m)"
        assert extract_accounts(raw) == [AccountInfo(id=ACCOUNT_ID, name="Acme")]

    @pytest.mark.unit
    def test_json_account_and_result_accounts(self):
        raw = json.dumps({
            "account": {"id": ACCOUNT_ID, "name": "Primary"},
            "result": {"accounts": [{"id": OTHER_ACCOUNT_ID, "name": "Secondary"}]},
        })
        accounts = extract_accounts(raw)

        assert accounts == [
            AccountInfo(id=ACCOUNT_ID, name="Primary"),
            AccountInfo(id=OTHER_ACCOUNT_ID, name="Secondary"),
        ]

    @pytest.mark.unit
    def test_deduplicates_and_first_name_wins(self):
        raw = "\n".join([
            f"First (id: {ACCOUNT_ID})",
            f"│ Second │ {ACCOUNT_ID} │",
            f"Account ID: {ACCOUNT_ID}",
        ])
        assert extract_accounts(raw) == [AccountInfo(id=ACCOUNT_ID, name="First")]

    @pytest.mark.unit
    @pytest.mark.parametrize("bad_id", [ACCOUNT_ID[:31], ACCOUNT_ID + "a"])
    def test_rejects_wrong_length_ids(self, bad_id):
        raw = json.dumps({"accounts": [{"id": bad_id, "name": "Acme"}]})
        raw += f"\n│ Acme │ {bad_id} │"
        assert extract_accounts(raw) == []

    @pytest.mark.unit
    def test_idempotent(self):
        """Test that re-parsing the formatted output finds the same accounts."""
        accounts = extract_accounts(WHOAMI_TABLE)
        rendered = "\n".join(f"│ {a.name} │ {a.id} │" for a in accounts)
        assert extract_accounts(rendered) == accounts

    @pytest.mark.unit
    @pytest.mark.parametrize("raw", ["", None, "You are not authenticated."])
    def test_nothing_found(self, raw):
        assert extract_accounts(raw) == []


class TestParseD1CreateResult:
    """Tests for parse_d1_create_result."""

    @pytest.mark.unit
    def test_json_result(self):
        raw = json.dumps({"result": {"uuid": DATABASE_ID, "name": "prod-db"}})
        assert parse_d1_create_result(raw, "fallback") == D1CreateResult(DATABASE_ID, "prod-db")

    @pytest.mark.unit
    def test_json_aliases_and_fallback_name(self):
        raw = json.dumps({"databaseId": DATABASE_ID})
        assert parse_d1_create_result(raw, "fallback") == D1CreateResult(DATABASE_ID, "fallback")

    @pytest.mark.unit
    def test_config_snippet(self):
        raw = f"""✅ Successfully created DB 'my-db' in region WNAM
Add the following to your configuration file in your d1_databases array:
{{
  "d1_databases": [
    {{
      "binding": "DB",
      "database_name": "my-db",
      "database_id": "{DATABASE_ID}"
    }}
  ]
}}"""
        assert parse_d1_create_result(raw, "fallback") == D1CreateResult(DATABASE_ID, "my-db")

    @pytest.mark.unit
    def test_snippet_in_broken_json(self):
        raw = f'[[d1_databases]]\n"database_id": "{DATABASE_ID}"\n'
        assert parse_d1_create_result(raw, "x") == D1CreateResult(DATABASE_ID, "x")

    @pytest.mark.unit
    def test_bare_uuid_with_db_name(self):
        raw = f'Created DB "my-db" with id {DATABASE_ID}'
        assert parse_d1_create_result(raw, "fallback") == D1CreateResult(DATABASE_ID, "my-db")

    @pytest.mark.unit
    def test_bare_uuid_only(self):
        raw = f"created {DATABASE_ID}"
        assert parse_d1_create_result(raw, "fallback") == D1CreateResult(DATABASE_ID, "fallback")

    @pytest.mark.unit
    @pytest.mark.parametrize("raw", ["", None, "✘ [ERROR] A request to the Cloudflare API failed."])
    def test_unparseable(self, raw):
        assert parse_d1_create_result(raw, "fallback") is None
