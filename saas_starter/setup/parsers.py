"""
Parsers for Wrangler CLI output.

Wrangler's ``whoami`` and ``d1 create`` output changes between versions and
terminal widths (JSON, box-drawn tables, prose), so each parser runs a chain
of independent strategies over the ANSI-stripped text.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from saas_starter.setup.text_extraction import parse_json_from_output, strip_ansi

ACCOUNT_ID_RE = re.compile(r"^[a-f0-9]{32}$", re.IGNORECASE)
UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)

TABLE_ROW_RE = re.compile(r"^[│|].*[│|]$")
TABLE_SPLIT_RE = re.compile(r"[│|]")
INLINE_ACCOUNT_RE = re.compile(r"(.+?)\s*\(id:\s*([0-9a-f]{32})\)", re.IGNORECASE)
COLON_ACCOUNT_RE = re.compile(r"account\s+id\s*:\s*([0-9a-f]{32})", re.IGNORECASE)

SNIPPET_ID_RE = re.compile(r'"database_id"\s*:\s*"([0-9a-f-]{36})"', re.IGNORECASE)
SNIPPET_NAME_RE = re.compile(r'"database_name"\s*:\s*"([^"]+)"', re.IGNORECASE)
BARE_UUID_RE = re.compile(
    r"([0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12})", re.IGNORECASE
)
DB_NAME_RE = re.compile(r"DB [\"']?([\w-]+)[\"']?", re.IGNORECASE)
DATABASE_NAME_RE = re.compile(r"database [\"']?([\w-]+)[\"']?", re.IGNORECASE)

D1_ID_KEYS = ("uuid", "id", "database_id", "databaseId")
D1_NAME_KEYS = ("name", "database_name", "databaseName")


@dataclass(frozen=True)
class AccountInfo:
    """A Cloudflare account the operator can provision into."""
    id: str
    name: Optional[str] = None


@dataclass(frozen=True)
class D1CreateResult:
    """Identifier of a D1 database, parsed or entered by hand."""
    id: str
    name: str


def is_account_id(value: str) -> bool:
    return bool(ACCOUNT_ID_RE.match(value or ""))


def is_uuid(value: str) -> bool:
    return bool(UUID_RE.match(value or ""))


def format_account(account: AccountInfo) -> str:
    """Render an account as ``name (id)`` or just the id."""
    return f"{account.name} ({account.id})" if account.name else account.id


def _clean_name(name: Optional[str]) -> Optional[str]:
    if name is None or not isinstance(name, str):
        return None
    cleaned = name.strip().replace('"', "").replace("'", "").strip()
    return cleaned or None


class _AccountCollector:
    """Ordered, id-keyed account map; the first name seen for an id wins."""

    def __init__(self):
        self._accounts: Dict[str, AccountInfo] = {}

    def add(self, account_id: Any, name: Any = None) -> None:
        if not account_id or not isinstance(account_id, str):
            return

        account_id = account_id.strip()
        if not is_account_id(account_id):
            return

        if account_id not in self._accounts:
            self._accounts[account_id] = AccountInfo(id=account_id, name=_clean_name(name))

    def accounts(self) -> List[AccountInfo]:
        return list(self._accounts.values())


def _json_account_candidates(data: Any) -> Iterable[Dict[str, Any]]:
    if not isinstance(data, dict):
        return

    account = data.get("account")
    if isinstance(account, dict):
        yield account

    accounts = data.get("accounts")
    if isinstance(accounts, list):
        yield from (entry for entry in accounts if isinstance(entry, dict))

    result = data.get("result")
    if isinstance(result, dict) and isinstance(result.get("accounts"), list):
        yield from (entry for entry in result["accounts"] if isinstance(entry, dict))


def _scan_account_lines(text: str, collector: _AccountCollector) -> None:
    for line in text.splitlines():
        trimmed = line.strip()
        if not trimmed:
            continue

        if TABLE_ROW_RE.match(trimmed):
            cells = [cell.strip() for cell in TABLE_SPLIT_RE.split(trimmed)]
            cells = [cell for cell in cells if cell]
            if len(cells) >= 2:
                maybe_name, maybe_id = cells[0], cells[1]
                if (
                    "account name" not in maybe_name.lower()
                    and "account id" not in maybe_id.lower()
                ):
                    collector.add(maybe_id, maybe_name)
            continue

        inline = INLINE_ACCOUNT_RE.search(trimmed)
        if inline:
            collector.add(inline.group(2), inline.group(1))
            continue

        colon = COLON_ACCOUNT_RE.search(trimmed)
        if colon:
            collector.add(colon.group(1))


def extract_accounts(raw: str) -> List[AccountInfo]:
    """Recover every Cloudflare account mentioned in ``wrangler whoami`` output.

    JSON payloads are read first, then each line is checked for a table row,
    an inline ``Name (id: ...)`` mention or an ``Account ID: ...`` label. All
    strategies contribute; results are deduplicated by id in discovery order.
    """
    clean = strip_ansi(raw or "")
    collector = _AccountCollector()

    for entry in _json_account_candidates(parse_json_from_output(clean)):
        collector.add(entry.get("id"), entry.get("name"))

    _scan_account_lines(clean, collector)

    return collector.accounts()


def _first_present(payload: Dict[str, Any], keys: Iterable[str]) -> Optional[str]:
    for key in keys:
        value = payload.get(key)
        if value:
            return str(value)
    return None


def parse_d1_create_result(raw: str, fallback_name: str) -> Optional[D1CreateResult]:
    """Recover the id and name of a database from ``wrangler d1 create`` output.

    Tries a JSON body, then a ``"database_id": "..."`` config snippet, then any
    UUID in the text. Returns None when nothing matches so the caller can ask
    the operator instead.
    """
    clean = strip_ansi(raw or "")

    data = parse_json_from_output(clean)
    if isinstance(data, dict):
        payload = data.get("result") if isinstance(data.get("result"), dict) else data
        database_id = _first_present(payload, D1_ID_KEYS)
        database_name = _first_present(payload, D1_NAME_KEYS) or fallback_name
        if database_id and database_name:
            return D1CreateResult(id=database_id, name=database_name)

    snippet_id = SNIPPET_ID_RE.search(clean)
    if snippet_id:
        snippet_name = SNIPPET_NAME_RE.search(clean)
        return D1CreateResult(
            id=snippet_id.group(1),
            name=snippet_name.group(1) if snippet_name else fallback_name,
        )

    uuid_match = BARE_UUID_RE.search(clean)
    if uuid_match:
        name_match = DB_NAME_RE.search(clean) or DATABASE_NAME_RE.search(clean)
        return D1CreateResult(
            id=uuid_match.group(1),
            name=name_match.group(1) if name_match else fallback_name,
        )

    return None
