"""
Cloudflare D1 HTTP API client.

Sends ``{sql, params}`` to ``/query`` (``/raw`` for the ``values`` method)
with a bearer token. Used by the seed and init scripts, which run outside
the Workers runtime and so have no D1 binding.
"""

from typing import Any, Dict, List, Optional, Sequence

import httpx

from saas_starter.core.config import Settings, settings
from saas_starter.core.exceptions import D1QueryError
from saas_starter.core.logging import get_db_logger

logger = get_db_logger()

REMOTE_METHODS = ("run", "all", "values", "get")


def build_error_message(data: Any, status_code: int) -> str:
    """Turn the API's ``errors`` array into one line per error."""
    errors = data.get("errors") if isinstance(data, dict) else None
    if isinstance(errors, list) and errors:
        lines = []
        for error in errors:
            error = error if isinstance(error, dict) else {}
            code = error.get("code")
            message = error.get("message")
            code = code if isinstance(code, int) and not isinstance(code, bool) else "unknown"
            message = message if isinstance(message, str) else "Unknown error"
            lines.append(f"{code}: {message}")
        return "\n".join(lines)
    return f"Unexpected response from Cloudflare D1 API ({status_code})"


def extract_rows(data: Dict[str, Any]) -> List[Any]:
    """Rows from ``result[0].results`` (a list, or an object with ``rows``)."""
    result = data.get("result")
    if not isinstance(result, list) or not result or not isinstance(result[0], dict):
        return []

    results = result[0].get("results")
    if isinstance(results, list):
        return results
    if isinstance(results, dict) and isinstance(results.get("rows"), list):
        return results["rows"]
    return []


class D1HttpClient:
    """Async client for one D1 database."""

    def __init__(
        self,
        account_id: str,
        database_id: str,
        api_token: str,
        base_url: str = "https://api.cloudflare.com/client/v4",
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        self.database_url = (
            f"{base_url.rstrip('/')}/accounts/{account_id}/d1/database/{database_id}"
        )
        self._api_token = api_token
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(
        cls,
        config: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> "D1HttpClient":
        config = config or settings
        return cls(
            account_id=config.require("CLOUDFLARE_ACCOUNT_ID"),
            database_id=config.require("CLOUDFLARE_D1_DATABASE_ID"),
            api_token=config.require("CLOUDFLARE_D1_API_TOKEN"),
            base_url=config.CLOUDFLARE_API_BASE_URL,
            http_client=http_client,
            timeout=config.D1_REQUEST_TIMEOUT_SECONDS,
        )

    async def query(
        self,
        sql: str,
        params: Optional[Sequence[Any]] = None,
        method: str = "all",
    ) -> List[Any]:
        """Execute one statement and return its rows."""
        if method not in REMOTE_METHODS:
            raise ValueError(f"Unsupported D1 method: {method}")

        endpoint = "raw" if method == "values" else "query"
        response = await self._client.post(
            f"{self.database_url}/{endpoint}",
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self._api_token}",
            },
            json={"sql": sql, "params": list(params or [])},
        )

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.is_success or not isinstance(data, dict) or not data.get("success"):
            message = build_error_message(data, response.status_code)
            logger.error("D1 query failed", status_code=response.status_code, error=message)
            raise D1QueryError(
                message,
                status_code=response.status_code,
                errors=data.get("errors") if isinstance(data, dict) else None,
            )

        return extract_rows(data)

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "D1HttpClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


class D1HttpStatement:
    """Prepared-statement shape of a D1 binding, backed by the HTTP API."""

    def __init__(self, client: D1HttpClient, sql: str, params: Sequence[Any] = ()):
        self._client = client
        self.sql = sql
        self.params = tuple(params)

    def bind(self, *params: Any) -> "D1HttpStatement":
        return D1HttpStatement(self._client, self.sql, params)

    async def run(self) -> Dict[str, Any]:
        rows = await self._client.query(self.sql, self.params, "run")
        return {"success": True, "results": rows}

    async def all(self) -> Dict[str, Any]:
        rows = await self._client.query(self.sql, self.params, "all")
        return {"success": True, "results": rows}

    async def first(self) -> Optional[Any]:
        rows = await self._client.query(self.sql, self.params, "get")
        return rows[0] if rows else None


class D1HttpDatabase:
    """Lets code written against a D1 binding run over the HTTP API."""

    def __init__(self, client: D1HttpClient):
        self.client = client

    def prepare(self, sql: str) -> D1HttpStatement:
        return D1HttpStatement(self.client, sql)
