"""Locate the D1 binding in a Workers environment and make sure it has a schema."""

from typing import Any, Mapping, Optional

from saas_starter.core.config import settings
from saas_starter.core.exceptions import DatabaseBindingError
from saas_starter.db.bootstrap import ensure_d1_schema

DEFAULT_BINDING_NAME = "DB"
LEGACY_BINDING_NAMES = ("MY_D1", "DB")


def resolve_d1_database(bindings: Mapping[str, Any], configured: Optional[str] = None) -> Any:
    """Return the D1 binding from a Workers ``env`` mapping.

    The preferred name comes from ``configured``, then the
    CLOUDFLARE_D1_BINDING setting, then a CLOUDFLARE_D1_BINDING entry in the
    bindings themselves, defaulting to ``DB``. ``MY_D1`` and ``DB`` are tried
    if the preferred name is missing.
    """
    if not isinstance(bindings, Mapping):
        raise DatabaseBindingError("Cloudflare bindings are not available.")

    binding_setting = bindings.get("CLOUDFLARE_D1_BINDING")
    preferred = (
        configured
        or settings.CLOUDFLARE_D1_BINDING
        or (binding_setting if isinstance(binding_setting, str) else None)
        or ""
    ).strip() or DEFAULT_BINDING_NAME

    for name in (preferred, *LEGACY_BINDING_NAMES):
        binding = bindings.get(name)
        if binding:
            return binding

    available = ", ".join(sorted(bindings.keys())) or "none"
    raise DatabaseBindingError(
        f'Missing Cloudflare D1 binding "{preferred}". Available bindings: {available}.',
        details={"binding": preferred},
    )


async def get_db(bindings: Mapping[str, Any], configured: Optional[str] = None) -> Any:
    """Resolve the D1 binding and apply the bootstrap schema before returning it."""
    database = resolve_d1_database(bindings, configured)
    await ensure_d1_schema(database)
    return database
