"""Write the collected setup values to .env."""

from pathlib import Path
from typing import Dict, Optional, Union

from saas_starter.core.logging import get_logger

logger = get_logger(__name__)


def build_env_vars(
    account_id: str,
    database_id: str,
    database_name: str,
    binding_name: str,
    api_token: str,
    stripe_secret_key: str,
    stripe_webhook_secret: str,
    base_url: str,
    auth_secret: str,
) -> Dict[str, str]:
    """Environment variables in the order they are written."""
    return {
        "CLOUDFLARE_ACCOUNT_ID": account_id,
        "CLOUDFLARE_D1_DATABASE_ID": database_id,
        "CLOUDFLARE_D1_DATABASE_NAME": database_name,
        "CLOUDFLARE_D1_BINDING": binding_name,
        "CLOUDFLARE_D1_API_TOKEN": api_token,
        "STRIPE_SECRET_KEY": stripe_secret_key,
        "STRIPE_WEBHOOK_SECRET": stripe_webhook_secret,
        "BASE_URL": base_url,
        "AUTH_SECRET": auth_secret,
    }


def format_env_file(env_vars: Dict[str, Optional[str]]) -> str:
    """One KEY=VALUE line per variable, trailing newline."""
    lines = [f"{key}={'' if value is None else value}" for key, value in env_vars.items()]
    return "\n".join(lines) + "\n"


def write_env_file(env_vars: Dict[str, Optional[str]], output_path: Union[str, Path]) -> Path:
    """Overwrite ``output_path`` with the given variables."""
    path = Path(output_path)
    path.write_text(format_env_file(env_vars), encoding="utf-8")
    logger.debug("Environment file written", path=str(path), variables=len(env_vars))
    return path
