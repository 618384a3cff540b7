"""Fill the D1 placeholders in wrangler.jsonc."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union

from saas_starter.core.logging import get_logger

logger = get_logger(__name__)

BINDING_PLACEHOLDER = '"binding": "BINDING_NAME"'
DATABASE_NAME_PLACEHOLDER = '"database_name": "YOUR_DB_NAME"'
DATABASE_ID_PLACEHOLDER = '"database_id": "YOUR_DB_ID"'


@dataclass
class PatchResult:
    """What update_wrangler_config did."""
    replaced: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def changed(self) -> bool:
        return bool(self.replaced)


def _replacements(
    binding_name: str, database_name: str, database_id: str
) -> List[Tuple[str, str]]:
    return [
        (BINDING_PLACEHOLDER, f'"binding": "{binding_name}"'),
        (DATABASE_NAME_PLACEHOLDER, f'"database_name": "{database_name}"'),
        (DATABASE_ID_PLACEHOLDER, f'"database_id": "{database_id}"'),
    ]


def patch_wrangler_content(
    content: str, binding_name: str, database_name: str, database_id: str
) -> Tuple[str, List[str]]:
    """Replace each placeholder still present (first occurrence only)."""
    replaced = []
    for placeholder, value in _replacements(binding_name, database_name, database_id):
        if placeholder in content:
            content = content.replace(placeholder, value, 1)
            replaced.append(placeholder)
    return content, replaced


def update_wrangler_config(
    config_path: Union[str, Path],
    binding_name: str,
    database_name: str,
    database_id: str,
) -> PatchResult:
    """Write the D1 binding into wrangler.jsonc if it still has placeholders.

    I/O and decoding problems are reported in the result and logged as a warning; they
    never stop the setup.
    """
    path = Path(config_path)

    try:
        content = path.read_text(encoding="utf-8")
        updated, replaced = patch_wrangler_content(
            content, binding_name, database_name, database_id
        )

        if replaced:
            path.write_text(updated, encoding="utf-8")
            logger.debug(
                "Updated wrangler config with D1 configuration",
                path=str(path),
                replaced=len(replaced),
            )
            print(f"Updated {path.name} with your D1 configuration.")
        else:
            logger.debug("Wrangler config already configured", path=str(path))
            print(
                f"{path.name} already contains D1 configuration. "
                "Please verify it is correct."
            )
        return PatchResult(replaced=replaced)

    except (OSError, UnicodeError) as e:
        logger.warning("Could not update wrangler config", path=str(path), error=str(e))
        print(
            f"Warning: Could not update {path.name} automatically. Please ensure it "
            "contains the correct D1 binding information."
        )
        return PatchResult(error=str(e))
