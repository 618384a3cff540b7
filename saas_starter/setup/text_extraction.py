"""Helpers for pulling structured data out of CLI output meant for humans."""

import json
import re
from typing import Any, Optional

# CSI sequences: ESC [ parameter bytes, intermediate bytes, final byte
ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")


def strip_ansi(value: str) -> str:
    """Remove terminal colour and cursor escape sequences."""
    if not value:
        return ""
    return ANSI_ESCAPE_RE.sub("", value)


def parse_json_from_output(raw: Optional[str]) -> Optional[Any]:
    """Parse the JSON object embedded in noisy command output.

    Takes everything between the first ``{`` and the last ``}`` of the
    ANSI-stripped text. Returns None when there is no such span or it does
    not decode.
    """
    if not raw:
        return None

    clean = strip_ansi(raw)

    first_brace = clean.find("{")
    last_brace = clean.rfind("}")

    if first_brace == -1 or last_brace == -1 or last_brace <= first_brace:
        return None

    try:
        return json.loads(clean[first_brace:last_brace + 1])
    except json.JSONDecodeError:
        return None
