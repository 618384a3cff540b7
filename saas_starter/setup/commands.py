"""Run external CLIs (Stripe, Wrangler) and capture what they print."""

import os
import subprocess
from dataclasses import dataclass
from typing import Dict, List, Optional

from saas_starter.core.exceptions import CommandError
from saas_starter.core.logging import get_logger
from saas_starter.setup.text_extraction import strip_ansi

logger = get_logger(__name__)


@dataclass
class CommandResult:
    """Captured output of a successful command."""
    stdout: str
    stderr: str

    @property
    def combined(self) -> str:
        return "\n".join(part for part in (self.stdout, self.stderr) if part)


def run_command(
    args: List[str],
    env: Optional[Dict[str, str]] = None,
    timeout: Optional[float] = None,
) -> CommandResult:
    """Run a command and return its output.

    ``env`` is layered over the current environment. A non-zero exit, a
    missing executable or a timeout raises CommandError with whatever output
    was captured.
    """
    full_env = None
    if env:
        full_env = os.environ.copy()
        full_env.update(env)

    logger.debug("Running command", command=" ".join(args))

    try:
        result = subprocess.run(
            args,
            capture_output=True,
            text=True,
            env=full_env,
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError as e:
        raise CommandError(f"{args[0]} not found: {e}", command=args) from e
    except OSError as e:
        raise CommandError(f"{args[0]} could not be started: {e}", command=args) from e
    except subprocess.TimeoutExpired as e:
        raise CommandError(
            f"{' '.join(args)} timed out after {timeout}s",
            command=args,
            stdout=_as_text(e.stdout),
            stderr=_as_text(e.stderr),
        ) from e

    if result.returncode != 0:
        logger.debug(
            "Command failed",
            command=" ".join(args),
            returncode=result.returncode,
        )
        raise CommandError(
            f"Command failed with exit code {result.returncode}: {' '.join(args)}",
            command=args,
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )

    return CommandResult(stdout=result.stdout or "", stderr=result.stderr or "")


def _as_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode(errors="replace")
    return value


def failure_output(error: CommandError) -> str:
    """Non-empty stdout, stderr and message of a failed command, ANSI-stripped."""
    parts = [strip_ansi(value).strip() for value in (error.stdout, error.stderr, error.message)]
    return "\n".join(part for part in parts if part)
