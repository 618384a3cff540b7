"""Terminal output helpers for the setup wizard."""

import sys
from enum import Enum


class StepStatus(Enum):
    """Outcome of a wizard step, shown in the final summary."""
    OK = "OK"
    CREATED = "CREATED"
    MANUAL = "MANUAL"
    SKIPPED = "SKIPPED"
    WARNING = "WARNING"
    FAILED = "FAILED"


# ANSI color codes
class Colors:
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    BLUE = "\033[94m"
    BOLD = "\033[1m"
    END = "\033[0m"


def colored(text: str, color: str) -> str:
    """Return colored text."""
    return f"{color}{text}{Colors.END}"


def status_icon(status: StepStatus) -> str:
    """Return colored status with icon."""
    if status == StepStatus.OK:
        return colored("OK ✓", Colors.GREEN)
    elif status == StepStatus.CREATED:
        return colored("CREATED ✓", Colors.GREEN)
    elif status == StepStatus.MANUAL:
        return colored("MANUAL ✓", Colors.BLUE)
    elif status == StepStatus.WARNING:
        return colored("WARNING !", Colors.YELLOW)
    elif status == StepStatus.FAILED:
        return colored("FAILED ✗", Colors.RED)
    elif status == StepStatus.SKIPPED:
        return colored("SKIPPED", Colors.YELLOW)
    return str(status.value)


def step(text: str) -> None:
    print()
    print(colored(text, Colors.BOLD))


def info(text: str) -> None:
    print(text)


def success(text: str) -> None:
    print(colored(text, Colors.GREEN))


def warn(text: str) -> None:
    print(colored(text, Colors.YELLOW))


def error(text: str) -> None:
    print(colored(text, Colors.RED), file=sys.stderr)
