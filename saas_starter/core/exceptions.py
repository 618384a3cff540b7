from typing import Any, Dict, Optional


class StarterError(Exception):
    """Base exception for the SaaS starter tooling."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code or "INTERNAL_ERROR"
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(StarterError):
    """Missing or invalid configuration."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "CONFIGURATION_ERROR", details)


class CommandError(StarterError):
    """An external command exited non-zero, timed out or could not be started.

    The captured output is kept because the CLIs we drive often print the
    useful diagnostics (or even the data we want) on failure.
    """

    def __init__(
        self,
        message: str,
        command: Optional[list] = None,
        returncode: Optional[int] = None,
        stdout: str = "",
        stderr: str = "",
    ):
        details = {"command": " ".join(command or []), "returncode": returncode}
        super().__init__(message, "COMMAND_ERROR", details)
        self.command = list(command or [])
        self.returncode = returncode
        self.stdout = stdout or ""
        self.stderr = stderr or ""


class SetupAbortedError(StarterError):
    """A provisioning step failed in a way that ends the run."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "SETUP_ABORTED", details)


class WebhookSecretError(StarterError):
    """The Stripe CLI output did not contain a webhook signing secret."""

    def __init__(self, message: str = "Failed to extract Stripe webhook secret"):
        super().__init__(message, "WEBHOOK_SECRET_ERROR")


class DatabaseBindingError(StarterError):
    """The D1 binding is missing or does not look like a D1 database."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "DATABASE_BINDING_ERROR", details)


class D1QueryError(StarterError):
    """The D1 HTTP API rejected a query."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        errors: Optional[list] = None,
    ):
        details = {"status_code": status_code, "errors": errors or []}
        super().__init__(message, "D1_QUERY_ERROR", details)
        self.status_code = status_code


class SeedError(StarterError):
    """Seeding could not complete."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "SEED_ERROR", details)
