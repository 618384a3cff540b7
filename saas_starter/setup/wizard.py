#!/usr/bin/env python3
"""
Interactive setup for the SaaS starter.

Checks the Stripe and Wrangler CLIs, resolves a Cloudflare account, creates
(or records) a D1 database, collects the Stripe keys, then patches
wrangler.jsonc and writes .env.

Steps:
1. Stripe CLI installed and authenticated
2. Wrangler CLI installed and authenticated, Cloudflare account selected
3. D1 database created or entered manually, binding name and API token
4. Stripe secret key
5. Stripe webhook secret (``stripe listen --print-secret``)
6. AUTH_SECRET generation

Usage:
    uv run python scripts/setup_project.py
    saas-starter-setup --env-file .env --wrangler-config wrangler.jsonc

Requirements:
    - Stripe CLI (https://docs.stripe.com/stripe-cli)
    - Wrangler CLI via pnpm (https://developers.cloudflare.com/workers/wrangler/)
"""

import argparse
import re
import secrets
import shlex
import sys
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from saas_starter.core.config import Settings, settings
from saas_starter.core.exceptions import (
    CommandError,
    SetupAbortedError,
    StarterError,
    WebhookSecretError,
)
from saas_starter.core.logging import configure_logging, get_logger
from saas_starter.setup import console
from saas_starter.setup.commands import CommandResult, failure_output, run_command
from saas_starter.setup.console import Colors, StepStatus, colored, status_icon
from saas_starter.setup.env_file import build_env_vars, write_env_file
from saas_starter.setup.parsers import (
    AccountInfo,
    D1CreateResult,
    extract_accounts,
    format_account,
    is_account_id,
    is_uuid,
    parse_d1_create_result,
)
from saas_starter.setup.prompts import Prompter
from saas_starter.setup.text_extraction import strip_ansi
from saas_starter.setup.wrangler_config import update_wrangler_config

logger = get_logger(__name__)

WEBHOOK_SECRET_RE = re.compile(r"whsec_[a-zA-Z0-9]+")
DEFAULT_BINDING_NAME = "DB"
WHOAMI_ATTEMPTS = 2

CommandRunner = Callable[..., CommandResult]


@dataclass
class SetupResult:
    """D1 settings collected in step 3."""
    database_id: str
    database_name: str
    binding_name: str = DEFAULT_BINDING_NAME
    api_token: str = ""


class SetupWizard:
    """Runs the provisioning steps in order.

    Any step that cannot continue raises SetupAbortedError. Parse failures
    never abort: they fall back to asking the operator.
    """

    def __init__(
        self,
        runner: CommandRunner = run_command,
        prompter: Optional[Prompter] = None,
        config: Optional[Settings] = None,
        platform: str = sys.platform,
    ):
        self.runner = runner
        self.prompter = prompter or Prompter()
        self.config = config or settings
        self.platform = platform
        self.results: Dict[str, StepStatus] = {}

    # -------------------------------------------------------------------------
    # Command helpers
    # -------------------------------------------------------------------------

    def _stripe(self, *args: str) -> List[str]:
        return shlex.split(self.config.STRIPE_CLI) + list(args)

    def _wrangler(self, *args: str) -> List[str]:
        return shlex.split(self.config.WRANGLER_CLI) + list(args)

    def _run(self, args: List[str], env: Optional[Dict[str, str]] = None) -> CommandResult:
        return self.runner(args, env=env, timeout=self.config.COMMAND_TIMEOUT_SECONDS)

    # -------------------------------------------------------------------------
    # Step 1: Stripe CLI
    # -------------------------------------------------------------------------

    def check_stripe_cli(self) -> None:
        console.step("Step 1: Checking if Stripe CLI is installed and authenticated...")

        try:
            self._run(self._stripe("--version"))
        except CommandError as e:
            logger.debug("Stripe CLI version probe failed", error=e.message)
            self.results["Stripe CLI"] = StepStatus.FAILED
            console.error("Stripe CLI is not installed. Please install it and try again.")
            console.info("To install Stripe CLI, follow these steps:")
            console.info("1. Visit: https://docs.stripe.com/stripe-cli")
            console.info("2. Download and install the Stripe CLI for your operating system")
            console.info("3. After installation, run: stripe login")
            raise SetupAbortedError(
                "After installation and authentication, please run this setup script again."
            )
        console.info("Stripe CLI is installed.")

        try:
            self._run(self._stripe("config", "--list"))
            console.info("Stripe CLI is authenticated.")
        except CommandError:
            console.warn("Stripe CLI is not authenticated or the authentication has expired.")
            console.info("Please run: stripe login")
            if not self.prompter.confirm("Have you completed the authentication? (y/n): "):
                self.results["Stripe CLI"] = StepStatus.FAILED
                raise SetupAbortedError(
                    "Please authenticate with Stripe CLI and run this script again."
                )
            try:
                self._run(self._stripe("config", "--list"))
            except CommandError:
                self.results["Stripe CLI"] = StepStatus.FAILED
                raise SetupAbortedError(
                    "Failed to verify Stripe CLI authentication. Please try again."
                )
            console.info("Stripe CLI authentication confirmed.")

        self.results["Stripe CLI"] = StepStatus.OK

    # -------------------------------------------------------------------------
    # Step 2: Wrangler CLI and Cloudflare account
    # -------------------------------------------------------------------------

    def check_wrangler_cli(self) -> AccountInfo:
        console.step("Step 2: Checking if Wrangler CLI is installed and authenticated...")

        try:
            self._run(self._wrangler("--version"))
        except CommandError as e:
            logger.debug("Wrangler version probe failed", error=e.message)
            self.results["Wrangler CLI"] = StepStatus.FAILED
            console.error("Wrangler CLI is not installed. Please install it and try again.")
            console.info(
                "Installation guide: "
                "https://developers.cloudflare.com/workers/wrangler/install-and-update/"
            )
            raise SetupAbortedError("Wrangler CLI is not installed.")
        console.info("Wrangler CLI is installed.")

        detected = self._detect_accounts()
        self.results["Wrangler CLI"] = StepStatus.OK
        return self.choose_account(detected)

    def _detect_accounts(self) -> List[AccountInfo]:
        for attempt in range(WHOAMI_ATTEMPTS):
            try:
                result = self._run(self._wrangler("whoami"))
            except CommandError as e:
                accounts = extract_accounts(e.stdout)
                if accounts:
                    console.info(
                        f"Wrangler CLI is authenticated. Found {len(accounts)} "
                        "Cloudflare account(s)."
                    )
                    return accounts

                if attempt == 0:
                    console.warn(
                        "Wrangler CLI is not authenticated or the authentication has expired."
                    )
                    console.info(f"Please run: {self.config.WRANGLER_CLI} login")
                    if not self.prompter.confirm(
                        "Have you completed the authentication? (y/n): "
                    ):
                        self.results["Wrangler CLI"] = StepStatus.FAILED
                        raise SetupAbortedError(
                            "Please authenticate with Wrangler CLI and run this script again."
                        )
                    continue

                self.results["Wrangler CLI"] = StepStatus.FAILED
                raise SetupAbortedError(
                    "Failed to verify Wrangler CLI authentication. Please try again."
                )

            accounts = extract_accounts(result.stdout)
            if accounts:
                console.info(
                    f"Wrangler CLI is authenticated. Found {len(accounts)} "
                    "Cloudflare account(s)."
                )
            else:
                console.warn(
                    "Wrangler CLI is authenticated, but no accounts were detected in the output."
                )
            return accounts

        raise SetupAbortedError("Unable to determine Wrangler CLI authentication status.")

    def choose_account(self, detected: List[AccountInfo]) -> AccountInfo:
        """Pick one of the detected accounts, or fall back to manual entry."""
        if not detected:
            console.warn("Unable to determine your Cloudflare accounts automatically.")
            console.info(
                f"Tip: run `{self.config.WRANGLER_CLI} whoami` in another terminal if "
                "you need to look up the account ID."
            )
            return self.prompt_for_account_id()

        console.info("Available Cloudflare accounts:")
        for index, account in enumerate(detected, start=1):
            console.info(f"  {index}) {format_account(account)}")
        console.info(
            "Press Enter to use the first account, or select an account by number / "
            "provide an account ID."
        )

        while True:
            answer = self.prompter.ask(
                f"Select an account (1-{len(detected)}) or enter a Cloudflare account ID: "
            )

            if answer == "":
                return detected[0]

            if answer.isascii() and answer.isdecimal() and 1 <= int(answer) <= len(detected):
                return detected[int(answer) - 1]

            if is_account_id(answer):
                label = self.prompter.ask("Optional: enter a label for this account: ")
                return AccountInfo(id=answer, name=label or None)

            console.info(
                f"Please enter a number between 1 and {len(detected)} or a "
                "32-character account ID."
            )

    def prompt_for_account_id(self) -> AccountInfo:
        console.info("Provide the Cloudflare account you want to use.")
        account_id = self.prompter.ask_until(
            "Enter the Cloudflare account ID (32 hex characters): ",
            is_account_id,
            "Account ID must be exactly 32 hexadecimal characters. Please try again.",
        )
        label = self.prompter.ask("Optional: enter a label for this account: ")
        return AccountInfo(id=account_id, name=label or None)

    # -------------------------------------------------------------------------
    # Step 3: Cloudflare D1
    # -------------------------------------------------------------------------

    def setup_d1(self, account: AccountInfo) -> SetupResult:
        console.step("Step 3: Setting up Cloudflare D1...")
        console.info(f"Using Cloudflare account {format_account(account)}.")

        if self.prompter.confirm("Do you already have a Cloudflare D1 database? (y/n): "):
            database = self.prompt_for_existing_database()
            self.results["D1 Database"] = StepStatus.MANUAL
        else:
            desired_name = self.prompter.ask_required(
                "Enter a name for the new D1 database: ",
                "A database name is required.",
            )
            database = self.create_d1_database(account, desired_name)
            if database:
                self.results["D1 Database"] = StepStatus.CREATED
            else:
                console.info(
                    "You can create one manually with: "
                    f"{self.config.WRANGLER_CLI} d1 create {desired_name}"
                )
                console.info(
                    "We will continue by using an existing D1 database. "
                    "Enter the details below."
                )
                database = self.prompt_for_existing_database(default_name=desired_name)
                self.results["D1 Database"] = StepStatus.MANUAL

        binding_name = self.prompter.ask_with_default(
            "Enter the Worker binding name you want to use for D1 (default: DB): ",
            DEFAULT_BINDING_NAME,
        )

        console.info(
            "To run migrations via the D1 HTTP API you will need a Cloudflare API token "
            'with the "Account.D1:Edit" permission.'
        )
        console.info("Create one at: https://dash.cloudflare.com/profile/api-tokens")
        api_token = self.prompter.ask(
            "Enter your Cloudflare API token (press enter to skip for now): "
        )
        if not api_token:
            console.warn(
                "Skipping API token. Remember to set CLOUDFLARE_D1_API_TOKEN before "
                "running migrations."
            )
            self.results["D1 API Token"] = StepStatus.SKIPPED
        else:
            self.results["D1 API Token"] = StepStatus.OK

        return SetupResult(
            database_id=database.id,
            database_name=database.name,
            binding_name=binding_name,
            api_token=api_token,
        )

    def create_d1_database(
        self, account: AccountInfo, desired_name: str
    ) -> Optional[D1CreateResult]:
        """Create a database with Wrangler; None means "ask the operator"."""
        console.info(f'Creating Cloudflare D1 database "{desired_name}"...')

        wrangler_env = {
            "CLOUDFLARE_ACCOUNT_ID": account.id,
            "CF_ACCOUNT_ID": account.id,
        }

        try:
            result = self._run(self._wrangler("d1", "create", desired_name), env=wrangler_env)
        except CommandError as e:
            console.error("Failed to create Cloudflare D1 database automatically.")
            output = failure_output(e)
            if output:
                console.error(output)
            return None

        database = parse_d1_create_result(result.combined, desired_name)
        if not database:
            console.error("Failed to create Cloudflare D1 database automatically.")
            output = strip_ansi(result.combined).strip()
            if output:
                console.error(output)
            console.error("Could not parse Wrangler output.")
            return None

        logger.debug("Created D1 database", database_name=database.name, database_id=database.id)
        console.success(f'Created D1 database "{database.name}" ({database.id}).')
        return database

    def prompt_for_existing_database(
        self, default_name: Optional[str] = None
    ) -> D1CreateResult:
        fallback = (default_name or "").strip()
        suffix = f' (press enter to use "{fallback}")' if fallback else ""

        database_name = self.prompter.ask_required(
            f"Enter your existing D1 database name{suffix}: ",
            "Database name is required.",
            default=fallback or None,
        )
        database_id = self.prompter.ask_until(
            "Enter your existing D1 database ID (UUID): ",
            is_uuid,
            "Please provide a valid UUID (e.g. 123e4567-e89b-12d3-a456-426614174000).",
        )
        return D1CreateResult(id=database_id, name=database_name)

    # -------------------------------------------------------------------------
    # Steps 4-6: Stripe keys and local secret
    # -------------------------------------------------------------------------

    def get_stripe_secret_key(self) -> str:
        console.step("Step 4: Getting Stripe Secret Key")
        console.info(
            "You can find your Stripe Secret Key at: https://dashboard.stripe.com/test/apikeys"
        )
        secret_key = self.prompter.ask("Enter your Stripe Secret Key: ")
        self.results["Stripe Secret Key"] = StepStatus.OK if secret_key else StepStatus.SKIPPED
        return secret_key

    def create_stripe_webhook(self) -> str:
        console.step("Step 5: Creating Stripe webhook...")
        try:
            result = self._run(self._stripe("listen", "--print-secret"))
            match = WEBHOOK_SECRET_RE.search(result.stdout)
            if not match:
                raise WebhookSecretError()
        except (CommandError, WebhookSecretError):
            self.results["Stripe Webhook"] = StepStatus.FAILED
            console.error(
                "Failed to create Stripe webhook. Check your Stripe CLI installation "
                "and permissions."
            )
            if self.platform == "win32":
                console.info(
                    "Note: On Windows, you may need to run this script as an administrator."
                )
            raise

        console.info("Stripe webhook created.")
        self.results["Stripe Webhook"] = StepStatus.CREATED
        return match.group(0)

    def generate_auth_secret(self) -> str:
        console.step("Step 6: Generating AUTH_SECRET...")
        self.results["AUTH_SECRET"] = StepStatus.CREATED
        return secrets.token_hex(32)

    # -------------------------------------------------------------------------
    # Full run
    # -------------------------------------------------------------------------

    def run(self) -> Dict[str, str]:
        """Run every step, then patch wrangler.jsonc and write .env."""
        self.check_stripe_cli()
        account = self.check_wrangler_cli()
        d1 = self.setup_d1(account)
        stripe_secret_key = self.get_stripe_secret_key()
        stripe_webhook_secret = self.create_stripe_webhook()
        auth_secret = self.generate_auth_secret()

        patch = update_wrangler_config(
            self.config.WRANGLER_CONFIG_PATH,
            binding_name=d1.binding_name,
            database_name=d1.database_name,
            database_id=d1.database_id,
        )
        if patch.error:
            self.results["Wrangler Config"] = StepStatus.WARNING
        elif patch.changed:
            self.results["Wrangler Config"] = StepStatus.CREATED
        else:
            self.results["Wrangler Config"] = StepStatus.OK

        env_vars = build_env_vars(
            account_id=account.id,
            database_id=d1.database_id,
            database_name=d1.database_name,
            binding_name=d1.binding_name,
            api_token=d1.api_token,
            stripe_secret_key=stripe_secret_key,
            stripe_webhook_secret=stripe_webhook_secret,
            base_url=self.config.BASE_URL,
            auth_secret=auth_secret,
        )

        console.step(f"Step 7: Writing environment variables to {self.config.ENV_FILE_PATH}")
        write_env_file(env_vars, self.config.ENV_FILE_PATH)
        console.info(f"{self.config.ENV_FILE_PATH} file created with the necessary variables.")
        self.results["Environment File"] = StepStatus.CREATED

        return env_vars

    def print_summary(self) -> None:
        print()
        print("=" * 50)
        print(colored("SETUP SUMMARY", Colors.BOLD))
        print("=" * 50)
        for name, status in self.results.items():
            print(f"  {name:<20} {status_icon(status)}")
        print()


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Interactive setup for the SaaS starter (Stripe + Cloudflare D1)"
    )
    parser.add_argument(
        "--env-file",
        default=settings.ENV_FILE_PATH,
        help=f"Environment file to write (default: {settings.ENV_FILE_PATH})",
    )
    parser.add_argument(
        "--wrangler-config",
        default=settings.WRANGLER_CONFIG_PATH,
        help=f"Wrangler config to patch (default: {settings.WRANGLER_CONFIG_PATH})",
    )
    parser.add_argument(
        "--command-timeout",
        type=float,
        default=settings.COMMAND_TIMEOUT_SECONDS,
        help="Timeout in seconds for each external CLI call (default: none)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level for diagnostics (default: LOG_LEVEL setting)",
    )

    args = parser.parse_args()
    configure_logging(args.log_level)

    config = settings.model_copy(
        update={
            "ENV_FILE_PATH": args.env_file,
            "WRANGLER_CONFIG_PATH": args.wrangler_config,
            "COMMAND_TIMEOUT_SECONDS": args.command_timeout,
        }
    )
    wizard = SetupWizard(config=config)

    try:
        wizard.run()
    except StarterError as e:
        logger.error("Setup failed", error_code=e.error_code, **e.details)
        console.error(e.message)
        wizard.print_summary()
        sys.exit(1)
    except Exception as e:
        logger.exception("Setup failed with an unexpected error")
        console.error(str(e))
        sys.exit(1)

    wizard.print_summary()
    console.success("🎉 Setup completed successfully!")
    sys.exit(0)


if __name__ == "__main__":
    main()
