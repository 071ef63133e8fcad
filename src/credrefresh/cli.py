"""
Command-line host adapter for the refresh coordinator.

Translates a RefreshOutcome into output and a process exit code:
    0  refreshed
    1  failed (provider rejection or local configuration problem)
    2  interactive login required
    3  token endpoint unavailable, retry later
    4  account store failure
"""

import json
import logging
import sys
from typing import Optional

import click

from .account_store import JsonFileAccountStore
from .config import RefreshConfig
from .coordinator import RefreshCoordinator
from .exceptions import AccountStoreError, ConfigurationError
from .login_flow import BrowserLoginFlowTrigger
from .outcomes import (
    Failed,
    InteractiveLoginRequired,
    RefreshOutcome,
    Refreshed,
    StoreFailure,
    Unavailable,
)
from .token_endpoint import TokenEndpointClient

logger = logging.getLogger(__name__)

EXIT_CODES = {
    Refreshed: 0,
    Failed: 1,
    InteractiveLoginRequired: 2,
    Unavailable: 3,
    StoreFailure: 4,
}


def describe(outcome: RefreshOutcome) -> str:
    """One-line summary of an outcome. Never includes the access token."""
    if isinstance(outcome, Refreshed):
        return f"Refreshed {outcome.account_name} (instance: {outcome.instance_server_uri})"
    if isinstance(outcome, InteractiveLoginRequired):
        return (
            f"Login required for {outcome.login_request.account_name}: "
            f"{outcome.handle}"
        )
    if isinstance(outcome, Failed):
        return f"Refresh failed: {outcome.error_code} - {outcome.error_description}"
    if isinstance(outcome, Unavailable):
        return f"Token endpoint unavailable, try again later ({outcome.reason})"
    return f"Account store failure: {outcome.reason}"


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Refresh OAuth access tokens for stored accounts."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    try:
        ctx.obj = RefreshConfig.from_env()
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument("account")
@click.option(
    "--key",
    envvar="CREDREFRESH_KEY",
    required=True,
    help="Passcode-derived key the account secrets are encrypted with",
)
@click.option("--store", "store_file", help="Account store file (overrides config)")
@click.option(
    "--open-browser/--no-open-browser",
    default=True,
    help="Open the login page if the refresh token was rejected",
)
@click.option("--json", "output_json", is_flag=True, help="Print the outcome bundle as JSON")
@click.pass_obj
def refresh(
    config: RefreshConfig,
    account: str,
    key: str,
    store_file: Optional[str],
    open_browser: bool,
    output_json: bool,
) -> None:
    """Refresh the access token of ACCOUNT."""
    try:
        store = JsonFileAccountStore(
            store_file or config.account_store_path, config.default_account_type
        )
    except AccountStoreError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_CODES[StoreFailure])

    coordinator = RefreshCoordinator(
        store=store,
        endpoint_client=TokenEndpointClient(config),
        login_trigger=BrowserLoginFlowTrigger(config, open_browser=open_browser),
    )
    outcome = coordinator.refresh_token(account, key)

    if output_json:
        click.echo(json.dumps(outcome.to_bundle(), indent=2, default=str))
    else:
        click.echo(describe(outcome), err=not isinstance(outcome, Refreshed))

    sys.exit(EXIT_CODES[type(outcome)])


@cli.command("list")
@click.option("--store", "store_file", help="Account store file (overrides config)")
@click.pass_obj
def list_accounts(config: RefreshConfig, store_file: Optional[str]) -> None:
    """List stored accounts."""
    try:
        store = JsonFileAccountStore(
            store_file or config.account_store_path, config.default_account_type
        )
        names = store.list_accounts()
    except AccountStoreError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_CODES[StoreFailure])

    if not names:
        click.echo("No accounts stored")
        return

    for name in names:
        click.echo(name)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
