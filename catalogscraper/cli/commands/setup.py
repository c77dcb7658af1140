import platform
import shutil
import sys
from pathlib import Path
from typing import Optional

import typer
from InquirerPy import inquirer
from rich import print as rprint

from catalogscraper.core.config import ConfigManager
from catalogscraper.core.errors import ConfigError
from catalogscraper.core.logging import log


def _options(ctx: typer.Context) -> dict:
    return ctx.obj or {}


def setup(
    ctx: typer.Context,
    site_url: Optional[str] = typer.Option(None, "--site-url", help="Base URL of the ordering site"),
    token: Optional[str] = typer.Option(None, "--token", help="Session token (PHPSESSID value)"),
    debug: Optional[bool] = typer.Option(None, "--debug/--no-debug", help="Enable verbose diagnostics"),
) -> None:
    """
    Configure the target site and session token.
    """
    log("Running setup...")
    config_path = _options(ctx).get("config_path") or ConfigManager.CONFIG_FILE
    current = ConfigManager.load_raw(config_path)

    # Interactive mode if arguments are missing
    if not site_url:
        site_url = inquirer.text(
            message="Site URL:",
            default=current.get("siteUrl", ""),
            validate=lambda result: len(result) > 0 or "Site URL cannot be empty",
        ).execute()

    try:
        site_url = ConfigManager.validate_url(site_url)
    except ConfigError as e:
        log(str(e), level="error")
        raise typer.Exit(code=1)

    if not token:
        token = inquirer.secret(
            message="Session token:",
            validate=lambda result: len(result) > 0 or "Token cannot be empty",
        ).execute()

    if debug is None:
        debug = inquirer.confirm(message="Enable debug output?", default=current.get("debug", False)).execute()

    new_config = dict(current)
    new_config.update({"siteUrl": site_url, "token": token, "debug": debug})
    try:
        token_stored = ConfigManager.save_config(new_config, config_path)
    except ConfigError as e:
        log(str(e), level="error")
        raise typer.Exit(code=1)

    log(f"Configuration saved to {config_path}.")
    if not token_stored:
        log("Session token was not stored; run 'catalogscraper login' to retry.", level="warning")
        raise typer.Exit(code=1)
    log("Token stored in keyring.")


def login(
    ctx: typer.Context,
    token: str = typer.Argument(..., help="The session token to store securely"),
) -> None:
    """
    Securely store the session token in the system keyring.
    """
    site_url = ConfigManager.load_raw(_options(ctx).get("config_path")).get("siteUrl")
    if not site_url:
        log("No siteUrl configured. Run 'catalogscraper setup' first.", level="error")
        raise typer.Exit(code=1)

    if not ConfigManager.save_token(site_url, token):
        raise typer.Exit(code=1)
    log("Session token stored securely in keyring.")


def doctor(ctx: typer.Context) -> None:
    """Check environment health."""
    rprint("[bold cyan]Checking CatalogScraper environment...[/bold cyan]")
    config_path: Path = ConfigManager.resolve_path(_options(ctx).get("config_path"))

    rprint(f"• OS: {platform.system()} {platform.release()}")
    rprint(f"• Python: {sys.version.split()[0]}")

    try:
        config = ConfigManager.load_config(config_path)
        rprint(f"• Configuration: [green]OK[/green] ({config_path})")
        rprint(f"• Site: {config.site_url}")
    except ConfigError as e:
        rprint(f"• Configuration: [red]MISSING ({e})[/red]")

    playwright = shutil.which("playwright")
    rprint(f"• Playwright CLI: {'[green]OK[/green]' if playwright else '[red]MISSING[/red]'}")

    rprint("\n[bold green]System check complete.[/bold green]")
