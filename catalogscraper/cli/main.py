from pathlib import Path
from typing import Optional

import typer
from catalogscraper.cli.commands import catalog, setup
from catalogscraper.core.logging import Logger

app = typer.Typer(
    name="catalogscraper",
    help="Product catalog scraper",
    add_completion=False
)

# Register commands
app.command(name="list-categories")(catalog.list_categories)
app.command(name="scrape-all")(catalog.scrape_all)
app.command()(setup.setup)
app.command()(setup.login)
app.command()(setup.doctor)

VERSION = "1.0.0"

@app.command()
def version():
    """Show the CatalogScraper version."""
    typer.echo(f"CatalogScraper {VERSION}")

def version_callback(value: bool):
    if value:
        typer.echo(f"CatalogScraper {VERSION}")
        raise typer.Exit()

@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config.json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    version: bool = typer.Option(None, "--version", callback=version_callback, is_eager=True),
):
    """
    CatalogScraper CLI - export the product catalog as JSON or CSV.
    """
    Logger.setup_logging(verbose=verbose)
    ctx.obj = {"config_path": config, "verbose": verbose}

if __name__ == "__main__":
    app()
