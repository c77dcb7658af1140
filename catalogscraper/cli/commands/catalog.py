import asyncio
import traceback
from enum import Enum
from pathlib import Path
from typing import List, Tuple

import typer

from catalogscraper.core.config import ConfigManager, SiteConfig
from catalogscraper.core.crawler import CatalogCrawler
from catalogscraper.core.errors import ConfigError
from catalogscraper.core.logging import log, Logger
from catalogscraper.core.models import Category, Product
from catalogscraper.recon.browser import BrowserSession
from catalogscraper.utils.file_io import export_products
from catalogscraper.utils.ux import UX


class ExportFormat(str, Enum):
    json = "json"
    csv = "csv"


def load_site_config(ctx: typer.Context) -> SiteConfig:
    """Load the run config and reconfigure logging for it."""
    options = ctx.obj or {}
    try:
        config = ConfigManager.load_config(options.get("config_path"))
    except ConfigError as e:
        log(str(e), level="error")
        raise typer.Exit(code=1)

    Logger.setup_logging(log_dir=config.log_dir, verbose=options.get("verbose", False) or config.debug)
    return config


def _fail(action: str, error: Exception, verbose: bool) -> typer.Exit:
    log(f"{action} failed: {error}", level="error")
    log(f"Fatal Traceback: {traceback.format_exc()}", level="debug")
    if verbose:
        traceback.print_exc()
    return typer.Exit(code=1)


async def _list_categories(config: SiteConfig) -> List[Category]:
    async with BrowserSession(config) as session:
        return await CatalogCrawler(session, config).list_categories()


async def _scrape_products(config: SiteConfig, with_extra_data: bool) -> Tuple[List[Product], int]:
    async with BrowserSession(config) as session:
        crawler = CatalogCrawler(session, config)
        products = await crawler.scrape_all_products()
        UX.print_progress(f"Fetched {len(products)} products")

        enriched = 0
        if with_extra_data:
            UX.print_progress("Fetching extra data...")
            enriched = await crawler.enrich_products(products)
        return products, enriched


def list_categories(ctx: typer.Context):
    """List all categories."""
    config = load_site_config(ctx)
    UX.print_progress("Fetching categories...")

    try:
        categories = asyncio.run(_list_categories(config))
    except Exception as e:
        raise _fail("Listing categories", e, config.debug)

    for category in categories:
        UX.print_line(category.name)


def scrape_all(
    ctx: typer.Context,
    output: Path = typer.Argument(..., help="Specify output file"),
    output_format: ExportFormat = typer.Option(ExportFormat.json, "--format", "-f", help="Output file format"),
    with_extra_data: bool = typer.Option(
        False, "--with-extra-data", "-e", help="Include extra data such as product description"
    ),
):
    """Scrape all products."""
    config = load_site_config(ctx)
    suffix = " with extra data" if with_extra_data else ""
    UX.print_progress(f"Fetching products{suffix} (this may take a while)...")
    log(f"> Selected format: {output_format.value}", level="debug")

    try:
        products, enriched = asyncio.run(_scrape_products(config, with_extra_data))
    except Exception as e:
        raise _fail("Scrape", e, config.debug)

    if with_extra_data and enriched < len(products):
        UX.print_warning(f"{len(products) - enriched} products are missing extra data")

    export_products(products, output, output_format.value)
    UX.print_progress("Done")
