from typing import Optional


class CatalogScraperError(Exception):
    """Base class for errors raised by CatalogScraper."""


class ConfigError(CatalogScraperError):
    """Configuration is missing or invalid."""


class SelectorNotFoundError(CatalogScraperError):
    """An element the crawl depends on is not on the page."""

    def __init__(self, selector: str, url: Optional[str] = None):
        self.selector = selector
        self.url = url
        where = f" on {url}" if url else ""
        super().__init__(f"Expected element '{selector}' not found{where}")


class ExportError(CatalogScraperError):
    """Products could not be serialized to the requested format."""
