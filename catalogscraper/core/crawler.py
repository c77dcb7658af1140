from typing import Callable, List, Optional, Protocol, Sequence

from catalogscraper.core.config import SiteConfig
from catalogscraper.core.constants import HOME_ROUTE
from catalogscraper.core.logging import log
from catalogscraper.core.models import Category, ExtraInfo, ListingPage, Product
from catalogscraper.utils.ux import UX
from catalogscraper.recon.extract import (
    parse_categories,
    parse_listing,
    parse_product_info,
    parse_subcategory_links,
)


class PageSession(Protocol):
    """The browser operations the crawl needs; BrowserSession implements it."""

    async def goto(self, url: str) -> object: ...

    async def wait_for_idle(self) -> None: ...

    async def content(self) -> str: ...


def log_allergen(text: str) -> None:
    log(f"Allergen: {text}")


class CatalogCrawler:
    """
    Walks the catalog strictly sequentially on a single page:
    categories -> sub-categories -> paginated listing pages.
    """

    def __init__(
        self,
        session: PageSession,
        config: SiteConfig,
        on_allergen: Optional[Callable[[str], None]] = log_allergen,
    ):
        self.session = session
        self.config = config
        self.on_allergen = on_allergen

    @property
    def home_url(self) -> str:
        return self.config.site_url + HOME_ROUTE

    async def _load(self, url: str) -> str:
        await self.session.goto(url)
        return await self.session.content()

    async def list_categories(self) -> List[Category]:
        """Top-level categories from the home page menu, in menu order."""
        html = await self._load(self.home_url)
        return parse_categories(html, self.home_url)

    async def list_subcategory_links(self, category_link: str) -> List[str]:
        # Sub-category cards only link up once background requests settle
        await self.session.wait_for_idle()
        html = await self._load(category_link)
        return parse_subcategory_links(html, category_link)

    async def scrape_listing(self, start_link: str) -> List[Product]:
        """Follow next-page links from start_link until a page has none."""
        products: List[Product] = []
        link: Optional[str] = start_link
        while link is not None:
            log(f"> Retrieving products on page {link}", level="debug")
            html = await self._load(link)
            page: ListingPage = parse_listing(html, link, self.config.site_url)
            products.extend(page.products)
            link = page.next_link
        return products

    async def scrape_all_products(self) -> List[Product]:
        """Every product in traversal order. Any navigation or selector failure aborts the crawl."""
        products: List[Product] = []
        for category in await self.list_categories():
            for sub_link in await self.list_subcategory_links(category.link):
                products.extend(await self.scrape_listing(sub_link))
        return products

    async def fetch_extra_info(self, link: str) -> ExtraInfo:
        """Description from a product detail page; flagged allergens go to on_allergen."""
        html = await self._load(link)
        info, allergens = parse_product_info(html)
        if self.on_allergen:
            for allergen in allergens:
                self.on_allergen(allergen)
        return info

    async def enrich_products(self, products: Sequence[Product]) -> int:
        """
        Merge extra info into each product in place.

        A failure for one product is reported and skipped; the rest still run.
        Returns the number of products enriched.
        """
        enriched = 0
        for product in products:
            log(f"> Retrieving extra data for {product.name}", level="debug")
            try:
                info = await self.fetch_extra_info(product.link)
            except Exception as e:
                log(f"Extra data failed for {product.sku or product.name}: {e}", level="debug")
                UX.print_stderr(str(e))
                continue
            product.merge(info)
            enriched += 1
        return enriched
