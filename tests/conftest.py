from html import escape

import pytest

from catalogscraper.core.config import SiteConfig
from catalogscraper.core.logging import Logger

SITE_URL = "https://shop.example.com"
HOME_URL = SITE_URL + "/ordering/pages/default.php"


class FakeSession:
    """In-memory stand-in for BrowserSession: URL -> HTML, or an exception to raise."""

    def __init__(self, pages):
        self.pages = pages
        self.visited = []
        self.idle_waits = 0
        self.current = None

    async def goto(self, url):
        self.visited.append(url)
        page = self.pages.get(url)
        if page is None:
            raise RuntimeError(f"net::ERR_NAME_NOT_RESOLVED at {url}")
        if isinstance(page, Exception):
            raise page
        self.current = url

    async def wait_for_idle(self):
        self.idle_waits += 1

    async def content(self):
        return self.pages[self.current]


def menu_html(categories):
    items = "".join(f'<li><a href="{escape(href)}">{name}</a></li>' for name, href in categories)
    return f'<html><body><ul class="cat-menu">{items}</ul></body></html>'


def category_html(sub_links):
    cards = "".join(
        f'<div class="category-card-item"><a href="{escape(href)}">Sub</a><span>info</span></div>'
        for href in sub_links
    )
    return f'<html><body><table id="default_page_subtitle_table"><tr><td>{cards}</td></tr></table></body></html>'


def listing_html(rows, next_href=None, next_title=" Next Page "):
    header = '<tr><th>Code</th><th>Name</th></tr><tr><td class="controls">Sort by</td></tr>'
    body = "".join(
        "<tr>"
        f'<td class="pl_code"> {row["sku"]} </td>'
        f'<td class="pl_name">{row.get("name", "Item " + row["sku"])}</td>'
        f'<td class="pl_incvat">{row.get("price", "£1.00")}</td>'
        f'<td class="pl_units">{row.get("unit", "1 x 12")}</td>'
        f'<td class="pl_instock">{row.get("stock", "10")}</td>'
        f'<td class="pl_brand">{row.get("brand", "Acme")}</td>'
        "</tr>"
        for row in rows
    )
    nxt = f'<a class="prods" title="{next_title}" href="{escape(next_href)}">&gt;&gt;</a>' if next_href else ""
    return (
        '<html><body><form><table id="product_listing_table_in_form">'
        f"{header}{body}</table></form>{nxt}</body></html>"
    )


def product_info_html(description, allergens=()):
    entries = "".join(
        f'<div class="allergens"><img src="/images/{icon}.png"> {name} </div>'
        for name, icon in allergens
    )
    return (
        '<html><body><div class="middle_column_div"><table><tbody>'
        "<tr><td>Title</td></tr><tr><td>Price</td></tr>"
        f'<tr><td><div class="allergen_list">{entries}</div></td></tr>'
        "</tbody></table>"
        f'<div class="product_info_description">  {description}  </div>'
        "</div></body></html>"
    )


@pytest.fixture
def site_config():
    return SiteConfig(site_url=SITE_URL, token="sess-123")


@pytest.fixture
def html():
    """HTML builders for the catalog pages."""
    class Builders:
        menu = staticmethod(menu_html)
        category = staticmethod(category_html)
        listing = staticmethod(listing_html)
        product_info = staticmethod(product_info_html)
    return Builders


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture(autouse=True)
def reset_logging():
    """CLI runs bind console handlers to the runner's streams; drop them afterwards."""
    yield
    logger = Logger.get_logger()
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
