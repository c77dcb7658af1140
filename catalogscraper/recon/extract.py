"""
Extraction rules for the rendered catalog pages.

Every function takes page HTML and returns plain models, so the crawl can be
exercised without a browser. Selectors live in ``core.constants``.
"""
from typing import List, Optional, Tuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from catalogscraper.core.constants import (
    SELECTORS,
    PRODUCT_FIELDS,
    MULTI_MATCH_FIELDS,
    LISTING_HEADER_ROWS,
    NEXT_PAGE_TITLE,
    PRODUCT_INFO_ROUTE,
    ALLERGEN_ROW_INDEX,
    ALLERGEN_WARNING_MARKER,
)
from catalogscraper.core.errors import SelectorNotFoundError
from catalogscraper.core.models import Category, ExtraInfo, ListingPage, Product


def make_soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


def _element_children(el: Tag) -> List[Tag]:
    return [c for c in el.find_all(recursive=False) if isinstance(c, Tag)]


def _first_child(el: Tag) -> Optional[Tag]:
    children = _element_children(el)
    return children[0] if children else None


def _first_text(el: Tag, selector: str) -> str:
    match = el.select_one(selector)
    return match.get_text().strip() if match else ""


def _all_text(el: Tag, selector: str) -> str:
    return "".join(m.get_text() for m in el.select(selector))


def is_in_stock(stock_text: str) -> bool:
    """A dash anywhere in the stock figure marks the product as out of stock."""
    return "-" not in stock_text


def product_link(site_url: str, sku: str) -> str:
    return site_url + PRODUCT_INFO_ROUTE.format(sku=sku)


def parse_categories(html: str, page_url: str) -> List[Category]:
    """Read the top-level category menu in DOM order."""
    soup = make_soup(html)
    menu = soup.select_one(SELECTORS["category_menu"])
    if menu is None:
        raise SelectorNotFoundError(SELECTORS["category_menu"], page_url)

    categories = []
    for item in _element_children(menu):
        anchor = _first_child(item)
        if anchor is None:
            continue
        categories.append(Category(
            name=anchor.get_text().strip(),
            link=urljoin(page_url, anchor.get("href", "")),
        ))
    return categories


def parse_subcategory_links(html: str, page_url: str) -> List[str]:
    """Links of the sub-category cards on a category page. Empty when there are none."""
    soup = make_soup(html)
    links = []
    for card in soup.select(SELECTORS["subcategory_card"]):
        anchor = _first_child(card)
        if anchor is not None and anchor.get("href"):
            links.append(urljoin(page_url, anchor["href"]))
    return links


def parse_product_row(row: Tag, site_url: str) -> Product:
    values = {}
    for field, selector in PRODUCT_FIELDS.items():
        if field in MULTI_MATCH_FIELDS:
            values[field] = _all_text(row, selector)
        else:
            values[field] = _first_text(row, selector)

    sku = values["sku"]
    raw_stock = values["stockCount"]
    return Product(
        name=values["name"],
        sku=sku,
        price=values["price"],
        in_stock=is_in_stock(raw_stock),
        unit=values["unit"].strip(),
        stock_count=raw_stock.strip(),
        link=product_link(site_url, sku),
        brand=values["brand"],
    )


def find_next_link(soup: BeautifulSoup, page_url: str) -> Optional[str]:
    for anchor in soup.select(SELECTORS["next_page"]):
        if anchor.get("title") == NEXT_PAGE_TITLE:
            href = anchor.get("href")
            return urljoin(page_url, href) if href else None
    return None


def parse_listing(html: str, page_url: str, site_url: str) -> ListingPage:
    """Extract one product per table row, after the fixed header rows, and the next-page link."""
    soup = make_soup(html)
    rows = soup.select(SELECTORS["listing_row"])[LISTING_HEADER_ROWS:]
    products = [parse_product_row(row, site_url) for row in rows]
    return ListingPage(products=products, next_link=find_next_link(soup, page_url))


def parse_allergen_warnings(soup: BeautifulSoup) -> List[str]:
    """Names of allergens whose icon carries the warning marker."""
    rows = soup.select(SELECTORS["allergen_row"])
    if len(rows) <= ALLERGEN_ROW_INDEX:
        return []

    warnings = []
    for block in rows[ALLERGEN_ROW_INDEX].find_all("div"):
        for entry in _element_children(block):
            if SELECTORS["allergen"].lstrip(".") not in entry.get("class", []):
                continue
            icon = entry.find("img")
            src = icon.get("src", "") if icon else ""
            if ALLERGEN_WARNING_MARKER in src:
                warnings.append(entry.get_text().strip())
    return warnings


def parse_product_info(html: str) -> Tuple[ExtraInfo, List[str]]:
    """Description from a product detail page, plus any flagged allergens."""
    soup = make_soup(html)
    info = ExtraInfo(description=_first_text(soup, SELECTORS["description"]))
    return info, parse_allergen_warnings(soup)
