from typing import Dict

# Timeouts (in seconds)
DEFAULT_NAVIGATION_TIMEOUT = 60
NETWORK_IDLE_TIMEOUT = 30

# Browser Settings
BROWSER_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]

# Session cookies
SESSION_COOKIE_NAME = "PHPSESSID"
LISTVIEW_COOKIE_NAME = "USE_LISTVIEW"
LISTVIEW_COOKIE_VALUE = "true"

# Site routes, relative to siteUrl
HOME_ROUTE = "/ordering/pages/default.php"
PRODUCT_INFO_ROUTE = "/ordering/pages/product_info.php?products_id={sku}"

# Resource Limits
MAX_LOG_SIZE_BYTES = 10 * 1024 * 1024  # 10 MB

# Listing tables open with a header row and a controls row
LISTING_HEADER_ROWS = 2

# Title attribute of the pagination "next" anchor; the padding is part of the markup
NEXT_PAGE_TITLE = " Next Page "

# Allergen icons flagged with this substring in their src are warnings
ALLERGEN_WARNING_MARKER = "red"

SELECTORS: Dict[str, str] = {
    "category_menu": ".cat-menu",
    "subcategory_card": ".category-card-item",
    "listing_row": "#product_listing_table_in_form tr",
    "next_page": ".prods",
    "description": ".product_info_description",
    "allergen_row": ".middle_column_div > table > tbody > tr",
    "allergen": ".allergens",
}

# Product field -> selector inside a listing row. Values are the trimmed text
# of the first match, except MULTI_MATCH_FIELDS which join every match.
PRODUCT_FIELDS: Dict[str, str] = {
    "name": ".pl_name",
    "sku": ".pl_code",
    "price": ".pl_incvat",
    "unit": ".pl_units",
    "stockCount": ".pl_instock",
    "brand": ".pl_brand",
}

MULTI_MATCH_FIELDS = ("unit", "stockCount")

# Index of the allergen row within the product info table
ALLERGEN_ROW_INDEX = 2

EXPORT_FORMATS = ("json", "csv")
