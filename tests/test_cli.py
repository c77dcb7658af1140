import csv
import io
import json
import pytest
from unittest.mock import patch
from keyring.errors import KeyringError
from typer.testing import CliRunner

from catalogscraper.cli.main import app
from conftest import FakeSession, HOME_URL, SITE_URL, category_html, listing_html, menu_html, product_info_html

runner = CliRunner()
PAGES = SITE_URL + "/ordering/pages/"


def info_url(sku):
    return f"{PAGES}product_info.php?products_id={sku}"


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"siteUrl": SITE_URL, "token": "sess-123", "debug": False}))
    return path


@pytest.fixture
def site_pages():
    return {
        HOME_URL: menu_html([("Bakery", "bakery.php"), ("Dairy", "dairy.php"), ("Frozen", "frozen.php")]),
        PAGES + "bakery.php": category_html(["index.php?cPath=1"]),
        PAGES + "dairy.php": category_html([]),
        PAGES + "frozen.php": category_html([]),
        PAGES + "index.php?cPath=1": listing_html(
            [{"sku": "P1"}, {"sku": "P2"}, {"sku": "P3", "stock": "-4"}], next_href="index.php?cPath=1&page=2"
        ),
        PAGES + "index.php?cPath=1&page=2": listing_html([{"sku": "P4"}]),
    }


@pytest.fixture
def browser(site_pages):
    """Replace the Playwright session with an in-memory one serving site_pages."""
    session = FakeSession(site_pages)

    class FakeBrowserSession:
        def __init__(self, config):
            self.config = config

        async def __aenter__(self):
            return session

        async def __aexit__(self, exc_type, exc_val, exc_tb):
            return None

    with patch("catalogscraper.cli.commands.catalog.BrowserSession", FakeBrowserSession):
        yield session


def test_cli_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "CatalogScraper" in result.output


def test_cli_help():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "list-categories" in result.output
    assert "scrape-all" in result.output


def test_list_categories(config_file, browser):
    result = runner.invoke(app, ["--config", str(config_file), "list-categories"])

    assert result.exit_code == 0
    lines = result.stdout.splitlines()
    assert lines[0] == "Fetching categories..."
    assert lines[1:] == ["Bakery", "Dairy", "Frozen"]


def test_list_categories_missing_config(tmp_path):
    result = runner.invoke(app, ["--config", str(tmp_path / "missing.json"), "list-categories"])
    assert result.exit_code == 1
    assert "not found" in result.output


def test_scrape_all_json(config_file, browser, tmp_path):
    output = tmp_path / "products.json"
    result = runner.invoke(app, ["--config", str(config_file), "scrape-all", str(output)])

    assert result.exit_code == 0, result.output
    assert "Fetched 4 products" in result.output
    assert "Done" in result.output
    products = json.loads(output.read_text(encoding="utf-8"))
    assert [p["sku"] for p in products] == ["P1", "P2", "P3", "P4"]
    assert products[2]["inStock"] is False
    assert "description" not in products[0]


def test_scrape_all_csv_with_extra_data(config_file, browser, site_pages, tmp_path):
    site_pages[info_url("P1")] = product_info_html("First")
    site_pages[info_url("P3")] = product_info_html("Third")
    site_pages[info_url("P4")] = product_info_html("Fourth", allergens=[("Nuts", "red")])
    output = tmp_path / "products.csv"

    result = runner.invoke(
        app, ["--config", str(config_file), "scrape-all", str(output), "-f", "csv", "--with-extra-data"]
    )

    assert result.exit_code == 0, result.output
    assert "Fetching extra data..." in result.output
    assert "Allergen: Nuts" in result.output
    rows = list(csv.DictReader(io.StringIO(output.read_text(encoding="utf-8"))))
    assert [r["sku"] for r in rows] == ["P1", "P2", "P3", "P4"]
    assert [r["description"] for r in rows] == ["First", "", "Third", "Fourth"]


def test_scrape_all_fatal_error_exits_non_zero(config_file, browser, site_pages, tmp_path):
    del site_pages[PAGES + "index.php?cPath=1&page=2"]
    output = tmp_path / "products.json"

    result = runner.invoke(app, ["--config", str(config_file), "scrape-all", str(output)])

    assert result.exit_code == 1
    assert "Scrape failed" in result.output
    assert not output.exists()


def test_scrape_all_rejects_unknown_format(config_file, tmp_path):
    result = runner.invoke(app, ["--config", str(config_file), "scrape-all", str(tmp_path / "x"), "-f", "xml"])
    assert result.exit_code != 0


@patch("keyring.set_password")
def test_setup_non_interactive(mock_set, tmp_path):
    target = tmp_path / "config.json"
    result = runner.invoke(app, [
        "--config", str(target), "setup", "--site-url", SITE_URL + "/", "--token", "tok", "--no-debug"
    ])

    assert result.exit_code == 0, result.output
    assert json.loads(target.read_text()) == {"siteUrl": SITE_URL, "debug": False}
    mock_set.assert_called_with("catalogscraper", "shop.example.com_token", "tok")


@patch("keyring.set_password")
def test_login_stores_token(mock_set, config_file):
    result = runner.invoke(app, ["--config", str(config_file), "login", "new-token"])
    assert result.exit_code == 0
    mock_set.assert_called_with("catalogscraper", "shop.example.com_token", "new-token")


def test_doctor(config_file):
    result = runner.invoke(app, ["--config", str(config_file), "doctor"])
    assert result.exit_code == 0
    assert "Configuration" in result.output


def test_list_categories_prints_names_verbatim(config_file, browser, site_pages):
    site_pages[HOME_URL] = menu_html([("Tea :coffee: Bar", "tea.php"), ("[b]Bold[/b]", "bold.php")])
    result = runner.invoke(app, ["--config", str(config_file), "list-categories"])

    assert result.exit_code == 0
    assert result.stdout.splitlines()[1:] == ["Tea :coffee: Bar", "[b]Bold[/b]"]


@patch("keyring.set_password", side_effect=KeyringError("locked"))
def test_setup_reports_keyring_failure(mock_set, tmp_path):
    target = tmp_path / "config.json"
    result = runner.invoke(app, [
        "--config", str(target), "setup", "--site-url", SITE_URL, "--token", "tok", "--no-debug"
    ])

    assert result.exit_code == 1
    assert "Token stored in keyring." not in result.output
    assert "was not stored" in result.output


@patch("keyring.set_password", side_effect=KeyringError("locked"))
def test_login_reports_keyring_failure(mock_set, config_file):
    result = runner.invoke(app, ["--config", str(config_file), "login", "new-token"])
    assert result.exit_code == 1
    assert "stored securely" not in result.output
