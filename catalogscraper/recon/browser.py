from typing import Dict, List, Optional, Any
from playwright.async_api import async_playwright, ConsoleMessage

from catalogscraper.core.config import SiteConfig
from catalogscraper.core.logging import log
from catalogscraper.core.constants import (
    BROWSER_ARGS,
    DEFAULT_NAVIGATION_TIMEOUT,
    NETWORK_IDLE_TIMEOUT,
    SESSION_COOKIE_NAME,
    LISTVIEW_COOKIE_NAME,
    LISTVIEW_COOKIE_VALUE,
)


def session_cookies(config: SiteConfig) -> List[Dict[str, str]]:
    """The session token cookie and the list-view display cookie."""
    return [
        {"name": SESSION_COOKIE_NAME, "value": config.token, "url": config.site_url},
        {"name": LISTVIEW_COOKIE_NAME, "value": LISTVIEW_COOKIE_VALUE, "url": config.site_url},
    ]


class BrowserSession:
    """
    One authenticated Playwright page, owned by a single command run.
    """
    def __init__(self, config: SiteConfig):
        self.config = config
        self.playwright = None
        self.browser = None
        self.context = None
        self.page = None

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def start(self) -> None:
        """Launch the browser, add session cookies and relay page console output."""
        self.playwright = await async_playwright().start()
        try:
            self.browser = await self.playwright.chromium.launch(
                headless=self.config.headless,
                args=BROWSER_ARGS,
            )
            self.context = await self.browser.new_context()
            await self.context.add_cookies(session_cookies(self.config))
            self.page = await self.context.new_page()
        except Exception:
            await self.close()
            raise
        self.page.on("console", self._relay_console)

    @staticmethod
    def _relay_console(message: ConsoleMessage) -> None:
        log(f"[page] {message.text}")

    async def close(self) -> None:
        """Close the browser session."""
        if self.context:
            await self.context.close()
        if self.browser:
            await self.browser.close()
        if self.playwright:
            await self.playwright.stop()

    async def goto(self, url: str, timeout: Optional[int] = None) -> Optional[Any]:
        """Navigate to a URL; failures propagate to the caller."""
        timeout_ms = (timeout or DEFAULT_NAVIGATION_TIMEOUT) * 1000
        try:
            return await self.page.goto(url, timeout=timeout_ms)
        except Exception as e:
            log(f"Navigation to {url} failed: {e}", level="debug")
            raise

    async def wait_for_idle(self, timeout: Optional[int] = None) -> None:
        """Block until background requests on the current page settle."""
        timeout_ms = (timeout or NETWORK_IDLE_TIMEOUT) * 1000
        await self.page.wait_for_load_state("networkidle", timeout=timeout_ms)

    async def content(self) -> str:
        """Rendered HTML of the current page."""
        return await self.page.content()
