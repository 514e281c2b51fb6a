"""
Website Loader - fetches provider pricing pages over HTTP or a headless browser
"""
import logging
from typing import Dict, Optional

import requests
from playwright.async_api import async_playwright, Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..config.enums import FetchMethod
from .exceptions import FetchError, FetchTimeoutError, HttpStatusError

logger = logging.getLogger(__name__)

USER_AGENT = (
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
)

DEFAULT_HEADERS = {
    'User-Agent': USER_AGENT,
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.9',
}

class WebsiteLoader:
    """Loads provider pages; every failure surfaces as a FetchError"""

    def __init__(self, timeout: int = 15000, session: Optional[requests.Session] = None):
        # Timeout in milliseconds, shared by both backends
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(DEFAULT_HEADERS)

    async def fetch(self, url: str, method: FetchMethod = FetchMethod.HTTP,
                    headers: Optional[Dict[str, str]] = None) -> str:
        """Return the raw page text for url"""
        if method == FetchMethod.BROWSER:
            return await self.load_with_browser(url, headers)
        return await self.load_with_http(url, headers)

    async def load_with_http(self, url: str, headers: Optional[Dict[str, str]] = None) -> str:
        """Load page content with a plain HTTP request"""
        logger.debug(f"HTTP GET {url}")

        try:
            response = self.session.get(
                url,
                headers=headers or None,
                timeout=self.timeout / 1000,
                allow_redirects=True,
            )
        except requests.Timeout as e:
            raise FetchTimeoutError(url, f"Timed out after {self.timeout}ms") from e
        except requests.RequestException as e:
            raise FetchError(url, f"Request failed: {e}") from e

        if not response.ok:
            raise HttpStatusError(url, response.status_code, response.reason)

        logger.debug(f"HTTP request successful ({len(response.text)} chars)")
        return response.text

    async def load_with_browser(self, url: str, headers: Optional[Dict[str, str]] = None) -> str:
        """Load page content using browser automation, for client-rendered pricing tables"""
        logger.debug(f"Browser load {url}")

        try:
            async with async_playwright() as p:
                browser = await p.chromium.launch(
                    headless=True,
                    args=[
                        '--no-sandbox',
                        '--disable-dev-shm-usage',
                        '--disable-blink-features=AutomationControlled',
                    ]
                )
                try:
                    context = await browser.new_context(
                        user_agent=USER_AGENT,
                        locale='en-US',
                        extra_http_headers=headers or {},
                    )
                    page = await context.new_page()

                    response = await page.goto(url, timeout=self.timeout, wait_until='domcontentloaded')
                    if response and not response.ok:
                        raise HttpStatusError(url, response.status, response.status_text)

                    # Pricing widgets often hydrate after the DOM is ready
                    try:
                        await page.wait_for_load_state('networkidle', timeout=self.timeout)
                    except PlaywrightTimeoutError:
                        logger.debug(f"Network never went idle for {url}, using current DOM")

                    html_content = await page.content()
                finally:
                    await browser.close()

        except PlaywrightTimeoutError as e:
            raise FetchTimeoutError(url, f"Timed out after {self.timeout}ms") from e
        except PlaywrightError as e:
            raise FetchError(url, f"Browser load failed: {e}") from e

        logger.debug(f"Browser load successful ({len(html_content)} chars)")
        return html_content

    def close(self):
        self.session.close()
