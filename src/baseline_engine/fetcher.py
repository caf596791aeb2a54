"""
Fetcher implementations for retrieving web pages.

Provides raw HTML fetching (no JavaScript) and browser-rendered fetching with
a navigation fallback for slow or script-heavy pages.
"""

import asyncio
import logging
from abc import ABC, abstractmethod

import httpx
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .models import RawFetchResult, RenderedFetchResult

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """Base exception for fetch errors."""

    pass


class NavigationError(FetchError):
    """Raised when both navigation attempts fail."""

    pass


class Fetcher(ABC):
    """
    Abstract base class for fetchers.
    """

    @abstractmethod
    async def fetch(self, url: str, timeout: int = 60000) -> tuple:
        """
        Fetch a URL.

        Args:
            url: The URL to fetch
            timeout: Timeout in milliseconds

        Returns:
            Tuple of (fetch result, None) on success, or (None, error_message) on failure
        """
        pass


class RawHTMLFetcher(Fetcher):
    """
    Fetches URLs without JavaScript execution.

    Uses httpx for HTTP requests and follows redirects.
    """

    def __init__(
        self,
        user_agent: str | None = None,
        follow_redirects: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the raw HTML fetcher.

        Args:
            user_agent: Custom User-Agent header (optional)
            follow_redirects: Whether to follow HTTP redirects
            transport: Optional httpx transport (e.g. httpx.MockTransport)
        """
        self.user_agent = user_agent or (
            "Mozilla/5.0 (compatible; SEO-Baseline-Checker/1.0; +https://example.com/bot)"
        )
        self.follow_redirects = follow_redirects
        self.transport = transport

    async def fetch(
        self, url: str, timeout: int = 60000
    ) -> tuple[RawFetchResult | None, str | None]:
        loop = asyncio.get_running_loop()
        start_time = loop.time()

        try:
            async with httpx.AsyncClient(
                follow_redirects=self.follow_redirects,
                timeout=timeout / 1000.0,
                headers={"User-Agent": self.user_agent},
                transport=self.transport,
            ) as client:
                response = await client.get(url)

                fetch_time_ms = int((loop.time() - start_time) * 1000)

                result = RawFetchResult(
                    url=str(response.url),
                    original_url=url,
                    status_code=response.status_code,
                    headers=dict(response.headers),
                    html=response.text,
                    fetch_time_ms=fetch_time_ms,
                )

                if not result.success:
                    return None, f"HTTP status {response.status_code}"

                return result, None

        except httpx.TimeoutException:
            return None, f"Timeout after {timeout}ms"
        except httpx.HTTPError as e:
            return None, f"HTTP error: {str(e)}"


class RenderedHTMLFetcher(Fetcher):
    """
    Loads URLs in headless Chromium via Playwright.

    Navigation first waits for the load event; if that fails it retries once
    waiting only for DOMContentLoaded. Either way the page is given a short
    settle delay before its HTML is captured.
    """

    def __init__(
        self,
        user_agent: str | None = None,
        settle_delay: float = 5.0,
        headless: bool = True,
    ):
        """
        Initialize the rendered fetcher.

        Args:
            user_agent: Custom User-Agent header (optional)
            settle_delay: Seconds to wait after navigation before reading the page
            headless: Whether to run browser in headless mode
        """
        self.user_agent = user_agent
        self.settle_delay = settle_delay
        self.headless = headless

    async def fetch(
        self, url: str, timeout: int = 60000
    ) -> tuple[RenderedFetchResult | None, str | None]:
        from playwright.async_api import async_playwright

        loop = asyncio.get_running_loop()
        start_time = loop.time()

        try:
            async with async_playwright() as p:
                browser = await p.chromium.launch(headless=self.headless)
                try:
                    context = await browser.new_context(user_agent=self.user_agent)
                    page = await context.new_page()

                    used_fallback = await self.navigate_with_retry(page, url, timeout)
                    await page.wait_for_selector("head", state="attached", timeout=timeout)

                    result = RenderedFetchResult(
                        url=page.url,
                        original_url=url,
                        html=await page.content(),
                        success=True,
                        fetch_time_ms=int((loop.time() - start_time) * 1000),
                        used_fallback=used_fallback,
                    )
                    return result, None

                except PlaywrightTimeoutError:
                    return None, f"Render timeout after {timeout}ms"
                except NavigationError as e:
                    return None, str(e)
                finally:
                    await browser.close()

        except Exception as e:
            return None, f"Browser error: {str(e)}"

    async def navigate_with_retry(self, page: Page, url: str, timeout: int = 60000) -> bool:
        """
        Navigate to a URL, falling back to a more lenient wait on failure.

        Args:
            page: Playwright Page object
            url: URL to navigate to
            timeout: Timeout in milliseconds for each attempt

        Returns:
            True if the DOMContentLoaded fallback was needed

        Raises:
            NavigationError: If both attempts fail
        """
        used_fallback = False

        try:
            await page.goto(url, wait_until="load", timeout=timeout)
            logger.debug("Page loaded (load event fired): %s", url)
        except Exception as nav_error:
            logger.warning("Navigation issue for %s: %s. Retrying with domcontentloaded.", url, nav_error)
            used_fallback = True
            try:
                await page.goto(url, wait_until="domcontentloaded", timeout=timeout)
            except Exception as e:
                raise NavigationError(f"Navigation failed for {url}: {e}") from e
            logger.debug("Page loaded (DOM content loaded): %s", url)

        if self.settle_delay > 0:
            await page.wait_for_timeout(self.settle_delay * 1000)

        return used_fallback
