import asyncio
from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Awaitable, Iterable, List, Optional, TypeVar

import httpx
from bs4 import BeautifulSoup, Tag
from loguru import logger
from pydantic import BaseModel, Field
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ietf_groups.config.settings import settings
from ietf_groups.models.enums import Organization
from ietf_groups.models.group import Group
from .extraction import by_attribute, first_match

# Define common HTTP status codes that warrant a retry
RETRYABLE_STATUS_CODES = {408, 429, 500, 502, 503, 504}

T = TypeVar("T")


class GroupDetails(BaseModel):
    """Fields only available on a group's own page."""

    description: Optional[str] = None
    chairs: List[str] = Field(default_factory=list)
    mailing_list: Optional[str] = None
    mailing_list_archive: Optional[str] = None
    website_url: Optional[str] = None
    charter_url: Optional[str] = None
    concluded_date: Optional[date] = None


def extract_mailing_list(doc: Tag) -> Optional[str]:
    return first_match(
        [by_attribute('a[href^="mailto:"]', "href", lambda href: href[len("mailto:"):])],
        doc,
    )


def extract_mailing_list_archive(doc: Tag) -> Optional[str]:
    return first_match([by_attribute('a[href*="mailarchive.ietf.org"]', "href")], doc)


class ScraperError(Exception):
    """Custom exception for scraper-related errors."""

    pass


class RateLimitError(ScraperError):
    """Exception raised for rate limit errors (429)."""

    pass


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, (httpx.RequestError, RateLimitError)):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS_CODES
    return False


async def gather_ordered(coros: Iterable[Awaitable[T]], limit: int = 1) -> List[T]:
    """Awaits coroutines with at most ``limit`` in flight, results in input order."""
    semaphore = asyncio.Semaphore(max(1, limit))

    async def run(coro: Awaitable[T]) -> T:
        async with semaphore:
            return await coro

    return list(await asyncio.gather(*(run(c) for c in coros)))


class BaseScraper(ABC):
    """Abstract base class for group scrapers."""

    organization: Organization

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        max_attempts: Optional[int] = None,
        detail_concurrency: Optional[int] = None,
    ):
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.request_timeout),
            follow_redirects=True,
            headers={"User-Agent": settings.user_agent},
        )
        self.max_attempts = max_attempts or settings.max_attempts
        self.detail_concurrency = detail_concurrency or settings.detail_concurrency

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    @abstractmethod
    async def fetch(self) -> List[Group]:
        """Fetch every group this scraper knows how to find.

        Returns:
            Groups in discovery order. Pages or groups that could not be
            fetched are left out; nothing is raised for them.
        """
        pass

    def log(self, message: str, level: int = 0, severity: str = "INFO") -> None:
        """Logs progress indented by nesting level (category, row, ...)."""
        logger.log(severity, f"{'  ' * level}{message}")

    async def _make_request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Makes an asynchronous HTTP request with retry logic."""
        logger.debug(f"Making request {method} {url}")
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_attempts),
                wait=wait_exponential(multiplier=1, min=1, max=10),
                retry=retry_if_exception(_is_retryable),
                reraise=True,  # Reraise the exception after max attempts
            ):
                with attempt:
                    response = await self.client.request(method, url, **kwargs)
                    if response.status_code == 429:
                        retry_after = response.headers.get("Retry-After")
                        logger.warning(
                            f"Rate limit hit (429) at {url}. Retry-After: {retry_after}"
                        )
                        raise RateLimitError(f"Rate limited by {url}")
                    response.raise_for_status()  # Raises HTTPStatusError for 4xx/5xx
                    logger.debug(f"Request successful: {response.status_code} for {url}")
                    return response
        except ScraperError:
            raise
        except httpx.HTTPStatusError as e:
            raise ScraperError(f"HTTP error: {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise ScraperError(f"Request error: {e}") from e
        except Exception as e:
            logger.exception(f"Unexpected error during request to {url}: {e}")
            raise ScraperError("Unexpected error during HTTP request") from e
        raise ScraperError(f"No response received from {url}")

    async def fetch_html(self, url: str) -> Optional[BeautifulSoup]:
        """Fetches a page and parses it; returns None on any failure."""
        try:
            response = await self._make_request("GET", url)
        except ScraperError as e:
            logger.warning(f"Error fetching URL {url}: {e}")
            return None

        try:
            return BeautifulSoup(response.text, "html.parser")
        except Exception as e:
            logger.warning(f"Error parsing HTML from {url}: {e}")
            return None

    async def close(self):
        """Closes the underlying HTTP client if this scraper created it."""
        if self._owns_client:
            await self.client.aclose()
            logger.debug(f"Closed HTTP client for {self.organization.value} scraper")
