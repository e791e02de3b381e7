"""Base strategy interface for news page scraping."""

import logging
from abc import ABC, abstractmethod
from typing import ClassVar

from news2discord.fetcher import ResilientFetcher
from news2discord.models import Article, Granularity

logger = logging.getLogger(__name__)


class ScraperStrategy(ABC):
    """Abstract base class for site-specific news scraping strategies."""

    name: ClassVar[str]
    news_url: ClassVar[str]
    granularity: ClassVar[Granularity]
    page_size: ClassVar[int | None] = None

    def __init__(self, fetcher: ResilientFetcher) -> None:
        """Initialize the strategy with the fetcher used for the listing page."""
        self.fetcher = fetcher

    def fetch_articles(self) -> list[Article]:
        """
        Fetch and parse the news listing page.

        Returns:
            The articles found on the page, in page order. Empty when the
            page could not be fetched.

        Raises:
            PageStructureError: If the page no longer has the expected layout
        """
        response = self.fetcher.fetch(self.news_url)
        if response is None:
            logger.warning("%s fetch abandoned after retries", self.name)
            return []
        return self.parse_articles(response.text)

    @abstractmethod
    def parse_articles(self, html: str) -> list[Article]:
        """
        Extract articles from the listing page HTML.

        Args:
            html: The page source

        Returns:
            A list of articles in page order

        Raises:
            PageStructureError: If the expected containers are missing
        """
