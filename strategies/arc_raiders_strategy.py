"""Arc Raiders news page scraping strategy."""

import logging
from datetime import UTC, datetime
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from news2discord.errors import PageStructureError
from news2discord.models import Article, Granularity

from .base import ScraperStrategy

logger = logging.getLogger(__name__)

BASE_URL = "https://arcraiders.com"


def parse_card_date(text: str) -> datetime:
    """
    Parse a card date such as ``January 13, 2026``.

    The site shows no time of day, so the date is taken as UTC midnight.

    Args:
        text: The date text of an article card

    Returns:
        A timezone-aware datetime at 00:00 UTC

    Raises:
        PageStructureError: If the text is not a recognizable date
    """
    cleaned = " ".join(text.split())
    for fmt in ("%B %d, %Y", "%b %d, %Y"):
        try:
            return datetime.strptime(cleaned, fmt).replace(tzinfo=UTC)
        except ValueError:
            continue
    msg = f"Invalid date: {text!r}"
    raise PageStructureError(msg)


class ArcRaidersStrategy(ScraperStrategy):
    """Strategy for the Arc Raiders news grid, which only shows dates."""

    name = "arc_raiders"
    news_url = f"{BASE_URL}/news"
    granularity = Granularity.DATE

    def parse_articles(self, html: str) -> list[Article]:
        """Extract article cards from the news grid."""
        soup = BeautifulSoup(html, "html.parser")

        section = soup.select_one('div[class^="news-article-grid_newsArticleGrid"]')
        if section is None:
            msg = "News section not found"
            raise PageStructureError(msg)

        articles = []
        for card in section.select('a[class^="news-article-card_container"]'):
            href = card.get("href")
            if not href:
                continue
            title_tag = card.select_one('div[class^="news-article-card_title"]')
            date_tag = card.select_one('div[class^="news-article-card_date"]')
            title = title_tag.get_text(strip=True) if title_tag else ""
            date_text = date_tag.get_text(strip=True) if date_tag else ""
            if not title or not date_text:
                logger.debug("Skipping incomplete card: %s", href)
                continue

            articles.append(
                Article(
                    title=title,
                    url=urljoin(BASE_URL, str(href)),
                    published=parse_card_date(date_text),
                ),
            )

        return articles
