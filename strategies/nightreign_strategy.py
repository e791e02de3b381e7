"""Elden Ring Nightreign news page scraping strategy."""

import logging
from datetime import UTC, datetime
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from news2discord.errors import PageStructureError
from news2discord.models import Article, Granularity

from .base import ScraperStrategy

logger = logging.getLogger(__name__)

BASE_URL = "https://en.bandainamcoent.eu"


class NightreignStrategy(ScraperStrategy):
    """Strategy for the Nightreign news section, which lists three cards."""

    name = "nightreign"
    news_url = f"{BASE_URL}/elden-ring/elden-ring-nightreign/news"
    granularity = Granularity.DATETIME
    page_size = 3

    def parse_articles(self, html: str) -> list[Article]:
        """Extract article cards from the news section."""
        soup = BeautifulSoup(html, "html.parser")

        heading = soup.select_one("h2#news")
        section = heading.find_parent("div", class_="search__section") if heading else None
        if section is None:
            msg = "News section not found"
            raise PageStructureError(msg)

        cards_list = section.select_one("ul.cards-list")
        if cards_list is None:
            msg = "Cards list not found"
            raise PageStructureError(msg)

        articles = []
        for card in cards_list.select("li.node__thumbnail"):
            title_tag = card.select_one("h3.card__title")
            link = card.select_one("a.card")
            time_tag = card.select_one("time")

            title = title_tag.get_text(strip=True) if title_tag else ""
            href = link.get("href") if link else None
            stamp = time_tag.get("datetime") if time_tag else None
            if not title or not href or not stamp:
                continue

            try:
                published = datetime.fromisoformat(str(stamp).strip())
            except ValueError:
                logger.warning("Skipping %s: unparseable datetime %r", title, stamp)
                continue
            if published.tzinfo is None:
                published = published.replace(tzinfo=UTC)

            articles.append(
                Article(
                    title=title,
                    url=urljoin(BASE_URL, str(href)),
                    published=published.astimezone(UTC),
                ),
            )

        return articles
