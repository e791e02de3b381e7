"""Scraping strategies for different news sites."""

from .arc_raiders_strategy import ArcRaidersStrategy
from .base import ScraperStrategy
from .nightreign_strategy import NightreignStrategy

STRATEGIES: dict[str, type[ScraperStrategy]] = {
    ArcRaidersStrategy.name: ArcRaidersStrategy,
    NightreignStrategy.name: NightreignStrategy,
}

__all__ = ["STRATEGIES", "ArcRaidersStrategy", "NightreignStrategy", "ScraperStrategy"]
