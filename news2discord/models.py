"""Data model shared by the pipeline and the scraping strategies."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum


class Granularity(Enum):
    """Precision of the publication timestamps a news site exposes."""

    DATE = "date"
    DATETIME = "datetime"

    def truncate(self, value: datetime) -> datetime:
        """Normalize a timestamp to UTC at this granularity."""
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        value = value.astimezone(UTC)
        if self is Granularity.DATE:
            return value.replace(hour=0, minute=0, second=0, microsecond=0)
        # State files keep millisecond precision.
        return value.replace(microsecond=value.microsecond // 1000 * 1000)


@dataclass(frozen=True)
class Article:
    """A single news article scraped from a listing page."""

    title: str
    url: str
    published: datetime

    def __post_init__(self) -> None:
        if not self.title:
            msg = "Article title must not be empty"
            raise ValueError(msg)
        if self.published.tzinfo is None:
            object.__setattr__(self, "published", self.published.replace(tzinfo=UTC))


@dataclass
class DeltaState:
    """Persisted record of what has already been posted for one site."""

    last_published: datetime
    posted_urls: list[str] = field(default_factory=list)
