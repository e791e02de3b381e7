"""Detection of articles that have not been posted yet."""

import logging
from collections.abc import Sequence
from datetime import datetime

from .models import Article, DeltaState, Granularity
from .state import StateStore, format_timestamp

logger = logging.getLogger(__name__)


class DeltaDetector:
    """
    Compares freshly scraped articles against the persisted state.

    With ``Granularity.DATE`` several articles can share one timestamp, so the
    URLs already posted at ``last_published`` are tracked to tell same-day
    siblings apart. With ``Granularity.DATETIME`` a strict greater-than
    comparison is enough and no URLs are kept.
    """

    def __init__(
        self,
        store: StateStore,
        granularity: Granularity,
        page_size: int | None = None,
    ) -> None:
        """Initialize the detector for one site."""
        self.store = store
        self.granularity = granularity
        self.page_size = page_size

    @property
    def tracks_urls(self) -> bool:
        """Whether same-timestamp URLs are needed to detect new articles."""
        return self.granularity is Granularity.DATE

    def _newest(self, articles: Sequence[Article]) -> tuple[datetime, list[str]]:
        newest = max(self.granularity.truncate(a.published) for a in articles)
        urls: list[str] = []
        if self.tracks_urls:
            for article in articles:
                if self.granularity.truncate(article.published) == newest and article.url not in urls:
                    urls.append(article.url)
        return newest, urls

    def _is_new(self, article: Article, last: datetime, posted: set[str]) -> bool:
        published = self.granularity.truncate(article.published)
        if published > last:
            return True
        return published == last and self.tracks_urls and article.url not in posted

    def is_new(self, state: DeltaState, article: Article) -> bool:
        """Whether ``article`` would still be detected against ``state``."""
        posted = set(state.posted_urls) if self.tracks_urls else set()
        return self._is_new(article, self.granularity.truncate(state.last_published), posted)

    def unposted(self, state: DeltaState | None, articles: Sequence[Article]) -> list[Article]:
        """
        Return the articles not yet reflected in ``state``, oldest first.

        On a cold start (no state) the newest scraped timestamp is saved as
        the baseline and nothing is returned.

        Args:
            state: The persisted state, or None on a cold start
            articles: Articles scraped this run, in source order

        Returns:
            New articles sorted ascending by publication time
        """
        if state is None:
            if not articles:
                logger.info("Cold start with no articles; no baseline recorded")
                return []
            newest, urls = self._newest(articles)
            self.store.save(DeltaState(last_published=newest, posted_urls=urls))
            logger.info(
                "Cold start: baseline set to %s from %d article(s), nothing posted",
                format_timestamp(newest),
                len(articles),
            )
            return []

        last = self.granularity.truncate(state.last_published)
        posted = set(state.posted_urls) if self.tracks_urls else set()

        unposted = [a for a in articles if self._is_new(a, last, posted)]

        if (
            self.page_size
            and len(articles) == self.page_size
            and all(self.granularity.truncate(a.published) > last for a in articles)
        ):
            logger.warning(
                "All %d listed articles are newer than %s; older posts may have been missed.",
                self.page_size,
                format_timestamp(last),
            )

        return sorted(unposted, key=lambda a: a.published)

    def advance(self, state: DeltaState | None, articles: Sequence[Article]) -> DeltaState | None:
        """
        Compute the state that records ``articles`` as posted.

        URLs already tracked at the same ``last_published`` are kept so that
        earlier same-day posts are not detected again.

        Args:
            state: The state the run started from
            articles: Articles to record as posted

        Returns:
            The successor state, or None when there is nothing to record
        """
        if not articles:
            return None

        newest, urls = self._newest(articles)
        if state is not None:
            last = self.granularity.truncate(state.last_published)
            if newest < last:
                return state
            if newest == last and self.tracks_urls:
                urls = list(dict.fromkeys([*state.posted_urls, *urls]))
        return DeltaState(last_published=newest, posted_urls=urls)
