"""One run of the scrape, detect, notify and persist pipeline for a site."""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .delta import DeltaDetector
from .models import Article
from .notifier import DiscordNotifier
from .state import StateStore, format_timestamp

if TYPE_CHECKING:
    from strategies.base import ScraperStrategy

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Counters describing what a run did."""

    site: str
    scraped: int = 0
    detected: int = 0
    delivered: int = 0
    failed: int = 0
    state_saved: bool = False


class RunOrchestrator:
    """Ties a strategy, detector, notifier and state store together."""

    def __init__(
        self,
        name: str,
        strategy: "ScraperStrategy",
        store: StateStore,
        notifier: DiscordNotifier,
        *,
        advance_state_on: str = "delivered",
    ) -> None:
        """Initialize the orchestrator for one site."""
        self.name = name
        self.strategy = strategy
        self.store = store
        self.notifier = notifier
        self.advance_state_on = advance_state_on
        self.detector = DeltaDetector(store, strategy.granularity, strategy.page_size)

    def _notify(self, article: Article) -> bool:
        """Post one article, never letting a failure escape."""
        try:
            return self.notifier.post(article)
        except Exception:
            logger.exception("Failed to post: %s", article.title)
            return False

    def run(self) -> RunResult:
        """
        Execute one run.

        Raises:
            PageStructureError: If the news page could not be parsed; the
                state file is left untouched
        """
        result = RunResult(site=self.name)
        state = self.store.load()

        articles = self.strategy.fetch_articles()
        result.scraped = len(articles)
        logger.info("%s: scraped %d article(s)", self.name, len(articles))

        unposted = self.detector.unposted(state, articles)
        result.detected = len(unposted)
        if state is None and articles:
            result.state_saved = not self.store.dry_run
        if not unposted:
            logger.info("%s: no new articles", self.name)
            return result

        logger.info("%s: found %d new article(s)", self.name, len(unposted))
        delivered = []
        failed = []
        for article in unposted:
            if self._notify(article):
                delivered.append(article)
            else:
                failed.append(article)
        result.failed = len(failed)
        result.delivered = len(delivered)

        recorded = unposted if self.advance_state_on == "attempted" else delivered
        new_state = self.detector.advance(state, recorded)
        if new_state is None:
            logger.warning(
                "%s: no article was delivered; state left unchanged so they are retried",
                self.name,
            )
        else:
            result.state_saved = self.store.save(new_state)
            logger.info(
                "%s: state advanced to %s",
                self.name,
                format_timestamp(new_state.last_published),
            )
            for article in failed:
                if not self.detector.is_new(new_state, article):
                    logger.warning(
                        "%s: failed article will not be retried, state moved past it: %s",
                        self.name,
                        article.url,
                    )

        if result.failed:
            logger.warning(
                "%s: %d of %d article(s) failed to post",
                self.name,
                result.failed,
                len(unposted),
            )
        return result
