import argparse
import logging
import os
import sys
import time
from collections.abc import Callable, Mapping, Sequence

import requests

from news2discord.config import AppConfig, SiteConfig, load_config
from news2discord.errors import ConfigError, PageStructureError
from news2discord.fetcher import DEFAULT_HEADERS, ResilientFetcher
from news2discord.notifier import DiscordNotifier
from news2discord.pipeline import RunOrchestrator
from news2discord.state import StateStore
from strategies import STRATEGIES

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_STRUCTURE_ERROR = 1
EXIT_CONFIG_ERROR = 2


class NewsToDiscord:
    """Main application class for forwarding game news to Discord webhooks."""

    def __init__(
        self,
        config: AppConfig,
        environ: Mapping[str, str] | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the application with a validated configuration."""
        self.config = config
        self.environ = os.environ if environ is None else environ
        self.sleep = sleep
        self.session = requests.Session()
        self.session.headers.update(DEFAULT_HEADERS)

    def _build_pipeline(self, site: SiteConfig) -> RunOrchestrator:
        """Wire up the components for one site."""
        strategy_cls = STRATEGIES.get(site.strategy)
        if strategy_cls is None:
            msg = f"Unknown strategy '{site.strategy}' for site {site.name}"
            raise ConfigError(msg)

        webhook_url = site.webhook_url(self.environ)

        fetcher = ResilientFetcher(
            self.session,
            max_attempts=self.config.fetch.max_attempts,
            base_delay=self.config.fetch.base_delay,
            timeout=self.config.fetch.timeout,
            sleep=self.sleep,
        )
        notifier = DiscordNotifier(
            webhook_url,
            max_retries=self.config.discord.max_retries,
            default_retry_after=self.config.discord.default_retry_after,
            timeout=self.config.discord.timeout,
            dry_run=self.config.dry_run,
            sleep=self.sleep,
        )
        return RunOrchestrator(
            site.name,
            strategy_cls(fetcher),
            StateStore(site.state_file, dry_run=self.config.dry_run),
            notifier,
            advance_state_on=self.config.advance_state_on,
        )

    def build_pipelines(self, site_names: Sequence[str] | None = None) -> list[RunOrchestrator]:
        """
        Validate and build the pipelines for the selected sites.

        Every selected site is checked before any of them runs.

        Raises:
            ConfigError: If a site is unknown or misconfigured
        """
        return [self._build_pipeline(site) for site in self.config.select(site_names)]

    def process_site(self, pipeline: RunOrchestrator) -> bool:
        """Run one site's pipeline; return False on a structural error."""
        logger.info("Processing site: %s (strategy: %s)", pipeline.name, pipeline.strategy.name)
        try:
            result = pipeline.run()
        except PageStructureError:
            logger.exception("Could not parse news page for %s; state left untouched", pipeline.name)
            return False
        else:
            logger.info(
                "%s: scraped=%d detected=%d delivered=%d failed=%d state_saved=%s",
                result.site,
                result.scraped,
                result.detected,
                result.delivered,
                result.failed,
                result.state_saved,
            )
            return True

    def run(self, site_names: Sequence[str] | None = None) -> int:
        """Run the selected sites once and return the process exit code."""
        pipelines = self.build_pipelines(site_names)
        logger.info(
            "Starting news check for %d site(s) (advance_state_on=%s, dry_run=%s)",
            len(pipelines),
            self.config.advance_state_on,
            self.config.dry_run,
        )

        ok = True
        for pipeline in pipelines:
            if not self.process_site(pipeline):
                ok = False

        return EXIT_OK if ok else EXIT_STRUCTURE_ERROR


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Post new game news articles to Discord.")
    parser.add_argument("--config", default=None, help="Path to the YAML configuration file")
    parser.add_argument(
        "--site",
        action="append",
        dest="sites",
        default=None,
        help="Only run the named site (repeatable)",
    )
    args = parser.parse_args(argv)

    level = os.environ.get("LOG_LEVEL", "").strip().upper()
    if level in logging.getLevelNamesMapping():
        logging.getLogger().setLevel(level)

    try:
        app = NewsToDiscord(load_config(args.config))
        return app.run(args.sites)
    except ConfigError:
        logger.exception("Configuration error")
        return EXIT_CONFIG_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
