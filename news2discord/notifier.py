"""Discord webhook notifier."""

import logging
import time
from collections.abc import Callable
from typing import Any

import requests

from .models import Article

logger = logging.getLogger(__name__)


def format_message(article: Article) -> str:
    """Render the webhook message content for an article."""
    return f"**{article.title}**\n{article.url}"


class DiscordNotifier:
    """Posts one message per article to a Discord webhook."""

    def __init__(
        self,
        webhook_url: str,
        session: requests.Session | None = None,
        *,
        max_retries: int = 3,
        default_retry_after: float = 5.0,
        timeout: float = 10.0,
        dry_run: bool = False,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the notifier for one webhook."""
        self.webhook_url = webhook_url
        self.session = session if session is not None else requests.Session()
        self.max_retries = max_retries
        self.default_retry_after = default_retry_after
        self.timeout = timeout
        self.dry_run = dry_run
        self._sleep = sleep

    def _retry_after(self, response: requests.Response) -> float:
        """Seconds to wait before retrying a rate-limited request."""
        header = response.headers.get("Retry-After")
        if header:
            try:
                wait_time = float(header)
            except ValueError:
                logger.debug("Unparseable Retry-After header: %s", header)
            else:
                if wait_time > 0:
                    return wait_time

        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            value = body.get("retry_after")
            if isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0:
                return float(value)

        return self.default_retry_after

    def post(self, article: Article) -> bool:
        """
        Send an article to the webhook.

        Rate-limited (HTTP 429) requests are retried after the cool-down the
        server asks for; any other error status is final.

        Args:
            article: The article to announce

        Returns:
            True if Discord accepted the message, False otherwise
        """
        payload: dict[str, Any] = {"content": format_message(article)}

        if self.dry_run:
            logger.info("[DRY_RUN] Would send to Discord: %s", payload["content"])
            return True

        for attempt in range(self.max_retries + 1):
            try:
                response = self.session.post(
                    self.webhook_url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                    timeout=self.timeout,
                )
            except requests.exceptions.RequestException:
                logger.exception("Error sending to Discord webhook: %s", article.title)
                return False

            if response.status_code == 429:
                if attempt >= self.max_retries:
                    break
                wait_time = self._retry_after(response)
                logger.warning(
                    "Rate limited (429), waiting %s seconds before retry %d/%d",
                    wait_time,
                    attempt + 1,
                    self.max_retries,
                )
                self._sleep(wait_time)
                continue

            if not 200 <= response.status_code < 300:
                logger.error(
                    "Discord webhook failed for %s: HTTP %s %s",
                    article.title,
                    response.status_code,
                    response.text[:300],
                )
                return False

            logger.info("Sent to Discord: %s", article.title)
            return True

        logger.error(
            "Giving up on %s after %d rate-limited retries",
            article.title,
            self.max_retries,
        )
        return False
