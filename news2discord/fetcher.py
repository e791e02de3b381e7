"""HTTP GET with bounded linear-backoff retries."""

import logging
import time
from collections.abc import Callable
from typing import Any

import requests

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}


class ResilientFetcher:
    """Fetches a URL, retrying network errors and non-2xx responses."""

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        max_attempts: int = 3,
        base_delay: float = 2.0,
        timeout: float = 30.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the fetcher with its retry settings."""
        if session is None:
            session = requests.Session()
            session.headers.update(DEFAULT_HEADERS)
        self.session = session
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.timeout = timeout
        self._sleep = sleep

    def fetch(
        self,
        url: str,
        max_attempts: int | None = None,
        **kwargs: Any,  # noqa: ANN401
    ) -> requests.Response | None:
        """
        GET a URL with retries.

        Attempt ``n`` that fails is followed by a ``base_delay * n`` second
        wait, except after the last attempt.

        Args:
            url: The URL to fetch
            max_attempts: Override for the configured attempt count
            **kwargs: Extra arguments passed to ``session.get``

        Returns:
            The first successful response, or None once every attempt failed
        """
        attempts = self.max_attempts if max_attempts is None else max_attempts
        if attempts < 1:
            msg = f"max_attempts must be at least 1, got {attempts}"
            raise ValueError(msg)
        kwargs.setdefault("timeout", self.timeout)

        for attempt in range(1, attempts + 1):
            try:
                response = self.session.get(url, **kwargs)
            except requests.exceptions.RequestException as e:
                logger.warning(
                    "Fetch attempt %d/%d for %s failed: %s",
                    attempt,
                    attempts,
                    url,
                    e,
                )
            else:
                if 200 <= response.status_code < 300:
                    return response
                logger.warning(
                    "Fetch attempt %d/%d for %s blocked: HTTP %s",
                    attempt,
                    attempts,
                    url,
                    response.status_code,
                )

            if attempt < attempts:
                self._sleep(self.base_delay * attempt)

        logger.warning("Giving up on %s after %d attempts", url, attempts)
        return None
