"""JSON state file tracking the newest posted article of a site."""

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any

from .models import DeltaState

logger = logging.getLogger(__name__)


class LoadStatus(Enum):
    """Outcome of reading a state file."""

    MISSING = "missing"
    CORRUPT = "corrupt"
    LOADED = "loaded"


@dataclass(frozen=True)
class StateReadResult:
    """A state file read, keeping "no state" and "bad state" apart."""

    status: LoadStatus
    state: DeltaState | None = None
    error: str | None = None


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, treating naive values as UTC."""
    dt = datetime.fromisoformat(value.strip())
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def format_timestamp(value: datetime) -> str:
    """Format a timestamp as ``2026-01-10T00:00:00.000Z``."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    text = value.astimezone(UTC).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def state_from_dict(raw: Any) -> DeltaState:  # noqa: ANN401
    """
    Build a DeltaState from a decoded JSON document.

    Args:
        raw: The decoded JSON value

    Returns:
        The state record

    Raises:
        ValueError: If the document is not a valid state record
    """
    if not isinstance(raw, dict):
        msg = "state must be a JSON object"
        raise ValueError(msg)

    last_published = raw.get("last_published")
    if not isinstance(last_published, str) or not last_published.strip():
        msg = "missing 'last_published'"
        raise ValueError(msg)

    posted_urls = raw.get("posted_urls")
    if not isinstance(posted_urls, list):
        posted_urls = []

    return DeltaState(
        last_published=parse_timestamp(last_published),
        posted_urls=[url for url in posted_urls if isinstance(url, str)],
    )


def state_to_dict(state: DeltaState) -> dict[str, Any]:
    """Serialize a DeltaState; ``posted_urls`` is omitted when empty."""
    data: dict[str, Any] = {"last_published": format_timestamp(state.last_published)}
    if state.posted_urls:
        data["posted_urls"] = list(state.posted_urls)
    return data


class StateStore:
    """Reads and atomically writes one site's state file."""

    def __init__(self, path: str | Path, *, dry_run: bool = False) -> None:
        """Initialize the store for the given state file."""
        self.path = Path(path)
        self.dry_run = dry_run

    def read(self) -> StateReadResult:
        """Read the state file without ever raising on bad content."""
        if not self.path.exists():
            logger.info("No state file at %s", self.path)
            return StateReadResult(LoadStatus.MISSING)

        try:
            with self.path.open(encoding="utf-8") as f:
                state = state_from_dict(json.load(f))
        except (OSError, ValueError) as e:
            logger.warning(
                "Ignoring unreadable state file %s (%s). Starting fresh.",
                self.path,
                e,
            )
            return StateReadResult(LoadStatus.CORRUPT, error=str(e))
        else:
            logger.info(
                "Loaded state from %s: last_published=%s, %d posted URL(s)",
                self.path,
                format_timestamp(state.last_published),
                len(state.posted_urls),
            )
            return StateReadResult(LoadStatus.LOADED, state=state)

    def load(self) -> DeltaState | None:
        """Return the persisted state, or None when absent or corrupt."""
        return self.read().state

    def save(self, state: DeltaState) -> bool:
        """Replace the state file with ``state`` in a single rename; return whether it was written."""
        payload = json.dumps(state_to_dict(state), indent=2) + "\n"
        if self.dry_run:
            logger.info("[DRY_RUN] Would write %s: %s", self.path, payload.strip())
            return False

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent,
            prefix=f".{self.path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            Path(tmp_name).replace(self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("State saved to %s", self.path)
        return True
