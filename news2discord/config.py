"""YAML configuration loading and validation."""

import logging
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.yaml"
ADVANCE_POLICIES = ("delivered", "attempted")


@dataclass(frozen=True)
class FetchConfig:
    """Retry settings for fetching news pages."""

    max_attempts: int = 3
    base_delay: float = 2.0
    timeout: float = 30.0


@dataclass(frozen=True)
class DiscordConfig:
    """Retry settings for posting to Discord webhooks."""

    max_retries: int = 3
    default_retry_after: float = 5.0
    timeout: float = 10.0


@dataclass(frozen=True)
class SiteConfig:
    """One news site and the webhook its articles are posted to."""

    name: str
    strategy: str
    state_file: Path
    webhook_env: str | None = None
    webhook: str | None = None

    def webhook_url(self, environ: Mapping[str, str] | None = None) -> str:
        """
        Resolve the destination webhook URL.

        Args:
            environ: Environment mapping, defaults to ``os.environ``

        Returns:
            The webhook URL

        Raises:
            ConfigError: If no webhook is configured for the site
        """
        if environ is None:
            environ = os.environ
        if self.webhook_env:
            url = environ.get(self.webhook_env, "").strip()
            if url:
                return url
        if self.webhook:
            return self.webhook
        if self.webhook_env:
            msg = f"{self.webhook_env} is not set (site {self.name})"
        else:
            msg = f"No webhook configured for site {self.name}"
        raise ConfigError(msg)


@dataclass(frozen=True)
class AppConfig:
    """Validated application configuration."""

    sites: tuple[SiteConfig, ...]
    fetch: FetchConfig = field(default_factory=FetchConfig)
    discord: DiscordConfig = field(default_factory=DiscordConfig)
    advance_state_on: str = "delivered"
    dry_run: bool = False

    def select(self, names: Iterable[str] | None = None) -> list[SiteConfig]:
        """Return the sites matching ``names``, or all sites when empty."""
        names = list(names or [])
        if not names:
            return list(self.sites)

        by_name = {site.name: site for site in self.sites}
        unknown = [name for name in names if name not in by_name]
        if unknown:
            msg = f"Unknown site(s): {', '.join(unknown)}"
            raise ConfigError(msg)
        return [by_name[name] for name in names]


def _section(raw: dict[str, Any], key: str) -> dict[str, Any]:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        msg = f"'{key}' must be a mapping"
        raise ConfigError(msg)
    return value


def _number(section: dict[str, Any], key: str, default: float, *, minimum: float) -> float:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        msg = f"'{key}' must be a number, got {value!r}"
        raise ConfigError(msg)
    if value < minimum:
        msg = f"'{key}' must be at least {minimum}, got {value}"
        raise ConfigError(msg)
    return value


def _parse_site(entry: Any, base_dir: Path) -> SiteConfig:  # noqa: ANN401
    if not isinstance(entry, dict):
        msg = f"Site entry must be a mapping, got {entry!r}"
        raise ConfigError(msg)

    name = entry.get("name")
    strategy = entry.get("strategy")
    if not name or not strategy:
        msg = f"Site entry needs 'name' and 'strategy': {entry!r}"
        raise ConfigError(msg)

    webhook_env = entry.get("webhook_env")
    webhook = entry.get("webhook")
    if not webhook_env and not webhook:
        msg = f"Site {name} needs 'webhook_env' or 'webhook'"
        raise ConfigError(msg)

    state_file = Path(entry.get("state_file") or f"{name}/state.json")
    if not state_file.is_absolute():
        state_file = base_dir / state_file

    return SiteConfig(
        name=str(name),
        strategy=str(strategy).lower(),
        state_file=state_file,
        webhook_env=webhook_env,
        webhook=webhook,
    )


def parse_config(
    raw: Any,  # noqa: ANN401
    base_dir: Path,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """Validate a parsed YAML document and build an AppConfig."""
    if environ is None:
        environ = os.environ
    if not isinstance(raw, dict):
        msg = "Configuration must be a mapping"
        raise ConfigError(msg)

    sites_raw = raw.get("sites") or []
    if not isinstance(sites_raw, list) or not sites_raw:
        msg = "Configuration must list at least one site under 'sites'"
        raise ConfigError(msg)
    sites = tuple(_parse_site(entry, base_dir) for entry in sites_raw)

    names = [site.name for site in sites]
    if len(set(names)) != len(names):
        msg = f"Duplicate site names in configuration: {names}"
        raise ConfigError(msg)

    fetch_raw = _section(raw, "fetch")
    fetch = FetchConfig(
        max_attempts=int(_number(fetch_raw, "max_attempts", 3, minimum=1)),
        base_delay=float(_number(fetch_raw, "base_delay", 2.0, minimum=0)),
        timeout=float(_number(fetch_raw, "timeout", 30.0, minimum=0)),
    )

    discord_raw = _section(raw, "discord")
    discord = DiscordConfig(
        max_retries=int(_number(discord_raw, "max_retries", 3, minimum=0)),
        default_retry_after=float(
            _number(discord_raw, "default_retry_after", 5.0, minimum=0),
        ),
        timeout=float(_number(discord_raw, "timeout", 10.0, minimum=0)),
    )

    advance_state_on = str(raw.get("advance_state_on", "delivered")).lower()
    if advance_state_on not in ADVANCE_POLICIES:
        msg = (
            f"'advance_state_on' must be one of {', '.join(ADVANCE_POLICIES)}, "
            f"got {advance_state_on!r}"
        )
        raise ConfigError(msg)

    dry_run = bool(raw.get("dry_run", False))
    dry_run_env = environ.get("DRY_RUN", "").strip().lower()
    if dry_run_env:
        dry_run = dry_run_env == "true"

    return AppConfig(
        sites=sites,
        fetch=fetch,
        discord=discord,
        advance_state_on=advance_state_on,
        dry_run=dry_run,
    )


def load_config(
    config_path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML file; defaults to ``CONFIG_PATH`` or
            ``config.yaml``
        environ: Environment mapping, defaults to ``os.environ``

    Returns:
        The validated configuration

    Raises:
        ConfigError: If the file is missing, unparseable or invalid
    """
    if environ is None:
        environ = os.environ
    if config_path is None:
        config_path = environ.get("CONFIG_PATH", DEFAULT_CONFIG_PATH)
    path = Path(config_path)

    try:
        with path.open(encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except FileNotFoundError as e:
        msg = f"Configuration file not found: {path}"
        raise ConfigError(msg) from e
    except yaml.YAMLError as e:
        msg = f"Error parsing YAML configuration {path}: {e}"
        raise ConfigError(msg) from e

    config = parse_config(raw, path.resolve().parent, environ)
    logger.info("Loaded configuration from %s (%d sites)", path, len(config.sites))
    return config
