"""Exception hierarchy for news2discord."""


class News2DiscordError(Exception):
    """Base class for all news2discord errors."""


class ConfigError(News2DiscordError):
    """Raised when the configuration is missing or invalid."""


class PageStructureError(News2DiscordError, ValueError):
    """Raised when a news page no longer has the expected layout."""
