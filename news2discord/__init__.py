"""Post new game news articles to Discord webhooks."""

from .models import Article, DeltaState, Granularity

__all__ = ["Article", "DeltaState", "Granularity"]
