"""
Anime metadata enrichment.

Wraps the public Jikan API so search results, browse shelves and detail
pages can be turned into watchlist items.
"""

from infrastructure.enrichment.jikan_client import (
    AnimeDetail,
    Episode,
    JikanClient,
    map_jikan_item,
    synthetic_episodes,
)

__all__ = [
    "AnimeDetail",
    "Episode",
    "JikanClient",
    "map_jikan_item",
    "synthetic_episodes",
]
