"""
Infrastructure layer: adapters behind the application ports.

- persistence: user/watchlist stores (in-memory, Postgres)
- security: password hashing
- clients: Re:Watch HTTP API client
- enrichment: Jikan (MyAnimeList) metadata client
- session: local session cache
"""

__all__ = [
    "clients",
    "config",
    "enrichment",
    "persistence",
    "security",
    "session",
]
