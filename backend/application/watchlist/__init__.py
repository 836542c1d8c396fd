from application.watchlist.progress_service import WatchProgressService
from application.watchlist.synchronizer import WatchlistSynchronizer

__all__ = ["WatchProgressService", "WatchlistSynchronizer"]
