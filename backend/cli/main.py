"""Re:Watch command line client.

Drives the same client stack a frontend would use: ``SessionService`` for the
cached login, ``WatchlistSynchronizer`` for watchlist edits and
``JikanClient`` for anime metadata.

Examples:
    python -m cli signup you@example.com
    python -m cli search "frieren"
    python -m cli add 52991
    python -m cli watched 52991 3
    python -m cli progress 52991
"""

from __future__ import annotations

import argparse
import asyncio
import getpass
import logging
from typing import Optional, Sequence

from application.auth.session_service import SessionService
from application.watchlist import WatchlistSynchronizer, WatchProgressService
from domain.errors import RewatchError
from domain.watchlist import SyncResult, WatchItem
from infrastructure.clients import RewatchHttpClient
from infrastructure.enrichment import JikanClient
from infrastructure.session import FileSessionCache

logger = logging.getLogger(__name__)

_BROWSE_SHELVES = ("top", "now", "upcoming")


class _ClientContext:
    """Wires the client-side services for one CLI invocation."""

    def __init__(self, *, api_url: Optional[str], session_file: Optional[str]) -> None:
        self.api = RewatchHttpClient(base_url=api_url) if api_url else RewatchHttpClient()
        self.cache = FileSessionCache(session_file)
        self.synchronizer = WatchlistSynchronizer(api=self.api)
        self.session = SessionService(auth_api=self.api, cache=self.cache, synchronizer=self.synchronizer)
        self.progress = WatchProgressService(cache=self.cache, current_user=lambda: self.session.current_user)
        self.jikan = JikanClient()

    async def close(self) -> None:
        await self.api.close()
        await self.jikan.close()


def _format_item(item: WatchItem) -> str:
    year = item.year if item.year not in (None, "") else "Unknown"
    return f"[{item.id}] {item.title or 'Untitled'} ({year})"


def _print_items(items: Sequence[WatchItem], *, empty: str) -> None:
    if not items:
        print(empty)
        return
    for item in items:
        print(_format_item(item))


def _report(result: SyncResult, *, done: str) -> int:
    if result.success:
        print(done)
        return 0
    print(f"Error: {result.error_message}")
    return 1


def _read_password(args: argparse.Namespace) -> str:
    return args.password if args.password is not None else getpass.getpass("Password: ")


async def _require_user(ctx: _ClientContext) -> bool:
    if await ctx.session.restore() is None:
        print("Not logged in. Run `login` or `signup` first.")
        return False
    return True


async def _cmd_signup(ctx: _ClientContext, args: argparse.Namespace) -> int:
    user = await ctx.session.signup(args.email, _read_password(args))
    print(f"Signed up and logged in as {user.email}")
    return 0


async def _cmd_login(ctx: _ClientContext, args: argparse.Namespace) -> int:
    user = await ctx.session.login(args.email, _read_password(args))
    print(f"Logged in as {user.email}")
    return 0


async def _cmd_logout(ctx: _ClientContext, args: argparse.Namespace) -> int:
    ctx.session.logout()
    print("Logged out")
    return 0


async def _cmd_whoami(ctx: _ClientContext, args: argparse.Namespace) -> int:
    user = ctx.cache.load_user()
    print(f"{user.email} ({user.id})" if user else "Not logged in")
    return 0


async def _cmd_list(ctx: _ClientContext, args: argparse.Namespace) -> int:
    if not await _require_user(ctx):
        return 1
    state = ctx.synchronizer.state
    if state.error:
        print(f"Error: {state.error}")
        return 1
    _print_items(state.items, empty="Your watchlist is empty.")
    return 0


async def _resolve_item(ctx: _ClientContext, args: argparse.Namespace) -> WatchItem:
    if args.title:
        return WatchItem(id=args.anime_id, title=args.title, year=args.year, poster=args.poster)
    detail = await ctx.jikan.anime_detail(args.anime_id)
    return detail.item


async def _cmd_add(ctx: _ClientContext, args: argparse.Namespace) -> int:
    if not await _require_user(ctx):
        return 1
    item = await _resolve_item(ctx, args)
    result = await ctx.synchronizer.add(item)
    return _report(result, done=f"Added {_format_item(item)}")


async def _cmd_remove(ctx: _ClientContext, args: argparse.Namespace) -> int:
    if not await _require_user(ctx):
        return 1
    result = await ctx.synchronizer.remove(args.anime_id)
    return _report(result, done=f"Removed {args.anime_id}")


def _mark(ctx: _ClientContext, items: Sequence[WatchItem]) -> None:
    for item in items:
        flag = "*" if ctx.synchronizer.is_in_watchlist(item.id) else " "
        print(f"{flag} {_format_item(item)}")


async def _cmd_search(ctx: _ClientContext, args: argparse.Namespace) -> int:
    await ctx.session.restore()
    items = await ctx.jikan.search(args.query)
    if not items:
        print("No results.")
        return 0
    _mark(ctx, items[: args.limit])
    return 0


async def _cmd_browse(ctx: _ClientContext, args: argparse.Namespace) -> int:
    await ctx.session.restore()
    fetch = {
        "top": ctx.jikan.top,
        "now": ctx.jikan.season_now,
        "upcoming": ctx.jikan.season_upcoming,
    }[args.shelf]
    items = await fetch()
    if not items:
        print("Nothing to show.")
        return 0
    _mark(ctx, items[: args.limit])
    return 0


async def _cmd_watched(ctx: _ClientContext, args: argparse.Namespace) -> int:
    if not await _require_user(ctx):
        return 1
    now_watched = ctx.progress.toggle_episode(args.anime_id, args.episode)
    state = "watched" if now_watched else "unwatched"
    print(f"Episode {args.episode} marked {state}; status: {ctx.progress.status(args.anime_id).status}")
    return 0


async def _cmd_progress(ctx: _ClientContext, args: argparse.Namespace) -> int:
    if not await _require_user(ctx):
        return 1
    watched = set(ctx.progress.watched(args.anime_id))
    episodes: list = []
    if not args.offline:
        try:
            detail = await ctx.jikan.anime_detail(args.anime_id)
            episodes = await ctx.jikan.episodes(args.anime_id, episode_count=detail.episodes)
            ctx.progress.remember_total(args.anime_id, detail.episodes or len(episodes) or None)
        except RewatchError as exc:
            logger.warning("episode metadata unavailable for anime=%s: %s", args.anime_id, exc.message)
    for ep in episodes:
        print(f"[{'x' if ep.number in watched else ' '}] {ep.number:>4}  {ep.title}")
    status = ctx.progress.status(args.anime_id)
    total = status.total_episodes if status.total_episodes is not None else "?"
    print(f"{status.status}: {status.watched_count}/{total} episodes watched")
    return 0


_COMMANDS = {
    "signup": _cmd_signup,
    "login": _cmd_login,
    "logout": _cmd_logout,
    "whoami": _cmd_whoami,
    "list": _cmd_list,
    "add": _cmd_add,
    "remove": _cmd_remove,
    "search": _cmd_search,
    "browse": _cmd_browse,
    "watched": _cmd_watched,
    "progress": _cmd_progress,
}


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="rewatch", description="Re:Watch anime watchlist client.")
    p.add_argument("--api-url", default=None, help="Backend base URL (default: REWATCH_API_BASE_URL).")
    p.add_argument("--session-file", default=None, help="Session cache file (default: REWATCH_SESSION_FILE).")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    sub = p.add_subparsers(dest="command", required=True)

    for name in ("signup", "login"):
        sp = sub.add_parser(name, help=f"{name.capitalize()} with email and password.")
        sp.add_argument("email")
        sp.add_argument("--password", default=None, help="Prompted for when omitted.")

    sub.add_parser("logout", help="Forget the cached user.")
    sub.add_parser("whoami", help="Show the cached user.")
    sub.add_parser("list", help="Show your watchlist.")

    sp = sub.add_parser("add", help="Add an anime (by MyAnimeList id) to your watchlist.")
    sp.add_argument("anime_id")
    sp.add_argument("--title", default=None, help="Skip the Jikan lookup and use this title.")
    sp.add_argument("--year", default=None)
    sp.add_argument("--poster", default=None)

    sp = sub.add_parser("remove", help="Remove an anime from your watchlist.")
    sp.add_argument("anime_id")

    sp = sub.add_parser("search", help="Search anime on Jikan.")
    sp.add_argument("query")
    sp.add_argument("--limit", type=int, default=25)

    sp = sub.add_parser("browse", help="Browse Jikan shelves.")
    sp.add_argument("shelf", choices=_BROWSE_SHELVES)
    sp.add_argument("--limit", type=int, default=5)

    sp = sub.add_parser("watched", help="Toggle an episode as watched.")
    sp.add_argument("anime_id")
    sp.add_argument("episode", type=int)

    sp = sub.add_parser("progress", help="Show episode progress for an anime.")
    sp.add_argument("anime_id")
    sp.add_argument("--offline", action="store_true", help="Do not fetch the episode list from Jikan.")
    return p


async def _run(args: argparse.Namespace) -> int:
    ctx = _ClientContext(api_url=args.api_url, session_file=args.session_file)
    try:
        return await _COMMANDS[args.command](ctx, args)
    except RewatchError as exc:
        print(f"Error: {exc.message}")
        return 1
    finally:
        await ctx.close()


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    raise SystemExit(asyncio.run(_run(args)))
