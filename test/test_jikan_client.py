import sys
import unittest
from pathlib import Path

_BACKEND_ROOT = Path(__file__).resolve().parents[1] / "backend"
if str(_BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(_BACKEND_ROOT))

from aiohttp import web
from aiohttp.test_utils import TestServer

from domain.errors import NetworkError, NotFoundError
from infrastructure.enrichment import JikanClient, map_jikan_item

_PLACEHOLDER = "https://example.invalid/poster.png"


class TestMapJikanItem(unittest.TestCase):
    def test_full_item(self) -> None:
        item = map_jikan_item(
            {
                "mal_id": 52991,
                "title": "Sousou no Frieren",
                "year": 2023,
                "images": {"jpg": {"image_url": "https://cdn/f.jpg"}},
            },
            placeholder_poster=_PLACEHOLDER,
        )
        self.assertEqual((item.id, item.title, item.year, item.poster), (52991, "Sousou no Frieren", 2023, "https://cdn/f.jpg"))

    def test_fallbacks(self) -> None:
        item = map_jikan_item(
            {"mal_id": 1, "title": "", "title_english": "Cowboy Bebop", "aired": {"prop": {"from": {"year": 1998}}}},
            placeholder_poster=_PLACEHOLDER,
        )
        self.assertEqual((item.title, item.year, item.poster), ("Cowboy Bebop", 1998, _PLACEHOLDER))

        bare = map_jikan_item({"mal_id": 2}, placeholder_poster=_PLACEHOLDER)
        self.assertEqual(bare.title, "Untitled")
        self.assertIsNone(bare.year)

    def test_items_without_mal_id_are_skipped(self) -> None:
        self.assertIsNone(map_jikan_item({"title": "x"}))
        self.assertIsNone(map_jikan_item("nope"))


def _build_jikan() -> web.Application:
    async def search(request: web.Request) -> web.Response:
        q = request.query.get("q", "")
        return web.json_response({"data": [{"mal_id": 1, "title": q}, {"title": "no id"}]})

    async def top(request: web.Request) -> web.Response:
        return web.json_response({"data": [{"mal_id": i, "title": f"T{i}"} for i in range(1, 4)]})

    async def detail(request: web.Request) -> web.Response:
        anime_id = request.match_info["anime_id"]
        if anime_id == "404":
            return web.json_response({"status": 404}, status=404)
        return web.json_response(
            {
                "data": {
                    "mal_id": int(anime_id),
                    "title": "Show",
                    "episodes": 3,
                    "score": 8.5,
                    "genres": [{"name": "Drama"}],
                }
            }
        )

    async def episodes(request: web.Request) -> web.Response:
        anime_id = request.match_info["anime_id"]
        if anime_id == "7":
            return web.json_response({"data": [{"mal_id": 1, "title": "Start"}, {"title": "Episode 2"}]})
        if anime_id == "8":
            return web.json_response({"data": []})
        return web.json_response({"error": "down"}, status=500)

    app = web.Application()
    app.router.add_get("/anime", search)
    app.router.add_get("/top/anime", top)
    app.router.add_get("/anime/{anime_id}", detail)
    app.router.add_get("/anime/{anime_id}/episodes", episodes)
    return app


class TestJikanClient(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.server = TestServer(_build_jikan())
        await self.server.start_server()
        self.client = JikanClient(
            base_url=str(self.server.make_url("")).rstrip("/"),
            timeout_s=5,
            min_interval_s=0,
        )

    async def asyncTearDown(self) -> None:
        await self.client.close()
        await self.server.close()

    async def test_search_maps_results(self) -> None:
        items = await self.client.search("frieren")
        self.assertEqual([(i.id, i.title) for i in items], [(1, "frieren")])
        self.assertEqual(await self.client.search("   "), [])

    async def test_top(self) -> None:
        self.assertEqual([i.id for i in await self.client.top()], [1, 2, 3])

    async def test_detail(self) -> None:
        detail = await self.client.anime_detail(5)
        self.assertEqual(detail.item.id, 5)
        self.assertEqual(detail.episodes, 3)
        self.assertEqual(detail.genres, ("Drama",))
        with self.assertRaises(NotFoundError):
            await self.client.anime_detail(404)

    async def test_episodes(self) -> None:
        eps = await self.client.episodes(7)
        self.assertEqual([(e.number, e.title) for e in eps], [(1, "Start"), (2, "Episode 2")])

    async def test_episode_fallbacks(self) -> None:
        self.assertEqual([e.number for e in await self.client.episodes(8, episode_count=3)], [1, 2, 3])
        self.assertEqual(await self.client.episodes(8), [])
        self.assertEqual([e.title for e in await self.client.episodes(9, episode_count=2)], ["Episode 1", "Episode 2"])
        with self.assertRaises(NetworkError):
            await self.client.episodes(9)


if __name__ == "__main__":
    unittest.main()
