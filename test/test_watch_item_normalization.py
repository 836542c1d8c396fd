import sys
import unittest
from pathlib import Path

_BACKEND_ROOT = Path(__file__).resolve().parents[1] / "backend"
if str(_BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(_BACKEND_ROOT))

from domain.watchlist import WatchItem, dedupe_watch_items, items_from_payload, items_to_payload, normalize_id


class TestNormalizeId(unittest.TestCase):
    def test_numbers_and_strings_compare_equal(self) -> None:
        self.assertEqual(normalize_id(1), "1")
        self.assertEqual(normalize_id("1"), "1")
        self.assertEqual(normalize_id(" 1 "), "1")
        self.assertEqual(normalize_id(5.0), "5")
        self.assertEqual(normalize_id(2.5), "2.5")

    def test_unusable_ids(self) -> None:
        for value in (None, "", "   ", True, False, float("nan")):
            self.assertIsNone(normalize_id(value), msg=repr(value))

    def test_same_id(self) -> None:
        self.assertTrue(WatchItem(id=1).same_id("1"))
        self.assertFalse(WatchItem(id=None).same_id(None))


class TestDedupeWatchItems(unittest.TestCase):
    def test_first_occurrence_wins(self) -> None:
        items = [WatchItem(id="1", title="a"), WatchItem(id=1, title="b"), WatchItem(id="2", title="c")]
        out = dedupe_watch_items(items)
        self.assertEqual([(i.id, i.title) for i in out], [("1", "a"), ("2", "c")])

    def test_items_without_id_are_always_kept(self) -> None:
        items = [WatchItem(title="x"), WatchItem(id="", title="y"), WatchItem(title="x")]
        self.assertEqual(len(dedupe_watch_items(items)), 3)

    def test_order_is_preserved(self) -> None:
        items = [WatchItem(id=i) for i in (3, 1, 2, 1, 3)]
        self.assertEqual([i.id for i in dedupe_watch_items(items)], [3, 1, 2])

    def test_no_duplicate_keys_in_output(self) -> None:
        items = [WatchItem(id=v) for v in (1, "1", 1.0, " 1", 2, "2")]
        keys = [i.key for i in dedupe_watch_items(items)]
        self.assertEqual(len(keys), len(set(keys)))


class TestPayloadParsing(unittest.TestCase):
    def test_wire_types_are_preserved(self) -> None:
        raw = [{"id": 1, "title": "Frieren", "year": 2023, "poster": None}, {"id": "2", "title": "B", "year": "2001"}]
        items = items_from_payload(raw)
        self.assertEqual(
            items_to_payload(items),
            [
                {"id": 1, "title": "Frieren", "year": 2023, "poster": None},
                {"id": "2", "title": "B", "year": "2001", "poster": None},
            ],
        )

    def test_rejects_non_list(self) -> None:
        for raw in (None, "abc", {"id": 1}, 5):
            with self.assertRaises(ValueError, msg=repr(raw)):
                items_from_payload(raw)

    def test_rejects_non_object_entries(self) -> None:
        with self.assertRaises(ValueError):
            items_from_payload([{"id": 1}, "oops"])


if __name__ == "__main__":
    unittest.main()
