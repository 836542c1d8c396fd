import sys
import tempfile
import unittest
from pathlib import Path

_BACKEND_ROOT = Path(__file__).resolve().parents[1] / "backend"
if str(_BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(_BACKEND_ROOT))

from application.watchlist import WatchProgressService
from domain.errors import InvalidInputError, UnauthenticatedError
from domain.users import UserRef
from domain.watchlist import watch_status
from domain.watchlist.progress import COMPLETE, NOT_STARTED, WATCHING
from infrastructure.session import FileSessionCache


class TestWatchStatus(unittest.TestCase):
    def test_badges(self) -> None:
        self.assertEqual(watch_status([], 12).status, NOT_STARTED)
        self.assertEqual(watch_status([1, 2], 12).status, WATCHING)
        self.assertEqual(watch_status(range(1, 13), 12).status, COMPLETE)

    def test_unknown_total_never_completes(self) -> None:
        status = watch_status([1, 2, 3], None)
        self.assertEqual(status.status, WATCHING)
        self.assertIsNone(status.total_episodes)


class TestWatchProgressService(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.cache = FileSessionCache(Path(self._tmp.name) / "session.json")
        self.user = UserRef(id="u1", email="a@b.co")
        self.service = WatchProgressService(cache=self.cache, current_user=lambda: self.user)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_toggle_and_status(self) -> None:
        self.service.remember_total(21, 2)
        self.assertTrue(self.service.toggle_episode(21, 1))
        self.assertEqual(self.service.status("21").status, WATCHING)
        self.assertTrue(self.service.toggle_episode("21", 2))
        self.assertEqual(self.service.status(21).status, COMPLETE)
        self.assertFalse(self.service.toggle_episode(21, 2))
        self.assertEqual(self.service.watched(21), [1])

    def test_progress_is_per_user(self) -> None:
        self.service.toggle_episode(21, 1)
        self.user = UserRef(id="u2", email="c@d.co")
        self.assertEqual(self.service.watched(21), [])

    def test_requires_login_and_valid_input(self) -> None:
        with self.assertRaises(InvalidInputError):
            self.service.toggle_episode(21, 0)
        with self.assertRaises(InvalidInputError):
            self.service.watched("")
        self.user = None
        with self.assertRaises(UnauthenticatedError):
            self.service.watched(21)


if __name__ == "__main__":
    unittest.main()
