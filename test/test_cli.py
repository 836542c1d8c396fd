import contextlib
import io
import json
import sys
import tempfile
import unittest
from pathlib import Path

_BACKEND_ROOT = Path(__file__).resolve().parents[1] / "backend"
if str(_BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(_BACKEND_ROOT))

from cli.main import _build_parser, _run

# Nothing listens here; commands that reach the backend see a network error.
_DEAD_API = "http://127.0.0.1:1"


class TestCli(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.session_file = Path(self._tmp.name) / "session.json"

    def tearDown(self) -> None:
        self._tmp.cleanup()

    async def _invoke(self, *argv: str) -> tuple[int, str]:
        args = _build_parser().parse_args(
            ["--api-url", _DEAD_API, "--session-file", str(self.session_file), *argv]
        )
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            code = await _run(args)
        return code, out.getvalue()

    def _cache_user(self) -> None:
        self.session_file.write_text(
            json.dumps({"currentUser": {"id": "u1", "email": "fan@example.com"}}), encoding="utf-8"
        )

    def test_parser_rejects_unknown_shelf(self) -> None:
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                _build_parser().parse_args(["browse", "yesterday"])

    async def test_whoami_and_logout(self) -> None:
        code, out = await self._invoke("whoami")
        self.assertEqual((code, out.strip()), (0, "Not logged in"))

        self._cache_user()
        code, out = await self._invoke("whoami")
        self.assertIn("fan@example.com", out)

        await self._invoke("logout")
        code, out = await self._invoke("whoami")
        self.assertEqual(out.strip(), "Not logged in")

    async def test_list_requires_login(self) -> None:
        code, out = await self._invoke("list")
        self.assertEqual(code, 1)
        self.assertIn("Not logged in", out)

    async def test_list_reports_unreachable_backend(self) -> None:
        self._cache_user()
        with self.assertLogs(level="WARNING"):
            code, out = await self._invoke("list")
        self.assertEqual(code, 1)
        self.assertIn("Error:", out)

    async def test_episode_progress_works_offline(self) -> None:
        self._cache_user()
        with self.assertLogs(level="WARNING"):
            code, out = await self._invoke("watched", "21", "1")
        self.assertEqual(code, 0)
        self.assertIn("Episode 1 marked watched", out)

        with self.assertLogs(level="WARNING"):
            code, out = await self._invoke("progress", "21", "--offline")
        self.assertEqual(code, 0)
        self.assertIn("Watching: 1/? episodes watched", out)

    async def test_login_against_unreachable_backend(self) -> None:
        code, out = await self._invoke("login", "fan@example.com", "--password", "secret1")
        self.assertEqual(code, 1)
        self.assertIn("Error:", out)
        self.assertFalse(self.session_file.exists())


if __name__ == "__main__":
    unittest.main()
