import sys
import unittest
from pathlib import Path
from unittest import mock

_BACKEND_ROOT = Path(__file__).resolve().parents[1] / "backend"
if str(_BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(_BACKEND_ROOT))

from fastapi.testclient import TestClient

from application.auth.auth_service import AuthService
from infrastructure.persistence.postgres.user_store import InMemoryUserStore
from infrastructure.persistence.postgres.watchlist_store import InMemoryWatchlistStore
from infrastructure.security import BcryptPasswordHasher
from server.api.rest.dependencies import get_auth_service, get_user_store, get_watchlist_store
from server.main import app


class _ApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.users = InMemoryUserStore()
        self.watchlists = InMemoryWatchlistStore(users=self.users)
        self.auth = AuthService(store=self.users, hasher=BcryptPasswordHasher(rounds=4))
        app.dependency_overrides[get_user_store] = lambda: self.users
        app.dependency_overrides[get_watchlist_store] = lambda: self.watchlists
        app.dependency_overrides[get_auth_service] = lambda: self.auth
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()

    def _signup(self, email: str = "fan@example.com", password: str = "secret1") -> dict:
        resp = self.client.post("/signup", json={"email": email, "password": password})
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()["user"]


class TestRootApi(_ApiTestCase):
    def test_welcome_message(self) -> None:
        resp = self.client.get("/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"message": "Welcome to the Rewatch Backend!"})


class TestAuthApi(_ApiTestCase):
    def test_signup_returns_public_user_only(self) -> None:
        resp = self.client.post("/signup", json={"email": "Fan@Example.com", "password": "secret1"})
        self.assertEqual(resp.status_code, 201)
        body = resp.json()
        self.assertTrue(body["success"])
        self.assertEqual(set(body["user"].keys()), {"id", "email"})
        self.assertEqual(body["user"]["email"], "fan@example.com")
        self.assertNotIn("secret1", resp.text)

    def test_signup_validation(self) -> None:
        cases = [
            ({"email": "fan@example.com"}, "Email and password are required"),
            ({"email": "fan@example.com", "password": "123"}, "Password must be at least 6 characters"),
            ({"email": "not-an-email", "password": "secret1"}, "Invalid email format"),
        ]
        for payload, message in cases:
            resp = self.client.post("/signup", json=payload)
            self.assertEqual(resp.status_code, 400, payload)
            self.assertEqual(resp.json(), {"error": message})

    def test_duplicate_signup_is_400(self) -> None:
        self._signup()
        resp = self.client.post("/signup", json={"email": "FAN@example.com", "password": "another1"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": "Email is already in use"})

    def test_login(self) -> None:
        user = self._signup()
        resp = self.client.post("/login", json={"email": "fan@example.com", "password": "secret1"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"success": True, "user": user})

    def test_login_failures(self) -> None:
        self._signup()
        resp = self.client.post("/login", json={"email": "fan@example.com", "password": "wrong!!"})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"error": "Invalid email or password"})

        resp = self.client.post("/login", json={"email": "ghost@example.com", "password": "secret1"})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"error": "Invalid email or password"})

        resp = self.client.post("/login", json={"password": "secret1"})
        self.assertEqual(resp.status_code, 400)

    def test_password_hash_is_not_plaintext(self) -> None:
        self._signup()
        record = self.users._records[next(iter(self.users._records))]
        self.assertNotEqual(record.password_hash, "secret1")
        self.assertTrue(record.password_hash.startswith("$2"))


class TestWatchlistApi(_ApiTestCase):
    def test_get_empty_then_replace(self) -> None:
        user = self._signup()
        resp = self.client.get(f"/watchlist/{user['id']}")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"watchlist": []})

        payload = {
            "watchlist": [
                {"id": "1", "title": "A", "year": 2001, "poster": None},
                {"id": 1, "title": "A again", "year": None, "poster": None},
                {"id": "2", "title": "B", "year": "Unknown", "poster": "b.jpg"},
            ]
        }
        resp = self.client.post(f"/watchlist/{user['id']}", json=payload)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(
            resp.json()["watchlist"],
            [
                {"id": "1", "title": "A", "year": 2001, "poster": None},
                {"id": "2", "title": "B", "year": "Unknown", "poster": "b.jpg"},
            ],
        )
        self.assertEqual(self.client.get(f"/watchlist/{user['id']}").json(), resp.json())

    def test_numeric_ids_stay_numeric(self) -> None:
        user = self._signup()
        resp = self.client.post(f"/watchlist/{user['id']}", json={"watchlist": [{"id": 52991, "title": "Frieren"}]})
        self.assertEqual(resp.json()["watchlist"][0]["id"], 52991)

    def test_unknown_user_is_404(self) -> None:
        resp = self.client.get("/watchlist/does-not-exist")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json(), {"error": "User not found"})
        resp = self.client.post("/watchlist/does-not-exist", json={"watchlist": []})
        self.assertEqual(resp.status_code, 404)

    def test_bad_bodies_are_400(self) -> None:
        user = self._signup()
        for body in ({}, {"watchlist": "nope"}, {"watchlist": {"id": 1}}, {"watchlist": [1, 2]}):
            resp = self.client.post(f"/watchlist/{user['id']}", json=body)
            self.assertEqual(resp.status_code, 400, body)
            self.assertIn("error", resp.json())
        resp = self.client.post(f"/watchlist/{user['id']}")
        self.assertEqual(resp.status_code, 400)

    def test_unexpected_errors_are_500(self) -> None:
        user = self._signup()
        client = TestClient(app, raise_server_exceptions=False)
        with mock.patch.object(self.watchlists, "read", side_effect=RuntimeError("boom")):
            resp = client.get(f"/watchlist/{user['id']}")
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"error": "Internal server error"})


class TestAdminApi(_ApiTestCase):
    def test_disabled_by_default(self) -> None:
        with mock.patch("server.api.rest.v1.admin.ADMIN_ROUTES_ENABLE", False):
            resp = self.client.get("/admin/users")
        self.assertEqual(resp.status_code, 404)

    def test_users_and_stats(self) -> None:
        user = self._signup()
        self._signup(email="other@example.com")
        self.client.post(f"/watchlist/{user['id']}", json={"watchlist": [{"id": 1, "title": "A"}]})

        with mock.patch("server.api.rest.v1.admin.ADMIN_ROUTES_ENABLE", True):
            users = self.client.get("/admin/users").json()
            detail = self.client.get(f"/admin/users/{user['id']}").json()
            stats = self.client.get("/admin/stats").json()
            missing = self.client.get("/admin/users/nope")

        self.assertEqual(users["count"], 2)
        self.assertNotIn("password_hash", str(users))
        by_email = {u["email"]: u for u in users["users"]}
        self.assertEqual(by_email["fan@example.com"]["watchlistCount"], 1)
        self.assertEqual(detail["watchlist"], [{"id": 1, "title": "A", "year": None, "poster": None}])
        self.assertEqual(stats, {"totalUsers": 2, "usersWithWatchlist": 1, "totalWatchlistItems": 1})
        self.assertEqual(missing.status_code, 404)


if __name__ == "__main__":
    unittest.main()
