"""HTTP tests: auth gates, admin cascading deletion envelopes and status codes, rating submission."""

import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from app.core.config import settings
from app.core.database import get_db
from app.core.security import create_access_token
from app.main import app
from app.models import Rating, Store, User
from sqlite_support import add_rating, add_store, add_user, count, make_session_factory

API = "/api/v1"
PASSWORD = "Secret#Pass1"


def _auth(user) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


class _ApiCase(unittest.TestCase):
    def setUp(self) -> None:
        rounds = patch.object(settings, "BCRYPT_ROUNDS", 4)
        rounds.start()
        self.addCleanup(rounds.stop)

        SessionLocal = make_session_factory()

        def override_get_db():
            db = SessionLocal()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self.addCleanup(app.dependency_overrides.clear)
        self.client = TestClient(app)
        self.db = SessionLocal()
        self.addCleanup(self.db.close)
        self.admin = add_user(self.db, user_id=1, role="admin")

    def _count(self, model, *criteria) -> int:
        self.db.expire_all()
        return count(self.db, model, *criteria)


class TestAuthEndpoints(_ApiCase):
    """Register, login and bearer-token checks."""

    def test_register_login_me(self) -> None:
        body = {
            "name": "Registered Account Holder",
            "email": "new@example.com",
            "password": PASSWORD,
        }
        r = self.client.post(f"{API}/auth/register", json=body)
        self.assertEqual(r.status_code, 201)
        self.assertEqual(r.json()["user"]["role"], "user")

        r = self.client.post(
            f"{API}/auth/login", json={"email": "new@example.com", "password": PASSWORD}
        )
        self.assertEqual(r.status_code, 200)
        token = r.json()["access_token"]

        r = self.client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["email"], "new@example.com")
        self.assertNotIn("password_hash", r.json())

    def test_register_cannot_create_admin(self) -> None:
        body = {
            "name": "Would Be Administrator",
            "email": "sneaky@example.com",
            "password": PASSWORD,
            "role": "admin",
        }
        r = self.client.post(f"{API}/auth/register", json=body)
        self.assertEqual(r.status_code, 403)
        self.assertEqual(self._count(User), 1)

    def test_bad_credentials(self) -> None:
        r = self.client.post(
            f"{API}/auth/login", json={"email": "nobody@example.com", "password": PASSWORD}
        )
        self.assertEqual(r.status_code, 401)

    def test_missing_and_garbage_token(self) -> None:
        self.assertEqual(self.client.get(f"{API}/auth/me").status_code, 401)
        r = self.client.get(f"{API}/auth/me", headers={"Authorization": "Bearer not.a.jwt"})
        self.assertEqual(r.status_code, 401)


class TestAdminDeleteUser(_ApiCase):
    """DELETE /admin/users/{id}."""

    def test_owner_cascade_envelope(self) -> None:
        add_user(self.db, user_id=7, role="store_owner", name="Owner Seven Of The Stores", email="o7@example.com")
        add_user(self.db, user_id=2)
        add_store(self.db, owner_id=7, store_id=11)
        add_rating(self.db, 2, 11)

        r = self.client.delete(f"{API}/admin/users/7", headers=_auth(self.admin))

        self.assertEqual(r.status_code, 200)
        data = r.json()
        self.assertEqual(data["message"], "User deleted successfully")
        self.assertEqual(
            data["deletedUser"],
            {"id": 7, "name": "Owner Seven Of The Stores", "email": "o7@example.com", "role": "store_owner"},
        )
        self.assertEqual(
            data["summary"],
            {"ratingsAuthoredDeleted": 0, "storesDeleted": 1, "ratingsOnOwnedStoresDeleted": 1},
        )
        self.assertEqual(self._count(Store), 0)
        self.assertEqual(self._count(Rating), 0)

    def test_invalid_id(self) -> None:
        for raw in ("abc", "0", "-5"):
            with self.subTest(raw=raw):
                r = self.client.delete(f"{API}/admin/users/{raw}", headers=_auth(self.admin))
                self.assertEqual(r.status_code, 400)
                self.assertEqual(r.json()["detail"], "Invalid user ID")

    def test_self_deletion_refused(self) -> None:
        r = self.client.delete(f"{API}/admin/users/1", headers=_auth(self.admin))
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["detail"], "Cannot delete your own account")
        self.assertEqual(self._count(User, User.id == 1), 1)

    def test_missing_user(self) -> None:
        r = self.client.delete(f"{API}/admin/users/404", headers=_auth(self.admin))
        self.assertEqual(r.status_code, 404)
        self.assertEqual(r.json()["detail"], "User not found")

    def test_non_admin_forbidden(self) -> None:
        rater = add_user(self.db, user_id=2)
        victim = add_user(self.db, user_id=3)
        r = self.client.delete(f"{API}/admin/users/{victim.id}", headers=_auth(rater))
        self.assertEqual(r.status_code, 403)
        self.assertEqual(self._count(User, User.id == 3), 1)

    def test_unauthenticated(self) -> None:
        r = self.client.delete(f"{API}/admin/users/3")
        self.assertEqual(r.status_code, 401)


class TestAdminDeleteStore(_ApiCase):
    """DELETE /admin/stores/{id}."""

    def test_store_without_ratings(self) -> None:
        add_store(self.db, owner_id=None, store_id=42, name="Store Forty Two", email="s42@example.com")
        r = self.client.delete(f"{API}/admin/stores/42", headers=_auth(self.admin))
        self.assertEqual(r.status_code, 200)
        self.assertEqual(
            r.json(),
            {
                "message": "Store deleted successfully",
                "deletedStore": {"id": 42, "name": "Store Forty Two", "email": "s42@example.com"},
                "summary": {"ratingsDeleted": 0},
            },
        )

    def test_invalid_and_missing(self) -> None:
        r = self.client.delete(f"{API}/admin/stores/x1", headers=_auth(self.admin))
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["detail"], "Invalid store ID")
        r = self.client.delete(f"{API}/admin/stores/9", headers=_auth(self.admin))
        self.assertEqual(r.status_code, 404)


class TestRatingEndpoints(_ApiCase):
    """POST /ratings is limited to normal users and reports the new average."""

    def test_submit_and_update(self) -> None:
        rater = add_user(self.db, user_id=2)
        add_store(self.db, owner_id=None, store_id=5)

        r = self.client.post(
            f"{API}/ratings", json={"storeId": 5, "rating": 4}, headers=_auth(rater)
        )
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["storeAverage"], 4.0)
        self.assertEqual(r.json()["message"], "Rating submitted successfully")

        r = self.client.post(
            f"{API}/ratings", json={"storeId": 5, "rating": 2}, headers=_auth(rater)
        )
        self.assertEqual(r.json()["message"], "Rating updated successfully")
        self.assertEqual(r.json()["rating"]["rating"], 2)

    def test_owner_cannot_rate_and_range_checked(self) -> None:
        owner = add_user(self.db, user_id=3, role="store_owner")
        rater = add_user(self.db, user_id=2)
        add_store(self.db, owner_id=3, store_id=5)
        r = self.client.post(
            f"{API}/ratings", json={"storeId": 5, "rating": 4}, headers=_auth(owner)
        )
        self.assertEqual(r.status_code, 403)
        r = self.client.post(
            f"{API}/ratings", json={"storeId": 5, "rating": 6}, headers=_auth(rater)
        )
        self.assertEqual(r.status_code, 422)


class TestDashboardStats(_ApiCase):
    """GET /users/dashboard-stats returns a role-specific camelCase shape."""

    def setUp(self) -> None:
        super().setUp()
        self.owner = add_user(self.db, user_id=3, role="store_owner")
        self.rater = add_user(self.db, user_id=2)
        add_store(self.db, owner_id=3, store_id=5)
        add_store(self.db, owner_id=None, store_id=6)
        add_rating(self.db, 2, 5, 4)
        add_rating(self.db, 2, 6, 1)

    def _stats(self, user) -> dict:
        r = self.client.get(f"{API}/users/dashboard-stats", headers=_auth(user))
        self.assertEqual(r.status_code, 200)
        return r.json()

    def test_admin_shape(self) -> None:
        self.assertEqual(
            self._stats(self.admin),
            {"totalUsers": 3, "totalStores": 2, "totalRatings": 2, "averageRating": 2.5},
        )

    def test_store_owner_shape(self) -> None:
        self.assertEqual(
            self._stats(self.owner),
            {"myStores": 1, "myRatings": 1, "myAverageRating": 4.0},
        )

    def test_user_shape(self) -> None:
        self.assertEqual(self._stats(self.rater), {"myRatings": 2, "myAverageRating": 2.5})

    def test_requires_authentication(self) -> None:
        self.assertEqual(self.client.get(f"{API}/users/dashboard-stats").status_code, 401)


class TestHealth(_ApiCase):
    def test_health_reports_database(self) -> None:
        r = self.client.get(f"{API}/health/")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["database"], "connected")


if __name__ == "__main__":
    unittest.main()
