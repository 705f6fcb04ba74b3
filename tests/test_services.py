"""Unit tests for users, stores, ratings and dashboard services against in-memory SQLite."""

import unittest
from unittest.mock import patch

from app.core.config import settings
from app.core.security import verify_password
from app.models import Rating, User
from app.models.user import ROLE_USER
from app.schemas.auth import CurrentUser
from app.schemas.dashboard import AdminStats, OwnerStats, UserStats
from app.schemas.stores import AdminStoreUpdate, OwnerStoreUpdate, StoreCreate
from app.schemas.users import AdminUserUpdate, ProfileUpdate, UserCreate
from app.services.dashboard import get_dashboard_stats
from app.services.errors import (
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
    PermissionDeniedError,
)
from app.services.ratings import delete_rating, list_all_ratings, list_user_ratings, submit_rating
from app.services.stores import (
    admin_update_store,
    create_store,
    get_store_ratings,
    list_owned_stores,
    list_stores,
    update_owned_store,
)
from app.services.users import (
    admin_update_user,
    authenticate,
    create_user,
    list_users,
    update_profile,
)
from sqlite_support import add_rating, add_store, add_user, count, make_session_factory

NAME = "Alexandra Montgomery-Smith"
PASSWORD = "Secret#Pass1"


def _caller(user) -> CurrentUser:
    return CurrentUser.model_validate(user)


class _ServiceCase(unittest.TestCase):
    def setUp(self) -> None:
        rounds = patch.object(settings, "BCRYPT_ROUNDS", 4)
        rounds.start()
        self.addCleanup(rounds.stop)
        self.db = make_session_factory()()
        self.addCleanup(self.db.close)


class TestUserService(_ServiceCase):
    """Registration, login and profile updates."""

    def test_create_and_authenticate(self) -> None:
        user = create_user(
            self.db, UserCreate(name=NAME, email="alex@example.com", password=PASSWORD)
        )
        self.assertIsNotNone(user.id)
        self.assertEqual(user.role, "user")
        self.assertNotEqual(user.password_hash, PASSWORD)
        self.assertEqual(authenticate(self.db, "alex@example.com", PASSWORD).id, user.id)
        self.assertIsNone(authenticate(self.db, "alex@example.com", "Wrong#Pass1"))
        self.assertIsNone(authenticate(self.db, "nobody@example.com", PASSWORD))

    def test_role_defaults_in_database(self) -> None:
        self.assertEqual(User.__table__.c.role.server_default.arg, ROLE_USER)
        self.assertIsNone(User.__table__.c.role.default)
        user = User(name=NAME, email="bare@example.com", password_hash="x")
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        self.assertEqual(user.role, ROLE_USER)

    def test_duplicate_email_conflicts(self) -> None:
        body = UserCreate(name=NAME, email="dup@example.com", password=PASSWORD)
        create_user(self.db, body)
        with self.assertRaises(ConflictError):
            create_user(self.db, body)

    def test_list_users_filters_and_sorts(self) -> None:
        add_user(self.db, name="Bartholomew Quincy Adams", email="bart@example.com")
        add_user(self.db, name="Aurelia Constance Whitmore", email="aurelia@example.com")
        add_user(self.db, role="store_owner", name="Cornelius Store Proprietor")

        names = [u.name for u in list_users(self.db)]
        self.assertEqual(names[0], "Aurelia Constance Whitmore")
        self.assertEqual(
            [u.email for u in list_users(self.db, email="BART")], ["bart@example.com"]
        )
        self.assertEqual(len(list_users(self.db, role="store_owner")), 1)
        desc = [u.name for u in list_users(self.db, sort_by="name", sort_order="desc")]
        self.assertEqual(desc, sorted(names, reverse=True))

    def test_update_profile_fields(self) -> None:
        user = add_user(self.db, email="before@example.com", password_hash="x")
        updated = update_profile(
            self.db,
            user.id,
            ProfileUpdate(email="after@example.com", address="1 Main St", password=PASSWORD),
        )
        self.assertEqual(updated.email, "after@example.com")
        self.assertEqual(updated.address, "1 Main St")
        self.assertTrue(verify_password(PASSWORD, updated.password_hash))
        self.assertEqual(updated.role, "user")

    def test_update_profile_rejects_empty_and_taken_email(self) -> None:
        user = add_user(self.db)
        other = add_user(self.db)
        with self.assertRaises(InvalidArgumentError):
            update_profile(self.db, user.id, ProfileUpdate())
        with self.assertRaises(ConflictError):
            update_profile(self.db, user.id, ProfileUpdate(email=other.email))

    def test_admin_update_changes_role(self) -> None:
        user = add_user(self.db)
        updated = admin_update_user(self.db, user.id, AdminUserUpdate(role="store_owner"))
        self.assertEqual(updated.role, "store_owner")
        with self.assertRaises(NotFoundError):
            admin_update_user(self.db, 999, AdminUserUpdate(role="admin"))


class TestStoreService(_ServiceCase):
    """Store creation, listing with averages and ownership-scoped updates."""

    def setUp(self) -> None:
        super().setUp()
        self.owner = add_user(self.db, role="store_owner")
        self.rater = add_user(self.db)
        self.other_rater = add_user(self.db)

    def test_create_store_rules(self) -> None:
        store = create_store(
            self.db, StoreCreate(name="Corner Shop", email="shop@example.com"), self.owner.id
        )
        self.assertEqual(store.owner_id, self.owner.id)
        with self.assertRaises(ConflictError):
            create_store(
                self.db, StoreCreate(name="Other", email="shop@example.com"), self.owner.id
            )
        with self.assertRaises(InvalidArgumentError):
            create_store(self.db, StoreCreate(name="Ghost", email="ghost@example.com"), 999)

    def test_list_stores_with_averages_and_own_rating(self) -> None:
        rated = add_store(self.db, self.owner.id, name="Alpha Market")
        add_store(self.db, self.owner.id, name="Beta Bakery")
        add_rating(self.db, self.rater.id, rated.id, 4)
        add_rating(self.db, self.other_rater.id, rated.id, 5)

        items = list_stores(self.db, _caller(self.rater))
        self.assertEqual([i.name for i in items], ["Alpha Market", "Beta Bakery"])
        self.assertEqual(items[0].overall_rating, 4.5)
        self.assertEqual(items[0].user_rating, 4)
        self.assertEqual(items[1].overall_rating, 0.0)
        self.assertIsNone(items[1].user_rating)

        owner_view = list_stores(self.db, _caller(self.owner), sort_by="overall_rating", sort_order="desc")
        self.assertEqual(owner_view[0].name, "Alpha Market")
        self.assertIsNone(owner_view[0].user_rating)

        filtered = list_stores(self.db, _caller(self.rater), name="bak")
        self.assertEqual([i.name for i in filtered], ["Beta Bakery"])

    def test_owned_stores_and_ratings(self) -> None:
        store = add_store(self.db, self.owner.id)
        add_rating(self.db, self.rater.id, store.id, 2)
        add_rating(self.db, self.other_rater.id, store.id, 5)

        owned = list_owned_stores(self.db, self.owner.id)
        self.assertEqual(len(owned), 1)
        self.assertEqual(owned[0].average_rating, 3.5)
        self.assertEqual(owned[0].total_ratings, 2)
        self.assertEqual(owned[0].unique_raters, 2)

        detail = get_store_ratings(self.db, store.id, self.owner.id)
        self.assertEqual(detail.summary.total_ratings, 2)
        self.assertEqual(detail.summary.average_rating, 3.5)
        self.assertEqual({r.user_id for r in detail.ratings}, {self.rater.id, self.other_rater.id})

        with self.assertRaises(NotFoundError):
            get_store_ratings(self.db, store.id, self.rater.id)

    def test_owner_update_is_scoped(self) -> None:
        store = add_store(self.db, self.owner.id, address="Old Road")
        updated = update_owned_store(
            self.db, store.id, self.owner.id, OwnerStoreUpdate(name="Renamed", address="")
        )
        self.assertEqual(updated.name, "Renamed")
        self.assertIsNone(updated.address)
        with self.assertRaises(NotFoundError):
            update_owned_store(self.db, store.id, self.rater.id, OwnerStoreUpdate(name="Nope"))

    def test_admin_reassigns_owner(self) -> None:
        store = add_store(self.db, self.owner.id)
        new_owner = add_user(self.db, role="store_owner")
        updated = admin_update_store(self.db, store.id, AdminStoreUpdate(owner_id=new_owner.id))
        self.assertEqual(updated.owner_id, new_owner.id)
        with self.assertRaises(InvalidArgumentError):
            admin_update_store(self.db, store.id, AdminStoreUpdate(owner_id=999))
        with self.assertRaises(InvalidArgumentError):
            admin_update_store(self.db, store.id, AdminStoreUpdate())


class TestRatingService(_ServiceCase):
    """Upsert per (user, store), listings and deletion rights."""

    def setUp(self) -> None:
        super().setUp()
        self.owner = add_user(self.db, role="store_owner")
        self.rater = add_user(self.db)
        self.store = add_store(self.db, self.owner.id)

    def test_submit_then_update(self) -> None:
        row, created, average = submit_rating(self.db, self.rater.id, self.store.id, 3)
        self.assertTrue(created)
        self.assertEqual(average, 3.0)

        row2, created2, average2 = submit_rating(self.db, self.rater.id, self.store.id, 5)
        self.assertFalse(created2)
        self.assertEqual(row2.id, row.id)
        self.assertEqual(average2, 5.0)
        self.assertEqual(count(self.db, Rating), 1)

    def test_average_rounds_to_one_decimal(self) -> None:
        other = add_user(self.db)
        third = add_user(self.db)
        add_rating(self.db, other.id, self.store.id, 4)
        add_rating(self.db, third.id, self.store.id, 4)
        _, _, average = submit_rating(self.db, self.rater.id, self.store.id, 5)
        self.assertEqual(average, 4.3)

    def test_submit_for_missing_store(self) -> None:
        with self.assertRaises(NotFoundError):
            submit_rating(self.db, self.rater.id, 999, 4)
        self.assertEqual(count(self.db, Rating), 0)

    def test_listings(self) -> None:
        add_rating(self.db, self.rater.id, self.store.id, 2)
        mine = list_user_ratings(self.db, self.rater.id)
        self.assertEqual(len(mine), 1)
        self.assertEqual(mine[0].store_id, self.store.id)
        self.assertEqual(mine[0].store_name, self.store.name)
        everything = list_all_ratings(self.db)
        self.assertEqual(everything[0].user_email, self.rater.email)

    def test_delete_rights(self) -> None:
        rating = add_rating(self.db, self.rater.id, self.store.id)
        stranger = add_user(self.db)
        with self.assertRaises(PermissionDeniedError):
            delete_rating(self.db, _caller(stranger), rating.id)
        delete_rating(self.db, _caller(self.rater), rating.id)
        self.assertEqual(count(self.db, Rating), 0)
        with self.assertRaises(NotFoundError):
            delete_rating(self.db, _caller(self.rater), rating.id)

    def test_admin_deletes_any(self) -> None:
        rating = add_rating(self.db, self.rater.id, self.store.id)
        admin = add_user(self.db, role="admin")
        delete_rating(self.db, _caller(admin), rating.id)
        self.assertEqual(count(self.db, Rating), 0)


class TestDashboardService(_ServiceCase):
    """Each role gets its own counters."""

    def test_stats_per_role(self) -> None:
        admin = add_user(self.db, role="admin")
        owner = add_user(self.db, role="store_owner")
        rater = add_user(self.db)
        s1 = add_store(self.db, owner.id)
        s2 = add_store(self.db, None)
        add_rating(self.db, rater.id, s1.id, 4)
        add_rating(self.db, rater.id, s2.id, 1)
        add_rating(self.db, owner.id, s2.id, 3)

        admin_stats = get_dashboard_stats(self.db, _caller(admin))
        self.assertIsInstance(admin_stats, AdminStats)
        self.assertEqual(admin_stats.total_users, 3)
        self.assertEqual(admin_stats.total_stores, 2)
        self.assertEqual(admin_stats.total_ratings, 3)
        self.assertEqual(admin_stats.average_rating, 2.67)

        owner_stats = get_dashboard_stats(self.db, _caller(owner))
        self.assertIsInstance(owner_stats, OwnerStats)
        self.assertEqual(owner_stats.my_stores, 1)
        self.assertEqual(owner_stats.my_ratings, 1)
        self.assertEqual(owner_stats.my_average_rating, 4.0)

        user_stats = get_dashboard_stats(self.db, _caller(rater))
        self.assertIsInstance(user_stats, UserStats)
        self.assertEqual(user_stats.my_ratings, 2)
        self.assertEqual(user_stats.my_average_rating, 2.5)
        self.assertEqual(
            user_stats.model_dump(by_alias=True), {"myRatings": 2, "myAverageRating": 2.5}
        )

    def test_empty_database(self) -> None:
        admin = add_user(self.db, role="admin")
        stats = get_dashboard_stats(self.db, _caller(admin))
        self.assertEqual(stats.total_stores, 0)
        self.assertEqual(stats.average_rating, 0.0)


if __name__ == "__main__":
    unittest.main()
