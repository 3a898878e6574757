"""Tests for database functionality"""

import pytest
from unittest.mock import patch

from core.exceptions import UserAlreadyExistsException
from database.models import Hairstyle, UserStyle
from database.repository import HairstyleRepository, UserRepository, UserStyleRepository
from database.seed import seed_hairstyles


@pytest.fixture
def user(test_db):
    return UserRepository(test_db).create("alice", "hashed")


@pytest.fixture
def catalog(test_db):
    seed_hairstyles(test_db)
    return HairstyleRepository(test_db)


class TestDatabaseConnection:
    """Test database connection"""

    def test_init_without_url_returns_false(self):
        from database.connection import init_database

        with patch('database.connection.settings') as mock_settings:
            mock_settings.DATABASE_URL = ""
            assert init_database() is False

    @pytest.mark.parametrize("url,expected", [
        ("postgres://u:p@db/app", "postgresql+psycopg2://u:p@db/app"),
        ("postgresql://u:p@db/app", "postgresql+psycopg2://u:p@db/app"),
        ("sqlite:///:memory:", "sqlite:///:memory:"),
    ])
    def test_url_normalization(self, url, expected):
        from database.connection import _normalize_url

        assert _normalize_url(url) == expected

    def test_get_db_session_without_init(self):
        from database.connection import get_db_session

        with patch('database.connection.SessionLocal', None):
            assert get_db_session() is None


class TestUserRepository:

    def test_create_and_lookup(self, test_db, user):
        repo = UserRepository(test_db)

        assert user.id is not None
        assert repo.get_by_username("alice").id == user.id
        assert repo.get_by_id(user.id).username == "alice"
        assert user.is_premium is False

    def test_duplicate_username(self, test_db, user):
        with pytest.raises(UserAlreadyExistsException):
            UserRepository(test_db).create("alice", "other")

    def test_to_dict_hides_password(self, user):
        data = user.to_dict()

        assert "password" not in data
        assert data["username"] == "alice"

    def test_set_premium(self, test_db, user):
        repo = UserRepository(test_db)

        assert repo.set_premium(user.id, True).is_premium is True
        assert repo.set_premium("missing", True) is None


class TestHairstyleRepository:

    def test_filter_by_difficulty_and_trending(self, catalog):
        hard_trending = catalog.list(difficulty="hard", trending=True)

        assert [h.name for h in hard_trending] == ["Wolf Cut"]

    def test_create(self, test_db):
        hairstyle = HairstyleRepository(test_db).create({
            "name": "Buzz Cut",
            "image": "https://example.com/buzz.jpg",
            "categories": ["short"],
            "difficulty": "easy",
        })

        assert hairstyle.trending is False
        assert test_db.query(Hairstyle).count() == 1
        assert hairstyle.to_dict()["categories"] == ["short"]


class TestUserStyleRepository:

    def test_save_and_list(self, test_db, user, catalog):
        repo = UserStyleRepository(test_db)
        hairstyles = catalog.list()

        repo.create(user.id, hairstyles[0].id, color_value="#8B4513")
        repo.create(user.id, hairstyles[1].id, is_favorite=True)

        assert len(repo.list_for_user(user.id)) == 2
        favorites = repo.list_for_user(user.id, favorites_only=True)
        assert [s.hairstyle_id for s in favorites] == [hairstyles[1].id]

    def test_ownership(self, test_db, user, catalog):
        repo = UserStyleRepository(test_db)
        other = UserRepository(test_db).create("bob", "hashed")
        style = repo.create(user.id, catalog.list()[0].id)

        assert repo.get_for_user(style.id, user.id) is not None
        assert repo.get_for_user(style.id, other.id) is None

    def test_toggle_and_delete(self, test_db, user, catalog):
        repo = UserStyleRepository(test_db)
        style = repo.create(user.id, catalog.list()[0].id)

        assert repo.toggle_favorite(style).is_favorite is True
        assert repo.toggle_favorite(style).is_favorite is False

        repo.delete(style)
        assert test_db.query(UserStyle).count() == 0

    def test_favorite_counts(self, test_db, user, catalog):
        repo = UserStyleRepository(test_db)
        hairstyle_id = catalog.list()[0].id
        repo.create(user.id, hairstyle_id, is_favorite=True)
        repo.create(user.id, hairstyle_id, is_favorite=True)
        repo.create(user.id, catalog.list()[1].id)

        assert repo.favorite_counts() == {hairstyle_id: 2}

    def test_to_dict_embeds_hairstyle(self, test_db, user, catalog):
        hairstyle = catalog.list()[0]
        style = UserStyleRepository(test_db).create(user.id, hairstyle.id)

        assert style.to_dict()["hairstyle"]["name"] == hairstyle.name
