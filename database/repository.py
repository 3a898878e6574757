"""Repositories for users, catalog hairstyles and saved user styles"""

from typing import Optional, List, Dict, Any
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from core.exceptions import DatabaseException, UserAlreadyExistsException
from core.logging import logger, log_structured
from database.models import User, Hairstyle, UserStyle


class UserRepository:
    """Persistence for registered users"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def create(self, username: str, password_hash: str, is_premium: bool = False) -> User:
        """
        Insert a new user

        Raises:
            UserAlreadyExistsException: username is taken
            DatabaseException: any other database failure
        """
        if self.get_by_username(username):
            raise UserAlreadyExistsException(username)

        user = User(username=username, password=password_hash, is_premium=is_premium)
        try:
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
        except IntegrityError:
            self.db.rollback()
            raise UserAlreadyExistsException(username)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to create user: {str(e)}")
            raise DatabaseException()

        log_structured("user_registered", {"user_id": user.id})
        return user

    def set_premium(self, user_id: str, is_premium: bool) -> Optional[User]:
        user = self.get_by_id(user_id)
        if not user:
            return None
        user.is_premium = is_premium
        self.db.commit()
        self.db.refresh(user)
        return user


class HairstyleRepository:
    """Persistence for the hairstyle catalog"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, hairstyle_id: str) -> Optional[Hairstyle]:
        return self.db.query(Hairstyle).filter(Hairstyle.id == hairstyle_id).first()

    def list(
        self,
        category: Optional[str] = None,
        difficulty: Optional[str] = None,
        trending: Optional[bool] = None
    ) -> List[Hairstyle]:
        """
        List catalog hairstyles with optional filters

        Category filtering happens in Python because `categories` is an
        array on Postgres and JSON on SQLite.
        """
        query = self.db.query(Hairstyle)
        if difficulty:
            query = query.filter(Hairstyle.difficulty == difficulty)
        if trending is not None:
            query = query.filter(Hairstyle.trending == trending)

        hairstyles = query.order_by(Hairstyle.created_at.asc()).all()

        if category and category != "all":
            hairstyles = [h for h in hairstyles if category in (h.categories or [])]

        return hairstyles

    def count(self) -> int:
        return self.db.query(Hairstyle).count()

    def create(self, data: Dict[str, Any]) -> Hairstyle:
        hairstyle = Hairstyle(
            name=data["name"],
            image=data["image"],
            categories=list(data["categories"]),
            difficulty=data["difficulty"],
            trending=data.get("trending", False),
        )
        try:
            self.db.add(hairstyle)
            self.db.commit()
            self.db.refresh(hairstyle)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to create hairstyle: {str(e)}")
            raise DatabaseException()
        return hairstyle


class UserStyleRepository:
    """Persistence for styles saved by users"""

    def __init__(self, db: Session):
        self.db = db

    def get_for_user(self, style_id: str, user_id: str) -> Optional[UserStyle]:
        """Return the style only if it belongs to the given user"""
        return self.db.query(UserStyle).filter(
            UserStyle.id == style_id,
            UserStyle.user_id == user_id
        ).first()

    def list_for_user(self, user_id: str, favorites_only: bool = False) -> List[UserStyle]:
        query = self.db.query(UserStyle).filter(UserStyle.user_id == user_id)
        if favorites_only:
            query = query.filter(UserStyle.is_favorite.is_(True))
        return query.order_by(UserStyle.created_at.desc()).all()

    def create(
        self,
        user_id: str,
        hairstyle_id: str,
        color_value: Optional[str] = None,
        is_favorite: bool = False
    ) -> UserStyle:
        style = UserStyle(
            user_id=user_id,
            hairstyle_id=hairstyle_id,
            color_value=color_value,
            is_favorite=is_favorite,
        )
        try:
            self.db.add(style)
            self.db.commit()
            self.db.refresh(style)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to save user style: {str(e)}")
            raise DatabaseException()

        log_structured("user_style_saved", {
            "user_id": user_id,
            "hairstyle_id": hairstyle_id,
            "is_favorite": is_favorite
        })
        return style

    def toggle_favorite(self, style: UserStyle) -> UserStyle:
        style.is_favorite = not bool(style.is_favorite)
        self.db.commit()
        self.db.refresh(style)
        return style

    def delete(self, style: UserStyle) -> None:
        self.db.delete(style)
        self.db.commit()

    def favorite_counts(self) -> Dict[str, int]:
        """Number of favorites per hairstyle id (admin stats)"""
        counts: Dict[str, int] = {}
        rows = self.db.query(UserStyle).filter(UserStyle.is_favorite.is_(True)).all()
        for row in rows:
            counts[row.hairstyle_id] = counts.get(row.hairstyle_id, 0) + 1
        return counts
