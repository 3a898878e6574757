"""SQLAlchemy database models for GlamMefy Backend"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime, JSON, Boolean, ForeignKey
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import relationship

Base = declarative_base()

# text[] on Postgres, JSON everywhere else (SQLite in tests)
StringList = JSON().with_variant(ARRAY(Text), "postgresql")


def generate_uuid() -> str:
    return str(uuid.uuid4())


class User(Base):
    """Registered user"""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    username = Column(Text, unique=True, nullable=False, index=True)
    password = Column(Text, nullable=False)  # bcrypt hash
    is_premium = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    styles = relationship("UserStyle", back_populates="user", cascade="all, delete-orphan")

    def to_dict(self) -> dict:
        """Public representation (never includes the password hash)"""
        return {
            "id": self.id,
            "username": self.username,
            "is_premium": bool(self.is_premium),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class Hairstyle(Base):
    """Catalog hairstyle shown in the style grid"""
    __tablename__ = "hairstyles"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(Text, nullable=False)
    image = Column(Text, nullable=False)
    categories = Column(StringList, nullable=False)
    difficulty = Column(Text, nullable=False)  # easy, medium, hard
    trending = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "image": self.image,
            "categories": list(self.categories or []),
            "difficulty": self.difficulty,
            "trending": bool(self.trending),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class UserStyle(Base):
    """A hairstyle (and optional color) saved by a user"""
    __tablename__ = "user_styles"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), index=True)
    hairstyle_id = Column(String(36), ForeignKey("hairstyles.id"))
    color_value = Column(Text, nullable=True)
    is_favorite = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    user = relationship("User", back_populates="styles")
    hairstyle = relationship("Hairstyle")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "hairstyle_id": self.hairstyle_id,
            "hairstyle": self.hairstyle.to_dict() if self.hairstyle else None,
            "color_value": self.color_value,
            "is_favorite": bool(self.is_favorite),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
