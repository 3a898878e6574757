"""Default hairstyle catalog inserted into an empty database"""

from typing import List, Dict, Any
from sqlalchemy.orm import Session

from core.logging import logger
from database.repository import HairstyleRepository

_UNSPLASH = "https://images.unsplash.com/{photo}?ixlib=rb-4.0.3&auto=format&fit=crop&w=300&h=300"

DEFAULT_HAIRSTYLES: List[Dict[str, Any]] = [
    {"name": "Classic Bob", "photo": "photo-1560250097-0b93528c311a",
     "categories": ["short"], "difficulty": "easy"},
    {"name": "Beach Waves", "photo": "photo-1526047932273-341f2a7631f9",
     "categories": ["medium"], "difficulty": "medium", "trending": True},
    {"name": "Long Layers", "photo": "photo-1487412720507-e7ab37603c6f",
     "categories": ["long"], "difficulty": "hard"},
    {"name": "Curly Pixie", "photo": "photo-1438761681033-6461ffad8d80",
     "categories": ["short", "curly"], "difficulty": "medium"},
    {"name": "Sleek Straight", "photo": "photo-1531746020798-e6953c6e8e04",
     "categories": ["long", "straight"], "difficulty": "easy"},
    {"name": "Elegant Updo", "photo": "photo-1489424731084-a5d8b219a5bb",
     "categories": ["medium"], "difficulty": "hard"},
    {"name": "Braided Style", "photo": "photo-1524504388940-b1c1722653e1",
     "categories": ["long"], "difficulty": "medium"},
    {"name": "Modern Lob", "photo": "photo-1505033575518-a36ea2ef75ae",
     "categories": ["medium"], "difficulty": "easy", "trending": True},
    {"name": "Textured Shag", "photo": "photo-1580618672591-eb180b1a973f",
     "categories": ["medium"], "difficulty": "medium", "trending": True},
    {"name": "Curtain Bangs", "photo": "photo-1594736797933-d0a3ba6ba4fc",
     "categories": ["medium", "long"], "difficulty": "easy", "trending": True},
    {"name": "Wolf Cut", "photo": "photo-1521590832167-7bcbfaa6381f",
     "categories": ["medium"], "difficulty": "hard", "trending": True},
    {"name": "Butterfly Layers", "photo": "photo-1595475884109-8df31ab00b30",
     "categories": ["long"], "difficulty": "medium", "trending": True},
]


def seed_hairstyles(db: Session) -> int:
    """
    Insert the default catalog if the hairstyles table is empty

    Returns:
        Number of rows inserted
    """
    repo = HairstyleRepository(db)
    if repo.count() > 0:
        return 0

    for entry in DEFAULT_HAIRSTYLES:
        repo.create({
            "name": entry["name"],
            "image": _UNSPLASH.format(photo=entry["photo"]),
            "categories": entry["categories"],
            "difficulty": entry["difficulty"],
            "trending": entry.get("trending", False),
        })

    logger.info(f"🌱 Seeded {len(DEFAULT_HAIRSTYLES)} catalog hairstyles")
    return len(DEFAULT_HAIRSTYLES)
