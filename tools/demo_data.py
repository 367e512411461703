"""Demo wardrobe used for local runs and the seeded default user."""

from __future__ import annotations

from typing import Dict, List

from models.outfit import Outfit
from models.user import User, hash_password
from models.wardrobe_item import WardrobeItem
from tools.entity_store import EntityStore

DEMO_USERNAME = "emma"

_UNSPLASH = "https://images.unsplash.com/photo-{}?ixlib=rb-1.2.1&auto=format&fit=crop&w=300&q=80"

SAMPLE_ITEMS: List[Dict[str, object]] = [
    {"name": "White Basic T-shirt", "category": "tops", "type": "t-shirt", "color": "white", "material": "cotton",
     "style": "casual", "photo": "1596755094514-f87e34085b2c", "sustainability_score": 85, "season": "all-season",
     "occasion": "casual"},
    {"name": "Blue Denim Jeans", "category": "bottoms", "type": "jeans", "color": "blue", "material": "denim",
     "style": "casual", "photo": "1598522325074-042db73aa4e5", "sustainability_score": 72, "season": "all-season",
     "occasion": "casual"},
    {"name": "Black Leather Jacket", "category": "outerwear", "type": "jacket", "color": "black",
     "material": "leather", "style": "casual", "photo": "1591047139829-d91aecb6caea", "sustainability_score": 56,
     "season": "fall", "occasion": "casual"},
    {"name": "Beige Knit Sweater", "category": "tops", "type": "sweater", "color": "beige", "material": "wool",
     "style": "casual", "photo": "1543163521-1bf539c55dd2", "sustainability_score": 92, "season": "winter",
     "occasion": "casual"},
    {"name": "White Button-Up Shirt", "category": "tops", "type": "shirt", "color": "white", "material": "cotton",
     "style": "formal", "photo": "1603808033192-082d6919d3e1", "sustainability_score": 88, "season": "all-season",
     "occasion": "formal"},
    {"name": "Brown Ankle Boots", "category": "shoes", "type": "boots", "color": "brown", "material": "leather",
     "style": "casual", "photo": "1551489186-cf8726f514f8", "sustainability_score": 62, "season": "fall",
     "occasion": "casual"},
    {"name": "Classic Sunglasses", "category": "accessories", "type": "sunglasses", "color": "black",
     "material": "plastic", "style": "casual", "photo": "1538329972958-465d6d2144ed", "sustainability_score": 78,
     "season": "summer", "occasion": "casual"},
    {"name": "Floral Summer Dress", "category": "dresses", "type": "dress", "color": "multi", "material": "cotton",
     "style": "casual", "photo": "1594633312681-425c7b97ccd1", "sustainability_score": 84, "season": "summer",
     "occasion": "casual"},
    {"name": "Navy Blue Blazer", "category": "outerwear", "type": "blazer", "color": "navy",
     "material": "polyester", "style": "formal", "photo": "1519211975560-4ca611f5a72a", "sustainability_score": 65,
     "season": "all-season", "occasion": "formal"},
    {"name": "White Sneakers", "category": "shoes", "type": "sneakers", "color": "white", "material": "canvas",
     "style": "casual", "photo": "1608250894095-87d6da0b0805", "sustainability_score": 91, "season": "all-season",
     "occasion": "casual"},
]

# Item positions refer to SAMPLE_ITEMS order.
SAMPLE_OUTFITS: List[Dict[str, object]] = [
    {"name": "Casual Friday", "positions": [0, 1, 9], "occasion": "office", "season": "all-season",
     "sustainability_score": 86, "is_favorite": False},
    {"name": "Weekend Brunch", "positions": [7, 5, 6], "occasion": "social", "season": "summer",
     "sustainability_score": 92, "is_favorite": True},
    {"name": "Business Meeting", "positions": [4, 8, 1], "occasion": "work", "season": "all-season",
     "sustainability_score": 76, "is_favorite": False},
]


def seed_demo_data(store: EntityStore, default_location: str = "New York") -> User:
    """Create the demo user with a sample wardrobe, outfits and location.

    Seeding is skipped when the demo user already exists, so restarting
    against a SQLite file does not duplicate the wardrobe.
    """

    existing = store.get_user_by_username(DEMO_USERNAME)
    if existing is not None:
        return existing

    user = store.create_user(
        User(
            username=DEMO_USERNAME,
            password_hash=hash_password("password123"),
            display_name="Emma Wilson",
            email="emma@example.com",
            avatar_url="https://images.unsplash.com/photo-1494790108377-be9c29b29330"
            "?ixlib=rb-1.2.1&auto=format&fit=crop&w=128&q=80",
        )
    )

    item_ids: List[int] = []
    for sample in SAMPLE_ITEMS:
        fields = {key: value for key, value in sample.items() if key != "photo"}
        item = store.create_wardrobe_item(
            WardrobeItem(user_id=user.id, image_url=_UNSPLASH.format(sample["photo"]), **fields)  # type: ignore[arg-type]
        )
        item_ids.append(item.id)  # type: ignore[arg-type]

    for sample in SAMPLE_OUTFITS:
        fields = {key: value for key, value in sample.items() if key != "positions"}
        store.create_outfit(
            Outfit(
                user_id=user.id,  # type: ignore[arg-type]
                items=[item_ids[position] for position in sample["positions"]],  # type: ignore[union-attr]
                **fields,  # type: ignore[arg-type]
            )
        )

    store.set_weather_preferences(
        user.id,  # type: ignore[arg-type]
        {"location": default_location, "unit": "metric", "min_temperature": 15, "max_temperature": 25},
    )
    return user


__all__ = ["seed_demo_data", "SAMPLE_ITEMS", "SAMPLE_OUTFITS", "DEMO_USERNAME"]
