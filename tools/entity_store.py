"""Entity storage abstractions with in-memory and SQLite implementations."""
from __future__ import annotations

import copy
import itertools
import json
import sqlite3
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from models.outfit import OUTFIT_FIELDS, Outfit
from models.taxonomy import UNITS, is_valid_category
from models.user import User
from models.wardrobe_item import IMMUTABLE_FIELDS, WARDROBE_ITEM_FIELDS, WardrobeItem
from models.weather import WeatherPreference
from wardrobe_app.errors import ValidationFailedError

_PREFERENCE_FIELDS = {"location", "unit", "min_temperature", "max_temperature"}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _mergeable(updated_fields: Dict[str, Any], allowed: frozenset) -> Dict[str, Any]:
    return {
        key: value
        for key, value in updated_fields.items()
        if key in allowed and key not in IMMUTABLE_FIELDS
    }


class EntityStore:
    """Persistence interface for users, wardrobe items, outfits and weather preferences.

    Read operations return ``None`` for unknown ids instead of raising. Write
    operations enforce cross-entity invariants and raise
    :class:`ValidationFailedError` when a record would break them.
    """

    # Users
    def create_user(self, user: User) -> User:
        raise NotImplementedError

    def get_user(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_user_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError

    # Wardrobe items
    def list_wardrobe_items(self, user_id: int) -> List[WardrobeItem]:
        raise NotImplementedError

    def get_wardrobe_item(self, item_id: int) -> Optional[WardrobeItem]:
        raise NotImplementedError

    def create_wardrobe_item(self, item: WardrobeItem) -> WardrobeItem:
        raise NotImplementedError

    def update_wardrobe_item(self, item_id: int, updated_fields: Dict[str, Any]) -> Optional[WardrobeItem]:
        raise NotImplementedError

    def delete_wardrobe_item(self, item_id: int) -> None:
        raise NotImplementedError

    # Outfits
    def list_outfits(self, user_id: int) -> List[Outfit]:
        raise NotImplementedError

    def get_outfit(self, outfit_id: int) -> Optional[Outfit]:
        raise NotImplementedError

    def create_outfit(self, outfit: Outfit) -> Outfit:
        raise NotImplementedError

    def update_outfit(self, outfit_id: int, updated_fields: Dict[str, Any]) -> Optional[Outfit]:
        raise NotImplementedError

    def delete_outfit(self, outfit_id: int) -> None:
        raise NotImplementedError

    # Weather preferences
    def get_weather_preferences(self, user_id: int) -> Optional[WeatherPreference]:
        raise NotImplementedError

    def set_weather_preferences(self, user_id: int, updates: Dict[str, Any]) -> WeatherPreference:
        raise NotImplementedError

    # Write-boundary checks shared by every backend
    def _check_user_exists(self, user_id: int) -> None:
        if self.get_user(user_id) is None:
            raise ValidationFailedError(f"User {user_id} does not exist", field="user_id")

    @staticmethod
    def _check_score(score: Any) -> None:
        if score is None:
            return
        if isinstance(score, bool) or not isinstance(score, int) or not 0 <= score <= 100:
            raise ValidationFailedError(
                "sustainability_score must be an integer between 0 and 100",
                field="sustainability_score",
            )

    def _check_wardrobe_item(self, item: WardrobeItem) -> None:
        self._check_user_exists(item.user_id)
        if not item.name or not str(item.name).strip():
            raise ValidationFailedError("name is required", field="name")
        if not item.type:
            raise ValidationFailedError("type is required", field="type")
        if not is_valid_category(item.category):
            raise ValidationFailedError(f"Unsupported category '{item.category}'", field="category")
        self._check_score(item.sustainability_score)

    def _check_outfit(self, outfit: Outfit) -> None:
        self._check_user_exists(outfit.user_id)
        self._check_score(outfit.sustainability_score)
        for item_id in outfit.items:
            item = self.get_wardrobe_item(item_id)
            if item is None or item.user_id != outfit.user_id:
                raise ValidationFailedError(
                    f"Wardrobe item {item_id} is not part of user {outfit.user_id}'s wardrobe",
                    field="items",
                )

    def _check_preference(self, preference: WeatherPreference) -> None:
        self._check_user_exists(preference.user_id)
        if not preference.location or not str(preference.location).strip():
            raise ValidationFailedError("location is required", field="location")
        if preference.unit not in UNITS:
            raise ValidationFailedError(f"Unsupported unit '{preference.unit}'", field="unit")

    def _merge_preference(
        self, user_id: int, existing: Optional[WeatherPreference], updates: Dict[str, Any]
    ) -> WeatherPreference:
        supplied = {
            key: value for key, value in updates.items() if key in _PREFERENCE_FIELDS and value is not None
        }
        if existing is not None:
            return replace(existing, **supplied)
        return WeatherPreference(user_id=user_id, **{"location": "", **supplied})


class InMemoryEntityStore(EntityStore):
    """Process-local store keyed by per-type monotonic counters.

    Records are copied on the way in and out so callers never share state
    with the store. Counters restart at 1 whenever a new store is built.
    """

    def __init__(self) -> None:
        self._users: Dict[int, User] = {}
        self._wardrobe_items: Dict[int, WardrobeItem] = {}
        self._outfits: Dict[int, Outfit] = {}
        self._weather_preferences: Dict[int, WeatherPreference] = {}

        self._user_ids: Iterator[int] = itertools.count(1)
        self._wardrobe_item_ids: Iterator[int] = itertools.count(1)
        self._outfit_ids: Iterator[int] = itertools.count(1)
        self._weather_pref_ids: Iterator[int] = itertools.count(1)

    def create_user(self, user: User) -> User:
        if self.get_user_by_username(user.username) is not None:
            raise ValidationFailedError(f"Username '{user.username}' is already taken", field="username")
        stored = replace(user, id=next(self._user_ids))
        self._users[stored.id] = stored
        return copy.deepcopy(stored)

    def get_user(self, user_id: int) -> Optional[User]:
        user = self._users.get(user_id)
        return copy.deepcopy(user) if user else None

    def get_user_by_username(self, username: str) -> Optional[User]:
        for user in self._users.values():
            if user.username == username:
                return copy.deepcopy(user)
        return None

    def list_wardrobe_items(self, user_id: int) -> List[WardrobeItem]:
        return [copy.deepcopy(item) for item in self._wardrobe_items.values() if item.user_id == user_id]

    def get_wardrobe_item(self, item_id: int) -> Optional[WardrobeItem]:
        item = self._wardrobe_items.get(item_id)
        return copy.deepcopy(item) if item else None

    def create_wardrobe_item(self, item: WardrobeItem) -> WardrobeItem:
        self._check_wardrobe_item(item)
        stored = replace(copy.deepcopy(item), id=next(self._wardrobe_item_ids), created_at=_now())
        self._wardrobe_items[stored.id] = stored
        return copy.deepcopy(stored)

    def update_wardrobe_item(self, item_id: int, updated_fields: Dict[str, Any]) -> Optional[WardrobeItem]:
        current = self._wardrobe_items.get(item_id)
        if current is None:
            return None
        merged = replace(current, **copy.deepcopy(_mergeable(updated_fields, WARDROBE_ITEM_FIELDS)))
        self._check_wardrobe_item(merged)
        self._wardrobe_items[item_id] = merged
        return copy.deepcopy(merged)

    def delete_wardrobe_item(self, item_id: int) -> None:
        removed = self._wardrobe_items.pop(item_id, None)
        if removed is None:
            return
        for outfit in self._outfits.values():
            if outfit.user_id == removed.user_id and item_id in outfit.items:
                outfit.items = [other for other in outfit.items if other != item_id]

    def list_outfits(self, user_id: int) -> List[Outfit]:
        return [copy.deepcopy(outfit) for outfit in self._outfits.values() if outfit.user_id == user_id]

    def get_outfit(self, outfit_id: int) -> Optional[Outfit]:
        outfit = self._outfits.get(outfit_id)
        return copy.deepcopy(outfit) if outfit else None

    def create_outfit(self, outfit: Outfit) -> Outfit:
        self._check_outfit(outfit)
        stored = replace(copy.deepcopy(outfit), id=next(self._outfit_ids), created_at=_now())
        self._outfits[stored.id] = stored
        return copy.deepcopy(stored)

    def update_outfit(self, outfit_id: int, updated_fields: Dict[str, Any]) -> Optional[Outfit]:
        current = self._outfits.get(outfit_id)
        if current is None:
            return None
        merged = replace(current, **copy.deepcopy(_mergeable(updated_fields, OUTFIT_FIELDS)))
        self._check_outfit(merged)
        self._outfits[outfit_id] = merged
        return copy.deepcopy(merged)

    def delete_outfit(self, outfit_id: int) -> None:
        self._outfits.pop(outfit_id, None)

    def get_weather_preferences(self, user_id: int) -> Optional[WeatherPreference]:
        for preference in self._weather_preferences.values():
            if preference.user_id == user_id:
                return copy.deepcopy(preference)
        return None

    def set_weather_preferences(self, user_id: int, updates: Dict[str, Any]) -> WeatherPreference:
        existing = self.get_weather_preferences(user_id)
        merged = self._merge_preference(user_id, existing, updates)
        self._check_preference(merged)
        if existing is None:
            merged = replace(merged, id=next(self._weather_pref_ids))
        self._weather_preferences[merged.id] = merged
        return copy.deepcopy(merged)


class SQLiteEntityStore(EntityStore):
    """SQLite-backed store with the same contract as the in-memory one."""

    def __init__(self, database_path: str | Path = "data/wardrobe.db") -> None:
        self.database_path = Path(database_path)
        if self.database_path.parent and not self.database_path.parent.exists():
            self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_tables()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.database_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_tables(self) -> None:
        with self._connect() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    username TEXT NOT NULL UNIQUE,
                    password_hash TEXT NOT NULL,
                    display_name TEXT,
                    email TEXT,
                    avatar_url TEXT
                );
                CREATE TABLE IF NOT EXISTS wardrobe_items (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id INTEGER NOT NULL,
                    name TEXT NOT NULL,
                    category TEXT NOT NULL,
                    type TEXT NOT NULL,
                    color TEXT,
                    material TEXT,
                    style TEXT,
                    image_url TEXT,
                    image_data TEXT,
                    sustainability_score INTEGER,
                    attributes TEXT,
                    occasion TEXT,
                    season TEXT,
                    last_worn TEXT,
                    created_at TEXT
                );
                CREATE TABLE IF NOT EXISTS outfits (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id INTEGER NOT NULL,
                    name TEXT NOT NULL,
                    items TEXT NOT NULL,
                    occasion TEXT,
                    season TEXT,
                    sustainability_score INTEGER,
                    is_favorite INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT
                );
                CREATE TABLE IF NOT EXISTS weather_preferences (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id INTEGER NOT NULL UNIQUE,
                    location TEXT NOT NULL,
                    unit TEXT DEFAULT 'metric',
                    min_temperature INTEGER,
                    max_temperature INTEGER
                );
                CREATE INDEX IF NOT EXISTS idx_wardrobe_items_user ON wardrobe_items (user_id);
                CREATE INDEX IF NOT EXISTS idx_outfits_user ON outfits (user_id);
                """
            )

    @staticmethod
    def _serialise_datetime(value: Optional[datetime]) -> Optional[str]:
        return value.isoformat() if value else None

    @staticmethod
    def _deserialise_datetime(raw: Optional[str]) -> Optional[datetime]:
        return datetime.fromisoformat(raw) if raw else None

    @staticmethod
    def _serialise_json(value: Any) -> Optional[str]:
        return json.dumps(value) if value is not None else None

    @staticmethod
    def _deserialise_json(raw: Optional[str]) -> Any:
        return json.loads(raw) if raw else None

    # Users
    def _row_to_user(self, row: sqlite3.Row) -> User:
        return User(
            id=row["id"],
            username=row["username"],
            password_hash=row["password_hash"],
            display_name=row["display_name"],
            email=row["email"],
            avatar_url=row["avatar_url"],
        )

    def create_user(self, user: User) -> User:
        if self.get_user_by_username(user.username) is not None:
            raise ValidationFailedError(f"Username '{user.username}' is already taken", field="username")
        with self._connect() as conn:
            cursor = conn.execute(
                "INSERT INTO users (username, password_hash, display_name, email, avatar_url) VALUES (?, ?, ?, ?, ?)",
                (user.username, user.password_hash, user.display_name, user.email, user.avatar_url),
            )
            return replace(user, id=cursor.lastrowid)

    def get_user(self, user_id: int) -> Optional[User]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
            return self._row_to_user(row) if row else None

    def get_user_by_username(self, username: str) -> Optional[User]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM users WHERE username = ?", (username,)).fetchone()
            return self._row_to_user(row) if row else None

    # Wardrobe items
    def _row_to_item(self, row: sqlite3.Row) -> WardrobeItem:
        return WardrobeItem(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            category=row["category"],
            type=row["type"],
            color=row["color"],
            material=row["material"],
            style=row["style"],
            image_url=row["image_url"],
            image_data=row["image_data"],
            sustainability_score=row["sustainability_score"],
            attributes=self._deserialise_json(row["attributes"]),
            occasion=row["occasion"],
            season=row["season"],
            last_worn=self._deserialise_datetime(row["last_worn"]),
            created_at=self._deserialise_datetime(row["created_at"]),
        )

    def _item_values(self, item: WardrobeItem) -> tuple:
        return (
            item.user_id,
            item.name,
            item.category,
            item.type,
            item.color,
            item.material,
            item.style,
            item.image_url,
            item.image_data,
            item.sustainability_score,
            self._serialise_json(item.attributes),
            item.occasion,
            item.season,
            self._serialise_datetime(item.last_worn),
            self._serialise_datetime(item.created_at),
        )

    def list_wardrobe_items(self, user_id: int) -> List[WardrobeItem]:
        with self._connect() as conn:
            cursor = conn.execute("SELECT * FROM wardrobe_items WHERE user_id = ? ORDER BY id", (user_id,))
            return [self._row_to_item(row) for row in cursor.fetchall()]

    def get_wardrobe_item(self, item_id: int) -> Optional[WardrobeItem]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM wardrobe_items WHERE id = ?", (item_id,)).fetchone()
            return self._row_to_item(row) if row else None

    def create_wardrobe_item(self, item: WardrobeItem) -> WardrobeItem:
        self._check_wardrobe_item(item)
        stored = replace(item, created_at=_now())
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO wardrobe_items (
                    user_id, name, category, type, color, material, style, image_url, image_data,
                    sustainability_score, attributes, occasion, season, last_worn, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                self._item_values(stored),
            )
            return replace(stored, id=cursor.lastrowid)

    def update_wardrobe_item(self, item_id: int, updated_fields: Dict[str, Any]) -> Optional[WardrobeItem]:
        current = self.get_wardrobe_item(item_id)
        if current is None:
            return None
        merged = replace(current, **_mergeable(updated_fields, WARDROBE_ITEM_FIELDS))
        self._check_wardrobe_item(merged)
        with self._connect() as conn:
            conn.execute(
                """
                UPDATE wardrobe_items SET
                    user_id = ?, name = ?, category = ?, type = ?, color = ?, material = ?, style = ?,
                    image_url = ?, image_data = ?, sustainability_score = ?, attributes = ?, occasion = ?,
                    season = ?, last_worn = ?, created_at = ?
                WHERE id = ?
                """,
                (*self._item_values(merged), item_id),
            )
        return merged

    def delete_wardrobe_item(self, item_id: int) -> None:
        with self._connect() as conn:
            row = conn.execute("SELECT user_id FROM wardrobe_items WHERE id = ?", (item_id,)).fetchone()
            if row is None:
                return
            conn.execute("DELETE FROM wardrobe_items WHERE id = ?", (item_id,))
            # Outfits keep only ids that still resolve to an item.
            outfits = conn.execute(
                "SELECT id, items FROM outfits WHERE user_id = ?", (row["user_id"],)
            ).fetchall()
            for outfit in outfits:
                items = self._deserialise_json(outfit["items"]) or []
                if item_id in items:
                    remaining = [other for other in items if other != item_id]
                    conn.execute(
                        "UPDATE outfits SET items = ? WHERE id = ?", (json.dumps(remaining), outfit["id"])
                    )

    # Outfits
    def _row_to_outfit(self, row: sqlite3.Row) -> Outfit:
        return Outfit(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            items=self._deserialise_json(row["items"]) or [],
            occasion=row["occasion"],
            season=row["season"],
            sustainability_score=row["sustainability_score"],
            is_favorite=bool(row["is_favorite"]),
            created_at=self._deserialise_datetime(row["created_at"]),
        )

    def _outfit_values(self, outfit: Outfit) -> tuple:
        return (
            outfit.user_id,
            outfit.name,
            json.dumps(outfit.items),
            outfit.occasion,
            outfit.season,
            outfit.sustainability_score,
            int(bool(outfit.is_favorite)),
            self._serialise_datetime(outfit.created_at),
        )

    def list_outfits(self, user_id: int) -> List[Outfit]:
        with self._connect() as conn:
            cursor = conn.execute("SELECT * FROM outfits WHERE user_id = ? ORDER BY id", (user_id,))
            return [self._row_to_outfit(row) for row in cursor.fetchall()]

    def get_outfit(self, outfit_id: int) -> Optional[Outfit]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM outfits WHERE id = ?", (outfit_id,)).fetchone()
            return self._row_to_outfit(row) if row else None

    def create_outfit(self, outfit: Outfit) -> Outfit:
        self._check_outfit(outfit)
        stored = replace(outfit, created_at=_now())
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO outfits (
                    user_id, name, items, occasion, season, sustainability_score, is_favorite, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                self._outfit_values(stored),
            )
            return replace(stored, id=cursor.lastrowid)

    def update_outfit(self, outfit_id: int, updated_fields: Dict[str, Any]) -> Optional[Outfit]:
        current = self.get_outfit(outfit_id)
        if current is None:
            return None
        merged = replace(current, **_mergeable(updated_fields, OUTFIT_FIELDS))
        self._check_outfit(merged)
        with self._connect() as conn:
            conn.execute(
                """
                UPDATE outfits SET
                    user_id = ?, name = ?, items = ?, occasion = ?, season = ?,
                    sustainability_score = ?, is_favorite = ?, created_at = ?
                WHERE id = ?
                """,
                (*self._outfit_values(merged), outfit_id),
            )
        return merged

    def delete_outfit(self, outfit_id: int) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM outfits WHERE id = ?", (outfit_id,))

    # Weather preferences
    def _row_to_preference(self, row: sqlite3.Row) -> WeatherPreference:
        return WeatherPreference(
            id=row["id"],
            user_id=row["user_id"],
            location=row["location"],
            unit=row["unit"] or "metric",
            min_temperature=row["min_temperature"],
            max_temperature=row["max_temperature"],
        )

    def get_weather_preferences(self, user_id: int) -> Optional[WeatherPreference]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM weather_preferences WHERE user_id = ?", (user_id,)).fetchone()
            return self._row_to_preference(row) if row else None

    def set_weather_preferences(self, user_id: int, updates: Dict[str, Any]) -> WeatherPreference:
        existing = self.get_weather_preferences(user_id)
        merged = self._merge_preference(user_id, existing, updates)
        self._check_preference(merged)
        values = (merged.location, merged.unit, merged.min_temperature, merged.max_temperature)
        with self._connect() as conn:
            if existing is not None:
                conn.execute(
                    """
                    UPDATE weather_preferences
                    SET location = ?, unit = ?, min_temperature = ?, max_temperature = ?
                    WHERE id = ?
                    """,
                    (*values, existing.id),
                )
                return merged
            cursor = conn.execute(
                """
                INSERT INTO weather_preferences (location, unit, min_temperature, max_temperature, user_id)
                VALUES (?, ?, ?, ?, ?)
                """,
                (*values, user_id),
            )
            return replace(merged, id=cursor.lastrowid)


__all__ = ["EntityStore", "InMemoryEntityStore", "SQLiteEntityStore"]
