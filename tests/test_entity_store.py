"""Store laws shared by the in-memory and SQLite backends."""

import pytest

from models.outfit import Outfit
from models.user import User, verify_password
from models.wardrobe_item import WardrobeItem
from tools.demo_data import DEMO_USERNAME, SAMPLE_ITEMS, SAMPLE_OUTFITS, seed_demo_data
from tools.entity_store import InMemoryEntityStore
from wardrobe_app.errors import ValidationFailedError


def _item(user_id: int, name: str = "Tee", category: str = "tops", **fields) -> WardrobeItem:
    return WardrobeItem(user_id=user_id, name=name, category=category, **fields)


def test_list_is_scoped_to_owner_and_reflects_deletes(store, make_user) -> None:
    alice = make_user(store, "alice")
    bob = make_user(store, "bob")
    first = store.create_wardrobe_item(_item(alice.id, "Tee"))
    second = store.create_wardrobe_item(_item(alice.id, "Jeans", "bottoms"))
    store.create_wardrobe_item(_item(bob.id, "Scarf", "accessories"))

    store.delete_wardrobe_item(first.id)

    listed = store.list_wardrobe_items(alice.id)
    assert [item.id for item in listed] == [second.id]
    assert all(item.user_id == alice.id for item in listed)
    assert store.list_wardrobe_items(999) == []


def test_create_assigns_monotonic_ids_and_created_at(store, make_user) -> None:
    user = make_user(store)
    first = store.create_wardrobe_item(_item(user.id, "A"))
    second = store.create_wardrobe_item(_item(user.id, "B"))

    assert first.id == 1
    assert second.id == 2
    assert first.created_at is not None
    assert store.get_wardrobe_item(second.id).name == "B"


def test_delete_is_idempotent(store, make_user) -> None:
    user = make_user(store)
    item = store.create_wardrobe_item(_item(user.id))
    outfit = store.create_outfit(Outfit(user_id=user.id, name="Solo", items=[item.id]))

    store.delete_outfit(outfit.id)
    store.delete_outfit(outfit.id)
    store.delete_wardrobe_item(item.id)
    store.delete_wardrobe_item(item.id)
    store.delete_wardrobe_item(12345)

    assert store.get_outfit(outfit.id) is None
    assert store.list_wardrobe_items(user.id) == []


def test_deleting_an_item_drops_it_from_outfits(store, make_user) -> None:
    user = make_user(store)
    other = make_user(store, "other")
    top = store.create_wardrobe_item(_item(user.id, "Tee"))
    bottom = store.create_wardrobe_item(_item(user.id, "Jeans", "bottoms"))
    outfit = store.create_outfit(Outfit(user_id=user.id, name="Pair", items=[top.id, bottom.id]))
    bystander = store.create_outfit(
        Outfit(user_id=other.id, name="Theirs", items=[store.create_wardrobe_item(_item(other.id)).id])
    )

    store.delete_wardrobe_item(top.id)

    assert store.get_outfit(outfit.id).items == [bottom.id]
    updated = store.update_outfit(outfit.id, {"is_favorite": True})
    assert updated.is_favorite is True
    assert updated.items == [bottom.id]
    assert store.get_outfit(bystander.id).items == bystander.items


@pytest.mark.parametrize("field", ["name", "type"])
def test_update_rejects_null_required_fields(store, make_user, field) -> None:
    user = make_user(store)
    item = store.create_wardrobe_item(_item(user.id, type="t-shirt"))

    with pytest.raises(ValidationFailedError) as excinfo:
        store.update_wardrobe_item(item.id, {field: None})

    assert excinfo.value.field == field
    stored = store.get_wardrobe_item(item.id)
    assert stored.name == "Tee"
    assert stored.type == "t-shirt"


def test_update_merges_fields_but_never_identity(store, make_user) -> None:
    user = make_user(store)
    item = store.create_wardrobe_item(_item(user.id, color="white", sustainability_score=80))

    updated = store.update_wardrobe_item(
        item.id, {"color": "black", "id": 99, "user_id": 42, "created_at": None, "unknown_field": "x"}
    )

    assert updated.color == "black"
    assert updated.sustainability_score == 80
    assert updated.id == item.id
    assert updated.user_id == user.id
    assert updated.created_at == item.created_at
    assert store.update_wardrobe_item(404, {"color": "red"}) is None


def test_weather_preference_upsert_keeps_one_record(store, make_user) -> None:
    user = make_user(store)
    first = store.set_weather_preferences(user.id, {"location": "Paris", "min_temperature": 12})
    second = store.set_weather_preferences(user.id, {"location": "Oslo", "unit": "imperial"})

    assert second.id == first.id
    current = store.get_weather_preferences(user.id)
    assert current.location == "Oslo"
    assert current.unit == "imperial"
    assert current.min_temperature == 12


def test_weather_preference_requires_location_and_known_unit(store, make_user) -> None:
    user = make_user(store)
    with pytest.raises(ValidationFailedError):
        store.set_weather_preferences(user.id, {"unit": "metric"})
    with pytest.raises(ValidationFailedError) as excinfo:
        store.set_weather_preferences(user.id, {"location": "Paris", "unit": "kelvin"})
    assert excinfo.value.field == "unit"
    with pytest.raises(ValidationFailedError):
        store.set_weather_preferences(999, {"location": "Paris"})


@pytest.mark.parametrize(
    "fields, field",
    [
        ({"category": "hats"}, "category"),
        ({"sustainability_score": 101}, "sustainability_score"),
        ({"sustainability_score": -1}, "sustainability_score"),
    ],
)
def test_wardrobe_item_write_boundary(store, make_user, fields, field) -> None:
    user = make_user(store)
    base = {"category": "tops"}
    base.update(fields)
    with pytest.raises(ValidationFailedError) as excinfo:
        store.create_wardrobe_item(WardrobeItem(user_id=user.id, name="Bad", **base))
    assert excinfo.value.field == field


def test_wardrobe_item_requires_existing_user(store) -> None:
    with pytest.raises(ValidationFailedError):
        store.create_wardrobe_item(_item(77))


def test_outfit_items_must_belong_to_outfit_owner(store, make_user) -> None:
    alice = make_user(store, "alice")
    bob = make_user(store, "bob")
    alices_top = store.create_wardrobe_item(_item(alice.id))
    bobs_top = store.create_wardrobe_item(_item(bob.id))

    with pytest.raises(ValidationFailedError):
        store.create_outfit(Outfit(user_id=alice.id, name="Mixed", items=[alices_top.id, bobs_top.id]))
    with pytest.raises(ValidationFailedError):
        store.create_outfit(Outfit(user_id=alice.id, name="Ghost", items=[555]))

    outfit = store.create_outfit(Outfit(user_id=alice.id, name="Mine", items=[alices_top.id]))
    with pytest.raises(ValidationFailedError):
        store.update_outfit(outfit.id, {"items": [bobs_top.id]})
    assert store.get_outfit(outfit.id).items == [alices_top.id]


def test_usernames_are_unique(store, make_user) -> None:
    make_user(store, "alice")
    with pytest.raises(ValidationFailedError):
        make_user(store, "alice")
    assert store.get_user_by_username("nobody") is None


def test_passwords_are_stored_hashed(store, make_user) -> None:
    user = make_user(store)
    stored = store.get_user(user.id)
    assert stored.password_hash != "secret"
    assert verify_password("secret", stored.password_hash)
    assert not verify_password("wrong", stored.password_hash)


def test_outfit_round_trip_preserves_order_and_flags(store, make_user) -> None:
    user = make_user(store)
    ids = [store.create_wardrobe_item(_item(user.id, f"Item {n}")).id for n in range(3)]
    outfit = store.create_outfit(Outfit(user_id=user.id, name="Ordered", items=list(reversed(ids)), is_favorite=True))

    fetched = store.get_outfit(outfit.id)
    assert fetched.items == list(reversed(ids))
    assert fetched.is_favorite is True
    assert store.list_outfits(user.id)[0].name == "Ordered"


def test_in_memory_store_hands_out_copies() -> None:
    store = InMemoryEntityStore()
    user = store.create_user(User(username="carol", password_hash="x$y"))
    item = store.create_wardrobe_item(_item(user.id, attributes={"detectedBy": "default"}))

    item.attributes["detectedBy"] = "tampered"
    item.name = "Changed"

    fetched = store.get_wardrobe_item(item.id)
    assert fetched.attributes == {"detectedBy": "default"}
    assert fetched.name == "Tee"


def test_seed_demo_data_is_idempotent(store) -> None:
    user = seed_demo_data(store)
    again = seed_demo_data(store)

    assert again.id == user.id
    assert store.get_user_by_username(DEMO_USERNAME) is not None
    assert len(store.list_wardrobe_items(user.id)) == len(SAMPLE_ITEMS)
    outfits = store.list_outfits(user.id)
    assert len(outfits) == len(SAMPLE_OUTFITS)
    owned = {item.id for item in store.list_wardrobe_items(user.id)}
    assert all(set(outfit.items) <= owned for outfit in outfits)
    assert store.get_weather_preferences(user.id).location == "New York"


def test_password_hash_uses_a_modular_crypt_format(store, make_user) -> None:
    stored = store.get_user(make_user(store).id)
    assert stored.password_hash.startswith("$pbkdf2-sha256$")
