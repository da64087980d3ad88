import pytest

from djemini.errors import ConstraintViolation
from djemini.store import Category, Item, Store


def add_items(store, *ids, source_id=None):
    return store.upsert_items(
        Item(id=i, title=f"Song {i}", artist="Artist", source_id=source_id) for i in ids
    )


def classify(store, item_id, mood=(), genre=(), energy=None):
    cats = [Category(item_id, "mood", m) for m in mood]
    cats += [Category(item_id, "genre", g) for g in genre]
    if energy:
        cats.append(Category(item_id, "energy", energy))
    store.record_classification(cats, [item_id])


# ------------------------------------------------------------
# Sources
# ------------------------------------------------------------


def test_upsert_source_is_keyed_by_remote_id(store):
    a = store.upsert_source("playlist", "Old name", "PL1")
    b = store.upsert_source("playlist", "New name", "PL1")

    assert a.id == b.id
    assert b.name == "New name"
    assert len(store.list_sources()) == 1


def test_only_one_liked_source(store):
    a = store.upsert_source("liked", "Liked Music")
    b = store.upsert_source("liked", "Liked again")
    assert a.id == b.id
    assert store.find_liked_source().name == "Liked again"


def test_unknown_source_kind(store):
    with pytest.raises(ConstraintViolation):
        store.upsert_source("album", "x", "AL1")


def test_playlist_source_needs_remote_id(store):
    with pytest.raises(ConstraintViolation):
        store.upsert_source("playlist", "No id")
    assert store.list_sources() == []


def test_list_sources_counts_items(store):
    s = store.upsert_source("playlist", "P", "PL1")
    store.upsert_source("playlist", "Q", "PL2")
    add_items(store, "a", "b", source_id=s.id)

    counts = {x.name: x.item_count for x in store.list_sources()}
    assert counts == {"P": 2, "Q": 0}


def test_deleting_source_keeps_its_items(store):
    s = store.upsert_source("playlist", "P", "PL1")
    add_items(store, "a", source_id=s.id)

    assert store.delete_source(s.id)
    assert store.get_item("a").source_id is None
    assert not store.delete_source(s.id)


# ------------------------------------------------------------
# Items / categories
# ------------------------------------------------------------


def test_upsert_items_is_insert_if_absent(store):
    assert add_items(store, "a", "b") == 2
    store.upsert_items([Item(id="a", title="Renamed")])

    assert add_items(store, "a", "b", "c") == 1
    assert store.get_item("a").title == "Song a"
    assert [i.id for i in store.list_items()] == ["a", "b", "c"]


def test_unclassified_in_insertion_order(store):
    add_items(store, "z", "a", "m")
    store.mark_classified("a")
    assert [i.id for i in store.list_unclassified_items()] == ["z", "m"]
    assert [i.id for i in store.list_unclassified_items(limit=1)] == ["z"]


def test_mark_classified_reports_first_flip_only(store):
    add_items(store, "a")
    assert store.mark_classified("a") is True
    assert store.mark_classified("a") is False
    assert store.count_classified() == 1


def test_record_classification_is_atomic(store):
    add_items(store, "a", "b")

    with pytest.raises(ConstraintViolation):
        store.record_classification(
            [Category("a", "mood", "happy"), Category("a", "mood", "happy")],
            ["a"],
        )

    assert store.list_categories_for_item("a") == []
    assert store.get_item("a").classified is False


def test_category_for_unknown_item_is_rejected(store):
    with pytest.raises(ConstraintViolation):
        store.insert_categories([Category("ghost", "mood", "happy")])


def test_single_energy_per_item(store):
    add_items(store, "a")
    store.insert_categories([Category("a", "energy", "high")])
    with pytest.raises(ConstraintViolation):
        store.insert_categories([Category("a", "energy", "low")])


def test_distinct_values_and_breakdown(store):
    add_items(store, "a", "b")
    classify(store, "a", mood=["happy", "chill"], energy="high")
    classify(store, "b", mood=["happy"], genre=["rock"])

    assert store.list_distinct_category_values("mood") == ["chill", "happy"]
    assert store.category_breakdown("mood") == [("happy", 2), ("chill", 1)]
    assert store.list_distinct_category_values("energy") == ["high"]


def test_profiles_fold_categories(store):
    add_items(store, "a", "b", "c")
    classify(store, "a", mood=["happy"], genre=["pop", "rock"], energy="high")
    classify(store, "b")

    profiles = {p.item_id: p for p in store.classified_item_profiles()}
    assert set(profiles) == {"a", "b"}
    assert profiles["a"].genres == frozenset({"pop", "rock"})
    assert profiles["a"].energy == "high"
    assert profiles["b"].moods == frozenset()
    assert profiles["b"].energy is None


# ------------------------------------------------------------
# Playlists
# ------------------------------------------------------------


def test_upsert_playlist_by_name(store):
    p1, created1 = store.upsert_playlist(
        "Chill", category_type="ai_group", category_value="chill", description="one"
    )
    p2, created2 = store.upsert_playlist(
        "Chill", category_type="ai_group", category_value="chill", description="two"
    )

    assert created1 and not created2
    assert p1.id == p2.id
    assert p1.id.startswith("pl_")
    assert p2.description == "two"


def test_membership_is_ordered_and_unique(store):
    add_items(store, "a", "b", "c")
    p, _ = store.upsert_playlist("P", category_type="ai_group", category_value="p")

    for i in ("c", "a", "b"):
        assert store.add_member(p.id, i)
    assert not store.add_member(p.id, "a")

    assert store.list_members(p.id) == ["c", "a", "b"]
    assert store.list_playlists()[0].member_count == 3


def test_playlists_list_in_insertion_order(store):
    for name in ("Zed", "Alpha", "Mid"):
        store.upsert_playlist(name, category_type="ai_group", category_value=name.lower())

    assert [p.name for p in store.list_playlists()] == ["Zed", "Alpha", "Mid"]


def test_remote_id_set_once(store):
    p, _ = store.upsert_playlist("P", category_type="ai_group", category_value="p")

    assert store.set_playlist_remote_id(p.id, "PLa")
    assert not store.set_playlist_remote_id(p.id, "PLb")
    assert store.get_playlist(p.id).remote_id == "PLa"


def test_publish_attempts_survive_membership_rebuild(store):
    add_items(store, "a", "b", "c")
    p, _ = store.upsert_playlist("P", category_type="ai_group", category_value="p")
    for i in ("a", "b"):
        store.add_member(p.id, i)
    store.set_playlist_remote_id(p.id, "PLa")
    store.record_publish_attempt(p.id, "a")
    assert not store.record_publish_attempt(p.id, "a")

    store.clear_membership(p.id)
    for i in ("c", "a"):
        store.add_member(p.id, i)

    assert store.list_pending_members(p.id) == ["c"]
    assert store.list_playlists()[0].attempted_count == 1
    assert not store.get_playlist(p.id).is_published

    store.mark_playlist_published(p.id)
    assert store.get_playlist(p.id).is_published

    store.clear_playlist_remote_id(p.id)
    cleared = store.get_playlist(p.id)
    assert cleared.remote_id is None
    assert cleared.published_at is None
    assert store.list_pending_members(p.id) == ["c", "a"]


def test_upsert_playlist_keeps_publish_state(store):
    p, _ = store.upsert_playlist("P", category_type="ai_group", category_value="p")
    store.set_playlist_remote_id(p.id, "PLa")

    again, _ = store.upsert_playlist("P", category_type="ai_group", category_value="p")
    assert again.remote_id == "PLa"


def test_clear_playlists_leaves_items(store):
    add_items(store, "a")
    p, _ = store.upsert_playlist("P", category_type="ai_group", category_value="p")
    store.add_member(p.id, "a")

    assert store.clear_playlists() == 1
    assert store.list_playlists() == []
    assert store.count_items() == 1


# ------------------------------------------------------------
# Reset / lifecycle
# ------------------------------------------------------------


def test_reset_scope(store):
    s = store.upsert_source("playlist", "Keep me", "PL1")
    store.touch_source_sync_time(s.id)
    add_items(store, "a", "b", source_id=s.id)
    classify(store, "a", mood=["happy"])
    p, _ = store.upsert_playlist("P", category_type="ai_group", category_value="p")
    store.add_member(p.id, "a")

    store.reset_classification_state()

    sources = store.list_sources()
    assert [(x.name, x.last_synced) for x in sources] == [("Keep me", None)]
    assert store.count_items() == 0
    assert store.list_distinct_category_values("mood") == []
    assert store.list_playlists() == []


def test_nested_transaction_rolls_back_together(store):
    add_items(store, "a")

    with pytest.raises(RuntimeError):
        with store.transaction():
            store.mark_classified("a")
            with store.transaction():
                store.insert_categories([Category("a", "mood", "happy")])
            raise RuntimeError("boom")

    assert store.get_item("a").classified is False
    assert store.list_categories_for_item("a") == []


def test_file_database_persists(tmp_path):
    path = tmp_path / "lib" / "library.db"
    with Store(path) as s:
        s.upsert_source("playlist", "P", "PL1")

    with Store(path) as s:
        assert [x.remote_id for x in s.list_sources()] == ["PL1"]
