import json

import pytest

from conftest import FakeCompletionClient
from djemini.ai.schemas import PlaylistFilters
from djemini.ai.service import AIService
from djemini.errors import InvalidAIResponse
from djemini.stages.synthesize import PlaylistSynthesizer, matches_filters, snake_case
from djemini.store import Category, Item, ItemProfile


def profile(moods=(), genres=(), energy=None):
    return ItemProfile("v", frozenset(moods), frozenset(genres), energy)


def suggestions(*playlists):
    return json.dumps({"playlists": list(playlists)})


def seed(store):
    store.upsert_items(Item(id=i, title=i) for i in ("a", "b", "c", "d"))
    store.record_classification(
        [
            Category("a", "mood", "chill"),
            Category("a", "genre", "jazz"),
            Category("a", "energy", "low"),
            Category("b", "mood", "energetic"),
            Category("b", "genre", "rock"),
            Category("b", "energy", "high"),
            Category("c", "mood", "chill"),
            Category("c", "genre", "rock"),
        ],
        ["a", "b", "c"],
    )


# ------------------------------------------------------------
# Filter semantics
# ------------------------------------------------------------


def test_absent_dimensions_match_everything():
    assert matches_filters(profile(), PlaylistFilters())


def test_all_present_dimensions_must_hit():
    f = PlaylistFilters(mood=["chill"], genre=["rock", "jazz"])
    assert matches_filters(profile(["chill"], ["jazz"]), f)
    assert not matches_filters(profile(["chill"], ["pop"]), f)
    assert not matches_filters(profile(["sad"], ["rock"]), f)


def test_energy_filter_needs_an_energy():
    f = PlaylistFilters(energy=["low", "medium"])
    assert matches_filters(profile(energy="low"), f)
    assert not matches_filters(profile(energy="high"), f)
    assert not matches_filters(profile(), f)


def test_empty_filter_list_is_absent():
    f = PlaylistFilters(mood=[], genre=["rock"])
    assert f.mood is None
    assert matches_filters(profile(["sad"], ["rock"]), f)


def test_snake_case():
    assert snake_case(" Late  Night ") == "late_night"


# ------------------------------------------------------------
# Synthesis
# ------------------------------------------------------------


def test_synthesize_creates_playlists(store):
    seed(store)
    client = FakeCompletionClient(
        suggestions(
            {"name": "Late Night", "description": "Slow ones", "filters": {"mood": ["chill"]}},
            {"name": "Workout", "filters": {"energy": ["high"], "genre": ["rock"]}},
            {"name": "late night", "filters": {}},
            {"name": "Polka", "filters": {"genre": ["polka"]}},
        )
    )

    report = PlaylistSynthesizer(store, AIService(client)).synthesize()

    assert report.classified_items == 3
    assert [p.name for p in report.playlists] == ["Late Night", "Workout", "Polka"]
    assert report.created == 3
    assert report.empty == 1

    late = store.find_playlist_by_name("Late Night")
    assert late.category_type == "ai_group"
    assert late.category_value == "late_night"
    assert late.description == "Slow ones"
    assert store.list_members(late.id) == ["a", "c"]
    assert store.list_members(store.find_playlist_by_name("Workout").id) == ["b"]

    # the prompt is built from the library's distinct values
    assert "Available moods: chill, energetic" in client.prompts[0]


def test_synthesize_is_idempotent_for_the_same_suggestions(store):
    seed(store)
    reply = suggestions({"name": "Rock", "filters": {"genre": ["rock"]}})
    synth = PlaylistSynthesizer(store, AIService(FakeCompletionClient(reply, reply)))

    first = synth.synthesize()
    playlist = store.find_playlist_by_name("Rock")
    store.set_playlist_remote_id(playlist.id, "PLremote")

    second = synth.synthesize()

    assert first.created == 1
    assert second.created == 0 and second.updated == 1
    assert len(store.list_playlists()) == 1
    again = store.find_playlist_by_name("Rock")
    assert again.id == playlist.id
    assert again.remote_id == "PLremote"
    assert store.list_members(again.id) == ["b", "c"]


def test_nothing_classified_skips_the_ai_call(store):
    store.upsert_items([Item(id="a", title="a")])
    client = FakeCompletionClient()

    report = PlaylistSynthesizer(store, AIService(client)).synthesize()
    assert report.playlists == []
    assert client.prompts == []


def test_invalid_suggestions_write_nothing(store):
    seed(store)
    synth = PlaylistSynthesizer(store, AIService(FakeCompletionClient("{}")))

    with pytest.raises(InvalidAIResponse):
        synth.synthesize()
    assert store.list_playlists() == []
