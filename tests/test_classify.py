import json

import pytest

from conftest import FakeCompletionClient, no_sleep
from djemini.ai.service import AIService
from djemini.errors import InvalidAIResponse, QuotaExceeded, TransientError
from djemini.pipeline.run_state import RunResult
from djemini.stages.classify import Classifier, assignments_to_categories, batched
from djemini.store import Item


def seed(store, n):
    store.upsert_items(Item(id=f"v{i}", title=f"Song {i}", artist="A") for i in range(1, n + 1))


def analyses(*entries):
    return json.dumps({"analyses": list(entries)})


def classifier(store, *replies, batch_size=2):
    client = FakeCompletionClient(*replies)
    sleeps = []
    c = Classifier(
        store,
        AIService(client),
        batch_size=batch_size,
        batch_delay_sec=0.5,
        sleep=sleeps.append,
    )
    return c, client, sleeps


def test_batched():
    assert [len(b) for b in batched(list(range(5)), 2)] == [2, 2, 1]


def test_batch_size_capped():
    c = Classifier(None, None, batch_size=100, sleep=no_sleep)
    assert c.batch_size == 20


def test_classifies_every_batch(store):
    seed(store, 3)
    c, client, sleeps = classifier(
        store,
        analyses(
            {"index": 1, "mood": ["happy"], "genre": ["pop"], "energy": "high"},
            {"index": 2, "mood": ["sad"]},
        ),
        analyses({"index": 1, "genre": ["rock"], "energy": "low"}),
    )

    report = c.classify("all")

    assert report.status == RunResult.OK
    assert (report.pending, report.batches, report.processed, report.failed) == (3, 2, 3, 0)
    assert report.categories_written == 6
    assert store.count_classified() == 3
    assert [(x.type, x.value) for x in store.list_categories_for_item("v3")] == [
        ("genre", "rock"),
        ("energy", "low"),
    ]
    # one delay between the two batches
    assert sleeps == [0.5]
    assert '1. "Song 1" by A' in client.prompts[0]


def test_items_missing_from_reply_are_still_marked(store):
    seed(store, 2)
    c, _, _ = classifier(store, analyses({"index": 1, "mood": ["calm"]}))

    report = c.classify("mood")
    assert report.processed == 2
    assert store.get_item("v2").classified is True
    assert store.list_categories_for_item("v2") == []


def test_out_of_range_index_is_ignored(store):
    seed(store, 1)
    c, _, _ = classifier(
        store, analyses({"index": 0, "mood": ["x"]}, {"index": 7, "mood": ["y"]})
    )
    report = c.classify("mood")
    assert report.categories_written == 0
    assert store.count_classified() == 1


def test_unrequested_types_are_not_written(store):
    seed(store, 1)
    c, _, _ = classifier(
        store, analyses({"index": 1, "mood": ["happy"], "genre": ["pop"], "energy": "low"})
    )
    c.classify("genre")
    assert [x.type for x in store.list_categories_for_item("v1")] == ["genre"]


def test_invalid_type_is_rejected_before_any_call(store):
    seed(store, 1)
    c, client, _ = classifier(store)
    with pytest.raises(ValueError):
        c.classify("tempo")
    assert client.prompts == []


@pytest.mark.parametrize(
    "failure", ["not json", TransientError("down"), InvalidAIResponse("bad", raw="?")]
)
def test_failed_batch_is_skipped_and_left_pending(store, failure):
    seed(store, 4)
    c, _, _ = classifier(store, failure, analyses({"index": 1, "mood": ["calm"]}))

    report = c.classify("mood")

    assert report.status == RunResult.OK
    assert report.failed == 2
    assert report.processed == 2
    assert [i.id for i in store.list_unclassified_items()] == ["v1", "v2"]


def test_quota_halts_without_writing_the_batch(store):
    seed(store, 6)
    c, client, _ = classifier(
        store,
        analyses({"index": 1, "mood": ["calm"]}),
        QuotaExceeded("quota", service="ai"),
    )

    report = c.classify("mood")

    assert report.halted
    assert report.status == RunResult.QUOTA_EXHAUSTED
    assert report.processed == 2
    assert len(client.prompts) == 2
    assert [i.id for i in store.list_unclassified_items()] == ["v3", "v4", "v5", "v6"]


def test_classified_items_are_never_resubmitted(store):
    seed(store, 2)
    c, _, _ = classifier(store, analyses({"index": 1, "mood": ["calm"]}))
    c.classify("mood")

    again, client, _ = classifier(store)
    report = again.classify("mood")
    assert report.pending == 0
    assert client.prompts == []


def test_duplicate_and_extra_energy_collapse():
    from djemini.ai.schemas import CategoryAssignment

    item = Item(id="v1", title="t")
    cats = assignments_to_categories(
        [
            (item, CategoryAssignment(index=1, mood=["a", "a"], energy="high")),
            (item, CategoryAssignment(index=1, mood=["a"], energy="low")),
        ]
    )
    assert [(c.type, c.value) for c in cats] == [("mood", "a"), ("energy", "high")]
