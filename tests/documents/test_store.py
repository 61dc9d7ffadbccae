"""
Tests for committing staged changes through a document store.
"""

import pytest
from factories import CLASS_ID

from advancement_engine.core.error_handling import PersistenceError
from advancement_engine.documents.changes import ActorUpdated, ChangeBuffer
from advancement_engine.documents.store import MemoryDocumentStore, commit_changes


@pytest.fixture
def staged(guardian):
    clone = guardian.clone()
    clone.update_embedded([{"_id": CLASS_ID, "system.levels": 4}])
    clone.update({"system.attributes.hp.max": 36, "system.attributes.hp.value": 36})
    return clone


def test_commit_applies_changes_to_actor(guardian, staged, store):
    commit_changes(guardian, staged.changes, store)

    assert guardian.get_embedded(CLASS_ID).system.levels == 4
    assert guardian.system.attributes.hp.max == 36
    assert store.load(guardian.id).snapshot() == guardian.snapshot()
    assert len(store.history) == 1


def test_commit_replays_on_stored_document(guardian, staged, store):
    """A store holding the actor applies the batch to its own copy."""
    store.save(guardian)
    commit_changes(guardian, staged.changes, store)
    assert store.documents[guardian.id]["system"]["attributes"]["hp"]["max"] == 36


def test_empty_buffer_is_not_committed(guardian, store):
    commit_changes(guardian, ChangeBuffer(), store)
    assert store.history == []


def test_failed_commit_leaves_actor_untouched(guardian, staged, store):
    before = guardian.snapshot()
    store.fail_next_commit("Disk full")

    with pytest.raises(PersistenceError, match="Disk full"):
        commit_changes(guardian, staged.changes, store)

    assert guardian.snapshot() == before
    assert store.history == []
    # The failure only affects one commit.
    commit_changes(guardian, staged.changes, store)
    assert guardian.get_embedded(CLASS_ID).system.levels == 4


def test_changes_that_cannot_be_replayed(guardian, store):
    changes = ChangeBuffer()
    changes.record(ActorUpdated(changes={"system.missing.value": 1}))

    with pytest.raises(PersistenceError):
        commit_changes(guardian, changes, store)
    assert store.history == []


def test_store_load_unknown_actor():
    assert MemoryDocumentStore().load("unknown") is None
