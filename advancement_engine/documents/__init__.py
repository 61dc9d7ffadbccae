"""
Document model of the advancement engine.

Actors own embedded items, items own advancements. Staged actor copies record
their changes so an edit session can be committed or dropped as a whole.
"""

from .actor import ABILITIES, Actor, ActorSystem, Attributes, Details, HitPointsData
from .changes import (
    ActorUpdated,
    ChangeBuffer,
    Delta,
    ItemsCreated,
    ItemsDeleted,
    ItemUpdated,
)
from .item import FeatureType, Item, ItemSystem
from .store import DocumentStore, MemoryDocumentStore, commit_changes

__all__ = [
    "ABILITIES",
    "Actor",
    "ActorSystem",
    "ActorUpdated",
    "Attributes",
    "ChangeBuffer",
    "Delta",
    "Details",
    "DocumentStore",
    "FeatureType",
    "HitPointsData",
    "Item",
    "ItemSystem",
    "ItemUpdated",
    "ItemsCreated",
    "ItemsDeleted",
    "MemoryDocumentStore",
    "commit_changes",
]
