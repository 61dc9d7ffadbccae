"""
Shared fixtures: process-wide state is reset around every test, and the
sample compendium is available to register.
"""

import pytest
from factories import FEATURES, POWERS, feature_uuid, make_actor, power_uuid

from advancement_engine.core.config import reset_config
from advancement_engine.core.content import ContentRepository
from advancement_engine.core.host import HostServices, configure_host
from advancement_engine.documents.actor import Actor
from advancement_engine.documents.store import MemoryDocumentStore


@pytest.fixture(autouse=True)
def reset_process_state():
    """Drops the configuration and the singletons between tests."""
    reset_config()
    ContentRepository.reset()
    HostServices.reset()
    yield
    reset_config()
    ContentRepository.reset()
    HostServices.reset()


@pytest.fixture
def content() -> ContentRepository:
    repository = ContentRepository()
    for entry in FEATURES:
        repository.register(feature_uuid(entry["id"]), entry)
    for entry in POWERS:
        repository.register(power_uuid(entry["id"]), entry)
    return repository


@pytest.fixture
def store(content) -> MemoryDocumentStore:
    memory = MemoryDocumentStore()
    configure_host(store=memory, content=content)
    return memory


@pytest.fixture
def guardian(store) -> Actor:
    """A level 3 Guardian with a +2 constitution modifier."""
    return make_actor()
