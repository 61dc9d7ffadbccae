"""
Tests for the content repository and the host services.
"""

import json

from factories import BATTLE_MEDITATION

from advancement_engine.core.content import ContentRepository, compendium_uuid
from advancement_engine.core.host import HostServices, configure_host
from advancement_engine.documents.store import MemoryDocumentStore


def test_reload_reads_every_pack(tmp_path):
    packs = tmp_path / "packs"
    packs.mkdir()
    (packs / "powers.json").write_text(
        json.dumps([{"id": "pwr1", "name": "Force Push", "type": "power"}, {"name": "No id"}])
    )
    (packs / "broken.json").write_text("{not json")

    repository = ContentRepository(tmp_path)

    assert list(repository.documents) == [compendium_uuid("powers", "pwr1")]
    assert repository.resolve("Compendium.sw5e.powers.pwr1")["name"] == "Force Push"


def test_reload_without_packs_folder(tmp_path):
    repository = ContentRepository()
    repository.reload(tmp_path)
    assert repository.documents == {}


def test_resolve_returns_a_copy(content):
    data = content.resolve(BATTLE_MEDITATION)
    data["name"] = "Changed"
    assert content.resolve(BATTLE_MEDITATION)["name"] == "Battle Meditation"
    assert content.resolve("Compendium.sw5e.powers.unknown") is None


def test_index_and_link(content):
    assert content.index_from_uuid(BATTLE_MEDITATION) == {
        "uuid": BATTLE_MEDITATION,
        "name": "Battle Meditation",
        "type": "power",
    }
    assert content.link_for_uuid(BATTLE_MEDITATION) == (
        f"@UUID[{BATTLE_MEDITATION}]{{Battle Meditation}}"
    )
    assert content.link_for_uuid("Item.unknown") == ""


def test_register_world_item():
    repository = ContentRepository()
    uuid = repository.register_world_item({"id": "abc", "name": "Medpac", "type": "consumable"})
    assert uuid == "Item.abc"
    assert repository.resolve(uuid)["name"] == "Medpac"


def test_host_services_defaults_and_configuration(content):
    services = HostServices()
    assert services.content is content
    assert isinstance(services.store, MemoryDocumentStore)

    store = MemoryDocumentStore()
    configure_host(store=store, evaluate_roll=lambda expr, variables: 3)
    assert HostServices().store is store
    assert HostServices().evaluate_roll("1d8", []) == 3
    assert HostServices().resolve(BATTLE_MEDITATION)["type"] == "power"
