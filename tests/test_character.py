"""Tests for character.py: assembling a Character from a profile response."""

from datetime import datetime, timezone

import pytest

from raiddad.character import assemble_character
from raiddad.errors import (
    DecodeError,
    EmblemImageUrlsMissingOrMalformed,
    NoCharactersAssociatedWithPlayer,
)
from raiddad.hashes import CharacterClass, DamageType, Element, ItemSlot
from raiddad.models import Loadout
from raiddad.subclass import MYSTERY, SubclassTree

from builders import (
    CHARACTER_ID,
    EMBLEM,
    HELMET,
    KINETIC,
    LOADOUT,
    MEMBERSHIP_ID,
    OTHER_CHARACTER_ID,
    STRIKER_GRID,
    SUBCLASS,
    character_json,
    equipped_json,
    instance_json,
    profile_response,
    talent_grid_json,
)


def test_assemble_default_hunter():
    character = assemble_character(profile_response())

    assert character.id == CHARACTER_ID
    assert character.player.display_name == "b3ll"
    assert character.player.membership_id == MEMBERSHIP_ID
    assert character.class_type is CharacterClass.HUNTER
    assert character.level == 50
    assert character.light == 1250
    assert character.date_last_played == datetime(2020, 11, 10, 20, tzinfo=timezone.utc)
    assert character.emblem_path == "https://www.bungie.net/common/destiny2_content/icons/emblem.jpg"
    assert character.emblem_background_path.endswith("/emblem_bg.jpg")
    assert (character.mobility, character.resilience, character.recovery) == (100, 40, 60)
    assert (character.discipline, character.intellect, character.strength) == (70, 30, 50)

    assert character.subclass_name == "Gunslinger"
    assert character.subclass_tree == "Top"
    assert character.subclass_path == "Way of the Outlaw"
    assert character.subclass_super == "Golden Gun"

    assert character.loadout == Loadout()
    assert character.fireteam_members is None


def test_custom_asset_base():
    character = assemble_character(profile_response(), asset_base="https://cdn.example.com")
    assert character.emblem_path.startswith("https://cdn.example.com/common/")


def test_most_recently_played_character_wins():
    characters = [
        character_json(CHARACTER_ID, last_played="2020-11-10T20:00:00Z"),
        character_json(OTHER_CHARACTER_ID, last_played="2020-11-12T08:30:00Z", class_type=2),
    ]
    character = assemble_character(profile_response(characters=characters))
    assert character.id == OTHER_CHARACTER_ID
    assert character.class_type is CharacterClass.WARLOCK
    # Nothing equipped on that character in the fixture
    assert character.equipment == {}
    assert character.subclass.is_unknown


def test_timestamp_tie_goes_to_first_listed():
    characters = [character_json(CHARACTER_ID), character_json(OTHER_CHARACTER_ID)]
    character = assemble_character(profile_response(characters=characters))
    assert character.id == CHARACTER_ID


def test_no_characters():
    with pytest.raises(NoCharactersAssociatedWithPlayer) as exc:
        assemble_character(profile_response(character_ids=[]))
    assert exc.value.membership_id == MEMBERSHIP_ID


def test_ids_without_character_entries():
    with pytest.raises(DecodeError):
        assemble_character(profile_response(characters=[], character_ids=[CHARACTER_ID]))


@pytest.mark.parametrize("emblem,background", [
    ("", "/common/destiny2_content/icons/emblem_bg.jpg"),
    ("/common/destiny2_content/icons/emblem.jpg", "no leading slash.jpg"),
    ("/common/destiny2 content/emblem.jpg", "/common/destiny2_content/icons/emblem_bg.jpg"),
])
def test_bad_emblem_paths(emblem, background):
    characters = [character_json(emblem=emblem, emblem_background=background)]
    with pytest.raises(EmblemImageUrlsMissingOrMalformed):
        assemble_character(profile_response(characters=characters))


def test_missing_fragment_is_decode_error():
    response = profile_response()
    del response["characterEquipment"]
    with pytest.raises(DecodeError, match="characterEquipment"):
        assemble_character(response)


# ── Equipment indexing ───────────────────────────────────

def test_equipment_keeps_weapons_armor_and_subclass():
    character = assemble_character(profile_response())
    tracked = {h for h, _, _, _, _ in LOADOUT} - {EMBLEM[0]}
    assert set(character.equipment) == tracked
    assert character.equipment[SUBCLASS[0]].slot is ItemSlot.SUBCLASS


def test_instances_reindexed_by_item_hash():
    instances = {iid: instance_json() for _, iid, _, _, _ in LOADOUT}
    instances[KINETIC[1]] = instance_json(damage_type=3, power=1260)
    character = assemble_character(profile_response(instances=instances))

    kinetic = character.item_instances[KINETIC[0]]
    assert kinetic.damage_type is DamageType.SOLAR
    assert kinetic.power == 1260
    assert set(character.item_instances) == set(character.equipment)


def test_items_without_instances_are_left_out():
    instances = {iid: instance_json() for _, iid, _, _, _ in LOADOUT if iid != HELMET[1]}
    character = assemble_character(profile_response(instances=instances))
    assert HELMET[0] in character.equipment
    assert HELMET[0] not in character.item_instances


def test_duplicate_item_hash_last_entry_wins():
    items = [equipped_json(h, iid, b) for h, iid, b, _, _ in LOADOUT]
    items.append(equipped_json(KINETIC[0], "6917529100000009999", KINETIC[2], state=4))
    character = assemble_character(profile_response(equipment={CHARACTER_ID: items}))
    assert character.equipment[KINETIC[0]].item_instance_id == "6917529100000009999"


# ── Subclass derivation ──────────────────────────────────

def test_striker_bottom_tree():
    character = assemble_character(profile_response(
        characters=[character_json(class_type=0)],
        talent_grids={SUBCLASS[1]: talent_grid_json(STRIKER_GRID, activated=(16,))}))
    assert character.subclass_name == "Striker"
    assert character.tree is SubclassTree.BOTTOM
    assert character.subclass_path == "Code of the Juggernaut"
    assert character.subclass_super == "Fists of Havok"


def test_no_activated_nodes_is_unknown_tree():
    character = assemble_character(profile_response(
        talent_grids={SUBCLASS[1]: talent_grid_json(activated=())}))
    assert character.subclass_name == "Gunslinger"
    assert character.subclass_tree == "Unknown"
    assert character.subclass_path == MYSTERY


def test_stasis_when_subclass_has_no_talent_grid():
    character = assemble_character(profile_response(talent_grids={}))
    assert character.subclass.element is Element.STASIS
    assert character.subclass_name == "Revenant"
    assert character.subclass_super == "Silence and Squall"
    assert character.tree is SubclassTree.UNKNOWN


def test_stasis_damage_with_unknown_grid():
    instances = {iid: instance_json() for _, iid, _, _, _ in LOADOUT}
    instances[SUBCLASS[1]] = instance_json(damage_type=6, power=None)
    character = assemble_character(profile_response(
        instances=instances,
        talent_grids={SUBCLASS[1]: talent_grid_json(grid_hash=1, activated=())}))
    assert character.subclass_name == "Revenant"


def test_unrecognized_grid_stays_unknown():
    character = assemble_character(profile_response(
        talent_grids={SUBCLASS[1]: talent_grid_json(grid_hash=1)}))
    assert character.subclass.is_unknown
    assert character.subclass_name == MYSTERY


def test_no_subclass_equipped_is_unknown():
    items = [equipped_json(h, iid, b) for h, iid, b, _, _ in LOADOUT if h != SUBCLASS[0]]
    character = assemble_character(profile_response(equipment={CHARACTER_ID: items}))
    assert character.subclass.is_unknown
    assert character.tree is SubclassTree.UNKNOWN


# ── Fireteam ─────────────────────────────────────────────

def test_fireteam_members():
    transitory = {"data": {"partyMembers": [
        {"membershipId": MEMBERSHIP_ID, "displayName": "b3ll"},
        {"membershipId": "4611686018467346412", "displayName": "MalarkeyMaybe"},
    ]}}
    character = assemble_character(profile_response(transitory=transitory))
    names = [m.player.display_name for m in character.fireteam_members]
    assert names == ["b3ll", "MalarkeyMaybe"]
    assert all(m.is_online for m in character.fireteam_members)


def test_malformed_fireteam_is_ignored():
    transitory = {"data": {"partyMembers": [{"displayName": "b3ll"}]}}
    character = assemble_character(profile_response(transitory=transitory))
    assert character.fireteam_members is None


def test_character_equality_by_id_and_subclass():
    first = assemble_character(profile_response())
    second = assemble_character(profile_response(characters=[character_json(light=1300)]))
    assert first == second
    assert hash(first) == hash(second)
    stasis = assemble_character(profile_response(talent_grids={}))
    assert first != stasis
