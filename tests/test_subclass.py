"""Tests for subclass.py: identity, tree selection and display names."""

import pytest

from raiddad.hashes import CharacterClass, Element
from raiddad.subclass import MYSTERY, Subclass, SubclassTree


@pytest.mark.parametrize("nodes,tree", [
    ([12], SubclassTree.TOP),
    ([11, 14], SubclassTree.TOP),
    ([16], SubclassTree.BOTTOM),
    ([22], SubclassTree.MIDDLE),
    ([1, 2, 3], SubclassTree.UNKNOWN),
    ([], SubclassTree.UNKNOWN),
    ([19], SubclassTree.UNKNOWN),
])
def test_tree_from_nodes(nodes, tree):
    assert SubclassTree.from_nodes(nodes) is tree


def test_tree_bands_checked_top_first():
    # Bad data can activate nodes in more than one band
    assert SubclassTree.from_nodes([22, 16, 12]) is SubclassTree.TOP
    assert SubclassTree.from_nodes([22, 16]) is SubclassTree.BOTTOM


def test_unknown_tree_value():
    assert SubclassTree.UNKNOWN.value == "Unknown"


def test_gunslinger():
    gunslinger = Subclass.from_talent_grid_hash(3745224476)
    assert gunslinger == Subclass(Element.SOLAR, CharacterClass.HUNTER)
    assert gunslinger.name == "Gunslinger"
    assert SubclassTree.TOP.path_for(gunslinger) == "Way of the Outlaw"
    assert SubclassTree.TOP.super_for(gunslinger) == "Golden Gun"
    assert SubclassTree.BOTTOM.super_for(gunslinger) == "Golden Gun"
    assert SubclassTree.MIDDLE.path_for(gunslinger) == "Way of a Thousand Cuts"
    assert SubclassTree.MIDDLE.super_for(gunslinger) == "Blade Barrage"


def test_unknown_subclass_is_a_mystery():
    unknown = Subclass.from_talent_grid_hash(None)
    assert unknown.is_unknown
    assert unknown == Subclass.unknown()
    assert unknown.name == MYSTERY
    assert SubclassTree.TOP.path_for(unknown) == MYSTERY
    assert SubclassTree.TOP.super_for(unknown) == MYSTERY


def test_stasis_subclasses():
    assert Subclass.stasis(CharacterClass.HUNTER).name == "Revenant"
    assert Subclass.stasis(CharacterClass.TITAN).name == "Behemoth"
    warlock = Subclass.stasis(CharacterClass.WARLOCK)
    assert warlock.name == "Shadebinder"
    assert SubclassTree.UNKNOWN.super_for(warlock) == "Winter's Wrath"
    # No tree paths for Stasis
    assert SubclassTree.UNKNOWN.path_for(warlock) == MYSTERY
    assert SubclassTree.MIDDLE.super_for(warlock) == "Winter's Wrath"
