from __future__ import annotations

import pytest

from organizer_plugin import sections
from organizer_plugin.sections import Category, SectionRegistry, SectionSlot, build_registry, parse_keywords


ORANGE = (255, 170, 0)
PURPLE = (170, 120, 255)


def _slots() -> list[SectionSlot]:
    return [
        SectionSlot("Food", ORANGE, "garden pie, shark, lobster"),
        SectionSlot("  ", PURPLE, "fire rune"),
        SectionSlot(" Runes ", PURPLE, "Fire rune,,  LAW RUNE ,"),
        SectionSlot("", ORANGE, ""),
        SectionSlot("Construction", (100, 220, 100), "Oak plank"),
    ]


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, ()),
        ("", ()),
        ("   ", ()),
        ("shark", ("shark",)),
        ("Shark, Raw SHARK", ("shark", "raw shark")),
        ("a,,b, ,c", ("a", "b", "c")),
        ("rune, rune", ("rune", "rune")),
    ],
)
def test_parse_keywords(raw, expected):
    assert parse_keywords(raw) == expected


def test_build_registry_skips_blank_slots_and_keeps_order():
    registry = build_registry(_slots())

    assert registry.names() == ("Food", "Runes", "Construction")
    runes = registry.categories[1]
    assert runes.name == "Runes"
    assert runes.keywords == ("fire rune", "law rune")


def test_build_registry_is_idempotent():
    assert build_registry(_slots()) == build_registry(_slots())


def test_build_registry_ignores_slots_past_the_fifth():
    slots = [SectionSlot(f"S{index}", ORANGE, "x") for index in range(7)]
    registry = build_registry(slots)
    assert len(registry) == sections.MAX_SECTIONS
    assert registry.names()[-1] == "S4"


def test_empty_registry_is_falsy():
    assert not build_registry([SectionSlot("", ORANGE, "shark")])
    assert not sections.EMPTY_REGISTRY


@pytest.mark.parametrize("item_name", ["Shark", "Raw shark", "sharkskin", "SHARK"])
def test_category_matching_is_case_insensitive_substring(item_name):
    food = Category("Food", ORANGE, ("shark",))
    assert food.matches(item_name)


def test_category_without_keywords_matches_nothing():
    assert not Category("Empty", ORANGE, ()).matches("Shark")
    assert not Category("Food", ORANGE, ("shark",)).matches("")
    assert not Category("Food", ORANGE, ("shark",)).matches(None)


def test_substring_matching_includes_partial_words():
    # "rune" is contained in "prune"; matching is plain containment.
    runes = Category("Runes", PURPLE, ("rune",))
    assert runes.matches("Prune")


def test_first_configured_section_wins():
    registry = sections.registry_from_values(
        [
            ("A", ORANGE, "rune"),
            ("B", PURPLE, "fire rune"),
        ]
    )
    assert registry.find_match("Fire rune").name == "A"
    assert registry.match_index("Fire rune") == 0
    assert registry.find_match("Bones") is None


def test_color_markers():
    food = Category("Food", ORANGE, ("shark",))
    assert food.color_tag() == "<col=ffaa00>"
    assert food.colorize("Shark") == "<col=ffaa00>Shark</col>"
    assert food.separator_label() == "<col=ffaa00>-- Food --</col>"
    assert sections.color_tag((0, 8, 255)) == "<col=0008ff>"


def test_registry_is_immutable():
    registry = build_registry(_slots())
    with pytest.raises(Exception):
        registry.categories = ()  # type: ignore[misc]
    assert isinstance(registry, SectionRegistry)
