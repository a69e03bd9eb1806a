"""Tests for the embedded player payload, inventory and skills."""

import pytest

from packing import Packer
from valsave.protocol.cursor import ByteCursor
from valsave.protocol.errors import TruncatedInput, UnresolvedReference
from valsave.protocol.primitives import Vector2, Vector3
from valsave.save.player import decode_inventory, decode_player, decode_skills


def _make_inventory(version: int, items: list[dict] = ()) -> Packer:
    p = Packer().i32(version).i32(len(items))
    for it in items:
        p.string(it.get("name", "Wood")).i32(it.get("stack", 1)).f32(it.get("durability", 100.0))
        p.vec2i(*it.get("pos", (0, 0))).bool(it.get("equipped", False))
        if version >= 101:
            p.i32(it.get("quality", 2))
        if version >= 102:
            p.i32(it.get("variant", 0))
        if version >= 103:
            p.i64(it.get("crafter_id", 0)).string(it.get("crafter_name", ""))
    return p


def _make_skills(version: int, skills: list[tuple[int, float]] = ()) -> Packer:
    p = Packer().i32(version).i32(len(skills))
    for kind, level in skills:
        p.i32(kind).f32(level)
        if version >= 2:
            p.f32(0.5)
    return p


def _make_player(
    version: int,
    *,
    items: list[dict] = (),
    inventory_version: int = 103,
    foods: list[tuple[str, float, float]] = (),
    skills: list[tuple[int, float]] = (),
    biomes: list[int] = (),
) -> Packer:
    """Player payload with every gated field filled for `version`."""
    p = Packer().i32(version)
    if version >= 7:
        p.f32(120.0)
    p.f32(80.0)
    if version >= 10:
        p.f32(55.0)
    if version >= 8:
        p.bool(True)
    if version >= 20:
        p.f32(12.0)
    if version >= 23:
        p.string("GP_Eikthyr")
    if version >= 24:
        p.f32(300.0)
    if version == 2:
        p.zdoid(1, 1)
    p.raw(bytes(_make_inventory(inventory_version, items)))
    p.strings(["Recipe_Club"])
    if version < 15:
        p.strings(["piece_workbench"])
    else:
        p.i32(1).string("piece_workbench").i32(2)
    p.strings(["Wood", "Stone"])
    if version < 19 or version >= 21:
        p.strings(["intro"])
    if version >= 6:
        p.strings(["unique"])
    if version >= 9:
        p.strings(["TrophyBoar"])
    if version >= 18:
        p.i32(len(biomes))
        for b in biomes:
            p.i32(b)
    if version >= 22:
        p.i32(1).string("rune").string("text")
    if version >= 4:
        p.string("Beard5").string("Hair3")
    if version >= 5:
        p.vec3(0.1, 0.2, 0.3).vec3(0.4, 0.5, 0.6)
    if version >= 11:
        p.i32(1)
    if version >= 12:
        p.i32(len(foods))
        for name, health, stamina in foods:
            if version >= 14:
                p.string(name).f32(health)
                if version >= 16:
                    p.f32(stamina)
            else:
                for _ in range(7):
                    p.f32(1.0)
                if version >= 13:
                    p.f32(1.0)
    if version >= 17:
        p.raw(bytes(_make_skills(2, skills)))
    return p


def _decode(p: Packer, config=None):
    return decode_player(ByteCursor(bytes(p)), config)


# ---- inventory ----

def test_inventory_current():
    data = _make_inventory(103, [
        {"name": "AxeBronze", "stack": 1, "pos": (2, 1), "equipped": True,
         "quality": 3, "variant": 1, "crafter_id": 77, "crafter_name": "Ulf"},
    ])
    inv = decode_inventory(ByteCursor(bytes(data)))
    assert inv.version == 103
    item = inv.items[0]
    assert item.name == "AxeBronze"
    assert item.pos == Vector2(2, 1)
    assert item.quality == 3
    assert item.variant == 1
    assert item.crafter_id == 77
    assert item.crafter_name == "Ulf"
    assert inv.equipped() == [item]


def test_inventory_old_version_defaults():
    cur = ByteCursor(bytes(_make_inventory(100, [{"name": "Wood", "stack": 20}])))
    inv = decode_inventory(cur)
    item = inv.items[0]
    assert item.stack == 20
    assert item.quality == 1
    assert item.variant == 0
    assert item.crafter_id == 0
    assert item.crafter_name == ""
    assert cur.at_end


def test_inventory_empty():
    inv = decode_inventory(ByteCursor(bytes(_make_inventory(103))))
    assert len(inv) == 0


# ---- skills ----

def test_skills_keyed_by_kind_and_named(config):
    cur = ByteCursor(bytes(_make_skills(2, [(1, 10.0), (100, 5.0)])))
    skills = decode_skills(cur, config)
    assert skills[1].name == "Swords"
    assert skills[100].name == "Jump"
    assert skills[1].accumulator == 0.5


def test_skills_version_1_has_no_accumulator(config):
    cur = ByteCursor(bytes(_make_skills(1, [(7, 3.0)])))
    skills = decode_skills(cur, config)
    assert skills[7].accumulator == 0.0
    assert cur.at_end


def test_skills_duplicate_overwrites(config):
    cur = ByteCursor(bytes(_make_skills(2, [(1, 10.0), (1, 20.0)])))
    assert decode_skills(cur, config)[1].level == 20.0


def test_skills_unknown_kind(config):
    unresolved = []
    skills = decode_skills(ByteCursor(bytes(_make_skills(2, [(55, 1.0)]))), config, unresolved)
    assert skills[55].name is None
    assert unresolved == [UnresolvedReference("skill", 55)]


# ---- player ----

def test_player_current_version(config):
    p = _make_player(
        24,
        items=[{"name": "Club"}],
        foods=[("CookedMeat", 30.0, 10.0)],
        skills=[(1, 12.0)],
        biomes=[1, 8],
    )
    player = _decode(p, config)
    assert player.version == 24
    assert player.max_health == 120.0
    assert player.health == 80.0
    assert player.stamina == 55.0
    assert player.first_spawn is True
    assert player.time_since_death == 12.0
    assert player.guardian_power == "GP_Eikthyr"
    assert player.guardian_power_cooldown == 300.0
    assert player.inventory.items[0].name == "Club"
    assert player.known_recipes == ("Recipe_Club",)
    assert player.known_stations == {"piece_workbench": 2}
    assert player.known_materials == ("Wood", "Stone")
    assert player.shown_tutorials == ("intro",)
    assert player.trophies == ("TrophyBoar",)
    assert player.known_biomes == (1, 8)
    assert player.known_biome_names == ("Meadows", "BlackForest")
    assert player.known_texts == {"rune": "text"}
    assert player.beard == "Beard5"
    assert player.player_model == 1
    assert player.foods[0].name == "CookedMeat"
    assert player.foods[0].stamina == 10.0
    assert player.skill("swords").level == 12.0
    assert player.unresolved == ()


def test_player_version_2_skips_legacy_zdoid():
    player = _decode(_make_player(2))
    assert player.max_health == 0.0
    assert player.stamina == 0.0
    assert player.first_spawn is False
    assert player.beard == ""
    assert player.skin_color == Vector3(0.0, 0.0, 0.0)
    assert player.known_stations == {}
    assert player.shown_tutorials == ("intro",)
    assert player.foods == ()
    assert player.skills == {}


def test_player_legacy_stations_discarded():
    player = _decode(_make_player(14, foods=[("Honey", 20.0, 5.0)]))
    assert player.known_stations == {}
    assert player.known_materials == ("Wood", "Stone")
    assert player.foods[0].name == "Honey"
    assert player.foods[0].stamina == 0.0


@pytest.mark.parametrize("version", [19, 20])
def test_player_tutorials_absent_between_19_and_20(version):
    player = _decode(_make_player(version))
    assert player.shown_tutorials == ()
    assert player.uniques == ("unique",)


@pytest.mark.parametrize("version", [12, 13])
def test_player_legacy_food_block_discarded(version):
    player = _decode(_make_player(version, foods=[("x", 0.0, 0.0), ("y", 0.0, 0.0)]))
    assert player.foods == ()
    assert player.player_model == 1


def test_player_unknown_biome(config):
    player = _decode(_make_player(18, biomes=[4096]), config)
    assert player.known_biome_names == (None,)
    assert UnresolvedReference("biome", 4096) in player.unresolved


def test_player_consumes_exactly_its_bytes():
    for version in (3, 9, 15, 21, 24):
        cur = ByteCursor(bytes(_make_player(version, items=[{}], skills=[(2, 1.0)])))
        decode_player(cur)
        assert cur.at_end, version


def test_player_truncated():
    data = bytes(_make_player(24))[:-3]
    with pytest.raises(TruncatedInput) as exc:
        decode_player(ByteCursor(data))
    assert exc.value.field.startswith("skills")


def test_player_deterministic(config):
    data = bytes(_make_player(24, items=[{}], skills=[(1, 1.0)], biomes=[2]))
    assert decode_player(ByteCursor(data), config) == decode_player(ByteCursor(data), config)


def test_player_maps_read_only(config):
    player = _decode(_make_player(24, skills=[(1, 12.0)]), config)
    with pytest.raises(TypeError):
        player.known_stations["forge"] = 1
    with pytest.raises(TypeError):
        player.skills[2] = player.skills[1]
    assert player.known_stations == {"piece_workbench": 2}
