"""Tests for the inspector's table and tree helpers."""

import math

from test_world import _make_world
from test_zdo import _make_registry, _make_zdo
from valsave.dashboard.widgets import child_entries, node_label, object_detail, object_rows
from valsave.protocol.primitives import ZdoId, stable_hash
from valsave.save.world import decode_world


def test_child_entries():
    assert child_entries({"a": 1, "b": [2]}) == [("a", 1), ("b", [2])]
    assert child_entries(["x", "y"]) == [("[0]", "x"), ("[1]", "y")]
    assert child_entries(5) == []
    assert child_entries("text") == []


def test_node_label():
    assert node_label("name", "Ragnar").plain == "name = 'Ragnar'"
    assert node_label("items", [1, 2, 3]).plain == "items  [3]"
    assert node_label("stats", {"kills": 1}).plain == "stats  {1}"
    assert node_label("player", None).plain == "player = null"
    assert node_label("version", 30).plain == "version = 30"


def test_object_rows_sorted_and_labelled(config):
    reg = _make_registry(objects=[
        (ZdoId(2, 1), _make_zdo(26, prefab=stable_hash("Boar"))),
        (ZdoId(1, 5), _make_zdo(26, prefab=999)),
    ])
    world = decode_world(_make_world(26, registry=reg), config)
    rows = object_rows(world)
    assert [r[0] for r in rows] == ["1:5", "2:1"]
    assert rows[0][1] == "999"
    assert rows[1][1] == "Boar"
    # position (10, 20, 30) -> zone (0, 0)
    assert rows[1][3] == "0,0"
    assert object_rows(world, limit=1) == rows[:1]


def test_object_detail(config):
    health = stable_hash("health")
    reg = _make_registry(objects=[(ZdoId(1, 1), _make_zdo(26, prefab=stable_hash("Boar"), floats={health: 5.0}))])
    world = decode_world(_make_world(26, registry=reg), config)
    lines = object_detail(world.zdos.objects[ZdoId(1, 1)])
    assert lines[0].startswith("1:1  Boar  kind=Default")
    assert any(line.startswith("  floats:") for line in lines)


def test_object_rows_non_finite_position(config):
    reg = _make_registry(objects=[(ZdoId(1, 1), _make_zdo(26, position=(math.nan, 0.0, math.inf)))])
    world = decode_world(_make_world(26, registry=reg), config)
    assert object_rows(world)[0][3] == "-"
