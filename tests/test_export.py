"""Tests for JSON export and text summaries."""

import json
import math

from test_character import _make_character_file, _make_character_record, _make_map_data, _make_world_entry
from test_player import _make_player
from test_world import _make_meta, _make_world
from test_zdo import _make_registry, _make_zdo
from valsave.protocol.primitives import Vector2, Vector3, ZdoId, stable_hash
from valsave.save.character import decode_character
from valsave.save.export import MAX_INLINE_BYTES, to_jsonable
from valsave.save.summary import summary_lines
from valsave.save.world import decode_world, decode_world_meta


def _world(config):
    reg = _make_registry(
        objects=[(ZdoId(-7, 3), _make_zdo(26, prefab=stable_hash("Boar")))],
        dead=[(ZdoId(-7, 4), 11)],
    )
    return decode_world(_make_world(26, registry=reg, locations=[("Dolmen", (0.0, 0.0, 70.0), True)]), config)


def test_world_export_is_json(config):
    out = to_jsonable(_world(config))
    text = json.dumps(out)
    assert json.loads(text)["version"] == 26
    assert "-7:3" in out["zdos"]["objects"]
    assert out["zdos"]["dead"] == {"-7:4": 11}
    assert "0,1" in out["zone_system"]["locations"]
    assert out["zone_system"]["global_keys"] == ["defeated_eikthyr"]


def test_character_export_is_json(config):
    record = _make_character_record(
        30, worlds={5: _make_world_entry(30, _make_map_data())}, player=_make_player(24),
    )
    out = to_jsonable(decode_character(_make_character_file(record), config))
    json.dumps(out)
    assert out["checksum"] == "deadbeef"
    assert out["worlds"]["5"]["map_data"]["explored"] == "01000001"
    assert out["player"]["version"] == 24


def test_vectors_become_dicts():
    assert to_jsonable(Vector3(1.0, 2.0, 3.0)) == {"x": 1.0, "y": 2.0, "z": 3.0}
    assert to_jsonable({Vector2(1, -2): "a"}) == {"1,-2": "a"}
    assert to_jsonable(ZdoId(1, 2)) == "1:2"


def test_large_bytes_summarised():
    raw = b"\x00\x01" * MAX_INLINE_BYTES
    assert to_jsonable(raw) == {"size": len(raw), "nonzero": MAX_INLINE_BYTES}
    assert to_jsonable(raw, full=True) == raw.hex()


def test_frozensets_sorted():
    assert to_jsonable(frozenset({"b", "a"})) == ["a", "b"]


# ---- summaries ----

def test_summaries(config):
    lines = summary_lines(_world(config))
    assert any("Objects:" in line and "1" in line for line in lines)
    assert any("Boar" in line for line in lines)

    meta_lines = summary_lines(decode_world_meta(_make_meta(26)))
    assert any("Midgard" in line for line in meta_lines)

    record = _make_character_record(30, player=_make_player(24, skills=[(1, 3.0)]))
    char_lines = summary_lines(decode_character(_make_character_file(record), config))
    assert any("Ragnar" in line for line in char_lines)
    assert any("Swords" in line for line in char_lines)


def test_non_finite_values_export_and_summarise():
    data = _make_world(26, net_time=math.nan, locations=[("Crypt", (math.inf, 0.0, 0.0), True)])
    w = decode_world(data)
    out = to_jsonable(w)
    assert out["zone_system"]["locations"]["-"]["name"] == "Crypt"
    json.dumps(out)
    assert any(line.startswith("Game time:") and "nan" in line for line in summary_lines(w))
