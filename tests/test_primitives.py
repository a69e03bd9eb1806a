"""Tests for primitive value types and the stable hash."""

from packing import Packer
from valsave.protocol.cursor import ByteCursor
from valsave.protocol.primitives import (
    Quaternion, Vector2, Vector3, ZdoId, stable_hash,
)


def test_stable_hash_empty():
    assert stable_hash("") == 371857150


def test_stable_hash_is_signed_32bit():
    for text in ("prefab", "Player", "piece_workbench", "a" * 100):
        h = stable_hash(text)
        assert -(2 ** 31) <= h < 2 ** 31


def test_stable_hash_deterministic():
    assert stable_hash("prefab") == stable_hash("prefab")
    assert stable_hash("prefab") != stable_hash("Prefab")


def test_stable_hash_odd_and_even_lengths():
    # odd length stops after the first accumulator
    assert stable_hash("ab") != stable_hash("a")
    assert stable_hash("abc") != stable_hash("ab")


def test_stable_hash_stops_at_nul():
    assert stable_hash("ab\0cd") == stable_hash("ab")


def test_zdoid_read():
    cur = ByteCursor(bytes(Packer().zdoid(-5, 42)))
    uid = ZdoId.read(cur)
    assert uid == ZdoId(-5, 42)
    assert str(uid) == "-5:42"
    assert cur.at_end


def test_zdoid_hashable_and_ordered():
    ids = {ZdoId(1, 2), ZdoId(1, 2), ZdoId(1, 3)}
    assert len(ids) == 2
    assert sorted(ids)[0] == ZdoId(1, 2)


def test_vectors_read():
    cur = ByteCursor(bytes(Packer().vec2i(3, -4).vec3(1.0, 2.0, 3.0).quat(0.0, 0.0, 0.0, 1.0)))
    assert Vector2.read_int32(cur) == Vector2(3, -4)
    assert Vector3.read_single(cur) == Vector3(1.0, 2.0, 3.0)
    assert Quaternion.read_single(cur) == Quaternion(0.0, 0.0, 0.0, 1.0)
    assert cur.at_end


def test_vector2_as_dict_key():
    zones = {Vector2(0, 0): "a", Vector2(0, 1): "b"}
    assert zones[Vector2(0, 1)] == "b"


def test_stable_hash_counts_utf16_code_units():
    # U+1F600 is the surrogate pair D83D DE00
    assert stable_hash("\U0001F600") == stable_hash("\ud83d\ude00")
    assert stable_hash("a\U0001F600") == stable_hash("a\ud83d\ude00")
    assert stable_hash("\U0001F600") != stable_hash("\ud83d")
