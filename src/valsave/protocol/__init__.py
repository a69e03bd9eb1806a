"""
valsave — Binary protocol layer

    cursor.py      — ByteCursor: bounded typed reads, nested blob cursors
    primitives.py  — Vector2/Vector3/Quaternion, ZdoId, stable_hash
    records.py     — version gates, FieldDef tables, composite readers
    errors.py      — DecodeError hierarchy, UnresolvedReference
"""

from .cursor import ByteCursor
from .errors import (
    DecodeError, InvalidEncoding, MalformedLength, TruncatedInput, UnresolvedReference,
)
from .primitives import Quaternion, Vector2, Vector3, ZdoId, stable_hash

__all__ = [
    "ByteCursor",
    "DecodeError", "InvalidEncoding", "MalformedLength", "TruncatedInput", "UnresolvedReference",
    "Quaternion", "Vector2", "Vector3", "ZdoId", "stable_hash",
]
