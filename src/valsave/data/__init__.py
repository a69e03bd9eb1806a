from .tables import (
    LookupTables, Biome, ObjectType, PinType, SkillType,
    load_tables, default_tables, prefab_names,
)

__all__ = [
    "LookupTables", "Biome", "ObjectType", "PinType", "SkillType",
    "load_tables", "default_tables", "prefab_names",
]
