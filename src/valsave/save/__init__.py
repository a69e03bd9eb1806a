from .character import (
    Character, MapData, Pin, PlayerStats, WorldPlayerData,
    decode_character, decode_character_record, decode_map_data,
)
from .player import Food, Inventory, Item, Player, Skill, decode_player
from .zdo import WorldObject, ZdoRegistry, decode_registry, decode_zdo
from .world import (
    LocationInstance, RandEventSystem, World, WorldMeta, ZoneSystem,
    ZONE_SIZE, decode_world, decode_world_meta, zone_of,
)
from .export import to_jsonable

__all__ = [
    "Character", "MapData", "Pin", "PlayerStats", "WorldPlayerData",
    "decode_character", "decode_character_record", "decode_map_data",
    "Food", "Inventory", "Item", "Player", "Skill", "decode_player",
    "WorldObject", "ZdoRegistry", "decode_registry", "decode_zdo",
    "LocationInstance", "RandEventSystem", "World", "WorldMeta", "ZoneSystem",
    "ZONE_SIZE", "decode_world", "decode_world_meta", "zone_of",
    "to_jsonable",
]
