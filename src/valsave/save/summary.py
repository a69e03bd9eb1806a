"""
Human-readable summaries of decoded saves, shared by the CLI and the TUI.
"""

from __future__ import annotations

import math

from valsave.save.character import Character
from valsave.save.world import World, WorldMeta


def _fmt_time(seconds: float) -> str:
    if not math.isfinite(seconds):
        return str(seconds)
    m, s = divmod(int(seconds), 60)
    h, m = divmod(m, 60)
    if h:
        return f"{h}h{m:02d}m{s:02d}s"
    return f"{m}m{s:02d}s"


def character_lines(c: Character) -> list[str]:
    lines = [
        f"Character:       {c.player_name}  (id {c.player_id})",
        f"Format version:  {c.version}",
        f"Start seed:      {c.start_seed or '-'}",
        f"Stats:           kills={c.stats.kills} deaths={c.stats.deaths} "
        f"crafts={c.stats.crafts} builds={c.stats.builds}",
        f"Checksum:        {len(c.checksum)} bytes",
        "",
        f"Worlds visited:  {len(c.worlds)}",
    ]
    for uid, w in c.worlds.items():
        explored = "-"
        pins = 0
        if w.map_data is not None:
            total = w.map_data.texture_size ** 2
            explored = f"{w.map_data.explored_count}/{total}"
            pins = len(w.map_data.pins)
        lines.append(f"  {uid:<22d} home={w.home_point} explored={explored} pins={pins}")

    p = c.player
    if p is None:
        lines.append("")
        lines.append("Player payload:  absent")
        return lines

    lines += [
        "",
        f"Player version:  {p.version}",
        f"Health:          {p.health:.0f}/{p.max_health:.0f}  stamina {p.stamina:.0f}",
        f"Guardian power:  {p.guardian_power or '-'}",
        f"Inventory:       {len(p.inventory)} items ({len(p.inventory.equipped())} equipped)",
        f"Recipes:         {len(p.known_recipes)}",
        f"Materials:       {len(p.known_materials)}",
        f"Trophies:        {len(p.trophies)}",
        f"Biomes:          {', '.join(n or '?' for n in p.known_biome_names) or '-'}",
        f"Foods:           {', '.join(f.name for f in p.foods) or '-'}",
        "",
        "Skills:",
    ]
    for s in sorted(p.skills.values(), key=lambda s: -s.level):
        lines.append(f"  {s.name or s.kind!s:<14s} {s.level:6.2f}")
    if p.unresolved:
        lines.append("")
        lines.append(f"Unresolved names: {len(p.unresolved)}")
    return lines


def world_lines(w: World, top: int = 15) -> list[str]:
    zs = w.zone_system
    ev = w.rand_event_system
    lines = [
        f"Format version:  {w.version}",
        f"Game time:       {_fmt_time(w.net_time)}",
        "",
        f"Objects:         {len(w.zdos.objects)}",
        f"Deleted:         {len(w.zdos.dead)}",
        f"Next uid:        {w.zdos.next_uid}",
        "",
        f"Generated zones: {len(zs.generated_zones)}",
        f"Locations:       {len(zs.locations)} "
        f"({sum(1 for loc in zs.locations.values() if loc.placed)} placed)",
        f"Global keys:     {', '.join(sorted(zs.global_keys)) or '-'}",
        "",
        f"Random event:    {ev.event_name or '-'}"
        + (f" at {ev.event_position} ({ev.event_time:.0f}s)" if ev.active else ""),
        "",
        "Prefabs:",
    ]
    for name, count in list(w.zdos.prefab_counts().items())[:top]:
        lines.append(f"  {name:<28s} {count:>7d}")
    return lines


def meta_lines(m: WorldMeta) -> list[str]:
    return [
        f"World:           {m.name}",
        f"Format version:  {m.version}",
        f"Seed:            {m.seed_name} ({m.seed})",
        f"World uid:       {m.uid}",
        f"Generator:       {m.world_gen_version}",
    ]


def summary_lines(obj: Character | World | WorldMeta) -> list[str]:
    match obj:
        case Character():
            return character_lines(obj)
        case World():
            return world_lines(obj)
        case WorldMeta():
            return meta_lines(obj)
        case _:
            raise TypeError(f"nothing to summarise for {type(obj).__name__}")
