"""
valsave — Save-file decoder for a sandbox survival game.

Reads character (.fch), world database (.db) and world metadata (.fwl)
files into frozen dataclass trees.

Components:
    protocol/   — byte cursor, primitive types, versioned field tables, errors
    save/       — character, player, world object and world decoders, JSON export
    data/       — static lookup tables (prefabs, biomes, skills, ...)
    dashboard/  — textual TUI inspector
    cli.py      — `valsave` command line entry point
"""

__version__ = "0.1.0"
