"""
valsave — Command line entry point

Usage:
  valsave character Hero.fch                     # summary
  valsave character a.fch b.fch c.fch --json     # several files at once
  valsave world Midgard.db --top 30              # object counts per prefab
  valsave world Midgard.db --tui                 # interactive inspector
  valsave meta Midgard.fwl --json
  valsave world Midgard.db --prefabs mods.json   # extra prefab names
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from valsave import __version__
from valsave.config import DecoderConfig
from valsave.protocol.errors import DecodeError
from valsave.save.character import Character, decode_character
from valsave.save.export import to_jsonable
from valsave.save.summary import summary_lines, world_lines
from valsave.save.world import World, WorldMeta, decode_world, decode_world_meta

log = logging.getLogger("valsave")


# ---- File loaders ----

def load_character(path: Path | str, config: DecoderConfig | None = None) -> Character:
    return decode_character(Path(path).read_bytes(), config)


def load_world(path: Path | str, config: DecoderConfig | None = None) -> World:
    return decode_world(Path(path).read_bytes(), config)


def load_world_meta(path: Path | str, config: DecoderConfig | None = None) -> WorldMeta:
    return decode_world_meta(Path(path).read_bytes(), config)


LOADERS = {
    "character": load_character,
    "world": load_world,
    "meta": load_world_meta,
}


def describe_error(path: Path | str, err: DecodeError) -> str:
    """One-line report: file, error type, offset and field path."""
    offset = "?" if err.offset is None else str(err.offset)
    field = err.field or "?"
    return f"{path}: {type(err).__name__} at offset {offset} in field {field} ({err.message})"


# ---- Output ----

def _print(obj, args: argparse.Namespace) -> None:
    if args.json:
        print(json.dumps(to_jsonable(obj, full=args.full), indent=2))
    elif isinstance(obj, World):
        print("\n".join(world_lines(obj, top=args.top)))
    else:
        print("\n".join(summary_lines(obj)))


def _decode_all(kind: str, paths: list[Path], config: DecoderConfig) -> tuple[list, int]:
    """Decode every path; returns (results in path order, failure count).

    Character files are read on a small thread pool so file I/O overlaps.
    Decoding itself holds the GIL and runs one file at a time.
    """
    loader = LOADERS[kind]
    failures = 0
    results = []

    def _one(path: Path):
        log.debug("decoding %s %s", kind, path)
        return loader(path, config)

    workers = min(len(paths), 8) if kind == "character" else 1
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="decode") as pool:
        futures = [(path, pool.submit(_one, path)) for path in paths]
        for path, fut in futures:
            try:
                results.append((path, fut.result()))
            except DecodeError as e:
                log.debug("decode failed: %s", e)
                print(describe_error(path, e), file=sys.stderr)
                failures += 1
            except OSError as e:
                print(f"{path}: {e.strerror or e}", file=sys.stderr)
                failures += 1
    return results, failures


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="valsave",
        description="Decode character, world and world-metadata save files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--json", action="store_true",
                        help="Print the decoded tree as JSON")
    common.add_argument("--full", action="store_true",
                        help="With --json, include explored-area masks in full")
    common.add_argument("--tui", action="store_true",
                        help="Open the interactive inspector instead of printing")
    common.add_argument("--encoding", type=str, default=None,
                        help="Text encoding for strings (default: utf-8)")
    common.add_argument("--prefabs", type=Path, default=None,
                        help="JSON file with extra prefab names")
    common.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging")

    sub = parser.add_subparsers(dest="kind", required=True)
    p = sub.add_parser("character", parents=[common], help="Character file (.fch)")
    p.add_argument("paths", type=Path, nargs="+")
    p = sub.add_parser("world", parents=[common], help="World database (.db)")
    p.add_argument("paths", type=Path, nargs=1)
    p.add_argument("--top", type=int, default=15,
                   help="Prefab rows in the summary (default: 15)")
    p = sub.add_parser("meta", parents=[common], help="World metadata (.fwl)")
    p.add_argument("paths", type=Path, nargs=1)

    args = parser.parse_args(argv)

    # Logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        config = DecoderConfig.from_options(encoding=args.encoding, extra_prefabs=args.prefabs)
    except (OSError, ValueError, LookupError) as e:
        log.error("Bad decoder options: %s", e)
        return 1

    results, failures = _decode_all(args.kind, args.paths, config)

    if args.tui and results:
        from valsave.dashboard.app import SaveInspector

        path, obj = results[0]
        SaveInspector(obj, title=str(path)).run()
        return 1 if failures else 0

    if args.json and len(results) > 1:
        trees = {str(path): to_jsonable(obj, full=args.full) for path, obj in results}
        print(json.dumps(trees, indent=2))
        results = []

    for i, (path, obj) in enumerate(results):
        if len(results) > 1:
            if i:
                print()
            print(f"== {path} ==")
        _print(obj, args)

    if failures:
        log.error("%d of %d file(s) failed to decode", failures, len(args.paths))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
