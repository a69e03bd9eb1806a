"""
valsave Inspector — Panel Widgets

Three panels for the TUI inspector:
1. SummaryPanel — headline numbers for the loaded file
2. TreePanel    — the full decoded tree, expanded lazily
3. ObjectPanel  — world objects table + property detail (world files only)
"""

from __future__ import annotations

from typing import Any

from rich.text import Text
from textual.containers import Vertical
from textual.widgets import DataTable, Static, Tree

from valsave.save.export import to_jsonable
from valsave.save.summary import summary_lines
from valsave.save.world import World, zone_of
from valsave.save.zdo import WorldObject

# Children shown per tree node before truncating
MAX_CHILDREN = 500
# Rows in the objects table
MAX_OBJECT_ROWS = 1000


# ---- Pure helpers (no widgets) ----

def child_entries(value: Any) -> list[tuple[str, Any]]:
    """(label, value) pairs below a JSON-like container; [] for scalars."""
    if isinstance(value, dict):
        return [(str(k), v) for k, v in value.items()]
    if isinstance(value, list):
        return [(f"[{i}]", v) for i, v in enumerate(value)]
    return []


def node_label(key: str, value: Any) -> Text:
    text = Text()
    text.append(key, style="bold")
    if isinstance(value, dict):
        text.append(f"  {{{len(value)}}}", style="bright_black")
    elif isinstance(value, list):
        text.append(f"  [{len(value)}]", style="bright_black")
    elif isinstance(value, str):
        text.append(f" = {value!r}", style="green")
    elif value is None:
        text.append(" = null", style="dim")
    else:
        text.append(f" = {value}", style="cyan")
    return text


def object_rows(world: World, limit: int = MAX_OBJECT_ROWS) -> list[tuple[str, ...]]:
    """Table rows for the first `limit` world objects, ordered by id."""
    rows = []
    for uid in sorted(world.zdos.objects)[:limit]:
        o = world.zdos.objects[uid]
        zone = zone_of(o.position)
        rows.append((
            str(uid),
            o.prefab_name or str(o.prefab),
            str(o.position),
            "-" if zone is None else f"{zone.x},{zone.y}",
            str(o.property_count()),
            str(o.data_revision),
        ))
    return rows


def object_detail(o: WorldObject) -> list[str]:
    lines = [
        f"{o.uid}  {o.prefab_name or o.prefab}  kind={o.kind_name or o.kind}"
        f"  persistent={o.persistent} distant={o.distant}",
        f"  pos={o.position} rot={o.rotation} sector={o.sector}",
    ]
    for label, table in (
        ("floats", o.floats), ("vec3s", o.vec3s), ("quats", o.quats),
        ("ints", o.ints), ("longs", o.longs), ("strings", o.strings),
    ):
        if table:
            shown = ", ".join(f"{k}={v}" for k, v in list(table.items())[:8])
            more = f" (+{len(table) - 8})" if len(table) > 8 else ""
            lines.append(f"  {label}: {shown}{more}")
    return lines


# ---- 1. Summary Panel ----

class SummaryPanel(Vertical):
    """Headline numbers for the loaded save."""

    def compose(self):
        yield Static("Loading...", id="summary-text")

    def show(self, obj: Any) -> None:
        self.query_one("#summary-text", Static).update("\n".join(summary_lines(obj)))


# ---- 2. Tree Panel ----

class TreePanel(Vertical):
    """Decoded tree; children are added when a node is first expanded."""

    def compose(self):
        yield Tree("save", id="save-tree")

    def show(self, obj: Any) -> None:
        tree: Tree = self.query_one("#save-tree", Tree)
        tree.clear()
        tree.root.data = to_jsonable(obj)
        self._populate(tree.root)
        tree.root.expand()

    def _populate(self, node) -> None:
        entries = child_entries(node.data)
        for key, value in entries[:MAX_CHILDREN]:
            if child_entries(value):
                node.add(node_label(key, value), data=value, allow_expand=True)
            else:
                node.add_leaf(node_label(key, value), data=value)
        if len(entries) > MAX_CHILDREN:
            node.add_leaf(Text(f"... {len(entries) - MAX_CHILDREN} more", style="dim"))

    def on_tree_node_expanded(self, event: Tree.NodeExpanded) -> None:
        node = event.node
        if not node.children and child_entries(node.data):
            self._populate(node)


# ---- 3. Object Panel ----

class ObjectPanel(Vertical):
    """World objects table with per-object property detail."""

    def __init__(self) -> None:
        super().__init__()
        self._world: World | None = None

    def compose(self):
        yield Static("", id="object-summary")
        table = DataTable(id="object-table")
        table.cursor_type = "row"
        yield table
        yield Static("Select an object to see its properties", id="object-detail")

    def on_mount(self) -> None:
        table: DataTable = self.query_one("#object-table", DataTable)
        table.add_columns("ID", "Prefab", "Position", "Zone", "Props", "Revision")

    def show(self, obj: Any) -> None:
        summary: Static = self.query_one("#object-summary", Static)
        table: DataTable = self.query_one("#object-table", DataTable)
        table.clear()
        if not isinstance(obj, World):
            summary.update(" No world objects in this file")
            return
        self._world = obj
        n = len(obj.zdos.objects)
        summary.update(
            f" Objects: {n} | deleted: {len(obj.zdos.dead)}"
            + (f" | showing first {MAX_OBJECT_ROWS}" if n > MAX_OBJECT_ROWS else "")
        )
        for row in object_rows(obj):
            table.add_row(*row, key=row[0])

    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        if self._world is None or not event.row_key or not event.row_key.value:
            return
        detail: Static = self.query_one("#object-detail", Static)
        user_id, _, seq = event.row_key.value.partition(":")
        o = next(
            (o for uid, o in self._world.zdos.objects.items()
             if str(uid.user_id) == user_id and str(uid.id) == seq),
            None,
        )
        detail.update("\n".join(object_detail(o)) if o else "Object not found")
