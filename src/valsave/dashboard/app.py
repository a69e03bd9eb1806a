"""
valsave Inspector — Textual TUI App

Browse one decoded save file in the terminal.

Tabs:
  s — summary
  t — full decoded tree (lazy)
  o — world objects (world database files)
  x — export the decoded tree to JSON next to the current directory
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Footer, Static, TabbedContent, TabPane

from valsave.dashboard.widgets import ObjectPanel, SummaryPanel, TreePanel
from valsave.save.export import to_jsonable


class SaveInspector(App):
    """Read-only inspector for a decoded save."""

    CSS = """
    #header-bar { height: 1; background: $boost; }
    #status-label { width: 1fr; }
    #object-table { height: 1fr; }
    #object-detail { height: auto; max-height: 12; }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("s", "switch_tab('summary')", "Summary", show=True),
        Binding("t", "switch_tab('tree')", "Tree", show=True),
        Binding("o", "switch_tab('objects')", "Objects", show=True),
        Binding("x", "export_json", "Export"),
    ]

    def __init__(self, decoded: Any, title: str = "save"):
        super().__init__()
        self.decoded = decoded
        self._title = title

    def compose(self) -> ComposeResult:
        with Horizontal(id="header-bar"):
            yield Static(f"valsave | {self._title}", id="status-label")
            yield Static(type(self.decoded).__name__, id="kind-label")
        with TabbedContent(id="tabs"):
            with TabPane("Summary", id="summary"):
                yield SummaryPanel()
            with TabPane("Tree", id="tree"):
                yield TreePanel()
            with TabPane("Objects", id="objects"):
                yield ObjectPanel()
        yield Footer()

    def on_mount(self) -> None:
        self.query_one(SummaryPanel).show(self.decoded)
        self.query_one(TreePanel).show(self.decoded)
        self.query_one(ObjectPanel).show(self.decoded)

    # ---- Actions ----

    def action_switch_tab(self, tab_id: str) -> None:
        tabs: TabbedContent = self.query_one("#tabs", TabbedContent)
        tabs.active = tab_id

    def action_export_json(self) -> None:
        """Write the decoded tree to a timestamped JSON file."""
        ts = datetime.now().strftime("%Y%m%d_%H%M%S")
        out_path = Path(f"valsave_{Path(self._title).stem}_{ts}.json")
        out_path.write_text(json.dumps(to_jsonable(self.decoded), indent=2))
        self.notify(f"Exported to {out_path}")
