"""Interactive Textual-based checklist for multi-select prompts."""

from __future__ import annotations

from dataclasses import dataclass

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header, SelectionList, Static
from textual.widgets.selection_list import Selection


@dataclass(frozen=True)
class ChecklistItem:
    label: str
    value: str
    selected: bool = False


class ChecklistSelectorApp(App[list[str]]):
    """Pick any number of items; exits with the selected values in list order."""

    TITLE = "skillsmgr"
    CSS_DEFAULT = """
    Screen {
        layout: vertical;
    }
    #info {
        height: 3;
        content-align: center middle;
        background: $primary-darken-2;
        color: $text;
        padding: 0 1;
    }
    SelectionList {
        height: 1fr;
    }
    """

    BINDINGS = [
        Binding("a", "select_all", "Select All"),
        Binding("n", "select_none", "Select None"),
        Binding("enter", "confirm", "Confirm"),
        Binding("q", "quit_app", "Quit"),
    ]

    def __init__(self, prompt: str, items: list[ChecklistItem]) -> None:
        super().__init__()
        self._prompt = prompt
        self._items = items

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(
            f"{self._prompt} | "
            f"Items: {len(self._items)} | "
            f"Use [a] select all, [n] select none, [enter] confirm",
            id="info",
            markup=False,
        )
        selections = [
            Selection(item.label, item.value, item.selected) for item in self._items
        ]
        yield SelectionList[str](*selections)
        yield Footer()

    def action_select_all(self) -> None:
        self.query_one(SelectionList).select_all()

    def action_select_none(self) -> None:
        self.query_one(SelectionList).deselect_all()

    def action_confirm(self) -> None:
        chosen = set(self.query_one(SelectionList).selected)
        self.exit([item.value for item in self._items if item.value in chosen])

    def action_quit_app(self) -> None:
        self.exit([])


def run_checklist(prompt: str, items: list[ChecklistItem]) -> list[str]:
    if not items:
        return []
    result = ChecklistSelectorApp(prompt, items).run()
    return list(result or [])
