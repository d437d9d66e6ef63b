from typing import Iterable, Optional

from rich.panel import Panel

from skillsmgr.tui.enums import UIStyle
from skillsmgr.utils import compact_home_paths_in_text


class UISection:
    @staticmethod
    def wrap(title: str, body, style: str = UIStyle.BLUE.value, subtitle: Optional[str] = None) -> Panel:
        return Panel(body, title=title, subtitle=subtitle, border_style=style, padding=(0, 1))

    @staticmethod
    def note(title: str, body: str, style: str) -> Panel:
        return Panel(body, title=title, border_style=style, padding=(0, 1))

    @staticmethod
    def bullets(title: str, items: Iterable[str], style: str) -> Panel:
        body = "\n".join(f"- {compact_home_paths_in_text(str(item))}" for item in items)
        return UISection.note(title, body, style=style)
