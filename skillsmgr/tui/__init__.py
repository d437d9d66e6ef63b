from skillsmgr.tui.prompts import ConsolePrompter, NonInteractivePrompter
from skillsmgr.tui.renderers import SkillsConsoleUI
from skillsmgr.tui.selector import ChecklistItem, ChecklistSelectorApp, run_checklist

__all__ = [
    "ChecklistItem",
    "ChecklistSelectorApp",
    "ConsolePrompter",
    "NonInteractivePrompter",
    "SkillsConsoleUI",
    "run_checklist",
]
