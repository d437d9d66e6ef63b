"""Prompters: interactive (textual checklists + click prompts) and flag-driven."""

import logging
from typing import Callable, Optional

import click

from skillsmgr.constants import ALL_MODES
from skillsmgr.interfaces import IPrompter
from skillsmgr.models import (
    DeployedSkill,
    DriftAction,
    OrphanAction,
    RemoteSkill,
    Skill,
)
from skillsmgr.tools import ToolTarget
from skillsmgr.tui.renderers import SkillsConsoleUI
from skillsmgr.tui.selector import ChecklistItem, run_checklist

logger = logging.getLogger(__name__)

Checklist = Callable[[str, list[ChecklistItem]], list[str]]


def _describe(name: str, description: str, width: int = 60) -> str:
    if not description:
        return name
    if len(description) > width:
        description = description[: width - 3] + "..."
    return f"{name} - {description}"


class ConsolePrompter(IPrompter):
    def __init__(self, ui: SkillsConsoleUI, checklist: Checklist = run_checklist) -> None:
        self.ui = ui
        self.checklist = checklist

    def select_tools(self, tools: list[ToolTarget], configured: list[str]) -> list[str]:
        items = [
            ChecklistItem(
                label=f"{tool.display_name} ({tool.base_relative_dir})",
                value=tool.tool_id.value,
                selected=tool.tool_id.value in configured,
            )
            for tool in tools
        ]
        return self.checklist("Select tools to deploy skills to", items)

    def select_mode(self, tool: ToolTarget) -> str:
        if not tool.supports_mode_variants:
            return ALL_MODES
        return click.prompt(
            f"Mode directory for {tool.display_name}",
            type=click.Choice(tool.modes()),
            default=ALL_MODES,
        )

    def select_skills(self, skills: list[Skill], deployed: list[str]) -> list[str]:
        sources: dict[str, list[Skill]] = {}
        for skill in skills:
            sources.setdefault(skill.name, []).append(skill)
        items = [
            ChecklistItem(
                label=_describe(
                    f"{name} ({', '.join(skill.source for skill in matches)})",
                    matches[0].description,
                ),
                value=name,
                selected=name in deployed,
            )
            for name, matches in sources.items()
        ]
        return self.checklist("Select skills to deploy", items)

    def select_remote_skills(self, skills: list[RemoteSkill]) -> list[str]:
        items = [
            ChecklistItem(label=_describe(skill.name, skill.description), value=skill.name)
            for skill in skills
        ]
        return self.checklist("Select skills to install", items)

    def choose_skill(self, name: str, candidates: list[Skill]) -> Skill:
        by_source = {skill.source: skill for skill in candidates}
        source = click.prompt(
            f"'{name}' exists in several sources; deploy which one",
            type=click.Choice(list(by_source)),
            default=candidates[0].source,
        )
        return by_source[source]

    def orphan_action(self, record: DeployedSkill) -> OrphanAction:
        value = click.prompt(
            f"{record.name}: source not found",
            type=click.Choice([item.value for item in OrphanAction]),
            default=OrphanAction.KEEP.value,
        )
        return OrphanAction(value)

    def drift_action(self, record: DeployedSkill, after_diff: bool = False) -> DriftAction:
        choices = [DriftAction.OVERWRITE.value, DriftAction.SKIP.value]
        if not after_diff:
            choices.append(DriftAction.DIFF.value)
        value = click.prompt(
            f"{record.name}: source changed since it was copied",
            type=click.Choice(choices),
            default=DriftAction.SKIP.value,
        )
        return DriftAction(value)

    def show_diff(self, name: str, preview: str) -> None:
        self.ui.render_diff(name, preview)


class NonInteractivePrompter(IPrompter):
    """Answers every prompt from command-line flags."""

    def __init__(
        self,
        tools: Optional[list[str]] = None,
        mode: str = ALL_MODES,
        skills: Optional[list[str]] = None,
        orphans: OrphanAction = OrphanAction.KEEP,
        drift: DriftAction = DriftAction.SKIP,
    ) -> None:
        self.tools = tools
        self.mode = mode
        self.skills = skills
        self.orphans = orphans
        self.drift = drift

    def select_tools(self, tools: list[ToolTarget], configured: list[str]) -> list[str]:
        if not self.tools:
            return list(configured)
        known = {tool.tool_id.value for tool in tools}
        return [tool for tool in self.tools if tool in known]

    def select_mode(self, tool: ToolTarget) -> str:
        return self.mode if self.mode in tool.modes() else ALL_MODES

    def select_skills(self, skills: list[Skill], deployed: list[str]) -> list[str]:
        if self.skills is None:
            return list(deployed)
        return list(self.skills)

    def select_remote_skills(self, skills: list[RemoteSkill]) -> list[str]:
        return [skill.name for skill in skills]

    def choose_skill(self, name: str, candidates: list[Skill]) -> Skill:
        logger.warning(
            "Skill '%s' found in %s; using %s",
            name,
            ", ".join(skill.source for skill in candidates),
            candidates[0].source,
        )
        return candidates[0]

    def orphan_action(self, record: DeployedSkill) -> OrphanAction:
        return self.orphans

    def drift_action(self, record: DeployedSkill, after_diff: bool = False) -> DriftAction:
        return self.drift

    def show_diff(self, name: str, preview: str) -> None:
        return None
