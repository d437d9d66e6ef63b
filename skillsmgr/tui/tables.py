from collections import Counter

from rich.panel import Panel
from rich.table import Column, Table
from rich.text import Text

from skillsmgr.models import (
    DeployedSkill,
    ReconcileResult,
    Skill,
    SkillOutcome,
    SyncReport,
    ToolDeployment,
)
from skillsmgr.tools import ToolTarget, tool_label
from skillsmgr.tui.enums import (
    DEPLOY_METHOD_STYLE,
    OUTCOME_STATUS_STYLE,
    SYNC_STATUS_STYLE,
    UIStyle,
)


def _styled(value: str, style: str) -> str:
    return f"[{style}]{value}[/{style}]"


class SkillsTable:
    @staticmethod
    def skills_table(skills: list[Skill]) -> Table:
        table = Table(
            Column(header="Skill", width=28, overflow="ellipsis"),
            Column(header="Description", overflow="fold"),
            expand=True,
            header_style="bold",
        )
        for skill in skills:
            table.add_row(Text(skill.name), Text(skill.description or "-", style=UIStyle.DIM.value))
        return table


class DeploymentTable:
    @staticmethod
    def summary_block(deployment: ToolDeployment):
        table = Table.grid(padding=(0, 2))
        table.add_column(style="bold")
        table.add_column()
        table.add_row("Tool", tool_label(deployment.tool_id))
        table.add_row("Directory", deployment.target_dir)
        table.add_row("Mode", deployment.mode)
        table.add_row("Skills", str(len(deployment.skills)))
        return table

    @staticmethod
    def skills_table(skills: list[DeployedSkill]) -> Table:
        table = Table(
            Column(header="Skill", width=28, overflow="ellipsis"),
            Column(header="Method", width=8),
            Column(header="Source", overflow="ellipsis"),
            expand=True,
            header_style="bold",
        )
        for skill in skills:
            method_style = DEPLOY_METHOD_STYLE.get(skill.deploy_method, UIStyle.WHITE.value)
            source = skill.source
            if skill.ambiguous:
                source = f"{source} {_styled('(ambiguous)', UIStyle.YELLOW.value)}"
            elif not skill.has_known_source:
                source = _styled(source, UIStyle.RED.value)
            table.add_row(
                Text(skill.name),
                _styled(skill.deploy_method.value, method_style),
                source,
            )
        return table


class ReconcileTable:
    @staticmethod
    def summary_block(result: ReconcileResult):
        counts = Counter(outcome.status.value for outcome in result.outcomes)
        chips = [f"{key}={value}" for key, value in sorted(counts.items()) if value > 0]
        if not chips:
            chips = ["none"]

        table = Table.grid(padding=(0, 2))
        table.add_column(style="bold")
        table.add_column()
        table.add_row("Directory", result.target_dir)
        table.add_row("Mode", result.mode)
        table.add_row("Method", result.method.value)
        table.add_row("Outcomes", "  ".join(chips))
        return table

    @staticmethod
    def outcomes_table(outcomes: list[SkillOutcome], label_header: str = "Skill") -> Table:
        table = Table(
            Column(header=label_header, width=28, overflow="ellipsis"),
            Column(header="Status", width=10),
            Column(header="Detail", overflow="fold"),
            expand=True,
            header_style="bold",
        )
        for outcome in outcomes:
            style = OUTCOME_STATUS_STYLE.get(outcome.status, UIStyle.WHITE.value)
            table.add_row(Text(outcome.name), _styled(outcome.status.value, style), Text(outcome.detail))
        return table


class SyncTable:
    @staticmethod
    def entries_table(report: SyncReport) -> Table:
        table = Table(
            Column(header="Skill", width=28, overflow="ellipsis"),
            Column(header="Method", width=8),
            Column(header="Status", width=12),
            Column(header="Action", width=10),
            Column(header="Detail", overflow="fold"),
            expand=True,
            header_style="bold",
        )
        for entry in report.entries:
            style = SYNC_STATUS_STYLE.get(entry.status, UIStyle.WHITE.value)
            table.add_row(
                Text(entry.name),
                entry.deploy_method.value,
                _styled(entry.status.value.replace("_", " "), style),
                entry.action or "-",
                Text(entry.detail),
            )
        return table

    @staticmethod
    def stats_panel(updated: int, removed: int, unchanged: int, failed: int) -> Panel:
        stats: dict[str, str] = {
            "updated": str(updated),
            "removed": str(removed),
            "unchanged": str(unchanged),
            "failed": str(failed),
        }
        table = Table(show_header=False, box=None)
        for key, value in stats.items():
            table.add_row(f"[bold]{key}[/bold]", value)
        return Panel(
            table,
            title="sync",
            border_style=UIStyle.GREEN.value if failed == 0 else UIStyle.RED.value,
        )


class ToolsTable:
    @staticmethod
    def tools_table(tools: list[ToolTarget]) -> Table:
        table = Table(
            Column(header="Tool", width=14),
            Column(header="Name", width=14),
            Column(header="Directory", overflow="ellipsis"),
            Column(header="Modes", overflow="fold"),
            expand=True,
            header_style="bold",
        )
        for tool in tools:
            modes = ", ".join(
                f"{mode} ({tool.target_dir(mode)})" for mode in tool.available_modes
            )
            table.add_row(tool.tool_id.value, tool.display_name, tool.base_relative_dir, modes or "-")
        return table
