from rich.console import Console, Group
from rich.syntax import Syntax

from skillsmgr.models import (
    InstallResult,
    ReconcileResult,
    Skill,
    SkillOutcome,
    SyncReport,
    ToolDeployment,
)
from skillsmgr.tools import ToolTarget, tool_label
from skillsmgr.tui.enums import UIStyle
from skillsmgr.tui.sections import UISection
from skillsmgr.tui.tables import (
    DeploymentTable,
    ReconcileTable,
    SkillsTable,
    SyncTable,
    ToolsTable,
)
from skillsmgr.utils import compact_home_path


class SkillsConsoleUI:
    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def info(self, title: str, body: str) -> None:
        self.console.print(UISection.note(title, body, style=UIStyle.BLUE.value))

    def warn(self, title: str, body: str) -> None:
        self.console.print(UISection.note(title, body, style=UIStyle.YELLOW.value))

    def render_setup(self, root: str, created: list[str], example_created: bool) -> None:
        lines = [f"Skills root: [bold]{compact_home_path(root)}[/bold]"]
        lines += [f"[green]created[/green] {name}/" for name in created]
        if example_created:
            lines.append("[green]created[/green] custom/example-skill/SKILL.md")
        else:
            lines.append("[dim]custom/example-skill already exists, skipping[/dim]")
        self.console.print(UISection.note("setup", "\n".join(lines), style=UIStyle.GREEN.value))
        self.console.print(
            UISection.note(
                "next",
                "- skillsmgr install anthropic\n"
                "- skillsmgr list\n"
                "- skillsmgr init",
                style=UIStyle.DIM.value,
            )
        )

    def render_available(self, grouped: dict[str, list[Skill]], root: str) -> None:
        if not grouped:
            self.console.print(
                UISection.note(
                    "skills",
                    f"No skills found in {compact_home_path(root)}.\n"
                    "Run: skillsmgr install anthropic",
                    style=UIStyle.YELLOW.value,
                )
            )
            return

        for source, skills in grouped.items():
            self.console.print(
                UISection.wrap(
                    source,
                    SkillsTable.skills_table(skills),
                    style=UIStyle.CYAN.value,
                    subtitle=f"{len(skills)} skill(s)",
                )
            )
        total = sum(len(skills) for skills in grouped.values())
        self.console.print(f"[dim]Total: {total} skill(s)[/dim]")

    def render_deployments(self, deployments: list[ToolDeployment], project: str) -> None:
        if not deployments:
            self.console.print(
                UISection.note(
                    "deployed",
                    f"No skills deployed in {compact_home_path(project)}.\n"
                    "Run: skillsmgr init",
                    style=UIStyle.YELLOW.value,
                )
            )
            return

        for deployment in deployments:
            self.console.print(
                UISection.wrap(
                    f"{deployment.tool_id}",
                    Group(
                        DeploymentTable.summary_block(deployment),
                        DeploymentTable.skills_table(deployment.skills),
                    ),
                    style=UIStyle.BLUE.value,
                )
            )

    def render_install_result(self, result: InstallResult) -> None:
        if not result.installed and not result.failed:
            self.console.print(
                UISection.note("install", "No skills selected.", style=UIStyle.DIM.value)
            )
            return

        border = UIStyle.GREEN.value if not result.failed else UIStyle.YELLOW.value
        body = (
            f"Installed {len(result.installed)} skill(s) to "
            f"[bold]{compact_home_path(result.target_base)}[/bold]"
        )
        if result.installed:
            body += "\n" + "\n".join(f"[green]+[/green] {name}" for name in result.installed)
        self.console.print(UISection.note(result.source_key or "install", body, style=border))
        if result.failed:
            self.console.print(UISection.bullets("failed", result.failed, style=UIStyle.RED.value))

    def render_reconcile(self, result: ReconcileResult) -> None:
        style = UIStyle.GREEN.value if result.is_clean() else UIStyle.YELLOW.value
        self.console.print(
            UISection.wrap(
                tool_label(result.tool_id),
                Group(
                    ReconcileTable.summary_block(result),
                    ReconcileTable.outcomes_table(result.outcomes),
                ),
                style=style,
            )
        )

    def render_outcomes(self, title: str, outcomes: list[tuple[str, SkillOutcome]]) -> None:
        if not outcomes:
            self.console.print(
                UISection.note(title, "Nothing to do.", style=UIStyle.DIM.value)
            )
            return
        rows = [
            SkillOutcome(name=label, status=outcome.status, detail=outcome.detail)
            for label, outcome in outcomes
        ]
        self.console.print(
            UISection.wrap(
                title,
                ReconcileTable.outcomes_table(rows, label_header="Target"),
                style=UIStyle.BLUE.value,
            )
        )

    def render_sync_report(self, report: SyncReport) -> None:
        self.console.print(
            UISection.wrap(
                f"{tool_label(report.tool_id)} ({report.target_dir})",
                SyncTable.entries_table(report),
                style=UIStyle.CYAN.value,
            )
        )

    def render_sync_totals(self, reports: list[SyncReport]) -> None:
        failures = [item for report in reports for item in report.failures]
        self.console.print(
            SyncTable.stats_panel(
                updated=sum(report.updated for report in reports),
                removed=sum(report.removed for report in reports),
                unchanged=sum(report.unchanged for report in reports),
                failed=len(failures),
            )
        )
        if failures:
            self.console.print(UISection.bullets("failures", failures, style=UIStyle.RED.value))

    def render_diff(self, name: str, preview: str) -> None:
        body = Syntax(preview or "(no manifest changes)", "diff", theme="ansi_dark", word_wrap=True)
        self.console.print(UISection.wrap(f"diff: {name}", body, style=UIStyle.YELLOW.value))

    def render_tools(self, tools: list[ToolTarget]) -> None:
        self.console.print(
            UISection.wrap("tools", ToolsTable.tools_table(tools), style=UIStyle.BLUE.value)
        )
