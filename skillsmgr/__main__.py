import functools
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import click
from rich.console import Console

from skillsmgr import __version__
from skillsmgr.constants import ALL_MODES
from skillsmgr.context import ManagerServices
from skillsmgr.errors import NotSetUpError, SkillNotFoundError, SkillsManagerError
from skillsmgr.interfaces import IPrompter
from skillsmgr.logging_config import configure_logging
from skillsmgr.models import (
    DeployMethod,
    DriftAction,
    OrphanAction,
    OutcomeStatus,
    Skill,
    SkillOutcome,
)
from skillsmgr.remote import GitHubClient
from skillsmgr.settings import HOME_ENVVAR, PROJECT_ENVVAR, ManagerSettings
from skillsmgr.skills import SkillRepository
from skillsmgr.tools import TOOL_CATALOG, ToolTarget, tool_ids, tool_target
from skillsmgr.tui import ConsolePrompter, NonInteractivePrompter, SkillsConsoleUI


@dataclass
class CliState:
    services: ManagerServices
    ui: SkillsConsoleUI
    interactive: bool

    @property
    def settings(self) -> ManagerSettings:
        return self.services.settings

    def prompter(self, **flags) -> IPrompter:
        if self.interactive:
            return ConsolePrompter(self.ui)
        return NonInteractivePrompter(**flags)

    def require_setup(self) -> None:
        if not self.settings.is_set_up():
            raise NotSetUpError(self.settings.skills_root)


def _reports_errors(func: Callable) -> Callable:
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except SkillsManagerError as exc:
            raise click.ClickException(str(exc)) from exc

    return wrapper


def _method(copy: bool) -> DeployMethod:
    return DeployMethod.COPY if copy else DeployMethod.LINK


def _disambiguate(
    names: list[str], skills: SkillRepository, prompter: IPrompter
) -> dict[str, Skill]:
    choices: dict[str, Skill] = {}
    for name in names:
        matches = skills.find_by_name(name)
        if len(matches) > 1:
            choices[name] = prompter.choose_skill(name, matches)
    return choices


def _target_label(tool: ToolTarget, mode: str) -> str:
    return f"{tool.tool_id.value} ({tool.target_dir(mode)})"


def _exit_on_failures(outcomes: list[SkillOutcome]) -> None:
    if any(outcome.status == OutcomeStatus.FAILED for outcome in outcomes):
        raise click.exceptions.Exit(1)


_TOOL_OPTION = click.option(
    "--tool",
    "-t",
    "tools",
    multiple=True,
    type=click.Choice(tool_ids(), case_sensitive=False),
    help="Tool to act on (repeatable).",
)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--home",
    type=click.Path(path_type=Path, file_okay=False),
    envvar=HOME_ENVVAR,
    default=None,
    help="Skills root (default: ~/.skills-manager).",
)
@click.option(
    "--project",
    "-C",
    type=click.Path(path_type=Path, file_okay=False),
    envvar=PROJECT_ENVVAR,
    default=None,
    help="Project directory (default: current directory).",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
@click.option("--no-input", is_flag=True, help="Never prompt; answer from flags and defaults.")
@click.version_option(__version__, prog_name="skillsmgr")
@click.pass_context
def cli(
    ctx: click.Context,
    home: Optional[Path],
    project: Optional[Path],
    verbose: bool,
    no_input: bool,
) -> None:
    """Install skill bundles and deploy them into AI coding tool directories."""
    configure_logging(verbose)
    settings = ManagerSettings.resolve(skills_root=home, project_dir=project)
    ctx.obj = CliState(
        services=ManagerServices.build(settings),
        ui=SkillsConsoleUI(Console()),
        interactive=not no_input and sys.stdin.isatty(),
    )


@cli.command(help="Create the skills root and its source directories.")
@click.pass_obj
@_reports_errors
def setup(state: CliState) -> None:
    created, example_created = state.services.skills.initialize()
    state.ui.render_setup(str(state.settings.skills_root), created, example_created)


@cli.command(help="Download skills from a repository ('anthropic' for the official skills).")
@click.argument("source")
@click.option("--all", "install_all", is_flag=True, help="Install every skill without prompting.")
@click.option("--custom", is_flag=True, help="Install into custom/ instead of community/.")
@click.pass_obj
@_reports_errors
def install(state: CliState, source: str, install_all: bool, custom: bool) -> None:
    state.require_setup()
    select = None
    if state.interactive and not install_all:
        select = state.prompter().select_remote_skills

    installer = state.services.installer(GitHubClient(token=state.settings.github_token))
    result = installer.install(source, select=select, custom=custom)
    state.ui.render_install_result(result)
    if result.failed:
        raise click.exceptions.Exit(1)


@cli.command(help="Re-download installed sources (all, or one by name).")
@click.argument("source", required=False)
@click.pass_obj
@_reports_errors
def update(state: CliState, source: Optional[str]) -> None:
    state.require_setup()
    installer = state.services.installer(GitHubClient(token=state.settings.github_token))
    results = installer.update(source)
    if not results:
        state.ui.warn("update", "No installed sources found.\nRun: skillsmgr install anthropic")
        return

    for result in results:
        state.ui.render_install_result(result)
    if any(result.failed for result in results):
        raise click.exceptions.Exit(1)


@cli.command("list", help="List available skills, or what this project has deployed.")
@click.option("--deployed", is_flag=True, help="Scan the project's tool directories instead.")
@click.pass_obj
@_reports_errors
def list_skills(state: CliState, deployed: bool) -> None:
    if deployed:
        state.ui.render_deployments(
            state.services.scanner.scan_all_tools(), str(state.settings.project_dir)
        )
        return

    state.require_setup()
    state.ui.render_available(
        state.services.skills.group_by_source(), str(state.settings.skills_root)
    )


@cli.command(help="Show supported tools and their skill directories.")
@click.pass_obj
def tools(state: CliState) -> None:
    state.ui.render_tools(list(TOOL_CATALOG.values()))


@cli.command(help="Choose tools and skills for this project and deploy them.")
@click.option("--copy", "copy_mode", is_flag=True, help="Copy skills instead of symlinking.")
@_TOOL_OPTION
@click.option("--mode", default=ALL_MODES, show_default=True, help="Mode directory for tools with modes.")
@click.option("--skill", "-s", "skill_names", multiple=True, help="Skill to deploy (repeatable).")
@click.pass_obj
@_reports_errors
def init(
    state: CliState,
    copy_mode: bool,
    tools: tuple[str, ...],
    mode: str,
    skill_names: tuple[str, ...],
) -> None:
    state.require_setup()
    services = state.services
    available = services.skills.list_all()
    if not available:
        raise click.ClickException("No skills available. Run: skillsmgr install anthropic")

    flags = {
        "tools": [tool.lower() for tool in tools] or None,
        "mode": mode,
        "skills": list(skill_names) or None,
    }
    if tools or skill_names:
        prompter: IPrompter = NonInteractivePrompter(**flags)
    else:
        prompter = state.prompter(**flags)

    selected = prompter.select_tools(
        list(TOOL_CATALOG.values()), services.scanner.configured_tools()
    )
    if not selected:
        state.ui.warn("init", "No tools selected.")
        return

    clean = True
    for tool_id in selected:
        target = tool_target(tool_id)
        tool_mode = prompter.select_mode(target)
        deployed = [
            record.name for record in services.scanner.currently_deployed(target, tool_mode)
        ]
        names = prompter.select_skills(available, deployed)
        new_names = [name for name in names if name not in deployed]
        result = services.engine.reconcile(
            target,
            names,
            _method(copy_mode),
            tool_mode,
            choices=_disambiguate(new_names, services.skills, prompter),
        )
        state.ui.render_reconcile(result)
        clean = clean and result.is_clean()

    if not clean:
        raise click.exceptions.Exit(1)


@cli.command(help="Deploy one skill to the tools this project already uses.")
@click.argument("skill_name")
@_TOOL_OPTION
@click.option("--copy", "copy_mode", is_flag=True, help="Copy instead of symlinking.")
@click.option("--mode", default=ALL_MODES, show_default=True, help="Mode directory with --tool.")
@click.pass_obj
@_reports_errors
def add(
    state: CliState, skill_name: str, tools: tuple[str, ...], copy_mode: bool, mode: str
) -> None:
    state.require_setup()
    services = state.services
    matches = services.skills.find_by_name(skill_name)
    if not matches:
        raise SkillNotFoundError(skill_name)
    skill = matches[0] if len(matches) == 1 else state.prompter().choose_skill(skill_name, matches)

    if tools:
        targets = []
        for tool_id in tools:
            target = tool_target(tool_id.lower())
            targets.append((target, mode if mode in target.modes() else ALL_MODES))
    else:
        targets = [
            (tool_target(deployment.tool_id), deployment.mode)
            for deployment in services.scanner.scan_all_tools()
        ]
    if not targets:
        raise click.ClickException("No tools configured in this project. Run: skillsmgr init")

    method = _method(copy_mode)
    outcomes = [
        (
            _target_label(target, target_mode),
            services.engine.add_skill(target, skill, method, target_mode),
        )
        for target, target_mode in targets
    ]
    state.ui.render_outcomes(f"add {skill.label}", outcomes)
    _exit_on_failures([outcome for _, outcome in outcomes])


@cli.command(help="Remove one skill from every tool holding it.")
@click.argument("skill_name")
@_TOOL_OPTION
@click.pass_obj
@_reports_errors
def remove(state: CliState, skill_name: str, tools: tuple[str, ...]) -> None:
    services = state.services
    wanted = {tool.lower() for tool in tools}
    holding = [
        deployment
        for deployment in services.scanner.scan_all_tools()
        if deployment.find(skill_name) is not None
        and (not wanted or deployment.tool_id in wanted)
    ]
    if not holding:
        raise click.ClickException(f"Skill '{skill_name}' is not deployed in this project")

    outcomes = []
    for deployment in holding:
        target = tool_target(deployment.tool_id)
        outcomes.append(
            (
                _target_label(target, deployment.mode),
                services.engine.remove_skill(target, skill_name, deployment.mode),
            )
        )
    state.ui.render_outcomes(f"remove {skill_name}", outcomes)
    _exit_on_failures([outcome for _, outcome in outcomes])


@cli.command(help="Check deployed skills against their sources.")
@click.option(
    "--orphans",
    type=click.Choice([item.value for item in OrphanAction]),
    default=None,
    help="What to do with skills whose source is gone (default: keep).",
)
@click.option(
    "--drift",
    type=click.Choice([DriftAction.SKIP.value, DriftAction.OVERWRITE.value]),
    default=None,
    help="What to do with copies whose source changed (default: skip).",
)
@click.pass_obj
@_reports_errors
def sync(state: CliState, orphans: Optional[str], drift: Optional[str]) -> None:
    services = state.services
    deployments = services.scanner.scan_all_tools()
    if not deployments:
        raise click.ClickException("No skills deployed in this project. Run: skillsmgr init")

    if state.interactive and orphans is None and drift is None:
        decider: IPrompter = ConsolePrompter(state.ui)
    else:
        decider = NonInteractivePrompter(
            orphans=OrphanAction(orphans or OrphanAction.KEEP.value),
            drift=DriftAction(drift or DriftAction.SKIP.value),
        )

    reports = [
        services.detector.check_and_reconcile(deployment, decider)
        for deployment in deployments
    ]
    for report in reports:
        state.ui.render_sync_report(report)
    state.ui.render_sync_totals(reports)

    if any(report.failures for report in reports):
        raise click.exceptions.Exit(1)


def main() -> int:
    try:
        cli(standalone_mode=False)
    except click.exceptions.Exit as exc:
        code = exc.exit_code
        return code if isinstance(code, int) else 1
    except click.exceptions.Abort:
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
