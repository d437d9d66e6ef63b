"""Reconstruct deployments from the project's tool directories.

Symlinked entries recover their source tag from the link target path. Copied
entries are matched by name: the project's metadata record first, then the
first skill of that name in the skills root. Name matching is best effort.
"""

import logging
from pathlib import Path
from typing import Optional

from skillsmgr.constants import (
    SKILL_FILENAME,
    SKILL_SOURCES,
    SKILLS_MANAGER_DIRNAME,
    SOURCE_CUSTOM,
    UNKNOWN_SOURCE,
)
from skillsmgr.deployment.metadata import DeploymentStateStore
from skillsmgr.errors import SkillsFileError
from skillsmgr.models import DeployMethod, DeployedSkill, Skill, ToolDeployment
from skillsmgr.skills.repository import SkillRepository
from skillsmgr.tools import TOOL_CATALOG, ToolTarget, tool_target
from skillsmgr.utils import read_link_target

logger = logging.getLogger(__name__)


class DeploymentScanner:
    def __init__(
        self,
        project_dir: Path,
        skills: SkillRepository,
        store: Optional[DeploymentStateStore] = None,
        tools: Optional[list[ToolTarget]] = None,
    ) -> None:
        self.project_dir = project_dir
        self.skills = skills
        self.store = store
        self.tools = tools if tools is not None else list(TOOL_CATALOG.values())

    def scan_all_tools(self) -> list[ToolDeployment]:
        deployments: list[ToolDeployment] = []
        for tool in self.tools:
            deployments.extend(self.scan_tool_deployment(tool))
        return deployments

    def scan_tool_deployment(self, tool: ToolTarget | str) -> list[ToolDeployment]:
        """One deployment per base or mode directory holding at least one skill."""
        target = tool if isinstance(tool, ToolTarget) else tool_target(tool)
        deployments: list[ToolDeployment] = []
        for mode in target.modes():
            deployment = self.scan_directory(target, mode)
            if deployment.skills:
                deployments.append(deployment)
        return deployments

    def scan_directory(self, tool: ToolTarget, mode: str) -> ToolDeployment:
        relative = tool.target_dir(mode)
        deployment = ToolDeployment(
            tool_id=tool.tool_id.value,
            target_dir=relative,
            mode=mode,
            skills=[],
        )
        directory = self.project_dir / relative
        if not directory.is_dir():
            return deployment

        recorded = self._recorded_sources(tool.tool_id.value, mode)
        catalog: Optional[dict[str, list[Skill]]] = None
        for entry in sorted(directory.iterdir(), key=lambda item: item.name):
            if entry.is_symlink():
                scanned = self._scan_linked(entry, mode)
            elif entry.is_dir() and (entry / SKILL_FILENAME).is_file():
                if catalog is None:
                    catalog = self._catalog()
                scanned = self._scan_copied(entry, mode, recorded, catalog)
            else:
                scanned = None
            if scanned is not None:
                deployment.skills.append(scanned)
        return deployment

    def currently_deployed(self, tool: ToolTarget, mode: str) -> list[DeployedSkill]:
        return self.scan_directory(tool, mode).skills

    def configured_tools(self) -> list[str]:
        return [
            tool.tool_id.value for tool in self.tools if self.scan_tool_deployment(tool)
        ]

    def is_tool_configured(self, tool_id: str) -> bool:
        return bool(self.scan_tool_deployment(tool_target(tool_id)))

    def deployed_skills(self, tool_id: str) -> list[DeployedSkill]:
        return [
            skill
            for deployment in self.scan_tool_deployment(tool_target(tool_id))
            for skill in deployment.skills
        ]

    def extract_source_from_path(self, link_target: Path) -> Optional[str]:
        parts = self._parts_under_root(link_target)
        if not parts:
            return None
        if parts[0] == SOURCE_CUSTOM:
            return SOURCE_CUSTOM
        if parts[0] in SKILL_SOURCES and len(parts) >= 2:
            return f"{parts[0]}/{parts[1]}"
        return None

    def _scan_linked(self, entry: Path, mode: str) -> Optional[DeployedSkill]:
        link_target = read_link_target(entry)
        if link_target is None:
            return None
        # A dangling link is still a deployment; sync reports it as orphaned.
        if entry.exists() and not (entry / SKILL_FILENAME).is_file():
            return None
        source = self.extract_source_from_path(link_target)
        return DeployedSkill(
            name=entry.name,
            source=source or UNKNOWN_SOURCE,
            deploy_method=DeployMethod.LINK,
            path=entry,
            mode=mode,
        )

    def _scan_copied(
        self,
        entry: Path,
        mode: str,
        recorded: dict[str, str],
        catalog: dict[str, list[Skill]],
    ) -> DeployedSkill:
        matches = catalog.get(entry.name, [])
        source = recorded.get(entry.name)
        if source is None or source == UNKNOWN_SOURCE:
            source = matches[0].source if matches else UNKNOWN_SOURCE
        return DeployedSkill(
            name=entry.name,
            source=source,
            deploy_method=DeployMethod.COPY,
            path=entry,
            mode=mode,
            ambiguous=entry.name not in recorded and len(matches) > 1,
        )

    def _parts_under_root(self, link_target: Path) -> tuple[str, ...]:
        for root in (self.skills.root, self.skills.root.resolve()):
            try:
                return link_target.relative_to(root).parts
            except ValueError:
                continue
        parts = link_target.parts
        if SKILLS_MANAGER_DIRNAME in parts:
            index = parts.index(SKILLS_MANAGER_DIRNAME)
            return parts[index + 1 :]
        return ()

    def _catalog(self) -> dict[str, list[Skill]]:
        catalog: dict[str, list[Skill]] = {}
        for skill in self.skills.list_all():
            catalog.setdefault(skill.name, []).append(skill)
        return catalog

    def _recorded_sources(self, tool_id: str, mode: str) -> dict[str, str]:
        if self.store is None:
            return {}
        try:
            recorded = self.store.get_deployed_skills(tool_id, mode)
        except SkillsFileError as exc:
            logger.warning("Ignoring unreadable metadata: %s", exc)
            return {}
        return {
            skill.name: skill.source
            for skill in recorded
            if skill.deploy_method == DeployMethod.COPY
        }
