import logging
from typing import Iterable, Mapping, Optional

from skillsmgr.constants import ALL_MODES
from skillsmgr.deployment.deployer import Deployer
from skillsmgr.deployment.metadata import DeploymentStateStore
from skillsmgr.deployment.scanner import DeploymentScanner
from skillsmgr.errors import DeployError
from skillsmgr.models import (
    DeployMethod,
    DeployedSkill,
    OutcomeStatus,
    ReconcileResult,
    Skill,
    SkillOutcome,
    SkillPartition,
)
from skillsmgr.skills.repository import SkillRepository
from skillsmgr.tools import ToolTarget, tool_target

logger = logging.getLogger(__name__)


def partition_skills(desired: Iterable[str], observed: Iterable[str]) -> SkillPartition:
    """Split by name into to-add, to-keep and to-remove, preserving input order."""
    desired_names = list(dict.fromkeys(desired))
    observed_names = list(dict.fromkeys(observed))
    desired_set = set(desired_names)
    observed_set = set(observed_names)
    return SkillPartition(
        to_add=[name for name in desired_names if name not in observed_set],
        to_keep=[name for name in desired_names if name in observed_set],
        to_remove=[name for name in observed_names if name not in desired_set],
    )


class ReconciliationEngine:
    """Drive one tool directory towards a desired set of skills.

    Removals run before additions. Kept skills are never touched on disk;
    content drift is the sync detector's concern. Each deployer failure is
    recorded and the remaining skills are still processed; the metadata
    record always reflects the mutations that succeeded.
    """

    def __init__(
        self,
        skills: SkillRepository,
        deployer: Deployer,
        store: DeploymentStateStore,
        scanner: DeploymentScanner,
    ) -> None:
        self.skills = skills
        self.deployer = deployer
        self.store = store
        self.scanner = scanner

    def reconcile(
        self,
        tool: ToolTarget | str,
        desired_names: Iterable[str],
        method: DeployMethod,
        mode: str = ALL_MODES,
        choices: Optional[Mapping[str, Skill]] = None,
    ) -> ReconcileResult:
        target = _as_target(tool)
        desired = list(dict.fromkeys(desired_names))
        observed = {
            record.name: record for record in self.scanner.currently_deployed(target, mode)
        }
        partition = partition_skills(desired, observed)
        result = ReconcileResult(
            tool_id=target.tool_id.value,
            target_dir=target.target_dir(mode),
            mode=mode,
            method=method,
        )
        deployed: dict[str, DeployedSkill] = {}

        for name in partition.to_remove:
            try:
                self.deployer.remove(name, target, mode)
            except DeployError as exc:
                logger.warning("Could not remove %s: %s", name, exc)
                result.outcomes.append(SkillOutcome(name, OutcomeStatus.FAILED, str(exc)))
                deployed[name] = observed[name]
                continue
            result.outcomes.append(SkillOutcome(name, OutcomeStatus.REMOVED))

        for name in partition.to_keep:
            previous = observed[name]
            skill = self._resolve(name, choices, previous.source)
            deployed[name] = DeployedSkill(
                name=name,
                source=skill.source if skill else previous.source,
                deploy_method=method,
            )
            result.outcomes.append(SkillOutcome(name, OutcomeStatus.KEPT))

        for name in partition.to_add:
            skill = self._resolve(name, choices)
            if skill is None:
                result.outcomes.append(
                    SkillOutcome(name, OutcomeStatus.MISSING, "source not available")
                )
                continue
            try:
                self.deployer.deploy(skill, target, method, mode)
            except DeployError as exc:
                logger.warning("Could not deploy %s: %s", name, exc)
                result.outcomes.append(SkillOutcome(name, OutcomeStatus.FAILED, str(exc)))
                continue
            deployed[name] = DeployedSkill(name=name, source=skill.source, deploy_method=method)
            result.outcomes.append(SkillOutcome(name, OutcomeStatus.ADDED, method.value))

        ordered = [name for name in desired if name in deployed]
        ordered += [name for name in partition.to_remove if name in deployed]
        result.records = [deployed[name] for name in ordered]
        self.store.replace_deployment(
            result.tool_id, result.target_dir, mode, result.records
        )
        logger.info(
            "Reconciled %s: %d added, %d kept, %d removed, %d failed",
            result.tool_id,
            len(result.added),
            len(result.kept),
            len(result.removed),
            len(result.failed),
        )
        return result

    def add_skill(
        self,
        tool: ToolTarget | str,
        skill: Skill,
        method: DeployMethod,
        mode: str = ALL_MODES,
    ) -> SkillOutcome:
        """Deploy one skill next to whatever the directory already holds."""
        target = _as_target(tool)
        observed = self.scanner.currently_deployed(target, mode)
        if any(record.name == skill.name for record in observed):
            return SkillOutcome(skill.name, OutcomeStatus.KEPT, "already deployed")

        try:
            self.deployer.deploy(skill, target, method, mode)
        except DeployError as exc:
            logger.warning("Could not deploy %s: %s", skill.name, exc)
            return SkillOutcome(skill.name, OutcomeStatus.FAILED, str(exc))

        records = [
            *observed,
            DeployedSkill(name=skill.name, source=skill.source, deploy_method=method),
        ]
        self.store.replace_deployment(
            target.tool_id.value, target.target_dir(mode), mode, records
        )
        return SkillOutcome(skill.name, OutcomeStatus.ADDED, method.value)

    def remove_skill(
        self, tool: ToolTarget | str, name: str, mode: str = ALL_MODES
    ) -> SkillOutcome:
        target = _as_target(tool)
        observed = self.scanner.currently_deployed(target, mode)
        if not any(record.name == name for record in observed):
            return SkillOutcome(name, OutcomeStatus.MISSING, "not deployed")

        try:
            self.deployer.remove(name, target, mode)
        except DeployError as exc:
            logger.warning("Could not remove %s: %s", name, exc)
            return SkillOutcome(name, OutcomeStatus.FAILED, str(exc))

        remaining = [record for record in observed if record.name != name]
        self.store.replace_deployment(
            target.tool_id.value, target.target_dir(mode), mode, remaining
        )
        return SkillOutcome(name, OutcomeStatus.REMOVED)

    def _resolve(
        self,
        name: str,
        choices: Optional[Mapping[str, Skill]],
        source: Optional[str] = None,
    ) -> Optional[Skill]:
        if choices and name in choices:
            return choices[name]
        return self.skills.resolve(name, source)


def _as_target(tool: ToolTarget | str) -> ToolTarget:
    return tool if isinstance(tool, ToolTarget) else tool_target(tool)
