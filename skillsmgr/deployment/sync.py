"""Check deployed skills against their sources.

Links always reflect their source. Copies are compared on the manifest file
only; other assets of a copied skill can drift unnoticed.
"""

import difflib
import logging
from pathlib import Path
from typing import Optional

from skillsmgr.constants import DIFF_PREVIEW_LINES, SKILL_FILENAME
from skillsmgr.deployment.deployer import Deployer
from skillsmgr.deployment.metadata import DeploymentStateStore
from skillsmgr.errors import DeployError
from skillsmgr.interfaces import ISyncDecider
from skillsmgr.models import (
    DeployMethod,
    DeployedSkill,
    DriftAction,
    OrphanAction,
    Skill,
    SyncEntry,
    SyncReport,
    SyncStatus,
    ToolDeployment,
)
from skillsmgr.skills.repository import SkillRepository
from skillsmgr.tools import ToolTarget, tool_target

logger = logging.getLogger(__name__)


def drift_preview(local: str, source: str, limit: int = DIFF_PREVIEW_LINES) -> str:
    lines = list(
        difflib.unified_diff(
            local.splitlines(),
            source.splitlines(),
            fromfile="local",
            tofile="source",
            lineterm="",
        )
    )
    if len(lines) > limit:
        hidden = len(lines) - limit
        lines = lines[:limit] + [f"... ({hidden} more lines)"]
    return "\n".join(lines)


class SyncDetector:
    def __init__(
        self,
        skills: SkillRepository,
        deployer: Deployer,
        store: DeploymentStateStore,
    ) -> None:
        self.skills = skills
        self.deployer = deployer
        self.store = store

    def classify(self, record: DeployedSkill, tool: ToolTarget, mode: str) -> SyncStatus:
        deployed_path = self._deployed_path(record, tool, mode)
        source = self.resolve_source(record)
        if source is None or not source.path.is_dir():
            return SyncStatus.ORPHANED
        if deployed_path.is_symlink():
            if not deployed_path.exists():
                return SyncStatus.ORPHANED
            return SyncStatus.UP_TO_DATE
        if _manifest_bytes(source.path) == _manifest_bytes(deployed_path):
            return SyncStatus.UP_TO_DATE
        return SyncStatus.DRIFTED

    def resolve_source(self, record: DeployedSkill) -> Optional[Skill]:
        if not record.has_known_source:
            return None
        return self.skills.resolve(record.name, record.source)

    def check_and_reconcile(
        self, deployment: ToolDeployment, decider: ISyncDecider
    ) -> SyncReport:
        tool = tool_target(deployment.tool_id)
        mode = deployment.mode
        report = SyncReport(
            tool_id=deployment.tool_id,
            target_dir=deployment.target_dir,
            mode=mode,
        )

        for record in deployment.skills:
            status = self.classify(record, tool, mode)
            if status == SyncStatus.ORPHANED:
                entry = self._handle_orphan(record, tool, mode, decider, report)
            elif status == SyncStatus.DRIFTED:
                entry = self._handle_drift(record, tool, mode, decider, report)
            else:
                report.unchanged += 1
                entry = SyncEntry(record.name, status, record.deploy_method)
            report.entries.append(entry)

        logger.info(
            "Synced %s (%s): %d updated, %d removed, %d unchanged",
            deployment.tool_id,
            mode,
            report.updated,
            report.removed,
            report.unchanged,
        )
        return report

    def _handle_orphan(
        self,
        record: DeployedSkill,
        tool: ToolTarget,
        mode: str,
        decider: ISyncDecider,
        report: SyncReport,
    ) -> SyncEntry:
        action = decider.orphan_action(record)
        if action != OrphanAction.REMOVE:
            report.unchanged += 1
            return SyncEntry(
                record.name,
                SyncStatus.ORPHANED,
                record.deploy_method,
                action=OrphanAction.KEEP.value,
                detail="source not found",
            )

        try:
            self.deployer.remove(record.name, tool, mode)
        except DeployError as exc:
            report.failures.append(str(exc))
            return SyncEntry(
                record.name,
                SyncStatus.ORPHANED,
                record.deploy_method,
                action="failed",
                detail=str(exc),
            )
        self.store.drop_skill(tool.tool_id.value, record.name, mode)
        report.removed += 1
        return SyncEntry(
            record.name,
            SyncStatus.ORPHANED,
            record.deploy_method,
            action=OrphanAction.REMOVE.value,
            detail="source not found",
        )

    def _handle_drift(
        self,
        record: DeployedSkill,
        tool: ToolTarget,
        mode: str,
        decider: ISyncDecider,
        report: SyncReport,
    ) -> SyncEntry:
        source = self.resolve_source(record)
        if source is None:
            return self._handle_orphan(record, tool, mode, decider, report)
        action = decider.drift_action(record)
        if action == DriftAction.DIFF:
            deployed_path = self._deployed_path(record, tool, mode)
            decider.show_diff(
                record.name,
                drift_preview(_manifest_text(deployed_path), _manifest_text(source.path)),
            )
            action = decider.drift_action(record, after_diff=True)

        if action != DriftAction.OVERWRITE:
            report.unchanged += 1
            return SyncEntry(
                record.name,
                SyncStatus.DRIFTED,
                record.deploy_method,
                action=DriftAction.SKIP.value,
                detail="source changed",
            )

        try:
            self.deployer.deploy(source, tool, DeployMethod.COPY, mode)
        except DeployError as exc:
            report.failures.append(str(exc))
            return SyncEntry(
                record.name,
                SyncStatus.DRIFTED,
                record.deploy_method,
                action="failed",
                detail=str(exc),
            )
        self.store.refresh_skill(
            tool.tool_id.value,
            DeployedSkill(
                name=record.name,
                source=source.source,
                deploy_method=DeployMethod.COPY,
            ),
            mode,
        )
        report.updated += 1
        return SyncEntry(
            record.name,
            SyncStatus.DRIFTED,
            record.deploy_method,
            action=DriftAction.OVERWRITE.value,
            detail="source changed",
        )

    def _deployed_path(self, record: DeployedSkill, tool: ToolTarget, mode: str) -> Path:
        return record.path or self.deployer.deployed_path(record.name, tool, mode)


def _manifest_bytes(skill_dir: Path) -> Optional[bytes]:
    manifest = skill_dir / SKILL_FILENAME
    if not manifest.is_file():
        return None
    return manifest.read_bytes()


def _manifest_text(skill_dir: Path) -> str:
    data = _manifest_bytes(skill_dir)
    return data.decode("utf-8", errors="replace") if data is not None else ""
