from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from skillsmgr.constants import ALL_MODES, METADATA_VERSION, UNKNOWN_SOURCE


class DeployMethod(str, Enum):
    LINK = "link"
    COPY = "copy"


class OutcomeStatus(str, Enum):
    ADDED = "added"
    KEPT = "kept"
    REMOVED = "removed"
    FAILED = "failed"
    MISSING = "missing"


class SyncStatus(str, Enum):
    UP_TO_DATE = "up_to_date"
    DRIFTED = "drifted"
    ORPHANED = "orphaned"


class OrphanAction(str, Enum):
    REMOVE = "remove"
    KEEP = "keep"


class DriftAction(str, Enum):
    OVERWRITE = "overwrite"
    SKIP = "skip"
    DIFF = "diff"


class SourceType(str, Enum):
    OFFICIAL = "official"
    COMMUNITY = "community"
    CUSTOM = "custom"


@dataclass(frozen=True)
class Skill:
    name: str
    description: str
    path: Path
    source: str

    @property
    def label(self) -> str:
        return f"{self.source}/{self.name}"


@dataclass(frozen=True)
class DeployedSkill:
    name: str
    source: str
    deploy_method: DeployMethod
    path: Optional[Path] = None
    ambiguous: bool = False
    mode: str = ALL_MODES

    @property
    def has_known_source(self) -> bool:
        return self.source != UNKNOWN_SOURCE

    def as_dict(self) -> dict[str, str]:
        payload = {
            "name": self.name,
            "source": self.source,
            "deployMode": self.deploy_method.value,
        }
        # Entries of the base directory keep the plain three-key shape.
        if self.mode != ALL_MODES:
            payload["mode"] = self.mode
        return payload

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "DeployedSkill":
        return cls(
            name=str(payload["name"]),
            source=str(payload.get("source") or UNKNOWN_SOURCE),
            deploy_method=DeployMethod(payload.get("deployMode", DeployMethod.LINK.value)),
            mode=str(payload.get("mode", ALL_MODES)),
        )


@dataclass
class ToolDeployment:
    tool_id: str
    target_dir: str
    mode: str
    skills: list[DeployedSkill]
    deployed_at: Optional[str] = None

    def skill_names(self) -> list[str]:
        return [skill.name for skill in self.skills]

    def find(self, name: str) -> Optional[DeployedSkill]:
        for skill in self.skills:
            if skill.name == name:
                return skill
        return None

    def as_dict(self) -> dict[str, Any]:
        return {
            "targetDir": self.target_dir,
            "mode": self.mode,
            "deployedAt": self.deployed_at,
            "skills": [skill.as_dict() for skill in self.skills],
        }

    @classmethod
    def from_dict(cls, tool_id: str, payload: dict[str, Any]) -> "ToolDeployment":
        return cls(
            tool_id=tool_id,
            target_dir=str(payload["targetDir"]),
            mode=str(payload.get("mode", "all")),
            deployed_at=payload.get("deployedAt"),
            skills=[DeployedSkill.from_dict(item) for item in payload.get("skills", [])],
        )


@dataclass
class ProjectMetadata:
    version: str = METADATA_VERSION
    tools: dict[str, ToolDeployment] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "tools": {
                tool_id: deployment.as_dict()
                for tool_id, deployment in self.tools.items()
            },
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "ProjectMetadata":
        tools = payload.get("tools", {})
        return cls(
            version=str(payload.get("version", METADATA_VERSION)),
            tools={
                tool_id: ToolDeployment.from_dict(tool_id, item)
                for tool_id, item in tools.items()
            },
        )


@dataclass(frozen=True)
class SkillPartition:
    to_add: list[str]
    to_keep: list[str]
    to_remove: list[str]


@dataclass(frozen=True)
class SkillOutcome:
    name: str
    status: OutcomeStatus
    detail: str = ""


@dataclass
class ReconcileResult:
    tool_id: str
    target_dir: str
    mode: str
    method: DeployMethod
    outcomes: list[SkillOutcome] = field(default_factory=list)
    records: list[DeployedSkill] = field(default_factory=list)

    def _names(self, status: OutcomeStatus) -> list[str]:
        return [item.name for item in self.outcomes if item.status == status]

    @property
    def added(self) -> list[str]:
        return self._names(OutcomeStatus.ADDED)

    @property
    def kept(self) -> list[str]:
        return self._names(OutcomeStatus.KEPT)

    @property
    def removed(self) -> list[str]:
        return self._names(OutcomeStatus.REMOVED)

    @property
    def failed(self) -> list[str]:
        return self._names(OutcomeStatus.FAILED)

    @property
    def missing(self) -> list[str]:
        return self._names(OutcomeStatus.MISSING)

    def is_clean(self) -> bool:
        return not self.failed and not self.missing


@dataclass(frozen=True)
class SyncEntry:
    name: str
    status: SyncStatus
    deploy_method: DeployMethod
    action: Optional[str] = None
    detail: str = ""


@dataclass
class SyncReport:
    tool_id: str
    target_dir: str
    mode: str
    entries: list[SyncEntry] = field(default_factory=list)
    updated: int = 0
    removed: int = 0
    unchanged: int = 0
    failures: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SourceRef:
    owner: str
    repo: str
    path: str = ""
    branch: Optional[str] = None

    @property
    def key(self) -> str:
        return f"{self.owner}/{self.repo}"

    def child(self, path: str) -> "SourceRef":
        return SourceRef(owner=self.owner, repo=self.repo, path=path, branch=self.branch)


@dataclass(frozen=True)
class RemoteEntry:
    name: str
    path: str


@dataclass(frozen=True)
class RemoteSkill:
    name: str
    path: str
    description: str = ""


@dataclass(frozen=True)
class SourceRecord:
    url: str
    type: SourceType
    repo_name: str
    installed_at: str
    updated_at: str

    def as_dict(self) -> dict[str, str]:
        return {
            "url": self.url,
            "type": self.type.value,
            "repoName": self.repo_name,
            "installedAt": self.installed_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "SourceRecord":
        return cls(
            url=str(payload["url"]),
            type=SourceType(payload["type"]),
            repo_name=str(payload["repoName"]),
            installed_at=str(payload.get("installedAt", "")),
            updated_at=str(payload.get("updatedAt", "")),
        )


@dataclass(frozen=True)
class InstallResult:
    target_base: Path
    installed: list[str]
    failed: list[str]
    skipped: list[str] = field(default_factory=list)
    source_key: Optional[str] = None
