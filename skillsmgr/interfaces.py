from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from skillsmgr.models import (
    DeployedSkill,
    DriftAction,
    OrphanAction,
    RemoteEntry,
    RemoteSkill,
    Skill,
    SourceRef,
)
from skillsmgr.tools import ToolTarget


class IRemoteSkillSource(ABC):
    """Remote location skills are fetched from."""

    @abstractmethod
    def fetch_skill_manifest(self, ref: SourceRef) -> Optional[str]:
        """Return the manifest text of the skill at ``ref``, or None if it has none."""
        raise NotImplementedError

    @abstractmethod
    def fetch_directory_listing(self, ref: SourceRef) -> list[RemoteEntry]:
        """List the immediate subdirectories of ``ref``."""
        raise NotImplementedError

    @abstractmethod
    def download_skill_tree(self, ref: SourceRef, local_dest: Path) -> None:
        """Materialize the directory at ``ref`` recursively under ``local_dest``."""
        raise NotImplementedError

    def resolve_ref(self, ref: SourceRef) -> SourceRef:
        return ref


class ISyncDecider(ABC):
    @abstractmethod
    def orphan_action(self, record: DeployedSkill) -> OrphanAction:
        raise NotImplementedError

    @abstractmethod
    def drift_action(self, record: DeployedSkill, after_diff: bool = False) -> DriftAction:
        raise NotImplementedError

    @abstractmethod
    def show_diff(self, name: str, preview: str) -> None:
        raise NotImplementedError


class IPrompter(ISyncDecider):
    @abstractmethod
    def select_tools(self, tools: list[ToolTarget], configured: list[str]) -> list[str]:
        raise NotImplementedError

    @abstractmethod
    def select_mode(self, tool: ToolTarget) -> str:
        raise NotImplementedError

    @abstractmethod
    def select_skills(self, skills: list[Skill], deployed: list[str]) -> list[str]:
        raise NotImplementedError

    @abstractmethod
    def select_remote_skills(self, skills: list[RemoteSkill]) -> list[str]:
        raise NotImplementedError

    @abstractmethod
    def choose_skill(self, name: str, candidates: list[Skill]) -> Skill:
        raise NotImplementedError
