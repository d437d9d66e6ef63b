from dataclasses import dataclass
from typing import Optional

from skillsmgr.deployment import (
    Deployer,
    DeploymentScanner,
    DeploymentStateStore,
    ReconciliationEngine,
    SyncDetector,
)
from skillsmgr.interfaces import IRemoteSkillSource
from skillsmgr.remote import GitService, InstallService, SourcesRegistry
from skillsmgr.settings import ManagerSettings
from skillsmgr.skills import SkillRepository


@dataclass
class ManagerServices:
    """Every collaborator of one invocation, built from a single settings object."""

    settings: ManagerSettings
    skills: SkillRepository
    deployer: Deployer
    store: DeploymentStateStore
    scanner: DeploymentScanner
    engine: ReconciliationEngine
    detector: SyncDetector
    sources: SourcesRegistry

    @classmethod
    def build(cls, settings: ManagerSettings) -> "ManagerServices":
        skills = SkillRepository(settings.skills_root)
        deployer = Deployer(settings.project_dir)
        store = DeploymentStateStore(settings.metadata_path)
        scanner = DeploymentScanner(settings.project_dir, skills, store=store)
        return cls(
            settings=settings,
            skills=skills,
            deployer=deployer,
            store=store,
            scanner=scanner,
            engine=ReconciliationEngine(skills, deployer, store, scanner),
            detector=SyncDetector(skills, deployer, store),
            sources=SourcesRegistry(settings.sources_path),
        )

    def installer(
        self, remote: IRemoteSkillSource, git: Optional[GitService] = None
    ) -> InstallService:
        return InstallService(self.settings.skills_root, remote, self.sources, git=git)
