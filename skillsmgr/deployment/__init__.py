from skillsmgr.deployment.deployer import Deployer
from skillsmgr.deployment.metadata import DeploymentStateStore
from skillsmgr.deployment.reconciler import ReconciliationEngine, partition_skills
from skillsmgr.deployment.scanner import DeploymentScanner
from skillsmgr.deployment.sync import SyncDetector, drift_preview

__all__ = [
    "Deployer",
    "DeploymentScanner",
    "DeploymentStateStore",
    "ReconciliationEngine",
    "SyncDetector",
    "drift_preview",
    "partition_skills",
]
