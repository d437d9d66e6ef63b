import logging
from pathlib import Path

from skillsmgr.errors import DeployError
from skillsmgr.models import DeployMethod, Skill
from skillsmgr.tools import ToolTarget
from skillsmgr.utils import copy_tree, path_exists, remove_path

logger = logging.getLogger(__name__)


class Deployer:
    """Filesystem mutations for one skill against one tool target directory."""

    def __init__(self, project_dir: Path) -> None:
        self.project_dir = project_dir

    def target_dir(self, tool: ToolTarget, mode: str | None = None) -> Path:
        return self.project_dir / tool.target_dir(mode)

    def deployed_path(self, skill_name: str, tool: ToolTarget, mode: str | None = None) -> Path:
        return self.target_dir(tool, mode) / skill_name

    def is_deployed(self, skill_name: str, tool: ToolTarget, mode: str | None = None) -> bool:
        return path_exists(self.deployed_path(skill_name, tool, mode))

    def deploy(
        self,
        skill: Skill,
        tool: ToolTarget,
        method: DeployMethod,
        mode: str | None = None,
    ) -> Path:
        destination = self.deployed_path(skill.name, tool, mode)
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            if method == DeployMethod.LINK:
                self._link(skill.path, destination)
            else:
                self._copy(skill.path, destination)
        except OSError as exc:
            raise DeployError(destination, f"{method.value} failed ({exc})") from exc

        logger.debug("Deployed %s to %s (%s)", skill.name, destination, method.value)
        return destination

    def remove(self, skill_name: str, tool: ToolTarget, mode: str | None = None) -> bool:
        """Delete the deployed entry; returns False when nothing was there."""
        destination = self.deployed_path(skill_name, tool, mode)
        if not path_exists(destination):
            return False
        try:
            remove_path(destination)
        except OSError as exc:
            raise DeployError(destination, f"remove failed ({exc})") from exc
        logger.debug("Removed %s", destination)
        return True

    @staticmethod
    def _link(source: Path, destination: Path) -> None:
        if path_exists(destination):
            remove_path(destination)
        # Unresolved, so a symlinked skill directory still maps back to its category.
        destination.symlink_to(source.absolute(), target_is_directory=True)

    @staticmethod
    def _copy(source: Path, destination: Path) -> None:
        # Never copy through a previous link into the source tree.
        if destination.is_symlink():
            destination.unlink()
        copy_tree(source, destination)
