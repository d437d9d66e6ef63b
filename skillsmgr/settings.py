import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from skillsmgr.constants import DEFAULT_SKILLS_ROOT, METADATA_FILENAME, SOURCES_FILENAME

HOME_ENVVAR = "SKILLSMGR_HOME"
PROJECT_ENVVAR = "SKILLSMGR_PROJECT"
TOKEN_ENVVAR = "GITHUB_TOKEN"


@dataclass(frozen=True)
class ManagerSettings:
    skills_root: Path
    project_dir: Path
    metadata_filename: str = METADATA_FILENAME
    github_token: Optional[str] = None

    @property
    def metadata_path(self) -> Path:
        return self.project_dir / self.metadata_filename

    @property
    def sources_path(self) -> Path:
        return self.skills_root / SOURCES_FILENAME

    def is_set_up(self) -> bool:
        return self.skills_root.is_dir()

    @classmethod
    def resolve(
        cls,
        skills_root: Optional[Path] = None,
        project_dir: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "ManagerSettings":
        env = os.environ if environ is None else environ
        root = skills_root or _env_path(env, HOME_ENVVAR) or DEFAULT_SKILLS_ROOT
        project = project_dir or _env_path(env, PROJECT_ENVVAR) or Path.cwd()
        return cls(
            skills_root=root.expanduser().resolve(),
            project_dir=project.expanduser().resolve(),
            github_token=env.get(TOKEN_ENVVAR) or None,
        )


def _env_path(env: Mapping[str, str], name: str) -> Optional[Path]:
    value = env.get(name)
    return Path(value) if value else None
