import logging
import re
import subprocess
from pathlib import Path

from skillsmgr.errors import RemoteFetchError

logger = logging.getLogger(__name__)

_REPO_NAME_RE = re.compile(r"/([^/]+?)(?:\.git)?/?$")


def repo_name_from_url(url: str) -> str:
    match = _REPO_NAME_RE.search(url)
    return match.group(1) if match else "unknown"


class GitService:
    def __init__(self, executable: str = "git") -> None:
        self.executable = executable

    def clone(self, url: str, target: Path) -> Path:
        """Shallow-clone ``url`` into ``target``, or pull when it already exists."""
        if (target / ".git").is_dir():
            logger.info("Updating existing clone %s", target)
            self._run(["pull", "--ff-only"], cwd=target, location=url)
            return target

        target.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Cloning %s into %s", url, target)
        self._run(["clone", "--depth", "1", url, str(target)], cwd=target.parent, location=url)
        return target

    def _run(self, args: list[str], cwd: Path, location: str) -> None:
        try:
            subprocess.run(
                [self.executable, *args],
                cwd=str(cwd),
                check=True,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as exc:
            raise RemoteFetchError(location, f"{self.executable} not found") from exc
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or exc.stdout or "").strip() or f"exit code {exc.returncode}"
            raise RemoteFetchError(location, detail) from exc
