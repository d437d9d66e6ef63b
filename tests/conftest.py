import sys
import json
from pathlib import Path
from typing import Any, Callable

from click.testing import CliRunner
import pytest


def _ensure_repo_on_path() -> None:
    repo_root = Path(__file__).resolve().parent.parent
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))


_ensure_repo_on_path()

from skillsmgr.context import ManagerServices  # noqa: E402
from skillsmgr.settings import ManagerSettings  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("SKILLSMGR_HOME", raising=False)
    monkeypatch.delenv("SKILLSMGR_PROJECT", raising=False)
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.setattr(Path, "home", lambda: tmp_path)


@pytest.fixture
def write_json():
    def _write(path: Path, payload: dict) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload), encoding="utf-8")

    return _write


@pytest.fixture
def skills_root(tmp_path: Path) -> Path:
    return tmp_path / ".skills-manager"


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    path = tmp_path / "project"
    path.mkdir()
    return path


@pytest.fixture
def make_skill(skills_root: Path) -> Callable[..., Path]:
    """Create ``<skills root>/<location>/<name>/SKILL.md`` and return the skill dir."""

    def _make(location: str, name: str, description: str = "", body: str = "") -> Path:
        skill_dir = skills_root / location / name
        skill_dir.mkdir(parents=True, exist_ok=True)
        (skill_dir / "SKILL.md").write_text(
            f"---\nname: {name}\ndescription: {description or name}\n---\n\n{body}",
            encoding="utf-8",
        )
        return skill_dir

    return _make


@pytest.fixture
def settings(skills_root: Path, project_dir: Path) -> ManagerSettings:
    return ManagerSettings(skills_root=skills_root, project_dir=project_dir)


@pytest.fixture
def services(settings: ManagerSettings) -> ManagerServices:
    return ManagerServices.build(settings)


@pytest.fixture
def cli_runner(tmp_path: Path, skills_root: Path, project_dir: Path) -> CliRunner:
    class HomeCliRunner(CliRunner):
        def invoke(self, cli: Any, args: Any = None, **kwargs: Any):  # type: ignore[override]
            env = dict(kwargs.pop("env", {}) or {})
            env.setdefault("HOME", str(tmp_path))
            env.setdefault("SKILLSMGR_HOME", str(skills_root))
            env.setdefault("SKILLSMGR_PROJECT", str(project_dir))
            kwargs["env"] = env
            return super().invoke(cli, args=args, **kwargs)

    return HomeCliRunner()
