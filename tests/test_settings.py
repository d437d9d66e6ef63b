from pathlib import Path

from skillsmgr.settings import ManagerSettings


def test_defaults_use_home_and_cwd(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)

    settings = ManagerSettings.resolve(environ={})

    assert settings.skills_root == (tmp_path / ".skills-manager").resolve()
    assert settings.project_dir == tmp_path.resolve()
    assert settings.metadata_path == tmp_path.resolve() / ".skillsmgr.json"
    assert settings.sources_path == (tmp_path / ".skills-manager").resolve() / "sources.json"
    assert settings.github_token is None


def test_environment_overrides(tmp_path: Path) -> None:
    settings = ManagerSettings.resolve(
        environ={
            "SKILLSMGR_HOME": str(tmp_path / "root"),
            "SKILLSMGR_PROJECT": str(tmp_path / "proj"),
            "GITHUB_TOKEN": "abc",
        }
    )

    assert settings.skills_root == (tmp_path / "root").resolve()
    assert settings.project_dir == (tmp_path / "proj").resolve()
    assert settings.github_token == "abc"


def test_explicit_paths_win_over_environment(tmp_path: Path) -> None:
    settings = ManagerSettings.resolve(
        skills_root=tmp_path / "explicit",
        environ={"SKILLSMGR_HOME": str(tmp_path / "env")},
    )

    assert settings.skills_root == (tmp_path / "explicit").resolve()


def test_is_set_up(tmp_path: Path) -> None:
    settings = ManagerSettings(skills_root=tmp_path / "root", project_dir=tmp_path)

    assert not settings.is_set_up()
    (tmp_path / "root").mkdir()
    assert settings.is_set_up()
