import shutil
from pathlib import Path

import pytest

from skillsmgr.deployment.deployer import Deployer
from skillsmgr.deployment.metadata import DeploymentStateStore
from skillsmgr.deployment.scanner import DeploymentScanner
from skillsmgr.models import DeployMethod, DeployedSkill
from skillsmgr.skills.repository import SkillRepository
from skillsmgr.tools import ToolId, tool_target


@pytest.fixture
def repository(skills_root: Path) -> SkillRepository:
    return SkillRepository(skills_root)


@pytest.fixture
def store(project_dir: Path) -> DeploymentStateStore:
    return DeploymentStateStore(project_dir / ".skillsmgr.json")


@pytest.fixture
def scanner(project_dir: Path, repository: SkillRepository, store: DeploymentStateStore) -> DeploymentScanner:
    return DeploymentScanner(project_dir, repository, store=store)


@pytest.mark.parametrize(
    "location,expected",
    [
        ("official/anthropic", "official/anthropic"),
        ("community/acme", "community/acme"),
        ("community/acme/skills", "community/acme"),
        ("custom", "custom"),
    ],
)
def test_link_round_trip_recovers_source_tag(
    make_skill,
    repository: SkillRepository,
    scanner: DeploymentScanner,
    project_dir: Path,
    location: str,
    expected: str,
) -> None:
    make_skill(location, "pdf")
    skill = repository.get_by_name("pdf")
    assert skill.source == expected
    tool = tool_target(ToolId.CLAUDE_CODE)
    Deployer(project_dir).deploy(skill, tool, DeployMethod.LINK)

    deployments = scanner.scan_tool_deployment(tool)

    assert len(deployments) == 1
    record = deployments[0].skills[0]
    assert record.name == "pdf"
    assert record.deploy_method == DeployMethod.LINK
    assert record.source == expected


def test_symlinked_skill_directory_keeps_its_category(
    repository: SkillRepository,
    scanner: DeploymentScanner,
    skills_root: Path,
    project_dir: Path,
    tmp_path: Path,
) -> None:
    checkout = tmp_path / "dev" / "my-skill"
    checkout.mkdir(parents=True)
    (checkout / "SKILL.md").write_text(
        "---\nname: my-skill\ndescription: Local checkout\n---\n", encoding="utf-8"
    )
    (skills_root / "custom").mkdir(parents=True)
    (skills_root / "custom" / "my-skill").symlink_to(checkout, target_is_directory=True)
    skill = repository.get_by_name("my-skill")
    tool = tool_target(ToolId.CLAUDE_CODE)
    Deployer(project_dir).deploy(skill, tool, DeployMethod.LINK)

    record = scanner.scan_tool_deployment(tool)[0].skills[0]

    assert record.name == "my-skill"
    assert record.source == "custom"
    assert (project_dir / ".claude" / "skills" / "my-skill" / "SKILL.md").is_file()


def test_copy_matches_first_source_by_name(
    make_skill, repository: SkillRepository, scanner: DeploymentScanner, project_dir: Path
) -> None:
    make_skill("official/anthropic", "pdf")
    make_skill("custom", "pdf")
    tool = tool_target(ToolId.CURSOR)
    Deployer(project_dir).deploy(repository.resolve("pdf", "custom"), tool, DeployMethod.COPY)

    record = scanner.currently_deployed(tool, "all")[0]

    assert record.deploy_method == DeployMethod.COPY
    assert record.source == "official/anthropic"
    assert record.ambiguous


def test_copy_prefers_recorded_source(
    make_skill,
    repository: SkillRepository,
    scanner: DeploymentScanner,
    store: DeploymentStateStore,
    project_dir: Path,
) -> None:
    make_skill("official/anthropic", "pdf")
    make_skill("custom", "pdf")
    tool = tool_target(ToolId.CURSOR)
    Deployer(project_dir).deploy(repository.resolve("pdf", "custom"), tool, DeployMethod.COPY)
    store.replace_deployment(
        "cursor", ".cursor/skills", "all", [DeployedSkill("pdf", "custom", DeployMethod.COPY)]
    )

    record = scanner.currently_deployed(tool, "all")[0]

    assert record.source == "custom"
    assert not record.ambiguous


def test_untracked_directory_is_unknown(scanner: DeploymentScanner, project_dir: Path) -> None:
    manual = project_dir / ".claude" / "skills" / "handmade"
    manual.mkdir(parents=True)
    (manual / "SKILL.md").write_text("---\nname: handmade\n---\n", encoding="utf-8")

    records = scanner.deployed_skills("claude-code")

    assert [(record.name, record.source) for record in records] == [("handmade", "unknown")]


def test_entries_without_manifest_are_skipped(scanner: DeploymentScanner, project_dir: Path) -> None:
    target = project_dir / ".claude" / "skills"
    (target / "not-a-skill").mkdir(parents=True)
    (target / "README.md").write_text("x", encoding="utf-8")

    assert scanner.scan_tool_deployment(tool_target(ToolId.CLAUDE_CODE)) == []


def test_dangling_link_is_still_reported(
    make_skill, repository: SkillRepository, scanner: DeploymentScanner, project_dir: Path
) -> None:
    source = make_skill("community/acme", "pdf")
    tool = tool_target(ToolId.CLAUDE_CODE)
    Deployer(project_dir).deploy(repository.get_by_name("pdf"), tool, DeployMethod.LINK)
    shutil.rmtree(source)

    record = scanner.currently_deployed(tool, "all")[0]

    assert record.deploy_method == DeployMethod.LINK
    assert record.source == "community/acme"


def test_mode_variants_are_separate_deployments(
    make_skill, repository: SkillRepository, scanner: DeploymentScanner, project_dir: Path
) -> None:
    make_skill("custom", "a")
    make_skill("custom", "b")
    tool = tool_target(ToolId.KILO_CODE)
    deployer = Deployer(project_dir)
    deployer.deploy(repository.get_by_name("a"), tool, DeployMethod.LINK, "all")
    deployer.deploy(repository.get_by_name("b"), tool, DeployMethod.LINK, "architect")

    deployments = scanner.scan_tool_deployment(tool)

    assert [(item.mode, item.target_dir, item.skill_names()) for item in deployments] == [
        ("all", ".kilocode/skills", ["a"]),
        ("architect", ".kilocode/skills-architect", ["b"]),
    ]


def test_scan_all_tools_and_configured(
    make_skill, repository: SkillRepository, scanner: DeploymentScanner, project_dir: Path
) -> None:
    make_skill("custom", "a")
    deployer = Deployer(project_dir)
    deployer.deploy(repository.get_by_name("a"), tool_target(ToolId.CURSOR), DeployMethod.LINK)
    deployer.deploy(repository.get_by_name("a"), tool_target(ToolId.WINDSURF), DeployMethod.COPY)

    assert [item.tool_id for item in scanner.scan_all_tools()] == ["cursor", "windsurf"]
    assert scanner.configured_tools() == ["cursor", "windsurf"]
    assert scanner.is_tool_configured("cursor")
    assert not scanner.is_tool_configured("cline")


def test_extract_source_from_foreign_root(scanner: DeploymentScanner) -> None:
    elsewhere = Path("/mnt/backup/.skills-manager/official/anthropic/pdf")

    assert scanner.extract_source_from_path(elsewhere) == "official/anthropic"
    assert scanner.extract_source_from_path(Path("/tmp/random/pdf")) is None


def test_corrupt_metadata_does_not_break_scan(
    make_skill,
    repository: SkillRepository,
    scanner: DeploymentScanner,
    store: DeploymentStateStore,
    project_dir: Path,
) -> None:
    make_skill("custom", "a")
    Deployer(project_dir).deploy(
        repository.get_by_name("a"), tool_target(ToolId.CURSOR), DeployMethod.COPY
    )
    store.path.write_text("{broken", encoding="utf-8")

    assert scanner.deployed_skills("cursor")[0].source == "custom"
