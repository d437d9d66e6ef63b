import shutil
from pathlib import Path

import pytest

from skillsmgr.context import ManagerServices
from skillsmgr.deployment.sync import drift_preview
from skillsmgr.interfaces import ISyncDecider
from skillsmgr.models import DeployMethod, DeployedSkill, DriftAction, OrphanAction, SyncStatus
from skillsmgr.tools import ToolId, tool_target


class ScriptedDecider(ISyncDecider):
    def __init__(self, orphan: OrphanAction = OrphanAction.KEEP, drift: list[DriftAction] | None = None) -> None:
        self.orphan = orphan
        self.drift = list(drift or [DriftAction.SKIP])
        self.orphan_calls: list[str] = []
        self.drift_calls: list[tuple[str, bool]] = []
        self.diffs: list[tuple[str, str]] = []

    def orphan_action(self, record: DeployedSkill) -> OrphanAction:
        self.orphan_calls.append(record.name)
        return self.orphan

    def drift_action(self, record: DeployedSkill, after_diff: bool = False) -> DriftAction:
        self.drift_calls.append((record.name, after_diff))
        return self.drift.pop(0)

    def show_diff(self, name: str, preview: str) -> None:
        self.diffs.append((name, preview))


def _deploy(services: ManagerServices, names: list[str], method: DeployMethod, tool: ToolId = ToolId.CURSOR):
    services.engine.reconcile(tool_target(tool), names, method)
    return services.store.get_tool_deployment(tool.value)


def test_linked_skill_is_up_to_date(services: ManagerServices, make_skill) -> None:
    make_skill("community/acme", "pdf")
    deployment = _deploy(services, ["pdf"], DeployMethod.LINK)
    decider = ScriptedDecider()

    report = services.detector.check_and_reconcile(deployment, decider)

    assert [entry.status for entry in report.entries] == [SyncStatus.UP_TO_DATE]
    assert report.unchanged == 1
    assert decider.orphan_calls == []
    assert decider.drift_calls == []


def test_symlinked_source_directory_is_not_orphaned(
    services: ManagerServices, skills_root: Path, project_dir: Path, tmp_path: Path
) -> None:
    checkout = tmp_path / "dev" / "my-skill"
    checkout.mkdir(parents=True)
    (checkout / "SKILL.md").write_text("---\nname: my-skill\ndescription: Local checkout\n---\n", encoding="utf-8")
    (skills_root / "custom").mkdir(parents=True)
    (skills_root / "custom" / "my-skill").symlink_to(checkout, target_is_directory=True)
    tool = tool_target(ToolId.CLAUDE_CODE)
    services.engine.reconcile(tool, ["my-skill"], DeployMethod.LINK)
    decider = ScriptedDecider(orphan=OrphanAction.REMOVE)

    scanned = services.scanner.scan_tool_deployment(tool)[0]
    report = services.detector.check_and_reconcile(scanned, decider)

    assert [entry.status for entry in report.entries] == [SyncStatus.UP_TO_DATE]
    assert decider.orphan_calls == []
    assert (project_dir / ".claude" / "skills" / "my-skill").is_symlink()


def test_unchanged_copy_is_up_to_date(services: ManagerServices, make_skill) -> None:
    make_skill("custom", "pdf")
    deployment = _deploy(services, ["pdf"], DeployMethod.COPY)

    report = services.detector.check_and_reconcile(deployment, ScriptedDecider())

    assert report.entries[0].status == SyncStatus.UP_TO_DATE


def test_orphan_removed_on_request(services: ManagerServices, make_skill, project_dir: Path) -> None:
    source = make_skill("community/acme", "pdf")
    make_skill("community/acme", "xlsx")
    deployment = _deploy(services, ["pdf", "xlsx"], DeployMethod.LINK)
    shutil.rmtree(source)
    decider = ScriptedDecider(orphan=OrphanAction.REMOVE)

    report = services.detector.check_and_reconcile(deployment, decider)

    assert decider.orphan_calls == ["pdf"]
    assert report.removed == 1
    assert report.entries[0].status == SyncStatus.ORPHANED
    assert report.entries[0].action == "remove"
    link = project_dir / ".cursor" / "skills" / "pdf"
    assert not link.is_symlink() and not link.exists()
    assert services.store.get_tool_deployment("cursor").skill_names() == ["xlsx"]


def test_orphan_kept_leaves_link_and_record(services: ManagerServices, make_skill, project_dir: Path) -> None:
    source = make_skill("community/acme", "pdf")
    deployment = _deploy(services, ["pdf"], DeployMethod.LINK)
    shutil.rmtree(source)

    report = services.detector.check_and_reconcile(deployment, ScriptedDecider(orphan=OrphanAction.KEEP))

    assert report.removed == 0
    assert report.entries[0].action == "keep"
    assert (project_dir / ".cursor" / "skills" / "pdf").is_symlink()
    assert services.store.get_tool_deployment("cursor").skill_names() == ["pdf"]


def test_copy_with_deleted_source_is_orphaned_not_drifted(services: ManagerServices, make_skill) -> None:
    source = make_skill("custom", "pdf")
    deployment = _deploy(services, ["pdf"], DeployMethod.COPY)
    shutil.rmtree(source)
    decider = ScriptedDecider()

    report = services.detector.check_and_reconcile(deployment, decider)

    assert report.entries[0].status == SyncStatus.ORPHANED
    assert decider.drift_calls == []


def test_unknown_source_is_orphaned(services: ManagerServices, project_dir: Path) -> None:
    manual = project_dir / ".cursor" / "skills" / "manual"
    manual.mkdir(parents=True)
    (manual / "SKILL.md").write_text("x", encoding="utf-8")
    services.store.replace_deployment(
        "cursor", ".cursor/skills", "all", [DeployedSkill("manual", "unknown", DeployMethod.COPY)]
    )

    report = services.detector.check_and_reconcile(
        services.store.get_tool_deployment("cursor"), ScriptedDecider()
    )

    assert report.entries[0].status == SyncStatus.ORPHANED


def test_drift_overwrite_refreshes_copy(services: ManagerServices, make_skill, project_dir: Path) -> None:
    source = make_skill("custom", "pdf", body="v1")
    deployment = _deploy(services, ["pdf"], DeployMethod.COPY)
    (source / "SKILL.md").write_text("---\nname: pdf\n---\n\nv2", encoding="utf-8")

    report = services.detector.check_and_reconcile(
        deployment, ScriptedDecider(drift=[DriftAction.OVERWRITE])
    )

    deployed = project_dir / ".cursor" / "skills" / "pdf" / "SKILL.md"
    assert deployed.read_text(encoding="utf-8").endswith("v2")
    assert report.updated == 1
    assert report.entries[0].status == SyncStatus.DRIFTED
    assert report.entries[0].action == "overwrite"
    assert services.store.get_deployed_skills("cursor") == [
        DeployedSkill("pdf", "custom", DeployMethod.COPY)
    ]


def test_drift_skip_leaves_copy(services: ManagerServices, make_skill, project_dir: Path) -> None:
    source = make_skill("custom", "pdf", body="v1")
    deployment = _deploy(services, ["pdf"], DeployMethod.COPY)
    (source / "SKILL.md").write_text("---\nname: pdf\n---\n\nv2", encoding="utf-8")

    report = services.detector.check_and_reconcile(deployment, ScriptedDecider(drift=[DriftAction.SKIP]))

    deployed = project_dir / ".cursor" / "skills" / "pdf" / "SKILL.md"
    assert deployed.read_text(encoding="utf-8").endswith("v1")
    assert report.updated == 0
    assert report.unchanged == 1
    assert report.entries[0].action == "skip"


def test_diff_is_shown_before_asking_again(services: ManagerServices, make_skill) -> None:
    source = make_skill("custom", "pdf", body="old line")
    deployment = _deploy(services, ["pdf"], DeployMethod.COPY)
    (source / "SKILL.md").write_text("---\nname: pdf\n---\n\nnew line", encoding="utf-8")
    decider = ScriptedDecider(drift=[DriftAction.DIFF, DriftAction.OVERWRITE])

    report = services.detector.check_and_reconcile(deployment, decider)

    assert decider.drift_calls == [("pdf", False), ("pdf", True)]
    name, preview = decider.diffs[0]
    assert name == "pdf"
    assert "-old line" in preview
    assert "+new line" in preview
    assert report.updated == 1


def test_local_edit_to_copy_counts_as_drift(services: ManagerServices, make_skill, project_dir: Path) -> None:
    make_skill("custom", "pdf")
    deployment = _deploy(services, ["pdf"], DeployMethod.COPY)
    (project_dir / ".cursor" / "skills" / "pdf" / "SKILL.md").write_text("edited", encoding="utf-8")

    report = services.detector.check_and_reconcile(deployment, ScriptedDecider())

    assert report.entries[0].status == SyncStatus.DRIFTED


def test_mode_variant_deployment_is_checked_in_its_directory(
    services: ManagerServices, make_skill, project_dir: Path
) -> None:
    source = make_skill("custom", "pdf", body="v1")
    services.engine.reconcile(tool_target(ToolId.ROO_CODE), ["pdf"], DeployMethod.COPY, mode="code")
    (source / "SKILL.md").write_text("---\nname: pdf\n---\n\nv2", encoding="utf-8")

    report = services.detector.check_and_reconcile(
        services.store.get_tool_deployment("roo-code"), ScriptedDecider(drift=[DriftAction.OVERWRITE])
    )

    assert report.mode == "code"
    deployed = project_dir / ".roo" / "skills-code" / "pdf" / "SKILL.md"
    assert deployed.read_text(encoding="utf-8").endswith("v2")


@pytest.mark.parametrize("limit", [3, 5])
def test_drift_preview_is_truncated(limit: int) -> None:
    local = "\n".join(f"line {index}" for index in range(20))
    source = "\n".join(f"changed {index}" for index in range(20))

    lines = drift_preview(local, source, limit=limit).splitlines()

    assert len(lines) == limit + 1
    assert lines[-1].startswith("... (")
    assert lines[-1].endswith("more lines)")


def test_drift_preview_of_identical_text_is_empty() -> None:
    assert drift_preview("same", "same") == ""
