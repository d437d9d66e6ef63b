"""Install and update skill bundles in the local skills root.

Every skill is downloaded into a hidden ``.<name>.partial`` sibling and only
renamed into place once the whole tree is on disk, so readers of the skills
root never see a half-downloaded skill.
"""

import logging
import shutil
import tempfile
from pathlib import Path, PurePosixPath
from typing import Callable, Iterable, Optional

from skillsmgr.constants import (
    ANTHROPIC_OWNER,
    ANTHROPIC_REPO,
    ANTHROPIC_SHORTHAND,
    ANTHROPIC_SKILLS_REPO_URL,
    NESTED_SKILLS_DIRNAME,
    REMOTE_SKILLS_PATHS,
    SKILL_FILENAME,
    SOURCE_COMMUNITY,
    SOURCE_CUSTOM,
    SOURCE_OFFICIAL,
)
from skillsmgr.errors import RemoteFetchError, SourceNotFoundError
from skillsmgr.interfaces import IRemoteSkillSource
from skillsmgr.models import InstallResult, RemoteSkill, SourceRef, SourceType
from skillsmgr.remote.git import GitService, repo_name_from_url
from skillsmgr.remote.github import parse_github_url
from skillsmgr.remote.sources import SourcesRegistry
from skillsmgr.skills.parser import parse_manifest, parse_manifest_text
from skillsmgr.utils import list_directories, path_exists, remove_path

logger = logging.getLogger(__name__)

SkillSelector = Callable[[list[RemoteSkill]], list[str]]

ANTHROPIC_REPO_NAME = "anthropic"


class InstallService:
    def __init__(
        self,
        skills_root: Path,
        remote: IRemoteSkillSource,
        sources: SourcesRegistry,
        git: Optional[GitService] = None,
    ) -> None:
        self.skills_root = skills_root
        self.remote = remote
        self.sources = sources
        self.git = git or GitService()

    def install(
        self,
        source: str,
        select: Optional[SkillSelector] = None,
        custom: bool = False,
    ) -> InstallResult:
        """Install skills from ``source``.

        ``source`` is the ``anthropic`` shorthand, a GitHub repository or tree
        URL, or any URL git can clone. ``select`` picks skill names from the
        discovered list; without it every skill is installed.
        """
        if source == ANTHROPIC_SHORTHAND:
            ref = SourceRef(owner=ANTHROPIC_OWNER, repo=ANTHROPIC_REPO)
            result = self._install_from_github(
                ANTHROPIC_SKILLS_REPO_URL, ref, select, custom, (NESTED_SKILLS_DIRNAME,)
            )
            if result is None:
                raise RemoteFetchError(ANTHROPIC_SKILLS_REPO_URL, "no skills found")
            return result

        ref = parse_github_url(source)
        if ref is not None:
            try:
                result = self._install_from_github(source, ref, select, custom)
            except RemoteFetchError as exc:
                logger.warning("GitHub API install failed for %s: %s", source, exc)
                result = None
            if result is not None:
                return result
            logger.info("Falling back to git clone for %s", source)

        return self._install_via_git(source, select, custom)

    def update(self, query: Optional[str] = None) -> list[InstallResult]:
        """Re-download every skill of every recorded source, or of one source."""
        sources = self.sources.load()
        if query is not None:
            key = self.sources.match(query)
            if key is None:
                raise SourceNotFoundError(query, list(sources))
            sources = {key: sources[key]}

        results: list[InstallResult] = []
        for key, record in sources.items():
            logger.info("Updating %s from %s", key, record.url)
            url = ANTHROPIC_SHORTHAND if record.url == ANTHROPIC_SKILLS_REPO_URL else record.url
            results.append(self.install(url, custom=record.type == SourceType.CUSTOM))
        return results

    def discover(
        self, ref: SourceRef, paths: Iterable[str] = REMOTE_SKILLS_PATHS
    ) -> list[RemoteSkill]:
        """First listing path that holds at least one directory with a manifest."""
        for path in paths:
            try:
                entries = self.remote.fetch_directory_listing(ref.child(path))
            except RemoteFetchError as exc:
                logger.debug("No listing at %s/%s: %s", ref.key, path, exc)
                continue

            skills: list[RemoteSkill] = []
            for entry in entries:
                manifest = self.remote.fetch_skill_manifest(ref.child(entry.path))
                if manifest is None:
                    continue
                skills.append(
                    RemoteSkill(
                        name=entry.name,
                        path=entry.path,
                        description=parse_manifest_text(manifest).description,
                    )
                )
            if skills:
                return skills
        return []

    def placement(self, owner: str, repo: str, custom: bool) -> tuple[SourceType, str, Path]:
        """Source type, recorded repo name and install directory for a repository."""
        if owner == ANTHROPIC_OWNER and repo == ANTHROPIC_REPO:
            return (
                SourceType.OFFICIAL,
                ANTHROPIC_REPO_NAME,
                self.skills_root / SOURCE_OFFICIAL / ANTHROPIC_REPO_NAME,
            )
        if custom:
            return SourceType.CUSTOM, repo, self.skills_root / SOURCE_CUSTOM
        return SourceType.COMMUNITY, repo, self.skills_root / SOURCE_COMMUNITY / repo

    def _install_from_github(
        self,
        url: str,
        ref: SourceRef,
        select: Optional[SkillSelector],
        custom: bool,
        paths: Iterable[str] = REMOTE_SKILLS_PATHS,
    ) -> Optional[InstallResult]:
        ref = self.remote.resolve_ref(ref)
        source_type, repo_name, target_base = self.placement(ref.owner, ref.repo, custom)

        if ref.path:
            name = PurePosixPath(ref.path).name
            candidates = [RemoteSkill(name=name, path=ref.path)]
        else:
            candidates = self.discover(ref, paths)
            if not candidates:
                return None

        selected = _select(candidates, select)
        result = InstallResult(
            target_base=target_base,
            installed=[],
            failed=[],
            skipped=[skill.name for skill in candidates if skill not in selected],
            source_key=f"{source_type.value}/{repo_name}",
        )
        for skill in selected:
            try:
                self._download(ref.child(skill.path), target_base / skill.name)
            except (RemoteFetchError, OSError) as exc:
                logger.warning("Failed to install %s: %s", skill.name, exc)
                result.failed.append(skill.name)
                continue
            result.installed.append(skill.name)

        if result.installed:
            self.sources.add(result.source_key, url, source_type, repo_name)
        return result

    def _install_via_git(
        self, url: str, select: Optional[SkillSelector], custom: bool
    ) -> InstallResult:
        repo_name = repo_name_from_url(url)
        if not custom:
            target_base = self.skills_root / SOURCE_COMMUNITY / repo_name
            fresh = not target_base.exists()
            self.git.clone(url, target_base)
            candidates = local_skills(target_base)
            selected = _select(candidates, select)
            skipped = [skill for skill in candidates if skill not in selected]
            for skill in skipped:
                remove_path(Path(skill.path))
            result = InstallResult(
                target_base=target_base,
                installed=[skill.name for skill in selected],
                failed=[],
                skipped=[skill.name for skill in skipped],
                source_key=f"{SOURCE_COMMUNITY}/{repo_name}",
            )
            if not selected and fresh:
                remove_path(target_base)
            else:
                self.sources.add(result.source_key, url, SourceType.COMMUNITY, repo_name)
            return result

        target_base = self.skills_root / SOURCE_CUSTOM
        with tempfile.TemporaryDirectory(prefix="skillsmgr-") as scratch:
            checkout = self.git.clone(url, Path(scratch) / repo_name)
            candidates = local_skills(checkout)
            selected = _select(candidates, select)
            result = InstallResult(
                target_base=target_base,
                installed=[],
                failed=[],
                skipped=[skill.name for skill in candidates if skill not in selected],
                source_key=f"{SOURCE_CUSTOM}/{repo_name}",
            )
            for skill in selected:
                try:
                    _stage(target_base / skill.name, lambda dest: shutil.copytree(skill.path, dest))
                except OSError as exc:
                    logger.warning("Failed to install %s: %s", skill.name, exc)
                    result.failed.append(skill.name)
                    continue
                result.installed.append(skill.name)

        if result.installed:
            self.sources.add(result.source_key, url, SourceType.CUSTOM, repo_name)
        return result

    def _download(self, ref: SourceRef, destination: Path) -> None:
        _stage(destination, lambda partial: self.remote.download_skill_tree(ref, partial))
        logger.debug("Installed %s/%s into %s", ref.key, ref.path, destination)


def local_skills(checkout: Path) -> list[RemoteSkill]:
    """Skill directories of a local checkout, preferring its ``skills/`` folder."""
    nested = checkout / NESTED_SKILLS_DIRNAME
    search_dir = nested if nested.is_dir() else checkout
    skills: list[RemoteSkill] = []
    for skill_dir in list_directories(search_dir):
        manifest_path = skill_dir / SKILL_FILENAME
        if not manifest_path.is_file():
            continue
        skills.append(
            RemoteSkill(
                name=skill_dir.name,
                path=str(skill_dir),
                description=parse_manifest(manifest_path).description,
            )
        )
    return skills


def _select(candidates: list[RemoteSkill], select: Optional[SkillSelector]) -> list[RemoteSkill]:
    if select is None:
        return list(candidates)
    chosen = set(select(candidates))
    return [skill for skill in candidates if skill.name in chosen]


def _stage(destination: Path, fill: Callable[[Path], object]) -> None:
    partial = destination.parent / f".{destination.name}.partial"
    if path_exists(partial):
        remove_path(partial)
    partial.parent.mkdir(parents=True, exist_ok=True)
    try:
        fill(partial)
    except Exception:
        if path_exists(partial):
            remove_path(partial)
        raise
    if path_exists(destination):
        remove_path(destination)
    partial.rename(destination)
