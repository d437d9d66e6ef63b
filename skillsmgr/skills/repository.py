"""Read skill bundles from the local skills root.

Layout::

    <root>/official/<repo>/[skills/]<skill>/SKILL.md
    <root>/community/<repo>/[skills/]<skill>/SKILL.md
    <root>/custom/<skill>/SKILL.md
"""

import logging
from pathlib import Path
from typing import Iterable, Optional

from skillsmgr.constants import (
    NESTED_SKILLS_DIRNAME,
    SKILL_FILENAME,
    SKILL_SOURCES,
    SOURCE_CUSTOM,
)
from skillsmgr.models import Skill
from skillsmgr.skills.parser import parse_manifest
from skillsmgr.utils import list_directories, path_exists

logger = logging.getLogger(__name__)

EXAMPLE_SKILL_NAME = "example-skill"
EXAMPLE_SKILL_MANIFEST = """---
name: example-skill
description: Template for writing your own skill. Copy this directory and edit it.
---

# Example Skill

Describe when the assistant should use this skill and what it does.

## Instructions

1. Keep the header block above: `name` and `description` are read by skillsmgr.
2. Put supporting files (scripts, references, templates) next to this file.
3. Deploy it with `skillsmgr init` or `skillsmgr add example-skill`.
"""


class SkillRepository:
    def __init__(self, root: Path) -> None:
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    def source_dir(self, category: str) -> Path:
        return self.root / category

    def initialize(self) -> tuple[list[str], bool]:
        """Create the category directories and seed the example skill.

        Returns the categories that did not exist yet and whether the example
        skill was written. An existing example skill is left untouched.
        """
        created: list[str] = []
        for category in SKILL_SOURCES:
            source_dir = self.source_dir(category)
            if not source_dir.is_dir():
                created.append(category)
            source_dir.mkdir(parents=True, exist_ok=True)

        example_dir = self.source_dir(SOURCE_CUSTOM) / EXAMPLE_SKILL_NAME
        if path_exists(example_dir):
            return created, False
        example_dir.mkdir(parents=True)
        (example_dir / SKILL_FILENAME).write_text(EXAMPLE_SKILL_MANIFEST, encoding="utf-8")
        logger.info("Seeded %s", example_dir)
        return created, True

    def list_all(self) -> list[Skill]:
        skills: list[Skill] = []
        for category in SKILL_SOURCES:
            skills.extend(self.list_by_category(category))
        return skills

    def list_by_category(self, category: str) -> list[Skill]:
        source_dir = self.source_dir(category)
        if not source_dir.is_dir():
            return []

        if category == SOURCE_CUSTOM:
            return self._load_many(list_directories(source_dir), source=SOURCE_CUSTOM)

        skills: list[Skill] = []
        for repo_dir in list_directories(source_dir):
            nested = repo_dir / NESTED_SKILLS_DIRNAME
            search_dir = nested if nested.is_dir() else repo_dir
            skills.extend(
                self._load_many(
                    list_directories(search_dir),
                    source=f"{category}/{repo_dir.name}",
                )
            )
        return skills

    def get_by_name(self, name: str) -> Optional[Skill]:
        matches = self.find_by_name(name)
        return matches[0] if matches else None

    def find_by_name(self, name: str) -> list[Skill]:
        return [skill for skill in self.list_all() if skill.name == name]

    def by_names(self, names: Iterable[str]) -> list[Skill]:
        """Resolve ``names`` in order; unknown names are dropped."""
        index: dict[str, Skill] = {}
        for skill in self.list_all():
            index.setdefault(skill.name, skill)
        return [index[name] for name in names if name in index]

    def resolve(self, name: str, source: Optional[str] = None) -> Optional[Skill]:
        """Prefer the match from ``source``; fall back to the first name match."""
        matches = self.find_by_name(name)
        if not matches:
            return None
        if source is not None:
            for skill in matches:
                if skill.source == source:
                    return skill
        return matches[0]

    def group_by_source(self) -> dict[str, list[Skill]]:
        grouped: dict[str, list[Skill]] = {}
        for skill in self.list_all():
            grouped.setdefault(skill.source, []).append(skill)
        return grouped

    def _load_many(self, skill_dirs: list[Path], source: str) -> list[Skill]:
        skills: list[Skill] = []
        for skill_dir in skill_dirs:
            skill = self._load_skill(skill_dir, source)
            if skill is not None:
                skills.append(skill)
        return skills

    @staticmethod
    def _load_skill(skill_dir: Path, source: str) -> Optional[Skill]:
        manifest_path = skill_dir / SKILL_FILENAME
        if not manifest_path.is_file():
            return None
        try:
            manifest = parse_manifest(manifest_path)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Skipping unreadable manifest %s: %s", manifest_path, exc)
            return None
        return Skill(
            name=manifest.name or skill_dir.name,
            description=manifest.description,
            path=skill_dir,
            source=source,
        )
