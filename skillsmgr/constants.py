from pathlib import Path
from typing import Final


SKILL_FILENAME: Final[str] = "SKILL.md"
METADATA_FILENAME: Final[str] = ".skillsmgr.json"
METADATA_VERSION: Final[str] = "1.0"
SOURCES_FILENAME: Final[str] = "sources.json"

SKILLS_MANAGER_DIRNAME: Final[str] = ".skills-manager"
DEFAULT_SKILLS_ROOT: Final[Path] = Path("~") / SKILLS_MANAGER_DIRNAME

SOURCE_OFFICIAL: Final[str] = "official"
SOURCE_COMMUNITY: Final[str] = "community"
SOURCE_CUSTOM: Final[str] = "custom"
SKILL_SOURCES: Final[tuple[str, ...]] = (
    SOURCE_OFFICIAL,
    SOURCE_COMMUNITY,
    SOURCE_CUSTOM,
)
NESTED_SKILLS_DIRNAME: Final[str] = "skills"

UNKNOWN_SOURCE: Final[str] = "unknown"
ALL_MODES: Final[str] = "all"

ANTHROPIC_SHORTHAND: Final[str] = "anthropic"
ANTHROPIC_OWNER: Final[str] = "anthropics"
ANTHROPIC_REPO: Final[str] = "skills"
ANTHROPIC_SKILLS_REPO_URL: Final[str] = "https://github.com/anthropics/skills"
REMOTE_SKILLS_PATHS: Final[tuple[str, ...]] = ("skills", ".", "src/skills")

DIFF_PREVIEW_LINES: Final[int] = 40
