"""Parse the header block of a skill manifest."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

_FRONTMATTER_RE = re.compile(r"^---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|$)", re.DOTALL)
_KEY_VALUE_RE = re.compile(r"^(name|description):[ \t]*(.+?)[ \t]*$", re.MULTILINE)


@dataclass(frozen=True)
class SkillManifest:
    name: str = ""
    description: str = ""


def parse_manifest_text(text: str) -> SkillManifest:
    match = _FRONTMATTER_RE.match(text)
    if not match:
        return SkillManifest()

    header = match.group(1)
    raw = _load_header(header)
    return SkillManifest(
        name=_as_text(raw.get("name")),
        description=_as_text(raw.get("description")),
    )


def parse_manifest(path: Path) -> SkillManifest:
    return parse_manifest_text(path.read_text(encoding="utf-8"))


def _load_header(header: str) -> dict[str, Any]:
    try:
        raw = yaml.safe_load(header)
    except yaml.YAMLError:
        raw = None
    if isinstance(raw, dict):
        return raw
    # Unquoted values such as "a: b: c" are not valid YAML; read them line by line.
    return {key: value for key, value in _KEY_VALUE_RE.findall(header)}


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()
