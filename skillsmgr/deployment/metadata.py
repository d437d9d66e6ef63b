"""Per-project deployment record (``.skillsmgr.json``).

The record is a cache of what this manager deployed. Commands that need the
real state of a project scan the tool directories instead.
"""

import logging
from pathlib import Path
from typing import Any, Optional

from jsonschema import Draft202012Validator

from skillsmgr.constants import ALL_MODES
from skillsmgr.errors import InvalidConfigSchemaError, InvalidJsonFormatError
from skillsmgr.models import DeployedSkill, ProjectMetadata, ToolDeployment
from skillsmgr.tools import tool_target
from skillsmgr.utils import now_iso, read_json_safe, write_json

logger = logging.getLogger(__name__)

METADATA_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["version", "tools"],
    "properties": {
        "version": {"type": "string"},
        "tools": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "required": ["targetDir", "mode", "skills"],
                "properties": {
                    "targetDir": {"type": "string"},
                    "mode": {"type": "string"},
                    "deployedAt": {"type": ["string", "null"]},
                    "skills": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "required": ["name", "deployMode"],
                            "properties": {
                                "name": {"type": "string", "minLength": 1},
                                "source": {"type": "string"},
                                "deployMode": {"enum": ["link", "copy"]},
                                "mode": {"type": "string"},
                            },
                        },
                    },
                },
            },
        },
    },
}


def format_schema_error(error: Any) -> str:
    path = ".".join([str(part) for part in error.path])
    return f"{error.message} at {path}" if path else str(error.message)


class DeploymentStateStore:
    def __init__(self, path: Path) -> None:
        self._path = path
        self._validator = Draft202012Validator(METADATA_SCHEMA)

    @property
    def path(self) -> Path:
        return self._path

    def has_metadata(self) -> bool:
        return self.path.is_file()

    def load(self) -> ProjectMetadata:
        payload, error = read_json_safe(self.path)
        if error is not None:
            raise InvalidJsonFormatError(self.path, error)
        if payload is None:
            return ProjectMetadata()

        schema_error = next(iter(self._validator.iter_errors(payload)), None)
        if schema_error is not None:
            raise InvalidConfigSchemaError(self.path, format_schema_error(schema_error))
        return ProjectMetadata.from_dict(payload)

    def save(self, metadata: ProjectMetadata) -> None:
        write_json(self.path, metadata.as_dict())

    def get_tool_deployment(self, tool_id: str) -> Optional[ToolDeployment]:
        return self.load().tools.get(tool_id)

    def get_deployed_skills(self, tool_id: str, mode: Optional[str] = None) -> list[DeployedSkill]:
        deployment = self.get_tool_deployment(tool_id)
        if deployment is None:
            return []
        return [skill for skill in deployment.skills if mode is None or skill.mode == mode]

    def replace_deployment(
        self,
        tool_id: str,
        target_dir: str,
        mode: str,
        skills: list[DeployedSkill],
    ) -> Optional[ToolDeployment]:
        """Replace the entries of one (tool, mode) directory.

        Entries of the tool's other mode directories are kept, and the record
        is pruned only once no directory of the tool has entries left.
        """
        metadata = self.load()
        if tool_id not in metadata.tools and not skills:
            return None
        deployment = _write_entries(metadata, tool_id, mode, _tag_entries(skills, mode), target_dir)
        self.save(metadata)
        logger.debug("Recorded %d skill(s) for %s (%s)", len(skills), tool_id, mode)
        return deployment

    def drop_skill(self, tool_id: str, name: str, mode: str = ALL_MODES) -> bool:
        metadata = self.load()
        entries = _entries(metadata, tool_id, mode)
        if not any(skill.name == name for skill in entries):
            return False
        remaining = [skill for skill in entries if skill.name != name]
        _write_entries(metadata, tool_id, mode, remaining)
        self.save(metadata)
        return True

    def refresh_skill(self, tool_id: str, record: DeployedSkill, mode: str = ALL_MODES) -> bool:
        """Rewrite an existing skill entry and bump the timestamp; never creates one."""
        metadata = self.load()
        entries = _entries(metadata, tool_id, mode)
        if not any(skill.name == record.name for skill in entries):
            return False
        fresh = _tag_entries([record], mode)[0]
        _write_entries(
            metadata,
            tool_id,
            mode,
            [fresh if skill.name == record.name else skill for skill in entries],
        )
        self.save(metadata)
        return True


def _entries(metadata: ProjectMetadata, tool_id: str, mode: str) -> list[DeployedSkill]:
    deployment = metadata.tools.get(tool_id)
    if deployment is None:
        return []
    return [skill for skill in deployment.skills if skill.mode == mode]


def _write_entries(
    metadata: ProjectMetadata,
    tool_id: str,
    mode: str,
    entries: list[DeployedSkill],
    target_dir: Optional[str] = None,
) -> Optional[ToolDeployment]:
    # The record header names the last written directory that still has entries.
    current = metadata.tools.get(tool_id)
    others = [skill for skill in current.skills if skill.mode != mode] if current else []
    if not entries and not others:
        if metadata.tools.pop(tool_id, None) is not None:
            logger.debug("Pruned empty deployment record for %s", tool_id)
        return None

    if entries:
        header_mode = mode
    elif any(skill.mode == current.mode for skill in others):
        header_mode = current.mode
    else:
        header_mode = others[0].mode

    if entries and target_dir is not None:
        header_dir = target_dir
    elif current is not None and current.mode == header_mode:
        header_dir = current.target_dir
    else:
        header_dir = tool_target(tool_id).target_dir(header_mode)

    deployment = ToolDeployment(
        tool_id=tool_id,
        target_dir=header_dir,
        mode=header_mode,
        deployed_at=now_iso(),
        skills=[*others, *entries],
    )
    metadata.tools[tool_id] = deployment
    return deployment


def _tag_entries(skills: list[DeployedSkill], mode: str) -> list[DeployedSkill]:
    return [
        DeployedSkill(
            name=skill.name,
            source=skill.source,
            deploy_method=skill.deploy_method,
            mode=mode,
        )
        for skill in skills
    ]
