"""Registry of installed remote sources (``<skills root>/sources.json``)."""

from pathlib import Path
from typing import Any, Optional

from jsonschema import Draft202012Validator

from skillsmgr.constants import METADATA_VERSION
from skillsmgr.deployment.metadata import format_schema_error
from skillsmgr.errors import InvalidConfigSchemaError, InvalidJsonFormatError
from skillsmgr.models import SourceRecord, SourceType
from skillsmgr.utils import now_iso, read_json_safe, write_json

SOURCES_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["sources"],
    "properties": {
        "version": {"type": "string"},
        "sources": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "required": ["url", "type", "repoName"],
                "properties": {
                    "url": {"type": "string"},
                    "type": {"enum": [item.value for item in SourceType]},
                    "repoName": {"type": "string"},
                    "installedAt": {"type": "string"},
                    "updatedAt": {"type": "string"},
                },
            },
        },
    },
}


class SourcesRegistry:
    def __init__(self, path: Path) -> None:
        self.path = path
        self._validator = Draft202012Validator(SOURCES_SCHEMA)

    def load(self) -> dict[str, SourceRecord]:
        payload, error = read_json_safe(self.path)
        if error is not None:
            raise InvalidJsonFormatError(self.path, error)
        if payload is None:
            return {}
        schema_error = next(iter(self._validator.iter_errors(payload)), None)
        if schema_error is not None:
            raise InvalidConfigSchemaError(self.path, format_schema_error(schema_error))
        return {
            key: SourceRecord.from_dict(item) for key, item in payload["sources"].items()
        }

    def save(self, sources: dict[str, SourceRecord]) -> None:
        write_json(
            self.path,
            {
                "version": METADATA_VERSION,
                "sources": {key: record.as_dict() for key, record in sources.items()},
            },
        )

    def add(self, key: str, url: str, source_type: SourceType, repo_name: str) -> SourceRecord:
        sources = self.load()
        now = now_iso()
        previous = sources.get(key)
        record = SourceRecord(
            url=url,
            type=source_type,
            repo_name=repo_name,
            installed_at=previous.installed_at if previous else now,
            updated_at=now,
        )
        sources[key] = record
        self.save(sources)
        return record

    def match(self, query: str) -> Optional[str]:
        """Find a key equal to ``query``, ending with ``/query``, or naming that repo."""
        sources = self.load()
        for key, record in sources.items():
            if key == query or key.endswith(f"/{query}") or record.repo_name == query:
                return key
        return None
