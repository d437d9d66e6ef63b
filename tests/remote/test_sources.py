import json
from pathlib import Path

import pytest

from skillsmgr.errors import InvalidConfigSchemaError, InvalidJsonFormatError
from skillsmgr.models import SourceType
from skillsmgr.remote.sources import SourcesRegistry


@pytest.fixture
def registry(tmp_path: Path) -> SourcesRegistry:
    return SourcesRegistry(tmp_path / ".skills-manager" / "sources.json")


def test_missing_file_is_empty(registry: SourcesRegistry) -> None:
    assert registry.load() == {}
    assert registry.match("kit") is None


def test_add_writes_documented_format(registry: SourcesRegistry) -> None:
    registry.add("community/kit", "https://github.com/acme/kit", SourceType.COMMUNITY, "kit")

    payload = json.loads(registry.path.read_text(encoding="utf-8"))
    assert payload["version"] == "1.0"
    entry = payload["sources"]["community/kit"]
    assert entry["url"] == "https://github.com/acme/kit"
    assert entry["type"] == "community"
    assert entry["repoName"] == "kit"
    assert entry["installedAt"] == entry["updatedAt"]


def test_add_again_keeps_installed_at(registry: SourcesRegistry, write_json) -> None:
    write_json(
        registry.path,
        {
            "version": "1.0",
            "sources": {
                "community/kit": {
                    "url": "https://github.com/acme/kit",
                    "type": "community",
                    "repoName": "kit",
                    "installedAt": "2024-01-01T00:00:00.000Z",
                    "updatedAt": "2024-01-01T00:00:00.000Z",
                }
            },
        },
    )

    record = registry.add("community/kit", "https://github.com/acme/kit", SourceType.COMMUNITY, "kit")

    assert record.installed_at == "2024-01-01T00:00:00.000Z"
    assert record.updated_at != "2024-01-01T00:00:00.000Z"


@pytest.mark.parametrize("query", ["official/anthropic", "anthropic"])
def test_match_by_key_or_suffix(registry: SourcesRegistry, query: str) -> None:
    registry.add(
        "official/anthropic", "https://github.com/anthropics/skills", SourceType.OFFICIAL, "anthropic"
    )

    assert registry.match(query) == "official/anthropic"


def test_match_by_repo_name(registry: SourcesRegistry, write_json) -> None:
    write_json(
        registry.path,
        {
            "sources": {
                "custom/renamed": {
                    "url": "https://github.com/acme/kit",
                    "type": "custom",
                    "repoName": "kit",
                }
            }
        },
    )

    assert registry.match("kit") == "custom/renamed"
    assert registry.match("other") is None


def test_invalid_json_raises(registry: SourcesRegistry) -> None:
    registry.path.parent.mkdir(parents=True)
    registry.path.write_text("{nope", encoding="utf-8")

    with pytest.raises(InvalidJsonFormatError):
        registry.load()


def test_unknown_type_is_a_schema_error(registry: SourcesRegistry, write_json) -> None:
    write_json(
        registry.path,
        {"sources": {"x/y": {"url": "u", "type": "vendored", "repoName": "y"}}},
    )

    with pytest.raises(InvalidConfigSchemaError) as excinfo:
        registry.load()
    assert "sources.x/y.type" in str(excinfo.value)
