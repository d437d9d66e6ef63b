"""Tests for manifest header parsing."""

from pathlib import Path

from skillsmgr.skills.parser import SkillManifest, parse_manifest, parse_manifest_text


def test_parse_name_and_description() -> None:
    manifest = parse_manifest_text(
        "---\n"
        "name: code-review\n"
        "description: Reviews code\n"
        "license: MIT\n"
        "---\n"
        "\n"
        "# Code Review\n"
    )
    assert manifest == SkillManifest(name="code-review", description="Reviews code")


def test_key_order_does_not_matter() -> None:
    manifest = parse_manifest_text("---\ndescription: Second\nname: first\n---\n")
    assert manifest.name == "first"
    assert manifest.description == "Second"


def test_no_header_yields_empty_manifest() -> None:
    assert parse_manifest_text("# Just a heading\n\nname: not-a-header\n") == SkillManifest()


def test_unterminated_header_is_ignored() -> None:
    assert parse_manifest_text("---\nname: open\n") == SkillManifest()


def test_unquoted_colon_in_value_falls_back_to_line_parsing() -> None:
    manifest = parse_manifest_text(
        "---\nname: pdf\ndescription: Tools: extract, merge: split\n---\n"
    )
    assert manifest.name == "pdf"
    assert manifest.description == "Tools: extract, merge: split"


def test_missing_name_is_empty() -> None:
    manifest = parse_manifest_text("---\ndescription: Nameless\n---\nbody\n")
    assert manifest.name == ""
    assert manifest.description == "Nameless"


def test_crlf_header() -> None:
    manifest = parse_manifest_text("---\r\nname: win\r\ndescription: CRLF\r\n---\r\n")
    assert manifest.name == "win"
    assert manifest.description == "CRLF"


def test_parse_manifest_reads_file(tmp_path: Path) -> None:
    path = tmp_path / "SKILL.md"
    path.write_text("---\nname: on-disk\ndescription: From file\n---\n", encoding="utf-8")

    assert parse_manifest(path).name == "on-disk"
