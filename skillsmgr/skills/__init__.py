from skillsmgr.skills.parser import SkillManifest, parse_manifest, parse_manifest_text
from skillsmgr.skills.repository import SkillRepository

__all__ = [
    "SkillManifest",
    "SkillRepository",
    "parse_manifest",
    "parse_manifest_text",
]
