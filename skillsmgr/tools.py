from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath

from skillsmgr.constants import ALL_MODES
from skillsmgr.errors import UnknownToolError


class ToolId(str, Enum):
    ANTIGRAVITY = "antigravity"
    CLAUDE_CODE = "claude-code"
    CLINE = "cline"
    CODEX_CLI = "codex-cli"
    CURSOR = "cursor"
    GEMINI_CLI = "gemini-cli"
    KILO_CODE = "kilo-code"
    OPENCODE = "opencode"
    ROO_CODE = "roo-code"
    TRAE = "trae"
    WINDSURF = "windsurf"


@dataclass(frozen=True)
class ToolTarget:
    tool_id: ToolId
    display_name: str
    base_relative_dir: str
    supports_mode_variants: bool = False
    mode_name_pattern: str | None = None
    available_modes: tuple[str, ...] = ()

    def target_dir(self, mode: str | None = None) -> str:
        """Project-relative skills directory for ``mode``."""
        if (
            self.supports_mode_variants
            and mode
            and mode != ALL_MODES
            and self.mode_name_pattern
        ):
            parent = PurePosixPath(self.base_relative_dir).parent
            return str(parent / self.mode_name_pattern.replace("{mode}", mode))
        return self.base_relative_dir

    def modes(self) -> list[str]:
        """``all`` followed by every mode variant the tool supports."""
        if not self.supports_mode_variants:
            return [ALL_MODES]
        return [ALL_MODES, *self.available_modes]


_MODE_PATTERN = "skills-{mode}"
_MODES = ("code", "architect")

TOOL_CATALOG: dict[ToolId, ToolTarget] = {
    ToolId.ANTIGRAVITY: ToolTarget(ToolId.ANTIGRAVITY, "Antigravity", ".agent/skills"),
    ToolId.CLAUDE_CODE: ToolTarget(ToolId.CLAUDE_CODE, "Claude Code", ".claude/skills"),
    ToolId.CLINE: ToolTarget(ToolId.CLINE, "Cline", ".cline/skills"),
    ToolId.CODEX_CLI: ToolTarget(ToolId.CODEX_CLI, "Codex CLI", ".agents/skills"),
    ToolId.CURSOR: ToolTarget(ToolId.CURSOR, "Cursor", ".cursor/skills"),
    ToolId.GEMINI_CLI: ToolTarget(ToolId.GEMINI_CLI, "Gemini CLI", ".gemini/skills"),
    ToolId.KILO_CODE: ToolTarget(
        ToolId.KILO_CODE,
        "Kilo Code",
        ".kilocode/skills",
        supports_mode_variants=True,
        mode_name_pattern=_MODE_PATTERN,
        available_modes=_MODES,
    ),
    ToolId.OPENCODE: ToolTarget(ToolId.OPENCODE, "OpenCode", ".opencode/skills"),
    ToolId.ROO_CODE: ToolTarget(
        ToolId.ROO_CODE,
        "Roo Code",
        ".roo/skills",
        supports_mode_variants=True,
        mode_name_pattern=_MODE_PATTERN,
        available_modes=_MODES,
    ),
    ToolId.TRAE: ToolTarget(ToolId.TRAE, "Trae", ".trae/skills"),
    ToolId.WINDSURF: ToolTarget(ToolId.WINDSURF, "Windsurf", ".windsurf/skills"),
}


def tool_ids() -> list[str]:
    return [tool.value for tool in TOOL_CATALOG]


def tool_target(tool: ToolId | str) -> ToolTarget:
    try:
        tool_id = tool if isinstance(tool, ToolId) else ToolId(tool)
    except ValueError:
        raise UnknownToolError(str(tool)) from None
    return TOOL_CATALOG[tool_id]


def tool_label(tool: ToolId | str) -> str:
    return tool_target(tool).display_name
