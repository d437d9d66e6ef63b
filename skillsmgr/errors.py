from pathlib import Path


class SkillsManagerError(Exception):
    """Base user-facing application error."""


class NotSetUpError(SkillsManagerError):
    def __init__(self, root: Path) -> None:
        self.root = root
        super().__init__(f"Skills manager not set up at {root}. Run: skillsmgr setup")


class SkillNotFoundError(SkillsManagerError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Skill '{name}' not found")


class UnknownToolError(SkillsManagerError):
    def __init__(self, tool: str) -> None:
        self.tool = tool
        super().__init__(f"Unknown tool: {tool}")


class SkillsFileError(SkillsManagerError):
    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{message}: {path}")


class DeployError(SkillsFileError):
    """A filesystem mutation against a tool target directory failed."""


class InvalidJsonFormatError(SkillsFileError):
    def __init__(self, path: Path, detail: str) -> None:
        self.detail = detail
        super().__init__(path=path, message=f"Invalid JSON format ({detail})")


class InvalidConfigSchemaError(SkillsFileError):
    def __init__(self, path: Path, detail: str) -> None:
        self.detail = detail
        super().__init__(path=path, message=f"Invalid config schema ({detail})")


class RemoteFetchError(SkillsManagerError):
    def __init__(self, location: str, detail: str) -> None:
        self.location = location
        self.detail = detail
        super().__init__(f"Remote fetch failed for {location} ({detail})")


class SourceNotFoundError(SkillsManagerError):
    def __init__(self, query: str, known: list[str]) -> None:
        self.query = query
        self.known = known
        listing = ", ".join(known) if known else "none"
        super().__init__(f"Source '{query}' not found (installed sources: {listing})")
