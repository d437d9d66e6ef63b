import json
import logging
import re
from pathlib import Path
from typing import Any, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from skillsmgr.constants import SKILL_FILENAME
from skillsmgr.errors import RemoteFetchError
from skillsmgr.interfaces import IRemoteSkillSource
from skillsmgr.models import RemoteEntry, SourceRef

logger = logging.getLogger(__name__)

API_URL = "https://api.github.com"
RAW_URL = "https://raw.githubusercontent.com"
USER_AGENT = "skillsmgr"
DEFAULT_BRANCH = "main"

_TREE_URL_RE = re.compile(r"github\.com/([^/]+)/([^/]+)/tree/([^/]+)(?:/(.+?))?/?$")
_REPO_URL_RE = re.compile(r"github\.com/([^/]+)/([^/]+?)(?:\.git)?/?$")


def parse_github_url(url: str) -> Optional[SourceRef]:
    tree = _TREE_URL_RE.search(url)
    if tree:
        return SourceRef(
            owner=tree.group(1),
            repo=tree.group(2),
            branch=tree.group(3),
            path=tree.group(4) or "",
        )
    basic = _REPO_URL_RE.search(url)
    if basic:
        return SourceRef(owner=basic.group(1), repo=basic.group(2))
    return None


class GitHubClient(IRemoteSkillSource):
    """GitHub contents API, read-only."""

    def __init__(self, token: Optional[str] = None, timeout: int = 20) -> None:
        self.token = token
        self.timeout = timeout
        self._branches: dict[str, str] = {}

    def default_branch(self, owner: str, repo: str) -> str:
        key = f"{owner}/{repo}"
        if key in self._branches:
            return self._branches[key]
        try:
            payload = self._get_json(f"{API_URL}/repos/{owner}/{repo}")
        except RemoteFetchError as exc:
            logger.debug("Falling back to %s for %s: %s", DEFAULT_BRANCH, key, exc)
            return DEFAULT_BRANCH
        branch = payload.get("default_branch") if isinstance(payload, dict) else None
        self._branches[key] = branch or DEFAULT_BRANCH
        return self._branches[key]

    def resolve_ref(self, ref: SourceRef) -> SourceRef:
        if ref.branch:
            return ref
        return SourceRef(
            owner=ref.owner,
            repo=ref.repo,
            path=ref.path,
            branch=self.default_branch(ref.owner, ref.repo),
        )

    def fetch_directory_listing(self, ref: SourceRef) -> list[RemoteEntry]:
        return [
            RemoteEntry(name=item["name"], path=item["path"])
            for item in self._contents(ref)
            if item.get("type") == "dir"
        ]

    def fetch_skill_manifest(self, ref: SourceRef) -> Optional[str]:
        ref = self.resolve_ref(ref)
        path = f"{ref.path.strip('/')}/{SKILL_FILENAME}".lstrip("/")
        url = f"{RAW_URL}/{ref.owner}/{ref.repo}/{ref.branch}/{quote(path)}"
        try:
            return self._get_text(url)
        except RemoteFetchError as exc:
            logger.debug("No manifest at %s: %s", url, exc)
            return None

    def download_skill_tree(self, ref: SourceRef, local_dest: Path) -> None:
        local_dest.mkdir(parents=True, exist_ok=True)
        for item in self._contents(ref):
            local_path = local_dest / item["name"]
            if item.get("type") == "file" and item.get("download_url"):
                local_path.write_bytes(self._get_bytes(item["download_url"]))
            elif item.get("type") == "dir":
                self.download_skill_tree(ref.child(item["path"]), local_path)

    def _contents(self, ref: SourceRef) -> list[dict[str, Any]]:
        path = quote(ref.path.strip("/")) if ref.path not in ("", ".") else ""
        url = f"{API_URL}/repos/{ref.owner}/{ref.repo}/contents/{path}"
        if ref.branch:
            url = f"{url}?ref={quote(ref.branch)}"
        payload = self._get_json(url)
        if not isinstance(payload, list):
            raise RemoteFetchError(url, "expected a directory listing")
        return [item for item in payload if isinstance(item, dict)]

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": USER_AGENT,
        }
        if self.token:
            headers["Authorization"] = f"token {self.token}"
        return headers

    def _get_bytes(self, url: str) -> bytes:
        request = Request(url, headers=self._headers())
        try:
            with urlopen(request, timeout=self.timeout) as response:
                return response.read()
        except HTTPError as exc:
            raise RemoteFetchError(url, f"HTTP {exc.code}") from exc
        except (URLError, OSError) as exc:
            raise RemoteFetchError(url, str(exc)) from exc

    def _get_text(self, url: str) -> str:
        return self._get_bytes(url).decode("utf-8")

    def _get_json(self, url: str) -> Any:
        try:
            return json.loads(self._get_text(url))
        except ValueError as exc:
            raise RemoteFetchError(url, f"invalid JSON ({exc})") from exc
