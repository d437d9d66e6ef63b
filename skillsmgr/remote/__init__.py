from skillsmgr.remote.git import GitService, repo_name_from_url
from skillsmgr.remote.github import GitHubClient, parse_github_url
from skillsmgr.remote.installer import InstallService, local_skills
from skillsmgr.remote.sources import SourcesRegistry

__all__ = [
    "GitHubClient",
    "GitService",
    "InstallService",
    "SourcesRegistry",
    "local_skills",
    "parse_github_url",
    "repo_name_from_url",
]
