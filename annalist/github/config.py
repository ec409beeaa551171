"""Configuration for the GitHub REST commit source.

Usage
-----
Create a configuration for one repository:

>>> config = GitHubSourceConfig(owner="enzo-prism", repo="marble")
>>> config.api_base
'https://api.github.com/repos/enzo-prism/marble'

Or load from environment variables:

>>> import os
>>> os.environ["ANNALIST_GITHUB_OWNER"] = "enzo-prism"
>>> os.environ["ANNALIST_GITHUB_REPO"] = "marble"
>>> GitHubSourceConfig.from_env().branch
'main'

"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import os
import urllib.parse

from annalist.common.slug import repo_slug

from .errors import GitHubConfigError

GITHUB_API_ROOT = "https://api.github.com"
GITHUB_WEB_ROOT = "https://github.com"
GITHUB_API_VERSION = "2022-11-28"


@dc.dataclass(frozen=True, slots=True)
class GitHubSourceConfig:
    """Where commits come from and how long their responses stay fresh.

    Attributes
    ----------
    owner, repo
        Repository coordinates.
    branch
        Branch whose history is listed.
    api_root
        Root of the REST API; the repository base is derived from it.
    per_page
        Page size for the commit list endpoint.
    max_commits
        Hard cap on the number of commits listed.
    list_ttl
        Freshness window for commit list pages.
    detail_ttl
        Freshness window for individual commit details, which never change.
    namespace
        Prefix for every cache key written on behalf of this source.
    timeout_s
        HTTP client timeout.

    """

    owner: str
    repo: str
    branch: str = "main"
    api_root: str = GITHUB_API_ROOT
    web_root: str = GITHUB_WEB_ROOT
    per_page: int = 100
    max_commits: int = 500
    list_ttl: dt.timedelta = dt.timedelta(minutes=10)
    detail_ttl: dt.timedelta = dt.timedelta(hours=6)
    namespace: str | None = None
    timeout_s: float = 20.0
    user_agent: str = "annalist/0.1"

    def __post_init__(self) -> None:
        """Reject blank repository coordinates."""
        for field in ("owner", "repo", "branch"):
            if not getattr(self, field).strip():
                raise GitHubConfigError.blank_field(field)

    @property
    def slug(self) -> str:
        """Return the ``owner/repo`` slug."""
        return repo_slug(self.owner, self.repo)

    @property
    def api_base(self) -> str:
        """Return the REST base URL for the repository."""
        return f"{self.api_root.rstrip('/')}/repos/{self.slug}"

    @property
    def web_base(self) -> str:
        """Return the github.com URL for the repository."""
        return f"{self.web_root.rstrip('/')}/{self.slug}"

    @property
    def cache_namespace(self) -> str:
        """Return the cache key namespace, defaulting to ``{repo}:changelog``."""
        return self.namespace or f"{self.repo}:changelog"

    @property
    def max_pages(self) -> int:
        """Return the number of list pages needed to reach ``max_commits``."""
        return -(-self.max_commits // self.per_page)

    def commits_page_url(self, page: int) -> str:
        """Return the commit list URL for ``page`` (1-based)."""
        query = urllib.parse.urlencode(
            {"sha": self.branch, "per_page": self.per_page, "page": page}
        )
        return f"{self.api_base}/commits?{query}"

    def commit_url(self, sha: str) -> str:
        """Return the commit detail URL for ``sha``."""
        return f"{self.api_base}/commits/{urllib.parse.quote(sha, safe='')}"

    def commit_web_url(self, sha: str) -> str:
        """Return the github.com page for ``sha``."""
        return f"{self.web_base}/commit/{sha}"

    def history_web_url(self) -> str:
        """Return the github.com commit history page for the branch."""
        return f"{self.web_base}/commits/{urllib.parse.quote(self.branch, safe='')}"

    @classmethod
    def from_env(cls) -> GitHubSourceConfig:
        """Build configuration from ``ANNALIST_GITHUB_*`` variables.

        Reads ``ANNALIST_GITHUB_OWNER`` and ``ANNALIST_GITHUB_REPO``
        (required), ``ANNALIST_GITHUB_BRANCH``, ``ANNALIST_GITHUB_API_ROOT``
        and ``ANNALIST_CACHE_NAMESPACE``.

        Raises
        ------
        GitHubConfigError
            If owner or repository is missing.

        """
        owner = os.environ.get("ANNALIST_GITHUB_OWNER", "").strip()
        repo = os.environ.get("ANNALIST_GITHUB_REPO", "").strip()
        if not owner or not repo:
            raise GitHubConfigError.missing_repository()

        branch = os.environ.get("ANNALIST_GITHUB_BRANCH", "").strip() or "main"
        api_root = (
            os.environ.get("ANNALIST_GITHUB_API_ROOT", "").strip() or GITHUB_API_ROOT
        )
        namespace = os.environ.get("ANNALIST_CACHE_NAMESPACE", "").strip() or None
        return cls(
            owner=owner,
            repo=repo,
            branch=branch,
            api_root=api_root,
            namespace=namespace,
        )
