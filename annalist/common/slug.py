"""Repository slug utilities.

Repository slugs are GitHub identifiers in ``owner/name`` format. They appear
in cache keys and in links back to GitHub, so they are built here rather than
with ad-hoc f-strings.
"""

from __future__ import annotations


def repo_slug(owner: str, name: str) -> str:
    """Build a repository slug from owner and name.

    Examples
    --------
    >>> repo_slug("enzo-prism", "marble")
    'enzo-prism/marble'

    """
    return f"{owner}/{name}"


def short_sha(sha: str) -> str:
    """Return the seven-character abbreviation GitHub shows for a commit."""
    return sha[:7]
