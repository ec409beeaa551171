"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import pytest

from annalist.cache import MemoryCacheStore
from annalist.github import GitHubSourceConfig
from tests.helpers.github_api import FakeGitHub


@pytest.fixture
def source_config() -> GitHubSourceConfig:
    """Return a source for ``octo/reef`` on ``main``."""
    return GitHubSourceConfig(owner="octo", repo="reef")


@pytest.fixture
def memory_store() -> MemoryCacheStore:
    """Return an empty in-memory cache store."""
    return MemoryCacheStore()


@pytest.fixture
def fake_github(source_config: GitHubSourceConfig) -> FakeGitHub:
    """Return a fake REST API with no commits."""
    return FakeGitHub(config=source_config)
