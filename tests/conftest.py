"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from gitlab.exceptions import GitlabError

from glprovider.clients.gitlab_client import GitLabClient
from glprovider.core.config import OperationsConfig
from glprovider.core.context import OperationContext


@pytest.fixture
def gitlab_client() -> GitLabClient:
    """GitLabClient over a mocked python-gitlab handle.

    ``client.gl.projects.get.return_value`` is the lazy project handle every
    adapter receives, likewise for groups. Retries are disabled so transient
    errors surface immediately.
    """
    with patch("gitlab.Gitlab") as mock_gitlab_class:
        mock_gitlab_class.return_value = MagicMock()
        return GitLabClient(
            url="https://gitlab.example.com",
            token="test-token",
            early_auth_check=False,
            max_retries=1,
        )


@pytest.fixture
def project_handle(gitlab_client: GitLabClient) -> MagicMock:
    """Lazy project handle returned by ``client.project(...)``."""
    return gitlab_client.gl.projects.get.return_value


@pytest.fixture
def group_handle(gitlab_client: GitLabClient) -> MagicMock:
    """Lazy group handle returned by ``client.group(...)``."""
    return gitlab_client.gl.groups.get.return_value


class ListResult(list):
    """One page of a python-gitlab list with its ``X-Next-Page`` value."""

    def __init__(self, items: Any = (), next_page: int | None = None):
        super().__init__(items)
        self.next_page = next_page


@pytest.fixture
def gitlab_list() -> type[ListResult]:
    """Factory for list endpoint responses: ``gitlab_list(items, next_page=2)``."""
    return ListResult


@pytest.fixture
def operations() -> OperationsConfig:
    """Operation settings with a short deletion wait."""
    return OperationsConfig(deletion_timeout_seconds=0.2, deletion_poll_interval_seconds=0.01)


@pytest.fixture
def ctx() -> OperationContext:
    """Operation context without a deadline."""
    return OperationContext()


@pytest.fixture
def gitlab_error() -> Callable[..., GitlabError]:
    """Factory for python-gitlab errors carrying an HTTP status."""

    def make(code: int, message: str = "error") -> GitlabError:
        return GitlabError(f"{code} {message}", response_code=code)

    return make


@pytest.fixture
def not_found(gitlab_error: Callable[..., GitlabError]) -> GitlabError:
    """A 404 from python-gitlab."""
    return gitlab_error(404, "Not Found")


@pytest.fixture
def sample_state_document() -> dict[str, Any]:
    """State document with instances at various schema versions."""
    return {
        "version": 4,
        "resources": [
            {
                "mode": "managed",
                "type": "gitlab_project_hook",
                "name": "ci",
                "instances": [
                    {
                        "schema_version": 0,
                        "attributes": {"id": "42", "project": "foo/bar", "url": "https://ci"},
                    }
                ],
            },
            {
                "mode": "managed",
                "type": "gitlab_project_share_group",
                "name": "share",
                "instances": [
                    {
                        "schema_version": 0,
                        "attributes": {
                            "id": "12:34",
                            "project_id": 12.0,
                            "group_id": 34,
                            "access_level": "developer",
                        },
                    }
                ],
            },
            {
                "mode": "managed",
                "type": "gitlab_project_label",
                "name": "bug",
                "instances": [
                    {
                        "schema_version": 1,
                        "attributes": {"id": "foo/bar:bug", "project": "foo/bar", "name": "bug"},
                    }
                ],
            },
            {
                "mode": "data",
                "type": "gitlab_project_branches",
                "name": "all",
                "instances": [{"schema_version": 0, "attributes": {"project": "foo/bar"}}],
            },
            {
                "mode": "managed",
                "type": "aws_s3_bucket",
                "name": "other",
                "instances": [{"schema_version": 0, "attributes": {"id": "bucket"}}],
            },
        ],
    }


def pytest_configure(config: Any) -> None:
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "migration: State migration tests")
