"""Tests for the read-only data sources."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from glprovider.clients.gitlab_client import GitLabClient
from glprovider.core.config import OperationsConfig
from glprovider.core.context import OperationContext
from glprovider.core.exceptions import ConfigurationError
from glprovider.data_sources import GroupHooksDataSource, ProjectBranchesDataSource
from glprovider.data_sources.project_branches import flatten_branch


def branch(name: str, **overrides) -> SimpleNamespace:
    values = {
        "name": name,
        "merged": False,
        "protected": name == "main",
        "default": name == "main",
        "developers_can_push": False,
        "developers_can_merge": False,
        "can_push": True,
        "web_url": f"https://gitlab.example.com/foo/bar/-/tree/{name}",
        "commit": {"id": "abc123", "short_id": "abc", "title": "Initial commit", "trailers": {}},
    }
    values.update(overrides)
    return SimpleNamespace(**values)


class TestProjectBranches:
    """Tests for ProjectBranchesDataSource."""

    @pytest.fixture
    def data_source(self, gitlab_client: GitLabClient) -> ProjectBranchesDataSource:
        return ProjectBranchesDataSource(gitlab_client, OperationsConfig(page_size=2))

    def test_project_is_required(self, data_source: ProjectBranchesDataSource) -> None:
        with pytest.raises(ConfigurationError):
            data_source.new_data({"project": ""})

    def test_reads_every_page(
        self,
        data_source: ProjectBranchesDataSource,
        project_handle: MagicMock,
        ctx: OperationContext,
        gitlab_list,
    ) -> None:
        project_handle.branches.list.side_effect = [
            gitlab_list([branch("main"), branch("develop")], next_page=2),
            gitlab_list([branch("develop"), branch("feature")]),
        ]
        data = data_source.new_data({"project": "foo/bar"})

        data_source.read(ctx, data)

        assert data.id == "foo/bar"
        names = [b["name"] for b in data.state()["branches"]]
        assert names == ["main", "develop", "feature"]
        assert project_handle.branches.list.call_count == 2

    def test_flatten_branch_drops_unknown_commit_fields(self) -> None:
        flattened = flatten_branch(branch("main"))

        assert flattened["protected"] is True
        assert flattened["commit"] == {"id": "abc123", "short_id": "abc", "title": "Initial commit"}

    def test_flatten_branch_without_commit(self) -> None:
        assert flatten_branch(branch("main", commit=None))["commit"] == {}


class TestGroupHooks:
    """Tests for GroupHooksDataSource."""

    @pytest.fixture
    def data_source(self, gitlab_client: GitLabClient) -> GroupHooksDataSource:
        return GroupHooksDataSource(gitlab_client)

    def test_reads_hooks(
        self,
        data_source: GroupHooksDataSource,
        group_handle: MagicMock,
        ctx: OperationContext,
        gitlab_list,
    ) -> None:
        group_handle.hooks.list.return_value = gitlab_list(
            [
                SimpleNamespace(
                    id=1,
                    group_id=12,
                    url="https://ci.example.com",
                    push_events=True,
                    subgroup_events=True,
                    push_events_branch_filter=None,
                ),
                SimpleNamespace(id=2, group_id=12, url="https://chat.example.com", note_events=True),
            ]
        )
        data = data_source.new_data({"group": "my-group"})

        data_source.read(ctx, data)

        assert data.id == "my-group"
        hooks = data.state()["hooks"]
        assert [hook["hook_id"] for hook in hooks] == [1, 2]
        assert hooks[0]["subgroup_events"] is True
        assert hooks[0]["push_events_branch_filter"] == ""
        assert hooks[1]["note_events"] is True
        assert hooks[1]["enable_ssl_verification"] is True
