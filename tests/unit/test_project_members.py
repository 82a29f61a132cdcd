"""Tests for project memberships and group shares."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from gitlab.exceptions import GitlabError

from glprovider.clients.gitlab_client import GitLabClient
from glprovider.core.context import OperationContext
from glprovider.core.exceptions import ConfigurationError
from glprovider.resources import ProjectMembershipResource, ProjectShareGroupResource


class TestProjectMembership:
    """Tests for ProjectMembershipResource."""

    ATTRIBUTES = {"project": "foo/bar", "user_id": 5, "access_level": "developer"}

    @pytest.fixture
    def resource(self, gitlab_client: GitLabClient) -> ProjectMembershipResource:
        return ProjectMembershipResource(gitlab_client)

    def test_invalid_access_level(self, resource: ProjectMembershipResource) -> None:
        with pytest.raises(ConfigurationError, match="invalid access level"):
            resource.new_data({**self.ATTRIBUTES, "access_level": "admin"})

    def test_create(
        self, resource: ProjectMembershipResource, project_handle: MagicMock, ctx: OperationContext
    ) -> None:
        project_handle.members.get.return_value = SimpleNamespace(id=5, access_level=30, expires_at=None)
        data = resource.new_data(self.ATTRIBUTES)

        resource.create(ctx, data)

        project_handle.members.create.assert_called_once_with({"user_id": 5, "access_level": 30})
        assert data.id == "foo/bar:5"
        assert data.state()["expires_at"] == ""

    def test_update_access_level(
        self, resource: ProjectMembershipResource, project_handle: MagicMock, ctx: OperationContext
    ) -> None:
        project_handle.members.get.return_value = SimpleNamespace(
            id=5, access_level=40, expires_at="2030-01-01"
        )
        data = resource.new_data(
            {**self.ATTRIBUTES, "access_level": "maintainer", "expires_at": "2030-01-01"},
            prior=self.ATTRIBUTES,
            id="foo/bar:5",
        )

        resource.update(ctx, data)

        project_handle.members.update.assert_called_once_with(
            5, {"access_level": 40, "expires_at": "2030-01-01"}
        )
        assert data.get("access_level") == "maintainer"

    @pytest.mark.migration
    def test_v0_renames_project_id(self) -> None:
        upgraded = ProjectMembershipResource.upgrade_state(
            {"id": "12:5", "project_id": 12.0, "user_id": 5}, 0
        )

        assert upgraded["project"] == "12"
        assert "project_id" not in upgraded


class TestProjectShareGroup:
    """Tests for ProjectShareGroupResource."""

    ATTRIBUTES = {"project": "foo/bar", "group_id": 34, "group_access": "developer"}

    @pytest.fixture
    def resource(self, gitlab_client: GitLabClient) -> ProjectShareGroupResource:
        return ProjectShareGroupResource(gitlab_client)

    def test_create_shares_project(
        self,
        resource: ProjectShareGroupResource,
        gitlab_client: GitLabClient,
        project_handle: MagicMock,
        ctx: OperationContext,
    ) -> None:
        project_handle.shared_with_groups = [{"group_id": 34, "group_access_level": 30}]
        data = resource.new_data(self.ATTRIBUTES)

        resource.create(ctx, data)

        project_handle.share.assert_called_once_with(34, 30)
        gitlab_client.gl.projects.get.assert_called_with("foo/bar")
        assert data.id == "foo/bar:34"

    def test_read_unshared_clears_identity(
        self, resource: ProjectShareGroupResource, project_handle: MagicMock, ctx: OperationContext
    ) -> None:
        project_handle.shared_with_groups = [{"group_id": 99, "group_access_level": 30}]
        data = resource.new_data(self.ATTRIBUTES, id="foo/bar:34")

        resource.read(ctx, data)

        assert not data.exists

    def test_read_access_level(
        self, resource: ProjectShareGroupResource, project_handle: MagicMock, ctx: OperationContext
    ) -> None:
        project_handle.shared_with_groups = [{"group_id": 34, "group_access_level": 40}]
        data = resource.new_data(self.ATTRIBUTES, id="foo/bar:34")

        resource.read(ctx, data)

        assert data.get("group_access") == "maintainer"

    def test_delete_unshares(
        self, resource: ProjectShareGroupResource, project_handle: MagicMock, ctx: OperationContext
    ) -> None:
        data = resource.new_data(self.ATTRIBUTES, id="foo/bar:34")

        resource.delete(ctx, data)

        project_handle.unshare.assert_called_once_with(34)

    def test_delete_already_unshared(
        self,
        resource: ProjectShareGroupResource,
        project_handle: MagicMock,
        ctx: OperationContext,
        not_found: GitlabError,
    ) -> None:
        project_handle.unshare.side_effect = not_found
        data = resource.new_data(self.ATTRIBUTES, id="foo/bar:34")

        resource.delete(ctx, data)

    @pytest.mark.migration
    def test_v0_upgrades_through_both_steps(self) -> None:
        upgraded = ProjectShareGroupResource.upgrade_state(
            {"id": "12:34", "project_id": 12.0, "group_id": 34, "access_level": "developer"}, 0
        )

        assert upgraded == {"id": "12:34", "project": "12", "group_id": 34, "group_access": "developer"}

    @pytest.mark.migration
    def test_v1_folds_stale_access_level(self) -> None:
        upgraded = ProjectShareGroupResource.upgrade_state(
            {"id": "12:34", "project_id": "12", "group_id": 34, "access_level": "reporter"}, 1
        )

        assert upgraded["group_access"] == "reporter"
        assert "access_level" not in upgraded

    @pytest.mark.migration
    def test_v1_prefers_group_access(self) -> None:
        upgraded = ProjectShareGroupResource.upgrade_state(
            {
                "id": "12:34",
                "project_id": "12",
                "group_id": 34,
                "group_access": "maintainer",
                "access_level": "reporter",
            },
            1,
        )

        assert upgraded["group_access"] == "maintainer"
        assert "access_level" not in upgraded
