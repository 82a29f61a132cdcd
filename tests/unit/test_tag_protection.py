"""Tests for gitlab_tag_protection."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from gitlab.exceptions import GitlabError

from glprovider.clients.gitlab_client import GitLabClient
from glprovider.core.context import OperationContext
from glprovider.core.exceptions import ConfigurationError, RemoteValidationError
from glprovider.resources import TagProtectionResource

ATTRIBUTES = {"project": "foo/bar", "tag": "v*", "create_access_level": "maintainer"}


def remote_protection(*levels: dict) -> SimpleNamespace:
    return SimpleNamespace(
        name="v*",
        create_access_levels=list(levels)
        or [{"access_level": 40, "access_level_description": "Maintainers"}],
    )


@pytest.fixture
def resource(gitlab_client: GitLabClient) -> TagProtectionResource:
    return TagProtectionResource(gitlab_client)


@pytest.fixture
def protected_tags(project_handle: MagicMock) -> MagicMock:
    return project_handle.protectedtags


class TestTagProtection:
    """Tests for TagProtectionResource."""

    def test_invalid_access_level(self, resource: TagProtectionResource) -> None:
        with pytest.raises(ConfigurationError):
            resource.new_data({**ATTRIBUTES, "create_access_level": "owner"})

    def test_allowed_entry_needs_user_or_group(self, resource: TagProtectionResource) -> None:
        with pytest.raises(ConfigurationError, match="exactly one of user_id or group_id"):
            resource.new_data({**ATTRIBUTES, "allowed_to_create": [{}]})

    def test_create(
        self, resource: TagProtectionResource, protected_tags: MagicMock, ctx: OperationContext
    ) -> None:
        protected_tags.create.return_value = remote_protection()
        protected_tags.get.return_value = remote_protection()
        data = resource.new_data(ATTRIBUTES)

        resource.create(ctx, data)

        protected_tags.create.assert_called_once_with({"name": "v*", "create_access_level": 40})
        assert data.id == "foo/bar:v*"

    def test_create_with_allowed_users(
        self, resource: TagProtectionResource, protected_tags: MagicMock, ctx: OperationContext
    ) -> None:
        protection = remote_protection(
            {"access_level": 40, "access_level_description": "Maintainers"},
            {"access_level": 30, "user_id": 5, "access_level_description": "Jane"},
        )
        protected_tags.create.return_value = protection
        protected_tags.get.return_value = protection
        data = resource.new_data({**ATTRIBUTES, "allowed_to_create": [{"user_id": 5}]})

        resource.create(ctx, data)

        payload = protected_tags.create.call_args.args[0]
        assert payload["allowed_to_create"] == [{"user_id": 5}]
        assert data.state()["allowed_to_create"] == [
            {
                "user_id": 5,
                "group_id": None,
                "access_level": "developer",
                "access_level_description": "Jane",
            }
        ]

    def test_create_replaces_existing_protection(
        self,
        resource: TagProtectionResource,
        protected_tags: MagicMock,
        ctx: OperationContext,
        gitlab_error,
    ) -> None:
        protected_tags.create.side_effect = [
            gitlab_error(409, "Protected tag 'v*' already exists"),
            remote_protection(),
        ]
        protected_tags.get.return_value = remote_protection()
        data = resource.new_data(ATTRIBUTES)

        resource.create(ctx, data)

        protected_tags.delete.assert_called_once_with("v*")
        assert protected_tags.create.call_count == 2
        assert data.exists

    def test_create_rejected_payload_keeps_gitlab_message(
        self,
        resource: TagProtectionResource,
        protected_tags: MagicMock,
        ctx: OperationContext,
        gitlab_error,
        not_found: GitlabError,
    ) -> None:
        protected_tags.create.side_effect = gitlab_error(422, "create_access_level is invalid")
        protected_tags.delete.side_effect = not_found
        data = resource.new_data(ATTRIBUTES)

        with pytest.raises(RemoteValidationError, match="create_access_level is invalid") as exc_info:
            resource.create(ctx, data)

        assert exc_info.value.status_code == 422
        assert protected_tags.create.call_count == 1
        assert not data.exists

    def test_read_gone(
        self,
        resource: TagProtectionResource,
        protected_tags: MagicMock,
        ctx: OperationContext,
        not_found: GitlabError,
    ) -> None:
        protected_tags.get.side_effect = not_found
        data = resource.new_data(ATTRIBUTES, id="foo/bar:v*")

        resource.read(ctx, data)

        assert not data.exists
