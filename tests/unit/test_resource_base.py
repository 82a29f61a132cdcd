"""Tests for the shared resource adapter behaviour."""

from types import SimpleNamespace
from typing import Any
from unittest.mock import MagicMock

import pytest
from gitlab.exceptions import GitlabError

from glprovider.clients.gitlab_client import GitLabClient
from glprovider.core.config import OperationsConfig
from glprovider.core.context import OperationContext
from glprovider.core.exceptions import (
    DeletionTimeoutError,
    MalformedIdentifierError,
    NotFoundError,
    RegistrationError,
    RemoteError,
)
from glprovider.core.identifiers import IdentifierShape
from glprovider.core.state import ResourceData, ResourceSchema
from glprovider.migrations import StateUpgrader
from glprovider.resources.base import Resource


class WidgetSchema(ResourceSchema):
    project: str
    widget_id: int | None = None
    colour: str = "red"
    size: int = 1


class WidgetResource(Resource):
    type_name = "gitlab_widget"
    schema = WidgetSchema
    identifier = IdentifierShape("project", "widget_id", numeric=("widget_id",))
    schema_version = 1
    state_upgraders = (StateUpgrader(0, lambda raw: {**raw, "size": 2}),)

    def _widgets(self, project: str) -> Any:
        return self.client.project(project).widgets

    def create(self, ctx: OperationContext, data: ResourceData) -> None:
        project = data.get("project")
        widget = self.client.create(ctx, self._widgets(project), {"colour": data.get("colour")})
        data.set_id(self.identifier.encode(project, widget.id))
        self.read(ctx, data)

    def read(self, ctx: OperationContext, data: ResourceData) -> None:
        project, widget_id = self.identifier.decode(data.id)
        widget = self._get_or_clear(
            data, lambda: self.client.get(ctx, self._widgets(project), widget_id)
        )
        if widget is None:
            return
        data.set("project", project)
        data.set("widget_id", widget.id)
        self._set_attributes(data, widget, ("colour", "size"))

    def update(self, ctx: OperationContext, data: ResourceData) -> None:
        project, widget_id = self.identifier.decode(data.id)
        changes = self._changed(data, ("colour", "size"))
        widgets = self._widgets(project)
        if self._update_or_clear(data, lambda: self.client.update(ctx, widgets, widget_id, changes)):
            self.read(ctx, data)

    def delete(self, ctx: OperationContext, data: ResourceData) -> None:
        project, widget_id = self.identifier.decode(data.id)
        widgets = self._widgets(project)
        self._delete_remote(data, lambda: self.client.delete(ctx, widgets, widget_id))


@pytest.fixture
def resource(gitlab_client: GitLabClient, operations: OperationsConfig) -> WidgetResource:
    return WidgetResource(gitlab_client, operations)


@pytest.fixture
def widgets(project_handle: MagicMock) -> MagicMock:
    return project_handle.widgets


class TestReadSemantics:
    """Tests for the not-found handling helpers."""

    def test_read_sets_remote_values(
        self, resource: WidgetResource, widgets: MagicMock, ctx: OperationContext
    ) -> None:
        widgets.get.return_value = SimpleNamespace(id=7, colour="blue", size=3)
        data = resource.new_data({"project": "foo/bar"}, id="foo/bar:7")

        resource.read(ctx, data)

        assert data.state() == {"project": "foo/bar", "widget_id": 7, "colour": "blue", "size": 3}
        widgets.get.assert_called_once_with(7)

    def test_missing_remote_attribute_keeps_current_value(
        self, resource: WidgetResource, widgets: MagicMock, ctx: OperationContext
    ) -> None:
        widgets.get.return_value = SimpleNamespace(id=7, colour="blue")
        data = resource.new_data({"project": "foo/bar", "size": 5}, id="foo/bar:7")

        resource.read(ctx, data)

        assert data.get("size") == 5

    def test_read_not_found_clears_identity(
        self,
        resource: WidgetResource,
        widgets: MagicMock,
        ctx: OperationContext,
        not_found: GitlabError,
    ) -> None:
        widgets.get.side_effect = not_found
        data = resource.new_data({"project": "foo/bar"}, id="foo/bar:7")

        resource.read(ctx, data)

        assert not data.exists

    def test_read_other_errors_propagate(
        self, resource: WidgetResource, widgets: MagicMock, ctx: OperationContext, gitlab_error
    ) -> None:
        widgets.get.side_effect = gitlab_error(403, "Forbidden")
        data = resource.new_data({"project": "foo/bar"}, id="foo/bar:7")

        with pytest.raises(RemoteError, match="Forbidden"):
            resource.read(ctx, data)
        assert data.exists

    def test_read_malformed_identity(self, resource: WidgetResource, ctx: OperationContext) -> None:
        data = resource.new_data({"project": "foo/bar"}, id="7")

        with pytest.raises(MalformedIdentifierError):
            resource.read(ctx, data)

    def test_update_not_found_clears_identity(
        self,
        resource: WidgetResource,
        widgets: MagicMock,
        ctx: OperationContext,
        not_found: GitlabError,
    ) -> None:
        widgets.update.side_effect = not_found
        data = resource.new_data(
            {"project": "foo/bar", "colour": "green"},
            prior={"project": "foo/bar", "colour": "red"},
            id="foo/bar:7",
        )

        resource.update(ctx, data)

        assert not data.exists
        widgets.update.assert_called_once_with(7, {"colour": "green"})
        widgets.get.assert_not_called()

    def test_delete_not_found_is_success(
        self,
        resource: WidgetResource,
        widgets: MagicMock,
        ctx: OperationContext,
        not_found: GitlabError,
    ) -> None:
        widgets.delete.side_effect = not_found
        data = resource.new_data({"project": "foo/bar"}, id="foo/bar:7")

        resource.delete(ctx, data)

        widgets.delete.assert_called_once_with(7)


class TestImportState:
    """Tests for Resource.import_state."""

    def test_import_reads_remote(
        self, resource: WidgetResource, widgets: MagicMock, ctx: OperationContext
    ) -> None:
        widgets.get.return_value = SimpleNamespace(id=7, colour="blue", size=3)

        data = resource.import_state(ctx, "foo/bar:7")

        assert data.id == "foo/bar:7"
        assert data.state()["colour"] == "blue"

    def test_import_missing_object(
        self,
        resource: WidgetResource,
        widgets: MagicMock,
        ctx: OperationContext,
        not_found: GitlabError,
    ) -> None:
        widgets.get.side_effect = not_found

        with pytest.raises(NotFoundError, match="Cannot import non-existent gitlab_widget"):
            resource.import_state(ctx, "foo/bar:7")

    def test_import_malformed_id(self, resource: WidgetResource, ctx: OperationContext) -> None:
        with pytest.raises(MalformedIdentifierError):
            resource.import_state(ctx, "foo/bar")


class TestStateUpgrade:
    """Tests for the class-level upgrade entry points."""

    def test_upgrade_state(self) -> None:
        assert WidgetResource.upgrade_state({"project": "a"}, 0) == {"project": "a", "size": 2}

    def test_broken_chain_is_rejected(self) -> None:
        class BrokenResource(WidgetResource):
            schema_version = 2

        with pytest.raises(RegistrationError):
            BrokenResource.migrator()


class TestWaitForDeletion:
    """Tests for Resource._wait_for_deletion."""

    def test_returns_once_not_found(
        self, resource: WidgetResource, ctx: OperationContext
    ) -> None:
        fetch = MagicMock(side_effect=[object(), NotFoundError("gone", 404)])
        data = resource.new_data({"project": "foo/bar"}, id="foo/bar:7")

        resource._wait_for_deletion(ctx, data, fetch)

        assert fetch.call_count == 2

    def test_times_out(self, resource: WidgetResource, ctx: OperationContext) -> None:
        data = resource.new_data({"project": "foo/bar"}, id="foo/bar:7")

        with pytest.raises(DeletionTimeoutError, match="gitlab_widget foo/bar:7"):
            resource._wait_for_deletion(ctx, data, lambda: object())
