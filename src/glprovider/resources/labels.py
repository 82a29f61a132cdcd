"""gitlab_project_label and gitlab_group_label."""

from abc import abstractmethod
from typing import Any

from glprovider.core.context import OperationContext
from glprovider.core.identifiers import IdentifierShape
from glprovider.core.state import ResourceData, ResourceSchema
from glprovider.migrations import StateUpgrader, scoped_id_upgrade
from glprovider.resources.base import Resource
from glprovider.utils.logging import get_logger

logger = get_logger(__name__)


class ProjectLabelSchema(ResourceSchema):
    project: str
    name: str
    color: str
    description: str = ""

    # Computed
    label_id: int | None = None


class GroupLabelSchema(ResourceSchema):
    group: str
    name: str
    color: str
    description: str = ""

    # Computed
    label_id: int | None = None


class _LabelResource(Resource):
    """Shared label CRUD; labels are addressed by name, which may contain ``:``."""

    owner_field: str

    @abstractmethod
    def _labels(self, owner: str) -> Any:
        """python-gitlab manager of the owner's labels."""

    def create(self, ctx: OperationContext, data: ResourceData) -> None:
        owner = data.get(self.owner_field)
        payload = {"name": data.get("name"), "color": data.get("color")}
        description, ok = data.get_ok("description")
        if ok:
            payload["description"] = description

        logger.info("creating_label", type_name=self.type_name, owner=owner, name=payload["name"])
        label = self.client.create(ctx, self._labels(owner), payload)

        data.set_id(self.identifier.encode(owner, label.name))
        self.read(ctx, data)

    def read(self, ctx: OperationContext, data: ResourceData) -> None:
        owner, name = self.identifier.decode(data.id)
        label = self._get_or_clear(data, lambda: self.client.get(ctx, self._labels(owner), name))
        if label is None:
            return

        data.set(self.owner_field, owner)
        data.set("label_id", label.id)
        self._set_attributes(data, label, ("name", "color", "description"))

    def update(self, ctx: OperationContext, data: ResourceData) -> None:
        owner, name = self.identifier.decode(data.id)
        changes = self._changed(data, ("color", "description"))
        if changes:
            labels = self._labels(owner)
            if not self._update_or_clear(
                data, lambda: self.client.update(ctx, labels, name, changes)
            ):
                return
        self.read(ctx, data)

    def delete(self, ctx: OperationContext, data: ResourceData) -> None:
        owner, name = self.identifier.decode(data.id)
        labels = self._labels(owner)
        self._delete_remote(data, lambda: self.client.delete(ctx, labels, name))


class ProjectLabelResource(_LabelResource):
    type_name = "gitlab_project_label"
    schema = ProjectLabelSchema
    owner_field = "project"
    identifier = IdentifierShape("project", "name")
    schema_version = 1
    state_upgraders = (
        StateUpgrader(
            0,
            scoped_id_upgrade("project", identifier, numeric_id=False),
            "id <name> -> <project>:<name>",
        ),
    )

    def _labels(self, owner: str) -> Any:
        return self.client.project(owner).labels


class GroupLabelResource(_LabelResource):
    type_name = "gitlab_group_label"
    schema = GroupLabelSchema
    owner_field = "group"
    identifier = IdentifierShape("group", "name")
    schema_version = 1
    state_upgraders = (
        StateUpgrader(
            0,
            scoped_id_upgrade("group", identifier, numeric_id=False),
            "id <name> -> <group>:<name>",
        ),
    )

    def _labels(self, owner: str) -> Any:
        return self.client.group(owner).labels
