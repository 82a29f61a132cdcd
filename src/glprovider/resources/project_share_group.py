"""gitlab_project_share_group: sharing a project with a group."""

from pydantic import field_validator

from glprovider.core.access_levels import (
    VALID_PROJECT_ACCESS_LEVEL_NAMES,
    access_level_name,
    access_level_value,
)
from glprovider.core.context import OperationContext
from glprovider.core.identifiers import IdentifierShape
from glprovider.core.state import ResourceData, ResourceSchema
from glprovider.migrations import StateUpgrader, rename_attribute
from glprovider.migrations.upgrader import RawState
from glprovider.resources.base import Resource
from glprovider.utils.logging import get_logger

logger = get_logger(__name__)


class ProjectShareGroupSchema(ResourceSchema):
    project: str
    group_id: int
    group_access: str

    @field_validator("group_access")
    @classmethod
    def validate_group_access(cls, value: str) -> str:
        access_level_value(value, VALID_PROJECT_ACCESS_LEVEL_NAMES)
        return value


def upgrade_v0(raw: RawState) -> RawState:
    """``access_level`` was renamed to ``group_access``."""
    return rename_attribute(raw, "access_level", "group_access")


def upgrade_v1(raw: RawState) -> RawState:
    """``project_id`` was renamed to ``project``.

    V1 still accepted the deprecated ``access_level``; it is folded into
    ``group_access`` when that is unset.
    """
    if raw.get("group_access") in (None, ""):
        rename_attribute(raw, "access_level", "group_access")
    else:
        raw.pop("access_level", None)
    return rename_attribute(raw, "project_id", "project", as_id=True)


class ProjectShareGroupResource(Resource):
    """Shares a project with a group.

    GitLab has no endpoint for a single share; read looks the group up in
    the project's ``shared_with_groups``. Every attribute forces replacement.
    """

    type_name = "gitlab_project_share_group"
    schema = ProjectShareGroupSchema
    identifier = IdentifierShape("project", "group_id", numeric=("group_id",))
    schema_version = 2
    state_upgraders = (
        StateUpgrader(0, upgrade_v0, "access_level -> group_access"),
        StateUpgrader(1, upgrade_v1, "project_id -> project"),
    )

    def create(self, ctx: OperationContext, data: ResourceData) -> None:
        project = data.get("project")
        group_id = data.get("group_id")
        group_access = access_level_value(data.get("group_access"))

        logger.info("sharing_project_with_group", project=project, group_id=group_id)
        handle = self.client.project(project)
        self.client.call(
            ctx, f"share project {project} with group {group_id}", handle.share, group_id, group_access
        )

        data.set_id(self.identifier.encode(project, group_id))
        self.read(ctx, data)

    def read(self, ctx: OperationContext, data: ResourceData) -> None:
        project, group_id = self.identifier.decode(data.id)
        remote = self._get_or_clear(data, lambda: self.client.get(ctx, self.client.gl.projects, project))
        if remote is None:
            return

        for share in getattr(remote, "shared_with_groups", None) or []:
            if share["group_id"] == group_id:
                data.set("project", project)
                data.set("group_id", group_id)
                data.set("group_access", access_level_name(share["group_access_level"]))
                return

        logger.info("resource_not_found_removing_from_state", type_name=self.type_name, id=data.id)
        data.clear_id()

    def update(self, ctx: OperationContext, data: ResourceData) -> None:
        self.read(ctx, data)

    def delete(self, ctx: OperationContext, data: ResourceData) -> None:
        project, group_id = self.identifier.decode(data.id)
        handle = self.client.project(project)
        self._delete_remote(
            data,
            lambda: self.client.call(
                ctx, f"unshare project {project} from group {group_id}", handle.unshare, group_id
            ),
        )
