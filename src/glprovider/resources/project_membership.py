"""gitlab_project_membership: direct members of a project."""

from typing import Any

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


class ProjectMembershipSchema(ResourceSchema):
    project: str
    user_id: int
    access_level: str
    expires_at: str = ""

    @field_validator("access_level")
    @classmethod
    def validate_access_level(cls, value: str) -> str:
        access_level_value(value, VALID_PROJECT_ACCESS_LEVEL_NAMES)
        return value


def upgrade_v0(raw: RawState) -> RawState:
    """``project_id`` (string or number) was renamed to ``project``."""
    return rename_attribute(raw, "project_id", "project", as_id=True)


class ProjectMembershipResource(Resource):
    type_name = "gitlab_project_membership"
    schema = ProjectMembershipSchema
    identifier = IdentifierShape("project", "user_id", numeric=("user_id",))
    schema_version = 1
    state_upgraders = (StateUpgrader(0, upgrade_v0, "project_id -> project"),)

    def _payload(self, data: ResourceData) -> dict[str, Any]:
        payload: dict[str, Any] = {"access_level": access_level_value(data.get("access_level"))}
        expires_at, ok = data.get_ok("expires_at")
        if ok:
            payload["expires_at"] = expires_at
        return payload

    def create(self, ctx: OperationContext, data: ResourceData) -> None:
        project = data.get("project")
        user_id = data.get("user_id")
        payload = {"user_id": user_id, **self._payload(data)}

        logger.info("adding_project_member", project=project, user_id=user_id)
        self.client.create(ctx, self.client.project(project).members, payload)

        data.set_id(self.identifier.encode(project, user_id))
        self.read(ctx, data)

    def read(self, ctx: OperationContext, data: ResourceData) -> None:
        project, user_id = self.identifier.decode(data.id)
        members = self.client.project(project).members
        member = self._get_or_clear(data, lambda: self.client.get(ctx, members, user_id))
        if member is None:
            return

        data.set("project", project)
        data.set("user_id", member.id)
        data.set("access_level", access_level_name(member.access_level))
        data.set("expires_at", getattr(member, "expires_at", None) or "")

    def update(self, ctx: OperationContext, data: ResourceData) -> None:
        project, user_id = self.identifier.decode(data.id)
        if data.has_change("access_level") or data.has_change("expires_at"):
            members = self.client.project(project).members
            payload = self._payload(data)
            if not self._update_or_clear(
                data, lambda: self.client.update(ctx, members, user_id, payload)
            ):
                return
        self.read(ctx, data)

    def delete(self, ctx: OperationContext, data: ResourceData) -> None:
        project, user_id = self.identifier.decode(data.id)
        members = self.client.project(project).members
        self._delete_remote(data, lambda: self.client.delete(ctx, members, user_id))
