"""gitlab_project_level_mr_approvals: merge request approval settings."""

from glprovider.core.context import OperationContext
from glprovider.core.identifiers import IdentifierShape
from glprovider.core.state import ResourceData, ResourceSchema
from glprovider.migrations import StateUpgrader, rename_attribute
from glprovider.migrations.upgrader import RawState
from glprovider.resources.base import Resource
from glprovider.utils.logging import get_logger

logger = get_logger(__name__)

APPROVAL_SETTINGS = (
    "reset_approvals_on_push",
    "disable_overriding_approvers_per_merge_request",
    "merge_requests_author_approval",
    "merge_requests_disable_committers_approval",
    "require_password_to_approve",
)

# GitLab defaults, restored on delete
DEFAULT_APPROVAL_SETTINGS = {
    "reset_approvals_on_push": True,
    "disable_overriding_approvers_per_merge_request": False,
    "merge_requests_author_approval": False,
    "merge_requests_disable_committers_approval": False,
    "require_password_to_approve": False,
}


class ProjectLevelMrApprovalsSchema(ResourceSchema):
    project: str
    reset_approvals_on_push: bool = False
    disable_overriding_approvers_per_merge_request: bool = False
    merge_requests_author_approval: bool = False
    merge_requests_disable_committers_approval: bool = False
    require_password_to_approve: bool = False


def upgrade_v0(raw: RawState) -> RawState:
    return rename_attribute(raw, "project_id", "project", as_id=True)


class ProjectLevelMrApprovalsResource(Resource):
    """Manages the project-wide approval configuration.

    The configuration always exists; create applies it and delete resets it
    to GitLab's defaults.
    """

    type_name = "gitlab_project_level_mr_approvals"
    schema = ProjectLevelMrApprovalsSchema
    identifier = IdentifierShape("project")
    schema_version = 1
    state_upgraders = (StateUpgrader(0, upgrade_v0, "project_id -> project"),)

    def create(self, ctx: OperationContext, data: ResourceData) -> None:
        project = data.get("project")
        payload = {name: data.get(name) for name in APPROVAL_SETTINGS}

        logger.info("configuring_mr_approvals", project=project)
        self.client.update(ctx, self.client.project(project).approvals, None, payload)

        data.set_id(self.identifier.encode(project))
        self.read(ctx, data)

    def read(self, ctx: OperationContext, data: ResourceData) -> None:
        (project,) = self.identifier.decode(data.id)
        approvals = self.client.project(project).approvals
        config = self._get_or_clear(data, lambda: self.client.get(ctx, approvals))
        if config is None:
            return

        data.set("project", project)
        self._set_attributes(data, config, APPROVAL_SETTINGS)

    def update(self, ctx: OperationContext, data: ResourceData) -> None:
        (project,) = self.identifier.decode(data.id)
        changes = self._changed(data, APPROVAL_SETTINGS)
        if changes:
            approvals = self.client.project(project).approvals
            if not self._update_or_clear(
                data, lambda: self.client.update(ctx, approvals, None, changes)
            ):
                return
        self.read(ctx, data)

    def delete(self, ctx: OperationContext, data: ResourceData) -> None:
        (project,) = self.identifier.decode(data.id)
        approvals = self.client.project(project).approvals
        logger.info("resetting_mr_approvals", project=project)
        self._delete_remote(
            data, lambda: self.client.update(ctx, approvals, None, dict(DEFAULT_APPROVAL_SETTINGS))
        )
