"""gitlab_project_hook: webhooks of a project."""

from glprovider.core.context import OperationContext
from glprovider.core.identifiers import IdentifierShape
from glprovider.core.state import ResourceData, ResourceSchema
from glprovider.migrations import StateUpgrader, scoped_id_upgrade
from glprovider.resources.base import Resource
from glprovider.utils.logging import get_logger

logger = get_logger(__name__)

EVENT_FLAGS = (
    "push_events",
    "issues_events",
    "confidential_issues_events",
    "merge_requests_events",
    "tag_push_events",
    "note_events",
    "confidential_note_events",
    "job_events",
    "pipeline_events",
    "wiki_page_events",
    "deployment_events",
    "releases_events",
)

HOOK_ATTRIBUTES = (*EVENT_FLAGS, "url", "push_events_branch_filter", "enable_ssl_verification")


class ProjectHookSchema(ResourceSchema):
    project: str
    url: str
    token: str = ""
    push_events: bool = True
    push_events_branch_filter: str = ""
    issues_events: bool = False
    confidential_issues_events: bool = False
    merge_requests_events: bool = False
    tag_push_events: bool = False
    note_events: bool = False
    confidential_note_events: bool = False
    job_events: bool = False
    pipeline_events: bool = False
    wiki_page_events: bool = False
    deployment_events: bool = False
    releases_events: bool = False
    enable_ssl_verification: bool = True

    # Computed
    hook_id: int | None = None
    project_id: int | None = None


class ProjectHookResource(Resource):
    """Manages a project webhook.

    The secret token is write-only in the API; the configured value is kept
    in state as-is.
    """

    type_name = "gitlab_project_hook"
    schema = ProjectHookSchema
    identifier = IdentifierShape("project", "hook_id", numeric=("hook_id",))
    schema_version = 1
    state_upgraders = (
        StateUpgrader(0, scoped_id_upgrade("project", identifier), "id <hook> -> <project>:<hook>"),
    )

    def create(self, ctx: OperationContext, data: ResourceData) -> None:
        project = data.get("project")
        payload = {name: data.get(name) for name in HOOK_ATTRIBUTES}
        token, has_token = data.get_ok("token")
        if has_token:
            payload["token"] = token

        logger.info("creating_project_hook", project=project, url=data.get("url"))
        hook = self.client.create(ctx, self.client.project(project).hooks, payload)

        data.set_id(self.identifier.encode(project, hook.id))
        self.read(ctx, data)

    def read(self, ctx: OperationContext, data: ResourceData) -> None:
        project, hook_id = self.identifier.decode(data.id)
        hook = self._get_or_clear(
            data, lambda: self.client.get(ctx, self.client.project(project).hooks, hook_id)
        )
        if hook is None:
            return

        data.set("project", project)
        data.set("hook_id", hook.id)
        data.set("project_id", hook.project_id)
        self._set_attributes(data, hook, HOOK_ATTRIBUTES)

    def update(self, ctx: OperationContext, data: ResourceData) -> None:
        project, hook_id = self.identifier.decode(data.id)
        # url is mandatory on the edit endpoint
        payload = {"url": data.get("url"), **self._changed(data, HOOK_ATTRIBUTES)}
        if data.has_change("token"):
            payload["token"] = data.get("token")

        hooks = self.client.project(project).hooks
        if self._update_or_clear(data, lambda: self.client.update(ctx, hooks, hook_id, payload)):
            self.read(ctx, data)

    def delete(self, ctx: OperationContext, data: ResourceData) -> None:
        project, hook_id = self.identifier.decode(data.id)
        hooks = self.client.project(project).hooks
        self._delete_remote(data, lambda: self.client.delete(ctx, hooks, hook_id))
