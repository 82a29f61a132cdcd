"""gitlab_group_hooks: every webhook of a group."""

from typing import Any

from pydantic import BaseModel, Field

from glprovider.core.context import OperationContext
from glprovider.core.state import ResourceData, ResourceSchema
from glprovider.resources.base import DataSource
from glprovider.utils.logging import get_logger

logger = get_logger(__name__)

GROUP_HOOK_FLAGS = (
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
    "subgroup_events",
    "enable_ssl_verification",
)


class GroupHook(BaseModel):
    hook_id: int
    group_id: int | None = None
    url: str
    push_events_branch_filter: str = ""
    push_events: bool = False
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
    subgroup_events: bool = False
    enable_ssl_verification: bool = True


class GroupHooksSchema(ResourceSchema):
    group: str = Field(min_length=1)

    # Computed
    hooks: list[GroupHook] = Field(default_factory=list)


def flatten_hook(hook: Any) -> dict[str, Any]:
    flattened: dict[str, Any] = {
        "hook_id": hook.id,
        "group_id": getattr(hook, "group_id", None),
        "url": hook.url,
        "push_events_branch_filter": getattr(hook, "push_events_branch_filter", None) or "",
    }
    for flag in GROUP_HOOK_FLAGS:
        value = getattr(hook, flag, None)
        if value is not None:
            flattened[flag] = bool(value)
    return flattened


class GroupHooksDataSource(DataSource):
    type_name = "gitlab_group_hooks"
    schema = GroupHooksSchema

    def read(self, ctx: OperationContext, data: ResourceData) -> None:
        group = data.get("group")
        hooks = self.client.list_all(
            ctx,
            self.client.group(group).hooks,
            per_page=self.operations.page_size,
            key=lambda hook: hook.id,
        )

        logger.info("group_hooks_read", group=group, count=len(hooks))
        data.set("hooks", [flatten_hook(hook) for hook in hooks])
        data.set_id(group)
