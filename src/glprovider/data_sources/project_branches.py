"""gitlab_project_branches: every branch of a project."""

from typing import Any

from pydantic import BaseModel, Field

from glprovider.core.context import OperationContext
from glprovider.core.state import ResourceData, ResourceSchema
from glprovider.resources.base import DataSource
from glprovider.utils.logging import get_logger

logger = get_logger(__name__)

BRANCH_FLAGS = (
    "merged",
    "protected",
    "default",
    "developers_can_push",
    "developers_can_merge",
    "can_push",
)

COMMIT_FIELDS = (
    "id",
    "short_id",
    "title",
    "message",
    "author_name",
    "author_email",
    "authored_date",
    "committer_name",
    "committer_email",
    "committed_date",
    "parent_ids",
)


class Branch(BaseModel):
    name: str
    merged: bool = False
    protected: bool = False
    default: bool = False
    developers_can_push: bool = False
    developers_can_merge: bool = False
    can_push: bool = False
    web_url: str = ""
    commit: dict[str, Any] = Field(default_factory=dict)


class ProjectBranchesSchema(ResourceSchema):
    project: str = Field(min_length=1)

    # Computed
    branches: list[Branch] = Field(default_factory=list)


def flatten_branch(branch: Any) -> dict[str, Any]:
    """Map a python-gitlab branch onto the ``branches`` element shape."""
    commit = getattr(branch, "commit", None) or {}
    return {
        "name": branch.name,
        **{flag: bool(getattr(branch, flag, False)) for flag in BRANCH_FLAGS},
        "web_url": getattr(branch, "web_url", "") or "",
        "commit": {name: commit[name] for name in COMMIT_FIELDS if name in commit},
    }


class ProjectBranchesDataSource(DataSource):
    type_name = "gitlab_project_branches"
    schema = ProjectBranchesSchema

    def read(self, ctx: OperationContext, data: ResourceData) -> None:
        project = data.get("project")
        branches = self.client.list_all(
            ctx,
            self.client.project(project).branches,
            per_page=self.operations.page_size,
            key=lambda branch: branch.name,
        )

        logger.info("project_branches_read", project=project, count=len(branches))
        data.set("branches", [flatten_branch(branch) for branch in branches])
        data.set_id(project)
