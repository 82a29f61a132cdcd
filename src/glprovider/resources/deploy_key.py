"""gitlab_deploy_key: SSH deploy keys of a project."""

from glprovider.core.context import OperationContext
from glprovider.core.identifiers import IdentifierShape
from glprovider.core.state import ResourceData, ResourceSchema
from glprovider.migrations import StateUpgrader, scoped_id_upgrade
from glprovider.resources.base import Resource
from glprovider.utils.logging import get_logger

logger = get_logger(__name__)


class DeployKeySchema(ResourceSchema):
    project: str
    title: str
    key: str
    can_push: bool = False

    # Computed
    deploy_key_id: int | None = None


class DeployKeyResource(Resource):
    """Manages a project deploy key.

    Every attribute forces replacement, so update only refreshes state.
    """

    type_name = "gitlab_deploy_key"
    schema = DeployKeySchema
    identifier = IdentifierShape("project", "deploy_key_id", numeric=("deploy_key_id",))
    schema_version = 1
    state_upgraders = (
        StateUpgrader(0, scoped_id_upgrade("project", identifier), "id <key> -> <project>:<key>"),
    )

    def create(self, ctx: OperationContext, data: ResourceData) -> None:
        project = data.get("project")
        payload = {
            "title": data.get("title"),
            "key": data.get("key").strip(),
            "can_push": data.get("can_push"),
        }

        logger.info("creating_deploy_key", project=project, title=payload["title"])
        key = self.client.create(ctx, self.client.project(project).keys, payload)

        data.set_id(self.identifier.encode(project, key.id))
        self.read(ctx, data)

    def read(self, ctx: OperationContext, data: ResourceData) -> None:
        project, key_id = self.identifier.decode(data.id)
        key = self._get_or_clear(
            data, lambda: self.client.get(ctx, self.client.project(project).keys, key_id)
        )
        if key is None:
            return

        data.set("project", project)
        data.set("deploy_key_id", key.id)
        self._set_attributes(data, key, ("title", "key", "can_push"))

    def update(self, ctx: OperationContext, data: ResourceData) -> None:
        self.read(ctx, data)

    def delete(self, ctx: OperationContext, data: ResourceData) -> None:
        project, key_id = self.identifier.decode(data.id)
        keys = self.client.project(project).keys
        self._delete_remote(data, lambda: self.client.delete(ctx, keys, key_id))
