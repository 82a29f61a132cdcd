"""gitlab_pipeline_trigger: pipeline trigger tokens of a project."""

from glprovider.core.context import OperationContext
from glprovider.core.identifiers import IdentifierShape
from glprovider.core.state import ResourceData, ResourceSchema
from glprovider.migrations import StateUpgrader, scoped_id_upgrade
from glprovider.resources.base import Resource
from glprovider.utils.logging import get_logger

logger = get_logger(__name__)


class PipelineTriggerSchema(ResourceSchema):
    project: str
    description: str

    # Computed
    pipeline_trigger_id: int | None = None
    token: str = ""


class PipelineTriggerResource(Resource):
    type_name = "gitlab_pipeline_trigger"
    schema = PipelineTriggerSchema
    identifier = IdentifierShape("project", "pipeline_trigger_id", numeric=("pipeline_trigger_id",))
    schema_version = 1
    state_upgraders = (
        StateUpgrader(
            0, scoped_id_upgrade("project", identifier), "id <trigger> -> <project>:<trigger>"
        ),
    )

    def create(self, ctx: OperationContext, data: ResourceData) -> None:
        project = data.get("project")

        logger.info("creating_pipeline_trigger", project=project)
        trigger = self.client.create(
            ctx, self.client.project(project).triggers, {"description": data.get("description")}
        )

        data.set_id(self.identifier.encode(project, trigger.id))
        self.read(ctx, data)

    def read(self, ctx: OperationContext, data: ResourceData) -> None:
        project, trigger_id = self.identifier.decode(data.id)
        triggers = self.client.project(project).triggers
        trigger = self._get_or_clear(data, lambda: self.client.get(ctx, triggers, trigger_id))
        if trigger is None:
            return

        data.set("project", project)
        data.set("pipeline_trigger_id", trigger.id)
        self._set_attributes(data, trigger, ("description", "token"))

    def update(self, ctx: OperationContext, data: ResourceData) -> None:
        project, trigger_id = self.identifier.decode(data.id)
        if data.has_change("description"):
            triggers = self.client.project(project).triggers
            payload = {"description": data.get("description")}
            if not self._update_or_clear(
                data, lambda: self.client.update(ctx, triggers, trigger_id, payload)
            ):
                return
        self.read(ctx, data)

    def delete(self, ctx: OperationContext, data: ResourceData) -> None:
        project, trigger_id = self.identifier.decode(data.id)
        triggers = self.client.project(project).triggers
        self._delete_remote(data, lambda: self.client.delete(ctx, triggers, trigger_id))
