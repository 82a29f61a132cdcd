"""gitlab_pipeline_schedule and gitlab_pipeline_schedule_variable."""

from typing import Any

from glprovider.core.context import OperationContext
from glprovider.core.identifiers import IdentifierShape
from glprovider.core.state import ResourceData, ResourceSchema
from glprovider.migrations import (
    StateUpgrader,
    encode_legacy_id,
    legacy_int,
    legacy_str,
    scoped_id_upgrade,
)
from glprovider.migrations.upgrader import RawState
from glprovider.resources.base import Resource
from glprovider.utils.logging import get_logger

logger = get_logger(__name__)

SCHEDULE_ATTRIBUTES = ("description", "ref", "cron", "cron_timezone", "active")


class PipelineScheduleSchema(ResourceSchema):
    project: str
    description: str
    ref: str
    cron: str
    cron_timezone: str = "UTC"
    active: bool = True

    # Computed
    pipeline_schedule_id: int | None = None


class PipelineScheduleResource(Resource):
    type_name = "gitlab_pipeline_schedule"
    schema = PipelineScheduleSchema
    identifier = IdentifierShape(
        "project", "pipeline_schedule_id", numeric=("pipeline_schedule_id",)
    )
    schema_version = 1
    state_upgraders = (
        StateUpgrader(
            0, scoped_id_upgrade("project", identifier), "id <schedule> -> <project>:<schedule>"
        ),
    )

    def create(self, ctx: OperationContext, data: ResourceData) -> None:
        project = data.get("project")
        payload = {name: data.get(name) for name in SCHEDULE_ATTRIBUTES}

        logger.info("creating_pipeline_schedule", project=project, ref=payload["ref"])
        schedule = self.client.create(ctx, self.client.project(project).pipelineschedules, payload)

        data.set_id(self.identifier.encode(project, schedule.id))
        self.read(ctx, data)

    def read(self, ctx: OperationContext, data: ResourceData) -> None:
        project, schedule_id = self.identifier.decode(data.id)
        schedules = self.client.project(project).pipelineschedules
        schedule = self._get_or_clear(data, lambda: self.client.get(ctx, schedules, schedule_id))
        if schedule is None:
            return

        data.set("project", project)
        data.set("pipeline_schedule_id", schedule.id)
        self._set_attributes(data, schedule, SCHEDULE_ATTRIBUTES)

    def update(self, ctx: OperationContext, data: ResourceData) -> None:
        project, schedule_id = self.identifier.decode(data.id)
        changes = self._changed(data, SCHEDULE_ATTRIBUTES)
        if changes:
            schedules = self.client.project(project).pipelineschedules
            if not self._update_or_clear(
                data, lambda: self.client.update(ctx, schedules, schedule_id, changes)
            ):
                return
        self.read(ctx, data)

    def delete(self, ctx: OperationContext, data: ResourceData) -> None:
        project, schedule_id = self.identifier.decode(data.id)
        schedules = self.client.project(project).pipelineschedules
        self._delete_remote(data, lambda: self.client.delete(ctx, schedules, schedule_id))


class PipelineScheduleVariableSchema(ResourceSchema):
    project: str
    pipeline_schedule_id: int
    key: str
    value: str
    variable_type: str = "env_var"


def upgrade_schedule_variable_v0(raw: RawState) -> RawState:
    """``<variable>`` -> ``<project>:<schedule>:<key>``.

    ``pipeline_schedule_id`` may have been persisted as int, float or string.
    """
    raw["id"] = encode_legacy_id(
        PipelineScheduleVariableResource.identifier,
        legacy_str(raw, "project"),
        legacy_int(raw, "pipeline_schedule_id"),
        legacy_str(raw, "key"),
    )
    return raw


class PipelineScheduleVariableResource(Resource):
    """Manages one variable of a pipeline schedule.

    The API has no single-variable lookup; read fetches the schedule and
    searches its variables by key.
    """

    type_name = "gitlab_pipeline_schedule_variable"
    schema = PipelineScheduleVariableSchema
    identifier = IdentifierShape(
        "project", "pipeline_schedule_id", "key", numeric=("pipeline_schedule_id",)
    )
    schema_version = 1
    state_upgraders = (
        StateUpgrader(0, upgrade_schedule_variable_v0, "id -> <project>:<schedule>:<key>"),
    )

    def _variables(self, project: str, schedule_id: int) -> Any:
        return self.client.project(project).pipelineschedules.get(schedule_id, lazy=True).variables

    def create(self, ctx: OperationContext, data: ResourceData) -> None:
        project = data.get("project")
        schedule_id = data.get("pipeline_schedule_id")
        payload = {
            "key": data.get("key"),
            "value": data.get("value"),
            "variable_type": data.get("variable_type"),
        }

        logger.info(
            "creating_pipeline_schedule_variable",
            project=project,
            pipeline_schedule_id=schedule_id,
            key=payload["key"],
        )
        variable = self.client.create(ctx, self._variables(project, schedule_id), payload)

        data.set_id(self.identifier.encode(project, schedule_id, variable.key))
        self.read(ctx, data)

    def read(self, ctx: OperationContext, data: ResourceData) -> None:
        project, schedule_id, key = self.identifier.decode(data.id)
        schedules = self.client.project(project).pipelineschedules
        schedule = self._get_or_clear(data, lambda: self.client.get(ctx, schedules, schedule_id))
        if schedule is None:
            return

        for variable in schedule.attributes.get("variables") or []:
            if variable["key"] == key:
                data.set("project", project)
                data.set("pipeline_schedule_id", schedule_id)
                data.set("key", key)
                data.set("value", variable["value"])
                data.set("variable_type", variable.get("variable_type", "env_var"))
                return

        logger.info(
            "resource_not_found_removing_from_state", type_name=self.type_name, id=data.id
        )
        data.clear_id()

    def update(self, ctx: OperationContext, data: ResourceData) -> None:
        project, schedule_id, key = self.identifier.decode(data.id)
        changes = self._changed(data, ("value", "variable_type"))
        if changes:
            variables = self._variables(project, schedule_id)
            if not self._update_or_clear(
                data, lambda: self.client.update(ctx, variables, key, changes)
            ):
                return
        self.read(ctx, data)

    def delete(self, ctx: OperationContext, data: ResourceData) -> None:
        project, schedule_id, key = self.identifier.decode(data.id)
        variables = self._variables(project, schedule_id)
        self._delete_remote(data, lambda: self.client.delete(ctx, variables, key))
