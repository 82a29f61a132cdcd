"""gitlab_project_freeze_period: deploy freeze windows of a project."""

from glprovider.core.context import OperationContext
from glprovider.core.identifiers import IdentifierShape
from glprovider.core.state import ResourceData, ResourceSchema
from glprovider.migrations import StateUpgrader, rename_attribute
from glprovider.migrations.upgrader import RawState
from glprovider.resources.base import Resource
from glprovider.utils.logging import get_logger

logger = get_logger(__name__)

FREEZE_PERIOD_ATTRIBUTES = ("freeze_start", "freeze_end", "cron_timezone")


class ProjectFreezePeriodSchema(ResourceSchema):
    project: str
    freeze_start: str
    freeze_end: str
    cron_timezone: str = "UTC"

    # Computed
    freeze_period_id: int | None = None


def upgrade_v0(raw: RawState) -> RawState:
    return rename_attribute(raw, "project_id", "project", as_id=True)


class ProjectFreezePeriodResource(Resource):
    type_name = "gitlab_project_freeze_period"
    schema = ProjectFreezePeriodSchema
    identifier = IdentifierShape("project", "freeze_period_id", numeric=("freeze_period_id",))
    schema_version = 1
    state_upgraders = (StateUpgrader(0, upgrade_v0, "project_id -> project"),)

    def create(self, ctx: OperationContext, data: ResourceData) -> None:
        project = data.get("project")
        payload = {name: data.get(name) for name in FREEZE_PERIOD_ATTRIBUTES}

        logger.info("creating_freeze_period", project=project, **payload)
        period = self.client.create(ctx, self.client.project(project).freezeperiods, payload)

        data.set_id(self.identifier.encode(project, period.id))
        self.read(ctx, data)

    def read(self, ctx: OperationContext, data: ResourceData) -> None:
        project, period_id = self.identifier.decode(data.id)
        periods = self.client.project(project).freezeperiods
        period = self._get_or_clear(data, lambda: self.client.get(ctx, periods, period_id))
        if period is None:
            return

        data.set("project", project)
        data.set("freeze_period_id", period.id)
        self._set_attributes(data, period, FREEZE_PERIOD_ATTRIBUTES)

    def update(self, ctx: OperationContext, data: ResourceData) -> None:
        project, period_id = self.identifier.decode(data.id)
        changes = self._changed(data, FREEZE_PERIOD_ATTRIBUTES)
        if changes:
            periods = self.client.project(project).freezeperiods
            if not self._update_or_clear(
                data, lambda: self.client.update(ctx, periods, period_id, changes)
            ):
                return
        self.read(ctx, data)

    def delete(self, ctx: OperationContext, data: ResourceData) -> None:
        project, period_id = self.identifier.decode(data.id)
        periods = self.client.project(project).freezeperiods
        self._delete_remote(data, lambda: self.client.delete(ctx, periods, period_id))
