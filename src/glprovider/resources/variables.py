"""gitlab_project_variable and gitlab_group_variable: CI/CD variables.

Variables are addressed by key plus environment scope; the same key may exist
once per scope. The scope is passed to GitLab as
``filter[environment_scope]`` on every single-variable call.
"""

from abc import abstractmethod
from typing import Any, Literal

from pydantic import field_validator

from glprovider.core.context import OperationContext
from glprovider.core.exceptions import MalformedIdentifierError, MigrationError
from glprovider.core.identifiers import DELIMITER, IdentifierShape
from glprovider.core.state import ResourceData, ResourceSchema
from glprovider.migrations import StateUpgrader, encode_legacy_id, legacy_str
from glprovider.migrations.upgrader import RawState
from glprovider.resources.base import Resource
from glprovider.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_ENVIRONMENT_SCOPE = "*"
VARIABLE_ATTRIBUTES = ("value", "variable_type", "protected", "masked", "raw", "environment_scope")

# Identities written before the environment scope was encoded
LEGACY_SHAPE = IdentifierShape("owner", "key")


class _VariableFields(ResourceSchema):
    key: str
    value: str
    variable_type: Literal["env_var", "file"] = "env_var"
    protected: bool = False
    masked: bool = False
    raw: bool = False
    environment_scope: str = DEFAULT_ENVIRONMENT_SCOPE

    @field_validator("key")
    @classmethod
    def key_has_no_delimiter(cls, key: str) -> str:
        if DELIMITER in key:
            raise ValueError(f"variable key must not contain {DELIMITER!r}")
        return key


class ProjectVariableSchema(_VariableFields):
    project: str


class GroupVariableSchema(_VariableFields):
    group: str


def upgrade_project_variable_v0(raw: RawState) -> RawState:
    """``<project>:<key>`` -> ``<project>:<key>:<environment_scope>``.

    Identities that already carry a scope are left untouched.
    """
    legacy_id = legacy_str(raw, "id")
    if len(legacy_id.split(DELIMITER, 2)) == 3:
        return raw

    try:
        project, key = LEGACY_SHAPE.decode(legacy_id)
    except MalformedIdentifierError as e:
        raise MigrationError(f"cannot migrate state: {e}") from e
    scope = raw.get("environment_scope") or DEFAULT_ENVIRONMENT_SCOPE
    raw["id"] = encode_legacy_id(ProjectVariableResource.identifier, project, key, scope)
    return raw


class _VariableResource(Resource):
    owner_field: str

    @abstractmethod
    def _variables(self, owner: str) -> Any:
        """python-gitlab manager of the owner's variables."""

    def decode_id(self, id: str) -> tuple[str, str, str]:
        return self.identifier.decode(id)

    @staticmethod
    def _scope_filter(scope: str) -> dict[str, Any]:
        return {"filter": {"environment_scope": scope}}

    def create(self, ctx: OperationContext, data: ResourceData) -> None:
        owner = data.get(self.owner_field)
        key = data.get("key")
        payload = {"key": key, **{name: data.get(name) for name in VARIABLE_ATTRIBUTES}}

        logger.info(
            "creating_variable",
            type_name=self.type_name,
            owner=owner,
            key=key,
            environment_scope=payload["environment_scope"],
        )
        self.client.create(ctx, self._variables(owner), payload)

        data.set_id(self.identifier.encode(owner, key, payload["environment_scope"]))
        self.read(ctx, data)

    def read(self, ctx: OperationContext, data: ResourceData) -> None:
        owner, key, scope = self.decode_id(data.id)
        variables = self._variables(owner)
        variable = self._get_or_clear(
            data, lambda: self.client.get(ctx, variables, key, **self._scope_filter(scope))
        )
        if variable is None:
            return

        data.set(self.owner_field, owner)
        data.set("key", variable.key)
        self._set_attributes(data, variable, VARIABLE_ATTRIBUTES)
        # GitLab may normalise the scope; keep the identity in step with it
        remote_scope = getattr(variable, "environment_scope", scope) or DEFAULT_ENVIRONMENT_SCOPE
        data.set_id(self.identifier.encode(owner, variable.key, remote_scope))

    def update(self, ctx: OperationContext, data: ResourceData) -> None:
        owner, key, scope = self.decode_id(data.id)
        changes = self._changed(data, VARIABLE_ATTRIBUTES)
        if changes:
            # value is required by the edit endpoint
            changes.setdefault("value", data.get("value"))
            variables = self._variables(owner)
            if not self._update_or_clear(
                data,
                lambda: self.client.update(ctx, variables, key, changes, **self._scope_filter(scope)),
            ):
                return
            data.set_id(self.identifier.encode(owner, key, data.get("environment_scope")))
        self.read(ctx, data)

    def delete(self, ctx: OperationContext, data: ResourceData) -> None:
        owner, key, scope = self.decode_id(data.id)
        variables = self._variables(owner)
        self._delete_remote(
            data, lambda: self.client.delete(ctx, variables, key, **self._scope_filter(scope))
        )


class ProjectVariableResource(_VariableResource):
    type_name = "gitlab_project_variable"
    schema = ProjectVariableSchema
    owner_field = "project"
    identifier = IdentifierShape("project", "key", "environment_scope")
    schema_version = 1
    state_upgraders = (
        StateUpgrader(0, upgrade_project_variable_v0, "id <project>:<key> -> <project>:<key>:<scope>"),
    )

    def _variables(self, owner: str) -> Any:
        return self.client.project(owner).variables


class GroupVariableResource(_VariableResource):
    """Group variable.

    Identities written before scopes were tracked have the form
    ``<group>:<key>`` and are read as scope ``*``.
    """

    type_name = "gitlab_group_variable"
    schema = GroupVariableSchema
    owner_field = "group"
    identifier = IdentifierShape("group", "key", "environment_scope")

    def decode_id(self, id: str) -> tuple[str, str, str]:
        if len(id.split(DELIMITER, 2)) == 2:
            group, key = LEGACY_SHAPE.decode(id)
            return group, key, DEFAULT_ENVIRONMENT_SCOPE
        return self.identifier.decode(id)

    def import_state(self, ctx: OperationContext, id: str) -> ResourceData:
        group, key, scope = self.decode_id(id)
        return super().import_state(ctx, self.identifier.encode(group, key, scope))

    def _variables(self, owner: str) -> Any:
        return self.client.group(owner).variables
