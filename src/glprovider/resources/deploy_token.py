"""gitlab_deploy_token: deploy tokens of a project or a group."""

from datetime import datetime
from typing import Any, Literal

from pydantic import Field, field_validator, model_validator

from glprovider.core.context import OperationContext
from glprovider.core.identifiers import IdentifierShape
from glprovider.core.state import ResourceData, ResourceSchema
from glprovider.migrations import (
    StateUpgrader,
    encode_legacy_id,
    legacy_int,
    select_discriminator,
)
from glprovider.migrations.upgrader import RawState
from glprovider.resources.base import Resource
from glprovider.utils.logging import get_logger

logger = get_logger(__name__)

VALID_SCOPES = (
    "read_registry",
    "read_repository",
    "read_package_registry",
    "write_registry",
    "write_package_registry",
)

OWNER_KINDS = ("project", "group")


class DeployTokenSchema(ResourceSchema):
    project: str | None = None
    group: str | None = None
    name: str
    username: str = ""
    expires_at: str = ""
    scopes: list[str] = Field(default_factory=list)

    # Computed
    deploy_token_id: int | None = None
    token: str = ""

    @field_validator("scopes")
    @classmethod
    def validate_scopes(cls, scopes: list[str]) -> list[str]:
        invalid = [s for s in scopes if s not in VALID_SCOPES]
        if invalid:
            raise ValueError(f"invalid deploy token scopes {invalid}, expected any of {VALID_SCOPES}")
        return sorted(set(scopes))

    @field_validator("expires_at")
    @classmethod
    def validate_expires_at(cls, value: str) -> str:
        if value:
            datetime.fromisoformat(value.replace("Z", "+00:00"))
        return value

    @model_validator(mode="after")
    def exactly_one_owner(self) -> "DeployTokenSchema":
        if bool(self.project) == bool(self.group):
            raise ValueError("exactly one of project or group must be set")
        return self


def upgrade_v0(raw: RawState) -> RawState:
    """``<token>`` -> ``project|group:<owner>:<token>``."""
    kind, owner = select_discriminator(raw, OWNER_KINDS)
    raw["id"] = encode_legacy_id(DeployTokenResource.identifier, kind, owner, legacy_int(raw, "id"))
    return raw


class DeployTokenResource(Resource):
    """Manages a project or group deploy token.

    The secret is only returned by the create call and is never read back.
    """

    type_name = "gitlab_deploy_token"
    schema = DeployTokenSchema
    identifier = IdentifierShape(
        "kind", "owner", "deploy_token_id",
        numeric=("deploy_token_id",),
        discriminators=OWNER_KINDS,
    )
    schema_version = 1
    state_upgraders = (StateUpgrader(0, upgrade_v0, "id <token> -> <kind>:<owner>:<token>"),)

    def _manager(self, kind: Literal["project", "group"], owner: str) -> Any:
        handle = self.client.project(owner) if kind == "project" else self.client.group(owner)
        return handle.deploytokens

    def create(self, ctx: OperationContext, data: ResourceData) -> None:
        kind = "project" if data.get("project") else "group"
        owner = data.get(kind)

        payload: dict[str, Any] = {"name": data.get("name"), "scopes": data.get("scopes")}
        for name in ("username", "expires_at"):
            value, ok = data.get_ok(name)
            if ok:
                payload[name] = value

        logger.info("creating_deploy_token", kind=kind, owner=owner, name=payload["name"])
        token = self.client.create(ctx, self._manager(kind, owner), payload)

        data.set_id(self.identifier.encode(kind, owner, token.id))
        data.set("token", token.token)
        self.read(ctx, data)

    def read(self, ctx: OperationContext, data: ResourceData) -> None:
        kind, owner, token_id = self.identifier.decode(data.id)
        token = self._get_or_clear(
            data, lambda: self.client.get(ctx, self._manager(kind, owner), token_id)
        )
        if token is None:
            return

        data.set(kind, owner)
        data.set("deploy_token_id", token.id)
        self._set_attributes(data, token, ("name", "username"))
        data.set("scopes", sorted(token.scopes))
        if getattr(token, "expires_at", None):
            data.set("expires_at", token.expires_at)

    def update(self, ctx: OperationContext, data: ResourceData) -> None:
        self.read(ctx, data)

    def delete(self, ctx: OperationContext, data: ResourceData) -> None:
        kind, owner, token_id = self.identifier.decode(data.id)
        manager = self._manager(kind, owner)
        self._delete_remote(data, lambda: self.client.delete(ctx, manager, token_id))
