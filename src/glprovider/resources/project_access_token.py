"""gitlab_project_access_token: bot-user tokens scoped to a project."""

from datetime import date
from typing import Any

from pydantic import field_validator

from glprovider.core.access_levels import (
    VALID_PROJECT_ACCESS_TOKEN_ACCESS_LEVEL_NAMES,
    access_level_name,
    access_level_value,
)
from glprovider.core.context import OperationContext
from glprovider.core.exceptions import NotFoundError
from glprovider.core.identifiers import IdentifierShape
from glprovider.core.state import ResourceData, ResourceSchema
from glprovider.resources.base import Resource
from glprovider.utils.logging import get_logger

logger = get_logger(__name__)

VALID_SCOPES = (
    "api",
    "read_api",
    "read_repository",
    "write_repository",
    "read_registry",
    "write_registry",
)


class ProjectAccessTokenSchema(ResourceSchema):
    project: str
    name: str
    scopes: list[str]
    expires_at: str = ""
    access_level: str = "maintainer"

    # Computed
    token: str = ""
    active: bool | None = None
    revoked: bool | None = None
    created_at: str = ""
    user_id: int | None = None
    token_id: int | None = None

    @field_validator("scopes")
    @classmethod
    def validate_scopes(cls, scopes: list[str]) -> list[str]:
        invalid = [s for s in scopes if s not in VALID_SCOPES]
        if invalid:
            raise ValueError(f"invalid token scopes {invalid}, expected any of {VALID_SCOPES}")
        return sorted(set(scopes))

    @field_validator("expires_at")
    @classmethod
    def validate_expires_at(cls, value: str) -> str:
        if value:
            date.fromisoformat(value)
        return value

    @field_validator("access_level")
    @classmethod
    def validate_access_level(cls, value: str) -> str:
        access_level_value(value, VALID_PROJECT_ACCESS_TOKEN_ACCESS_LEVEL_NAMES)
        return value


class ProjectAccessTokenResource(Resource):
    """Manages a project access token.

    Tokens cannot be edited, so update only refreshes state. The secret is
    returned once by create. Revocation is asynchronous on the GitLab side:
    delete waits until the token is no longer found.
    """

    type_name = "gitlab_project_access_token"
    schema = ProjectAccessTokenSchema
    identifier = IdentifierShape("project", "token_id", numeric=("token_id",))

    def create(self, ctx: OperationContext, data: ResourceData) -> None:
        project = data.get("project")
        payload: dict[str, Any] = {
            "name": data.get("name"),
            "scopes": data.get("scopes"),
            "access_level": access_level_value(
                data.get("access_level"), VALID_PROJECT_ACCESS_TOKEN_ACCESS_LEVEL_NAMES
            ),
        }
        expires_at, ok = data.get_ok("expires_at")
        if ok:
            payload["expires_at"] = expires_at

        logger.info("creating_project_access_token", project=project, name=payload["name"])
        token = self.client.create(ctx, self.client.project(project).access_tokens, payload)

        data.set_id(self.identifier.encode(project, token.id))
        data.set("token", token.token)
        self.read(ctx, data)

    def read(self, ctx: OperationContext, data: ResourceData) -> None:
        project, token_id = self.identifier.decode(data.id)
        tokens = self.client.project(project).access_tokens
        token = self._get_or_clear(data, lambda: self.client.get(ctx, tokens, token_id))
        if token is None:
            return

        data.set("project", project)
        data.set("token_id", token.id)
        self._set_attributes(data, token, ("name", "active", "revoked", "created_at", "user_id"))
        data.set("scopes", sorted(token.scopes))
        data.set("access_level", access_level_name(token.access_level))
        if getattr(token, "expires_at", None):
            data.set("expires_at", token.expires_at)

    def update(self, ctx: OperationContext, data: ResourceData) -> None:
        self.read(ctx, data)

    def delete(self, ctx: OperationContext, data: ResourceData) -> None:
        project, token_id = self.identifier.decode(data.id)
        tokens = self.client.project(project).access_tokens

        logger.info("revoking_project_access_token", project=project, token_id=token_id)
        try:
            self.client.delete(ctx, tokens, token_id)
        except NotFoundError:
            logger.info("resource_already_deleted", type_name=self.type_name, id=data.id)
            return

        self._wait_for_deletion(ctx, data, lambda: self.client.get(ctx, tokens, token_id))
        logger.info("resource_deleted", type_name=self.type_name, id=data.id)
