"""gitlab_tag_protection: protected tag patterns of a project."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from glprovider.core.access_levels import (
    VALID_PROTECTED_BRANCH_TAG_ACCESS_LEVEL_NAMES,
    access_level_name,
    access_level_value,
)
from glprovider.core.context import OperationContext
from glprovider.core.exceptions import NotFoundError, RemoteValidationError
from glprovider.core.identifiers import IdentifierShape
from glprovider.core.state import ResourceData, ResourceSchema
from glprovider.resources.base import Resource
from glprovider.utils.logging import get_logger

logger = get_logger(__name__)


class AllowedToCreate(BaseModel):
    """A user or group allowed to create matching tags (Premium)."""

    model_config = ConfigDict(extra="forbid")

    user_id: int | None = None
    group_id: int | None = None
    access_level: str = ""
    access_level_description: str = ""

    @model_validator(mode="after")
    def user_or_group(self) -> "AllowedToCreate":
        if bool(self.user_id) == bool(self.group_id):
            raise ValueError("exactly one of user_id or group_id must be set")
        return self


class TagProtectionSchema(ResourceSchema):
    project: str
    tag: str
    create_access_level: str
    allowed_to_create: list[AllowedToCreate] = Field(default_factory=list)

    @field_validator("create_access_level")
    @classmethod
    def validate_access_level(cls, value: str) -> str:
        access_level_value(value, VALID_PROTECTED_BRANCH_TAG_ACCESS_LEVEL_NAMES)
        return value


class TagProtectionResource(Resource):
    """Protects tags matching a name or wildcard.

    Protections cannot be edited: every attribute forces replacement and
    update only refreshes state.
    """

    type_name = "gitlab_tag_protection"
    schema = TagProtectionSchema
    identifier = IdentifierShape("project", "tag")

    def create(self, ctx: OperationContext, data: ResourceData) -> None:
        project = data.get("project")
        tag = data.get("tag")
        payload: dict[str, Any] = {
            "name": tag,
            "create_access_level": access_level_value(
                data.get("create_access_level"), VALID_PROTECTED_BRANCH_TAG_ACCESS_LEVEL_NAMES
            ),
        }
        allowed = [
            {k: v for k, v in entry.items() if k in ("user_id", "group_id") and v}
            for entry in data.get("allowed_to_create")
        ]
        if allowed:
            payload["allowed_to_create"] = allowed

        protected_tags = self.client.project(project).protectedtags
        logger.info("protecting_tag", project=project, tag=tag)
        try:
            protection = self.client.create(ctx, protected_tags, payload)
        except RemoteValidationError as rejected:
            # An existing protection for the same name is replaced
            logger.warning("tag_protection_exists_replacing", project=project, tag=tag)
            try:
                self.client.delete(ctx, protected_tags, tag)
            except NotFoundError:
                # Nothing to replace: the payload itself was rejected
                raise rejected from None
            protection = self.client.create(ctx, protected_tags, payload)

        data.set_id(self.identifier.encode(project, protection.name))
        self.read(ctx, data)

    def read(self, ctx: OperationContext, data: ResourceData) -> None:
        project, tag = self.identifier.decode(data.id)
        protected_tags = self.client.project(project).protectedtags
        protection = self._get_or_clear(data, lambda: self.client.get(ctx, protected_tags, tag))
        if protection is None:
            return

        levels = protection.create_access_levels
        role_levels = [level for level in levels if not level.get("user_id") and not level.get("group_id")]
        data.set("project", project)
        data.set("tag", protection.name)
        if role_levels:
            data.set("create_access_level", access_level_name(role_levels[0]["access_level"]))
        data.set(
            "allowed_to_create",
            [
                {
                    "user_id": level.get("user_id"),
                    "group_id": level.get("group_id"),
                    "access_level": access_level_name(level["access_level"]),
                    "access_level_description": level.get("access_level_description") or "",
                }
                for level in levels
                if level.get("user_id") or level.get("group_id")
            ],
        )
        data.set_id(self.identifier.encode(project, protection.name))

    def update(self, ctx: OperationContext, data: ResourceData) -> None:
        self.read(ctx, data)

    def delete(self, ctx: OperationContext, data: ResourceData) -> None:
        project, tag = self.identifier.decode(data.id)
        protected_tags = self.client.project(project).protectedtags
        self._delete_remote(data, lambda: self.client.delete(ctx, protected_tags, tag))
