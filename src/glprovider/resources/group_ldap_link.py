"""gitlab_group_ldap_link: LDAP group syncs of a GitLab group."""

from typing import Any

from pydantic import field_validator, model_validator

from glprovider.core.access_levels import (
    VALID_GROUP_ACCESS_LEVEL_NAMES,
    access_level_name,
    access_level_value,
)
from glprovider.core.context import OperationContext
from glprovider.core.exceptions import NotFoundError
from glprovider.core.identifiers import IdentifierShape
from glprovider.core.state import ResourceData, ResourceSchema
from glprovider.migrations import StateUpgrader, encode_legacy_id, legacy_id_string, legacy_str
from glprovider.migrations.upgrader import RawState
from glprovider.resources.base import Resource
from glprovider.utils.logging import get_logger

logger = get_logger(__name__)


class GroupLdapLinkSchema(ResourceSchema):
    group: str
    ldap_provider: str
    group_access: str
    cn: str = ""
    filter: str = ""
    force: bool = False

    @field_validator("group_access")
    @classmethod
    def validate_group_access(cls, value: str) -> str:
        access_level_value(value, VALID_GROUP_ACCESS_LEVEL_NAMES)
        return value

    @model_validator(mode="after")
    def cn_or_filter(self) -> "GroupLdapLinkSchema":
        if self.cn and self.filter:
            raise ValueError("cn and filter are mutually exclusive")
        return self


def upgrade_v0(raw: RawState) -> RawState:
    """``<cn>`` -> ``<group>:<provider>:<cn>:<filter>``.

    The owning group was persisted as ``group_id`` by older releases.
    """
    group_id = raw.pop("group_id", None)
    group = legacy_id_string(group_id) if group_id not in (None, "") else legacy_str(raw, "group")
    raw["group"] = group

    raw["id"] = encode_legacy_id(
        GroupLdapLinkResource.identifier,
        group,
        legacy_str(raw, "ldap_provider"),
        raw.get("cn") or "",
        raw.get("filter") or "",
    )
    return raw


class GroupLdapLinkResource(Resource):
    """Manages one LDAP link of a group.

    A link is identified by provider plus either a CN or a filter; the unused
    one is encoded as an empty component. GitLab has no endpoint for a single
    link, so read and delete search the group's links.
    """

    type_name = "gitlab_group_ldap_link"
    schema = GroupLdapLinkSchema
    identifier = IdentifierShape(
        "group", "ldap_provider", "cn", "filter", allow_empty=("cn", "filter")
    )
    schema_version = 1
    state_upgraders = (StateUpgrader(0, upgrade_v0, "id -> <group>:<provider>:<cn>:<filter>"),)

    def _find(
        self, ctx: OperationContext, group: str, provider: str, cn: str, ldap_filter: str
    ) -> Any:
        links = self.client.list_all(
            ctx,
            self.client.group(group).ldap_group_links,
            per_page=self.operations.page_size,
        )
        for link in links:
            if (
                link.provider == provider
                and (getattr(link, "cn", None) or "") == cn
                and (getattr(link, "filter", None) or "") == ldap_filter
            ):
                return link
        raise NotFoundError(f"LDAP link {provider}:{cn}:{ldap_filter} not found in group {group}", 404)

    def _remove(
        self, ctx: OperationContext, group: str, provider: str, cn: str, ldap_filter: str
    ) -> None:
        link = self._find(ctx, group, provider, cn, ldap_filter)
        self.client.call(ctx, f"delete LDAP link of group {group}", link.delete)

    def create(self, ctx: OperationContext, data: ResourceData) -> None:
        group = data.get("group")
        provider = data.get("ldap_provider")
        cn = data.get("cn")
        ldap_filter = data.get("filter")

        if data.get("force"):
            try:
                self._remove(ctx, group, provider, cn, ldap_filter)
                logger.info("replaced_existing_ldap_link", group=group, provider=provider)
            except NotFoundError:
                pass

        payload: dict[str, Any] = {
            "provider": provider,
            "group_access": access_level_value(data.get("group_access"), VALID_GROUP_ACCESS_LEVEL_NAMES),
        }
        if cn:
            payload["cn"] = cn
        if ldap_filter:
            payload["filter"] = ldap_filter

        logger.info(
            "creating_ldap_link", group=group, provider=provider, cn=cn, ldap_filter=ldap_filter
        )
        link = self.client.create(ctx, self.client.group(group).ldap_group_links, payload)

        data.set_id(
            self.identifier.encode(
                group,
                getattr(link, "provider", provider),
                getattr(link, "cn", None) or "",
                getattr(link, "filter", None) or "",
            )
        )
        self.read(ctx, data)

    def read(self, ctx: OperationContext, data: ResourceData) -> None:
        group, provider, cn, ldap_filter = self.identifier.decode(data.id)
        link = self._get_or_clear(data, lambda: self._find(ctx, group, provider, cn, ldap_filter))
        if link is None:
            return

        data.set("group", group)
        data.set("ldap_provider", link.provider)
        data.set("cn", cn)
        data.set("filter", ldap_filter)
        data.set("group_access", access_level_name(link.group_access))

    def update(self, ctx: OperationContext, data: ResourceData) -> None:
        self.read(ctx, data)

    def delete(self, ctx: OperationContext, data: ResourceData) -> None:
        group, provider, cn, ldap_filter = self.identifier.decode(data.id)
        self._delete_remote(data, lambda: self._remove(ctx, group, provider, cn, ldap_filter))
