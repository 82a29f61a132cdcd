"""Resource and data source adapter interfaces."""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from typing import Any, ClassVar

from glprovider.clients.gitlab_client import GitLabClient
from glprovider.core.config import OperationsConfig
from glprovider.core.context import OperationContext
from glprovider.core.exceptions import NotFoundError
from glprovider.core.identifiers import IdentifierShape
from glprovider.core.state import ResourceData, ResourceSchema
from glprovider.migrations.upgrader import RawState, StateMigrator, StateUpgrader
from glprovider.utils.logging import get_logger
from glprovider.utils.retry import wait_until_gone

logger = get_logger(__name__)


class Resource(ABC):
    """Abstract adapter between a resource's attributes and GitLab API calls.

    Each resource type declares its attribute schema, the shape of its
    composite identifier and the state upgraders that lead from every older
    schema version to the current one.

    Design Philosophy:
    - Identity is built once at create time and decoded on every other call
    - Read is the source of truth: create and update end with a read
    - A remote 404 on read means "gone", never a failure
    """

    type_name: ClassVar[str]
    schema: ClassVar[type[ResourceSchema]]
    identifier: ClassVar[IdentifierShape]
    schema_version: ClassVar[int] = 0
    state_upgraders: ClassVar[tuple[StateUpgrader, ...]] = ()

    def __init__(self, client: GitLabClient, operations: OperationsConfig | None = None):
        """Initialize resource adapter.

        Args:
            client: Shared GitLab client
            operations: Operation tuning (deletion wait, page size)
        """
        self.client = client
        self.operations = operations or OperationsConfig()

    @abstractmethod
    def create(self, ctx: OperationContext, data: ResourceData) -> None:
        """Create the remote object and set the instance identity.

        Args:
            ctx: Operation context
            data: Planned attributes; receives identity and computed values

        Raises:
            RemoteError: If GitLab rejects the request
        """

    @abstractmethod
    def read(self, ctx: OperationContext, data: ResourceData) -> None:
        """Refresh attributes from GitLab, clearing identity if it is gone.

        Raises:
            MalformedIdentifierError: If the identity cannot be decoded
            RemoteError: For any failure other than not-found
        """

    @abstractmethod
    def update(self, ctx: OperationContext, data: ResourceData) -> None:
        """Send changed attributes to GitLab and refresh."""

    @abstractmethod
    def delete(self, ctx: OperationContext, data: ResourceData) -> None:
        """Delete the remote object."""

    def new_data(
        self,
        attributes: dict[str, Any] | None = None,
        prior: dict[str, Any] | None = None,
        id: str = "",
    ) -> ResourceData:
        """Build resource data against this type's schema."""
        return ResourceData(self.schema, attributes, prior=prior, id=id)

    def import_state(self, ctx: OperationContext, id: str) -> ResourceData:
        """Adopt an existing remote object by its identity string.

        Raises:
            MalformedIdentifierError: If the id does not match the shape
            NotFoundError: If nothing exists under that id
        """
        components = self.identifier.decode(id)
        fields = self.schema.model_fields
        attributes = {
            name: value
            for name, value in zip(self.identifier.names, components, strict=True)
            if name in fields
        }

        data = ResourceData.for_import(self.schema, id, attributes)
        self.read(ctx, data)
        if not data.exists:
            raise NotFoundError(f"Cannot import non-existent {self.type_name} {id!r}", 404)
        return data

    @classmethod
    def migrator(cls) -> StateMigrator:
        """Migrator over this type's upgrader chain.

        Raises:
            RegistrationError: If the chain does not reach schema_version
        """
        return StateMigrator(cls.type_name, cls.schema_version, cls.state_upgraders)

    @classmethod
    def upgrade_state(cls, raw_state: RawState, from_version: int) -> RawState:
        """Migrate persisted attributes to this provider's schema version."""
        return cls.migrator().upgrade(raw_state, from_version)

    def _get_or_clear(self, data: ResourceData, fetch: Callable[[], Any]) -> Any | None:
        """Run a read call, clearing identity when the object is gone."""
        try:
            return fetch()
        except NotFoundError:
            logger.info(
                "resource_not_found_removing_from_state",
                type_name=self.type_name,
                id=data.id,
            )
            data.clear_id()
            return None

    def _update_or_clear(self, data: ResourceData, update: Callable[[], Any]) -> bool:
        """Run an update call; returns False (and clears identity) if the object is gone."""
        try:
            update()
            return True
        except NotFoundError:
            logger.info(
                "resource_not_found_removing_from_state",
                type_name=self.type_name,
                id=data.id,
            )
            data.clear_id()
            return False

    def _delete_remote(self, data: ResourceData, delete: Callable[[], Any]) -> None:
        """Run a delete call; an object that is already gone counts as deleted."""
        try:
            delete()
        except NotFoundError:
            logger.info("resource_already_deleted", type_name=self.type_name, id=data.id)
            return
        logger.info("resource_deleted", type_name=self.type_name, id=data.id)

    def _changed(self, data: ResourceData, names: Iterable[str]) -> dict[str, Any]:
        """Planned values of the attributes that differ from prior state."""
        return {name: data.get(name) for name in names if data.has_change(name)}

    @staticmethod
    def _set_attributes(data: ResourceData, obj: Any, names: Iterable[str]) -> None:
        """Copy same-named attributes of a GitLab object into resource data."""
        for name in names:
            data.set(name, getattr(obj, name, data.get(name)))

    def _wait_for_deletion(self, ctx: OperationContext, data: ResourceData, fetch: Callable[[], Any]) -> None:
        """Poll until ``fetch`` reports not-found.

        Raises:
            DeletionTimeoutError: If the object outlives the deletion timeout
            RemoteError: If polling fails with anything but not-found
        """

        def gone() -> bool:
            try:
                fetch()
            except NotFoundError:
                return True
            return False

        timeout = self.operations.deletion_timeout_seconds
        remaining = ctx.remaining()
        if remaining is not None:
            timeout = min(timeout, remaining)

        wait_until_gone(
            gone,
            resource_id=f"{self.type_name} {data.id}",
            timeout=timeout,
            interval=self.operations.deletion_poll_interval_seconds,
        )


class DataSource(ABC):
    """Abstract read-only lookup of GitLab objects."""

    type_name: ClassVar[str]
    schema: ClassVar[type[ResourceSchema]]

    def __init__(self, client: GitLabClient, operations: OperationsConfig | None = None):
        self.client = client
        self.operations = operations or OperationsConfig()

    def new_data(self, attributes: dict[str, Any] | None = None) -> ResourceData:
        return ResourceData(self.schema, attributes)

    @abstractmethod
    def read(self, ctx: OperationContext, data: ResourceData) -> None:
        """Look up the objects and set the computed attributes and id."""
