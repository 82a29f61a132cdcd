"""Registry of resource and data source types."""

from collections.abc import Iterable

from glprovider.core.exceptions import RegistrationError
from glprovider.resources.base import DataSource, Resource
from glprovider.utils.logging import get_logger

logger = get_logger(__name__)

TYPE_NAME_PREFIX = "gitlab_"


class ResourceRegistry:
    """Immutable table of the resource and data source types a provider serves.

    The table is built once and validated on construction, so a broken type
    definition fails at startup instead of on first use.
    """

    def __init__(
        self,
        resources: Iterable[type[Resource]] = (),
        data_sources: Iterable[type[DataSource]] = (),
    ) -> None:
        """Initialize and validate the registry.

        Args:
            resources: Resource adapter classes
            data_sources: Data source classes

        Raises:
            RegistrationError: On a duplicate or malformed type name, or an
                upgrader chain that does not reach the current schema version
        """
        self._resources: dict[str, type[Resource]] = {}
        self._data_sources: dict[str, type[DataSource]] = {}

        for resource in resources:
            self._check_name(resource.type_name, self._resources)
            # Building the migrator validates the upgrader chain
            resource.migrator()
            self._resources[resource.type_name] = resource

        for data_source in data_sources:
            self._check_name(data_source.type_name, self._data_sources)
            self._data_sources[data_source.type_name] = data_source

        logger.debug(
            "resource_registry_initialized",
            resources=len(self._resources),
            data_sources=len(self._data_sources),
        )

    @staticmethod
    def _check_name(type_name: str, table: dict[str, type]) -> None:
        if not type_name.startswith(TYPE_NAME_PREFIX):
            raise RegistrationError(
                f"type name {type_name!r} must start with {TYPE_NAME_PREFIX!r}"
            )
        if type_name in table:
            raise RegistrationError(f"type name {type_name!r} is registered twice")

    def resource(self, type_name: str) -> type[Resource]:
        """Get a resource class by type name.

        Raises:
            KeyError: If the type is not registered
        """
        try:
            return self._resources[type_name]
        except KeyError:
            raise KeyError(f"unknown resource type {type_name!r}") from None

    def data_source(self, type_name: str) -> type[DataSource]:
        """Get a data source class by type name.

        Raises:
            KeyError: If the type is not registered
        """
        try:
            return self._data_sources[type_name]
        except KeyError:
            raise KeyError(f"unknown data source type {type_name!r}") from None

    @property
    def resource_types(self) -> list[str]:
        return sorted(self._resources)

    @property
    def data_source_types(self) -> list[str]:
        return sorted(self._data_sources)

    def __contains__(self, type_name: object) -> bool:
        return type_name in self._resources or type_name in self._data_sources

    def __len__(self) -> int:
        """Get number of registered types."""
        return len(self._resources) + len(self._data_sources)
