"""Provider entry point: configuration, shared client and type lookup."""

from glprovider.clients.gitlab_client import GitLabClient
from glprovider.core.config import ProviderConfig
from glprovider.core.context import OperationContext
from glprovider.migrations.upgrader import RawState
from glprovider.registry import ResourceRegistry, default_registry
from glprovider.resources.base import DataSource, Resource
from glprovider.utils.logging import get_logger

logger = get_logger(__name__)


class GitLabProvider:
    """GitLab infrastructure provider.

    Builds one GitLab client from configuration and hands it to every
    resource and data source adapter it creates. The client is created on
    first use, so offline operations such as state upgrades never contact
    GitLab.
    """

    def __init__(
        self,
        config: ProviderConfig | None = None,
        client: GitLabClient | None = None,
        registry: ResourceRegistry | None = None,
    ):
        """Initialize provider.

        Args:
            config: Provider configuration (defaults plus environment)
            client: Pre-built client, mainly for tests
            registry: Type table; every shipped type by default
        """
        self.config = config or ProviderConfig()
        self.registry = registry or default_registry()
        self._client = client

    @property
    def client(self) -> GitLabClient:
        """Shared GitLab client.

        Raises:
            RemoteError: If the early authentication check fails
        """
        if self._client is None:
            logger.info("creating_gitlab_client", url=self.config.gitlab.base_url)
            self._client = GitLabClient.from_config(self.config.gitlab, self.config.operations)
        return self._client

    def resource(self, type_name: str) -> Resource:
        """Adapter for a resource type.

        Raises:
            KeyError: If the type is not registered
        """
        return self.registry.resource(type_name)(self.client, self.config.operations)

    def data_source(self, type_name: str) -> DataSource:
        """Adapter for a data source type.

        Raises:
            KeyError: If the type is not registered
        """
        return self.registry.data_source(type_name)(self.client, self.config.operations)

    def upgrade_resource_state(self, type_name: str, raw_state: RawState, from_version: int) -> RawState:
        """Migrate a persisted instance of a resource type to its current schema version.

        Raises:
            KeyError: If the type is not registered
            MigrationError: If the state cannot be migrated
        """
        return self.registry.resource(type_name).upgrade_state(raw_state, from_version)

    def new_context(self, timeout: float | None = None) -> OperationContext:
        """Context for one operation, with the configured deadline by default."""
        if timeout is None:
            timeout = self.config.operations.timeout_seconds
        return OperationContext(timeout=timeout)
