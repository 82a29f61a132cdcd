"""Chained state upgrades for one resource type."""

import copy
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from glprovider.core.exceptions import MigrationError, RegistrationError
from glprovider.utils.logging import get_logger

logger = get_logger(__name__)

RawState = dict[str, Any]


@dataclass(frozen=True)
class StateUpgrader:
    """Migration from schema ``version`` to ``version + 1``.

    ``upgrade`` receives the raw persisted attributes and returns the
    rewritten mapping, or raises MigrationError.
    """

    version: int
    upgrade: Callable[[RawState], RawState]
    description: str = ""


class StateMigrator:
    """Applies the upgraders needed to bring persisted state to the current version."""

    def __init__(self, type_name: str, current_version: int, upgraders: Iterable[StateUpgrader]):
        """Initialize migrator.

        Args:
            type_name: Resource type the upgraders belong to
            current_version: Schema version of the running provider
            upgraders: One upgrader per version below current_version

        Raises:
            RegistrationError: If the upgraders do not form a V0..Vn-1 chain
        """
        self.type_name = type_name
        self.current_version = current_version
        self._upgraders = {u.version: u for u in upgraders}

        expected = set(range(current_version))
        if set(self._upgraders) != expected:
            raise RegistrationError(
                f"{type_name}: state upgraders cover versions {sorted(self._upgraders)}, "
                f"expected {sorted(expected)} for schema version {current_version}"
            )

    def upgrade(self, raw_state: RawState, from_version: int) -> RawState:
        """Migrate a raw state snapshot to the current schema version.

        The input mapping is not modified.

        Args:
            raw_state: Persisted attributes at from_version
            from_version: Schema version the state was written with

        Returns:
            Attributes at the current schema version

        Raises:
            MigrationError: If the version is unknown or a step fails
        """
        if from_version < 0:
            raise MigrationError(f"{self.type_name}: invalid schema version {from_version}")
        if from_version > self.current_version:
            raise MigrationError(
                f"{self.type_name}: state was written by schema version {from_version}, "
                f"newer than this provider's version {self.current_version}"
            )

        state = copy.deepcopy(raw_state)
        for version in range(from_version, self.current_version):
            upgrader = self._upgraders[version]
            logger.debug(
                "state_migration_started",
                type_name=self.type_name,
                from_version=version,
                to_version=version + 1,
                id=state.get("id"),
            )
            state = upgrader.upgrade(state)
            logger.info(
                "state_migration_applied",
                type_name=self.type_name,
                from_version=version,
                to_version=version + 1,
                id=state.get("id"),
            )

        return state
