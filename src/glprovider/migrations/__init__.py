"""State migrations between resource schema versions."""

from glprovider.migrations.helpers import (
    encode_legacy_id,
    legacy_id_string,
    legacy_int,
    legacy_str,
    rename_attribute,
    scoped_id_upgrade,
    select_discriminator,
)
from glprovider.migrations.upgrader import StateMigrator, StateUpgrader

__all__ = [
    "StateMigrator",
    "StateUpgrader",
    "encode_legacy_id",
    "legacy_id_string",
    "legacy_int",
    "legacy_str",
    "rename_attribute",
    "scoped_id_upgrade",
    "select_discriminator",
]
