"""Accessors for raw, untyped legacy state.

Persisted state is decoded without a schema, so numbers may arrive as int,
float or string and absent attributes as missing keys or None.
"""

from collections.abc import Callable, Sequence
from typing import Any

from glprovider.core.exceptions import (
    AmbiguousLegacyStateError,
    MalformedIdentifierError,
    MigrationError,
)
from glprovider.core.identifiers import IdentifierShape

RawState = dict[str, Any]


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def legacy_str(raw: RawState, field: str) -> str:
    """Get a required string attribute.

    Raises:
        MigrationError: If the attribute is absent, empty or not a string
    """
    value = raw.get(field)
    if _is_empty(value):
        raise MigrationError(f"cannot migrate state: required attribute `{field}` is not set")
    if not isinstance(value, str):
        raise MigrationError(
            f"cannot migrate state: attribute `{field}` has unexpected value {value!r}"
        )
    return value


def legacy_int(raw: RawState, field: str) -> int:
    """Get a required integer attribute.

    Accepts ints, floats with an integral value and numeric strings.

    Raises:
        MigrationError: If the attribute is absent or not an integer
    """
    value = raw.get(field)
    if _is_empty(value):
        raise MigrationError(f"cannot migrate state: required attribute `{field}` is not set")

    try:
        return _to_int(value)
    except ValueError as e:
        raise MigrationError(
            f"cannot migrate state: `{field}` value {value!r} cannot be converted "
            f"into an integer"
        ) from e


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"boolean {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"non-integral float {value!r}")
        return int(value)
    if isinstance(value, str):
        return int(value.strip())
    raise ValueError(f"unsupported type {type(value).__name__}")


def legacy_id_string(value: Any) -> str:
    """Normalize an id that may be a path, an int or a float to a string.

    ``42``, ``42.0`` and ``"42"`` all become ``"42"``; paths are kept as-is.

    Raises:
        MigrationError: If the value is empty or a non-integral number
    """
    if _is_empty(value):
        raise MigrationError("cannot migrate state: id value is not set")
    if isinstance(value, str):
        return value
    try:
        return str(_to_int(value))
    except ValueError as e:
        raise MigrationError(f"cannot migrate state: id value {value!r} is not an integer") from e


def select_discriminator(raw: RawState, candidates: Sequence[str]) -> tuple[str, str]:
    """Pick the one populated attribute among mutually exclusive candidates.

    Args:
        raw: Legacy state
        candidates: Attribute names, e.g. ("project", "group")

    Returns:
        (attribute name, normalized value)

    Raises:
        AmbiguousLegacyStateError: If none or more than one is populated
    """
    populated = [name for name in candidates if not _is_empty(raw.get(name))]

    if len(populated) != 1:
        state = "none" if not populated else "all of " + ", ".join(f"`{p}`" for p in populated)
        raise AmbiguousLegacyStateError(
            f"cannot migrate state: exactly one of "
            f"{', '.join(f'`{c}`' for c in candidates)} must be set, found {state}",
            fields=tuple(candidates),
        )

    name = populated[0]
    return name, legacy_id_string(raw[name])


def rename_attribute(raw: RawState, old: str, new: str, as_id: bool = False) -> RawState:
    """Move an attribute to a new name.

    Missing or None values are left alone so upgrades stay safe on state
    written after the rename.

    Args:
        raw: State to modify in place
        old: Legacy attribute name
        new: Current attribute name
        as_id: Normalize numeric values to an integer string

    Returns:
        The same mapping
    """
    if raw.get(old) is None:
        raw.pop(old, None)
        return raw

    value = raw.pop(old)
    raw[new] = legacy_id_string(value) if as_id else value
    return raw


def scoped_id_upgrade(
    owner_field: str,
    shape: IdentifierShape,
    numeric_id: bool = True,
) -> Callable[[RawState], RawState]:
    """Build an upgrader that prefixes a bare legacy id with its owner.

    Covers the common ``<id>`` -> ``<owner>:<id>`` rewrite, e.g. a project
    hook ``"42"`` owned by ``"foo/bar"`` becomes ``"foo/bar:42"``.

    Args:
        owner_field: Attribute holding the owning project or group
        shape: Current identity shape of the resource
        numeric_id: Whether the legacy id must be an integer

    Returns:
        Upgrade function for StateUpgrader
    """

    def upgrade(raw: RawState) -> RawState:
        if _is_empty(raw.get(owner_field)):
            raise MigrationError(
                f"cannot migrate state: required attribute `{owner_field}` is not set"
            )
        owner = legacy_id_string(raw[owner_field])
        legacy_id = legacy_int(raw, "id") if numeric_id else legacy_str(raw, "id")
        raw["id"] = encode_legacy_id(shape, owner, legacy_id)
        return raw

    return upgrade


def encode_legacy_id(shape: IdentifierShape, *components: Any) -> str:
    """Encode an identity during migration.

    Raises:
        MigrationError: If the legacy values do not fit the current shape
    """
    try:
        return shape.encode(*components)
    except MalformedIdentifierError as e:
        raise MigrationError(f"cannot migrate state: {e}") from e
