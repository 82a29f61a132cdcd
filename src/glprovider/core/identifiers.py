"""Composite identifiers for managed resources.

A managed resource's identity is a single string built from an ordered tuple of
components joined by ``:``. No escaping is applied; decoding relies on each
shape declaring which component is allowed to absorb extra delimiters:

- ``split="left"``: every component but the last is delimiter-free, the last
  one takes everything after the first ``n - 1`` delimiters
  (``"foo/bar:priority::high"`` -> ``("foo/bar", "priority::high")``).
- ``split="right"``: every component but the first is delimiter-free.

Shapes with a discriminator (``project:<path>:<id>`` vs ``group:<path>:<id>``)
check the leading component against a fixed enumeration.
"""

from collections.abc import Iterable
from typing import Any, Literal

from glprovider.core.exceptions import MalformedIdentifierError

DELIMITER = ":"


class IdentifierShape:
    """Encoder/decoder for one resource type's identity format."""

    def __init__(
        self,
        *names: str,
        numeric: Iterable[str] = (),
        discriminators: Iterable[str] | None = None,
        split: Literal["left", "right"] = "left",
        allow_empty: Iterable[str] = (),
    ):
        """Declare an identity shape.

        Args:
            *names: Component names, in encoding order
            numeric: Components that must parse as integers
            discriminators: Allowed values of the first component, if any
            split: Which end absorbs extra delimiters on decode
            allow_empty: Components that may be empty strings
        """
        if not names:
            raise ValueError("an identifier shape needs at least one component")
        if split not in ("left", "right"):
            raise ValueError(f"unknown split direction {split!r}")

        self.names = tuple(names)
        self.numeric = frozenset(numeric)
        self.discriminators = tuple(discriminators) if discriminators is not None else None
        self.split = split
        self.allow_empty = frozenset(allow_empty)

        unknown = (self.numeric | self.allow_empty) - set(self.names)
        if unknown:
            raise ValueError(f"unknown identifier components: {sorted(unknown)}")

    def __len__(self) -> int:
        return len(self.names)

    def __repr__(self) -> str:
        return f"IdentifierShape({self.format!r}, split={self.split!r})"

    @property
    def format(self) -> str:
        """Expected format, e.g. ``<project>:<hook_id>``."""
        parts = [f"<{name}>" for name in self.names]
        if self.discriminators:
            parts[0] = "|".join(self.discriminators)
        return DELIMITER.join(parts)

    @property
    def _absorbing_index(self) -> int:
        return len(self.names) - 1 if self.split == "left" else 0

    def encode(self, *components: Any) -> str:
        """Join components into an identity string.

        Args:
            *components: One value per declared component

        Returns:
            Identity string

        Raises:
            MalformedIdentifierError: Wrong component count, or a component
                that would not survive decoding
        """
        if len(components) != len(self.names):
            raise MalformedIdentifierError(
                f"Expected {len(self.names)} identifier components ({self.format}), "
                f"got {len(components)}",
                expected=self.format,
            )

        values = [str(component) for component in components]
        self._validate_discriminator(values[0], DELIMITER.join(values))
        for index, (name, value) in enumerate(zip(self.names, values, strict=True)):
            if index != self._absorbing_index and DELIMITER in value:
                raise MalformedIdentifierError(
                    f"Identifier component {name!r} must not contain {DELIMITER!r}: {value!r}",
                    identifier=DELIMITER.join(values),
                    expected=self.format,
                )

        return DELIMITER.join(values)

    def decode(self, identifier: str) -> tuple[Any, ...]:
        """Split an identity string back into its components.

        Args:
            identifier: Identity string as persisted in state

        Returns:
            Tuple of components; numeric components are ints

        Raises:
            MalformedIdentifierError: If the string does not match the shape
        """
        count = len(self.names)
        if self.split == "left":
            parts = identifier.split(DELIMITER, count - 1)
        else:
            parts = identifier.rsplit(DELIMITER, count - 1)

        if len(parts) != count:
            raise MalformedIdentifierError(
                f"Unexpected ID format ({identifier!r}). Expected {self.format}",
                identifier=identifier,
                expected=self.format,
            )

        self._validate_discriminator(parts[0], identifier)

        decoded: list[Any] = []
        for name, value in zip(self.names, parts, strict=True):
            if not value and name not in self.allow_empty:
                raise MalformedIdentifierError(
                    f"Unexpected ID format ({identifier!r}): {name} is empty. "
                    f"Expected {self.format}",
                    identifier=identifier,
                    expected=self.format,
                )
            if name in self.numeric:
                try:
                    decoded.append(int(value))
                except ValueError as e:
                    raise MalformedIdentifierError(
                        f"Unexpected ID format ({identifier!r}): {name} {value!r} "
                        f"is not an integer. Expected {self.format}",
                        identifier=identifier,
                        expected=self.format,
                    ) from e
            else:
                decoded.append(value)

        return tuple(decoded)

    def _validate_discriminator(self, value: str, identifier: str) -> None:
        if self.discriminators is not None and value not in self.discriminators:
            raise MalformedIdentifierError(
                f"Unexpected ID format ({identifier!r}): {value!r} is not one of "
                f"{', '.join(self.discriminators)}",
                identifier=identifier,
                expected=self.format,
            )


TWO_PART = IdentifierShape("a", "b")


def build_two_part_id(a: Any, b: Any) -> str:
    """Format two values into an id ``a:b``."""
    return TWO_PART.encode(a, b)


def parse_two_part_id(identifier: str) -> tuple[str, str]:
    """Return the pieces of an id ``a:b`` as ``(a, b)``."""
    a, b = TWO_PART.decode(identifier)
    return a, b
