"""Typed access to a resource instance's attributes."""

from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from glprovider.core.exceptions import ConfigurationError


class ResourceSchema(BaseModel):
    """Base class for resource attribute schemas.

    Required attributes have no default, optional ones carry their default and
    computed ones default to None until the remote side fills them in.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)


class ResourceData:
    """Planned attributes, prior attributes and identity of one instance.

    The planned attributes come from configuration (or from prior state on
    read/delete), the prior attributes from the last persisted state. Adapters
    read with :meth:`get`, compare with :meth:`has_change` and write remote
    truth back with :meth:`set`.
    """

    def __init__(
        self,
        schema: type[ResourceSchema],
        attributes: dict[str, Any] | None = None,
        prior: dict[str, Any] | None = None,
        id: str = "",
    ):
        """Initialize resource data.

        Args:
            schema: Attribute schema of the resource type
            attributes: Planned attribute values
            prior: Previously persisted attribute values, if any
            id: Persisted identity, empty for a new instance

        Raises:
            ConfigurationError: If the attributes do not match the schema
        """
        self.schema = schema
        self._values = self._validate(attributes or {})
        self._prior = self._validate(prior) if prior is not None else None
        self._id = id

    @classmethod
    def for_import(
        cls,
        schema: type[ResourceSchema],
        id: str,
        attributes: dict[str, Any] | None = None,
    ) -> "ResourceData":
        """Build data for an import, where only the identity is known.

        Attributes without a default start as None and are filled in by the
        first read; :meth:`state` validates the result.
        """
        data = cls.__new__(cls)
        data.schema = schema
        data._values = {
            name: None if field.is_required() else field.get_default(call_default_factory=True)
            for name, field in schema.model_fields.items()
        }
        data._values.update(attributes or {})
        data._prior = None
        data._id = id
        return data

    def _validate(self, attributes: dict[str, Any]) -> dict[str, Any]:
        try:
            return self.schema.model_validate(attributes).model_dump()
        except ValidationError as e:
            raise ConfigurationError(f"Invalid attributes for {self.schema.__name__}: {e}") from e

    @property
    def id(self) -> str:
        """Persisted identity string; empty when the instance is gone."""
        return self._id

    def set_id(self, id: str) -> None:
        self._id = id

    def clear_id(self) -> None:
        """Mark the instance as gone so it is recreated on the next apply."""
        self._id = ""

    @property
    def exists(self) -> bool:
        return bool(self._id)

    def get(self, name: str) -> Any:
        """Get a planned attribute value.

        Raises:
            KeyError: If the schema does not declare the attribute
        """
        if name not in self._values:
            raise KeyError(f"{self.schema.__name__} has no attribute {name!r}")
        return self._values[name]

    def get_ok(self, name: str) -> tuple[Any, bool]:
        """Get a value and whether it is set to something non-empty."""
        value = self.get(name)
        return value, value not in (None, "", 0, False, [], {})

    def has_change(self, name: str) -> bool:
        """Whether the planned value differs from the persisted one."""
        if self._prior is None:
            return True
        return self.get(name) != self._prior.get(name)

    def set(self, name: str, value: Any) -> None:
        """Record an attribute value read back from GitLab."""
        if name not in self._values:
            raise KeyError(f"{self.schema.__name__} has no attribute {name!r}")
        self._values[name] = value

    def state(self) -> dict[str, Any]:
        """Attribute values as they should be persisted."""
        return self._validate(self._values)
