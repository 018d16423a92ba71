"""Declarative plugin configuration schemas and their validator.

A plugin that wants user-tunable settings builds a :class:`ConfigSchema`
by chaining field declarations::

    schema = (
        ConfigSchema()
        .integer("port", default=5432, min=1, max=65535)
        .string("version", default="16", enum=["15", "16", "latest"])
        .string("password", default="seaman", secret=True)
        .boolean("persist", default=True)
    )

:meth:`ConfigSchema.validate` turns the raw ``plugins.<name>`` mapping of
``seaman.yaml`` into a complete settings dict, filling defaults and raising
:class:`~seaman.exceptions.ConfigValidationError` on the first violation.
The result is wrapped in an immutable :class:`PluginConfig` by the registry.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping, Optional, Sequence, Union

from seaman.exceptions import ConfigValidationError


@dataclass(frozen=True)
class FieldMetadata:
    """Presentation details of a schema field."""

    label: str
    description: str = ""
    is_secret: bool = False


def _default_label(name: str) -> str:
    return name.replace("_", " ").title()


@dataclass(frozen=True)
class IntegerField:
    """An integer setting with optional inclusive bounds."""

    default: Optional[int] = None
    nullable: bool = False
    min: Optional[int] = None
    max: Optional[int] = None
    metadata: FieldMetadata = field(default_factory=lambda: FieldMetadata(label=""))

    type_name = "integer"

    def check(self, name: str, value: Any) -> None:
        # bool is a subclass of int but never a valid integer setting.
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigValidationError.invalid_value(name, "must be an integer")
        if self.min is not None and value < self.min:
            raise ConfigValidationError.invalid_value(name, f"must be at least {self.min}")
        if self.max is not None and value > self.max:
            raise ConfigValidationError.invalid_value(name, f"must be at most {self.max}")


@dataclass(frozen=True)
class StringField:
    """A string setting, optionally restricted to an enumeration."""

    default: Optional[str] = None
    nullable: bool = False
    enum: Optional[tuple[str, ...]] = None
    metadata: FieldMetadata = field(default_factory=lambda: FieldMetadata(label=""))

    type_name = "string"

    def check(self, name: str, value: Any) -> None:
        if not isinstance(value, str):
            raise ConfigValidationError.invalid_value(name, "must be a string")
        if self.enum is not None and value not in self.enum:
            raise ConfigValidationError.invalid_value(
                name, f"must be one of: {', '.join(self.enum)}"
            )


@dataclass(frozen=True)
class BooleanField:
    """A boolean setting."""

    default: Optional[bool] = None
    nullable: bool = False
    metadata: FieldMetadata = field(default_factory=lambda: FieldMetadata(label=""))

    type_name = "boolean"

    def check(self, name: str, value: Any) -> None:
        if not isinstance(value, bool):
            raise ConfigValidationError.invalid_value(name, "must be a boolean")


SchemaField = Union[IntegerField, StringField, BooleanField]


class ConfigSchema:
    """Ordered collection of named configuration fields.

    Declaration methods return the schema itself so that declarations can
    be chained. Declaring a name twice replaces the earlier field while
    keeping its position.
    """

    def __init__(self) -> None:
        self._fields: dict[str, SchemaField] = {}

    # ------------------------------------------------------------------
    # Declaration
    # ------------------------------------------------------------------

    def integer(
        self,
        name: str,
        default: Optional[int] = None,
        min: Optional[int] = None,
        max: Optional[int] = None,
        nullable: bool = False,
        label: Optional[str] = None,
        description: str = "",
    ) -> ConfigSchema:
        """Declare an integer field bounded by *min* and *max* (inclusive)."""
        self._fields[name] = IntegerField(
            default=default,
            nullable=nullable,
            min=min,
            max=max,
            metadata=FieldMetadata(label or _default_label(name), description),
        )
        return self

    def string(
        self,
        name: str,
        default: Optional[str] = None,
        nullable: bool = False,
        enum: Optional[Sequence[str]] = None,
        secret: bool = False,
        label: Optional[str] = None,
        description: str = "",
    ) -> ConfigSchema:
        """Declare a string field.

        Args:
            name: Field name as it appears in ``seaman.yaml``.
            default: Value used when the field is absent or null.
            nullable: Whether ``None`` is an acceptable resolved value.
            enum: Allowed values. When given, *default* must be one of them.
            secret: Mask the value when displayed.
            label: Human-readable label; defaults to the title-cased name.
            description: Longer help text.

        Raises:
            ValueError: If *default* is not a member of *enum*.
        """
        allowed = tuple(enum) if enum is not None else None
        if allowed is not None and default is not None and default not in allowed:
            raise ValueError(
                f"Default value '{default}' for field '{name}' is not one of: "
                f"{', '.join(allowed)}"
            )
        self._fields[name] = StringField(
            default=default,
            nullable=nullable,
            enum=allowed,
            metadata=FieldMetadata(label or _default_label(name), description, secret),
        )
        return self

    def boolean(
        self,
        name: str,
        default: Optional[bool] = None,
        nullable: bool = False,
        label: Optional[str] = None,
        description: str = "",
    ) -> ConfigSchema:
        """Declare a boolean field."""
        self._fields[name] = BooleanField(
            default=default,
            nullable=nullable,
            metadata=FieldMetadata(label or _default_label(name), description),
        )
        return self

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def fields(self) -> dict[str, SchemaField]:
        """Return the declared fields in declaration order."""
        return dict(self._fields)

    def defaults(self) -> dict[str, Any]:
        """Return each field's default value."""
        return {name: f.default for name, f in self._fields.items()}

    def secret_fields(self) -> list[str]:
        """Return the names of fields marked secret."""
        return [name for name, f in self._fields.items() if f.metadata.is_secret]

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self, raw: Mapping[str, Any]) -> dict[str, Any]:
        """Validate *raw* settings and fill in defaults.

        Unknown keys are rejected before any field is checked. Fields are
        then resolved in declaration order; a missing or ``None`` value
        falls back to the field default.

        Args:
            raw: The user-supplied settings mapping.

        Returns:
            A new dict holding a value for every declared field.

        Raises:
            ConfigValidationError: On the first unknown key or violated rule.
        """
        for key in raw:
            if key not in self._fields:
                raise ConfigValidationError.unknown_field(str(key))

        result: dict[str, Any] = {}
        for name, spec in self._fields.items():
            value = raw.get(name)
            if value is None:
                value = spec.default
            if value is None:
                if not spec.nullable:
                    raise ConfigValidationError.invalid_value(name, "cannot be null")
                result[name] = None
                continue
            spec.check(name, value)
            result[name] = value
        return result


class PluginConfig(Mapping[str, Any]):
    """Read-only view of a plugin's validated configuration."""

    def __init__(self, values: Optional[Mapping[str, Any]] = None) -> None:
        self._values: dict[str, Any] = dict(values or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def has(self, key: str) -> bool:
        return key in self._values

    def all(self) -> dict[str, Any]:
        """Return a shallow copy of every setting as a plain dict."""
        return dict(self._values)

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"PluginConfig({self._values!r})"
