"""Flattening of settings dataclasses into colon-delimited key/value maps.

A settings type is a dataclass whose fields are either scalars (str, int,
float, bool or an Enum, optionally Optional[...]) or composites (another
settings dataclass). Each type is described once by a SettingsSchema; the
generic flatten/unflatten algorithms only walk that descriptor.

Flattening elides every scalar that equals its declared default, so a
persisted section only ever holds the values that deviate from defaults
and unflattening the result restores the object:

    >>> flatten(EmailSettings(host="example.com", port=0))
    {'Host': 'example.com'}
"""

import dataclasses
import functools
import types
import typing
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Type, TypeVar

from loguru import logger

from ..errors import InvalidArgumentError, SchemaMismatchError

KEY_DELIMITER = ":"

T = TypeVar("T")

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off"}


class FieldKind(str, Enum):
    """How a settings field is stored."""

    SCALAR = "scalar"
    COMPOSITE = "composite"


class ScalarType(str, Enum):
    """Type tag of a scalar field; selects its textual form and parser."""

    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    ENUM = "enum"


_SCALAR_TAGS: dict[type, ScalarType] = {
    str: ScalarType.STRING,
    int: ScalarType.INTEGER,
    float: ScalarType.FLOAT,
    bool: ScalarType.BOOLEAN,
}


def setting(key: str | None = None, **field_kwargs) -> Any:
    """Declare a dataclass field with an explicit flat key.

    Usage:
        @dataclass
        class EmailSettings:
            host: str | None = setting("Host", default=None)
    """
    metadata = dict(field_kwargs.pop("metadata", None) or {})
    if key is not None:
        metadata["key"] = key
    return dataclasses.field(metadata=metadata, **field_kwargs)


@dataclass(frozen=True)
class FieldSpec:
    """Descriptor of one settings field."""

    attr: str
    key: str
    kind: FieldKind
    scalar: ScalarType | None = None
    value_type: type | None = None
    default: Any = None

    def is_default(self, value: Any) -> bool:
        """True when value equals the field's declared default or is None.

        An empty string counts as default for string fields declared
        without a text default.
        """
        if value is None:
            return True
        if self.scalar is ScalarType.STRING and value == "" and not self.default:
            return True
        return value == self.default

    def to_text(self, value: Any) -> str:
        if self.scalar is ScalarType.BOOLEAN:
            return "True" if value else "False"
        if self.scalar is ScalarType.ENUM:
            return str(value.value)
        return str(value)

    def parse(self, text: str | None, key: str) -> Any:
        """Convert persisted text back into the field's type."""
        if text is None:
            return None
        try:
            if self.scalar is ScalarType.STRING:
                return text
            if self.scalar is ScalarType.INTEGER:
                return int(text.strip())
            if self.scalar is ScalarType.FLOAT:
                return float(text.strip())
            if self.scalar is ScalarType.BOOLEAN:
                lowered = text.strip().lower()
                if lowered in _TRUE_STRINGS:
                    return True
                if lowered in _FALSE_STRINGS:
                    return False
                raise ValueError(f"not a boolean: {text!r}")
            return self._parse_enum(text)
        except ValueError as e:
            raise SchemaMismatchError(
                f"Cannot convert value {text!r} of key {key!r} to {self.scalar.value}"
            ) from e

    def _parse_enum(self, text: str) -> Enum:
        stripped = text.strip()
        for member in self.value_type:
            if str(member.value) == stripped:
                return member
        for member in self.value_type:
            if member.name.lower() == stripped.lower():
                return member
        raise ValueError(f"not a member of {self.value_type.__name__}: {text!r}")


@dataclass(frozen=True)
class SettingsSchema:
    """Ordered field descriptors of one settings type."""

    settings_type: type
    fields: tuple[FieldSpec, ...]


def _unwrap_optional(annotation: Any) -> Any:
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def _declared_default(f: dataclasses.Field) -> Any:
    if f.default is not dataclasses.MISSING:
        return f.default
    return f.default_factory()


@functools.lru_cache(maxsize=None)
def settings_schema(settings_type: type) -> SettingsSchema:
    """Build (once per type) the schema descriptor of a settings dataclass.

    Raises:
        TypeError: if the type is not a dataclass, a field has no default,
            or a field is neither scalar nor a settings dataclass
    """
    if not (isinstance(settings_type, type) and dataclasses.is_dataclass(settings_type)):
        raise TypeError(f"{settings_type!r} is not a settings dataclass")

    hints = typing.get_type_hints(settings_type)
    specs = []
    for f in dataclasses.fields(settings_type):
        if not f.init:
            continue
        if f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
            raise TypeError(f"{settings_type.__name__}.{f.name} must declare a default")

        key = f.metadata.get("key", f.name)
        if KEY_DELIMITER in key:
            raise TypeError(f"{settings_type.__name__}.{f.name}: key {key!r} must not contain {KEY_DELIMITER!r}")

        annotation = _unwrap_optional(hints[f.name])
        # Parametrized generics such as list[str] are neither scalar nor composite
        is_class = isinstance(annotation, type) and typing.get_origin(annotation) is None
        if is_class and annotation in _SCALAR_TAGS:
            specs.append(FieldSpec(f.name, key, FieldKind.SCALAR, _SCALAR_TAGS[annotation], annotation, _declared_default(f)))
        elif is_class and issubclass(annotation, Enum):
            specs.append(FieldSpec(f.name, key, FieldKind.SCALAR, ScalarType.ENUM, annotation, _declared_default(f)))
        elif is_class and dataclasses.is_dataclass(annotation):
            specs.append(FieldSpec(f.name, key, FieldKind.COMPOSITE, None, annotation))
        else:
            raise TypeError(
                f"{settings_type.__name__}.{f.name}: unsupported settings field type {annotation!r}"
            )

    return SettingsSchema(settings_type, tuple(specs))


def section_name_for(settings_type: type) -> str:
    """Default section of a settings type: its __section__ or its class name."""
    return getattr(settings_type, "__section__", None) or settings_type.__name__


def flatten(settings: Any) -> dict[str, str]:
    """Flatten a settings object, eliding default-valued fields.

    Raises:
        InvalidArgumentError: if settings is None or not a dataclass instance
    """
    if settings is None:
        raise InvalidArgumentError("settings must not be None")
    if isinstance(settings, type) or not dataclasses.is_dataclass(settings):
        raise InvalidArgumentError(f"{type(settings).__name__} is not a settings dataclass instance")

    flat: dict[str, str] = {}
    for spec in settings_schema(type(settings)).fields:
        value = getattr(settings, spec.attr)
        if spec.kind is FieldKind.SCALAR:
            if not spec.is_default(value):
                flat[spec.key] = spec.to_text(value)
        elif value is not None:
            for child_key, child_value in flatten(value).items():
                flat[f"{spec.key}{KEY_DELIMITER}{child_key}"] = child_value
    return flat


def unflatten(data: Mapping[str, str], settings_type: Type[T], strict: bool = False) -> T:
    """Rebuild a settings object from a flat map.

    Absent keys leave fields at their declared defaults. Unknown keys are
    ignored, since persisted data may outlive a schema change, unless strict
    is set.

    Raises:
        SchemaMismatchError: if a value cannot be parsed, or on unknown keys in strict mode
    """
    schema = settings_schema(settings_type)
    values: dict[str, Any] = {}
    consumed: set[str] = set()

    for spec in schema.fields:
        if spec.kind is FieldKind.SCALAR:
            if spec.key in data:
                values[spec.attr] = spec.parse(data[spec.key], spec.key)
                consumed.add(spec.key)
            continue

        prefix = spec.key + KEY_DELIMITER
        children = {k[len(prefix):]: v for k, v in data.items() if k.startswith(prefix)}
        if children:
            values[spec.attr] = unflatten(children, spec.value_type, strict=strict)
            consumed.update(prefix + k for k in children)

    unknown = sorted(set(data) - consumed)
    if unknown:
        if strict:
            raise SchemaMismatchError(
                f"Keys {unknown} do not map onto fields of {settings_type.__name__}"
            )
        logger.debug("Ignoring unknown keys for {}: {}", settings_type.__name__, unknown)

    return settings_type(**values)
