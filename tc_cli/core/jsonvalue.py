"""
Self-describing JSON values for payload positions without a fixed shape.

The service mixes typed and untyped fields (override collections that are
sometimes empty lists and sometimes objects, free-form policy bags). Those
positions are parsed into JSONValue: the kind is read from the decoded
token once, so booleans never collapse into numbers.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any

from tc_cli.core.client import ValidationError


class JSONKind(str, Enum):
    """The six JSON value kinds."""

    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"


@dataclass(frozen=True)
class JSONValue:
    """An immutable, tagged JSON value."""

    kind: JSONKind
    value: Any = None

    @classmethod
    def from_python(cls, obj: Any) -> "JSONValue":
        """Build from an already-decoded Python object."""
        if obj is None:
            return cls(JSONKind.NULL)
        # bool is a subclass of int, so it must be tested first
        if isinstance(obj, bool):
            return cls(JSONKind.BOOLEAN, obj)
        if isinstance(obj, (int, float)):
            return cls(JSONKind.NUMBER, obj)
        if isinstance(obj, str):
            return cls(JSONKind.STRING, obj)
        if isinstance(obj, JSONValue):
            return obj
        if isinstance(obj, (list, tuple)):
            return cls(JSONKind.ARRAY, tuple(cls.from_python(item) for item in obj))
        if isinstance(obj, Mapping):
            items = {}
            for key, item in obj.items():
                if not isinstance(key, str):
                    raise ValidationError(f"JSON object keys must be strings, got {type(key).__name__}")
                items[key] = cls.from_python(item)
            return cls(JSONKind.OBJECT, MappingProxyType(items))
        raise ValidationError(f"Not a JSON value: {type(obj).__name__}")

    @classmethod
    def loads(cls, text: str | bytes) -> "JSONValue":
        """Parse JSON text."""
        return cls.from_python(json.loads(text))

    def to_python(self) -> Any:
        """Convert back to plain dict/list/scalars."""
        if self.kind == JSONKind.ARRAY:
            return [item.to_python() for item in self.value]
        if self.kind == JSONKind.OBJECT:
            return {key: item.to_python() for key, item in self.value.items()}
        return self.value

    def dumps(self) -> str:
        """Serialize to compact JSON text."""
        return json.dumps(self.to_python(), separators=(",", ":"))

    @property
    def is_null(self) -> bool:
        return self.kind == JSONKind.NULL

    @property
    def is_empty(self) -> bool:
        """Check if this is null, an empty array or an empty object."""
        if self.kind in (JSONKind.ARRAY, JSONKind.OBJECT):
            return len(self.value) == 0
        return self.kind == JSONKind.NULL

    def __getitem__(self, key: str | int) -> "JSONValue":
        if self.kind == JSONKind.OBJECT and isinstance(key, str):
            return self.value[key]
        if self.kind == JSONKind.ARRAY and isinstance(key, int):
            return self.value[key]
        raise TypeError(f"Cannot index a JSON {self.kind.value} with {type(key).__name__}")

    def get(self, key: str, default: "JSONValue | None" = None) -> "JSONValue | None":
        """Object member lookup; default for missing members or non-objects."""
        if self.kind != JSONKind.OBJECT:
            return default
        return self.value.get(key, default)

    def __len__(self) -> int:
        if self.kind in (JSONKind.ARRAY, JSONKind.OBJECT):
            return len(self.value)
        raise TypeError(f"JSON {self.kind.value} has no length")


def normalize_mapping(data: Mapping[str, Any] | None) -> dict[str, Any]:
    """Validate a mapping of JSON values and return it as plain data."""
    if data is None:
        return {}
    value = JSONValue.from_python(data)
    if value.kind != JSONKind.OBJECT:
        raise ValidationError(f"Expected a JSON object, got {value.kind.value}")
    return value.to_python()
