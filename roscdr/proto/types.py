"""Schema nodes describing ROS2 message types at runtime.

A schema is a closed union of three frozen node types. Nodes never touch
bytes themselves; the dispatch functions in ``serialization`` walk them.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass

from .codec import SerializationError

PRIMITIVE_TAGS = frozenset(
    [
        "bool",
        "byte",
        "char",
        "int8",
        "uint8",
        "int16",
        "uint16",
        "int32",
        "uint32",
        "int64",
        "uint64",
        "float32",
        "float64",
        "string",
        "wstring",
    ]
)


class SchemaError(SerializationError):
    """Raised when a schema node is constructed with invalid parameters."""


@dataclass(frozen=True, slots=True)
class Primitive:
    """A single primitive value."""

    tag: str

    def __post_init__(self) -> None:
        if self.tag not in PRIMITIVE_TAGS:
            raise SchemaError(f"Unknown primitive type: {self.tag}")


@dataclass(frozen=True, slots=True)
class Array:
    """A sequence (length=None) or a fixed-size array of one element schema."""

    element: "Schema"
    length: int | None = None

    def __post_init__(self) -> None:
        if self.length is None:
            return
        if isinstance(self.length, bool) or not isinstance(self.length, int) or self.length <= 0:
            raise SchemaError(f"length must be a positive integer, got {self.length!r}")

    @property
    def is_fixed(self) -> bool:
        return self.length is not None


@dataclass(frozen=True, slots=True)
class Message:
    """A named message with fields in wire order."""

    type: str
    fields: tuple[tuple[str, "Schema"], ...] = ()

    @classmethod
    def of(cls, type: str, fields: Mapping[str, "Schema"]) -> "Message":
        return cls(type=type, fields=tuple(fields.items()))

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(name for name, _ in self.fields)

    def __getitem__(self, name: str) -> "Schema":
        for field_name, schema in self.fields:
            if field_name == name:
                return schema
        raise KeyError(name)

    def __iter__(self) -> Iterator[tuple[str, "Schema"]]:
        return iter(self.fields)


Schema = Primitive | Array | Message


@dataclass(frozen=True, slots=True)
class ServiceSchema:
    """Request and response messages of a service. Not a wire node."""

    type: str
    request: Message
    response: Message
