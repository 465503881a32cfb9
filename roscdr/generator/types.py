"""Type definitions for interface parsing and code generation."""

from dataclasses import dataclass, field
from typing import Any

from dataclasses_json import DataClassJsonMixin

PRIMITIVE_TYPES = frozenset(
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

# ROS 1 builtins still accepted in ROS 2 interface files
BUILTIN_ALIASES = {
    "time": "builtin_interfaces/msg/Time",
    "duration": "builtin_interfaces/msg/Duration",
}


@dataclass
class InterfaceFile(DataClassJsonMixin):
    """A ``.msg`` or ``.srv`` file as found on disk."""

    kind: str
    name: str
    content: str


@dataclass
class FieldType(DataClassJsonMixin):
    """Type of a field as written in the interface file.

    For arrays:
    - array_size=None: not an array
    - array_size=0: sequence (optionally bounded by upper_bound)
    - array_size=N: fixed array of N elements
    """

    name: str
    string_bound: int | None = None
    array_size: int | None = None
    upper_bound: int | None = None

    @property
    def is_array(self) -> bool:
        return self.array_size is not None

    @property
    def is_primitive(self) -> bool:
        return self.name in PRIMITIVE_TYPES


@dataclass
class InterfaceField(DataClassJsonMixin):
    type: FieldType
    name: str
    default: Any | None = None


@dataclass
class InterfaceConstant(DataClassJsonMixin):
    type: FieldType
    name: str
    value: Any


@dataclass
class MessageDefinition(DataClassJsonMixin):
    """Represents a message, or one half of a service."""

    name: str
    fields: list[InterfaceField] = field(default_factory=list)
    constants: list[InterfaceConstant] = field(default_factory=list)


@dataclass
class ServiceDefinition(DataClassJsonMixin):
    name: str
    request: MessageDefinition
    response: MessageDefinition


Definition = MessageDefinition | ServiceDefinition


@dataclass
class InterfacePackage(DataClassJsonMixin):
    """All definitions collected for one ROS package."""

    name: str
    definitions: list[Definition] = field(default_factory=list)

    def type_name(self, definition: Definition) -> str:
        kind = "srv" if isinstance(definition, ServiceDefinition) else "msg"
        return f"{self.name}/{kind}/{definition.name}"


def normalize_type(package: str, name: str) -> str:
    """Full ``pkg/msg/Name`` form of a non-primitive field type."""
    if name in BUILTIN_ALIASES:
        return BUILTIN_ALIASES[name]
    parts = name.split("/")
    if len(parts) == 1:
        return f"{package}/msg/{name}"
    if len(parts) == 2:
        return f"{parts[0]}/msg/{parts[1]}"
    return name
