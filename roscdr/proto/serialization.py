"""Serialization and deserialization of values against schema trees."""

from collections.abc import Callable, Mapping, Sequence
from typing import Any

from .codec import CdrReader, CdrWriter, DecodeError, EncodeError
from .types import Array, Message, Primitive, Schema, SchemaError, ServiceSchema

__all__ = [
    "array",
    "bool_",
    "byte",
    "char",
    "deserialize",
    "float32",
    "float64",
    "int8",
    "int16",
    "int32",
    "int64",
    "message",
    "serialize",
    "service",
    "string",
    "uint8",
    "uint16",
    "uint32",
    "uint64",
    "wstring",
]

_STRING_TAGS = frozenset(["string", "wstring"])


def _primitive_factory(tag: str) -> Callable[[], Primitive]:
    def factory() -> Primitive:
        return Primitive(tag)

    factory.__name__ = factory.__qualname__ = tag
    factory.__doc__ = f"Schema for a single {tag} value."
    return factory


bool_ = _primitive_factory("bool")
byte = _primitive_factory("byte")
char = _primitive_factory("char")
float32 = _primitive_factory("float32")
float64 = _primitive_factory("float64")
int8 = _primitive_factory("int8")
uint8 = _primitive_factory("uint8")
int16 = _primitive_factory("int16")
uint16 = _primitive_factory("uint16")
int32 = _primitive_factory("int32")
uint32 = _primitive_factory("uint32")
int64 = _primitive_factory("int64")
uint64 = _primitive_factory("uint64")
string = _primitive_factory("string")
wstring = _primitive_factory("wstring")


def array(element: Schema, length: int | None = None) -> Array:
    """Sequence of ``element``, or a fixed array when ``length`` is given."""
    return Array(element, length)


def message(type: str, fields: Mapping[str, Schema]) -> Message:
    """Message schema; field order is wire order."""
    return Message.of(type, fields)


def service(
    type: str, *, request: Mapping[str, Schema], response: Mapping[str, Schema]
) -> ServiceSchema:
    """Service schema with ``<type>_Request`` and ``<type>_Response`` messages."""
    return ServiceSchema(
        type=type,
        request=Message.of(f"{type}_Request", request),
        response=Message.of(f"{type}_Response", response),
    )


def serialize(schema: Schema, value: Any) -> bytes:
    """Encode ``value`` as a CDR payload, encapsulation header included.

    Raises:
        EncodeError: If the value does not conform to the schema. Nothing is
            returned in that case.
    """
    writer = CdrWriter()
    write(writer, schema, value)
    return writer.data


def deserialize(schema: Schema, data: bytes | bytearray | memoryview) -> Any:
    """Decode a CDR payload. Bytes left after the top-level value are ignored.

    Raises:
        DecodeError: If the payload is truncated or malformed.
    """
    reader = CdrReader(data)
    return read(reader, schema)


def write(writer: CdrWriter, schema: Schema, value: Any) -> None:
    """Write ``value`` without an encapsulation header."""
    if isinstance(schema, Primitive):
        _write_primitive(writer, schema, value)
    elif isinstance(schema, Array):
        _write_array(writer, schema, value)
    elif isinstance(schema, Message):
        _write_message(writer, schema, value)
    else:
        raise SchemaError(f"Not a schema node: {schema!r}")


def read(reader: CdrReader, schema: Schema) -> Any:
    """Read one value without consuming an encapsulation header."""
    if isinstance(schema, Primitive):
        return _read_primitive(reader, schema)
    if isinstance(schema, Array):
        return _read_array(reader, schema)
    if isinstance(schema, Message):
        return _read_message(reader, schema)
    raise SchemaError(f"Not a schema node: {schema!r}")


def _write_primitive(writer: CdrWriter, schema: Primitive, value: Any) -> None:
    if schema.tag in _STRING_TAGS:
        writer.string(value)
    elif schema.tag == "bool":
        writer.write("bool", 1 if value else 0)
    else:
        writer.write(schema.tag, value)


def _read_primitive(reader: CdrReader, schema: Primitive) -> Any:
    if schema.tag in _STRING_TAGS:
        return reader.string()
    return reader.read(schema.tag)


def _write_array(writer: CdrWriter, schema: Array, value: Any) -> None:
    if isinstance(value, str) or not isinstance(value, Sequence):
        raise EncodeError(f"expected a sequence, got {type(value).__name__}")

    if schema.length is None:
        writer.sequence_length(len(value))
    elif len(value) != schema.length:
        raise EncodeError(f"expected fixed array length {schema.length}, got {len(value)}")

    for item in value:
        write(writer, schema.element, item)


def _read_array(reader: CdrReader, schema: Array) -> list[Any]:
    length = schema.length if schema.length is not None else reader.sequence_length()
    # Every element occupies at least one byte
    if length > reader.remaining:
        raise DecodeError(f"array of {length} elements exceeds the {reader.remaining} bytes left")
    return [read(reader, schema.element) for _ in range(length)]


def _write_message(writer: CdrWriter, schema: Message, value: Any) -> None:
    if not isinstance(value, Mapping):
        raise EncodeError(f"{schema.type}: expected a mapping, got {type(value).__name__}")

    # The transport rejects zero-length payloads, so empty messages carry one byte
    if not schema.fields:
        writer.write("uint8", 0)
        return

    for name, field_schema in schema.fields:
        if name not in value:
            raise EncodeError(f"{schema.type}: missing field {name!r}")
        write(writer, field_schema, value[name])


def _read_message(reader: CdrReader, schema: Message) -> dict[str, Any]:
    if not schema.fields:
        reader.read("uint8")
        return {}
    return {name: read(reader, field_schema) for name, field_schema in schema.fields}
