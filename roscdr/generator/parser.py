"""ROS 2 interface definition parser using Lark."""

import ast
import os
import re
from dataclasses import dataclass
from typing import Any

from lark import Lark, Token
from lark.exceptions import LarkError
from lark.visitors import Transformer

from .types import (
    BUILTIN_ALIASES,
    FieldType,
    InterfaceConstant,
    InterfaceField,
    InterfaceFile,
    MessageDefinition,
    ServiceDefinition,
)

_g_parser: Lark | None = None

_SERVICE_SEPARATOR = re.compile(r"^---[ \t]*\r?$", re.MULTILINE)
_NAME_PART = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")


class ValidationError(RuntimeError):
    """Raised when an interface definition is malformed."""


@dataclass
class _Array:
    size: int
    bound: int | None = None


class TreeTransformer(Transformer):
    """Transform parse tree into interface types."""

    def start(self, args: list[Any]) -> list[InterfaceField | InterfaceConstant]:
        return [arg for arg in args if arg is not None]

    def field(self, args: list[Any]) -> InterfaceField:
        field_type, name, default = args
        return InterfaceField(type=field_type, name=str(name), default=default)

    def constant(self, args: list[Any]) -> InterfaceConstant:
        const_type, name, value = args
        return InterfaceConstant(type=const_type, name=str(name), value=value)

    def type(self, args: list[Any]) -> FieldType:
        field_type, array = args
        if array is not None:
            field_type.array_size = array.size
            field_type.upper_bound = array.bound
        return field_type

    def simple_type(self, args: list[Any]) -> FieldType:
        return FieldType(name=str(args[0]))

    def package_type(self, args: list[Any]) -> FieldType:
        return FieldType(name="/".join(str(arg) for arg in args))

    def bounded_string(self, args: list[Any]) -> FieldType:
        return FieldType(name=str(args[0]), string_bound=_to_number(args[1]))

    def sequence(self, args: list[Any]) -> _Array:
        return _Array(size=0)

    def fixed_array(self, args: list[Any]) -> _Array:
        size = _to_number(args[0])
        if not isinstance(size, int) or size <= 0:
            raise ValidationError(f"fixed array size must be a positive integer, got {args[0]}")
        return _Array(size=size)

    def bounded_sequence(self, args: list[Any]) -> _Array:
        return _Array(size=0, bound=_to_number(args[0]))

    def number(self, args: list[Any]) -> int | float:
        return _to_number(args[0])

    def string(self, args: list[Any]) -> str:
        return ast.literal_eval(str(args[0]))

    def word(self, args: list[Any]) -> bool | str:
        text = str(args[0])
        if text.lower() in ("true", "false"):
            return text.lower() == "true"
        return text

    def empty_list(self, args: list[Any]) -> list[Any]:
        return []

    def list_value(self, args: list[Any]) -> list[Any]:
        return list(args)


def _to_number(token: Token) -> Any:
    text = str(token)
    try:
        return int(text)
    except ValueError:
        return float(text)


def _validate_type(owner: str, member: str, field_type: FieldType) -> None:
    if field_type.string_bound is not None:
        if field_type.name not in ("string", "wstring"):
            raise ValidationError(f"{owner}.{member}: only strings can be bounded")
        if not isinstance(field_type.string_bound, int) or field_type.string_bound <= 0:
            raise ValidationError(f"{owner}.{member}: string bound must be a positive integer")

    if field_type.array_size is not None:
        if not isinstance(field_type.array_size, int) or field_type.array_size < 0:
            raise ValidationError(f"{owner}.{member}: array size must be an integer")
        if field_type.upper_bound is not None and (
            not isinstance(field_type.upper_bound, int) or field_type.upper_bound <= 0
        ):
            raise ValidationError(f"{owner}.{member}: sequence bound must be a positive integer")

    if field_type.is_primitive or field_type.name in BUILTIN_ALIASES:
        return
    parts = field_type.name.split("/")
    if len(parts) > 3 or (len(parts) == 3 and parts[1] != "msg"):
        raise ValidationError(f"{owner}.{member}: invalid type name {field_type.name}")
    if not all(_NAME_PART.match(part) for part in parts):
        raise ValidationError(f"{owner}.{member}: invalid type name {field_type.name}")


def validate(definition: MessageDefinition) -> None:
    """Validate a parsed message definition."""
    seen: set[str] = set()

    for item in [*definition.fields, *definition.constants]:
        if item.name in seen:
            raise ValidationError(f"{definition.name}: duplicate name {item.name}")
        seen.add(item.name)
        _validate_type(definition.name, item.name, item.type)

    for const in definition.constants:
        if not const.type.is_primitive or const.type.is_array:
            raise ValidationError(
                f"{definition.name}.{const.name}: constants must have a primitive, non-array type"
            )


def _get_parser() -> Lark:
    global _g_parser

    if not _g_parser:
        with open(f"{os.path.dirname(__file__)}/rosidl.lark", encoding="utf-8") as f:
            grammar = f.read()

        _g_parser = Lark(grammar, parser="lalr", maybe_placeholders=True)
    return _g_parser


def parse_message(text: str, name: str = "") -> MessageDefinition:
    """Parse the body of a ``.msg`` file."""
    try:
        tree = _get_parser().parse(text + "\n")
        items = TreeTransformer().transform(tree)
    except LarkError as e:
        raise ValidationError(f"{name or 'message'}: {e}") from e

    definition = MessageDefinition(
        name=name,
        fields=[item for item in items if isinstance(item, InterfaceField)],
        constants=[item for item in items if isinstance(item, InterfaceConstant)],
    )
    validate(definition)
    return definition


def parse_service(text: str, name: str = "") -> ServiceDefinition:
    """Parse a ``.srv`` file: request and response separated by a ``---`` line."""
    sections = _SERVICE_SEPARATOR.split(text)
    if len(sections) != 2:
        raise ValidationError(
            f"{name or 'service'}: expected one '---' separator, found {len(sections) - 1}"
        )

    request, response = sections
    return ServiceDefinition(
        name=name,
        request=parse_message(request, f"{name}_Request"),
        response=parse_message(response, f"{name}_Response"),
    )


def parse_interface_file(file: InterfaceFile) -> MessageDefinition | ServiceDefinition:
    if file.kind == "msg":
        return parse_message(file.content, file.name)
    if file.kind == "srv":
        return parse_service(file.content, file.name)
    raise ValidationError(f"{file.name}: unknown interface kind {file.kind}")
