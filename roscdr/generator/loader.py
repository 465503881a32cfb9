"""Resolve parsed interface definitions into runtime schemas."""

from roscdr.proto.types import Array, Message, Primitive, Schema, ServiceSchema

from .parser import ValidationError
from .types import (
    Definition,
    FieldType,
    InterfaceField,
    InterfacePackage,
    MessageDefinition,
    ServiceDefinition,
    normalize_type,
)

OrderedDefinition = tuple[InterfacePackage, Definition]


def _halves(definition: Definition) -> list[MessageDefinition]:
    if isinstance(definition, ServiceDefinition):
        return [definition.request, definition.response]
    return [definition]


def dependencies(package: InterfacePackage, definition: Definition) -> list[str]:
    """Full names of the message types a definition refers to."""
    deps: list[str] = []
    for half in _halves(definition):
        for member in half.fields:
            if not member.type.is_primitive:
                name = normalize_type(package.name, member.type.name)
                if name not in deps:
                    deps.append(name)
    return deps


def order_definitions(packages: list[InterfacePackage]) -> list[OrderedDefinition]:
    """All definitions, each after every message type it uses."""
    index: dict[str, OrderedDefinition] = {}
    for package in packages:
        for definition in package.definitions:
            type_name = package.type_name(definition)
            if type_name in index:
                raise ValidationError(f"{type_name} is defined more than once")
            index[type_name] = (package, definition)

    ordered: list[OrderedDefinition] = []
    done: set[str] = set()
    visiting: list[str] = []

    def visit(type_name: str) -> None:
        if type_name in done:
            return
        if type_name in visiting:
            cycle = " -> ".join([*visiting[visiting.index(type_name) :], type_name])
            raise ValidationError(f"Recursive message definition: {cycle}")

        package, definition = index[type_name]
        visiting.append(type_name)
        for dep in dependencies(package, definition):
            if dep not in index:
                raise ValidationError(f"{type_name} references unknown type {dep}")
            visit(dep)
        visiting.pop()
        done.add(type_name)
        ordered.append((package, definition))

    for type_name in index:
        visit(type_name)
    return ordered


def field_schema(package: str, field_type: FieldType, schemas: dict[str, Schema]) -> Schema:
    element: Schema
    if field_type.is_primitive:
        element = Primitive(field_type.name)
    else:
        element = schemas[normalize_type(package, field_type.name)]

    if field_type.array_size is None:
        return element
    if field_type.array_size == 0:
        return Array(element)
    return Array(element, field_type.array_size)


def _message(
    type_name: str, package: str, members: list[InterfaceField], schemas: dict[str, Schema]
) -> Message:
    return Message.of(
        type_name, {member.name: field_schema(package, member.type, schemas) for member in members}
    )


def load_schemas(packages: list[InterfacePackage]) -> dict[str, Message | ServiceSchema]:
    """Build runtime schemas for every definition, keyed by full type name."""
    schemas: dict[str, Schema] = {}
    result: dict[str, Message | ServiceSchema] = {}

    for package, definition in order_definitions(packages):
        type_name = package.type_name(definition)
        if isinstance(definition, ServiceDefinition):
            result[type_name] = ServiceSchema(
                type=type_name,
                request=_message(
                    f"{type_name}_Request", package.name, definition.request.fields, schemas
                ),
                response=_message(
                    f"{type_name}_Response", package.name, definition.response.fields, schemas
                ),
            )
        else:
            message = _message(type_name, package.name, definition.fields, schemas)
            schemas[type_name] = message
            result[type_name] = message

    return result
