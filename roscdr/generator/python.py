"""Python code generator for ROS 2 interface packages."""

from jinja2 import Environment, PackageLoader

from .loader import order_definitions
from .types import Definition, FieldType, InterfacePackage, ServiceDefinition, normalize_type

env = Environment(
    loader=PackageLoader("roscdr.generator", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    line_comment_prefix="%%",
    line_statement_prefix="%",
)

template = env.get_template("python.py.j2")

# Factory names that differ from the primitive tag
FACTORY_NAMES = {
    "bool": "bool_",
}


def _var_name(package: InterfacePackage, definition: Definition) -> str:
    return f"_{package.name}__{definition.name}"


def _ref_name(type_name: str) -> str:
    """Module variable holding the schema of a full ``pkg/msg/Name`` type."""
    package, _, name = type_name.split("/")
    return f"_{package}__{name}"


def _schema_expr(package: InterfacePackage, field_type: FieldType) -> str:
    """Python expression building the schema of a field."""
    if field_type.is_primitive:
        element = f"ros.{FACTORY_NAMES.get(field_type.name, field_type.name)}()"
    else:
        element = _ref_name(normalize_type(package.name, field_type.name))

    if field_type.array_size is None:
        return element
    if field_type.array_size == 0:
        return f"ros.array({element})"
    return f"ros.array({element}, {field_type.array_size})"


def _is_service(definition: Definition) -> bool:
    return isinstance(definition, ServiceDefinition)


def render(packages: list[InterfacePackage], runtime_import: str = "roscdr.proto") -> str:
    """Render interface packages to a Python module of schemas."""
    return template.render(
        packages=packages,
        ordered=order_definitions(packages),
        var_name=_var_name,
        schema_expr=_schema_expr,
        is_service=_is_service,
        runtime_import=runtime_import,
    )
