"""Command-line interface for roscdr code generation."""

from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from roscdr.generator import python
from roscdr.generator.collect import collect_files, load_package
from roscdr.generator.config import ConfigError, load_config
from roscdr.generator.parser import ValidationError, parse_interface_file
from roscdr.generator.types import (
    FieldType,
    InterfacePackage,
    MessageDefinition,
    ServiceDefinition,
)


@click.group()
def cli() -> None:
    """ROS 2 interface tools for roscdr."""


@cli.command()
@click.argument("config_file", type=click.Path(exists=True, dir_okay=False))
def gen(config_file: str) -> None:
    """Generate a Python module of schemas from a config file."""
    try:
        config = load_config(config_file)
        packages = [load_package(source) for source in config.input]
        generated_file = python.render(packages)
    except (ConfigError, ValidationError, FileNotFoundError) as e:
        print(f"Error: {e}")
        sys.exit(1)
    except subprocess.CalledProcessError as e:
        print(f"Error: git failed: {' '.join(e.cmd)}")
        sys.exit(1)

    output = Path(config.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(generated_file, encoding="utf-8")
    print(f"Generated {output}")


@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False))
@click.option("--package", "-p", "package_name", default=None, help="Package name (default: directory name)")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def info(path: str, package_name: str | None, output_json: bool) -> None:
    """Display the interface definitions found below PATH."""
    try:
        definitions = [parse_interface_file(file) for file in collect_files(path)]
    except ValidationError as e:
        print(f"Error: {e}")
        sys.exit(1)

    package = InterfacePackage(
        name=package_name or Path(path).resolve().name,
        definitions=definitions,
    )

    if output_json:
        print(json.dumps(package.to_dict(), indent=2))
    else:
        _output_plain(package)


def _format_type(field_type: FieldType) -> str:
    text = field_type.name
    if field_type.string_bound is not None:
        text += f"<={field_type.string_bound}"
    if field_type.array_size == 0:
        text += f"[<={field_type.upper_bound}]" if field_type.upper_bound else "[]"
    elif field_type.array_size is not None:
        text += f"[{field_type.array_size}]"
    return text


def _format_fields(definition: MessageDefinition) -> str:
    if not definition.fields:
        return "(empty)"
    return ", ".join(f"{field.name}: {_format_type(field.type)}" for field in definition.fields)


def _output_plain(package: InterfacePackage) -> None:
    """Output definitions using rich text formatting."""
    console = Console()
    console.print(f"[bold cyan]Package {package.name}[/bold cyan]")

    table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
    table.add_column("Type", style="white")
    table.add_column("Fields", style="yellow")
    table.add_column("Constants", style="dim", justify="right")

    for definition in package.definitions:
        type_name = package.type_name(definition)
        if isinstance(definition, ServiceDefinition):
            for half in (definition.request, definition.response):
                table.add_row(
                    f"{type_name}_{half.name.rsplit('_', 1)[-1]}",
                    _format_fields(half),
                    str(len(half.constants)),
                )
        else:
            table.add_row(type_name, _format_fields(definition), str(len(definition.constants)))

    console.print(table)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
