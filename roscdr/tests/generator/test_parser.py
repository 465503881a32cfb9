"""Tests for interface definition parser."""

import pytest

from roscdr.generator import parse_interface_file, parse_message, parse_service
from roscdr.generator.parser import ValidationError
from roscdr.generator.types import InterfaceFile, MessageDefinition, ServiceDefinition


def describe_parse_message():
    def parses_primitive_fields(expect):
        definition = parse_message(
            """
            # Header comment
            int32 x
            float64 y   # trailing comment
            string label
        """,
            "Sample",
        )
        expect(definition.name) == "Sample"
        expect([f.name for f in definition.fields]) == ["x", "y", "label"]
        expect([f.type.name for f in definition.fields]) == ["int32", "float64", "string"]
        expect(definition.constants) == []

    def parses_arrays(expect):
        definition = parse_message(
            """
            float64[] values
            uint8[3] rgb
            int32[<=5] bounded
        """
        )
        values, rgb, bounded = definition.fields
        expect(values.type.array_size) == 0
        expect(values.type.upper_bound) == None
        expect(rgb.type.array_size) == 3
        expect(bounded.type.array_size) == 0
        expect(bounded.type.upper_bound) == 5

    def parses_bounded_strings(expect):
        definition = parse_message("string<=10 name\nwstring<=4[] names")
        name, names = definition.fields
        expect(name.type.string_bound) == 10
        expect(names.type.string_bound) == 4
        expect(names.type.array_size) == 0

    def parses_package_types(expect):
        definition = parse_message(
            """
            Point local
            geometry_msgs/Point short
            geometry_msgs/msg/Point full
            std_msgs/Header[] headers
        """
        )
        expect([f.type.name for f in definition.fields]) == [
            "Point",
            "geometry_msgs/Point",
            "geometry_msgs/msg/Point",
            "std_msgs/Header",
        ]
        expect(definition.fields[0].type.is_primitive) == False

    def parses_default_values(expect):
        definition = parse_message(
            """
            int32 count 5
            float64 ratio -0.5
            string greeting "hello world"
            string other 'single'
            bool flag true
            uint8[] bytes [1, 2, 3]
            int32[] empty []
        """
        )
        expect([f.default for f in definition.fields]) == [
            5,
            -0.5,
            "hello world",
            "single",
            True,
            [1, 2, 3],
            [],
        ]

    def parses_constants(expect):
        definition = parse_message(
            """
            int8 MODE_A=1
            int8 MODE_B = 2
            string NAME = "robot"
            int8 mode
        """
        )
        expect([(c.name, c.value) for c in definition.constants]) == [
            ("MODE_A", 1),
            ("MODE_B", 2),
            ("NAME", "robot"),
        ]
        expect([f.name for f in definition.fields]) == ["mode"]

    def parses_empty_message(expect):
        definition = parse_message("# nothing here\n\n")
        expect(definition.fields) == []
        expect(definition.constants) == []


def describe_parse_service():
    def splits_request_and_response(expect):
        definition = parse_service("int64 a\nint64 b\n---\nint64 sum\n", "AddTwoInts")
        expect(isinstance(definition, ServiceDefinition)) == True
        expect(definition.request.name) == "AddTwoInts_Request"
        expect(definition.response.name) == "AddTwoInts_Response"
        expect([f.name for f in definition.request.fields]) == ["a", "b"]
        expect([f.name for f in definition.response.fields]) == ["sum"]

    def allows_empty_halves(expect):
        definition = parse_service("---\n", "Empty")
        expect(definition.request.fields) == []
        expect(definition.response.fields) == []

    def requires_one_separator(expect):
        with pytest.raises(ValidationError):
            parse_service("int32 a\n", "NoSeparator")
        with pytest.raises(ValidationError):
            parse_service("---\n---\n", "TwoSeparators")


def describe_parse_interface_file():
    def dispatches_on_kind(expect):
        message = parse_interface_file(InterfaceFile(kind="msg", name="Point", content="float64 x"))
        service = parse_interface_file(InterfaceFile(kind="srv", name="Trigger", content="---\nbool ok"))
        expect(isinstance(message, MessageDefinition)) == True
        expect(isinstance(service, ServiceDefinition)) == True

    def rejects_unknown_kind(expect):
        with pytest.raises(ValidationError):
            parse_interface_file(InterfaceFile(kind="action", name="Move", content=""))


def describe_validation():
    def rejects_syntax_errors(expect):
        with pytest.raises(ValidationError):
            parse_message("int32")
        with pytest.raises(ValidationError):
            parse_message("int32[ x")

    def rejects_duplicate_names(expect):
        with pytest.raises(ValidationError):
            parse_message("int32 x\nfloat64 x")

    def rejects_zero_size_arrays(expect):
        with pytest.raises(ValidationError):
            parse_message("int32[0] x")

    def rejects_bounded_non_strings(expect):
        with pytest.raises(ValidationError):
            parse_message("int32<=4 x")

    def rejects_non_primitive_constants(expect):
        with pytest.raises(ValidationError):
            parse_message("geometry_msgs/Point ORIGIN=0")

    def rejects_array_constants(expect):
        with pytest.raises(ValidationError):
            parse_message("int32[] VALUES=[1, 2]")

    def rejects_invalid_type_paths(expect):
        with pytest.raises(ValidationError):
            parse_message("pkg/srv/Thing x")
