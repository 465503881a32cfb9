"""Tests for schema loading."""

import pytest

from roscdr import proto as ros
from roscdr.generator import load_schemas, order_definitions, parse_message, parse_service
from roscdr.generator.parser import ValidationError
from roscdr.generator.types import InterfacePackage


def package(name, **definitions):
    parsed = []
    for def_name, text in definitions.items():
        if "---" in text:
            parsed.append(parse_service(text, def_name))
        else:
            parsed.append(parse_message(text, def_name))
    return InterfacePackage(name=name, definitions=parsed)


def describe_order_definitions():
    def places_dependencies_first(expect):
        geometry = package(
            "geometry_msgs",
            Polygon="Point32[] points",
            Point32="float32 x\nfloat32 y\nfloat32 z",
        )
        ordered = order_definitions([geometry])
        expect([d.name for _, d in ordered]) == ["Point32", "Polygon"]

    def follows_references_across_packages(expect):
        nav = package("nav_msgs", Path="std_msgs/Header header\ngeometry_msgs/msg/Point[] poses")
        std = package("std_msgs", Header="string frame_id")
        geometry = package("geometry_msgs", Point="float64 x")
        ordered = order_definitions([nav, std, geometry])
        expect([p.type_name(d) for p, d in ordered]) == [
            "std_msgs/msg/Header",
            "geometry_msgs/msg/Point",
            "nav_msgs/msg/Path",
        ]

    def rejects_unknown_types(expect):
        with pytest.raises(ValidationError):
            order_definitions([package("pkg", Thing="Missing field")])

    def rejects_recursive_definitions(expect):
        with pytest.raises(ValidationError):
            order_definitions([package("pkg", A="B b", B="A[] a")])

    def rejects_duplicate_types(expect):
        first = package("pkg", Thing="int8 a")
        second = package("pkg", Thing="int8 b")
        with pytest.raises(ValidationError):
            order_definitions([first, second])


def describe_load_schemas():
    def builds_message_schemas(expect):
        geometry = package(
            "geometry_msgs",
            Point="float64 x\nfloat64 y\nfloat64 z",
            Polygon="Point[] points\nPoint[2] corners\nstring<=8 name",
        )
        schemas = load_schemas([geometry])
        point = ros.message(
            "geometry_msgs/msg/Point",
            {"x": ros.float64(), "y": ros.float64(), "z": ros.float64()},
        )
        expect(schemas["geometry_msgs/msg/Point"]) == point
        expect(schemas["geometry_msgs/msg/Polygon"]) == ros.message(
            "geometry_msgs/msg/Polygon",
            {
                "points": ros.array(point),
                "corners": ros.array(point, 2),
                "name": ros.string(),
            },
        )

    def builds_service_schemas(expect):
        example = package("example_interfaces", AddTwoInts="int64 a\nint64 b\n---\nint64 sum")
        schemas = load_schemas([example])
        expect(schemas["example_interfaces/srv/AddTwoInts"]) == ros.service(
            "example_interfaces/srv/AddTwoInts",
            request={"a": ros.int64(), "b": ros.int64()},
            response={"sum": ros.int64()},
        )

    def resolves_builtin_time_aliases(expect):
        builtins = package("builtin_interfaces", Time="int32 sec\nuint32 nanosec")
        stamped = package("pkg", Stamped="time stamp")
        schemas = load_schemas([stamped, builtins])
        expect(schemas["pkg/msg/Stamped"]["stamp"]) == schemas["builtin_interfaces/msg/Time"]

    def produces_usable_schemas(expect):
        example = package("example_interfaces", AddTwoInts="int64 a\nint64 b\n---\nint64 sum")
        srv = load_schemas([example])["example_interfaces/srv/AddTwoInts"]
        data = ros.serialize(srv.request, {"a": 2, "b": 3})
        expect(ros.deserialize(srv.request, data)) == {"a": 2, "b": 3}
