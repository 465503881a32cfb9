"""roscdr - ROS2 CDR messages and services over a single bridge channel."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("roscdr")
except PackageNotFoundError:
    __version__ = "(local)"
