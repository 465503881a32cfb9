"""ROS 2 interface parsing and code generation."""

from .loader import load_schemas as load_schemas
from .loader import order_definitions as order_definitions
from .parser import ValidationError as ValidationError
from .parser import parse_interface_file as parse_interface_file
from .parser import parse_message as parse_message
from .parser import parse_service as parse_service
from .types import *
