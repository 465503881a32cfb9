"""CDR serialization runtime for ROS2 messages."""

from .codec import CdrReader as CdrReader
from .codec import CdrWriter as CdrWriter
from .codec import DecodeError as DecodeError
from .codec import EncodeError as EncodeError
from .codec import SerializationError as SerializationError
from .serialization import *
from .types import Array as Array
from .types import Message as Message
from .types import Primitive as Primitive
from .types import Schema as Schema
from .types import SchemaError as SchemaError
from .types import ServiceSchema as ServiceSchema
