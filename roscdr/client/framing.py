"""Binary data-channel frames exchanged with the bridge.

Every frame starts with a one-byte opcode; integers are little-endian.
"""

import struct
from dataclasses import dataclass
from enum import IntEnum


class FrameError(RuntimeError):
    """Raised when a frame cannot be encoded."""


class Opcode(IntEnum):
    TOPIC = 0
    SERVICE_REQUEST = 1
    SERVICE_RESPONSE = 2


_TOPIC_HEADER = struct.Struct("<BI")
_SERVICE_REQUEST_HEADER = struct.Struct("<BII")
_SERVICE_RESPONSE_HEADER = struct.Struct("<BI")

MIN_LENGTHS = {
    Opcode.TOPIC: _TOPIC_HEADER.size,
    Opcode.SERVICE_REQUEST: _SERVICE_REQUEST_HEADER.size,
    Opcode.SERVICE_RESPONSE: _SERVICE_RESPONSE_HEADER.size,
}


@dataclass(frozen=True, slots=True)
class TopicFrame:
    endpoint_id: int
    payload: memoryview


@dataclass(frozen=True, slots=True)
class ServiceRequestFrame:
    service_client_id: int
    call_id: int
    payload: memoryview


@dataclass(frozen=True, slots=True)
class ServiceResponseFrame:
    call_id: int
    payload: memoryview


Frame = TopicFrame | ServiceRequestFrame | ServiceResponseFrame


def _pack(header: struct.Struct, payload: bytes, *values: int) -> bytes:
    try:
        return header.pack(*values) + bytes(payload)
    except struct.error as e:
        raise FrameError(f"cannot encode frame header {values!r}: {e}") from e


def encode_topic(endpoint_id: int, payload: bytes) -> bytes:
    return _pack(_TOPIC_HEADER, payload, Opcode.TOPIC, endpoint_id)


def encode_service_request(service_client_id: int, call_id: int, payload: bytes) -> bytes:
    return _pack(_SERVICE_REQUEST_HEADER, payload, Opcode.SERVICE_REQUEST, service_client_id, call_id)


def encode_service_response(call_id: int, payload: bytes) -> bytes:
    return _pack(_SERVICE_RESPONSE_HEADER, payload, Opcode.SERVICE_RESPONSE, call_id)


def decode_frame(data: bytes | bytearray | memoryview) -> Frame | None:
    """Decode a binary frame.

    Returns None for an empty frame, an unknown opcode, or a frame shorter than
    the minimum for its opcode. Payloads are zero-copy views into ``data``.
    """
    view = memoryview(data).cast("B")
    if not view:
        return None

    try:
        opcode = Opcode(view[0])
    except ValueError:
        return None

    if len(view) < MIN_LENGTHS[opcode]:
        return None

    if opcode == Opcode.TOPIC:
        _, endpoint_id = _TOPIC_HEADER.unpack_from(view)
        return TopicFrame(endpoint_id, view[_TOPIC_HEADER.size :])
    if opcode == Opcode.SERVICE_REQUEST:
        _, client_id, call_id = _SERVICE_REQUEST_HEADER.unpack_from(view)
        return ServiceRequestFrame(client_id, call_id, view[_SERVICE_REQUEST_HEADER.size :])
    _, call_id = _SERVICE_RESPONSE_HEADER.unpack_from(view)
    return ServiceResponseFrame(call_id, view[_SERVICE_RESPONSE_HEADER.size :])
