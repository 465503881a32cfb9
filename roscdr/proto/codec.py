"""CDR reader and writer for ROS2 message payloads."""

import struct

# Representation identifiers (second byte of the encapsulation header)
CDR_BE = 0x00
CDR_LE = 0x01

HEADER_SIZE = 4

# Map primitive tags to struct format characters
FORMAT_CHARS = {
    "bool": "B",
    "byte": "B",
    "char": "B",
    "int8": "b",
    "uint8": "B",
    "int16": "h",
    "uint16": "H",
    "int32": "i",
    "uint32": "I",
    "int64": "q",
    "uint64": "Q",
    "float32": "f",
    "float64": "d",
}

# Size in bytes (and alignment) for each fixed-width tag
TYPE_SIZES = {
    "bool": 1,
    "byte": 1,
    "char": 1,
    "int8": 1,
    "uint8": 1,
    "int16": 2,
    "uint16": 2,
    "int32": 4,
    "uint32": 4,
    "int64": 8,
    "uint64": 8,
    "float32": 4,
    "float64": 8,
}


class SerializationError(RuntimeError):
    """Raised when serialization or deserialization fails."""


class EncodeError(SerializationError):
    """Raised when a value cannot be written."""


class DecodeError(SerializationError):
    """Raised when a payload cannot be read."""


class CdrWriter:
    """Growable little-endian CDR output buffer.

    Alignment is measured from the end of the encapsulation header.
    """

    def __init__(self) -> None:
        self._buf = bytearray((0x00, CDR_LE, 0x00, 0x00))

    @property
    def data(self) -> bytes:
        return bytes(self._buf)

    def __len__(self) -> int:
        return len(self._buf)

    def align(self, size: int) -> None:
        padding = -(len(self._buf) - HEADER_SIZE) % size
        if padding:
            self._buf.extend(b"\x00" * padding)

    def write(self, tag: str, value: object) -> None:
        """Write one fixed-width primitive, aligned to its size."""
        size = TYPE_SIZES[tag]
        if size > 1:
            self.align(size)
        try:
            self._buf.extend(struct.pack("<" + FORMAT_CHARS[tag], value))
        except (struct.error, OverflowError) as e:
            raise EncodeError(f"cannot encode {value!r} as {tag}: {e}") from e

    def uint32(self, value: int) -> None:
        self.write("uint32", value)

    def sequence_length(self, length: int) -> None:
        self.write("uint32", length)

    def string(self, value: str) -> None:
        if not isinstance(value, str):
            raise EncodeError(f"expected str, got {type(value).__name__}")
        encoded = value.encode("utf-8")
        self.uint32(len(encoded) + 1)
        self._buf.extend(encoded)
        self._buf.append(0)


class CdrReader:
    """Read cursor over a CDR payload.

    The constructor consumes the encapsulation header and picks the byte order
    from its representation identifier.
    """

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self._data = memoryview(data).cast("B")
        if len(self._data) < HEADER_SIZE:
            raise DecodeError("payload is shorter than the encapsulation header")

        kind = self._data[1]
        if kind == CDR_LE:
            self._endian = "<"
        elif kind == CDR_BE:
            self._endian = ">"
        else:
            raise DecodeError(f"unsupported representation identifier 0x{kind:02x}")
        self._offset = HEADER_SIZE

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def remaining(self) -> int:
        return len(self._data) - self._offset

    def align(self, size: int) -> None:
        self._offset += -(self._offset - HEADER_SIZE) % size

    def _take(self, size: int) -> memoryview:
        if self.remaining < size:
            raise DecodeError(
                f"need {size} bytes at offset {self._offset}, {max(self.remaining, 0)} available"
            )
        chunk = self._data[self._offset : self._offset + size]
        self._offset += size
        return chunk

    def read(self, tag: str) -> bool | int | float:
        """Read one fixed-width primitive, aligned to its size."""
        size = TYPE_SIZES[tag]
        if size > 1:
            self.align(size)
        (value,) = struct.unpack(self._endian + FORMAT_CHARS[tag], self._take(size))
        if tag == "bool":
            return value != 0
        return value

    def uint32(self) -> int:
        return int(self.read("uint32"))

    def sequence_length(self) -> int:
        return self.uint32()

    def string(self) -> str:
        length = self.uint32()
        raw = self._take(length)
        if length == 0:
            return ""
        if raw[length - 1] != 0:
            raise DecodeError(f"string at offset {self._offset - length} is not NUL-terminated")
        try:
            return bytes(raw[: length - 1]).decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(f"invalid string data at offset {self._offset - length}") from e
