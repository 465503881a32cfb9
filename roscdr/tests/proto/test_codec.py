"""Tests for the CDR reader and writer"""

from pytest import approx, raises

from roscdr.proto.codec import CdrReader, CdrWriter, DecodeError, EncodeError


def describe_writer():
    def starts_with_little_endian_header(expect):
        expect(CdrWriter().data) == b"\x00\x01\x00\x00"

    def aligns_from_end_of_header(expect):
        writer = CdrWriter()
        writer.write("uint8", 7)
        writer.write("uint32", 1)
        expect(writer.data) == b"\x00\x01\x00\x00" + b"\x07\x00\x00\x00" + b"\x01\x00\x00\x00"

    def writes_float64_right_after_header(expect):
        writer = CdrWriter()
        writer.write("float64", 0.5)
        expect(writer.data[4:]) == bytes.fromhex("000000000000e03f")

    def pads_eight_byte_values(expect):
        writer = CdrWriter()
        writer.write("int16", -2)
        writer.write("int64", -1)
        expect(writer.data[4:]) == bytes.fromhex("feff000000000000ffffffffffffffff")

    def writes_full_uint64_range(expect):
        writer = CdrWriter()
        writer.write("uint64", 2**64 - 1)
        expect(writer.data[4:]) == b"\xff" * 8

    def writes_terminated_strings(expect):
        writer = CdrWriter()
        writer.string("hello")
        expect(writer.data[4:]) == bytes.fromhex("0600000068656c6c6f00")

    def writes_empty_string_as_terminator_only(expect):
        writer = CdrWriter()
        writer.string("")
        expect(writer.data[4:]) == bytes.fromhex("0100000000")

    def rejects_out_of_range_integers(expect):
        writer = CdrWriter()
        with raises(EncodeError):
            writer.write("uint8", 256)
        with raises(EncodeError):
            writer.write("int32", 2**31)

    def rejects_non_numbers(expect):
        with raises(EncodeError):
            CdrWriter().write("int32", "12")

    def rejects_non_strings(expect):
        with raises(EncodeError):
            CdrWriter().string(12)


def describe_reader():
    def reads_little_endian_payloads(expect):
        reader = CdrReader(bytes.fromhex("00010000d2040000"))
        expect(reader.read("uint32")) == 1234
        expect(reader.remaining) == 0

    def reads_big_endian_payloads(expect):
        reader = CdrReader(bytes.fromhex("00000000000004d2"))
        expect(reader.read("uint32")) == 1234

    def rejects_unknown_representation(expect):
        with raises(DecodeError):
            CdrReader(bytes.fromhex("00070000"))

    def rejects_missing_header(expect):
        with raises(DecodeError):
            CdrReader(b"\x00\x01")

    def skips_alignment_padding(expect):
        reader = CdrReader(bytes.fromhex("00010000" "05" + "00" * 7 + "0000000000000840"))
        expect(reader.read("uint8")) == 5
        expect(reader.read("float64")) == approx(3.0)

    def decodes_bools(expect):
        reader = CdrReader(bytes.fromhex("00010000000102"))
        expect(reader.read("bool")) == False
        expect(reader.read("bool")) == True
        expect(reader.read("bool")) == True

    def reads_strings(expect):
        reader = CdrReader(bytes.fromhex("000100000600000068656c6c6f00"))
        expect(reader.string()) == "hello"

    def reads_zero_length_string_as_empty(expect):
        reader = CdrReader(bytes.fromhex("0001000000000000"))
        expect(reader.string()) == ""

    def fails_on_short_buffer(expect):
        reader = CdrReader(bytes.fromhex("00010000d204"))
        with raises(DecodeError):
            reader.read("uint32")

    def fails_on_missing_terminator(expect):
        reader = CdrReader(bytes.fromhex("000100000300000068690a"))
        with raises(DecodeError):
            reader.string()

    def fails_on_truncated_string(expect):
        reader = CdrReader(bytes.fromhex("000100000a00000068656c"))
        with raises(DecodeError):
            reader.string()

    def accepts_memoryviews(expect):
        data = bytearray(bytes.fromhex("ff00010000d2040000"))
        reader = CdrReader(memoryview(data)[1:])
        expect(reader.read("uint32")) == 1234
