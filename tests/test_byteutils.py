import socket

import pytest

from rtpcore import byteutils


def test_bytes_to_hex_pinned_layout():
    assert byteutils.bytes_to_hex(b"\x01\xab", 8) == "  1 ab\n"


def test_bytes_to_hex_lines_match_width():
    text = byteutils.bytes_to_hex(bytes(range(10)), 4)
    lines = text.split("\n")
    assert text.endswith("\n")
    assert [len(line) for line in lines[:-1]] == [12, 12, 6]


def test_bytes_to_hex_exact_multiple_has_single_trailing_newline():
    text = byteutils.bytes_to_hex(bytes(range(8)), 4)
    assert text.count("\n") == 2
    assert not text.endswith("\n\n")


@pytest.mark.parametrize("data,width", [(b"", 8), (b"\x01\x02", 0)])
def test_bytes_to_hex_empty_cases(data, width):
    assert byteutils.bytes_to_hex(data, width) == ""


def test_get_reads_big_endian():
    data = bytes([0x12, 0x34, 0x56, 0x78, 0x9A, 0xBC, 0xDE, 0xF0])
    assert byteutils.get_1_byte(data, 1) == 0x34
    assert byteutils.get_2_bytes(data, 0) == 0x1234
    assert byteutils.get_3_bytes(data, 1) == 0x345678
    assert byteutils.get_4_bytes(data, 4) == 0x9ABCDEF0
    assert byteutils.get_8_bytes(data, 0) == 0x123456789ABCDEF0


@pytest.mark.parametrize(
    "setter,getter,width,value",
    [
        (byteutils.set_1_byte, byteutils.get_1_byte, 1, 0xAB),
        (byteutils.set_2_bytes, byteutils.get_2_bytes, 2, 0xBEEF),
        (byteutils.set_3_bytes, byteutils.get_3_bytes, 3, 0xC0FFEE),
        (byteutils.set_4_bytes, byteutils.get_4_bytes, 4, 0xDEADBEEF),
        (byteutils.set_8_bytes, byteutils.get_8_bytes, 8, 0x0102030405060708),
    ],
)
def test_set_then_get_round_trip(setter, getter, width, value):
    data = bytearray(width + 3)
    setter(data, 2, value)
    assert getter(data, 2) == value
    assert data[:2] == b"\x00\x00"
    assert data[2 + width :] == b"\x00"


def test_set_truncates_to_width():
    data = bytearray(2)
    byteutils.set_2_bytes(data, 0, 0x12345)
    assert byteutils.get_2_bytes(data, 0) == 0x2345


def test_set_8_bytes_wire_order():
    data = bytearray(8)
    byteutils.set_8_bytes(data, 0, 0x0102030405060708)
    assert bytes(data) == bytes([1, 2, 3, 4, 5, 6, 7, 8])


def test_out_of_range_access_raises():
    with pytest.raises(IndexError):
        byteutils.get_4_bytes(b"\x00\x00\x00", 0)
    with pytest.raises(IndexError):
        byteutils.set_2_bytes(bytearray(2), 1, 1)


@pytest.mark.parametrize("size", [0, 1, 2, 3, 4, 5, 17, 100, 1023])
def test_pad_to_4_bytes_invariants(size):
    padded = byteutils.pad_to_4_bytes(size)
    assert padded % 4 == 0
    assert size <= padded < size + 4


def test_pad_keeps_multiples():
    assert byteutils.pad_to_4_bytes(20) == 20


def test_count_set_bits():
    assert byteutils.count_set_bits(0xFFFF) == 16
    assert byteutils.count_set_bits(0) == 0
    assert byteutils.count_set_bits(0b1010) == 2


def test_clocks_are_monotonic_and_consistent():
    first_ns = byteutils.time_ns()
    ms = byteutils.time_ms()
    us = byteutils.time_us()
    last_ns = byteutils.time_ns()
    assert first_ns <= last_ns
    assert first_ns // 1_000_000 <= ms <= last_ns // 1_000_000
    assert first_ns // 1_000 <= us <= last_ns // 1_000


def test_get_family():
    assert byteutils.get_family("127.0.0.1") == socket.AF_INET
    assert byteutils.get_family("::1") == socket.AF_INET6
    assert byteutils.get_family("not-an-ip") == socket.AF_UNSPEC
    assert byteutils.get_family("1" * 60) == socket.AF_UNSPEC


def test_get_address_info_ipv4():
    assert byteutils.get_address_info(("127.0.0.1", 9001)) == ("127.0.0.1", 9001)


def test_get_address_info_ipv6_normalises():
    ip, port = byteutils.get_address_info(("0:0:0:0:0:0:0:1", 5004, 0, 0))
    assert ip == "::1"
    assert port == 5004


@pytest.mark.parametrize(
    "address",
    [("127.0.0.1",), ("bad", 1), ("127.0.0.1", 70000), ("::1", 1, 0), "127.0.0.1"],
)
def test_get_address_info_errors(address):
    with pytest.raises(ValueError):
        byteutils.get_address_info(address)