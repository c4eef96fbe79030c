"""Big-endian byte access, hex dumps, clocks and small network helpers."""

from __future__ import annotations

import socket
import time

__all__ = [
    "bytes_to_hex",
    "get_1_byte",
    "get_2_bytes",
    "get_3_bytes",
    "get_4_bytes",
    "get_8_bytes",
    "set_1_byte",
    "set_2_bytes",
    "set_3_bytes",
    "set_4_bytes",
    "set_8_bytes",
    "pad_to_4_bytes",
    "count_set_bits",
    "time_ms",
    "time_us",
    "time_ns",
    "get_family",
    "get_address_info",
]

# Longest textual IPv6 address plus the terminating NUL.
_INET6_ADDRSTRLEN = 46


def bytes_to_hex(data, num_per_line=8):
    """Render bytes as right-aligned hex columns, ``num_per_line`` per line.

    Returns an empty string for empty input or a zero line width.
    """
    if not data or num_per_line == 0:
        return ""
    parts = []
    for position, byte in enumerate(bytes(data), start=1):
        parts.append(f"{byte:>3x}")
        if position % num_per_line == 0:
            parts.append("\n")
    if len(data) % num_per_line != 0:
        parts.append("\n")
    return "".join(parts)


def _check_range(data, index, width):
    if index < 0 or index + width > len(data):
        raise IndexError(
            f"cannot access {width} byte(s) at offset {index} of {len(data)}-byte data"
        )


def _get(data, index, width):
    _check_range(data, index, width)
    return int.from_bytes(bytes(data[index : index + width]), "big")


def _set(data, index, width, value):
    _check_range(data, index, width)
    mask = (1 << (8 * width)) - 1
    data[index : index + width] = (value & mask).to_bytes(width, "big")


def get_1_byte(data, index):
    """Read one unsigned byte at ``index``."""
    return _get(data, index, 1)


def get_2_bytes(data, index):
    """Read a big-endian 16-bit unsigned integer at ``index``."""
    return _get(data, index, 2)


def get_3_bytes(data, index):
    """Read a big-endian 24-bit unsigned integer at ``index``."""
    return _get(data, index, 3)


def get_4_bytes(data, index):
    """Read a big-endian 32-bit unsigned integer at ``index``."""
    return _get(data, index, 4)


def get_8_bytes(data, index):
    """Read a big-endian 64-bit unsigned integer at ``index``."""
    return _get(data, index, 8)


def set_1_byte(data, index, value):
    """Write the low 8 bits of ``value`` at ``index``."""
    _set(data, index, 1, value)


def set_2_bytes(data, index, value):
    """Write the low 16 bits of ``value`` big-endian at ``index``."""
    _set(data, index, 2, value)


def set_3_bytes(data, index, value):
    """Write the low 24 bits of ``value`` big-endian at ``index``."""
    _set(data, index, 3, value)


def set_4_bytes(data, index, value):
    """Write the low 32 bits of ``value`` big-endian at ``index``."""
    _set(data, index, 4, value)


def set_8_bytes(data, index, value):
    """Write the low 64 bits of ``value`` big-endian at ``index``."""
    _set(data, index, 8, value)


def pad_to_4_bytes(size):
    """Round ``size`` up to the next multiple of four."""
    if size & 0x03:
        return (size & ~0x03) + 4
    return size


def count_set_bits(mask):
    """Count the set bits in a 16-bit mask."""
    return bin(mask & 0xFFFF).count("1")


def time_ns():
    """Monotonic clock in nanoseconds."""
    return time.monotonic_ns()


def time_us():
    """Monotonic clock in microseconds."""
    return time.monotonic_ns() // 1_000


def time_ms():
    """Monotonic clock in milliseconds."""
    return time.monotonic_ns() // 1_000_000


def _parses_as(family, ip):
    try:
        socket.inet_pton(family, ip)
    except (OSError, ValueError):
        return False
    return True


def get_family(ip):
    """Return ``AF_INET``, ``AF_INET6`` or ``AF_UNSPEC`` for a textual address."""
    if len(ip) >= _INET6_ADDRSTRLEN:
        return socket.AF_UNSPEC
    if _parses_as(socket.AF_INET, ip):
        return socket.AF_INET
    if _parses_as(socket.AF_INET6, ip):
        return socket.AF_INET6
    return socket.AF_UNSPEC


def get_address_info(address):
    """Split a socket address tuple into its normalised ``(ip, port)``.

    Two-element tuples are IPv4 addresses, four-element tuples IPv6 ones.
    Raises ``ValueError`` for an unknown address form or an invalid address.
    """
    if not isinstance(address, tuple):
        raise ValueError(f"unknown network address form: {address!r}")
    if len(address) == 2:
        family = socket.AF_INET
    elif len(address) == 4:
        family = socket.AF_INET6
    else:
        raise ValueError(f"unknown network family for address {address!r}")

    host, port = address[0], address[1]
    try:
        packed = socket.inet_pton(family, host)
    except (OSError, ValueError, TypeError) as exc:
        raise ValueError(f"invalid address {host!r}") from exc
    if not isinstance(port, int) or not 0 <= port <= 0xFFFF:
        raise ValueError(f"invalid port {port!r}")
    return socket.inet_ntop(family, packed), port