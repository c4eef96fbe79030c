"""RTCP common header, packet type names and the base packet class."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum

__all__ = [
    "RtcpType",
    "CommonHeader",
    "RtcpPacket",
    "is_rtcp",
    "type_to_string",
    "COMMON_HEADER_SIZE",
    "RTCP_VERSION",
]

_log = logging.getLogger(__name__)

COMMON_HEADER_SIZE = 4
RTCP_VERSION = 2


class RtcpType(IntEnum):
    SR = 200
    RR = 201
    SDES = 202
    BYE = 203
    APP = 204
    RTPFB = 205
    PSFB = 206
    XR = 207
    NAT = 211


_TYPE_NAMES = {
    RtcpType.SR: "SR",
    RtcpType.RR: "RR",
    RtcpType.SDES: "SDES",
    RtcpType.BYE: "BYE",
    RtcpType.APP: "APP",
    RtcpType.RTPFB: "RTPFB",
    RtcpType.PSFB: "PSFB",
    RtcpType.XR: "XR",
    RtcpType.NAT: "NAT",
}


def is_rtcp(data):
    """True if ``data`` starts with a version-2 RTCP common header."""
    if len(data) < COMMON_HEADER_SIZE:
        return False
    if data[0] >> 6 != RTCP_VERSION:
        return False
    return 192 <= data[1] <= 223


def type_to_string(rtcp_type):
    """The name of an RTCP packet type, or ``"UNKNOWN"``."""
    try:
        return _TYPE_NAMES[RtcpType(rtcp_type)]
    except (ValueError, KeyError):
        return "UNKNOWN"


@dataclass
class CommonHeader:
    """The four bytes that start every RTCP packet.

    ``length`` is the packet length in 32-bit words minus one.
    """

    version: int = RTCP_VERSION
    padding: bool = False
    count: int = 0
    packet_type: int = 0
    length: int = 0

    @classmethod
    def parse(cls, data):
        """Read a common header from the start of ``data``."""
        if len(data) < COMMON_HEADER_SIZE:
            raise ValueError(
                f"RTCP common header needs {COMMON_HEADER_SIZE} bytes, got {len(data)}"
            )
        first = data[0]
        return cls(
            version=first >> 6,
            padding=bool(first & 0x20),
            count=first & 0x1F,
            packet_type=data[1],
            length=(data[2] << 8) | data[3],
        )

    @property
    def packet_size(self):
        """Total packet size in bytes described by ``length``."""
        return (self.length + 1) * 4

    def to_bytes(self):
        """The header in wire form."""
        if not 0 <= self.version <= 3:
            raise ValueError(f"version {self.version} does not fit in 2 bits")
        if not 0 <= self.count <= 0x1F:
            raise ValueError(f"count {self.count} does not fit in 5 bits")
        if not 0 <= self.packet_type <= 0xFF:
            raise ValueError(f"packet type {self.packet_type} does not fit in 8 bits")
        if not 0 <= self.length <= 0xFFFF:
            raise ValueError(f"length {self.length} does not fit in 16 bits")
        first = (self.version << 6) | (0x20 if self.padding else 0) | self.count
        return bytes([first, self.packet_type, self.length >> 8, self.length & 0xFF])


class RtcpPacket:
    """Base of all RTCP packets: knows its type and writes the common header.

    Subclasses report their full size and count and append their body to
    what ``serialize`` of this class returns.
    """

    def __init__(self, rtcp_type):
        self.type = RtcpType(rtcp_type)

    def __repr__(self):
        return f"{type(self).__name__}(type={type_to_string(self.type)}, size={self.size()})"

    def size(self):
        """Size of the whole packet in bytes."""
        return COMMON_HEADER_SIZE

    def count(self):
        """Value of the five-bit count field."""
        return 0

    def serialize(self):
        """The common header for this packet in wire form."""
        size = self.size()
        if size % 4 or size < COMMON_HEADER_SIZE:
            raise ValueError(f"RTCP packet size {size} is not a positive multiple of 4")
        header = CommonHeader(
            version=RTCP_VERSION,
            padding=False,
            count=self.count(),
            packet_type=int(self.type),
            length=size // 4 - 1,
        )
        return header.to_bytes()