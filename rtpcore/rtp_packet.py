"""RTP packets: detection, parsing and building of the fixed header."""

from __future__ import annotations

from .byteutils import get_2_bytes, get_4_bytes, set_2_bytes, set_4_bytes

__all__ = ["RtpPacket", "is_rtp", "HEADER_SIZE"]

HEADER_SIZE = 12
_VERSION = 2


def is_rtp(data):
    """Return True if ``data`` looks like an RTP packet.

    It must hold a full fixed header with version 2, and its payload type must
    lie outside 64..95, the range that collides with RTCP packet types.
    """
    if len(data) < HEADER_SIZE:
        return False
    first = data[0]
    if not 127 < first < 192:
        return False
    payload_type = data[1] & 0x7F
    return payload_type < 64 or payload_type > 95


class RtpPacket:
    """An RTP packet held as a private copy of its wire bytes.

    CSRC lists and header extensions are not interpreted: everything after
    the fixed 12-byte header is treated as payload.
    """

    def __init__(self, data):
        if not is_rtp(data):
            raise ValueError("data is not an RTP packet")
        self._data = bytearray(data)

    @classmethod
    def parse(cls, data):
        """Return a packet copied from ``data``, or None if it is not RTP."""
        if not is_rtp(data):
            return None
        return cls(data)

    @classmethod
    def build(cls, ssrc, sequence_number, timestamp, payload_type=0, marker=False, payload=b""):
        """Create a version-2 packet from header fields and a payload."""
        if not 0 <= payload_type <= 0x7F:
            raise ValueError(f"payload type {payload_type} does not fit in 7 bits")
        if not 0 <= sequence_number <= 0xFFFF:
            raise ValueError(f"sequence number {sequence_number} does not fit in 16 bits")
        if not 0 <= timestamp <= 0xFFFFFFFF:
            raise ValueError(f"timestamp {timestamp} does not fit in 32 bits")
        if not 0 <= ssrc <= 0xFFFFFFFF:
            raise ValueError(f"ssrc {ssrc} does not fit in 32 bits")
        header = bytearray(HEADER_SIZE)
        header[0] = _VERSION << 6
        header[1] = (0x80 if marker else 0) | payload_type
        set_2_bytes(header, 2, sequence_number)
        set_4_bytes(header, 4, timestamp)
        set_4_bytes(header, 8, ssrc)
        return cls(bytes(header) + bytes(payload))

    def __len__(self):
        return len(self._data)

    def __bytes__(self):
        return bytes(self._data)

    def __repr__(self):
        return (
            f"RtpPacket(ssrc={self.ssrc}, seq={self.sequence_number}, "
            f"timestamp={self.timestamp}, size={len(self)})"
        )

    @property
    def payload(self):
        """Bytes following the fixed header."""
        return bytes(self._data[HEADER_SIZE:])

    @property
    def ssrc(self):
        """Synchronisation source identifier."""
        return get_4_bytes(self._data, 8)

    @ssrc.setter
    def ssrc(self, value):
        set_4_bytes(self._data, 8, value)

    @property
    def sequence_number(self):
        """16-bit sequence number."""
        return get_2_bytes(self._data, 2)

    @sequence_number.setter
    def sequence_number(self, value):
        set_2_bytes(self._data, 2, value)

    @property
    def timestamp(self):
        """32-bit media timestamp."""
        return get_4_bytes(self._data, 4)

    @timestamp.setter
    def timestamp(self, value):
        set_4_bytes(self._data, 4, value)

    @property
    def payload_type(self):
        """7-bit payload type."""
        return self._data[1] & 0x7F

    @property
    def marker(self):
        """The marker bit."""
        return bool(self._data[1] & 0x80)