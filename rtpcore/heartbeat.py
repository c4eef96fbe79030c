"""Fixed 20-byte heartbeat packets used to keep a media path alive."""

from __future__ import annotations

from enum import IntEnum

from .byteutils import get_2_bytes, get_4_bytes, get_8_bytes, set_2_bytes, set_4_bytes, set_8_bytes
from .cow_buffer import CopyOnWriteBuffer

__all__ = [
    "Network",
    "Protocol",
    "HeartbeatType",
    "HeartbeatPacket",
    "is_heartbeat_packet",
    "MAGIC_COOKIE",
    "PACKET_LENGTH",
]

MAGIC_COOKIE = bytes([0x21, 0x12, 0xA4, 0x42])
PACKET_LENGTH = 20


class Network(IntEnum):
    UDP = 0
    TCP = 1


class Protocol(IntEnum):
    IPV4 = 0
    IPV6 = 1


class HeartbeatType(IntEnum):
    REQ = 0
    RES = 1


def is_heartbeat_packet(data):
    """True if ``data`` is long enough and carries the magic cookie."""
    return len(data) >= PACKET_LENGTH and bytes(data[4:8]) == MAGIC_COOKIE


class HeartbeatPacket:
    """A heartbeat request or response.

    Layout: a zero byte, a flags byte (version in the top two bits, then
    network, protocol and type bits), a 16-bit length of 20, the magic
    cookie, a 32-bit SSRC and a 64-bit time, all big-endian.
    """

    def __init__(
        self,
        version,
        ssrc,
        time,
        type=HeartbeatType.REQ,
        network=Network.UDP,
        protocol=Protocol.IPV4,
        persistent=False,
    ):
        if not 0 <= version <= 3:
            raise ValueError(f"version {version} does not fit in 2 bits")
        self.version = version
        self.ssrc = ssrc
        self.time = time
        self.type = HeartbeatType(type)
        self.network = Network(network)
        self.protocol = Protocol(protocol)
        self.persistent = persistent
        self._packet = CopyOnWriteBuffer(self.create()) if persistent else CopyOnWriteBuffer()

    @classmethod
    def parse(cls, data):
        """Return the heartbeat held in ``data``, or None if it is not one."""
        if not is_heartbeat_packet(data):
            return None
        if data[0] != 0:
            return None
        if get_2_bytes(data, 2) != PACKET_LENGTH:
            return None
        flags = data[1]
        return cls(
            flags >> 6,
            get_4_bytes(data, 8),
            get_8_bytes(data, 12),
            HeartbeatType((flags >> 3) & 1),
            Network((flags >> 5) & 1),
            Protocol((flags >> 4) & 1),
        )

    def set_time(self, time):
        """Change the time, updating the stored wire form of a persistent packet."""
        self.time = time
        if self.persistent:
            with self._packet.mutable_data() as view:
                set_8_bytes(view, 12, time)

    def get_packet(self):
        """The stored wire form for a persistent packet, else an empty buffer."""
        if self.persistent:
            return self._packet.copy()
        return CopyOnWriteBuffer()

    def create(self, size=PACKET_LENGTH):
        """Serialise into ``size`` bytes; ``size`` must be at least 20."""
        if size < PACKET_LENGTH:
            raise ValueError(f"heartbeat needs {PACKET_LENGTH} bytes, got room for {size}")
        out = bytearray(size)
        out[0] = 0
        out[1] = (
            (self.version << 6)
            | (int(self.network) << 5)
            | (int(self.protocol) << 4)
            | (int(self.type) << 3)
        )
        set_2_bytes(out, 2, PACKET_LENGTH)
        out[4:8] = MAGIC_COOKIE
        set_4_bytes(out, 8, self.ssrc)
        set_8_bytes(out, 12, self.time)
        return bytes(out)