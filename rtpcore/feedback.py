"""RTCP feedback packets: payload-specific and transport-layer, with NACK."""

from __future__ import annotations

import logging
import struct

from .byteutils import count_set_bits, get_2_bytes, get_4_bytes
from .rtcp_packet import COMMON_HEADER_SIZE, CommonHeader, RtcpPacket, RtcpType

__all__ = [
    "FeedbackPsMessageType",
    "FeedbackRtpMessageType",
    "FeedbackPacket",
    "NackItem",
    "FeedbackRtpNackPacket",
    "message_type_to_string",
    "parse_feedback_ps",
    "parse_feedback_rtp",
    "FEEDBACK_HEADER_SIZE",
    "NACK_ITEM_SIZE",
]

from enum import IntEnum

_log = logging.getLogger(__name__)

FEEDBACK_HEADER_SIZE = 8
NACK_ITEM_SIZE = 4


class FeedbackPsMessageType(IntEnum):
    PLI = 1
    SLI = 2
    RPSI = 3
    FIR = 4
    TSTR = 5
    TSTN = 6
    VBCM = 7
    PSLEI = 8
    ROI = 9
    AFB = 15
    EXT = 31


class FeedbackRtpMessageType(IntEnum):
    NACK = 1
    TMMBR = 3
    TMMBN = 4
    SR_REQ = 5
    RAMS = 6
    TLLEI = 7
    ECN = 8
    PS = 9
    QUICFB = 10
    TCC = 15
    EXT = 31


def message_type_to_string(message_type):
    """The name of a feedback message type, or ``"UNKNOWN"``."""
    if isinstance(message_type, (FeedbackPsMessageType, FeedbackRtpMessageType)):
        return message_type.name
    return "UNKNOWN"


def _rtcp_type_for(message_type):
    if isinstance(message_type, FeedbackPsMessageType):
        return RtcpType.PSFB
    if isinstance(message_type, FeedbackRtpMessageType):
        return RtcpType.RTPFB
    raise TypeError(f"not a feedback message type: {message_type!r}")


class FeedbackPacket(RtcpPacket):
    """A feedback packet: common header plus sender and media SSRCs.

    The message type travels in the count field of the common header.
    """

    def __init__(self, message_type, sender_ssrc, media_ssrc):
        super().__init__(_rtcp_type_for(message_type))
        self.message_type = message_type
        self.sender_ssrc = sender_ssrc
        self.media_ssrc = media_ssrc

    def size(self):
        return COMMON_HEADER_SIZE + FEEDBACK_HEADER_SIZE

    def count(self):
        return int(self.message_type)

    def serialize(self):
        """Common header followed by the two SSRCs."""
        return super().serialize() + struct.pack(">II", self.sender_ssrc, self.media_ssrc)


class NackItem:
    """One NACK entry: a lost packet id and a bitmask of the 16 following ones."""

    def __init__(self, packet_id, lost_packet_bitmask=0):
        if not 0 <= packet_id <= 0xFFFF:
            raise ValueError(f"packet id {packet_id} does not fit in 16 bits")
        if not 0 <= lost_packet_bitmask <= 0xFFFF:
            raise ValueError(f"bitmask {lost_packet_bitmask} does not fit in 16 bits")
        self.packet_id = packet_id
        self.lost_packet_bitmask = lost_packet_bitmask

    def __repr__(self):
        return f"NackItem(packet_id={self.packet_id}, bitmask={self.lost_packet_bitmask:#06x})"

    def __eq__(self, other):
        if not isinstance(other, NackItem):
            return NotImplemented
        return (self.packet_id, self.lost_packet_bitmask) == (
            other.packet_id,
            other.lost_packet_bitmask,
        )

    __hash__ = None

    @property
    def size(self):
        """Wire size of the item in bytes."""
        return NACK_ITEM_SIZE

    @classmethod
    def parse(cls, data):
        """Read an item from the start of ``data``, or None if it is too short."""
        if len(data) < NACK_ITEM_SIZE:
            _log.warning("not enough space for NACK item, discarded")
            return None
        return cls(get_2_bytes(data, 0), get_2_bytes(data, 2))

    def serialize(self):
        """The item in wire form."""
        return struct.pack(">HH", self.packet_id, self.lost_packet_bitmask)

    def count_requested_packets(self):
        """The packet id itself plus every packet flagged in the bitmask."""
        return count_set_bits(self.lost_packet_bitmask) + 1


class FeedbackRtpNackPacket(FeedbackPacket):
    """A transport-layer NACK feedback packet carrying a list of NACK items."""

    def __init__(self, sender_ssrc, media_ssrc):
        super().__init__(FeedbackRtpMessageType.NACK, sender_ssrc, media_ssrc)
        self._items = []

    @classmethod
    def parse(cls, data):
        """Read a NACK packet from ``data``, or None if it is too short."""
        if len(data) < COMMON_HEADER_SIZE + FEEDBACK_HEADER_SIZE:
            _log.error("not enough space for Feedback packet, discarded")
            return None
        CommonHeader.parse(data)
        packet = cls(get_4_bytes(data, 4), get_4_bytes(data, 8))
        offset = COMMON_HEADER_SIZE + FEEDBACK_HEADER_SIZE
        while len(data) > offset:
            item = NackItem.parse(data[offset:])
            if item is None:
                break
            packet.add_item(item)
            offset += item.size
        return packet

    def add_item(self, item):
        """Append a NACK item."""
        self._items.append(item)

    def __iter__(self):
        return iter(self._items)

    def __len__(self):
        return len(self._items)

    def size(self):
        return super().size() + sum(item.size for item in self._items)

    def serialize(self):
        """Feedback header followed by every item."""
        return super().serialize() + b"".join(item.serialize() for item in self._items)


def _message_type_from(data, enum_type):
    count = data[0] & 0x1F
    try:
        return enum_type(count)
    except ValueError:
        _log.error("unknown RTCP feedback message type [packetType: %s]", count)
        return None


def parse_feedback_ps(data):
    """Parse a payload-specific feedback packet.

    No payload-specific message is interpreted, so this always yields None.
    """
    if len(data) < COMMON_HEADER_SIZE + FEEDBACK_HEADER_SIZE:
        _log.error("not enough space for Feedback packet, discarded")
        return None
    _message_type_from(data, FeedbackPsMessageType)
    return None


def parse_feedback_rtp(data):
    """Parse a transport-layer feedback packet; only NACK is understood."""
    if len(data) < COMMON_HEADER_SIZE + FEEDBACK_HEADER_SIZE:
        _log.error("not enough space for Feedback packet, discarded")
        return None
    message_type = _message_type_from(data, FeedbackRtpMessageType)
    if message_type is FeedbackRtpMessageType.NACK:
        return FeedbackRtpNackPacket.parse(data)
    return None