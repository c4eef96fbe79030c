"""Compound RTCP: building SR/RR bundles and parsing received RTCP data."""

from __future__ import annotations

import logging

from .byteutils import bytes_to_hex
from .feedback import parse_feedback_rtp
from .reports import ReceiverReportPacket, SenderReportPacket
from .rtcp_packet import CommonHeader, RtcpType, is_rtcp, type_to_string

__all__ = ["CompoundPacket", "parse_rtcp"]

_log = logging.getLogger(__name__)


def parse_rtcp(data):
    """Parse RTCP data, possibly compound, and return the last packet parsed.

    Returns None if any part is not RTCP, is truncated, or cannot be parsed
    before some earlier packet has been.
    """
    data = bytes(data)
    current = None
    offset = 0
    while offset < len(data):
        chunk = data[offset:]
        if not is_rtcp(chunk):
            _log.error("data is not a RTCP packet:\n%s", bytes_to_hex(chunk))
            return None
        header = CommonHeader.parse(chunk)
        packet_len = header.packet_size
        if len(chunk) < packet_len:
            _log.error(
                "packet length exceeds remaining data [len:%d, packet len:%d]",
                len(chunk),
                packet_len,
            )
            return None

        body = chunk[:packet_len]
        packet_type = header.packet_type
        if packet_type == RtcpType.SR:
            current = SenderReportPacket.parse(body)
        elif packet_type == RtcpType.RR:
            current = ReceiverReportPacket.parse(body)
        elif packet_type == RtcpType.RTPFB:
            current = parse_feedback_rtp(body)
        elif type_to_string(packet_type) == "UNKNOWN":
            _log.error("unknown RTCP packet type [packetType:%d]", packet_type)

        if current is None:
            _log.error("error parsing %s RTCP packet", type_to_string(packet_type))
            return None

        offset += packet_len
    return current


class CompoundPacket:
    """An SR packet and an RR packet sent together; empty parts are omitted."""

    def __init__(self):
        self.sender_report_packet = SenderReportPacket()
        self.receiver_report_packet = ReceiverReportPacket()

    def add_sender_report(self, report):
        """Add a sender report to the SR part."""
        self.sender_report_packet.add_report(report)

    def add_receiver_report(self, report):
        """Add a report block to the RR part."""
        self.receiver_report_packet.add_report(report)

    def _parts(self):
        parts = []
        if self.sender_report_packet.reports:
            parts.append(self.sender_report_packet)
        if self.receiver_report_packet.reports:
            parts.append(self.receiver_report_packet)
        return parts

    def size(self):
        """Size of the serialised compound packet in bytes."""
        return sum(part.size() for part in self._parts())

    def serialize(self):
        """The SR part, if any, followed by the RR part, if any."""
        return b"".join(part.serialize() for part in self._parts())