"""RTCP sender and receiver reports and the packets that carry them."""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass

from .byteutils import get_4_bytes
from .rtcp_packet import COMMON_HEADER_SIZE, CommonHeader, RtcpPacket, RtcpType

__all__ = [
    "SenderReport",
    "ReceiverReport",
    "SenderReportPacket",
    "ReceiverReportPacket",
    "SENDER_REPORT_SIZE",
    "RECEIVER_REPORT_SIZE",
]

_log = logging.getLogger(__name__)

_SENDER_REPORT = struct.Struct(">6I")
_RECEIVER_REPORT = struct.Struct(">6I")

SENDER_REPORT_SIZE = _SENDER_REPORT.size
RECEIVER_REPORT_SIZE = _RECEIVER_REPORT.size
_SSRC_SIZE = 4


@dataclass
class SenderReport:
    """Sender information: SSRC, NTP time, RTP time and sent totals."""

    ssrc: int = 0
    ntp_sec: int = 0
    ntp_frac: int = 0
    rtp_ts: int = 0
    packet_count: int = 0
    octet_count: int = 0

    size = SENDER_REPORT_SIZE

    @classmethod
    def parse(cls, data):
        """Read a sender report from the start of ``data``, or None if too short."""
        if len(data) < SENDER_REPORT_SIZE:
            _log.error("not enough space for sender report, packet discarded")
            return None
        return cls(*_SENDER_REPORT.unpack(bytes(data[:SENDER_REPORT_SIZE])))

    def serialize(self):
        """The report in wire form."""
        return _SENDER_REPORT.pack(
            self.ssrc,
            self.ntp_sec,
            self.ntp_frac,
            self.rtp_ts,
            self.packet_count,
            self.octet_count,
        )


@dataclass
class ReceiverReport:
    """One reception report block about a single source."""

    ssrc: int = 0
    fraction_lost: int = 0
    total_lost: int = 0
    last_seq: int = 0
    jitter: int = 0
    last_sender_report: int = 0
    delay_since_last_sender_report: int = 0

    size = RECEIVER_REPORT_SIZE

    @classmethod
    def parse(cls, data):
        """Read a report block from the start of ``data``, or None if too short."""
        if len(data) < RECEIVER_REPORT_SIZE:
            _log.error("not enough space for receiver report, packet discarded")
            return None
        ssrc, lost, last_seq, jitter, lsr, dlsr = _RECEIVER_REPORT.unpack(
            bytes(data[:RECEIVER_REPORT_SIZE])
        )
        return cls(ssrc, lost >> 24, lost & 0xFFFFFF, last_seq, jitter, lsr, dlsr)

    def serialize(self):
        """The report block in wire form."""
        if not 0 <= self.fraction_lost <= 0xFF:
            raise ValueError(f"fraction lost {self.fraction_lost} does not fit in 8 bits")
        if not 0 <= self.total_lost <= 0xFFFFFF:
            raise ValueError(f"total lost {self.total_lost} does not fit in 24 bits")
        return _RECEIVER_REPORT.pack(
            self.ssrc,
            (self.fraction_lost << 24) | self.total_lost,
            self.last_seq,
            self.jitter,
            self.last_sender_report,
            self.delay_since_last_sender_report,
        )


class SenderReportPacket(RtcpPacket):
    """An SR packet: the common header followed by sender reports."""

    def __init__(self):
        super().__init__(RtcpType.SR)
        self._reports = []

    @property
    def reports(self):
        """The carried sender reports, in order."""
        return list(self._reports)

    @classmethod
    def parse(cls, data):
        """Read an SR packet; a too-short body yields a packet with no report."""
        CommonHeader.parse(data)
        packet = cls()
        report = SenderReport.parse(data[COMMON_HEADER_SIZE:])
        if report is not None:
            packet.add_report(report)
        return packet

    def add_report(self, report):
        """Append a sender report."""
        self._reports.append(report)

    def size(self):
        return COMMON_HEADER_SIZE + SENDER_REPORT_SIZE * len(self._reports)

    def count(self):
        return 0

    def serialize(self):
        """Common header followed by every report."""
        return super().serialize() + b"".join(r.serialize() for r in self._reports)


class ReceiverReportPacket(RtcpPacket):
    """An RR packet: common header, the reporter's SSRC and report blocks."""

    def __init__(self, ssrc=0):
        super().__init__(RtcpType.RR)
        self.ssrc = ssrc
        self._reports = []

    @property
    def reports(self):
        """The carried report blocks, in order."""
        return list(self._reports)

    @classmethod
    def parse(cls, data, offset=0):
        """Read an RR packet, or None if it lacks the reporter SSRC.

        ``offset`` is where the first report block starts; zero means right
        after the reporter SSRC. At most ``count`` blocks are read.
        """
        if len(data) < COMMON_HEADER_SIZE + _SSRC_SIZE:
            _log.error("not enough space for receiver report packet, packet discarded")
            return None
        header = CommonHeader.parse(data)
        packet = cls(get_4_bytes(data, COMMON_HEADER_SIZE))
        if offset == 0:
            offset = COMMON_HEADER_SIZE + _SSRC_SIZE
        remaining = header.count
        while remaining and len(data) > offset:
            remaining -= 1
            report = ReceiverReport.parse(data[offset:])
            if report is None:
                return packet
            packet.add_report(report)
            offset += report.size
        return packet

    def add_report(self, report):
        """Append a report block."""
        self._reports.append(report)

    def size(self):
        return COMMON_HEADER_SIZE + _SSRC_SIZE + RECEIVER_REPORT_SIZE * len(self._reports)

    def count(self):
        return len(self._reports)

    def serialize(self):
        """Common header, reporter SSRC, then every report block."""
        return (
            super().serialize()
            + struct.pack(">I", self.ssrc)
            + b"".join(r.serialize() for r in self._reports)
        )