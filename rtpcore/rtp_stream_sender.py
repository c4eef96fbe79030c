"""Sending side of an RTP stream: stores packets and answers NACKs."""

from __future__ import annotations

import logging

from .byteutils import time_ms
from .retransmission_buffer import RtpRetransmissionBuffer
from .rtp_stream import RtpStream

__all__ = [
    "RtpStreamSender",
    "RETRANSMISSION_BUFFER_MAX_ITEMS",
    "MAX_REQUESTED_PACKETS",
    "DEFAULT_RTT",
    "MAX_RETRANSMISSION_DELAY_FOR_AUDIO_MS",
    "MTU_SIZE",
]

_log = logging.getLogger(__name__)

RETRANSMISSION_BUFFER_MAX_ITEMS = 2500
# The NACKed packet itself plus the 16 packets of its bitmask.
MAX_REQUESTED_PACKETS = 17
DEFAULT_RTT = 100
MAX_RETRANSMISSION_DELAY_FOR_AUDIO_MS = 1000
MTU_SIZE = 1500


class RtpStreamSender(RtpStream):
    """An outgoing RTP stream.

    With NACK enabled in the params, sent packets are kept in a
    retransmission buffer. The listener must provide
    ``on_rtp_stream_retransmit_rtp_packet(stream, packet)``, which is called
    for every packet to be resent.
    """

    def __init__(self, listener, params):
        super().__init__(params)
        self.listener = listener
        self.rtt = 0.0
        self.nack_count = 0
        self.nack_packet_count = 0
        self.transmitted_packets = 0
        self.transmitted_bytes = 0
        self.retransmission_buffer = None
        if params.use_nack:
            self.retransmission_buffer = RtpRetransmissionBuffer(
                RETRANSMISSION_BUFFER_MAX_ITEMS,
                MAX_RETRANSMISSION_DELAY_FOR_AUDIO_MS,
                params.clock_rate,
            )

    def receive_packet(self, packet):
        """Account for an outgoing packet; False if its sequence is invalid."""
        if not self.receive_stream_packet(packet):
            return False
        if self.retransmission_buffer is not None:
            self.store_packet(packet)
        self.transmitted_packets += 1
        self.transmitted_bytes += len(packet)
        return True

    def store_packet(self, packet):
        """Keep ``packet`` for retransmission unless it exceeds the MTU."""
        if len(packet) > MTU_SIZE:
            _log.warning(
                "packet too big [ssrc:%s, seq:%s, size:%d]",
                packet.ssrc,
                packet.sequence_number,
                len(packet),
            )
            return
        self.retransmission_buffer.insert(packet)

    def receive_nack(self, nack_packet):
        """Resend every stored packet requested by ``nack_packet``."""
        self.nack_count += 1
        for nack_item in nack_packet:
            self.nack_packet_count += nack_item.count_requested_packets()
            items = self.fill_retransmission_container(
                nack_item.packet_id, nack_item.lost_packet_bitmask
            )
            for item in items:
                self.listener.on_rtp_stream_retransmit_rtp_packet(self, item.packet)
                self.packet_retransmitted(item.packet)

    def fill_retransmission_container(self, seq, bitmask):
        """Return the stored items to resend for a NACK of ``seq`` and ``bitmask``.

        Items resent within the last RTT are skipped; the others are stamped
        with the current time and their send count is increased.
        """
        if self.retransmission_buffer is None:
            _log.warning("NACK not supported")
            return []

        now_ms = time_ms()
        rtt = int(self.rtt) if self.rtt > 0.0 else DEFAULT_RTT
        current_seq = seq
        requested = True
        container = []

        while requested or bitmask != 0:
            if requested:
                item = self.retransmission_buffer.get(current_seq)
                if item is not None:
                    packet = item.packet
                    packet.ssrc = item.ssrc
                    packet.sequence_number = item.sequence_number
                    packet.timestamp = item.timestamp
                    if item.resent_at_ms != 0 and now_ms - item.resent_at_ms <= rtt:
                        _log.debug(
                            "ignoring retransmission for a packet already resent in "
                            "the last RTT ms [seq:%s, rtt:%s]",
                            item.sequence_number,
                            rtt,
                        )
                    else:
                        item.resent_at_ms = now_ms
                        item.sent_times += 1
                        container.append(item)

            requested = (bitmask & 1) != 0
            bitmask >>= 1
            current_seq = (current_seq + 1) & 0xFFFF

        return container[:MAX_REQUESTED_PACKETS]