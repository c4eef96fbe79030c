"""Per-SSRC RTP stream state: sequence validation and timestamp tracking."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .byteutils import time_ms
from .seq_manager import seq_higher_than

__all__ = ["RtpStreamParams", "RtpStream", "MAX_DROPOUT", "MAX_MISORDER", "RTP_SEQ_MOD"]

_log = logging.getLogger(__name__)

MAX_DROPOUT = 3000
MAX_MISORDER = 1500
RTP_SEQ_MOD = 1 << 16


@dataclass
class RtpStreamParams:
    """Static description of an RTP stream."""

    ssrc: int = 0
    payload_type: int = 0
    clock_rate: int = 48000
    use_nack: bool = False


class RtpStream:
    """Validates incoming sequence numbers and tracks the newest timestamp.

    Sequence numbers that jump too far are discarded, unless two consecutive
    ones arrive after such a jump, in which case the stream re-synchronises.
    """

    def __init__(self, params):
        self.params = params
        self.started = False
        self.base_seq = 0
        self.max_seq = 0
        self.bad_seq = 0
        self.cycles = 0
        self.packets_discarded = 0
        self.packets_retransmitted = 0
        self.max_packet_ts = 0
        self.max_packet_ms = 0

    @property
    def ssrc(self):
        """The stream's synchronisation source."""
        return self.params.ssrc

    def receive_stream_packet(self, packet):
        """Account for ``packet``; return False if its sequence number is invalid."""
        seq = packet.sequence_number

        if not self.started:
            self._init_sequence(seq)
            self.started = True
            self.max_seq = (seq - 1) & 0xFFFF
            self.max_packet_ts = packet.timestamp
            self.max_packet_ms = time_ms()

        if not self._update_sequence(packet):
            _log.warning("invalid packet [ssrc:%s, seq:%s]", packet.ssrc, seq)
            return False

        if seq_higher_than(packet.timestamp, self.max_packet_ts, 32):
            self.max_packet_ts = packet.timestamp
            self.max_packet_ms = time_ms()

        return True

    def packet_retransmitted(self, packet):
        """Record that ``packet`` was retransmitted."""
        self.packets_retransmitted += 1

    def _update_sequence(self, packet):
        seq = packet.sequence_number
        udelta = (seq - self.max_seq) & 0xFFFF

        if udelta < MAX_DROPOUT:
            # In order, with a permissible gap; a lower value means a wrap.
            if seq < self.max_seq:
                self.cycles += RTP_SEQ_MOD
            self.max_seq = seq
        elif udelta <= RTP_SEQ_MOD - MAX_MISORDER:
            if seq == self.bad_seq:
                # Two sequential packets after a jump: the sender restarted.
                _log.warning(
                    "too bad sequence number, re-syncing RTP [ssrc:%s, seq:%s]",
                    packet.ssrc, seq,
                )
                self._init_sequence(seq)
                self.max_packet_ts = packet.timestamp
                self.max_packet_ms = time_ms()
            else:
                _log.warning(
                    "bad sequence number, ignoring packet [ssrc:%s, seq:%s]",
                    packet.ssrc, seq,
                )
                self.bad_seq = (seq + 1) & (RTP_SEQ_MOD - 1)
                self.packets_discarded += 1
                return False
        # Otherwise an acceptable misorder: nothing to update.
        return True

    def _init_sequence(self, seq):
        self.base_seq = seq
        self.max_seq = seq
        self.bad_seq = RTP_SEQ_MOD + 1