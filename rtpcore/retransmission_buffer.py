"""Ordered store of sent RTP packets for answering retransmission requests."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Optional

from .seq_manager import seq_higher_than, seq_lower_than

__all__ = ["RetransmissionItem", "RtpRetransmissionBuffer"]

_log = logging.getLogger(__name__)


def _seq_lower(lhs, rhs):
    return seq_lower_than(lhs, rhs, 16)


def _seq_higher(lhs, rhs):
    return seq_higher_than(lhs, rhs, 16)


def _ts_lower(lhs, rhs):
    return seq_lower_than(lhs, rhs, 32)


def _ts_higher(lhs, rhs):
    return seq_higher_than(lhs, rhs, 32)


@dataclass
class RetransmissionItem:
    """A stored packet together with its original header values."""

    packet: Optional[Any] = None
    ssrc: int = 0
    sequence_number: int = 0
    timestamp: int = 0
    resent_at_ms: int = 0
    sent_times: int = 0

    def reset(self):
        """Release the packet and zero every field."""
        self.packet = None
        self.ssrc = 0
        self.sequence_number = 0
        self.timestamp = 0
        self.resent_at_ms = 0
        self.sent_times = 0


class RtpRetransmissionBuffer:
    """Packets ordered by sequence number, with empty slots for gaps.

    Slot ``i`` holds the packet whose sequence number is the oldest stored
    one plus ``i``, or None if that packet was never stored. Packets older
    than ``max_retransmission_delay_ms`` relative to the newest timestamp are
    evicted, and at most ``max_items`` slots are kept.
    """

    def __init__(self, max_items, max_retransmission_delay_ms, clock_rate):
        if clock_rate <= 0:
            raise ValueError("clock rate must be positive")
        self._max_items = max_items
        self._max_delay_ms = max_retransmission_delay_ms
        self._clock_rate = clock_rate
        self._slots = deque()

    def __len__(self):
        return len(self._slots)

    def slots(self):
        """A list of the slots, oldest first; gaps are None."""
        return list(self._slots)

    def get(self, seq):
        """Return the item stored for ``seq``, or None."""
        oldest = self.oldest()
        if oldest is None:
            return None
        if _seq_lower(seq, oldest.sequence_number):
            return None
        index = (seq - oldest.sequence_number) & 0xFFFF
        if index > len(self._slots) - 1:
            return None
        return self._slots[index]

    def _new_item(self, packet, ssrc, seq, timestamp):
        return RetransmissionItem(packet, ssrc, seq, timestamp, 0, 0)

    def insert(self, packet):
        """Store ``packet`` if it fits the buffer's sequence and timestamp order.

        Packets that are too old, duplicated, or whose timestamp contradicts
        their neighbours are discarded.
        """
        ssrc = packet.ssrc
        seq = packet.sequence_number
        timestamp = packet.timestamp

        if not self._slots:
            self._slots.append(self._new_item(packet, ssrc, seq, timestamp))
            return

        oldest = self.oldest()
        newest = self.newest()

        # Lower seq but higher timestamp than the newest: the sender has reset.
        if _seq_lower(seq, newest.sequence_number) and _ts_higher(timestamp, newest.timestamp):
            _log.warning(
                "packet has lower seq but higher timestamp than newest packet, "
                "emptying the buffer [ssrc:%s, seq:%s, timestamp:%s]",
                ssrc, seq, timestamp,
            )
            self.clear()
            self._slots.append(self._new_item(packet, ssrc, seq, timestamp))
            return

        newest_timestamp = timestamp if _ts_higher(timestamp, newest.timestamp) else newest.timestamp

        if self._clear_too_old_by_timestamp(newest_timestamp):
            if not self._slots:
                _log.warning(
                    "buffer empty after clearing too old packets [seq:%s, timestamp:%s]",
                    seq, timestamp,
                )
                self._slots.append(self._new_item(packet, ssrc, seq, timestamp))
                return
            oldest = self.oldest()
            newest = self.newest()

        if _seq_higher(seq, newest.sequence_number):
            self._insert_newer(packet, ssrc, seq, timestamp, newest)
        elif _seq_lower(seq, oldest.sequence_number):
            self._insert_older(packet, ssrc, seq, timestamp, oldest, newest)
        else:
            self._insert_between(packet, ssrc, seq, timestamp, oldest)

    def _insert_newer(self, packet, ssrc, seq, timestamp, newest):
        if _ts_lower(timestamp, newest.timestamp):
            _log.warning(
                "packet has higher seq but lower timestamp than newest packet, "
                "discarding it [ssrc:%s, seq:%s, timestamp:%s]",
                ssrc, seq, timestamp,
            )
            return

        blank_slots = (seq - newest.sequence_number - 1) & 0xFFFF

        if len(self._slots) + blank_slots + 1 > self._max_items:
            to_remove = (len(self._slots) + blank_slots + 1 - self._max_items) & 0xFFFF
            if to_remove > len(self._slots) - 1:
                _log.warning(
                    "packet has too high seq and forces buffer emptying "
                    "[ssrc:%s, seq:%s, timestamp:%s]",
                    ssrc, seq, timestamp,
                )
                blank_slots = 0
                self.clear()
            else:
                self.remove_oldest(to_remove)

        self._slots.extend([None] * blank_slots)
        self._slots.append(self._new_item(packet, ssrc, seq, timestamp))

    def _insert_older(self, packet, ssrc, seq, timestamp, oldest, newest):
        if self.is_too_old_timestamp(timestamp, newest.timestamp):
            _log.warning("packet's timestamp too old, discarding it [seq:%s, timestamp:%s]", seq, timestamp)
            return

        if _ts_higher(timestamp, oldest.timestamp):
            _log.warning(
                "packet has lower seq but higher timestamp than oldest packet, "
                "discarding it [ssrc:%s, seq:%s, timestamp:%s]",
                ssrc, seq, timestamp,
            )
            return

        blank_slots = (oldest.sequence_number - seq - 1) & 0xFFFF

        if len(self._slots) + blank_slots + 1 > self._max_items:
            _log.warning(
                "discarding received old packet to not exceed max buffer size "
                "[ssrc:%s, seq:%s, timestamp:%s]",
                ssrc, seq, timestamp,
            )
            return

        self._slots.extendleft([None] * blank_slots)
        self._slots.appendleft(self._new_item(packet, ssrc, seq, timestamp))

    def _insert_between(self, packet, ssrc, seq, timestamp, oldest):
        if self.get(seq) is not None:
            _log.debug("packet already in the buffer, discarding [seq:%s, timestamp:%s]", seq, timestamp)
            return

        index = (seq - oldest.sequence_number) & 0xFFFF
        if index >= len(self._slots):
            return

        older = next(
            (item for item in reversed(list(self._slots)[:index]) if item is not None), None
        )
        if older is not None and timestamp < older.timestamp:
            _log.warning(
                "packet timestamp is lower than timestamp of immediate older packet, "
                "discarding it [ssrc:%s, seq:%s, timestamp:%s]",
                ssrc, seq, timestamp,
            )
            return

        newer = next(
            (item for item in list(self._slots)[index + 1 :] if item is not None), None
        )
        if newer is not None and timestamp > newer.timestamp:
            _log.warning(
                "packet timestamp is higher than timestamp of immediate newer packet, "
                "discarding it [ssrc:%s, seq:%s, timestamp:%s]",
                ssrc, seq, timestamp,
            )
            return

        self._slots[index] = self._new_item(packet, ssrc, seq, timestamp)

    def clear(self):
        """Drop every stored packet."""
        for item in self._slots:
            if item is not None:
                item.reset()
        self._slots.clear()

    def oldest(self):
        """The item in the first slot, or None if the buffer is empty."""
        return self._slots[0] if self._slots else None

    def newest(self):
        """The item in the last slot, or None if the buffer is empty."""
        return self._slots[-1] if self._slots else None

    def remove_oldest(self, count=1):
        """Remove at least ``count`` slots from the front, then any leading gaps."""
        intended = len(self._slots) - count
        while self._slots and len(self._slots) > intended:
            self._remove_one_oldest()

    def _remove_one_oldest(self):
        item = self._slots.popleft()
        if item is not None:
            item.reset()
        while self._slots and self._slots[0] is None:
            self._slots.popleft()

    def _clear_too_old_by_timestamp(self, newest_timestamp):
        removed = False
        while self._slots:
            if not self.is_too_old_timestamp(self._slots[0].timestamp, newest_timestamp):
                break
            self._remove_one_oldest()
            removed = True
        return removed

    def is_too_old_timestamp(self, timestamp, newest_timestamp):
        """True if ``timestamp`` lags ``newest_timestamp`` by more than the allowed delay."""
        if _ts_higher(timestamp, newest_timestamp):
            return False
        diff = (newest_timestamp - timestamp) & 0xFFFFFFFF
        delay_ms = (diff * 1000 // self._clock_rate) & 0xFFFFFFFF
        return delay_ms > self._max_delay_ms