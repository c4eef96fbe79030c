"""Wrap-aware sequence number comparison and dropped-input renumbering."""

from __future__ import annotations

from bisect import bisect_left, insort

__all__ = ["SeqManager", "seq_lower_than", "seq_higher_than"]


def _max_value(bits):
    if bits < 1:
        raise ValueError(f"sequence width must be at least one bit, got {bits}")
    return (1 << bits) - 1


def seq_lower_than(lhs, rhs, bits):
    """Return True if ``lhs`` precedes ``rhs`` in a ``bits``-wide sequence space."""
    half = _max_value(bits) // 2
    return (rhs > lhs and rhs - lhs <= half) or (lhs > rhs and lhs - rhs > half)


def seq_higher_than(lhs, rhs, bits):
    """Return True if ``lhs`` follows ``rhs`` in a ``bits``-wide sequence space."""
    half = _max_value(bits) // 2
    return (lhs > rhs and lhs - rhs <= half) or (rhs > lhs and rhs - lhs > half)


class SeqManager:
    """Maps input sequence numbers to a gap-free output sequence.

    Inputs marked as dropped are skipped, and the outputs of later inputs are
    shifted down so the output sequence stays contiguous.
    """

    def __init__(self, bits=16, initial_output=0):
        self._bits = bits
        self._max = _max_value(bits)
        self._initial_output = initial_output
        self._started = False
        self._base = 0
        self._max_input = 0
        self._max_output = 0
        self._dropped = []

    def is_seq_lower_than(self, lhs, rhs):
        """Wrap-aware ``lhs < rhs`` for this manager's sequence width."""
        return seq_lower_than(lhs, rhs, self._bits)

    def is_seq_higher_than(self, lhs, rhs):
        """Wrap-aware ``lhs > rhs`` for this manager's sequence width."""
        return seq_higher_than(lhs, rhs, self._bits)

    def sync(self, value):
        """Make ``value`` continue the output sequence from the highest output."""
        self._base = (self._max_output - value) & self._max
        self._max_input = value
        self._dropped.clear()

    def drop(self, value):
        """Mark ``value`` as dropped if it is newer than every input seen."""
        if self.is_seq_higher_than(value, self._max_input):
            self._max_input = value
            insort(self._dropped, value)
            self._clear_dropped()

    def input(self, value):
        """Return the output sequence number for ``value``, or None if it was dropped."""
        base = self._base

        if self._dropped:
            if self._started and self.is_seq_higher_than(value, self._max_input):
                self._max_input = value
            self._clear_dropped()
            base = self._base

            if self._dropped:
                position = bisect_left(self._dropped, value)
                if position < len(self._dropped) and self._dropped[position] == value:
                    return None
                base = (self._base - position) & self._max

        output = (value + base) & self._max

        if not self._started:
            self._started = True
            self._max_input = value
            self._max_output = output
        else:
            if self.is_seq_higher_than(value, self._max_input):
                self._max_input = value
            if self.is_seq_higher_than(output, self._max_output):
                self._max_output = output

        return (output + self._initial_output) & self._max

    def max_input(self):
        """Highest input seen so far."""
        return self._max_input

    def max_output(self):
        """Highest output produced so far, before the initial offset."""
        return self._max_output

    def _clear_dropped(self):
        # Dropped values newer than the highest input belong to a previous cycle.
        if not self._dropped:
            return
        previous = len(self._dropped)
        while self._dropped and self.is_seq_higher_than(self._dropped[0], self._max_input):
            self._dropped.pop(0)
        self._base = (self._base - (previous - len(self._dropped))) & self._max