"""Growable byte buffer with explicit size and capacity."""

from __future__ import annotations

__all__ = ["Buffer", "ZeroOnFreeBuffer"]


def _to_bytes(data):
    if isinstance(data, Buffer):
        return bytes(data)
    if isinstance(data, int):
        return bytes([data])
    return bytes(data)


class Buffer:
    """A byte buffer that tracks size separately from allocated capacity.

    Growing through appends reserves at least 1.5 times the old capacity so
    repeated appends stay linear. Bytes beyond the size are kept until
    overwritten; ``ZeroOnFreeBuffer`` wipes them instead.
    """

    _zero_on_free = False

    def __init__(self, data=None, size=None, capacity=None):
        if data is not None:
            raw = _to_bytes(data)
            if size is None:
                size = len(raw)
            elif size > len(raw):
                raise ValueError(f"size {size} exceeds the {len(raw)} bytes given")
            raw = raw[:size]
        else:
            size = size or 0
            raw = b""
        if size < 0 or (capacity is not None and capacity < 0):
            raise ValueError("size and capacity must not be negative")
        self._capacity = max(size, capacity if capacity is not None else size)
        self._data = bytearray(self._capacity)
        self._data[: len(raw)] = raw
        self._size = size

    def __len__(self):
        return self._size

    def __eq__(self, other):
        if not isinstance(other, Buffer):
            return NotImplemented
        return self._size == other._size and bytes(self) == bytes(other)

    __hash__ = None

    def _normalise_index(self, index):
        if index < 0:
            index += self._size
        if not 0 <= index < self._size:
            raise IndexError("buffer index out of range")
        return index

    def __getitem__(self, index):
        if isinstance(index, slice):
            return bytes(self._data[: self._size][index])
        return self._data[self._normalise_index(index)]

    def __setitem__(self, index, value):
        self._data[self._normalise_index(index)] = value

    def __iter__(self):
        return iter(bytes(self))

    def __bytes__(self):
        return bytes(self._data[: self._size])

    def __repr__(self):
        return f"{type(self).__name__}({bytes(self)!r}, capacity={self._capacity})"

    def capacity(self):
        """Number of bytes the buffer can hold without reallocating."""
        return self._capacity

    def set_data(self, data):
        """Replace the contents with ``data``."""
        old_size = self._size
        self._size = 0
        self.append_data(data)
        if self._size < old_size:
            self._zero_trailing(old_size - self._size)

    def set_data_with(self, max_elements, setter):
        """Replace the contents using ``setter`` on a writable view.

        ``setter`` receives a memoryview of exactly ``max_elements`` bytes and
        returns how many it wrote. Returns that count.
        """
        old_size = self._size
        self._size = 0
        written = self.append_with(max_elements, setter)
        if self._size < old_size:
            self._zero_trailing(old_size - self._size)
        return written

    def append_data(self, data):
        """Append bytes, another buffer, or a single byte value."""
        raw = _to_bytes(data)
        new_size = self._size + len(raw)
        self._ensure_capacity_with_headroom(new_size, True)
        self._data[self._size : new_size] = raw
        self._size = new_size

    def append_with(self, max_elements, setter):
        """Append at most ``max_elements`` bytes written by ``setter``.

        ``setter`` receives a memoryview of exactly ``max_elements`` bytes and
        returns how many it wrote. Returns that count.
        """
        old_size = self._size
        self.set_size(old_size + max_elements)
        view = memoryview(self._data)[old_size : old_size + max_elements]
        try:
            written = setter(view)
        finally:
            view.release()
        if not 0 <= written <= max_elements:
            self._size = old_size
            raise ValueError(
                f"setter reported {written} bytes written into a {max_elements}-byte view"
            )
        self._size = old_size + written
        return written

    def set_size(self, size):
        """Truncate or extend the buffer, keeping existing contents."""
        if size < 0:
            raise ValueError("size must not be negative")
        old_size = self._size
        self._ensure_capacity_with_headroom(size, True)
        self._size = size
        if size < old_size:
            self._zero_trailing(old_size - size)

    def ensure_capacity(self, capacity):
        """Make room for at least ``capacity`` bytes without extra headroom."""
        self._ensure_capacity_with_headroom(capacity, False)

    def clear(self):
        """Drop the contents but keep the allocated capacity."""
        self._maybe_zero_complete()
        self._size = 0

    def swap(self, other):
        """Exchange contents and capacity with another buffer."""
        self._data, other._data = other._data, self._data
        self._size, other._size = other._size, self._size
        self._capacity, other._capacity = other._capacity, self._capacity

    def _ensure_capacity_with_headroom(self, capacity, extra_headroom):
        if capacity <= self._capacity:
            return
        if extra_headroom:
            new_capacity = max(capacity, self._capacity + self._capacity // 2)
        else:
            new_capacity = capacity
        new_data = bytearray(new_capacity)
        new_data[: self._size] = self._data[: self._size]
        self._maybe_zero_complete()
        self._data = new_data
        self._capacity = new_capacity

    def _maybe_zero_complete(self):
        if self._zero_on_free and self._capacity > 0:
            self._data[:] = bytes(self._capacity)

    def _zero_trailing(self, count):
        if self._zero_on_free:
            self._data[self._size : self._size + count] = bytes(count)


class ZeroOnFreeBuffer(Buffer):
    """A buffer that wipes bytes it no longer holds."""

    _zero_on_free = True