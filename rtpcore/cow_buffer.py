"""Byte buffer whose storage is shared between copies until one writes."""

from __future__ import annotations

from .buffer import Buffer

__all__ = ["CopyOnWriteBuffer"]


class _SharedStorage(Buffer):
    """A Buffer that counts how many CopyOnWriteBuffers refer to it."""

    def __init__(self, data=None, size=None, capacity=None):
        super().__init__(data, size, capacity)
        self.refs = 0

    def has_one_ref(self):
        return self.refs == 1

    def view(self, start, stop):
        return memoryview(self._data)[start:stop]


class CopyOnWriteBuffer:
    """A view onto shared byte storage, copied only when modified while shared.

    Copies and slices share storage with the original. Any mutation of a
    buffer whose storage is shared first gives it a private copy.
    """

    def __init__(self, data=None, size=None, capacity=None):
        self._buffer = None
        self._offset = 0
        self._size = 0

        if isinstance(data, CopyOnWriteBuffer):
            self._share(data)
            return

        if data is not None:
            raw = bytes(data)
            size = len(raw) if size is None else size
            capacity = size if capacity is None else capacity
            if size > 0 or capacity > 0:
                self._set_storage(_SharedStorage(raw, size, capacity))
                self._size = size
            elif size > len(raw):
                raise ValueError(f"size {size} exceeds the {len(raw)} bytes given")
            return

        size = size or 0
        capacity = size if capacity is None else capacity
        if size < 0 or capacity < 0:
            raise ValueError("size and capacity must not be negative")
        if size > 0 or capacity > 0:
            self._set_storage(_SharedStorage(size=size, capacity=capacity))
        self._size = size

    def __del__(self):
        storage = getattr(self, "_buffer", None)
        if storage is not None:
            storage.refs -= 1

    def _set_storage(self, storage):
        if storage is not None:
            storage.refs += 1
        if self._buffer is not None:
            self._buffer.refs -= 1
        self._buffer = storage

    def _share(self, other):
        if other is self:
            return
        self._set_storage(other._buffer)
        self._offset = other._offset
        self._size = other._size

    def __len__(self):
        return self._size

    def __eq__(self, other):
        if not isinstance(other, CopyOnWriteBuffer):
            return NotImplemented
        return self._size == other._size and bytes(self) == bytes(other)

    __hash__ = None

    def __getitem__(self, index):
        if isinstance(index, slice):
            return bytes(self)[index]
        if index < 0:
            index += self._size
        if not 0 <= index < self._size:
            raise IndexError("buffer index out of range")
        return self._buffer[self._offset + index]

    def __bytes__(self):
        if self._buffer is None:
            return b""
        return self._buffer[self._offset : self._offset + self._size]

    def __repr__(self):
        return f"CopyOnWriteBuffer({bytes(self)!r}, capacity={self.capacity()})"

    def __copy__(self):
        return self.copy()

    def capacity(self):
        """Bytes available from this view's start without reallocating."""
        if self._buffer is None:
            return 0
        return self._buffer.capacity() - self._offset

    def cdata(self):
        """The contents as bytes, without unsharing; None if there is no storage."""
        if self._buffer is None:
            return None
        return bytes(self)

    def mutable_data(self):
        """A writable memoryview of the contents, unsharing the storage first.

        Returns None if there is no storage.
        """
        if self._buffer is None:
            return None
        self._unshare_and_ensure_capacity(self.capacity())
        return self._buffer.view(self._offset, self._offset + self._size)

    def copy(self):
        """A new buffer sharing this buffer's storage."""
        return CopyOnWriteBuffer(self)

    def is_shared_with(self, other):
        """True if both buffers currently refer to the same storage."""
        return self._buffer is not None and self._buffer is other._buffer

    def set_data(self, data):
        """Replace the contents; another CopyOnWriteBuffer is shared, not copied."""
        if isinstance(data, CopyOnWriteBuffer):
            self._share(data)
            return
        raw = bytes(data)
        if self._buffer is None:
            self._set_storage(_SharedStorage(raw) if raw else None)
        elif not self._buffer.has_one_ref():
            self._set_storage(_SharedStorage(raw, len(raw), self.capacity()))
        else:
            self._buffer.set_data(raw)
        self._offset = 0
        self._size = len(raw)

    def append_data(self, data):
        """Append bytes or the contents of another buffer."""
        raw = bytes(data)
        if self._buffer is None:
            if raw:
                self._set_storage(_SharedStorage(raw))
                self._offset = 0
                self._size = len(raw)
            return
        self._unshare_and_ensure_capacity(max(self.capacity(), self._size + len(raw)))
        # Drop whatever lies to the right of this view before appending.
        self._buffer.set_size(self._offset + self._size)
        self._buffer.append_data(raw)
        self._size += len(raw)

    def set_size(self, size):
        """Truncate or extend the contents, keeping what is there."""
        if size < 0:
            raise ValueError("size must not be negative")
        if self._buffer is None:
            if size > 0:
                self._set_storage(_SharedStorage(size=size))
                self._offset = 0
                self._size = size
            return
        if size <= self._size:
            self._size = size
            return
        self._unshare_and_ensure_capacity(max(self.capacity(), size))
        self._buffer.set_size(size + self._offset)
        self._size = size

    def ensure_capacity(self, capacity):
        """Make room for at least ``capacity`` bytes."""
        if self._buffer is None:
            if capacity > 0:
                self._set_storage(_SharedStorage(size=0, capacity=capacity))
                self._offset = 0
                self._size = 0
            return
        if capacity <= self.capacity():
            return
        self._unshare_and_ensure_capacity(capacity)

    def clear(self):
        """Empty the buffer, keeping its capacity."""
        if self._buffer is None:
            return
        if self._buffer.has_one_ref():
            self._buffer.clear()
        else:
            self._set_storage(_SharedStorage(size=0, capacity=self.capacity()))
        self._offset = 0
        self._size = 0

    def swap(self, other):
        """Exchange storage and view with another buffer."""
        self._buffer, other._buffer = other._buffer, self._buffer
        self._offset, other._offset = other._offset, self._offset
        self._size, other._size = other._size, self._size

    def slice(self, offset, length):
        """A buffer sharing storage that views ``length`` bytes from ``offset``."""
        if offset < 0 or length < 0 or offset + length > self._size:
            raise IndexError(
                f"slice [{offset}, {offset + length}) outside a {self._size}-byte buffer"
            )
        result = self.copy()
        result._offset += offset
        result._size = length
        return result

    def _unshare_and_ensure_capacity(self, new_capacity):
        if self._buffer.has_one_ref() and new_capacity <= self.capacity():
            return
        contents = bytes(self)
        self._set_storage(_SharedStorage(contents, self._size, new_capacity))
        self._offset = 0