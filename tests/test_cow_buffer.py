import pytest

from rtpcore.cow_buffer import CopyOnWriteBuffer


def test_empty_buffer():
    buf = CopyOnWriteBuffer()
    assert len(buf) == 0
    assert buf.capacity() == 0
    assert buf.cdata() is None
    assert buf.mutable_data() is None
    assert bytes(buf) == b""


def test_construct_from_bytes():
    buf = CopyOnWriteBuffer(b"abcd")
    assert bytes(buf) == b"abcd"
    assert len(buf) == 4
    assert buf.capacity() == 4
    assert buf.cdata() == b"abcd"


def test_construct_with_size_and_capacity():
    buf = CopyOnWriteBuffer(b"abcdef", 3, 10)
    assert bytes(buf) == b"abc"
    assert buf.capacity() == 10


def test_construct_uninitialised_size():
    buf = CopyOnWriteBuffer(size=3)
    assert len(buf) == 3
    assert buf.capacity() == 3


def test_construct_capacity_only():
    buf = CopyOnWriteBuffer(size=0, capacity=10)
    assert len(buf) == 0
    assert buf.capacity() == 10


def test_size_larger_than_data_raises():
    with pytest.raises(ValueError):
        CopyOnWriteBuffer(b"ab", 5)


def test_indexing():
    buf = CopyOnWriteBuffer(b"abc")
    assert buf[0] == ord("a")
    assert buf[-1] == ord("c")
    assert buf[1:] == b"bc"
    with pytest.raises(IndexError):
        buf[3]


def test_copy_shares_storage():
    buf = CopyOnWriteBuffer(b"abc")
    other = buf.copy()
    assert other.is_shared_with(buf)
    assert other == buf


def test_mutable_data_unshares():
    buf = CopyOnWriteBuffer(b"abc")
    other = buf.copy()
    view = other.mutable_data()
    view[0] = ord("x")
    assert bytes(other) == b"xbc"
    assert bytes(buf) == b"abc"
    assert not other.is_shared_with(buf)


def test_append_on_shared_leaves_original():
    buf = CopyOnWriteBuffer(b"abc")
    other = buf.copy()
    other.append_data(b"de")
    assert bytes(other) == b"abcde"
    assert bytes(buf) == b"abc"


def test_append_to_empty():
    buf = CopyOnWriteBuffer()
    buf.append_data(b"hi")
    buf.append_data(CopyOnWriteBuffer(b"!"))
    assert bytes(buf) == b"hi!"


def test_slice_views_subrange():
    buf = CopyOnWriteBuffer(b"abcd")
    part = buf.slice(1, 2)
    assert bytes(part) == b"bc"
    assert part.is_shared_with(buf)
    assert part.capacity() == buf.capacity() - 1


def test_slice_append_does_not_touch_original():
    buf = CopyOnWriteBuffer(b"abcd")
    part = buf.slice(1, 2)
    part.append_data(b"z")
    assert bytes(part) == b"bcz"
    assert bytes(buf) == b"abcd"


def test_slice_out_of_range_raises():
    buf = CopyOnWriteBuffer(b"abcd")
    with pytest.raises(IndexError):
        buf.slice(3, 2)


def test_set_data_replaces_contents():
    buf = CopyOnWriteBuffer(b"abcdef")
    other = buf.copy()
    buf.set_data(b"xy")
    assert bytes(buf) == b"xy"
    assert bytes(other) == b"abcdef"
    assert buf.capacity() >= 6


def test_set_data_from_buffer_shares():
    buf = CopyOnWriteBuffer(b"abc")
    target = CopyOnWriteBuffer(b"zzz")
    target.set_data(buf)
    assert target.is_shared_with(buf)
    assert target == buf


def test_set_size_shrink_and_grow():
    buf = CopyOnWriteBuffer(b"abcdef")
    buf.set_size(2)
    assert bytes(buf) == b"ab"
    buf.set_size(4)
    assert len(buf) == 4
    assert bytes(buf)[:2] == b"ab"


def test_set_size_on_empty_creates_storage():
    buf = CopyOnWriteBuffer()
    buf.set_size(5)
    assert len(buf) == 5
    assert buf.capacity() >= 5


def test_ensure_capacity():
    buf = CopyOnWriteBuffer(b"ab")
    buf.ensure_capacity(20)
    assert buf.capacity() >= 20
    assert bytes(buf) == b"ab"


def test_ensure_capacity_on_shared_unshares():
    buf = CopyOnWriteBuffer(b"ab")
    other = buf.copy()
    other.ensure_capacity(20)
    assert not other.is_shared_with(buf)
    assert bytes(other) == bytes(buf)


def test_clear_keeps_capacity():
    buf = CopyOnWriteBuffer(b"abcd")
    capacity = buf.capacity()
    buf.clear()
    assert len(buf) == 0
    assert buf.capacity() == capacity


def test_clear_shared_leaves_other():
    buf = CopyOnWriteBuffer(b"abcd")
    other = buf.copy()
    other.clear()
    assert len(other) == 0
    assert bytes(buf) == b"abcd"
    assert other.capacity() == buf.capacity()


def test_swap():
    first = CopyOnWriteBuffer(b"one")
    second = CopyOnWriteBuffer(b"second")
    first.swap(second)
    assert bytes(first) == b"second"
    assert bytes(second) == b"one"


def test_equality_compares_contents():
    assert CopyOnWriteBuffer(b"abc") == CopyOnWriteBuffer(b"abc")
    assert not CopyOnWriteBuffer(b"abc") == CopyOnWriteBuffer(b"abd")
    assert not CopyOnWriteBuffer(b"ab") == CopyOnWriteBuffer(b"abc")