import pytest

from rtpcore.rtcp_packet import (
    COMMON_HEADER_SIZE,
    CommonHeader,
    RtcpPacket,
    RtcpType,
    is_rtcp,
    type_to_string,
)


class _Sized(RtcpPacket):
    def __init__(self, size, count):
        super().__init__(RtcpType.SR)
        self._size = size
        self._count = count

    def size(self):
        return self._size

    def count(self):
        return self._count


def test_is_rtcp_accepts_version_two_rtcp_type():
    assert is_rtcp(bytes([0x80, int(RtcpType.RR), 0, 1, 0, 0, 0, 0]))


@pytest.mark.parametrize(
    "data",
    [
        b"",
        bytes([0x80, 200, 0]),
        bytes([0x40, 200, 0, 0]),
        bytes([0x80, 100, 0, 0]),
        bytes([0x80, 224, 0, 0]),
    ],
)
def test_is_rtcp_rejects(data):
    assert not is_rtcp(data)


def test_type_to_string_known_and_unknown():
    assert type_to_string(RtcpType.SR) == "SR"
    assert type_to_string(RtcpType.RTPFB) == "RTPFB"
    assert type_to_string(int(RtcpType.PSFB)) == "PSFB"
    assert type_to_string(250) == "UNKNOWN"


def test_common_header_round_trip():
    header = CommonHeader(version=2, padding=True, count=17, packet_type=205, length=300)
    parsed = CommonHeader.parse(header.to_bytes())
    assert parsed == header
    assert parsed.packet_size == (300 + 1) * 4


def test_common_header_parse_too_short():
    with pytest.raises(ValueError):
        CommonHeader.parse(b"\x80\xc8")


def test_common_header_rejects_count_overflow():
    with pytest.raises(ValueError):
        CommonHeader(count=32).to_bytes()


def test_bare_packet_serializes_header_only():
    packet = RtcpPacket(RtcpType.RR)
    assert packet.size() == COMMON_HEADER_SIZE
    assert packet.count() == 0
    assert packet.serialize() == b"\x80\xc9\x00\x00"


def test_subclass_header_reflects_size_and_count():
    data = _Sized(12, 3).serialize()
    header = CommonHeader.parse(data)
    assert header.version == 2
    assert header.count == 3
    assert header.packet_type == int(RtcpType.SR)
    assert header.packet_size == 12
    assert is_rtcp(data)


def test_serialize_rejects_unaligned_size():
    with pytest.raises(ValueError):
        RtcpPacket.serialize(_Sized(10, 0))


def test_unknown_type_rejected():
    with pytest.raises(ValueError):
        RtcpPacket(150)