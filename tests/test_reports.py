import pytest

from rtpcore.reports import (
    RECEIVER_REPORT_SIZE,
    SENDER_REPORT_SIZE,
    ReceiverReport,
    ReceiverReportPacket,
    SenderReport,
    SenderReportPacket,
)


def _sender_report():
    return SenderReport(0x11223344, 5, 6, 7, 8, 9)


def _receiver_report(ssrc=0xAABBCCDD):
    return ReceiverReport(ssrc, 12, 345, 1000, 20, 30, 40)


def test_report_sizes_fixed_by_format():
    assert len(_sender_report().serialize()) == SENDER_REPORT_SIZE == 24
    assert len(_receiver_report().serialize()) == RECEIVER_REPORT_SIZE == 24


def test_sender_report_round_trip():
    report = _sender_report()
    wire = report.serialize()
    assert len(wire) == SENDER_REPORT_SIZE
    assert wire[:4] == bytes([0x11, 0x22, 0x33, 0x44])
    assert SenderReport.parse(wire) == report


def test_sender_report_too_short():
    assert SenderReport.parse(b"\x00" * 23) is None


def test_receiver_report_round_trip():
    report = _receiver_report()
    assert ReceiverReport.parse(report.serialize()) == report


def test_receiver_report_packs_fraction_and_total_lost():
    wire = ReceiverReport(1, 0xFF, 0x010203).serialize()
    assert wire[4:8] == bytes([0xFF, 0x01, 0x02, 0x03])


def test_receiver_report_rejects_oversized_total_lost():
    with pytest.raises(ValueError):
        ReceiverReport(total_lost=1 << 24).serialize()


def test_receiver_report_too_short():
    assert ReceiverReport.parse(b"\x00" * 10) is None


def test_sender_report_packet_header_bytes():
    packet = SenderReportPacket()
    packet.add_report(_sender_report())
    wire = packet.serialize()
    assert len(wire) == packet.size() == 28
    assert wire[:4] == bytes([0x80, 200, 0x00, 0x06])


def test_sender_report_packet_round_trip():
    packet = SenderReportPacket()
    packet.add_report(_sender_report())
    parsed = SenderReportPacket.parse(packet.serialize())
    assert parsed.reports == [_sender_report()]


def test_sender_report_packet_with_short_body_has_no_report():
    parsed = SenderReportPacket.parse(bytes([0x80, 200, 0, 1]) + b"\x00" * 4)
    assert parsed.reports == []


def test_receiver_report_packet_header_bytes():
    packet = ReceiverReportPacket(0x01020304)
    packet.add_report(_receiver_report())
    wire = packet.serialize()
    assert len(wire) == packet.size() == 32
    assert wire[:8] == bytes([0x81, 201, 0x00, 0x07, 0x01, 0x02, 0x03, 0x04])


def test_receiver_report_packet_round_trip():
    packet = ReceiverReportPacket(77)
    packet.add_report(_receiver_report(1))
    packet.add_report(_receiver_report(2))
    parsed = ReceiverReportPacket.parse(packet.serialize())
    assert parsed.ssrc == 77
    assert parsed.reports == [_receiver_report(1), _receiver_report(2)]
    assert parsed.count() == 2


def test_receiver_report_packet_stops_at_missing_block():
    packet = ReceiverReportPacket(5)
    packet.add_report(_receiver_report(1))
    packet.add_report(_receiver_report(2))
    wire = packet.serialize()
    parsed = ReceiverReportPacket.parse(wire[: len(wire) - 4])
    assert parsed.reports == [_receiver_report(1)]


def test_receiver_report_packet_reads_no_more_than_count():
    packet = ReceiverReportPacket(5)
    packet.add_report(_receiver_report(1))
    wire = bytearray(packet.serialize())
    wire += _receiver_report(2).serialize()
    parsed = ReceiverReportPacket.parse(bytes(wire))
    assert parsed.reports == [_receiver_report(1)]


def test_receiver_report_packet_too_short():
    assert ReceiverReportPacket.parse(bytes([0x80, 201, 0, 1])) is None


def test_empty_receiver_report_packet_round_trip():
    parsed = ReceiverReportPacket.parse(ReceiverReportPacket(9).serialize())
    assert parsed.ssrc == 9
    assert parsed.reports == []