# rtpcore

Building blocks for sending RTP media streams and handling the RTCP packets
that go with them: packet parsing and building, wrap-around aware sequence
numbers, a retransmission buffer that answers NACK requests, and sender /
receiver reports. Pure Python, no dependencies.

## Modules

- `rtpcore.byteutils`: big-endian reads and writes into byte arrays
  (`get_1_byte` … `get_8_bytes`, `set_1_byte` … `set_8_bytes`),
  `bytes_to_hex` dumps, `pad_to_4_bytes`, `count_set_bits`, monotonic clocks
  (`time_ms`, `time_us`, `time_ns`), and address helpers `get_family` and
  `get_address_info`.
- `rtpcore.buffer`: `Buffer`, a growable byte buffer with separate size and
  capacity, and `ZeroOnFreeBuffer`, which wipes bytes it no longer holds.
- `rtpcore.cow_buffer`: `CopyOnWriteBuffer`, which shares storage between
  copies and slices until one of them is modified.
- `rtpcore.seq_manager`: `seq_lower_than` / `seq_higher_than` for comparing
  sequence numbers of any bit width across wrap-around, and `SeqManager`,
  which maps inputs to a gap-free output sequence when inputs are dropped.
- `rtpcore.rtp_packet`: `is_rtp` and `RtpPacket` (`parse`, `build`, and the
  `ssrc`, `sequence_number`, `timestamp`, `payload_type`, `marker` and
  `payload` properties). CSRC lists and header extensions are not
  interpreted; everything after the 12-byte fixed header is payload.
- `rtpcore.retransmission_buffer`: `RtpRetransmissionBuffer`, which keeps
  sent packets ordered by sequence number and timestamp, with empty slots
  for gaps, and evicts packets older than the allowed delay.
- `rtpcore.rtp_stream`: `RtpStreamParams` and `RtpStream`, which validates
  incoming sequence numbers (discarding large jumps and re-synchronising
  after two consecutive ones) and tracks the newest timestamp.
- `rtpcore.rtp_stream_sender`: `RtpStreamSender`, which stores outgoing
  packets when `use_nack` is set and resends them when a NACK arrives.
- `rtpcore.rtcp_packet`: `RtcpType`, `CommonHeader`, `is_rtcp`,
  `type_to_string` and the `RtcpPacket` base class.
- `rtpcore.reports`: `SenderReport`, `ReceiverReport`, `SenderReportPacket`
  and `ReceiverReportPacket`.
- `rtpcore.feedback`: feedback message types, `FeedbackPacket`, `NackItem`,
  `FeedbackRtpNackPacket`, `parse_feedback_rtp` (understands NACK only) and
  `parse_feedback_ps` (recognises no payload-specific message and always
  returns `None`).
- `rtpcore.compound`: `CompoundPacket` for sending an SR and an RR part
  together, and `parse_rtcp`, which walks possibly compound RTCP data and
  returns the last packet parsed.
- `rtpcore.heartbeat`: a fixed 20-byte `HeartbeatPacket` with a magic
  cookie, SSRC and 64-bit time.

## Installing

```
pip install .
```

## Examples

Building and parsing RTP:

```python
from rtpcore.rtp_packet import RtpPacket
from rtpcore.seq_manager import seq_higher_than

packet = RtpPacket.build(
    ssrc=1234, sequence_number=65535, timestamp=9000,
    payload_type=111, marker=False, payload=b"hello",
)
parsed = RtpPacket.parse(bytes(packet))
assert parsed.sequence_number == 65535
assert seq_higher_than(0, 65535, 16)
```

Answering a NACK. The listener passed to `RtpStreamSender` must provide
`on_rtp_stream_retransmit_rtp_packet(stream, packet)`:

```python
from rtpcore.feedback import FeedbackRtpNackPacket, NackItem
from rtpcore.rtp_packet import RtpPacket
from rtpcore.rtp_stream import RtpStreamParams
from rtpcore.rtp_stream_sender import RtpStreamSender

resent = []

class Listener:
    def on_rtp_stream_retransmit_rtp_packet(self, stream, packet):
        resent.append(packet.sequence_number)

sender = RtpStreamSender(Listener(), RtpStreamParams(ssrc=1234, use_nack=True))
for seq in range(10):
    sender.receive_packet(RtpPacket.build(
        ssrc=1234, sequence_number=seq, timestamp=seq * 960,
        payload_type=111, payload=b"x",
    ))

nack = FeedbackRtpNackPacket(sender_ssrc=1, media_ssrc=1234)
nack.add_item(NackItem(3, 0b101))   # packet 3, plus 4 and 6
sender.receive_nack(nack)
assert resent == [3, 4, 6]
```

Sending and parsing RTCP:

```python
from rtpcore.compound import CompoundPacket, parse_rtcp
from rtpcore.reports import ReceiverReport

compound = CompoundPacket()
compound.add_receiver_report(ReceiverReport(ssrc=1234, fraction_lost=12, last_seq=100))
wire = compound.serialize()
packet = parse_rtcp(wire)
assert packet.reports[0].last_seq == 100
```

## What it does not do

`rtpcore` works on bytes and objects only. It opens no sockets, runs no
event loop or timers, and has no command-line program; sending packets and
scheduling reports are left to the application. There is no receiving-side
stream class: jitter, loss statistics and NACK generation for incoming
streams are not provided.

## Running the tests

```
pip install ".[test]"
pytest
```