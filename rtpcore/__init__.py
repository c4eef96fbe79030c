"""RTP/RTCP packets, sequence tracking, buffers and NACK retransmission."""

__version__ = "0.1.0"

__all__ = [
    "buffer",
    "byteutils",
    "compound",
    "cow_buffer",
    "feedback",
    "heartbeat",
    "reports",
    "retransmission_buffer",
    "rtcp_packet",
    "rtp_packet",
    "rtp_stream",
    "rtp_stream_sender",
    "seq_manager",
]