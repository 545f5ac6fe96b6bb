"""Data models for decoded capture records and aggregated intervals."""

from __future__ import annotations

from dataclasses import dataclass

NANOS_PER_SECOND = 1_000_000_000


@dataclass(frozen=True, slots=True)
class CaptureHeader:
    """Fields of the classic pcap global header.

    ``byte_order`` is a :mod:`struct` prefix (``"<"`` or ``">"``) matching the
    endianness of the writer, and ``nanosecond`` tells whether the fractional
    part of record timestamps counts nanoseconds instead of microseconds.
    """

    byte_order: str
    nanosecond: bool
    version_major: int
    version_minor: int
    thiszone: int
    sigfigs: int
    snaplen: int
    linktype: int

    @property
    def fraction_scale(self) -> int:
        """Multiplier turning the timestamp fraction into nanoseconds."""

        return 1 if self.nanosecond else 1_000


@dataclass(frozen=True, slots=True)
class PacketRecord:
    """One record of a capture, stripped of its payload.

    ``wire_length`` may exceed ``captured_length`` when the capture was taken
    with a snapshot length shorter than the frames seen on the wire.
    """

    timestamp_ns: int
    captured_length: int
    wire_length: int

    @property
    def timestamp(self) -> float:
        return self.timestamp_ns / NANOS_PER_SECOND


@dataclass(frozen=True, slots=True)
class IntervalSummary:
    """Traffic observed in one aggregation interval.

    ``relative_start`` is the number of seconds between the first record of
    the capture and the first record of this interval. The rates are the raw
    sums divided by the interval length, in units per second.
    """

    relative_start: float
    packet_count: int
    wire_bytes: int
    captured_bytes: int
    packet_rate: float
    wire_byte_rate: float
    captured_byte_rate: float
