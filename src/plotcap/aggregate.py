"""Fold a stream of packet records into fixed-width interval summaries."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Iterable, Iterator, Optional, Tuple

from .interval import IntervalLike, interval_to_ns
from .records import NANOS_PER_SECOND, IntervalSummary, PacketRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class IntervalBucket:
    """Running totals for the half-open window ``[start_ns, start_ns + interval)``."""

    start_ns: int
    packet_count: int = 0
    wire_bytes: int = 0
    captured_bytes: int = 0

    @classmethod
    def open(cls, record: PacketRecord) -> "IntervalBucket":
        return cls(start_ns=record.timestamp_ns).fold(record)

    def fold(self, record: PacketRecord) -> "IntervalBucket":
        return IntervalBucket(
            start_ns=self.start_ns,
            packet_count=self.packet_count + 1,
            wire_bytes=self.wire_bytes + record.wire_length,
            captured_bytes=self.captured_bytes + record.captured_length,
        )

    def contains(self, record: PacketRecord, interval_ns: int) -> bool:
        # Only the upper edge is checked: records older than start_ns
        # (out-of-order captures) stay in the open bucket.
        return record.timestamp_ns < self.start_ns + interval_ns

    def summarize(self, origin_ns: int, interval_ns: int) -> IntervalSummary:
        seconds = interval_ns / NANOS_PER_SECOND
        return IntervalSummary(
            relative_start=(self.start_ns - origin_ns) / NANOS_PER_SECOND,
            packet_count=self.packet_count,
            wire_bytes=self.wire_bytes,
            captured_bytes=self.captured_bytes,
            packet_rate=self.packet_count / seconds,
            wire_byte_rate=self.wire_bytes / seconds,
            captured_byte_rate=self.captured_bytes / seconds,
        )


def step(
    bucket: Optional[IntervalBucket], record: PacketRecord, interval_ns: int
) -> Tuple[IntervalBucket, Optional[IntervalBucket]]:
    """Advance the aggregation by one record.

    Returns the bucket that is open after ``record`` was folded in, and the
    bucket that was closed by it, if any. A record past the end of the open
    window always starts the next bucket at its own timestamp, so a silent
    gap of any length closes exactly one bucket and emits no empty ones.
    """

    if bucket is None:
        return IntervalBucket.open(record), None
    if bucket.contains(record, interval_ns):
        return bucket.fold(record), None
    return IntervalBucket.open(record), bucket


def aggregate(records: Iterable[PacketRecord], interval: IntervalLike) -> Iterator[IntervalSummary]:
    """Lazily summarise ``records`` into one :class:`IntervalSummary` per bucket.

    Records are expected in capture order. They are never sorted, so a record
    older than the open bucket is counted in that bucket anyway.
    """

    yield from IntervalAggregator(interval).aggregate(records)


class IntervalAggregator:
    """Stateful driver around :func:`step` that also tracks capture-wide totals.

    The interval is validated on construction, before any record is read.
    """

    def __init__(self, interval: IntervalLike) -> None:
        self.interval_ns = interval_to_ns(interval)
        self.record_count = 0
        self.summary_count = 0
        self.first_timestamp_ns: Optional[int] = None
        self.last_timestamp_ns: Optional[int] = None
        self._bucket: Optional[IntervalBucket] = None

    @property
    def interval(self) -> timedelta:
        return timedelta(microseconds=self.interval_ns / 1_000)

    @property
    def duration(self) -> timedelta:
        """Time elapsed between the first and the last record seen so far."""

        if self.first_timestamp_ns is None or self.last_timestamp_ns is None:
            return timedelta(0)
        return timedelta(microseconds=(self.last_timestamp_ns - self.first_timestamp_ns) / 1_000)

    def feed(self, record: PacketRecord) -> Optional[IntervalSummary]:
        if self.first_timestamp_ns is None:
            self.first_timestamp_ns = record.timestamp_ns
        self.last_timestamp_ns = record.timestamp_ns
        self.record_count += 1

        self._bucket, closed = step(self._bucket, record, self.interval_ns)
        if closed is None:
            return None
        return self._emit(closed)

    def finish(self) -> Optional[IntervalSummary]:
        """Close the open bucket, if any, at the end of the record stream."""

        closed, self._bucket = self._bucket, None
        if closed is None:
            return None
        return self._emit(closed)

    def aggregate(self, records: Iterable[PacketRecord]) -> Iterator[IntervalSummary]:
        for record in records:
            summary = self.feed(record)
            if summary is not None:
                yield summary
        summary = self.finish()
        if summary is not None:
            yield summary
        logger.debug("Aggregated %d records into %d intervals", self.record_count, self.summary_count)

    def _emit(self, bucket: IntervalBucket) -> IntervalSummary:
        assert self.first_timestamp_ns is not None
        self.summary_count += 1
        summary = bucket.summarize(self.first_timestamp_ns, self.interval_ns)
        logger.debug(
            "Interval at +%.6fs: %d packets, %d wire bytes, %d captured bytes",
            summary.relative_start,
            summary.packet_count,
            summary.wire_bytes,
            summary.captured_bytes,
        )
        return summary
