"""Plot packet and data rates of classic pcap captures."""

from .aggregate import IntervalAggregator, IntervalBucket, aggregate, step
from .capture import PacketSource, PcapFileSource, open_capture
from .errors import (
    CaptureFormatError,
    CorruptRecordError,
    InvalidIntervalError,
    PlotcapError,
    UnsupportedFormatError,
)
from .gnuplot import render_script, write_script
from .interval import interval_to_ns, parse_interval
from .pcap import PcapReader, parse_global_header, parse_record_header
from .records import CaptureHeader, IntervalSummary, PacketRecord

__all__ = [
    "CaptureHeader",
    "PacketRecord",
    "IntervalSummary",
    "IntervalBucket",
    "IntervalAggregator",
    "aggregate",
    "step",
    "PacketSource",
    "PcapFileSource",
    "PcapReader",
    "open_capture",
    "parse_global_header",
    "parse_record_header",
    "parse_interval",
    "interval_to_ns",
    "render_script",
    "write_script",
    "PlotcapError",
    "CaptureFormatError",
    "UnsupportedFormatError",
    "CorruptRecordError",
    "InvalidIntervalError",
]
