from __future__ import annotations

import struct
from pathlib import Path
from typing import Iterable, Sequence, Tuple

MAGIC_USEC = 0xA1B2C3D4
MAGIC_NSEC = 0xA1B23C4D

# (ts_sec, ts_frac, captured_length, wire_length)
RecordSpec = Tuple[int, int, int, int]


def build_global_header(
    magic: int = MAGIC_USEC,
    byte_order: str = "<",
    snaplen: int = 65535,
    version: Tuple[int, int] = (2, 4),
    linktype: int = 1,
) -> bytes:
    return struct.pack(byte_order + "IHHiIII", magic, version[0], version[1], 0, 0, snaplen, linktype)


def build_record(
    ts_sec: int,
    ts_frac: int,
    captured_length: int,
    wire_length: int,
    byte_order: str = "<",
    payload: bytes | None = None,
) -> bytes:
    if payload is None:
        payload = bytes(index % 256 for index in range(captured_length))
    return struct.pack(byte_order + "IIII", ts_sec, ts_frac, captured_length, wire_length) + payload


def build_pcap(
    records: Iterable[RecordSpec],
    magic: int = MAGIC_USEC,
    byte_order: str = "<",
    snaplen: int = 65535,
) -> bytes:
    data = build_global_header(magic=magic, byte_order=byte_order, snaplen=snaplen)
    for ts_sec, ts_frac, captured_length, wire_length in records:
        data += build_record(ts_sec, ts_frac, captured_length, wire_length, byte_order=byte_order)
    return data


def write_pcap(directory: Path, records: Sequence[RecordSpec], name: str = "capture.pcap", **kwargs) -> Path:
    path = directory / name
    path.write_bytes(build_pcap(records, **kwargs))
    return path
