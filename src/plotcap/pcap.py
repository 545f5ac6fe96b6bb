"""Decoder for the classic libpcap capture format.

Only the container is decoded here: the global header, and for each record
its timestamp and lengths. Frame contents are skipped without inspection.
"""

from __future__ import annotations

import logging
import struct
from typing import BinaryIO, Iterator

from .errors import CorruptRecordError, UnsupportedFormatError
from .records import NANOS_PER_SECOND, CaptureHeader, PacketRecord

logger = logging.getLogger(__name__)

GLOBAL_HEADER_LENGTH = 24
RECORD_HEADER_LENGTH = 16

MAGIC_MICROSECONDS = 0xA1B2C3D4
MAGIC_NANOSECONDS = 0xA1B23C4D
PCAPNG_SECTION_MAGIC = 0x0A0D0D0A

# libpcap's upper bound, applied when a writer leaves the snaplen at zero.
MAXIMUM_SNAPLEN = 262144

_SKIP_CHUNK = 1 << 16


def _detect_magic(magic_bytes: bytes) -> tuple[str, bool]:
    for byte_order in ("<", ">"):
        (magic,) = struct.unpack(byte_order + "I", magic_bytes)
        if magic == MAGIC_MICROSECONDS:
            return byte_order, False
        if magic == MAGIC_NANOSECONDS:
            return byte_order, True
    (magic,) = struct.unpack("<I", magic_bytes)
    if magic == PCAPNG_SECTION_MAGIC:
        raise UnsupportedFormatError("pcapng captures are not supported, convert to classic pcap first")
    raise UnsupportedFormatError(f"Unrecognized capture signature 0x{magic_bytes.hex()}")


def parse_global_header(data: bytes) -> CaptureHeader:
    """Decode the 24 byte global header that opens every pcap file."""

    if len(data) < GLOBAL_HEADER_LENGTH:
        raise UnsupportedFormatError(
            f"Input too small for a pcap global header ({len(data)} of {GLOBAL_HEADER_LENGTH} bytes)"
        )

    byte_order, nanosecond = _detect_magic(data[:4])
    version_major, version_minor, thiszone, sigfigs, snaplen, linktype = struct.unpack(
        byte_order + "HHiIII", data[4:GLOBAL_HEADER_LENGTH]
    )
    if version_major != 2:
        raise UnsupportedFormatError(f"Unsupported pcap version {version_major}.{version_minor}")

    return CaptureHeader(
        byte_order=byte_order,
        nanosecond=nanosecond,
        version_major=version_major,
        version_minor=version_minor,
        thiszone=thiszone,
        sigfigs=sigfigs,
        snaplen=snaplen,
        linktype=linktype,
    )


def parse_record_header(header: CaptureHeader, data: bytes, offset: int | None = None) -> PacketRecord:
    """Decode a 16 byte record header into a :class:`PacketRecord`.

    ``offset`` is only used to locate the record in error messages.
    """

    if len(data) != RECORD_HEADER_LENGTH:
        raise CorruptRecordError(
            f"Truncated record header ({len(data)} of {RECORD_HEADER_LENGTH} bytes)", offset
        )

    ts_sec, ts_frac, captured_length, wire_length = struct.unpack(header.byte_order + "IIII", data)
    snaplen = header.snaplen or MAXIMUM_SNAPLEN
    if captured_length > snaplen:
        raise CorruptRecordError(
            f"Captured length {captured_length} exceeds snapshot length {snaplen}", offset
        )

    return PacketRecord(
        timestamp_ns=ts_sec * NANOS_PER_SECOND + ts_frac * header.fraction_scale,
        captured_length=captured_length,
        wire_length=wire_length,
    )


class PcapReader(Iterator[PacketRecord]):
    """Stream :class:`PacketRecord` objects out of a binary file object.

    The global header is consumed when the reader is created, so an
    unsupported file fails before any record is produced. Iteration is single
    pass: once the input is exhausted, or a record fails to decode, the reader
    yields nothing more. Reading the capture again requires a fresh stream.
    """

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream
        self.header = parse_global_header(stream.read(GLOBAL_HEADER_LENGTH))
        self.offset = GLOBAL_HEADER_LENGTH
        self.records_read = 0
        self._done = False
        logger.debug(
            "pcap v%d.%d, %s endian, %s timestamps, snaplen %d, linktype %d",
            self.header.version_major,
            self.header.version_minor,
            "little" if self.header.byte_order == "<" else "big",
            "nanosecond" if self.header.nanosecond else "microsecond",
            self.header.snaplen,
            self.header.linktype,
        )

    def __iter__(self) -> "PcapReader":
        return self

    def __next__(self) -> PacketRecord:
        if self._done:
            raise StopIteration
        try:
            record = self._read_record()
        except CorruptRecordError:
            self._done = True
            raise
        if record is None:
            self._done = True
            raise StopIteration
        return record

    def _read_record(self) -> PacketRecord | None:
        record_offset = self.offset
        data = self._stream.read(RECORD_HEADER_LENGTH)
        if not data:
            return None
        record = parse_record_header(self.header, data, record_offset)
        self.offset += RECORD_HEADER_LENGTH

        self._skip_payload(record.captured_length, record_offset)
        self.records_read += 1
        return record

    def _skip_payload(self, length: int, record_offset: int) -> None:
        remaining = length
        while remaining:
            chunk = self._stream.read(min(remaining, _SKIP_CHUNK))
            if not chunk:
                raise CorruptRecordError(
                    f"Record payload truncated ({length - remaining} of {length} bytes present)",
                    record_offset,
                )
            remaining -= len(chunk)
            self.offset += len(chunk)
