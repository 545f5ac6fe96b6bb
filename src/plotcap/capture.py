"""Utilities for ingesting packet records from capture files."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator

from .pcap import PcapReader
from .records import PacketRecord


class PacketSource(Iterable[PacketRecord]):
    """Abstract iterable that yields :class:`~plotcap.records.PacketRecord`."""

    def __iter__(self) -> Iterator[PacketRecord]:  # pragma: no cover - interface definition
        raise NotImplementedError


@contextmanager
def open_capture(path: Path | str) -> Iterator[PcapReader]:
    """Open ``path`` and yield a :class:`PcapReader` positioned after the global header."""

    with Path(path).open("rb") as handle:
        yield PcapReader(handle)


class PcapFileSource(PacketSource):
    """Read packet records from a classic pcap file on disk.

    Each iteration opens the file again, so iterating twice over an unchanged
    file yields the same records. The file is closed when iteration finishes,
    fails, or the generator is discarded.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def __iter__(self) -> Iterator[PacketRecord]:
        with open_capture(self.path) as reader:
            yield from reader
