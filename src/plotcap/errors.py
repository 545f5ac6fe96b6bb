"""Exceptions raised while reading captures and validating configuration."""

from __future__ import annotations

from typing import Optional


class PlotcapError(Exception):
    """Base class for every error reported by plotcap."""


class CaptureFormatError(PlotcapError, ValueError):
    """Raised when the input cannot be decoded as a classic pcap capture."""


class UnsupportedFormatError(CaptureFormatError):
    """Raised when the container signature is not a supported pcap variant."""


class CorruptRecordError(CaptureFormatError):
    """Raised when a record is truncated or inconsistent with its header.

    ``offset`` is the position in the file of the record header that could
    not be decoded, when known.
    """

    def __init__(self, message: str, offset: Optional[int] = None) -> None:
        if offset is not None:
            message = f"{message} (record at byte offset {offset})"
        super().__init__(message)
        self.offset = offset


class InvalidIntervalError(PlotcapError, ValueError):
    """Raised when the aggregation interval is malformed or not positive."""
