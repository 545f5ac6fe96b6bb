"""Render interval summaries as a self-contained gnuplot script."""

from __future__ import annotations

import os
import tempfile
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Union

from .records import IntervalSummary

SCRIPT_MODE = 0o755

_SIZE_UNITS = ["B", "KiB", "MiB", "GiB", "TiB", "PiB"]
_DURATION_UNITS = [
    ("d", timedelta(days=1)),
    ("h", timedelta(hours=1)),
    ("m", timedelta(minutes=1)),
    ("s", timedelta(seconds=1)),
    ("ms", timedelta(milliseconds=1)),
    ("us", timedelta(microseconds=1)),
]


def format_size(size: int) -> str:
    """Format a byte count with binary units, e.g. ``1.50 MiB``."""

    value = float(size)
    for unit in _SIZE_UNITS:
        if value < 1024 or unit == _SIZE_UNITS[-1]:
            break
        value /= 1024
    if unit == "B":
        return f"{size} B"
    return f"{value:.2f} {unit}"


def format_duration(duration: timedelta) -> str:
    """Format a duration as space separated terms, e.g. ``1h 2m 3s 400ms``."""

    if duration <= timedelta(0):
        return "0s"
    parts: List[str] = []
    remaining = duration
    for suffix, unit in _DURATION_UNITS:
        count, remaining = divmod(remaining, unit)
        if count:
            parts.append(f"{count}{suffix}")
    return " ".join(parts)


def format_seconds(value: float) -> str:
    """Format seconds with at most microsecond precision and no trailing zeros."""

    text = f"{value:.6f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def _single_line(text: str) -> str:
    return " ".join(text.splitlines())


def quote_string(text: str) -> str:
    """Quote ``text`` as a single-quoted gnuplot string."""

    return "'" + _single_line(text).replace("'", "''") + "'"


def format_row(summary: IntervalSummary) -> str:
    return (
        f"{format_seconds(summary.relative_start)} "
        f"{summary.packet_rate:.2f} {summary.wire_byte_rate:.2f} {summary.captured_byte_rate:.2f}"
    )


def render_script(
    summaries: Iterable[IntervalSummary],
    *,
    input_name: str,
    file_type: str,
    file_size: int,
    duration: Union[timedelta, Callable[[], timedelta]],
    generated_at: datetime,
) -> Iterator[str]:
    """Yield the lines of a gnuplot script plotting ``summaries``.

    ``duration`` may be a callable returning the capture duration. It is only
    evaluated once every summary has been consumed, which lets a streaming
    aggregator report the span of the capture it has just finished reading.
    """

    yield "#!/usr/bin/env -S gnuplot -p"
    yield "#"
    yield "# Generated with plotcap"
    yield f"# Input file: {_single_line(input_name)}"
    yield f"# Date: {generated_at.isoformat(sep=' ')}"
    yield ""
    yield "$data << EOD"
    for summary in summaries:
        yield format_row(summary)
    yield "EOD"
    yield ""

    span = duration() if callable(duration) else duration
    name = Path(input_name).name
    title = f"Packet/data rate plot for {file_type} file \"{name}\" ({format_size(file_size)} / {format_duration(span)})"
    yield f"set title {quote_string(title)}"
    yield "set xlabel 'Time'"
    yield "set ylabel 'Packet rate'"
    yield "set y2label 'Data rate'"
    yield "set format y '%.0s%cpps'"
    yield "set format y2 '%.0s%cbps'"
    yield "set ytics nomirror"
    yield "set y2tics nomirror"
    yield "set xtics time format '%tH:%tM:%tS'"
    yield "set xtics rotate by -45"
    yield "plot    $data u 1:2 with lines axis x1y1 title 'Packets/s', \\"
    yield "        $data u 1:($3*8) with lines axis x1y2 title 'Bits/s on the wire', \\"
    yield "        $data u 1:($4*8) with points axis x1y2 title 'Bits/s captured'"
    yield "pause mouse close"


def write_script(path: Path | str, lines: Iterable[str]) -> Path:
    """Write ``lines`` to ``path`` atomically and mark the file executable.

    Lines are written to a temporary file next to ``path`` which replaces the
    target only once every line was produced. If producing the lines raises,
    the temporary file is removed and ``path`` is left untouched.
    """

    target = Path(path)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            for line in lines:
                handle.write(line)
                handle.write("\n")
        os.chmod(tmp_name, SCRIPT_MODE)
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return target
