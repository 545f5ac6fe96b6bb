from __future__ import annotations

import os
import stat
from datetime import datetime, timedelta, timezone

from plotcap.aggregate import aggregate
from plotcap.gnuplot import (
    format_duration,
    format_seconds,
    format_size,
    quote_string,
    render_script,
    write_script,
)
from plotcap.records import PacketRecord


def _summaries():
    records = [
        PacketRecord(timestamp_ns=0, captured_length=100, wire_length=100),
        PacketRecord(timestamp_ns=30_000_000_000, captured_length=100, wire_length=100),
        PacketRecord(timestamp_ns=90_000_000_000, captured_length=100, wire_length=100),
    ]
    return aggregate(records, "60s")


def _render(summaries, duration=timedelta(seconds=90)):
    return list(
        render_script(
            summaries,
            input_name="/captures/trace.pcap",
            file_type="pcap",
            file_size=3 * 1024 * 1024 // 2,
            duration=duration,
            generated_at=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        )
    )


def test_render_script_data_block() -> None:
    lines = _render(_summaries())
    assert lines[0] == "#!/usr/bin/env -S gnuplot -p"
    assert "# Input file: /captures/trace.pcap" in lines
    assert "# Date: 2024-01-02 03:04:05+00:00" in lines
    start = lines.index("$data << EOD")
    end = lines.index("EOD")
    assert lines[start + 1 : end] == ["0 0.03 3.33 3.33", "90 0.02 1.67 1.67"]
    assert lines[-1] == "pause mouse close"


def test_render_script_title() -> None:
    lines = _render([], duration=lambda: timedelta(minutes=1, seconds=30))
    title = next(line for line in lines if line.startswith("set title"))
    assert title == "set title 'Packet/data rate plot for pcap file \"trace.pcap\" (1.50 MiB / 1m 30s)'"


def test_duration_callable_evaluated_after_rows() -> None:
    seen = []

    def rows():
        yield from _summaries()
        seen.append("done")

    def duration():
        assert seen == ["done"]
        return timedelta(seconds=90)

    _render(rows(), duration=duration)


def test_format_helpers() -> None:
    assert format_size(512) == "512 B"
    assert format_size(2048) == "2.00 KiB"
    assert format_size(5 * 1024**3) == "5.00 GiB"
    assert format_duration(timedelta(0)) == "0s"
    assert format_duration(timedelta(hours=1, minutes=2, seconds=3, milliseconds=400)) == "1h 2m 3s 400ms"
    assert format_duration(timedelta(days=2, microseconds=7)) == "2d 7us"
    assert format_seconds(0.0) == "0"
    assert format_seconds(1.5) == "1.5"
    assert format_seconds(2.0000004) == "2"
    assert format_seconds(12.000125) == "12.000125"


def test_write_script_is_executable(tmp_path) -> None:
    target = tmp_path / "plot.gp"
    write_script(target, ["#!/usr/bin/env -S gnuplot -p", "plot 1"])
    assert target.read_text(encoding="utf-8") == "#!/usr/bin/env -S gnuplot -p\nplot 1\n"
    assert stat.S_IMODE(os.stat(target).st_mode) == 0o755


def test_write_script_leaves_nothing_on_failure(tmp_path) -> None:
    target = tmp_path / "plot.gp"
    target.write_text("previous\n", encoding="utf-8")

    def lines():
        yield "first line"
        raise RuntimeError("boom")

    try:
        write_script(target, lines())
    except RuntimeError:
        pass
    else:  # pragma: no cover - defensive
        raise AssertionError("Expected RuntimeError")
    assert target.read_text(encoding="utf-8") == "previous\n"
    assert sorted(path.name for path in tmp_path.iterdir()) == ["plot.gp"]


def test_title_escapes_quotes_and_newlines() -> None:
    lines = list(
        render_script(
            [],
            input_name="/captures/bob's\ntrace.pcap",
            file_type="pcap",
            file_size=1,
            duration=timedelta(0),
            generated_at=datetime(2024, 1, 2, tzinfo=timezone.utc),
        )
    )
    assert "# Input file: /captures/bob's trace.pcap" in lines
    title = next(line for line in lines if line.startswith("set title"))
    assert title == "set title 'Packet/data rate plot for pcap file \"bob''s trace.pcap\" (1 B / 0s)'"
    assert quote_string("it's") == "'it''s'"
