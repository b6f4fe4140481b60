import pytest

from rebootlab.core.errors import TrapStatsParseError
from rebootlab.parsers.trapstats import nonzero_rates, parse_trap_stats

SAMPLE = "DEV TRAPCODE NAME COUNT RATE\n  0    12   arp-reply   100   0\n  0    13   ttl-exceeded 50   3\n"


def test_parse_two_records() -> None:
    records = parse_trap_stats(SAMPLE)
    assert len(records) == 2
    assert records[0].name == "arp-reply"
    assert records[0].count == 100
    assert records[1].trap_code == 13
    assert records[1].rate == 3
    assert [r.name for r in nonzero_rates(records)] == ["ttl-exceeded"]


def test_parse_is_deterministic() -> None:
    assert parse_trap_stats(SAMPLE) == parse_trap_stats(SAMPLE)


def test_no_header_yields_empty() -> None:
    assert parse_trap_stats("  0  12  arp  100  5\ngarbage line\n") == []
    assert parse_trap_stats("") == []


def test_preamble_ignored_and_blank_lines_skipped() -> None:
    text = """
SENT: Ukern command: show cda trapstats
  1   99   looks like data  7  7

DEV TRAPCODE NAME                 COUNT   RATE

  1    20   l3.mtu.exceeded       12      0
   \t
  1    21   ip options            4       0
"""
    records = parse_trap_stats(text)
    assert [(r.dev, r.trap_code, r.name) for r in records] == [(1, 20, "l3.mtu.exceeded"), (1, 21, "ip options")]


def test_duplicates_are_kept_in_order() -> None:
    text = "DEV TRAPCODE NAME COUNT RATE\n0 12 arp 1 0\n0 12 arp 2 0\n"
    assert [r.count for r in parse_trap_stats(text)] == [1, 2]


def test_malformed_row_reports_line() -> None:
    bad = "  0   12   arp-reply   lots   0"
    with pytest.raises(TrapStatsParseError) as exc_info:
        parse_trap_stats(f"DEV TRAPCODE NAME COUNT RATE\n  0 1 ok 1 0\n{bad}\n")
    assert exc_info.value.line == bad
    assert bad in str(exc_info.value)
