"""Parser for the ``show cda trapstats`` PFE table.

The command prints some preamble, then a header row starting with ``DEV`` and
one row per trap::

    DEV TRAPCODE NAME          COUNT  RATE
      0       12 arp-reply       100     0

Rows after the header must match the five column grammar; anything else that
is not blank is rejected with the offending line.
"""

from __future__ import annotations

import re

from rebootlab.core.errors import TrapStatsParseError
from rebootlab.core.model import TrapStatRecord

HEADER_TOKEN = "DEV"
TRAPSTATS_RE = re.compile(r"^\s*(\d+)\s+(\d+)\s+([\w.\s-]+)\s+(\d+)\s+(\d+)")

_FIELDS = ("DEV", "TRAPCODE", "NAME", "COUNT", "RATE")


def _to_int(raw: str, column: str, line: str) -> int:
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise TrapStatsParseError(f"error parsing {column}", line) from exc


def parse_trap_stats(text: str) -> list[TrapStatRecord]:
    records: list[TrapStatRecord] = []
    in_table = False
    for line in text.splitlines():
        if line.startswith(HEADER_TOKEN):
            in_table = True
            continue
        if not in_table:
            continue

        match = TRAPSTATS_RE.match(line)
        if match is None:
            if line.strip():
                raise TrapStatsParseError("invalid line format", line)
            continue

        dev, trap_code, name, count, rate = match.groups()
        records.append(
            TrapStatRecord(
                dev=_to_int(dev, _FIELDS[0], line),
                trap_code=_to_int(trap_code, _FIELDS[1], line),
                name=name.strip(),
                count=_to_int(count, _FIELDS[3], line),
                rate=_to_int(rate, _FIELDS[4], line),
            )
        )
    return records


def nonzero_rates(records: list[TrapStatRecord]) -> list[TrapStatRecord]:
    return [r for r in records if r.rate != 0]
