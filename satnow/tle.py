"""
TLE records and a tolerant parser for TLE text.

Purpose
-------
Turn loosely structured TLE text into ``OrbitalRecord`` instances. Both the
classic three-line layout (name + two data lines) and the bare two-line
layout are accepted, in any mix.

High-level Flow (Pseudocode)
----------------------------
  1. Read a line. Unless it starts with "1 " and is longer than 24 chars it is
     a name: trim trailing whitespace, keep 22 chars, read the next line as
     data line 1. Otherwise the line *is* data line 1 and the name is empty.
  2. Read data line 2.
  3. If the input ends while a data line is expected, report the missing line
     and stop; the partial record is dropped.
  4. Cut both data lines to 69 columns. Shorter lines, or a catalog number
     that does not decode, are reported and the record is skipped.

Blank lines get no special treatment; they go through the same name/data test
as everything else.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Tuple

from satnow import config

logger = logging.getLogger(__name__)

# Alpha-5 catalog numbers skip I and O
ALPHA5 = "ABCDEFGHJKLMNPQRSTUVWXYZ"


@dataclass(frozen=True)
class Diagnostic:
    source: str
    line: Optional[int]
    message: str

    def __str__(self):
        if self.line is None:
            return f"{self.source}: {self.message}"
        return f"{self.source}:{self.line}: {self.message}"


def decode_catalog_number(field: str) -> int:
    field = field.strip()
    if not field:
        raise ValueError("empty catalog number")
    head = field[0].upper()
    if head.isalpha():
        if head not in ALPHA5:
            raise ValueError(f"bad catalog number {field!r}")
        return (ALPHA5.index(head) + 10) * 10000 + int(field[1:])
    return int(field)


def checksum(line: str) -> int:
    total = 0
    for ch in line[:68]:
        if ch.isdigit():
            total += int(ch)
        elif ch == "-":
            total += 1
    return total % 10


def _implied_decimal(field):
    # " 21844-3" -> 0.21844e-3
    field = field.strip()
    if not field:
        return 0.0
    sign = -1.0 if field[0] == "-" else 1.0
    field = field.lstrip("+-")
    mantissa, exponent = field[:-2], field[-2:]
    return sign * float(f"0.{mantissa}e{exponent}")


def _normalize(line, which):
    line = line.rstrip("\r\n")[: config.DATA_LINE_LENGTH]
    if len(line) < config.DATA_LINE_LENGTH:
        raise ValueError(f"data line {which} has {len(line)} columns, expected {config.DATA_LINE_LENGTH}")
    return line


@dataclass(frozen=True)
class OrbitalRecord:
    catalog_id: int
    name: str
    line1: str
    line2: str

    @classmethod
    def from_lines(cls, name, line1, line2):
        """Build a record from raw text, raising ValueError if it is malformed."""
        line1 = _normalize(line1, 1)
        line2 = _normalize(line2, 2)
        catalog_id = decode_catalog_number(line1[2:7])
        return cls(catalog_id, (name or "")[: config.NAME_LENGTH], line1, line2)

    @property
    def display_name(self):
        return self.name or str(self.catalog_id)

    # Element accessors, decoded from the fixed columns.

    @property
    def classification(self):
        return self.line1[7]

    @property
    def international_designator(self):
        return self.line1[9:17].strip()

    @property
    def epoch(self) -> datetime:
        yy = int(self.line1[18:20])
        year = 1900 + yy if yy >= 57 else 2000 + yy
        day = float(self.line1[20:32])
        return datetime(year, 1, 1, tzinfo=timezone.utc) + timedelta(days=day - 1.0)

    @property
    def mean_motion_dot(self):
        return float(self.line1[33:43])

    @property
    def bstar(self):
        return _implied_decimal(self.line1[53:61])

    @property
    def element_number(self):
        return int(self.line1[64:68].strip() or 0)

    @property
    def inclination(self):
        return float(self.line2[8:16])

    @property
    def raan(self):
        return float(self.line2[17:25])

    @property
    def eccentricity(self):
        return float("0." + self.line2[26:33].strip())

    @property
    def arg_perigee(self):
        return float(self.line2[34:42])

    @property
    def mean_anomaly(self):
        return float(self.line2[43:51])

    @property
    def mean_motion(self):
        return float(self.line2[52:63])

    @property
    def revolution_number(self):
        return int(self.line2[63:68].strip() or 0)

    @property
    def checksums_ok(self):
        return all(
            line[68].isdigit() and int(line[68]) == checksum(line)
            for line in (self.line1, self.line2)
        )


def is_name_line(line: str) -> bool:
    text = line.rstrip("\r\n")
    return not (text.startswith(config.DATA_LINE_MARKER) and len(text) > config.NAME_LINE_THRESHOLD)


def _report(diagnostics, source, line_no, message):
    diag = Diagnostic(source, line_no, message)
    diagnostics.append(diag)
    logger.warning("%s", diag)


def parse_tles(lines: Iterable[str], source: str = "<stream>") -> Tuple[List[OrbitalRecord], List[Diagnostic]]:
    records: List[OrbitalRecord] = []
    diagnostics: List[Diagnostic] = []
    lines = iter(lines)
    line_no = 0

    for line in lines:
        line_no += 1
        name = ""
        if is_name_line(line):
            name = line.rstrip()[: config.NAME_LENGTH]
            line1 = next(lines, None)
            if line1 is None:
                _report(diagnostics, source, line_no + 1, "unexpected end of input reading TLE line 1")
                break
            line_no += 1
        else:
            line1 = line
        first = line_no

        line2 = next(lines, None)
        if line2 is None:
            _report(diagnostics, source, line_no + 1, "unexpected end of input reading TLE line 2")
            break
        line_no += 1

        try:
            records.append(OrbitalRecord.from_lines(name, line1, line2))
        except ValueError as e:
            _report(diagnostics, source, first, f"malformed TLE skipped: {e}")

    return records, diagnostics


def parse_stream(fp, source="<stream>"):
    return parse_tles(fp, source)


def parse_bytes(data: bytes, source="<stream>"):
    text = data.decode("utf-8-sig", errors="replace")
    return parse_tles(text.splitlines(), source)
