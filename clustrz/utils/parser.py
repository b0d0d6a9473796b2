"""Parsers for remote command output."""

import re
from datetime import datetime, timedelta, timezone
from typing import Final

from clustrz.exceptions import ParseError
from clustrz.models import ProcessInfo

# ps format producing "pid|cputime|%cpu|args" lines
PS_FORMAT: Final[str] = "%p|%x|%C|%a"

# Fixed offsets (minutes east of UTC) for the abbreviations `date` prints
TZ_OFFSETS: Final[dict[str, int]] = {
    "UTC": 0,
    "UT": 0,
    "GMT": 0,
    "Z": 0,
    "WET": 0,
    "WEST": 60,
    "BST": 60,
    "IST": 330,
    "CET": 60,
    "CEST": 120,
    "MET": 60,
    "MEST": 120,
    "EET": 120,
    "EEST": 180,
    "MSK": 180,
    "JST": 540,
    "KST": 540,
    "HKT": 480,
    "SGT": 480,
    "AWST": 480,
    "ACST": 570,
    "ACDT": 630,
    "AEST": 600,
    "AEDT": 660,
    "NZST": 720,
    "NZDT": 780,
    "AST": -240,
    "ADT": -180,
    "EST": -300,
    "EDT": -240,
    "CST": -360,
    "CDT": -300,
    "MST": -420,
    "MDT": -360,
    "PST": -480,
    "PDT": -420,
    "AKST": -540,
    "AKDT": -480,
    "HST": -600,
}

_NUMERIC_OFFSET = re.compile(r"^([+-])(\d{2}):?(\d{2})$")


def parse_ps_line(line: str) -> ProcessInfo:
    """Parse one ``pid|time|%cpu|command`` line of ps output.

    Example:
        >>> parse_ps_line("123 | 00:01:02 | 5.0 | java -jar app.jar")
        ProcessInfo(pid=123, time='00:01:02', cpu_percent=5.0, command='java -jar app.jar')

    Raises:
        ParseError: If the line does not have four fields or a field is malformed
    """
    parts = line.split("|", 3)
    if len(parts) != 4:
        raise ParseError(line, "Expected 4 '|'-separated fields")

    pid_str, time_str, cpu_str, command = parts
    try:
        pid = int(pid_str.strip())
        cpu_percent = float(cpu_str.strip())
    except ValueError as e:
        raise ParseError(line, f"Malformed process line ({e})") from e

    return ProcessInfo(
        pid=pid,
        time=time_str.strip(),
        cpu_percent=cpu_percent,
        command=command.strip(),
    )


def parse_ps_output(output: str) -> list[ProcessInfo]:
    """Parse every non-blank line of ps output."""
    return [parse_ps_line(line) for line in output.splitlines() if line.strip()]


def _parse_offset(zone: str, text: str) -> timezone:
    """Resolve a zone abbreviation or numeric offset to a fixed timezone."""
    minutes = TZ_OFFSETS.get(zone.upper())
    if minutes is None:
        match = _NUMERIC_OFFSET.match(zone)
        if not match:
            raise ParseError(text, f"Unknown timezone {zone!r}")
        sign, hours, mins = match.groups()
        minutes = int(hours) * 60 + int(mins)
        if sign == "-":
            minutes = -minutes
    return timezone(timedelta(minutes=minutes), zone)


def parse_bash_time(text: str) -> datetime:
    """Convert the default output of ``date`` to an aware datetime.

    Example input: ``'Fri Dec 3 02:51:12 PST 2010'``.

    Raises:
        ParseError: If the text is not in ``date``'s default format
    """
    fields = text.split()
    if len(fields) != 6:
        raise ParseError(text, "Expected '<weekday> <month> <day> <HH:MM:SS> <tz> <year>'")

    weekday, month, day, clock, zone, year = fields
    tz = _parse_offset(zone, text)
    try:
        naive = datetime.strptime(
            f"{weekday} {month} {day} {clock} {year}", "%a %b %d %H:%M:%S %Y"
        )
    except ValueError as e:
        raise ParseError(text, f"Malformed timestamp ({e})") from e

    return naive.replace(tzinfo=tz)
