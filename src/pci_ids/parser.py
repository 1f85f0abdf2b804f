"""Line parser for the PCI ID Repository text database (pci.ids).

The grammar is line-oriented; nesting is expressed with leading tabs:

    vvvv  vendor_name
    \tdddd  device_name
    \t\tssss ssss  subsystem_name
    C cc  class_name
    \tss  subclass_name
    \t\tpp  prog_if_name

Each line becomes a flat, depth-tagged Record. Pairing children with their
parents is left to the assembler.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from pci_ids.errors import ParseError

logger = logging.getLogger(__name__)

_CLASS_RE = re.compile(r"C ([0-9a-fA-F]{2})  (.+)")
_ID16_RE = re.compile(r"([0-9a-fA-F]{4})  (.+)")
_ID8_RE = re.compile(r"([0-9a-fA-F]{2})  (.+)")
_SUBSYSTEM_RE = re.compile(r"([0-9a-fA-F]{4}) ([0-9a-fA-F]{4})  (.+)")

MAX_DEPTH = 2


class RecordKind(Enum):
    """Kind of a parsed line."""

    VENDOR = "vendor"
    DEVICE = "device"
    SUBSYSTEM = "subsystem"
    CLASS = "class"
    SUBCLASS = "subclass"
    PROG_IF = "prog_if"

    @property
    def is_class_namespace(self) -> bool:
        """True for records of the device-class tree."""
        return self in (RecordKind.CLASS, RecordKind.SUBCLASS, RecordKind.PROG_IF)


class Namespace(Enum):
    """The two independent top-level sections of pci.ids."""

    HARDWARE = "hardware"
    CLASS = "class"


@dataclass(frozen=True)
class Record:
    """A single non-comment line of the database."""

    kind: RecordKind
    depth: int
    ids: tuple[int, ...]  # (id,) or (subvendor, subdevice)
    name: str
    line_number: int

    @property
    def id(self) -> int:
        """Return the first (for most kinds, only) numeric ID."""
        return self.ids[0]


@dataclass(frozen=True)
class ParseResult:
    """Ordered records plus metadata from the file header."""

    records: tuple[Record, ...]
    version: str | None = None
    date: str | None = None


# (kind, pattern, expected) per namespace and depth
_CHILD_RULES: dict[tuple[Namespace, int], tuple[RecordKind, re.Pattern[str], str]] = {
    (Namespace.HARDWARE, 1): (RecordKind.DEVICE, _ID16_RE, "device line 'dddd  name'"),
    (Namespace.HARDWARE, 2): (
        RecordKind.SUBSYSTEM,
        _SUBSYSTEM_RE,
        "subsystem line 'vvvv dddd  name'",
    ),
    (Namespace.CLASS, 1): (RecordKind.SUBCLASS, _ID8_RE, "subclass line 'ss  name'"),
    (Namespace.CLASS, 2): (RecordKind.PROG_IF, _ID8_RE, "programming interface line 'pp  name'"),
}


def _guess_namespace(depth: int, body: str) -> Namespace | None:
    """Pick a namespace for a child line seen before any top-level line."""
    if depth == 1:
        if _ID16_RE.fullmatch(body):
            return Namespace.HARDWARE
        if _ID8_RE.fullmatch(body):
            return Namespace.CLASS
    elif depth == 2:
        if _SUBSYSTEM_RE.fullmatch(body):
            return Namespace.HARDWARE
        if _ID8_RE.fullmatch(body):
            return Namespace.CLASS
    return None


def _read_header(comment: str, header: dict[str, str]) -> None:
    """Pick up 'Version:' and 'Date:' from the comment block at the top."""
    text = comment[1:].strip()
    for field_name in ("Version", "Date"):
        prefix = f"{field_name}:"
        if text.startswith(prefix) and field_name not in header:
            header[field_name] = text[len(prefix) :].strip()


def _parse_line(
    line: str, line_number: int, namespace: Namespace | None
) -> tuple[Record, Namespace | None]:
    """Parse one significant line.

    Returns:
        The record and the namespace in effect after this line.

    Raises:
        ParseError: If the line does not match the grammar.
    """
    body = line.lstrip("\t")
    depth = len(line) - len(body)

    if depth > MAX_DEPTH:
        raise ParseError(line_number, f"at most {MAX_DEPTH} tabs of indentation", line)
    if body[:1].isspace():
        raise ParseError(line_number, "tab-indented hexadecimal ID", line)

    if depth == 0:
        if body.startswith("C "):
            match = _CLASS_RE.fullmatch(body)
            if match is None:
                raise ParseError(line_number, "class line 'C cc  name'", line)
            record = Record(
                RecordKind.CLASS, 0, (int(match.group(1), 16),), match.group(2), line_number
            )
            return record, Namespace.CLASS

        match = _ID16_RE.fullmatch(body)
        if match is None:
            raise ParseError(line_number, "vendor line 'vvvv  name'", line)
        record = Record(
            RecordKind.VENDOR, 0, (int(match.group(1), 16),), match.group(2), line_number
        )
        return record, Namespace.HARDWARE

    effective = namespace or _guess_namespace(depth, body)
    if effective is None:
        raise ParseError(line_number, f"record at depth {depth}", line)

    kind, pattern, expected = _CHILD_RULES[(effective, depth)]
    match = pattern.fullmatch(body)
    if match is None:
        raise ParseError(line_number, expected, line)

    *id_groups, name = match.groups()
    ids = tuple(int(group, 16) for group in id_groups)
    # A guessed namespace is not kept; the assembler reports the orphan
    return Record(kind, depth, ids, name, line_number), namespace


def parse_text(text: str) -> ParseResult:
    """Parse the complete text of a pci.ids database.

    Args:
        text: Database contents.

    Returns:
        ParseResult with records in order of appearance.

    Raises:
        ParseError: On the first line that does not match the grammar.

    Example:
        >>> result = parse_text("8086  Intel Corporation\\n")
        >>> result.records[0].name
        'Intel Corporation'
    """
    records: list[Record] = []
    header: dict[str, str] = {}
    namespace: Namespace | None = None

    for line_number, line in enumerate(text.split("\n"), start=1):
        if line.endswith("\r"):
            line = line[:-1]

        stripped = line.strip()
        if not stripped:
            continue
        if stripped.startswith("#"):
            _read_header(stripped, header)
            continue

        record, namespace = _parse_line(line, line_number, namespace)
        records.append(record)

    logger.debug("Parsed %d records from %d characters", len(records), len(text))
    return ParseResult(
        records=tuple(records),
        version=header.get("Version"),
        date=header.get("Date"),
    )


def parse_file(path: Path | str) -> ParseResult:
    """Parse a pci.ids file (UTF-8).

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ParseError: If a line is not valid UTF-8 or does not match the grammar.
    """
    path = Path(path)
    with path.open("rb") as f:
        data = f.read()
    logger.debug("Parsing %s", path)
    return parse_text(_decode(data))


def _decode(data: bytes) -> str:
    """Decode file contents, reporting invalid UTF-8 by line number."""
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        line_number = data.count(b"\n", 0, e.start) + 1
        raw = data.split(b"\n")[line_number - 1].rstrip(b"\r")
        raise ParseError(
            line_number, "UTF-8 text", raw.decode("utf-8", errors="backslashreplace")
        ) from e
