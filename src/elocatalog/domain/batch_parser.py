"""Split pasted multi-game text into header/body entries.

The input is what users paste from a PGN file or an analysis board: any number
of records, each a block of ``[Key "Value"]`` tag lines followed by move text.
Records are separated by a blank line that is directly followed by a new tag
block; nothing else delimits them, so a blank line inside move text is harmless.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from logging import getLogger

log = getLogger(__name__)

_RECORD_BOUNDARY = re.compile(r"\n(?:[ \t]*\n)+(?=[ \t]*\[)")
_HEADER_LINE = re.compile(r'^\[(\w+)\s+"((?:[^"\\]|\\.)*)"\]$')
_ESCAPE = re.compile(r"\\(.)")


@dataclass(frozen=True, slots=True)
class ParsedEntry:
    headers: dict[str, str]
    body: str
    raw: str
    rejected_headers: tuple[str, ...] = field(default=())

    def header(self, name: str) -> str | None:
        value = self.headers.get(name)
        if value is None:
            return None
        value = value.strip()
        return value or None


def _normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def split_records(text: str) -> list[str]:
    """Chunk ``text`` at record boundaries; chunks are never merged back."""

    return _RECORD_BOUNDARY.split(_normalize_newlines(text))


def parse_record(chunk: str) -> ParsedEntry | None:
    """Parse one chunk; ``None`` when it holds neither headers nor moves."""

    headers: dict[str, str] = {}
    rejected: list[str] = []
    body_parts: list[str] = []
    in_headers = True

    for raw_line in chunk.split("\n"):
        line = raw_line.strip()
        if not line:
            continue
        if in_headers and line.startswith("["):
            match = _HEADER_LINE.match(line)
            if match is None:
                rejected.append(line)
                continue
            headers[match.group(1)] = _ESCAPE.sub(r"\1", match.group(2))
            continue
        in_headers = False
        body_parts.append(line)

    body = " ".join(body_parts)
    if not headers and not body:
        return None
    if rejected:
        log.warning("Dropped %s malformed header line(s): %s", len(rejected), rejected[0])
    return ParsedEntry(
        headers=headers,
        body=body,
        raw=chunk.strip(),
        rejected_headers=tuple(rejected),
    )


def parse_batch(text: str) -> list[ParsedEntry]:
    """Parse every record in ``text``.

    Returns an empty list for blank input; callers decide whether that is an error.
    """

    entries: list[ParsedEntry] = []
    for chunk in split_records(text):
        entry = parse_record(chunk)
        if entry is not None:
            entries.append(entry)
    log.debug("Parsed %s entries from %s characters", len(entries), len(text))
    return entries


__all__ = ["ParsedEntry", "parse_batch", "parse_record", "split_records"]
