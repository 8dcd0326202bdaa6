"""Unified diff parsing with dual line-number tracks.

A GitHub file patch is a sequence of hunks. Each content line inside a hunk is
tagged with the line number it occupies in the original file, the modified
file, or both:

    @@ -5,3 +5,3 @@
    -const oldValue = "old";     original 5
    +const newValue = "new";     modified 5
     const otherVariable = true; original 6, modified 6

The parser never raises on malformed diff text. Headerless or garbled input
simply yields zero hunks, so callers check ``ParsedDiff.hunks``.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

_HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")
_METADATA_PREFIXES = ("---", "+++", "Index:", "diff --git")


class EntryType(str, enum.Enum):
    ADDED = "added"
    REMOVED = "removed"
    CONTEXT = "context"
    OTHER = "other"


@dataclass(frozen=True)
class DiffEntry:
    type: EntryType
    content: str
    original_line_number: int | None = None
    modified_line_number: int | None = None


@dataclass(frozen=True)
class LineRange:
    start: int
    end: int


@dataclass(frozen=True)
class DiffHunk:
    old_start_line: int
    old_line_count: int
    new_start_line: int
    new_line_count: int
    entries: tuple[DiffEntry, ...] = ()

    @property
    def added_count(self) -> int:
        return sum(1 for e in self.entries if e.type is EntryType.ADDED)

    @property
    def removed_count(self) -> int:
        return sum(1 for e in self.entries if e.type is EntryType.REMOVED)

    @property
    def context_count(self) -> int:
        return sum(1 for e in self.entries if e.type is EntryType.CONTEXT)

    @property
    def has_changes(self) -> bool:
        return self.added_count > 0 or self.removed_count > 0

    @property
    def original_range(self) -> LineRange:
        numbers = [e.original_line_number for e in self.entries if e.original_line_number is not None]
        return LineRange(
            start=min(numbers + [self.old_start_line]),
            end=max(numbers + [self.old_start_line + self.old_line_count - 1]),
        )

    @property
    def modified_range(self) -> LineRange:
        numbers = [e.modified_line_number for e in self.entries if e.modified_line_number is not None]
        return LineRange(
            start=min(numbers + [self.new_start_line]),
            end=max(numbers + [self.new_start_line + self.new_line_count - 1]),
        )


@dataclass(frozen=True)
class ParsedDiff:
    hunks: tuple[DiffHunk, ...] = field(default_factory=tuple)
    has_content: bool = False

    @property
    def original_line_count(self) -> int:
        return max((h.old_start_line + h.old_line_count - 1 for h in self.hunks), default=0)

    @property
    def modified_line_count(self) -> int:
        return max((h.new_start_line + h.new_line_count - 1 for h in self.hunks), default=0)


EMPTY_DIFF = ParsedDiff()


def _entry_type(line: str) -> EntryType:
    if line.startswith("+"):
        return EntryType.ADDED
    if line.startswith("-"):
        return EntryType.REMOVED
    if line.startswith(" "):
        return EntryType.CONTEXT
    return EntryType.OTHER


class _HunkBuilder:
    """Accumulates the entries of one hunk while tracking both line counters."""

    def __init__(self, old_start: int, old_count: int, new_start: int, new_count: int):
        self.old_start = old_start
        self.old_count = old_count
        self.new_start = new_start
        self.new_count = new_count
        self.original_line = old_start
        self.modified_line = new_start
        self.entries: list[DiffEntry] = []

    @property
    def is_complete(self) -> bool:
        """True once the lines declared by the header have all been read."""
        return (
            self.original_line - self.old_start >= self.old_count
            and self.modified_line - self.new_start >= self.new_count
        )

    def add(self, line: str) -> None:
        entry_type = _entry_type(line)
        if entry_type is EntryType.OTHER:
            # e.g. "\ No newline at end of file": kept, never numbered.
            self.entries.append(DiffEntry(entry_type, line))
            return

        content = line[1:]
        if entry_type is EntryType.ADDED:
            self.entries.append(DiffEntry(entry_type, content, modified_line_number=self.modified_line))
            self.modified_line += 1
        elif entry_type is EntryType.REMOVED:
            self.entries.append(DiffEntry(entry_type, content, original_line_number=self.original_line))
            self.original_line += 1
        else:
            self.entries.append(
                DiffEntry(
                    entry_type,
                    content,
                    original_line_number=self.original_line,
                    modified_line_number=self.modified_line,
                )
            )
            self.original_line += 1
            self.modified_line += 1

    def build(self) -> DiffHunk:
        return DiffHunk(
            old_start_line=self.old_start,
            old_line_count=self.old_count,
            new_start_line=self.new_start,
            new_line_count=self.new_count,
            entries=tuple(self.entries),
        )


def parse_diff(diff_text: str) -> ParsedDiff:
    """Parse one file's unified diff text into a ParsedDiff.

    Empty lines inside a hunk are skipped rather than treated as context.
    GitHub emits a single space for a blank context line, and that line is
    still numbered; only a line with no prefix at all carries no position.
    """
    if not isinstance(diff_text, str):
        raise TypeError(f"diff text must be a str, got {type(diff_text).__name__}")

    if not diff_text.strip():
        return EMPTY_DIFF

    hunks: list[DiffHunk] = []
    current: _HunkBuilder | None = None

    for line in diff_text.splitlines():
        header = _HUNK_HEADER_RE.match(line)
        if header:
            if current is not None:
                hunks.append(current.build())
            old_start, old_count, new_start, new_count = header.groups()
            current = _HunkBuilder(
                int(old_start),
                int(old_count) if old_count is not None else 1,
                int(new_start),
                int(new_count) if new_count is not None else 1,
            )
            continue

        # Inside a hunk that still expects lines, "--- x" is a removed "-- x".
        if (current is None or current.is_complete) and line.startswith(_METADATA_PREFIXES):
            continue

        if current is None or not line:
            continue

        current.add(line)

    if current is not None:
        hunks.append(current.build())

    parsed = ParsedDiff(hunks=tuple(hunks), has_content=True)
    logger.debug(
        "Parsed diff with %d hunk(s), %d original line(s), %d modified line(s)",
        len(parsed.hunks),
        parsed.original_line_count,
        parsed.modified_line_count,
    )
    return parsed
