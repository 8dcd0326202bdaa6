"""Translate AI-facing line numbers back to file line numbers.

The AI never sees the file itself when only a patch is available. It sees the
reviewable text produced by ``build_reviewable_text`` (hunk entries flattened
into ``+``/``-``/`` `` prefixed lines) and reports line numbers relative to
that text. Two lookups exist:

- ``map_to_original`` / ``map_to_modified`` treat the line as an offset into a
  single hunk's entry list. Without ``hunk_index`` the first hunk long enough
  to contain the offset and carrying a number for the requested side wins.
- ``map_reviewable_line`` resolves a line of the flattened multi-hunk text
  through the ``LineRef`` table recorded while flattening, so the hunk-scoped
  lookup is always given the right hunk.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from patchlens_core.diff.parser import DiffEntry, EntryType, ParsedDiff

logger = logging.getLogger(__name__)

DEFAULT_MAX_LINES = 1000
TARGETS = ("original", "modified")

_PREFIXES = {EntryType.ADDED: "+", EntryType.REMOVED: "-", EntryType.CONTEXT: " "}


@dataclass(frozen=True)
class LineRef:
    """Position of one flattened line: hunk index (0-based) and 1-based offset into its entries."""

    hunk_index: int
    offset: int


@dataclass(frozen=True)
class ReviewableText:
    text: str
    line_refs: tuple[LineRef, ...] = field(default_factory=tuple)

    @property
    def line_count(self) -> int:
        return len(self.line_refs)

    def resolve(self, line: int | None) -> LineRef | None:
        if line is None or line <= 0 or line > len(self.line_refs):
            return None
        return self.line_refs[line - 1]


def _check_target(target: str) -> None:
    if target not in TARGETS:
        raise ValueError(f"target must be one of {TARGETS}, got {target!r}")


def _line_number(entry: DiffEntry, target: str) -> int | None:
    return entry.original_line_number if target == "original" else entry.modified_line_number


def _map_local_line(local_line: int | None, parsed: ParsedDiff, target: str, hunk_index: int | None) -> int | None:
    if parsed is None or not parsed.hunks or local_line is None or local_line <= 0:
        return None

    if hunk_index is not None:
        candidates = parsed.hunks[hunk_index : hunk_index + 1] if 0 <= hunk_index < len(parsed.hunks) else ()
    else:
        candidates = parsed.hunks

    for hunk in candidates:
        if local_line <= len(hunk.entries):
            number = _line_number(hunk.entries[local_line - 1], target)
            if number is not None:
                return number

    logger.warning("Could not map patch line %d to a %s file line", local_line, target)
    return None


def map_to_original(local_line: int | None, parsed: ParsedDiff, hunk_index: int | None = None) -> int | None:
    """Return the original-file line for a hunk-relative 1-based line, or None."""
    return _map_local_line(local_line, parsed, "original", hunk_index)


def map_to_modified(local_line: int | None, parsed: ParsedDiff, hunk_index: int | None = None) -> int | None:
    """Return the modified-file line for a hunk-relative 1-based line, or None."""
    return _map_local_line(local_line, parsed, "modified", hunk_index)


def build_reviewable_text(
    parsed: ParsedDiff,
    include_context: bool = True,
    max_lines: int = DEFAULT_MAX_LINES,
) -> ReviewableText:
    """Flatten hunks into prefixed lines, recording where every emitted line came from.

    Lines of type ``other`` are never emitted; their offsets are still counted
    so a ``LineRef`` always indexes the hunk's full entry list.
    """
    if parsed is None or not parsed.hunks:
        return ReviewableText(text="")

    lines: list[str] = []
    refs: list[LineRef] = []

    for hunk_index, hunk in enumerate(parsed.hunks):
        for offset, entry in enumerate(hunk.entries, 1):
            if len(lines) >= max_lines:
                break
            if entry.type is EntryType.CONTEXT and not include_context:
                continue
            prefix = _PREFIXES.get(entry.type)
            if prefix is None:
                continue
            lines.append(f"{prefix}{entry.content}")
            refs.append(LineRef(hunk_index=hunk_index, offset=offset))
        if len(lines) >= max_lines:
            break

    return ReviewableText(text="\n".join(lines), line_refs=tuple(refs))


def extract_reviewable_text(
    parsed: ParsedDiff,
    include_context: bool = True,
    max_lines: int = DEFAULT_MAX_LINES,
) -> str:
    return build_reviewable_text(parsed, include_context=include_context, max_lines=max_lines).text


def map_reviewable_line(
    line: int | None,
    reviewable: ReviewableText,
    parsed: ParsedDiff,
    target: str = "original",
) -> int | None:
    """Map a 1-based line of the flattened reviewable text to a file line number."""
    _check_target(target)
    ref = reviewable.resolve(line)
    if ref is None:
        logger.warning("Reviewable line %s is outside the %d-line review text", line, reviewable.line_count)
        return None
    return _map_local_line(ref.offset, parsed, target, ref.hunk_index)


def is_valid_line_number(line: int | None, parsed: ParsedDiff, target: str = "original") -> bool:
    _check_target(target)
    if parsed is None or not parsed.hunks or line is None or line <= 0:
        return False
    if target == "original":
        return line <= parsed.original_line_count
    return line <= parsed.modified_line_count
