"""Split reviewable text into size-bounded chunks that remember their line range.

Every chunk records the 1-based, inclusive line range it covers in the text it
was cut from, so a chunk-local line number ``n`` reported by the AI maps back
to ``chunk.start_line + n - 1``. Consecutive chunks share an overlap region of
whole lines taken from the tail of the previous chunk; line numbers inside
that region legitimately appear in both chunks.
"""

from __future__ import annotations

import dataclasses
import logging
import re
from dataclasses import dataclass, field

from patchlens_core.models import ReviewComment

logger = logging.getLogger(__name__)

DEFAULT_MAX_CHUNK_SIZE = 50000
DEFAULT_OVERLAP = 1000

_QUOTE_RE = re.compile(r"[\"'`]")


@dataclass(frozen=True)
class Chunk:
    content: str
    start_line: int
    end_line: int
    chunk_index: int = 0
    total_chunks: int = 1

    @property
    def line_count(self) -> int:
        return self.end_line - self.start_line + 1


@dataclass(frozen=True)
class ChunkValidation:
    is_valid: bool = True
    issues: list[str] = field(default_factory=list)


def _line_count(content: str) -> int:
    return len(content.split("\n"))


def _overlap_lines(lines: list[str], end_index: int, max_overlap: int) -> list[str]:
    """Whole lines ending at ``end_index`` (inclusive) whose joined size fits in ``max_overlap``."""
    collected: list[str] = []
    size = 0
    for i in range(end_index, -1, -1):
        cost = len(lines[i]) + 1
        if size + cost > max_overlap:
            break
        collected.append(lines[i])
        size += cost
    collected.reverse()
    return collected


def chunk_content(
    content: str,
    max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE,
    overlap: int = DEFAULT_OVERLAP,
) -> list[Chunk]:
    """Split ``content`` into chunks of at most ``max_chunk_size`` characters.

    A single line longer than ``max_chunk_size`` still becomes its own chunk;
    lines are never cut. The overlap carried into a chunk is trimmed to half a
    chunk and to what still fits, so every chunk starts after the previous one.
    """
    if max_chunk_size <= 0:
        raise ValueError(f"max_chunk_size must be positive, got {max_chunk_size}")
    if overlap < 0:
        raise ValueError(f"overlap must not be negative, got {overlap}")

    if len(content) <= max_chunk_size:
        return [Chunk(content=content, start_line=1, end_line=_line_count(content))]

    lines = content.split("\n")
    pending: list[tuple[str, int, int]] = []
    buffer: list[str] = []
    buffer_size = 0
    start_line = 1

    for i, line in enumerate(lines):
        added = len(line) + (1 if buffer else 0)
        if buffer and buffer_size + added > max_chunk_size:
            # Lines are 0-based here; the sealed chunk ends on 1-based line i.
            pending.append(("\n".join(buffer), start_line, i))
            # At most half a chunk, and the current line must still fit after it.
            seed_budget = min(overlap, max_chunk_size // 2, max_chunk_size - len(line) - 1)
            buffer = _overlap_lines(lines, i - 1, seed_budget)
            start_line = max(1, i - len(buffer) + 1)
            buffer_size = len("\n".join(buffer))
            added = len(line) + (1 if buffer else 0)
        buffer.append(line)
        buffer_size += added

    if buffer:
        pending.append(("\n".join(buffer), start_line, len(lines)))

    total = len(pending)
    chunks = [
        Chunk(content=text, start_line=start, end_line=end, chunk_index=index, total_chunks=total)
        for index, (text, start, end) in enumerate(pending)
    ]
    logger.debug("Split %d line(s) into %d chunk(s)", len(lines), total)
    return chunks


def adjust_comment_line_numbers(
    comments: list[ReviewComment],
    chunk: Chunk,
    total_lines: int,
) -> list[ReviewComment]:
    """Project chunk-local line numbers onto the chunked text, clamped to ``[1, total_lines]``."""
    upper = max(1, total_lines)
    adjusted = []
    for comment in comments:
        if comment.line_number is None:
            adjusted.append(comment)
            continue
        line = chunk.start_line + comment.line_number - 1
        adjusted.append(dataclasses.replace(comment, line_number=max(1, min(line, upper))))
    return adjusted


def validate_chunk(chunk: Chunk | str) -> ChunkValidation:
    """Heuristics that a chunk boundary split a syntactic construct.

    Advisory only: the result is meant for a log line, never for rejecting
    or repairing the chunk.
    """
    text = chunk.content if isinstance(chunk, Chunk) else chunk
    issues = []

    if text.count("{") != text.count("}"):
        issues.append("Unmatched braces - chunk may split code block")

    if len(_QUOTE_RE.findall(text)) % 2 != 0:
        issues.append("Unmatched quotes - chunk may split string literal")

    if text.count("/*") > text.count("*/"):
        issues.append("Unclosed multi-line comment")

    return ChunkValidation(is_valid=not issues, issues=issues)
