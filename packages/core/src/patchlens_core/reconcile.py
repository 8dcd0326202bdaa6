"""Turn AI comments for one chunk into postable, file-anchored comments.

The pipeline for a line-specific comment is:

    chunk-local gate → adjust to chunk source → (patch) remap to file line
                     → bounds gate → PostableComment

A comment that fails any step is dropped with a log entry; nothing here
raises on bad AI output. General comments (no line number) skip every step
and are posted unanchored.
"""

from __future__ import annotations

import logging

from patchlens_core.chunker import Chunk, adjust_comment_line_numbers
from patchlens_core.diff.mapper import (
    ReviewableText,
    is_valid_line_number,
    map_reviewable_line,
    map_to_modified,
    map_to_original,
)
from patchlens_core.diff.parser import ParsedDiff
from patchlens_core.models import PostableComment, ReviewComment, Side

logger = logging.getLogger(__name__)

DEFAULT_ESTIMATED_LINES = 1000
MIN_ESTIMATED_LINES = 50

_SEVERITY_LABELS = {"error": "ERROR", "warning": "WARNING", "info": "INFO"}


def estimated_line_count(file_size: int | None, known_lines: int = 0) -> int:
    """Upper bound on a file's line count from its byte size.

    Every line takes at least one byte, so the byte size is never lower than
    the line count. Unknown sizes fall back to a fixed default. ``known_lines``
    is a count the file is proven to reach, such as the last line a hunk
    header covers, and raises the estimate when the size is unknown or small.
    """
    return max(file_size or DEFAULT_ESTIMATED_LINES, MIN_ESTIMATED_LINES, known_lines)


def is_plausible_line(line: int | None, file_size: int | None, known_lines: int = 0) -> bool:
    if line is None or line <= 0:
        return False
    return line <= estimated_line_count(file_size, known_lines) * 2


def format_comment_body(comment: ReviewComment) -> str:
    label = _SEVERITY_LABELS.get(comment.severity, comment.severity.upper())
    body = f"**[{label}]**\n\n{comment.content}"
    if comment.suggestion:
        body += f"\n\n**Suggestion:** {comment.suggestion}"
    return body


def _to_postable(comment: ReviewComment, path: str, line: int | None, side: Side, source_line: int | None):
    return PostableComment(
        path=path,
        body=format_comment_body(comment),
        severity=comment.severity,
        type="general" if line is None else comment.type,
        line=line,
        side=side,
        source_line=source_line,
    )


def reconcile_comments(
    raw_comments: list[ReviewComment],
    chunk: Chunk,
    parsed_diff: ParsedDiff | None,
    total_lines: int,
    *,
    path: str,
    file_size: int | None = None,
    reviewable: ReviewableText | None = None,
    target: str = "original",
) -> list[PostableComment]:
    """Adjust, remap and validate the comments the AI produced for ``chunk``.

    ``total_lines`` is the line count of the text that was chunked: the
    flattened review text for a patch, the file itself for full content.
    When ``parsed_diff`` is given the adjusted line is a line of that review
    text and is remapped to ``target`` ("original" or "modified"); with
    ``reviewable`` the remap goes through its hunk offset table, otherwise
    through the hunk-scoped lookup.
    """
    side = Side.RIGHT if parsed_diff is None or target == "modified" else Side.LEFT
    known_lines = 0
    if parsed_diff is not None:
        known_lines = max(parsed_diff.original_line_count, parsed_diff.modified_line_count)
    results: list[PostableComment] = []

    candidates = []
    for comment in raw_comments:
        if comment.line_number is None:
            results.append(_to_postable(comment, path, None, side, None))
            continue
        if comment.line_number <= 0 or comment.line_number > chunk.line_count:
            logger.warning(
                "%s: dropping comment on chunk line %d (chunk %d/%d has %d lines)",
                path,
                comment.line_number,
                chunk.chunk_index + 1,
                chunk.total_chunks,
                chunk.line_count,
            )
            continue
        candidates.append(comment)

    for comment in adjust_comment_line_numbers(candidates, chunk, total_lines):
        source_line = comment.line_number
        line = source_line

        if parsed_diff is not None:
            if reviewable is not None:
                line = map_reviewable_line(source_line, reviewable, parsed_diff, target)
            elif target == "original":
                line = map_to_original(source_line, parsed_diff)
            else:
                line = map_to_modified(source_line, parsed_diff)

            if line is None:
                logger.debug("%s: dropping comment, review line %d has no %s line", path, source_line, target)
                continue
            if not is_valid_line_number(line, parsed_diff, target):
                logger.debug("%s: dropping comment, line %d is outside the diff", path, line)
                continue

        if not is_plausible_line(line, file_size, known_lines):
            logger.warning(
                "%s: dropping comment, line %d is implausible (estimated ~%d lines)",
                path,
                line,
                estimated_line_count(file_size, known_lines),
            )
            continue

        results.append(_to_postable(comment, path, line, side, source_line))

    return results
