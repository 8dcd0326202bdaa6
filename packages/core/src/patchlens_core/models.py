"""Comment and file shapes shared by the review pipeline.

Decoupled from PyGithub so the core can be exercised with plain objects.
``ChangedFile.from_github`` is the only place that knows GitHub's File shape.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Union

from patchlens_core.utils.code import detect_language

SEVERITIES = ("error", "warning", "info")
COMMENT_TYPES = ("inline", "general")

_FALLBACK_MAX_LENGTH = 800


@dataclass(frozen=True)
class ReviewComment:
    """A candidate comment as returned by the AI, before line reconciliation.

    ``line_number`` is chunk-local when it comes from the AI and absolute once
    it has been through ``adjust_comment_line_numbers``.
    """

    type: str = "inline"
    content: str = ""
    severity: str = "warning"
    suggestion: str | None = None
    line_number: int | None = None

    @classmethod
    def from_dict(cls, data: dict) -> ReviewComment | None:
        """Build a comment from one decoded JSON object, tolerating missing or odd fields.

        Returns None when the object carries no usable text.
        """
        if not isinstance(data, dict):
            return None
        content = data.get("content") or data.get("comment") or ""
        if not isinstance(content, str) or not content.strip():
            return None

        line = data.get("line_number", data.get("line"))
        if isinstance(line, str) and line.strip().isdigit():
            line = int(line.strip())
        if isinstance(line, bool) or not isinstance(line, int) or line <= 0:
            line = None

        severity = str(data.get("severity") or "info").lower()
        if severity not in SEVERITIES:
            severity = "warning"

        comment_type = data.get("type")
        if comment_type not in COMMENT_TYPES:
            comment_type = "inline" if line is not None else "general"

        suggestion = data.get("suggestion")
        return cls(
            type=comment_type,
            content=content.strip(),
            severity=severity,
            suggestion=suggestion if isinstance(suggestion, str) and suggestion.strip() else None,
            line_number=line,
        )


@dataclass(frozen=True)
class ParsedComments:
    comments: tuple[ReviewComment, ...] = ()

    def as_comments(self) -> list[ReviewComment]:
        return list(self.comments)


@dataclass(frozen=True)
class FallbackTextComment:
    """The model answered, but not with the JSON we asked for.

    The raw text is kept and surfaced as a single general comment.
    """

    text: str

    def as_comments(self) -> list[ReviewComment]:
        cleaned = self.text.strip()
        truncated = len(cleaned) > _FALLBACK_MAX_LENGTH
        paragraphs = [p.strip() for p in cleaned[:_FALLBACK_MAX_LENGTH].splitlines() if p.strip()]
        if not paragraphs:
            return []
        body = "AI Review Feedback:\n\n" + "\n\n".join(paragraphs)
        if truncated:
            body += "\n\n[Response truncated]"
        return [ReviewComment(type="general", content=body, severity="info")]


ReviewResponse = Union[ParsedComments, FallbackTextComment]


class Side(str, enum.Enum):
    LEFT = "LEFT"  # original file
    RIGHT = "RIGHT"  # modified file / full content


@dataclass(frozen=True)
class PostableComment:
    path: str
    body: str
    severity: str
    type: str
    line: int | None = None
    side: Side = Side.RIGHT
    source_line: int | None = None

    @property
    def is_general(self) -> bool:
        return self.line is None

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "line": self.line,
            "side": self.side.value,
            "body": self.body,
            "severity": self.severity,
            "type": self.type,
        }


@dataclass
class ChangedFile:
    """One changed file as seen by the reviewer.

    At most one of ``patch`` / ``content`` is authoritative; neither being
    present is a normal skip condition.
    """

    filename: str
    status: str = "modified"
    patch: str | None = None
    content: str | None = None
    size: int | None = None
    additions: int = 0
    deletions: int = 0
    language: str = field(default="")

    def __post_init__(self):
        if not self.language:
            self.language = detect_language(self.filename)

    @classmethod
    def from_github(cls, file, content: str | None = None) -> ChangedFile:
        """Adapt a PyGithub ``File`` (from ``pr.get_files()``)."""
        return cls(
            filename=file.filename,
            status=file.status,
            patch=getattr(file, "patch", None),
            content=content,
            size=len(content.encode("utf-8")) if content is not None else None,
            additions=getattr(file, "additions", 0) or 0,
            deletions=getattr(file, "deletions", 0) or 0,
        )
