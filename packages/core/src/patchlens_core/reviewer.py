"""Core PR review orchestration.

Per file, per review:

    start → content resolved (patch | full | none) → chunked
          → per chunk: AI review → reconcile (adjust, remap, validate)
          → aggregated

Files are reviewed in parallel with bounded concurrency; a failure in one
file is recorded on that file's result and never aborts its siblings.
"""

from __future__ import annotations

import enum
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone

from github import GithubException
from rich.console import Console

from patchlens_core.chunker import chunk_content, validate_chunk
from patchlens_core.diff.mapper import build_reviewable_text
from patchlens_core.diff.parser import parse_diff
from patchlens_core.gh.pull_request import get_diff, get_file_content, get_pull, get_repo, post_comments
from patchlens_core.models import ChangedFile, PostableComment
from patchlens_core.providers.registry import build_reviewer
from patchlens_core.reconcile import reconcile_comments
from patchlens_core.utils.code import is_code_file, is_excluded

console = Console()
logger = logging.getLogger(__name__)

_SEVERITY_ORDER = ("error", "warning", "info")


class ContentKind(str, enum.Enum):
    PATCH = "patch"
    FULL = "full"
    NONE = "none"


@dataclass
class FileReview:
    filename: str
    kind: ContentKind = ContentKind.NONE
    comments: list[PostableComment] = field(default_factory=list)
    chunks: int = 0
    skipped: bool = False
    error: str | None = None


@dataclass
class ReviewSummary:
    """Result returned by run_review, enough for the CLI to report on."""

    repo: str
    pr_number: int
    head_sha: str
    event: str  # "APPROVE" | "COMMENT" | "REQUEST_CHANGES"
    reviewed_files: list[str] = field(default_factory=list)
    skipped_files: list[str] = field(default_factory=list)
    failed_files: list[str] = field(default_factory=list)
    total_comments: int = 0
    comments: list[dict] = field(default_factory=list)
    reviewed_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


def resolve_content(file: ChangedFile) -> ContentKind:
    if file.status == "removed":
        return ContentKind.NONE
    if file.patch and file.patch.strip():
        return ContentKind.PATCH
    if file.content and file.content.strip():
        return ContentKind.FULL
    return ContentKind.NONE


def _chunk_context(file: ChangedFile, kind: ContentKind, chunk, context: str = "") -> str:
    header = (
        f"File: {file.filename}\n"
        f"Status: {file.status}\n"
        f"Changes: +{file.additions} -{file.deletions}\n"
        f"Language: {file.language}\n"
        f"Content: {'unified diff' if kind is ContentKind.PATCH else 'full file'}\n"
        f"Chunk: {chunk.chunk_index + 1}/{chunk.total_chunks}\n"
        f"Lines: {chunk.line_count}"
    )
    return f"{context}\n\n{header}" if context else header


def _dedupe(comments: list[PostableComment]) -> list[PostableComment]:
    """Drop repeats produced by the overlap region shared by consecutive chunks."""
    seen: set[tuple] = set()
    unique = []
    for c in comments:
        key = (c.path, c.line, c.body.strip())
        if key in seen:
            continue
        seen.add(key)
        unique.append(c)
    return unique


def review_file(reviewer, file: ChangedFile, config: dict, context: str = "") -> FileReview:
    """Review one changed file and return its postable comments.

    ``context`` (typically the PR title and description) is sent ahead of the
    per-chunk file details.
    """
    kind = resolve_content(file)
    result = FileReview(filename=file.filename, kind=kind)

    if kind is ContentKind.NONE:
        logger.debug("No reviewable content for %s, skipping", file.filename)
        result.skipped = True
        return result

    parsed = reviewable = None
    if kind is ContentKind.PATCH:
        parsed = parse_diff(file.patch)
        if not parsed.has_content or not parsed.hunks:
            logger.debug("Patch for %s has no hunks, skipping", file.filename)
            result.skipped = True
            return result
        reviewable = build_reviewable_text(
            parsed,
            include_context=config.get("include_context", True),
            max_lines=config.get("max_review_lines", 1000),
        )
        text = reviewable.text
        total_lines = reviewable.line_count
        logger.debug(
            "Parsed patch for %s: %d hunk(s), %d review line(s)", file.filename, len(parsed.hunks), total_lines
        )
    else:
        text = file.content
        total_lines = len(text.split("\n"))

    if not text.strip():
        result.skipped = True
        return result

    chunks = chunk_content(
        text,
        max_chunk_size=config.get("chunk_size", 50000),
        overlap=config.get("chunk_overlap", 1000),
    )
    result.chunks = len(chunks)

    for chunk in chunks:
        if chunk.total_chunks > 1:
            validation = validate_chunk(chunk)
            if not validation.is_valid:
                logger.debug(
                    "%s chunk %d/%d may split a construct: %s",
                    file.filename,
                    chunk.chunk_index + 1,
                    chunk.total_chunks,
                    "; ".join(validation.issues),
                )

        raw = reviewer.review_code(
            chunk.content,
            file.language,
            config.get("persona", "senior-engineer"),
            _chunk_context(file, kind, chunk, context),
        )
        result.comments.extend(
            reconcile_comments(
                raw,
                chunk,
                parsed,
                total_lines,
                path=file.filename,
                file_size=file.size,
                reviewable=reviewable,
                target=config.get("line_target", "original"),
            )
        )

    result.comments = _dedupe(result.comments)
    logger.debug("%s: %d comment(s) from %d chunk(s)", file.filename, len(result.comments), result.chunks)
    return result


def _review_file_safely(reviewer, file: ChangedFile, config: dict, context: str = "") -> FileReview:
    try:
        return review_file(reviewer, file, config, context)
    except Exception as e:
        logger.error("Failed to review %s: %s", file.filename, e)
        return FileReview(filename=file.filename, error=str(e))


def review_files(reviewer, files: list[ChangedFile], config: dict, context: str = "") -> list[FileReview]:
    """Review files concurrently (at most ``concurrency`` at once), results in input order."""
    workers = max(1, config.get("concurrency", 3))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(_review_file_safely, reviewer, f, config, context) for f in files]
        return [f.result() for f in futures]


def _pr_context(pr) -> str:
    description = (pr.body or "").strip()
    context = f"Pull request: {pr.title}"
    return f"{context}\n{description}" if description else context


def _determine_event(comments: list[dict]) -> str:
    """Choose the GitHub review event based on the highest severity present."""
    if not comments:
        return "APPROVE"
    if any(c.get("severity") == "error" for c in comments):
        return "REQUEST_CHANGES"
    return "COMMENT"


def _build_summary(file_reviews: list[FileReview], all_comments: list[dict], elapsed_seconds: float) -> str:
    """Build the top-level review body posted as the GitHub review description."""
    reviewed = [f for f in file_reviews if not f.skipped and f.error is None]
    skipped = [f for f in file_reviews if f.skipped]
    errors = [f for f in file_reviews if f.error is not None]

    totals = {s: 0 for s in _SEVERITY_ORDER}
    for c in all_comments:
        sev = c.get("severity", "warning")
        totals[sev] = totals.get(sev, 0) + 1
    total_comments = len(all_comments)

    if elapsed_seconds < 60:
        time_str = f"{int(elapsed_seconds)}s"
    else:
        time_str = f"{elapsed_seconds / 60:.1f} min"

    lines = ["## Review summary\n"]

    if total_comments == 0:
        verdict = "No issues found. The changes look good."
    else:
        issue_str = ", ".join(f"{totals[s]} {s}" for s in _SEVERITY_ORDER if totals.get(s))
        verdict = f"{issue_str}" + (" (changes required)." if totals["error"] else ".")
    lines.append(f"> {verdict}\n")

    lines.append(
        f"**{len(reviewed)}** file(s) reviewed"
        + (f", **{len(skipped)}** skipped" if skipped else "")
        + (f", **{len(errors)}** error(s)" if errors else "")
        + f" · **{total_comments}** comment(s) · reviewed in {time_str}\n"
    )

    files_with_comments = [f for f in reviewed if f.comments]
    if files_with_comments:
        lines.append("| File | Error | Warning | Info | Total |")
        lines.append("|------|:-----:|:-------:|:----:|:-----:|")
        for f in files_with_comments:
            counts = {s: sum(1 for c in f.comments if c.severity == s) for s in _SEVERITY_ORDER}
            lines.append(
                f"| `{f.filename}` "
                f"| {counts['error'] or '—'} "
                f"| {counts['warning'] or '—'} "
                f"| {counts['info'] or '—'} "
                f"| {len(f.comments)} |"
            )

    if errors:
        lines.append("\n**Could not review:**")
        for f in errors:
            lines.append(f"- `{f.filename}`: {f.error}")

    return "\n".join(lines)


def print_shadow_comments(comments: list[dict]) -> None:
    """Print review comments to the terminal without posting to GitHub."""
    _severity_color = {"error": "red", "warning": "yellow", "info": "blue"}
    if not comments:
        console.print("[yellow]Shadow mode: no comments generated.[/yellow]")
        return
    console.print(f"\n[bold]Shadow review: {len(comments)} comment(s) (not posted)[/bold]\n")
    for c in comments:
        severity = c.get("severity", "warning")
        color = _severity_color.get(severity, "white")
        where = f"line [bold]{c['line']}[/bold] ({c['side']})" if c.get("line") is not None else "general"
        console.print(f"[bold cyan]{c['path']}[/bold cyan]  {where}  [{color}]{severity.upper()}[/{color}]")
        console.print(f"  {c['body']}")
        console.print()


def collect_files(this_repo, this_pr, config: dict) -> tuple[list[ChangedFile], list[str]]:
    """Turn the PR's GitHub files into ChangedFiles, returning (reviewable, skipped names).

    Full content is fetched only for files GitHub sent without a patch.
    """
    exclude_patterns = config.get("exclude", [])
    max_file_size = config.get("max_file_size", 1048576)
    files: list[ChangedFile] = []
    skipped: list[str] = []

    for gh_file in sorted(get_diff(this_pr), key=lambda f: f.filename):
        name = gh_file.filename
        if is_excluded(name, exclude_patterns) or not is_code_file(name):
            logger.debug("Skipping excluded file %s", name)
            skipped.append(name)
            continue

        content = None
        if not gh_file.patch and gh_file.status != "removed":
            content = get_file_content(this_repo, name, this_pr.head.sha)
        file = ChangedFile.from_github(gh_file, content)

        if file.size is not None and file.size > max_file_size:
            logger.debug("Skipping large file %s: %d bytes", name, file.size)
            skipped.append(name)
            continue
        files.append(file)

    return files, skipped


def run_review(
    repo: str,
    pr_number: int,
    config: dict,
    auto_confirm: bool = False,
    shadow: bool = False,
    repo_obj=None,
) -> ReviewSummary | None:
    """Run the full PR review pipeline and return a ReviewSummary.

    Returns None on early exits (draft skip, declined confirmation).
    """
    this_repo = repo_obj if repo_obj is not None else get_repo(repo, token=config["github_token"])

    try:
        this_pr = get_pull(this_repo, pr_number)
    except GithubException:
        raise ValueError(f"PR #{pr_number} not found in {repo}.")

    if this_pr.draft and not config.get("review_draft_prs", False):
        console.print(
            "[yellow]Skipping draft PR. Set review_draft_prs: true in .patchlens.yml to review drafts.[/yellow]"
        )
        return None

    head_sha = this_pr.head.sha
    files, excluded = collect_files(this_repo, this_pr, config)
    console.print(f"Reviewing {len(files)} file(s) in {repo}#{pr_number} ({len(excluded)} excluded)")

    reviewer = build_reviewer(config)
    review_start = time.monotonic()
    file_reviews = review_files(reviewer, files, config, _pr_context(this_pr))
    elapsed = time.monotonic() - review_start

    postable = [c for f in file_reviews for c in f.comments]
    all_comments = [c.to_dict() for c in postable]
    for f in file_reviews:
        if f.error is not None:
            console.print(f"  [red]{f.filename}: {f.error}[/red]")
        elif not f.skipped:
            console.print(f"  {f.filename}: {len(f.comments)} comment(s) from {f.chunks} chunk(s)")

    event = _determine_event(all_comments)
    summary = ReviewSummary(
        repo=repo,
        pr_number=pr_number,
        head_sha=head_sha,
        event=event,
        reviewed_files=[f.filename for f in file_reviews if not f.skipped and f.error is None],
        skipped_files=excluded + [f.filename for f in file_reviews if f.skipped],
        failed_files=[f.filename for f in file_reviews if f.error is not None],
        total_comments=len(all_comments),
        comments=all_comments,
    )

    if shadow:
        print_shadow_comments(all_comments)
        console.print(f"[bold]Shadow review complete. {len(all_comments)} comment(s) would be posted.[/bold]")
        return summary

    if not auto_confirm:
        if all_comments:
            prompt = f"Post {len(all_comments)} comment(s) as {event}?"
        else:
            prompt = "No issues found. Post APPROVE review?"
        answer = input(f"{prompt} (y/n): ").strip().lower()
        if answer != "y":
            return None

    body = _build_summary(file_reviews, all_comments, elapsed)
    counts = post_comments(this_pr, postable, body, event)
    console.print(
        f"\n[green]Review posted: {event}. {counts['inline']} inline and "
        f"{counts['general']} general comment(s).[/green]"
    )
    return summary
