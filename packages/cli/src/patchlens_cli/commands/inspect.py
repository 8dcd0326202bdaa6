"""inspect command: show how a patch or file would be parsed and chunked.

Makes no AI or GitHub calls, so it is safe to run on any local file when
tuning chunk_size / chunk_overlap or debugging a misplaced comment.
"""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from patchlens_core.chunker import chunk_content, validate_chunk
from patchlens_core.diff.mapper import build_reviewable_text, map_reviewable_line
from patchlens_core.diff.parser import parse_diff

console = Console()


def _looks_like_patch(text: str) -> bool:
    return any(line.startswith("@@ -") for line in text.splitlines())


def _hunk_table(parsed) -> Table:
    table = Table(title="Hunks")
    table.add_column("#", justify="right")
    table.add_column("Original", justify="right")
    table.add_column("Modified", justify="right")
    table.add_column("+", justify="right", style="green")
    table.add_column("-", justify="right", style="red")
    table.add_column("Context", justify="right", style="dim")
    for i, hunk in enumerate(parsed.hunks):
        orig, mod = hunk.original_range, hunk.modified_range
        table.add_row(
            str(i),
            f"{orig.start}-{orig.end}",
            f"{mod.start}-{mod.end}",
            str(hunk.added_count),
            str(hunk.removed_count),
            str(hunk.context_count),
        )
    return table


def _chunk_table(chunks) -> Table:
    table = Table(title="Chunks")
    table.add_column("#", justify="right")
    table.add_column("Lines", justify="right")
    table.add_column("Chars", justify="right")
    table.add_column("Boundary warnings")
    for chunk in chunks:
        validation = validate_chunk(chunk)
        table.add_row(
            f"{chunk.chunk_index + 1}/{chunk.total_chunks}",
            f"{chunk.start_line}-{chunk.end_line}",
            str(len(chunk.content)),
            "; ".join(validation.issues) or "-",
        )
    return table


@click.command("inspect")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--mode",
    type=click.Choice(["auto", "patch", "full"]),
    default="auto",
    show_default=True,
    help="Treat the file as a unified diff or as full file content.",
)
@click.option("--chunk-size", type=int, default=None, help="Override chunk_size from the config.")
@click.option("--overlap", type=int, default=None, help="Override chunk_overlap from the config.")
@click.option("--line", "lines", type=int, multiple=True, help="Show where a review-text line maps (patch mode).")
@click.pass_context
def inspect_cmd(ctx, path: Path, mode: str, chunk_size: int | None, overlap: int | None, lines: tuple[int, ...]):
    """Show the hunks, review text line mapping and chunks for PATH."""
    config = (ctx.obj or {}).get("config", {})
    chunk_size = chunk_size or config.get("chunk_size", 50000)
    overlap = overlap if overlap is not None else config.get("chunk_overlap", 1000)

    text = path.read_text(encoding="utf-8", errors="replace")
    is_patch = mode == "patch" or (mode == "auto" and _looks_like_patch(text))

    if is_patch:
        parsed = parse_diff(text)
        if not parsed.hunks:
            raise click.ClickException(f"{path} contains no diff hunks.")
        console.print(_hunk_table(parsed))
        reviewable = build_reviewable_text(
            parsed,
            include_context=config.get("include_context", True),
            max_lines=config.get("max_review_lines", 1000),
        )
        review_text = reviewable.text
        console.print(
            f"Review text: {reviewable.line_count} line(s); "
            f"original file spans {parsed.original_line_count}, modified {parsed.modified_line_count}"
        )
        for line in lines:
            original = map_reviewable_line(line, reviewable, parsed, "original")
            modified = map_reviewable_line(line, reviewable, parsed, "modified")
            console.print(f"  review line {line} → original {original or '-'}, modified {modified or '-'}")
    else:
        review_text = text
        line_total = len(text.split("\n"))
        console.print(f"Full content: {line_total} line(s)")

    try:
        chunks = chunk_content(review_text, max_chunk_size=chunk_size, overlap=overlap)
    except ValueError as e:
        raise click.UsageError(str(e))
    console.print(_chunk_table(chunks))
