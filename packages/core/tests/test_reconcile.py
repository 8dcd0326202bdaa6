"""Tests for turning chunk-local AI comments into postable file comments."""

from patchlens_core.chunker import Chunk, chunk_content
from patchlens_core.diff.mapper import build_reviewable_text
from patchlens_core.diff.parser import parse_diff
from patchlens_core.models import ReviewComment, Side
from patchlens_core.reconcile import estimated_line_count, format_comment_body, is_plausible_line, reconcile_comments

SIMPLE_DIFF = """\
@@ -5,3 +5,3 @@
-const oldValue = "old";
+const newValue = "new";
 const otherVariable = true;"""

TWO_HUNKS = """\
@@ -10,2 +10,3 @@
 a = 1
+a2 = 1
 b = 3
@@ -30,2 +31,2 @@
-c = 4
+c = 5
 d = 6"""


DEEP_HUNK = """\
@@ -2500,3 +2500,3 @@
 a = 1
-b = 2
+b = 3
 c = 4"""

def _comment(line, content="issue", severity="warning", **kwargs):
    return ReviewComment(content=content, severity=severity, line_number=line, **kwargs)


def _full_chunk(lines=50, start=1):
    return Chunk(content="\n".join(["x"] * lines), start_line=start, end_line=start + lines - 1)


class TestFullContent:
    def test_line_is_offset_by_chunk_start(self):
        chunk = _full_chunk(lines=11, start=10)
        result = reconcile_comments([_comment(3)], chunk, None, 100, path="a.py")
        assert len(result) == 1
        assert result[0].line == 12
        assert result[0].side is Side.RIGHT
        assert result[0].path == "a.py"

    def test_hallucinated_line_is_dropped(self):
        result = reconcile_comments([_comment(999999)], _full_chunk(50), None, 50, path="a.py")
        assert result == []

    def test_non_positive_line_is_dropped(self):
        result = reconcile_comments([_comment(0), _comment(-4)], _full_chunk(50), None, 50, path="a.py")
        assert result == []

    def test_implausible_line_for_file_size_is_dropped(self):
        chunk = _full_chunk(lines=10, start=200)
        result = reconcile_comments([_comment(1)], chunk, None, 300, path="a.py", file_size=10)
        assert result == []

    def test_general_comment_is_kept_unanchored(self):
        comment = ReviewComment(type="general", content="Overall fine", severity="info")
        result = reconcile_comments([comment], _full_chunk(5), None, 5, path="a.py")
        assert len(result) == 1
        assert result[0].line is None
        assert result[0].is_general is True
        assert result[0].type == "general"


class TestPatchContent:
    def test_removed_line_maps_to_original(self):
        parsed = parse_diff(SIMPLE_DIFF)
        reviewable = build_reviewable_text(parsed)
        (chunk,) = chunk_content(reviewable.text)
        result = reconcile_comments(
            [_comment(1)], chunk, parsed, reviewable.line_count, path="a.js", reviewable=reviewable
        )
        assert result[0].line == 5
        assert result[0].side is Side.LEFT
        assert result[0].source_line == 1

    def test_added_line_dropped_for_original_target(self):
        parsed = parse_diff(SIMPLE_DIFF)
        reviewable = build_reviewable_text(parsed)
        (chunk,) = chunk_content(reviewable.text)
        result = reconcile_comments(
            [_comment(2)], chunk, parsed, reviewable.line_count, path="a.js", reviewable=reviewable
        )
        assert result == []

    def test_added_line_kept_for_modified_target(self):
        parsed = parse_diff(SIMPLE_DIFF)
        reviewable = build_reviewable_text(parsed)
        (chunk,) = chunk_content(reviewable.text)
        result = reconcile_comments(
            [_comment(2)],
            chunk,
            parsed,
            reviewable.line_count,
            path="a.js",
            reviewable=reviewable,
            target="modified",
        )
        assert result[0].line == 5
        assert result[0].side is Side.RIGHT

    def test_deep_hunk_line_survives_bounds_gate_without_file_size(self):
        parsed = parse_diff(DEEP_HUNK)
        reviewable = build_reviewable_text(parsed)
        (chunk,) = chunk_content(reviewable.text)
        result = reconcile_comments(
            [_comment(2)], chunk, parsed, reviewable.line_count, path="big.py", reviewable=reviewable
        )
        assert result[0].line == 2501

    def test_second_hunk_resolved_through_offset_table(self):
        parsed = parse_diff(TWO_HUNKS)
        reviewable = build_reviewable_text(parsed)
        (chunk,) = chunk_content(reviewable.text)
        result = reconcile_comments(
            [_comment(4)], chunk, parsed, reviewable.line_count, path="a.py", reviewable=reviewable
        )
        assert result[0].line == 30

    def test_without_offset_table_uses_hunk_scoped_lookup(self):
        parsed = parse_diff(TWO_HUNKS)
        reviewable = build_reviewable_text(parsed)
        (chunk,) = chunk_content(reviewable.text)
        result = reconcile_comments([_comment(1)], chunk, parsed, reviewable.line_count, path="a.py")
        assert result[0].line == 10

    def test_comment_in_later_chunk_maps_through_chunk_start(self):
        parsed = parse_diff(TWO_HUNKS)
        reviewable = build_reviewable_text(parsed)
        chunks = chunk_content(reviewable.text, max_chunk_size=20, overlap=0)
        last = chunks[-1]
        # The last review line is " d = 6", original line 31.
        local = reviewable.line_count - last.start_line + 1
        result = reconcile_comments(
            [_comment(local)], last, parsed, reviewable.line_count, path="a.py", reviewable=reviewable
        )
        assert result[0].line == 31


class TestHelpers:
    def test_estimated_line_count_defaults(self):
        assert estimated_line_count(None) == 1000
        assert estimated_line_count(10) == 50
        assert estimated_line_count(5000) == 5000
        assert estimated_line_count(None, known_lines=2502) == 2502
        assert estimated_line_count(10, known_lines=60) == 60

    def test_is_plausible_line(self):
        assert is_plausible_line(100, 50) is True
        assert is_plausible_line(101, 50) is False
        assert is_plausible_line(0, 50) is False
        assert is_plausible_line(None, 50) is False

    def test_format_comment_body(self):
        body = format_comment_body(_comment(1, content="Null check removed", severity="error", suggestion="Add it"))
        assert "**[ERROR]**" in body
        assert "Null check removed" in body
        assert "Add it" in body
