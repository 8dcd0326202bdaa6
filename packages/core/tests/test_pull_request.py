"""Tests for GitHub pull request helper functions."""

from unittest.mock import MagicMock

import pytest
from github import GithubException

from patchlens_core.gh.pull_request import get_file_content, post_comments
from patchlens_core.models import PostableComment, Side

SHA = "a" * 40


def _inline(line=5, side=Side.LEFT, path="src/app.py"):
    return PostableComment(path=path, body="**[WARNING]**\n\nbad", severity="warning", type="inline", line=line, side=side)


def _general(path="src/app.py"):
    return PostableComment(path=path, body="**[INFO]**\n\noverall", severity="info", type="general")


class TestGetFileContent:
    def test_returns_decoded_content(self):
        repo = MagicMock()
        repo.get_contents.return_value.decoded_content = b"print('hi')\n"

        assert get_file_content(repo, "app.py", SHA) == "print('hi')\n"
        repo.get_contents.assert_called_once_with("app.py", ref=SHA)

    def test_returns_none_on_github_error(self):
        repo = MagicMock()
        repo.get_contents.side_effect = GithubException(404, {"message": "Not Found"}, None)

        assert get_file_content(repo, "missing.py", SHA) is None

    def test_returns_none_for_directory(self):
        repo = MagicMock()
        repo.get_contents.return_value = [MagicMock(), MagicMock()]

        assert get_file_content(repo, "src", SHA) is None


class TestPostComments:
    def test_inline_comments_sent_with_line_and_side(self):
        pr = MagicMock()

        counts = post_comments(pr, [_inline(line=5, side=Side.LEFT)], "summary", "COMMENT")

        pr.create_review.assert_called_once()
        kwargs = pr.create_review.call_args.kwargs
        assert kwargs["body"] == "summary"
        assert kwargs["event"] == "COMMENT"
        assert kwargs["comments"] == [
            {"path": "src/app.py", "line": 5, "side": "LEFT", "body": "**[WARNING]**\n\nbad"}
        ]
        pr.create_issue_comment.assert_not_called()
        assert counts == {"inline": 1, "general": 0}

    def test_general_comments_posted_as_issue_comments(self):
        pr = MagicMock()

        counts = post_comments(pr, [_general()], "summary", "COMMENT")

        pr.create_review.assert_called_once_with(body="summary", event="COMMENT")
        pr.create_issue_comment.assert_called_once_with("**[INFO]**\n\noverall")
        assert counts == {"inline": 0, "general": 1}

    def test_rejected_inline_review_falls_back_to_general(self):
        pr = MagicMock()
        pr.create_review.side_effect = [GithubException(422, {"message": "Unprocessable"}, None), None]

        counts = post_comments(pr, [_inline(line=7)], "summary", "REQUEST_CHANGES")

        assert pr.create_review.call_count == 2
        assert "comments" not in pr.create_review.call_args.kwargs
        body = pr.create_issue_comment.call_args.args[0]
        assert "`src/app.py` line 7" in body
        assert counts == {"inline": 0, "general": 1}

    def test_error_without_inline_comments_propagates(self):
        pr = MagicMock()
        pr.create_review.side_effect = GithubException(403, {"message": "Forbidden"}, None)

        with pytest.raises(GithubException):
            post_comments(pr, [], "summary", "APPROVE")
