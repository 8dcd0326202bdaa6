from __future__ import annotations

import logging

from github import Github, GithubException

logger = logging.getLogger(__name__)


def get_repo(repo_name: str, token: str):
    return Github(token).get_repo(repo_name)


def get_pull(repo, pr_number: int):
    return repo.get_pull(pr_number)


def get_pull_requests(repo, state: str = "open"):
    return repo.get_pulls(state=state)


def get_diff(pr):
    return pr.get_files()


def get_file_content(repo, path: str, ref: str) -> str | None:
    """Return the decoded file at ``ref``, or None when it cannot be fetched."""
    try:
        contents = repo.get_contents(path, ref=ref)
    except GithubException as e:
        logger.warning("Could not fetch %s@%s: %s", path, ref[:7], e)
        return None
    if isinstance(contents, list):
        # A directory listing, not a file.
        return None
    return contents.decoded_content.decode("utf-8", errors="replace")


def _general_body(comment) -> str:
    if comment.line is None:
        return comment.body
    return f"**`{comment.path}` line {comment.line}**\n\n{comment.body}"


def post_comments(pr, comments: list, body: str, event: str) -> dict:
    """Post a review with inline comments, plus general comments as issue comments.

    If GitHub rejects the inline review (typically a line it cannot resolve
    in the diff), the review is posted without inline comments and each
    rejected comment is re-posted as a general comment naming its file and line.
    Returns counts of what ended up where.
    """
    inline = [c for c in comments if not c.is_general]
    general = [c for c in comments if c.is_general]

    api_comments = [{"path": c.path, "line": c.line, "side": c.side.value, "body": c.body} for c in inline]
    try:
        if api_comments:
            pr.create_review(body=body, event=event, comments=api_comments)
        else:
            pr.create_review(body=body, event=event)
        posted_inline = len(api_comments)
    except GithubException as e:
        if not api_comments:
            raise
        logger.warning("Inline review rejected (%s); re-posting %d comment(s) as general", e, len(inline))
        pr.create_review(body=body, event=event)
        general = inline + general
        posted_inline = 0

    for comment in general:
        pr.create_issue_comment(_general_body(comment))

    return {"inline": posted_inline, "general": len(general)}
