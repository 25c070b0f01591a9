from __future__ import annotations

import logging

import requests
from github import Auth, Github, GithubException

logger = logging.getLogger(__name__)

PREAMBLE_MARKER = "<!-- PULL REQUEST ANALYZER GITHUB ACTION -->"

# PyGithub raises requests exceptions unchanged for transport failures.
API_ERRORS = (GithubException, requests.RequestException)


def get_client(token: str | None = None) -> Github:
    # retry=None: a rate-limited call must fail fast and be reported as inconclusive, not sleep.
    auth = Auth.Token(token) if token else None
    return Github(auth=auth, retry=None)


def get_repo(gh: Github, repo_name: str):
    return gh.get_repo(repo_name)


def get_issue(repo, pr_number: int):
    """Pull-request conversation comments live on the issue with the same number."""
    return repo.get_issue(pr_number)


def _log_github_error(prefix: str, e: Exception) -> None:
    if not isinstance(e, GithubException):
        # Transport failures (connection reset, timeout) carry no response body.
        logger.warning("%s: %s", prefix, e)
        return
    logger.warning("%s: %s", prefix, e.status)
    data = e.data if isinstance(e.data, dict) else {}
    if data.get("message"):
        logger.warning(" - message: %s", data["message"])
    for error in data.get("errors") or []:
        if isinstance(error, dict):
            logger.warning(" - '%s' - %s", error.get("field", "?"), error.get("message") or error.get("code"))
        else:
            logger.warning(" - %s", error)


def is_own_comment(comment, bot_login: str, bot_type: str = "User") -> bool:
    """Return True if the comment was posted by the analyzer on a previous run."""
    user = comment.user
    if user is None:
        return False
    return user.login == bot_login and user.type == bot_type and PREAMBLE_MARKER in (comment.body or "")


def delete_previous_comments(issue, bot_login: str, bot_type: str = "User", limit: int = 50) -> int:
    """Delete earlier analyzer comments among the ``limit`` most recent ones.

    Failures are logged and never raised. Returns the number of comments deleted.
    """
    try:
        # Newest first; only the pages holding the last ``limit`` comments are fetched.
        comments = list(issue.get_comments().reversed[:limit])
    except API_ERRORS as e:
        _log_github_error("Unable to list comments on the pull request", e)
        return 0

    deleted = 0
    for comment in comments:
        if not is_own_comment(comment, bot_login, bot_type):
            continue
        try:
            comment.delete()
        except API_ERRORS as e:
            _log_github_error(f"Deleting comment {comment.id} failed", e)
            continue
        logger.info("Deleted previous comment %s", comment.id)
        deleted += 1
    return deleted


def post_comment(issue, body: str) -> str | None:
    """Post body as a new comment and return its URL, or None if the API rejected it."""
    try:
        comment = issue.create_comment(body)
    except API_ERRORS as e:
        _log_github_error("Errors found in response when trying to add comment", e)
        return None
    logger.info("A comment has been created at '%s'", comment.html_url)
    return comment.html_url
