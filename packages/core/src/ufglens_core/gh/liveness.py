"""Repository and label liveness checks against the GitHub API.

Both checks return a LivenessResult instead of raising. Rate limiting is
reported through ``rate_limited`` so callers can tell it apart from a
repository or label that genuinely does not exist.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from urllib.parse import quote

import requests
from github import GithubException, RateLimitExceededException, UnknownObjectException

logger = logging.getLogger(__name__)


class LivenessReason(str, Enum):
    OK = "ok"
    ARCHIVED = "archived"
    MISSING = "missing"
    REDIRECT = "redirect"
    REPOSITORY_MISSING = "repository-missing"
    ERROR = "error"


@dataclass(frozen=True)
class LivenessResult:
    rate_limited: bool = False
    reason: LivenessReason | None = None
    old_location: str | None = None
    location: str | None = None
    url: str | None = None
    error: str | None = None


RATE_LIMITED = LivenessResult(rate_limited=True)


def _is_rate_limit(e: GithubException) -> bool:
    if isinstance(e, RateLimitExceededException):
        return True
    # Secondary rate limits arrive as plain 403/429 responses.
    message = str(e.data.get("message", "")) if isinstance(e.data, dict) else ""
    return e.status in (403, 429) and "rate limit" in message.lower()


def _error_detail(e: GithubException) -> str:
    if isinstance(e.data, dict) and e.data.get("message"):
        return f"{e.status} {e.data['message']}"
    return str(e)


def label_url(repo_html_url: str, label_name: str) -> str:
    """Return the canonical web URL of a label listing."""
    return f"{repo_html_url.rstrip('/')}/labels/{quote(label_name, safe='')}"


class GitHubChecker:
    """Runs liveness queries with one GitHub client for the whole run."""

    def __init__(self, gh):
        self._gh = gh
        self.rate_limited = False

    def _limited(self) -> LivenessResult:
        self.rate_limited = True
        return RATE_LIMITED

    def check_repository(self, owner_name: str) -> LivenessResult:
        if self.rate_limited:
            return RATE_LIMITED
        try:
            repo = self._gh.get_repo(owner_name)
        except UnknownObjectException:
            return LivenessResult(reason=LivenessReason.MISSING)
        except GithubException as e:
            if _is_rate_limit(e):
                return self._limited()
            logger.warning("Repository check for %s failed: %s", owner_name, e)
            return LivenessResult(reason=LivenessReason.ERROR, error=_error_detail(e))
        except requests.RequestException as e:
            logger.warning("Repository check for %s failed: %s", owner_name, e)
            return LivenessResult(reason=LivenessReason.ERROR, error=str(e))

        # GitHub transparently serves renamed/transferred repositories from their new location.
        if repo.full_name.lower() != owner_name.lower():
            return LivenessResult(reason=LivenessReason.REDIRECT, old_location=owner_name, location=repo.full_name)
        if repo.archived:
            return LivenessResult(reason=LivenessReason.ARCHIVED)
        return LivenessResult(reason=LivenessReason.OK)

    def check_label(self, owner_name: str, label_name: str) -> LivenessResult:
        if self.rate_limited:
            return RATE_LIMITED
        try:
            repo = self._gh.get_repo(owner_name)
        except UnknownObjectException:
            return LivenessResult(reason=LivenessReason.REPOSITORY_MISSING)
        except GithubException as e:
            if _is_rate_limit(e):
                return self._limited()
            logger.warning("Label check for %s failed: %s", owner_name, e)
            return LivenessResult(reason=LivenessReason.ERROR, error=_error_detail(e))
        except requests.RequestException as e:
            logger.warning("Label check for %s failed: %s", owner_name, e)
            return LivenessResult(reason=LivenessReason.ERROR, error=str(e))

        try:
            label = repo.get_label(label_name)
        except UnknownObjectException:
            return LivenessResult(reason=LivenessReason.MISSING)
        except GithubException as e:
            if _is_rate_limit(e):
                return self._limited()
            logger.warning("Label check for %r on %s failed: %s", label_name, owner_name, e)
            return LivenessResult(reason=LivenessReason.ERROR, error=_error_detail(e))
        except requests.RequestException as e:
            logger.warning("Label check for %r on %s failed: %s", label_name, owner_name, e)
            return LivenessResult(reason=LivenessReason.ERROR, error=str(e))

        return LivenessResult(reason=LivenessReason.OK, url=label_url(repo.html_url, label.name))
