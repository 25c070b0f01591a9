"""Pull-request webhook payloads and the eligibility gate."""

from __future__ import annotations

from dataclasses import dataclass

ELIGIBLE_ACTIONS = frozenset({"synchronize", "opened", "reopened"})


@dataclass(frozen=True)
class PullRequestEvent:
    """The subset of a ``pull_request`` webhook payload the analyzer needs.

    ``head_clone_url`` is None when the head repository has been deleted
    (e.g. a fork removed after the pull request was opened).
    """

    action: str
    number: int
    subject_id: str
    repo_full_name: str
    base_ref: str
    base_sha: str
    base_clone_url: str
    default_branch: str
    head_sha: str
    head_clone_url: str | None

    @property
    def diff_range(self) -> str:
        return f"{self.base_sha}...{self.head_sha}"


def parse_event(payload: dict) -> PullRequestEvent:
    """Build a PullRequestEvent from a decoded webhook payload.

    Raises ValueError when the payload does not describe a pull request.
    """
    try:
        pull_request = payload["pull_request"]
        base = pull_request["base"]
        head = pull_request["head"]
        base_repo = base["repo"]
        head_repo = head.get("repo") or {}

        return PullRequestEvent(
            action=payload.get("action", ""),
            number=int(payload.get("number") or pull_request["number"]),
            subject_id=pull_request.get("node_id", ""),
            repo_full_name=(payload.get("repository") or base_repo)["full_name"],
            base_ref=base["ref"],
            base_sha=base["sha"],
            base_clone_url=base_repo["clone_url"],
            default_branch=base_repo["default_branch"],
            head_sha=head["sha"],
            head_clone_url=head_repo.get("clone_url"),
        )
    except (KeyError, TypeError) as e:
        raise ValueError(f"Not a pull request event payload: missing {e}") from e


def is_eligible(event: PullRequestEvent, upstream_repo: str) -> bool:
    """Return True if the pipeline should run for this event at all."""
    if event.action not in ELIGIBLE_ACTIONS:
        return False
    if event.repo_full_name != upstream_repo:
        return False
    return event.base_ref == event.default_branch
