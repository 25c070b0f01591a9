"""Core pull-request analysis: validate changed descriptors and report back."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from ufglens_core.descriptor import Descriptor, load_descriptor
from ufglens_core.events import PullRequestEvent
from ufglens_core.gh.liveness import GitHubChecker, LivenessReason, LivenessResult
from ufglens_core.gh.pull_request import (
    API_ERRORS,
    delete_previous_comments,
    get_client,
    get_issue,
    get_repo,
    post_comment,
)
from ufglens_core.git.snapshot import SnapshotError, checkout_snapshot, diff_paths
from ufglens_core.outcome import OutcomeKind, ReviewOutcome
from ufglens_core.report import render_report
from ufglens_core.validation.schema import validate_schema
from ufglens_core.validation.tags import validate_tags

logger = logging.getLogger(__name__)


@dataclass
class AnalysisSummary:
    """Result returned by run_analysis for a run that produced a report."""

    repo: str
    pr_number: int
    head_sha: str
    files: list[str] = field(default_factory=list)
    outcomes: list[ReviewOutcome] = field(default_factory=list)
    body: str = ""
    comment_url: str | None = None
    posted: bool = False

    @property
    def failures(self) -> list[ReviewOutcome]:
        return [o for o in self.outcomes if o.failed]


def _log_rate_limited() -> None:
    logger.warning("This script is currently rate-limited by the GitHub API")
    logger.warning("Marking as inconclusive to indicate that no further work will be done here")


def repository_problem(pair: str, result: LivenessResult) -> tuple[OutcomeKind, str] | None:
    """Return (kind, message) describing a repository problem, or None if there is nothing to report."""
    reason = result.reason
    if reason is LivenessReason.ARCHIVED:
        return (
            OutcomeKind.REPOSITORY_ERROR,
            f"The GitHub repository '{pair}' has been marked as archived, which suggests it is not active.",
        )
    if reason is LivenessReason.MISSING:
        return (
            OutcomeKind.REPOSITORY_ERROR,
            f"The GitHub repository '{pair}' cannot be found. Please confirm the location of the project.",
        )
    if reason is LivenessReason.REDIRECT:
        return (
            OutcomeKind.REPOSITORY_ERROR,
            f"The GitHub repository '{result.old_location}' is now at '{result.location}'."
            " Please update this project before this is merged.",
        )
    if reason is LivenessReason.ERROR:
        return (
            OutcomeKind.REPOSITORY_ERROR,
            f"The GitHub repository '{pair}' could not be confirmed. Error details: {result.error}",
        )
    if reason is LivenessReason.OK:
        return None
    return OutcomeKind.UNRECOGNIZED, f"Repository check for '{pair}' returned '{reason}'."


def label_problem(descriptor: Descriptor, result: LivenessResult) -> tuple[OutcomeKind, str] | None:
    """Return (kind, message) describing a label problem, or None if there is nothing to report."""
    pair = descriptor.github_owner_name_pair
    label = descriptor.label
    reason = result.reason
    if reason is LivenessReason.REPOSITORY_MISSING:
        return (
            OutcomeKind.LABEL_ERROR,
            f"I couldn't find the GitHub repository '{pair}' that was used in the `upforgrabs.link` value."
            " Please confirm this is correct or hasn't been mis-typed.",
        )
    if reason is LivenessReason.MISSING:
        return (
            OutcomeKind.LABEL_ERROR,
            f"The `upforgrabs.name` value '{label}' isn't in use on the project in GitHub."
            " This might just be a mistake because of copy-pasting the reference template or be mis-typed."
            f" Please check the list of labels at https://github.com/{pair}/labels"
            " and update the project file to use the correct label.",
        )
    if reason is LivenessReason.ERROR:
        return (
            OutcomeKind.LABEL_ERROR,
            f"The label '{label}' for GitHub repository '{pair}' could not be confirmed. Error details: {result.error}",
        )
    if reason is not LivenessReason.OK:
        return OutcomeKind.UNRECOGNIZED, f"Label check for '{pair}' returned '{reason}'."

    link = descriptor.link
    url = result.url
    # Only label-listing links are rewritten; search or issue-list links are left alone.
    if link != url and "/labels/" in link:
        return (
            OutcomeKind.LABEL_ERROR,
            f"The label '{label}' for GitHub repository '{pair}' does not match the specified"
            f" `upforgrabs.link` value. Please update it to `{url}`.",
        )
    return None


def review_descriptor(
    descriptor: Descriptor,
    checker: GitHubChecker | None = None,
    tag_aliases: Optional[dict] = None,
) -> ReviewOutcome:
    """Run every check on one descriptor, stopping at the first that fails.

    With no checker the repository and label checks are skipped.
    """
    validation_errors = validate_schema(descriptor)
    if validation_errors:
        return ReviewOutcome(descriptor, OutcomeKind.VALIDATION_ERROR, validation_errors=validation_errors)

    tags_errors = validate_tags(descriptor, tag_aliases)
    if tags_errors:
        return ReviewOutcome(descriptor, OutcomeKind.TAGS_ERROR, tags_errors=tags_errors)

    if checker is None or not descriptor.is_github_project:
        return ReviewOutcome(descriptor, OutcomeKind.VALID)

    pair = descriptor.github_owner_name_pair

    result = checker.check_repository(pair)
    if result.rate_limited:
        _log_rate_limited()
        return ReviewOutcome(descriptor, OutcomeKind.VALID)
    problem = repository_problem(pair, result)
    if problem is not None:
        return ReviewOutcome(descriptor, problem[0], message=problem[1])

    result = checker.check_label(pair, descriptor.label)
    if result.rate_limited:
        _log_rate_limited()
        return ReviewOutcome(descriptor, OutcomeKind.VALID)
    problem = label_problem(descriptor, result)
    if problem is not None:
        return ReviewOutcome(descriptor, problem[0], message=problem[1])

    return ReviewOutcome(descriptor, OutcomeKind.VALID)


def review_descriptors(
    descriptors: list[Descriptor],
    checker: GitHubChecker | None = None,
    tag_aliases: Optional[dict] = None,
) -> list[ReviewOutcome]:
    """Review descriptors one at a time, in order. A crash in one never stops the others."""
    outcomes = []
    for descriptor in descriptors:
        try:
            outcome = review_descriptor(descriptor, checker, tag_aliases)
        except Exception as e:
            logger.exception("Unexpected failure while reviewing %s", descriptor.relative_path)
            outcome = ReviewOutcome(
                descriptor,
                OutcomeKind.UNRECOGNIZED,
                message=f"Reviewing this file failed unexpectedly ({type(e).__name__}: {e}).",
            )
        logger.info("%s: %s", descriptor.relative_path, outcome.kind.value)
        outcomes.append(outcome)
    return outcomes


def run_analysis(
    event: PullRequestEvent,
    config: dict,
    gh=None,
    shadow: bool = False,
) -> AnalysisSummary | None:
    """Run the full analysis pipeline for one eligible pull-request event.

    Returns None when the run ends without a report: the snapshot could not be
    built or no descriptor files changed. In shadow mode the report is rendered
    and returned but no comments are deleted or posted.
    """
    if not event.head_clone_url:
        logger.warning("Head repository for pull request #%d no longer exists, nothing to analyze", event.number)
        return None

    projects_dir = config.get("projects_dir", "_data/projects/")

    try:
        with checkout_snapshot(event.head_clone_url, event.head_sha, event.base_clone_url) as workdir:
            files = diff_paths(workdir, event.diff_range, projects_dir)
            if not files:
                logger.info("No project files have been included in this PR...")
                return None
            logger.info("Found files in this PR to process: %s", files)
            return _analyze_snapshot(event, config, workdir, files, gh, shadow)
    except SnapshotError as e:
        logger.warning("%s", e)
        logger.warning("stderr: %s", e.result.stderr.strip())
        return None


def _analyze_snapshot(event, config, workdir, files, gh, shadow) -> AnalysisSummary:
    descriptors = [d for d in (load_descriptor(f, workdir) for f in files) if d is not None]

    gh = gh if gh is not None else get_client(config.get("github_token"))
    issue = None
    if not shadow:
        try:
            issue = get_issue(get_repo(gh, event.repo_full_name), event.number)
        except API_ERRORS as e:
            logger.warning("Unable to load pull request #%d on %s: %s", event.number, event.repo_full_name, e)
    if issue is not None:
        delete_previous_comments(
            issue,
            bot_login=config.get("bot_login", "shiftbot"),
            bot_type=config.get("bot_type", "User"),
            limit=config.get("comment_limit", 50),
        )

    checker = GitHubChecker(gh) if config.get("check_liveness", True) else None
    outcomes = review_descriptors(descriptors, checker, config.get("tag_aliases"))

    body = render_report(
        outcomes,
        projects_dir=config.get("projects_dir", "_data/projects/"),
        maintainer=config.get("maintainer", "shiftkey"),
    )
    logger.info("Comment to submit: %s", body)

    summary = AnalysisSummary(
        repo=event.repo_full_name,
        pr_number=event.number,
        head_sha=event.head_sha,
        files=files,
        outcomes=outcomes,
        body=body,
    )
    if issue is not None:
        summary.comment_url = post_comment(issue, body)
        summary.posted = summary.comment_url is not None
    return summary
