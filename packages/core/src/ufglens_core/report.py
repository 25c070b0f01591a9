"""Markdown rendering of review outcomes into the pull-request comment body."""

from __future__ import annotations

from typing import Sequence

from ufglens_core.gh.pull_request import PREAMBLE_MARKER
from ufglens_core.outcome import OutcomeKind, ReviewOutcome

_ERROR_KINDS = (OutcomeKind.REPOSITORY_ERROR, OutcomeKind.LABEL_ERROR)


def _preamble(projects_dir: str) -> str:
    return (
        f"{PREAMBLE_MARKER}\n\n"
        ":wave: I'm a robot checking the state of this pull request to save the human reviewers time."
        f" I noticed this PR added or modified the data files under `{projects_dir}` so I had a look at what's changed.\n\n"
        "As you make changes to this pull request, I'll re-run these checks.\n\n"
    )


def _quoted_list(messages: list[str]) -> str:
    return "\n".join(f"> - {m}" for m in messages)


def render_section(outcome: ReviewOutcome, maintainer: str = "shiftkey") -> str:
    path = outcome.path
    kind = outcome.kind

    if kind is OutcomeKind.VALID:
        return f"#### `{path}` :white_check_mark: \nNo problems found, everything should be good to merge!"
    if kind is OutcomeKind.VALIDATION_ERROR:
        return (
            f"#### `{path}` :x:\nI had some troubles parsing the project file, or there were fields "
            f"that are missing that I need.\n\nHere's the details:\n{_quoted_list(outcome.validation_errors)}"
        )
    if kind is OutcomeKind.TAGS_ERROR:
        return (
            f"#### `{path}` :x:\nI have some suggestions about the tags used in the project:\n\n"
            f"{_quoted_list(outcome.tags_errors)}"
        )
    if kind in _ERROR_KINDS:
        return f"#### `{path}` :x:\n{outcome.message}"

    detail = f"\n\n> {outcome.message}" if outcome.message else ""
    kind_name = kind.value if isinstance(kind, OutcomeKind) else kind
    return (
        f"#### `{path}` :question:\nI got a result of type '{kind_name}' that I don't know how to handle."
        f" I need to mention @{maintainer} here as they might be able to fix it.{detail}"
    )


def render_report(
    outcomes: Sequence[ReviewOutcome],
    projects_dir: str = "_data/projects/",
    maintainer: str = "shiftkey",
) -> str:
    """Render outcomes, in the given order, into one Markdown comment body.

    Pure: the same outcomes always produce byte-identical output.
    """
    sections = [render_section(o, maintainer) for o in outcomes]
    return _preamble(projects_dir) + "\n\n".join(sections)
