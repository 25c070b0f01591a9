"""Local git working trees for the revisions under review.

Every command is run with an explicit argument list (never through a shell)
because clone URLs and refs come straight from webhook payloads.
"""

from __future__ import annotations

import logging
import subprocess
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

logger = logging.getLogger(__name__)

UPSTREAM_REMOTE = "upstream"


@dataclass(frozen=True)
class CommandResult:
    args: list[str]
    exit_code: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class SnapshotError(Exception):
    """A git step failed; the working tree cannot be trusted."""

    def __init__(self, message: str, result: CommandResult):
        super().__init__(message)
        self.result = result


class CloneError(SnapshotError):
    pass


class RemoteError(SnapshotError):
    pass


class CheckoutError(SnapshotError):
    pass


class DiffError(SnapshotError):
    pass


def run_git(*args: str, cwd: Path | None = None) -> CommandResult:
    cmd = ["git", *args]
    logger.info("Running command: %s", " ".join(cmd))
    try:
        proc = subprocess.run(cmd, cwd=cwd, capture_output=True, text=True)
    except FileNotFoundError as e:
        return CommandResult(args=cmd, exit_code=127, stdout="", stderr=str(e))
    return CommandResult(args=cmd, exit_code=proc.returncode, stdout=proc.stdout, stderr=proc.stderr)


def clone(url: str, workdir: Path) -> None:
    result = run_git("clone", "--", url, str(workdir))
    if not result.ok:
        raise CloneError(f"Unable to clone repository at {url} - check that you can access it", result)


def add_remote(workdir: Path, name: str, url: str) -> None:
    result = run_git("-C", str(workdir), "remote", "add", "-f", name, "--", url)
    if not result.ok:
        raise RemoteError(f"Unable to fetch repository at {url} - check that you can access it", result)


def checkout(workdir: Path, ref: str) -> None:
    # The trailing "--" forces git to read ref as a revision, never as an option or path.
    result = run_git("-C", str(workdir), "checkout", "--detach", ref, "--")
    if not result.ok:
        raise CheckoutError(f"Unable to checkout commit {ref} - it probably doesn't exist any more", result)


def diff_paths(workdir: Path, range_expr: str, path_prefix: str) -> list[str]:
    """Return the files changed in range_expr under path_prefix, in git's order, without duplicates."""
    result = run_git("-C", str(workdir), "diff", "--name-only", range_expr, "--", path_prefix)
    if not result.ok:
        raise DiffError(f"Unable to compute diff range: {range_expr}", result)
    paths = (line.strip() for line in result.stdout.splitlines())
    return list(dict.fromkeys(p for p in paths if p))


@contextmanager
def checkout_snapshot(head_clone_url: str, head_sha: str, base_clone_url: str | None = None) -> Iterator[Path]:
    """Clone the head repository into a temporary directory checked out at head_sha.

    When base_clone_url differs from head_clone_url (a pull request from a fork)
    the base repository is fetched as the ``upstream`` remote so that the base
    commit is available for diffing. The directory is removed on every exit path.
    """
    with tempfile.TemporaryDirectory(prefix="ufglens-") as tmp:
        workdir = Path(tmp)
        clone(head_clone_url, workdir)
        if base_clone_url and base_clone_url != head_clone_url:
            add_remote(workdir, UPSTREAM_REMOTE, base_clone_url)
        checkout(workdir, head_sha)
        yield workdir
