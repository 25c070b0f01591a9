"""Project descriptor files under the projects directory."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

import yaml

# Matches the repository part of links such as
# https://github.com/owner/name/labels/help%20wanted
_GITHUB_LINK_RE = re.compile(r"^https?://(?:www\.)?github\.com/(?P<owner>[^/\s]+)/(?P<name>[^/\s?#]+)", re.IGNORECASE)


@dataclass
class Descriptor:
    relative_path: str
    full_path: Path

    def read_text(self) -> str:
        return self.full_path.read_text(encoding="utf-8")

    def read_yaml(self):
        """Parse the file. Raises yaml.YAMLError on malformed content."""
        return yaml.safe_load(self.read_text())

    def _upforgrabs(self) -> dict:
        try:
            data = self.read_yaml()
        except yaml.YAMLError:
            return {}
        if not isinstance(data, dict) or not isinstance(data.get("upforgrabs"), dict):
            return {}
        return data["upforgrabs"]

    @property
    def label(self) -> str | None:
        return self._upforgrabs().get("name")

    @property
    def link(self) -> str | None:
        return self._upforgrabs().get("link")

    @property
    def github_owner_name_pair(self) -> str | None:
        """Return ``owner/name`` when upforgrabs.link points into a GitHub repository."""
        link = self.link
        if not isinstance(link, str):
            return None
        match = _GITHUB_LINK_RE.match(link.strip())
        if not match:
            return None
        name = match.group("name")
        if name.endswith(".git"):
            name = name[: -len(".git")]
        return f"{match.group('owner')}/{name}"

    @property
    def is_github_project(self) -> bool:
        return self.github_owner_name_pair is not None


def load_descriptor(relative_path: str, workdir: Path) -> Descriptor | None:
    """Return the descriptor at relative_path, or None if the file is gone at this revision.

    The content is not parsed here; malformed files surface through the schema check.
    """
    full_path = Path(workdir) / relative_path
    if not full_path.is_file():
        return None
    return Descriptor(relative_path=relative_path, full_path=full_path)
