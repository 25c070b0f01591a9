"""Content rules for the ``tags`` list of a project descriptor.

Runs after the schema check, so the file is known to parse and ``tags`` is a
non-empty list. Every violation is collected rather than stopping at the first.
"""

from __future__ import annotations

from typing import Optional

from ufglens_core.descriptor import Descriptor

# Commonly submitted spellings and the tag already used across the index.
PREFERRED_TAGS: dict[str, str] = {
    "c#": "csharp",
    "f#": "fsharp",
    "c++": "cpp",
    ".net": "dotnet",
    ".net-core": "dotnet-core",
    "asp.net": "aspnet",
    "js": "javascript",
    "ts": "typescript",
    "golang": "go",
    "node": "nodejs",
    "node.js": "nodejs",
    "py": "python",
    "python3": "python",
    "vue.js": "vue",
    "vuejs": "vue",
    "reactjs": "react",
    "react.js": "react",
}


def validate_tag_values(tags: list, aliases: Optional[dict] = None) -> list[str]:
    """Return every rule violation for a list of tags."""
    preferred = {**PREFERRED_TAGS, **{str(k).lower(): v for k, v in (aliases or {}).items()}}
    errors: list[str] = []
    seen: set[str] = set()

    for position, tag in enumerate(tags, 1):
        if not isinstance(tag, str):
            errors.append(f"Tag at position {position} should be text but was '{tag}'")
            continue
        if not tag.strip():
            errors.append(f"Tag at position {position} is empty")
            continue

        if tag != tag.lower():
            errors.append(f"Tag '{tag}' contains uppercase characters - use '{tag.lower()}' instead")
        if " " in tag.strip():
            errors.append(f"Tag '{tag}' contains spaces - use '{'-'.join(tag.lower().split())}' instead")

        normalized = tag.strip().lower()
        if normalized in preferred:
            errors.append(f"Rename tag '{tag}' to be '{preferred[normalized]}'")
        if normalized in seen:
            errors.append(f"Tag '{tag}' is listed more than once")
        seen.add(normalized)

    return errors


def validate_tags(descriptor: Descriptor, aliases: Optional[dict] = None) -> list[str]:
    data = descriptor.read_yaml()
    return validate_tag_values(data.get("tags") or [], aliases)
