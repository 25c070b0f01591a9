from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ufglens_core.descriptor import Descriptor


class OutcomeKind(str, Enum):
    VALID = "valid"
    VALIDATION_ERROR = "validation-error"
    TAGS_ERROR = "tags-error"
    REPOSITORY_ERROR = "repository-error"
    LABEL_ERROR = "label-error"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class ReviewOutcome:
    """The single verdict for one descriptor.

    ``kind`` decides which payload is populated: ``validation_errors`` for
    VALIDATION_ERROR, ``tags_errors`` for TAGS_ERROR and ``message`` for the
    repository, label and unrecognized kinds.
    """

    descriptor: Descriptor
    kind: OutcomeKind
    validation_errors: list[str] = field(default_factory=list)
    tags_errors: list[str] = field(default_factory=list)
    message: str | None = None

    @property
    def path(self) -> str:
        return self.descriptor.relative_path

    @property
    def failed(self) -> bool:
        return self.kind is not OutcomeKind.VALID
