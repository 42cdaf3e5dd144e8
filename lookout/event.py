"""Repository events handled by lookout."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from .types import CommitRevision, ReferencePointer


class EventType(enum.Enum):
    """The kind of a repository event."""

    PUSH = "push"
    REVIEW = "review"


@dataclass
class PushEvent:
    """A push to a git repository."""

    provider: str = ""
    internal_id: str = ""
    created_at: Optional[datetime] = None
    repository_id: int = 0
    commits: int = 0
    commit_revision: CommitRevision = field(default_factory=CommitRevision)
    configuration: dict[str, Any] = field(default_factory=dict)
    organization_id: str = ""

    def type(self) -> EventType:
        """Return :attr:`EventType.PUSH`."""
        return EventType.PUSH

    def revision(self) -> CommitRevision:
        """Return the base and head of the pushed changes."""
        return self.commit_revision


@dataclass
class ReviewEvent:
    """A review (a pull request on GitHub) being created or updated."""

    provider: str = ""
    internal_id: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    is_mergeable: bool = False
    source: ReferencePointer = field(default_factory=ReferencePointer)
    merge: ReferencePointer = field(default_factory=ReferencePointer)
    repository_id: int = 0
    number: int = 0
    commit_revision: CommitRevision = field(default_factory=CommitRevision)
    configuration: dict[str, Any] = field(default_factory=dict)
    organization_id: str = ""

    def type(self) -> EventType:
        """Return :attr:`EventType.REVIEW`."""
        return EventType.REVIEW

    def revision(self) -> CommitRevision:
        """Return the base and head of the reviewed changes."""
        return self.commit_revision


Event = PushEvent | ReviewEvent