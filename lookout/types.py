"""Messages exchanged between lookout, analyzers and the data service.

Analyzers process source code changes and return analysis results as text
comments, possibly linked to specific lines of code. The data service gives
simple access to source code changes and files of a revision.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class ReferencePointer:
    """A pointer to a git reference in a repository."""

    internal_repository_url: str = ""
    reference_name: str = ""
    hash: str = ""


@dataclass
class CommitRevision:
    """A range of commits, from a base to a head."""

    base: ReferencePointer = field(default_factory=ReferencePointer)
    head: ReferencePointer = field(default_factory=ReferencePointer)


@dataclass
class File:
    """A file at a given revision, with optional content, language and UAST."""

    path: str = ""
    mode: int = 0
    hash: str = ""
    content: bytes = b""
    language: str = ""
    uast: Any = None


@dataclass
class Change:
    """A change of one file between a base and a head revision."""

    base: Optional[File] = None
    head: Optional[File] = None


@dataclass
class Comment:
    """A text comment, optionally attached to a file and a line."""

    file: str = ""
    line: int = 0
    text: str = ""
    confidence: int = 0


@dataclass
class ChangesRequest:
    """A request for the changes between two revisions."""

    base: Optional[ReferencePointer] = None
    head: Optional[ReferencePointer] = None
    include_pattern: str = ""
    exclude_pattern: str = ""
    exclude_vendored: bool = False
    want_contents: bool = False
    want_language: bool = False
    want_uast: bool = False


@dataclass
class FilesRequest:
    """A request for all the files of a revision."""

    revision: Optional[ReferencePointer] = None
    include_pattern: str = ""
    exclude_pattern: str = ""
    exclude_vendored: bool = False
    want_contents: bool = False
    want_language: bool = False
    want_uast: bool = False


@dataclass
class EventResponse:
    """What an analyzer returns for an event."""

    analyzer_version: str = ""
    comments: list[Comment] = field(default_factory=list)