"""Analyzer configuration and groups of analyzer comments."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Iterator

from .types import Comment

log = logging.getLogger(__name__)

CommentsFilter = Callable[[Comment], bool]


@dataclass
class AnalyzerConfig:
    """Configuration of one analyzer.

    ``addr`` is honoured only in the global configuration; a repository-scoped
    ``disabled`` can only switch an analyzer off.
    """

    name: str = ""
    addr: str = ""
    disabled: bool = False
    feedback: str = ""
    settings: dict[str, Any] = field(default_factory=dict)


@dataclass
class Analyzer:
    """An analyzer client together with its configuration."""

    client: Any = None
    config: AnalyzerConfig = field(default_factory=AnalyzerConfig)


@dataclass
class AnalyzerComments:
    """The comments produced by one analyzer, with its configuration."""

    config: AnalyzerConfig = field(default_factory=AnalyzerConfig)
    comments: list[Comment] = field(default_factory=list)


class AnalyzerCommentsGroups:
    """An ordered collection of :class:`AnalyzerComments`."""

    __hash__ = None  # type: ignore[assignment]

    def __init__(self, groups: Iterable[AnalyzerComments] = ()) -> None:
        self._groups = list(groups)

    def __iter__(self) -> Iterator[AnalyzerComments]:
        return iter(self._groups)

    def __len__(self) -> int:
        return len(self._groups)

    def __getitem__(self, index):
        return self._groups[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, AnalyzerCommentsGroups):
            return self._groups == other._groups
        if isinstance(other, list):
            return self._groups == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"AnalyzerCommentsGroups({self._groups!r})"

    def filter(self, fn: CommentsFilter) -> "AnalyzerCommentsGroups":
        """Drop every comment for which ``fn`` returns true.

        Groups left without comments are dropped. Exceptions raised by ``fn``
        propagate.
        """
        result = []
        for group in self._groups:
            kept = [comment for comment in group.comments if not fn(comment)]
            if kept:
                result.append(AnalyzerComments(config=group.config, comments=kept))
        return AnalyzerCommentsGroups(result)

    def count(self) -> int:
        """Return the total number of comments in all groups."""
        return sum(len(group.comments) for group in self._groups)

    def dedup(self) -> "AnalyzerCommentsGroups":
        """Drop comments repeating the file, line and text of an earlier one
        from the same analyzer."""
        result = []
        for group in self._groups:
            seen: set[tuple[str, int, str]] = set()
            unique = []
            for comment in group.comments:
                key = (comment.file, comment.line, comment.text)
                if key in seen:
                    continue
                seen.add(key)
                unique.append(comment)

            if unique:
                result.append(AnalyzerComments(config=group.config, comments=unique))

            duplicated = len(group.comments) - len(unique)
            if duplicated > 0:
                log.warning(
                    "analyzer %s generated %d duplicated comments",
                    group.config.name,
                    duplicated,
                )
        return AnalyzerCommentsGroups(result)