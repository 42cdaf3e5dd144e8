"""Posting analysis results and status back to a provider."""

from __future__ import annotations

import abc
import enum
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from .analysis import AnalyzerComments
    from .event import Event


class AnalysisStatus(enum.IntEnum):
    """Status reported to the provider about an analysis."""

    UNKNOWN = 0
    ERROR = 1
    FAILURE = 2
    PENDING = 3
    SUCCESS = 4

    @classmethod
    def _missing_(cls, value):
        return cls.UNKNOWN

    def __str__(self) -> str:
        return self.name.lower()

    def __format__(self, spec: str) -> str:
        return format(str(self), spec)


class Poster(abc.ABC):
    """Posts comments and analysis status about an event."""

    @abc.abstractmethod
    def post(
        self, event: "Event", comments: Sequence["AnalyzerComments"], safe: bool
    ) -> None:
        """Post comments about an event.

        When ``safe`` is true, comments that were already posted must not be
        posted again.
        """

    @abc.abstractmethod
    def status(self, event: "Event", status: AnalysisStatus) -> None:
        """Send the current analysis status to the provider."""