"""An example analyzer that comments on line counts and line lengths."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .data import ChangeGetter, FileGetter
from .event import PushEvent, ReviewEvent
from .types import Change, ChangesRequest, Comment, EventResponse, File, FilesRequest

MAX_LINE_LENGTH = 120

_SNIFF_LENGTH = 8000
_INCLUDE_PATTERN = ".*"
_EXCLUDE_PATTERN = "^should-never-match$"

_ESCAPES = {
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
}


def is_binary(content: bytes) -> bool:
    """Return whether the start of ``content`` holds a NUL byte."""
    return b"\x00" in content[:_SNIFF_LENGTH]


def _quote(text: str) -> str:
    """Quote ``text`` as a double-quoted, escaped string literal."""
    out = ['"']
    for ch in text:
        if ch in '"\\':
            out.append("\\" + ch)
        elif ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif ch.isprintable():
            out.append(ch)
        else:
            code = ord(ch)
            if code < 0x80:
                out.append(f"\\x{code:02x}")
            elif code < 0x10000:
                out.append(f"\\u{code:04x}")
            else:
                out.append(f"\\U{code:08x}")
    out.append('"')
    return "".join(out)


def _file_is_binary(file: Optional[File]) -> bool:
    return file is not None and is_binary(file.content)


def _count_lines(file: Optional[File]) -> int:
    return 0 if file is None else file.content.count(b"\n")


@dataclass
class DummyAnalyzer:
    """Comments on files that grew and on lines longer than 120 bytes.

    With ``request_uast`` it also reports whether each file has a UAST and
    which language was detected; with ``request_files_push`` it analyzes the
    files of the head revision on push events.
    """

    data_client: "ChangeGetter | FileGetter"
    version: str = ""
    request_uast: bool = False
    request_files_push: bool = False

    def notify_review_event(self, event: ReviewEvent) -> EventResponse:
        """Analyze the changes of a review."""
        request = ChangesRequest(
            base=event.commit_revision.base,
            head=event.commit_revision.head,
            want_contents=True,
            want_uast=self.request_uast,
            include_pattern=_INCLUDE_PATTERN,
            exclude_pattern=_EXCLUDE_PATTERN,
        )
        response = EventResponse(analyzer_version=self.version)
        with self.data_client.get_changes(request) as changes:
            for change in changes:
                response.comments.extend(self._line_increase(change))
                response.comments.extend(self._max_line_length(change.head))
                if self.request_uast:
                    response.comments.extend(self._has_uast(change.head))
                    response.comments.extend(self._language(change.head))
        return response

    def notify_push_event(self, event: PushEvent) -> EventResponse:
        """Analyze the files of the pushed head, if asked to."""
        response = EventResponse(analyzer_version=self.version)
        if not self.request_files_push:
            return response

        request = FilesRequest(
            revision=event.commit_revision.head,
            exclude_vendored=True,
            want_contents=True,
            want_uast=self.request_uast,
            include_pattern=_INCLUDE_PATTERN,
            exclude_pattern=_EXCLUDE_PATTERN,
        )
        with self.data_client.get_files(request) as files:
            for file in files:
                response.comments.extend(self._max_line_length(file))
                if self.request_uast:
                    response.comments.extend(self._has_uast(file))
                    response.comments.extend(self._language(file))
        return response

    @staticmethod
    def _line_increase(change: Change) -> list[Comment]:
        if _file_is_binary(change.head) or _file_is_binary(change.base):
            return []
        diff = _count_lines(change.head) - _count_lines(change.base)
        if diff <= 0:
            return []
        return [
            Comment(
                file=change.head.path,
                line=0,
                text=f"The file has increased in {diff} lines.",
            )
        ]

    @staticmethod
    def _max_line_length(file: Optional[File]) -> list[Comment]:
        if file is None or is_binary(file.content):
            return []
        return [
            Comment(
                file=file.path,
                line=number,
                text=f"This line exceeded {MAX_LINE_LENGTH} chars.",
            )
            for number, line in enumerate(file.content.split(b"\n"), start=1)
            if len(line) > MAX_LINE_LENGTH
        ]

    @staticmethod
    def _has_uast(file: Optional[File]) -> list[Comment]:
        if file is None:
            return []
        text = "The file doesn't have UAST." if file.uast is None else "The file has UAST."
        return [Comment(file=file.path, line=0, text=text)]

    @staticmethod
    def _language(file: Optional[File]) -> list[Comment]:
        if file is None:
            return []
        return [
            Comment(
                file=file.path,
                line=0,
                text=f"The file has language detected: {_quote(file.language)}",
            )
        ]