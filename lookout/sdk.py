"""Helpers for running events against a local git repository."""

from __future__ import annotations

import json
import os
from typing import Any

from .data import ChangeGetter, ChangeScanner, FileGetter, FileScanner
from .types import ChangesRequest, FilesRequest, ReferencePointer

_HEAD = "HEAD"


class NoBblfshError(Exception):
    """Raised when a UAST is requested but no bblfsh server is available."""

    def __init__(
        self,
        message: str = "Data server was started without bbflsh. WantUAST isn't allowed",
    ) -> None:
        super().__init__(message)


class NoBblfshService(ChangeGetter, FileGetter):
    """Passes requests on, refusing the ones that want a UAST."""

    def __init__(self, changes: ChangeGetter, files: FileGetter) -> None:
        self.changes = changes
        self.files = files

    def get_changes(self, request: ChangesRequest) -> ChangeScanner:
        """Return the changes, unless the request wants a UAST."""
        if request.want_uast:
            raise NoBblfshError()
        return self.changes.get_changes(request)

    def get_files(self, request: FilesRequest) -> FileScanner:
        """Return the files, unless the request wants a UAST."""
        if request.want_uast:
            raise NoBblfshError()
        return self.files.get_files(request)


def _struct_value(value: Any) -> Any:
    """Convert a decoded JSON value to what a protobuf Struct holds."""
    if isinstance(value, bool) or value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, list):
        return [_struct_value(item) for item in value]
    if isinstance(value, dict):
        return {key: _struct_value(item) for key, item in value.items()}
    return value


def parse_config_json(text: str) -> dict[str, Any]:
    """Parse the analyzer configuration given as a JSON object.

    Empty text or ``null`` give an empty configuration; numbers become floats.
    Raises :class:`ValueError` when the text is not a JSON object.
    """
    if text == "":
        return {}
    try:
        decoded = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Can't parse config-json option: {exc}") from exc
    if decoded is None:
        return {}
    if not isinstance(decoded, dict):
        raise ValueError(
            "Can't parse config-json option: "
            f"expected a JSON object, got {type(decoded).__name__}"
        )
    return _struct_value(decoded)


def local_reference(git_dir: str, commit_hash: str) -> ReferencePointer:
    """Return a pointer to ``commit_hash`` in the repository at ``git_dir``."""
    return ReferencePointer(
        internal_repository_url="file://" + os.path.abspath(git_dir),
        reference_name=_HEAD,
        hash=commit_hash,
    )