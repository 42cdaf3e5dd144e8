"""Access to code changes and files, as a service and as a client."""

from __future__ import annotations

import abc
import threading
from typing import Any, Callable, Generic, Iterable, Iterator, Optional, Protocol, TypeVar

from .types import Change, ChangesRequest, File, FilesRequest

T = TypeVar("T")


class RequestCanceledError(Exception):
    """Raised when the caller cancels a request while it is being served."""

    def __init__(self, reason: str = "context canceled") -> None:
        super().__init__(f"request canceled: {reason}")
        self.reason = reason


class CallContext:
    """A cancellation token shared between a caller and a request handler."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Mark the call as cancelled."""
        self._event.set()

    def cancelled(self) -> bool:
        """Return whether the call has been cancelled."""
        return self._event.is_set()


class _Scanner(abc.ABC, Generic[T]):
    """An iterator over results that holds resources until closed."""

    def __iter__(self) -> Iterator[T]:
        return self

    @abc.abstractmethod
    def __next__(self) -> T:
        """Return the next result; errors found while scanning are raised."""

    def close(self) -> None:
        """Release the resources held by the scanner."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class ChangeScanner(_Scanner[Change]):
    """Iterates over code changes."""

    def close(self) -> None:
        """Release the resources held by the scanner."""


class FileScanner(_Scanner[File]):
    """Iterates over files."""

    def close(self) -> None:
        """Release the resources held by the scanner."""


class ChangeGetter(abc.ABC):
    """Retrieves code changes."""

    @abc.abstractmethod
    def get_changes(self, request: ChangesRequest) -> ChangeScanner:
        """Return a scanner over all changes matching the request."""


class FileGetter(abc.ABC):
    """Retrieves all code for a revision."""

    @abc.abstractmethod
    def get_files(self, request: FilesRequest) -> FileScanner:
        """Return a scanner over all files matching the request."""


class ServerStream(Protocol):
    """The sending side of a streaming call."""

    context: CallContext

    def send(self, item: Any) -> None: ...


def _serve(scanner: _Scanner, stream: ServerStream) -> None:
    try:
        for item in scanner:
            if stream.context.cancelled():
                raise RequestCanceledError()
            stream.send(item)
    except BaseException:
        try:
            scanner.close()
        except Exception:
            pass
        raise
    scanner.close()


class DataServerHandler:
    """Serves changes and files to a stream from the given getters."""

    def __init__(
        self,
        change_getter: Optional[ChangeGetter] = None,
        file_getter: Optional[FileGetter] = None,
    ) -> None:
        self.change_getter = change_getter
        self.file_getter = file_getter

    def get_changes(self, request: ChangesRequest, stream: ServerStream) -> None:
        """Send every change matching the request to ``stream``."""
        if self.change_getter is None:
            raise RuntimeError("no change getter configured")
        _serve(self.change_getter.get_changes(request), stream)

    def get_files(self, request: FilesRequest, stream: ServerStream) -> None:
        """Send every file matching the request to ``stream``."""
        if self.file_getter is None:
            raise RuntimeError("no file getter configured")
        _serve(self.file_getter.get_files(request), stream)


class DataTransport(Protocol):
    """A connection to a data service returning streams of results."""

    def get_changes(self, request: ChangesRequest) -> Iterable[Change]: ...

    def get_files(self, request: FilesRequest) -> Iterable[File]: ...


class _StreamScanner:
    """Reads a received stream until its end or its first error."""

    def __init__(self, stream: Iterable[Any]) -> None:
        self._stream = iter(stream)
        self._done = False

    def _receive(self) -> Any:
        if self._done:
            raise StopIteration
        try:
            return next(self._stream)
        except BaseException:
            self._done = True
            raise


class ClientChangeScanner(ChangeScanner):
    """Scans the changes received from a data service."""

    def __init__(self, stream: Iterable[Change]) -> None:
        self._reader = _StreamScanner(stream)

    def __next__(self) -> Change:
        return self._reader._receive()

    def close(self) -> None:
        """Nothing to release: the stream ends by itself."""


class ClientFileScanner(FileScanner):
    """Scans the files received from a data service."""

    def __init__(self, stream: Iterable[File]) -> None:
        self._reader = _StreamScanner(stream)

    def __next__(self) -> File:
        return self._reader._receive()

    def close(self) -> None:
        """Nothing to release: the stream ends by itself."""


class DataClient(ChangeGetter, FileGetter):
    """Gets changes and files from a remote data service."""

    def __init__(self, transport: DataTransport) -> None:
        self._transport = transport

    def get_changes(self, request: ChangesRequest) -> ClientChangeScanner:
        """Request changes and return a scanner over the response."""
        return ClientChangeScanner(self._transport.get_changes(request))

    def get_files(self, request: FilesRequest) -> ClientFileScanner:
        """Request files and return a scanner over the response."""
        return ClientFileScanner(self._transport.get_files(request))


class _FilteringScanner(Generic[T]):
    def __init__(
        self,
        scanner: _Scanner[T],
        fn: Callable[[T], bool],
        on_start: Optional[Callable[[], None]] = None,
    ) -> None:
        self.scanner = scanner
        self.fn = fn
        self.on_start = on_start
        self._source: Optional[Iterator[T]] = None
        self._started = False
        self._done = False

    def _advance(self) -> T:
        if self._done:
            raise StopIteration
        try:
            if not self._started:
                self._started = True
                if self.on_start is not None:
                    self.on_start()
            if self._source is None:
                self._source = iter(self.scanner)
            for item in self._source:
                if not self.fn(item):
                    return item
        except BaseException:
            self._done = True
            raise
        self._done = True
        raise StopIteration


class FnChangeScanner(ChangeScanner):
    """Wraps a change scanner, skipping changes for which ``fn`` is true.

    ``on_start`` runs once, before the first change is read.
    """

    def __init__(
        self,
        scanner: ChangeScanner,
        fn: Callable[[Change], bool],
        on_start: Optional[Callable[[], None]] = None,
    ) -> None:
        self._filter = _FilteringScanner(scanner, fn, on_start)

    def __next__(self) -> Change:
        return self._filter._advance()

    def close(self) -> None:
        """Close the wrapped scanner."""
        self._filter.scanner.close()


class FnFileScanner(FileScanner):
    """Wraps a file scanner, skipping files for which ``fn`` is true.

    ``on_start`` runs once, before the first file is read.
    """

    def __init__(
        self,
        scanner: FileScanner,
        fn: Callable[[File], bool],
        on_start: Optional[Callable[[], None]] = None,
    ) -> None:
        self._filter = _FilteringScanner(scanner, fn, on_start)

    def __next__(self) -> File:
        return self._filter._advance()

    def close(self) -> None:
        """Close the wrapped scanner."""
        self._filter.scanner.close()