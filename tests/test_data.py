import pytest

from lookout.data import (
    CallContext,
    ChangeGetter,
    ChangeScanner,
    DataClient,
    DataServerHandler,
    FileGetter,
    FileScanner,
    FnChangeScanner,
    FnFileScanner,
    RequestCanceledError,
)
from lookout.types import Change, ChangesRequest, File, FilesRequest, ReferencePointer

HASH = "5262fd2b59d10e335a5c941140df16950958322d"


def make_ref():
    return ReferencePointer(internal_repository_url="repo", hash=HASH)


def generate_changes(size):
    return [Change(head=File(path=f"myfile{i}")) for i in range(size)]


def generate_files(size):
    return [File(path=f"myfile{i}") for i in range(size)]


class SliceChangeScanner(ChangeScanner):
    def __init__(self, changes, error=None, close_error=None):
        self.changes = list(changes)
        self.error = error
        self.close_error = close_error
        self.closed = False

    def __next__(self):
        if self.error is not None:
            raise self.error
        if not self.changes:
            raise StopIteration
        return self.changes.pop(0)

    def close(self):
        self.closed = True
        if self.close_error is not None:
            raise self.close_error


class SliceFileScanner(FileScanner):
    def __init__(self, files, error=None):
        self.files = list(files)
        self.error = error
        self.closed = False

    def __next__(self):
        if self.error is not None:
            raise self.error
        if not self.files:
            raise StopIteration
        return self.files.pop(0)

    def close(self):
        self.closed = True


class MockService(ChangeGetter, FileGetter):
    def __init__(self, changes_request=None, files_request=None,
                 change_scanner=None, file_scanner=None, error=None):
        self.changes_request = changes_request
        self.files_request = files_request
        self.change_scanner = change_scanner
        self.file_scanner = file_scanner
        self.error = error

    def get_changes(self, request):
        assert request == self.changes_request
        if self.error is not None:
            raise self.error
        return self.change_scanner

    def get_files(self, request):
        assert request == self.files_request
        if self.error is not None:
            raise self.error
        return self.file_scanner


class CollectingStream:
    def __init__(self, context=None, send_error=False):
        self.context = context or CallContext()
        self.send_error = send_error
        self.sent = []

    def send(self, item):
        if self.send_error:
            raise RuntimeError("send error")
        self.sent.append(item)


class LoopbackTransport:
    def __init__(self, handler):
        self.handler = handler

    def _call(self, method, request):
        stream = CollectingStream()
        error = None
        try:
            method(request, stream)
        except Exception as exc:
            error = exc
        yield from stream.sent
        if error is not None:
            raise error

    def get_changes(self, request):
        return self._call(self.handler.get_changes, request)

    def get_files(self, request):
        return self._call(self.handler.get_files, request)


def make_client(service):
    handler = DataServerHandler(change_getter=service, file_getter=service)
    return DataClient(LoopbackTransport(handler))


@pytest.mark.parametrize("size", range(11))
def test_server_get_changes_ok(size):
    req = ChangesRequest(head=make_ref())
    changes = generate_changes(size)
    service = MockService(changes_request=req, change_scanner=SliceChangeScanner(changes))
    scanner = make_client(service).get_changes(req)
    assert list(scanner) == changes
    assert list(scanner) == []


@pytest.mark.parametrize("size", range(11))
def test_server_get_files_ok(size):
    req = FilesRequest(revision=make_ref())
    files = generate_files(size)
    service = MockService(files_request=req, file_scanner=SliceFileScanner(files))
    scanner = make_client(service).get_files(req)
    assert list(scanner) == files


def test_data_server_handler_cancel():
    req_c = ChangesRequest(head=make_ref())
    req_f = FilesRequest(revision=make_ref())
    service = MockService(
        changes_request=req_c,
        files_request=req_f,
        change_scanner=SliceChangeScanner(generate_changes(1)),
        file_scanner=SliceFileScanner(generate_files(1)),
    )
    handler = DataServerHandler(change_getter=service, file_getter=service)
    ctx = CallContext()
    ctx.cancel()
    assert ctx.cancelled()

    with pytest.raises(RequestCanceledError) as info:
        handler.get_changes(req_c, CollectingStream(ctx))
    assert str(info.value) == "request canceled: context canceled"

    with pytest.raises(RequestCanceledError) as info:
        handler.get_files(req_f, CollectingStream(ctx))
    assert str(info.value) == "request canceled: context canceled"


def test_data_server_handler_send_error():
    req_c = ChangesRequest(head=make_ref())
    req_f = FilesRequest(revision=make_ref())
    service = MockService(
        changes_request=req_c,
        files_request=req_f,
        change_scanner=SliceChangeScanner(generate_changes(1)),
        file_scanner=SliceFileScanner(generate_files(1)),
    )
    handler = DataServerHandler(change_getter=service, file_getter=service)

    with pytest.raises(RuntimeError, match="^send error$"):
        handler.get_changes(req_c, CollectingStream(send_error=True))
    with pytest.raises(RuntimeError, match="^send error$"):
        handler.get_files(req_f, CollectingStream(send_error=True))


def test_handler_closes_scanner():
    req = ChangesRequest(head=make_ref())
    scanner = SliceChangeScanner(generate_changes(2))
    handler = DataServerHandler(change_getter=MockService(changes_request=req, change_scanner=scanner))
    stream = CollectingStream()
    handler.get_changes(req, stream)
    assert scanner.closed
    assert [c.head.path for c in stream.sent] == ["myfile0", "myfile1"]


def test_handler_reports_close_error():
    req = ChangesRequest(head=make_ref())
    scanner = SliceChangeScanner(generate_changes(1), close_error=OSError("close failed"))
    handler = DataServerHandler(change_getter=MockService(changes_request=req, change_scanner=scanner))
    with pytest.raises(OSError, match="close failed"):
        handler.get_changes(req, CollectingStream())


def test_server_get_changes_error():
    req = ChangesRequest(head=make_ref())
    service = MockService(
        changes_request=req,
        change_scanner=SliceChangeScanner(generate_changes(10)),
        error=RuntimeError("TEST ERROR"),
    )
    scanner = make_client(service).get_changes(req)
    with pytest.raises(RuntimeError, match="TEST ERROR"):
        next(scanner)
    assert list(scanner) == []


def test_server_get_files_error():
    req = FilesRequest(revision=make_ref())
    service = MockService(
        files_request=req,
        file_scanner=SliceFileScanner(generate_files(10)),
        error=RuntimeError("TEST ERROR"),
    )
    scanner = make_client(service).get_files(req)
    with pytest.raises(RuntimeError, match="TEST ERROR"):
        next(scanner)
    assert list(scanner) == []


def test_server_get_changes_iter_error():
    req = ChangesRequest(head=make_ref())
    service = MockService(
        changes_request=req,
        change_scanner=SliceChangeScanner(generate_changes(10), error=RuntimeError("TEST ERROR")),
    )
    scanner = make_client(service).get_changes(req)
    with pytest.raises(RuntimeError, match="TEST ERROR"):
        next(scanner)
    assert list(scanner) == []


def test_server_get_files_iter_error():
    req = FilesRequest(revision=make_ref())
    service = MockService(
        files_request=req,
        file_scanner=SliceFileScanner(generate_files(10), error=RuntimeError("TEST ERROR")),
    )
    scanner = make_client(service).get_files(req)
    with pytest.raises(RuntimeError, match="TEST ERROR"):
        next(scanner)
    assert list(scanner) == []


def test_fn_file_scanner():
    s = FnFileScanner(SliceFileScanner(generate_files(3)), lambda f: f.path.endswith("2"))
    scanned = list(s)
    assert list(s) == []
    s.close()
    assert [f.path for f in scanned] == ["myfile0", "myfile1"]


def test_fn_file_scanner_err():
    error = ValueError("test-error")

    def fn(f):
        raise error

    s = FnFileScanner(SliceFileScanner(generate_files(3)), fn)
    with pytest.raises(ValueError) as info:
        list(s)
    assert info.value is error
    assert list(s) == []


def test_fn_file_scanner_on_start():
    calls = []
    inner = SliceFileScanner(generate_files(3))
    s = FnFileScanner(inner, lambda f: False, on_start=lambda: calls.append(True))
    assert len(list(s)) == 3
    assert list(s) == []
    s.close()
    assert inner.closed
    assert calls == [True]


def test_fn_file_scanner_on_start_err():
    error = ValueError("test-err")

    def on_start():
        raise error

    s = FnFileScanner(SliceFileScanner(generate_files(3)), lambda f: False, on_start=on_start)
    with pytest.raises(ValueError) as info:
        list(s)
    assert info.value is error
    assert list(s) == []


def test_fn_change_scanner():
    s = FnChangeScanner(SliceChangeScanner(generate_changes(3)), lambda c: c.head.path.endswith("2"))
    scanned = list(s)
    assert list(s) == []
    assert len(scanned) == 2


def test_fn_change_scanner_err():
    error = ValueError("test-error")

    def fn(c):
        raise error

    s = FnChangeScanner(SliceChangeScanner(generate_changes(3)), fn)
    with pytest.raises(ValueError) as info:
        list(s)
    assert info.value is error
    assert list(s) == []


def test_fn_change_scanner_on_start():
    calls = []
    inner = SliceChangeScanner(generate_changes(3))
    with FnChangeScanner(inner, lambda c: False, on_start=lambda: calls.append(1)) as s:
        scanned = list(s)
    assert len(scanned) == 3
    assert calls == [1]
    assert inner.closed


def test_fn_change_scanner_on_start_err():
    error = ValueError("test-err")

    def on_start():
        raise error

    s = FnChangeScanner(SliceChangeScanner(generate_changes(3)), lambda c: False, on_start=on_start)
    with pytest.raises(ValueError) as info:
        list(s)
    assert info.value is error
    assert list(s) == []


def test_data_client_get_changes():
    req = ChangesRequest(head=make_ref())
    service = MockService(changes_request=req, change_scanner=SliceChangeScanner(generate_changes(3)))
    with make_client(service).get_changes(req) as s:
        scanned = list(s)
        assert list(s) == []
    assert len(scanned) == 3


def test_data_client_get_files():
    req = FilesRequest(revision=make_ref())
    service = MockService(files_request=req, file_scanner=SliceFileScanner(generate_files(3)))
    with make_client(service).get_files(req) as s:
        scanned = list(s)
        assert list(s) == []
    assert [f.path for f in scanned] == ["myfile0", "myfile1", "myfile2"]


def test_call_context_starts_uncancelled():
    ctx = CallContext()
    assert ctx.cancelled() is False
    ctx.cancel()
    assert ctx.cancelled() is True