"""Shared fixtures for rush-static tests."""

from typing import Any, Dict, List, Optional

import pytest

from rush_static.entities import CaseInsensitiveDict, RequestContext


class RecordingSink:
    """
    In-memory response sink. Records everything the responder does with it,
    in the order it was done
    """

    def __init__(self, override_status: Optional[int] = None):
        self.status_code = 200
        self.headers = CaseInsensitiveDict()
        self.headers_sent = False
        self.finished = False
        self.dropped = False
        self.chunks: List[bytes] = []
        self.calls: List[str] = []

        # emulates another handler that has already answered the request
        self.override_status = override_status

    @property
    def closed(self) -> bool:
        return self.finished

    @property
    def body(self) -> bytes:
        return b''.join(self.chunks)

    def set_header(self, name: str, value: Any) -> None:
        self.headers[name] = value

    def write_head(self, status: int, headers: Optional[Dict[str, Any]] = None) -> None:
        self.calls.append('write_head')
        self.status_code = self.override_status or status
        self.headers.update(headers or {})

    def write(self, data: bytes) -> None:
        assert not self.finished
        self.calls.append('write')
        self.headers_sent = True
        self.chunks.append(data)

    def end(self, data: bytes = b'') -> None:
        assert not self.finished
        self.calls.append('end')
        self.headers_sent = True
        self.finished = True

        if data:
            self.chunks.append(data)

    async def drain(self) -> None:
        pass

    def close(self) -> None:
        self.calls.append('close')
        self.finished = True
        self.dropped = True


class FakeTransport:
    def __init__(self):
        self.data = b''
        self.closing = False

    def write(self, data: bytes) -> None:
        assert not self.closing
        self.data += data

    def close(self) -> None:
        self.closing = True

    def is_closing(self) -> bool:
        return self.closing

    def get_extra_info(self, name: str, default: Any = None) -> Any:
        return ('127.0.0.1', 40000) if name == 'peername' else default


def split_response(raw: bytes):
    head, body = raw.split(b'\r\n\r\n', 1)
    status_line, *header_lines = head.decode().split('\r\n')
    headers = dict(line.split(': ', 1) for line in header_lines)

    return status_line, headers, body


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def ctx(sink: RecordingSink) -> RequestContext:
    return RequestContext(sink=sink, url='/test', remote_address='127.0.0.1')


@pytest.fixture
def static_root(tmp_path):
    """
    A static root with a 42 bytes text file, a binary file, a nested file
    and an empty directory
    """

    (tmp_path / 'a.txt').write_bytes(b'x' * 41 + b'\n')
    (tmp_path / 'image.png').write_bytes(bytes(range(256)) * 3)
    (tmp_path / 'css').mkdir()
    (tmp_path / 'css' / 'style.css').write_text('body { color: red; }\n')
    (tmp_path / 'empty').mkdir()

    return tmp_path
