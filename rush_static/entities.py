import os
import enum
import stat
import uuid
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Set, Tuple, Union

from .exceptions import Reason, StaticError
from .typehints import Headers, ResponseSink
from .utils.httputils import render_response_head, http_date

logger = logging.getLogger(__name__)

# status codes that never carry a body, so they don't need content-length
BODYLESS_CODES = {204, 304}


class ServeOutcome(enum.Enum):
    NOT_MODIFIED = 'not_modified'
    DELIVERED = 'delivered'
    FAILED = 'failed'

    # somebody has changed the status code after our head was written,
    # so the body was not sent
    ABORTED = 'aborted'


@dataclass(frozen=True)
class ServeResult:
    """
    What happened to a request. Failed requests carry the error, so the
    caller can tell why without an error callback. A client that has gone
    in the middle of streaming is FAILED with no error
    """

    outcome: ServeOutcome
    error: Optional[StaticError] = None

    @property
    def reason(self) -> Optional[Reason]:
        return getattr(self.error, 'reason', None)

    @property
    def failed(self) -> bool:
        return self.outcome is ServeOutcome.FAILED


class CaseInsensitiveDict(dict):
    """
    A class that works absolutely like usual dict, but keys are case-insensitive
    Do not try to make him work with anything that is not a string!
    """

    def __init__(self, *args, **kwargs):
        super().__init__()
        self.update(*args, **kwargs)

    def __getitem__(self, item: str) -> Any:
        return super().__getitem__(item.lower())

    def __setitem__(self, key: str, value: Any) -> None:
        super().__setitem__(key.lower(), value)

    def __delitem__(self, key: str) -> None:
        super().__delitem__(key.lower())

    def __contains__(self, item: str) -> bool:
        return super().__contains__(item.lower())

    def get(self, item: str, instead: Any = None) -> Any:
        return super().get(item.lower(), instead)

    def pop(self, key: str, *default) -> Any:
        return super().pop(key.lower(), *default)

    def setdefault(self, key: str, default: Any = None) -> Any:
        return super().setdefault(key.lower(), default)

    def update(self, *args, **kwargs) -> None:
        for other in args + (kwargs,):
            items = other.items() if hasattr(other, 'items') else other

            for key, value in items:
                self[key] = value

    def copy(self) -> 'CaseInsensitiveDict':
        return CaseInsensitiveDict(self.items())


@dataclass(frozen=True)
class FileMeta:
    """
    What we need to know about a file to answer for it. Built from a fresh
    stat on every request and thrown away after
    """

    size: int
    inode: int
    modified_time: float
    modified_time_ns: int
    is_file: bool

    @classmethod
    def from_stat(cls, stat_result: os.stat_result) -> 'FileMeta':
        return cls(
            size=stat_result.st_size,
            inode=stat_result.st_ino,
            modified_time=stat_result.st_mtime,
            modified_time_ns=stat_result.st_mtime_ns,
            is_file=stat.S_ISREG(stat_result.st_mode)
        )

    @property
    def modified_time_millis(self) -> int:
        return self.modified_time_ns // 1_000_000


@dataclass
class Request:
    method: str
    url: str
    headers: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)
    protocol: str = '1.1'
    keep_alive: bool = True
    peer: Optional[Tuple[str, int]] = None

    @property
    def remote_address(self) -> str:
        return self.peer[0] if self.peer else '-'


@dataclass
class RequestContext:
    """
    Everything that belongs to a single request and has to be passed
    down to the responder: the sink to write to and a correlation id for logs
    """

    sink: ResponseSink
    correlation_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    url: str = ''
    remote_address: str = '-'

    @classmethod
    def for_request(cls, request: Request, sink: ResponseSink) -> 'RequestContext':
        return cls(sink=sink, url=request.url, remote_address=request.remote_address)


class TransportResponse:
    """
    A response sink that writes http/1.1 directly to an asyncio transport

    The head is not sent in write_head(), but right before the first body
    bytes, so end(body) can still count content-length. Once the head is
    sent, next write_head() calls are ignored and status_code keeps the code
    that really went to the client. A write_head() with another status before
    that drops headers of the previous one, so an error answer never goes out
    with content-length and etag of the file it replaces
    """

    def __init__(self,
                 transport: asyncio.BaseTransport,
                 default_headers: Optional[CaseInsensitiveDict] = None,
                 can_write: Optional[asyncio.Event] = None,
                 protocol: str = '1.1',
                 keep_alive: bool = True,
                 head_only: bool = False):
        self.transport = transport
        self.headers = (default_headers or CaseInsensitiveDict()).copy()
        self.can_write = can_write
        self.protocol = protocol
        self.keep_alive = keep_alive
        self.head_only = head_only

        self.status_code: int = 200
        self.headers_sent: bool = False
        self.finished: bool = False

        # names set by write_head(), as opposed to defaults and set_header()
        self._head_headers: Set[str] = set()

    @property
    def closed(self) -> bool:
        return self.finished or self.transport.is_closing()

    def set_header(self, name: str, value: Any) -> None:
        if self.headers_sent:
            logger.debug('ignoring header %s: head is already sent', name)
            return

        self.headers[name] = value

    def write_head(self, status: int, headers: Optional[Headers] = None) -> None:
        if self.headers_sent:
            logger.debug('ignoring write_head(%d): head is already sent with %d',
                         status, self.status_code)
            return

        if status != self.status_code:
            # headers of the previous head describe another body
            for name in self._head_headers:
                self.headers.pop(name, None)

            self._head_headers = set()

        self.status_code = status

        if headers:
            self.headers.update(headers)
            self._head_headers.update(name.lower() for name in headers)

    def write(self, data: Union[bytes, str]) -> None:
        if self.finished:
            raise RuntimeError('write after end of response')

        if not self.headers_sent:
            self._send_head(body_length=None)

        if data and not self.head_only:
            self.transport.write(data if isinstance(data, bytes) else data.encode())

    def end(self, data: Union[bytes, str] = b'') -> None:
        if self.finished:
            return

        if isinstance(data, str):
            data = data.encode()

        if not self.headers_sent:
            self._send_head(body_length=len(data))

        if data and not self.head_only:
            self.transport.write(data)

        self.finished = True

        if not self.keep_alive:
            self.transport.close()

    async def drain(self) -> None:
        if self.can_write is not None:
            await self.can_write.wait()

    def close(self) -> None:
        """
        Drops the connection. Used when the response can't be finished in
        a correct way (headers are already sent, but body is broken)
        """

        self.finished = True
        self.transport.close()

    def _send_head(self, body_length: Optional[int]) -> None:
        if 'content-length' not in self.headers and self.status_code not in BODYLESS_CODES:
            if body_length is None:
                # length is unknown, so the only way to tell the client where
                # the body ends is closing the connection
                self.keep_alive = False
            else:
                self.headers['content-length'] = body_length

        if not self.keep_alive:
            self.headers['connection'] = 'close'

        self.headers.setdefault('date', http_date())
        self.transport.write(render_response_head(
            protocol=self.protocol,
            code=self.status_code,
            headers=self.headers
        ))
        self.headers_sent = True
