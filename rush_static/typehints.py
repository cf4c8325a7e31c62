from typing import (Any, Awaitable, Callable, Dict, Optional, Pattern,
                    Protocol, Union, TYPE_CHECKING)

if TYPE_CHECKING:
    from .exceptions import ServeError

AsyncFunction = Callable[..., Awaitable]
Path = str
URL = str
ETag = str
Headers = Dict[str, Any]
Digest = Callable[[Union[str, bytes]], str]
ContentTypeLookup = Callable[[str], str]
URLFilter = Callable[[URL], bool]
RawURLFilter = Union[str, Pattern, URLFilter]
ErrorCallback = Callable[['ServeError'], Any]


class ResponseSink(Protocol):
    """
    Everything the responder needs from a host's response object. A sink
    keeps the status code it was asked to write, so callers can check whether
    somebody else has already answered the request
    """

    status_code: int
    headers_sent: bool

    @property
    def closed(self) -> bool:
        ...

    def set_header(self, name: str, value: Any) -> None:
        ...

    def write_head(self, status: int, headers: Optional[Headers] = None) -> None:
        ...

    def write(self, data: bytes) -> None:
        ...

    def end(self, data: bytes = b'') -> None:
        ...

    async def drain(self) -> None:
        ...

    def close(self) -> None:
        ...


class Logger(Protocol):
    def debug(self, text: str, *args: Any) -> None:
        ...

    def info(self, text: str, *args: Any) -> None:
        ...

    def warning(self, text: str, *args: Any) -> None:
        ...

    def error(self, text: str, *args: Any) -> None:
        ...

    def exception(self, text: str, *args: Any) -> None:
        ...
