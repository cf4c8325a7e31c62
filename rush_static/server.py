import asyncio
import logging
import warnings
from collections import deque
from typing import Awaitable, Callable, Deque, Optional

from httptools import HttpRequestParser, HttpParserUpgrade
from httptools.parser.errors import HttpParserError

from .config import Settings
from .entities import CaseInsensitiveDict, Request, TransportResponse
from .middleware import StaticMiddleware
from .responder import FileResponder
from .typehints import ResponseSink

logger = logging.getLogger(__name__)

CLIENT_DISCONNECTED = object()
ALLOWED_METHODS = {'GET', 'HEAD'}

OnRequest = Callable[[Request, ResponseSink], Awaitable]


def run_loop(main: Awaitable) -> None:
    try:
        import uvloop
    except ImportError as exc:
        warnings.warn(f'failed to apply uvloop: {exc}')
        asyncio.run(main)
        return

    uvloop.run(main)


class ParserProtocol:
    """
    Callbacks for httptools parser. Completed requests are queued, as
    pipelined requests may come in a single chunk of data
    """

    def __init__(self, peer=None):
        self.peer = peer
        self.parser: Optional[HttpRequestParser] = None
        self.completed: Deque[Request] = deque()

        self._url = b''
        self._headers = CaseInsensitiveDict()

    def on_url(self, url: bytes):
        # url may come in several pieces
        self._url += url

    def on_header(self, name: bytes, value: bytes):
        self._headers[name.decode('latin-1')] = value.decode('latin-1')

    def on_message_complete(self):
        self.completed.append(Request(
            method=self.parser.get_method().decode(),
            # non-utf8 bytes are kept as surrogates; the resolver rejects them
            url=self._url.decode('utf-8', 'surrogateescape'),
            headers=self._headers,
            protocol=self.parser.get_http_version(),
            keep_alive=self.parser.should_keep_alive(),
            peer=self.peer
        ))
        self._url = b''
        self._headers = CaseInsensitiveDict()


class StaticServerProtocol(asyncio.Protocol):
    def __init__(self,
                 on_request: OnRequest,
                 default_headers: CaseInsensitiveDict):
        self.on_request = on_request
        self.default_headers = default_headers

        self.transport: Optional[asyncio.Transport] = None
        self.parser_protocol: Optional[ParserProtocol] = None
        self.parser: Optional[HttpRequestParser] = None
        self.runner: Optional[asyncio.Task] = None

        self.requests_queue: asyncio.Queue = asyncio.Queue()
        self.can_write = asyncio.Event()
        self.can_write.set()

    def connection_made(self, transport: asyncio.Transport) -> None:
        self.transport = transport
        self.parser_protocol = ParserProtocol(transport.get_extra_info('peername'))
        self.parser = HttpRequestParser(self.parser_protocol)
        self.parser_protocol.parser = self.parser
        self.runner = asyncio.get_running_loop().create_task(client_runner(self))
        self.runner.add_done_callback(self.runner_done)

    def runner_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return

        exc = task.exception()

        if exc is not None:
            logger.error('client runner of %s has crashed',
                         self.parser_protocol.peer, exc_info=exc)

            if not self.transport.is_closing():
                self.transport.close()

    def data_received(self, data: bytes) -> None:
        self.requests_queue.put_nowait(data)

    def connection_lost(self, exc: Optional[Exception]) -> None:
        # let the writers finish, sinks will see the transport is closing
        self.can_write.set()
        self.requests_queue.put_nowait(CLIENT_DISCONNECTED)

    def pause_writing(self) -> None:
        self.can_write.clear()

    def resume_writing(self) -> None:
        self.can_write.set()


async def client_runner(protocol: StaticServerProtocol) -> None:
    transport = protocol.transport

    while True:
        data = await protocol.requests_queue.get()

        if data is CLIENT_DISCONNECTED:
            return

        try:
            protocol.parser.feed_data(data)
        except (HttpParserError, HttpParserUpgrade) as exc:
            logger.debug('bad request from %s: %s',
                         transport.get_extra_info('peername'), exc)
            sink = TransportResponse(transport, protocol.default_headers,
                                     keep_alive=False)
            sink.write_head(400, {'content-type': 'text/plain'})
            sink.end(b'Bad Request')
            return

        while protocol.parser_protocol.completed:
            if transport.is_closing():
                return

            request = protocol.parser_protocol.completed.popleft()
            sink = TransportResponse(
                transport,
                protocol.default_headers,
                can_write=protocol.can_write,
                protocol=request.protocol,
                keep_alive=request.keep_alive,
                head_only=request.method == 'HEAD'
            )

            try:
                await protocol.on_request(request, sink)
            except Exception:
                logger.exception('an error occurred while processing %s %s',
                                 request.method, request.url)

                if not sink.headers_sent:
                    sink.keep_alive = False
                    sink.write_head(500, {'content-type': 'text/plain'})
                    sink.end(b'Internal Server Error')
                else:
                    sink.close()

            if transport.is_closing():
                return

            if not sink.finished:
                sink.end()


async def not_found(request: Request, sink: ResponseSink) -> None:
    sink.write_head(404, {'content-type': 'text/plain'})
    sink.end(b'Not Found')


class StaticServer:
    def __init__(self, settings: Settings):
        self.settings = settings
        self.logger = settings.logger

        asyncio_logger = logging.getLogger('asyncio')
        asyncio_logger.disabled = not settings.asyncio_logging
        asyncio_logger.setLevel(settings.asyncio_logging_level)

        self.middleware = StaticMiddleware(
            settings.static_config(),
            FileResponder(chunk_size=settings.chunk_size)
        )
        self.server: Optional[asyncio.AbstractServer] = None

    async def handle(self, request: Request, sink: ResponseSink) -> None:
        if request.method not in ALLOWED_METHODS:
            sink.write_head(405, {'content-type': 'text/plain',
                                  'allow': ', '.join(sorted(ALLOWED_METHODS))})
            sink.end(b'Method Not Allowed')
            return

        await self.middleware.process(not_found, request, sink)

    async def start(self) -> asyncio.AbstractServer:
        loop = asyncio.get_running_loop()
        self.server = await loop.create_server(
            lambda: StaticServerProtocol(self.handle, self.settings.default_headers),
            host=self.settings.host,
            port=self.settings.port,
            backlog=self.settings.max_connections
        )

        for sock in self.server.sockets:
            self.logger.info('serving %s on %s', self.middleware.resolver.root_path,
                             sock.getsockname())

        return self.server

    async def serve(self) -> None:
        server = await self.start()

        async with server:
            await server.serve_forever()

    def run(self) -> None:
        self.logger.info('press CTRL-C to stop the server')

        try:
            run_loop(self.serve())
        except KeyboardInterrupt:
            self.logger.info('shutting down (aborted by user)...')

    def stop(self) -> None:
        if self.server is not None:
            self.server.close()
