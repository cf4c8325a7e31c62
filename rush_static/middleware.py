import logging
import functools
from typing import Awaitable, Callable, Optional, Union

from .config import StaticConfig
from .entities import Request, RequestContext, ServeOutcome, ServeResult
from .exceptions import MalformedURLError
from .resolver import PathResolver
from .responder import FileResponder, write_error
from .typehints import RawURLFilter, ResponseSink

logger = logging.getLogger(__name__)

Handler = Callable[[Request, ResponseSink], Awaitable]

STATIC_HEADER = ('x-rush-static', 'v1.0')


class StaticMiddleware:
    """
    Serves files for every request which url matches the filter. Other
    requests are left for the next handler
    """

    def __init__(self,
                 config: StaticConfig,
                 responder: Optional[FileResponder] = None):
        self.config = config
        self.resolver = PathResolver(config.root_path)
        self.responder = responder or FileResponder()

    @classmethod
    def attach(cls,
               static_root: str,
               filter: Union[RawURLFilter, None] = None,
               **responder_kwargs) -> 'StaticMiddleware':
        return cls(
            StaticConfig(root_path=static_root, url_filter=filter),
            FileResponder(**responder_kwargs)
        )

    def matches(self, url: str) -> bool:
        return self.config.url_filter(url)

    async def __call__(self, request: Request, sink: ResponseSink) -> bool:
        """
        Returns False if request is not ours, otherwise serves it
        and returns True
        """

        if not self.matches(request.url):
            return False

        await self.serve(request, sink)

        return True

    async def serve(self, request: Request, sink: ResponseSink) -> ServeResult:
        ctx = RequestContext.for_request(request, sink)
        sink.set_header(*STATIC_HEADER)

        try:
            file_path = self.resolver.resolve(request.url)
        except MalformedURLError as exc:
            sink.write_head(exc.code, {'content-type': 'text/plain'})
            sink.end(exc.description.encode())
            logger.debug('[%s] %d - %s - %s - %s', ctx.correlation_id, exc.code,
                         request.url, ctx.remote_address, exc)

            return ServeResult(ServeOutcome.FAILED, exc)

        return await self.responder.serve(
            ctx,
            file_path,
            request.headers.get('if-none-match', ''),
            functools.partial(write_error, ctx)
        )

    async def process(self,
                      handler: Handler,
                      request: Request,
                      sink: ResponseSink):
        """
        A place in middleware chain: serves the request if it's ours,
        otherwise calls next handler
        """

        if not await self(request, sink):
            return await handler(request, sink)
