import logging
from typing import Any, Dict, Optional, Union

import aiofiles
import aiofiles.os

from . import etag as etags
from .entities import (CaseInsensitiveDict, FileMeta, RequestContext, ServeOutcome,
                       ServeResult)
from .exceptions import ServeError, Reason
from .typehints import ContentTypeLookup, Digest, ErrorCallback, Headers, Path
from .utils.httputils import guess_content_type

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


def write_error(ctx: RequestContext, error: ServeError) -> None:
    """
    Default error callback: answers with the status code and plain-text message
    of the error reason. If the head is already sent (file broke in the middle
    of streaming) there is nothing to answer with, so the connection is dropped
    """

    sink = ctx.sink

    if sink.headers_sent:
        logger.error('[%s] %s - %s - %s: failed after the head was sent: %s',
                     ctx.correlation_id, error.code, ctx.url,
                     ctx.remote_address, error.detail)
        sink.close()
        return

    body = error.description.encode()
    # a head of the file may be already set, but not sent yet
    sink.write_head(error.code, {'content-type': 'text/plain',
                                 'content-length': len(body)})
    sink.end(body)
    logger.debug('[%s] %s - %s - %s - %s', ctx.correlation_id, error.code,
                 ctx.url, ctx.remote_address, error.description)


class FileResponder:
    """
    Serves a single file per call. Keeps nothing between requests: file is
    stat'ed every time, so etag changes as soon as the file does
    """

    def __init__(self,
                 digest: Digest = etags.md5,
                 chunk_size: int = DEFAULT_CHUNK_SIZE,
                 content_type: ContentTypeLookup = guess_content_type):
        self.digest = digest
        self.chunk_size = chunk_size
        self.content_type = content_type

    async def serve(self,
                    ctx: RequestContext,
                    file_path: Path,
                    client_etag: Optional[str] = '',
                    on_error: Optional[ErrorCallback] = None,
                    etag: Optional[str] = None) -> ServeResult:
        """
        Answers with the file: 304 if client already has it, otherwise
        200 with the file streamed in chunks

        Arguments:
                 ctx - request context with the sink to write to,
                 file_path - already resolved path of the file,
                 client_etag - value of If-None-Match header, may be empty,
                 on_error - called once with ServeError if request failed.
                            By default, error response is written to the sink,
                 etag - use this etag instead of one built from stat

        Returns ServeResult, failed ones carry the ServeError and its reason
        """

        sink = ctx.sink

        def fail(reason: Reason, detail: Any) -> ServeResult:
            error = ServeError(reason, file_path, detail)

            if on_error is None:
                write_error(ctx, error)
            else:
                on_error(error)

            return ServeResult(ServeOutcome.FAILED, error)

        try:
            meta = FileMeta.from_stat(await aiofiles.os.stat(file_path))
        except (OSError, ValueError) as exc:
            return fail(Reason.NOT_FOUND, exc)

        if not meta.is_file:
            return fail(Reason.FORBIDDEN, f'{file_path} is not a file')

        file_etag = etags.quote_etag(etag) if etag else etags.file_etag(meta, self.digest)

        if etags.etags_match(file_etag, client_etag):
            sink.write_head(304)
            sink.end()
            logger.debug('[%s] 304 - %s', ctx.correlation_id, file_path)

            return ServeResult(ServeOutcome.NOT_MODIFIED)

        sink.write_head(200, {
            'content-type': self.content_type(file_path),
            'content-length': meta.size,
            'etag': file_etag
        })

        # read file only if no one has altered the status code
        if sink.status_code != 200:
            logger.debug('[%s] status code was changed to %d, not sending %s',
                         ctx.correlation_id, sink.status_code, file_path)
            return ServeResult(ServeOutcome.ABORTED)

        try:
            async with aiofiles.open(file_path, 'rb') as fd:
                while True:
                    chunk = await fd.read(self.chunk_size)

                    if not chunk:
                        break

                    sink.write(chunk)
                    await sink.drain()

                    if sink.closed:
                        logger.debug('[%s] client has gone, abandoning %s',
                                     ctx.correlation_id, file_path)
                        return ServeResult(ServeOutcome.FAILED)
        except OSError as exc:
            return fail(Reason.INTERNAL_ERROR, exc)

        sink.end()

        return ServeResult(ServeOutcome.DELIVERED)

    def send_as_file(self,
                     ctx: RequestContext,
                     content: Union[str, bytes],
                     meta: Optional[Dict[str, Any]] = None,
                     headers: Optional[Headers] = None) -> ServeResult:
        """
        Sends already materialized content like it was a file

        Arguments:
                 content - str or bytes,
                 meta - optional dict with file info:
                        {
                            'type': 'image/jpeg',  # content type
                            'ext': '.jpg',  # used to guess type if no type given
                            'length': 300,  # content length
                            'etag': 'abc',  # etag, digest of content otherwise
                            'encoding': 'utf-8',  # to encode str content
                        }
                 headers - additional headers, they override computed ones
        """

        meta = meta or {}
        sink = ctx.sink
        body = content if isinstance(content, bytes) else \
            content.encode(meta.get('encoding') or 'utf-8')

        length = meta.get('length')
        response_headers = CaseInsensitiveDict({
            'content-type': meta.get('type') or self.content_type(meta.get('ext') or ''),
            'content-length': len(body) if length is None else length,
            'etag': etags.content_etag(body, meta.get('etag'), self.digest)
        })
        response_headers.update(headers or {})

        sink.write_head(200, response_headers)

        if sink.status_code != 200:
            logger.debug('[%s] status code was changed to %d, content is not sent',
                         ctx.correlation_id, sink.status_code)
            return ServeResult(ServeOutcome.ABORTED)

        sink.end(body)

        return ServeResult(ServeOutcome.DELIVERED)
