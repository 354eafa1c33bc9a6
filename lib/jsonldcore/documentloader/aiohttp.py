"""
Remote document loader using aiohttp.

The loader is synchronous to its callers. It runs the request with
``asyncio.run``, or on a background event loop when called from inside a
running loop.

.. module:: jsonldcore.documentloader.aiohttp
  :synopsis: Remote document loader using aiohttp
"""

import asyncio
import logging
import threading

from jsonldcore.documentloader import (
    DEFAULT_HEADERS, link_header_document, validate_url)
from jsonldcore.errors import JsonLdError

logger = logging.getLogger(__name__)

# background event loop, used when called inside a running loop
_background_loop = None
_background_lock = threading.Lock()


def _ensure_background_loop():
    """Start a persistent background event loop if not running."""
    global _background_loop
    with _background_lock:
        if _background_loop is None:
            _background_loop = asyncio.new_event_loop()

            def run_loop(loop):
                asyncio.set_event_loop(loop)
                loop.run_forever()

            threading.Thread(
                target=run_loop, args=(_background_loop,),
                daemon=True).start()
    return _background_loop


def aiohttp_document_loader(secure=False, max_link_follows=2, **kwargs):
    """
    Create a document loader using aiohttp.

    :param secure: require all requests to use HTTPS (default: False).
    :param max_link_follows: maximum number of alternate links followed.
    :param **kwargs: extra keyword args for the aiohttp request get() call.

    :return: the RemoteDocument loader function.
    """
    import aiohttp

    async def async_loader(url, headers, link_follow_count=0):
        try:
            validate_url(url, secure)
            logger.debug('Loading document %s', url)
            async with aiohttp.ClientSession() as session:
                async with session.get(
                        url, headers=headers, **kwargs) as response:
                    response.raise_for_status()
                    content_type = (response.headers.get('content-type') or
                                    'application/octet-stream')
                    doc = {
                        'contentType': content_type,
                        'contextUrl': None,
                        'documentUrl': response.url.human_repr(),
                        'document': None
                    }
                    try:
                        # allow any content type, as requests does
                        doc['document'] = await response.json(
                            content_type=None)
                    except ValueError:
                        pass
                    link_header = response.headers.get('link')

            if link_header:
                alternate = link_header_document(url, doc, link_header)
                if alternate is not None:
                    if link_follow_count >= max_link_follows:
                        raise JsonLdError(
                            'Exceeded maximum number of alternate link '
                            'follows (%d).' % max_link_follows,
                            'jsonld.LoadDocumentError', {'url': url},
                            code='loading document failed')
                    return await async_loader(
                        alternate, headers, link_follow_count + 1)
            return doc
        except JsonLdError:
            raise
        except Exception as cause:
            raise JsonLdError(
                'Could not retrieve a JSON-LD document from the URL.',
                'jsonld.LoadDocumentError', {'url': url},
                code='loading document failed', cause=cause)

    def loader(url, options=None):
        """
        Retrieves JSON-LD at the given URL.

        :param url: the URL to retrieve.
        :param [options]: the request options ('headers').

        :return: the RemoteDocument.
        """
        options = options or {}
        headers = options.get('headers') or DEFAULT_HEADERS

        try:
            running_loop = asyncio.get_running_loop()
        except RuntimeError:
            running_loop = None

        if running_loop is None:
            return asyncio.run(async_loader(url, headers))

        future = asyncio.run_coroutine_threadsafe(
            async_loader(url, headers), _ensure_background_loop())
        return future.result()

    return loader
