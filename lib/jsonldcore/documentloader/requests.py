"""
Remote document loader using Requests.

.. module:: jsonldcore.documentloader.requests
  :synopsis: Remote document loader using Requests
"""

import logging

from jsonldcore.documentloader import (
    DEFAULT_HEADERS, link_header_document, validate_url)
from jsonldcore.errors import JsonLdError

logger = logging.getLogger(__name__)


def requests_document_loader(secure=False, max_link_follows=2, **kwargs):
    """
    Create a Requests document loader.

    Can be used to setup extra Requests args such as verify, cert, timeout,
    or others.

    :param secure: require all requests to use HTTPS (default: False).
    :param max_link_follows: maximum number of alternate links followed.
    :param **kwargs: extra keyword args for Requests get() call.

    :return: the RemoteDocument loader function.
    """
    import requests

    def loader(url, options=None, link_follow_count=0):
        """
        Retrieves JSON-LD at the given URL.

        :param url: the URL to retrieve.
        :param [options]: the request options ('headers').

        :return: the RemoteDocument.
        """
        options = options or {}
        try:
            validate_url(url, secure)
            headers = options.get('headers') or DEFAULT_HEADERS
            logger.debug('Loading document %s', url)
            response = requests.get(url, headers=headers, **kwargs)
            response.raise_for_status()

            doc = {
                'contentType': (response.headers.get('content-type') or
                                'application/octet-stream'),
                'contextUrl': None,
                'documentUrl': response.url,
                'document': None
            }
            try:
                doc['document'] = response.json()
            except ValueError:
                # not JSON, the Link header may name an alternate
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
                    logger.debug('Following alternate link to %s', alternate)
                    return loader(alternate, options, link_follow_count + 1)
            return doc
        except JsonLdError:
            raise
        except Exception as cause:
            raise JsonLdError(
                'Could not retrieve a JSON-LD document from the URL.',
                'jsonld.LoadDocumentError', {'url': url},
                code='loading document failed', cause=cause)

    return loader
