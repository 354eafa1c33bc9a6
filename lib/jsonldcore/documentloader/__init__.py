"""
Document loaders and the helpers they share.

A document loader is a callable ``loader(url, options=None)`` returning a
RemoteDocument dict::

    {
      'contentType': 'application/ld+json',
      'contextUrl': None,
      'documentUrl': 'https://example.com/doc',
      'document': {...}
    }

.. module:: jsonldcore.documentloader
  :synopsis: Remote document loading
"""

import re
import string
import urllib.parse as urllib_parse

from jsonldcore.errors import JsonLdError
from jsonldcore.iri import resolve

__all__ = [
    'LINK_HEADER_REL', 'DEFAULT_HEADERS', 'parse_link_header',
    'dummy_document_loader', 'validate_url', 'link_header_document'
]

# JSON-LD link header rel
LINK_HEADER_REL = 'http://www.w3.org/ns/json-ld#context'

DEFAULT_HEADERS = {'Accept': 'application/ld+json, application/json'}

_JSON_CONTENT_TYPE = re.compile(r'^application/(\w*\+)?json')


def parse_link_header(header):
    """
    Parses an HTTP Link header into a dict keyed by each link's "rel".

    Each entry holds the link 'target' and its other parameters, so

        </ctx.jsonld>; rel="alternate"; type="application/ld+json"

    gives {'alternate': {'target': '/ctx.jsonld', 'rel': 'alternate',
    'type': 'application/ld+json'}}. A rel named by several links maps to a
    list of entries.

    :param header: the Link header value.

    :return: the links by rel.
    """
    rval = {}
    # split on unbracketed/unquoted commas
    entries = re.findall(r'(?:<[^>]*?>|"[^"]*?"|[^,])+', header)
    r_link_header = r'\s*<([^>]*?)>\s*(?:;\s*(.*))?'
    r_params = r'(.*?)=(?:(?:"([^"]*?)")|([^"]*?))\s*(?:(?:;\s*)|$)'
    for entry in entries:
        match = re.search(r_link_header, entry)
        if not match:
            continue
        target, params = match.groups()
        result = {'target': target}
        for key, quoted, unquoted in re.findall(r_params, params or ''):
            result[key.strip()] = quoted or unquoted
        rel = result.get('rel', '')
        if isinstance(rval.get(rel), list):
            rval[rel].append(result)
        elif rel in rval:
            rval[rel] = [rval[rel], result]
        else:
            rval[rel] = result
    return rval


def validate_url(url, secure=False):
    """
    Checks that a URL can be dereferenced by the HTTP loaders.

    :raises JsonLdError: for anything but a plain http(s) URL, or a non-https
      URL in secure mode.
    """
    pieces = urllib_parse.urlparse(url)
    if (not all([pieces.scheme, pieces.netloc]) or
            pieces.scheme not in ['http', 'https'] or
            not set(pieces.netloc) <= set(
                string.ascii_letters + string.digits + '-.:')):
        raise JsonLdError(
            'URL could not be dereferenced; only "http" and "https" '
            'URLs are supported.',
            'jsonld.InvalidUrl', {'url': url},
            code='loading document failed')
    if secure and pieces.scheme != 'https':
        raise JsonLdError(
            'URL could not be dereferenced; secure mode enabled and '
            'the URL\'s scheme is not "https".',
            'jsonld.InvalidUrl', {'url': url},
            code='loading document failed')


def link_header_document(url, doc, link_header):
    """
    Applies a response's Link header to a RemoteDocument.

    Sets ``contextUrl`` from a JSON-LD context link. For a response that is
    not JSON, returns the absolute URL of an ``alternate`` JSON-LD
    representation the caller should follow instead.

    :param url: the requested URL.
    :param doc: the RemoteDocument built from the response (updated).
    :param link_header: the Link header value.

    :return: the URL to follow, None if the document is final.
    """
    links = parse_link_header(link_header)
    content_type = doc['contentType']

    linked_context = links.get(LINK_HEADER_REL)
    # only 1 related link header permitted
    if linked_context and content_type != 'application/ld+json':
        if isinstance(linked_context, list):
            raise JsonLdError(
                'URL could not be dereferenced, it has more than one '
                'associated HTTP Link Header.',
                'jsonld.LoadDocumentError', {'url': url},
                code='multiple context link headers')
        doc['contextUrl'] = resolve(linked_context['target'], url)

    # if not JSON-LD, alternate may point there
    linked_alternate = links.get('alternate')
    if (isinstance(linked_alternate, dict) and
            linked_alternate.get('type') == 'application/ld+json' and
            not _JSON_CONTENT_TYPE.match(content_type)):
        return resolve(linked_alternate['target'], url)
    return None


def dummy_document_loader(**kwargs):
    """
    Create a dummy document loader that will raise an exception on use.

    :param **kwargs: extra keyword args

    :return: the RemoteDocument loader function.
    """

    def loader(url, options=None):
        """
        Raises an exception on every call.

        :param url: the URL to retrieve.

        :return: the RemoteDocument.
        """
        raise JsonLdError(
            'No default document loader configured',
            'jsonld.LoadDocumentError', {'url': url},
            code='no default document loader')

    return loader
