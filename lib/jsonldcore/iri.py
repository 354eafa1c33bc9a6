"""
IRI resolution against a base IRI (RFC 3986 section 5.2) and the reverse
operation used when compacting IRIs relative to the document base.
"""

import re
from collections import namedtuple

ParsedIri = namedtuple(
    'ParsedIri', ['scheme', 'authority', 'path', 'query', 'fragment'])

# regex from RFC 3986 appendix B
_IRI_PARTS = re.compile(
    r'^(?:([^:/?#]+):)?(?://([^/?#]*))?([^?#]*)(?:\?([^#]*))?(?:#(.*))?')
_SCHEME = re.compile(r'^[A-Za-z][A-Za-z0-9+.\-]*:')
_DEFAULT_PORTS = {'http': ':80', 'https': ':443'}


def parse_iri(iri: str) -> ParsedIri:
    return ParsedIri(*_IRI_PARTS.match(iri).groups())


def _authority(parsed: ParsedIri) -> str:
    # default ports only matter when comparing authorities
    port = _DEFAULT_PORTS.get(parsed.scheme)
    if port and parsed.authority and parsed.authority.endswith(port):
        return parsed.authority[:-len(port)]
    return parsed.authority


def unparse_iri(parsed: ParsedIri) -> str:
    rval = ''
    if parsed.scheme:
        rval += parsed.scheme + ':'
    if parsed.authority is not None:
        rval += '//' + parsed.authority
    rval += parsed.path
    if parsed.query is not None:
        rval += '?' + parsed.query
    if parsed.fragment is not None:
        rval += '#' + parsed.fragment
    return rval


def has_scheme(iri: str) -> bool:
    return bool(_SCHEME.match(iri))


def remove_dot_segments(path: str) -> str:
    """
    Removes '.' and '..' segments from a path (RFC 3986 section 5.2.4).
    """
    output = []
    while path:
        if path.startswith('../'):
            path = path[3:]
        elif path.startswith('./'):
            path = path[2:]
        elif path.startswith('/./'):
            path = path[2:]
        elif path == '/.':
            path = '/'
        elif path.startswith('/../'):
            path = path[3:]
            if output:
                output.pop()
        elif path == '/..':
            path = '/'
            if output:
                output.pop()
        elif path in ('.', '..'):
            path = ''
        else:
            end = path.find('/', 1 if path.startswith('/') else 0)
            if end == -1:
                end = len(path)
            output.append(path[:end])
            path = path[end:]
    return ''.join(output)


def resolve(iri: str, base: str = None) -> str:
    """
    Resolves a possibly relative IRI against a base IRI.

    :param iri: the IRI to resolve.
    :param base: the base IRI, None or '' to leave relative IRIs as they
      are.

    :return: the resolved IRI.
    """
    if has_scheme(iri):
        parsed = parse_iri(iri)
        return unparse_iri(parsed._replace(
            path=remove_dot_segments(parsed.path)))
    if not base:
        return iri

    b = parse_iri(base)
    r = parse_iri(iri)

    if r.authority is not None:
        authority = r.authority
        path = remove_dot_segments(r.path)
        query = r.query
    else:
        authority = b.authority
        if r.path == '':
            path = b.path
            query = r.query if r.query is not None else b.query
        else:
            if r.path.startswith('/'):
                path = remove_dot_segments(r.path)
            elif b.authority is not None and b.path == '':
                path = remove_dot_segments('/' + r.path)
            else:
                path = remove_dot_segments(
                    b.path[:b.path.rfind('/') + 1] + r.path)
            query = r.query

    return unparse_iri(ParsedIri(b.scheme, authority, path, query,
                                 r.fragment))


def relativize(iri: str, base: str = None) -> str:
    """
    Makes an absolute IRI relative to a base IRI where possible.

    :param iri: the absolute IRI.
    :param base: the base IRI.

    :return: the relative IRI if it shares scheme and authority with base,
      otherwise the IRI unchanged.
    """
    if not base:
        return iri

    b = parse_iri(base)
    r = parse_iri(iri)
    if not (b.scheme == r.scheme and _authority(b) == _authority(r)):
        return iri

    # keep the last segment unless a query or fragment follows it
    base_segments = remove_dot_segments(b.path).split('/')
    iri_segments = remove_dot_segments(r.path).split('/')
    last = 0 if (r.fragment or r.query) else 1
    while (base_segments and len(iri_segments) > last and
            base_segments[0] == iri_segments[0]):
        base_segments.pop(0)
        iri_segments.pop(0)

    rval = ''
    if base_segments:
        # the final base segment is a file name, not a directory
        base_segments.pop()
        rval += '../' * len(base_segments)
    rval += '/'.join(iri_segments)

    # a relative IRI must not be mistaken for a keyword or a compact IRI
    if rval.startswith('@') or (':' in rval.split('/')[0]):
        rval = './' + rval

    rval = unparse_iri(ParsedIri(None, None, rval, r.query, r.fragment))
    return rval or './'
