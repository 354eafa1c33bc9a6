"""
Retrieval of remote @context references.

.. module:: jsonldcore.context_resolver
  :synopsis: remote context retrieval with per-operation caching
"""

import copy
import json
import logging

from jsonldcore.errors import ContextError
from jsonldcore.iri import resolve
from jsonldcore.model import _is_array, _is_object, _is_string, arrayify

__all__ = ['ContextResolver', 'MAX_CONTEXT_URLS']

logger = logging.getLogger(__name__)

# maximum number of distinct context URLs one operation may load
MAX_CONTEXT_URLS = 10


class ContextResolver(object):
    """
    Replaces remote context references in a document with the contexts they
    point to.

    A resolver belongs to one top-level operation. Loaded contexts are
    cached by absolute URL for its lifetime, so each URL is fetched at most
    once per operation.
    """

    def __init__(self, document_loader, max_urls=MAX_CONTEXT_URLS):
        """
        :param document_loader(url): the document loader, returning a
          RemoteDocument dict.
        :param max_urls: the maximum number of distinct URLs to load.
        """
        self.document_loader = document_loader
        self.max_urls = max_urls
        self._cache = {}
        self._seen = set()

    def resolve(self, input_, base=''):
        """
        Replaces every string @context reference in the input, in place,
        with the retrieved context.

        :param input_: the JSON-LD document, frame or context.
        :param base: the base URL to resolve relative references against.

        :return: the input.
        """
        self._find(input_, base, ())
        return input_

    def resolve_context(self, ctx, base=''):
        """
        Resolves a context value (as found under @context) and returns it.
        """
        return self._resolve_context(ctx, base, ())

    def _find(self, input_, base, path):
        if _is_array(input_):
            for e in input_:
                self._find(e, base, path)
        elif _is_object(input_):
            for k, v in input_.items():
                if k == '@context':
                    input_[k] = self._resolve_context(v, base, path)
                else:
                    self._find(v, base, path)

    def _resolve_context(self, ctx, base, path):
        if _is_string(ctx):
            return self._load(resolve(ctx, base), path)

        if _is_array(ctx):
            rval = []
            for e in ctx:
                resolved = self._resolve_context(e, base, path)
                # a remote array context is spliced in place
                if _is_string(e) and _is_array(resolved):
                    rval.extend(resolved)
                else:
                    rval.append(resolved)
            return rval

        if _is_object(ctx):
            if '@context' in ctx:
                ctx['@context'] = self._resolve_context(
                    ctx['@context'], base, path)
            # scoped contexts
            for key, definition in ctx.items():
                if _is_object(definition) and '@context' in definition:
                    definition['@context'] = self._resolve_context(
                        definition['@context'], base, path)

        return ctx

    def _load(self, url, path):
        if url in path:
            raise ContextError(
                'Cyclical @context URLs detected.',
                details={'url': url, 'path': list(path)},
                code='recursive context inclusion')

        if url in self._cache:
            return copy.deepcopy(self._cache[url])

        if url not in self._seen and len(self._seen) >= self.max_urls:
            raise ContextError(
                'Maximum number of @context URLs exceeded.',
                details={'max': self.max_urls, 'url': url},
                code='loading remote context failed')
        self._seen.add(url)

        logger.debug('Loading remote context %s', url)
        try:
            remote_doc = self.document_loader(url)
            document = remote_doc['document']
        except Exception as cause:
            raise ContextError(
                'Dereferencing a URL did not result in a valid JSON-LD '
                'context.', details={'url': url},
                code='loading remote context failed', cause=cause)

        if _is_string(document):
            try:
                document = json.loads(document)
            except ValueError as cause:
                raise ContextError(
                    'Could not parse JSON from URL.', details={'url': url},
                    code='loading remote context failed', cause=cause)

        if not _is_object(document):
            raise ContextError(
                'Dereferencing a URL did not result in a valid JSON-LD '
                'object.', details={'url': url},
                code='invalid remote context')

        ctx = copy.deepcopy(document.get('@context', {}))

        if remote_doc.get('contextUrl') is not None:
            ctx = arrayify(ctx)
            ctx.append(remote_doc['contextUrl'])

        ctx = self._resolve_context(ctx, url, path + (url,))
        self._cache[url] = ctx
        return copy.deepcopy(ctx)
