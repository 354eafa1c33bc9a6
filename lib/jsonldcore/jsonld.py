"""
The public JSON-LD API.

Every operation takes plain JSON values (dicts, lists and scalars) and an
optional dict of camelCase options, copies what it is given and returns new
values. A string input is a URL dereferenced with the document loader.

.. module:: jsonldcore.jsonld
  :synopsis: JSON-LD processor
"""

import copy
import json
import logging

from jsonldcore import context as ctx_mod
from jsonldcore import rdf
from jsonldcore.__about__ import __copyright__, __license__, __version__
from jsonldcore.canon import ALGORITHMS, DEFAULT_MAX_PERMUTATIONS
from jsonldcore.compaction import Compactor, remove_preserve
from jsonldcore.context import ActiveContext, compact_iri
from jsonldcore.context_resolver import ContextResolver, MAX_CONTEXT_URLS
from jsonldcore.documentloader import (
    LINK_HEADER_REL, dummy_document_loader, parse_link_header)
from jsonldcore.errors import (
    JsonLdError, CompactionError, ContextError, ExpansionError, FlattenError,
    FrameError, InvalidInputError, NormalizeError, RdfConversionError)
from jsonldcore.expansion import Expander
from jsonldcore.formats import NQUADS, NQUADS_LEGACY, default_registry
from jsonldcore.framing import Framer, get_embed_flag
from jsonldcore.model import (
    RDFDataset, arrayify, _is_array, _is_object, _is_string)
from jsonldcore.namer import UniqueNamer
from jsonldcore.node_map import create_node_map, flatten as flatten_expanded
from jsonldcore.nquads import parse_nquads

__all__ = [
    '__copyright__', '__license__', '__version__',
    'compact', 'expand', 'flatten', 'frame', 'from_rdf', 'to_rdf',
    'normalize', 'process_context', 'set_document_loader',
    'get_document_loader', 'parse_link_header', 'dummy_document_loader',
    'requests_document_loader', 'aiohttp_document_loader',
    'JsonLdProcessor', 'JsonLdError', 'LINK_HEADER_REL', 'MAX_CONTEXT_URLS'
]

logger = logging.getLogger(__name__)

OUTPUT_FORMS = ('expanded', 'compacted', 'flattened')


def compact(input_, ctx, options=None):
    """
    Performs JSON-LD compaction.

    :param input_: input the JSON-LD input to compact.
    :param ctx: the JSON-LD context to compact with.
    :param [options]: the options to use.
      [base] the base IRI to use.
      [compactArrays] True to compact arrays to single values when
        appropriate, False not to (default: True).
      [graph] True to always output a top-level graph (default: False).
      [expandContext] a context to expand with.
      [skipExpansion] True to assume the input is expanded (default: False).
      [activeCtx] True to also return the active context used.
      [documentLoader(url)] the document loader
        (default: _default_document_loader).

    :return: the compacted JSON-LD output.
    """
    return JsonLdProcessor().compact(input_, ctx, options)


def expand(input_, options=None, on_key_dropped=None):
    """
    Performs JSON-LD expansion.

    :param input_: the JSON-LD input to expand.
    :param [options]: the options to use.
      [base] the base IRI to use.
      [expandContext] a context to expand with.
      [keepFreeFloatingNodes] True to keep free-floating nodes (default:
        False).
      [strict] True to raise on keys that would be dropped (default: False).
      [droppedKeys] a set that collects the keys that were dropped.
      [documentLoader(url)] the document loader
        (default: _default_document_loader).
    :param [on_key_dropped(key)]: called with every key dropped during
      expansion.

    :return: the expanded JSON-LD output.
    """
    return JsonLdProcessor().expand(input_, options, on_key_dropped)


def flatten(input_, ctx=None, options=None):
    """
    Performs JSON-LD flattening.

    :param input_: the JSON-LD input to flatten.
    :param ctx: the JSON-LD context to compact with (default: None).
    :param [options]: the options to use.
      [base] the base IRI to use.
      [expandContext] a context to expand with.
      [documentLoader(url)] the document loader
        (default: _default_document_loader).

    :return: the flattened JSON-LD output.
    """
    return JsonLdProcessor().flatten(input_, ctx, options)


def frame(input_, frame, options=None):
    """
    Performs JSON-LD framing.

    :param input_: the JSON-LD input to frame.
    :param frame: the JSON-LD frame to use.
    :param [options]: the options to use.
      [base] the base IRI to use.
      [expandContext] a context to expand with.
      [embed] default @embed flag: '@always', '@once' or '@never'
        (default: '@once').
      [explicit] default @explicit flag (default: False).
      [requireAll] default @requireAll flag (default: True).
      [omitDefault] default @omitDefault flag (default: False).
      [omitGraph] True to leave out @graph for a single result (default:
        False).
      [pruneBlankNodeIdentifiers] True to remove blank node identifiers
        that are used only once (default: True).
      [documentLoader(url)] the document loader
        (default: _default_document_loader).

    :return: the framed JSON-LD output.
    """
    return JsonLdProcessor().frame(input_, frame, options)


def normalize(input_, options=None):
    """
    Performs RDF dataset normalization on the given input. The input is
    JSON-LD unless the 'inputFormat' option is used. The output is an RDF
    dataset unless the 'format' option is used.

    :param input_: the input to normalize as JSON-LD or as a format specified
      by the 'inputFormat' option.
    :param [options]: the options to use.
      [algorithm] the algorithm to use: `URDNA2015` or `URGNA2012`
        (default: `URDNA2015`).
      [maxPermutations] the permutation limit (default: 10000).
      [base] the base IRI to use.
      [inputFormat] the format if input is not JSON-LD:
        'application/n-quads' for N-Quads.
      [format] the format if output is a string:
        'application/n-quads' for N-Quads.
      [documentLoader(url)] the document loader
        (default: _default_document_loader).

    :return: the normalized output.
    """
    return JsonLdProcessor().normalize(input_, options)


def from_rdf(input_, options=None):
    """
    Converts an RDF dataset to JSON-LD.

    :param input_: a serialized string of RDF in a format specified
      by the format option or an RDF dataset to convert.
    :param [options]: the options to use:
      [format] the format if input is a string:
        'application/n-quads' for N-Quads (default: 'application/n-quads').
      [parser(input)] a parser to use instead of the format's.
      [useRdfType] True to use rdf:type, False to use @type (default: False).
      [useNativeTypes] True to convert XSD types into native types
        (boolean, integer, double), False not to (default: True).
      [outputForm] 'expanded', 'compacted' or 'flattened' (default:
        'expanded').

    :return: the JSON-LD output.
    """
    return JsonLdProcessor().from_rdf(input_, options)


def to_rdf(input_, options=None):
    """
    Outputs the RDF dataset found in the given JSON-LD object.

    :param input_: the JSON-LD input.
    :param [options]: the options to use.
      [base] the base IRI to use.
      [format] the format to use to output a string:
        'application/n-quads' for N-Quads, 'text/turtle' for Turtle.
      [produceGeneralizedRdf] true to output generalized RDF, false
        to produce only standard RDF (default: false).
      [useNamespaces] True to keep the input context's prefixes as dataset
        namespaces (default: False).
      [callback(dataset)] called with the RDF dataset before any
        serialization, its return value is returned instead.
      [documentLoader(url)] the document loader
        (default: _default_document_loader).

    :return: the resulting RDF dataset (or a serialization of it).
    """
    return JsonLdProcessor().to_rdf(input_, options)


def process_context(active_ctx, local_ctx, options=None):
    """
    Processes a local context, retrieving any URLs as necessary, and
    returns a new active context.

    :param active_ctx: the current ActiveContext, None for an initial one.
    :param local_ctx: the local context to process.
    :param [options]: the options to use.
      [base] the base IRI to use.
      [documentLoader(url)] the document loader
        (default: _default_document_loader).

    :return: the new ActiveContext.
    """
    return JsonLdProcessor().process_context(active_ctx, local_ctx, options)


def set_document_loader(load_document):
    """
    Sets the default JSON-LD document loader.

    :param load_document(url): the document loader to use.
    """
    global _default_document_loader
    _default_document_loader = load_document


def get_document_loader():
    """
    Gets the default JSON-LD document loader.

    :return: the default document loader.
    """
    return _default_document_loader


def requests_document_loader(**kwargs):
    from jsonldcore.documentloader import requests as loader_mod

    return loader_mod.requests_document_loader(**kwargs)


def aiohttp_document_loader(**kwargs):
    from jsonldcore.documentloader import aiohttp as loader_mod

    return loader_mod.aiohttp_document_loader(**kwargs)


def _wrap(error_class, message, cause):
    """
    Returns the error an operation raises for a failed step: the cause
    itself if it already is the operation's error, otherwise a new one
    chained to it.
    """
    if isinstance(cause, error_class):
        return cause
    return error_class(
        message, code=getattr(cause, 'code', None), cause=cause)


# The default JSON-LD document loader.
try:
    _default_document_loader = requests_document_loader()
except ImportError:
    try:
        _default_document_loader = aiohttp_document_loader()
    except ImportError:
        _default_document_loader = dummy_document_loader()


class JsonLdProcessor(object):
    """
    A JSON-LD processor.
    """

    def __init__(self, formats=None):
        """
        Initialize the JSON-LD processor.

        :param [formats]: the FormatRegistry used for RDF parsing and
          serialization, a new default registry if not given.
        """
        self.formats = formats if formats is not None else default_registry()

    def compact(self, input_, ctx, options=None):
        """
        Performs JSON-LD compaction.

        :param input_: the JSON-LD input to compact.
        :param ctx: the context to compact with.
        :param options: the options to use, see :func:`compact`.

        :return: the compacted JSON-LD output, or a dict with 'compacted' and
          'activeCtx' when the activeCtx option is set.
        """
        if ctx is None:
            raise CompactionError(
                'The compaction context must not be null.',
                code='invalid local context')

        # nothing to compact
        if input_ is None:
            return None

        # set default options
        options = options.copy() if options else {}
        options.setdefault('base', input_ if _is_string(input_) else '')
        options.setdefault('compactArrays', True)
        options.setdefault('graph', False)
        options.setdefault('skipExpansion', False)
        options.setdefault('activeCtx', False)
        options.setdefault('documentLoader', _default_document_loader)

        resolver = ContextResolver(options['documentLoader'])

        if options['skipExpansion']:
            expanded = copy.deepcopy(input_)
        else:
            try:
                expanded = self._expand(input_, options, resolver)
            except Exception as cause:
                raise _wrap(
                    CompactionError,
                    'Could not expand input before compaction.', cause)

        try:
            compacted, active_ctx = self._compact(
                expanded, ctx, options, resolver)
        except Exception as cause:
            raise _wrap(CompactionError, 'Could not compact input.', cause)

        if options['activeCtx']:
            return {'compacted': compacted, 'activeCtx': active_ctx}
        return compacted

    def expand(self, input_, options=None, on_key_dropped=None):
        """
        Performs JSON-LD expansion.

        :param input_: the JSON-LD input to expand.
        :param options: the options to use, see :func:`expand`.
        :param on_key_dropped: called with every key dropped during
          expansion.

        :return: the expanded JSON-LD output.
        """
        # set default options
        options = options.copy() if options else {}
        options.setdefault('isFrame', False)
        options.setdefault('keepFreeFloatingNodes', False)
        options.setdefault('strict', False)
        options.setdefault('documentLoader', _default_document_loader)
        if on_key_dropped is not None:
            options['onKeyDropped'] = on_key_dropped

        try:
            return self._expand(
                input_, options, ContextResolver(options['documentLoader']))
        except Exception as cause:
            raise _wrap(ExpansionError, 'Could not expand input.', cause)

    def flatten(self, input_, ctx=None, options=None):
        """
        Performs JSON-LD flattening.

        :param input_: the JSON-LD input to flatten.
        :param ctx: the JSON-LD context to compact with (default: None).
        :param options: the options to use, see :func:`flatten`.

        :return: the flattened JSON-LD output.
        """
        options = options.copy() if options else {}
        options.setdefault('base', input_ if _is_string(input_) else '')
        options.setdefault('compactArrays', True)
        options.setdefault('documentLoader', _default_document_loader)

        resolver = ContextResolver(options['documentLoader'])

        try:
            expanded = self._expand(input_, options, resolver)
        except Exception as cause:
            raise _wrap(
                FlattenError, 'Could not expand input before flattening.',
                cause)

        try:
            flattened = flatten_expanded(expanded)
        except Exception as cause:
            raise _wrap(FlattenError, 'Could not flatten input.', cause)

        if ctx is None:
            return flattened

        # compact result (force @graph option to true)
        options['graph'] = True
        try:
            compacted, _ = self._compact(flattened, ctx, options, resolver)
        except Exception as cause:
            raise _wrap(
                FlattenError, 'Could not compact flattened output.', cause)
        return compacted

    def frame(self, input_, frame, options=None):
        """
        Performs JSON-LD framing.

        :param input_: the JSON-LD object to frame.
        :param frame: the JSON-LD frame to use.
        :param options: the options to use, see :func:`frame`.

        :return: the framed JSON-LD output.
        """
        # set default options
        options = options.copy() if options else {}
        options.setdefault('base', input_ if _is_string(input_) else '')
        options.setdefault('compactArrays', True)
        options.setdefault('embed', '@once')
        options.setdefault('explicit', False)
        options.setdefault('requireAll', True)
        options.setdefault('omitDefault', False)
        options.setdefault('omitGraph', False)
        options.setdefault('pruneBlankNodeIdentifiers', True)
        options.setdefault('documentLoader', _default_document_loader)
        options['embed'] = get_embed_flag(options['embed'])

        resolver = ContextResolver(options['documentLoader'])

        try:
            remote_frame = self._load_document(frame, options)
        except Exception as cause:
            raise _wrap(FrameError, 'Could not load frame.', cause)

        frame = copy.deepcopy(remote_frame['document'])
        if not _is_object(frame):
            raise FrameError(
                'Invalid JSON-LD syntax; a JSON-LD frame must be a single '
                'object.', details={'frame': frame}, code='invalid frame')

        # preserve frame context
        ctx = frame.get('@context', {})
        if remote_frame['contextUrl'] is not None:
            ctx = arrayify(ctx) if ctx else []
            ctx.append(remote_frame['contextUrl'])
            frame['@context'] = ctx

        try:
            expanded = self._expand(input_, options, resolver)
        except Exception as cause:
            raise _wrap(
                FrameError, 'Could not expand input before framing.', cause)

        try:
            opts = dict(options, isFrame=True, keepFreeFloatingNodes=True)
            expanded_frame = self._expand(frame, opts, resolver)
        except Exception as cause:
            raise _wrap(
                FrameError, 'Could not expand frame before framing.', cause)

        framer = Framer(options)
        try:
            framed = framer.frame(
                expanded, expanded_frame, merged='@graph' not in frame)
        except Exception as cause:
            raise _wrap(FrameError, 'Could not frame input.', cause)

        try:
            opts = dict(options, graph=not options['omitGraph'])
            compacted, active_ctx = self._compact(framed, ctx, opts, resolver)
        except Exception as cause:
            raise _wrap(FrameError, 'Could not compact framed output.', cause)

        # remove @preserve from results, leaving the output context alone
        output_ctx = compacted.pop('@context', None)
        compacted = remove_preserve(
            active_ctx, compacted, options['compactArrays'],
            framer.bnodes_to_clear)
        if output_ctx is None:
            return compacted
        rval = {'@context': output_ctx}
        rval.update(compacted)
        return rval

    def normalize(self, input_, options=None):
        """
        Performs RDF dataset normalization on the given input.

        :param input_: the JSON-LD input (or RDF text with 'inputFormat').
        :param options: the options to use, see :func:`normalize`.

        :return: the normalized output.
        """
        # set default options
        options = options.copy() if options else {}
        options.setdefault('algorithm', 'URDNA2015')
        options.setdefault('maxPermutations', DEFAULT_MAX_PERMUTATIONS)
        options.setdefault('base', input_ if _is_string(input_) else '')
        options.setdefault('documentLoader', _default_document_loader)

        if options['algorithm'] not in ALGORITHMS:
            raise NormalizeError(
                'Unsupported normalization algorithm.',
                details={'algorithm': options['algorithm']},
                code='unsupported algorithm')

        # unknown formats fail before any work is done
        parser = None
        if 'inputFormat' in options:
            parser = self.formats.parser(options['inputFormat'])
        serializer = None
        if options.get('format') not in (None, NQUADS, NQUADS_LEGACY):
            serializer = self.formats.serializer(options['format'])

        try:
            if parser is not None:
                dataset = parser(input_)
            else:
                opts = dict(options, produceGeneralizedRdf=False)
                dataset = self._to_rdf(
                    input_, opts, ContextResolver(options['documentLoader']))
        except Exception as cause:
            raise _wrap(
                NormalizeError,
                'Could not convert input to RDF dataset before '
                'normalization.', cause)

        algorithm = ALGORITHMS[options['algorithm']](
            options['maxPermutations'])
        try:
            normalized = algorithm.main(dataset)
        except Exception as cause:
            raise _wrap(NormalizeError, 'Could not normalize input.', cause)

        if serializer is not None:
            return serializer(parse_nquads(normalized))
        if 'format' in options:
            return normalized
        return parse_nquads(normalized)

    def from_rdf(self, dataset, options=None):
        """
        Converts an RDF dataset to JSON-LD.

        :param dataset: a serialized string of RDF in a format specified by
          the format option or an RDF dataset to convert.
        :param options: the options to use, see :func:`from_rdf`.

        :return: the JSON-LD output.
        """
        # set default options
        options = options.copy() if options else {}
        options.setdefault('useRdfType', False)
        options.setdefault('useNativeTypes', True)
        options.setdefault('outputForm', 'expanded')
        options.setdefault('documentLoader', _default_document_loader)

        if options['outputForm'] not in OUTPUT_FORMS:
            raise InvalidInputError(
                'Unknown output form.',
                details={'outputForm': options['outputForm']},
                code='invalid output form')

        if 'format' not in options and _is_string(dataset):
            options['format'] = NQUADS

        parser = options.get('parser')
        if parser is None and 'format' in options:
            parser = self.formats.parser(options['format'])

        try:
            if parser is not None:
                dataset = parser(dataset)
            expanded = rdf.from_rdf(
                dataset, options['useRdfType'], options['useNativeTypes'])
        except Exception as cause:
            raise _wrap(
                RdfConversionError, 'Could not convert RDF to JSON-LD.',
                cause)

        if options['outputForm'] == 'expanded':
            return expanded

        ctx = dataset.get_context() if isinstance(dataset, RDFDataset) else {}
        opts = {'documentLoader': options['documentLoader']}
        try:
            if options['outputForm'] == 'flattened':
                return self.flatten(expanded, ctx, opts)
            opts['skipExpansion'] = True
            return self.compact(expanded, ctx, opts)
        except JsonLdError as cause:
            raise _wrap(
                RdfConversionError, 'Could not compact converted RDF.', cause)

    def to_rdf(self, input_, options=None):
        """
        Outputs the RDF dataset found in the given JSON-LD object.

        :param input_: the JSON-LD input.
        :param options: the options to use, see :func:`to_rdf`.

        :return: the resulting RDF dataset (or a serialization of it).
        """
        # set default options
        options = options.copy() if options else {}
        options.setdefault('base', input_ if _is_string(input_) else '')
        options.setdefault('produceGeneralizedRdf', False)
        options.setdefault('documentLoader', _default_document_loader)

        serializer = None
        if 'format' in options:
            serializer = self.formats.serializer(options['format'])

        try:
            dataset = self._to_rdf(
                input_, options, ContextResolver(options['documentLoader']))
        except Exception as cause:
            raise _wrap(
                RdfConversionError,
                'Could not expand input before serialization to RDF.', cause)

        # a callback takes the dataset in place of any serialization
        if options.get('callback') is not None:
            return options['callback'](dataset)
        if serializer is None:
            return dataset
        return serializer(dataset)

    def process_context(self, active_ctx, local_ctx, options=None):
        """
        Processes a local context, retrieving any URLs as necessary, and
        returns a new active context.

        :param active_ctx: the current active context, None for an initial
          one.
        :param local_ctx: the local context to process.
        :param options: the options to use, see :func:`process_context`.

        :return: the new active context.
        """
        options = options.copy() if options else {}
        options.setdefault('base', '')
        options.setdefault('documentLoader', _default_document_loader)

        if active_ctx is None or local_ctx is None:
            active_ctx = self._initial_context(options)
        if local_ctx is None:
            return active_ctx

        try:
            return self._process_context(
                active_ctx, local_ctx, options,
                ContextResolver(options['documentLoader']))
        except Exception as cause:
            raise _wrap(
                ContextError, 'Could not process JSON-LD context.', cause)

    def register_rdf_parser(self, content_type, parser):
        """
        Registers a processor-specific RDF parser by content-type.

        :param content_type: the content-type for the parser.
        :param parser(input): the parser function (takes a string as
                 a parameter and returns an RDF dataset).
        """
        self.formats.register_parser(content_type, parser)

    def unregister_rdf_parser(self, content_type):
        """
        Unregisters a process-specific RDF parser by content-type.
        """
        self.formats.unregister_parser(content_type)

    def register_rdf_serializer(self, content_type, serializer):
        """
        Registers a processor-specific RDF serializer by content-type.

        :param content_type: the content-type for the serializer.
        :param serializer(dataset): the serializer function (takes an RDF
                 dataset and returns a string).
        """
        self.formats.register_serializer(content_type, serializer)

    def unregister_rdf_serializer(self, content_type):
        self.formats.unregister_serializer(content_type)

    def _initial_context(self, options):
        return ActiveContext(base=options.get('base') or '')

    def _load_document(self, input_, options):
        """
        Dereferences a string input as a URL, otherwise returns the input as
        a RemoteDocument.
        """
        if not _is_string(input_):
            return {
                'contextUrl': None,
                'documentUrl': None,
                'document': input_
            }

        logger.debug('Loading document %s', input_)
        try:
            remote_doc = dict(options['documentLoader'](input_))
            if remote_doc.get('document') is None:
                raise JsonLdError(
                    'No remote document found at the given URL.',
                    'jsonld.NullRemoteDocument')
            if _is_string(remote_doc['document']):
                remote_doc['document'] = json.loads(remote_doc['document'])
        except Exception as cause:
            raise JsonLdError(
                'Could not retrieve a JSON-LD document from the URL.',
                'jsonld.LoadDocumentError', {'url': input_},
                code='loading document failed', cause=cause)
        remote_doc.setdefault('contextUrl', None)
        remote_doc.setdefault('documentUrl', input_)
        return remote_doc

    def _expand(self, input_, options, resolver):
        """
        Expands a document with remote contexts resolved by the operation's
        resolver. The options must already hold their defaults.
        """
        remote_doc = self._load_document(input_, options)
        options.setdefault('base', remote_doc['documentUrl'] or '')

        document = copy.deepcopy(remote_doc['document'])
        resolver.resolve(document, options['base'])

        active_ctx = self._initial_context(options)

        # process optional expandContext
        if options.get('expandContext') is not None:
            active_ctx = self._process_context(
                active_ctx, options['expandContext'], options, resolver)

        # process remote context from HTTP Link Header
        if remote_doc['contextUrl'] is not None:
            active_ctx = self._process_context(
                active_ctx, remote_doc['contextUrl'], options, resolver)

        return Expander(options).expand_document(active_ctx, document)

    def _process_context(self, active_ctx, local_ctx, options, resolver):
        local_ctx = copy.deepcopy(local_ctx)
        if _is_object(local_ctx) and '@context' in local_ctx:
            local_ctx = local_ctx['@context']
        local_ctx = resolver.resolve_context(local_ctx, options['base'])
        return ctx_mod.parse(active_ctx, local_ctx)

    def _compact(self, expanded, ctx, options, resolver):
        """
        Compacts expanded input and adds the output context.

        :return: the compacted output and the active context used.
        """
        active_ctx = self._process_context(
            self._initial_context(options), ctx, options, resolver)

        compacted = Compactor(options).compact(active_ctx, None, expanded)

        if (options['compactArrays'] and not options.get('graph') and
                _is_array(compacted)):
            # simplify to a single item
            if len(compacted) == 1:
                compacted = compacted[0]
            # simplify to an empty object
            elif len(compacted) == 0:
                compacted = {}
        # always use an array if graph options is on
        elif options.get('graph'):
            compacted = arrayify(compacted)

        # build output context without empty contexts
        if _is_object(ctx) and '@context' in ctx:
            ctx = ctx['@context']
        ctx = [c for c in arrayify(copy.deepcopy(ctx))
               if not _is_object(c) or len(c) > 0]
        has_context = len(ctx) > 0
        if len(ctx) == 1:
            ctx = ctx[0]

        # add context and/or @graph
        if _is_array(compacted):
            rval = {}
            if has_context:
                rval['@context'] = ctx
            rval[compact_iri(active_ctx, '@graph')] = compacted
            compacted = rval
        elif _is_object(compacted) and has_context:
            # @context comes first
            rval = {'@context': ctx}
            rval.update(compacted)
            compacted = rval

        return compacted, active_ctx

    def _to_rdf(self, input_, options, resolver):
        expanded = self._expand(input_, options, resolver)

        namer = UniqueNamer('_:b')
        node_map = {'@default': {}}
        create_node_map(expanded, node_map, '@default', namer)
        dataset = rdf.node_map_to_rdf(
            node_map, namer, options['produceGeneralizedRdf'])

        if options.get('useNamespaces'):
            for element in arrayify(input_):
                if _is_object(element) and '@context' in element:
                    dataset.parse_context(element['@context'])
        return dataset
