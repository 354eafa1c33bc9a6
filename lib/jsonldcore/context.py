"""
Active contexts and the term algebra built on them.

An :class:`ActiveContext` is produced by :func:`parse` from a parent context
and a local context. It is never changed once it has been handed out: every
parse step clones its parent first, and the only state set afterwards is the
inverse context, which is derived from the mappings on first use.

.. module:: jsonldcore.context
  :synopsis: JSON-LD context processing, IRI expansion and compaction
"""

import copy
import json
import logging
import re
import threading
from collections import deque
from functools import cmp_to_key

from jsonldcore.errors import ContextError
from jsonldcore.iri import has_scheme, relativize, resolve
from jsonldcore.model import (
    arrayify, compare_shortest_least, _is_absolute_iri, _is_array,
    _is_bool, _is_keyword, _is_list, _is_object, _is_string,
    _is_subject_reference, _is_value)

__all__ = [
    'ActiveContext', 'ActiveContextCache', 'parse', 'create_term_definition',
    'expand_iri', 'compact_iri', 'select_term', 'lang_dir'
]

logger = logging.getLogger(__name__)

# terms whose IRI ends in a gen-delim may act as prefixes
_GEN_DELIM_END = re.compile(r'.*[:/?#\[\]@]$')

CONTEXT_KEYWORDS = frozenset(
    ['@base', '@direction', '@language', '@version', '@vocab'])
TERM_DEFINITION_KEYS = frozenset([
    '@container', '@context', '@direction', '@id', '@language', '@nest',
    '@prefix', '@reverse', '@type'])
VALID_CONTAINERS = frozenset(
    ['@id', '@index', '@language', '@list', '@set', '@type'])
DIRECTIONS = ('ltr', 'rtl')


class ActiveContext(object):
    """
    The resolved context in force at a point in a document.

    Term definitions live in ``mappings`` (term -> definition dict, or None
    for a term that was explicitly nulled). A definition holds '@id',
    'reverse' and optionally '@type', '@container' (a list), '@language',
    '@direction', '@context', '@nest' and '_prefix'.
    """

    def __init__(self, base=None, original_base=None, processing_mode=None):
        self.base = base
        self.original_base = base if original_base is None else original_base
        self.vocab = None
        self.language = None
        self.direction = None
        self.processing_mode = processing_mode
        self.mappings = {}
        self.parent = None
        self._inverse = None

    def clone(self):
        """
        Creates a child of this context holding a copy of its state.
        """
        child = ActiveContext(
            self.base, self.original_base, self.processing_mode)
        child.vocab = self.vocab
        child.language = self.language
        child.direction = self.direction
        child.mappings = copy.deepcopy(self.mappings)
        child.parent = self
        return child

    def get_mapping(self, term):
        if term is None:
            return None
        return self.mappings.get(term)

    def get_context_value(self, key, type_=None):
        """
        Gets the value for the given active context key and type, None if none
        is set. Default language and direction apply to terms without their
        own.

        :param key: the context key (a term).
        :param [type_]: the entry to get (eg: '@id', '@type'), None for the
          entire definition.

        :return: the value.
        """
        rval = None
        if key is None:
            return rval

        if type_ == '@language':
            rval = self.language
        elif type_ == '@direction':
            rval = self.direction

        if key in self.mappings:
            entry = self.mappings[key]
            if entry is None:
                return None
            if type_ is None:
                rval = entry
            elif type_ in entry:
                rval = entry[type_]

        return rval

    def get_container(self, term):
        return self.get_context_value(term, '@container') or []

    @property
    def inverse(self):
        """
        The inverse context, built on first use.
        """
        if self._inverse is None:
            self._inverse = _create_inverse(self)
        return self._inverse

    def fingerprint(self):
        """
        A string that is equal for two contexts with equal state.
        """
        return json.dumps({
            'base': self.base,
            'originalBase': self.original_base,
            'vocab': self.vocab,
            'language': self.language,
            'direction': self.direction,
            'processingMode': self.processing_mode,
            'mappings': self.mappings
        }, sort_keys=True, default=repr)

    def __repr__(self):
        return '<ActiveContext base=%r vocab=%r terms=%d>' % (
            self.base, self.vocab, len(self.mappings))


class ActiveContextCache(object):
    """
    An ActiveContextCache caches active contexts so they can be reused without
    the overhead of recomputing them.
    """

    def __init__(self, size=100):
        self.order = deque()
        self.cache = {}
        self.size = size
        self._lock = threading.Lock()

    def get(self, active_ctx, local_ctx):
        key1 = active_ctx.fingerprint()
        key2 = json.dumps(local_ctx, sort_keys=True, default=repr)
        with self._lock:
            return self.cache.get(key1, {}).get(key2)

    def set(self, active_ctx, local_ctx, result):
        key1 = active_ctx.fingerprint()
        key2 = json.dumps(local_ctx, sort_keys=True, default=repr)
        with self._lock:
            if key2 in self.cache.get(key1, {}):
                self.cache[key1][key2] = result
                return
            if len(self.order) == self.size:
                entry = self.order.popleft()
                del self.cache[entry[0]][entry[1]]
                if not self.cache[entry[0]]:
                    del self.cache[entry[0]]
            self.order.append((key1, key2))
            self.cache.setdefault(key1, {})[key2] = result

    def clear(self):
        with self._lock:
            self.order.clear()
            self.cache.clear()


# shared in-memory cache of parsed contexts
_cache = ActiveContextCache()


def parse(active_ctx, local_ctx):
    """
    Processes a local context and returns a new active context.

    :param active_ctx: the current active context.
    :param local_ctx: the local context to process: None, an object, or an
      array of those. Remote references must already be resolved.

    :return: the new active context.
    """
    if _is_object(local_ctx) and _is_array(local_ctx.get('@context')):
        local_ctx = local_ctx['@context']
    ctxs = arrayify(local_ctx)

    if len(ctxs) == 0:
        return active_ctx.clone()

    rval = active_ctx
    for ctx in ctxs:
        # reset to initial context
        if ctx is None:
            rval = ActiveContext(
                base=rval.original_base,
                processing_mode=rval.processing_mode)
            continue

        if _is_object(ctx) and '@context' in ctx:
            ctx = ctx['@context']

        if _is_array(ctx):
            rval = parse(rval, ctx)
            continue

        if _is_string(ctx):
            raise ContextError(
                'Invalid JSON-LD syntax; remote context reference was not '
                'resolved before context processing.',
                details={'url': ctx}, code='invalid remote context')

        if not _is_object(ctx):
            raise ContextError(
                'Invalid JSON-LD syntax; @context must be an object.',
                details={'context': ctx}, code='invalid local context')

        cached = _cache.get(rval, ctx)
        if cached is not None:
            rval = cached
            continue

        parent = rval
        rval = parent.clone()
        _apply_local_context(rval, parent, ctx)
        _cache.set(parent, ctx, rval)

    return rval


def _apply_local_context(rval, parent, ctx):
    defined = {}

    if '@version' in ctx:
        if ctx['@version'] != 1.1:
            raise ContextError(
                'Unsupported JSON-LD version: ' + str(ctx['@version']),
                details={'context': ctx}, code='invalid @version value')
        rval.processing_mode = 'json-ld-1.1'

    if '@base' in ctx:
        base = ctx['@base']
        if base is not None and not _is_string(base):
            raise ContextError(
                'Invalid JSON-LD syntax; the value of "@base" in a '
                '@context must be a string or null.',
                details={'context': ctx}, code='invalid base IRI')
        if base is not None and not has_scheme(base):
            base = resolve(base, parent.base)
        rval.base = base

    if '@vocab' in ctx:
        value = ctx['@vocab']
        if value is None:
            rval.vocab = None
        elif not _is_string(value) or not _is_absolute_iri(value):
            raise ContextError(
                'Invalid JSON-LD syntax; the value of "@vocab" in a '
                '@context must be an absolute IRI or null.',
                details={'context': ctx}, code='invalid vocab mapping')
        else:
            rval.vocab = value

    if '@language' in ctx:
        value = ctx['@language']
        if value is not None and not _is_string(value):
            raise ContextError(
                'Invalid JSON-LD syntax; the value of "@language" in '
                'a @context must be a string or null.',
                details={'context': ctx}, code='invalid default language')
        rval.language = value.lower() if value is not None else None

    if '@direction' in ctx:
        value = ctx['@direction']
        if value is not None and value not in DIRECTIONS:
            raise ContextError(
                'Invalid JSON-LD syntax; the value of "@direction" in '
                'a @context must be "ltr", "rtl" or null.',
                details={'context': ctx}, code='invalid base direction')
        rval.direction = value

    for key in ctx:
        if key not in CONTEXT_KEYWORDS:
            create_term_definition(rval, ctx, key, defined)


def create_term_definition(active_ctx, local_ctx, term, defined):
    """
    Creates a term definition during context processing.

    :param active_ctx: the active context being built.
    :param local_ctx: the local context being processed.
    :param term: the key in the local context to define the mapping for.
    :param defined: a map of defining/defined keys to detect cycles
      and prevent double definitions.
    """
    if term in defined:
        if defined[term]:
            return
        raise ContextError(
            'Cyclical context definition detected.',
            details={'context': local_ctx, 'term': term},
            code='cyclic IRI mapping')

    defined[term] = False

    if _is_keyword(term):
        raise ContextError(
            'Invalid JSON-LD syntax; keywords cannot be overridden.',
            details={'context': local_ctx, 'term': term},
            code='keyword redefinition')

    if term == '':
        raise ContextError(
            'Invalid JSON-LD syntax; a term cannot be an empty string.',
            details={'context': local_ctx},
            code='invalid term definition')

    if term.startswith('@'):
        logger.debug('Ignoring keyword-like term %r', term)
        defined[term] = True
        return

    active_ctx.mappings.pop(term, None)
    value = local_ctx[term]

    # explicitly nulled term
    if (value is None or
            (_is_object(value) and '@id' in value and value['@id'] is None)):
        active_ctx.mappings[term] = None
        defined[term] = True
        return

    simple_term = _is_string(value)
    if simple_term:
        value = {'@id': value}

    if not _is_object(value):
        raise ContextError(
            'Invalid JSON-LD syntax; @context property values must be '
            'strings or objects.',
            details={'context': local_ctx, 'term': term},
            code='invalid term definition')

    mapping = active_ctx.mappings[term] = {'reverse': False}

    for key in value:
        if key not in TERM_DEFINITION_KEYS:
            logger.debug(
                'Dropping unsupported key %r in definition of term %r',
                key, term)

    has_colon = ':' in term

    if '@reverse' in value:
        if '@id' in value or '@nest' in value:
            raise ContextError(
                'Invalid JSON-LD syntax; an @reverse term definition must '
                'not contain @id or @nest.',
                details={'context': local_ctx, 'term': term},
                code='invalid reverse property')
        reverse = value['@reverse']
        if not _is_string(reverse):
            raise ContextError(
                'Invalid JSON-LD syntax; @context @reverse value must be '
                'a string.', details={'context': local_ctx, 'term': term},
                code='invalid IRI mapping')
        id_ = expand_iri(
            active_ctx, reverse, vocab=True, local_ctx=local_ctx,
            defined=defined)
        if not _is_absolute_iri(id_):
            raise ContextError(
                'Invalid JSON-LD syntax; @context @reverse value must be '
                'an absolute IRI or a blank node identifier.',
                details={'context': local_ctx, 'term': term},
                code='invalid IRI mapping')
        mapping['@id'] = id_
        mapping['reverse'] = True
    elif '@id' in value:
        id_ = value['@id']
        if not _is_string(id_):
            raise ContextError(
                'Invalid JSON-LD syntax; @context @id value must be a '
                'string.', details={'context': local_ctx, 'term': term},
                code='invalid IRI mapping')
        if id_ != term:
            id_ = expand_iri(
                active_ctx, id_, vocab=True, local_ctx=local_ctx,
                defined=defined)
            if not _is_absolute_iri(id_) and not _is_keyword(id_):
                raise ContextError(
                    'Invalid JSON-LD syntax; @context @id value must be '
                    'an absolute IRI, a blank node identifier, or a '
                    'keyword.', details={'context': local_ctx, 'term': term},
                    code='invalid IRI mapping')
            mapping['@id'] = id_
            mapping['_prefix'] = bool(
                not has_colon and _GEN_DELIM_END.match(id_) and
                (simple_term or active_ctx.processing_mode != 'json-ld-1.1'))

    if '@id' not in mapping:
        colon = term.find(':')
        if colon != -1:
            prefix = term[:colon]
            if prefix in local_ctx:
                create_term_definition(active_ctx, local_ctx, prefix, defined)
            if active_ctx.mappings.get(prefix) is not None:
                mapping['@id'] = (
                    active_ctx.mappings[prefix]['@id'] + term[colon + 1:])
            else:
                # term is an absolute IRI
                mapping['@id'] = term
        elif active_ctx.vocab is not None:
            mapping['@id'] = active_ctx.vocab + term
        else:
            raise ContextError(
                'Invalid JSON-LD syntax; @context terms must define '
                'an @id.', details={'context': local_ctx, 'term': term},
                code='invalid IRI mapping')

    defined[term] = True

    if '@type' in value:
        type_ = value['@type']
        if not _is_string(type_):
            raise ContextError(
                'Invalid JSON-LD syntax; @context @type value must be '
                'a string.', details={'context': local_ctx, 'term': term},
                code='invalid type mapping')
        if type_ not in ('@id', '@vocab'):
            type_ = expand_iri(
                active_ctx, type_, vocab=True, local_ctx=local_ctx,
                defined=defined)
            if not _is_absolute_iri(type_) or type_.startswith('_:'):
                raise ContextError(
                    'Invalid JSON-LD syntax; an @context @type value must '
                    'be an absolute IRI.',
                    details={'context': local_ctx, 'term': term},
                    code='invalid type mapping')
        mapping['@type'] = type_

    if '@container' in value:
        container = _validate_container(value['@container'], term)
        if container is not None:
            if mapping['reverse'] and [
                    c for c in container if c not in ('@index', '@set')]:
                raise ContextError(
                    'Invalid JSON-LD syntax; @context @container value for '
                    'an @reverse type definition must be @index or @set.',
                    details={'context': local_ctx, 'term': term},
                    code='invalid reverse property')
            mapping['@container'] = container

    if '@context' in value:
        mapping['@context'] = value['@context']

    if '@language' in value and '@type' not in value:
        language = value['@language']
        if not (language is None or _is_string(language)):
            raise ContextError(
                'Invalid JSON-LD syntax; @context @language value must be '
                'a string or null.',
                details={'context': local_ctx, 'term': term},
                code='invalid language mapping')
        mapping['@language'] = (
            language.lower() if language is not None else None)

    if '@direction' in value and '@type' not in value:
        direction = value['@direction']
        if direction is not None and direction not in DIRECTIONS:
            raise ContextError(
                'Invalid JSON-LD syntax; @context @direction value must be '
                '"ltr", "rtl" or null.',
                details={'context': local_ctx, 'term': term},
                code='invalid base direction')
        mapping['@direction'] = direction

    if '@prefix' in value:
        if has_colon:
            raise ContextError(
                'Invalid JSON-LD syntax; @context @prefix used on a compact '
                'IRI term.', details={'context': local_ctx, 'term': term},
                code='invalid term definition')
        if not _is_bool(value['@prefix']):
            raise ContextError(
                'Invalid JSON-LD syntax; @context value for @prefix must be '
                'boolean.', details={'context': local_ctx, 'term': term},
                code='invalid @prefix value')
        mapping['_prefix'] = value['@prefix']

    if '@nest' in value:
        nest = value['@nest']
        if not _is_string(nest) or (nest != '@nest' and nest.startswith('@')):
            raise ContextError(
                'Invalid JSON-LD syntax; @context @nest value must be '
                'a string which is not a keyword other than @nest.',
                details={'context': local_ctx, 'term': term},
                code='invalid @nest value')
        mapping['@nest'] = nest

    if mapping['@id'] in ('@context', '@preserve'):
        raise ContextError(
            'Invalid JSON-LD syntax; @context and @preserve cannot be '
            'aliased.', details={'context': local_ctx, 'term': term},
            code='invalid keyword alias')


def _validate_container(value, term):
    """
    Returns the container list for a term definition, or None when the
    combination is not supported and is dropped.
    """
    container = arrayify(value)
    valid = (
        len(container) > 0 and
        all(_is_string(c) and c in VALID_CONTAINERS for c in container))
    if valid and len(container) > 1:
        valid = (
            len(container) == 2 and '@set' in container and
            '@list' not in container and container[0] != container[1])
    if not valid:
        logger.debug(
            'Dropping unsupported @container %r of term %r', value, term)
        return None
    return list(container)


def expand_iri(
        active_ctx, value, base=False, vocab=False, local_ctx=None,
        defined=None):
    """
    Expands a string value to a full IRI. The string may be a term, a
    prefix, a relative IRI, or an absolute IRI. The associated absolute
    IRI will be returned.

    :param active_ctx: the current active context.
    :param value: the string value to expand.
    :param base: True to resolve IRIs against the base IRI, False not to.
    :param vocab: True to concatenate after @vocab, False not to.
    :param local_ctx: the local context being processed (only given if
      called during context processing).
    :param defined: a map for tracking cycles in context definitions (only
      given if called during context processing).

    :return: the expanded value.
    """
    if value is None or not _is_string(value) or _is_keyword(value):
        return value

    # define dependency if not defined
    if (local_ctx is not None and value in local_ctx and
            defined.get(value) is not True):
        create_term_definition(active_ctx, local_ctx, value, defined)

    if vocab and value in active_ctx.mappings:
        mapping = active_ctx.mappings[value]
        # value is explicitly ignored with None mapping
        if mapping is None:
            return None
        return mapping['@id']

    if ':' in value:
        prefix, suffix = value.split(':', 1)

        # blank nodes and hierarchical IRIs are already absolute
        if prefix == '_' or suffix.startswith('//'):
            return value

        if local_ctx is not None and prefix in local_ctx:
            create_term_definition(active_ctx, local_ctx, prefix, defined)

        mapping = active_ctx.mappings.get(prefix)
        if mapping:
            return mapping['@id'] + suffix

        return value

    if vocab and active_ctx.vocab is not None:
        return active_ctx.vocab + value

    if base:
        return resolve(value, active_ctx.base)

    return value


def lang_dir(language, direction):
    """
    Builds the inverse context key for a language/direction pair.
    """
    if direction is None:
        return language.lower() if language is not None else '@null'
    return (language or '').lower() + '_' + direction


def _create_inverse(active_ctx):
    inverse = {}

    default_language = active_ctx.language or '@none'
    if active_ctx.direction is not None:
        default_language = lang_dir(active_ctx.language, active_ctx.direction)

    # terms are visited shortest first, then lexicographically least, so the
    # first term stored for an entry is the preferred one
    for term, mapping in sorted(
            active_ctx.mappings.items(),
            key=cmp_to_key(lambda a, b: compare_shortest_least(a[0], b[0]))):
        if mapping is None:
            continue

        container = ''.join(sorted(mapping.get('@container', ['@none'])))
        container_map = inverse.setdefault(mapping['@id'], {})
        entry = container_map.setdefault(container, {
            '@language': {},
            '@type': {},
            '@any': {}
        })
        entry['@any'].setdefault('@none', term)

        if mapping['reverse']:
            entry['@type'].setdefault('@reverse', term)
        elif '@type' in mapping:
            entry['@type'].setdefault(mapping['@type'], term)
        elif '@language' in mapping and '@direction' in mapping:
            entry['@language'].setdefault(
                lang_dir(mapping['@language'], mapping['@direction']), term)
        elif '@language' in mapping:
            language = mapping['@language']
            entry['@language'].setdefault(
                language if language is not None else '@null', term)
        elif '@direction' in mapping:
            direction = mapping['@direction']
            entry['@language'].setdefault(
                '_' + direction if direction is not None else '@none', term)
        else:
            entry['@language'].setdefault(default_language, term)
            entry['@type'].setdefault('@none', term)
            entry['@language'].setdefault('@none', term)

    return inverse


def select_term(
        active_ctx, iri, value, containers, type_or_language,
        type_or_language_value):
    """
    Picks the preferred compaction term from the inverse context entry.

    :param active_ctx: the active context.
    :param iri: the IRI to pick the term for.
    :param value: the value to pick the term for.
    :param containers: the preferred containers.
    :param type_or_language: either '@type', '@language' or '@any'.
    :param type_or_language_value: the preferred value for '@type' or
      '@language'.

    :return: the preferred term.
    """
    if type_or_language_value is None:
        type_or_language_value = '@null'

    prefs = []

    # prefer @vocab over @id when the referenced IRI compacts to a term
    if (type_or_language_value in ('@id', '@reverse') and
            _is_subject_reference(value)):
        if type_or_language_value == '@reverse':
            prefs.append('@reverse')
        term = compact_iri(active_ctx, value['@id'], None, vocab=True)
        mapping = active_ctx.mappings.get(term)
        if term is not None and mapping and mapping['@id'] == value['@id']:
            prefs.extend(['@vocab', '@id'])
        else:
            prefs.extend(['@id', '@vocab'])
    else:
        prefs.append(type_or_language_value)
    prefs.append('@none')

    container_map = active_ctx.inverse[iri]
    for container in containers:
        if container not in container_map:
            continue
        type_or_language_value_map = container_map[container][type_or_language]
        for pref in prefs:
            if pref in type_or_language_value_map:
                return type_or_language_value_map[pref]
    return None


def _value_lang_dir(value):
    if '@direction' in value:
        return lang_dir(value.get('@language'), value['@direction'])
    return value['@language']


def compact_iri(active_ctx, iri, value=None, vocab=False, reverse=False):
    """
    Compacts an IRI or keyword into a term or compact IRI if it can be. If
    the IRI has an associated value it may be passed.

    :param active_ctx: the active context to use.
    :param iri: the IRI to compact.
    :param value: the value to check or None.
    :param vocab: True to compact using @vocab if available, False not to.
    :param reverse: True if a reverse property is being compacted, False if
      not.

    :return: the compacted term, compact IRI, keyword alias, or original IRI.
    """
    if iri is None:
        return iri

    inverse = active_ctx.inverse

    if _is_keyword(iri):
        alias = (inverse.get(iri, {}).get('@none', {})
                 .get('@type', {}).get('@none'))
        if alias:
            return alias
        vocab = True

    if vocab and iri in inverse:
        term = _select_for_value(active_ctx, iri, value, reverse)
        if term is not None:
            return term

    # no term match, use @vocab if available
    if vocab and active_ctx.vocab is not None:
        vocab_ = active_ctx.vocab
        if iri.startswith(vocab_) and iri != vocab_:
            suffix = iri[len(vocab_):]
            if suffix not in active_ctx.mappings:
                return suffix

    # no term or @vocab match, check for possible compact IRIs
    candidate = None
    for term, definition in active_ctx.mappings.items():
        # terms with colons cannot be prefixes
        if ':' in term:
            continue
        if (definition is None or definition['@id'] == iri or
                not iri.startswith(definition['@id'])):
            continue

        # usable if the term is a prefix and the compact IRI is not itself a
        # term, or it is a term for the same IRI and no value is compacted
        curie = term + ':' + iri[len(definition['@id']):]
        curie_mapping = active_ctx.mappings.get(curie)
        is_usable_curie = (
            (definition.get('_prefix') and curie not in active_ctx.mappings) or
            (value is None and curie_mapping is not None and
             curie_mapping.get('@id') == iri))

        if is_usable_curie and (
                candidate is None or
                compare_shortest_least(curie, candidate) < 0):
            candidate = curie

    if candidate is not None:
        return candidate

    if not vocab:
        return relativize(iri, active_ctx.base)

    return iri


def _select_for_value(active_ctx, iri, value, reverse):
    containers = []
    if _is_object(value) and '@index' in value:
        containers.extend(['@index', '@index@set'])

    if _is_object(value) and '@preserve' in value:
        value = value['@preserve'][0]

    if _is_object(value) and not _is_value(value) and not _is_list(value):
        containers.extend(['@id', '@id@set', '@type', '@set@type'])

    type_or_language = '@language'
    type_or_language_value = '@null'

    if reverse:
        type_or_language = '@type'
        type_or_language_value = '@reverse'
        containers.append('@set')
    elif _is_list(value):
        # @list containers cannot hold an @index
        if '@index' not in value:
            containers.append('@list')
        list_ = value['@list']
        if len(list_) == 0:
            # an empty list matches any @list term
            type_or_language = '@any'
            type_or_language_value = '@none'
        else:
            common_language = None
            common_type = None
            for item in list_:
                item_language = '@none'
                item_type = '@none'
                if _is_value(item):
                    if '@direction' in item or '@language' in item:
                        item_language = _value_lang_dir(item)
                    elif '@type' in item:
                        item_type = item['@type']
                    else:
                        item_language = '@null'
                else:
                    item_type = '@id'
                if common_language is None:
                    common_language = item_language
                elif item_language != common_language and _is_value(item):
                    common_language = '@none'
                if common_type is None:
                    common_type = item_type
                elif item_type != common_type:
                    common_type = '@none'
                if common_language == '@none' and common_type == '@none':
                    break
            common_language = common_language or '@none'
            common_type = common_type or '@none'
            if common_type != '@none':
                type_or_language = '@type'
                type_or_language_value = common_type
            else:
                type_or_language_value = common_language
    else:
        if _is_value(value):
            if (('@language' in value or '@direction' in value) and
                    '@index' not in value):
                containers.extend(['@language', '@language@set'])
                type_or_language_value = _value_lang_dir(value)
            elif '@language' in value or '@direction' in value:
                type_or_language_value = _value_lang_dir(value)
            elif '@type' in value:
                type_or_language = '@type'
                type_or_language_value = value['@type']
        else:
            type_or_language = '@type'
            type_or_language_value = '@id'
        containers.append('@set')

    containers.append('@none')

    # an index map can hold values without @index under @none
    if _is_object(value) and '@index' not in value:
        containers.extend(['@index', '@index@set'])

    # plain values can use a language map
    if _is_value(value) and len(value) == 1:
        containers.extend(['@language', '@language@set'])

    return select_term(
        active_ctx, iri, value, containers, type_or_language,
        type_or_language_value)
