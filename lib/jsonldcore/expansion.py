"""
The JSON-LD expansion algorithm.

.. module:: jsonldcore.expansion
  :synopsis: JSON-LD expansion
"""

import logging

from jsonldcore import context as ctx_mod
from jsonldcore.context import DIRECTIONS, expand_iri
from jsonldcore.errors import InvalidInputError
from jsonldcore.model import (
    Kind, kind_of, add_value, arrayify, get_values, _is_absolute_iri,
    _is_array, _is_empty_object, _is_keyword, _is_list, _is_object,
    _is_string, _is_value)

__all__ = ['Expander', 'FRAME_KEYWORDS']

logger = logging.getLogger(__name__)

# keywords that are only meaningful inside a frame
FRAME_KEYWORDS = frozenset(
    ['@default', '@embed', '@explicit', '@omitDefault', '@requireAll'])

# keywords that never become properties of a node or value object
_IGNORED_KEYWORDS = frozenset(
    ['@base', '@container', '@none', '@preserve', '@version', '@vocab'])

# keywords whose expanded value is never wrapped in an array
_SINGLE_VALUED = frozenset(
    ['@index', '@id', '@type', '@value', '@language', '@direction'])


class Expander(object):
    """
    Rewrites a document into expanded form.

    Options (camelCase, as accepted by the processor):
      [keepFreeFloatingNodes] True to keep free-floating nodes.
      [isFrame] True to allow frame-only keywords and patterns.
      [strict] True to fail on keys that cannot be expanded.
      [droppedKeys] a set that collects keys that were dropped.
      [onKeyDropped(key)] a callable notified of each dropped key.
    """

    def __init__(self, options=None):
        options = options or {}
        self.keep_free_floating_nodes = options.get(
            'keepFreeFloatingNodes', False)
        self.is_frame = options.get('isFrame', False)
        self.strict = options.get('strict', False)
        self.dropped_keys = options.get('droppedKeys')
        self.on_key_dropped = options.get('onKeyDropped')

    def expand_document(self, active_ctx, document):
        """
        Expands a whole document and normalizes the result to an array.

        :param active_ctx: the initial active context.
        :param document: the document (with remote contexts resolved).

        :return: the expanded array.
        """
        expanded = self.expand(active_ctx, None, document)

        # optimize away @graph with no other properties
        if (_is_object(expanded) and '@graph' in expanded and
                len(expanded) == 1):
            expanded = expanded['@graph']
        elif expanded is None:
            expanded = []

        return arrayify(expanded)

    def expand(self, active_ctx, active_property, element, inside_list=False):
        """
        Recursively expands an element using the given context. Any context in
        the element will be removed. All context URLs must have been retrieved
        before calling this method.

        :param active_ctx: the context to use.
        :param active_property: the property for the element, None for none.
        :param element: the element to expand.
        :param inside_list: True if the property is a list, False if not.

        :return: the expanded value.
        """
        kind = kind_of(element)

        if kind is Kind.NULL:
            return None

        is_frame = self.is_frame
        if active_property == '@default':
            # @default values are data, not patterns
            self.is_frame = False
        try:
            if kind is Kind.ARRAY:
                return self._expand_array(
                    active_ctx, active_property, element, inside_list)
            if kind is Kind.OBJECT:
                return self._expand_node(
                    active_ctx, active_property, element, inside_list)
            return self._expand_scalar(
                active_ctx, active_property, element, inside_list)
        finally:
            self.is_frame = is_frame

    def _expand_array(self, active_ctx, active_property, element, inside_list):
        rval = []
        container = active_ctx.get_container(active_property)
        inside_list = inside_list or '@list' in container
        for e in element:
            e = self.expand(active_ctx, active_property, e, inside_list)
            if inside_list and (_is_array(e) or _is_list(e)):
                raise InvalidInputError(
                    'Invalid JSON-LD syntax; lists of lists are not '
                    'permitted.', details={'property': active_property},
                    code='list of lists')
            if e is not None:
                if _is_array(e):
                    rval.extend(e)
                else:
                    rval.append(e)
        return rval

    def _expand_scalar(self, active_ctx, active_property, element,
                       inside_list):
        # drop free-floating scalars that are not in lists
        if not inside_list and (
                active_property is None or
                expand_iri(active_ctx, active_property, vocab=True) ==
                '@graph'):
            return None
        return self.expand_value(active_ctx, active_property, element)

    def _expand_node(self, active_ctx, active_property, element, inside_list):
        if '@context' in element:
            active_ctx = ctx_mod.parse(active_ctx, element['@context'])

        # apply contexts scoped to the types of the node
        for key, value in sorted(element.items()):
            if expand_iri(active_ctx, key, vocab=True) != '@type':
                continue
            for type_ in sorted(t for t in arrayify(value) if _is_string(t)):
                scoped = active_ctx.get_context_value(type_, '@context')
                if scoped is not None:
                    active_ctx = ctx_mod.parse(active_ctx, scoped)

        expanded_active_property = expand_iri(
            active_ctx, active_property, vocab=True)

        rval = {}
        self._expand_object(
            active_ctx, active_property, expanded_active_property, element,
            rval, inside_list)

        count = len(rval)

        if '@value' in rval:
            self._validate_value_object(rval)
            if rval['@value'] is None:
                rval = None
        elif '@type' in rval and not _is_array(rval['@type']):
            rval['@type'] = [rval['@type']]
        elif '@set' in rval or '@list' in rval:
            if count > 1 and not (count == 2 and '@index' in rval):
                raise InvalidInputError(
                    'Invalid JSON-LD syntax; if an element has the '
                    'property "@set" or "@list", then it can have at most '
                    'one other property, which is "@index".',
                    details={'element': rval},
                    code='invalid set or list object')
            if '@set' in rval:
                rval = rval['@set']
                count = len(rval)
        elif count == 1 and '@language' in rval:
            rval = None

        # drop certain top-level objects that do not occur in lists
        if (_is_object(rval) and not self.keep_free_floating_nodes and
                not inside_list and
                (active_property is None or
                 expanded_active_property == '@graph')):
            if (count == 0 or '@value' in rval or '@list' in rval or
                    (count == 1 and '@id' in rval)):
                rval = None

        return rval

    def _validate_value_object(self, rval):
        if '@id' in rval:
            raise InvalidInputError(
                'Invalid JSON-LD syntax; an element containing "@value" '
                'must not contain "@id".', details={'element': rval},
                code='invalid value object')
        if '@type' in rval and ('@language' in rval or '@direction' in rval):
            raise InvalidInputError(
                'Invalid JSON-LD syntax; an element containing '
                '"@value" may not contain both "@type" and "@language" or '
                '"@direction".', details={'element': rval},
                code='invalid value object')
        extra = [k for k in rval if k not in (
            '@value', '@type', '@index', '@language', '@direction')]
        if extra:
            raise InvalidInputError(
                'Invalid JSON-LD syntax; an element containing "@value" '
                'may only have an "@index" property and "@type" or '
                '"@language" and "@direction".',
                details={'element': rval, 'keys': extra},
                code='invalid value object')

        if rval['@value'] is None:
            return

        values = get_values(rval, '@value')
        types = get_values(rval, '@type')
        if '@language' in rval and not all(
                _is_string(v) or _is_empty_object(v) for v in values):
            raise InvalidInputError(
                'Invalid JSON-LD syntax; only strings may be '
                'language-tagged.', details={'element': rval},
                code='invalid language-tagged value')
        if not all(_is_empty_object(t) or (
                _is_string(t) and _is_absolute_iri(t) and
                not t.startswith('_:')) for t in types):
            raise InvalidInputError(
                'Invalid JSON-LD syntax; an element containing "@value" '
                'and "@type" must have an absolute IRI for the value '
                'of "@type".', details={'element': rval},
                code='invalid typed value')

    def _drop_key(self, key):
        logger.debug(
            'Dropping key %r, it does not expand to an absolute IRI or '
            'keyword', key)
        if self.strict:
            raise InvalidInputError(
                'Invalid JSON-LD input; key %r does not expand to an '
                'absolute IRI or keyword.' % key, details={'key': key},
                code='dropped key')
        if self.dropped_keys is not None:
            self.dropped_keys.add(key)
        if self.on_key_dropped is not None:
            self.on_key_dropped(key)

    def _expand_object(
            self, active_ctx, active_property, expanded_active_property,
            element, expanded_parent, inside_list):
        """
        Expands each key and value of element, adding to expanded_parent.
        """
        nests = []
        # frames keep their declared property order
        items = element.items() if self.is_frame else sorted(element.items())
        for key, value in items:
            if key == '@context':
                continue
            if not _is_string(key):
                raise InvalidInputError(
                    'Invalid JSON-LD input; object keys must be strings.',
                    details={'key': repr(key)}, code='invalid input')

            expanded_property = expand_iri(active_ctx, key, vocab=True)

            if expanded_property is None or not (
                    _is_absolute_iri(expanded_property) or
                    _is_keyword(expanded_property)):
                self._drop_key(key)
                continue

            if _is_keyword(expanded_property):
                if (expanded_property in _IGNORED_KEYWORDS or (
                        expanded_property in FRAME_KEYWORDS and
                        not self.is_frame)):
                    self._drop_key(key)
                    continue
                if expanded_active_property == '@reverse':
                    raise InvalidInputError(
                        'Invalid JSON-LD syntax; a keyword cannot be used as '
                        'a @reverse property.', details={'value': value},
                        code='invalid reverse property map')
                if expanded_property in expanded_parent:
                    raise InvalidInputError(
                        'Invalid JSON-LD syntax; colliding keywords detected.',
                        details={'keyword': expanded_property},
                        code='colliding keywords')

            if expanded_property == '@id':
                self._expand_id(active_ctx, value, expanded_parent)
                continue

            if expanded_property == '@type':
                self._validate_type_value(value)
                add_value(
                    expanded_parent, '@type',
                    [expand_iri(active_ctx, v, vocab=True, base=True)
                     if _is_string(v) else v for v in arrayify(value)],
                    property_is_array=self.is_frame)
                continue

            if (expanded_property == '@graph' and
                    kind_of(value) not in (Kind.OBJECT, Kind.ARRAY)):
                raise InvalidInputError(
                    'Invalid JSON-LD syntax; "@graph" value must be an '
                    'object or an array.', details={'value': value},
                    code='invalid @graph value')

            if expanded_property == '@value':
                if (kind_of(value) in (Kind.OBJECT, Kind.ARRAY) and
                        not self.is_frame):
                    raise InvalidInputError(
                        'Invalid JSON-LD syntax; "@value" value must not be '
                        'an object or an array.', details={'value': value},
                        code='invalid value object value')
                add_value(
                    expanded_parent, '@value', value,
                    property_is_array=self.is_frame)
                continue

            if expanded_property == '@language':
                if value is None:
                    continue
                if not _is_string(value) and not self.is_frame:
                    raise InvalidInputError(
                        'Invalid JSON-LD syntax; "@language" value must be '
                        'a string.', details={'value': value},
                        code='invalid language-tagged string')
                add_value(
                    expanded_parent, '@language',
                    [v.lower() if _is_string(v) else v
                     for v in arrayify(value)],
                    property_is_array=self.is_frame)
                continue

            if expanded_property == '@direction':
                if value is None:
                    continue
                if value not in DIRECTIONS and not self.is_frame:
                    raise InvalidInputError(
                        'Invalid JSON-LD syntax; "@direction" value must be '
                        '"ltr" or "rtl".', details={'value': value},
                        code='invalid base direction')
                add_value(
                    expanded_parent, '@direction', value,
                    property_is_array=self.is_frame)
                continue

            if expanded_property == '@index':
                if not _is_string(value):
                    raise InvalidInputError(
                        'Invalid JSON-LD syntax; "@index" value must be '
                        'a string.', details={'value': value},
                        code='invalid @index value')
                add_value(expanded_parent, '@index', value)
                continue

            if expanded_property == '@reverse':
                self._expand_reverse(active_ctx, value, expanded_parent)
                continue

            if expanded_property == '@nest':
                nests.append(key)
                continue

            self._expand_property(
                active_ctx, active_property, expanded_active_property, key,
                expanded_property, value, expanded_parent)

        for key in nests:
            for nested in arrayify(element[key]):
                if not _is_object(nested) or any(
                        expand_iri(active_ctx, k, vocab=True) == '@value'
                        for k in nested):
                    raise InvalidInputError(
                        'Invalid JSON-LD syntax; nested value must be a node '
                        'object.', details={'value': nested},
                        code='invalid @nest value')
                self._expand_object(
                    active_ctx, active_property, expanded_active_property,
                    nested, expanded_parent, inside_list)

    def _expand_id(self, active_ctx, value, expanded_parent):
        if not _is_string(value):
            # frames may match any @id or a set of them
            valid = self.is_frame and (
                _is_empty_object(value) or
                (_is_array(value) and all(_is_string(v) for v in value)))
            if not valid:
                raise InvalidInputError(
                    'Invalid JSON-LD syntax; "@id" value must be a string.',
                    details={'value': value}, code='invalid @id value')
        add_value(
            expanded_parent, '@id',
            [v if _is_object(v) else expand_iri(active_ctx, v, base=True)
             for v in arrayify(value)],
            property_is_array=self.is_frame)

    def _validate_type_value(self, value):
        if _is_string(value) or _is_empty_object(value):
            return
        if _is_array(value) and all(
                _is_string(v) or (self.is_frame and _is_empty_object(v))
                for v in value):
            return
        raise InvalidInputError(
            'Invalid JSON-LD syntax; "@type" value must be a string, an array '
            'of strings, or an empty object.', details={'value': value},
            code='invalid type value')

    def _expand_reverse(self, active_ctx, value, expanded_parent):
        if not _is_object(value):
            raise InvalidInputError(
                'Invalid JSON-LD syntax; "@reverse" value must be '
                'an object.', details={'value': value},
                code='invalid @reverse value')

        expanded_value = self.expand(active_ctx, '@reverse', value)

        # properties double-reversed
        for rproperty, rvalue in expanded_value.get('@reverse', {}).items():
            add_value(
                expanded_parent, rproperty, rvalue, property_is_array=True)

        reverse_map = expanded_parent.get('@reverse')
        for property, items in expanded_value.items():
            if property == '@reverse':
                continue
            if reverse_map is None:
                reverse_map = expanded_parent['@reverse'] = {}
            add_value(reverse_map, property, [], property_is_array=True)
            for item in items:
                if _is_value(item) or _is_list(item):
                    raise InvalidInputError(
                        'Invalid JSON-LD syntax; "@reverse" value must not '
                        'be an @value or an @list.',
                        details={'value': expanded_value},
                        code='invalid reverse property value')
                add_value(reverse_map, property, item, property_is_array=True)

    def _expand_property(
            self, active_ctx, active_property, expanded_active_property, key,
            expanded_property, value, expanded_parent):
        # use a context scoped to the term for its value
        term_ctx = active_ctx
        scoped = active_ctx.get_context_value(key, '@context')
        if scoped is not None:
            term_ctx = ctx_mod.parse(active_ctx, scoped)

        container = active_ctx.get_container(key)
        is_map = _is_object(value)

        if '@language' in container and is_map:
            expanded_value = self._expand_language_map(term_ctx, key, value)
        elif '@index' in container and is_map:
            expanded_value = self._expand_index_map(
                term_ctx, key, value, '@index')
        elif '@id' in container and is_map:
            expanded_value = self._expand_index_map(
                term_ctx, key, value, '@id')
        elif '@type' in container and is_map:
            expanded_value = self._expand_index_map(
                term_ctx, key, value, '@type')
        elif expanded_property in ('@list', '@set'):
            is_list = expanded_property == '@list'
            next_active_property = active_property
            if is_list and expanded_active_property == '@graph':
                next_active_property = None
            expanded_value = self.expand(
                term_ctx, next_active_property, value, is_list)
            if is_list and _is_list(expanded_value):
                raise InvalidInputError(
                    'Invalid JSON-LD syntax; lists of lists are not '
                    'permitted.', details={'property': key},
                    code='list of lists')
        else:
            expanded_value = self.expand(term_ctx, key, value)

        if expanded_value is None and expanded_property != '@value':
            return

        if (expanded_property != '@list' and not _is_list(expanded_value) and
                '@list' in container):
            expanded_value = {'@list': arrayify(expanded_value)}

        mapping = term_ctx.mappings.get(key)
        if mapping and mapping['reverse']:
            reverse_map = expanded_parent.setdefault('@reverse', {})
            for item in arrayify(expanded_value):
                if _is_value(item) or _is_list(item):
                    raise InvalidInputError(
                        'Invalid JSON-LD syntax; "@reverse" value must not '
                        'be an @value or an @list.',
                        details={'value': expanded_value},
                        code='invalid reverse property value')
                add_value(
                    reverse_map, expanded_property, item,
                    property_is_array=True)
            return

        add_value(
            expanded_parent, expanded_property, expanded_value,
            property_is_array=expanded_property not in _SINGLE_VALUED)

    def _expand_language_map(self, active_ctx, key, language_map):
        direction = active_ctx.get_context_value(key, '@direction')
        rval = []
        for language, values in sorted(language_map.items()):
            expanded_key = expand_iri(active_ctx, language, vocab=True)
            for item in arrayify(values):
                if item is None:
                    continue
                if not _is_string(item):
                    raise InvalidInputError(
                        'Invalid JSON-LD syntax; language map values must be '
                        'strings.', details={'languageMap': language_map},
                        code='invalid language map value')
                val = {'@value': item}
                if expanded_key != '@none':
                    val['@language'] = language.lower()
                if direction is not None:
                    val['@direction'] = direction
                rval.append(val)
        return rval

    def _expand_index_map(self, active_ctx, active_property, value,
                          index_key):
        rval = []
        for k, v in sorted(value.items()):
            if index_key == '@type':
                scoped = active_ctx.get_context_value(k, '@context')
                if scoped is not None:
                    active_ctx = ctx_mod.parse(active_ctx, scoped)

            expanded_key = expand_iri(active_ctx, k, vocab=True)
            if index_key == '@id':
                k = expand_iri(active_ctx, k, base=True)
            elif index_key == '@type':
                k = expanded_key

            items = self.expand(active_ctx, active_property, arrayify(v))
            for item in items:
                if index_key == '@type':
                    if expanded_key != '@none':
                        item['@type'] = [k] + item.get('@type', [])
                elif expanded_key != '@none' and index_key not in item:
                    item[index_key] = k
                rval.append(item)
        return rval

    def expand_value(self, active_ctx, active_property, value):
        """
        Expands the given value by using the coercion and keyword rules in the
        given context.

        :param active_ctx: the active context to use.
        :param active_property: the property the value is associated with.
        :param value: the value to expand.

        :return: the expanded value.
        """
        if value is None:
            return None

        expanded_property = expand_iri(
            active_ctx, active_property, vocab=True)
        if expanded_property == '@id':
            return expand_iri(active_ctx, value, base=True)
        elif expanded_property == '@type':
            return expand_iri(active_ctx, value, vocab=True, base=True)

        type_ = active_ctx.get_context_value(active_property, '@type')

        # @id expansion is automatic for @graph
        if ((type_ == '@id' or expanded_property == '@graph') and
                _is_string(value)):
            return {'@id': expand_iri(active_ctx, value, base=True)}
        if type_ == '@vocab' and _is_string(value):
            return {'@id': expand_iri(
                active_ctx, value, vocab=True, base=True)}

        if _is_keyword(expanded_property):
            return value

        rval = {}
        if type_ is not None and type_ not in ('@id', '@vocab'):
            rval['@type'] = type_
        elif _is_string(value):
            language = active_ctx.get_context_value(
                active_property, '@language')
            if language is not None:
                rval['@language'] = language
            direction = active_ctx.get_context_value(
                active_property, '@direction')
            if direction is not None:
                rval['@direction'] = direction

        rval['@value'] = value
        return rval
