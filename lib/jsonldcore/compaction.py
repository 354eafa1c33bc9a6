"""
The JSON-LD compaction algorithm.

.. module:: jsonldcore.compaction
  :synopsis: JSON-LD compaction
"""

from jsonldcore import context as ctx_mod
from jsonldcore.context import compact_iri, expand_iri
from jsonldcore.errors import CompactionError, InvalidInputError
from jsonldcore.model import (
    Kind, kind_of, add_value, arrayify, _is_array, _is_graph, _is_keyword,
    _is_list, _is_object, _is_string, _is_subject_reference, _is_value)

__all__ = ['Compactor', 'compact_value', 'remove_preserve']


class Compactor(object):
    """
    Rewrites expanded JSON-LD into compact form for an active context.

    Options:
      [compactArrays] True to compact arrays to single values when
        appropriate, False not to (default: True).
    """

    def __init__(self, options=None):
        options = options or {}
        self.compact_arrays = options.get('compactArrays', True)

    def compact(self, active_ctx, active_property, element):
        """
        Recursively compacts an element using the given active context. All
        values must be in expanded form before this method is called.

        :param active_ctx: the active context to use.
        :param active_property: the compacted property with the element to
          compact, None for none.
        :param element: the element to compact.

        :return: the compacted value.
        """
        kind = kind_of(element)

        if kind is Kind.ARRAY:
            rval = []
            for e in element:
                e = self.compact(active_ctx, active_property, e)
                if e is not None:
                    rval.append(e)
            if self.compact_arrays and len(rval) == 1:
                # use single element if no container is specified
                if not active_ctx.get_container(active_property):
                    rval = rval[0]
            return rval

        if kind is not Kind.OBJECT:
            # primitives are already compact
            return element

        scoped = active_ctx.get_context_value(active_property, '@context')
        if scoped is not None:
            active_ctx = ctx_mod.parse(active_ctx, scoped)

        if _is_value(element) or _is_subject_reference(element):
            return compact_value(active_ctx, active_property, element)

        inside_reverse = active_property == '@reverse'

        # apply contexts scoped to the node's types
        for type_ in element.get('@type', []):
            compacted_type = compact_iri(active_ctx, type_, vocab=True)
            scoped = active_ctx.get_context_value(compacted_type, '@context')
            if scoped is not None:
                active_ctx = ctx_mod.parse(active_ctx, scoped)

        rval = {}
        for expanded_property, expanded_value in element.items():
            if expanded_property in ('@id', '@type'):
                compacted_value = [
                    compact_iri(
                        active_ctx, expanded_iri,
                        vocab=(expanded_property == '@type'))
                    for expanded_iri in arrayify(expanded_value)]
                if len(compacted_value) == 1:
                    compacted_value = compacted_value[0]
                alias = compact_iri(active_ctx, expanded_property)
                add_value(
                    rval, alias, compacted_value,
                    property_is_array=(
                        _is_array(compacted_value) and
                        len(compacted_value) == 0))
                continue

            if expanded_property == '@reverse':
                self._compact_reverse(active_ctx, expanded_value, rval)
                continue

            if expanded_property == '@preserve':
                compacted_value = self.compact(
                    active_ctx, active_property, expanded_value)
                if not (_is_array(compacted_value) and
                        len(compacted_value) == 0):
                    add_value(rval, expanded_property, compacted_value)
                continue

            if expanded_property == '@index':
                # an @index container holds the index as the map key
                if '@index' in active_ctx.get_container(active_property):
                    continue
                add_value(
                    rval, compact_iri(active_ctx, '@index'), expanded_value)
                continue

            # other keywords are copied as they are
            if (expanded_property not in ('@graph', '@list') and
                    _is_keyword(expanded_property)):
                add_value(
                    rval, compact_iri(active_ctx, expanded_property),
                    expanded_value)
                continue

            if not _is_array(expanded_value):
                raise InvalidInputError(
                    'Invalid JSON-LD input; compaction requires expanded '
                    'input.', details={'property': expanded_property},
                    code='invalid input')

            # preserve empty arrays
            if len(expanded_value) == 0:
                item_active_property = compact_iri(
                    active_ctx, expanded_property, expanded_value,
                    vocab=True, reverse=inside_reverse)
                nest_result = self._nest_result(
                    active_ctx, item_active_property, rval)
                add_value(
                    nest_result, item_active_property, [],
                    property_is_array=True)

            for expanded_item in expanded_value:
                self._compact_item(
                    active_ctx, expanded_property, expanded_item,
                    inside_reverse, rval)

        return rval

    def _compact_reverse(self, active_ctx, expanded_value, rval):
        compacted_value = self.compact(active_ctx, '@reverse', expanded_value)

        # double-reversed properties become regular properties
        for compacted_property, value in list(compacted_value.items()):
            mapping = active_ctx.mappings.get(compacted_property)
            if mapping and mapping['reverse']:
                container = active_ctx.get_container(compacted_property)
                use_array = '@set' in container or not self.compact_arrays
                add_value(
                    rval, compacted_property, value,
                    property_is_array=use_array)
                del compacted_value[compacted_property]

        if len(compacted_value) > 0:
            add_value(
                rval, compact_iri(active_ctx, '@reverse'), compacted_value)

    def _nest_result(self, active_ctx, item_active_property, rval):
        mapping = active_ctx.mappings.get(item_active_property) or {}
        nest_property = mapping.get('@nest')
        if not nest_property:
            return rval
        if expand_iri(active_ctx, nest_property, vocab=True) != '@nest':
            raise InvalidInputError(
                'JSON-LD compact error; nested property must have an @nest '
                'value resolving to @nest.',
                details={'term': item_active_property},
                code='invalid @nest value')
        if not _is_object(rval.get(nest_property)):
            rval[nest_property] = {}
        return rval[nest_property]

    def _compact_item(
            self, active_ctx, expanded_property, expanded_item,
            inside_reverse, rval):
        item_active_property = compact_iri(
            active_ctx, expanded_property, expanded_item, vocab=True,
            reverse=inside_reverse)
        nest_result = self._nest_result(active_ctx, item_active_property, rval)
        container = active_ctx.get_container(item_active_property)

        is_list = _is_list(expanded_item)
        is_graph = _is_graph(expanded_item)
        if is_list:
            inner = expanded_item['@list']
        elif is_graph:
            inner = expanded_item['@graph']
        else:
            inner = expanded_item

        compacted_item = self.compact(active_ctx, item_active_property, inner)

        if is_list:
            compacted_item = arrayify(compacted_item)
            if '@list' not in container:
                wrapper = {compact_iri(active_ctx, '@list'): compacted_item}
                if '@index' in expanded_item:
                    wrapper[compact_iri(active_ctx, '@index')] = (
                        expanded_item['@index'])
                compacted_item = wrapper
            elif item_active_property in nest_result:
                raise CompactionError(
                    'JSON-LD compact error; property has a "@list" '
                    '@container rule but there is more than a single @list '
                    'that matches the compacted term in the document. '
                    'Compaction might mix unwanted items into the list.',
                    details={'property': item_active_property},
                    code='compaction to list of lists')

        if is_graph:
            if (_is_array(compacted_item) and len(compacted_item) == 1 and
                    self.compact_arrays):
                compacted_item = compacted_item[0]
            compacted_item = {
                compact_iri(active_ctx, '@graph'): compacted_item}
            if '@id' in expanded_item:
                compacted_item[compact_iri(active_ctx, '@id')] = (
                    compact_iri(active_ctx, expanded_item['@id']))
            if '@index' in expanded_item:
                compacted_item[compact_iri(active_ctx, '@index')] = (
                    expanded_item['@index'])
            add_value(
                nest_result, item_active_property, compacted_item,
                property_is_array=(
                    not self.compact_arrays or '@set' in container))
        elif ('@language' in container or '@index' in container or
                '@id' in container or '@type' in container):
            map_object = nest_result.setdefault(item_active_property, {})
            key = None

            if '@language' in container:
                if _is_value(compacted_item):
                    compacted_item = compacted_item['@value']
                key = expanded_item.get('@language')
            elif '@index' in container:
                key = expanded_item.get('@index')
            elif '@id' in container:
                id_key = compact_iri(active_ctx, '@id')
                key = (compacted_item.pop(id_key, None)
                       if _is_object(compacted_item) else None)
            else:
                type_key = compact_iri(active_ctx, '@type')
                types = []
                if _is_object(compacted_item):
                    types = arrayify(compacted_item.pop(type_key, []))
                key = types.pop(0) if types else None
                if types:
                    add_value(compacted_item, type_key, types)

            key = key or compact_iri(active_ctx, '@none')
            add_value(
                map_object, key, compacted_item,
                property_is_array='@set' in container)
        else:
            is_array = (
                not self.compact_arrays or
                '@set' in container or
                '@list' in container or
                (_is_array(compacted_item) and len(compacted_item) == 0) or
                expanded_property in ('@list', '@graph'))
            add_value(
                nest_result, item_active_property, compacted_item,
                property_is_array=is_array)


def compact_value(active_ctx, active_property, value):
    """
    Performs value compaction on an object with @value or @id as the only
    property.

    :param active_ctx: the active context.
    :param active_property: the active property that points to the value.
    :param value: the value to compact.

    :return: the compacted value.
    """
    if _is_value(value):
        type_ = active_ctx.get_context_value(active_property, '@type')
        language = active_ctx.get_context_value(active_property, '@language')
        direction = active_ctx.get_context_value(
            active_property, '@direction')
        container = active_ctx.get_container(active_property)

        # whether or not the value has an @index that must be preserved
        preserve_index = '@index' in value and '@index' not in container

        if not preserve_index:
            # matching @type or @language/@direction from the context
            if '@type' in value and value['@type'] == type_:
                return value['@value']
            if (('@language' in value or '@direction' in value) and
                    value.get('@language') == language and
                    value.get('@direction') == direction):
                return value['@value']

        key_count = len(value)
        is_value_only_key = (
            key_count == 1 or
            (key_count == 2 and '@index' in value and not preserve_index))

        # a plain string only compacts to itself if the term would not
        # expand it with a language or direction
        if is_value_only_key and (
                not _is_string(value['@value']) or
                (language is None and direction is None)):
            return value['@value']

        rval = {}
        if preserve_index:
            rval[compact_iri(active_ctx, '@index')] = value['@index']
        if '@type' in value:
            rval[compact_iri(active_ctx, '@type')] = compact_iri(
                active_ctx, value['@type'], vocab=True)
        else:
            if '@language' in value:
                rval[compact_iri(active_ctx, '@language')] = (
                    value['@language'])
            if '@direction' in value:
                rval[compact_iri(active_ctx, '@direction')] = (
                    value['@direction'])
        rval[compact_iri(active_ctx, '@value')] = value['@value']
        return rval

    # value is a subject reference
    expanded_property = expand_iri(active_ctx, active_property, vocab=True)
    type_ = active_ctx.get_context_value(active_property, '@type')
    compacted = compact_iri(
        active_ctx, value['@id'], vocab=(type_ == '@vocab'))

    # compact to scalar
    if type_ in ('@id', '@vocab') or expanded_property == '@graph':
        return compacted

    return {compact_iri(active_ctx, '@id'): compacted}


def remove_preserve(active_ctx, input_, compact_arrays=True,
                    bnodes_to_clear=()):
    """
    Removes the @preserve keywords as the last step of the framing
    algorithm.

    :param active_ctx: the active context used to compact the input.
    :param input_: the framed, compacted output.
    :param compact_arrays: True if single-element arrays are compacted.
    :param bnodes_to_clear: blank node ids that may be dropped from output.

    :return: the resulting output.
    """
    return _remove_preserve(
        active_ctx, input_, compact_arrays, set(bnodes_to_clear), set())


def _remove_preserve(active_ctx, input_, compact_arrays, bnodes_to_clear,
                     visited):
    if _is_array(input_):
        output = []
        for e in input_:
            result = _remove_preserve(
                active_ctx, e, compact_arrays, bnodes_to_clear, visited)
            if result is not None:
                output.append(result)
        return output

    if not _is_object(input_):
        return input_

    if '@preserve' in input_:
        if input_['@preserve'] == '@null':
            return None
        return input_['@preserve']

    if _is_value(input_):
        return input_

    if _is_list(input_):
        input_['@list'] = _remove_preserve(
            active_ctx, input_['@list'], compact_arrays, bnodes_to_clear,
            visited)
        return input_

    # shared output objects are processed once
    if id(input_) in visited:
        return input_
    visited.add(id(input_))

    id_alias = compact_iri(active_ctx, '@id')
    if input_.get(id_alias) in bnodes_to_clear:
        del input_[id_alias]

    graph_alias = compact_iri(active_ctx, '@graph')
    for prop, v in list(input_.items()):
        result = _remove_preserve(
            active_ctx, v, compact_arrays, bnodes_to_clear, visited)
        container = active_ctx.get_container(prop)
        if (compact_arrays and _is_array(result) and len(result) == 1 and
                '@set' not in container and '@list' not in container and
                prop != graph_alias):
            result = result[0]
        input_[prop] = result
    return input_
