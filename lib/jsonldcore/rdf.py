"""
Conversion between node maps and RDF datasets.

.. module:: jsonldcore.rdf
  :synopsis: JSON-LD to RDF and RDF to JSON-LD conversion
"""

import re

from jsonldcore.model import (
    RDFDataset, RDF_FIRST, RDF_LANGSTRING, RDF_LIST, RDF_NIL, RDF_REST,
    RDF_TYPE, XSD_BOOLEAN, XSD_DOUBLE, XSD_INTEGER, XSD_STRING,
    add_value, _is_absolute_iri, _is_array, _is_bool, _is_double,
    _is_integer, _is_keyword, _is_list, _is_object, _is_string,
    _is_subject_reference, _is_value)

__all__ = [
    'node_map_to_rdf', 'graph_to_rdf', 'object_to_rdf', 'rdf_to_object',
    'from_rdf', 'canonical_double'
]

_DOUBLE_EXPONENT = re.compile(r'(\d)0*E\+?(-?)0*(\d)')


def canonical_double(value):
    """
    Returns the canonical xsd:double lexical form of a number, eg: 45 is
    '4.5E1'.
    """
    return _DOUBLE_EXPONENT.sub(r'\1E\2\3', '%1.15E' % value)


def node_map_to_rdf(node_map, namer, produce_generalized_rdf=False):
    """
    Outputs the RDF dataset found in a node map.

    :param node_map: the node map (graph name to node id to node).
    :param namer: the UniqueNamer that labels the blank nodes of list
      items, the same one that labeled the node map.
    :param produce_generalized_rdf: True to keep triples with blank node
      predicates.

    :return: the RDFDataset.
    """
    dataset = RDFDataset()
    for graph_name, graph in sorted(node_map.items()):
        # skip relative IRIs
        if graph_name == '@default' or _is_absolute_iri(graph_name):
            triples = graph_to_rdf(graph, namer, produce_generalized_rdf)
            if triples or graph_name == '@default':
                dataset[graph_name] = triples
    return dataset


def graph_to_rdf(graph, namer, produce_generalized_rdf=False):
    """
    Creates a list of RDF triples for the given graph.

    :param graph: the graph (node id to node) to create RDF triples for.
    :param namer: the UniqueNamer for list blank nodes.
    :param produce_generalized_rdf: True to keep blank node predicates.

    :return: the list of RDF triples for the given graph.
    """
    rval = []
    for id_, node in sorted(graph.items()):
        # skip relative IRI subjects
        if not _is_absolute_iri(id_):
            continue
        for property, items in sorted(node.items()):
            if property == '@type':
                property = RDF_TYPE
            elif _is_keyword(property):
                continue
            # skip relative IRI predicates
            if not _is_absolute_iri(property):
                continue

            subject = _resource(id_)

            if property.startswith('_:'):
                # skip bnode predicates unless producing generalized RDF
                if not produce_generalized_rdf:
                    continue
                predicate = {'type': 'blank node', 'value': property}
            else:
                predicate = {'type': 'IRI', 'value': property}

            for item in items:
                if _is_list(item):
                    _list_to_rdf(
                        item['@list'], namer, subject, predicate, rval)
                    continue
                object_ = object_to_rdf(item)
                # skip None objects (they are relative IRIs)
                if object_ is not None:
                    rval.append({
                        'subject': subject,
                        'predicate': predicate,
                        'object': object_
                    })
    return rval


def _list_to_rdf(list_, namer, subject, predicate, triples):
    """
    Converts a @list value into a linked list of blank node RDF triples
    (an RDF collection). An empty list is rdf:nil itself.
    """
    first = {'type': 'IRI', 'value': RDF_FIRST}
    rest = {'type': 'IRI', 'value': RDF_REST}
    nil = {'type': 'IRI', 'value': RDF_NIL}

    for item in list_:
        blank_node = {'type': 'blank node', 'value': namer.get_name()}
        triples.append({
            'subject': subject,
            'predicate': predicate,
            'object': blank_node
        })

        subject = blank_node
        predicate = first
        object_ = object_to_rdf(item)
        if object_ is not None:
            triples.append({
                'subject': subject,
                'predicate': predicate,
                'object': object_
            })

        predicate = rest

    triples.append({'subject': subject, 'predicate': predicate, 'object': nil})


def _resource(id_):
    if id_.startswith('_:'):
        return {'type': 'blank node', 'value': id_}
    return {'type': 'IRI', 'value': id_}


def object_to_rdf(item):
    """
    Converts a JSON-LD value object to an RDF literal or a JSON-LD string
    or node object to an RDF resource.

    Base direction has no RDF literal form; a value with @direction becomes
    a plain language-tagged (or xsd:string) literal.

    :param item: the JSON-LD value or node object.

    :return: the RDF literal or RDF resource, None for a relative IRI.
    """
    if _is_value(item):
        object_ = {'type': 'literal'}
        value = item['@value']
        datatype = item.get('@type')

        # convert to XSD datatypes as appropriate
        if _is_bool(value):
            object_['value'] = 'true' if value else 'false'
            object_['datatype'] = datatype or XSD_BOOLEAN
        elif _is_double(value) or (
                _is_integer(value) and datatype == XSD_DOUBLE):
            object_['value'] = canonical_double(value)
            object_['datatype'] = datatype or XSD_DOUBLE
        elif datatype == XSD_DOUBLE and _is_numeric_string(value):
            object_['value'] = canonical_double(float(value))
            object_['datatype'] = datatype or XSD_DOUBLE
        elif _is_integer(value):
            object_['value'] = str(value)
            object_['datatype'] = datatype or XSD_INTEGER
        elif '@language' in item:
            object_['value'] = value
            object_['datatype'] = datatype or RDF_LANGSTRING
            object_['language'] = item['@language']
        else:
            object_['value'] = value
            object_['datatype'] = datatype or XSD_STRING
        return object_

    id_ = item['@id'] if _is_object(item) else item
    # skip relative IRIs
    if not _is_absolute_iri(id_):
        return None
    return _resource(id_)


def rdf_to_object(o, use_native_types=True):
    """
    Converts an RDF triple object to a JSON-LD object.

    Native values are only produced when converting the native value back
    gives the same lexical form, so '01' stays a typed xsd:integer string.

    :param o: the RDF triple object to convert.
    :param use_native_types: True to output native types, False not to.

    :return: the JSON-LD object.
    """
    if o['type'] in ('IRI', 'blank node'):
        return {'@id': o['value']}

    rval = {'@value': o['value']}

    if o.get('language'):
        rval['@language'] = o['language']
        return rval

    type_ = o.get('datatype') or XSD_STRING
    if use_native_types:
        native = _native_value(o['value'], type_)
        if native is not None:
            rval['@value'] = native
            return rval
    if type_ != XSD_STRING:
        rval['@type'] = type_
    return rval


def _native_value(lexical, type_):
    """
    Returns the native value for an XSD literal if it round-trips exactly,
    None if not.
    """
    if type_ == XSD_BOOLEAN:
        if lexical == 'true':
            return True
        if lexical == 'false':
            return False
    elif type_ == XSD_INTEGER:
        try:
            value = int(lexical)
        except ValueError:
            return None
        if str(value) == lexical:
            return value
    elif type_ == XSD_DOUBLE:
        try:
            value = float(lexical)
        except ValueError:
            return None
        if canonical_double(value) == lexical:
            return value
    return None


def from_rdf(dataset, use_rdf_type=False, use_native_types=True):
    """
    Converts an RDF dataset to expanded JSON-LD.

    :param dataset: the RDF dataset (graph name to triples).
    :param use_rdf_type: True to keep rdf:type as a property, False to use
      @type.
    :param use_native_types: True to convert XSD booleans, integers and
      doubles into native values.

    :return: the expanded JSON-LD output.
    """
    default_graph = {}
    graph_map = {'@default': default_graph}
    referenced_once = {}

    for name, graph in dataset.items():
        graph_map.setdefault(name, {})
        if name != '@default' and name not in default_graph:
            default_graph[name] = {'@id': name}
        node_map = graph_map[name]
        for triple in graph:
            s = triple['subject']['value']
            p = triple['predicate']['value']
            o = triple['object']

            node = node_map.setdefault(s, {'@id': s})

            object_is_id = o['type'] in ('IRI', 'blank node')
            if object_is_id and o['value'] not in node_map:
                node_map[o['value']] = {'@id': o['value']}

            if p == RDF_TYPE and not use_rdf_type and object_is_id:
                add_value(node, '@type', o['value'], property_is_array=True)
                continue

            value = rdf_to_object(o, use_native_types)
            add_value(node, p, value, property_is_array=True)

            # the object may be an RDF list node, which is only known once
            # all triples are read
            if object_is_id:
                if o['value'] == RDF_NIL:
                    # rdf:nil usages are tracked per graph
                    node_map[o['value']].setdefault('usages', []).append({
                        'node': node, 'property': p, 'value': value})
                elif o['value'] in referenced_once:
                    referenced_once[o['value']] = False
                else:
                    referenced_once[o['value']] = {
                        'node': node, 'property': p, 'value': value}

    for graph_object in graph_map.values():
        if RDF_NIL in graph_object:
            _collapse_lists(graph_object, referenced_once)

    result = []
    for subject, node in sorted(default_graph.items()):
        if subject in graph_map:
            graph = node['@graph'] = []
            for s, n in sorted(graph_map[subject].items()):
                if not _is_subject_reference(n):
                    graph.append(n)
        if not _is_subject_reference(node):
            result.append(node)
    return result


def _collapse_lists(graph_object, referenced_once):
    """
    Converts the rdf:first/rdf:rest chains ending in rdf:nil into @list
    values on the node that references their head.
    """
    nil = graph_object[RDF_NIL]
    for usage in nil.get('usages', []):
        node = usage['node']
        property = usage['property']
        head = usage['value']
        list_ = []
        list_nodes = []

        # walk backwards while the node is a well-formed list node:
        # referenced once, one rdf:first and one rdf:rest, and no other
        # keys but @id and an optional @type of rdf:List
        while (property == RDF_REST and
                _is_object(referenced_once.get(node['@id'])) and
                _is_single(node.get(RDF_FIRST)) and
                _is_single(node.get(RDF_REST)) and
                (len(node) == 3 or (
                    len(node) == 4 and node.get('@type') == [RDF_LIST]))):
            list_.append(node[RDF_FIRST][0])
            list_nodes.append(node['@id'])

            usage = referenced_once[node['@id']]
            node = usage['node']
            property = usage['property']
            head = usage['value']

            # a non-blank node is the list head
            if not node['@id'].startswith('_:'):
                break

        # the list is nested in another list
        if property == RDF_FIRST:
            # rdf:nil cannot become a @list without making a list of lists
            if node['@id'] == RDF_NIL:
                continue
            head = graph_object[head['@id']][RDF_REST][0]
            list_.pop()
            list_nodes.pop()

        del head['@id']
        list_.reverse()
        head['@list'] = list_
        for id_ in list_nodes:
            graph_object.pop(id_, None)

    nil.pop('usages', None)


def _is_single(values):
    return _is_array(values) and len(values) == 1


def _is_numeric_string(value):
    if not _is_string(value):
        return False
    try:
        float(value)
    except ValueError:
        return False
    return True
