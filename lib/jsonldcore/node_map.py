"""
Node maps and flattening.

A node map is a dict of graph name ('@default', '@merged' or a graph IRI or
blank node label) to a dict of node id to node object. Every node in a node
map is addressable by its id; references between nodes are subject
references (``{'@id': ...}``), never embedded nodes.

.. module:: jsonldcore.node_map
  :synopsis: JSON-LD node map generation and flattening
"""

import copy

from jsonldcore.errors import InvalidInputError
from jsonldcore.model import (
    add_value, _is_array, _is_bnode, _is_keyword, _is_list, _is_object,
    _is_subject, _is_subject_reference, _is_value)
from jsonldcore.namer import UniqueNamer

__all__ = ['create_node_map', 'merge_node_map_graphs', 'flatten']


def create_node_map(input_, graphs, graph, namer, name=None, list_=None):
    """
    Recursively flattens the subjects in the given JSON-LD expanded
    input into a node map.

    :param input_: the JSON-LD expanded input.
    :param graphs: a map of graph name to subject map.
    :param graph: the name of the current graph.
    :param namer: the UniqueNamer used to relabel blank nodes.
    :param name: the name assigned to the current input if it is a bnode.
    :param list_: the list to append to, None for none.
    """
    if _is_array(input_):
        for e in input_:
            create_node_map(e, graphs, graph, namer, None, list_)
        return

    if not _is_object(input_):
        if list_ is not None:
            list_.append(input_)
        return

    if _is_value(input_):
        type_ = input_.get('@type')
        if isinstance(type_, str) and type_.startswith('_:'):
            input_['@type'] = namer.get_name(type_)
        if list_ is not None:
            list_.append(input_)
        return

    # blank node types are labeled before the node itself
    for type_ in input_.get('@type', []):
        if isinstance(type_, str) and type_.startswith('_:'):
            namer.get_name(type_)

    if name is None:
        name = input_.get('@id')
        if _is_bnode(input_):
            name = namer.get_name(name)

    if list_ is not None:
        list_.append({'@id': name})

    subject = graphs.setdefault(graph, {}).setdefault(name, {'@id': name})
    for property, objects in sorted(input_.items()):
        if property == '@id':
            continue

        if property == '@reverse':
            referenced_node = {'@id': name}
            for reverse_property, items in input_['@reverse'].items():
                for item in items:
                    item_name = item.get('@id')
                    if _is_bnode(item):
                        item_name = namer.get_name(item_name)
                    create_node_map(item, graphs, graph, namer, item_name)
                    add_value(
                        graphs[graph][item_name], reverse_property,
                        referenced_node, property_is_array=True,
                        allow_duplicate=False)
            continue

        if property == '@graph':
            graphs.setdefault(name, {})
            g = graph if graph == '@merged' else name
            create_node_map(objects, graphs, g, namer)
            continue

        # copy keywords other than @type
        if property != '@type' and _is_keyword(property):
            if (property == '@index' and '@index' in subject and
                    input_['@index'] != subject['@index']):
                raise InvalidInputError(
                    'Invalid JSON-LD syntax; conflicting @index property '
                    'detected.', details={'subject': subject},
                    code='conflicting indexes')
            subject[property] = input_[property]
            continue

        # blank node properties are relabeled too
        if property.startswith('_:'):
            property = namer.get_name(property)

        if len(objects) == 0:
            add_value(subject, property, [], property_is_array=True)
            continue

        for o in objects:
            if property == '@type':
                if o.startswith('_:'):
                    o = namer.get_name(o)
                add_value(
                    subject, property, o, property_is_array=True,
                    allow_duplicate=False)
            elif _is_subject(o) or _is_subject_reference(o):
                id_ = o.get('@id')
                if _is_bnode(o):
                    id_ = namer.get_name(id_)
                add_value(
                    subject, property, {'@id': id_}, property_is_array=True,
                    allow_duplicate=False)
                create_node_map(o, graphs, graph, namer, id_)
            elif _is_list(o):
                olist = []
                create_node_map(o['@list'], graphs, graph, namer, name, olist)
                add_value(
                    subject, property, {'@list': olist},
                    property_is_array=True, allow_duplicate=False)
            else:
                create_node_map(o, graphs, graph, namer, name)
                add_value(
                    subject, property, o, property_is_array=True,
                    allow_duplicate=False)


def merge_node_map_graphs(graphs):
    """
    Merges separate named graphs into a single merged graph including
    all nodes from the default graph and named graphs.

    :param graphs: a map of graph name to subject map.

    :return: merged graph map.
    """
    merged = {}
    for name, graph in sorted(graphs.items()):
        for id_, node in sorted(graph.items()):
            merged_node = merged.setdefault(id_, {'@id': id_})
            for property, values in sorted(node.items()):
                if _is_keyword(property):
                    merged_node[property] = copy.deepcopy(values)
                else:
                    for value in values:
                        add_value(
                            merged_node, property, copy.deepcopy(value),
                            property_is_array=True, allow_duplicate=False)
    return merged


def flatten(expanded, namer=None):
    """
    Flattens expanded JSON-LD into a list of top-level node objects. Named
    graphs become @graph entries of their graph's node, nodes are ordered
    by @id.

    :param expanded: the expanded JSON-LD (not modified).
    :param namer: the UniqueNamer to label blank nodes with, a fresh '_:b'
      namer if not given.

    :return: the flattened node objects.
    """
    if namer is None:
        namer = UniqueNamer('_:b')
    graphs = {'@default': {}}
    create_node_map(copy.deepcopy(expanded), graphs, '@default', namer)

    default_graph = graphs['@default']
    for graph_name, node_map in sorted(graphs.items()):
        if graph_name == '@default':
            continue
        graph_subject = default_graph.setdefault(
            graph_name, {'@id': graph_name, '@graph': []})
        graph_subject.setdefault('@graph', []).extend(
            [v for k, v in sorted(node_map.items())
             if not _is_subject_reference(v)])

    return [value for key, value in sorted(default_graph.items())
            if not _is_subject_reference(value)]
