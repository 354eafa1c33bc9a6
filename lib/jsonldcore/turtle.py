"""
Turtle codec backed by rdflib.

rdflib does the Turtle grammar; triples cross over as N-Triples so the
dataset model stays the same as the N-Quads codec's. Turtle has no named
graphs, so only the default graph is serialized.

.. module:: jsonldcore.turtle
  :synopsis: Turtle parser and serializer
"""

import logging

from jsonldcore.nquads import parse_nquads, serialize_nquads

__all__ = ['parse_turtle', 'serialize_turtle']

logger = logging.getLogger(__name__)


def parse_turtle(input_):
    """
    Parses Turtle text into an RDF dataset holding a default graph. Prefixes
    declared by the document become the dataset's namespaces.

    :param input_: the Turtle text.

    :return: an RDF dataset.
    """
    import rdflib

    graph = rdflib.Graph(bind_namespaces='none')
    graph.parse(data=input_, format='turtle')
    dataset = parse_nquads(graph.serialize(format='nt'))
    for prefix, namespace in graph.namespaces():
        dataset.namespaces[str(prefix)] = str(namespace)
    return dataset


def serialize_turtle(dataset):
    """
    Serializes the default graph of an RDF dataset as Turtle, using the
    dataset's namespaces as prefixes.

    :param dataset: the RDF dataset.

    :return: the Turtle text.
    """
    import rdflib

    dropped = sorted(name for name in dataset if name != '@default')
    if dropped:
        logger.debug(
            'Turtle cannot express named graphs, dropping %d graph(s): %s',
            len(dropped), ', '.join(dropped))

    graph = rdflib.Graph(bind_namespaces='none')
    triples = serialize_nquads({'@default': dataset.get('@default', [])})
    if triples:
        graph.parse(data=triples, format='nt')
    for prefix, namespace in getattr(dataset, 'namespaces', {}).items():
        graph.bind(prefix, rdflib.Namespace(namespace), override=True)
    return graph.serialize(format='turtle')
