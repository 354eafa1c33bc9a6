"""
N-Quads codec.

.. module:: jsonldcore.nquads
  :synopsis: N-Quads parser and serializer
"""

import re

from jsonldcore.model import (
    RDF_LANGSTRING, XSD_STRING, RDFDataset)

__all__ = [
    'parse_nquads', 'serialize_nquads', 'serialize_nquad', 'ParserError',
    'escape', 'unescape'
]

_ESCAPES = {
    't': '\t', 'b': '\b', 'n': '\n', 'r': '\r', 'f': '\f',
    '"': '"', "'": "'", '\\': '\\'
}
_ESCAPE_SEQUENCE = re.compile(
    r'\\(?:u([0-9A-Fa-f]{4})|U([0-9A-Fa-f]{8})|([tbnrf"\'\\]))')


def escape(value: str) -> str:
    return (
        value.replace('\\', '\\\\')
        .replace('\t', '\\t')
        .replace('\n', '\\n')
        .replace('\r', '\\r')
        .replace('"', '\\"'))


def unescape(value: str) -> str:
    def replace(match):
        code = match.group(1) or match.group(2)
        if code:
            return chr(int(code, 16))
        return _ESCAPES[match.group(3)]
    return _ESCAPE_SEQUENCE.sub(replace, value)


# partial regexes
_IRI = '(?:<([^:]+:[^>]*)>)'
_BNODE = '(_:(?:[A-Za-z0-9_][A-Za-z0-9_.-]*))'
_PLAIN = '"([^"\\\\]*(?:\\\\.[^"\\\\]*)*)"'
_DATATYPE = '(?:\\^\\^' + _IRI + ')'
_LANGUAGE = '(?:@([a-zA-Z]+(?:-[a-zA-Z0-9]+)*))'
_LITERAL = '(?:' + _PLAIN + '(?:' + _DATATYPE + '|' + _LANGUAGE + ')?)'
_WS = '[ \\t]+'
_WSO = '[ \\t]*'

# quad part regexes; literals are not allowed in the graph position
_SUBJECT = '(?:' + _IRI + '|' + _BNODE + ')' + _WS
_PROPERTY = _IRI + _WS
_OBJECT = '(?:' + _IRI + '|' + _BNODE + '|' + _LITERAL + ')' + _WSO
_GRAPH = '(?:\\.|(?:(?:' + _IRI + '|' + _BNODE + ')' + _WSO + '\\.))'

_QUAD = re.compile(
    '^' + _WSO + _SUBJECT + _PROPERTY + _OBJECT + _GRAPH + _WSO +
    '(?:#.*)?$')
_EMPTY = re.compile('^' + _WSO + '(?:#.*)?$')


def parse_nquads(input_: str) -> RDFDataset:
    """
    Parses RDF in the form of N-Quads.

    :param input_: the N-Quads input to parse.

    :return: an RDF dataset.
    """
    dataset = RDFDataset()

    for line_number, line in enumerate(input_.splitlines(), 1):
        if _EMPTY.match(line):
            continue

        match = _QUAD.match(line)
        if match is None:
            raise ParserError(
                'Error while parsing N-Quads; invalid quad at line %d: %r' %
                (line_number, line), line_number=line_number)
        match = match.groups()

        triple = {}

        if match[0] is not None:
            triple['subject'] = {'type': 'IRI', 'value': match[0]}
        else:
            triple['subject'] = {'type': 'blank node', 'value': match[1]}

        triple['predicate'] = {'type': 'IRI', 'value': match[2]}

        if match[3] is not None:
            triple['object'] = {'type': 'IRI', 'value': match[3]}
        elif match[4] is not None:
            triple['object'] = {'type': 'blank node', 'value': match[4]}
        else:
            object_ = {'type': 'literal', 'value': unescape(match[5])}
            if match[6] is not None:
                object_['datatype'] = match[6]
            elif match[7] is not None:
                object_['datatype'] = RDF_LANGSTRING
                object_['language'] = match[7]
            else:
                object_['datatype'] = XSD_STRING
            triple['object'] = object_

        # '@default' names the default graph
        name = '@default'
        if match[8] is not None:
            name = match[8]
        elif match[9] is not None:
            name = match[9]

        dataset.add_triple(name, triple)

    return dataset


def serialize_nquads(dataset) -> str:
    """
    Converts an RDF dataset to N-Quads, one sorted line per quad.
    """
    quads = []
    for graph_name, triples in dataset.items():
        if graph_name == '@default':
            graph_name = None
        for triple in triples:
            quads.append(serialize_nquad(triple, graph_name))
    quads.sort()
    return ''.join(quads)


def serialize_nquad(triple, graph_name=None) -> str:
    """
    Converts an RDF triple and graph name to a single N-Quad line.

    :param triple: the RDF triple or quad to convert (a quad carries its
      graph under 'name' and then `graph_name` is ignored).
    :param graph_name: the name of the graph containing the triple, None
      for the default graph.

    :return: the N-Quad string.
    """
    s = triple['subject']
    p = triple['predicate']
    o = triple['object']
    g = triple.get('name', {'value': graph_name})['value']

    quad = _term(s) + ' ' + _term(p) + ' '

    if o['type'] == 'literal':
        quad += '"' + escape(o['value']) + '"'
        if o['datatype'] == RDF_LANGSTRING:
            if o.get('language'):
                quad += '@' + o['language']
        elif o['datatype'] != XSD_STRING:
            quad += '^^<' + o['datatype'] + '>'
    else:
        quad += _term(o)

    if g is not None:
        if g.startswith('_:'):
            quad += ' ' + g
        else:
            quad += ' <' + g + '>'

    return quad + ' .\n'


def _term(component):
    if component['type'] == 'IRI':
        return '<' + component['value'] + '>'
    return component['value']


class ParserError(ValueError):
    """
    Raised for malformed N-Quads input.
    """

    def __init__(self, message, line_number=None):
        ValueError.__init__(self, message)
        self.line_number = line_number
