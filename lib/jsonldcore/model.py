"""
Data model for JSON-LD value trees and RDF datasets.

Value trees are ordinary Python JSON values (dict, list, str, int, float,
bool, None). :func:`kind_of` classifies a value into the closed set of
:class:`Kind` tags and rejects anything that is not JSON, so the engine can
dispatch on a tag instead of probing types ad hoc.

.. module:: jsonldcore.model
  :synopsis: JSON-LD value tree and RDF dataset model
"""

import enum
import re
from numbers import Integral, Real

from jsonldcore.errors import InvalidInputError

__all__ = [
    'Kind', 'kind_of', 'RDFDataset', 'KEYWORDS',
    'XSD_BOOLEAN', 'XSD_DOUBLE', 'XSD_INTEGER', 'XSD_STRING',
    'RDF', 'RDF_LIST', 'RDF_FIRST', 'RDF_REST', 'RDF_NIL', 'RDF_TYPE',
    'RDF_LANGSTRING',
    'add_value', 'get_values', 'has_property', 'has_value',
    'compare_values', 'arrayify', 'compare_shortest_least'
]

# XSD constants
XSD_BOOLEAN = 'http://www.w3.org/2001/XMLSchema#boolean'
XSD_DOUBLE = 'http://www.w3.org/2001/XMLSchema#double'
XSD_INTEGER = 'http://www.w3.org/2001/XMLSchema#integer'
XSD_STRING = 'http://www.w3.org/2001/XMLSchema#string'

# RDF constants
RDF = 'http://www.w3.org/1999/02/22-rdf-syntax-ns#'
RDF_LIST = RDF + 'List'
RDF_FIRST = RDF + 'first'
RDF_REST = RDF + 'rest'
RDF_NIL = RDF + 'nil'
RDF_TYPE = RDF + 'type'
RDF_LANGSTRING = RDF + 'langString'

# JSON-LD keywords
KEYWORDS = frozenset([
    '@base',
    '@container',
    '@context',
    '@default',
    '@direction',
    '@embed',
    '@explicit',
    '@graph',
    '@id',
    '@index',
    '@language',
    '@list',
    '@nest',
    '@none',
    '@omitDefault',
    '@preserve',
    '@requireAll',
    '@reverse',
    '@set',
    '@type',
    '@value',
    '@version',
    '@vocab'])


class Kind(enum.Enum):
    """The closed set of JSON value shapes."""
    OBJECT = 'object'
    ARRAY = 'array'
    STRING = 'string'
    NUMBER = 'number'
    BOOLEAN = 'boolean'
    NULL = 'null'


def kind_of(value):
    """
    Classifies a value tree node.

    :param value: the node to classify.

    :return: the node's Kind.
    """
    if value is None:
        return Kind.NULL
    # bool is an Integral, check it first
    if isinstance(value, bool):
        return Kind.BOOLEAN
    if isinstance(value, str):
        return Kind.STRING
    if isinstance(value, (Integral, Real)):
        return Kind.NUMBER
    if isinstance(value, dict):
        return Kind.OBJECT
    if isinstance(value, list):
        return Kind.ARRAY
    raise InvalidInputError(
        'Invalid JSON-LD input; values must be JSON objects, arrays, '
        'strings, numbers, booleans or null.',
        details={'value': repr(value), 'pythonType': type(value).__name__},
        code='invalid input')


class RDFDataset(dict):
    """
    An RDF dataset: a map of graph name ('@default' or an IRI/blank node
    label) to a list of triples. Each triple is a dict with 'subject',
    'predicate' and 'object' entries.

    Namespace prefixes found while parsing or converting are kept in
    ``namespaces`` so that prefix-aware serializers and ``get_context`` can
    reuse them.
    """

    def __init__(self, *args, **kwargs):
        dict.__init__(self, *args, **kwargs)
        self.namespaces = {}

    def add_triple(self, graph_name, triple):
        """
        Adds a triple to the given graph unless an equal triple is already
        present.

        :return: True if the triple was added.
        """
        triples = self.setdefault(graph_name, [])
        for t in triples:
            if compare_rdf_triples(t, triple):
                return False
        triples.append(triple)
        return True

    def quad_count(self):
        return sum(len(triples) for triples in self.values())

    def parse_context(self, ctx):
        """
        Records prefix-like string terms of a local context as namespaces.
        """
        for ctx_ in arrayify(ctx):
            if not _is_object(ctx_):
                continue
            for term, definition in ctx_.items():
                if term.startswith('@'):
                    continue
                if _is_object(definition):
                    definition = definition.get('@id')
                if (_is_string(definition) and
                        re.search(r'[/#:]$', definition) and
                        ':' in definition):
                    self.namespaces[term] = definition

    def get_context(self):
        """
        Builds a JSON-LD context from the recorded namespaces.
        """
        rval = {}
        for prefix, iri in self.namespaces.items():
            if prefix == '':
                rval['@vocab'] = iri
            else:
                rval[prefix] = iri
        return rval


def compare_rdf_triples(t1, t2):
    """
    Compares two RDF triples for equality.

    :param t1: the first triple.
    :param t2: the second triple.

    :return: True if the triples are the same, False if not.
    """
    for attr in ['subject', 'predicate', 'object']:
        if (t1[attr]['type'] != t2[attr]['type'] or
                t1[attr]['value'] != t2[attr]['value']):
            return False

    if t1['object'].get('language') != t2['object'].get('language'):
        return False
    if t1['object'].get('datatype') != t2['object'].get('datatype'):
        return False

    return True


def arrayify(value):
    """
    If value is a list, returns value, otherwise returns a list containing
    value as its only element.
    """
    return value if _is_array(value) else [value]


def has_property(subject, property):
    """
    Returns True if the given subject has a non-empty value for property.
    """
    if property in subject:
        value = subject[property]
        return not _is_array(value) or len(value) > 0
    return False


def has_value(subject, property, value):
    """
    Determines if the given value is a property of the given subject.

    :param subject: the subject to check.
    :param property: the property to check.
    :param value: the value to check.

    :return: True if the value exists, False if not.
    """
    if has_property(subject, property):
        val = subject[property]
        is_list = _is_list(val)
        if _is_array(val) or is_list:
            if is_list:
                val = val['@list']
            for v in val:
                if compare_values(value, v):
                    return True
        # avoid matching the set of values with an array value parameter
        elif not _is_array(value):
            return compare_values(value, val)
    return False


def add_value(subject, property, value, property_is_array=False,
              allow_duplicate=True):
    """
    Adds a value to a subject. If the value is a list, all values in the
    list are added.

    :param subject: the subject to add the value to.
    :param property: the property that relates the value to the subject.
    :param value: the value to add.
    :param property_is_array: True if the property is always a list.
    :param allow_duplicate: False to skip values already present (uses a
      shallow comparison of @id or @value).
    """
    if _is_array(value):
        if (len(value) == 0 and property_is_array and
                property not in subject):
            subject[property] = []
        for v in value:
            add_value(subject, property, v, property_is_array,
                      allow_duplicate)
    elif property in subject:
        has_value_ = (
            not allow_duplicate and has_value(subject, property, value))

        # make property a list if value not present or always a list
        if (not _is_array(subject[property]) and
                (not has_value_ or property_is_array)):
            subject[property] = [subject[property]]

        if not has_value_:
            subject[property].append(value)
    else:
        subject[property] = [value] if property_is_array else value


def get_values(subject, property):
    """
    Gets all of the values for a subject's property as a list.
    """
    return arrayify(subject.get(property) or [])


def compare_values(v1, v2):
    """
    Compares two JSON-LD values for equality. Two JSON-LD values are
    considered equal if:

    1. They are both primitives of the same type and value.
    2. They are both @values with the same @value, @type, @language,
      @direction and @index, OR
    3. They both have @ids that are the same.

    :param v1: the first value.
    :param v2: the second value.

    :return: True if v1 and v2 are considered equal, False if not.
    """
    # 1. equal primitives
    if not _is_object(v1) and not _is_object(v2) and v1 == v2:
        return _is_bool(v1) == _is_bool(v2)

    # 2. equal @values
    if (_is_value(v1) and _is_value(v2) and
            v1['@value'] == v2['@value'] and
            v1.get('@type') == v2.get('@type') and
            v1.get('@language') == v2.get('@language') and
            v1.get('@direction') == v2.get('@direction') and
            v1.get('@index') == v2.get('@index')):
        return _is_bool(v1['@value']) == _is_bool(v2['@value'])

    # 3. equal @ids
    if (_is_object(v1) and '@id' in v1 and
            _is_object(v2) and '@id' in v2):
        return v1['@id'] == v2['@id']

    return False


def compare_shortest_least(a, b):
    """
    Compares two strings first by length and then lexicographically.

    :return: -1 if a < b, 1 if a > b, 0 if a == b.
    """
    rval = (len(a) > len(b)) - (len(a) < len(b))
    if rval == 0:
        rval = (a > b) - (a < b)
    return rval


def _is_keyword(v):
    return _is_string(v) and v in KEYWORDS


def _is_object(v):
    return isinstance(v, dict)


def _is_empty_object(v):
    return _is_object(v) and len(v) == 0


def _is_array(v):
    return isinstance(v, list)


def _is_string(v):
    return isinstance(v, str)


def _is_bool(v):
    return isinstance(v, bool)


def _is_integer(v):
    return isinstance(v, Integral) and not isinstance(v, bool)


def _is_double(v):
    return not isinstance(v, Integral) and isinstance(v, Real)


def _is_subject(v):
    """
    Returns True if the given value is a subject with properties.
    """
    # Note: A value is a subject if all of these hold True:
    # 1. It is an Object.
    # 2. It is not a @value, @set, or @list.
    # 3. It has more than 1 key OR any existing key is not @id.
    if (_is_object(v) and
            '@value' not in v and '@set' not in v and '@list' not in v):
        return len(v) > 1 or '@id' not in v
    return False


def _is_subject_reference(v):
    return _is_object(v) and len(v) == 1 and '@id' in v


def _is_value(v):
    return _is_object(v) and '@value' in v


def _is_list(v):
    return _is_object(v) and '@list' in v


def _is_graph(v):
    """
    Returns True if the value is a graph object: an object with @graph and
    optionally @id or @index, nothing else.
    """
    return (_is_object(v) and '@graph' in v and
            len([k for k in v if k not in ('@id', '@index')]) == 1)


def _is_bnode(v):
    """
    Returns True if the given value is a blank node.
    """
    # Note: A value is a blank node if all of these hold True:
    # 1. It is an Object.
    # 2. If it has an @id key its value begins with '_:'.
    # 3. It has no keys OR is not a @value, @set, or @list.
    if _is_object(v):
        if '@id' in v:
            return _is_string(v['@id']) and v['@id'].startswith('_:')
        return (len(v) == 0 or
                not ('@value' in v or '@set' in v or '@list' in v))
    return False


def _is_absolute_iri(v):
    return _is_string(v) and ':' in v
