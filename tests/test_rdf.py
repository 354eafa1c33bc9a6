import copy

import pytest

from jsonldcore import jsonld
from jsonldcore.errors import InvalidInputError, RdfConversionError
from jsonldcore.formats import NQUADS
from jsonldcore.model import (
    RDF_FIRST, RDF_LANGSTRING, RDF_NIL, RDF_REST, RDF_TYPE, XSD_BOOLEAN,
    XSD_DOUBLE, XSD_INTEGER, XSD_STRING)
from jsonldcore.rdf import canonical_double, object_to_rdf, rdf_to_object

EX = 'http://example.org/'


class TestCanonicalDouble:
    @pytest.mark.parametrize('value, expected', [
        (45, '4.5E1'),
        (5.5, '5.5E0'),
        (1.0, '1.0E0'),
        (0.001, '1.0E-3'),
        (-2.25, '-2.25E0'),
        (1.1e20, '1.1E20'),
    ])
    def test_lexical_form(self, value, expected):
        assert canonical_double(value) == expected


class TestObjectToRdf:
    @pytest.mark.parametrize('item, value, datatype', [
        ({'@value': True}, 'true', XSD_BOOLEAN),
        ({'@value': False}, 'false', XSD_BOOLEAN),
        ({'@value': 5}, '5', XSD_INTEGER),
        ({'@value': 5.5}, '5.5E0', XSD_DOUBLE),
        ({'@value': 5, '@type': XSD_DOUBLE}, '5.0E0', XSD_DOUBLE),
        ({'@value': '5', '@type': XSD_DOUBLE}, '5.0E0', XSD_DOUBLE),
        ({'@value': 'NaN!', '@type': XSD_DOUBLE}, 'NaN!', XSD_DOUBLE),
        ({'@value': 'x'}, 'x', XSD_STRING),
        ({'@value': 'x', '@type': EX + 't'}, 'x', EX + 't'),
    ])
    def test_literals(self, item, value, datatype):
        assert object_to_rdf(item) == {
            'type': 'literal', 'value': value, 'datatype': datatype}

    def test_language(self):
        assert object_to_rdf({'@value': 'x', '@language': 'en'}) == {
            'type': 'literal',
            'value': 'x',
            'datatype': RDF_LANGSTRING,
            'language': 'en',
        }

    def test_direction_is_dropped(self):
        rval = object_to_rdf(
            {'@value': 'x', '@language': 'ar', '@direction': 'rtl'})
        assert rval['language'] == 'ar'
        assert rval['datatype'] == RDF_LANGSTRING

    def test_resources(self):
        assert object_to_rdf({'@id': EX + 'a'}) == {
            'type': 'IRI', 'value': EX + 'a'}
        assert object_to_rdf({'@id': '_:b0'}) == {
            'type': 'blank node', 'value': '_:b0'}

    def test_relative_iri(self):
        assert object_to_rdf({'@id': 'relative'}) is None


class TestRdfToObject:
    def test_resources(self):
        assert rdf_to_object({'type': 'IRI', 'value': EX}) == {'@id': EX}

    @pytest.mark.parametrize('value, datatype, expected', [
        ('true', XSD_BOOLEAN, True),
        ('5', XSD_INTEGER, 5),
        ('5.5E0', XSD_DOUBLE, 5.5),
    ])
    def test_native_types(self, value, datatype, expected):
        o = {'type': 'literal', 'value': value, 'datatype': datatype}
        assert rdf_to_object(o) == {'@value': expected}
        assert rdf_to_object(o, use_native_types=False) == {
            '@value': value, '@type': datatype}

    @pytest.mark.parametrize('value, datatype', [
        ('01', XSD_INTEGER),
        ('5.5', XSD_DOUBLE),
        ('yes', XSD_BOOLEAN),
    ])
    def test_non_canonical_lexical_forms_stay_typed(self, value, datatype):
        o = {'type': 'literal', 'value': value, 'datatype': datatype}
        assert rdf_to_object(o) == {'@value': value, '@type': datatype}

    def test_string(self):
        o = {'type': 'literal', 'value': 'x', 'datatype': XSD_STRING}
        assert rdf_to_object(o) == {'@value': 'x'}

    def test_language(self):
        o = {'type': 'literal', 'value': 'x', 'datatype': RDF_LANGSTRING,
             'language': 'en'}
        assert rdf_to_object(o) == {'@value': 'x', '@language': 'en'}


class TestToRdf:
    def test_values(self):
        doc = {
            '@id': EX + 's',
            EX + 'p': [
                {'@value': True}, 5, 5.5, {'@value': 'x', '@language': 'en'}
            ],
        }
        nquads = jsonld.to_rdf(doc, {'format': NQUADS})
        assert nquads == (
            '<http://example.org/s> <http://example.org/p> "5"'
            '^^<http://www.w3.org/2001/XMLSchema#integer> .\n'
            '<http://example.org/s> <http://example.org/p> "5.5E0"'
            '^^<http://www.w3.org/2001/XMLSchema#double> .\n'
            '<http://example.org/s> <http://example.org/p> "true"'
            '^^<http://www.w3.org/2001/XMLSchema#boolean> .\n'
            '<http://example.org/s> <http://example.org/p> "x"@en .\n'
        )

    def test_type(self):
        dataset = jsonld.to_rdf({'@id': EX + 's', '@type': EX + 'T'})
        assert dataset['@default'] == [{
            'subject': {'type': 'IRI', 'value': EX + 's'},
            'predicate': {'type': 'IRI', 'value': RDF_TYPE},
            'object': {'type': 'IRI', 'value': EX + 'T'},
        }]

    def test_list(self):
        nquads = jsonld.to_rdf(
            {'@id': EX + 's', EX + 'p': {'@list': ['a']}}, {'format': NQUADS})
        assert nquads == (
            '<http://example.org/s> <http://example.org/p> _:b0 .\n'
            '_:b0 <' + RDF_FIRST + '> "a" .\n'
            '_:b0 <' + RDF_REST + '> <' + RDF_NIL + '> .\n'
        )

    def test_empty_list(self):
        dataset = jsonld.to_rdf({'@id': EX + 's', EX + 'p': {'@list': []}})
        assert [t['object']['value'] for t in dataset['@default']] == [
            RDF_NIL]

    def test_blank_nodes_are_relabeled(self):
        dataset = jsonld.to_rdf({
            '@id': '_:foo', EX + 'p': {'@id': '_:bar'}})
        triple = dataset['@default'][0]
        assert triple['subject'] == {'type': 'blank node', 'value': '_:b0'}
        assert triple['object'] == {'type': 'blank node', 'value': '_:b1'}

    def test_named_graph(self):
        nquads = jsonld.to_rdf({
            '@id': EX + 'g',
            '@graph': {'@id': EX + 's', EX + 'p': 'x'},
        }, {'format': NQUADS})
        assert nquads == (
            '<http://example.org/s> <http://example.org/p> "x" '
            '<http://example.org/g> .\n'
        )

    def test_relative_iris_are_skipped(self):
        dataset = jsonld.to_rdf({
            '@id': 'relative',
            EX + 'p': [{'@id': 'other'}, 'x'],
        })
        assert dataset.quad_count() == 0

    def test_base_resolves_relative_iris(self):
        dataset = jsonld.to_rdf(
            {'@id': 'relative', EX + 'p': 'x'}, {'base': EX})
        assert dataset['@default'][0]['subject']['value'] == EX + 'relative'

    def test_generalized_rdf(self):
        doc = {'@id': EX + 's', '_:p': 'x'}
        assert jsonld.to_rdf(doc).quad_count() == 0
        dataset = jsonld.to_rdf(doc, {'produceGeneralizedRdf': True})
        assert dataset['@default'][0]['predicate']['type'] == 'blank node'

    def test_input_is_not_modified(self):
        doc = {
            '@context': {'@vocab': EX},
            '@id': '_:a',
            'p': {'@list': [1, 2]},
        }
        original = copy.deepcopy(doc)
        jsonld.to_rdf(doc)
        assert doc == original

    def test_namespaces(self):
        doc = {
            '@context': {'ex': EX, 'name': EX + 'name'},
            '@id': 'ex:s',
            'name': 'x',
        }
        assert jsonld.to_rdf(doc).namespaces == {}
        dataset = jsonld.to_rdf(doc, {'useNamespaces': True})
        assert dataset.namespaces == {'ex': EX}

    def test_namespaces_from_array_input(self):
        doc = [
            {'@context': {'ex': EX}, '@id': 'ex:s', 'ex:p': 'x'},
            {'@context': {'foaf': 'http://xmlns.com/foaf/0.1/'},
             '@id': 'ex:t', 'foaf:name': 'y'},
        ]
        dataset = jsonld.to_rdf(doc, {'useNamespaces': True})
        assert dataset.namespaces == {
            'ex': EX, 'foaf': 'http://xmlns.com/foaf/0.1/'}

    def test_callback(self):
        seen = []

        def callback(dataset):
            seen.append(dataset)
            return 'done'

        rval = jsonld.to_rdf(
            {'@id': EX + 's', EX + 'p': 'x'},
            {'format': NQUADS, 'callback': callback})
        assert rval == 'done'
        assert len(seen) == 1
        assert seen[0].quad_count() == 1
        assert seen[0]['@default'][0]['object']['value'] == 'x'

    def test_expansion_errors_are_wrapped(self):
        with pytest.raises(RdfConversionError) as excinfo:
            jsonld.to_rdf({'@id': EX + 's', EX + 'p': {'@value': {'a': 1}}})
        assert excinfo.value.code == 'invalid value object value'


class TestFromRdf:
    NQUADS = (
        '<http://example.org/s> <http://example.org/p> "5"'
        '^^<http://www.w3.org/2001/XMLSchema#integer> .\n'
        '<http://example.org/s> <' + RDF_TYPE + '> <http://example.org/T> .\n'
    )

    def test_default_options(self):
        assert jsonld.from_rdf(self.NQUADS) == [{
            '@id': EX + 's',
            '@type': [EX + 'T'],
            EX + 'p': [{'@value': 5}],
        }]

    def test_rdf_type(self):
        output = jsonld.from_rdf(self.NQUADS, {'useRdfType': True})
        assert output[0][RDF_TYPE] == [{'@id': EX + 'T'}]
        assert '@type' not in output[0]

    def test_no_native_types(self):
        output = jsonld.from_rdf(self.NQUADS, {'useNativeTypes': False})
        assert output[0][EX + 'p'] == [{'@value': '5', '@type': XSD_INTEGER}]

    def test_list(self):
        doc = {'@id': EX + 's', EX + 'p': {'@list': ['a', 1]}}
        output = jsonld.from_rdf(jsonld.to_rdf(doc))
        assert output == [{
            '@id': EX + 's',
            EX + 'p': [{'@list': [{'@value': 'a'}, {'@value': 1}]}],
        }]

    def test_empty_list(self):
        doc = {'@id': EX + 's', EX + 'p': {'@list': []}}
        output = jsonld.from_rdf(jsonld.to_rdf(doc))
        assert output == [{'@id': EX + 's', EX + 'p': [{'@list': []}]}]

    def test_named_graph(self):
        output = jsonld.from_rdf(
            '<http://example.org/s> <http://example.org/p> "x" '
            '<http://example.org/g> .\n')
        assert output == [{
            '@id': EX + 'g',
            '@graph': [{'@id': EX + 's', EX + 'p': [{'@value': 'x'}]}],
        }]

    def test_dataset_input(self):
        dataset = jsonld.to_rdf({'@id': EX + 's', EX + 'p': 'x'})
        assert jsonld.from_rdf(dataset) == [
            {'@id': EX + 's', EX + 'p': [{'@value': 'x'}]}]

    def test_compacted(self):
        doc = {'@context': {'ex': EX}, '@id': 'ex:s', 'ex:p': 'x'}
        dataset = jsonld.to_rdf(doc, {'useNamespaces': True})
        output = jsonld.from_rdf(dataset, {'outputForm': 'compacted'})
        assert output == {
            '@context': {'ex': EX}, '@id': 'ex:s', 'ex:p': 'x'}

    def test_flattened(self):
        output = jsonld.from_rdf(self.NQUADS, {'outputForm': 'flattened'})
        assert output == {'@graph': [{
            '@id': EX + 's',
            '@type': EX + 'T',
            EX + 'p': 5,
        }]}

    def test_invalid_output_form(self):
        with pytest.raises(InvalidInputError) as excinfo:
            jsonld.from_rdf(self.NQUADS, {'outputForm': 'framed'})
        assert excinfo.value.code == 'invalid output form'

    def test_parse_errors_are_wrapped(self):
        with pytest.raises(RdfConversionError) as excinfo:
            jsonld.from_rdf('not n-quads\n')
        assert excinfo.value.cause is not None

    def test_custom_parser(self):
        def parser(input_):
            return {'@default': [{
                'subject': {'type': 'IRI', 'value': EX + input_},
                'predicate': {'type': 'IRI', 'value': EX + 'p'},
                'object': {'type': 'literal', 'value': 'x',
                           'datatype': XSD_STRING},
            }]}

        output = jsonld.from_rdf('s', {'parser': parser})
        assert output == [{'@id': EX + 's', EX + 'p': [{'@value': 'x'}]}]
