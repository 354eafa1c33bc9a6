import pytest

from jsonldcore import jsonld
from jsonldcore.errors import UnknownFormatError
from jsonldcore.formats import NQUADS, TURTLE, FormatRegistry, default_registry
from jsonldcore.model import RDFDataset

DOC = {
    "@id": "http://example.org/s",
    "http://example.org/p": "o",
}


class TestFormatRegistry:
    def test_default_codecs(self):
        registry = default_registry()
        assert NQUADS in registry
        assert TURTLE in registry
        assert 'application/nquads' in registry.parser_types

    def test_unknown_parser(self):
        with pytest.raises(UnknownFormatError) as excinfo:
            FormatRegistry().parser('text/x-unknown')
        assert excinfo.value.format == 'text/x-unknown'
        assert excinfo.value.code == 'unknown format'

    def test_register_and_unregister(self):
        registry = FormatRegistry()
        registry.register_serializer('text/x-count', lambda d: str(d.quad_count()))
        assert registry.serialize('text/x-count', RDFDataset()) == '0'
        registry.unregister('text/x-count')
        assert 'text/x-count' not in registry
        # unregistering twice is harmless
        registry.unregister_serializer('text/x-count')

    def test_copy_is_independent(self):
        registry = default_registry()
        copy = registry.copy()
        copy.unregister(TURTLE)
        assert TURTLE in registry
        assert TURTLE not in copy


class TestProcessorFormats:
    def test_processor_serializer(self):
        processor = jsonld.JsonLdProcessor()
        processor.register_rdf_serializer('text/x-count', lambda d: d.quad_count())
        assert processor.to_rdf(DOC, {'format': 'text/x-count'}) == 1

    def test_processors_do_not_share_registrations(self):
        first = jsonld.JsonLdProcessor()
        second = jsonld.JsonLdProcessor()
        first.register_rdf_serializer('text/x-count', lambda d: d.quad_count())
        with pytest.raises(UnknownFormatError):
            second.to_rdf(DOC, {'format': 'text/x-count'})

    def test_processor_parser(self):
        processor = jsonld.JsonLdProcessor()

        def parser(text):
            dataset = RDFDataset()
            dataset.add_triple('@default', {
                'subject': {'type': 'IRI', 'value': 'http://example.org/s'},
                'predicate': {'type': 'IRI', 'value': 'http://example.org/p'},
                'object': {'type': 'IRI', 'value': text},
            })
            return dataset

        processor.register_rdf_parser('text/x-object', parser)
        assert processor.from_rdf(
            'http://example.org/o', {'format': 'text/x-object'}) == [{
                '@id': 'http://example.org/s',
                'http://example.org/p': [{'@id': 'http://example.org/o'}],
            }]

        processor.unregister_rdf_parser('text/x-object')
        with pytest.raises(UnknownFormatError):
            processor.from_rdf('x', {'format': 'text/x-object'})

    def test_unknown_format_is_not_wrapped(self):
        with pytest.raises(UnknownFormatError):
            jsonld.to_rdf(DOC, {'format': 'text/x-unknown'})
        with pytest.raises(UnknownFormatError):
            jsonld.normalize(DOC, {'format': 'text/x-unknown'})
        with pytest.raises(UnknownFormatError):
            jsonld.normalize('', {'inputFormat': 'text/x-unknown'})
