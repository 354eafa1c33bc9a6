import pytest

from jsonldcore import jsonld
from jsonldcore.context import (
    ActiveContext, ActiveContextCache, compact_iri, expand_iri, parse)
from jsonldcore.errors import ContextError

from conftest import static_loader


def process(local_ctx, base='http://example.com/doc'):
    return jsonld.process_context(None, local_ctx, {'base': base})


class TestProcessContext:
    def test_initial_context(self):
        active_ctx = jsonld.process_context(None, None, {'base': 'http://a/'})
        assert isinstance(active_ctx, ActiveContext)
        assert active_ctx.base == 'http://a/'
        assert active_ctx.mappings == {}

    def test_terms_and_prefixes(self):
        active_ctx = process({
            'ex': 'http://example.org/',
            'name': 'ex:name',
            'knows': {'@id': 'ex:knows', '@type': '@id'},
        })
        assert active_ctx.mappings['name']['@id'] == 'http://example.org/name'
        assert active_ctx.mappings['knows']['@type'] == '@id'
        assert active_ctx.mappings['ex']['_prefix'] is True

    def test_term_order_does_not_matter(self):
        active_ctx = process({'name': 'ex:name', 'ex': 'http://example.org/'})
        assert active_ctx.mappings['name']['@id'] == 'http://example.org/name'

    def test_vocab_language_direction(self):
        active_ctx = process({
            '@vocab': 'http://example.org/',
            '@language': 'EN',
            '@direction': 'rtl',
        })
        assert active_ctx.vocab == 'http://example.org/'
        assert active_ctx.language == 'en'
        assert active_ctx.direction == 'rtl'

    def test_relative_base_is_resolved(self):
        active_ctx = process({'@base': 'sub/'}, base='http://example.com/a/doc')
        assert active_ctx.base == 'http://example.com/a/sub/'

    def test_null_resets_to_initial(self):
        active_ctx = process([{'name': 'http://example.org/name'}, None])
        assert active_ctx.mappings == {}
        assert active_ctx.base == 'http://example.com/doc'

    def test_null_term(self):
        active_ctx = process([
            {'name': 'http://example.org/name'},
            {'name': None},
        ])
        assert active_ctx.mappings['name'] is None
        assert expand_iri(active_ctx, 'name', vocab=True) is None

    def test_input_is_not_mutated(self):
        ctx = {'@context': {'name': 'http://example.org/name'}}
        process(ctx)
        assert ctx == {'@context': {'name': 'http://example.org/name'}}

    @pytest.mark.parametrize(
        'local_ctx,code',
        [
            ({'@id': 'http://example.org/'}, 'keyword redefinition'),
            ({'a': 'b', 'b': 'a'}, 'cyclic IRI mapping'),
            ({'@vocab': 'relative'}, 'invalid vocab mapping'),
            ({'@language': 5}, 'invalid default language'),
            ({'@direction': 'up'}, 'invalid base direction'),
            ({'@version': 2.0}, 'invalid @version value'),
            ({'name': 5}, 'invalid term definition'),
            ({'name': {'@type': 5, '@id': 'http://e/n'}}, 'invalid type mapping'),
            ({'name': {'@id': 'http://e/n', '@prefix': 'yes'}}, 'invalid @prefix value'),
            ({'rev': {'@reverse': 'http://e/r', '@id': 'http://e/x'}},
             'invalid reverse property'),
            (5, 'invalid local context'),
        ],
    )
    def test_invalid_contexts(self, local_ctx, code):
        with pytest.raises(ContextError) as excinfo:
            process(local_ctx)
        assert excinfo.value.code == code


class TestRemoteContexts:
    def test_remote_context_is_loaded_once(self):
        loader = static_loader({
            'http://example.com/ctx': {'@context': {'name': 'http://example.org/name'}},
        })
        doc = {
            '@context': 'http://example.com/ctx',
            'name': 'a',
            'http://example.org/child': {'@context': 'http://example.com/ctx', 'name': 'b'},
        }
        expanded = jsonld.expand(doc, {'documentLoader': loader})
        assert expanded[0]['http://example.org/name'] == [{'@value': 'a'}]
        assert loader.calls == ['http://example.com/ctx']

    def test_relative_remote_context(self):
        loader = static_loader({
            'http://example.com/contexts/ctx': {'@context': {'name': 'http://example.org/name'}},
        })
        doc = {'@context': 'contexts/ctx', 'name': 'a'}
        expanded = jsonld.expand(
            doc, {'base': 'http://example.com/doc', 'documentLoader': loader})
        assert expanded == [{'http://example.org/name': [{'@value': 'a'}]}]

    def test_cyclic_remote_contexts(self):
        loader = static_loader({
            'http://example.com/a': {'@context': 'http://example.com/b'},
            'http://example.com/b': {'@context': 'http://example.com/a'},
        })
        with pytest.raises(jsonld.JsonLdError) as excinfo:
            jsonld.expand(
                {'@context': 'http://example.com/a'}, {'documentLoader': loader})
        assert excinfo.value.code == 'recursive context inclusion'

    def test_failed_remote_context(self):
        loader = static_loader({})
        with pytest.raises(jsonld.JsonLdError) as excinfo:
            jsonld.expand(
                {'@context': 'http://example.com/missing'},
                {'documentLoader': loader})
        assert excinfo.value.code == 'loading remote context failed'

    def test_remote_document_without_object(self):
        loader = static_loader({'http://example.com/list': [1, 2]})
        with pytest.raises(jsonld.JsonLdError) as excinfo:
            jsonld.expand(
                {'@context': 'http://example.com/list'},
                {'documentLoader': loader})
        assert excinfo.value.code == 'invalid remote context'


class TestExpandIri:
    def test_forms(self):
        active_ctx = process({
            '@vocab': 'http://vocab.org/',
            'ex': 'http://example.org/',
        })
        assert expand_iri(active_ctx, 'ex:a', vocab=True) == 'http://example.org/a'
        assert expand_iri(active_ctx, 'term', vocab=True) == 'http://vocab.org/term'
        assert expand_iri(active_ctx, 'rel', base=True) == 'http://example.com/rel'
        assert expand_iri(active_ctx, '_:b0', vocab=True) == '_:b0'
        assert expand_iri(active_ctx, 'http://x/y', vocab=True) == 'http://x/y'
        assert expand_iri(active_ctx, '@type', vocab=True) == '@type'


class TestCompactIri:
    def test_term_is_preferred(self):
        active_ctx = process({
            'ex': 'http://example.org/',
            'name': 'http://example.org/name',
        })
        assert compact_iri(active_ctx, 'http://example.org/name', vocab=True) == 'name'
        assert compact_iri(active_ctx, 'http://example.org/other', vocab=True) == 'ex:other'

    def test_shortest_then_least_prefix(self):
        active_ctx = process({
            'long': 'http://example.org/',
            'b': 'http://example.org/',
            'a': 'http://example.org/',
        })
        assert compact_iri(active_ctx, 'http://example.org/x', vocab=True) == 'a:x'

    def test_vocab_relative(self):
        active_ctx = process({'@vocab': 'http://example.org/'})
        assert compact_iri(active_ctx, 'http://example.org/x', vocab=True) == 'x'

    def test_document_relative(self):
        active_ctx = process({}, base='http://example.com/a/doc')
        assert compact_iri(active_ctx, 'http://example.com/a/other') == 'other'

    def test_keyword_alias(self):
        active_ctx = process({'id': '@id'})
        assert compact_iri(active_ctx, '@id') == 'id'


class TestActiveContextCache:
    def test_lru_eviction(self):
        cache = ActiveContextCache(size=2)
        active_ctx = ActiveContext(base='')
        for i in range(3):
            local_ctx = {'t': 'http://example.org/%d' % i}
            cache.set(active_ctx, local_ctx, parse(active_ctx, local_ctx))
        assert cache.get(active_ctx, {'t': 'http://example.org/0'}) is None
        assert cache.get(active_ctx, {'t': 'http://example.org/2'}) is not None
