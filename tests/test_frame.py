import pytest

from jsonldcore import framing, jsonld
from jsonldcore.errors import FrameError

CTX = {'@vocab': 'http://example.org/'}


def frame_with(frame, input_, options=None):
    return jsonld.frame(input_, dict(frame, **{'@context': CTX}), options)


class TestEmbed:
    INPUT = {
        '@context': CTX,
        '@graph': [
            {
                '@id': 'http://example.org/a',
                'p1': {'@id': 'http://example.org/c'},
                'p2': {'@id': 'http://example.org/c'},
            },
            {'@id': 'http://example.org/c', 'name': 'C'},
        ],
    }

    def test_once(self):
        framed = frame_with({'@id': 'http://example.org/a'}, self.INPUT)
        assert framed['@graph'] == [{
            '@id': 'http://example.org/a',
            'p1': {'@id': 'http://example.org/c', 'name': 'C'},
            'p2': {'@id': 'http://example.org/c'},
        }]

    def test_always(self):
        framed = frame_with(
            {'@id': 'http://example.org/a', '@embed': '@always'}, self.INPUT)
        assert framed['@graph'] == [{
            '@id': 'http://example.org/a',
            'p1': {'@id': 'http://example.org/c', 'name': 'C'},
            'p2': {'@id': 'http://example.org/c', 'name': 'C'},
        }]

    def test_never(self):
        framed = frame_with({
            '@id': 'http://example.org/a',
            'p1': {'@embed': '@never'},
            'p2': {'@embed': '@never'},
        }, self.INPUT)
        assert framed['@graph'] == [{
            '@id': 'http://example.org/a',
            'p1': {'@id': 'http://example.org/c'},
            'p2': {'@id': 'http://example.org/c'},
        }]

    def test_never_option_references_top_level_matches(self):
        framed = frame_with(
            {'@id': 'http://example.org/a'}, self.INPUT, {'embed': '@never'})
        assert framed['@graph'] == [{'@id': 'http://example.org/a'}]

    def test_boolean_embed_flag(self):
        framed = frame_with(
            {'@id': 'http://example.org/a', 'p1': {'@embed': False}},
            self.INPUT)
        assert framed['@graph'][0]['p1'] == {'@id': 'http://example.org/c'}

    def test_each_top_level_match_embeds(self):
        input_ = {
            '@context': CTX,
            '@graph': [
                {'@id': 'http://example.org/a', '@type': 'T',
                 'ref': {'@id': 'http://example.org/c'}},
                {'@id': 'http://example.org/b', '@type': 'T',
                 'ref': {'@id': 'http://example.org/c'}},
                {'@id': 'http://example.org/c', 'name': 'C'},
            ],
        }
        framed = frame_with({'@type': 'T'}, input_)
        assert [n['ref'] for n in framed['@graph']] == [
            {'@id': 'http://example.org/c', 'name': 'C'},
            {'@id': 'http://example.org/c', 'name': 'C'},
        ]

    def test_circular_reference_is_not_embedded(self):
        input_ = {
            '@context': CTX,
            '@graph': [
                {'@id': 'http://example.org/a', 'knows': {'@id': 'http://example.org/b'}},
                {'@id': 'http://example.org/b', 'knows': {'@id': 'http://example.org/a'}},
            ],
        }
        framed = frame_with(
            {'@id': 'http://example.org/a', '@embed': '@always'}, input_)
        assert framed['@graph'] == [{
            '@id': 'http://example.org/a',
            'knows': {
                '@id': 'http://example.org/b',
                'knows': {'@id': 'http://example.org/a'},
            },
        }]

    @pytest.mark.parametrize('embed', ['@link', 'yes', 1])
    def test_invalid_embed(self, embed):
        with pytest.raises(FrameError) as excinfo:
            frame_with({'@id': 'http://example.org/a'}, self.INPUT, {'embed': embed})
        assert excinfo.value.code == 'invalid @embed value'

    def test_invalid_embed_in_frame(self):
        with pytest.raises(FrameError) as excinfo:
            frame_with({'@id': 'http://example.org/a', '@embed': '@link'}, self.INPUT)
        assert excinfo.value.code == 'invalid @embed value'


class TestMatching:
    INPUT = {
        '@context': CTX,
        '@graph': [
            {'@id': 'http://example.org/a', '@type': 'T', 'name': 'A'},
            {'@id': 'http://example.org/b', 'age': 5},
            {'@id': 'http://example.org/c', 'other': 'x'},
        ],
    }

    def ids(self, framed):
        return [n['@id'] for n in framed['@graph']]

    def test_type(self):
        framed = frame_with({'@type': 'T'}, self.INPUT)
        assert framed['@graph'] == [
            {'@id': 'http://example.org/a', '@type': 'T', 'name': 'A'}
        ]

    def test_any_type(self):
        framed = frame_with({'@type': {}}, self.INPUT)
        assert self.ids(framed) == ['http://example.org/a']

    def test_no_type(self):
        framed = frame_with({'@type': []}, self.INPUT)
        assert self.ids(framed) == [
            'http://example.org/b', 'http://example.org/c']

    def test_duck_typing_requires_all(self):
        framed = frame_with({'name': {}, 'age': {}}, self.INPUT)
        assert framed['@graph'] == []

    def test_duck_typing_require_any(self):
        framed = frame_with(
            {'@requireAll': False, 'name': {}, 'age': {}}, self.INPUT)
        assert framed['@graph'] == [
            {'@id': 'http://example.org/a', '@type': 'T', 'name': 'A', 'age': None},
            {'@id': 'http://example.org/b', 'name': None, 'age': 5},
        ]

    def test_value_pattern(self):
        framed = frame_with({'age': {'@value': 5}}, self.INPUT)
        assert self.ids(framed) == ['http://example.org/b']

    def test_wildcard_frame(self):
        framed = frame_with({}, self.INPUT)
        assert len(framed['@graph']) == 3


class TestFlags:
    INPUT = {
        '@context': CTX,
        '@id': 'http://example.org/a',
        '@type': 'T',
        'name': 'A',
        'age': 5,
    }

    def test_explicit(self):
        framed = frame_with(
            {'@type': 'T', '@explicit': True, 'name': {}}, self.INPUT)
        assert framed['@graph'] == [
            {'@id': 'http://example.org/a', '@type': 'T', 'name': 'A'}
        ]

    def test_explicit_keeps_frame_order(self):
        framed = frame_with(
            {'@type': 'T', '@explicit': True, 'name': {}, 'age': {}},
            self.INPUT, {'omitGraph': True})
        assert list(framed) == ['@context', '@id', '@type', 'name', 'age']

    def test_default(self):
        framed = frame_with(
            {'@type': 'T', 'nick': {'@default': 'none'}}, self.INPUT)
        assert framed['@graph'][0]['nick'] == 'none'

    def test_omit_default(self):
        framed = frame_with(
            {'@type': 'T', 'nick': {'@omitDefault': True}}, self.INPUT)
        assert 'nick' not in framed['@graph'][0]

    def test_omit_default_option(self):
        framed = frame_with(
            {'@type': 'T', 'nick': {}}, self.INPUT, {'omitDefault': True})
        assert 'nick' not in framed['@graph'][0]

    def test_omit_graph(self):
        framed = frame_with({'@type': 'T'}, self.INPUT, {'omitGraph': True})
        assert framed == {
            '@context': CTX,
            '@id': 'http://example.org/a',
            '@type': 'T',
            'name': 'A',
            'age': 5,
        }


class TestBlankNodes:
    INPUT = {
        '@context': CTX,
        '@type': 'T',
        'child': {'name': 'x'},
    }

    def test_single_use_identifiers_are_pruned(self):
        framed = frame_with({'@type': 'T'}, self.INPUT)
        assert framed['@graph'] == [{'@type': 'T', 'child': {'name': 'x'}}]

    def test_pruning_off(self):
        framed = frame_with(
            {'@type': 'T'}, self.INPUT, {'pruneBlankNodeIdentifiers': False})
        assert framed['@graph'] == [{
            '@id': '_:b0',
            '@type': 'T',
            'child': {'@id': '_:b1', 'name': 'x'},
        }]


class TestReverse:
    def test_reverse_frame(self):
        input_ = {
            '@context': CTX,
            '@id': 'http://example.org/a',
            'parent': {'@id': 'http://example.org/p'},
        }
        framed = frame_with(
            {'@id': 'http://example.org/p', '@reverse': {'parent': {}}}, input_)
        assert framed['@graph'] == [{
            '@id': 'http://example.org/p',
            '@reverse': {
                'parent': {
                    '@id': 'http://example.org/a',
                    'parent': {'@id': 'http://example.org/p'},
                },
            },
        }]


class TestInvalidFrames:
    def test_frame_must_be_an_object(self):
        with pytest.raises(FrameError) as excinfo:
            jsonld.frame({}, [{}])
        assert excinfo.value.code == 'invalid frame'

    def test_expansion_errors_are_wrapped(self):
        with pytest.raises(FrameError) as excinfo:
            jsonld.frame({'@id': 5, 'http://example.org/p': 'x'}, {})
        assert excinfo.value.code == 'invalid @id value'

    def test_unexpected_framing_errors_are_wrapped(self, monkeypatch):
        def broken(self, *args, **kwargs):
            raise KeyError('@id')

        monkeypatch.setattr(framing.Framer, 'frame', broken)
        with pytest.raises(FrameError) as excinfo:
            jsonld.frame({'@id': 'http://example.org/a'}, {})
        assert isinstance(excinfo.value.cause, KeyError)
