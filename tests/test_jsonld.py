import pytest

from jsonldcore import jsonld
from jsonldcore.errors import ExpansionError

from conftest import static_loader


def raise_this(value):
    raise ValueError(value)


class TestExpand:
    CTX = {"foo": {"@id": "http://example.com/foo"}}

    def test_silently_ignored(self):
        input = {"fooo": "bar"}
        got = jsonld.expand(input, {"expandContext": self.CTX})
        assert got == []

    def test_silently_ignored_complex(self):
        input = {
            "@id": "foo",
            "foo": "bar",
            "fooo": "baz",
            "http://example.com/other": "blah",
        }
        expected = [
            {
                "@id": "foo",
                "http://example.com/foo": [{"@value": "bar"}],
                "http://example.com/other": [{"@value": "blah"}],
            }
        ]
        got = jsonld.expand(input, {"expandContext": self.CTX})
        assert got == expected

    def test_strict_fails(self):
        input = {"fooo": "bar"}
        with pytest.raises(ExpansionError) as excinfo:
            jsonld.expand(input, {"expandContext": self.CTX, "strict": True})
        assert excinfo.value.code == "dropped key"

    def test_strict_fails_complex(self):
        input = {
            "@id": "foo",
            "foo": "bar",
            "fooo": "baz",
            "http://example.com/other": "blah",
        }
        with pytest.raises(ExpansionError):
            jsonld.expand(input, {"expandContext": self.CTX, "strict": True})

    def test_dropped_keys(self):
        input = {"fooo": "bar"}
        dk = set()
        got = jsonld.expand(input, {"expandContext": self.CTX, "droppedKeys": dk})
        assert got == []
        assert dk == {"fooo"}

    def test_on_key_dropped(self):
        input = {"@id": "foo", "foo": "bar", "fooo": "baz"}
        dropped = []
        got = jsonld.expand(
            input, {"expandContext": self.CTX}, on_key_dropped=dropped.append
        )
        assert got == [{"@id": "foo", "http://example.com/foo": [{"@value": "bar"}]}]
        assert dropped == ["fooo"]

    def test_on_key_dropped_raising(self):
        with pytest.raises(ExpansionError) as excinfo:
            jsonld.expand(
                {"fooo": "bar"}, {"expandContext": self.CTX}, on_key_dropped=raise_this
            )
        assert isinstance(excinfo.value.cause, ValueError)

    def test_missing_base(self):
        input = {
            "@context": {"property": "http://example.com/vocab#property"},
            "@id": "../document-relative",
            "@type": "#document-relative",
            "property": {
                "@context": {"@base": "http://example.org/test/"},
                "@id": "../document-base-overwritten",
                "@type": "#document-base-overwritten",
                "property": [
                    {
                        "@context": None,
                        "@id": "../document-relative",
                        "@type": "#document-relative",
                        "property": "context completely reset, drops property",
                    },
                    {
                        "@context": {"@base": None},
                        "@id": "../document-relative",
                        "@type": "#document-relative",
                        "property": "only @base is cleared",
                    },
                ],
            },
        }

        expected = [
            {
                "@id": "https://w3c.github.io/json-ld-api/tests/document-relative",
                "@type": [
                    "https://w3c.github.io/json-ld-api/tests/expand/0060-in.jsonld#document-relative"
                ],
                "http://example.com/vocab#property": [
                    {
                        "@id": "http://example.org/document-base-overwritten",
                        "@type": ["http://example.org/test/#document-base-overwritten"],
                        "http://example.com/vocab#property": [
                            {
                                "@id": "https://w3c.github.io/json-ld-api/tests/document-relative",
                                "@type": [
                                    "https://w3c.github.io/json-ld-api/tests/expand/0060-in.jsonld#document-relative"
                                ],
                            },
                            {
                                "@id": "../document-relative",
                                "@type": ["#document-relative"],
                                "http://example.com/vocab#property": [
                                    {"@value": "only @base is cleared"}
                                ],
                            },
                        ],
                    }
                ],
            }
        ]
        got = jsonld.expand(
            input,
            {"base": "https://w3c.github.io/json-ld-api/tests/expand/0060-in.jsonld"},
        )
        assert got == expected


class TestFrame:
    LIBRARY = {
        "@context": {
            "dc": "http://purl.org/dc/elements/1.1/",
            "ex": "http://example.org/vocab#",
            "ex:contains": {"@type": "@id"},
        },
        "@graph": [
            {
                "@id": "http://example.org/test/#library",
                "@type": "ex:Library",
                "ex:contains": "http://example.org/test#book",
            },
            {
                "@id": "http://example.org/test#book",
                "@type": "ex:Book",
                "dc:title": "My Book",
                "ex:contains": "http://example.org/test#chapter",
            },
            {
                "@id": "http://example.org/test#chapter",
                "@type": "ex:Chapter",
                "dc:title": "Chapter One",
            },
        ],
    }

    LIBRARY_CONTEXT = {
        "dc": "http://purl.org/dc/elements/1.1/",
        "ex": "http://example.org/vocab#",
    }

    LIBRARY_FRAME = {
        "@type": "ex:Library",
        "ex:contains": {"@type": "ex:Book", "ex:contains": {"@type": "ex:Chapter"}},
    }

    FRAMED_LIBRARY = [
        {
            "@id": "http://example.org/test/#library",
            "@type": "ex:Library",
            "ex:contains": {
                "@id": "http://example.org/test#book",
                "@type": "ex:Book",
                "dc:title": "My Book",
                "ex:contains": {
                    "@id": "http://example.org/test#chapter",
                    "@type": "ex:Chapter",
                    "dc:title": "Chapter One",
                },
            },
        }
    ]

    def test_library(self):
        frame = dict(self.LIBRARY_FRAME, **{"@context": self.LIBRARY_CONTEXT})
        framed = jsonld.frame(self.LIBRARY, frame)
        assert framed == {
            "@context": self.LIBRARY_CONTEXT,
            "@graph": self.FRAMED_LIBRARY,
        }

    def test_remote_frame_with_link_header_context(self):
        loader = static_loader(
            {
                "http://example.com/frame.json": self.LIBRARY_FRAME,
                "http://example.com/frame-context.json": {
                    "@context": self.LIBRARY_CONTEXT
                },
            },
            context_urls={
                "http://example.com/frame.json": "http://example.com/frame-context.json"
            },
        )
        framed = jsonld.frame(
            self.LIBRARY,
            "http://example.com/frame.json",
            options={"documentLoader": loader},
        )
        assert framed == {
            "@context": "http://example.com/frame-context.json",
            "@graph": self.FRAMED_LIBRARY,
        }

    def test_remote_frame_keeps_local_context_first(self):
        frame = dict(self.LIBRARY_FRAME, **{"@context": {"dc": self.LIBRARY_CONTEXT["dc"]}})
        loader = static_loader(
            {
                "http://example.com/frame.json": frame,
                "http://example.com/frame-context.json": {
                    "@context": {"ex": self.LIBRARY_CONTEXT["ex"]}
                },
            },
            context_urls={
                "http://example.com/frame.json": "http://example.com/frame-context.json"
            },
        )
        framed = jsonld.frame(
            self.LIBRARY,
            "http://example.com/frame.json",
            options={"documentLoader": loader},
        )
        assert framed["@context"] == [
            {"dc": "http://purl.org/dc/elements/1.1/"},
            "http://example.com/frame-context.json",
        ]
        assert framed["@graph"] == self.FRAMED_LIBRARY

    def test_remote_context_terms_compact(self):
        input = {
            "http://schema.org/name": "Buster the Cat",
            "http://schema.org/birthDate": "2012",
            "http://schema.org/deathDate": "2015-02-25",
        }
        loader = static_loader(
            {"http://schema.org/": {"@context": {"@vocab": "http://schema.org/"}}}
        )

        framed = jsonld.frame(
            input, {"@context": "http://schema.org/"}, {"documentLoader": loader}
        )
        assert framed == {
            "@context": "http://schema.org/",
            "@graph": [
                {
                    "name": "Buster the Cat",
                    "birthDate": "2012",
                    "deathDate": "2015-02-25",
                }
            ],
        }

    @pytest.mark.parametrize(
        "datatype,lexical",
        [
            ("xsd#int", "-2147483648"),
            ("xsd#integer", "0"),
            ("xsd#long", "9223372036854775807"),
        ],
    )
    def test_integer_typed_values_compact_to_strings(self, datatype, lexical):
        ctx = {
            "@vocab": "http://example.org/",
            "xsd": "http://www.w3.org/2001/XMLSchema#",
        }
        input = [{"@context": ctx, "value": {"@type": datatype, "@value": lexical}}]
        frame = {
            "@context": dict(ctx, p_value={"@id": "value", "@type": datatype}),
            "p_value": {},
        }

        framed = jsonld.frame(input, frame, {"omitGraph": True})
        framed.pop("@context")
        assert framed == {"p_value": lexical}


class TestToRdf:
    def test_string_double_is_canonicalized(self):
        input = {
            "@context": {
                "xsd": "http://www.w3.org/2001/XMLSchema#",
                "geoLongitude": "http://www.w3.org/2003/01/geo/wgs84_pos#longitude",
            },
            "@graph": [
                {
                    "@id": "http://www.wikidata.org/entity/Q399",
                    "geoLongitude": {"@type": "xsd:double", "@value": "45"},
                }
            ],
        }

        expected = {
            "@default": [
                {
                    "subject": {
                        "type": "IRI",
                        "value": "http://www.wikidata.org/entity/Q399",
                    },
                    "predicate": {
                        "type": "IRI",
                        "value": "http://www.w3.org/2003/01/geo/wgs84_pos#longitude",
                    },
                    "object": {
                        "type": "literal",
                        "value": "4.5E1",
                        "datatype": "http://www.w3.org/2001/XMLSchema#double",
                    },
                }
            ]
        }

        assert jsonld.to_rdf(input) == expected


class TestCompact:
    def test_simple_compaction(self):
        input = {
            "http://example.org/a": "A",
            "http://example.org/b": "B",
            "http://example.org/c": {"@value": "C", "@type": "urn:C"},
        }

        context = {
            "@context": {
                "ex": "http://example.org/",
                "a": {"@id": "http://example.org/a"},
                "b": {"@id": "http://example.org/b", "@type": "urn:B"},
                "c": {"@id": "http://example.org/c", "@type": "urn:C"},
            }
        }

        expected = {
            "@context": context["@context"],
            "a": "A",
            "ex:b": "B",
            "c": "C",
        }

        compacted = jsonld.compact(input, context)
        assert compacted == expected
