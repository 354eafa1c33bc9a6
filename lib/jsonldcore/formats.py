"""
Registry of RDF text formats.

A :class:`FormatRegistry` maps a content type to a parser
(``text -> RDFDataset``) and/or a serializer (``RDFDataset -> text``).
Processors own a registry instance; there is no process-wide table.

.. module:: jsonldcore.formats
  :synopsis: RDF format registry
"""

import logging
import threading

from jsonldcore.errors import UnknownFormatError
from jsonldcore.nquads import parse_nquads, serialize_nquads
from jsonldcore.turtle import parse_turtle, serialize_turtle

__all__ = ['FormatRegistry', 'default_registry', 'NQUADS', 'TURTLE']

logger = logging.getLogger(__name__)

NQUADS = 'application/n-quads'
NQUADS_LEGACY = 'application/nquads'
TURTLE = 'text/turtle'


class FormatRegistry(object):
    """
    Content type to codec mapping.

    Lookups read an immutable snapshot, so they need no lock; register and
    unregister calls publish a new snapshot under a lock.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._parsers = {}
        self._serializers = {}

    def register_parser(self, content_type, parser):
        """
        Registers a parser by content type.

        :param content_type: the content type for the parser.
        :param parser(input): the parser function (takes a string and
          returns an RDF dataset).
        """
        with self._lock:
            parsers = dict(self._parsers)
            parsers[content_type] = parser
            self._parsers = parsers
        logger.debug('Registered RDF parser for %s', content_type)

    def register_serializer(self, content_type, serializer):
        """
        Registers a serializer by content type.

        :param content_type: the content type for the serializer.
        :param serializer(dataset): the serializer function (takes an RDF
          dataset and returns a string).
        """
        with self._lock:
            serializers = dict(self._serializers)
            serializers[content_type] = serializer
            self._serializers = serializers
        logger.debug('Registered RDF serializer for %s', content_type)

    def unregister_parser(self, content_type):
        with self._lock:
            if content_type in self._parsers:
                parsers = dict(self._parsers)
                del parsers[content_type]
                self._parsers = parsers
                logger.debug('Unregistered RDF parser for %s', content_type)

    def unregister_serializer(self, content_type):
        with self._lock:
            if content_type in self._serializers:
                serializers = dict(self._serializers)
                del serializers[content_type]
                self._serializers = serializers
                logger.debug(
                    'Unregistered RDF serializer for %s', content_type)

    def unregister(self, content_type):
        """
        Removes both the parser and the serializer for a content type.
        """
        with self._lock:
            self.unregister_parser(content_type)
            self.unregister_serializer(content_type)

    def parser(self, content_type):
        """
        Gets the parser for a content type.

        :raises UnknownFormatError: if no parser is registered.
        """
        try:
            return self._parsers[content_type]
        except KeyError:
            raise UnknownFormatError(
                'Unknown input format.', content_type) from None

    def serializer(self, content_type):
        """
        Gets the serializer for a content type.

        :raises UnknownFormatError: if no serializer is registered.
        """
        try:
            return self._serializers[content_type]
        except KeyError:
            raise UnknownFormatError(
                'Unknown output format.', content_type) from None

    def parse(self, content_type, input_):
        return self.parser(content_type)(input_)

    def serialize(self, content_type, dataset):
        return self.serializer(content_type)(dataset)

    @property
    def parser_types(self):
        return sorted(self._parsers)

    def __contains__(self, content_type):
        return (content_type in self._parsers or
                content_type in self._serializers)

    def copy(self):
        """
        Returns an independent registry with the same codecs.
        """
        rval = FormatRegistry()
        with self._lock:
            rval._parsers = dict(self._parsers)
            rval._serializers = dict(self._serializers)
        return rval


def default_registry():
    """
    Creates a registry holding the built-in N-Quads and Turtle codecs.
    """
    registry = FormatRegistry()
    for content_type in (NQUADS, NQUADS_LEGACY):
        registry.register_parser(content_type, parse_nquads)
        registry.register_serializer(content_type, serialize_nquads)
    registry.register_parser(TURTLE, parse_turtle)
    registry.register_serializer(TURTLE, serialize_turtle)
    return registry
