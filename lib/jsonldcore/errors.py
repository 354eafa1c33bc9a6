"""
Error types raised by the JSON-LD engine.

Every failure is a :class:`JsonLdError`. The subclasses name the operation
or the kind of problem, and a top-level operation wraps whatever an
internal step raised in its own error, keeping the original as ``cause``.

.. module:: jsonldcore.errors
  :synopsis: JSON-LD error kinds
"""

import sys
import traceback

__all__ = [
    'JsonLdError', 'InvalidInputError', 'ContextError', 'ExpansionError',
    'CompactionError', 'FlattenError', 'FrameError', 'NormalizeError',
    'RdfConversionError', 'UnknownFormatError'
]


class JsonLdError(Exception):
    """
    Base class for JSON-LD errors.
    """

    default_type = 'jsonld.Error'

    def __init__(self, message, type_=None, details=None, code=None,
                 cause=None):
        Exception.__init__(self, message)
        self.type = type_ or self.default_type
        self.details = details
        self.code = code
        self.cause = cause
        self.cause_trace = traceback.extract_tb(sys.exc_info()[2])
        if cause is not None:
            self.__cause__ = cause

    @property
    def message(self):
        return self.args[0] if self.args else ''

    def __str__(self):
        rval = str(self.message)
        rval += '\nType: ' + self.type
        if self.code:
            rval += '\nCode: ' + self.code
        if self.details:
            rval += '\nDetails: ' + repr(self.details)
        if self.cause:
            rval += '\nCause: ' + str(self.cause)
            rval += ''.join(traceback.format_list(self.cause_trace))
        return rval


class InvalidInputError(JsonLdError):
    """A document, frame or context is structurally malformed."""
    default_type = 'jsonld.InvalidInput'


class ContextError(JsonLdError):
    """A context could not be processed or retrieved."""
    default_type = 'jsonld.ContextError'


class ExpansionError(JsonLdError):
    default_type = 'jsonld.ExpandError'


class CompactionError(JsonLdError):
    default_type = 'jsonld.CompactError'


class FlattenError(JsonLdError):
    default_type = 'jsonld.FlattenError'


class FrameError(JsonLdError):
    default_type = 'jsonld.FrameError'


class NormalizeError(JsonLdError):
    default_type = 'jsonld.NormalizeError'


class RdfConversionError(JsonLdError):
    default_type = 'jsonld.RdfError'


class UnknownFormatError(JsonLdError):
    """
    Raised when a content type has no registered parser or serializer.
    """
    default_type = 'jsonld.UnknownFormat'

    def __init__(self, message, format, **kwargs):
        kwargs.setdefault('details', {'format': format})
        kwargs.setdefault('code', 'unknown format')
        JsonLdError.__init__(self, message, **kwargs)
        self.format = format
