""" The jsonld-core package is used to process JSON-LD. """
from . import jsonld
from .errors import JsonLdError
from .formats import FormatRegistry

__all__ = ['jsonld', 'JsonLdError', 'FormatRegistry']
