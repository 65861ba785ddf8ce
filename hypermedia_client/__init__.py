import logging
import sys

from . import signals
from .client import Client
from .exceptions import (
    ClientException,
    ConfigurationError,
    ValidationError,
    UnknownType,
    MethodNotAllowed,
    LinkNotFound,
    ActionNotAvailable,
    DecodeError,
    ApiError,
    is_not_found
)
from .facade import ResourceType
from .options import ClientOptions
from .resource import Resource, Collection, Pagination
from .schema import ResourceSchema, SchemaRegistry

__all__ = (
    'Client',
    'ClientOptions',
    'Resource',
    'ResourceType',
    'Collection',
    'Pagination',
    'ResourceSchema',
    'SchemaRegistry',
    'ClientException',
    'ConfigurationError',
    'ValidationError',
    'UnknownType',
    'MethodNotAllowed',
    'LinkNotFound',
    'ActionNotAvailable',
    'DecodeError',
    'ApiError',
    'is_not_found',
    'enable_debug_logging',
    'signals',
)


def enable_debug_logging(stream=None):
    """
    Print the requests and responses of clients created with ``debug=True``.

    Calling it again returns the handler installed by the first call.

    :param stream: defaults to standard output
    """
    logger = logging.getLogger(__name__)
    for handler in logger.handlers:
        if getattr(handler, '_debug_output', False):
            return handler

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(logging.Formatter('%(message)s'))
    handler._debug_output = True
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    return handler
