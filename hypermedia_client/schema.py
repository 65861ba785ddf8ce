import json
import logging
from collections import OrderedDict
from types import MappingProxyType

from jsonschema import Draft4Validator, FormatChecker

from .exceptions import ApiError, ConfigurationError, DecodeError, UnknownType
from .resource import SELF, COLLECTION

log = logging.getLogger(__name__)

SCHEMAS_HEADER = 'X-API-Schemas'

HTTP_METHODS = ('GET', 'PUT', 'POST', 'PATCH', 'DELETE')

_methods = {
    "type": "array",
    "items": {
        "type": "string"
    }
}

SCHEMA_DOCUMENT = {
    "$schema": "http://json-schema.org/draft-04/schema#",
    "type": "object",
    "required": ["data"],
    "properties": {
        "data": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["id"],
                "properties": {
                    "id": {"type": "string", "minLength": 1},
                    "pluralName": {"type": "string"},
                    "collectionMethods": _methods,
                    "resourceMethods": _methods,
                    "links": {
                        "type": "object",
                        "additionalProperties": {
                            "type": "string",
                            "format": "uri"
                        }
                    }
                }
            }
        }
    }
}

_validator = Draft4Validator(SCHEMA_DOCUMENT, format_checker=FormatChecker())


def _method_set(methods):
    return frozenset(method.upper() for method in methods or () if method.upper() in HTTP_METHODS)


class ResourceSchema(object):
    """
    Description of a single resource type as published by the server.

    .. attribute:: id

        The type name. Unique within a schema document.

    .. attribute:: collection_methods

        A frozenset of the HTTP methods allowed on the collection, e.g. ``GET`` to list and ``POST`` to create.

    .. attribute:: resource_methods

        A frozenset of the HTTP methods allowed on a single instance.

    .. attribute:: links

        A read-only mapping of link names to absolute URLs. Normally contains ``self`` and ``collection``.
    """

    def __init__(self, id, plural_name=None, collection_methods=(), resource_methods=(), links=None):
        self.id = id
        self.plural_name = plural_name
        self.collection_methods = _method_set(collection_methods)
        self.resource_methods = _method_set(resource_methods)
        self._links = dict(links or {})

    @property
    def links(self):
        return MappingProxyType(self._links)

    @classmethod
    def from_json(cls, data):
        return cls(data['id'],
                   plural_name=data.get('pluralName'),
                   collection_methods=data.get('collectionMethods'),
                   resource_methods=data.get('resourceMethods'),
                   links=data.get('links'))

    def allows_collection(self, method):
        return method in self.collection_methods

    def allows_resource(self, method):
        return method in self.resource_methods

    @property
    def self_link(self):
        return self.links.get(SELF)

    @property
    def collection_link(self):
        return self.links.get(COLLECTION)

    def __repr__(self):
        return "<ResourceSchema '{}'>".format(self.id)


class SchemaRegistry(object):
    """
    The resource types discovered at bootstrap, in document order and indexed by type name.

    The registry is never modified after it has been built.
    """

    def __init__(self, schemas):
        self._types = OrderedDict((schema.id, schema) for schema in schemas)

    @classmethod
    def from_json(cls, document):
        errors = list(_validator.iter_errors(document))
        if errors:
            raise ConfigurationError('Malformed schema document: {}'.format(
                '; '.join('{} at {}'.format(e.message, '/'.join(str(p) for p in e.absolute_path) or '#')
                          for e in errors)))
        return cls(ResourceSchema.from_json(item) for item in document['data'])

    @classmethod
    def is_schema_document(cls, document):
        return _validator.is_valid(document)

    def resolve(self, type_name):
        try:
            return self._types[type_name]
        except KeyError:
            raise UnknownType(type_name)

    def get(self, type_name, default=None):
        return self._types.get(type_name, default)

    @property
    def types(self):
        return dict(self._types)

    def __getitem__(self, type_name):
        return self._types[type_name]

    def __contains__(self, type_name):
        return type_name in self._types

    def __iter__(self):
        return iter(self._types.values())

    def __len__(self):
        return len(self._types)

    def __repr__(self):
        return '<SchemaRegistry {}>'.format(list(self._types))


def _parse(response):
    try:
        return json.loads(response.text)
    except ValueError as e:
        raise DecodeError(response.text, e)


def bootstrap(transport):
    """
    Discover the resource types of the API at ``transport.options.url``.

    The API root is expected to name its schema document in the ``X-API-Schemas`` response header. If that URL
    differs from the root, the schema document is fetched from it in a second request. An API root without the
    header is accepted only if it is a schema document itself.

    :param Transport transport: the transport used for both requests
    :return: a :class:`SchemaRegistry`
    :raises ApiError: if either request does not respond with status 200
    :raises ConfigurationError: if no valid schema document can be found
    :raises DecodeError: if the schema document is not valid JSON
    """
    url = transport.options.url
    response = transport.request('GET', url)

    if response.status_code != 200:
        raise ApiError.from_response(response, url)

    schemas_url = response.headers.get(SCHEMAS_HEADER)

    if not schemas_url:
        try:
            document = json.loads(response.text)
        except ValueError:
            document = None

        if not SchemaRegistry.is_schema_document(document):
            raise ConfigurationError('Failed to find schema at [{}]'.format(url))

        return SchemaRegistry.from_json(document)

    if schemas_url != url:
        log.debug('Following schema pointer %s', schemas_url)
        response = transport.request('GET', schemas_url)

        if response.status_code != 200:
            raise ApiError.from_response(response, schemas_url)

    return SchemaRegistry.from_json(_parse(response))
