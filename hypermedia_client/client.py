import re
from urllib.parse import quote

from .exceptions import ConfigurationError, MethodNotAllowed, LinkNotFound, ActionNotAvailable, ValidationError
from .facade import ResourceType
from .options import ClientOptions
from .resource import Resource, Collection, SELF, COLLECTION
from .schema import bootstrap
from .transport import Transport


class Client(object):
    """
    A generic client for an API that describes its own resource types.

    The schema document is loaded once, when the client is created. Every operation then checks the type name,
    the HTTP method and the required link against the schema (or the resource instance) before making a request,
    so an operation that cannot succeed never reaches the server.

    Either pass a :class:`ClientOptions` instance or the keyword arguments accepted by :class:`ClientOptions`::

        client = Client(url='http://localhost:8080/v1', access_key='key', secret_key='secret')
        for container in client.list('container', {'state': 'running'}):
            client.action('container', 'stop', container)

    :param ClientOptions options: client options
    """

    resource_class = Resource
    collection_class = Collection

    def __init__(self, options=None, **kwargs):
        if options is None:
            options = ClientOptions(**kwargs)
        elif kwargs:
            raise ConfigurationError('Pass either ClientOptions or keyword options, not both: {}'.format(
                ', '.join(sorted(kwargs))))
        self._options = options
        self._transport = Transport(options)
        self._schemas = bootstrap(self._transport)

    @property
    def options(self):
        return self._options

    @property
    def schemas(self):
        return self._schemas

    @property
    def types(self):
        return self._schemas.types

    def _resource(self, data):
        return self.resource_class.from_json(data)

    def _collection(self, data):
        collection = self.collection_class.from_json(data)
        collection.client = self
        return collection

    def _any(self, data):
        if self.collection_class.is_collection(data):
            return self._collection(data)
        if isinstance(data, dict):
            return self._resource(data)
        return data

    @staticmethod
    def _link(existing, name):
        if existing is None:
            raise ValidationError('Existing object is None')
        try:
            return (existing.get('links') or {})[name]
        except KeyError:
            raise LinkNotFound(name, existing)

    def list(self, type_name, filters=None):
        schema = self._schemas.resolve(type_name)

        if not schema.allows_collection('GET'):
            raise MethodNotAllowed(type_name, 'GET', 'is not listable')

        if schema.collection_link is None:
            raise LinkNotFound(COLLECTION, schema)

        return self._transport.fetch(schema.collection_link, filters, decode=self._collection)

    def iterate(self, type_name, filters=None):
        """
        Yield every resource of a type, following the pagination cursor until the last page.
        """
        page = self.list(type_name, filters)
        while page is not None:
            for item in page:
                yield item
            page = self.next_page(page)

    def next_page(self, collection):
        """
        :return: the page following ``collection``, or ``None`` if ``collection`` is the last page
        """
        if collection is None or not collection.pagination.next:
            return None
        return self._transport.fetch(collection.pagination.next, decode=self._collection)

    def create(self, type_name, body=None):
        schema = self._schemas.resolve(type_name)

        if not schema.allows_collection('POST'):
            raise MethodNotAllowed(type_name, 'POST', 'is not creatable')

        url = schema.collection_link
        if url is None:
            # Some servers omit the collection link; derive it from the schema URL.
            if schema.self_link is None or not schema.plural_name or 'schemas' not in schema.self_link:
                raise LinkNotFound(COLLECTION, schema)
            url = re.sub(r'schemas.*', lambda m: schema.plural_name, schema.self_link)

        return self._transport.modify('POST', url, body, decode=self._resource)

    def update(self, type_name, existing, patch=None):
        schema = self._schemas.resolve(type_name)

        if not schema.allows_resource('PUT'):
            raise MethodNotAllowed(type_name, 'PUT', 'is not updatable')

        return self._transport.modify('PUT', self._link(existing, SELF), patch, decode=self._resource)

    def by_id(self, type_name, id):
        """
        Fetch a resource by its id from the collection URL of its type.

        A missing resource raises an :class:`ApiError` with status code 404; use :func:`is_not_found` to tell it
        apart from other failures.
        """
        schema = self._schemas.resolve(type_name)

        if not schema.allows_resource('GET'):
            raise MethodNotAllowed(type_name, 'GET', 'can not be looked up by ID')

        if schema.collection_link is None:
            raise LinkNotFound(COLLECTION, schema)

        url = '{}/{}'.format(schema.collection_link, quote(str(id), safe=''))
        return self._transport.fetch(url, decode=self._resource)

    def delete(self, type_name, existing):
        schema = self._schemas.resolve(type_name)

        if not schema.allows_resource('DELETE'):
            raise MethodNotAllowed(type_name, 'DELETE', 'can not be deleted')

        self._transport.remove(self._link(existing, SELF))

    def action(self, type_name, name, existing, body=None):
        """
        Invoke an action offered by a resource instance.

        The available actions depend on the current state of the instance; an action missing from
        ``existing.actions`` is rejected without making a request.
        """
        self._schemas.resolve(type_name)

        if existing is None:
            raise ValidationError('Existing object is None')

        try:
            url = (existing.get('actions') or {})[name]
        except KeyError:
            raise ActionNotAvailable(name, existing)

        return self._transport.invoke(url, body, decode=self._resource)

    def get_link(self, existing, name, filters=None):
        return self._transport.fetch(self._link(existing, name), filters, decode=self._any)

    def reload(self, existing):
        return self._transport.fetch(self._link(existing, SELF), decode=self._resource)

    def post(self, url, body=None):
        return self._transport.modify('POST', url, body, decode=self._any)

    def websocket(self, url, headers=None):
        return self._transport.subscribe(url, headers)

    def resource_type(self, type_name):
        return ResourceType(self, self._schemas.resolve(type_name).id)

    def __getitem__(self, type_name):
        return self.resource_type(type_name)

    def __getattr__(self, name):
        schemas = self.__dict__.get('_schemas')
        if name.startswith('_') or schemas is None or name not in schemas:
            raise AttributeError(name)
        return self.resource_type(name)

    def __repr__(self):
        return "<Client url='{}'>".format(self._options.url)
