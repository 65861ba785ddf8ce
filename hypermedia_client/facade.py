from .exceptions import ApiError, is_not_found


class ResourceType(object):
    """
    Convenience operations for one resource type, bound to a :class:`Client`.

    The ``Client`` creates these on demand::

        client.container.list(state='running')
        client['container'].by_id('1i23')

    Unlike :meth:`Client.by_id`, :meth:`by_id` returns ``None`` for a resource that does not exist.
    """

    def __init__(self, client, name):
        self.client = client
        self.name = name

    @property
    def schema(self):
        return self.client.schemas[self.name]

    def list(self, **filters):
        return self.client.list(self.name, filters)

    def create(self, **fields):
        return self.client.create(self.name, fields)

    def update(self, existing, **changes):
        return self.client.update(self.name, existing, changes)

    def by_id(self, id):
        try:
            return self.client.by_id(self.name, id)
        except ApiError as e:
            if is_not_found(e):
                return None
            raise

    def delete(self, existing):
        return self.client.delete(self.name, existing)

    def action(self, name, existing, body=None):
        return self.client.action(self.name, name, existing, body)

    def __iter__(self):
        return self.client.iterate(self.name)

    def __repr__(self):
        return "<ResourceType '{}'>".format(self.name)
