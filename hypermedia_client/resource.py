SELF = 'self'
COLLECTION = 'collection'


class Resource(dict):
    """
    A decoded domain object.

    Every object returned by the API carries an identity and navigation envelope: ``id``, ``type``, ``links`` and
    ``actions``. Links and actions belong to the instance, not to its type, and may change as the object moves
    through server-side states. Any other key is readable as an attribute.
    """

    @classmethod
    def from_json(cls, data):
        if not isinstance(data, dict):
            raise ValueError('Expected a JSON object, got {}'.format(type(data).__name__))
        return cls(data)

    @property
    def id(self):
        return self.get('id')

    @property
    def type(self):
        return self.get('type')

    @property
    def links(self):
        return self.get('links') or {}

    @property
    def actions(self):
        return self.get('actions') or {}

    def __getattr__(self, item):
        try:
            return self[item]
        except KeyError:
            raise AttributeError(item)

    def __repr__(self):
        return "<Resource type='{}' id='{}'>".format(self.type, self.id)


class Pagination(object):

    def __init__(self, next=None):
        self.next = next or None

    @classmethod
    def from_json(cls, data):
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError('Expected a pagination object, got {}'.format(type(data).__name__))
        return cls(data.get('next'))

    @property
    def has_next(self):
        return self.next is not None

    def __repr__(self):
        return "<Pagination next='{}'>".format(self.next)


class Collection(object):
    """
    One page of resources.

    A collection whose :attr:`pagination` has no ``next`` URL is the last page.

    :param list data: a list of :class:`Resource` objects
    :param Pagination pagination: cursor for the following page
    """

    resource_class = Resource

    def __init__(self, data=None, pagination=None, links=None, client=None):
        self.data = list(data or ())
        self.pagination = pagination or Pagination()
        self.links = links or {}
        self.client = client

    @classmethod
    def is_collection(cls, data):
        if not isinstance(data, dict):
            return False
        return data.get('type') == 'collection' or isinstance(data.get('data'), list) and 'id' not in data

    @classmethod
    def from_json(cls, data):
        if not isinstance(data, dict) or not isinstance(data.get('data', []), list):
            raise ValueError('Expected a collection object')
        return cls([cls.resource_class.from_json(item) for item in data.get('data', [])],
                   pagination=Pagination.from_json(data.get('pagination')),
                   links=data.get('links'))

    def next(self):
        """
        Fetch the following page using the client that fetched this one.

        :return: a :class:`Collection` or ``None`` when this is the last page
        """
        if self.client is None:
            raise RuntimeError('Collection is not bound to a client')
        return self.client.next_page(self)

    def __iter__(self):
        return iter(self.data)

    def __len__(self):
        return len(self.data)

    def __getitem__(self, item):
        return self.data[item]

    def __repr__(self):
        return "<Collection size={} next='{}'>".format(len(self.data), self.pagination.next)
