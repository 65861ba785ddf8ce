import json
from requests import RequestException

UNREADABLE_BODY = 'Unreadable body.'

# keys that describe the error resource itself rather than what went wrong
NAVIGATION_KEYS = ('id', 'links', 'actions', 'type', 'status')


class ClientException(Exception):

    def as_dict(self):
        return {
            'type': self.__class__.__name__,
            'message': str(self)
        }


class ConfigurationError(ClientException):
    pass


class ValidationError(ClientException):
    """
    Raised when an operation is rejected before any request is made.
    """


class UnknownType(ValidationError):

    def __init__(self, type_name):
        super(UnknownType, self).__init__('Unknown schema type [{}]'.format(type_name))
        self.type_name = type_name

    def __reduce__(self):
        return self.__class__, (self.type_name,)


class MethodNotAllowed(ValidationError):

    def __init__(self, type_name, method, description):
        super(MethodNotAllowed, self).__init__('Resource type [{}] {}'.format(type_name, description))
        self.type_name = type_name
        self.method = method
        self.description = description

    def __reduce__(self):
        return self.__class__, (self.type_name, self.method, self.description)


class LinkNotFound(ValidationError):

    def __init__(self, name, target):
        super(LinkNotFound, self).__init__('Failed to find {} URL of [{!r}]'.format(name, target))
        self.name = name
        self.target = target

    def __reduce__(self):
        return self.__class__, (self.name, self.target)


class ActionNotAvailable(ValidationError):

    def __init__(self, name, target):
        super(ActionNotAvailable, self).__init__('Action [{}] not available on [{!r}]'.format(name, target))
        self.name = name
        self.target = target

    def __reduce__(self):
        return self.__class__, (self.name, self.target)


class DecodeError(ClientException):

    def __init__(self, payload, cause=None):
        super(DecodeError, self).__init__('Failed to parse: {}'.format(payload))
        self.payload = payload
        self.cause = cause

    def __reduce__(self):
        return self.__class__, (self.payload, self.cause)


class ApiError(ClientException):
    """
    A response with a status code outside of the expected range.

    .. attribute:: status_code

        The numeric HTTP status code.

    .. attribute:: status

        Status line in the form ``'404 Not Found'``.

    .. attribute:: body

        A flattened summary of the response body.
    """

    def __init__(self, status_code, status, url, body):
        self.status_code = status_code
        self.status = status
        self.url = url
        self.body = body
        self.message = 'Bad response statusCode [{}]. Status [{}]. Body: [{}] from [{}]'.format(
            status_code, status, body, url)
        super(ApiError, self).__init__(self.message)

    def __reduce__(self):
        return self.__class__, (self.status_code, self.status, self.url, self.body)

    @classmethod
    def from_response(cls, response, url):
        try:
            text = response.text
        except (RequestException, UnicodeDecodeError):
            text = None

        if text is None:
            body = UNREADABLE_BODY
        else:
            body = summarize_body(text)

        status = '{} {}'.format(response.status_code, response.reason or '').strip()
        return cls(response.status_code, status, url, body)

    def as_dict(self):
        dct = super(ApiError, self).as_dict()
        dct.update(status=self.status_code, url=self.url, body=self.body)
        return dct


def summarize_body(text):
    try:
        data = json.loads(text)
    except ValueError:
        return text

    if not isinstance(data, dict):
        return text

    return ', '.join('{}={}'.format(key, value if isinstance(value, str) else json.dumps(value))
                     for key, value in data.items()
                     if key not in NAVIGATION_KEYS and value is not None)


def is_not_found(error):
    return isinstance(error, ApiError) and error.status_code == 404
