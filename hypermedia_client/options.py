from urllib.parse import urlparse

from .exceptions import ConfigurationError

DEFAULT_TIMEOUT = 10


class ClientOptions(object):
    """
    Connection settings owned by a :class:`Client` for its entire lifetime.

    All settings are read-only once constructed, except :attr:`timeout`.

    :param str url: the API root URL; must be an absolute ``http`` or ``https`` URL
    :param str access_key: HTTP Basic user name sent with every request
    :param str secret_key: HTTP Basic password sent with every request
    :param float timeout: per-request timeout in seconds, defaults to ``10``
    :param bool debug: log every request and response body
    :param dict adapters: an optional mapping of URL prefixes to :class:`requests.adapters.BaseAdapter` instances
        mounted on each request session
    """

    def __init__(self, url, access_key=None, secret_key=None, timeout=None, debug=False, adapters=None):
        if not url or urlparse(url).scheme not in ('http', 'https') or not urlparse(url).netloc:
            raise ConfigurationError('Invalid API URL [{}]'.format(url))

        self._url = url
        self._access_key = access_key
        self._secret_key = secret_key
        self._debug = bool(debug)
        self._adapters = dict(adapters or {})
        self.timeout = timeout

    @classmethod
    def from_config(cls, config, prefix='HYPERMEDIA_', **kwargs):
        """
        Read options from a mapping such as a Flask ``app.config``.

        Recognized keys are ``URL``, ``ACCESS_KEY``, ``SECRET_KEY``, ``TIMEOUT`` and ``DEBUG``, each prefixed
        with ``prefix``.
        """
        return cls(config.get(prefix + 'URL'),
                   access_key=config.get(prefix + 'ACCESS_KEY'),
                   secret_key=config.get(prefix + 'SECRET_KEY'),
                   timeout=config.get(prefix + 'TIMEOUT'),
                   debug=config.get(prefix + 'DEBUG', False),
                   **kwargs)

    @property
    def url(self):
        return self._url

    @property
    def access_key(self):
        return self._access_key

    @property
    def secret_key(self):
        return self._secret_key

    @property
    def debug(self):
        return self._debug

    @property
    def adapters(self):
        return dict(self._adapters)

    @property
    def auth(self):
        if self._access_key is None and self._secret_key is None:
            return None
        return self._access_key or '', self._secret_key or ''

    @property
    def timeout(self):
        return self._timeout

    @timeout.setter
    def timeout(self, value):
        if not value:
            value = DEFAULT_TIMEOUT
        try:
            value = float(value)
        except (TypeError, ValueError):
            raise ConfigurationError('Invalid timeout [{}]'.format(value))
        if value < 0:
            raise ConfigurationError('Invalid timeout [{}]'.format(value))
        self._timeout = value

    def __repr__(self):
        return "<ClientOptions url='{}' access_key='{}' timeout={}>".format(self._url, self._access_key, self._timeout)
