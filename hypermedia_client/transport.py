import json
import logging
import re
from urllib.parse import urlsplit, urlunsplit, parse_qsl, urlencode

import requests
import websocket

from .exceptions import ApiError, DecodeError, summarize_body
from .signals import before_request, after_response

log = logging.getLogger(__name__)

JSON_CONTENT_TYPE = 'application/json'


def _filter_value(value):
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return '{}'.format(value)


def append_filters(url, filters):
    """
    Append filters to the query string of ``url``.

    A list or tuple value is encoded as repeated query keys in the order given; any other value is converted to a
    string.
    """
    if not filters:
        return url

    parts = urlsplit(url)
    query = parse_qsl(parts.query, keep_blank_values=True)

    for key, value in filters.items():
        if isinstance(value, (list, tuple)):
            query.extend((key, _filter_value(v)) for v in value)
        else:
            query.append((key, _filter_value(value)))

    return urlunsplit(parts._replace(query=urlencode(query)))


def websocket_url(url):
    return re.sub(r'^http', 'ws', url)


class Transport(object):
    """
    Performs single authenticated HTTP exchanges.

    Every exchange opens its own :class:`requests.Session`, which is closed as soon as the response has been read.
    Credentials are passed with each request rather than stored on the session.

    :param ClientOptions options: client options
    """

    def __init__(self, options):
        self.options = options

    def _session(self):
        session = requests.Session()
        for prefix, adapter in self.options.adapters.items():
            session.mount(prefix, adapter)
        return session

    def request(self, method, url, data=None, headers=None):
        """
        Send one request and return the :class:`requests.Response` unchecked.
        """
        if self.options.debug:
            log.debug('%s %s', method, url)
            if data is not None:
                log.debug('Request => %s', data)

        before_request.send(self, method=method, url=url, body=data)

        with self._session() as session:
            response = session.request(method, url,
                                       data=data,
                                       headers=headers,
                                       auth=self.options.auth,
                                       timeout=self.options.timeout)

        after_response.send(self, method=method, url=url, response=response)
        return response

    def _decode(self, response, decode=None):
        text = response.text

        if self.options.debug:
            log.debug('Response <= %s', text)

        try:
            data = json.loads(text)
        except ValueError as e:
            raise DecodeError(text, e)

        if decode is None:
            return data

        try:
            return decode(data)
        except (ValueError, TypeError, KeyError) as e:
            raise DecodeError(text, e)

    def fetch(self, url, filters=None, decode=None):
        url = append_filters(url, filters)
        response = self.request('GET', url)

        if response.status_code != 200:
            raise ApiError.from_response(response, url)

        return self._decode(response, decode)

    def modify(self, method, url, body=None, decode=None):
        if body is None:
            body = {}

        response = self.request(method, url,
                                data=json.dumps(body),
                                headers={'Content-Type': JSON_CONTENT_TYPE})

        if response.status_code >= 300:
            raise ApiError.from_response(response, url)

        # some operations respond with no content
        if not response.content:
            return None

        return self._decode(response, decode)

    def invoke(self, url, body=None, decode=None):
        headers = {'Content-Type': JSON_CONTENT_TYPE}

        if body is None:
            data = None
            headers['Content-Length'] = '0'
        else:
            data = json.dumps(body)

        response = self.request('POST', url, data=data, headers=headers)

        if response.status_code >= 300:
            raise ApiError.from_response(response, url)

        if not response.content:
            return None

        return self._decode(response, decode)

    def remove(self, url):
        response = self.request('DELETE', url)

        if response.status_code >= 300:
            raise ApiError.from_response(response, url)

    def subscribe(self, url, headers=None):
        """
        Open a websocket on ``url`` for push-style event delivery.

        The connection stays open until the caller closes it.

        :param str url: a resource or collection URL; ``http`` is upgraded to ``ws`` and ``https`` to ``wss``
        :param dict headers: additional handshake headers; a list value is sent as repeated headers
        :return: a connected :class:`websocket.WebSocket`
        """
        prepared = requests.Request('GET', url, auth=self.options.auth).prepare()

        header = ['{}: {}'.format(key, value) for key, value in prepared.headers.items()]
        for key, value in (headers or {}).items():
            values = value if isinstance(value, (list, tuple)) else [value]
            header.extend('{}: {}'.format(key, v) for v in values)

        ws_url = websocket_url(url)

        if self.options.debug:
            log.debug('WEBSOCKET %s', ws_url)

        try:
            connection = websocket.create_connection(ws_url, header=header, timeout=self.options.timeout)
        except websocket.WebSocketBadStatusException as e:
            body = getattr(e, 'resp_body', None) or b''
            if isinstance(body, bytes):
                body = body.decode('utf-8', 'replace')
            raise ApiError(e.status_code, str(e.status_code), ws_url, summarize_body(body))

        # the timeout covers the handshake only; an open stream may stay idle indefinitely
        connection.settimeout(None)
        return connection
