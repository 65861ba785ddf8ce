from unittest import TestCase

from flask import Flask, request, jsonify, make_response
from requests import Response
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

from hypermedia_client import Client, ClientOptions

ROOT = 'http://api.test/v1'

PER_PAGE = 2


class FlaskAdapter(BaseAdapter):
    """
    Sends requests to a Flask application through its test client and records each request sent.
    """

    def __init__(self, app):
        super(FlaskAdapter, self).__init__()
        self.app = app
        self.sent = []

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        self.sent.append(request)

        body = request.body
        if isinstance(body, str):
            body = body.encode('utf-8')

        headers = {k: v for k, v in request.headers.items() if k.lower() != 'content-length'}
        result = self.app.test_client().open(request.url, method=request.method, headers=headers, data=body)

        response = Response()
        response.status_code = result.status_code
        response.reason = result.status.partition(' ')[2]
        response.headers = CaseInsensitiveDict(result.headers.items())
        response._content = result.get_data()
        response.encoding = 'utf-8'
        response.url = request.url
        response.request = request
        response.connection = self
        return response

    def close(self):
        pass


def _error(status, code, message):
    response = jsonify({
        'id': None,
        'type': 'error',
        'status': status,
        'code': code,
        'message': message
    })
    response.status_code = status
    return response


def _container(item):
    url = '{}/containers/{}'.format(ROOT, item['id'])

    if item['state'] == 'running':
        actions = {'stop': url + '/actions/stop'}
    else:
        actions = {'start': url + '/actions/start'}

    return dict(item,
                type='container',
                links={'self': url, 'events': url + '/events'},
                actions=actions)


def make_schema(id, plural_name, collection_methods, resource_methods, collection=True):
    links = {'self': '{}/schemas/{}'.format(ROOT, id)}
    if collection:
        links['collection'] = '{}/{}'.format(ROOT, plural_name)
    return {
        'id': id,
        'type': 'schema',
        'pluralName': plural_name,
        'collectionMethods': collection_methods,
        'resourceMethods': resource_methods,
        'links': links
    }


SCHEMAS = [
    make_schema('container', 'containers', ['GET', 'POST'], ['GET', 'PUT', 'DELETE']),
    make_schema('event', 'events', ['GET'], ['GET']),
    make_schema('publish', 'publish', ['POST'], [], collection=False),
]


def create_api(credentials=('key', 'secret'), schemas=None, schemas_header=True):
    """
    A small API in the style of the servers the client talks to.

    Containers are kept in memory, listed two per page and offer either a ``stop`` or a ``start`` action
    depending on their state.
    """
    app = Flask(__name__)
    app.containers = {}
    app.published = []

    @app.before_request
    def authenticate():
        auth = request.authorization
        if credentials and (auth is None or (auth.username, auth.password) != credentials):
            return _error(401, 'Unauthorized', 'Invalid credentials')

    @app.route('/v1')
    def root():
        response = jsonify({'type': 'apiVersion', 'links': {'schemas': ROOT + '/schemas'}})
        if schemas_header:
            response.headers['X-API-Schemas'] = ROOT + '/schemas'
        return response

    @app.route('/v1/schemas')
    def schemas_view():
        response = jsonify({'type': 'collection', 'data': SCHEMAS if schemas is None else schemas})
        response.headers['X-API-Schemas'] = ROOT + '/schemas'
        return response

    @app.route('/v1/containers', methods=['GET'])
    def list_containers():
        app.last_args = request.args.copy()
        items = sorted(app.containers.values(), key=lambda c: c['id'])

        if 'state' in request.args:
            items = [c for c in items if c['state'] == request.args['state']]
        for tag in request.args.getlist('tag'):
            items = [c for c in items if tag in c.get('tags', ())]

        page = int(request.args.get('page', 1))
        start = (page - 1) * PER_PAGE
        pagination = {}
        if start + PER_PAGE < len(items):
            pagination['next'] = '{}/containers?page={}'.format(ROOT, page + 1)

        return jsonify({
            'type': 'collection',
            'resourceType': 'container',
            'links': {'self': request.url},
            'data': [_container(c) for c in items[start:start + PER_PAGE]],
            'pagination': pagination
        })

    @app.route('/v1/containers', methods=['POST'])
    def create_container():
        data = request.get_json()
        if not data or 'name' not in data:
            return _error(422, 'MissingRequired', 'name')
        item = dict(data, id='1c{}'.format(len(app.containers) + 1), state='running')
        app.containers[item['id']] = item
        return jsonify(_container(item)), 201

    def _get(id):
        return app.containers.get(id)

    @app.route('/v1/containers/<id>', methods=['GET'])
    def read_container(id):
        item = _get(id)
        if item is None:
            return _error(404, 'NotFound', 'container {}'.format(id))
        return jsonify(_container(item))

    @app.route('/v1/containers/<id>', methods=['PUT'])
    def update_container(id):
        item = _get(id)
        if item is None:
            return _error(404, 'NotFound', 'container {}'.format(id))
        item.update(request.get_json() or {})
        return jsonify(_container(item))

    @app.route('/v1/containers/<id>', methods=['DELETE'])
    def delete_container(id):
        if app.containers.pop(id, None) is None:
            return _error(404, 'NotFound', 'container {}'.format(id))
        return make_response('', 204)

    @app.route('/v1/containers/<id>/actions/<action>', methods=['POST'])
    def container_action(id, action):
        item = _get(id)
        expected = {'stop': 'running', 'start': 'stopped'}
        if item is None or expected.get(action) != item['state']:
            return _error(409, 'InvalidState', 'cannot {}'.format(action))
        item['state'] = 'stopped' if action == 'stop' else 'running'
        if request.data:
            item['reason'] = request.get_json().get('reason')
        return jsonify(_container(item)), 202

    @app.route('/v1/containers/<id>/events')
    def container_events(id):
        return jsonify({
            'type': 'collection',
            'data': [{'id': '1e1', 'type': 'event', 'name': 'container.create', 'resourceId': id}],
            'pagination': {}
        })

    @app.route('/v1/publish', methods=['POST'])
    def publish():
        app.published.append(request.get_json())
        return make_response('', 204)

    @app.route('/v1/broken')
    def broken():
        response = make_response('{"data": [', 200)
        response.headers['X-API-Schemas'] = ROOT + '/broken'
        return response

    return app


class BaseTestCase(TestCase):

    def setUp(self):
        super(BaseTestCase, self).setUp()
        self.app = self.create_app()
        self.adapter = FlaskAdapter(self.app)

    def create_app(self):
        return create_api()

    def create_options(self, url=ROOT, access_key='key', secret_key='secret', **kwargs):
        return ClientOptions(url,
                             access_key=access_key,
                             secret_key=secret_key,
                             adapters={'http://api.test/': self.adapter},
                             **kwargs)

    def create_client(self, **kwargs):
        return Client(self.create_options(**kwargs))

    @property
    def sent(self):
        return [(r.method, r.url) for r in self.adapter.sent]

    def add_container(self, id, state='running', **kwargs):
        item = dict(kwargs, id=id, state=state)
        self.app.containers[id] = item
        return item
