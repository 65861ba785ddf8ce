from blinker import Namespace

_client = Namespace()

before_request = _client.signal('before-request')

after_response = _client.signal('after-response')
