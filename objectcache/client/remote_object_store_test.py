from io import BytesIO
import unittest
from unittest import mock

import requests

from objectcache.client.location import RemoteLocation
from objectcache.client.object_store import ObjectStoreError
from objectcache.client.remote_object_store import RemoteObjectStore

_LOCATION = RemoteLocation('my bucket', 'dir/file name.txt')
_URL = 'http://storage:9000/my%20bucket/dir/file%20name.txt'


def _response(status_code=200, headers=None, chunks=()):
    response = mock.Mock()
    response.status_code = status_code
    response.headers = headers or {}
    response.iter_content.return_value = iter(chunks)
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(
                '%d Error' % status_code, response=response)
    return response


@mock.patch('objectcache.client.remote_object_store.requests.head')
@mock.patch('objectcache.client.remote_object_store.requests.get')
@mock.patch('objectcache.client.remote_object_store.requests.put')
@mock.patch('objectcache.client.remote_object_store.requests.delete')
class RemoteObjectStoreTest(unittest.TestCase):
    def setUp(self):
        self.store = RemoteObjectStore('http://storage:9000/', timeout=30)

    def test_head_object_should_read_headers(self, delete, put, get, head):
        head.return_value = _response(headers={
            'content-length': '9', 'content-type': 'text/plain'})

        info = self.store.head_object(_LOCATION)
        self.assertEqual(info.size, 9)
        self.assertEqual(info.content_type, 'text/plain')
        head.assert_called_once_with(_URL, allow_redirects=True, timeout=30)

    def test_head_object_without_length(self, delete, put, get, head):
        head.return_value = _response()

        info = self.store.head_object(_LOCATION)
        self.assertIsNone(info.size)
        self.assertIsNone(info.content_type)

    def test_get_object_should_stream_content(self, delete, put, get, head):
        get.return_value = _response(
                headers={'content-length': '9'},
                chunks=[b'hel', b'lo ', b'abc'])

        stream, info = self.store.get_object(_LOCATION)
        self.assertEqual(info.size, 9)
        self.assertEqual(stream.read(4), b'hell')
        self.assertEqual(stream.read(), b'o abc')
        self.assertEqual(stream.read(4), b'')
        stream.close()
        get.return_value.close.assert_called_once_with()
        get.assert_called_once_with(_URL, stream=True, timeout=30)

    def test_put_object_should_send_headers(self, delete, put, get, head):
        put.return_value = _response()
        stream = BytesIO(b'data')

        self.store.put_object(_LOCATION, stream, 'text/plain', 'STANDARD')
        put.assert_called_once_with(_URL, data=stream, headers={
            'Content-Type': 'text/plain',
            'x-amz-storage-class': 'STANDARD'}, timeout=30)

    def test_put_object_without_metadata(self, delete, put, get, head):
        put.return_value = _response()

        self.store.put_object(_LOCATION, BytesIO(b'data'))
        self.assertEqual(put.call_args[1]['headers'], {})

    def test_delete_of_missing_object_should_succeed(
            self, delete, put, get, head):
        delete.return_value = _response(404)

        self.store.delete_object(_LOCATION)
        delete.assert_called_once_with(_URL, timeout=30)

    def test_http_errors_should_be_named(self, delete, put, get, head):
        head.return_value = _response(
                403, headers={'x-exception': 'Access denied'})

        with self.assertRaises(ObjectStoreError) as cm:
            self.store.head_object(_LOCATION)
        self.assertEqual(cm.exception.name, 'HTTP/403')
        self.assertIn('Access denied', str(cm.exception))

        delete.return_value = _response(500)
        with self.assertRaises(ObjectStoreError) as cm:
            self.store.delete_object(_LOCATION)
        self.assertEqual(cm.exception.name, 'HTTP/500')

    def test_connection_errors_should_be_named(self, delete, put, get, head):
        get.side_effect = requests.ConnectionError('connection refused')

        with self.assertRaises(ObjectStoreError) as cm:
            self.store.get_object(_LOCATION)
        self.assertEqual(cm.exception.name, 'ConnectionError')
        self.assertIsInstance(cm.exception.__cause__,
                              requests.ConnectionError)
