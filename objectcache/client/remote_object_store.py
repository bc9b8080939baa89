"""ObjectStore implementation talking HTTP to a path-style bucket server."""

import functools
import logging
import time
from urllib.parse import quote

import requests

from objectcache.client.object_store import ObjectStore, ObjectStoreError

logger = logging.getLogger('objectcache')

_CHUNK_SIZE = 16 * 1024


def _verbose_http_errors(fn):
    @functools.wraps(fn)
    def wrapped(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except requests.exceptions.RequestException as e:
            if e.response is None:
                raise ObjectStoreError(
                        type(e).__name__,
                        'Error making HTTP request: %s' % e) from e

            code = e.response.status_code
            message = e.response.headers.get('x-exception', str(e))
            raise ObjectStoreError('HTTP/%d' % code,
                                   'HTTP/%d: %s' % (code, message)) from e

    return wrapped


def _report_timing(name):
    def decorator(fn):
        @functools.wraps(fn)
        def wrapped(*args, **kwargs):
            t = time.time()
            logger.debug('    %s starting', name)
            ret = fn(*args, **kwargs)
            elapsed = time.time() - t
            logger.debug('    %s took %.2fs', name, elapsed)
            return ret
        return wrapped
    return decorator


class RemoteObjectStore(ObjectStore):
    """Object store reached over plain HTTP.

       Objects are addressed path-style, as ``<base_url>/<bucket>/<key>``,
       which is understood by S3-compatible servers accepting anonymous or
       pre-authorized requests.
    """

    def __init__(self, base_url, timeout=None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    def _url(self, location):
        return '%s/%s/%s' % (self.base_url, quote(location.bucket, safe=''),
                             quote(location.key))

    def _object_info(self, response):
        size = response.headers.get('content-length')
        return self.ObjectInfo(
                int(size) if size is not None else None,
                response.headers.get('content-type'))

    @_verbose_http_errors
    def head_object(self, location):
        response = requests.head(self._url(location), allow_redirects=True,
                                 timeout=self.timeout)
        response.raise_for_status()
        return self._object_info(response)

    @_report_timing('RemoteObjectStore.get_object')
    @_verbose_http_errors
    def get_object(self, location):
        response = requests.get(self._url(location), stream=True,
                                timeout=self.timeout)
        response.raise_for_status()
        return _FileLikeFromResponse(response), self._object_info(response)

    @_report_timing('RemoteObjectStore.put_object')
    @_verbose_http_errors
    def put_object(self, location, stream, content_type=None,
                   storage_class=None):
        headers = {}
        if content_type:
            headers['Content-Type'] = content_type
        if storage_class:
            headers['x-amz-storage-class'] = storage_class

        # Important detail: this upload is streaming.
        # http://docs.python-requests.org/en/latest/user/advanced/#streaming-uploads
        response = requests.put(self._url(location), data=stream,
                                headers=headers, timeout=self.timeout)
        response.raise_for_status()

    @_verbose_http_errors
    def delete_object(self, location):
        response = requests.delete(self._url(location), timeout=self.timeout)
        if response.status_code == 404:
            return
        response.raise_for_status()


class _FileLikeFromResponse:
    def __init__(self, response):
        self.response = response
        self.iter = response.iter_content(chunk_size=_CHUNK_SIZE)
        self.data = b''

    def read(self, size=-1):
        if size is None or size < 0:
            # read all remaining data
            data, self.data = self.data + b''.join(c for c in self.iter), b''
            return data
        else:
            while len(self.data) < size:
                try:
                    self.data += next(self.iter)
                except StopIteration:
                    break
            result, self.data = self.data[:size], self.data[size:]
            return result

    def close(self):
        self.response.close()
