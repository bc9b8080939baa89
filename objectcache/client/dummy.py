"""In-memory object store implementation."""

from io import BytesIO

from objectcache.client.object_store import ObjectStore, ObjectStoreError


class DummyObjectStore(ObjectStore):
    """A dummy object store which uses memory to store objects.

       Cool for testing, but beware --- do not try to store too much.
       Every call is appended to ``calls`` as a pair (method name, location),
       so tests can check what was requested.
    """

    DEFAULT_CONTENT_TYPE = 'application/octet-stream'

    def __init__(self, objects=None):
        self.data = {}
        self.content_types = {}
        self.storage_classes = {}
        self.calls = []
        for location, data in (objects or {}).items():
            self.data[location] = data
            self.content_types[location] = self.DEFAULT_CONTENT_TYPE

    def _get(self, location):
        if location not in self.data:
            raise ObjectStoreError(
                    'NoSuchKey', 'Object not found: %s/%s'
                    % (location.bucket, location.key))
        return self.data[location]

    def head_object(self, location):
        self.calls.append(('head_object', location))
        data = self._get(location)
        return self.ObjectInfo(len(data), self.content_types[location])

    def get_object(self, location):
        self.calls.append(('get_object', location))
        data = self._get(location)
        return BytesIO(data), \
               self.ObjectInfo(len(data), self.content_types[location])

    def put_object(self, location, stream, content_type=None,
                   storage_class=None):
        self.calls.append(('put_object', location))
        data = b''
        while True:
            record = stream.read()
            if not record:
                break
            data += record
        self.data[location] = data
        self.content_types[location] = \
                content_type or self.DEFAULT_CONTENT_TYPE
        self.storage_classes[location] = storage_class

    def delete_object(self, location):
        self.calls.append(('delete_object', location))
        self.data.pop(location, None)
        self.content_types.pop(location, None)
        self.storage_classes.pop(location, None)

    def count(self, method):
        return len([c for c in self.calls if c[0] == method])
