"""An abstract definition of an object store."""

import collections


class ObjectStoreError(Exception):
    """A failure reported by an object store.

       ``name`` is a short name of the failure, such as ``NoSuchKey`` or
       ``HTTP/403``.
    """

    def __init__(self, name, message):
        super().__init__(message)
        self.name = name


class ObjectStore:
    """An abstract base class giving access to objects kept in buckets.

       All methods take a :class:`objectcache.client.location.RemoteLocation`
       and raise :class:`ObjectStoreError` (or any other exception, which
       the cache treats the same way) on failure.
    """

    ObjectInfo = collections.namedtuple(
        'ObjectInfo', ['size', 'content_type'])
    """Metadata of a single object.

        Fields:

        * ``size`` size of the object in bytes, ``None`` if unknown
        * ``content_type`` MIME type of the object, ``None`` if unknown
    """

    def head_object(self, location):
        """Returns the :class:`ObjectInfo` of an object."""
        raise NotImplementedError

    def get_object(self, location):
        """Retrieves an object as a binary stream.

           Returns a pair (binary stream, :class:`ObjectInfo`). The caller
           closes the stream.
        """
        raise NotImplementedError

    def put_object(self, location, stream, content_type=None,
                   storage_class=None):
        """Saves the content of ``stream`` as an object.

           An existing object is overwritten. ``storage_class`` is a hint
           on how the object should be stored and may be ignored.
        """
        raise NotImplementedError

    def delete_object(self, location):
        """Deletes an object. Deleting a missing object is not an error."""
        raise NotImplementedError
