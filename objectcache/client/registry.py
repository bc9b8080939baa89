"""Mapping of cache keys to remote locations."""

from objectcache.client import InvalidLocationError, UnknownKeyError
from objectcache.client.location import resolve


class KeyRegistry:
    """Maps the cache keys of a session to :class:`RemoteLocation`\\ s.

       Membership in the registry is all :meth:`exists` reports: it says
       nothing about a local copy of the object.
    """

    def __init__(self):
        self._locations = {}

    def initialize(self, key_map):
        """Replaces the whole registry with the entries of ``key_map``.

           ``key_map`` maps cache keys to anything accepted by
           :func:`objectcache.client.location.resolve`. Nothing is kept
           from the previous contents, even if resolving fails.
        """
        self._locations = {}
        locations = {}
        for key, ref in key_map.items():
            try:
                locations[key] = resolve(ref)
            except InvalidLocationError as e:
                e.key, e.operation = key, 'init'
                raise
        self._locations = locations

    def register(self, key, location):
        try:
            self._locations[key] = resolve(location)
        except InvalidLocationError as e:
            e.key, e.operation = key, 'register_future_file'
            raise
        return self._locations[key]

    def exists(self, key):
        return key in self._locations

    def location_for(self, key, operation=None):
        try:
            return self._locations[key]
        except KeyError:
            raise UnknownKeyError('No cache key found for "%s"' % (key,),
                                  key=key, operation=operation)

    def keys(self):
        return list(self._locations)

    def clear(self):
        self._locations = {}
