"""Objectcache client implementation."""


class ObjectCacheError(Exception):
    """Base class of the errors raised by cache operations.

       ``key`` is the cache key the failing operation worked on (if any),
       ``operation`` is the name of that operation.
    """

    def __init__(self, message, key=None, operation=None):
        super().__init__(message)
        self.key = key
        self.operation = operation


class NotInitializedError(ObjectCacheError):
    pass


class InvalidLocationError(ObjectCacheError):
    pass


class UnknownKeyError(ObjectCacheError):
    pass


class LocalFileNotFoundError(ObjectCacheError):
    pass


class StagingUnavailableError(ObjectCacheError):
    pass


class QuotaExceededError(ObjectCacheError):
    def __init__(self, message, required, available, **kwargs):
        super().__init__(message, **kwargs)
        self.required = required
        self.available = available


class UpstreamError(ObjectCacheError):
    """A failure reported by the object store.

       The original exception is available as ``__cause__``.
    """

    def __init__(self, message, location=None, **kwargs):
        super().__init__(message, **kwargs)
        self.location = location


# Reexport under shorter path.
from objectcache.client.cache import Cache, CachedFile
