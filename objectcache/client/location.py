"""Remote object locations."""

import collections
import collections.abc
from urllib.parse import urlsplit

from objectcache.client import InvalidLocationError


RemoteLocation = collections.namedtuple('RemoteLocation', ['bucket', 'key'])
"""Canonical address of an object in the remote store.

    Fields:

    * ``bucket`` name of the bucket
    * ``key`` key of the object inside the bucket, without a leading slash
"""

URL_SCHEME = 's3'


def resolve(ref):
    """Converts a location reference into a :class:`RemoteLocation`.

       ``ref`` may be a URL of the form ``s3://bucket/path/to/key``,
       a mapping with ``bucket`` and ``key`` items, a ``(bucket, key)``
       pair or a :class:`RemoteLocation`.

       Raises :class:`InvalidLocationError` if the bucket or the key is
       missing.
    """
    if isinstance(ref, RemoteLocation):
        return ref
    if isinstance(ref, str):
        return _parse_url(ref)
    if isinstance(ref, collections.abc.Mapping):
        try:
            bucket, key = ref['bucket'], ref['key']
        except KeyError:
            raise InvalidLocationError(
                    "Invalid location: %r needs both 'bucket' and 'key'"
                    % (ref,))
    elif isinstance(ref, tuple) and len(ref) == 2:
        bucket, key = ref
    else:
        raise InvalidLocationError("Invalid location: %r" % (ref,))
    if not bucket or not key:
        raise InvalidLocationError("Invalid location: %r" % (ref,))
    return RemoteLocation(bucket=bucket, key=key)


def _parse_url(url):
    try:
        parts = urlsplit(url)
    except ValueError as e:
        raise InvalidLocationError("Invalid %s URL: %s (%s)"
                                   % (URL_SCHEME, url, e))
    if parts.scheme != URL_SCHEME:
        raise InvalidLocationError("Invalid %s URL: %s" % (URL_SCHEME, url))
    key = parts.path[1:]
    if not parts.netloc or not key:
        raise InvalidLocationError("Invalid %s URL: %s" % (URL_SCHEME, url))
    return RemoteLocation(bucket=parts.netloc, key=key)


def location_url(location):
    """Formats a :class:`RemoteLocation` as an URL."""
    return '%s://%s/%s' % (URL_SCHEME, location.bucket, location.key)
