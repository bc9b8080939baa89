"""The actual implementation of the cache."""

from concurrent.futures import ThreadPoolExecutor, as_completed
import contextlib
import functools
import logging
import os
import shutil
import tempfile
import time

from objectcache.client import (ObjectCacheError, NotInitializedError,
                                LocalFileNotFoundError, QuotaExceededError,
                                StagingUnavailableError, UpstreamError)
from objectcache.client.entries import EntryTracker, PENDING, READY
from objectcache.client.location import RemoteLocation, location_url
from objectcache.client.registry import KeyRegistry
from objectcache.client.staging import StagingArea
from objectcache.client.watch import StatWatchManager
from objectcache.utils import parse_size

logger = logging.getLogger('objectcache')

DEFAULT_STORAGE_CLASS = 'STANDARD'
DEFAULT_MAX_WORKERS = 8

_STORE_ACTIONS = {
    'head_object': 'checking',
    'get_object': 'getting',
    'put_object': 'saving',
    'delete_object': 'deleting',
}


def _teardown_on_error(fn):
    """Destroys the session before letting any exception out of ``fn``."""
    @functools.wraps(fn)
    def wrapped(self, *args, **kwargs):
        try:
            return fn(self, *args, **kwargs)
        except Exception as e:
            logger.warning('%s failed, destroying the cache session: %s',
                           fn.__name__.lstrip('_'), e)
            self.destroy()
            raise

    return wrapped


class Cache:
    """A write-back cache presenting remote objects as local files.

       The cache has to be initialized with :meth:`init` before use. Each
       initialization starts a *session* with its own staging directory,
       which lives until :meth:`destroy` is called (explicitly, or by
       the cache itself when any operation fails).

       The configuration may be passed to the constructor or taken from
       the environment:

         ``OBJECTCACHE_TMPDIR``
           the directory in which staging directories are created; the
           system temporary directory is used if not specified.

         ``OBJECTCACHE_STORAGE_CLASS``
           storage class requested for uploaded objects, ``STANDARD`` by
           default.

         ``OBJECTCACHE_MAX_BYTES``
           upper bound of the bytes downloaded in a single session, e.g.
           ``512M``; by default only the free disk space counts.

         ``OBJECTCACHE_URL``
           the URL of a path-style HTTP object server; if not present,
           the S3 API is used through boto3.

       If you are the power-user, you may pass an
       :class:`objectcache.client.object_store.ObjectStore` and
       a :class:`objectcache.client.watch.WatchManager` directly.
    """

    def __init__(self, object_store='auto', tmp_dir=None, storage_class=None,
                 max_bytes=None, remote_url=None, watch_manager='auto',
                 max_workers=DEFAULT_MAX_WORKERS):
        if tmp_dir is None:
            tmp_dir = os.environ.get('OBJECTCACHE_TMPDIR')
        if tmp_dir is None:
            tmp_dir = tempfile.gettempdir()
        if storage_class is None:
            storage_class = os.environ.get('OBJECTCACHE_STORAGE_CLASS',
                                           DEFAULT_STORAGE_CLASS)
        if max_bytes is None:
            max_bytes = os.environ.get('OBJECTCACHE_MAX_BYTES')
        if isinstance(max_bytes, str):
            max_bytes = parse_size(max_bytes)
        if remote_url is None:
            remote_url = os.environ.get('OBJECTCACHE_URL')
        if object_store == 'auto':
            if remote_url:
                from objectcache.client.remote_object_store import \
                        RemoteObjectStore
                object_store = RemoteObjectStore(remote_url)
            else:
                from objectcache.client.s3_object_store import S3ObjectStore
                object_store = S3ObjectStore()
        if watch_manager == 'auto':
            watch_manager = StatWatchManager()

        self.object_store = object_store
        self.tmp_dir = tmp_dir
        self.storage_class = storage_class
        self.max_bytes = max_bytes
        self.max_workers = max_workers

        self._registry = KeyRegistry()
        self._entries = EntryTracker(watch_manager)
        self._staging = None
        self._committed = []

    @property
    def is_initialized(self):
        return self._staging is not None

    @property
    def staging_dir(self):
        """Path of the current staging directory, ``None`` without a
           session."""
        return self._staging.root_path if self._staging else None

    @property
    def available_bytes(self):
        """Bytes which may still be downloaded in this session.

           This is an estimate: it starts at the free space found by
           :meth:`init` and is decreased by every download.
        """
        return self._staging.available_bytes if self._staging else None

    @_teardown_on_error
    def init(self, key_map):
        """Starts a new session.

           ``key_map`` maps cache keys to remote locations, given as URLs or
           in structured form::

             cache.init({
                 'fileA': 's3://my-bucket/path/to/fileA',
                 'fileB': {'bucket': 'another-bucket', 'key': 'fileB'},
             })

           A session which is already active is destroyed first (without
           rollback).
        """
        if self._staging is not None:
            logger.warning('Cache initialized again, discarding session in %s',
                           self._staging.root_path)
            self.destroy()
        self._registry.initialize(key_map)
        self._staging = StagingArea.open(self.tmp_dir, self.max_bytes)
        logger.info('Cache session started in %s with %d keys',
                    self._staging.root_path, len(self._registry.keys()))

    def destroy(self, rollback=False):
        """Ends the session and deletes all local files.

           If ``rollback`` is ``True``, objects committed during the session
           are deleted from the object store too. This is done on a
           best-effort basis: failures are logged and skipped.

           Calling this without an active session does nothing.
        """
        staging, committed = self._staging, self._committed
        self._staging = None
        self._committed = []
        self._entries.clear()
        self._registry.clear()
        if staging is None:
            return

        staging.close()
        if rollback:
            for location in committed:
                try:
                    self.object_store.delete_object(location)
                    logger.info('Rolled back %s', location_url(location))
                except Exception:
                    logger.warning("Error rolling back '%s'",
                                   location_url(location), exc_info=True)
        logger.info('Cache session in %s destroyed', staging.root_path)

    def exists(self, key):
        """Returns ``True`` if ``key`` is a known cache key.

           This does not mean the file was downloaded.
        """
        return self._registry.exists(key)

    def file(self, key):
        """Returns a :class:`CachedFile` handle for ``key``.

           The handle is lazy: nothing is checked or downloaded until one of
           its methods is called.
        """
        return CachedFile(self, key)

    @_teardown_on_error
    def register_future_file(self, key, location, mime_type=None):
        """Adds a placeholder for a file which does not exist yet.

           The file may be created at the handle's
           :meth:`CachedFile.get_path` and later committed to ``location``.
           Until then it counts as modified, so :meth:`commit_changed`
           uploads it too.
        """
        self._check_init('register_future_file', key)
        location = self._registry.register(key, location)
        path = self._staging.new_path(location.key)
        self._entries.add_placeholder(key, path, mime_type)
        return self.file(key)

    @_teardown_on_error
    def commit_changed(self):
        """Commits every file which was modified locally.

           Modifications are detected on a best-effort basis (see
           :mod:`objectcache.client.watch`); placeholders always count as
           modified. Files are committed concurrently; the first failure is
           raised.

           Returns the list of committed cache keys.
        """
        self._check_init('commit_changed')
        keys = self._entries.modified_keys()
        if not keys:
            return []
        with ThreadPoolExecutor(
                max_workers=min(self.max_workers, len(keys))) as executor:
            futures = [executor.submit(self._commit, key) for key in keys]
            for future in as_completed(futures):
                future.result()
        return keys

    def _check_init(self, operation, key=None):
        if self._staging is None:
            raise NotInitializedError(
                    'Not initialized; must call init() before %s()'
                    % operation, key=key, operation=operation)

    def _call_store(self, method, operation, key, location, *args):
        try:
            return getattr(self.object_store, method)(location, *args)
        except Exception as e:
            raise self._upstream_error(e, method, operation, key,
                                       location) from e

    def _upstream_error(self, e, method, operation, key, location):
        name = getattr(e, 'name', type(e).__name__)
        return UpstreamError(
                '%s error while %s %s for "%s": %s'
                % (name, _STORE_ACTIONS[method], location_url(location),
                   key, e),
                location=location, key=key, operation=operation)

    @_teardown_on_error
    def _get_path(self, key):
        self._check_init('get_path', key)
        location = self._registry.location_for(key, operation='get_path')

        entry = self._entries.get(key)
        if entry is not None:
            if entry.state == PENDING:
                return entry.path
            if entry.state == READY and entry.file_exists():
                return entry.path

        return self._download(key, location)

    def _download(self, key, location):
        t = time.time()
        logger.debug('    downloading %s', location_url(location))

        info = self._call_store('head_object', 'get_path', key, location)
        # Objects of unknown size are fetched anyway.
        size = info.size or 0
        if not self._staging.reserve(size):
            raise QuotaExceededError(
                    'Not enough space to cache "%s" from %s (%d bytes '
                    'needed, %d bytes available)'
                    % (key, location_url(location), size,
                       self._staging.available_bytes),
                    required=size, available=self._staging.available_bytes,
                    key=key, operation='get_path')

        stream, get_info = self._call_store('get_object', 'get_path', key,
                                            location)
        path = self._staging.new_path(location.key)
        try:
            with contextlib.closing(stream), open(path, 'wb') as f:
                shutil.copyfileobj(stream, f)
                nbytes = f.tell()
        except Exception as e:
            if isinstance(e, OSError) and e.errno is not None:
                raise StagingUnavailableError(
                        'Cannot write "%s" to %s: %s' % (key, path, e),
                        key=key, operation='get_path') from e
            raise self._upstream_error(e, 'get_object', 'get_path', key,
                                       location) from e

        self._staging.consume(nbytes)
        self._entries.add_download(
                key, path, get_info.content_type or info.content_type)
        logger.debug('    downloaded %s (%d bytes) in %.2fs',
                     location_url(location), nbytes, time.time() - t)
        return path

    @_teardown_on_error
    def _commit(self, key, bucket=None, remote_key=None, mime_type=None):
        self._check_init('commit', key)
        default = self._registry.location_for(key, operation='commit')
        entry = self._entries.get(key)
        if entry is None or not entry.file_exists():
            raise LocalFileNotFoundError(
                    'Local file for "%s" not found%s'
                    % (key, ' at ' + entry.path if entry else ''),
                    key=key, operation='commit')

        destination = RemoteLocation(bucket or default.bucket,
                                     remote_key or default.key)
        content_type = mime_type or entry.mime_type

        t = time.time()
        logger.debug('    committing "%s" to %s', key,
                     location_url(destination))
        try:
            f = open(entry.path, 'rb')
        except FileNotFoundError as e:
            raise LocalFileNotFoundError(
                    'Local file "%s" not found' % (entry.path,),
                    key=key, operation='commit') from e
        except OSError as e:
            raise ObjectCacheError(
                    'Cannot read local file "%s": %s' % (entry.path, e),
                    key=key, operation='commit') from e
        with f:
            self._call_store('put_object', 'commit', key, destination, f,
                             content_type, self.storage_class)

        if destination not in self._committed:
            self._committed.append(destination)
        self._entries.clear_modified(key)
        logger.debug('    committed "%s" in %.2fs', key, time.time() - t)

    @_teardown_on_error
    def _delete(self, key):
        self._check_init('delete', key)
        self._registry.location_for(key, operation='delete')
        self._entries.delete(key)


class CachedFile:
    """A handle for a single cache key, returned by :meth:`Cache.file`."""

    def __init__(self, cache, key):
        self.cache = cache
        self.key = key

    def get_path(self):
        """Returns the local path of the file.

           If the file is not present locally, it is downloaded first.
           Calling this again returns the same path without downloading.
        """
        return self.cache._get_path(self.key)

    def commit(self, bucket=None, key=None, mime_type=None):
        """Uploads the local file.

           By default the file is saved to the location registered for its
           cache key, with the MIME type reported when it was downloaded (or
           given for a placeholder). ``bucket``, ``key`` and ``mime_type``
           override these for this call only.
        """
        self.cache._commit(self.key, bucket, key, mime_type)

    def delete(self):
        """Deletes the local file, e.g. to free some disk space.

           The cache key stays registered; the next :meth:`get_path`
           downloads the object again.
        """
        self.cache._delete(self.key)

    def __repr__(self):
        return '<CachedFile %r>' % (self.key,)
