"""Objectcache presents objects kept in a remote object store as ordinary
   local files.

   Some tools cannot stream: they want to seek, rewrite or re-read a whole
   file. Objectcache downloads the objects such a tool needs into a private
   staging directory, tracks which of them were modified locally and
   uploads them back only when asked to.

   -----------------------
   Keys and locations
   -----------------------

   Every object is addressed by a *remote location*, a bucket and a key.
   Locations may be written as URLs (``s3://bucket/path/to/key``) or given
   in structured form (``{'bucket': ..., 'key': ...}``).

   Callers do not use locations directly. Instead, a session is initialized
   with a map of *cache keys* (arbitrary names chosen by the caller) to
   locations, and each file is then reached through its cache key.

   -----------------------
   Configuration and usage
   -----------------------

   The class you want is :class:`objectcache.client.Cache`::

     cache = Cache()
     cache.init({'report': 's3://my-bucket/reports/2024.xlsx'})
     try:
         path = cache.file('report').get_path()
         ... modify the file at ``path`` ...
         cache.file('report').commit()
     finally:
         cache.destroy()

   Any error raised by a cache operation tears the whole session down first,
   so after an error the cache has to be initialized again.

   If you write tests, you may be also interested in
   :class:`objectcache.client.dummy.DummyObjectStore`.

   --------------------------------
   Using objectcache from the shell
   --------------------------------

   Objects can be fetched, uploaded and edited in place from the shell::

     $ objectcache --help

   ----------------------
   API Reference
   ----------------------

   .. autofunction:: objectcache.client.location.resolve

   .. autoclass:: objectcache.client.cache.Cache
       :members:

   .. autoclass:: objectcache.client.cache.CachedFile
       :members:

   .. autoclass:: objectcache.client.object_store.ObjectStore
       :members:

   .. autoclass:: objectcache.client.remote_object_store.RemoteObjectStore

   .. autoclass:: objectcache.client.s3_object_store.S3ObjectStore

   .. autoclass:: objectcache.client.watch.WatchManager
       :members:

   .. autoclass:: objectcache.client.watch.StatWatchManager

   .. autoclass:: objectcache.client.watch.NoOpWatchManager

   .. autoclass:: objectcache.client.dummy.DummyObjectStore
"""
