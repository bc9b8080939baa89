"""Tracking of the local copies of cached objects."""

import os

from objectcache.utils import remove_file

PENDING = 'pending'
READY = 'ready'
DELETED = 'deleted'


class LocalEntry:
    """The local side of a cache key.

       ``state`` is one of:

       * ``PENDING`` for a placeholder whose file is to be created by the
         user,
       * ``READY`` for a downloaded or committed file,
       * ``DELETED`` after the local file has been deleted.
    """

    def __init__(self, path, mime_type=None, modified=False, watch=None,
                 state=READY):
        self.path = path
        self.mime_type = mime_type
        self.watch = watch
        self.state = state
        self._modified = modified

    @property
    def modified(self):
        # Latch: a change seen once stays until the next commit.
        if not self._modified and self.watch is not None \
                and self.watch.changed():
            self._modified = True
        return self._modified

    def mark_committed(self):
        self._modified = False
        self.state = READY
        if self.watch is not None:
            self.watch.rearm()

    def file_exists(self):
        return os.path.isfile(self.path)

    def close_watch(self):
        if self.watch is not None:
            self.watch.close()
            self.watch = None


class EntryTracker:
    """Keeps one :class:`LocalEntry` per cache key."""

    def __init__(self, watch_manager):
        self.watch_manager = watch_manager
        self._entries = {}

    def get(self, key):
        return self._entries.get(key)

    def add_download(self, key, path, mime_type=None):
        self._replace(key, LocalEntry(
                path, mime_type, modified=False,
                watch=self.watch_manager.watch(path), state=READY))
        return self._entries[key]

    def add_placeholder(self, key, path, mime_type=None):
        # Placeholders start modified, so that commit_changed() picks them
        # up even if their creation is never noticed.
        self._replace(key, LocalEntry(
                path, mime_type, modified=True,
                watch=self.watch_manager.watch(path), state=PENDING))
        return self._entries[key]

    def _replace(self, key, entry):
        old = self._entries.get(key)
        if old is not None:
            old.close_watch()
        self._entries[key] = entry

    def clear_modified(self, key):
        entry = self._entries.get(key)
        if entry is not None:
            entry.mark_committed()

    def delete(self, key):
        """Removes the local file of ``key``.

           The entry itself stays, marked as ``DELETED``, so that the next
           access downloads the object again.
        """
        entry = self._entries.get(key)
        if entry is None:
            return
        entry.close_watch()
        remove_file(entry.path)
        entry.state = DELETED

    def modified_keys(self):
        return [key for key, entry in list(self._entries.items())
                if entry.state != DELETED and entry.modified]

    def close_all(self):
        for entry in self._entries.values():
            entry.close_watch()

    def clear(self):
        self.close_all()
        self._entries = {}
