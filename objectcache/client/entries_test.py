import os
import shutil
import tempfile
import unittest

from objectcache.client.entries import EntryTracker, PENDING, READY, DELETED
from objectcache.client.watch import StatWatchManager, NoOpWatchManager


class EntryTrackerTest(unittest.TestCase):
    def setUp(self):
        self.dir_path = tempfile.mkdtemp()
        self.tracker = EntryTracker(StatWatchManager())

    def tearDown(self):
        shutil.rmtree(self.dir_path)

    def _make_file(self, name, data=b'hello'):
        path = os.path.join(self.dir_path, name)
        with open(path, 'wb') as f:
            f.write(data)
        return path

    def test_downloaded_entry_should_start_unmodified(self):
        path = self._make_file('a.txt')
        entry = self.tracker.add_download('a', path, 'text/plain')

        self.assertEqual(entry.state, READY)
        self.assertEqual(entry.mime_type, 'text/plain')
        self.assertFalse(entry.modified)
        self.assertEqual(self.tracker.modified_keys(), [])

    def test_write_should_mark_entry_modified_until_commit(self):
        path = self._make_file('a.txt')
        entry = self.tracker.add_download('a', path)

        self._make_file('a.txt', b'hello world')
        self.assertTrue(entry.modified)
        self.assertEqual(self.tracker.modified_keys(), ['a'])

        self.tracker.clear_modified('a')
        self.assertFalse(entry.modified)
        self.assertEqual(self.tracker.modified_keys(), [])

    def test_placeholder_should_start_modified_and_pending(self):
        path = os.path.join(self.dir_path, 'new.txt')
        entry = self.tracker.add_placeholder('new', path, 'text/csv')

        self.assertEqual(entry.state, PENDING)
        self.assertTrue(entry.modified)
        self.assertFalse(entry.file_exists())

        self._make_file('new.txt')
        self.tracker.clear_modified('new')
        self.assertEqual(entry.state, READY)
        self.assertFalse(entry.modified)

    def test_placeholder_should_stay_modified_without_watch(self):
        tracker = EntryTracker(NoOpWatchManager())
        tracker.add_placeholder('new', os.path.join(self.dir_path, 'n.txt'))
        tracker.add_download('a', self._make_file('a.txt'))

        self._make_file('a.txt', b'changed contents')
        self.assertEqual(tracker.modified_keys(), ['new'])

    def test_delete_should_remove_file_but_keep_entry(self):
        path = self._make_file('a.txt')
        self.tracker.add_download('a', path)

        self.tracker.delete('a')
        entry = self.tracker.get('a')
        self.assertFalse(os.path.exists(path))
        self.assertEqual(entry.state, DELETED)
        self.assertIsNone(entry.watch)
        self.assertEqual(self.tracker.modified_keys(), [])

        self.tracker.delete('a')
        self.tracker.delete('never-added')

    def test_clear_should_close_watches(self):
        path = self._make_file('a.txt')
        watch = self.tracker.add_download('a', path).watch

        self.tracker.clear()
        self.assertIsNone(self.tracker.get('a'))
        self._make_file('a.txt', b'hello world')
        self.assertFalse(watch.changed())
