import unittest

from objectcache.client import InvalidLocationError, UnknownKeyError
from objectcache.client.location import RemoteLocation
from objectcache.client.registry import KeyRegistry


class KeyRegistryTest(unittest.TestCase):
    def setUp(self):
        self.registry = KeyRegistry()

    def test_initialize_should_resolve_all_forms(self):
        self.registry.initialize({
            'fileA': 's3://my-bucket/path/to/fileA.txt',
            'fileB': {'bucket': 'another-bucket', 'key': 'path/to/fileB.txt'},
        })

        self.assertEqual(self.registry.location_for('fileA'),
                         RemoteLocation('my-bucket', 'path/to/fileA.txt'))
        self.assertEqual(self.registry.location_for('fileB'),
                         RemoteLocation('another-bucket', 'path/to/fileB.txt'))
        self.assertEqual(sorted(self.registry.keys()), ['fileA', 'fileB'])

    def test_initialize_should_replace_previous_entries(self):
        self.registry.initialize({'old': 's3://b/old.txt'})
        self.registry.initialize({'new': 's3://b/new.txt'})

        self.assertFalse(self.registry.exists('old'))
        self.assertTrue(self.registry.exists('new'))

    def test_failed_initialize_should_leave_registry_empty(self):
        self.registry.initialize({'old': 's3://b/old.txt'})

        with self.assertRaises(InvalidLocationError) as cm:
            self.registry.initialize({'good': 's3://b/x.txt',
                                      'bad': 's3://b/'})
        self.assertEqual(cm.exception.key, 'bad')
        self.assertEqual(self.registry.keys(), [])

    def test_register_should_extend_registry(self):
        self.registry.initialize({'a': 's3://b/a.txt'})

        location = self.registry.register('c', 's3://b/c.txt')
        self.assertEqual(location, RemoteLocation('b', 'c.txt'))
        self.assertTrue(self.registry.exists('a'))
        self.assertTrue(self.registry.exists('c'))

    def test_register_of_invalid_location_should_not_add_key(self):
        with self.assertRaises(InvalidLocationError):
            self.registry.register('c', 's3://b')
        self.assertFalse(self.registry.exists('c'))

    def test_location_for_unknown_key_should_raise(self):
        with self.assertRaises(UnknownKeyError) as cm:
            self.registry.location_for('missing', operation='commit')
        self.assertEqual(cm.exception.key, 'missing')
        self.assertEqual(cm.exception.operation, 'commit')

    def test_clear_should_forget_everything(self):
        self.registry.initialize({'a': 's3://b/a.txt'})
        self.registry.clear()
        self.assertFalse(self.registry.exists('a'))
