from optparse import OptionParser
import logging
import shutil
import subprocess
import sys

from objectcache.client import Cache
from objectcache.client.location import resolve


_BUFFER_SIZE = 64 * 1024


def _make_command_parser(cmd, extra_usage=''):
    usage = "usage: %prog [options] command [command-specific options] " \
            + extra_usage
    description = "Help for command '%s'" % cmd
    return OptionParser(usage=usage, description=description)


def cmd_get(cache, *args):
    parser = _make_command_parser('get', "url local_filename")
    options, args = parser.parse_args(list(args))
    if not args:
        parser.error("Missing object URL")
    if len(args) == 1:
        parser.error("Missing local filename")
    if len(args) > 2:
        parser.error("Too many arguments")
    cache.init({'object': args[0]})
    try:
        shutil.copyfile(cache.file('object').get_path(), args[1])
    finally:
        cache.destroy()


def cmd_cat(cache, *args):
    parser = _make_command_parser('cat', "url")
    options, args = parser.parse_args(list(args))
    if not args:
        parser.error("Missing object URL")
    if len(args) > 1:
        parser.error("Too many arguments")
    cache.init({'object': args[0]})
    try:
        with open(cache.file('object').get_path(), 'rb') as f:
            buf = f.read(_BUFFER_SIZE)
            while buf:
                sys.stdout.buffer.write(buf)
                buf = f.read(_BUFFER_SIZE)
        sys.stdout.buffer.flush()
    finally:
        cache.destroy()


def cmd_put(cache, *args):
    parser = _make_command_parser('put', "local_filename url")
    parser.add_option('-m', '--content-type', dest='content_type',
            default=None, help="MIME type of the uploaded object")
    options, args = parser.parse_args(list(args))
    if not args:
        parser.error("Missing local filename")
    if len(args) == 1:
        parser.error("Missing object URL")
    if len(args) > 2:
        parser.error("Too many arguments")
    cache.init({})
    try:
        f = cache.register_future_file('object', args[1],
                                       options.content_type)
        shutil.copyfile(args[0], f.get_path())
        f.commit()
    finally:
        cache.destroy()


def cmd_rm(cache, *args):
    parser = _make_command_parser('rm', "url")
    options, args = parser.parse_args(list(args))
    if not args:
        parser.error("Missing object URL")
    if len(args) > 1:
        parser.error("Too many arguments")
    cache.object_store.delete_object(resolve(args[0]))


def _parse_mapping(parser, mappings):
    key_map = {}
    for mapping in mappings:
        key, sep, url = mapping.partition('=')
        if not sep or not key or not url:
            parser.error("Invalid mapping %r, expected KEY=URL" % mapping)
        key_map[key] = url
    return key_map


def _substitute(arg, paths):
    for key, path in paths.items():
        arg = arg.replace('{' + key + '}', path)
    return arg


def cmd_run(cache, *args):
    """Runs a command on local copies of objects, then uploads whatever
       the command changed.

       Returns the exit code of the command.
    """
    parser = _make_command_parser('run', "-m KEY=URL [-m ...] command...")
    parser.disable_interspersed_args()
    parser.add_option('-m', '--map', dest='mappings', action='append',
            default=[], help="Make object URL available as {KEY}")
    options, args = parser.parse_args(list(args))
    if not options.mappings:
        parser.error("Missing object mapping")
    if not args:
        parser.error("Missing command")
    key_map = _parse_mapping(parser, options.mappings)

    cache.init(key_map)
    try:
        paths = dict((key, cache.file(key).get_path()) for key in key_map)
        command = [_substitute(arg, paths) for arg in args]
        logging.getLogger('objectcache').debug('Running %s', command)
        returncode = subprocess.call(command)
        if returncode != 0:
            return returncode
        cache.commit_changed()
        return 0
    finally:
        cache.destroy()


def main(argv=None):
    usage = "usage: %prog [options] command [command-specific options]"
    commands = [s for s in globals() if s.startswith('cmd_')]
    commands = sorted([s[4:] for s in commands])
    epilog = """
Options specified above are filled from environment
(OBJECTCACHE_URL, OBJECTCACHE_TMPDIR, OBJECTCACHE_STORAGE_CLASS,
OBJECTCACHE_MAX_BYTES) if not specified on the command line.

Each command has its own --help text.

Supported commands: %s.""" % ', '.join(commands)
    parser = OptionParser(usage=usage, epilog=epilog)
    parser.disable_interspersed_args()

    parser.add_option('-r', '--remote-url', dest='remote_url', default=None,
            help="URL of a path-style HTTP object server (S3 API is used "
                 "if not given)")
    parser.add_option('-t', '--tmp-dir', dest='tmp_dir', default=None,
            help="Directory for the staging directory")
    parser.add_option('-s', '--storage-class', dest='storage_class',
            default=None, help="Storage class of uploaded objects")
    parser.add_option('-q', '--max-bytes', dest='max_bytes', default=None,
            help="Limit of downloaded bytes, e.g. 512M")
    parser.add_option('-v', '--verbose', dest='verbose', default=0,
            action='count', help="Be verbose")

    options, args = parser.parse_args(argv)
    if not args:
        parser.error("Missing command. Try --help for list of available "
                "commands.")
    cmd = globals().get('cmd_' + args[0],
            lambda *a: parser.error("Unknown command: " + args[0]))

    level = logging.WARNING
    if options.verbose:
        level = logging.DEBUG
    logging.basicConfig(
            format="%(asctime)-15s %(name)s %(levelname)s: %(message)s",
            level=level)

    try:
        cache = Cache(remote_url=options.remote_url, tmp_dir=options.tmp_dir,
                      storage_class=options.storage_class,
                      max_bytes=options.max_bytes)
    except ValueError as e:
        parser.error(str(e))
    return cmd(cache, *args[1:]) or 0


if __name__ == '__main__':
    sys.exit(main())
