"""Best-effort detection of changes to staged files."""

import os


class WatchManager:
    """An abstract class representing a watch manager.

    Watch manager is basically a factory of :class:`WatchManager.Watch`
    instances.
    """

    class Watch:
        """An abstract class representing a watch over a single file."""

        def changed(self):
            """Returns ``True`` if the file seems to have been written to
            since the watch was (re)armed.

            Detection is best-effort: a change may be missed, and a closed
            watch never reports anything.
            """
            raise NotImplementedError

        def rearm(self):
            """Forgets the changes seen so far."""
            raise NotImplementedError

        def close(self):
            """Stops watching and releases any system resources.

            May be called more than once (it's a no-op then).
            """
            pass

    def watch(self, path):
        """Returns a :class:`WatchManager.Watch` bound to ``path``.

        The file does not have to exist yet.
        """
        raise NotImplementedError


def file_signature(path):
    """Returns ``(size, mtime in nanoseconds)`` of a file, or ``None`` if
    the file does not exist."""
    try:
        st = os.stat(path)
    except FileNotFoundError:
        return None
    return (st.st_size, st.st_mtime_ns)


class StatWatchManager(WatchManager):
    """A :class:`WatchManager` comparing file size and modification time.

    The file is examined only when :meth:`Watch.changed` is called, so no
    background work is done. A rewrite preserving both the size and the
    modification time goes unnoticed.
    """

    class StatWatch(WatchManager.Watch):
        def __init__(self, path):
            self.path = path
            self.closed = False
            self.rearm()

        def changed(self):
            if self.closed:
                return False
            return file_signature(self.path) != self.signature

        def rearm(self):
            self.signature = file_signature(self.path)

        def close(self):
            self.closed = True

    def watch(self, path):
        return self.StatWatch(path)


class NoOpWatchManager(WatchManager):
    """A no-op :class:`WatchManager`.

    With it, only placeholders are considered modified.
    """

    class NoOpWatch(WatchManager.Watch):
        def changed(self):
            return False

        def rearm(self):
            pass

    def watch(self, path):
        return self.NoOpWatch()
