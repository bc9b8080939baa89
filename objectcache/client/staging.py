"""The session-scoped staging directory."""

import logging
import os
import posixpath
import shutil
import uuid

from objectcache.client import StagingUnavailableError
from objectcache.utils import mkdir, rmtree, format_size_with_unit

logger = logging.getLogger('objectcache')

STAGING_DIR_PREFIX = 'objectcache-'


class StagingArea:
    """A private directory holding the files of a single session, together
       with an estimate of the bytes which may still be downloaded into it.

       The estimate is taken once, when the area is opened, and later only
       decreased by :meth:`consume`. It is never compared with the actual
       free space again, so it is advisory only.
    """

    def __init__(self, root_path, available_bytes):
        self.root_path = root_path
        self.available_bytes = available_bytes

    @classmethod
    def open(cls, tmp_dir, max_bytes=None):
        """Creates a new, uniquely named staging directory in ``tmp_dir``.

           If ``max_bytes`` is given, the byte budget is capped at this
           value.
        """
        root_path = os.path.join(tmp_dir,
                                 STAGING_DIR_PREFIX + uuid.uuid4().hex)
        try:
            mkdir(root_path)
        except OSError as e:
            raise StagingUnavailableError(
                    "Cannot create staging directory in %s: %s"
                    % (tmp_dir, e), operation='init') from e
        try:
            available_bytes = shutil.disk_usage(tmp_dir).free
        except OSError as e:
            rmtree(root_path)
            raise StagingUnavailableError(
                    "Cannot query free space in %s: %s" % (tmp_dir, e),
                    operation='init') from e
        if max_bytes is not None:
            available_bytes = min(available_bytes, max_bytes)
        logger.debug('Opened staging directory %s (%s available)',
                     root_path, format_size_with_unit(available_bytes))
        return cls(root_path, available_bytes)

    def reserve(self, nbytes):
        """Returns ``True`` if ``nbytes`` more bytes fit in the budget.

           The budget is not decreased; see :meth:`consume`.
        """
        return nbytes <= self.available_bytes

    def consume(self, nbytes):
        self.available_bytes -= nbytes

    def new_path(self, remote_key=''):
        """Returns a fresh path in the staging directory.

           The file name is random, but keeps the extension of
           ``remote_key``, as some tools look at it.
        """
        _, ext = posixpath.splitext(posixpath.basename(remote_key))
        return os.path.join(self.root_path, uuid.uuid4().hex + ext)

    def close(self):
        """Removes the staging directory with everything inside.

           May be called more than once.
        """
        rmtree(self.root_path)
        logger.debug('Removed staging directory %s', self.root_path)
