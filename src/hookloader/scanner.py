"""
    Finds handler module files in a directory.
    The filesystem is accessed through a small collaborator so that scanning can be
    exercised without real files.
"""
import logging
import os

logger = logging.getLogger(__name__)

# entries whose name begins with this are hidden
hidden_marker = '.'


class LocalFileSystem:
    """ The filesystem primitives used during discovery, backed by os.path. """

    def exists(self, path):
        return os.path.exists(path)

    def is_directory(self, path):
        return os.path.isdir(path)

    def list_entries(self, path):
        return os.listdir(path)

    def join(self, *parts):
        return os.path.join(*parts)

    def basename(self, path):
        return os.path.basename(path)

    @staticmethod
    def extension(name):
        """
        The text after the last period, or the whole name when there is no period.
        >>> LocalFileSystem.extension('greet.py')
        'py'
        >>> LocalFileSystem.extension('archive.tar.gz')
        'gz'
        >>> LocalFileSystem.extension('Makefile')
        'Makefile'
        """
        return name.rsplit('.', 1)[-1]


class DirectoryScanner:
    """
    Scans directories relative to a root for files with an accepted extension.
    The files found are appended to `files`, so scanning several directories accumulates
    a single list in discovery order.

    :param root: the directory that scanned names are relative to
    :param extensions: the accepted extensions, without a leading period
    :param log: a callable(message, level) receiving the scanner's messages
    :param fs: the filesystem collaborator
    """
    def __init__(self, root, extensions, log, fs=None):
        self.root = root
        self.extensions = tuple(extensions)
        self.files = []
        self._log = log
        self.fs = fs or LocalFileSystem()

    def scan(self, dirname):
        """
        Appends the accepted files in the directory to the file list.
        A missing directory, or a path that is not a directory, is reported and otherwise ignored.
        :return: the files found by this scan
        """
        fs = self.fs
        location = fs.join(self.root, dirname)

        if not fs.exists(location):
            self._log("Entity not found %s" % location, 'error')
            return []

        if not fs.is_directory(location):
            self._log("%s is not a folder" % location, 'error')
            return []

        found = []
        for filename in fs.list_entries(location):
            if not self._is_allowed(filename):
                continue
            found.append(fs.join(location, filename))

        logger.debug("found %d files in %s" % (len(found), location))
        self.files.extend(found)
        return found

    def _is_allowed(self, filename):
        extension = self.fs.extension(filename)
        if extension not in self.extensions:
            self._log("Ignoring extension: %s" % extension)
            return False
        if filename.startswith(hidden_marker):
            self._log("Ignoring hidden entity: %s" % filename)
            return False
        return True
