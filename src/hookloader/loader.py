import os

from hookloader.dispatch import ConnectionDispatcher, bind
from hookloader.handlers import normalize_exports
from hookloader.modules import ModuleLoader
from hookloader.options import merge_options, LoaderOptions
from hookloader.scanner import DirectoryScanner

# logger method names accepted by Loader.log()
log_levels = {
    'info': 'info',
    'log': 'info',
    'warn': 'warning',
    'warning': 'warning',
    'error': 'error',
}


class Loader:
    """
    Discovers handler modules and binds them to the connection events of a server.

    The calls chain:

        Loader(cwd=root, verbose=True).when('handlers').with_extra_argument(db).into(server)

    Repeated calls accumulate: each when() adds more files, each with_extra_argument() adds more
    arguments, and each into() registers another listener with the server.

    :param options: a LoaderOptions instance to start from. Keyword arguments override its fields.
    :param fs: the filesystem used to scan directories
    :param module_loader: loads a file and returns its exports
    """
    def __init__(self, options: LoaderOptions=None, fs=None, module_loader=None, **overlay):
        self.options = merge_options(overlay, options)
        self.extra_arguments = []
        self.scanner = DirectoryScanner(self.options.cwd, self.options.extensions, self.log, fs)
        self.module_loader = module_loader or ModuleLoader()

    @property
    def files(self):
        """ the files discovered so far, in discovery order """
        return self.scanner.files

    def log(self, message, level='info'):
        """
        Logs the message to the configured logger when verbose.
        :param message: a string, or a sequence of strings that are joined with spaces
        :param level: one of 'info', 'log', 'warn', 'warning', 'error'
        """
        if self.options.verbose:
            if not isinstance(message, str):
                message = " ".join(str(m) for m in message)
            method = getattr(self.options.logger, log_levels[level])
            method(message)
        return self

    def when(self, dirname):
        """ Scans the directory, relative to the cwd option, for handler files. """
        self.scanner.scan(dirname)
        return self

    def with_extra_argument(self, *extra_argument):
        """ Adds arguments that are passed to every handler after the server and connection. """
        self.extra_arguments.extend(extra_argument)
        return self

    def get_relative_to(self, location):
        """
        The location relative to the cwd option, prefixed with '.'.
        """
        return '.' + location.split(self.options.cwd)[-1]

    def get_key_name(self, name):
        """ The file name without the directory and extension. """
        return os.path.splitext(os.path.basename(name))[0]

    def _namespace(self, file):
        if not self.options.with_namespace:
            return None
        relative = os.path.relpath(os.path.dirname(file), self.options.cwd).replace(os.sep, '/')
        key = self.get_key_name(file)
        return key if relative == '.' else relative + '/' + key

    def handlers(self) -> tuple:
        """
        Loads the discovered files and converts their exports to handlers, in file order and then
        export order.
        :raises ModuleLoadError: when a file cannot be loaded
        :raises HandlerExportError: when a file exports a value that is not a handler
        """
        handlers = []
        for file in self.files:
            parts = self.get_relative_to(file).split(os.sep)
            exports = self.module_loader.load(file)
            handlers.extend(normalize_exports(exports, self.log, self._namespace(file), parts[-1]))
        return tuple(handlers)

    def into(self, server):
        """
        Binds the handlers to the server's connection events.
        All files are loaded before the server is touched, so when loading fails nothing is bound.
        """
        dispatcher = ConnectionDispatcher(server, self.handlers(), self.extra_arguments,
                                          self.options.isolate_errors, self.options.logger)
        bind(server, dispatcher)
        return self


def create_loader(**options) -> Loader:
    return Loader(**options)
