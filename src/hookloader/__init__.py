"""
Handler discovery and binding for connection-oriented servers.

- Loader: the chainable entry point. Scans directories for handler modules, loads them and
  binds their exports to a server's connection events.
- DirectoryScanner: finds handler files in a directory, filtering on extension and hiding
  dot-files.
- ModuleLoader: loads a handler file as a module and lists its exports.
- handlers: converts exports to handlers. A function export is called as-is. A class export
  is instantiated once and its `connection` method is called for each connection.
- ConnectionDispatcher: the listener registered with the server. Calls each handler with
  (server, connection, *extra_arguments).
- servers: any object with a `connection_events` event source can be bound to.
  TCPConnectionServer is a simple blocking implementation.

Typical use:

    Loader(cwd=root, verbose=True) \\
        .when('handlers') \\
        .when('admin/handlers') \\
        .with_extra_argument(database) \\
        .into(server)

Every name a handler module exports becomes a handler. When the module defines `__all__`, the
names listed there are its exports. Otherwise its exports are the public functions and classes
defined in the module itself; imported names and names starting with an underscore are left
out. So a helper such as `def format_reply(text)` must either start with an underscore or be
left out of `__all__`, or it is called with (server, connection) like any other handler:

    __all__ = ['greet']

    def format_reply(text):
        return 'hello ' + text

    def greet(server, connection):
        connection.send(format_reply('there').encode())

Handler modules may import modules under their own directory with relative imports
(`from .lib import util`). A module in a scanned directory is loaded as a handler module
itself, so helper modules belong in a subdirectory such as `handlers/lib`.

Loading is synchronous. A file that fails to load, or that exports something other than a
function or class, stops the binding with an exception and nothing is registered with the
server. Missing directories and ignored files are only logged, and only when verbose.
"""
from hookloader.loader import Loader, create_loader
from hookloader.modules import LoaderError, ModuleLoadError
from hookloader.handlers import HandlerExportError

__all__ = ['Loader', 'create_loader', 'LoaderError', 'ModuleLoadError', 'HandlerExportError']
