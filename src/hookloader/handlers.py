"""
Reduces the values exported by a handler module to connection handlers.

There are two kinds of handler:

- FunctionHandler: a plain callable export, called as-is.
- ConnectionHandler: a class export exposing a `connection` method. The class is instantiated
  once, and the instance's `connection` method is called for every connection, so state kept on
  the instance carries from one connection to the next.

Every handler is called with (server, connection, *extra_arguments).
"""
import inspect
import logging

from hookloader.modules import LoaderError

logger = logging.getLogger(__name__)

# the method a class export provides to handle connections
connection_method = 'connection'


class HandlerExportError(LoaderError):
    """ A module exports a value that cannot be used as a handler. """


class Handler:
    """ A callable bound to connection events. """
    kind = None

    def __init__(self, name, target):
        """
        :param name: a descriptive name, used for logging
        :param target: the exported function, or the instance created from the exported class
        """
        self.name = name
        self.target = target

    def __call__(self, server, connection, *extra_arguments):
        raise NotImplementedError

    def __repr__(self):
        return "<%s %s>" % (type(self).__name__, self.name)


class FunctionHandler(Handler):
    kind = 'function'

    def __call__(self, server, connection, *extra_arguments):
        self.target(server, connection, *extra_arguments)


class ConnectionHandler(Handler):
    kind = 'connection'

    def __init__(self, name, target):
        super().__init__(name, target)
        self._connection = getattr(target, connection_method)

    def __call__(self, server, connection, *extra_arguments):
        self._connection(server, connection, *extra_arguments)


def has_connection_method(instance):
    return callable(getattr(instance, connection_method, None))


def qualified_name(namespace, name):
    """
    >>> qualified_name('routes/chat', 'greet')
    'routes/chat.greet'
    >>> qualified_name(None, 'greet')
    'greet'
    """
    return namespace + '.' + name if namespace else name


def normalize_export(name, value, log, namespace=None):
    """
    Converts one exported value to a handler.
    :return: the handler, or None when the value is a class without a connection method
    :raises HandlerExportError: when the value is not callable, or the class cannot be instantiated
    """
    handler_name = qualified_name(namespace, name)
    if not callable(value):
        raise HandlerExportError("module requires a function export: %s" % handler_name)

    if not inspect.isclass(value):
        return FunctionHandler(handler_name, value)

    try:
        instance = value()
    except Exception as e:
        raise HandlerExportError("cannot instantiate %s: %s" % (handler_name, e)) from e
    logger.debug("created %r for %s", instance, handler_name)

    if not has_connection_method(instance):
        log("cannot load route: %s has no %s method" % (handler_name, connection_method), 'error')
        return None
    return ConnectionHandler(handler_name, instance)


def normalize_exports(exports, log, namespace=None, source=None) -> list:
    """
    Converts the exports of one module to handlers, preserving the export order.
    Class exports without a connection method are reported and left out.

    :param exports: a mapping of export name to value, such as from ModuleLoader.load()
    :param log: a callable(message, level) receiving the messages
    :param namespace: qualifies the handler names
    :param source: the file the exports were loaded from, used in messages
    """
    handlers = []
    for name, value in exports.items():
        handler = normalize_export(name, value, log, namespace)
        if handler is None:
            continue
        log("loaded: %s" % (source or handler.name))
        handlers.append(handler)
    return handlers
