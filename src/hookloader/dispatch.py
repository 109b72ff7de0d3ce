import logging

from hookloader.support.events import EventSource, IsolatedEventSource

logger = logging.getLogger(__name__)


class ConnectionDispatcher:
    """
    The listener registered with a server. On each connection, every handler is called in order
    with (server, connection, *extra_arguments).

    By default, an exception raised by a handler propagates to the code firing the connection event
    and the remaining handlers are not called for that connection. When isolated, the exception
    is logged and the next handler is called.

    :param server: the server the handlers are bound to
    :param handlers: the handlers to call. The dispatcher keeps its own copy.
    :param extra_arguments: the list of extra arguments. This is read each time a connection arrives,
        so arguments added after binding are passed to later connections.
    :param isolate: when True, handler failures are logged rather than raised
    :param log: the logger receiving handler failures when isolated
    """
    def __init__(self, server, handlers, extra_arguments, isolate=False, log=logger):
        self.server = server
        self.extra_arguments = extra_arguments
        self.handlers = EventSource() if not isolate else IsolatedEventSource(log)
        for handler in handlers:
            self.handlers.add(handler)

    def __call__(self, connection):
        self.handlers.fire(self.server, connection, *self.extra_arguments)

    def __len__(self):
        return len(self.handlers)


def bind(server, dispatcher):
    """
    Registers the dispatcher to receive the server's connection events.
    The server is required to provide an event source `connection_events` that is fired with the
    connection each time a client connects.
    """
    events = getattr(server, 'connection_events', None)
    if events is None:
        raise TypeError("%r has no connection_events to bind to" % server)
    events.add(dispatcher)
    logger.debug("bound %d handlers to %r" % (len(dispatcher), server))
    return dispatcher
