import logging

logger = logging.getLogger(__name__)


class EventSource(object):
    """
    A list of listeners that are notified in registration order when an event is fired.
    A listener may be registered more than once, and is then notified once per registration.
    """

    def __init__(self):
        self._handlers = []

    def __iadd__(self, handler):
        return self.add(handler)

    def __isub__(self, handler):
        return self.remove(handler)

    def __len__(self):
        return len(self._handlers)

    def add(self, handler):
        self._handlers.append(handler)
        return self

    def remove(self, handler):
        if handler in self._handlers:
            self._handlers.remove(handler)
        return self

    def handlers(self):
        return tuple(self._handlers)

    def fire(self, *args, **kwargs):
        self._fire(*args, **kwargs)

    def fire_all(self, events):
        for e in events:
            self._fire(e)

    def _fire(self, *args, **kwargs):
        # a snapshot so listeners added while firing are notified on the next event
        for handler in tuple(self._handlers):
            handler(*args, **kwargs)


class IsolatedEventSource(EventSource):
    """
    An event source where a failing listener does not stop the remaining listeners.
    The failure is logged with its traceback.
    """

    def __init__(self, log=logger):
        super().__init__()
        self.logger = log

    def _fire(self, *args, **kwargs):
        for handler in tuple(self._handlers):
            try:
                handler(*args, **kwargs)
            except Exception:
                self.logger.exception("listener %r failed" % handler)
