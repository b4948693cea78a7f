import logging

logger = logging.getLogger(__name__)


class EventSource(object):
    """
    An ordered list of handlers that are notified when the source fires.

    Handlers are called synchronously in the order they were added. The same handler
    may be added more than once, in which case it is called once per registration.
    A handler that raises is logged and does not prevent the remaining handlers from
    being notified.
    """

    def __init__(self):
        self._handlers = []

    def __iadd__(self, handler):
        return self.add(handler)

    def __isub__(self, handler):
        return self.remove(handler)

    def add(self, handler):
        self._handlers.append(handler)
        return self

    def remove(self, handler):
        """ removes the first registration of the handler, compared by identity. """
        for index, h in enumerate(self._handlers):
            if h is handler:
                del self._handlers[index]
                break
        return self

    def handlers(self):
        return tuple(self._handlers)

    def fire(self, *args, **kwargs):
        self._fire(*args, **kwargs)

    def _fire(self, *args, **kwargs):
        # iterate a snapshot so handlers may add or remove handlers while being notified
        for handler in self.handlers():
            try:
                handler(*args, **kwargs)
            except Exception as e:
                logger.exception("event handler %s raised '%s'" % (handler, e))
