import logging

from cnccontroller.events import EventName
from cnccontroller.support.events import EventSource

logger = logging.getLogger(__name__)


class ListenerRegistry:
    """
    Keeps an ordered list of listeners for each event the controller service can push.

    Only the names in EventName are accepted. Names may be given as EventName members
    or as their wire strings. Invalid registrations are reported through the return value
    rather than raised.
    """

    def __init__(self):
        self._sources = {name: EventSource() for name in EventName}

    def register(self, event_name, listener) -> bool:
        """
        Adds the listener to the end of the listeners for the event.
        :return: True if the listener was added. False if the event name is not known or
            the listener is not callable.
        """
        source = self._source(event_name)
        if source is None or not callable(listener):
            return False
        source += listener
        return True

    def deregister(self, event_name, listener) -> bool:
        """
        Removes the first registration of the listener for the event.
        Removing a listener that was not registered has no effect.
        :return: False if the event name is not known or the listener is not callable,
            True otherwise.
        """
        source = self._source(event_name)
        if source is None or not callable(listener):
            return False
        source -= listener
        return True

    def dispatch(self, event_name, *args):
        """
        Calls each listener for the event in registration order with the given arguments.
        A listener that raises does not prevent the others from being called.
        """
        source = self._source(event_name)
        if source is None:
            logger.debug("ignoring dispatch of unknown event %r" % (event_name,))
            return
        source.fire(*args)

    def listeners(self, event_name):
        """
        :return: a tuple of the listeners registered for the event, empty if the event is unknown.
        """
        source = self._source(event_name)
        return source.handlers() if source is not None else ()

    def _source(self, event_name) -> EventSource:
        name = EventName.lookup(event_name)
        return self._sources[name] if name is not None else None
