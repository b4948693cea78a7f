"""
The client facade for a controller service.

Connects to the service, relays the events it pushes to registered listeners, and keeps
the session and machine state that the events describe. Commands are sent to the machine
of the open session.

Transport events are delivered on the transport's thread. The state and the listener
notifications are guarded by a single lock, so listeners and readers never observe a
partially updated state.
"""
import logging
import threading

from cnccontroller.constants import ControllerFamily, WorkflowState
from cnccontroller.events import EventName, STATE_EVENTS
from cnccontroller.listeners import ListenerRegistry
from cnccontroller.session import ConnectionSession, noop
from cnccontroller.state import ControllerStateModel
from cnccontroller.support.mapping import as_mapping
from cnccontroller.transport.base import ConnectOptions, TransportError, TransportFactory

logger = logging.getLogger(__name__)


class ControllerError(Exception):
    pass


class TransportRequiredError(ControllerError, ValueError):
    """ The controller was created without a transport. """


def ensure_list(value):
    if value is None:
        return []
    return list(value) if isinstance(value, (list, tuple)) else [value]


class OneShot:
    """
    Calls the wrapped callback at most once.
    """
    def __init__(self, callback):
        self._callback = callback
        self.fired = False

    def __call__(self, *args):
        if self.fired:
            return
        self.fired = True
        if self._callback:
            self._callback(*args)


class Controller:
    """
    :param io: the TransportFactory used to create sockets to the service.
    """

    def __init__(self, io: TransportFactory):
        if io is None:
            raise TransportRequiredError("Expected a transport, but got: %s" % io)
        self.io = io
        self.socket = None
        self._lock = threading.RLock()
        self.listeners = ListenerRegistry()
        self.connection = ConnectionSession(lambda: self.socket, self._lock)
        self.model = ControllerStateModel()
        self.workflow_state = WorkflowState.IDLE
        # the machine envelope, for applications to pass as command context
        self.context = {'xmin': 0, 'xmax': 0, 'ymin': 0, 'ymax': 0, 'zmin': 0, 'zmax': 0}
        # user-defined baud rates
        self.baud_rates = []
        # the controller families the service supports
        self.loaded_controllers = []
        self._ready = OneShot(None)

    @property
    def connected(self) -> bool:
        """ True if the client is connected to the service. """
        return bool(self.socket is not None and self.socket.connected)

    @property
    def session(self):
        return self.connection.session

    @property
    def family(self):
        """ the reported controller family: a ControllerFamily, the reported string when unknown, or None. """
        return self.model.controller_family or self.model.family

    @property
    def settings(self):
        return self.model.settings

    @property
    def state(self):
        return self.model.state

    def connect(self, host='', options: ConnectOptions=None, on_ready=None):
        """
        Connects to the service. Any previous connection is closed first.
        :param host: the url of the service.
        :param options: the ConnectOptions. Defaults are used when None.
        :param on_ready: called as on_ready(None) the first time the service announces startup.
        """
        self._destroy_socket()
        self._ready = OneShot(on_ready)
        socket = self.socket = self.io.connect(host, options or ConnectOptions())

        for name in EventName:
            socket.on(name.value, self._relay(socket, name))

        try:
            socket.open()
        except TransportError as e:
            # the transport has reported the failure through connect_error
            logger.debug("connect to %s failed: %s" % (host, e))

    def disconnect(self):
        """ Closes the connection to the service. """
        self._destroy_socket()

    def _destroy_socket(self):
        socket = self.socket
        self.socket = None
        if socket is not None:
            socket.destroy()
            with self._lock:
                self._reset()
            logger.info("disconnected")

    def _relay(self, socket, name):
        def relay(*args):
            self._on_event(socket, name, *args)
        return relay

    def _on_event(self, socket, name, *args):
        with self._lock:
            if socket is not self.socket:
                logger.debug("dropping %s from a previous connection" % name.value)
                return
            logger.debug("event %s" % name.value)
            if name in STATE_EVENTS:
                self._update_state(name, args)
            elif name is EventName.STARTUP:
                self._startup(args[0] if args else None)
            self.listeners.dispatch(name, *args)
            if name is EventName.STARTUP:
                self._ready(None)

    def _update_state(self, name, args):
        first = args[0] if args else None
        second = args[1] if len(args) > 1 else None
        if name is EventName.CONTROLLER_TYPE:
            self.model.apply_type(first)
        elif name is EventName.CONTROLLER_SETTINGS:
            self.model.apply_settings(first, second)
        elif name is EventName.CONTROLLER_STATE:
            self.model.apply_state(first, second)
        elif name is EventName.CONNECTION_OPEN:
            self.connection.apply_open_event(first)
        elif name in (EventName.CONNECTION_CLOSE, EventName.DISCONNECT, EventName.RECONNECT_FAILED):
            self._reset()
        elif name is EventName.WORKFLOW_STATE:
            self.workflow_state = WorkflowState.lookup(first) or first

    def _startup(self, data):
        startup = as_mapping(data)
        self.loaded_controllers = ensure_list(startup.get('loadedControllers'))
        # user-defined baud rates
        self.baud_rates = ensure_list(startup.get('baudRates'))

    def _reset(self):
        # the session goes first so that commands are no longer forwarded
        self.connection.reset()
        self.model.reset()
        self.workflow_state = WorkflowState.IDLE

    def register_listener(self, event_name, listener) -> bool:
        """
        Adds the listener to the end of the listeners for the named event.
        :param event_name: an EventName, or its string such as 'controller:state'
        :return: True if added, False if the event is unknown or the listener is not callable.
        """
        return self.listeners.register(event_name, listener)

    def deregister_listener(self, event_name, listener) -> bool:
        """
        Removes the first registration of the listener for the named event.
        :return: False if the event is unknown or the listener is not callable.
        """
        return self.listeners.deregister(event_name, listener)

    add_listener = register_listener
    remove_listener = deregister_listener

    def open(self, family=ControllerFamily.GRBL, kind=None, options=None, callback=None):
        """
        Opens a connection to a machine.
        :param family: the ControllerFamily of the machine. Defaults to Grbl.
        :param kind: the ConnectionKind. Defaults to the kind of the options.
        :param options: SerialOptions or SocketOptions.
        :param callback: called as callback(err, ident) once the service responds.
        """
        self.connection.open(family, kind, options, callback)

    def close(self, callback=None):
        """
        Closes the open connection. Does nothing when no connection is open.
        The local state is cleared when the service responds, even when it reports an error.
        :param callback: called as callback(err) once the service responds.
        """
        callback = callback or noop

        def closed(err=None, *args):
            self._reset()
            callback(err, *args)

        self.connection.close(closed)

    def get_ports(self, callback=None):
        """
        Lists the serial ports of the service host.
        :param callback: called as callback(err, ports).
        """
        self.connection.get_ports(callback)

    def _session_target(self):
        """
        :return: the socket and session ident to send to, read together, or None when there
            is no socket or no open session.
        """
        with self._lock:
            socket = self.socket
            ident = self.connection.ident
        if socket is None or not ident:
            logger.debug("no open session, dropping request")
            return None
        return socket, ident

    def command(self, cmd, *args, callback=None):
        """
        Executes a command on the service.

        Examples:
        - controller.command('gcode:load', name, gcode, context, callback=loaded)
        - controller.command('gcode:start')
        - controller.command('gcode:stop', {'force': True})
        - controller.command('feedhold'), 'cyclestart', 'statusreport', 'homing', 'sleep', 'unlock', 'reset'
        - controller.command('gcode', 'G0X0Y0', context)
        - controller.command('macro:run', macro_id, context, callback=done)
        - controller.command('watchdir:load', '/path/to/file', callback=loaded)

        :param callback: when given, called with the service's acknowledgment.
        """
        target = self._session_target()
        if target is None:
            return
        socket, ident = target
        socket.emit('command', ident, cmd, *args, callback=callback)

    def write(self, data, context=None):
        """
        Writes data to the open connection.
        :param context: the context associated with the data.
        """
        target = self._session_target()
        if target is None:
            return
        socket, ident = target
        socket.emit('write', ident, data, context)

    def writeln(self, data, context=None):
        """
        Writes data and a newline to the open connection.
        :param context: the context associated with the data.
        """
        target = self._session_target()
        if target is None:
            return
        socket, ident = target
        socket.emit('writeln', ident, data, context)

    def get_machine_state(self):
        with self._lock:
            return self.model.get_machine_state(self.connection.is_open)

    def get_machine_position(self):
        with self._lock:
            return self.model.get_machine_position()

    def get_work_position(self):
        with self._lock:
            return self.model.get_work_position()

    def get_work_coordinate_system(self):
        with self._lock:
            return self.model.get_work_coordinate_system()
