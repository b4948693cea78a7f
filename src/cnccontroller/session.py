"""
The logical connection between the controller service and a machine.

A session is opened on a serial port or a network socket of the service host and is
identified by the ident the service issues. At most one session is live at a time.
"""
import logging
import threading
from collections.abc import Mapping

from cnccontroller.constants import ConnectionKind, ControllerFamily, DEFAULT_BAUD_RATE, DEFAULT_SOCKET_PORT
from cnccontroller.support.mixins import CommonEqualityMixin, StringerMixin

logger = logging.getLogger(__name__)


def noop(*args, **kwargs):
    pass


class SerialOptions(CommonEqualityMixin, StringerMixin):
    """
    Opens a serial port on the service host.
    :param path: the serial port, such as '/dev/ttyUSB0' or 'COM3'.
    :param baud_rate: the baud rate of the port.
    :param rtscts: enables hardware flow control.
    """
    kind = ConnectionKind.SERIAL

    def __init__(self, path, baud_rate=DEFAULT_BAUD_RATE, rtscts=False):
        self.path = path
        self.baud_rate = baud_rate
        self.rtscts = rtscts

    def payload(self):
        return {'path': self.path, 'baudRate': self.baud_rate, 'rtscts': self.rtscts}


class SocketOptions(CommonEqualityMixin, StringerMixin):
    """
    Opens a telnet style socket to a networked controller, reached from the service host.
    """
    kind = ConnectionKind.SOCKET

    def __init__(self, host, port=DEFAULT_SOCKET_PORT):
        self.host = host
        self.port = port

    def payload(self):
        return {'host': self.host, 'port': self.port}


def options_payload(options):
    """
    Converts open options to the mapping sent to the service.
    Mappings are sent as given, None is sent as an empty mapping.
    """
    if options is None:
        return {}
    if isinstance(options, Mapping):
        return dict(options)
    return options.payload()


def wire_value(value):
    return value.value if isinstance(value, (ControllerFamily, ConnectionKind)) else value


class Session(StringerMixin):
    """
    The identity of the open connection. An empty ident means there is no open connection.
    """
    def __init__(self):
        self.ident = ''
        self.kind = None
        self.settings = {}

    @property
    def is_open(self):
        return bool(self.ident)

    def clear(self):
        self.ident = ''
        self.kind = None
        self.settings = {}


class ConnectionSession:
    """
    Opens and closes the connection to a machine through the service.

    :param socket_provider: a callable returning the current TransportSocket, or None when there is none.
    :param lock: held while an acknowledgment updates the session and notifies the callback.
    """
    def __init__(self, socket_provider, lock=None):
        self._socket_provider = socket_provider
        self._lock = lock or threading.RLock()
        self.session = Session()

    @property
    def ident(self):
        return self.session.ident

    @property
    def is_open(self):
        return self.session.is_open

    def open(self, family=ControllerFamily.GRBL, kind=None, options=None, callback=None):
        """
        Requests the service to open a connection.
        :param family: the ControllerFamily of the machine.
        :param kind: the ConnectionKind. Defaults to the kind of the options, or serial.
        :param options: SerialOptions, SocketOptions or a mapping sent as given.
        :param callback: called as callback(err, *args) with the acknowledgment. On success,
            args[0] is the ident of the new session.
        """
        callback = callback or noop
        socket = self._socket_provider()
        if socket is None:
            return
        if kind is None:
            kind = getattr(options, 'kind', ConnectionKind.SERIAL)
        payload = options_payload(options)

        def opened(err=None, *args):
            with self._lock:
                if not err:
                    self.session.ident = args[0] if args else ''
                    self.session.kind = ConnectionKind.lookup(kind)
                    self.session.settings = payload
                    logger.info("session %s opened" % self.session.ident)
                else:
                    logger.debug("open failed: %s" % (err,))
                callback(err, *args)

        socket.emit('open', wire_value(family), wire_value(kind), payload, callback=opened)

    def close(self, callback=None):
        """
        Requests the service to close the open connection. Does nothing if there is no session.
        The session is cleared once the service acknowledges, whether or not it reports an error.
        :param callback: called as callback(err, *args) with the acknowledgment.
        """
        callback = callback or noop
        socket = self._socket_provider()
        if socket is None or not self.is_open:
            return

        ident = self.session.ident

        def closed(err=None, *args):
            with self._lock:
                self.session.clear()
                logger.info("session %s closed" % ident)
                callback(err, *args)

        socket.emit('close', ident, callback=closed)

    def get_ports(self, callback=None):
        """
        Requests the serial ports available on the service host.
        :param callback: called as callback(err, ports).
        """
        socket = self._socket_provider()
        if socket is None:
            return
        socket.emit('getPorts', callback=callback)

    def apply_open_event(self, payload):
        """ Records the session announced by a connection:open event. """
        payload = payload if isinstance(payload, Mapping) else {}
        self.session.ident = payload.get('ident') or ''
        self.session.kind = ConnectionKind.lookup(payload.get('type'))
        settings = payload.get('settings')
        self.session.settings = dict(settings) if isinstance(settings, Mapping) else {}

    def reset(self):
        self.session.clear()
