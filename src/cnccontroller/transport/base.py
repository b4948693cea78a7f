from abc import ABCMeta, abstractmethod

from cnccontroller.support.mixins import CommonEqualityMixin, StringerMixin


class TransportError(Exception):
    """ Indicates the transport could not reach the controller service. """


class ConnectOptions(CommonEqualityMixin, StringerMixin):
    """
    Options for the connection to the controller service.
    The reconnection values are passed on to the transport, which owns the retry policy.

    :param reconnection: when True, the transport reconnects after the connection is lost.
    :param reconnection_attempts: the number of attempts before giving up, 0 for no limit.
    :param reconnection_delay: seconds to wait before the first reconnection attempt.
    :param reconnection_delay_max: the upper bound of the delay between attempts, in seconds.
    :param randomization_factor: the jitter applied to the delay.
    :param transports: the transports to try, such as ['websocket'], or None for the default.
    :param headers: additional HTTP headers for the handshake.
    :param token: the access token expected by the service.
    :param socketio_path: the endpoint path of the service.
    :param wait_timeout: seconds to wait for the connection to be established.
    """
    def __init__(self, reconnection=True, reconnection_attempts=0, reconnection_delay=1,
                 reconnection_delay_max=5, randomization_factor=0.5, transports=None, headers=None,
                 token=None, socketio_path='socket.io', wait_timeout=1):
        self.reconnection = reconnection
        self.reconnection_attempts = reconnection_attempts
        self.reconnection_delay = reconnection_delay
        self.reconnection_delay_max = reconnection_delay_max
        self.randomization_factor = randomization_factor
        self.transports = transports
        self.headers = dict(headers) if headers else {}
        self.token = token
        self.socketio_path = socketio_path
        self.wait_timeout = wait_timeout


class TransportSocket(metaclass=ABCMeta):
    """
    A reconnecting, event based connection to the controller service.

    Handlers are registered with on() before the socket is opened. Events are
    delivered by calling the handler with the event arguments.
    """

    @property
    @abstractmethod
    def connected(self) -> bool:
        """ True while the socket is connected to the service. """
        raise NotImplementedError

    @abstractmethod
    def on(self, event, handler):
        """ registers the handler for the named event. """
        raise NotImplementedError

    @abstractmethod
    def emit(self, event, *args, callback=None):
        """
        sends the named event with the given arguments. Does not raise when the service
        cannot be reached: the request is dropped and the callback receives a TransportError.
        :param callback: when given, called with the arguments of the service's acknowledgment.
        """
        raise NotImplementedError

    @abstractmethod
    def open(self):
        """
        starts connecting. With reconnection enabled, failures are retried and reported
        through events. Otherwise raises TransportError if the service cannot be reached.
        """
        raise NotImplementedError

    @abstractmethod
    def destroy(self):
        """ closes the socket and stops any reconnection. """
        raise NotImplementedError


class TransportFactory(metaclass=ABCMeta):
    """ Creates sockets to the controller service. """

    @abstractmethod
    def connect(self, host, options: ConnectOptions) -> TransportSocket:
        """
        Creates a socket for the given host. The socket is not yet opened.
        :param host: the url of the service, e.g. 'http://localhost:8000'
        """
        raise NotImplementedError
