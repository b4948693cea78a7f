"""
Binds the transport contract to the python-socketio client.

The client runs its own background threads that read from the service, deliver events
and reconnect after an outage. It has no events for reconnection, so the socket raises them:

- the first connection is retried in the background with reconnect_attempt, reconnecting,
  reconnect_error and reconnect_failed, following the BackoffRetryStrategy of the options.
- every connection after the first, or after a retry, is also reported as reconnect.

The client reconnects after an outage without reporting its attempts, and connect_timeout
and error are never raised.
"""
import logging
import threading
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import socketio
from socketio.exceptions import BadNamespaceError, ConnectionError as SocketIOConnectionError

from cnccontroller.support.retry_strategy import BackoffRetryStrategy
from cnccontroller.transport.base import ConnectOptions, TransportError, TransportFactory, TransportSocket

logger = logging.getLogger(__name__)

# events raised by the socket rather than received by the client
SOCKET_EVENTS = frozenset(['connect', 'reconnect', 'reconnect_attempt', 'reconnecting', 'reconnect_error',
                           'reconnect_failed'])


def url_with_token(host, token):
    """
    Adds the access token to the query of the service url.

    >>> url_with_token('http://localhost:8000', 'abc')
    'http://localhost:8000?token=abc'
    >>> url_with_token('http://localhost:8000/?a=1', None)
    'http://localhost:8000/?a=1'
    """
    if not token:
        return host
    parts = urlsplit(host)
    query = parse_qsl(parts.query) + [('token', token)]
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))


class SocketIOSocket(TransportSocket):
    """
    A TransportSocket backed by a socketio.Client.
    :param host: the url of the controller service.
    :param options: the ConnectOptions for the connection.
    :param client_factory: creates the client. Replaced in tests.
    """
    def __init__(self, host, options: ConnectOptions, client_factory=socketio.Client):
        self.host = host
        self.options = options
        self.retry_strategy = BackoffRetryStrategy.from_options(options)
        self._client = client_factory(
            reconnection=options.reconnection,
            reconnection_attempts=options.reconnection_attempts,
            reconnection_delay=options.reconnection_delay,
            reconnection_delay_max=options.reconnection_delay_max,
            randomization_factor=options.randomization_factor,
            logger=False)
        self._handlers = {}
        self._closed = threading.Event()
        self._connections = 0
        self._attempt = 0
        self._client.on('connect', self._on_connect)

    @property
    def connected(self) -> bool:
        return bool(self._client.connected)

    def on(self, event, handler):
        if event in SOCKET_EVENTS:
            self._handlers[event] = handler
        else:
            self._client.on(event, handler)

    def _trigger(self, event, *args):
        handler = self._handlers.get(event)
        if handler is not None:
            handler(*args)

    def _on_connect(self, *args):
        self._connections += 1
        self._trigger('connect', *args)
        if self._connections > 1 or self._attempt:
            self._trigger('reconnect')

    def emit(self, event, *args, callback=None):
        """
        Sends the event. When the client is not connected the request is dropped, and
        the callback, if any, is called with a TransportError.
        """
        try:
            self._client.emit(event, args, callback=callback)
        except BadNamespaceError as e:
            logger.warning("not connected to %s, dropping %s: %s" % (self.host, event, e))
            if callback is not None:
                callback(TransportError("not connected to %s" % self.host))

    def open(self):
        """
        With reconnection enabled, connects in the background and retries until connected.
        Otherwise connects once and raises TransportError on failure.
        """
        if not self.options.reconnection:
            self._connect()
            return
        self._client.start_background_task(self._connect_with_retry)

    def _connect(self):
        options = self.options
        url = url_with_token(self.host, options.token)
        try:
            self._client.connect(url, headers=options.headers,
                                 auth={'token': options.token} if options.token else None,
                                 transports=options.transports,
                                 socketio_path=options.socketio_path,
                                 wait_timeout=options.wait_timeout)
            logger.info("connected to %s" % self.host)
        except SocketIOConnectionError as e:
            logger.warning("unable to connect to %s: %s" % (self.host, e))
            raise TransportError("unable to connect to %s" % self.host) from e

    def _connect_with_retry(self):
        self._attempt = 0
        while True:
            try:
                self._connect()
                break
            except TransportError as e:
                if self._attempt:
                    self._trigger('reconnect_error', str(e.__cause__ or e))
            if self.retry_strategy.exhausted(self._attempt):
                logger.warning("giving up on %s after %d retries" % (self.host, self._attempt))
                self._trigger('reconnect_failed')
                return
            if self._closed.wait(self.retry_strategy(self._attempt)):
                return
            self._attempt += 1
            self._trigger('reconnect_attempt', self._attempt)
            self._trigger('reconnecting', self._attempt)

        self._attempt = 0
        if self._closed.is_set():
            # destroyed while connecting
            self._client.disconnect()

    def destroy(self):
        self._closed.set()
        self._client.shutdown()


class SocketIOTransport(TransportFactory):
    """ Creates SocketIOSocket instances. """

    def __init__(self, client_factory=socketio.Client):
        self._client_factory = client_factory

    def connect(self, host, options: ConnectOptions) -> TransportSocket:
        return SocketIOSocket(host, options or ConnectOptions(), self._client_factory)
