from unittest import TestCase
from unittest.mock import Mock

from hamcrest import assert_that, is_, calling, raises, instance_of, contains_exactly
from socketio.exceptions import BadNamespaceError, ConnectionError as SocketIOConnectionError

from cnccontroller.controller import Controller
from cnccontroller.session import SerialOptions
from cnccontroller.support.retry_strategy import BackoffRetryStrategy
from cnccontroller.transport.base import ConnectOptions, TransportError
from cnccontroller.transport.socketio_transport import SocketIOSocket, SocketIOTransport, url_with_token


class UrlWithTokenTest(TestCase):
    def test_no_token(self):
        assert_that(url_with_token('http://localhost:8000', None), is_('http://localhost:8000'))

    def test_token_appended(self):
        assert_that(url_with_token('http://localhost:8000', 'abc'), is_('http://localhost:8000?token=abc'))

    def test_token_added_to_query(self):
        assert_that(url_with_token('http://cnc:8000/?lang=en', 'abc'), is_('http://cnc:8000/?lang=en&token=abc'))


class SocketIOSocketTestCase(TestCase):
    options = ConnectOptions(reconnection_attempts=3, token='secret', transports=['websocket'])

    def setUp(self):
        self.client = Mock()
        self.client_factory = Mock(return_value=self.client)
        self.sut = SocketIOSocket('http://localhost:8000', self.options, self.client_factory)
        self.events = []
        for event in ('connect', 'reconnect', 'reconnect_attempt', 'reconnecting', 'reconnect_error',
                      'reconnect_failed'):
            self.sut.on(event, self.recorder(event))

    def recorder(self, event):
        return lambda *args: self.events.append((event,) + args)

    def client_connected(self):
        """ calls the connect handler the socket registered with the client. """
        handler = self.client.on.call_args_list[0][0][1]
        handler()


class SocketIOSocketTest(SocketIOSocketTestCase):
    def test_client_configured_from_options(self):
        self.client_factory.assert_called_once_with(reconnection=True, reconnection_attempts=3,
                                                    reconnection_delay=1, reconnection_delay_max=5,
                                                    randomization_factor=0.5, logger=False)
        assert_that(self.sut.retry_strategy, is_(BackoffRetryStrategy(1, 5, 0.5, 3)))

    def test_on_registers_with_client(self):
        handler = Mock()
        self.sut.on('controller:state', handler)
        self.client.on.assert_called_with('controller:state', handler)

    def test_connection_events_kept_by_socket(self):
        assert_that(self.client.on.call_count, is_(1))
        assert_that(self.client.on.call_args[0][0], is_('connect'))

    def test_first_connect(self):
        self.client_connected()
        assert_that(self.events, is_([('connect',)]))

    def test_later_connect_is_reconnect(self):
        self.client_connected()
        self.client_connected()
        assert_that(self.events, is_([('connect',), ('connect',), ('reconnect',)]))

    def test_emit_arguments_as_tuple(self):
        callback = Mock()
        self.sut.emit('command', 'ident', 'gcode', 'G0X0', callback=callback)
        self.client.emit.assert_called_once_with('command', ('ident', 'gcode', 'G0X0'), callback=callback)

    def test_emit_no_arguments(self):
        self.sut.emit('getPorts')
        self.client.emit.assert_called_once_with('getPorts', (), callback=None)

    def test_emit_not_connected_calls_back_with_error(self):
        self.client.emit.side_effect = BadNamespaceError('/ is not a connected namespace.')
        callback = Mock()
        self.sut.emit('getPorts', callback=callback)
        callback.assert_called_once()
        assert_that(callback.call_args[0][0], is_(instance_of(TransportError)))

    def test_emit_not_connected_without_callback(self):
        self.client.emit.side_effect = BadNamespaceError('/ is not a connected namespace.')
        self.sut.emit('write', 'ident', '?', None)

    def test_open_connects_in_background(self):
        self.sut.open()
        self.client.start_background_task.assert_called_once_with(self.sut._connect_with_retry)
        self.client.connect.assert_not_called()

    def test_connected(self):
        self.client.connected = False
        assert_that(self.sut.connected, is_(False))
        self.client.connected = True
        assert_that(self.sut.connected, is_(True))

    def test_destroy(self):
        self.sut.destroy()
        self.client.shutdown.assert_called_once_with()
        self.client.disconnect.assert_not_called()


class OpenWithoutReconnectionTest(SocketIOSocketTestCase):
    options = ConnectOptions(reconnection=False, token='secret', transports=['websocket'])

    def test_open(self):
        self.sut.open()
        self.client.connect.assert_called_once_with('http://localhost:8000?token=secret', headers={},
                                                    auth={'token': 'secret'}, transports=['websocket'],
                                                    socketio_path='socket.io', wait_timeout=1)
        self.client.start_background_task.assert_not_called()

    def test_open_failure(self):
        self.client.connect.side_effect = SocketIOConnectionError('refused')
        assert_that(calling(self.sut.open), raises(TransportError))


class ConnectWithRetryTest(SocketIOSocketTestCase):
    def setUp(self):
        super().setUp()
        self.sut.retry_strategy = BackoffRetryStrategy(0, 0, attempts=3)

    def test_connects_first_time(self):
        self.sut._connect_with_retry()
        assert_that(self.client.connect.call_count, is_(1))
        assert_that(self.events, is_([]))

    def test_retries_until_connected(self):
        self.client.connect.side_effect = self.fail_then_connect(2)
        self.sut._connect_with_retry()
        assert_that(self.events, contains_exactly(
            ('reconnect_attempt', 1), ('reconnecting', 1), ('reconnect_error', 'refused'),
            ('reconnect_attempt', 2), ('reconnecting', 2),
            ('connect',), ('reconnect',)))

    def test_gives_up_after_attempts(self):
        self.client.connect.side_effect = SocketIOConnectionError('refused')
        self.sut._connect_with_retry()
        assert_that(self.client.connect.call_count, is_(4))
        assert_that(self.events[-2:], is_([('reconnect_error', 'refused'), ('reconnect_failed',)]))

    def test_destroy_stops_retrying(self):
        self.client.connect.side_effect = SocketIOConnectionError('refused')
        self.sut.destroy()
        self.sut._connect_with_retry()
        assert_that(self.client.connect.call_count, is_(1))
        assert_that(self.events, is_([]))

    def test_destroyed_while_connecting(self):
        self.client.connect.side_effect = lambda *args, **kwargs: self.sut.destroy()
        self.sut._connect_with_retry()
        self.client.disconnect.assert_called_once_with()

    def fail_then_connect(self, failures):
        calls = []

        def connect(*args, **kwargs):
            calls.append(args)
            if len(calls) <= failures:
                raise SocketIOConnectionError('refused')
            self.client_connected()
        return connect


class SocketIOTransportTest(TestCase):
    def test_connect_creates_socket(self):
        client_factory = Mock()
        sut = SocketIOTransport(client_factory)
        socket = sut.connect('http://cnc:8000', None)
        assert_that(socket, is_(instance_of(SocketIOSocket)))
        assert_that(socket.host, is_('http://cnc:8000'))
        assert_that(socket.options, is_(ConnectOptions()))
        assert_that(client_factory.call_count, is_(1))


class ControllerOverSocketIOTest(TestCase):
    def setUp(self):
        self.client = Mock()
        self.client.emit.side_effect = BadNamespaceError('/ is not a connected namespace.')
        self.sut = Controller(SocketIOTransport(Mock(return_value=self.client)))
        self.sut.connect('http://127.0.0.1:1')

    def test_get_ports_while_not_connected(self):
        callback = Mock()
        self.sut.get_ports(callback)
        assert_that(callback.call_args[0][0], is_(instance_of(TransportError)))

    def test_open_while_not_connected(self):
        callback = Mock()
        self.sut.open('Grbl', 'serial', SerialOptions('/dev/ttyUSB0'), callback)
        assert_that(callback.call_args[0][0], is_(instance_of(TransportError)))
        assert_that(self.sut.session.ident, is_(''))
