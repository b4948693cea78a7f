from cnccontroller.transport.base import ConnectOptions, TransportError, TransportFactory, TransportSocket

__all__ = ['ConnectOptions', 'TransportError', 'TransportFactory', 'TransportSocket']
