"""

Controller service client

- Transport: the reconnecting, event based socket to the controller service. The
  TransportFactory creates sockets, SocketIOTransport binds it to python-socketio.
- Controller: the facade. Registers a relay for every event the service pushes,
  updates the session and machine state for the events that describe them, and then
  notifies the listeners registered for the event.
- ConnectionSession: the connection from the service to a machine (serial port or
  network socket), identified by the ident the service issues when it is opened.
- ControllerStateModel: the controller family, firmware settings and status reports.
  Positions are interpreted per firmware family and reported in millimeters.


Lifecycle

    disconnected -> connected (transport connect)
    connected -> session open (connection:open, or open() acknowledged)
    session open -> connected (connection:close, or close() acknowledged)
    any -> disconnected (transport disconnect)

Leaving the session open state clears the session, the controller family, settings,
state and the workflow state. The listeners are kept across reconnects.

"""
from cnccontroller.constants import ConnectionKind, ControllerFamily, WorkflowState
from cnccontroller.controller import Controller, ControllerError, TransportRequiredError
from cnccontroller.events import EventName
from cnccontroller.session import SerialOptions, SocketOptions
from cnccontroller.transport.base import ConnectOptions

__all__ = ['Controller', 'ControllerError', 'TransportRequiredError', 'EventName', 'ControllerFamily',
           'ConnectionKind', 'WorkflowState', 'SerialOptions', 'SocketOptions', 'ConnectOptions']
