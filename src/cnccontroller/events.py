"""
The closed set of event names pushed by the controller service.
"""
from cnccontroller.constants import LookupEnum


class EventName(LookupEnum):
    """
    >>> EventName.lookup('controller:state')
    <EventName.CONTROLLER_STATE: 'controller:state'>
    >>> EventName.lookup('invalid:event') is None
    True
    """
    # Transport events
    # Fired upon a connection including a successful reconnection.
    CONNECT = 'connect'
    CONNECT_ERROR = 'connect_error'
    CONNECT_TIMEOUT = 'connect_timeout'
    ERROR = 'error'
    DISCONNECT = 'disconnect'
    RECONNECT = 'reconnect'
    RECONNECT_ATTEMPT = 'reconnect_attempt'
    RECONNECTING = 'reconnecting'
    RECONNECT_ERROR = 'reconnect_error'
    # Fired when the transport gives up reconnecting.
    RECONNECT_FAILED = 'reconnect_failed'

    # System events
    STARTUP = 'startup'
    PORTS = 'ports'
    CONFIG_CHANGE = 'config:change'
    TASK_START = 'task:start'
    TASK_FINISH = 'task:finish'
    TASK_ERROR = 'task:error'
    CONTROLLER_TYPE = 'controller:type'
    CONTROLLER_SETTINGS = 'controller:settings'
    CONTROLLER_STATE = 'controller:state'
    CONNECTION_OPEN = 'connection:open'
    CONNECTION_CLOSE = 'connection:close'
    CONNECTION_CHANGE = 'connection:change'
    CONNECTION_ERROR = 'connection:error'
    CONNECTION_READ = 'connection:read'
    CONNECTION_WRITE = 'connection:write'
    GCODE_LOAD = 'gcode:load'
    GCODE_UNLOAD = 'gcode:unload'
    FEEDER_STATUS = 'feeder:status'
    SENDER_STATUS = 'sender:status'
    WORKFLOW_STATE = 'workflow:state'
    MESSAGE = 'message'


# events that update local state before they are relayed to listeners
STATE_EVENTS = frozenset((
    EventName.CONTROLLER_TYPE,
    EventName.CONTROLLER_SETTINGS,
    EventName.CONTROLLER_STATE,
    EventName.CONNECTION_OPEN,
    EventName.CONNECTION_CLOSE,
    EventName.WORKFLOW_STATE,
    EventName.DISCONNECT,
    EventName.RECONNECT_FAILED,
))
