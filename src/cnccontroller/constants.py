"""
Values shared with the controller service.
The enum values are the strings used on the wire.
"""
from enum import Enum


class LookupEnum(Enum):

    @classmethod
    def lookup(cls, value):
        """
        Resolves a member given as a member or its wire value.
        :return: the matching member, or None when the value is not known.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except (ValueError, TypeError):
            return None


class ControllerFamily(LookupEnum):
    """
    The firmware dialects understood by the service.

    >>> ControllerFamily.lookup('Grbl')
    <ControllerFamily.GRBL: 'Grbl'>
    >>> ControllerFamily.lookup('Marlin') is None
    True
    """
    GRBL = 'Grbl'
    SMOOTHIE = 'Smoothie'
    TINYG = 'TinyG'


class ConnectionKind(LookupEnum):
    SERIAL = 'serial'
    SOCKET = 'socket'


class WorkflowState(LookupEnum):
    IDLE = 'idle'
    RUNNING = 'running'
    PAUSED = 'paused'


# Units
IMPERIAL_UNITS = 'in'
METRIC_UNITS = 'mm'

# modal group 6 words
MODAL_UNITS = {
    'G20': IMPERIAL_UNITS,
    'G21': METRIC_UNITS
}

# the firmware setting that selects inch reports on Grbl ($13=1)
GRBL_REPORT_INCHES = '$13'

DEFAULT_WCS = 'G54'

DEFAULT_BAUD_RATE = 115200
DEFAULT_SOCKET_PORT = 23

AXES = ('x', 'y', 'z', 'a', 'b', 'c')
