"""
The last known state of the machine, as reported by the controller service.

Each firmware family reports positions in its own way. Grbl reports in inches when
setting $13 is enabled, Smoothie reports in the current modal units, and TinyG reports
machine positions in millimeters but work positions in the modal units. A PositionInterpreter
per family turns the reports into positions in millimeters.
"""
import math
from collections.abc import Mapping

from cnccontroller.constants import AXES, ControllerFamily, DEFAULT_WCS, GRBL_REPORT_INCHES, IMPERIAL_UNITS
from cnccontroller.support.mapping import as_mapping, map_values
from cnccontroller.units import in_to_mm, modal_units


def default_position():
    return {axis: '0.000' for axis in AXES}


def reported(state, key):
    """
    Retrieves a value from a state report. Newer services nest the status values
    under 'status', so that is consulted when the value is not at the top level.
    """
    if key in state:
        return state[key]
    return as_mapping(state.get('status')).get(key)


def reported_modal(state):
    """ the modal state of the report, which newer services nest under 'parserstate'. """
    if 'modal' in state:
        return as_mapping(state['modal'])
    return as_mapping(as_mapping(state.get('parserstate')).get('modal'))


def overlay(position):
    """ the default position with the reported axes replacing the defaults. """
    result = default_position()
    result.update(as_mapping(position))
    return result


def to_number(value):
    """
    Coerces a setting to a number, with 0 for anything that isn't numeric.

    >>> to_number('1')
    1.0
    >>> to_number('abc')
    0
    >>> to_number(None)
    0
    """
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    return 0 if math.isnan(number) else number


def imperial_to_metric(position, imperial):
    return map_values(position, in_to_mm) if imperial else position


class PositionInterpreter:
    """
    Interprets the positions reported by a firmware family.
    The base implementation reports positions in the modal units.
    """

    def reports_inches(self, state, settings) -> bool:
        return modal_units(reported_modal(state)) == IMPERIAL_UNITS

    def machine_position(self, state, settings):
        return imperial_to_metric(overlay(reported(state, 'mpos')), self.reports_inches(state, settings))

    def work_position(self, state, settings):
        return imperial_to_metric(overlay(reported(state, 'wpos')), self.reports_inches(state, settings))

    def work_coordinate_system(self, state):
        wcs = reported_modal(state).get('wcs')
        return wcs or DEFAULT_WCS


class GrblPositions(PositionInterpreter):
    """ Positions are reported in mm ($13=0) or inches ($13=1). """

    def reports_inches(self, state, settings):
        # firmware settings are nested in the settings report; accept a flat mapping too
        firmware = settings.get('settings')
        if not isinstance(firmware, Mapping):
            firmware = settings
        return to_number(firmware.get(GRBL_REPORT_INCHES, 0)) > 0


class SmoothiePositions(PositionInterpreter):
    """ Positions are reported in the current modal units. """


class TinyGPositions(PositionInterpreter):
    """
    Canonical machine positions are always reported in millimeters with no offsets.
    Work positions are reported in the current units and apply the offsets.
    See https://github.com/synthetos/g2/wiki/Status-Reports
    """

    def machine_position(self, state, settings):
        return overlay(reported(state, 'mpos'))


INTERPRETERS = {
    ControllerFamily.GRBL: GrblPositions(),
    ControllerFamily.SMOOTHIE: SmoothiePositions(),
    ControllerFamily.TINYG: TinyGPositions(),
}


class ControllerStateModel:
    """
    Holds the controller family, firmware settings and live state reported by the service.

    The family is kept as reported. A family that is not one of ControllerFamily is
    remembered but treated as unknown by the position queries.
    """

    def __init__(self):
        self.family = None
        self.settings = {}
        self.state = {}

    @property
    def controller_family(self) -> ControllerFamily:
        """ the known family of the controller, or None. """
        return ControllerFamily.lookup(self.family)

    def _interpreter(self) -> PositionInterpreter:
        family = self.controller_family
        return INTERPRETERS.get(family) if family is not None else None

    def apply_type(self, family):
        self.family = family

    def apply_settings(self, family, settings):
        self.family = family
        self.settings = dict(as_mapping(settings))

    def apply_state(self, family, state):
        self.family = family
        self.state = dict(as_mapping(state))

    def reset(self):
        self.family = None
        self.settings = {}
        self.state = {}

    def get_machine_state(self, session_open):
        """
        :param session_open: whether a session is open. Without one the machine state is unknown.
        :return: the machine state reported by the controller, or '' when not known.
        """
        if self._interpreter() is None or not session_open:
            return ''
        return reported(self.state, 'machineState') or ''

    def get_machine_position(self):
        """
        :return: a dict of the x, y, z, a, b and c positions in millimeters, as decimal strings.
        """
        interpreter = self._interpreter()
        if interpreter is None:
            return default_position()
        return interpreter.machine_position(self.state, self.settings)

    def get_work_position(self):
        """
        :return: a dict of the x, y, z, a, b and c positions in millimeters, as decimal strings.
        """
        interpreter = self._interpreter()
        if interpreter is None:
            return default_position()
        return interpreter.work_position(self.state, self.settings)

    def get_work_coordinate_system(self):
        """
        :return: the active work coordinate system, G54 to G59. Defaults to G54.
        """
        interpreter = self._interpreter()
        if interpreter is None:
            return DEFAULT_WCS
        return interpreter.work_coordinate_system(self.state)
