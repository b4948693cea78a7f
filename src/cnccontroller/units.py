import logging

from cnccontroller.constants import MODAL_UNITS

logger = logging.getLogger(__name__)

MM_PER_INCH = 25.4


def in_to_mm(value):
    """
    Converts an inch value to millimeters.
    :param value: a decimal string (or number) in inches
    :return: the value in millimeters formatted with 3 decimals. A value that is not numeric
        is returned unchanged.

    >>> in_to_mm('1.000')
    '25.400'
    >>> in_to_mm('-0.5')
    '-12.700'
    >>> in_to_mm('n/a')
    'n/a'
    """
    try:
        return '%.3f' % (float(value) * MM_PER_INCH)
    except (TypeError, ValueError):
        logger.debug("not converting non-numeric value %r" % (value,))
        return value


def modal_units(modal):
    """
    Maps the units word of a modal state (G20/G21) to imperial or metric units.
    :return: IMPERIAL_UNITS, METRIC_UNITS, or None when the units are not reported.
    """
    units = modal.get('units') if modal else None
    return MODAL_UNITS.get(units) if isinstance(units, str) else None
