from collections.abc import Mapping


def map_values(mapping, fn=None):
    """
    Applies a function to each value of a flat mapping.
    :param mapping: the mapping to transform. It is not modified.
    :param fn: called with each value. When None, each value maps to None.
    :return: a new dict with the same keys, in the same order, and the transformed values.

    >>> map_values({'x': 1, 'y': 2}, lambda v: v * 10)
    {'x': 10, 'y': 20}
    >>> map_values({'x': 1})
    {'x': None}
    """
    return {key: fn(val) if fn else None for key, val in mapping.items()}


def as_mapping(value):
    """
    Returns the value when it is a mapping, otherwise an empty dict.
    Used to read optional sub-maps of remote reports without checking their shape at every use.

    >>> as_mapping({'a': 1})
    {'a': 1}
    >>> as_mapping(None)
    {}
    >>> as_mapping('G21')
    {}
    """
    return value if isinstance(value, Mapping) else {}
