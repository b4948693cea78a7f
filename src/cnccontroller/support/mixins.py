def quote(val):
    return "'%s'" % val if val is not None else "None"


class StringerMixin:
    """ renders value objects as their class name and attributes, in key order. """

    def __str__(self):
        items = ", ".join("'%s': %s" % (key, quote(val)) for key, val in sorted(vars(self).items()))
        return "%s:{%s}" % (type(self).__name__, items)


class CommonEqualityMixin:
    """ value objects of the same class are equal when their attributes are equal. """

    def __eq__(self, other):
        return isinstance(other, type(self)) and vars(self) == vars(other)

    def __ne__(self, other):
        return not self.__eq__(other)

    __hash__ = None
