from unittest import TestCase

from hamcrest import assert_that, is_, is_not, same_instance

from cnccontroller.support.mapping import as_mapping, map_values


class MapValuesTest(TestCase):
    def test_applies_function_to_each_value(self):
        assert_that(map_values({'x': '1', 'y': '2'}, lambda v: v + '0'), is_({'x': '10', 'y': '20'}))

    def test_source_is_not_modified(self):
        source = {'x': 1}
        result = map_values(source, lambda v: v + 1)
        assert_that(source, is_({'x': 1}))
        assert_that(result, is_not(same_instance(source)))

    def test_keeps_key_order(self):
        result = map_values({'c': 1, 'a': 2, 'b': 3}, str)
        assert_that(list(result), is_(['c', 'a', 'b']))

    def test_no_function(self):
        assert_that(map_values({'x': 1}), is_({'x': None}))

    def test_empty(self):
        assert_that(map_values({}, str), is_({}))


class AsMappingTest(TestCase):
    def test_mapping_returned(self):
        value = {'a': 1}
        assert_that(as_mapping(value), is_(same_instance(value)))

    def test_non_mapping_is_empty(self):
        for value in (None, 'G21', 5, ['x']):
            assert_that(as_mapping(value), is_({}))
