from unittest import TestCase

from hamcrest import is_, assert_that, close_to

from cnccontroller.support.retry_strategy import BackoffRetryStrategy
from cnccontroller.transport.base import ConnectOptions


def middle():
    return 0.5


class BackoffRetryStrategyTest(TestCase):

    def test_delay_doubles_up_to_max(self):
        retry = BackoffRetryStrategy(1, 5)
        assert_that([retry(attempt) for attempt in range(5)], is_([1, 2, 4, 5, 5]))

    def test_many_attempts_stay_at_max(self):
        retry = BackoffRetryStrategy(1, 5)
        assert_that(retry(5000), is_(5))

    def test_randomization_spreads_delay(self):
        retry = BackoffRetryStrategy(2, 10, randomization_factor=0.5)
        assert_that(retry(0, rand=middle), is_(2.0))
        assert_that(retry(0, rand=lambda: 0), is_(1.0))
        assert_that(retry(0, rand=lambda: 0.999), close_to(3.0, 0.01))

    def test_unlimited_attempts(self):
        retry = BackoffRetryStrategy(1, 5)
        assert_that(retry.exhausted(1000), is_(False))

    def test_limited_attempts(self):
        retry = BackoffRetryStrategy(1, 5, attempts=2)
        assert_that(retry.exhausted(1), is_(False))
        assert_that(retry.exhausted(2), is_(True))

    def test_from_options(self):
        options = ConnectOptions(reconnection_attempts=3, reconnection_delay=2, reconnection_delay_max=8,
                                 randomization_factor=0.1)
        assert_that(BackoffRetryStrategy.from_options(options), is_(BackoffRetryStrategy(2, 8, 0.1, 3)))
