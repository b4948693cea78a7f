import random

from cnccontroller.support.mixins import CommonEqualityMixin


class BackoffRetryStrategy(CommonEqualityMixin):
    """
    Determines how long to wait before each attempt to reach the service.
    The delay doubles with each attempt up to the maximum, and is spread by the randomization factor.
    """

    def __init__(self, delay, delay_max, randomization_factor=0, attempts=0):
        """
        :param delay: seconds to wait before the first retry.
        :param delay_max: the upper bound of the delay, in seconds.
        :param randomization_factor: the fraction of the delay applied as jitter, either way.
        :param attempts: the number of retries allowed, 0 for no limit.
        """
        self.delay = delay
        self.delay_max = delay_max
        self.randomization_factor = randomization_factor
        self.attempts = attempts

    @classmethod
    def from_options(cls, options):
        return cls(options.reconnection_delay, options.reconnection_delay_max,
                   options.randomization_factor, options.reconnection_attempts)

    def exhausted(self, attempt) -> bool:
        """ True when `attempt` retries use up the allowed retries. """
        return bool(self.attempts) and attempt >= self.attempts

    def __call__(self, attempt, rand=random.random):
        """
        :param attempt: the number of retries made so far, from 0.
        :return: the seconds to wait before the next retry.
        """
        # the exponent is capped, the delay reaches delay_max long before
        delay = min(self.delay * 2 ** min(attempt, 32), self.delay_max)
        return delay + delay * self.randomization_factor * (2 * rand() - 1)
