"""Sliding-window limiter used for registration throttling."""

import unittest

from colloquy.core.rate_limit import SlidingWindowLimiter


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestSlidingWindowLimiter(unittest.TestCase):
    def test_blocks_after_limit_until_window_passes(self) -> None:
        clock = FakeClock()
        limiter = SlidingWindowLimiter(2, 60, clock=clock)

        self.assertEqual(limiter.hit("1.2.3.4"), (True, 0))
        clock.now += 10
        self.assertEqual(limiter.hit("1.2.3.4"), (True, 0))
        allowed, retry_after = limiter.hit("1.2.3.4")
        self.assertFalse(allowed)
        self.assertGreater(retry_after, 0)
        self.assertLessEqual(retry_after, 60)

        clock.now += 51
        self.assertEqual(limiter.hit("1.2.3.4"), (True, 0))

    def test_keys_are_independent(self) -> None:
        limiter = SlidingWindowLimiter(1, 60, clock=FakeClock())
        self.assertTrue(limiter.hit("a")[0])
        self.assertFalse(limiter.hit("a")[0])
        self.assertTrue(limiter.hit("b")[0])

    def test_oldest_keys_evicted(self) -> None:
        limiter = SlidingWindowLimiter(1, 60, max_keys=2, clock=FakeClock())
        limiter.hit("a")
        limiter.hit("b")
        limiter.hit("c")
        self.assertTrue(limiter.hit("a")[0])

    def test_invalid_arguments(self) -> None:
        with self.assertRaises(ValueError):
            SlidingWindowLimiter(0, 60)
        with self.assertRaises(ValueError):
            SlidingWindowLimiter(1, 0)


if __name__ == "__main__":
    unittest.main()
