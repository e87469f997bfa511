import unittest

from gdindex.util.retry import RetryPolicy, run_with_retry

NO_WAIT = RetryPolicy(max_attempts=3, initial_delay_sec=0)


class Flaky:
    def __init__(self, failures: int, exc: Exception) -> None:
        self.failures = failures
        self.exc = exc
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.exc
        return "ok"


class TestRetryPolicy(unittest.TestCase):
    def test_defaults(self) -> None:
        p = RetryPolicy()
        self.assertEqual(p.max_attempts, 3)
        self.assertEqual(p.initial_delay_sec, 0.8)
        self.assertEqual(p.multiplier, 2.0)

    def test_validation(self) -> None:
        with self.assertRaises(ValueError):
            RetryPolicy(max_attempts=0)
        with self.assertRaises(ValueError):
            RetryPolicy(initial_delay_sec=-1)
        with self.assertRaises(ValueError):
            RetryPolicy(multiplier=0.5)


class TestRunWithRetry(unittest.IsolatedAsyncioTestCase):
    async def test_succeeds_after_transient_failures(self) -> None:
        func = Flaky(2, RuntimeError("boom"))
        self.assertEqual(await run_with_retry(func, NO_WAIT, lambda e: True), "ok")
        self.assertEqual(func.calls, 3)

    async def test_gives_up_after_max_attempts(self) -> None:
        func = Flaky(5, RuntimeError("boom"))
        with self.assertRaises(RuntimeError):
            await run_with_retry(func, NO_WAIT, lambda e: True)
        self.assertEqual(func.calls, 3)

    async def test_non_retryable_raises_immediately(self) -> None:
        func = Flaky(5, KeyError("nope"))
        with self.assertRaises(KeyError):
            await run_with_retry(func, NO_WAIT, lambda e: not isinstance(e, KeyError))
        self.assertEqual(func.calls, 1)


if __name__ == "__main__":
    unittest.main()
