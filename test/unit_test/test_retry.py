"""
Unit tests for retry logic module
"""

import asyncio
import unittest

from forgex_sdk.errors import ConfigurationError, ErrorCode, UpstreamError
from forgex_sdk.infra.retry import (
    CorrelationContext,
    classify_error,
    execute_with_retry,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)


class TestClassifyError(unittest.TestCase):
    """Tests for error classification"""

    def test_sdk_error_uses_own_flag(self):
        error = UpstreamError.http_status("pyth", "get_price", 503)
        self.assertEqual(classify_error(error), (True, ErrorCode.UPSTREAM_HTTP_ERROR))

        error = ConfigurationError.invalid("limit", "too big")
        self.assertEqual(classify_error(error), (False, ErrorCode.CONFIG_INVALID))

    def test_timeout_message_is_recoverable(self):
        is_recoverable, code = classify_error(Exception("Connection timeout after 30 seconds"))
        self.assertTrue(is_recoverable)
        self.assertEqual(code, ErrorCode.UPSTREAM_TIMEOUT)

    def test_rate_limit_message_is_recoverable(self):
        is_recoverable, code = classify_error(Exception("Too many requests"))
        self.assertTrue(is_recoverable)
        self.assertEqual(code, ErrorCode.UPSTREAM_RATE_LIMITED)

    def test_unknown_error_not_recoverable(self):
        is_recoverable, code = classify_error(Exception("Account data too small"))
        self.assertFalse(is_recoverable)
        self.assertIsNone(code)


class TestExecuteWithRetry(unittest.TestCase):
    """Tests for execute_with_retry"""

    def _counting(self, failures):
        calls = {"count": 0}

        async def operation():
            calls["count"] += 1
            if calls["count"] <= len(failures):
                raise failures[calls["count"] - 1]
            return "done"

        return operation, calls

    def test_success_first_try(self):
        operation, calls = self._counting([])
        result = asyncio.run(execute_with_retry(operation, "test", max_retries=3, retry_delay=0))
        self.assertEqual(result, "done")
        self.assertEqual(calls["count"], 1)

    def test_single_attempt_propagates(self):
        error = UpstreamError.timeout("pyth", "get_price", 1.0)
        operation, calls = self._counting([error])
        with self.assertRaises(UpstreamError):
            asyncio.run(execute_with_retry(operation, "test", max_retries=1, retry_delay=0))
        self.assertEqual(calls["count"], 1)

    def test_recoverable_retried(self):
        operation, calls = self._counting([
            UpstreamError.timeout("pyth", "get_price", 1.0),
            UpstreamError.http_status("pyth", "get_price", 502),
        ])
        result = asyncio.run(execute_with_retry(operation, "test", max_retries=3, retry_delay=0))
        self.assertEqual(result, "done")
        self.assertEqual(calls["count"], 3)

    def test_non_recoverable_not_retried(self):
        operation, calls = self._counting([UpstreamError.http_status("pyth", "get_price", 400)])
        with self.assertRaises(UpstreamError):
            asyncio.run(execute_with_retry(operation, "test", max_retries=3, retry_delay=0))
        self.assertEqual(calls["count"], 1)

    def test_zero_budget_still_attempts_once(self):
        operation, calls = self._counting([])
        asyncio.run(execute_with_retry(operation, "test", max_retries=0, retry_delay=0))
        self.assertEqual(calls["count"], 1)


class TestCorrelation(unittest.TestCase):
    def test_generated_ids_are_unique(self):
        self.assertNotEqual(generate_correlation_id(), generate_correlation_id())
        self.assertEqual(len(generate_correlation_id()), 12)

    def test_context_sets_and_resets(self):
        self.assertIsNone(get_correlation_id())
        with CorrelationContext("portfolio") as cid:
            self.assertTrue(cid.startswith("portfolio_"))
            self.assertEqual(get_correlation_id(), cid)
        self.assertIsNone(get_correlation_id())

    def test_set_returns_token(self):
        token = set_correlation_id("abc")
        try:
            self.assertEqual(get_correlation_id(), "abc")
        finally:
            from forgex_sdk.infra.retry import _correlation_id
            _correlation_id.reset(token)


if __name__ == "__main__":
    unittest.main()
