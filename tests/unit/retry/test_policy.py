"""
Unit tests for the retry policy.
"""

import pytest

from civic_triage.retry.policy import RetryPolicy, is_retryable_status


@pytest.mark.parametrize("status_code", [429, 503])
def test_retryable_statuses(status_code):
    assert is_retryable_status(status_code) is True


@pytest.mark.parametrize("status_code", [400, 401, 403, 404, 500, 502, 504])
def test_fatal_statuses(status_code):
    assert is_retryable_status(status_code) is False


class TestRetryPolicy:
    
    def test_defaults(self):
        policy = RetryPolicy()
        assert policy.max_attempts == 4
        assert [policy.delay_before(n) for n in range(1, 5)] == [0.0, 2.0, 4.0, 8.0]
    
    def test_attempt_out_of_range(self):
        with pytest.raises(ValueError):
            RetryPolicy().delay_before(5)
        with pytest.raises(ValueError):
            RetryPolicy().delay_before(0)
    
    def test_needs_one_delay_per_attempt(self):
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=5, delays_ms=(0, 1, 2))
    
    def test_rejects_negative_delays(self):
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=2, delays_ms=(0, -1))
    
    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0, delays_ms=())
    
    def test_from_settings(self, test_settings):
        test_settings.INFERENCE_MAX_ATTEMPTS = 2
        test_settings.RETRY_DELAYS_MS = [0, 500, 1000]
        policy = RetryPolicy.from_settings(test_settings)
        
        assert policy.max_attempts == 2
        assert policy.delay_before(2) == 0.5
