"""Unit tests for the in-memory rate limiter."""

from datetime import datetime, timedelta

from src.api.middleware.security.rate_limiter import LOGIN_PATH, RateLimiter

IP = "198.51.100.7"


def test_non_login_paths_share_one_bucket():
    limiter = RateLimiter()
    limiter.endpoint_limits["default"] = 2

    limiter.add_request(IP, "/admin/users/uid-1")
    limiter.add_request(IP, "/admin/users/uid-2")
    is_limited, current_count, limit, _ = limiter.is_rate_limited(IP, "/admin/users/uid-3")

    assert set(limiter.endpoint_requests) == {"default"}
    assert is_limited is True
    assert current_count == 2
    assert limit == 2


def test_login_path_has_its_own_bucket():
    limiter = RateLimiter()

    limiter.add_request(IP, LOGIN_PATH)
    limiter.add_request(IP, "/admin/analytics")

    assert len(limiter.endpoint_requests[LOGIN_PATH][IP]) == 1
    assert len(limiter.endpoint_requests["default"][IP]) == 1


def test_idle_ips_are_dropped():
    limiter = RateLimiter()
    limiter.endpoint_requests["default"] = {IP: [datetime.utcnow() - timedelta(minutes=2)]}

    is_limited, current_count, _, _ = limiter.is_rate_limited(IP, "/admin/analytics")

    assert is_limited is False
    assert current_count == 0
    assert IP not in limiter.endpoint_requests["default"]
